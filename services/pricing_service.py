# services/pricing_service.py
import math
from typing import Any

from domain.models import Amount, ChargeTotals, ShipmentCharge
from utils.numbers import finite_or_zero


def ceil_kg(weight_kg: Any) -> int:
    """
    Billed kilograms. Partial kilograms are billed as full ones; negative or
    non-finite weights count as 0.
    """
    w = finite_or_zero(weight_kg)
    return math.ceil(max(0, w))


def compute_base(weight_kg: Any, unit_price_per_kg: Any) -> Amount:
    """ceil(max(0, weight_kg)) * unit_price_per_kg"""
    unit_price = max(0, finite_or_zero(unit_price_per_kg))
    return ceil_kg(weight_kg) * unit_price


def compute_totals(
        base_jastip: Any,
        jastip_markup: Any,
        base_ongkir: Any,
        ongkir_markup: Any,
) -> ChargeTotals:
    base_jastip = finite_or_zero(base_jastip)
    jastip_markup = finite_or_zero(jastip_markup)
    base_ongkir = finite_or_zero(base_ongkir)
    ongkir_markup = finite_or_zero(ongkir_markup)

    total_pembayaran = base_jastip + base_ongkir
    line_total = jastip_markup + ongkir_markup

    return ChargeTotals(
        total_pembayaran=total_pembayaran,
        total_keuntungan=line_total - total_pembayaran,
        line_total=line_total,
    )


def effective_base_ongkir(charge: ShipmentCharge) -> Amount:
    """Auto mode derives base ongkir from weight, manual mode keeps the entered value."""
    if charge.use_auto_mode:
        return compute_base(charge.weight_kg, charge.unit_price_per_kg)
    return finite_or_zero(charge.base_ongkir)


def compute_charge(charge: ShipmentCharge) -> ChargeTotals:
    return compute_totals(
        charge.base_jastip,
        charge.jastip_markup,
        effective_base_ongkir(charge),
        charge.ongkir_markup,
    )
