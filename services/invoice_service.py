# services/invoice_service.py
import logging
from typing import Any, Dict, Iterable, List, Optional

from domain.models import Currency, InvoiceLine, InvoiceSummary
from services.pricing_service import ceil_kg, compute_base, compute_totals
from utils.formatting import format_currency, format_kg
from utils.numbers import finite_or_zero

logger = logging.getLogger(__name__)


def select_orders(
        orders: Iterable[Dict[str, Any]],
        customer_name: Optional[str] = None,
        item_ids: Optional[Iterable[Any]] = None,
) -> List[Dict[str, Any]]:
    """
    Pick the orders that go on one invoice.

    An explicit, non-empty set of ids wins over the customer filter; without
    either filter every order is kept. Input order is preserved.
    """
    pool = list(orders or [])
    ids = set(item_ids or [])
    if ids:
        return [o for o in pool if o.get("id") in ids]
    if customer_name is not None:
        return [o for o in pool if o.get("namaPelanggan") == customer_name]
    return pool


def compute_line(order: Dict[str, Any], unit_price: int, base_currency: Currency = Currency.IDR) -> InvoiceLine:
    """
    Per-order breakdown for the orders list and invoices.

    Stored amounts always win. The current unit price is only used when the
    order has no stored base jastip or base ongkir at all, the same way the
    order form treats a legacy order without ongkir as auto mode.
    """
    kg = ceil_kg(order.get("jumlahKg"))

    stored_jastip = order.get("hargaJastip")
    if stored_jastip is None:
        base_jastip = compute_base(order.get("jumlahKg"), unit_price)
    else:
        base_jastip = finite_or_zero(stored_jastip)

    stored_ongkir = order.get("hargaOngkir")
    if stored_ongkir is None:
        base_ongkir = compute_base(order.get("jumlahKg"), unit_price)
    else:
        base_ongkir = finite_or_zero(stored_ongkir)

    jastip_markup = finite_or_zero(order.get("hargaJastipMarkup"))
    ongkir_markup = finite_or_zero(order.get("hargaOngkirMarkup"))

    totals = compute_totals(base_jastip, jastip_markup, base_ongkir, ongkir_markup)
    currency = Currency.parse(order.get("tipeNominal") or order.get("currency"), default=base_currency)

    return InvoiceLine(
        order_id=order.get("id"),
        nama_barang=order.get("namaBarang") or "-",
        kategori=order.get("kategori") or "-",
        kg=kg,
        base_jastip=base_jastip,
        jastip_markup=jastip_markup,
        base_ongkir=base_ongkir,
        ongkir_markup=ongkir_markup,
        line_total=totals.line_total,
        keuntungan=totals.total_keuntungan,
        currency=currency,
    )


def _line_currency_tag(order: Dict[str, Any]) -> Optional[str]:
    return order.get("tipeNominal") or order.get("currency") or None


def build_invoice(
        orders: Iterable[Dict[str, Any]],
        unit_price: int,
        customer_name: Optional[str] = None,
        item_ids: Optional[Iterable[Any]] = None,
        admin_fee=0,
        base_currency: str = "IDR",
) -> InvoiceSummary:
    """
    Roll the selected orders up into invoice lines and a subtotal.

    The invoice takes the first currency tag found on the lines; amounts are
    summed as-is, there is no conversion between currencies.
    """
    base = Currency.parse(base_currency)
    selected = select_orders(orders, customer_name=customer_name, item_ids=item_ids)

    lines: List[InvoiceLine] = []
    subtotal = 0
    total_keuntungan = 0
    currency: Optional[Currency] = None

    for order in selected:
        line = compute_line(order, unit_price, base_currency=base)
        lines.append(line)
        subtotal += line.line_total
        total_keuntungan += line.keuntungan

        if currency is None and _line_currency_tag(order):
            currency = line.currency

    # untagged orders count as base currency lines
    line_currencies = {line.currency for line in lines}
    mixed = len(line_currencies) > 1
    if mixed:
        logger.warning(
            "Invoice mixes currencies %s, labelling subtotal as %s without conversion",
            sorted(c.value for c in line_currencies),
            (currency or base).value,
        )

    return InvoiceSummary(
        lines=lines,
        subtotal=subtotal,
        currency=currency or base,
        admin_fee=finite_or_zero(admin_fee),
        total_keuntungan=total_keuntungan,
        mixed_currency=mixed,
    )


def price_notes(lines: Iterable[InvoiceLine]) -> str:
    """
    One line per item with the markup spread over the billed kilograms, e.g.
    'Matcha: Jastip Markup / kg Rp 25.000 + Ongkir Markup / kg Rp 30.000'
    """
    notes = []
    for line in lines:
        parts = []
        if line.kg > 0:
            if line.jastip_markup:
                parts.append(f"Jastip Markup / kg {format_currency(line.jastip_markup / line.kg, line.currency.value)}")
            if line.ongkir_markup:
                parts.append(f"Ongkir Markup / kg {format_currency(line.ongkir_markup / line.kg, line.currency.value)}")
        notes.append(f"{line.nama_barang}: {' + '.join(parts) or '-'}")
    return "\n".join(notes)


def invoice_message(summary: InvoiceSummary, customer_name: str, business_name: str = "") -> str:
    """Plain-text invoice for WhatsApp."""
    cur = summary.currency.value
    rows = [f"Halo {customer_name or 'Kak'}, berikut tagihan {business_name}".rstrip() + ":", ""]
    for i, line in enumerate(summary.lines, start=1):
        rows.append(f"{i}. {line.nama_barang} ({format_kg(line.kg)} kg) - {format_currency(line.line_total, cur)}")
    rows.append("")
    rows.append(f"Subtotal: {format_currency(summary.subtotal, cur)}")
    if summary.admin_fee:
        rows.append(f"Biaya Admin: {format_currency(summary.admin_fee, cur)}")
    rows.append(f"Total: {format_currency(summary.grand_total, cur)}")
    return "\n".join(rows)
