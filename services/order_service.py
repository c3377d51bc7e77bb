# services/order_service.py
import datetime
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from domain.models import (
    Currency,
    DEFAULT_PENGIRIMAN,
    DEFAULT_STATUS,
    NormalizedOrder,
    OrderForm,
    ShipmentCharge,
)
from services.pricing_service import ceil_kg, compute_base, compute_charge, effective_base_ongkir
from utils.dates import normalize_tanggal, today_str
from utils.formatting import format_idr
from utils.numbers import parse_amount, parse_weight

logger = logging.getLogger(__name__)

MSG_CUSTOMER_REQUIRED = "Nama pelanggan wajib diisi."
MSG_NEGATIVE_PROFIT = "Total keuntungan tidak boleh negatif ({profit}). Periksa harga markup."

SEARCH_FIELDS = ("no", "namaBarang", "namaPelanggan", "catatan")


def build_charge(form: OrderForm, unit_price_per_kg: int) -> ShipmentCharge:
    return ShipmentCharge(
        weight_kg=parse_weight(form.jumlah_kg),
        unit_price_per_kg=parse_amount(unit_price_per_kg),
        base_jastip=parse_amount(form.harga_jastip),
        jastip_markup=parse_amount(form.harga_jastip_markup),
        base_ongkir=parse_amount(form.harga_ongkir),
        ongkir_markup=parse_amount(form.harga_ongkir_markup),
        use_auto_mode=bool(form.use_auto_mode),
    )


def validate_order(form: OrderForm, total_keuntungan) -> List[str]:
    errors: List[str] = []
    if not (form.nama_pelanggan or "").strip():
        errors.append(MSG_CUSTOMER_REQUIRED)
    if total_keuntungan < 0:
        errors.append(MSG_NEGATIVE_PROFIT.format(profit=format_idr(total_keuntungan)))
    return errors


def normalize_order(form: OrderForm, unit_price_per_kg: int) -> NormalizedOrder:
    """
    Turn raw order form state into a save-ready order record.

    The record is always fully populated so the form can preview it; it may
    only be persisted when `save_ready` is true. The unit price and mode are
    snapshotted under `_computed` so later unit price changes don't move the
    totals of historical orders.
    """
    charge = build_charge(form, unit_price_per_kg)
    totals = compute_charge(charge)
    base_ongkir = effective_base_ongkir(charge)
    kg_ceil = ceil_kg(charge.weight_kg)

    record: Dict[str, Any] = {
        "no": str(form.no or ""),
        "tanggal": normalize_tanggal(form.tanggal),
        "idPelanggan": str(form.id_pelanggan or ""),
        "namaPelanggan": (form.nama_pelanggan or "").strip(),
        "namaBarang": (form.nama_barang or "").strip(),
        "kategori": str(form.kategori or ""),
        "pengiriman": form.pengiriman or "",
        "jumlahKg": charge.weight_kg,
        "kgCeil": kg_ceil,
        "hargaJastip": charge.base_jastip,
        "hargaJastipMarkup": charge.jastip_markup,
        "hargaOngkir": base_ongkir,
        "hargaOngkirMarkup": charge.ongkir_markup,
        "totalPembayaran": totals.total_pembayaran,
        "totalKeuntungan": totals.total_keuntungan,
        "status": form.status or DEFAULT_STATUS,
        "catatan": form.catatan or "",
        "tipeNominal": Currency.parse(form.tipe_nominal).value,
        "_computed": {
            "kgCeil": kg_ceil,
            "totalPembayaran": totals.total_pembayaran,
            "totalKeuntungan": totals.total_keuntungan,
            "unitPriceAtSave": charge.unit_price_per_kg,
            "useAutoJastip": charge.use_auto_mode,
        },
    }

    errors = validate_order(form, totals.total_keuntungan)
    if errors:
        logger.debug("Order %s not save-ready: %s", record["no"] or "<new>", errors)

    return NormalizedOrder(record=record, charge=charge, totals=totals, errors=errors)


def seed_form(order: Optional[Dict[str, Any]] = None, **defaults) -> OrderForm:
    """
    Build form state from a stored order (edit) or from defaults (new order).
    """
    if not order:
        return OrderForm(**defaults)

    computed = order.get("_computed") or {}
    use_auto = computed.get("useAutoJastip")
    if use_auto is None:
        # legacy order without a snapshot: a stored ongkir is a manual value
        use_auto = order.get("hargaOngkir") is None

    return OrderForm(
        no=order.get("no", ""),
        tanggal=order.get("tanggal", ""),
        nama_barang=order.get("namaBarang", ""),
        kategori=order.get("kategori", ""),
        id_pelanggan=order.get("idPelanggan", ""),
        nama_pelanggan=order.get("namaPelanggan", ""),
        jumlah_kg=order.get("jumlahKg", 0),
        pengiriman=order.get("pengiriman") or DEFAULT_PENGIRIMAN,
        status=order.get("status") or DEFAULT_STATUS,
        catatan=order.get("catatan") or "",
        tipe_nominal=order.get("tipeNominal") or order.get("currency") or "IDR",
        harga_jastip=order.get("hargaJastip", 0),
        harga_jastip_markup=order.get("hargaJastipMarkup", 0),
        harga_ongkir=order.get("hargaOngkir", 0),
        harga_ongkir_markup=order.get("hargaOngkirMarkup", 0),
        use_auto_mode=bool(use_auto),
    )


def generate_order_no(existing_nos: Iterable[str], today: Optional[datetime.date] = None) -> str:
    """ORD-YYYYMMDD-NNN, numbered after the orders already created today."""
    today = today or datetime.date.today()
    ymd = today.strftime("%Y%m%d")
    count_today = sum(1 for no in existing_nos if no and ymd in no)
    return f"ORD-{ymd}-{count_today + 1:03d}"


def new_order_form(existing_nos: Iterable[str], customers: List[str], unit_price_per_kg: int) -> OrderForm:
    """Defaults for the 'Tambah Pesanan' form."""
    form = OrderForm(
        no=generate_order_no(existing_nos),
        tanggal=today_str(),
        nama_pelanggan=customers[0] if customers else "",
        jumlah_kg=1,
    )
    form.harga_ongkir = compute_base(form.jumlah_kg, unit_price_per_kg)
    return form


def matches_search(order: Dict[str, Any], query: str) -> bool:
    q = (query or "").strip().lower()
    if not q:
        return True
    return any(q in str(order.get(f) or "").lower() for f in SEARCH_FIELDS)


def recalculate_orders(
        orders: Iterable[Dict[str, Any]],
        new_unit_price: int,
) -> List[Tuple[str, NormalizedOrder]]:
    """
    Re-derive auto-mode orders with a new unit price.

    Only runs when the admin explicitly asks to apply a new price to existing
    orders. Manual-mode orders keep their frozen values.
    """
    result: List[Tuple[str, NormalizedOrder]] = []
    for order in orders:
        form = seed_form(order)
        if not form.use_auto_mode:
            continue
        result.append((order.get("id"), normalize_order(form, new_unit_price)))
    logger.info("Recalculated %d auto-mode orders with unit price %s", len(result), new_unit_price)
    return result
