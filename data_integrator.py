import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from supabase import Client, create_client

from config import get_settings
from domain.models import NormalizedOrder
from services.order_service import recalculate_orders
from services.report_service import sum_profit
from utils.dates import default_order_window
from utils.numbers import parse_amount

logger = logging.getLogger(__name__)

ORDERS = "orders"
CUSTOMERS = "customer"
LEDGER = "ledger"
PURCHASES = "purchases"
PURCHASE_CUSTOMERS = "purchase_customer"
SETTINGS = "settings"

UNIT_PRICE_KEY = "unit_price"
DEFAULT_ORDER_LIMIT = 250


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_key:
        raise RuntimeError("Set SUPABASE_URL and SUPABASE_KEY in .env or environment variables")
    return create_client(settings.supabase_url, settings.supabase_key)


def _table(name: str):
    return get_supabase().schema(get_settings().schema).table(name)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_exist(table_name: str, col_name, val) -> bool:
    response = (
        _table(table_name)
        .select("*")
        .ilike(col_name, val)
        .execute()
    )
    return len(response.data) != 0


# ---------------------------------------------------------------------------
# Settings (unit price)
# ---------------------------------------------------------------------------

def fetch_unit_price() -> int:
    """
    Current price per billed kg. Falls back to DEFAULT_UNIT_PRICE when the
    settings row is missing or unreadable.
    """
    default = get_settings().default_unit_price
    try:
        resp = (
            _table(SETTINGS)
            .select("value")
            .eq("key", UNIT_PRICE_KEY)
            .limit(1)
            .execute()
        )
        if getattr(resp, "error", None):
            logger.warning("Unit price lookup failed: %s", resp.error)
            return default
        if not resp.data:
            return default
        return parse_amount(resp.data[0]["value"], default=default)
    except Exception:
        logger.exception("Unit price lookup failed, using default %s", default)
        return default


def save_unit_price(value) -> Tuple[bool, str]:
    price = parse_amount(value)
    if price <= 0:
        return False, "Harga per kg harus lebih dari 0"
    try:
        resp = (
            _table(SETTINGS)
            .upsert({"key": UNIT_PRICE_KEY, "value": price, "updatedAt": _now_iso()}, on_conflict="key")
            .execute()
        )
        if getattr(resp, "error", None):
            return False, f"Save failed: {resp.error}"
        logger.info("Unit price set to %s", price)
        return True, "Harga per kg disimpan"
    except Exception as e:
        logger.exception("Saving unit price failed")
        return False, str(e)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

def fetch_orders(
        status: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        sort: str = "desc",
        limit: Optional[int] = DEFAULT_ORDER_LIMIT,
        use_default_window: bool = True,
) -> Tuple[bool, str, List[Dict[str, Any]]]:
    """
    Orders filtered by status and an inclusive 'yyyy-MM-dd' date range,
    sorted by tanggal. Without explicit dates the window is the start of the
    month two months back until the end of this month.
    Returns (ok, message, rows)
    """
    if use_default_window:
        default_from, default_to = default_order_window()
        date_from = date_from or default_from
        date_to = date_to or default_to

    try:
        query = _table(ORDERS).select("*")
        if status:
            query = query.eq("status", status)
        if date_from:
            query = query.gte("tanggal", date_from)
        if date_to:
            query = query.lte("tanggal", date_to)
        query = query.order("tanggal", desc=(sort != "asc"))
        if limit:
            query = query.limit(limit)

        resp = query.execute()

        if getattr(resp, "error", None):
            return False, f"Fetch failed: {resp.error}", []

        return True, "Fetched", resp.data or []

    except Exception as e:
        logger.exception("Fetching orders failed")
        return False, f"Unexpected error: {e}", []


def fetch_orders_page(page_size: int = 25, page: int = 0) -> Tuple[bool, str, List[Dict[str, Any]]]:
    """Newest first, `page` is 0-based."""
    start = page * page_size
    try:
        resp = (
            _table(ORDERS)
            .select("*")
            .order("tanggal", desc=True)
            .range(start, start + page_size - 1)
            .execute()
        )
        if getattr(resp, "error", None):
            return False, f"Fetch failed: {resp.error}", []
        return True, "Fetched", resp.data or []
    except Exception as e:
        logger.exception("Fetching orders page %d failed", page)
        return False, f"Unexpected error: {e}", []


def save_order(
        normalized: NormalizedOrder,
        order_id: Optional[str] = None,
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Insert (no id) or update an order from a normalized form.
    Refuses records that did not pass validation.
    Returns (ok, message, saved_row)
    """
    if not normalized.save_ready:
        return False, " ".join(normalized.errors), None

    payload = {**normalized.record, "updatedAt": _now_iso()}

    try:
        if order_id:
            resp = (
                _table(ORDERS)
                .update(payload)
                .eq("id", order_id)
                .execute()
            )
        else:
            payload["createdAt"] = payload["updatedAt"]
            resp = (
                _table(ORDERS)
                .insert(payload)
                .execute()
            )

        if getattr(resp, "error", None):
            return False, f"Save failed: {resp.error}", None

        saved = resp.data[0] if resp.data else None
        logger.info("Saved order %s (%s)", payload.get("no"), "update" if order_id else "insert")
        return True, "Pesanan disimpan", saved

    except Exception as e:
        logger.exception("Saving order %s failed", payload.get("no"))
        return False, str(e), None


def delete_order(order_id: str) -> Tuple[bool, str]:
    return _delete_row(ORDERS, order_id)


def fetch_profit_between(date_from: str, date_to: str) -> Tuple[bool, str, float]:
    """Sum of stored totalKeuntungan for orders dated within the range."""
    if not date_from or not date_to:
        return False, "Tanggal mulai dan selesai harus diisi.", 0

    ok, msg, rows = fetch_orders(date_from=date_from, date_to=date_to, limit=None)
    if not ok:
        return False, msg, 0
    return True, "Fetched", sum_profit(rows, date_from, date_to)


def set_currency_for_all_orders(tipe_nominal: str) -> Tuple[bool, str, int]:
    """One-off maintenance: tag every order with a currency."""
    try:
        resp = (
            _table(ORDERS)
            .update({"tipeNominal": tipe_nominal, "updatedAt": _now_iso()})
            .not_.is_("id", "null")
            .execute()
        )
        if getattr(resp, "error", None):
            return False, f"Update failed: {resp.error}", 0
        count = len(resp.data or [])
        logger.info("%d orders tagged with tipeNominal=%s", count, tipe_nominal)
        return True, f"{count} pesanan diperbarui", count
    except Exception as e:
        logger.exception("Tagging orders with %s failed", tipe_nominal)
        return False, str(e), 0


def apply_unit_price(new_price, recalc: bool = False) -> Tuple[bool, str]:
    """
    Save a new unit price. With `recalc`, auto-mode orders are re-derived with
    the new price; manual orders keep their snapshot.
    """
    ok, msg = save_unit_price(new_price)
    if not ok or not recalc:
        return ok, msg

    ok, msg, rows = fetch_orders(use_default_window=False, limit=None)
    if not ok:
        return False, f"Harga disimpan, tetapi gagal memuat pesanan: {msg}"

    failed = []
    updated = 0
    for order_id, normalized in recalculate_orders(rows, parse_amount(new_price)):
        saved, save_msg, _ = save_order(normalized, order_id=order_id)
        if saved:
            updated += 1
        else:
            failed.append(f"{normalized.record.get('no')}: {save_msg}")

    if failed:
        return False, f"{updated} pesanan dihitung ulang, {len(failed)} gagal: " + "; ".join(failed)
    return True, f"Harga disimpan, {updated} pesanan dihitung ulang"


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------

def fetch_customers() -> Tuple[bool, str, List[Dict[str, Any]]]:
    return _fetch_ordered(CUSTOMERS, "nama")


def insert_customer(row: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    now = _now_iso()
    return insert_row(CUSTOMERS, {**row, "createdAt": now, "updatedAt": now})


def update_customer(customer_id: str, row: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    return _update_row(CUSTOMERS, customer_id, {**row, "updatedAt": _now_iso()})


def delete_customer(customer_id: str) -> Tuple[bool, str]:
    return _delete_row(CUSTOMERS, customer_id)


# ---------------------------------------------------------------------------
# Ledger (buku kas)
# ---------------------------------------------------------------------------

def fetch_ledger(
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        tipe: Optional[str] = None,
        kategori: Optional[str] = None,
        order_field: str = "tanggal",
        direction: str = "desc",
        limit: Optional[int] = None,
) -> Tuple[bool, str, List[Dict[str, Any]]]:
    try:
        query = _table(LEDGER).select("*")
        if date_from:
            query = query.gte("tanggal", date_from)
        if date_to:
            query = query.lte("tanggal", date_to)
        if tipe:
            query = query.eq("tipe", tipe)
        if kategori:
            query = query.eq("kategori", kategori)
        query = query.order(order_field, desc=(direction != "asc"))
        if limit:
            query = query.limit(limit)

        resp = query.execute()

        if getattr(resp, "error", None):
            return False, f"Fetch failed: {resp.error}", []

        rows = resp.data or []
        for r in rows:
            r["jumlah"] = parse_amount(r.get("jumlah"))
        return True, "Fetched", rows

    except Exception as e:
        logger.exception("Fetching ledger failed")
        return False, f"Unexpected error: {e}", []


def insert_ledger_entry(payload: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    return insert_row(LEDGER, payload)


def update_ledger_entry(entry_id: str, payload: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    return _update_row(LEDGER, entry_id, payload)


def delete_ledger_entry(entry_id: str) -> Tuple[bool, str]:
    return _delete_row(LEDGER, entry_id)


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------

def fetch_purchases(sort: str = "asc") -> Tuple[bool, str, List[Dict[str, Any]]]:
    return _fetch_ordered(PURCHASES, "shippingDate", desc=(sort == "desc"))


def insert_purchases(drafts: List[Dict[str, Any]]) -> Tuple[bool, str, List[Dict[str, Any]]]:
    """Insert all drafts in one request."""
    if not drafts:
        return False, "Tidak ada draft untuk disimpan", []
    try:
        resp = _table(PURCHASES).insert(drafts).execute()
        if getattr(resp, "error", None):
            return False, f"Insert failed: {resp.error}", []
        logger.info("Inserted %d purchase items", len(drafts))
        return True, f"{len(drafts)} item disimpan", resp.data or []
    except Exception as e:
        logger.exception("Inserting purchases failed")
        return False, str(e), []


def update_purchase(purchase_id: str, row: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    return _update_row(PURCHASES, purchase_id, row)


def toggle_purchase_done(purchase_id: str, is_done: bool) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    return _update_row(PURCHASES, purchase_id, {"isDone": not is_done})


def delete_purchase(purchase_id: str) -> Tuple[bool, str]:
    return _delete_row(PURCHASES, purchase_id)


def fetch_purchase_customers() -> Tuple[bool, str, List[Dict[str, Any]]]:
    return _fetch_ordered(PURCHASE_CUSTOMERS, "nama")


def insert_purchase_customer(nama: str) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    nama = (nama or "").strip()
    if not nama:
        return False, "Nama customer tidak boleh kosong", None
    return insert_row(PURCHASE_CUSTOMERS, {"nama": nama, "createdAt": _now_iso()})


# ---------------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------------

def insert_row(table_name: str, row: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Insert a single row (form-style).
    Returns (ok, message, inserted_row)
    """
    try:
        resp = (
            _table(table_name)
            .insert(row)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Insert failed: {resp.error}", None

        inserted = resp.data[0] if resp.data else None
        return True, "Inserted", inserted

    except Exception as e:
        logger.exception("Insert into %s failed", table_name)
        return False, str(e), None


def _update_row(table_name: str, row_id: str, row: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    try:
        resp = (
            _table(table_name)
            .update(row)
            .eq("id", row_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Update failed: {resp.error}", None

        if not resp.data:
            return False, f"Row {row_id} not found in {table_name}", None

        return True, "Updated", resp.data[0]

    except Exception as e:
        logger.exception("Update of %s/%s failed", table_name, row_id)
        return False, str(e), None


def _delete_row(table_name: str, row_id: str) -> Tuple[bool, str]:
    try:
        resp = (
            _table(table_name)
            .delete()
            .eq("id", row_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Delete failed: {resp.error}"

        return True, "Deleted"

    except Exception as e:
        logger.exception("Delete of %s/%s failed", table_name, row_id)
        return False, str(e)


def _fetch_ordered(table_name: str, order_col: str, desc: bool = False) -> Tuple[bool, str, List[Dict[str, Any]]]:
    """
    Fetch all rows of a table ordered by one column.
    Returns (ok, message, rows)
    """
    try:
        resp = (
            _table(table_name)
            .select("*")
            .order(order_col, desc=desc)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Fetch failed: {resp.error}", []

        if not resp.data:
            return True, "No rows found", []

        return True, "Fetched", resp.data

    except Exception as e:
        logger.exception("Fetching %s failed", table_name)
        return False, f"Unexpected error: {e}", []
