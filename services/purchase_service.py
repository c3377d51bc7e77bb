# services/purchase_service.py
from typing import Any, Dict, Iterable, List, Tuple

from domain.models import PurchaseGroup, PurchaseStats
from utils.dates import normalize_tanggal

REQUIRED_FIELDS = {
    "name": "Nama barang",
    "pic": "PIC",
    "shippingDate": "Tanggal pengiriman",
    "customer": "Customer",
}
STICKY_FIELDS = ("pic", "shippingDate", "customer", "platform")
SEARCH_FIELDS = ("name", "pic", "customer")

NO_DATE = "Tanpa Tanggal"
NO_PIC = "Tanpa PIC"
NO_CUSTOMER = "Tanpa Customer"


def empty_purchase_form() -> Dict[str, Any]:
    return {
        "name": "",
        "quantity": "",
        "pic": "",
        "customer": "",
        "platform": "",
        "link": "",
        "note": "",
        "shippingDate": "",
        "isDone": False,
    }


def validate_purchase_draft(raw: Dict[str, Any]) -> Tuple[bool, str, Dict[str, Any]]:
    """
    Returns (ok, message, cleaned_item)
    """
    item = {**empty_purchase_form(), **{k: v for k, v in raw.items() if k != "id"}}
    for key in ("name", "quantity", "pic", "customer", "platform", "link", "note"):
        item[key] = str(item.get(key) or "").strip()
    item["shippingDate"] = normalize_tanggal(item.get("shippingDate"))
    item["isDone"] = bool(item.get("isDone"))

    missing = [label for key, label in REQUIRED_FIELDS.items() if not item[key]]
    if missing:
        return False, f"{', '.join(missing)} wajib diisi", item
    return True, "OK", item


def next_draft_form(previous: Dict[str, Any]) -> Dict[str, Any]:
    """Fresh form after adding a draft; keeps PIC, date, customer and platform for fast input."""
    form = empty_purchase_form()
    for key in STICKY_FIELDS:
        form[key] = previous.get(key, "")
    return form


def filter_purchases(
        items: Iterable[Dict[str, Any]],
        status: str = "all",
        query: str = "",
) -> List[Dict[str, Any]]:
    q = (query or "").strip().lower()
    out = []
    for item in items:
        if q and not any(q in str(item.get(f) or "").lower() for f in SEARCH_FIELDS):
            continue
        if status == "done" and not item.get("isDone"):
            continue
        if status == "pending" and item.get("isDone"):
            continue
        out.append(item)
    return out


def group_purchases(items: Iterable[Dict[str, Any]]) -> Dict[str, PurchaseGroup]:
    """shipping date -> PIC -> customer -> items, with done counters per date."""
    groups: Dict[str, PurchaseGroup] = {}
    for item in items:
        date_key = item.get("shippingDate") or NO_DATE
        pic_key = item.get("pic") or NO_PIC
        cust_key = item.get("customer") or NO_CUSTOMER

        group = groups.setdefault(date_key, PurchaseGroup(shipping_date=date_key))
        group.pics.setdefault(pic_key, {}).setdefault(cust_key, []).append(item)
        group.total += 1
        if item.get("isDone"):
            group.done += 1
    return groups


def purchase_stats(items: Iterable[Dict[str, Any]]) -> PurchaseStats:
    items = list(items)
    return PurchaseStats(total=len(items), done=sum(1 for i in items if i.get("isDone")))
