# services/customer_service.py
from typing import Any, Dict, Iterable, List, Optional, Tuple

from utils.formatting import whatsapp_url


def validate_customer(raw: Dict[str, Any]) -> Tuple[bool, str, Dict[str, Any]]:
    """
    Returns (ok, message, cleaned_row)
    """
    row = {
        "nama": str(raw.get("nama") or "").strip(),
        "alamat": str(raw.get("alamat") or "").strip(),
        "telpon": str(raw.get("telpon") or "").strip(),
    }
    if not row["nama"]:
        return False, "Nama pelanggan tidak boleh kosong", row
    return True, "OK", row


def customer_names(customers: Iterable[Dict[str, Any]]) -> List[str]:
    return [c["nama"] for c in customers if c.get("nama")]


def find_customer(customers: Iterable[Dict[str, Any]], nama: str) -> Optional[Dict[str, Any]]:
    return next((c for c in customers if c.get("nama") == nama), None)


def customer_whatsapp_url(customer: Optional[Dict[str, Any]], message: Optional[str] = None) -> Optional[str]:
    if not customer:
        return None
    return whatsapp_url(customer.get("telpon"), message)
