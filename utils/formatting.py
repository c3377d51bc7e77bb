# utils/formatting.py
import re
from typing import Optional
from urllib.parse import quote


def format_rupiah(n) -> str:
    """
    Format a number to Indonesian-style with '.' as thousands separator.
    Rounds to whole rupiah for display only.
    Example: 1234567 -> "1.234.567"
    """
    return f"{round(n or 0):,.0f}".replace(",", ".")


def format_idr(n) -> str:
    return f"Rp {format_rupiah(n)}"


def format_currency(n, currency: Optional[str] = None) -> str:
    if currency == "JPY":
        return f"¥{round(n or 0):,.0f}"
    return format_idr(n)


def format_kg(kg) -> str:
    """1.5 -> '1,5', 2.0 -> '2'"""
    kg = kg or 0
    if float(kg).is_integer():
        return str(int(kg))
    return f"{kg:g}".replace(".", ",")


def to_wa_number(raw: Optional[str]) -> str:
    """
    Normalize an Indonesian phone number for wa.me links.
    '0812-3456' -> '628123456', '812...' -> '62812...'
    """
    if not raw:
        return ""
    digits = "".join(re.findall(r"\d+", str(raw)))
    if not digits:
        return ""
    if digits.startswith("62"):
        return digits
    if digits.startswith("0"):
        return "62" + digits[1:]
    if digits.startswith("8"):
        return "62" + digits
    return digits


def whatsapp_url(raw_number: Optional[str], message: Optional[str] = None) -> Optional[str]:
    wa = to_wa_number(raw_number)
    if not wa:
        return None
    url = f"https://wa.me/{wa}"
    if message:
        url += f"?text={quote(message)}"
    return url
