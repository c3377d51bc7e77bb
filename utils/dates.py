# utils/dates.py
import datetime
import re
from typing import Optional, Tuple, Union

MONTH_LABEL_ID = ["Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul", "Agu", "Sep", "Okt", "Nov", "Des"]
MONTH_NAME_ID = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_KEY = re.compile(r"^(\d{4})-(\d{2})")

DateLike = Union[str, datetime.date, None]


def today_str() -> str:
    return datetime.date.today().isoformat()


def normalize_tanggal(value: DateLike) -> str:
    """
    Store dates as 'yyyy-MM-dd' so range filters on the text column stay
    lexicographic. Unparseable text is returned as-is.
    """
    if not value:
        return ""
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()

    text = str(value).strip()
    if _ISO_DATE.match(text):
        return text

    for fmt in ("%Y/%m/%d", "%d/%m/%Y", "%d-%m-%Y", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S.%f"):
        try:
            return datetime.datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    try:
        return datetime.datetime.fromisoformat(text).date().isoformat()
    except ValueError:
        return text


def month_key(tanggal: Optional[str]) -> Optional[str]:
    """'2025-03-14' or '2025/03/14' -> '2025-03'."""
    if not tanggal or not isinstance(tanggal, str):
        return None
    m = _MONTH_KEY.match(tanggal.replace("/", "-"))
    return f"{m.group(1)}-{m.group(2)}" if m else None


def key_to_year_month(key: str) -> Tuple[int, int]:
    yy, mm = key.split("-")
    return int(yy), int(mm)


def next_month(year: int, month: int) -> Tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def month_label(year: int, month: int) -> str:
    """Short Indonesian label, e.g. 'Mei 25'."""
    return f"{MONTH_LABEL_ID[month - 1]} {str(year)[2:]}"


def start_of_month(d: datetime.date) -> datetime.date:
    return d.replace(day=1)


def end_of_month(d: datetime.date) -> datetime.date:
    y, m = next_month(d.year, d.month)
    return datetime.date(y, m, 1) - datetime.timedelta(days=1)


def months_back(d: datetime.date, n: int) -> datetime.date:
    """First day of the month n months before d."""
    y, m = d.year, d.month - n
    while m < 1:
        m += 12
        y -= 1
    return datetime.date(y, m, 1)


def default_order_window(today: Optional[datetime.date] = None) -> Tuple[str, str]:
    """Order list window: start of the month two months back until end of this month."""
    today = today or datetime.date.today()
    return months_back(today, 2).isoformat(), end_of_month(today).isoformat()


def format_readable_date(value: DateLike) -> str:
    """'2025-11-05' -> '5 November 2025'."""
    iso = normalize_tanggal(value)
    try:
        d = datetime.date.fromisoformat(iso)
    except ValueError:
        return iso
    return f"{d.day} {MONTH_NAME_ID[d.month - 1]} {d.year}"
