# services/ledger_service.py
import time
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from domain.models import LEDGER_TYPES, MONTHLY_PROFIT_CATEGORY, LedgerSummary
from utils.dates import format_readable_date, normalize_tanggal
from utils.numbers import parse_amount

SEARCH_FIELDS = ("keterangan", "kategori", "metode", "catatan", "tanggal")


def _none_if_blank(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_ledger_entry(
        raw: Dict[str, Any],
        created_at: Optional[int] = None,
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Validate a cash book form and build the payload to store.
    Returns (ok, message, payload)
    """
    tanggal = normalize_tanggal(raw.get("tanggal"))
    if not tanggal:
        return False, "Tanggal wajib diisi", None

    tipe = raw.get("tipe")
    if tipe not in LEDGER_TYPES:
        return False, f"Tipe harus salah satu dari {', '.join(LEDGER_TYPES)}", None

    kategori = _none_if_blank(raw.get("kategori"))
    keterangan = _none_if_blank(raw.get("keterangan"))
    if tipe == "Masuk" and kategori == MONTHLY_PROFIT_CATEGORY and not keterangan:
        return False, "Keterangan wajib diisi. Silakan hitung keuntungan terlebih dahulu.", None

    jumlah = parse_amount(raw.get("jumlah"))
    if jumlah <= 0:
        return False, "Jumlah tidak valid atau nol.", None

    payload = {
        "tanggal": tanggal,
        "tipe": tipe,
        "kategori": kategori,
        "keterangan": keterangan,
        "metode": _none_if_blank(raw.get("metode")),
        "jumlah": jumlah,
        "catatan": _none_if_blank(raw.get("catatan")),
        "createdAt": raw.get("createdAt") or created_at or int(time.time() * 1000),
    }
    return True, "OK", payload


def filter_ledger(
        entries: Iterable[Dict[str, Any]],
        query: str = "",
        tipe: Optional[str] = None,
        kategori: Optional[str] = None,
) -> List[Dict[str, Any]]:
    s = (query or "").strip().lower()
    out = []
    for r in entries:
        if s and not any(s in str(r.get(f) or "").lower() for f in SEARCH_FIELDS):
            continue
        if tipe and r.get("tipe") != tipe:
            continue
        if kategori and r.get("kategori") != kategori:
            continue
        out.append(r)
    return out


def summarize_ledger(entries: Iterable[Dict[str, Any]]) -> LedgerSummary:
    masuk = 0
    keluar = 0
    for r in entries:
        jumlah = parse_amount(r.get("jumlah"))
        if r.get("tipe") == "Masuk":
            masuk += jumlah
        else:
            keluar += jumlah
    return LedgerSummary(total_masuk=masuk, total_keluar=keluar)


def ledger_categories(entries: Iterable[Dict[str, Any]]) -> List[str]:
    return sorted({r["kategori"] for r in entries if r.get("kategori")})


def monthly_profit_description(date_from: str, date_to: str) -> str:
    return f"Laba bersih periode {format_readable_date(date_from)} - {format_readable_date(date_to)}"


def ledger_frame(entries: List[Dict[str, Any]]) -> pd.DataFrame:
    columns = ["tanggal", "tipe", "kategori", "keterangan", "metode", "jumlah", "catatan"]
    df = pd.DataFrame(entries, columns=["id", *columns])
    return df.rename(columns={
        "tanggal": "Tanggal",
        "tipe": "Tipe",
        "kategori": "Kategori",
        "keterangan": "Keterangan",
        "metode": "Metode",
        "jumlah": "Jumlah",
        "catatan": "Catatan",
    })
