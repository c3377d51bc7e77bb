# services/report_service.py
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from domain.models import DONE_STATUSES, DashboardSummary, MonthPoint
from services.invoice_service import compute_line
from utils.dates import key_to_year_month, month_key, month_label, next_month
from utils.formatting import format_currency
from utils.numbers import finite_or_zero

ORDER_COLUMNS = {
    "no": "No",
    "tanggal": "Tanggal",
    "namaPelanggan": "Pelanggan",
    "namaBarang": "Barang",
    "kategori": "Kategori",
    "kg": "Kg",
    "line_total": "Total Tagihan",
    "keuntungan": "Keuntungan",
    "status": "Status",
}


def order_revenue(order: Dict[str, Any]):
    value = order.get("totalPembayaran")
    if value is None:
        value = order.get("totalHarga")
    return finite_or_zero(value)


def order_profit(order: Dict[str, Any]):
    value = order.get("totalKeuntungan")
    if value is None:
        value = order.get("profit")
    return finite_or_zero(value)


def monthly_series(orders: Iterable[Dict[str, Any]]) -> List[MonthPoint]:
    """
    Revenue, profit and order count per month, from the first month with
    orders to the last one. Months without orders are filled with zeros so
    the chart stays continuous.
    """
    by_month: Dict[str, MonthPoint] = {}
    for o in orders:
        k = month_key(o.get("tanggal"))
        if not k:
            continue
        if k not in by_month:
            by_month[k] = MonthPoint(key=k, label=month_label(*key_to_year_month(k)))
        pt = by_month[k]
        pt.total += order_revenue(o)
        pt.profit += order_profit(o)
        pt.count += 1

    if not by_month:
        return []

    keys = sorted(by_month)
    y, m = key_to_year_month(keys[0])
    end = key_to_year_month(keys[-1])

    series: List[MonthPoint] = []
    while True:
        k = f"{y}-{m:02d}"
        series.append(by_month.get(k) or MonthPoint(key=k, label=month_label(y, m)))
        if (y, m) == end:
            break
        y, m = next_month(y, m)
    return series


def count_active_orders(orders: Iterable[Dict[str, Any]]) -> int:
    return sum(1 for o in orders if str(o.get("status") or "") not in DONE_STATUSES)


def dashboard_summary(orders: List[Dict[str, Any]], customers: List[Dict[str, Any]]) -> DashboardSummary:
    months = monthly_series(orders)
    period = f"{months[0].label} - {months[-1].label}" if months else "Tidak ada data"
    return DashboardSummary(
        order_count=len(orders),
        active_orders=count_active_orders(orders),
        customer_count=len(customers),
        total_revenue=sum(order_revenue(o) for o in orders),
        total_profit=sum(order_profit(o) for o in orders),
        period_label=period,
        months=months,
    )


def sum_profit(orders: Iterable[Dict[str, Any]], date_from: Optional[str], date_to: Optional[str]):
    """Total stored profit of orders dated within [date_from, date_to]."""
    if not date_from or not date_to:
        raise ValueError("Tanggal mulai dan selesai harus diisi.")
    total = 0
    for o in orders:
        tanggal = o.get("tanggal") or ""
        if date_from <= tanggal <= date_to:
            total += order_profit(o)
    return total


def months_frame(months: List[MonthPoint]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Bulan": m.label, "Pendapatan": m.total, "Keuntungan": m.profit, "Pesanan": m.count} for m in months],
        columns=["Bulan", "Pendapatan", "Keuntungan", "Pesanan"],
    )


def orders_frame(orders: List[Dict[str, Any]], unit_price: int, formatted: bool = False) -> pd.DataFrame:
    """
    Orders table with the live per-line breakdown. With `formatted`, money
    columns become display strings in each order's own currency.
    """
    rows = []
    for o in orders:
        line = compute_line(o, unit_price)
        rows.append({
            "id": o.get("id"),
            "no": o.get("no", ""),
            "tanggal": o.get("tanggal", ""),
            "namaPelanggan": o.get("namaPelanggan", ""),
            "namaBarang": o.get("namaBarang", ""),
            "kategori": o.get("kategori", ""),
            "kg": line.kg,
            "line_total": line.line_total,
            "keuntungan": line.keuntungan,
            "status": o.get("status", ""),
            "currency": line.currency.value,
        })

    df = pd.DataFrame(rows, columns=["id", *ORDER_COLUMNS.keys(), "currency"])
    if formatted and not df.empty:
        for col in ("line_total", "keuntungan"):
            df[col] = df.apply(lambda r: format_currency(r[col], r["currency"]), axis=1)
    return df
