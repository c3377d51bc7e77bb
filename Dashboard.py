import streamlit as st

from config import configure_logging
from data_integrator import fetch_customers, fetch_orders
from element_component import unit_price_caption
from services.report_service import dashboard_summary, months_frame
from utils.formatting import format_idr

configure_logging()

st.set_page_config(
    page_title="Nihong Jastip - Panel Admin",
    page_icon="📊",
    layout="wide",
)

st.sidebar.header("📊 Dasbor Utama")
unit_price_caption()

st.title("Dasbor Utama")
st.caption("Ringkasan performa bisnis Anda secara keseluruhan.")

ok_orders, msg_orders, orders = fetch_orders(use_default_window=False, limit=None)
ok_cust, msg_cust, customers = fetch_customers()

if not ok_orders:
    st.error(f"Gagal memuat pesanan: {msg_orders}")
if not ok_cust:
    st.error(f"Gagal memuat pelanggan: {msg_cust}")

summary = dashboard_summary(orders, customers)

col_orders, col_customers, col_revenue, col_profit = st.columns(4)
col_orders.metric("Pesanan Aktif", summary.active_orders, help=f"Dari {summary.order_count} pesanan")
col_customers.metric("Pelanggan", summary.customer_count)
col_revenue.metric("Total Pendapatan", format_idr(summary.total_revenue))
col_profit.metric("Total Keuntungan", format_idr(summary.total_profit))

st.divider()
st.subheader("Pendapatan & Keuntungan per Bulan")
st.caption(summary.period_label)

if not summary.months:
    st.info("Belum ada pesanan dengan tanggal yang valid.")
else:
    df_months = months_frame(summary.months)
    st.bar_chart(df_months, x="Bulan", y=["Pendapatan", "Keuntungan"], stack=False)

    df_display = df_months.copy()
    for col in ("Pendapatan", "Keuntungan"):
        df_display[col] = df_display[col].apply(format_idr)
    st.dataframe(df_display, width="stretch", hide_index=True)
