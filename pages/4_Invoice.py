import streamlit as st

from config import get_settings
from data_integrator import fetch_customers, fetch_orders
from element_component import current_unit_price, unit_price_caption
from services.customer_service import customer_names, customer_whatsapp_url, find_customer
from services.invoice_doc_service import invoice_filename, render_invoice_docx
from services.invoice_service import build_invoice, invoice_message, price_notes
from utils.formatting import format_currency
from utils.numbers import parse_amount

st.set_page_config(page_title="Invoice", page_icon="🧾", layout="wide")
st.sidebar.header("🧾 Invoice")
unit_price_caption()

settings = get_settings()
unit_price = current_unit_price()

st.title("🧾 Invoice")

ok, msg, orders = fetch_orders(use_default_window=False, limit=None)
if not ok:
    st.error(f"Gagal memuat pesanan: {msg}")
ok_cust, msg_cust, customers = fetch_customers()
if not ok_cust:
    st.error(f"Gagal memuat pelanggan: {msg_cust}")

# -------------------------------------------------------------------
# Selection: explicit orders from the orders page, else by customer
# -------------------------------------------------------------------

preselected = st.session_state.get("invoice_item_ids") or []
orders_by_id = {o["id"]: o for o in orders if o.get("id")}

customer_name = st.selectbox(
    "Pelanggan",
    customer_names(customers),
    index=None,
    placeholder="Pilih pelanggan",
)

candidates = [o for o in orders if not customer_name or o.get("namaPelanggan") == customer_name]
labels = {o["id"]: f"{o.get('no')} - {o.get('namaBarang')} ({o.get('tanggal')})" for o in candidates if o.get("id")}
for i in preselected:
    if i in orders_by_id and i not in labels:
        o = orders_by_id[i]
        labels[i] = f"{o.get('no')} - {o.get('namaBarang')} ({o.get('tanggal')})"

item_ids = st.multiselect(
    "Pesanan",
    list(labels.keys()),
    default=[i for i in preselected if i in labels],
    format_func=lambda i: labels[i],
    help="Kosongkan untuk menagih semua pesanan pelanggan.",
)

if preselected and st.button("Reset pilihan"):
    st.session_state["invoice_item_ids"] = []
    st.rerun()

admin_fee = parse_amount(st.text_input("Biaya Admin", value="0"))

if not item_ids and not customer_name:
    st.info("Pilih pelanggan atau pesanan untuk membuat invoice.")
    st.stop()

summary = build_invoice(
    orders,
    unit_price,
    customer_name=customer_name,
    item_ids=item_ids,
    admin_fee=admin_fee,
    base_currency=settings.base_currency,
)

# the first selected order decides header details when no customer is picked
selected_orders = [orders_by_id[line.order_id] for line in summary.lines if line.order_id in orders_by_id]
first = selected_orders[0] if selected_orders else {}
bill_to = customer_name or first.get("namaPelanggan") or ""
customer = find_customer(customers, bill_to)
cur = summary.currency.value

# -------------------------------------------------------------------
# Preview
# -------------------------------------------------------------------

if summary.mixed_currency:
    st.warning(f"Pesanan memakai mata uang berbeda. Total ditampilkan dalam {cur} tanpa konversi kurs.")

st.dataframe(
    [
        {
            "Nama Barang": line.nama_barang,
            "Kategori": line.kategori,
            "Kg": line.kg,
            "Subtotal (Markup)": format_currency(line.line_total, cur),
            "Keuntungan": format_currency(line.keuntungan, cur),
        }
        for line in summary.lines
    ],
    width="stretch",
    hide_index=True,
)

col_sub, col_admin, col_total, col_profit = st.columns(4)
col_sub.metric("Subtotal (Markup)", format_currency(summary.subtotal, cur))
col_admin.metric("Biaya Admin", format_currency(summary.admin_fee, cur))
col_total.metric("Total", format_currency(summary.grand_total, cur))
col_profit.metric("Keuntungan", format_currency(summary.total_keuntungan, cur))

notes = price_notes(summary.lines)
if notes:
    st.caption(notes.replace("\n", "  \n"))

st.divider()

# -------------------------------------------------------------------
# Export
# -------------------------------------------------------------------

col_doc, col_wa = st.columns(2)
with col_doc:
    if summary.lines:
        st.download_button(
            "⬇️ Unduh Invoice (.docx)",
            data=render_invoice_docx(
                summary,
                settings,
                customer=customer,
                customer_name=bill_to,
                order_date=first.get("tanggal", ""),
                status=first.get("status", ""),
                pengiriman=first.get("pengiriman", ""),
            ),
            file_name=invoice_filename(bill_to),
            mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        )
with col_wa:
    message = invoice_message(summary, bill_to, settings.business_name)
    wa = customer_whatsapp_url(customer, message)
    if wa:
        st.link_button("Kirim via WhatsApp", wa)
    else:
        st.caption("Nomor WhatsApp pelanggan belum diisi.")
    with st.expander("Teks pesan"):
        st.code(message, language=None)
