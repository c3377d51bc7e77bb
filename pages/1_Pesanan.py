import datetime

import streamlit as st

from data_integrator import delete_order, fetch_customers, fetch_orders, save_order
from domain.models import CATEGORY_OPTIONS, Currency, ORDER_STATUSES
from element_component import confirm_delete_dialog, current_unit_price, unit_price_caption
from services.customer_service import customer_names
from services.order_service import matches_search, new_order_form, normalize_order, seed_form
from services.report_service import ORDER_COLUMNS, orders_frame
from utils.dates import default_order_window
from utils.formatting import format_currency, format_idr

st.set_page_config(page_title="Pesanan", page_icon="📦", layout="wide")
st.sidebar.header("📦 Pesanan")
unit_price_caption()

unit_price = current_unit_price()

for k, v in {
    "order_saved_state": False,
    "order_deleted_state": False,
    "editing_order_id": None,
}.items():
    st.session_state.setdefault(k, v)

# -----------------------------------------------------------------------------
# 1) Filters
# -----------------------------------------------------------------------------
default_from, default_to = default_order_window()

with st.expander("Filter", expanded=False):
    col_status, col_from, col_to = st.columns(3)
    with col_status:
        status_filter = st.selectbox("Status", options=ORDER_STATUSES, index=None, placeholder="Semua status")
    with col_from:
        date_from = st.date_input("Dari", value=datetime.date.fromisoformat(default_from))
    with col_to:
        date_to = st.date_input("Sampai", value=datetime.date.fromisoformat(default_to))

search = st.text_input("Cari", placeholder="No pesanan, barang, pelanggan, catatan")

ok, msg, orders = fetch_orders(
    status=status_filter,
    date_from=date_from.isoformat(),
    date_to=date_to.isoformat(),
)
if not ok:
    st.error(f"Gagal memuat pesanan: {msg}")

orders = [o for o in orders if matches_search(o, search)]
orders_by_id = {o["id"]: o for o in orders if o.get("id")}

ok_cust, msg_cust, customers = fetch_customers()
if not ok_cust:
    st.error(f"Gagal memuat pelanggan: {msg_cust}")
names = customer_names(customers)

# -----------------------------------------------------------------------------
# 2) Orders table
# -----------------------------------------------------------------------------
st.title("📦 Daftar Pesanan")

if st.session_state["order_saved_state"]:
    st.success("Pesanan berhasil disimpan")
    st.session_state["order_saved_state"] = False
if st.session_state["order_deleted_state"]:
    st.success("Pesanan dihapus")
    st.session_state["order_deleted_state"] = False

if not orders:
    st.info("Tidak ada pesanan pada periode ini.")
else:
    df = orders_frame(orders, unit_price, formatted=True)
    st.dataframe(
        df.drop(columns=["id", "currency"]).rename(columns=ORDER_COLUMNS),
        width="stretch",
        hide_index=True,
    )

    labels = {o["id"]: f"{o.get('no')} - {o.get('namaPelanggan')} - {o.get('namaBarang')}" for o in orders_by_id.values()}

    selected_ids = st.multiselect(
        "Pilih pesanan untuk invoice",
        options=list(labels.keys()),
        format_func=lambda i: labels[i],
    )
    col_inv, col_edit, col_del = st.columns(3)
    with col_inv:
        if st.button("🧾 Buat Invoice", disabled=not selected_ids):
            st.session_state["invoice_item_ids"] = selected_ids
            st.switch_page("pages/4_Invoice.py")
    with col_edit:
        if st.button("✏️ Edit", disabled=len(selected_ids) != 1):
            st.session_state["editing_order_id"] = selected_ids[0]
    with col_del:
        if st.button("🗑️ Hapus", disabled=len(selected_ids) != 1):
            confirm_delete_dialog(labels[selected_ids[0]], delete_order, selected_ids[0], "order_deleted_state")

st.divider()

# -----------------------------------------------------------------------------
# 3) Order form (add / edit)
# -----------------------------------------------------------------------------
editing_id = st.session_state["editing_order_id"]
editing = orders_by_id.get(editing_id) if editing_id else None

if editing:
    st.subheader(f"Edit Pesanan {editing.get('no')}")
    form = seed_form(editing)
    if st.button("Batal edit"):
        st.session_state["editing_order_id"] = None
        st.rerun()
else:
    st.subheader("Tambah Pesanan")
    form = new_order_form([o.get("no") for o in orders], names, unit_price)

key = editing_id or "new"

col1, col2, col3 = st.columns(3)
with col1:
    st.text_input("No Pesanan", value=form.no, disabled=True, key=f"no_{key}")
    form.nama_barang = st.text_input("Nama Barang", value=form.nama_barang, key=f"barang_{key}")
    form.kategori = st.selectbox(
        "Kategori",
        CATEGORY_OPTIONS,
        index=CATEGORY_OPTIONS.index(form.kategori) if form.kategori in CATEGORY_OPTIONS else 0,
        key=f"kategori_{key}",
    )
with col2:
    form.tanggal = st.date_input(
        "Tanggal Pemesanan",
        value=datetime.date.fromisoformat(form.tanggal) if form.tanggal else datetime.date.today(),
        key=f"tanggal_{key}",
    ).isoformat()
    form.nama_pelanggan = st.selectbox(
        "Nama Pelanggan",
        names,
        index=names.index(form.nama_pelanggan) if form.nama_pelanggan in names else None,
        placeholder="Pilih pelanggan",
        key=f"pelanggan_{key}",
    ) or ""
    form.jumlah_kg = st.text_input("Berat (Kg)", value=str(form.jumlah_kg), key=f"kg_{key}", help="Pembulatan ke atas (ceil).")
with col3:
    form.pengiriman = st.text_input("Lokasi Pengiriman", value=form.pengiriman, key=f"pengiriman_{key}")
    form.status = st.selectbox(
        "Status",
        ORDER_STATUSES,
        index=ORDER_STATUSES.index(form.status) if form.status in ORDER_STATUSES else 0,
        key=f"status_{key}",
    )
    currencies = [c.value for c in Currency]
    form.tipe_nominal = st.selectbox(
        "Mata Uang",
        currencies,
        index=currencies.index(Currency.parse(form.tipe_nominal).value),
        key=f"currency_{key}",
    )

st.markdown("**Harga & Ongkir**")
form.use_auto_mode = st.checkbox(
    "Gunakan perhitungan otomatis",
    value=form.use_auto_mode,
    key=f"auto_{key}",
    help=f"Otomatis: ongkir = ceil(kg) × {format_idr(unit_price)}",
)

col_j, col_jm, col_o, col_om = st.columns(4)
with col_j:
    form.harga_jastip = st.text_input("Harga Jastip (base)", value=str(form.harga_jastip), key=f"jastip_{key}")
with col_jm:
    form.harga_jastip_markup = st.text_input("Jastip Markup", value=str(form.harga_jastip_markup), key=f"jastip_m_{key}")
with col_o:
    form.harga_ongkir = st.text_input(
        "Harga Ongkir (base)",
        value=str(form.harga_ongkir),
        disabled=form.use_auto_mode,
        key=f"ongkir_{key}",
    )
with col_om:
    form.harga_ongkir_markup = st.text_input("Ongkir Markup", value=str(form.harga_ongkir_markup), key=f"ongkir_m_{key}")

form.catatan = st.text_area("Catatan", value=form.catatan, placeholder="Catatan khusus (opsional)", key=f"catatan_{key}")

normalized = normalize_order(form, unit_price)
record = normalized.record
cur = record["tipeNominal"]

col_bayar, col_untung, col_detail = st.columns(3)
col_bayar.metric("Total Pembayaran", format_currency(record["totalPembayaran"], cur))
col_untung.metric("Total Keuntungan", format_currency(record["totalKeuntungan"], cur))
col_detail.caption(
    f"ceil({record['jumlahKg']}) = **{record['kgCeil']}** • "
    f"Ongkir base: **{format_currency(record['hargaOngkir'], cur)}** • "
    f"Tagihan: **{format_currency(normalized.totals.line_total, cur)}**"
)

for err in normalized.errors:
    st.warning(err)

if st.button("Simpan", type="primary", disabled=not normalized.save_ready):
    saved, save_msg, _ = save_order(normalized, order_id=editing_id)
    if saved:
        st.session_state["order_saved_state"] = True
        st.session_state["editing_order_id"] = None
        st.rerun()
    else:
        st.error(save_msg)
