import datetime

import streamlit as st

from data_integrator import (
    delete_ledger_entry,
    fetch_ledger,
    fetch_profit_between,
    insert_ledger_entry,
    update_ledger_entry,
)
from domain.models import LEDGER_CATEGORIES, LEDGER_METHODS, LEDGER_TYPES, MONTHLY_PROFIT_CATEGORY
from element_component import confirm_delete_dialog, unit_price_caption
from services.ledger_service import (
    filter_ledger,
    ledger_categories,
    ledger_frame,
    monthly_profit_description,
    normalize_ledger_entry,
    summarize_ledger,
)
from utils.dates import end_of_month, start_of_month
from utils.formatting import format_idr

st.set_page_config(page_title="Buku Kas", page_icon="💰", layout="wide")
st.sidebar.header("💰 Buku Kas")
unit_price_caption()

for k, v in {
    "ledger_saved_state": False,
    "ledger_deleted_state": False,
    "ledger_editing_id": None,
    "ledger_profit": None,
    "ledger_profit_desc": "",
}.items():
    st.session_state.setdefault(k, v)

st.title("💰 Buku Kas")

# -------------------------------------------------------------------
# Filters
# -------------------------------------------------------------------

today = datetime.date.today()

col_from, col_to, col_tipe, col_kat = st.columns(4)
with col_from:
    date_from = st.date_input("Dari", value=start_of_month(today))
with col_to:
    date_to = st.date_input("Sampai", value=end_of_month(today))
with col_tipe:
    tipe_filter = st.selectbox("Tipe", LEDGER_TYPES, index=None, placeholder="Semua tipe")

ok, msg, entries = fetch_ledger(date_from=date_from.isoformat(), date_to=date_to.isoformat())
if not ok:
    st.error(f"Gagal memuat buku kas: {msg}")

with col_kat:
    kategori_filter = st.selectbox("Kategori", ledger_categories(entries), index=None, placeholder="Semua kategori")

search = st.text_input("Cari", placeholder="Keterangan, kategori, metode, catatan")
visible = filter_ledger(entries, search, tipe=tipe_filter, kategori=kategori_filter)

summary = summarize_ledger(visible)
col_in, col_out, col_saldo = st.columns(3)
col_in.metric("Total Masuk", format_idr(summary.total_masuk))
col_out.metric("Total Keluar", format_idr(summary.total_keluar))
col_saldo.metric("Saldo", format_idr(summary.saldo))

if st.session_state["ledger_saved_state"]:
    st.success("Transaksi disimpan")
    st.session_state["ledger_saved_state"] = False
if st.session_state["ledger_deleted_state"]:
    st.success("Transaksi dihapus")
    st.session_state["ledger_deleted_state"] = False

# -------------------------------------------------------------------
# Ledger table
# -------------------------------------------------------------------

if not visible:
    st.info("Belum ada transaksi pada periode ini.")
else:
    df = ledger_frame(visible)
    df["Jumlah"] = df["Jumlah"].apply(format_idr)
    st.dataframe(df.drop(columns=["id"]), width="stretch", hide_index=True)

    labels = {e["id"]: f"{e.get('tanggal')} - {e.get('tipe')} - {e.get('keterangan') or e.get('kategori') or '-'}" for e in visible}
    selected = st.selectbox("Pilih transaksi", list(labels.keys()), index=None, format_func=lambda i: labels[i])
    col_edit, col_del = st.columns(2)
    with col_edit:
        if st.button("✏️ Edit", disabled=selected is None):
            st.session_state["ledger_editing_id"] = selected
    with col_del:
        if st.button("🗑️ Hapus", disabled=selected is None):
            confirm_delete_dialog(labels[selected], delete_ledger_entry, selected, "ledger_deleted_state")

st.divider()

# -------------------------------------------------------------------
# Monthly profit helper
# -------------------------------------------------------------------

with st.expander(f"Hitung {MONTHLY_PROFIT_CATEGORY}"):
    col_pf, col_pt = st.columns(2)
    with col_pf:
        profit_from = st.date_input("Periode dari", value=start_of_month(today), key="profit_from")
    with col_pt:
        profit_to = st.date_input("Periode sampai", value=end_of_month(today), key="profit_to")

    if st.button("Hitung keuntungan"):
        ok_p, msg_p, profit = fetch_profit_between(profit_from.isoformat(), profit_to.isoformat())
        if not ok_p:
            st.error(msg_p)
        else:
            st.session_state["ledger_profit"] = profit
            st.session_state["ledger_profit_desc"] = monthly_profit_description(
                profit_from.isoformat(), profit_to.isoformat()
            )

    if st.session_state["ledger_profit"] is not None:
        st.metric("Keuntungan pesanan", format_idr(st.session_state["ledger_profit"]))
        st.caption(st.session_state["ledger_profit_desc"])

# -------------------------------------------------------------------
# Entry form (add / edit)
# -------------------------------------------------------------------

editing_id = st.session_state["ledger_editing_id"]
editing = next((e for e in entries if e.get("id") == editing_id), None) if editing_id else None

if editing:
    st.subheader("Edit Transaksi")
    if st.button("Batal edit"):
        st.session_state["ledger_editing_id"] = None
        st.rerun()
    seed = editing
else:
    st.subheader("Tambah Transaksi")
    seed = {}
    if st.session_state["ledger_profit"] is not None:
        seed = {
            "tipe": "Masuk",
            "kategori": MONTHLY_PROFIT_CATEGORY,
            "keterangan": st.session_state["ledger_profit_desc"],
            "jumlah": st.session_state["ledger_profit"],
        }

with st.form(f"ledger_form_{editing_id or 'new'}"):
    col1, col2 = st.columns(2)
    with col1:
        tanggal = st.date_input(
            "Tanggal",
            value=datetime.date.fromisoformat(seed["tanggal"]) if seed.get("tanggal") else today,
        )
        tipe = st.selectbox(
            "Tipe",
            LEDGER_TYPES,
            index=LEDGER_TYPES.index(seed["tipe"]) if seed.get("tipe") in LEDGER_TYPES else 0,
        )
        kategori = st.selectbox(
            "Kategori",
            LEDGER_CATEGORIES,
            index=LEDGER_CATEGORIES.index(seed["kategori"]) if seed.get("kategori") in LEDGER_CATEGORIES else None,
            placeholder="Pilih kategori",
        )
    with col2:
        jumlah = st.text_input("Jumlah (Rp)", value=str(seed.get("jumlah") or ""))
        metode = st.selectbox(
            "Metode",
            LEDGER_METHODS,
            index=LEDGER_METHODS.index(seed["metode"]) if seed.get("metode") in LEDGER_METHODS else None,
            placeholder="Pilih metode",
        )
        keterangan = st.text_input("Keterangan", value=seed.get("keterangan") or "")
    catatan = st.text_area("Catatan", value=seed.get("catatan") or "")

    if st.form_submit_button("Simpan"):
        valid, valid_msg, payload = normalize_ledger_entry({
            "tanggal": tanggal,
            "tipe": tipe,
            "kategori": kategori,
            "keterangan": keterangan,
            "metode": metode,
            "jumlah": jumlah,
            "catatan": catatan,
            "createdAt": seed.get("createdAt"),
        })
        if not valid:
            st.error(valid_msg)
        else:
            if editing:
                saved, save_msg, _ = update_ledger_entry(editing_id, payload)
            else:
                saved, save_msg, _ = insert_ledger_entry(payload)
            if saved:
                st.session_state["ledger_saved_state"] = True
                st.session_state["ledger_editing_id"] = None
                st.session_state["ledger_profit"] = None
                st.rerun()
            else:
                st.error(save_msg)
