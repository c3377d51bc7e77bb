import datetime

import streamlit as st

from data_integrator import (
    delete_purchase,
    fetch_purchase_customers,
    fetch_purchases,
    insert_purchase_customer,
    insert_purchases,
    toggle_purchase_done,
)
from domain.models import PIC_OPTIONS, PLATFORM_OPTIONS
from element_component import confirm_delete_dialog, unit_price_caption
from services.customer_service import customer_names
from services.purchase_service import (
    empty_purchase_form,
    filter_purchases,
    group_purchases,
    next_draft_form,
    purchase_stats,
    validate_purchase_draft,
)
from utils.dates import format_readable_date

st.set_page_config(page_title="Pembelian", page_icon="🛒", layout="wide")
st.sidebar.header("🛒 Daftar Pembelian")
unit_price_caption()

for k, v in {
    "purchase_drafts": [],
    "purchase_form": empty_purchase_form(),
    "purchase_saved_state": False,
    "purchase_deleted_state": False,
}.items():
    st.session_state.setdefault(k, v)

st.title("🛒 Daftar Pembelian")

ok, msg, items = fetch_purchases()
if not ok:
    st.error(f"Gagal memuat pembelian: {msg}")
ok_c, msg_c, purchase_customers = fetch_purchase_customers()
if not ok_c:
    st.error(f"Gagal memuat customer: {msg_c}")
buyer_names = customer_names(purchase_customers)

stats = purchase_stats(items)
col_total, col_done, col_pending = st.columns(3)
col_total.metric("Total Item", stats.total)
col_done.metric("Selesai", stats.done)
col_pending.metric("Belum", stats.pending)

if st.session_state["purchase_saved_state"]:
    st.success("Item pembelian disimpan")
    st.session_state["purchase_saved_state"] = False
if st.session_state["purchase_deleted_state"]:
    st.success("Item dihapus")
    st.session_state["purchase_deleted_state"] = False

# -------------------------------------------------------------------
# Draft input
# -------------------------------------------------------------------

with st.expander("Tambah Item", expanded=not items):
    form = st.session_state["purchase_form"]

    with st.form("purchase_draft_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Nama Barang")
            quantity = st.text_input("Jumlah")
            link = st.text_input("Link")
            note = st.text_input("Catatan")
        with col2:
            pic = st.selectbox(
                "PIC",
                PIC_OPTIONS,
                index=PIC_OPTIONS.index(form["pic"]) if form["pic"] in PIC_OPTIONS else None,
                placeholder="Pilih PIC",
            )
            customer = st.selectbox(
                "Customer",
                buyer_names,
                index=buyer_names.index(form["customer"]) if form["customer"] in buyer_names else None,
                placeholder="Pilih customer",
            )
            platform = st.selectbox(
                "Platform",
                PLATFORM_OPTIONS,
                index=PLATFORM_OPTIONS.index(form["platform"]) if form["platform"] in PLATFORM_OPTIONS else None,
                placeholder="Pilih platform",
            )
            shipping_date = st.date_input(
                "Tanggal Pengiriman",
                value=datetime.date.fromisoformat(form["shippingDate"]) if form["shippingDate"] else None,
            )

        if st.form_submit_button("Tambah ke draft"):
            valid, valid_msg, draft = validate_purchase_draft({
                "name": name,
                "quantity": quantity,
                "pic": pic,
                "customer": customer,
                "platform": platform,
                "link": link,
                "note": note,
                "shippingDate": shipping_date,
            })
            if not valid:
                st.error(valid_msg)
            else:
                st.session_state["purchase_drafts"].append(draft)
                st.session_state["purchase_form"] = next_draft_form(draft)
                st.rerun()

    with st.form("purchase_customer_form", clear_on_submit=True):
        new_buyer = st.text_input("Customer baru")
        if st.form_submit_button("Tambah customer"):
            added, add_msg, _ = insert_purchase_customer(new_buyer)
            if added:
                st.rerun()
            else:
                st.error(add_msg)

drafts = st.session_state["purchase_drafts"]
if drafts:
    st.subheader(f"Draft ({len(drafts)})")
    st.dataframe(drafts, width="stretch", hide_index=True)

    col_save, col_clear = st.columns(2)
    with col_save:
        if st.button("Simpan semua", type="primary"):
            saved, save_msg, _ = insert_purchases(drafts)
            if saved:
                st.session_state["purchase_drafts"] = []
                st.session_state["purchase_saved_state"] = True
                st.rerun()
            else:
                st.error(save_msg)
    with col_clear:
        if st.button("Kosongkan draft"):
            st.session_state["purchase_drafts"] = []
            st.rerun()

st.divider()

# -------------------------------------------------------------------
# Grouped list
# -------------------------------------------------------------------

col_status, col_search = st.columns([1, 3])
with col_status:
    status = st.radio(
        "Status",
        ["all", "pending", "done"],
        format_func={"all": "Semua", "pending": "Belum", "done": "Selesai"}.get,
        horizontal=True,
    )
with col_search:
    query = st.text_input("Cari", placeholder="Nama barang, PIC, customer")

visible = filter_purchases(items, status, query)
if not visible:
    st.info("Tidak ada item.")

for date_key, group in group_purchases(visible).items():
    title = format_readable_date(date_key) if group.shipping_date[:1].isdigit() else date_key
    with st.expander(f"{title} • {group.done}/{group.total} selesai", expanded=group.done < group.total):
        for pic_name, by_customer in group.pics.items():
            st.markdown(f"**PIC: {pic_name}**")
            for buyer, rows in by_customer.items():
                st.caption(buyer)
                for item in rows:
                    col_check, col_name, col_del = st.columns([1, 6, 1])
                    with col_check:
                        if st.checkbox(
                            "Selesai",
                            value=bool(item.get("isDone")),
                            key=f"done_{item['id']}",
                            label_visibility="collapsed",
                        ) != bool(item.get("isDone")):
                            toggled, toggle_msg, _ = toggle_purchase_done(item["id"], bool(item.get("isDone")))
                            if toggled:
                                st.rerun()
                            st.error(toggle_msg)
                    with col_name:
                        detail = " • ".join(x for x in (item.get("quantity"), item.get("platform"), item.get("note")) if x)
                        st.write(f"{item.get('name')}" + (f"  \n{detail}" if detail else ""))
                        if item.get("link"):
                            st.markdown(f"[link]({item['link']})")
                    with col_del:
                        if st.button("🗑️", key=f"del_purchase_{item['id']}"):
                            confirm_delete_dialog(item.get("name"), delete_purchase, item["id"], "purchase_deleted_state")
