import streamlit as st

from data_integrator import (
    CUSTOMERS,
    delete_customer,
    fetch_customers,
    insert_customer,
    is_exist,
    update_customer,
)
from element_component import (
    confirm_delete_dialog,
    confirmation_dialog_single_submission,
    unit_price_caption,
)
from services.customer_service import customer_whatsapp_url, validate_customer

st.set_page_config(
    page_title="Pelanggan",
    page_icon="👥",
    layout="wide",
)

st.sidebar.header("👥 Pelanggan")
unit_price_caption()

# -------------------------------------------------------------------
# Session state defaults
# -------------------------------------------------------------------

for k, v in {
    "customer_insert_state": False,
    "customer_deleted_state": False,
}.items():
    st.session_state.setdefault(k, v)

st.title("👥 Pelanggan")

ok, msg, customers = fetch_customers()
if not ok:
    st.error(f"Gagal memuat pelanggan: {msg}")

search = st.text_input("Cari pelanggan", placeholder="Nama, alamat atau telepon")
q = search.strip().lower()
visible = [
    c for c in customers
    if not q or any(q in str(c.get(f) or "").lower() for f in ("nama", "alamat", "telpon"))
]

if st.session_state["customer_insert_state"]:
    st.success("Pelanggan berhasil ditambahkan")
    st.session_state["customer_insert_state"] = False
if st.session_state["customer_deleted_state"]:
    st.success("Pelanggan dihapus")
    st.session_state["customer_deleted_state"] = False

# -------------------------------------------------------------------
# Customer list
# -------------------------------------------------------------------

if not visible:
    st.info("Belum ada pelanggan.")

for c in visible:
    with st.container(border=True):
        col_info, col_wa, col_edit, col_del = st.columns([4, 1, 1, 1])
        with col_info:
            st.markdown(f"**{c.get('nama')}**")
            st.caption(f"{c.get('telpon') or '-'} • {c.get('alamat') or '-'}")
        with col_wa:
            wa = customer_whatsapp_url(c)
            if wa:
                st.link_button("WhatsApp", wa)
        with col_edit:
            with st.popover("Edit"):
                with st.form(f"edit_customer_{c['id']}"):
                    nama = st.text_input("Nama", value=c.get("nama") or "")
                    telpon = st.text_input("Telepon", value=c.get("telpon") or "")
                    alamat = st.text_area("Alamat", value=c.get("alamat") or "")
                    if st.form_submit_button("Simpan"):
                        valid, valid_msg, row = validate_customer({"nama": nama, "telpon": telpon, "alamat": alamat})
                        if not valid:
                            st.error(valid_msg)
                        else:
                            saved, save_msg, _ = update_customer(c["id"], row)
                            if saved:
                                st.rerun()
                            else:
                                st.error(save_msg)
        with col_del:
            if st.button("Hapus", key=f"del_customer_{c['id']}"):
                confirm_delete_dialog(c.get("nama"), delete_customer, c["id"], "customer_deleted_state")

st.divider()

# -------------------------------------------------------------------
# New customer
# -------------------------------------------------------------------

st.subheader("Tambah Pelanggan")

with st.form("customer_input_form", clear_on_submit=True):
    nama = st.text_input("Nama")
    telpon = st.text_input("Telepon", placeholder="08xxxxxxxxxx")
    alamat = st.text_area("Alamat")

    if st.form_submit_button("Submit"):
        valid, valid_msg, row = validate_customer({"nama": nama, "telpon": telpon, "alamat": alamat})
        if not valid:
            st.error(valid_msg)
        elif is_exist(CUSTOMERS, "nama", row["nama"]):
            st.error(f"Pelanggan '{row['nama']}' sudah ada")
        else:
            confirmation_dialog_single_submission(insert_customer, row, "customer_insert_state")
