import streamlit as st
import pandas as pd

from data_integrator import fetch_unit_price
from utils.formatting import format_idr


@st.dialog("Konfirmasi")
def confirmation_dialog_single_submission(insert_fn, value, state_name):
    df = pd.DataFrame(value.items(), columns=["Key", "Value"])
    df["Value"] = df["Value"].astype("string")
    st.dataframe(df, hide_index=True)

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("Ya", type="primary", key="confirm_yes"):
            status, msg, data = insert_fn(value)
            st.session_state[state_name] = status

            if not status:
                st.error(msg)
            else:
                st.rerun()
    with col_no:
        if st.button("Tidak"):
            st.rerun()


@st.dialog("Hapus data?")
def confirm_delete_dialog(label, delete_fn, row_id, state_name):
    st.write(f"**{label}** akan dihapus permanen.")

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("Hapus", type="primary", key="confirm_delete"):
            ok, msg = delete_fn(row_id)
            st.session_state[state_name] = ok
            if not ok:
                st.error(msg)
            else:
                st.rerun()
    with col_no:
        if st.button("Batal"):
            st.rerun()


def current_unit_price() -> int:
    """Unit price for this session; refreshed after it is changed on the calculator page."""
    if "unit_price" not in st.session_state:
        st.session_state["unit_price"] = fetch_unit_price()
    return st.session_state["unit_price"]


def unit_price_caption() -> None:
    st.sidebar.caption(f"Harga/kg: **{format_idr(current_unit_price())}** (pembulatan ke atas)")
