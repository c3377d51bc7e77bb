import streamlit as st

from data_integrator import apply_unit_price, fetch_unit_price
from domain.models import ShipmentCharge
from element_component import current_unit_price, unit_price_caption
from services.pricing_service import ceil_kg, compute_charge, effective_base_ongkir
from utils.formatting import format_idr
from utils.numbers import parse_amount, parse_weight

st.set_page_config(page_title="Kalkulator", page_icon="🧮")
st.sidebar.header("🧮 Kalkulator Harga")
unit_price_caption()

st.session_state.setdefault("unit_price_saved_msg", None)

unit_price = current_unit_price()

st.title("🧮 Kalkulator Harga")

# -------------------------------------------------------------------
# Quick quote
# -------------------------------------------------------------------

col_kg, col_jastip = st.columns(2)
with col_kg:
    weight = parse_weight(st.text_input("Berat (Kg)", value="1"))
    st.caption(f"Ditagih **{ceil_kg(weight)} kg** (pembulatan ke atas)")
with col_jastip:
    base_jastip = parse_amount(st.text_input("Harga Jastip (base)", value="0"))

col_jm, col_om = st.columns(2)
with col_jm:
    jastip_markup = parse_amount(st.text_input("Jastip Markup", value="0"))
with col_om:
    ongkir_markup = parse_amount(st.text_input("Ongkir Markup", value="0"))

charge = ShipmentCharge(
    weight_kg=weight,
    unit_price_per_kg=unit_price,
    base_jastip=base_jastip,
    jastip_markup=jastip_markup,
    ongkir_markup=ongkir_markup,
    use_auto_mode=True,
)
totals = compute_charge(charge)

col_ongkir, col_bayar, col_tagih, col_untung = st.columns(4)
col_ongkir.metric("Ongkir (base)", format_idr(effective_base_ongkir(charge)))
col_bayar.metric("Total Pembayaran", format_idr(totals.total_pembayaran))
col_tagih.metric("Tagihan", format_idr(totals.line_total))
col_untung.metric("Keuntungan", format_idr(totals.total_keuntungan))
if totals.total_keuntungan < 0:
    st.warning("Keuntungan negatif, naikkan markup.")

st.divider()

# -------------------------------------------------------------------
# Unit price setting
# -------------------------------------------------------------------

st.subheader("Harga per Kg")

if st.session_state["unit_price_saved_msg"]:
    st.success(st.session_state["unit_price_saved_msg"])
    st.session_state["unit_price_saved_msg"] = None

with st.form("unit_price_form"):
    new_price = st.text_input("Harga per kg (Rp)", value=str(unit_price))
    recalc = st.checkbox(
        "Hitung ulang pesanan mode otomatis",
        value=False,
        help="Pesanan dengan harga manual tidak berubah.",
    )

    if st.form_submit_button("Simpan"):
        ok, msg = apply_unit_price(new_price, recalc=recalc)
        if ok:
            st.session_state["unit_price"] = fetch_unit_price()
            st.session_state["unit_price_saved_msg"] = msg
            st.rerun()
        else:
            st.error(msg)
