"""
Unit tests for the order record normalizer.

Run with: pytest tests/test_order_service.py -v
"""

import datetime

import pytest

from domain.models import OrderForm
from services.order_service import (
    MSG_CUSTOMER_REQUIRED,
    generate_order_no,
    matches_search,
    new_order_form,
    normalize_order,
    recalculate_orders,
    seed_form,
)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def form():
    """Form as typed by the admin, Indonesian number formats included."""
    return OrderForm(
        no="ORD-20250105-001",
        tanggal="2025-01-05",
        nama_barang="Matcha",
        kategori="Makanan & Minuman",
        nama_pelanggan="Ani",
        jumlah_kg="1,2",
        harga_jastip="200.000",
        harga_jastip_markup="250000",
        harga_ongkir="",
        harga_ongkir_markup="Rp 250.000",
        use_auto_mode=True,
    )


# =============================================================================
# NORMALIZE
# =============================================================================

class TestNormalizeOrder:
    """Form state -> save-ready order record."""

    def test_worked_example(self, form):
        result = normalize_order(form, 100000)
        rec = result.record
        assert result.save_ready
        assert rec["jumlahKg"] == pytest.approx(1.2)
        assert rec["kgCeil"] == 2
        assert rec["hargaJastip"] == 200000
        assert rec["hargaOngkir"] == 200000
        assert rec["totalPembayaran"] == 400000
        assert rec["totalKeuntungan"] == 100000

    def test_snapshot(self, form):
        computed = normalize_order(form, 100000).record["_computed"]
        assert computed == {
            "kgCeil": 2,
            "totalPembayaran": 400000,
            "totalKeuntungan": 100000,
            "unitPriceAtSave": 100000,
            "useAutoJastip": True,
        }

    def test_customer_required(self, form):
        form.nama_pelanggan = "   "
        result = normalize_order(form, 100000)
        assert not result.save_ready
        assert MSG_CUSTOMER_REQUIRED in result.errors
        # still fully populated for the preview
        assert result.record["totalPembayaran"] == 400000

    def test_negative_profit_blocks_save(self):
        result = normalize_order(
            OrderForm(nama_pelanggan="Ani", jumlah_kg=1, harga_jastip=1, use_auto_mode=False),
            100000,
        )
        assert result.record["totalKeuntungan"] == -1
        assert not result.save_ready
        assert len(result.errors) == 1

    def test_zero_profit_is_allowed(self):
        result = normalize_order(
            OrderForm(nama_pelanggan="Ani", harga_jastip=100, harga_jastip_markup=100, use_auto_mode=False),
            100000,
        )
        assert result.record["totalKeuntungan"] == 0
        assert result.save_ready

    def test_manual_mode_keeps_ongkir(self, form):
        form.use_auto_mode = False
        form.harga_ongkir = "50.000"
        rec = normalize_order(form, 100000).record
        assert rec["hargaOngkir"] == 50000
        assert rec["totalPembayaran"] == 250000
        assert rec["_computed"]["useAutoJastip"] is False

    def test_negative_amounts_clamped(self, form):
        form.harga_jastip = "-5000"
        form.jumlah_kg = "-3"
        rec = normalize_order(form, 100000).record
        assert rec["hargaJastip"] == 0
        assert rec["jumlahKg"] == 0
        assert rec["hargaOngkir"] == 0

    def test_garbage_numbers_default_to_zero(self, form):
        form.harga_jastip_markup = "abc"
        rec = normalize_order(form, 100000).record
        assert rec["hargaJastipMarkup"] == 0

    @pytest.mark.parametrize("tag,expected", [("jpy", "JPY"), ("IDR", "IDR"), ("EUR", "IDR"), ("", "IDR")])
    def test_currency_tag(self, form, tag, expected):
        form.tipe_nominal = tag
        assert normalize_order(form, 100000).record["tipeNominal"] == expected

    def test_date_object(self, form):
        form.tanggal = datetime.date(2025, 2, 3)
        assert normalize_order(form, 100000).record["tanggal"] == "2025-02-03"


# =============================================================================
# SEED
# =============================================================================

class TestSeedForm:
    """Stored order -> form state for editing."""

    def test_defaults_without_order(self):
        assert seed_form() == OrderForm()

    def test_snapshot_mode_wins(self):
        form = seed_form({"hargaOngkir": 50000, "_computed": {"useAutoJastip": True}})
        assert form.use_auto_mode is True

    def test_legacy_order_with_ongkir_is_manual(self):
        assert seed_form({"hargaOngkir": 50000}).use_auto_mode is False

    def test_legacy_order_without_ongkir_is_auto(self):
        assert seed_form({"hargaOngkir": None}).use_auto_mode is True

    def test_round_trip_keeps_totals(self, form):
        rec = normalize_order(form, 100000).record
        again = normalize_order(seed_form(rec), 100000).record
        assert again["totalPembayaran"] == rec["totalPembayaran"]
        assert again["totalKeuntungan"] == rec["totalKeuntungan"]

    def test_legacy_currency_field(self):
        assert seed_form({"currency": "JPY"}).tipe_nominal == "JPY"


# =============================================================================
# HELPERS
# =============================================================================

class TestOrderHelpers:

    def test_generate_order_no(self):
        existing = ["ORD-20250105-001", "ORD-20250105-002", "ORD-20250104-001", None]
        assert generate_order_no(existing, datetime.date(2025, 1, 5)) == "ORD-20250105-003"

    def test_generate_first_order_of_day(self):
        assert generate_order_no([], datetime.date(2025, 1, 6)) == "ORD-20250106-001"

    def test_new_order_form(self):
        form = new_order_form([], ["Ani", "Budi"], 100000)
        assert form.nama_pelanggan == "Ani"
        assert form.harga_ongkir == 100000
        assert form.no.startswith("ORD-")
        assert form.use_auto_mode

    def test_matches_search(self):
        order = {"no": "ORD-1", "namaBarang": "Matcha", "namaPelanggan": "Ani", "catatan": None}
        assert matches_search(order, "")
        assert matches_search(order, "matcha")
        assert matches_search(order, " ani ")
        assert not matches_search(order, "budi")


class TestRecalculateOrders:
    """A new unit price only moves auto-mode orders."""

    def test_only_auto_orders(self):
        orders = [
            {"id": "a", "namaPelanggan": "Ani", "jumlahKg": 2.5, "hargaOngkir": 300000,
             "_computed": {"useAutoJastip": True}},
            {"id": "b", "namaPelanggan": "Budi", "jumlahKg": 1, "hargaOngkir": 80000,
             "_computed": {"useAutoJastip": False}},
        ]
        result = recalculate_orders(orders, 120000)
        assert [order_id for order_id, _ in result] == ["a"]
        rec = result[0][1].record
        assert rec["hargaOngkir"] == 360000
        assert rec["_computed"]["unitPriceAtSave"] == 120000
