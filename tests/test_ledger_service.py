"""
Unit tests for the cash book (buku kas).

Run with: pytest tests/test_ledger_service.py -v
"""

import pytest

from domain.models import MONTHLY_PROFIT_CATEGORY
from services.ledger_service import (
    filter_ledger,
    ledger_categories,
    ledger_frame,
    monthly_profit_description,
    normalize_ledger_entry,
    summarize_ledger,
)


@pytest.fixture
def raw_entry():
    return {
        "tanggal": "2025-11-05",
        "tipe": "Keluar",
        "kategori": "Operasional",
        "keterangan": "Lakban",
        "metode": "Cash",
        "jumlah": "Rp 1.500.000",
        "catatan": "  ",
    }


@pytest.fixture
def entries():
    return [
        {"id": 1, "tanggal": "2025-11-01", "tipe": "Masuk", "kategori": "Keuntungan Bulanan", "keterangan": "Laba", "jumlah": 500000},
        {"id": 2, "tanggal": "2025-11-02", "tipe": "Keluar", "kategori": "Operasional", "keterangan": "Lakban", "jumlah": 20000},
        {"id": 3, "tanggal": "2025-11-03", "tipe": "Keluar", "kategori": None, "keterangan": "Bensin", "jumlah": "30.000"},
    ]


class TestNormalizeLedgerEntry:

    def test_valid_entry(self, raw_entry):
        ok, msg, payload = normalize_ledger_entry(raw_entry, created_at=123)
        assert ok, msg
        assert payload["jumlah"] == 1500000
        assert payload["catatan"] is None
        assert payload["createdAt"] == 123

    def test_existing_created_at_is_kept(self, raw_entry):
        raw_entry["createdAt"] = 42
        _, _, payload = normalize_ledger_entry(raw_entry, created_at=123)
        assert payload["createdAt"] == 42

    def test_date_required(self, raw_entry):
        raw_entry["tanggal"] = ""
        assert normalize_ledger_entry(raw_entry) == (False, "Tanggal wajib diisi", None)

    def test_unknown_type(self, raw_entry):
        raw_entry["tipe"] = "Transfer"
        ok, _, _ = normalize_ledger_entry(raw_entry)
        assert not ok

    @pytest.mark.parametrize("jumlah", ["0", "", "abc", "-100"])
    def test_amount_must_be_positive(self, raw_entry, jumlah):
        raw_entry["jumlah"] = jumlah
        ok, msg, _ = normalize_ledger_entry(raw_entry)
        assert not ok
        assert msg == "Jumlah tidak valid atau nol."

    def test_monthly_profit_needs_description(self, raw_entry):
        raw_entry.update({"tipe": "Masuk", "kategori": MONTHLY_PROFIT_CATEGORY, "keterangan": ""})
        ok, msg, _ = normalize_ledger_entry(raw_entry)
        assert not ok
        assert "hitung keuntungan" in msg


class TestLedgerViews:

    def test_summary(self, entries):
        summary = summarize_ledger(entries)
        assert summary.total_masuk == 500000
        assert summary.total_keluar == 50000
        assert summary.saldo == 450000

    def test_filter_by_query(self, entries):
        assert [e["id"] for e in filter_ledger(entries, "lakban")] == [2]

    def test_filter_by_type_and_category(self, entries):
        assert [e["id"] for e in filter_ledger(entries, tipe="Keluar")] == [2, 3]
        assert [e["id"] for e in filter_ledger(entries, kategori="Operasional")] == [2]

    def test_categories(self, entries):
        assert ledger_categories(entries) == ["Keuntungan Bulanan", "Operasional"]

    def test_profit_description(self):
        assert monthly_profit_description("2025-11-01", "2025-11-30") == \
            "Laba bersih periode 1 November 2025 - 30 November 2025"

    def test_frame_columns(self, entries):
        df = ledger_frame(entries)
        assert list(df.columns) == ["id", "Tanggal", "Tipe", "Kategori", "Keterangan", "Metode", "Jumlah", "Catatan"]
