"""
Tests for the supabase data layer, run against the in-memory client from
conftest.py.

Run with: pytest tests/test_data_integrator.py -v
"""

import pytest

import data_integrator as di
from domain.models import OrderForm
from services.order_service import normalize_order


def normalized(no="ORD-20250105-001", customer="Ani", **kw):
    form = OrderForm(
        no=no,
        tanggal=kw.pop("tanggal", "2025-01-05"),
        nama_pelanggan=customer,
        jumlah_kg=kw.pop("jumlah_kg", 1.2),
        harga_jastip=200000,
        harga_jastip_markup=250000,
        harga_ongkir_markup=250000,
        **kw,
    )
    return normalize_order(form, 100000)


# =============================================================================
# SETTINGS
# =============================================================================

class TestUnitPrice:

    def test_default_without_row(self, fake_db):
        assert di.fetch_unit_price() == 100000

    def test_save_and_fetch(self, fake_db):
        ok, _ = di.save_unit_price("150.000")
        assert ok
        assert di.fetch_unit_price() == 150000
        ok, _ = di.save_unit_price(175000)
        assert ok
        assert di.fetch_unit_price() == 175000
        assert len(fake_db.rows(di.SETTINGS)) == 1

    @pytest.mark.parametrize("value", [0, "", "abc", -5])
    def test_rejects_non_positive(self, fake_db, value):
        ok, _ = di.save_unit_price(value)
        assert not ok
        assert fake_db.rows(di.SETTINGS) == []

    def test_lookup_failure_uses_default(self, fake_db, monkeypatch):
        def broken():
            raise ConnectionError("down")

        monkeypatch.setattr(di, "get_supabase", broken)
        assert di.fetch_unit_price() == 100000


# =============================================================================
# ORDERS
# =============================================================================

class TestOrders:

    def test_insert(self, fake_db):
        ok, _, row = di.save_order(normalized())
        assert ok
        assert row["id"]
        assert row["createdAt"] == row["updatedAt"]
        assert row["totalKeuntungan"] == 100000
        assert row["_computed"]["unitPriceAtSave"] == 100000

    def test_refuses_invalid(self, fake_db):
        ok, msg, row = di.save_order(normalized(customer=""))
        assert not ok
        assert "Nama pelanggan" in msg
        assert row is None
        assert fake_db.rows(di.ORDERS) == []

    def test_update(self, fake_db):
        _, _, row = di.save_order(normalized())
        ok, _, saved = di.save_order(normalized(jumlah_kg=3), order_id=row["id"])
        assert ok
        assert saved["hargaOngkir"] == 300000
        assert len(fake_db.rows(di.ORDERS)) == 1

    def test_filters_and_sort(self, fake_db):
        di.save_order(normalized("ORD-1", tanggal="2025-01-01"))
        di.save_order(normalized("ORD-2", tanggal="2025-01-15", status="Selesai"))
        di.save_order(normalized("ORD-3", tanggal="2025-02-01"))

        ok, _, rows = di.fetch_orders(date_from="2025-01-01", date_to="2025-01-31")
        assert ok
        assert [r["no"] for r in rows] == ["ORD-2", "ORD-1"]

        _, _, rows = di.fetch_orders(status="Selesai", use_default_window=False)
        assert [r["no"] for r in rows] == ["ORD-2"]

        _, _, rows = di.fetch_orders(sort="asc", use_default_window=False, limit=2)
        assert [r["no"] for r in rows] == ["ORD-1", "ORD-2"]

    def test_page(self, fake_db):
        for day in range(1, 6):
            di.save_order(normalized(f"ORD-{day}", tanggal=f"2025-01-0{day}"))
        _, _, rows = di.fetch_orders_page(page_size=2, page=1)
        assert [r["no"] for r in rows] == ["ORD-3", "ORD-2"]

    def test_delete(self, fake_db):
        _, _, row = di.save_order(normalized())
        assert di.delete_order(row["id"]) == (True, "Deleted")
        assert fake_db.rows(di.ORDERS) == []

    def test_profit_between(self, fake_db):
        di.save_order(normalized("ORD-1", tanggal="2025-01-01"))
        di.save_order(normalized("ORD-2", tanggal="2025-01-31"))
        di.save_order(normalized("ORD-3", tanggal="2025-02-01"))
        assert di.fetch_profit_between("2025-01-01", "2025-01-31") == (True, "Fetched", 200000)
        ok, _, total = di.fetch_profit_between("", "2025-01-31")
        assert not ok
        assert total == 0

    def test_set_currency(self, fake_db):
        di.save_order(normalized("ORD-1"))
        di.save_order(normalized("ORD-2"))
        ok, _, count = di.set_currency_for_all_orders("JPY")
        assert ok
        assert count == 2
        assert {r["tipeNominal"] for r in fake_db.rows(di.ORDERS)} == {"JPY"}


class TestApplyUnitPrice:

    def test_without_recalc(self, fake_db):
        di.save_order(normalized(jumlah_kg=2.5))
        ok, _ = di.apply_unit_price(120000)
        assert ok
        assert fake_db.rows(di.ORDERS)[0]["hargaOngkir"] == 300000

    def test_recalc_only_auto_orders(self, fake_db):
        di.save_order(normalized("ORD-A", jumlah_kg=1.2))
        manual = normalized("ORD-M", jumlah_kg=1.2, use_auto_mode=False, harga_ongkir=80000)
        di.save_order(manual)

        ok, msg = di.apply_unit_price(120000, recalc=True)
        assert ok, msg
        by_no = {r["no"]: r for r in fake_db.rows(di.ORDERS)}
        assert by_no["ORD-A"]["hargaOngkir"] == 240000
        assert by_no["ORD-A"]["totalKeuntungan"] == 60000
        assert by_no["ORD-A"]["_computed"]["unitPriceAtSave"] == 120000
        assert by_no["ORD-M"]["hargaOngkir"] == 80000
        assert di.fetch_unit_price() == 120000

    def test_recalc_reports_orders_that_turn_unprofitable(self, fake_db):
        di.save_order(normalized("ORD-A", jumlah_kg=2.5))
        ok, msg = di.apply_unit_price(120000, recalc=True)
        assert not ok
        assert "ORD-A" in msg
        # price is saved, the order keeps its old values
        assert di.fetch_unit_price() == 120000
        assert fake_db.rows(di.ORDERS)[0]["hargaOngkir"] == 300000


# =============================================================================
# CUSTOMERS / LEDGER / PURCHASES
# =============================================================================

class TestCustomers:

    def test_crud(self, fake_db):
        ok, _, row = di.insert_customer({"nama": "Ani", "alamat": "", "telpon": "0812"})
        assert ok
        assert row["createdAt"]
        assert di.is_exist(di.CUSTOMERS, "nama", "ani")

        ok, _, updated = di.update_customer(row["id"], {"nama": "Ani W"})
        assert ok
        assert updated["nama"] == "Ani W"

        _, _, rows = di.fetch_customers()
        assert [r["nama"] for r in rows] == ["Ani W"]

        assert di.delete_customer(row["id"])[0]
        assert di.fetch_customers() == (True, "No rows found", [])

    def test_update_unknown(self, fake_db):
        ok, msg, _ = di.update_customer("missing", {"nama": "X"})
        assert not ok
        assert "not found" in msg


class TestLedger:

    def test_fetch_parses_amounts(self, fake_db):
        fake_db.seed(di.LEDGER, [
            {"tanggal": "2025-11-01", "tipe": "Masuk", "jumlah": "500.000"},
            {"tanggal": "2025-11-02", "tipe": "Keluar", "jumlah": 20000},
            {"tanggal": "2025-12-01", "tipe": "Keluar", "jumlah": 1},
        ])
        ok, _, rows = di.fetch_ledger(date_from="2025-11-01", date_to="2025-11-30")
        assert ok
        assert [r["jumlah"] for r in rows] == [20000, 500000]

        _, _, rows = di.fetch_ledger(tipe="Masuk", direction="asc")
        assert len(rows) == 1

    def test_insert_update_delete(self, fake_db):
        ok, _, row = di.insert_ledger_entry({"tanggal": "2025-11-01", "tipe": "Masuk", "jumlah": 1})
        assert ok
        assert di.update_ledger_entry(row["id"], {"jumlah": 2})[2]["jumlah"] == 2
        assert di.delete_ledger_entry(row["id"])[0]


class TestPurchases:

    def test_insert_toggle_delete(self, fake_db):
        ok, msg, rows = di.insert_purchases([
            {"name": "Pocky", "shippingDate": "2025-01-10", "isDone": False},
            {"name": "Kitkat", "shippingDate": "2025-01-05", "isDone": False},
        ])
        assert ok
        assert msg == "2 item disimpan"

        _, _, items = di.fetch_purchases()
        assert [i["name"] for i in items] == ["Kitkat", "Pocky"]

        ok, _, toggled = di.toggle_purchase_done(items[0]["id"], False)
        assert ok
        assert toggled["isDone"] is True

        ok, _, edited = di.update_purchase(items[1]["id"], {"note": "2 box"})
        assert ok
        assert edited["note"] == "2 box"

        assert di.delete_purchase(items[1]["id"])[0]
        assert len(fake_db.rows(di.PURCHASES)) == 1

    def test_insert_without_drafts(self, fake_db):
        assert di.insert_purchases([]) == (False, "Tidak ada draft untuk disimpan", [])

    def test_purchase_customers(self, fake_db):
        assert not di.insert_purchase_customer("  ")[0]
        assert di.insert_purchase_customer(" Budi ")[0]
        _, _, rows = di.fetch_purchase_customers()
        assert [r["nama"] for r in rows] == ["Budi"]
