import argparse
import csv
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from supabase import Client

from config import configure_logging, get_settings
from data_integrator import fetch_unit_price, get_supabase
from domain.models import OrderForm
from services.customer_service import validate_customer
from services.order_service import normalize_order

logger = logging.getLogger(__name__)

BATCH_SIZE = 500

# CSV header -> OrderForm field
ORDER_CSV_FIELDS = {
    "no": "no",
    "tanggal": "tanggal",
    "idPelanggan": "id_pelanggan",
    "namaPelanggan": "nama_pelanggan",
    "namaBarang": "nama_barang",
    "kategori": "kategori",
    "jumlahKg": "jumlah_kg",
    "pengiriman": "pengiriman",
    "status": "status",
    "catatan": "catatan",
    "tipeNominal": "tipe_nominal",
    "hargaJastip": "harga_jastip",
    "hargaJastipMarkup": "harga_jastip_markup",
    "hargaOngkir": "harga_ongkir",
    "hargaOngkirMarkup": "harga_ongkir_markup",
}
TRUE_VALUES = {"1", "true", "ya", "yes", "y"}


def chunked(items: List[Dict], size: int) -> Iterable[List[Dict]]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


def read_csv(file_name: str) -> Tuple[List[Dict], List[str]]:
    """
    Reads a headered CSV and returns (rows, columns_from_header).
    Strips whitespace from headers and values.
    """
    with open(file_name, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames:
            raise ValueError("CSV has no header row. Add headers that match the order fields.")

        columns = [c.strip() for c in reader.fieldnames if c and c.strip()]
        rows: List[Dict] = []

        for r in reader:
            obj = {}
            for k, v in r.items():
                if not k:
                    continue
                key = k.strip()
                val = v.strip() if isinstance(v, str) else v
                # empty cells become None so defaults apply
                if isinstance(val, str) and val == "":
                    val = None
                obj[key] = val

            obj = {c: obj.get(c) for c in columns}
            rows.append(obj)

    return rows, columns


def dedupe_rows(rows: List[Dict], key_cols: List[str]) -> List[Dict]:
    """
    Deduplicate rows in-memory using key_cols.
    Keeps first occurrence, skips rows missing any key value.
    """
    seen = set()
    out: List[Dict] = []

    for r in rows:
        key = tuple((r.get(c) or "").strip() if isinstance(r.get(c), str) else (r.get(c) or "") for c in key_cols)
        if any(k == "" for k in key):
            continue
        if key in seen:
            continue
        seen.add(key)
        out.append(r)

    return out


def order_form_from_row(row: Dict) -> OrderForm:
    kwargs = {field: row[col] for col, field in ORDER_CSV_FIELDS.items() if row.get(col) is not None}
    auto = row.get("useAutoJastip")
    if auto is not None:
        kwargs["use_auto_mode"] = str(auto).strip().lower() in TRUE_VALUES
    else:
        # a CSV that carries ongkir already has the amount fixed
        kwargs["use_auto_mode"] = row.get("hargaOngkir") is None
    return OrderForm(**kwargs)


def normalize_order_rows(rows: List[Dict], unit_price: int) -> Tuple[List[Dict], List[str]]:
    """
    Run every CSV row through the order normalizer.
    Returns (save_ready_records, skipped_messages)
    """
    records: List[Dict] = []
    skipped: List[str] = []
    for line_no, row in enumerate(rows, start=2):
        normalized = normalize_order(order_form_from_row(row), unit_price)
        if not normalized.save_ready:
            skipped.append(f"baris {line_no}: {' '.join(normalized.errors)}")
            continue
        records.append(normalized.record)
    return records, skipped


def _upsert_batches(
        supabase: Client,
        schema_name: str,
        table_name: str,
        rows: List[Dict],
        conflict_cols: List[str],
        batch_size: int,
) -> int:
    total = 0
    for batch in chunked(rows, batch_size):
        supabase.schema(schema_name).table(table_name).upsert(
            batch,
            on_conflict=",".join(conflict_cols),
        ).execute()
        total += len(batch)
        logger.info("Upserted %d rows into %s (running total: %d)", len(batch), table_name, total)
    return total


def load_orders_from_csv(
        supabase: Client,
        schema_name: str,
        file_name: str,
        unit_price: int,
        batch_size: int = BATCH_SIZE,
) -> Tuple[int, List[str]]:
    """
    Import orders from CSV. Rows are normalized exactly like the order form
    and rows that would not pass the form's validation are skipped.
    Returns (upserted_count, skipped_messages)
    """
    rows, header_cols = read_csv(file_name)
    missing = [c for c in ("no", "namaPelanggan", "jumlahKg") if c not in header_cols]
    if missing:
        raise ValueError(f"CSV missing columns: {missing}. Found: {header_cols}")

    records, skipped = normalize_order_rows(dedupe_rows(rows, ["no"]), unit_price)
    for msg in skipped:
        logger.warning("Skipped order %s", msg)

    if not records:
        logger.info("No valid orders to insert (after dedupe / validation).")
        return 0, skipped

    total = _upsert_batches(supabase, schema_name, "orders", records, ["no"], batch_size)
    logger.info("Done: %s.orders <- %s (%d orders, %d skipped)", schema_name, file_name, total, len(skipped))
    return total, skipped


def load_customers_from_csv(
        supabase: Client,
        schema_name: str,
        file_name: str,
        batch_size: int = BATCH_SIZE,
) -> Tuple[int, List[str]]:
    rows, header_cols = read_csv(file_name)
    if "nama" not in header_cols:
        raise ValueError(f"CSV missing columns: ['nama']. Found: {header_cols}")

    customers: List[Dict] = []
    skipped: List[str] = []
    for line_no, row in enumerate(dedupe_rows(rows, ["nama"]), start=2):
        ok, msg, cleaned = validate_customer(row)
        if not ok:
            skipped.append(f"baris {line_no}: {msg}")
            continue
        customers.append(cleaned)

    if not customers:
        return 0, skipped

    total = _upsert_batches(supabase, schema_name, "customer", customers, ["nama"], batch_size)
    logger.info("Done: %s.customer <- %s (%d unique rows)", schema_name, file_name, total)
    return total, skipped


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Import orders or customers from CSV into Supabase")
    parser.add_argument("kind", choices=["orders", "customers"])
    parser.add_argument("file_name")
    parser.add_argument("--unit-price", type=int, default=None, help="price per kg for auto-mode rows")
    parser.add_argument("--batch-size", type=int, default=BATCH_SIZE)
    args = parser.parse_args(argv)

    configure_logging()
    settings = get_settings()

    supabase = get_supabase()
    if args.kind == "orders":
        unit_price = args.unit_price or fetch_unit_price()
        load_orders_from_csv(supabase, settings.schema, args.file_name, unit_price, args.batch_size)
    else:
        load_customers_from_csv(supabase, settings.schema, args.file_name, args.batch_size)


if __name__ == "__main__":
    main()
