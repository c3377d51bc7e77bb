# domain/models.py

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

Amount = Union[int, float]


class Currency(str, Enum):
    IDR = "IDR"
    JPY = "JPY"

    @classmethod
    def parse(cls, value: Optional[str], default: "Currency" = None) -> "Currency":
        """Empty or unknown tags fall back to the base currency."""
        fallback = default or cls.IDR
        if not value:
            return fallback
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return fallback


STATUS_BARU = ["Belum Membayar", "Pembayaran Selesai", "Sedang Pengiriman", "Sudah Diterima"]
STATUS_LAMA = ["Pending", "Diproses", "Selesai", "Dibatalkan"]
ORDER_STATUSES = STATUS_BARU + STATUS_LAMA
DONE_STATUSES = frozenset({"Selesai", "Sudah Diterima", "Dibatalkan"})
DEFAULT_STATUS = "Belum Membayar"

CATEGORY_OPTIONS = [
    "Makanan & Minuman",
    "Kesehatan & Suplemen",
    "Skin Care & Kosmetik",
    "Fashion & Pakaian",
    "Tas & Aksesoris",
    "Sepatu",
    "Elektronik",
    "Buku & Mainan",
    "Perlengkapan Rumah Tangga",
    "Hobi & Koleksi",
    "Lainnya",
]

DEFAULT_PENGIRIMAN = "INDO - JPG"


@dataclass
class ShipmentCharge:
    """
    Pricing inputs of one order. Rebuilt every time the order form renders,
    frozen into the order record on submit.
    """
    weight_kg: float
    unit_price_per_kg: int
    base_jastip: Amount = 0
    jastip_markup: Amount = 0
    base_ongkir: Amount = 0
    ongkir_markup: Amount = 0
    use_auto_mode: bool = True


@dataclass(frozen=True)
class ChargeTotals:
    total_pembayaran: Amount  # cost side: base jastip + base ongkir
    total_keuntungan: Amount  # line_total - total_pembayaran
    line_total: Amount  # customer side: jastip markup + ongkir markup


@dataclass
class OrderForm:
    """Raw order form state, values as typed by the user."""
    no: str = ""
    tanggal: str = ""
    nama_barang: str = ""
    kategori: str = ""
    id_pelanggan: str = ""
    nama_pelanggan: str = ""
    jumlah_kg: Any = 1
    pengiriman: str = DEFAULT_PENGIRIMAN
    status: str = DEFAULT_STATUS
    catatan: str = ""
    tipe_nominal: str = "IDR"
    harga_jastip: Any = 0
    harga_jastip_markup: Any = 0
    harga_ongkir: Any = 0
    harga_ongkir_markup: Any = 0
    use_auto_mode: bool = True


@dataclass
class NormalizedOrder:
    record: Dict[str, Any]
    charge: ShipmentCharge
    totals: ChargeTotals
    errors: List[str] = field(default_factory=list)

    @property
    def save_ready(self) -> bool:
        return not self.errors


@dataclass
class InvoiceLine:
    order_id: Optional[str]
    nama_barang: str
    kategori: str
    kg: int
    base_jastip: Amount
    jastip_markup: Amount
    base_ongkir: Amount
    ongkir_markup: Amount
    line_total: Amount
    keuntungan: Amount
    currency: Currency


@dataclass
class InvoiceSummary:
    lines: List[InvoiceLine]
    subtotal: Amount
    currency: Currency
    admin_fee: Amount = 0
    total_keuntungan: Amount = 0
    mixed_currency: bool = False

    @property
    def grand_total(self) -> Amount:
        return self.subtotal + self.admin_fee


@dataclass
class MonthPoint:
    key: str  # "2025-03"
    label: str  # "Mar 25"
    total: Amount = 0
    count: int = 0
    profit: Amount = 0


@dataclass
class DashboardSummary:
    order_count: int
    active_orders: int
    customer_count: int
    total_revenue: Amount
    total_profit: Amount
    period_label: str
    months: List[MonthPoint]


LEDGER_TYPES = ("Masuk", "Keluar")
LEDGER_CATEGORIES = ["Keuntungan Bulanan", "Operasional", "Investasi", "Refund", "Lainnya"]
LEDGER_METHODS = ["Cash", "Transfer", "E-Wallet"]
MONTHLY_PROFIT_CATEGORY = "Keuntungan Bulanan"


@dataclass
class LedgerSummary:
    total_masuk: Amount
    total_keluar: Amount

    @property
    def saldo(self) -> Amount:
        return self.total_masuk - self.total_keluar


PIC_OPTIONS = ["Diny", "Mizwar", "Zakiya", "Yua", "Candra"]
PLATFORM_OPTIONS = ["Shopee", "Tokopedia", "TikTok", "Manual"]


@dataclass
class PurchaseGroup:
    """Purchase items shipped on one date, nested by PIC then customer."""
    shipping_date: str
    total: int = 0
    done: int = 0
    pics: Dict[str, Dict[str, List[Dict[str, Any]]]] = field(default_factory=dict)


@dataclass
class PurchaseStats:
    total: int
    done: int

    @property
    def pending(self) -> int:
        return self.total - self.done
