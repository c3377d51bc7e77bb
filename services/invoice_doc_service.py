# services/invoice_doc_service.py

import io
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH

from config import Settings
from domain.models import InvoiceSummary
from services.invoice_service import price_notes
from utils.dates import format_readable_date
from utils.docx_helpers import GREY, NAVY, add_paragraph, add_table
from utils.formatting import format_currency

logger = logging.getLogger(__name__)

ITEM_HEADER = ["Nama Barang", "Kategori", "Kg", "Subtotal (Markup)"]


def build_invoice_document(
        summary: InvoiceSummary,
        settings: Settings,
        customer: Optional[Dict[str, Any]] = None,
        customer_name: str = "",
        order_date: str = "",
        status: str = "",
        pengiriman: str = "",
):
    """
    Build the invoice Word document:
      - header with business name and contact
      - "Ditagihkan kepada" block, status and shipping location
      - one row per invoice line (markup subtotal)
      - Subtotal / Biaya Admin / Total
      - per-kg markup notes
    """
    cur = summary.currency.value
    doc = Document()

    add_paragraph(doc, "INVOICE", bold=True, size=16, color=NAVY)
    add_paragraph(doc, f"Tanggal: {format_readable_date(order_date) or '-'}")

    add_paragraph(doc, settings.business_name, bold=True, color=NAVY, align=WD_ALIGN_PARAGRAPH.RIGHT)
    add_paragraph(doc, settings.business_address, color=GREY, align=WD_ALIGN_PARAGRAPH.RIGHT)
    add_paragraph(doc, settings.business_contact, color=GREY, align=WD_ALIGN_PARAGRAPH.RIGHT)

    add_paragraph(doc, "Ditagihkan kepada", color=GREY)
    add_paragraph(doc, customer_name or (customer or {}).get("nama") or "-", bold=True)
    if customer and customer.get("telpon"):
        add_paragraph(doc, str(customer["telpon"]))

    add_paragraph(doc, f"Status: {status or '-'}", align=WD_ALIGN_PARAGRAPH.RIGHT)
    add_paragraph(doc, f"Pengiriman: {pengiriman or '-'}", color=GREY, align=WD_ALIGN_PARAGRAPH.RIGHT)

    add_table(
        doc,
        ITEM_HEADER,
        (
            [line.nama_barang, line.kategori, str(line.kg), format_currency(line.line_total, cur)]
            for line in summary.lines
        ),
        right_aligned=(2, 3),
    )

    doc.add_paragraph()
    add_table(
        doc,
        ["Ringkasan", "Jumlah"],
        [
            ["Subtotal (Markup)", format_currency(summary.subtotal, cur)],
            ["Biaya Admin", format_currency(summary.admin_fee, cur)],
            ["Total", format_currency(summary.grand_total, cur)],
        ],
        right_aligned=(1,),
    )

    notes = price_notes(summary.lines)
    if notes:
        add_paragraph(doc, "Catatan harga", bold=True, color=NAVY)
        for note in notes.splitlines():
            add_paragraph(doc, note, color=GREY)

    if summary.mixed_currency:
        add_paragraph(doc, f"* Total ditampilkan dalam {cur} tanpa konversi kurs.", color=GREY)

    return doc


def render_invoice_docx(summary: InvoiceSummary, settings: Settings, **kwargs) -> bytes:
    """Invoice as .docx bytes, ready for st.download_button."""
    doc = build_invoice_document(summary, settings, **kwargs)
    buf = io.BytesIO()
    doc.save(buf)
    logger.info("Rendered invoice with %d lines, total %s", len(summary.lines), summary.grand_total)
    return buf.getvalue()


def invoice_filename(customer_name: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    safe = "_".join((customer_name or "pelanggan").split())
    return f"Invoice - {safe} - {now.strftime('%Y%m%d_%H%M%S')}.docx"
