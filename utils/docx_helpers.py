from typing import Iterable, Optional, Sequence

from docx.document import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt, RGBColor

NAVY = RGBColor(0x0A, 0x23, 0x42)
GREY = RGBColor(0x6B, 0x6B, 0x6B)


def set_cell_text(cell, text: str, bold: bool = False, align: Optional[int] = None, color: Optional[RGBColor] = None) -> None:
    """
    Replace the text of a table cell with a single run.
    """
    p = cell.paragraphs[0]
    for run in p.runs:
        run.text = ""
    run = p.add_run(text)
    run.bold = bold
    if color is not None:
        run.font.color.rgb = color
    if align is not None:
        p.alignment = align


def add_paragraph(doc: Document, text: str, bold: bool = False, size: Optional[int] = None,
                  color: Optional[RGBColor] = None, align: Optional[int] = None):
    p = doc.add_paragraph()
    run = p.add_run(text)
    run.bold = bold
    if size:
        run.font.size = Pt(size)
    if color is not None:
        run.font.color.rgb = color
    if align is not None:
        p.alignment = align
    return p


def add_table(doc: Document, header: Sequence[str], rows: Iterable[Sequence[str]],
              right_aligned: Sequence[int] = ()):
    """
    Grid table with a bold header row. Columns listed in `right_aligned`
    are right aligned (amounts, kg).
    """
    table = doc.add_table(rows=1, cols=len(header))
    table.style = "Table Grid"

    for i, title in enumerate(header):
        set_cell_text(table.rows[0].cells[i], title, bold=True, color=NAVY)

    for values in rows:
        cells = table.add_row().cells
        for i, value in enumerate(values):
            align = WD_ALIGN_PARAGRAPH.RIGHT if i in right_aligned else None
            set_cell_text(cells[i], str(value), align=align)

    return table
