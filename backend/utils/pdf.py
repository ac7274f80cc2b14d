# backend/utils/pdf.py
import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from models.product import Product
from models.stock import MovementType, StockMovement
from schemas.stock import REMOVED_PRODUCT_LABEL

logger = logging.getLogger(__name__)

# Konfiguracja czcionek (DejaVu if shipped with the app, Helvetica otherwise)
FONT_DIR = Path(__file__).resolve().parents[1] / "assets" / "fonts"
FONT_REGULAR_PATH = FONT_DIR / "DejaVuSans.ttf"
FONT_BOLD_PATH = FONT_DIR / "DejaVuSans-Bold.ttf"

FONT_REGULAR_NAME = "Helvetica"
FONT_BOLD_NAME = "Helvetica-Bold"

HEADER_FILL = (26 / 255, 65 / 255, 115 / 255)

MOVEMENT_TYPE_LABELS = {
    MovementType.ENTRY.value: "Entry",
    MovementType.EXIT.value: "Exit",
}

_fonts_inited = False
def _init_fonts():
    """Registers DejaVu fonts in ReportLab when the TTF files are present."""
    global _fonts_inited, FONT_REGULAR_NAME, FONT_BOLD_NAME
    if _fonts_inited:
        return
    _fonts_inited = True

    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.ttfonts import TTFont

    if not FONT_REGULAR_PATH.exists():
        return
    try:
        pdfmetrics.registerFont(TTFont("DejaVuSans", str(FONT_REGULAR_PATH)))
        FONT_REGULAR_NAME = FONT_BOLD_NAME = "DejaVuSans"
        if FONT_BOLD_PATH.exists():
            pdfmetrics.registerFont(TTFont("DejaVuSans-Bold", str(FONT_BOLD_PATH)))
            FONT_BOLD_NAME = "DejaVuSans-Bold"
    except Exception as e:
        logger.warning("Font init warning: %s", e)


def _draw_table(c, y: float, columns: Sequence[tuple], rows: Iterable[Sequence[str]], *, top: float, bottom: float, size: int = 8) -> float:
    """Draws a header bar and rows; `columns` holds (title, x, max_chars). Returns the next free y."""
    from reportlab.lib.units import mm

    def header(at_y):
        c.setFillColorRGB(*HEADER_FILL)
        c.rect(columns[0][1] - 2 * mm, at_y - 2 * mm, columns[-1][1] + 40 * mm - columns[0][1], 7 * mm, fill=1, stroke=0)
        c.setFillColorRGB(1, 1, 1)
        c.setFont(FONT_BOLD_NAME, size)
        for title, x, _ in columns:
            c.drawString(x, at_y, title)
        c.setFillColorRGB(0, 0, 0)
        c.setFont(FONT_REGULAR_NAME, size)
        return at_y - 7 * mm

    y = header(y)
    for row in rows:
        if y < bottom:
            c.showPage()
            y = header(top)
        for (_, x, max_chars), value in zip(columns, row):
            c.drawString(x, y, str(value if value is not None else "")[:max_chars])
        c.setLineWidth(0.1)
        c.line(columns[0][1] - 2 * mm, y - 2 * mm, columns[-1][1] + 38 * mm, y - 2 * mm)
        y -= 5.5 * mm
    return y


def generate_stock_pdf(products: List[Product], generated_at: Optional[datetime] = None) -> bytes:
    """Current stock listing (code, description, quantity, unit) on A4 portrait."""
    from reportlab.lib.pagesizes import A4
    from reportlab.pdfgen import canvas
    from reportlab.lib.units import mm

    _init_fonts()
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    generated_at = generated_at or datetime.now()

    y = height - 18 * mm
    c.setFont(FONT_BOLD_NAME, 14)
    c.drawString(14 * mm, y, "Current Stock - Storeroom")
    y -= 8 * mm
    c.setFont(FONT_REGULAR_NAME, 10)
    c.drawString(14 * mm, y, f"Generated at: {generated_at:%Y-%m-%d %H:%M}")
    y -= 10 * mm

    columns = [
        ("Code", 16 * mm, 10),
        ("Description", 34 * mm, 60),
        ("Quantity", 140 * mm, 12),
        ("Unit", 165 * mm, 12),
    ]
    rows = ((p.code, p.description, p.quantity, p.unit) for p in products)
    _draw_table(c, y, columns, rows, top=height - 20 * mm, bottom=20 * mm, size=9)

    c.showPage()
    c.save()
    return buffer.getvalue()


def generate_movements_pdf(
    movements: List[StockMovement],
    summary: Dict[str, int],
    filters: Optional[Dict[str, Optional[str]]] = None,
) -> bytes:
    """
    Movement history on A4 landscape:
    - title and the filters that produced the listing
    - totals of entries, exits and the resulting balance
    - one row per movement
    """
    from reportlab.lib.pagesizes import A4, landscape
    from reportlab.pdfgen import canvas
    from reportlab.lib.units import mm

    _init_fonts()
    filters = filters or {}
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=landscape(A4))
    width, height = landscape(A4)

    y = height - 18 * mm
    c.setFont(FONT_BOLD_NAME, 14)
    c.drawString(14 * mm, y, "Movement History - Storeroom")
    y -= 9 * mm

    # --- Filtry ---
    c.setFont(FONT_REGULAR_NAME, 10)
    c.drawString(14 * mm, y, f"Product: {filters.get('q') or 'All'}")
    type_label = MOVEMENT_TYPE_LABELS.get(filters.get("type") or "", "All")
    c.drawString(90 * mm, y, f"Type: {type_label}")
    c.drawString(150 * mm, y, f"Period: {filters.get('date_from') or '-'} to {filters.get('date_to') or '-'}")
    y -= 11 * mm

    # --- Podsumowanie ---
    c.setFont(FONT_BOLD_NAME, 12)
    c.drawString(14 * mm, y, "Stock Summary")
    y -= 7 * mm
    c.setFont(FONT_REGULAR_NAME, 10)
    c.drawString(14 * mm, y, f"Total entries: {summary.get('total_entries', 0)}")
    c.drawString(90 * mm, y, f"Total exits: {summary.get('total_exits', 0)}")
    c.drawString(160 * mm, y, f"Balance: {summary.get('balance', 0)}")
    y -= 11 * mm

    columns = [
        ("Code", 16 * mm, 8),
        ("Product", 32 * mm, 38),
        ("Type", 100 * mm, 8),
        ("Quantity", 118 * mm, 10),
        ("Storekeeper", 138 * mm, 22),
        ("Sector", 180 * mm, 20),
        ("Recipient", 218 * mm, 20),
        ("Date", 256 * mm, 10),
    ]

    def rows():
        for m in movements:
            product = m.product
            yield (
                product.code if product else "-",
                product.description if product else REMOVED_PRODUCT_LABEL,
                MOVEMENT_TYPE_LABELS.get(m.type, m.type),
                m.quantity,
                m.warehouse_keeper,
                m.responsible_sector or "-",
                m.recipient or "-",
                m.occurred_at.strftime("%Y-%m-%d") if m.occurred_at else "-",
            )

    _draw_table(c, y, columns, rows(), top=height - 20 * mm, bottom=18 * mm)

    c.showPage()
    c.save()
    return buffer.getvalue()
