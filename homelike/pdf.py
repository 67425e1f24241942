"""Printable PDF receipts using ReportLab."""

from __future__ import annotations

from pathlib import Path
from xml.sax.saxutils import escape

from .models import Order
from .receipt import address_line, format_amount, format_datetime

# Fonts carrying the rupee sign, by platform
_FONT_SEARCH_PATHS = [
    # DejaVu (Debian/Ubuntu, Fedora)
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu-sans-fonts/DejaVuSans.ttf",
    # Noto Sans
    "/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/google-noto/NotoSans-Regular.ttf",
    # macOS
    "/Library/Fonts/Arial Unicode.ttf",
    "/System/Library/Fonts/Supplemental/Arial Unicode.ttf",
]


def _find_unicode_font() -> str:
    """Find a font on the system that can draw the currency symbol."""
    for path in _FONT_SEARCH_PATHS:
        if Path(path).exists():
            return path
    raise FileNotFoundError(
        "No Unicode font found for the receipt. Install one of:\n"
        "  Ubuntu/Debian: sudo apt install fonts-dejavu-core\n"
        "  Fedora/RHEL:   sudo dnf install dejavu-sans-fonts"
    )


def _register_unicode_font() -> str:
    """Register a Unicode font with ReportLab and return the font name."""
    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.ttfonts import TTFont

    font_path = _find_unicode_font()
    font_name = "ReceiptFont"
    pdfmetrics.registerFont(TTFont(font_name, font_path))
    return font_name


def generate_receipt_pdf(
    order: Order,
    output_path: str | Path,
    *,
    shop_name: str = "Homelike",
    symbol: str = "₹",
) -> Path:
    """Generate a one-page PDF receipt for an order.

    Args:
        order: The order to render.
        output_path: Where to save the PDF file.
        shop_name: Brand shown in the title.
        symbol: Currency symbol for amounts.

    Returns:
        Path to the generated PDF file.

    Raises:
        ImportError: If reportlab is not installed.
        FileNotFoundError: If no suitable font is found.
    """
    try:
        from reportlab.lib import colors
        from reportlab.lib.pagesizes import A4
        from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
        from reportlab.lib.units import mm
        from reportlab.platypus import (
            Paragraph,
            SimpleDocTemplate,
            Spacer,
            Table,
            TableStyle,
        )
    except ImportError:
        raise ImportError(
            "reportlab is required: pip install 'homelike[pdf]'"
        )

    font_name = _register_unicode_font()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title=f"{shop_name} order {order.id}",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "Receipt_Title",
        parent=styles["Title"],
        fontName=font_name,
        fontSize=18,
        leading=24,
    )
    subtitle_style = ParagraphStyle(
        "Receipt_Subtitle",
        parent=styles["Normal"],
        fontName=font_name,
        fontSize=10,
        leading=14,
        textColor=colors.grey,
    )
    body_style = ParagraphStyle(
        "Receipt_Body",
        parent=styles["Normal"],
        fontName=font_name,
        fontSize=10,
        leading=14,
    )

    elements: list = []
    elements.append(Paragraph(escape(f"{shop_name} order {order.id}"), title_style))
    elements.append(Paragraph(escape(format_datetime(order.created_at)), subtitle_style))
    elements.append(Spacer(1, 6 * mm))

    elements.append(Paragraph(escape(f"Customer: {order.customer_name}"), body_style))
    elements.append(Paragraph(escape(f"Email: {order.customer_email}"), body_style))
    if order.customer_phone:
        elements.append(Paragraph(escape(f"Phone: {order.customer_phone}"), body_style))
    address = address_line(order)
    if address:
        elements.append(Paragraph(escape(f"Address: {address}"), body_style))
    elements.append(Spacer(1, 6 * mm))

    table_data = [["Item", "Qty", "Unit price", "Subtotal"]]
    for item in order.items:
        table_data.append([
            item.name,
            str(item.quantity),
            format_amount(item.unit_price, symbol),
            format_amount(item.subtotal, symbol),
        ])
    table_data.append(["Total", "", "", format_amount(order.total, symbol)])

    items_style = TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#E67E22")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, -1), font_name),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -2), 0.5, colors.grey),
        ("ROWBACKGROUNDS", (0, 1), (-1, -2), [colors.white, colors.HexColor("#FFF3E0")]),
        ("LINEABOVE", (0, -1), (-1, -1), 1, colors.black),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ("LEFTPADDING", (0, 0), (-1, -1), 4),
        ("RIGHTPADDING", (0, 0), (-1, -1), 4),
    ])
    col_widths = [80 * mm, 20 * mm, 35 * mm, 35 * mm]
    t = Table(table_data, colWidths=col_widths)
    t.setStyle(items_style)
    elements.append(t)
    elements.append(Spacer(1, 6 * mm))

    elements.append(
        Paragraph(escape(f"Payment method: {order.payment_method.value}"), body_style)
    )
    if order.note:
        elements.append(Paragraph(escape(f"Customer note: {order.note}"), body_style))

    doc.build(elements)
    return output_path
