"""
Bill receipt PDF (reportlab)
"""
import io
from datetime import datetime, timezone
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.core.config import settings
from app.models.bill import Bill

BRAND = colors.HexColor("#b45309")
LIGHT_GREY = colors.HexColor("#f3f4f6")


def _inr(v: float) -> str:
    return f"Rs. {v:,.2f}"


def _table(data, col_widths=None):
    t = Table(data, colWidths=col_widths)
    t.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), BRAND),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 10),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, LIGHT_GREY]),
        ("FONTSIZE", (0, 1), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.3, colors.HexColor("#d1d5db")),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("RIGHTPADDING", (0, 0), (-1, -1), 6),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]))
    return t


def receipt_filename(bill: Bill) -> str:
    room = bill.room_number or "na"
    return f"bill_{room}_{bill.billing_month}.pdf"


def render_bill_pdf(bill: Bill) -> io.BytesIO:
    """Render a bill with its charge breakdown and payment history."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=A4,
        topMargin=2 * cm, bottomMargin=2 * cm,
        leftMargin=2 * cm, rightMargin=2 * cm,
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("title", parent=styles["Heading1"], textColor=BRAND, fontSize=18, spaceAfter=6)
    sub_style = ParagraphStyle("sub", parent=styles["Normal"], textColor=colors.grey, fontSize=10)
    section_style = ParagraphStyle("section", parent=styles["Heading2"], textColor=BRAND, fontSize=13, spaceBefore=14, spaceAfter=4)

    story = [Paragraph(escape(settings.RESIDENCY_NAME), title_style)]
    if settings.RESIDENCY_ADDRESS:
        story.append(Paragraph(escape(settings.RESIDENCY_ADDRESS), sub_style))
    if settings.RESIDENCY_PHONE:
        story.append(Paragraph(f"Phone: {escape(settings.RESIDENCY_PHONE)}", sub_style))
    story.extend([
        Paragraph(f"Bill for {bill.billing_month}  |  Status: {bill.status.value.upper()}", sub_style),
        Paragraph(f"Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}", sub_style),
        Spacer(1, 0.5 * cm),
    ])

    story.append(Paragraph("Tenant", section_style))
    story.append(_table([
        ["Detail", "Value"],
        ["Name", bill.tenant_name],
        ["Room", bill.room_number or "-"],
        ["Due Date", bill.due_date.strftime("%d/%m/%Y")],
    ], [8 * cm, 9 * cm]))

    story.append(Paragraph("Charges", section_style))
    story.append(_table([
        ["Item", "Amount"],
        ["Rent", _inr(bill.rent_amount)],
        [
            f"Electricity ({bill.electricity_previous_reading:g} -> {bill.electricity_current_reading:g}, "
            f"{bill.electricity_units:g} units @ {bill.electricity_rate:g}, shared by {bill.occupant_count})",
            _inr(bill.electricity_amount),
        ],
        ["Other Charges", _inr(bill.other_charges)],
        ["Adjustments", f"- {_inr(bill.adjustments)}"],
        ["Total", _inr(bill.total_amount)],
        ["Paid", _inr(bill.amount_paid)],
        ["Balance Due", _inr(bill.balance_due)],
    ], [12 * cm, 5 * cm]))

    if bill.payments:
        story.append(Paragraph("Payments", section_style))
        rows = [["Date", "Method", "Reference", "Amount"]] + [
            [
                p.payment_date.strftime("%d/%m/%Y"),
                p.payment_method.value.replace("_", " ").title(),
                p.transaction_id or "-",
                _inr(p.amount),
            ]
            for p in bill.payments
        ]
        story.append(_table(rows, [3.5 * cm, 4 * cm, 5.5 * cm, 4 * cm]))

    doc.build(story)
    buf.seek(0)
    return buf
