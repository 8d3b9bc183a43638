"""
PDF Tax Invoice Generation
Renders a recorded sale as a GST tax invoice with store, customer, line and HSN details
"""
from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from io import BytesIO
from typing import List
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy.orm import Session

from pharmacare.models.pharmacy_settings import PharmacySettings
from pharmacare.models.sale import Sale
from pharmacare.services.currency import format_paise, paise_to_words
from pharmacare.services.sale_service import get_sale
from pharmacare.services.settings_service import get_settings


@dataclass
class HsnSummaryRow:
    hsn_code: str
    gst_rate: Decimal
    taxable_paise: int = 0
    cgst_paise: int = 0
    sgst_paise: int = 0

    @property
    def total_gst_paise(self) -> int:
        return self.cgst_paise + self.sgst_paise


def build_hsn_summary(sale: Sale) -> List[HsnSummaryRow]:
    """Taxable value and tax per (HSN code, GST rate), in order of first appearance."""
    rows = OrderedDict()
    for item in sale.items:
        rate = Decimal(item.cgst_rate) + Decimal(item.sgst_rate)
        key = (item.hsn_code or "", rate)
        row = rows.get(key)
        if row is None:
            row = rows[key] = HsnSummaryRow(hsn_code=item.hsn_code or "", gst_rate=rate)
        row.taxable_paise += item.taxable_amount_paise
        row.cgst_paise += item.cgst_amount_paise
        row.sgst_paise += item.sgst_amount_paise
    return list(rows.values())


def _money(paise: int) -> str:
    # the built-in PDF fonts have no rupee glyph
    return format_paise(paise).replace("₹", "Rs. ")


def _rate(rate) -> str:
    return f"{Decimal(rate).normalize():f}%"


def generate_invoice_pdf(db: Session, sale_id: int) -> BytesIO:
    """
    Generate the tax invoice PDF for a sale.

    Args:
        db: Database session
        sale_id: ID of the recorded sale

    Returns:
        BytesIO buffer positioned at the start of the PDF data
    """
    sale = get_sale(db, sale_id)
    store = get_settings(db)

    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, topMargin=0.5 * inch, bottomMargin=0.5 * inch)
    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        "InvoiceTitle",
        parent=styles["Heading1"],
        fontSize=18,
        alignment=TA_CENTER,
        spaceAfter=6,
    )
    centre_style = ParagraphStyle("Centre", parent=styles["Normal"], fontSize=9, alignment=TA_CENTER)
    normal_style = ParagraphStyle(
        "InvoiceNormal",
        parent=styles["Normal"],
        fontSize=9,
        textColor=colors.HexColor("#374151"),
    )

    elements.extend(_store_header(store, title_style, centre_style))
    elements.append(Spacer(1, 0.2 * inch))
    elements.append(_invoice_info(sale, normal_style))
    elements.append(Spacer(1, 0.2 * inch))
    elements.append(_items_table(sale))
    elements.append(Spacer(1, 0.15 * inch))
    elements.append(_totals_table(sale))
    elements.append(Spacer(1, 0.1 * inch))
    elements.append(Paragraph(f"<b>Amount in words:</b> {paise_to_words(sale.grand_total_paise)}", normal_style))
    elements.append(Spacer(1, 0.2 * inch))
    elements.append(Paragraph("<b>HSN Summary</b>", normal_style))
    elements.append(_hsn_table(sale))
    elements.append(Spacer(1, 0.4 * inch))
    elements.append(Paragraph("Thank you! Get well soon.", centre_style))

    doc.build(elements)
    buffer.seek(0)
    return buffer


def _store_header(store: PharmacySettings, title_style, centre_style) -> list:
    contact = f"Phone: {escape(store.phone)}"
    if store.email:
        contact += f" | Email: {escape(store.email)}"
    return [
        Paragraph(escape(store.name), title_style),
        Paragraph(escape(store.address), centre_style),
        Paragraph(contact, centre_style),
        Paragraph(
            f"GSTIN: {store.gstin or '-'} | DL No: {store.drug_license_no or '-'}"
            f" | State Code: {store.state_code or '-'}",
            centre_style,
        ),
        Spacer(1, 0.1 * inch),
        Paragraph("<b>TAX INVOICE</b>", centre_style),
    ]


def _invoice_info(sale: Sale, style) -> Table:
    bill_to = "Walk-in customer"
    if sale.customer is not None:
        bill_to = f"<b>{escape(sale.customer.name)}</b>"
        if sale.customer.phone:
            bill_to += f"<br/>Phone: {sale.customer.phone}"
    info = Table(
        [[
            Paragraph(f"<b>Bill To:</b><br/>{bill_to}", style),
            Paragraph(
                f"<b>Invoice #:</b> {sale.invoice_number}<br/>"
                f"<b>Date:</b> {sale.sale_date.strftime('%d %b %Y, %I:%M %p')}<br/>"
                f"<b>Payment:</b> {sale.payment_mode.upper()}<br/>"
                f"<b>Billed by:</b> {escape(sale.user.full_name)}",
                style,
            ),
        ]],
        colWidths=[3.6 * inch, 3.4 * inch],
    )
    info.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    return info


_GRID = [
    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f3f4f6")),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTSIZE", (0, 0), (-1, -1), 8),
    ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
    ("TOPPADDING", (0, 0), (-1, -1), 4),
    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
]


def _items_table(sale: Sale) -> Table:
    data = [["Item", "HSN", "Batch", "Qty", "Rate", "Disc", "Taxable", "CGST", "SGST", "Amount"]]
    for item in sale.items:
        data.append([
            item.medicine.label(),
            item.hsn_code or "",
            item.batch.batch_number,
            str(item.quantity),
            _money(item.unit_price_paise),
            _money(item.discount_paise),
            _money(item.taxable_amount_paise),
            f"{_money(item.cgst_amount_paise)}\n@{_rate(item.cgst_rate)}",
            f"{_money(item.sgst_amount_paise)}\n@{_rate(item.sgst_rate)}",
            _money(item.total_paise),
        ])
    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle(_GRID))
    return table


def _totals_table(sale: Sale) -> Table:
    data = [
        ["Subtotal", _money(sale.subtotal_paise)],
        ["Discount", f"- {_money(sale.discount_paise)}"],
        ["CGST", _money(sale.total_cgst_paise)],
        ["SGST", _money(sale.total_sgst_paise)],
        ["GRAND TOTAL", _money(sale.grand_total_paise)],
    ]
    table = Table(data, colWidths=[1.5 * inch, 1.5 * inch], hAlign="RIGHT")
    table.setStyle(TableStyle([
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("LINEABOVE", (0, -1), (-1, -1), 1, colors.black),
    ]))
    return table


def _hsn_table(sale: Sale) -> Table:
    data = [["HSN", "GST Rate", "Taxable Value", "CGST", "SGST", "Total Tax"]]
    for row in build_hsn_summary(sale):
        data.append([
            row.hsn_code,
            _rate(row.gst_rate),
            _money(row.taxable_paise),
            _money(row.cgst_paise),
            _money(row.sgst_paise),
            _money(row.total_gst_paise),
        ])
    table = Table(data)
    table.setStyle(TableStyle(_GRID))
    return table


def format_invoice_text(db: Session, sale_id: int) -> str:
    """Plain-text receipt for thermal printers and message previews."""
    sale = get_sale(db, sale_id)
    store = get_settings(db)
    lines = [
        store.name,
        f"Invoice {sale.invoice_number}  {sale.sale_date.strftime('%d %b %Y, %I:%M %p')}",
        "-" * 40,
    ]
    for item in sale.items:
        lines.append(f"{item.medicine.label()} x{item.quantity}  {format_paise(item.total_paise)}")
    lines += [
        "-" * 40,
        f"Subtotal: {format_paise(sale.subtotal_paise)}",
        f"Discount: {format_paise(sale.discount_paise)}",
        f"GST: {format_paise(sale.total_gst_paise)}",
        f"Total: {format_paise(sale.grand_total_paise)}",
        paise_to_words(sale.grand_total_paise),
    ]
    return "\n".join(lines)
