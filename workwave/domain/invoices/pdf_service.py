"""
Invoice and payment receipt PDF generation
Builds letter-size documents with reportlab and returns the raw bytes
"""

import io
import logging
from datetime import datetime

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ...models import Invoice, Payment

logger = logging.getLogger(__name__)

BRAND_NAME = "WorkWave"


class DocumentPDFGenerator:
    """Shared page setup and styles for invoices and receipts"""

    def __init__(self):
        self.page_width, self.page_height = letter
        self.margin = 0.75 * inch
        self.content_width = self.page_width - (2 * self.margin)

        self.brand_color = colors.HexColor("#2563eb")
        self.dark_gray = colors.HexColor("#1e293b")
        self.light_gray = colors.HexColor("#f1f5f9")

        styles = getSampleStyleSheet()
        self.title_style = ParagraphStyle(
            "DocTitle",
            parent=styles["Heading1"],
            fontSize=22,
            textColor=self.brand_color,
            spaceAfter=6,
        )
        self.heading_style = ParagraphStyle(
            "DocHeading",
            parent=styles["Heading2"],
            fontSize=13,
            textColor=self.dark_gray,
            spaceBefore=16,
            spaceAfter=8,
        )
        self.body_style = ParagraphStyle(
            "DocBody",
            parent=styles["Normal"],
            fontSize=10,
            textColor=self.dark_gray,
            spaceAfter=6,
        )

    def _info_table(self, rows: list) -> Table:
        table = Table(rows, colWidths=[1.8 * inch, self.content_width - 1.8 * inch])
        table.setStyle(
            TableStyle(
                [
                    ("FONT", (0, 0), (0, -1), "Helvetica-Bold", 10),
                    ("FONT", (1, 0), (1, -1), "Helvetica", 10),
                    ("TEXTCOLOR", (0, 0), (-1, -1), self.dark_gray),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        return table

    def _amount_table(self, description: str, amount: float, currency: str) -> Table:
        rows = [
            ["Description", "Amount"],
            [Paragraph(description, self.body_style), f"{amount:,.2f} {currency.upper()}"],
            ["Total", f"{amount:,.2f} {currency.upper()}"],
        ]
        table = Table(rows, colWidths=[self.content_width - 1.8 * inch, 1.8 * inch])
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), self.brand_color),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 10),
                    ("FONT", (0, 1), (-1, -1), "Helvetica", 10),
                    ("FONT", (0, -1), (-1, -1), "Helvetica-Bold", 11),
                    ("BACKGROUND", (0, -1), (-1, -1), self.light_gray),
                    ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cbd5e1")),
                    ("TOPPADDING", (0, 0), (-1, -1), 6),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        return table

    def _build(self, story: list, title: str) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=title,
        )
        doc.build(story)
        pdf_bytes = buffer.getvalue()
        buffer.close()
        return pdf_bytes

    @staticmethod
    def _date(value) -> str:
        return value.strftime("%B %d, %Y") if value else "N/A"


class InvoicePDFGenerator(DocumentPDFGenerator):
    """Generate an invoice PDF for a contract"""

    def __init__(self, invoice: Invoice, currency: str):
        super().__init__()
        self.invoice = invoice
        self.currency = currency

    def generate(self) -> bytes:
        invoice = self.invoice
        logger.info(f"📄 Generating invoice PDF {invoice.invoice_number}")

        story = [
            Paragraph("INVOICE", self.title_style),
            Paragraph(f"{BRAND_NAME} · {invoice.invoice_number}", self.body_style),
            Spacer(1, 0.25 * inch),
            self._info_table(
                [
                    ["From:", invoice.freelancer.name],
                    ["Bill To:", invoice.client.name],
                    ["Client Email:", invoice.client.email],
                    ["Contract:", invoice.contract.title],
                    ["Issue Date:", self._date(invoice.issue_date or datetime.utcnow())],
                    ["Due Date:", self._date(invoice.due_date)],
                    ["Status:", invoice.status],
                ]
            ),
            Spacer(1, 0.3 * inch),
            self._amount_table(
                f"Services rendered under contract \"{invoice.contract.title}\"",
                invoice.amount,
                self.currency,
            ),
        ]

        if invoice.notes:
            story.append(Paragraph("Notes", self.heading_style))
            story.append(Paragraph(invoice.notes, self.body_style))
        if invoice.terms:
            story.append(Paragraph("Terms", self.heading_style))
            story.append(Paragraph(invoice.terms, self.body_style))

        return self._build(story, f"Invoice {invoice.invoice_number}")


class ReceiptPDFGenerator(DocumentPDFGenerator):
    """Generate a payment receipt for a milestone payment"""

    def __init__(self, payment: Payment):
        super().__init__()
        self.payment = payment

    def generate(self) -> bytes:
        payment = self.payment
        milestone = payment.milestone
        contract = milestone.contract
        logger.info(f"🧾 Generating receipt PDF for payment {payment.id}")

        story = [
            Paragraph(BRAND_NAME, self.title_style),
            Paragraph("Payment Receipt", self.heading_style),
            Spacer(1, 0.15 * inch),
            self._info_table(
                [
                    ["Receipt #:", f"RCPT-{payment.id:06d}"],
                    ["Paid By:", payment.client.name],
                    ["Paid To:", payment.freelancer.name],
                    ["Contract:", contract.title],
                    ["Milestone:", milestone.title],
                    ["Status:", payment.status],
                    ["Date:", self._date(payment.completed_at or payment.created_at)],
                ]
            ),
            Spacer(1, 0.3 * inch),
            self._amount_table(
                f"Milestone payment: {milestone.title}", payment.amount, payment.currency
            ),
            Spacer(1, 0.3 * inch),
            Paragraph(f"Thank you for using {BRAND_NAME}.", self.body_style),
        ]

        return self._build(story, f"Receipt {payment.id}")


def generate_invoice_pdf(invoice: Invoice, currency: str) -> bytes:
    return InvoicePDFGenerator(invoice, currency).generate()


def generate_receipt_pdf(payment: Payment) -> bytes:
    return ReceiptPDFGenerator(payment).generate()
