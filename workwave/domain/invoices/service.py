"""Invoice service - contract invoices and their PDF documents"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import Actor
from ...config import PAYMENT_CURRENCY
from ...errors import ForbiddenError, NotFoundError, ValidationError
from ...models import Invoice, InvoiceStatus
from ...utils.sanitization import sanitize_string
from .pdf_service import generate_invoice_pdf
from .repository import InvoiceRepository
from .schemas import InvoiceCreate

logger = logging.getLogger(__name__)


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository()

    def generate_invoice_number(self, freelancer_id: int) -> str:
        """INV-<year>-<freelancer>-<sequence>, sequence counted per freelancer per year"""
        year = datetime.now().year
        count = self.repo.count_issued_since(self.db, freelancer_id, datetime(year, 1, 1)) + 1
        number = f"INV-{year}-{freelancer_id:04d}-{count:04d}"
        while self.repo.number_exists(self.db, number):
            count += 1
            number = f"INV-{year}-{freelancer_id:04d}-{count:04d}"
        return number

    def create_invoice(self, data: InvoiceCreate, actor: Actor) -> Invoice:
        contract = self.repo.get_contract(self.db, data.contractId)
        if not contract:
            raise NotFoundError("Contract not found")
        if actor.id not in (contract.client_id, contract.freelancer_id):
            raise ForbiddenError("You are not authorized to invoice this contract")

        invoice = self.repo.create(
            self.db,
            invoice_number=self.generate_invoice_number(contract.freelancer_id),
            contract_id=contract.id,
            client_id=contract.client_id,
            freelancer_id=contract.freelancer_id,
            amount=data.amount,
            status=InvoiceStatus.PENDING.value,
            notes=sanitize_string(data.notes) if data.notes else None,
            terms=sanitize_string(data.terms) if data.terms else None,
            due_date=data.dueDate,
        )
        logger.info(f"🧾 Invoice {invoice.invoice_number} created for contract {contract.id}")
        return invoice

    def list_invoices(self, actor: Actor, status: Optional[str] = None) -> list[Invoice]:
        if status and status not in {s.value for s in InvoiceStatus}:
            raise ValidationError("Invalid invoice status")
        return self.repo.get_for_user(self.db, actor.id, status)

    def get_invoice(self, invoice_id: int, actor: Actor) -> Invoice:
        invoice = self.repo.get_by_id(self.db, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")
        if actor.id not in (invoice.client_id, invoice.freelancer_id):
            raise ForbiddenError("You are not authorized to view this invoice")
        return invoice

    def download_invoice(self, invoice_id: int, actor: Actor) -> tuple[str, bytes]:
        """Returns (filename, pdf bytes)"""
        invoice = self.get_invoice(invoice_id, actor)
        return f"invoice-{invoice.invoice_number}.pdf", generate_invoice_pdf(
            invoice, PAYMENT_CURRENCY
        )
