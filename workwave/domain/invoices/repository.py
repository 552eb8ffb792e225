"""Invoice repository - Database operations for invoices"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import Contract, Invoice


class InvoiceRepository:
    """Repository for invoice database operations"""

    @staticmethod
    def get_by_id(db: Session, invoice_id: int) -> Optional[Invoice]:
        return (
            db.query(Invoice)
            .options(
                joinedload(Invoice.contract).joinedload(Contract.project),
                joinedload(Invoice.client),
                joinedload(Invoice.freelancer),
            )
            .filter(Invoice.id == invoice_id)
            .first()
        )

    @staticmethod
    def get_contract(db: Session, contract_id: int) -> Optional[Contract]:
        return db.query(Contract).filter(Contract.id == contract_id).first()

    @staticmethod
    def get_for_user(db: Session, user_id: int, status: Optional[str] = None) -> list[Invoice]:
        query = db.query(Invoice).filter(
            or_(Invoice.client_id == user_id, Invoice.freelancer_id == user_id)
        )
        if status:
            query = query.filter(Invoice.status == status)
        return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()

    @staticmethod
    def count_issued_since(db: Session, freelancer_id: int, since: datetime) -> int:
        return (
            db.query(Invoice)
            .filter(Invoice.freelancer_id == freelancer_id, Invoice.created_at >= since)
            .count()
        )

    @staticmethod
    def number_exists(db: Session, invoice_number: str) -> bool:
        return (
            db.query(Invoice.id).filter(Invoice.invoice_number == invoice_number).first()
            is not None
        )

    @staticmethod
    def create(db: Session, **data) -> Invoice:
        invoice = Invoice(**data)
        db.add(invoice)
        db.commit()
        db.refresh(invoice)
        return invoice
