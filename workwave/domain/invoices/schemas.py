"""Invoice domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class InvoiceCreate(BaseModel):
    contractId: int
    amount: float = Field(..., gt=0)
    dueDate: datetime
    notes: Optional[str] = None
    terms: Optional[str] = None


class InvoiceResponse(BaseModel):
    id: int
    invoiceNumber: str
    contractId: int
    clientId: int
    freelancerId: int
    amount: float
    status: str
    notes: Optional[str] = None
    terms: Optional[str] = None
    issueDate: Optional[datetime] = None
    dueDate: datetime
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True


def invoice_response(invoice) -> InvoiceResponse:
    return InvoiceResponse(
        id=invoice.id,
        invoiceNumber=invoice.invoice_number,
        contractId=invoice.contract_id,
        clientId=invoice.client_id,
        freelancerId=invoice.freelancer_id,
        amount=invoice.amount,
        status=invoice.status,
        notes=invoice.notes,
        terms=invoice.terms,
        issueDate=invoice.issue_date,
        dueDate=invoice.due_date,
        createdAt=invoice.created_at,
    )
