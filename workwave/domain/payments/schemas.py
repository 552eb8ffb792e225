"""Payment domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PaymentIntentCreate(BaseModel):
    milestoneId: int
    amount: Optional[float] = Field(None, gt=0)


class PaymentIntentResponse(BaseModel):
    clientSecret: str
    paymentId: int
    url: str


class EscrowRelease(BaseModel):
    contractId: int
    milestoneId: int


class PaymentResponse(BaseModel):
    id: int
    contractId: int
    milestoneId: int
    clientId: int
    freelancerId: int
    amount: float
    currency: str
    status: str
    paymentIntentId: Optional[str] = None
    completedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True


def payment_response(payment) -> PaymentResponse:
    return PaymentResponse(
        id=payment.id,
        contractId=payment.contract_id,
        milestoneId=payment.milestone_id,
        clientId=payment.client_id,
        freelancerId=payment.freelancer_id,
        amount=payment.amount,
        currency=payment.currency,
        status=payment.status,
        paymentIntentId=payment.payment_intent_id,
        completedAt=payment.completed_at,
        createdAt=payment.created_at,
    )
