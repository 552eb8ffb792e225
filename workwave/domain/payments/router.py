"""Payment router - FastAPI endpoints for milestone payments and escrow release"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor
from ...database import get_db
from ..milestones.schemas import MilestoneResponse, milestone_response
from .provider import PaymentProvider, get_payment_provider
from .schemas import EscrowRelease, PaymentIntentCreate, PaymentIntentResponse, payment_response
from .service import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])


def get_payment_service(
    db: Session = Depends(get_db),
    provider: PaymentProvider = Depends(get_payment_provider),
) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db, provider)


@router.get("")
async def list_payments(
    status: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    service: PaymentService = Depends(get_payment_service),
):
    payments = service.list_payments(actor, status)
    return {"payments": [payment_response(p) for p in payments]}


@router.post("/create-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    data: PaymentIntentCreate,
    actor: Actor = Depends(get_current_actor),
    service: PaymentService = Depends(get_payment_service),
):
    """Client starts an in-page card payment for a milestone's payment request"""
    return service.create_payment_intent(data.milestoneId, actor, data.amount)


@router.post("/release", response_model=MilestoneResponse)
async def release_escrow(
    data: EscrowRelease,
    actor: Actor = Depends(get_current_actor),
    service: PaymentService = Depends(get_payment_service),
):
    milestone = service.release_escrow(data.contractId, data.milestoneId, actor)
    return milestone_response(milestone)


@router.get("/{payment_id}/invoice")
async def download_receipt(
    payment_id: int,
    actor: Actor = Depends(get_current_actor),
    service: PaymentService = Depends(get_payment_service),
):
    filename, pdf_bytes = service.download_receipt(payment_id, actor)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
