"""Milestone router - FastAPI endpoints for milestones"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor
from ...database import get_db
from ..payments.provider import PaymentProvider, get_payment_provider
from .schemas import (
    MilestoneDetailResponse,
    MilestoneUpdate,
    PaymentRequestResponse,
    ProgressCreate,
    milestone_detail_response,
    progress_response,
)
from .service import MilestoneService

router = APIRouter(prefix="/milestones", tags=["Milestones"])


def get_milestone_service(
    db: Session = Depends(get_db),
    provider: PaymentProvider = Depends(get_payment_provider),
) -> MilestoneService:
    """Dependency injection for MilestoneService"""
    return MilestoneService(db, provider)


@router.get("/{milestone_id}", response_model=MilestoneDetailResponse)
async def get_milestone(
    milestone_id: int,
    actor: Actor = Depends(get_current_actor),
    service: MilestoneService = Depends(get_milestone_service),
):
    return milestone_detail_response(service.get_milestone(milestone_id, actor))


@router.put("/{milestone_id}")
async def update_milestone(
    milestone_id: int,
    data: MilestoneUpdate,
    actor: Actor = Depends(get_current_actor),
    service: MilestoneService = Depends(get_milestone_service),
):
    """Status change (freelancer work flow, cancellation) or client edit of a PENDING milestone"""
    milestone = service.update_milestone(milestone_id, actor, data)
    return {
        "message": "Milestone updated successfully",
        "milestone": milestone_detail_response(milestone),
    }


# ============================================================================
# PROGRESS LOG
# ============================================================================


@router.get("/{milestone_id}/progress")
async def list_progress(
    milestone_id: int,
    actor: Actor = Depends(get_current_actor),
    service: MilestoneService = Depends(get_milestone_service),
):
    updates = service.list_progress(milestone_id, actor)
    return {"progressUpdates": [progress_response(p) for p in updates]}


@router.post("/{milestone_id}/progress", response_model=MilestoneDetailResponse)
async def add_progress(
    milestone_id: int,
    data: ProgressCreate,
    actor: Actor = Depends(get_current_actor),
    service: MilestoneService = Depends(get_milestone_service),
):
    milestone = service.add_progress(milestone_id, actor, data.progressUpdate, data.status)
    return milestone_detail_response(milestone)


# ============================================================================
# PAYMENTS
# ============================================================================


@router.post("/{milestone_id}/request-payment", response_model=PaymentRequestResponse)
async def request_payment(
    milestone_id: int,
    actor: Actor = Depends(get_current_actor),
    service: MilestoneService = Depends(get_milestone_service),
):
    """Client opens a hosted checkout for this milestone"""
    return service.request_payment(milestone_id, actor)
