"""Bid domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ...models import BidStatus
from ...schemas import UserSummary, user_summary


class BidCreate(BaseModel):
    """Fields are checked by the service so a missing one reads 'Missing required fields'"""

    projectId: Optional[int] = None
    amount: Optional[float] = None
    deliveryTime: Optional[int] = None
    coverLetter: Optional[str] = None


class BidStatusUpdate(BaseModel):
    id: int
    status: BidStatus


class BidProjectSummary(BaseModel):
    id: int
    title: str
    budget: float
    status: str


class BidResponse(BaseModel):
    id: int
    projectId: int
    freelancerId: int
    amount: float
    deliveryTime: int
    coverLetter: str
    status: str
    createdAt: Optional[datetime] = None
    project: Optional[BidProjectSummary] = None
    freelancer: Optional[UserSummary] = None

    class Config:
        from_attributes = True


def bid_response(bid) -> BidResponse:
    project = bid.project
    return BidResponse(
        id=bid.id,
        projectId=bid.project_id,
        freelancerId=bid.freelancer_id,
        amount=bid.amount,
        deliveryTime=bid.delivery_time,
        coverLetter=bid.cover_letter,
        status=bid.status,
        createdAt=bid.created_at,
        project=(
            BidProjectSummary(
                id=project.id, title=project.title, budget=project.budget, status=project.status
            )
            if project
            else None
        ),
        freelancer=user_summary(bid.freelancer),
    )
