"""Milestone domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ...schemas import UserSummary, user_summary
from ..payments.schemas import PaymentResponse, payment_response


class MilestoneUpdate(BaseModel):
    """Either a status change or a details edit; a status wins when both are sent"""

    title: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    dueDate: Optional[datetime] = None
    status: Optional[str] = None


class ProgressCreate(BaseModel):
    progressUpdate: str = Field(..., min_length=1)
    status: Optional[str] = None


class ProgressResponse(BaseModel):
    id: int
    milestoneId: int
    description: str
    status: str
    createdAt: Optional[datetime] = None
    user: Optional[UserSummary] = None


class MilestoneResponse(BaseModel):
    id: int
    contractId: int
    title: str
    description: Optional[str] = None
    amount: float
    dueDate: Optional[datetime] = None
    status: str
    createdAt: Optional[datetime] = None
    payments: list[PaymentResponse] = []

    class Config:
        from_attributes = True


class MilestoneContractSummary(BaseModel):
    id: int
    title: str
    stage: str
    clientId: int
    freelancerId: int


class MilestoneDetailResponse(MilestoneResponse):
    contract: MilestoneContractSummary
    progressUpdates: list[ProgressResponse] = []


class PaymentRequestResponse(BaseModel):
    url: str
    redirectUrl: str


def progress_response(progress) -> ProgressResponse:
    return ProgressResponse(
        id=progress.id,
        milestoneId=progress.milestone_id,
        description=progress.description,
        status=progress.status,
        createdAt=progress.created_at,
        user=user_summary(progress.user),
    )


def milestone_response(milestone) -> MilestoneResponse:
    return MilestoneResponse(
        id=milestone.id,
        contractId=milestone.contract_id,
        title=milestone.title,
        description=milestone.description,
        amount=milestone.amount,
        dueDate=milestone.due_date,
        status=milestone.status,
        createdAt=milestone.created_at,
        payments=[payment_response(p) for p in milestone.payments],
    )


def milestone_detail_response(milestone) -> MilestoneDetailResponse:
    contract = milestone.contract
    return MilestoneDetailResponse(
        **milestone_response(milestone).model_dump(),
        contract=MilestoneContractSummary(
            id=contract.id,
            title=contract.title,
            stage=contract.stage,
            clientId=contract.client_id,
            freelancerId=contract.freelancer_id,
        ),
        progressUpdates=[progress_response(p) for p in milestone.progress_updates],
    )
