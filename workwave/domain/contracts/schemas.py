"""Contract domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ...schemas import UserSummary, user_summary
from ..milestones.schemas import MilestoneResponse, milestone_response


class MilestoneInput(BaseModel):
    title: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    amount: float = Field(..., gt=0)
    dueDate: Optional[datetime] = None


class ContractCreate(BaseModel):
    """Schema for turning an accepted bid into a contract"""

    bidId: int
    terms: str = Field(..., min_length=10)
    amount: float = Field(..., gt=0)
    milestones: list[MilestoneInput] = Field(..., min_length=1)


class TermsUpdate(BaseModel):
    terms: str = Field(..., min_length=10)


class StageUpdate(BaseModel):
    """Stage arrives as free text so an unknown value reads 'Invalid contract stage'"""

    stage: Optional[str] = None


class ContractProjectSummary(BaseModel):
    id: int
    title: str
    status: str


class ContractResponse(BaseModel):
    """Schema for contract response"""

    id: int
    projectId: int
    bidId: int
    clientId: int
    freelancerId: int
    title: str
    terms: Optional[str] = None
    amount: float
    stage: str
    termsAccepted: bool
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContractDetailResponse(ContractResponse):
    """Contract with its parties, project and milestones (each with its payments)"""

    client: Optional[UserSummary] = None
    freelancer: Optional[UserSummary] = None
    project: Optional[ContractProjectSummary] = None
    milestones: list[MilestoneResponse] = []


class EscrowResponse(BaseModel):
    clientSecret: str


def contract_response(contract) -> ContractResponse:
    return ContractResponse(
        id=contract.id,
        projectId=contract.project_id,
        bidId=contract.bid_id,
        clientId=contract.client_id,
        freelancerId=contract.freelancer_id,
        title=contract.title,
        terms=contract.terms,
        amount=contract.amount,
        stage=contract.stage,
        termsAccepted=contract.terms_accepted,
        startDate=contract.start_date,
        endDate=contract.end_date,
        createdAt=contract.created_at,
        updatedAt=contract.updated_at,
    )


def contract_detail_response(contract) -> ContractDetailResponse:
    project = contract.project
    return ContractDetailResponse(
        **contract_response(contract).model_dump(),
        client=user_summary(contract.client),
        freelancer=user_summary(contract.freelancer),
        project=(
            ContractProjectSummary(id=project.id, title=project.title, status=project.status)
            if project
            else None
        ),
        milestones=[milestone_response(m) for m in contract.milestones],
    )
