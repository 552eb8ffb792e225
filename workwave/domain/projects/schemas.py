"""Project domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ...schemas import UserSummary, user_summary


class ProjectCreate(BaseModel):
    """Schema for posting a new project"""

    title: str = Field(..., min_length=5, max_length=255)
    description: str = Field(..., min_length=10)
    budget: float = Field(..., gt=0)
    deadline: Optional[datetime] = None
    skills: list[str] = []
    category: str = Field(..., min_length=1, max_length=100)


class ProjectUpdate(BaseModel):
    """Schema for updating a project; only OPEN and CANCELLED may be set directly"""

    title: Optional[str] = Field(None, min_length=5, max_length=255)
    description: Optional[str] = Field(None, min_length=10)
    budget: Optional[float] = Field(None, gt=0)
    deadline: Optional[datetime] = None
    skills: Optional[list[str]] = None
    category: Optional[str] = None
    status: Optional[str] = None


class ProjectBidSummary(BaseModel):
    id: int
    amount: float
    deliveryTime: int
    status: str
    freelancer: Optional[UserSummary] = None


class ProjectContractSummary(BaseModel):
    id: int
    stage: str
    freelancerId: int


class ProjectResponse(BaseModel):
    """Schema for project response"""

    id: int
    clientId: int
    client: Optional[UserSummary] = None
    title: str
    description: str
    budget: float
    deadline: Optional[datetime] = None
    skills: list[str] = []
    category: Optional[str] = None
    status: str
    bidCount: int = 0
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProjectDetailResponse(ProjectResponse):
    bids: list[ProjectBidSummary] = []
    contracts: list[ProjectContractSummary] = []


def project_response(project) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        clientId=project.client_id,
        client=user_summary(project.client),
        title=project.title,
        description=project.description,
        budget=project.budget,
        deadline=project.deadline,
        skills=project.skills or [],
        category=project.category,
        status=project.status,
        bidCount=len(project.bids),
        createdAt=project.created_at,
    )


def project_detail_response(project, bids=None) -> ProjectDetailResponse:
    """Project with its bids (all, or the subset the caller may see) and contracts"""
    visible_bids = project.bids if bids is None else bids
    base = project_response(project)
    return ProjectDetailResponse(
        **base.model_dump(),
        bids=[
            ProjectBidSummary(
                id=bid.id,
                amount=bid.amount,
                deliveryTime=bid.delivery_time,
                status=bid.status,
                freelancer=user_summary(bid.freelancer),
            )
            for bid in visible_bids
        ],
        contracts=[
            ProjectContractSummary(
                id=contract.id, stage=contract.stage, freelancerId=contract.freelancer_id
            )
            for contract in project.contracts
        ],
    )
