"""Contract router - FastAPI endpoints for contract operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor
from ...database import get_db
from ..payments.provider import PaymentProvider, get_payment_provider
from .schemas import (
    ContractCreate,
    ContractDetailResponse,
    ContractResponse,
    EscrowResponse,
    StageUpdate,
    TermsUpdate,
    contract_detail_response,
    contract_response,
)
from .service import ContractService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contracts", tags=["Contracts"])
client_router = APIRouter(prefix="/client/contracts", tags=["Contracts"])


def get_contract_service(
    db: Session = Depends(get_db),
    provider: PaymentProvider = Depends(get_payment_provider),
) -> ContractService:
    """Dependency injection for ContractService"""
    return ContractService(db, provider)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("")
async def list_contracts(
    actor: Actor = Depends(get_current_actor),
    service: ContractService = Depends(get_contract_service),
    projectId: Optional[int] = Query(None, description="Filter contracts by project ID"),
    stage: Optional[str] = Query(None, description="Filter contracts by stage"),
):
    """Contracts where the caller is client or freelancer"""
    contracts = service.list_contracts(actor, projectId, stage)
    return {"contracts": [contract_detail_response(c) for c in contracts]}


@router.post("", status_code=201)
async def create_contract(
    data: ContractCreate,
    actor: Actor = Depends(get_current_actor),
    service: ContractService = Depends(get_contract_service),
):
    """Create a contract (and its milestones) from a bid"""
    contract = service.create_contract(data, actor)
    return {
        "message": "Contract created successfully",
        "contract": contract_detail_response(contract),
    }


@router.get("/{contract_id}", response_model=ContractDetailResponse)
async def get_contract(
    contract_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ContractService = Depends(get_contract_service),
):
    return contract_detail_response(service.get_contract(contract_id, actor))


@router.put("/{contract_id}", response_model=ContractResponse)
async def update_terms(
    contract_id: int,
    data: TermsUpdate,
    actor: Actor = Depends(get_current_actor),
    service: ContractService = Depends(get_contract_service),
):
    return contract_response(service.update_terms(contract_id, actor, data.terms))


# ============================================================================
# LIFECYCLE
# ============================================================================


@router.put("/{contract_id}/accept", response_model=ContractResponse)
async def accept_terms(
    contract_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ContractService = Depends(get_contract_service),
):
    return contract_response(service.accept_terms(contract_id, actor))


@router.put("/{contract_id}/stage", response_model=ContractResponse)
async def advance_stage(
    contract_id: int,
    data: StageUpdate,
    actor: Actor = Depends(get_current_actor),
    service: ContractService = Depends(get_contract_service),
):
    return contract_response(service.advance_stage(contract_id, actor, data.stage))


@router.post("/{contract_id}/complete", response_model=ContractResponse)
async def complete_contract(
    contract_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ContractService = Depends(get_contract_service),
):
    return contract_response(service.complete(contract_id, actor))


# ============================================================================
# ESCROW
# ============================================================================


@router.post("/{contract_id}/payment", response_model=EscrowResponse)
async def fund_escrow(
    contract_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ContractService = Depends(get_contract_service),
):
    """Client holds the full contract amount in escrow"""
    return EscrowResponse(clientSecret=service.create_escrow(contract_id, actor))


@router.post("/{contract_id}/refund", response_model=ContractResponse)
async def refund_escrow(
    contract_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ContractService = Depends(get_contract_service),
):
    return contract_response(service.refund_escrow(contract_id, actor))


@client_router.get("", response_model=list[ContractDetailResponse])
async def list_client_contracts(
    actor: Actor = Depends(get_current_actor),
    service: ContractService = Depends(get_contract_service),
):
    """Client dashboard: contracts with milestones and their payments"""
    return [contract_detail_response(c) for c in service.list_client_contracts(actor)]
