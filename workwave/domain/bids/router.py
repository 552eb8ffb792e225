"""Bid router - submission and the client / freelancer bid views"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor
from ...database import get_db
from .schemas import BidCreate, BidStatusUpdate, bid_response
from .service import BidService

router = APIRouter(tags=["Bids"])


def get_bid_service(db: Session = Depends(get_db)) -> BidService:
    """Dependency injection for BidService"""
    return BidService(db)


@router.post("/bids")
async def create_bid(
    data: BidCreate,
    actor: Actor = Depends(get_current_actor),
    service: BidService = Depends(get_bid_service),
):
    bid = service.create_bid(data, actor)
    return {"bid": bid_response(bid)}


@router.get("/client/bids")
async def list_client_bids(
    actor: Actor = Depends(get_current_actor),
    service: BidService = Depends(get_bid_service),
    status: Optional[str] = Query(None),
    projectId: Optional[int] = Query(None),
    sortBy: str = Query("createdAt"),
    sortOrder: str = Query("desc"),
):
    """Bids received on the caller's projects"""
    bids = service.list_client_bids(actor, status, projectId, sortBy, sortOrder)
    return {"bids": [bid_response(b) for b in bids]}


@router.patch("/client/bids")
async def update_bid_status(
    data: BidStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    service: BidService = Depends(get_bid_service),
):
    bid = service.update_bid_status(data.id, data.status, actor)
    return {"bid": bid_response(bid)}


@router.get("/freelancer/bids")
async def list_freelancer_bids(
    actor: Actor = Depends(get_current_actor),
    service: BidService = Depends(get_bid_service),
):
    bids = service.list_freelancer_bids(actor)
    return {"bids": [bid_response(b) for b in bids]}
