"""
Stripe webhook receiver

Events are signature-checked by the payment provider before anything is read.
Handled events:
- payment_intent.processing   -> payment PROCESSING
- payment_intent.succeeded    -> payment COMPLETED, milestone PAID
- checkout.session.completed  -> payment COMPLETED, milestone PAID
Everything else is acknowledged and ignored.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from ...database import get_db
from .provider import PaymentProvider, get_payment_provider
from .service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
    db: Session = Depends(get_db),
    provider: PaymentProvider = Depends(get_payment_provider),
):
    payload = await request.body()
    event = provider.construct_event(payload, stripe_signature)

    event_type = event.get("type")
    obj = event.get("data", {}).get("object", {}) or {}
    metadata = obj.get("metadata") or {}
    service = PaymentService(db, provider)

    logger.info(f"📨 Stripe webhook received: {event_type} ({event.get('id')})")

    if event_type == "payment_intent.processing":
        service.mark_processing(obj.get("id"), metadata)

    elif event_type == "payment_intent.succeeded":
        intent_id = obj.get("id")
        if service.is_escrow_intent(intent_id):
            logger.info(f"ℹ️ Escrow intent {intent_id} funded")
        else:
            service.confirm_payment(intent_id, metadata)

    elif event_type == "checkout.session.completed":
        if obj.get("payment_status") == "paid":
            service.confirm_payment(
                obj.get("payment_intent"), metadata, checkout_session_id=obj.get("id")
            )
        else:
            logger.info(f"ℹ️ Checkout session {obj.get('id')} completed without payment")

    else:
        logger.info(f"ℹ️ Ignoring unhandled webhook event type: {event_type}")

    return {"received": True}
