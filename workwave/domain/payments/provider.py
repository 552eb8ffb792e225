"""
Payment provider - the narrow interface escrow operations go through, and its
Stripe implementation.

Amounts crossing this interface are integer minor units (cents). Calls are single
attempt: any provider failure is logged and surfaced as PaymentProviderError.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import stripe

from ...config import STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET
from ...errors import PaymentProviderError, ValidationError

logger = logging.getLogger(__name__)

# Seconds a signed webhook stays acceptable
WEBHOOK_TOLERANCE_SECONDS = 300


@dataclass
class CheckoutSessionResult:
    id: str
    url: str
    payment_intent_id: Optional[str] = None


@dataclass
class PaymentIntentResult:
    id: str
    client_secret: str
    status: str


class PaymentProvider(ABC):
    """Operations the marketplace needs from a payment provider"""

    @abstractmethod
    def create_checkout_session(
        self,
        amount_minor: int,
        currency: str,
        name: str,
        description: Optional[str],
        success_url: str,
        cancel_url: str,
        metadata: dict,
    ) -> CheckoutSessionResult: ...

    @abstractmethod
    def create_payment_intent(
        self, amount_minor: int, currency: str, metadata: dict
    ) -> PaymentIntentResult: ...

    @abstractmethod
    def create_transfer(
        self,
        amount_minor: int,
        currency: str,
        destination: str,
        source_payment_intent_id: str,
        metadata: dict,
    ) -> str:
        """Move escrowed funds to a connected account; returns the transfer id"""

    @abstractmethod
    def create_refund(self, payment_intent_id: str) -> str:
        """Refund an escrow hold; returns the refund id"""

    @abstractmethod
    def construct_event(self, payload: bytes, signature: Optional[str]) -> dict:
        """Verify a webhook signature and return the decoded event"""


class StripePaymentProvider(PaymentProvider):
    """Stripe-backed provider using the official SDK"""

    def __init__(self, api_key: Optional[str] = None, webhook_secret: Optional[str] = None):
        self.api_key = api_key
        self.webhook_secret = webhook_secret

        if not self.api_key:
            logger.warning("STRIPE_SECRET_KEY not set; payment endpoints will fail until configured")
        else:
            logger.info("Stripe payment provider initialized")
        if not self.webhook_secret:
            logger.warning("STRIPE_WEBHOOK_SECRET not set; webhooks will be rejected")

    def _check_configured(self):
        if not self.api_key:
            raise PaymentProviderError("Payment provider not configured")

    def create_checkout_session(
        self,
        amount_minor: int,
        currency: str,
        name: str,
        description: Optional[str],
        success_url: str,
        cancel_url: str,
        metadata: dict,
    ) -> CheckoutSessionResult:
        self._check_configured()

        product_data = {"name": name}
        if description:
            product_data["description"] = description

        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                payment_method_types=["card"],
                line_items=[
                    {
                        "price_data": {
                            "currency": currency,
                            "product_data": product_data,
                            "unit_amount": amount_minor,
                        },
                        "quantity": 1,
                    }
                ],
                mode="payment",
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                payment_intent_data={"metadata": metadata},
            )
            logger.info(f"✅ Created Stripe checkout session {session.id}")
            return CheckoutSessionResult(
                id=session.id,
                url=session.url,
                payment_intent_id=session.get("payment_intent"),
            )
        except stripe.StripeError as e:
            logger.error(f"❌ Stripe checkout session creation failed: {e}")
            raise PaymentProviderError("Failed to create checkout session") from e

    def create_payment_intent(
        self, amount_minor: int, currency: str, metadata: dict
    ) -> PaymentIntentResult:
        self._check_configured()

        try:
            intent = stripe.PaymentIntent.create(
                api_key=self.api_key,
                amount=amount_minor,
                currency=currency,
                metadata=metadata,
                automatic_payment_methods={"enabled": True},
            )
            logger.info(f"✅ Created Stripe payment intent {intent.id} for {amount_minor} {currency}")
            return PaymentIntentResult(
                id=intent.id, client_secret=intent.client_secret, status=intent.status
            )
        except stripe.StripeError as e:
            logger.error(f"❌ Stripe payment intent creation failed: {e}")
            raise PaymentProviderError("Failed to create payment intent") from e

    def create_transfer(
        self,
        amount_minor: int,
        currency: str,
        destination: str,
        source_payment_intent_id: str,
        metadata: dict,
    ) -> str:
        self._check_configured()

        try:
            # Transfers draw on the charge behind the escrow intent
            intent = stripe.PaymentIntent.retrieve(source_payment_intent_id, api_key=self.api_key)
            transfer = stripe.Transfer.create(
                api_key=self.api_key,
                amount=amount_minor,
                currency=currency,
                destination=destination,
                source_transaction=intent.get("latest_charge"),
                metadata=metadata,
            )
            logger.info(f"✅ Created Stripe transfer {transfer.id} to {destination}")
            return transfer.id
        except stripe.StripeError as e:
            logger.error(f"❌ Stripe transfer to {destination} failed: {e}")
            raise PaymentProviderError("Failed to release escrow") from e

    def create_refund(self, payment_intent_id: str) -> str:
        self._check_configured()

        try:
            refund = stripe.Refund.create(api_key=self.api_key, payment_intent=payment_intent_id)
            logger.info(f"✅ Created Stripe refund {refund.id} for {payment_intent_id}")
            return refund.id
        except stripe.StripeError as e:
            logger.error(f"❌ Stripe refund for {payment_intent_id} failed: {e}")
            raise PaymentProviderError("Failed to refund escrow") from e

    def construct_event(self, payload: bytes, signature: Optional[str]) -> dict:
        if not self.webhook_secret:
            logger.error("❌ Webhook received but STRIPE_WEBHOOK_SECRET is not configured")
            raise PaymentProviderError("Webhook secret not configured")
        if not signature:
            raise ValidationError("Missing stripe-signature header")

        body = payload.decode("utf-8")
        try:
            stripe.WebhookSignature.verify_header(
                body, signature, self.webhook_secret, WEBHOOK_TOLERANCE_SECONDS
            )
        except stripe.SignatureVerificationError as e:
            logger.warning(f"⚠️ Webhook signature verification failed: {e}")
            raise ValidationError(f"Webhook Error: {e}") from e

        try:
            return json.loads(body)
        except ValueError as e:
            raise ValidationError("Invalid webhook payload") from e


@lru_cache
def get_payment_provider() -> PaymentProvider:
    """Dependency returning the process-wide provider"""
    return StripePaymentProvider(api_key=STRIPE_SECRET_KEY, webhook_secret=STRIPE_WEBHOOK_SECRET)
