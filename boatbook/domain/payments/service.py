"""Payment service - Bayarcash checkout, callback and return handling"""

import logging
from typing import Any, Optional
from urllib.parse import urlencode

from sqlalchemy.orm import Session

from ...config import APP_URL, BAYARCASH_API_SECRET_KEY, DEFAULT_CURRENCY, FRONTEND_URL
from ...models import Booking, Payment
from ...webhook_security import WebhookSignatureError, verify_bayarcash_callback
from .bayarcash import (
    PRIMARY_CHANNELS,
    BayarcashClient,
    PaymentGatewayError,
    map_bayarcash_status,
)
from .repository import PaymentRepository

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("succeeded", "failed")


def confirmation_url(booking: Booking, payment_state: str) -> str:
    query = urlencode({"ref": booking.ref_code, "payment": payment_state})
    return f"{FRONTEND_URL}/book/{booking.business.slug}/confirmation?{query}"


def failure_url(booking: Booking) -> str:
    query = urlencode({"ref": booking.ref_code, "payment": "failed"})
    return f"{FRONTEND_URL}/book/{booking.business.slug}?{query}"


class PaymentService:
    """Service layer for payment business logic"""

    def __init__(
        self, db: Session, gateway: BayarcashClient, secret_key: Optional[str] = BAYARCASH_API_SECRET_KEY
    ):
        self.db = db
        self.repo = PaymentRepository()
        self.gateway = gateway
        self.secret_key = secret_key

    def _confirm_booking(self, booking: Booking) -> None:
        if booking.status == "pending":
            booking.status = "confirmed"
            self.db.commit()
            logger.info(f"✅ Booking {booking.ref_code} confirmed by payment")

    async def create_payment(self, booking_public_id: Optional[str], channel: Optional[str]) -> tuple[int, dict]:
        """
        Start a Bayarcash checkout for a pending booking.

        Returns (status_code, body). A gateway rejection marks the payment
        failed, which is the only compensation this flow performs.
        """
        if not booking_public_id:
            return 400, {"error": "Booking ID is required"}
        if not channel or channel not in PRIMARY_CHANNELS:
            return 400, {"error": "Invalid payment channel"}

        booking = self.repo.get_booking_by_public_id(self.db, booking_public_id)
        if not booking:
            return 404, {"error": "Booking not found"}
        if booking.status != "pending":
            return 400, {"error": "Booking is not in pending status"}

        payment = self.repo.get_pending_payment(self.db, booking.id)
        if payment:
            logger.info(f"🔄 Reusing pending payment {payment.public_id} for {booking.ref_code}")
        else:
            payment = self.repo.create_payment(
                self.db,
                booking.id,
                amount=booking.total_amount,
                currency=DEFAULT_CURRENCY,
                status="pending",
                payment_gateway="bayarcash",
                method=channel.lower(),
            )

        return_url = f"{APP_URL}/api/bayarcash/return?{urlencode({'payment_id': payment.public_id})}"

        try:
            checkout_url, payment_intent_id = await self.gateway.create_payment_intent(
                order_number=booking.ref_code,
                amount=booking.total_amount,
                payer_name=booking.customer_name,
                payer_email=booking.customer_email,
                payer_phone=booking.customer_phone or "",
                payment_channel=channel,
                return_url=return_url,
            )
        except PaymentGatewayError as e:
            payment.status = "failed"
            self.db.commit()
            logger.error(f"❌ Payment {payment.public_id} failed at gateway: {e}")
            return 500, {"error": str(e) or "Failed to create payment"}

        payment.status = "processing"
        payment.gateway_session_id = payment_intent_id
        self.db.commit()

        logger.info(f"✅ Checkout started for {booking.ref_code} via {channel}")
        return 200, {"success": True, "checkoutUrl": checkout_url, "paymentId": payment.public_id}

    def handle_callback(self, body: dict[str, Any]) -> tuple[int, dict]:
        """Apply a server-to-server status notification from Bayarcash"""
        if not self.secret_key:
            logger.error("❌ BAYARCASH_API_SECRET_KEY not configured")
            return 500, {"error": "Configuration error"}

        try:
            verify_bayarcash_callback(self.secret_key, body)
        except WebhookSignatureError:
            return 400, {"error": "Invalid checksum"}

        order_number = body.get("order_number")
        booking = self.repo.get_booking_by_ref(self.db, order_number) if order_number else None
        if not booking:
            logger.error(f"❌ Booking not found for order: {order_number}")
            return 404, {"error": "Booking not found"}

        payment = self.repo.get_latest_payment(self.db, booking.id)
        if not payment:
            logger.error(f"❌ Payment not found for booking: {booking.ref_code}")
            return 404, {"error": "Payment not found"}

        payment_status = map_bayarcash_status(body.get("status"))
        self.repo.update_payment(
            self.db,
            payment,
            gateway_payment_id=body.get("transaction_id"),
            exchange_ref_number=body.get("exchange_reference_number"),
            payer_bank_code=body.get("payer_bank_name"),
            status=payment_status,
            gateway_metadata=dict(body),
        )
        if payment_status == "succeeded":
            self._confirm_booking(booking)

        logger.info(
            f"📥 Payment callback processed: order={order_number}, status={payment_status}, amount={body.get('amount')}"
        )
        return 200, {"success": True}

    async def handle_return(
        self,
        payment_public_id: Optional[str],
        status_id: Optional[str] = None,
        transaction_id: Optional[str] = None,
        exchange_ref_number: Optional[str] = None,
    ) -> str:
        """
        Work out where to send the customer after checkout.

        The callback may not have arrived yet, so a pending payment is first
        settled from the status carried by the redirect, then from the gateway.
        """
        payment: Optional[Payment] = (
            self.repo.get_by_public_id(self.db, payment_public_id) if payment_public_id else None
        )
        if not payment or not payment.booking or not payment.booking.business:
            logger.warning(f"⚠️ Return for unknown payment {payment_public_id}")
            return f"{FRONTEND_URL}/"

        booking = payment.booking

        if payment.status in ("pending", "processing"):
            new_status = map_bayarcash_status(status_id) if status_id not in (None, "") else None

            if new_status in TERMINAL_STATUSES:
                self.repo.update_payment(
                    self.db,
                    payment,
                    status=new_status,
                    gateway_payment_id=transaction_id,
                    exchange_ref_number=exchange_ref_number,
                )
            else:
                try:
                    if payment.gateway_session_id:
                        result = await self.gateway.get_payment_intent_status(payment.gateway_session_id)
                    else:
                        result = await self.gateway.get_transaction_by_order_number(booking.ref_code)
                except PaymentGatewayError as e:
                    logger.warning(f"⚠️ Could not get status for payment {payment.public_id}: {e}")
                else:
                    self.repo.update_payment(
                        self.db,
                        payment,
                        status=result.status,
                        gateway_payment_id=result.transaction_id,
                        exchange_ref_number=result.exchange_ref_number,
                    )

            if payment.status == "succeeded":
                self._confirm_booking(booking)

        if payment.status == "succeeded":
            return confirmation_url(booking, "success")
        if payment.status == "failed":
            return failure_url(booking)
        return confirmation_url(booking, "pending")
