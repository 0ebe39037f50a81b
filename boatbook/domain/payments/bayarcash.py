"""Bayarcash service - Integration with the Bayarcash v2 payment API"""

import logging
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import httpx

from ...config import (
    BAYARCASH_API_SECRET_KEY,
    BAYARCASH_API_TOKEN,
    BAYARCASH_PORTAL_KEY,
    BAYARCASH_SANDBOX,
    BAYARCASH_TIMEOUT_SECONDS,
)
from ...webhook_security import payment_intent_checksum

logger = logging.getLogger(__name__)

SANDBOX_API_URL = "https://console.bayarcash-sandbox.com/api/v2"
PRODUCTION_API_URL = "https://console.bayar.cash/api/v2"

PAYMENT_CHANNELS = {
    "FPX": 1,
    "MANUAL_TRANSFER": 2,
    "FPX_DIRECT_DEBIT": 3,
    "FPX_LINE_OF_CREDIT": 4,
    "DUITNOW_DOBW": 5,
    "DUITNOW_QR": 6,
    "SPAYLATER": 7,
    "BOOST_PAYFLEX": 8,
    "QRISOB": 9,
    "QRISWALLET": 10,
    "NETS": 11,
    "CREDIT_CARD": 12,
    "ALIPAY": 13,
    "WECHATPAY": 14,
    "PROMPTPAY": 15,
    "TOUCH_N_GO": 16,
    "BOOST_WALLET": 17,
    "GRABPAY": 18,
    "GRABPL": 19,
    "SHOPEE_PAY": 20,
}

PAYMENT_CHANNEL_LABELS = {
    "FPX": "FPX Online Banking",
    "MANUAL_TRANSFER": "Manual Bank Transfer",
    "FPX_DIRECT_DEBIT": "FPX Direct Debit",
    "FPX_LINE_OF_CREDIT": "FPX Line of Credit",
    "DUITNOW_DOBW": "DuitNow Online Banking",
    "DUITNOW_QR": "DuitNow QR",
    "SPAYLATER": "SPayLater",
    "BOOST_PAYFLEX": "Boost PayFlex",
    "QRISOB": "QRIS Online Banking",
    "QRISWALLET": "QRIS Wallet",
    "NETS": "NETS",
    "CREDIT_CARD": "Credit/Debit Card",
    "ALIPAY": "Alipay",
    "WECHATPAY": "WeChat Pay",
    "PROMPTPAY": "PromptPay",
    "TOUCH_N_GO": "Touch 'n Go",
    "BOOST_WALLET": "Boost",
    "GRABPAY": "GrabPay",
    "GRABPL": "Grab PayLater",
    "SHOPEE_PAY": "ShopeePay",
}

# Channels enabled on the merchant portal
PRIMARY_CHANNELS = ("FPX", "FPX_LINE_OF_CREDIT", "DUITNOW_DOBW", "DUITNOW_QR")

# Bayarcash status codes: 0 new, 1 pending, 2 unsuccessful, 3 successful, 4 cancelled
STATUS_MAP = {0: "pending", 1: "processing", 2: "failed", 3: "succeeded", 4: "failed"}

PAYMENT_INTENT_URL_PATTERN = re.compile(r"/payment-intent/(pi_[a-zA-Z0-9]+)")


class PaymentGatewayError(Exception):
    """Raised when Bayarcash rejects a request or cannot be reached"""

    pass


@dataclass
class TransactionStatus:
    status: str  # pending, processing, succeeded, failed
    raw_status: Any = None
    transaction_id: Optional[str] = None
    exchange_ref_number: Optional[str] = None


def map_bayarcash_status(status: Any) -> str:
    try:
        return STATUS_MAP.get(int(status), "pending")
    except (TypeError, ValueError):
        return "pending"


def first_record(result: Any) -> Optional[dict]:
    """First record of a gateway response, whether enveloped in "data", listed or bare"""
    data = result.get("data", result) if isinstance(result, dict) else result
    if isinstance(data, list):
        data = data[0] if data else None
    return data if isinstance(data, dict) and data else None


def whole_ringgit(amount: float) -> str:
    """Whole ringgit, rounding half up: RM 12.50 goes out as 13"""
    return str(int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)))


def parse_transaction(data: dict) -> TransactionStatus:
    """
    Normalise a payment intent or transaction record.

    Intent records report 1/"SUCCESSFUL"/"COMPLETED" for a paid intent, which
    differs from the transaction status codes handled by map_bayarcash_status.
    """
    raw_status = data.get("status")
    if raw_status is None:
        raw_status = data.get("payment_status")
    if raw_status is None:
        raw_status = data.get("transaction_status")

    if raw_status in (1, "1", "SUCCESSFUL", "COMPLETED", "succeeded"):
        status = "succeeded"
    elif raw_status in (2, "2", "FAILED"):
        status = "failed"
    else:
        status = map_bayarcash_status(raw_status)

    transaction_id = data.get("transaction_id") or data.get("id")
    exchange_ref = data.get("exchange_reference_number") or data.get("reference_number")
    return TransactionStatus(
        status=status,
        raw_status=raw_status,
        transaction_id=str(transaction_id) if transaction_id is not None else None,
        exchange_ref_number=exchange_ref,
    )


class BayarcashClient:
    """Client for Bayarcash API operations"""

    def __init__(
        self,
        portal_key: str = BAYARCASH_PORTAL_KEY,
        api_token: str = BAYARCASH_API_TOKEN,
        secret_key: str = BAYARCASH_API_SECRET_KEY,
        sandbox: bool = BAYARCASH_SANDBOX,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.portal_key = portal_key
        self.api_token = api_token
        self.secret_key = secret_key
        self.api_url = SANDBOX_API_URL if sandbox else PRODUCTION_API_URL
        self.transport = transport

        if not self.is_available():
            logger.warning("Bayarcash credentials not set; payment endpoints will fail until configured")

    def is_available(self) -> bool:
        return bool(self.portal_key and self.api_token and self.secret_key)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.api_url,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {self.api_token}",
            },
            timeout=BAYARCASH_TIMEOUT_SECONDS,
            transport=self.transport,
        )

    async def create_payment_intent(
        self,
        order_number: str,
        amount: float,
        payer_name: str,
        payer_email: str,
        payer_phone: str,
        payment_channel: str,
        return_url: str,
    ) -> tuple[str, Optional[str]]:
        """
        Create a payment intent and return (checkout_url, payment_intent_id).

        Bayarcash reads the amount as whole ringgit, so RM 80.00 goes out as "80".
        """
        if not self.is_available():
            raise PaymentGatewayError("Bayarcash credentials not configured")
        if payment_channel not in PAYMENT_CHANNELS:
            raise PaymentGatewayError(f"Unknown payment channel: {payment_channel}")

        data = {
            "portal_key": self.portal_key,
            "order_number": order_number,
            "amount": whole_ringgit(amount),
            "payer_name": payer_name,
            "payer_email": payer_email,
            "payer_telephone_number": payer_phone or "",
            "payment_channel": PAYMENT_CHANNELS[payment_channel],
            "return_url": return_url,
        }
        data["checksum"] = payment_intent_checksum(self.secret_key, data)

        try:
            async with self._client() as client:
                response = await client.post("/payment-intents", json=data)
        except httpx.HTTPError as e:
            logger.error(f"❌ Bayarcash connection failed for {order_number}: {e}")
            raise PaymentGatewayError("Failed to connect to payment gateway") from e

        try:
            result = response.json()
        except ValueError:
            result = {}

        if response.status_code >= 400:
            message = result.get("message") or result.get("error") or response.text
            logger.error(f"❌ Bayarcash rejected payment intent for {order_number}: {message}")
            raise PaymentGatewayError(str(message))

        url = result.get("url")
        if not url:
            raise PaymentGatewayError("Payment gateway did not return a checkout URL")

        payment_intent_id = str(result["id"]) if result.get("id") else None
        if not payment_intent_id:
            match = PAYMENT_INTENT_URL_PATTERN.search(url)
            if match:
                payment_intent_id = match.group(1)

        logger.info(f"✅ Bayarcash payment intent created for {order_number}: {payment_intent_id}")
        return url, payment_intent_id

    async def _get(self, client: httpx.AsyncClient, path: str, params: Optional[dict] = None):
        """GET returning parsed JSON, or None on any non-2xx or transport error"""
        try:
            response = await client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Bayarcash GET {path} failed: {e}")
            return None
        if response.status_code >= 400:
            logger.debug(f"🔍 Bayarcash GET {path} returned {response.status_code}")
            return None
        try:
            return response.json()
        except ValueError:
            return None

    async def get_payment_intent_status(self, payment_intent_id: str) -> TransactionStatus:
        """
        Look up a payment intent's status.

        Tries the intent endpoint first, then transactions filtered by intent,
        then the transaction endpoint keyed by the same id.
        """
        if not self.api_token:
            raise PaymentGatewayError("Bayarcash credentials not configured")

        async with self._client() as client:
            result = await self._get(client, f"/payment-intent/{payment_intent_id}")
            intent = first_record(result)
            if intent and ("status" in intent or "payment_status" in intent):
                return parse_transaction(intent)

            result = await self._get(
                client, "/transactions", params={"payment_intent_id": payment_intent_id}
            )
            transaction = first_record(result)
            if transaction:
                return parse_transaction(transaction)

            result = await self._get(client, f"/transactions/{payment_intent_id}")
            transaction = first_record(result)
            if transaction:
                return parse_transaction(transaction)

        raise PaymentGatewayError("Could not retrieve status from any known endpoint")

    async def get_transaction_by_order_number(self, order_number: str) -> TransactionStatus:
        if not self.api_token:
            raise PaymentGatewayError("Bayarcash credentials not configured")

        async with self._client() as client:
            result = await self._get(client, "/transactions", params={"order_number": order_number})

        if result is None:
            raise PaymentGatewayError("Failed to get transaction status")
        transaction = first_record(result)
        if not transaction:
            raise PaymentGatewayError("Transaction not found")

        return TransactionStatus(
            status=map_bayarcash_status(transaction.get("status")),
            raw_status=transaction.get("status"),
            transaction_id=transaction.get("transaction_id"),
            exchange_ref_number=transaction.get("exchange_reference_number"),
        )


# Singleton instance
bayarcash_client = BayarcashClient()


def get_bayarcash_client() -> BayarcashClient:
    return bayarcash_client
