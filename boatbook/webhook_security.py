"""
Webhook Security Module

Checksum computation and verification for Bayarcash payment intents and
callbacks. Bayarcash signs a pipe-joined list of field values with
HMAC-SHA256 using the merchant's API secret key.
"""

import hashlib
import hmac
import logging
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

# Order matters: Bayarcash signs these values joined by "|" in exactly this order
CALLBACK_CHECKSUM_FIELDS = (
    "record_type",
    "transaction_id",
    "exchange_reference_number",
    "exchange_transaction_id",
    "order_number",
    "currency",
    "amount",
    "payer_name",
    "payer_email",
    "payer_bank_name",
    "status",
    "status_description",
    "datetime",
)

PAYMENT_INTENT_CHECKSUM_FIELDS = (
    "payment_channel",
    "order_number",
    "amount",
    "payer_name",
    "payer_email",
)


class WebhookSignatureError(Exception):
    """Raised when webhook signature verification fails"""

    pass


def constant_time_compare(a: str, b: str) -> bool:
    """Compare two strings in constant time to prevent timing attacks"""
    if not a or not b:
        return False
    return hmac.compare_digest(a.encode(), b.encode())


def compute_hmac_sha256(secret: str, payload: bytes) -> str:
    """Compute HMAC-SHA256 signature of payload"""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def payment_intent_checksum(secret: str, data: Mapping[str, Any]) -> str:
    """Checksum over the intent fields, values ordered by field name"""
    values = [_as_str(data.get(key)) for key in sorted(PAYMENT_INTENT_CHECKSUM_FIELDS)]
    return compute_hmac_sha256(secret, "|".join(values).encode("utf-8"))


def callback_checksum(secret: str, data: Mapping[str, Any]) -> str:
    """Checksum over the callback fields; a missing field signs as an empty string"""
    values = [_as_str(data.get(key)) for key in CALLBACK_CHECKSUM_FIELDS]
    return compute_hmac_sha256(secret, "|".join(values).encode("utf-8"))


def verify_bayarcash_callback(secret: str, data: Mapping[str, Any]) -> None:
    """
    Verify the checksum carried by a Bayarcash callback.

    Raises:
        WebhookSignatureError: If the checksum is missing or does not match
    """
    received = _as_str(data.get("checksum"))
    if not received:
        logger.warning(f"🚫 Bayarcash callback without checksum: order={data.get('order_number')}")
        raise WebhookSignatureError("Missing checksum")

    expected = callback_checksum(secret, data)
    if not constant_time_compare(expected, received):
        logger.warning(f"🚫 Bayarcash checksum mismatch: order={data.get('order_number')}")
        raise WebhookSignatureError("Invalid checksum")

    logger.debug(f"✅ Bayarcash callback checksum verified: order={data.get('order_number')}")
