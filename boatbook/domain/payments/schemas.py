"""Payment domain schemas"""

from typing import Optional

from pydantic import BaseModel


class CreatePaymentRequest(BaseModel):
    """
    Body of POST /api/bayarcash/create-payment.

    Both fields are optional here so that a missing value gets the
    endpoint's own 400 body instead of a 422.
    """

    bookingId: Optional[str] = None
    paymentChannel: Optional[str] = None


class PaymentChannelResponse(BaseModel):
    code: str
    label: str
