"""Payment router - Bayarcash checkout, callback and return endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from ...database import get_db
from ...rate_limiter import create_rate_limiter
from .bayarcash import PAYMENT_CHANNEL_LABELS, PRIMARY_CHANNELS, BayarcashClient, get_bayarcash_client
from .schemas import CreatePaymentRequest, PaymentChannelResponse
from .service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bayarcash", tags=["Payments"])

rate_limit_payments = create_rate_limiter(limit=10, window_seconds=60, key_prefix="payment_create")


def get_payment_service(
    db: Session = Depends(get_db),
    gateway: BayarcashClient = Depends(get_bayarcash_client),
) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db, gateway)


async def read_body(request: Request) -> dict:
    """Bayarcash posts form-encoded data; tests and proxies may send JSON"""
    content_type = request.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            body = await request.json()
            return body if isinstance(body, dict) else {}
        if "form" in content_type:
            form = await request.form()
            return {key: str(value) for key, value in form.items()}
    except ValueError as e:
        logger.warning(f"⚠️ Could not parse {request.method} body on {request.url.path}: {e}")
    return {}


@router.get("/channels", response_model=list[PaymentChannelResponse])
def list_payment_channels():
    """Channels offered at checkout, in display order"""
    return [PaymentChannelResponse(code=code, label=PAYMENT_CHANNEL_LABELS[code]) for code in PRIMARY_CHANNELS]


@router.post("/create-payment")
async def create_payment(
    data: CreatePaymentRequest,
    service: PaymentService = Depends(get_payment_service),
    _: None = Depends(rate_limit_payments),
):
    status_code, body = await service.create_payment(data.bookingId, data.paymentChannel)
    return JSONResponse(status_code=status_code, content=body)


@router.post("/callback")
async def payment_callback(
    request: Request,
    service: PaymentService = Depends(get_payment_service),
):
    body = await read_body(request)
    logger.info(f"📥 Bayarcash callback received: order={body.get('order_number')}")
    status_code, content = service.handle_callback(body)
    return JSONResponse(status_code=status_code, content=content)


@router.api_route("/return", methods=["GET", "POST"])
async def payment_return(
    request: Request,
    service: PaymentService = Depends(get_payment_service),
):
    """Customer lands here from the Bayarcash checkout page"""
    params = request.query_params
    body = await read_body(request) if request.method == "POST" else {}

    def pick(*keys: str) -> Optional[str]:
        for source in (params, body):
            for key in keys:
                value = source.get(key)
                if value not in (None, ""):
                    return str(value)
        return None

    redirect_to = await service.handle_return(
        payment_public_id=pick("payment_id"),
        status_id=pick("status_id", "status"),
        transaction_id=pick("transaction_id"),
        exchange_ref_number=pick("exchange_reference_number"),
    )
    return RedirectResponse(url=redirect_to, status_code=303)
