"""
Cron endpoints
Triggered every few minutes by an external scheduler (cron-job.org or Vercel Cron style)
"""

import logging
import time
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..config import CRON_SECRET
from ..database import get_db
from ..webhook_security import constant_time_compare

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron", tags=["Cron"])


def cancel_expired_bookings(db: Session) -> Optional[int]:
    """Run the database sweep; the procedure owns all of the cancellation logic"""
    result = db.execute(text("SELECT cancel_expired_bookings()")).scalar()
    db.commit()
    return result


def is_authorized_cron_request(request: Request, secret: Optional[str]) -> bool:
    """Accept x-api-key or a Bearer token; open when no secret is configured"""
    if not secret:
        return True
    api_key = request.headers.get("x-api-key") or ""
    auth_header = request.headers.get("authorization") or ""
    bearer_token = auth_header.replace("Bearer ", "", 1)
    return constant_time_compare(api_key, secret) or constant_time_compare(bearer_token, secret)


@router.api_route("/auto-cancel", methods=["GET", "POST"])
async def auto_cancel(request: Request, db: Session = Depends(get_db)):
    if not is_authorized_cron_request(request, CRON_SECRET):
        logger.warning(f"⚠️ Unauthorized cron attempt from: {request.headers.get('x-forwarded-for')}")
        return JSONResponse(
            status_code=401,
            content={"error": "Unauthorized", "message": "Invalid or missing API key"},
        )

    started = time.monotonic()
    try:
        cancelled_count = cancel_expired_bookings(db) or 0
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error cancelling expired bookings: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e) or "Unknown error"})

    duration_ms = int((time.monotonic() - started) * 1000)
    logger.info(f"⏰ Auto-cancel complete: {cancelled_count} cancelled in {duration_ms}ms")

    return {
        "success": True,
        "cancelled_count": cancelled_count,
        "duration_ms": duration_ms,
        "timestamp": datetime.utcnow().isoformat(timespec="milliseconds") + "Z",
    }
