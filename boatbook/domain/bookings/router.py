"""Booking router - FastAPI endpoints for booking operations"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...auth import get_current_business
from ...database import get_db
from ...models import Business
from ...rate_limiter import create_rate_limiter
from .schemas import (
    BookingCreate,
    BookingCreateResponse,
    BookingDetailResponse,
    BookingResponse,
    BookingStatusUpdate,
    CancelBookingRequest,
)
from .service import BookingService, booking_detail_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])
verify_router = APIRouter(prefix="/api/verify", tags=["Bookings"])

rate_limit_bookings = create_rate_limiter(limit=10, window_seconds=60, key_prefix="booking_create")


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


# ============================================================================
# PUBLIC
# ============================================================================


@router.post("", response_model=BookingCreateResponse)
async def create_booking(
    data: BookingCreate,
    service: BookingService = Depends(get_booking_service),
    _: None = Depends(rate_limit_bookings),
):
    """Create a pending booking from the public booking page"""
    return service.create_booking(data)


@router.get("/ref/{ref_code}")
async def get_booking_by_ref(
    ref_code: str,
    service: BookingService = Depends(get_booking_service),
):
    return service.get_public_booking(ref_code)


@verify_router.get("/{ref_code}")
async def verify_booking(
    ref_code: str,
    service: BookingService = Depends(get_booking_service),
):
    """Scanned from the ticket QR code at boarding"""
    result = service.verify_booking(ref_code)
    if result is None:
        return JSONResponse(status_code=404, content={"valid": False, "error": "Booking not found"})
    return result


# ============================================================================
# DASHBOARD
# ============================================================================


@router.get("", response_model=list[BookingResponse])
async def list_bookings(
    status: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    search: Optional[str] = Query(None),
    business: Business = Depends(get_current_business),
    service: BookingService = Depends(get_booking_service),
):
    return service.list_bookings(business, status, start_date, end_date, search)


@router.get("/export")
async def export_bookings_csv(
    status: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    search: Optional[str] = Query(None),
    business: Business = Depends(get_current_business),
    service: BookingService = Depends(get_booking_service),
):
    """Export bookings as CSV with the list filters applied"""
    return service.export_bookings_csv(business, status, start_date, end_date, search)


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(
    booking_id: int,
    business: Business = Depends(get_current_business),
    service: BookingService = Depends(get_booking_service),
):
    return booking_detail_to_dict(service.get_booking(business, booking_id))


@router.post("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: int,
    data: Optional[CancelBookingRequest] = None,
    business: Business = Depends(get_current_business),
    service: BookingService = Depends(get_booking_service),
):
    return service.cancel_booking(business, booking_id, data.reason if data else None)


@router.patch("/{booking_id}/status")
async def update_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    business: Business = Depends(get_current_business),
    service: BookingService = Depends(get_booking_service),
):
    return service.update_status(business, booking_id, data.status)
