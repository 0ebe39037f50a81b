"""Availability router - FastAPI endpoints for slots"""

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
    BlockDateRequest,
    RecurringSlotCreate,
    ServiceOption,
    SlotResponse,
    TimeSlotCreate,
)
from .service import AvailabilityService, slot_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/availability", tags=["Availability"])

rate_limit_availability_check = create_rate_limiter(
    limit=60, window_seconds=60, key_prefix="availability_check"
)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


# ============================================================================
# PUBLIC
# ============================================================================


@router.get("/check")
async def check_availability(
    slot_id: Optional[str] = Query(None),
    pax: Optional[str] = Query(None),
    service: AvailabilityService = Depends(get_availability_service),
    _: None = Depends(rate_limit_availability_check),
):
    """Check whether a slot can take `pax` more passengers"""
    status_code, body = service.check_availability(slot_id, pax)
    return JSONResponse(status_code=status_code, content=body)


# ============================================================================
# DASHBOARD
# ============================================================================


@router.get("", response_model=list[SlotResponse])
async def get_month(
    year: int = Query(...),
    month: int = Query(...),
    business: Business = Depends(get_current_business),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.get_month(business, year, month)


@router.get("/date/{slot_date}", response_model=list[SlotResponse])
async def get_date(
    slot_date: date,
    business: Business = Depends(get_current_business),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.get_date(business, slot_date)


@router.get("/services", response_model=list[ServiceOption])
async def get_services(
    business: Business = Depends(get_current_business),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Active services for the slot form dropdown"""
    return service.get_services(business)


@router.post("/slots", response_model=SlotResponse)
async def create_slot(
    data: TimeSlotCreate,
    business: Business = Depends(get_current_business),
    service: AvailabilityService = Depends(get_availability_service),
):
    return slot_to_dict(service.create_slot(business, data))


@router.post("/slots/recurring")
async def create_recurring_slots(
    data: RecurringSlotCreate,
    business: Business = Depends(get_current_business),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.create_recurring_slots(business, data)


@router.put("/slots/{slot_id}", response_model=SlotResponse)
async def update_slot(
    slot_id: int,
    data: TimeSlotCreate,
    business: Business = Depends(get_current_business),
    service: AvailabilityService = Depends(get_availability_service),
):
    return slot_to_dict(service.update_slot(business, slot_id, data))


@router.delete("/slots/{slot_id}")
async def delete_slot(
    slot_id: int,
    business: Business = Depends(get_current_business),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.delete_slot(business, slot_id)


@router.post("/block-date")
async def toggle_block_date(
    data: BlockDateRequest,
    business: Business = Depends(get_current_business),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.toggle_block_date(business, data.date, data.blocked)
