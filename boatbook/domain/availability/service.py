"""Availability service - Business logic for slots and capacity checks"""

import calendar
import logging
import math
import re
from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import BUSINESS_TIMEZONE
from ...models import Availability, Business
from .repository import AvailabilityRepository
from .schemas import RecurringSlotCreate, TimeSlotCreate

logger = logging.getLogger(__name__)

MONTHLY_WEEK_NUMBERS = {"first": 1, "second": 2, "third": 3, "fourth": 4}
MAX_SLOT_ID = 2**31 - 1
LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def leading_int(value: str) -> int:
    """Leading integer of a query value, so "2abc" and "2.5" both read as 2; 0 when there is none"""
    match = LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


def sunday_based_weekday(d: date) -> int:
    """0 = Sunday ... 6 = Saturday"""
    return (d.weekday() + 1) % 7


def week_of_month(d: date) -> int:
    first_weekday = sunday_based_weekday(d.replace(day=1))
    return math.ceil((d.day + first_weekday) / 7)


def is_last_week_of_month(d: date) -> bool:
    last_day = calendar.monthrange(d.year, d.month)[1]
    return last_day - d.day < 7


def generate_recurring_dates(data: RecurringSlotCreate) -> list[date]:
    """Expand a recurrence pattern into concrete dates, without duplicates"""
    if data.pattern_type == "custom":
        return list(dict.fromkeys(data.custom_dates))

    dates = []
    current = data.start_date
    while current <= data.end_date:
        if sunday_based_weekday(current) in data.days_of_week:
            include = True
            if data.pattern_type == "monthly" and data.monthly_week != "all":
                if data.monthly_week == "last":
                    include = is_last_week_of_month(current)
                else:
                    include = week_of_month(current) == MONTHLY_WEEK_NUMBERS[data.monthly_week]
            if include:
                dates.append(current)
        current += timedelta(days=1)
    return dates


def slot_to_dict(slot: Availability) -> dict:
    return {
        "id": slot.id,
        "service_id": slot.service_id,
        "service_name": slot.service.name if slot.service else None,
        "date": slot.date,
        "start_time": slot.start_time,
        "end_time": slot.end_time,
        "capacity": slot.capacity,
        "booked_count": slot.booked_count,
        "remaining": max(0, slot.capacity - slot.booked_count),
        "is_blocked": slot.is_blocked,
        "notes": slot.notes,
    }


class AvailabilityService:
    """Service layer for slot business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def check_availability(
        self, slot_id: Optional[str], pax_param: Optional[str], now: Optional[datetime] = None
    ) -> tuple[int, dict]:
        """
        Public capacity check for one slot.

        Reads the slot and decides; nothing is reserved. Returns
        (status_code, body) because clients rely on the exact body shape.
        """
        if not slot_id:
            return 400, {"error": "slot_id is required"}

        pax = leading_int(pax_param) if pax_param not in (None, "") else 1
        if pax < 1:
            return 400, {"error": "pax must be a positive number"}

        slot = None
        if slot_id.isascii() and slot_id.isdecimal() and int(slot_id) <= MAX_SLOT_ID:
            slot = self.repo.get_slot(self.db, int(slot_id))
        if not slot:
            return 404, {"available": False, "error": "Slot not found"}

        if slot.is_blocked:
            return 200, {"available": False, "remaining": 0, "error": "This date is blocked"}

        tz = ZoneInfo(BUSINESS_TIMEZONE)
        now = now or datetime.now(tz)
        if datetime.combine(slot.date, slot.start_time, tzinfo=tz) < now:
            return 200, {"available": False, "remaining": 0, "error": "This slot is in the past"}

        remaining = slot.capacity - slot.booked_count
        available = remaining >= pax
        return 200, {
            "available": available,
            "remaining": remaining,
            "capacity": slot.capacity,
            "booked": slot.booked_count,
            "error": None if available else "Not enough capacity",
        }

    def get_month(self, business: Business, year: int, month: int) -> list[dict]:
        if month < 1 or month > 12:
            raise HTTPException(status_code=400, detail="Month must be between 1 and 12")
        slots = self.repo.get_slots_for_month(self.db, business.id, year, month)
        return [slot_to_dict(s) for s in slots]

    def get_date(self, business: Business, slot_date: date) -> list[dict]:
        slots = self.repo.get_slots_for_date(self.db, business.id, slot_date)
        return [slot_to_dict(s) for s in slots]

    def create_slot(self, business: Business, data: TimeSlotCreate) -> Availability:
        if self.repo.find_slot_at(self.db, business.id, data.date, data.start_time):
            raise HTTPException(status_code=400, detail="A slot already exists at this time")

        slot = self.repo.create_slot(
            self.db,
            business.id,
            service_id=data.service_id,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            capacity=data.capacity,
            is_blocked=False,
            notes=data.notes or None,
        )
        logger.info(f"✅ Slot {slot.id} created for business {business.id} on {slot.date}")
        return slot

    def create_recurring_slots(self, business: Business, data: RecurringSlotCreate) -> dict:
        dates = generate_recurring_dates(data)
        if not dates:
            raise HTTPException(status_code=400, detail="No matching dates found")

        created = 0
        for slot_date in dates:
            # Existing slots win; the pattern only fills gaps
            if self.repo.slot_exists(
                self.db, business.id, data.service_id, slot_date, data.start_time
            ):
                continue
            self.repo.create_slot(
                self.db,
                business.id,
                commit=False,
                service_id=data.service_id,
                date=slot_date,
                start_time=data.start_time,
                end_time=data.end_time,
                capacity=data.capacity,
                is_blocked=False,
            )
            created += 1
        self.db.commit()

        logger.info(
            f"✅ Generated {len(dates)} {data.pattern_type} slot dates for business {business.id} ({created} new)"
        )
        return {"success": True, "count": len(dates), "created": created}

    def update_slot(self, business: Business, slot_id: int, data: TimeSlotCreate) -> Availability:
        slot = self.repo.get_business_slot(self.db, slot_id, business.id)
        if not slot:
            raise HTTPException(status_code=404, detail="Slot not found")

        return self.repo.update_slot(
            self.db,
            slot,
            service_id=data.service_id,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            capacity=data.capacity,
            notes=data.notes or None,
        )

    def delete_slot(self, business: Business, slot_id: int) -> dict:
        slot = self.repo.get_business_slot(self.db, slot_id, business.id)
        if not slot:
            raise HTTPException(status_code=404, detail="Slot not found")
        if slot.booked_count > 0:
            raise HTTPException(status_code=400, detail="Cannot delete slot with existing bookings")

        self.repo.delete_slot(self.db, slot)
        logger.info(f"🗑️ Slot {slot_id} deleted for business {business.id}")
        return {"success": True}

    def toggle_block_date(self, business: Business, slot_date: date, blocked: bool) -> dict:
        """Block or unblock every slot on a date; blocking an empty date adds a placeholder"""
        updated = self.repo.set_blocked_for_date(self.db, business.id, slot_date, blocked)

        if blocked and updated == 0:
            self.repo.create_slot(
                self.db,
                business.id,
                commit=False,
                service_id=None,
                date=slot_date,
                start_time=time(0, 0),
                end_time=time(23, 59),
                capacity=0,
                is_blocked=True,
                notes="Blocked date",
            )
        self.db.commit()

        logger.info(f"{'🚫 Blocked' if blocked else '✅ Unblocked'} {slot_date} for business {business.id}")
        return {"success": True}

    def get_services(self, business: Business):
        return self.repo.get_active_services(self.db, business.id)
