"""Availability repository - Database operations for slots"""

import calendar
from datetime import date, time
from typing import Optional

from sqlalchemy import case
from sqlalchemy.orm import Session, joinedload

from ...models import Availability, Service


class AvailabilityRepository:
    """Repository for slot database operations"""

    @staticmethod
    def get_slot(db: Session, slot_id: int) -> Optional[Availability]:
        return db.query(Availability).filter(Availability.id == slot_id).first()

    @staticmethod
    def get_business_slot(db: Session, slot_id: int, business_id: int) -> Optional[Availability]:
        return (
            db.query(Availability)
            .filter(Availability.id == slot_id, Availability.business_id == business_id)
            .first()
        )

    @staticmethod
    def get_slots_for_month(db: Session, business_id: int, year: int, month: int) -> list[Availability]:
        """Slots of a calendar month ordered by date and start time"""
        last_day = calendar.monthrange(year, month)[1]
        return (
            db.query(Availability)
            .options(joinedload(Availability.service))
            .filter(
                Availability.business_id == business_id,
                Availability.date >= date(year, month, 1),
                Availability.date <= date(year, month, last_day),
            )
            .order_by(Availability.date.asc(), Availability.start_time.asc())
            .all()
        )

    @staticmethod
    def get_slots_for_date(db: Session, business_id: int, slot_date: date) -> list[Availability]:
        return (
            db.query(Availability)
            .options(joinedload(Availability.service))
            .filter(Availability.business_id == business_id, Availability.date == slot_date)
            .order_by(Availability.start_time.asc())
            .all()
        )

    @staticmethod
    def get_upcoming_open_slots(db: Session, business_id: int, from_date: date) -> list[Availability]:
        """Unblocked slots from a date onwards, for the public booking page"""
        return (
            db.query(Availability)
            .filter(
                Availability.business_id == business_id,
                Availability.date >= from_date,
                Availability.is_blocked.is_(False),
            )
            .order_by(Availability.date.asc(), Availability.start_time.asc())
            .all()
        )

    @staticmethod
    def find_slot_at(db: Session, business_id: int, slot_date: date, start_time: time) -> Optional[Availability]:
        return (
            db.query(Availability)
            .filter(
                Availability.business_id == business_id,
                Availability.date == slot_date,
                Availability.start_time == start_time,
            )
            .first()
        )

    @staticmethod
    def slot_exists(
        db: Session, business_id: int, service_id: Optional[int], slot_date: date, start_time: time
    ) -> bool:
        """Matches the (business, service, date, start_time) unique constraint"""
        query = db.query(Availability.id).filter(
            Availability.business_id == business_id,
            Availability.date == slot_date,
            Availability.start_time == start_time,
        )
        if service_id is None:
            query = query.filter(Availability.service_id.is_(None))
        else:
            query = query.filter(Availability.service_id == service_id)
        return query.first() is not None

    @staticmethod
    def create_slot(db: Session, business_id: int, commit: bool = True, **slot_data) -> Availability:
        slot = Availability(business_id=business_id, booked_count=0, **slot_data)
        db.add(slot)
        if commit:
            db.commit()
            db.refresh(slot)
        return slot

    @staticmethod
    def update_slot(db: Session, slot: Availability, **updates) -> Availability:
        for key, value in updates.items():
            setattr(slot, key, value)
        db.commit()
        db.refresh(slot)
        return slot

    @staticmethod
    def delete_slot(db: Session, slot: Availability) -> None:
        db.delete(slot)
        db.commit()

    @staticmethod
    def set_blocked_for_date(db: Session, business_id: int, slot_date: date, blocked: bool) -> int:
        return (
            db.query(Availability)
            .filter(Availability.business_id == business_id, Availability.date == slot_date)
            .update({Availability.is_blocked: blocked}, synchronize_session=False)
        )

    @staticmethod
    def increment_booked(db: Session, slot_id: int, pax: int) -> None:
        """Add pax in a single UPDATE so concurrent bookings serialise in the database"""
        db.query(Availability).filter(Availability.id == slot_id).update(
            {Availability.booked_count: Availability.booked_count + pax},
            synchronize_session=False,
        )

    @staticmethod
    def release_booked(db: Session, slot_id: int, pax: int) -> None:
        """Give pax back to the slot without going below zero"""
        db.query(Availability).filter(Availability.id == slot_id).update(
            {
                Availability.booked_count: case(
                    (Availability.booked_count - pax < 0, 0),
                    else_=Availability.booked_count - pax,
                )
            },
            synchronize_session=False,
        )

    @staticmethod
    def get_active_services(db: Session, business_id: int) -> list[Service]:
        return (
            db.query(Service)
            .filter(Service.business_id == business_id, Service.is_active.is_(True))
            .order_by(Service.name.asc())
            .all()
        )
