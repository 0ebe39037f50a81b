"""Booking repository - Database operations for bookings"""

from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Booking, BookingItem, BusinessSettings, Passenger


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def ref_code_exists(db: Session, ref_code: str) -> bool:
        return db.query(Booking.id).filter(Booking.ref_code == ref_code).first() is not None

    @staticmethod
    def get_by_ref(db: Session, ref_code: str) -> Optional[Booking]:
        return (
            db.query(Booking)
            .options(
                joinedload(Booking.service),
                joinedload(Booking.business),
                selectinload(Booking.passengers),
            )
            .filter(Booking.ref_code == ref_code)
            .first()
        )

    @staticmethod
    def get_by_public_id(db: Session, public_id: str) -> Optional[Booking]:
        return (
            db.query(Booking)
            .options(
                joinedload(Booking.service),
                joinedload(Booking.business),
                selectinload(Booking.items),
                selectinload(Booking.passengers),
            )
            .filter(Booking.public_id == public_id)
            .first()
        )

    @staticmethod
    def get_business_booking(db: Session, booking_id: int, business_id: int) -> Optional[Booking]:
        return (
            db.query(Booking)
            .options(
                joinedload(Booking.service),
                selectinload(Booking.items),
                selectinload(Booking.passengers),
                selectinload(Booking.payments),
            )
            .filter(Booking.id == booking_id, Booking.business_id == business_id)
            .first()
        )

    @staticmethod
    def search_bookings(
        db: Session,
        business_id: int,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        search: Optional[str] = None,
    ) -> list[Booking]:
        """Bookings of a business, newest trip first"""
        query = (
            db.query(Booking)
            .options(joinedload(Booking.service))
            .filter(Booking.business_id == business_id)
        )

        if status and status != "all":
            query = query.filter(Booking.status == status)
        if start_date:
            query = query.filter(Booking.booking_date >= start_date)
        if end_date:
            query = query.filter(Booking.booking_date <= end_date)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Booking.ref_code.ilike(pattern),
                    Booking.customer_name.ilike(pattern),
                    Booking.customer_email.ilike(pattern),
                )
            )

        return query.order_by(Booking.booking_date.desc(), Booking.start_time.desc()).all()

    @staticmethod
    def get_settings(db: Session, business_id: int) -> Optional[BusinessSettings]:
        return db.query(BusinessSettings).filter(BusinessSettings.business_id == business_id).first()

    @staticmethod
    def add_booking(
        db: Session, booking: Booking, items: list[BookingItem], passengers: list[Passenger]
    ) -> Booking:
        """Stage a booking with its items and passengers; the caller commits"""
        booking.items = items
        booking.passengers = passengers
        db.add(booking)
        db.flush()
        return booking
