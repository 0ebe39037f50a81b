"""Analytics repository - Booking and revenue aggregates"""

from datetime import date
from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from ...models import Booking, Service

# Only these statuses count towards revenue
REVENUE_STATUSES = ("confirmed", "completed")


class AnalyticsRepository:
    """Repository for dashboard aggregate queries"""

    @staticmethod
    def count_bookings(
        db: Session,
        business_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> int:
        """Bookings by trip date, start and end inclusive"""
        query = db.query(func.count(Booking.id)).filter(Booking.business_id == business_id)
        if start is not None:
            query = query.filter(Booking.booking_date >= start)
        if end is not None:
            query = query.filter(Booking.booking_date <= end)
        return query.scalar() or 0

    @staticmethod
    def total_revenue(db: Session, business_id: int) -> float:
        return (
            db.query(func.sum(Booking.total_amount))
            .filter(Booking.business_id == business_id, Booking.status.in_(REVENUE_STATUSES))
            .scalar()
            or 0
        )

    @staticmethod
    def count_active_services(db: Session, business_id: int) -> int:
        return (
            db.query(func.count(Service.id))
            .filter(Service.business_id == business_id, Service.is_active.is_(True))
            .scalar()
            or 0
        )

    @staticmethod
    def daily_totals(db: Session, business_id: int, start: date) -> list[tuple[date, int, float]]:
        """(trip date, bookings, revenue) per day from start onwards, oldest first"""
        revenue = func.sum(
            case((Booking.status.in_(REVENUE_STATUSES), Booking.total_amount), else_=0)
        )
        return (
            db.query(Booking.booking_date, func.count(Booking.id), revenue)
            .filter(Booking.business_id == business_id, Booking.booking_date >= start)
            .group_by(Booking.booking_date)
            .order_by(Booking.booking_date)
            .all()
        )
