"""Analytics service - Dashboard performance summary"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ...config import BUSINESS_TIMEZONE
from ...models import Business
from .repository import AnalyticsRepository
from .schemas import AnalyticsResponse, DailyTotal

logger = logging.getLogger(__name__)

# Days covered by the daily chart, today included
CHART_DAYS = 90


class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AnalyticsRepository()

    def get_summary(self, business: Business, today: Optional[date] = None) -> AnalyticsResponse:
        """
        Headline counts and daily totals for the dashboard.

        Dates are trip dates in the jetty's timezone. Revenue only counts
        confirmed and completed bookings; daily booking counts include
        every status.
        """
        today = today or datetime.now(ZoneInfo(BUSINESS_TIMEZONE)).date()
        month_start = today.replace(day=1)
        next_month = (month_start + timedelta(days=32)).replace(day=1)

        daily = [
            DailyTotal(date=day, bookings=count, revenue=float(revenue or 0))
            for day, count, revenue in self.repo.daily_totals(
                self.db, business.id, today - timedelta(days=CHART_DAYS - 1)
            )
        ]

        summary = AnalyticsResponse(
            total_bookings=self.repo.count_bookings(self.db, business.id),
            today_bookings=self.repo.count_bookings(self.db, business.id, today, today),
            month_bookings=self.repo.count_bookings(
                self.db, business.id, month_start, next_month - timedelta(days=1)
            ),
            total_revenue=float(self.repo.total_revenue(self.db, business.id)),
            active_services=self.repo.count_active_services(self.db, business.id),
            daily=daily,
        )
        logger.info(f"📊 Analytics for {business.slug}: {summary.total_bookings} bookings, {len(daily)} chart days")
        return summary
