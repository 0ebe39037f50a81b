"""Analytics domain schemas"""

from datetime import date

from pydantic import BaseModel


class DailyTotal(BaseModel):
    date: date
    bookings: int
    revenue: float


class AnalyticsResponse(BaseModel):
    total_bookings: int
    today_bookings: int
    month_bookings: int
    total_revenue: float
    active_services: int
    daily: list[DailyTotal]
