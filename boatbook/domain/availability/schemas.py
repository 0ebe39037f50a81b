"""Availability domain schemas - Pydantic models for slot management"""

from datetime import date, time
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import parse_hhmm


class TimeSlotCreate(BaseModel):
    """Schema for creating or updating a single slot"""

    service_id: Optional[int] = None
    date: date
    start_time: time
    end_time: time
    capacity: int = Field(ge=1)
    notes: Optional[str] = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_time(cls, v):
        if isinstance(v, str):
            return parse_hhmm(v)
        return v


class RecurringSlotCreate(BaseModel):
    """
    Schema for generating slots in bulk.

    weekly and monthly walk [start_date, end_date] and keep days whose weekday
    (0 = Sunday) is in days_of_week; custom takes custom_dates as given.
    """

    pattern_type: Literal["weekly", "monthly", "custom"] = "weekly"
    service_id: Optional[int] = None
    days_of_week: list[int] = []
    monthly_week: Literal["all", "first", "second", "third", "fourth", "last"] = "all"
    custom_dates: list[date] = []
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: time
    end_time: time
    capacity: int = Field(ge=1)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_time(cls, v):
        if isinstance(v, str):
            return parse_hhmm(v)
        return v

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v):
        if any(day < 0 or day > 6 for day in v):
            raise ValueError("Days of week must be between 0 (Sunday) and 6 (Saturday)")
        return v

    @model_validator(mode="after")
    def validate_range(self):
        if self.pattern_type != "custom" and (not self.start_date or not self.end_date):
            raise ValueError("Start and end dates are required")
        return self


class BlockDateRequest(BaseModel):
    date: date
    blocked: bool


class SlotResponse(BaseModel):
    """Schema for slot response"""

    id: int
    service_id: Optional[int] = None
    service_name: Optional[str] = None
    date: date
    start_time: time
    end_time: time
    capacity: int
    booked_count: int
    remaining: int
    is_blocked: bool
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class ServiceOption(BaseModel):
    id: int
    name: str
    duration_minutes: Optional[int] = None
    max_capacity: Optional[int] = None

    class Config:
        from_attributes = True
