"""Booking domain schemas - Pydantic models for validation"""

from datetime import date, datetime, time
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import parse_hhmm, parse_iso_date, validate_email


class BookingItemCreate(BaseModel):
    type: Literal["variant", "addon"]
    itemId: int
    name: str
    quantity: int = Field(ge=1)
    unitPrice: float = Field(ge=0)


class PassengerCreate(BaseModel):
    """
    Passenger as entered on the booking form.

    Only fullName and icPassport are required; for a MyKad number the
    remaining fields are derived from the IC when left empty.
    """

    fullName: str
    icPassport: str
    dob: Optional[date] = None
    age: Optional[int] = None
    gender: Optional[Literal["L", "P"]] = None
    nationality: Optional[str] = None
    passengerType: Optional[Literal["adult", "child", "infant"]] = None

    @field_validator("fullName", "icPassport")
    @classmethod
    def validate_required(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("This field is required")
        return v

    @field_validator("age")
    @classmethod
    def validate_age(cls, v):
        if v is not None and v < 0:
            raise ValueError("Age must be 0 or more")
        return v


class BookingCreate(BaseModel):
    """Schema for the public booking form"""

    businessId: int
    serviceId: int
    availabilityId: int
    customerName: str
    customerEmail: str
    customerPhone: str
    bookingDate: date
    startTime: time
    pax: int = Field(ge=1)
    items: list[BookingItemCreate] = []
    passengers: list[PassengerCreate] = []
    subtotal: float = Field(ge=0)
    addonsTotal: float = Field(ge=0)
    totalAmount: float = Field(ge=0)
    notes: Optional[str] = None

    @field_validator("customerName", "customerPhone")
    @classmethod
    def validate_required(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("This field is required")
        return v

    @field_validator("customerEmail")
    @classmethod
    def validate_customer_email(cls, v):
        return validate_email(v)

    @field_validator("bookingDate", mode="before")
    @classmethod
    def validate_booking_date(cls, v):
        if isinstance(v, str):
            return parse_iso_date(v)
        return v

    @field_validator("startTime", mode="before")
    @classmethod
    def validate_start_time(cls, v):
        if isinstance(v, str):
            return parse_hhmm(v)
        return v


class BookingCreateResponse(BaseModel):
    success: bool
    bookingId: str
    refCode: str


class CancelBookingRequest(BaseModel):
    reason: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    status: Literal["confirmed", "completed"]


class BookingItemResponse(BaseModel):
    id: int
    type: str
    item_id: int
    name: str
    quantity: int
    unit_price: float
    total_price: float

    class Config:
        from_attributes = True


class PassengerResponse(BaseModel):
    id: int
    full_name: str
    ic_passport: str
    dob: Optional[date] = None
    calculated_age: int
    gender: Optional[str] = None
    nationality: Optional[str] = None
    passenger_type: str

    class Config:
        from_attributes = True


class PaymentSummary(BaseModel):
    public_id: str
    amount: float
    currency: str
    status: str
    method: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    """Schema for booking list rows"""

    id: int
    public_id: str
    ref_code: str
    service_id: int
    service_name: Optional[str] = None
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    booking_date: date
    start_time: time
    pax: int
    status: str
    total_amount: float
    created_at: Optional[datetime] = None


class BookingDetailResponse(BookingResponse):
    availability_id: Optional[int] = None
    subtotal: float
    addons_total: float
    notes: Optional[str] = None
    expires_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_reason: Optional[str] = None
    items: list[BookingItemResponse] = []
    passengers: list[PassengerResponse] = []
    payments: list[PaymentSummary] = []
