"""Business domain schemas - Onboarding, settings and the public booking page"""

from datetime import date, datetime, time
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email, validate_my_phone, validate_slug
from ..services.schemas import AddonCreate, AddonResponse, VariantCreate, VariantResponse

DEFAULT_BRANDING = {"primary_color": "#168D95", "secondary_color": "#DE7F21"}


class Branding(BaseModel):
    primary_color: str = DEFAULT_BRANDING["primary_color"]
    secondary_color: str = DEFAULT_BRANDING["secondary_color"]


class BusinessCreate(BaseModel):
    """Business step of onboarding"""

    name: str = Field(min_length=2)
    slug: str
    description: Optional[str] = None
    contact_phone: str
    contact_email: str

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return validate_slug(v)

    @field_validator("contact_phone")
    @classmethod
    def check_phone(cls, v):
        return validate_my_phone(v)

    @field_validator("contact_email")
    @classmethod
    def check_email(cls, v):
        if not v:
            raise ValueError("Email is required")
        return validate_email(v)


class BusinessUpdate(BusinessCreate):
    """Business details from the settings page"""

    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    branding: Branding = Branding()

    @field_validator("contact_phone")
    @classmethod
    def check_phone(cls, v):
        return validate_my_phone(v) if v else None

    @field_validator("contact_email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v) if v else None


class OnboardingServiceCreate(BaseModel):
    """Service step of onboarding, with its ticket types and extras"""

    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = None
    price: float = Field(ge=0)
    duration_minutes: int = Field(ge=15)
    max_capacity: int = Field(ge=1)
    variants: list[VariantCreate] = []
    addons: list[AddonCreate] = []


class SettingsUpdate(BaseModel):
    payment_gateway: Optional[str] = None
    payment_gateway_enabled: Optional[bool] = None
    auto_cancel_timeout: Optional[Literal[15, 30, 60, 1440]] = None
    auto_cancel_enabled: Optional[bool] = None
    email_notifications: Optional[bool] = None
    whatsapp_notifications: Optional[bool] = None
    notification_phone: Optional[str] = None
    boat_name: Optional[str] = None
    boat_reg_no: Optional[str] = None
    default_destination: Optional[str] = None
    crew_count: Optional[int] = Field(default=None, ge=0)


class SettingsResponse(BaseModel):
    payment_gateway: str
    payment_gateway_enabled: bool
    auto_cancel_timeout: int
    auto_cancel_enabled: bool
    email_notifications: bool
    whatsapp_notifications: bool
    notification_phone: Optional[str] = None
    boat_name: Optional[str] = None
    boat_reg_no: Optional[str] = None
    default_destination: Optional[str] = None
    crew_count: int

    class Config:
        from_attributes = True


class BusinessResponse(BaseModel):
    """Schema for business response"""

    id: int
    name: str
    slug: str
    description: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    branding: Optional[dict] = None
    is_published: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublicService(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    duration_minutes: Optional[int] = None
    max_capacity: int
    images: Optional[list[str]] = None
    variants: list[VariantResponse] = []
    addons: list[AddonResponse] = []


class PublicSlot(BaseModel):
    id: int
    service_id: Optional[int] = None
    date: date
    start_time: time
    end_time: time
    remaining: int


class PublicBusinessResponse(BaseModel):
    """Everything the public booking page renders"""

    id: int
    name: str
    slug: str
    description: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    branding: Optional[dict] = None
    services: list[PublicService]
    slots: list[PublicSlot]
