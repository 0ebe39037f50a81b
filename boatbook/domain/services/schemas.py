"""Service catalogue schemas - Pydantic models for services, variants and add-ons"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ServiceCreate(BaseModel):
    """Schema for creating or updating a service from the dashboard"""

    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    price: float = Field(default=0, ge=0)  # Pricing is per variant
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    max_capacity: int = Field(ge=1)
    images: list[str] = []
    is_active: bool = True


class ServiceToggle(BaseModel):
    is_active: bool


class VariantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: float = Field(ge=0)
    description: Optional[str] = None


class AddonCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: float = Field(ge=0)
    description: Optional[str] = None
    is_active: bool = True


class VariantResponse(BaseModel):
    id: int
    name: str
    price: float
    description: Optional[str] = None
    sort_order: int

    class Config:
        from_attributes = True


class AddonResponse(BaseModel):
    id: int
    name: str
    price: float
    description: Optional[str] = None
    is_active: bool
    sort_order: int

    class Config:
        from_attributes = True


class ServiceResponse(BaseModel):
    """Schema for service response"""

    id: int
    name: str
    description: Optional[str] = None
    price: float
    duration_minutes: Optional[int] = None
    max_capacity: int
    images: Optional[list[str]] = None
    is_active: bool
    sort_order: int
    variants: list[VariantResponse] = []
    addons: list[AddonResponse] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
