"""Staff domain schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email, validate_my_phone

StaffRole = Literal["admin", "owner", "staff"]


class StaffInvite(BaseModel):
    email: str
    full_name: str = Field(min_length=1, max_length=255)
    role: StaffRole = "staff"

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        if not v:
            raise ValueError("Email is required")
        return validate_email(v)


class RoleUpdate(BaseModel):
    role: StaffRole


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_my_phone(v) if v else None


class StaffMemberResponse(BaseModel):
    """Schema for staff member response"""

    id: int
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str
    invited_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
