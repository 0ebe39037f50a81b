"""Staff router - Team management and the caller's own profile"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_business, get_current_user, require_manager
from ...database import get_db
from ...models import Business, User
from .schemas import ProfileUpdate, RoleUpdate, StaffInvite, StaffMemberResponse
from .service import StaffService

router = APIRouter(prefix="/api/staff", tags=["Staff"])
profile_router = APIRouter(prefix="/api/profile", tags=["Profile"])


def get_staff_service(db: Session = Depends(get_db)) -> StaffService:
    """Dependency injection for StaffService"""
    return StaffService(db)


@router.get("", response_model=list[StaffMemberResponse])
async def list_staff(
    business: Business = Depends(get_current_business),
    service: StaffService = Depends(get_staff_service),
):
    return service.list_staff(business)


@router.post("/invite", response_model=StaffMemberResponse, status_code=201)
async def invite_staff(
    data: StaffInvite,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: StaffService = Depends(get_staff_service),
):
    return service.invite(business, data)


@router.patch("/{user_id}/role", response_model=StaffMemberResponse)
async def update_staff_role(
    user_id: int,
    data: RoleUpdate,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: StaffService = Depends(get_staff_service),
):
    return service.update_role(business, user_id, data.role)


@router.delete("/{user_id}")
async def remove_staff(
    user_id: int,
    business: Business = Depends(get_current_business),
    current_user: User = Depends(require_manager),
    service: StaffService = Depends(get_staff_service),
):
    return service.remove(business, current_user, user_id)


@profile_router.get("", response_model=StaffMemberResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@profile_router.put("", response_model=StaffMemberResponse)
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    service: StaffService = Depends(get_staff_service),
):
    return service.update_profile(current_user, data)
