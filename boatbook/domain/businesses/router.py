"""Business router - Onboarding, settings and public booking page endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_business, get_current_user, require_manager
from ...database import get_db
from ...models import Business, User
from ..services.schemas import ServiceResponse
from .schemas import (
    BusinessCreate,
    BusinessResponse,
    BusinessUpdate,
    OnboardingServiceCreate,
    PublicBusinessResponse,
    SettingsResponse,
    SettingsUpdate,
)
from .service import BusinessService

router = APIRouter(prefix="/api/businesses", tags=["Businesses"])
public_router = APIRouter(prefix="/api/public/businesses", tags=["Public"])


def get_business_service(db: Session = Depends(get_db)) -> BusinessService:
    """Dependency injection for BusinessService"""
    return BusinessService(db)


@router.post("", response_model=BusinessResponse, status_code=201)
async def create_business(
    data: BusinessCreate,
    current_user: User = Depends(get_current_user),
    service: BusinessService = Depends(get_business_service),
):
    return service.create_business(current_user, data)


@router.get("/me", response_model=BusinessResponse)
async def get_my_business(business: Business = Depends(get_current_business)):
    return business


@router.put("/me", response_model=BusinessResponse)
async def update_my_business(
    data: BusinessUpdate,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: BusinessService = Depends(get_business_service),
):
    return service.update_business(business, data)


@router.post("/me/publish")
async def toggle_publish(
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: BusinessService = Depends(get_business_service),
):
    return service.toggle_publish(business)


@router.post("/me/services/first", response_model=ServiceResponse, status_code=201)
async def create_first_service(
    data: OnboardingServiceCreate,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: BusinessService = Depends(get_business_service),
):
    """Last onboarding step; publishes the business"""
    return service.create_first_service(business, data)


@router.post("/me/services", response_model=ServiceResponse, status_code=201)
async def create_additional_service(
    data: OnboardingServiceCreate,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: BusinessService = Depends(get_business_service),
):
    return service.create_additional_service(business, data)


@router.get("/me/settings", response_model=SettingsResponse)
async def get_settings(
    business: Business = Depends(get_current_business),
    service: BusinessService = Depends(get_business_service),
):
    return service.get_settings(business)


@router.put("/me/settings", response_model=SettingsResponse)
async def update_settings(
    data: SettingsUpdate,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: BusinessService = Depends(get_business_service),
):
    return service.update_settings(business, data)


@public_router.get("/{slug}", response_model=PublicBusinessResponse)
async def get_public_business(slug: str, service: BusinessService = Depends(get_business_service)):
    return service.get_public_business(slug)
