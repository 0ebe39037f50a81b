"""Service catalogue router - Dashboard endpoints for services, variants and add-ons"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_business, require_manager
from ...database import get_db
from ...models import Business, User
from .schemas import (
    AddonCreate,
    AddonResponse,
    ServiceCreate,
    ServiceResponse,
    ServiceToggle,
    VariantCreate,
    VariantResponse,
)
from .service import CatalogueService

router = APIRouter(prefix="/api/services", tags=["Services"])


def get_catalogue_service(db: Session = Depends(get_db)) -> CatalogueService:
    """Dependency injection for CatalogueService"""
    return CatalogueService(db)


@router.get("", response_model=list[ServiceResponse])
async def list_services(
    business: Business = Depends(get_current_business),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return service.list_services(business)


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: int,
    business: Business = Depends(get_current_business),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return service.get_service(business, service_id)


@router.post("", response_model=ServiceResponse, status_code=201)
async def create_service(
    data: ServiceCreate,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return service.create_service(business, data)


@router.put("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: int,
    data: ServiceCreate,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return service.update_service(business, service_id, data)


@router.patch("/{service_id}/toggle", response_model=ServiceResponse)
async def toggle_service(
    service_id: int,
    data: ServiceToggle,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return service.toggle_service(business, service_id, data.is_active)


@router.delete("/{service_id}")
async def delete_service(
    service_id: int,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: CatalogueService = Depends(get_catalogue_service),
):
    """Refused while any booking references the service"""
    return service.delete_service(business, service_id)


# ============================================================================
# VARIANTS
# ============================================================================


@router.post("/{service_id}/variants", response_model=VariantResponse, status_code=201)
async def create_variant(
    service_id: int,
    data: VariantCreate,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return service.create_variant(business, service_id, data)


@router.put("/{service_id}/variants/{variant_id}", response_model=VariantResponse)
async def update_variant(
    service_id: int,
    variant_id: int,
    data: VariantCreate,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return service.update_variant(business, service_id, variant_id, data)


@router.delete("/{service_id}/variants/{variant_id}")
async def delete_variant(
    service_id: int,
    variant_id: int,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return service.delete_variant(business, service_id, variant_id)


# ============================================================================
# ADD-ONS
# ============================================================================


@router.post("/{service_id}/addons", response_model=AddonResponse, status_code=201)
async def create_addon(
    service_id: int,
    data: AddonCreate,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return service.create_addon(business, service_id, data)


@router.put("/{service_id}/addons/{addon_id}", response_model=AddonResponse)
async def update_addon(
    service_id: int,
    addon_id: int,
    data: AddonCreate,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return service.update_addon(business, service_id, addon_id, data)


@router.delete("/{service_id}/addons/{addon_id}")
async def delete_addon(
    service_id: int,
    addon_id: int,
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return service.delete_addon(business, service_id, addon_id)
