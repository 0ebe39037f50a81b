"""Service catalogue service - Business logic for services, variants and add-ons"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Business, Service, ServiceAddon, ServiceVariant
from .repository import ServiceRepository
from .schemas import AddonCreate, ServiceCreate, VariantCreate

logger = logging.getLogger(__name__)


class CatalogueService:
    """Service layer for the tours a business sells"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceRepository()

    def list_services(self, business: Business) -> list[Service]:
        return self.repo.get_services(self.db, business.id)

    def get_service(self, business: Business, service_id: int) -> Service:
        service = self.repo.get_service(self.db, business.id, service_id)
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")
        return service

    def create_service(self, business: Business, data: ServiceCreate) -> Service:
        """New services go to the end of the list"""
        sort_order = self.repo.count_services(self.db, business.id) + 1
        service = self.repo.create_service(
            self.db,
            business.id,
            name=data.name,
            description=data.description or None,
            price=data.price,
            duration_minutes=data.duration_minutes,
            max_capacity=data.max_capacity,
            images=data.images,
            is_active=data.is_active,
            sort_order=sort_order,
        )
        logger.info(f"✅ Service created: {service.name} (business {business.id})")
        return service

    def update_service(self, business: Business, service_id: int, data: ServiceCreate) -> Service:
        service = self.get_service(business, service_id)
        return self.repo.update(
            self.db,
            service,
            name=data.name,
            description=data.description or None,
            price=data.price,
            duration_minutes=data.duration_minutes,
            max_capacity=data.max_capacity,
            images=data.images,
            is_active=data.is_active,
        )

    def toggle_service(self, business: Business, service_id: int, is_active: bool) -> Service:
        service = self.get_service(business, service_id)
        return self.repo.update(self.db, service, is_active=is_active)

    def delete_service(self, business: Business, service_id: int) -> dict:
        service = self.get_service(business, service_id)
        if self.repo.count_bookings(self.db, service.id) > 0:
            raise HTTPException(status_code=400, detail="Cannot delete service with existing bookings")
        self.repo.delete(self.db, service)
        logger.info(f"🗑️ Service {service_id} deleted (business {business.id})")
        return {"success": True}

    # Variants

    def create_variant(self, business: Business, service_id: int, data: VariantCreate) -> ServiceVariant:
        service = self.get_service(business, service_id)
        return self.repo.create_variant(
            self.db,
            service.id,
            name=data.name,
            price=data.price,
            description=data.description or None,
            sort_order=self.repo.count_variants(self.db, service.id) + 1,
        )

    def update_variant(
        self, business: Business, service_id: int, variant_id: int, data: VariantCreate
    ) -> ServiceVariant:
        service = self.get_service(business, service_id)
        variant = self.repo.get_variant(self.db, service.id, variant_id)
        if not variant:
            raise HTTPException(status_code=404, detail="Variant not found")
        return self.repo.update(
            self.db, variant, name=data.name, price=data.price, description=data.description or None
        )

    def delete_variant(self, business: Business, service_id: int, variant_id: int) -> dict:
        service = self.get_service(business, service_id)
        variant = self.repo.get_variant(self.db, service.id, variant_id)
        if not variant:
            raise HTTPException(status_code=404, detail="Variant not found")
        self.repo.delete(self.db, variant)
        return {"success": True}

    # Add-ons

    def create_addon(self, business: Business, service_id: int, data: AddonCreate) -> ServiceAddon:
        service = self.get_service(business, service_id)
        return self.repo.create_addon(
            self.db,
            service.id,
            name=data.name,
            price=data.price,
            description=data.description or None,
            is_active=data.is_active,
            sort_order=self.repo.count_addons(self.db, service.id) + 1,
        )

    def update_addon(self, business: Business, service_id: int, addon_id: int, data: AddonCreate) -> ServiceAddon:
        service = self.get_service(business, service_id)
        addon = self.repo.get_addon(self.db, service.id, addon_id)
        if not addon:
            raise HTTPException(status_code=404, detail="Add-on not found")
        return self.repo.update(
            self.db,
            addon,
            name=data.name,
            price=data.price,
            description=data.description or None,
            is_active=data.is_active,
        )

    def delete_addon(self, business: Business, service_id: int, addon_id: int) -> dict:
        service = self.get_service(business, service_id)
        addon = self.repo.get_addon(self.db, service.id, addon_id)
        if not addon:
            raise HTTPException(status_code=404, detail="Add-on not found")
        self.repo.delete(self.db, addon)
        return {"success": True}
