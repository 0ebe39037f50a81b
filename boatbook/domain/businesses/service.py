"""Business service - Onboarding, settings and the public booking page"""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import BUSINESS_TIMEZONE
from ...models import Business, BusinessSettings, Service, User
from ..availability.repository import AvailabilityRepository
from ..services.repository import ServiceRepository
from .repository import BusinessRepository
from .schemas import (
    DEFAULT_BRANDING,
    BusinessCreate,
    BusinessUpdate,
    OnboardingServiceCreate,
    SettingsUpdate,
)

logger = logging.getLogger(__name__)


class BusinessService:
    """Service layer for business business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BusinessRepository()
        self.services = ServiceRepository()
        self.slots = AvailabilityRepository()

    def create_business(self, user: User, data: BusinessCreate) -> Business:
        """Onboarding step one; the business starts unpublished"""
        if self.repo.get_owned_business(self.db, user.id):
            raise HTTPException(status_code=400, detail="You already have a business")
        if user.business_id is not None:
            raise HTTPException(status_code=400, detail="You already belong to a business")
        if self.repo.slug_taken(self.db, data.slug):
            raise HTTPException(status_code=409, detail="Business URL is already taken")

        try:
            business = self.repo.add_business(
                self.db,
                user.id,
                name=data.name,
                slug=data.slug,
                description=data.description or None,
                contact_phone=data.contact_phone,
                contact_email=data.contact_email,
                branding=dict(DEFAULT_BRANDING),
                is_published=False,
            )
            if user.role not in ("admin", "owner"):
                user.role = "owner"
            self.db.commit()
        except IntegrityError as e:
            # Lost a race for the slug
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Business URL is already taken") from e

        self.db.refresh(business)
        logger.info(f"✅ Business created: {business.slug} (owner {user.id})")
        return business

    def _add_service(self, business: Business, data: OnboardingServiceCreate, sort_order: int) -> Service:
        service = self.services.create_service(
            self.db,
            business.id,
            commit=False,
            name=data.name,
            description=data.description or None,
            price=data.price,
            duration_minutes=data.duration_minutes,
            max_capacity=data.max_capacity,
            images=[],
            is_active=True,
            sort_order=sort_order,
        )
        for index, variant in enumerate(data.variants, start=1):
            self.services.create_variant(
                self.db,
                service.id,
                commit=False,
                name=variant.name,
                price=variant.price,
                description=variant.description or None,
                sort_order=index,
            )
        for index, addon in enumerate(data.addons, start=1):
            self.services.create_addon(
                self.db,
                service.id,
                commit=False,
                name=addon.name,
                price=addon.price,
                description=addon.description or None,
                is_active=True,
                sort_order=index,
            )
        return service

    def create_first_service(self, business: Business, data: OnboardingServiceCreate) -> Service:
        """Onboarding step two; finishing it publishes the booking page"""
        service = self._add_service(business, data, sort_order=0)
        business.is_published = True
        self.db.commit()
        self.db.refresh(service)
        logger.info(f"🚀 Business {business.slug} published with service {service.name}")
        return service

    def create_additional_service(self, business: Business, data: OnboardingServiceCreate) -> Service:
        sort_order = self.services.count_services(self.db, business.id) + 1
        service = self._add_service(business, data, sort_order=sort_order)
        self.db.commit()
        self.db.refresh(service)
        return service

    def update_business(self, business: Business, data: BusinessUpdate) -> Business:
        if self.repo.slug_taken(self.db, data.slug, exclude_id=business.id):
            raise HTTPException(status_code=400, detail="This URL slug is already taken")
        return self.repo.update(
            self.db,
            business,
            name=data.name,
            slug=data.slug,
            description=data.description or None,
            contact_email=data.contact_email or None,
            contact_phone=data.contact_phone or None,
            address=data.address or None,
            logo_url=data.logo_url or None,
            banner_url=data.banner_url or None,
            branding=data.branding.model_dump(),
        )

    def toggle_publish(self, business: Business) -> dict:
        self.repo.update(self.db, business, is_published=not business.is_published)
        logger.info(f"🔄 Business {business.slug} published={business.is_published}")
        return {"success": True, "isPublished": business.is_published}

    def get_settings(self, business: Business) -> BusinessSettings:
        return self.repo.get_or_create_settings(self.db, business)

    def update_settings(self, business: Business, data: SettingsUpdate) -> BusinessSettings:
        settings = self.repo.get_or_create_settings(self.db, business)
        updates = data.model_dump(exclude_unset=True)
        # Null clears the optional text fields only
        updates = {
            key: value
            for key, value in updates.items()
            if value is not None or key in ("notification_phone", "boat_name", "boat_reg_no", "default_destination")
        }
        return self.repo.update(self.db, settings, **updates)

    def get_public_business(self, slug: str) -> dict:
        """Published business with its bookable services and upcoming departures"""
        business = self.repo.get_by_slug(self.db, slug)
        if not business or not business.is_published:
            raise HTTPException(status_code=404, detail="Business not found")

        services = self.repo.get_public_services(self.db, business.id)
        today = datetime.now(ZoneInfo(BUSINESS_TIMEZONE)).date()
        slots = self.slots.get_upcoming_open_slots(self.db, business.id, today)

        return {
            "id": business.id,
            "name": business.name,
            "slug": business.slug,
            "description": business.description,
            "contact_email": business.contact_email,
            "contact_phone": business.contact_phone,
            "address": business.address,
            "logo_url": business.logo_url,
            "banner_url": business.banner_url,
            "branding": business.branding,
            "services": [
                {
                    "id": service.id,
                    "name": service.name,
                    "description": service.description,
                    "duration_minutes": service.duration_minutes,
                    "max_capacity": service.max_capacity,
                    "images": service.images,
                    "variants": service.variants,
                    "addons": [addon for addon in service.addons if addon.is_active],
                }
                for service in services
            ],
            "slots": [
                {
                    "id": slot.id,
                    "service_id": slot.service_id,
                    "date": slot.date,
                    "start_time": slot.start_time,
                    "end_time": slot.end_time,
                    "remaining": max(0, slot.capacity - slot.booked_count),
                }
                for slot in slots
                if slot.capacity > 0
            ],
        }
