"""Service catalogue repository - Database operations for services"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models import Booking, Service, ServiceAddon, ServiceVariant


class ServiceRepository:
    """Repository for service, variant and add-on database operations"""

    @staticmethod
    def get_services(db: Session, business_id: int) -> list[Service]:
        return (
            db.query(Service)
            .options(selectinload(Service.variants), selectinload(Service.addons))
            .filter(Service.business_id == business_id)
            .order_by(Service.sort_order, Service.id)
            .all()
        )

    @staticmethod
    def get_service(db: Session, business_id: int, service_id: int) -> Optional[Service]:
        return (
            db.query(Service)
            .filter(Service.id == service_id, Service.business_id == business_id)
            .first()
        )

    @staticmethod
    def count_services(db: Session, business_id: int) -> int:
        return db.query(Service).filter(Service.business_id == business_id).count()

    @staticmethod
    def count_bookings(db: Session, service_id: int) -> int:
        return db.query(Booking).filter(Booking.service_id == service_id).count()

    @staticmethod
    def create_service(db: Session, business_id: int, commit: bool = True, **service_data) -> Service:
        service = Service(business_id=business_id, **service_data)
        db.add(service)
        if commit:
            db.commit()
            db.refresh(service)
        else:
            db.flush()
        return service

    @staticmethod
    def update(db: Session, obj, **updates):
        for key, value in updates.items():
            setattr(obj, key, value)
        db.commit()
        db.refresh(obj)
        return obj

    @staticmethod
    def delete(db: Session, obj) -> None:
        db.delete(obj)
        db.commit()

    @staticmethod
    def get_variant(db: Session, service_id: int, variant_id: int) -> Optional[ServiceVariant]:
        return (
            db.query(ServiceVariant)
            .filter(ServiceVariant.id == variant_id, ServiceVariant.service_id == service_id)
            .first()
        )

    @staticmethod
    def count_variants(db: Session, service_id: int) -> int:
        return db.query(ServiceVariant).filter(ServiceVariant.service_id == service_id).count()

    @staticmethod
    def create_variant(db: Session, service_id: int, commit: bool = True, **variant_data) -> ServiceVariant:
        variant = ServiceVariant(service_id=service_id, **variant_data)
        db.add(variant)
        if commit:
            db.commit()
            db.refresh(variant)
        return variant

    @staticmethod
    def get_addon(db: Session, service_id: int, addon_id: int) -> Optional[ServiceAddon]:
        return (
            db.query(ServiceAddon)
            .filter(ServiceAddon.id == addon_id, ServiceAddon.service_id == service_id)
            .first()
        )

    @staticmethod
    def count_addons(db: Session, service_id: int) -> int:
        return db.query(ServiceAddon).filter(ServiceAddon.service_id == service_id).count()

    @staticmethod
    def create_addon(db: Session, service_id: int, commit: bool = True, **addon_data) -> ServiceAddon:
        addon = ServiceAddon(service_id=service_id, **addon_data)
        db.add(addon)
        if commit:
            db.commit()
            db.refresh(addon)
        return addon
