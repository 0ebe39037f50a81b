"""Business repository - Database operations for businesses and their settings"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models import Business, BusinessSettings, Service


class BusinessRepository:
    """Repository for business database operations"""

    @staticmethod
    def get_by_slug(db: Session, slug: str) -> Optional[Business]:
        return db.query(Business).filter(Business.slug == slug).first()

    @staticmethod
    def slug_taken(db: Session, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = db.query(Business.id).filter(Business.slug == slug)
        if exclude_id is not None:
            query = query.filter(Business.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def get_owned_business(db: Session, owner_id: int) -> Optional[Business]:
        return db.query(Business).filter(Business.owner_id == owner_id).first()

    @staticmethod
    def add_business(db: Session, owner_id: int, **business_data) -> Business:
        """Business plus its default settings row, flushed but not committed"""
        business = Business(owner_id=owner_id, **business_data)
        business.settings = BusinessSettings()
        db.add(business)
        db.flush()
        return business

    @staticmethod
    def get_or_create_settings(db: Session, business: Business) -> BusinessSettings:
        if business.settings is None:
            business.settings = BusinessSettings()
            db.commit()
            db.refresh(business)
        return business.settings

    @staticmethod
    def update(db: Session, obj, **updates):
        for key, value in updates.items():
            setattr(obj, key, value)
        db.commit()
        db.refresh(obj)
        return obj

    @staticmethod
    def get_public_services(db: Session, business_id: int) -> list[Service]:
        return (
            db.query(Service)
            .options(selectinload(Service.variants), selectinload(Service.addons))
            .filter(Service.business_id == business_id, Service.is_active.is_(True))
            .order_by(Service.sort_order, Service.id)
            .all()
        )
