"""Staff repository - Database operations for business members"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...auth import DASHBOARD_ROLES
from ...models import Business, User


class StaffRepository:
    """Repository for staff database operations"""

    @staticmethod
    def get_members(db: Session, business: Business) -> list[User]:
        return (
            db.query(User)
            .filter(
                or_(User.business_id == business.id, User.id == business.owner_id),
                User.role.in_(DASHBOARD_ROLES),
            )
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )

    @staticmethod
    def get_member(db: Session, business: Business, user_id: int) -> Optional[User]:
        return (
            db.query(User)
            .filter(
                User.id == user_id,
                or_(User.business_id == business.id, User.id == business.owner_id),
            )
            .first()
        )

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    @staticmethod
    def owns_other_business(db: Session, user_id: int, business_id: int) -> bool:
        return (
            db.query(Business.id).filter(Business.owner_id == user_id, Business.id != business_id).first()
            is not None
        )

    @staticmethod
    def save(db: Session, user: User) -> User:
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
