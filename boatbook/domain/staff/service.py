"""Staff service - Invitations, roles and profiles"""

import logging
from datetime import datetime

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Business, User
from .repository import StaffRepository
from .schemas import ProfileUpdate, StaffInvite

logger = logging.getLogger(__name__)


class StaffService:
    """Service layer for staff business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = StaffRepository()

    def list_staff(self, business: Business) -> list[User]:
        return self.repo.get_members(self.db, business)

    def invite(self, business: Business, data: StaffInvite) -> User:
        """
        Create or update the user row for an invited email.

        The invitee's Firebase account is linked by email on first sign-in.
        """
        user = self.repo.get_by_email(self.db, data.email)
        if user:
            belongs_elsewhere = user.business_id not in (None, business.id)
            if belongs_elsewhere or self.repo.owns_other_business(self.db, user.id, business.id):
                raise HTTPException(status_code=409, detail="This user already belongs to another business")
        else:
            user = User(email=data.email)

        user.full_name = data.full_name or user.full_name
        user.role = data.role
        user.invited_at = datetime.utcnow()
        if user.id != business.owner_id:
            user.business_id = business.id

        user = self.repo.save(self.db, user)
        logger.info(f"📧 Invited {user.email} as {user.role} to business {business.id}")
        return user

    def _get_member(self, business: Business, user_id: int) -> User:
        member = self.repo.get_member(self.db, business, user_id)
        if not member:
            raise HTTPException(status_code=404, detail="Staff member not found")
        return member

    def update_role(self, business: Business, user_id: int, role: str) -> User:
        member = self._get_member(business, user_id)
        member.role = role
        logger.info(f"🔄 User {member.id} role changed to {role}")
        return self.repo.save(self.db, member)

    def remove(self, business: Business, current_user: User, user_id: int) -> dict:
        if user_id == current_user.id:
            raise HTTPException(status_code=400, detail="You cannot remove yourself")
        member = self._get_member(business, user_id)
        if member.id == business.owner_id:
            raise HTTPException(status_code=400, detail="The business owner cannot be removed")

        member.business_id = None
        member.role = "customer"
        self.repo.save(self.db, member)
        logger.info(f"🗑️ User {member.id} removed from business {business.id}")
        return {"success": True}

    def update_profile(self, user: User, data: ProfileUpdate) -> User:
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(user, key, value)
        return self.repo.save(self.db, user)
