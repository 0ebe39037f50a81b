"""Document repository - Loads a booking with everything its PDFs print"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Booking, Business


class DocumentRepository:
    """Repository for document data access"""

    @staticmethod
    def get_booking_for_document(db: Session, public_id: str) -> Optional[Booking]:
        return (
            db.query(Booking)
            .options(
                joinedload(Booking.business).joinedload(Business.settings),
                joinedload(Booking.service),
                joinedload(Booking.availability),
                selectinload(Booking.items),
                selectinload(Booking.passengers),
            )
            .filter(Booking.public_id == public_id)
            .first()
        )
