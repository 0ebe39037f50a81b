"""Payment repository - Database operations for payments"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Booking, Payment


class PaymentRepository:
    """Repository for payment database operations"""

    @staticmethod
    def get_booking_by_public_id(db: Session, public_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.public_id == public_id).first()

    @staticmethod
    def get_booking_by_ref(db: Session, ref_code: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.ref_code == ref_code).first()

    @staticmethod
    def get_pending_payment(db: Session, booking_id: int) -> Optional[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.booking_id == booking_id, Payment.status == "pending")
            .order_by(Payment.id.desc())
            .first()
        )

    @staticmethod
    def get_latest_payment(db: Session, booking_id: int) -> Optional[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.booking_id == booking_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .first()
        )

    @staticmethod
    def get_by_public_id(db: Session, public_id: str) -> Optional[Payment]:
        return (
            db.query(Payment)
            .options(joinedload(Payment.booking).joinedload(Booking.business))
            .filter(Payment.public_id == public_id)
            .first()
        )

    @staticmethod
    def create_payment(db: Session, booking_id: int, **payment_data) -> Payment:
        payment = Payment(booking_id=booking_id, **payment_data)
        db.add(payment)
        db.commit()
        db.refresh(payment)
        return payment

    @staticmethod
    def update_payment(db: Session, payment: Payment, **updates) -> Payment:
        """Apply non-empty updates; gateway fields are never blanked out"""
        for key, value in updates.items():
            if value is not None and value != "":
                setattr(payment, key, value)
        db.commit()
        db.refresh(payment)
        return payment
