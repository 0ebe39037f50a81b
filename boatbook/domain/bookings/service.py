"""Booking service - Business logic for booking operations"""

import csv
import logging
import secrets
import string
from datetime import date, datetime, timedelta
from io import StringIO
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...config import REF_CODE_PREFIX
from ...models import Booking, BookingItem, Business, Passenger
from ...shared.validators import calculate_age, format_ic, parse_ic, passenger_type_for_age
from ..availability.repository import AvailabilityRepository
from ..services.repository import ServiceRepository
from .repository import BookingRepository
from .schemas import BookingCreate, PassengerCreate

logger = logging.getLogger(__name__)

REF_CODE_ALPHABET = string.ascii_uppercase + string.digits
REF_CODE_LENGTH = 6
REF_CODE_MAX_ATTEMPTS = 10
DEFAULT_AUTO_CANCEL_MINUTES = 30
VERIFIED_STATUSES = ("confirmed", "completed")


def generate_ref_code(prefix: str = REF_CODE_PREFIX) -> str:
    """Format: NTT-XXXXXX (uppercase alphanumeric)"""
    suffix = "".join(secrets.choice(REF_CODE_ALPHABET) for _ in range(REF_CODE_LENGTH))
    return f"{prefix}-{suffix}"


def build_passenger(data: PassengerCreate, trip_date: date, sort_order: int) -> Passenger:
    """
    Fill in what a MyKad number implies (dob, gender, age on the trip date,
    passenger type, nationality) without overriding what the customer typed.
    """
    ic_info = parse_ic(data.icPassport, trip_date)

    dob = data.dob or (ic_info["dob"] if ic_info else None)
    age = data.age
    if age is None and ic_info:
        age = ic_info["age"]
    elif age is None and dob:
        age = calculate_age(dob, trip_date)
    if age is None:
        raise HTTPException(status_code=400, detail=f"Age is required for passenger {data.fullName}")

    return Passenger(
        full_name=data.fullName,
        ic_passport=format_ic(data.icPassport),
        dob=dob,
        calculated_age=age,
        gender=data.gender or (ic_info["gender"] if ic_info else None),
        nationality=data.nationality or (ic_info["nationality"] if ic_info else None),
        passenger_type=data.passengerType or passenger_type_for_age(age),
        sort_order=sort_order,
    )


def booking_to_dict(booking: Booking) -> dict:
    return {
        "id": booking.id,
        "public_id": booking.public_id,
        "ref_code": booking.ref_code,
        "service_id": booking.service_id,
        "service_name": booking.service.name if booking.service else None,
        "customer_name": booking.customer_name,
        "customer_email": booking.customer_email,
        "customer_phone": booking.customer_phone,
        "booking_date": booking.booking_date,
        "start_time": booking.start_time,
        "pax": booking.pax,
        "status": booking.status,
        "total_amount": booking.total_amount,
        "created_at": booking.created_at,
    }


def booking_detail_to_dict(booking: Booking) -> dict:
    detail = booking_to_dict(booking)
    detail.update(
        {
            "availability_id": booking.availability_id,
            "subtotal": booking.subtotal,
            "addons_total": booking.addons_total,
            "notes": booking.notes,
            "expires_at": booking.expires_at,
            "cancelled_at": booking.cancelled_at,
            "cancelled_reason": booking.cancelled_reason,
            "items": booking.items,
            "passengers": booking.passengers,
            "payments": booking.payments,
        }
    )
    return detail


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()
        self.slots = AvailabilityRepository()
        self.services = ServiceRepository()

    def generate_unique_ref_code(self) -> str:
        for _ in range(REF_CODE_MAX_ATTEMPTS):
            ref_code = generate_ref_code()
            if not self.repo.ref_code_exists(self.db, ref_code):
                return ref_code
            logger.warning(f"⚠️ Ref code collision on {ref_code}, retrying")
        raise HTTPException(status_code=500, detail="Could not generate a booking reference")

    def create_booking(self, data: BookingCreate) -> dict:
        """
        Create a pending booking and take its pax out of the slot.

        The capacity check reads then decides; the booked_count increment
        itself is a single UPDATE so the database serialises concurrent writers.
        """
        logger.info(f"📥 Booking request for slot {data.availabilityId} ({data.pax} pax)")

        slot = self.slots.get_slot(self.db, data.availabilityId)
        if not slot or slot.business_id != data.businessId:
            raise HTTPException(status_code=400, detail="Time slot not found")
        service = self.services.get_service(self.db, data.businessId, data.serviceId)
        if not service or (slot.service_id is not None and slot.service_id != service.id):
            raise HTTPException(status_code=400, detail="Service not found")
        if slot.is_blocked:
            raise HTTPException(status_code=400, detail="This date is blocked for bookings")

        remaining = slot.capacity - slot.booked_count
        if remaining < data.pax:
            raise HTTPException(status_code=400, detail=f"Only {remaining} spots remaining")

        if data.passengers and len(data.passengers) != data.pax:
            raise HTTPException(
                status_code=400,
                detail=f"Passenger details must be provided for all {data.pax} passengers",
            )
        passengers = [
            build_passenger(p, data.bookingDate, index)
            for index, p in enumerate(data.passengers, start=1)
        ]
        items = [
            BookingItem(
                type=item.type,
                item_id=item.itemId,
                name=item.name,
                quantity=item.quantity,
                unit_price=item.unitPrice,
                total_price=item.unitPrice * item.quantity,
            )
            for item in data.items
        ]

        settings = self.repo.get_settings(self.db, data.businessId)
        expires_at = None
        if settings is None or settings.auto_cancel_enabled:
            timeout = settings.auto_cancel_timeout if settings else DEFAULT_AUTO_CANCEL_MINUTES
            expires_at = datetime.utcnow() + timedelta(minutes=timeout)

        booking = Booking(
            ref_code=self.generate_unique_ref_code(),
            business_id=data.businessId,
            service_id=data.serviceId,
            availability_id=slot.id,
            customer_name=data.customerName,
            customer_email=data.customerEmail,
            customer_phone=data.customerPhone,
            booking_date=data.bookingDate,
            start_time=data.startTime,
            pax=data.pax,
            status="pending",
            subtotal=data.subtotal,
            addons_total=data.addonsTotal,
            total_amount=data.totalAmount,
            notes=data.notes or None,
            expires_at=expires_at,
        )

        try:
            self.repo.add_booking(self.db, booking, items, passengers)
            self.slots.increment_booked(self.db, slot.id, data.pax)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create booking for slot {slot.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create booking") from e

        logger.info(f"✅ Booking {booking.ref_code} created (expires {expires_at})")
        return {"success": True, "bookingId": booking.public_id, "refCode": booking.ref_code}

    def get_public_booking(self, ref_code: str) -> dict:
        """What the confirmation page shows; passenger IC numbers stay private"""
        booking = self.repo.get_by_ref(self.db, ref_code)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")

        latest_payment = booking.payments[-1] if booking.payments else None
        return {
            "bookingId": booking.public_id,
            "ref_code": booking.ref_code,
            "status": booking.status,
            "customer_name": booking.customer_name,
            "booking_date": booking.booking_date.isoformat(),
            "start_time": booking.start_time.strftime("%H:%M"),
            "pax": booking.pax,
            "total_amount": booking.total_amount,
            "payment_status": latest_payment.status if latest_payment else None,
            "service": {
                "name": booking.service.name,
                "description": booking.service.description,
                "duration_minutes": booking.service.duration_minutes,
            },
            "business": {
                "name": booking.business.name,
                "slug": booking.business.slug,
                "contact_email": booking.business.contact_email,
                "contact_phone": booking.business.contact_phone,
            },
        }

    def verify_booking(self, ref_code: str) -> Optional[dict]:
        """QR verification at the jetty; None when the ref code is unknown"""
        booking = self.repo.get_by_ref(self.db, ref_code)
        if not booking:
            logger.warning(f"⚠️ Verification attempted for unknown ref code {ref_code}")
            return None

        return {
            "valid": booking.status in VERIFIED_STATUSES,
            "ref_code": booking.ref_code,
            "status": booking.status,
            "service_name": booking.service.name if booking.service else None,
            "business_name": booking.business.name if booking.business else None,
            "booking_date": booking.booking_date.isoformat(),
            "start_time": booking.start_time.strftime("%H:%M"),
            "pax": booking.pax,
            "passengers": [
                {
                    "full_name": p.full_name,
                    "passenger_type": p.passenger_type,
                    "age": p.calculated_age,
                }
                for p in booking.passengers
            ],
        }

    def list_bookings(
        self,
        business: Business,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        search: Optional[str] = None,
    ) -> list[dict]:
        bookings = self.repo.search_bookings(self.db, business.id, status, start_date, end_date, search)
        return [booking_to_dict(b) for b in bookings]

    def get_booking(self, business: Business, booking_id: int) -> Booking:
        booking = self.repo.get_business_booking(self.db, booking_id, business.id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking

    def cancel_booking(self, business: Business, booking_id: int, reason: Optional[str] = None) -> dict:
        booking = self.get_booking(business, booking_id)
        if booking.status == "cancelled":
            raise HTTPException(status_code=400, detail="Booking is already cancelled")

        booking.status = "cancelled"
        booking.cancelled_at = datetime.utcnow()
        booking.cancelled_reason = reason or None
        if booking.availability_id:
            self.slots.release_booked(self.db, booking.availability_id, booking.pax)
        self.db.commit()

        logger.info(f"🚫 Booking {booking.ref_code} cancelled by business {business.id}")
        return {"success": True}

    def update_status(self, business: Business, booking_id: int, status: str) -> dict:
        booking = self.get_booking(business, booking_id)
        if booking.status == "cancelled":
            raise HTTPException(status_code=400, detail="Cannot change the status of a cancelled booking")

        booking.status = status
        self.db.commit()
        logger.info(f"✅ Booking {booking.ref_code} marked {status}")
        return {"success": True, "status": status}

    def export_bookings_csv(
        self,
        business: Business,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        search: Optional[str] = None,
    ) -> StreamingResponse:
        """Export bookings as CSV"""
        bookings = self.repo.search_bookings(self.db, business.id, status, start_date, end_date, search)

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(
            [
                "Ref Code",
                "Service",
                "Date",
                "Time",
                "Pax",
                "Customer Name",
                "Email",
                "Phone",
                "Status",
                "Total (MYR)",
                "Created At",
            ]
        )
        for booking in bookings:
            writer.writerow(
                [
                    booking.ref_code,
                    booking.service.name if booking.service else "",
                    booking.booking_date.isoformat(),
                    booking.start_time.strftime("%H:%M"),
                    booking.pax,
                    booking.customer_name,
                    booking.customer_email,
                    booking.customer_phone or "",
                    booking.status,
                    f"{booking.total_amount:.2f}",
                    booking.created_at.strftime("%Y-%m-%d %H:%M:%S") if booking.created_at else "",
                ]
            )

        output.seek(0)
        filename = f"bookings_export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        logger.info(f"✅ CSV export: {filename} ({len(bookings)} bookings)")

        return StreamingResponse(
            iter([output.getvalue()]),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
