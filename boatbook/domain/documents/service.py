"""Document service - Renders booking PDFs"""

import logging
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from ...auth import DASHBOARD_ROLES, find_user_business
from ...models import User
from .pdf_generator import (
    BookingPDFGenerator,
    ManifestPDFGenerator,
    ReceiptPDFGenerator,
    TicketPDFGenerator,
)
from .repository import DocumentRepository

logger = logging.getLogger(__name__)

GENERATORS: dict[str, type[BookingPDFGenerator]] = {
    "ticket": TicketPDFGenerator,
    "receipt": ReceiptPDFGenerator,
    "manifest": ManifestPDFGenerator,
}


def pdf_response(pdf_bytes: bytes, filename: str) -> Response:
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "private, max-age=3600",
        },
    )


class DocumentService:
    """Service layer for ticket, receipt and manifest downloads"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DocumentRepository()

    def render(self, kind: str, booking_public_id: str, user: Optional[User] = None) -> Response:
        """
        Render one document for a booking.

        The manifest is only handed to members of the booking's business; a
        booking belonging to another business reads as not found.
        """
        booking = self.repo.get_booking_for_document(self.db, booking_public_id)
        if not booking:
            return JSONResponse(status_code=404, content={"error": "Booking not found"})

        if user is not None:
            business = find_user_business(self.db, user)
            if not business or business.id != booking.business_id:
                logger.warning(f"⚠️ User {user.id} denied {kind} for booking {booking.ref_code}")
                return JSONResponse(status_code=404, content={"error": "Booking not found"})

        try:
            pdf_bytes = GENERATORS[kind](booking).generate()
        except Exception as e:
            logger.error(f"❌ Failed to generate {kind} for {booking.ref_code}: {e}", exc_info=True)
            return JSONResponse(status_code=500, content={"error": f"Failed to generate {kind}"})

        return pdf_response(pdf_bytes, f"{kind}-{booking.ref_code}.pdf")

    def ticket(self, booking_public_id: str) -> Response:
        return self.render("ticket", booking_public_id)

    def receipt(self, booking_public_id: str) -> Response:
        return self.render("receipt", booking_public_id)

    def manifest(self, booking_public_id: str, user: User) -> Response:
        if user.role not in DASHBOARD_ROLES:
            raise HTTPException(status_code=403, detail="Not allowed to view manifests")
        return self.render("manifest", booking_public_id, user)
