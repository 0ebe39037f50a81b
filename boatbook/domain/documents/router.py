"""Document router - PDF downloads for tickets, receipts and manifests"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .service import DocumentService

router = APIRouter(prefix="/api", tags=["Documents"])


def get_document_service(db: Session = Depends(get_db)) -> DocumentService:
    """Dependency injection for DocumentService"""
    return DocumentService(db)


@router.get("/ticket/{booking_id}")
async def download_ticket(booking_id: str, service: DocumentService = Depends(get_document_service)):
    """Boarding ticket for the booking's public ID"""
    return service.ticket(booking_id)


@router.get("/receipt/{booking_id}")
async def download_receipt(booking_id: str, service: DocumentService = Depends(get_document_service)):
    return service.receipt(booking_id)


@router.get("/manifest/{booking_id}")
async def download_manifest(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    """Marine department passenger manifest, for the operator's crew only"""
    return service.manifest(booking_id, current_user)
