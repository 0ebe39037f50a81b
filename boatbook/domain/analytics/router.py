"""Analytics router - Dashboard performance summary"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_business, require_manager
from ...database import get_db
from ...models import Business, User
from .schemas import AnalyticsResponse
from .service import AnalyticsService

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    """Dependency injection for AnalyticsService"""
    return AnalyticsService(db)


@router.get("", response_model=AnalyticsResponse)
async def get_analytics(
    business: Business = Depends(get_current_business),
    _: User = Depends(require_manager),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return service.get_summary(business)
