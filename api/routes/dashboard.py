"""Meal management dashboard routes"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db
from domain.schemas import DashboardResponse
from services.dashboard_service import DashboardAggregator

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])
logger = logging.getLogger("mealsync.api.dashboard")


@router.get("/meal-management", response_model=DashboardResponse)
def meal_management(
    recent_limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    """
    Platform-wide meal overview.

    Lists sellers whose active subscriptions have no usable meal for today,
    alongside the most recently edited tier configurations.
    """
    return DashboardAggregator.get_meal_management_dashboard(db, recent_limit=recent_limit)
