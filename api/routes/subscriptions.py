"""Subscription meal routes"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging
from typing import Optional
from uuid import UUID

from api.dependencies import get_actor_id, get_db
from api.responses import ERROR_RESPONSES, PaginatedResponse, paginated_response
from app.config import settings
from domain.schemas import (
    SubscriptionMealResponse,
    SubscriptionMealUpdate,
    SubscriptionSummary,
)
from services.subscription_meal_service import SubscriptionMealService

router = APIRouter(tags=["Subscriptions"], responses=ERROR_RESPONSES)
logger = logging.getLogger("mealsync.api.subscriptions")


@router.get(
    "/sellers/{seller_id}/subscriptions",
    response_model=PaginatedResponse[SubscriptionSummary],
)
def list_subscriptions(
    seller_id: UUID,
    status: Optional[str] = Query(
        default="active", description='Subscription status filter; "all" for every status'
    ),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    """List a seller's subscriptions with whether today's meal is set"""
    items, total = SubscriptionMealService.list_seller_subscriptions(
        db,
        seller_id,
        status=None if status == "all" else status,
        page=page,
        page_size=page_size,
    )
    return paginated_response(items, total, page, page_size)


@router.get("/subscriptions/{subscription_id}/today-meal", response_model=SubscriptionMealResponse)
def get_today_meal(subscription_id: UUID, db: Session = Depends(get_db)):
    return SubscriptionMealService.get_today_meal(db, subscription_id)


@router.put("/subscriptions/{subscription_id}/today-meal", response_model=SubscriptionMealResponse)
def update_today_meal(
    subscription_id: UUID,
    body: SubscriptionMealUpdate,
    actor_id: UUID = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    """
    Set today's meal of a single subscription.

    Only this subscription changes; its tier configuration keeps its content.
    """
    return SubscriptionMealService.update_today_meal(db, subscription_id, body, actor_id)


@router.get(
    "/sellers/{seller_id}/offerings/{offering_id}/subscriptions",
    response_model=PaginatedResponse[SubscriptionSummary],
)
def list_offering_subscriptions(
    seller_id: UUID,
    offering_id: UUID,
    status: Optional[str] = Query(
        default="active", description='Subscription status filter; "all" for every status'
    ),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    """List the subscriptions of one offering with whether today's meal is set"""
    items, total = SubscriptionMealService.list_offering_subscriptions(
        db,
        seller_id,
        offering_id,
        status=None if status == "all" else status,
        page=page,
        page_size=page_size,
    )
    return paginated_response(items, total, page, page_size)
