from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from domain.schemas.meal_schemas import MealItem, MealItemIn, MealSnapshot
from domain.enums import MealType


class SubscriptionMealUpdate(BaseModel):
    """Direct edit of one subscription's meal for today"""

    items: Optional[List[MealItemIn]] = None
    meal_type: Optional[MealType] = None
    is_available: Optional[bool] = None


class SubscriptionMealResponse(BaseModel):
    subscription_id: UUID
    seller_id: UUID
    offering_id: UUID
    customer_name: Optional[str] = None
    status: str
    shift: str
    today_meal: Optional[MealSnapshot] = None


class SubscriptionSummary(BaseModel):
    subscription_id: UUID
    offering_id: UUID
    tier: Optional[str] = None
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    status: str
    shift: str
    today_meal_status: str
    today_meal_items: List[MealItem] = []
    created_at: Optional[datetime] = None
