from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
from uuid import UUID

from domain.schemas.meal_schemas import MealItem, MealSnapshot


class OfferingResponse(BaseModel):
    offering_id: UUID
    seller_id: UUID
    tier: str
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TierDetail(BaseModel):
    """One tier of a seller with its offerings and subscription counts"""

    tier: str
    offerings: int
    total_subscriptions: int
    active_subscriptions: int
    offering_details: List[OfferingResponse] = []


class TierListResponse(BaseModel):
    seller_id: UUID
    available_tiers: List[str]
    tiers_with_details: List[TierDetail]
    total_tiers: int


class TierTemplate(BaseModel):
    """Heuristic starting content for a tier"""

    lunch: List[MealItem]
    dinner: List[MealItem]


class RecentMeal(BaseModel):
    """A meal recently served on one of the seller's subscriptions"""

    tier: Optional[str] = None
    shift: Optional[str] = None
    snapshot: MealSnapshot


class SuggestedTemplatesResponse(BaseModel):
    seller_id: UUID
    offerings: List[OfferingResponse]
    recent_meals: List[RecentMeal]
    available_tiers: List[str]
    default_templates: Dict[str, TierTemplate] = Field(
        default_factory=dict, description="Seeded content per available tier"
    )
