from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
from uuid import UUID

from domain.enums import MealType, ConfigurationState

DEFAULT_QUANTITY = "1 serving"


class MealItem(BaseModel):
    """A normalized dish inside a meal"""

    name: str = Field(..., min_length=1)
    description: str = ""
    quantity: str = DEFAULT_QUANTITY

    model_config = {"from_attributes": True}


class MealItemIn(BaseModel):
    """
    Dish as submitted by an editor.

    Everything is optional here so that blank or missing names reach the
    service layer, which rejects the whole command before any write.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[str] = None

    def normalized(self) -> MealItem:
        return MealItem(
            name=(self.name or "").strip(),
            description=self.description or "",
            quantity=self.quantity or DEFAULT_QUANTITY,
        )


class ShiftMeal(BaseModel):
    """Meal entry stored on a configuration (legacy field or one shift)"""

    items: List[MealItem] = []
    meal_type: MealType = MealType.LUNCH
    is_available: bool = True
    last_updated: Optional[datetime] = None
    updated_by: Optional[UUID] = None


class MealSnapshot(BaseModel):
    """Concrete meal materialized onto a subscription for one day"""

    items: List[MealItem]
    meal_type: MealType
    date: datetime = Field(..., description="Service day, normalized to midnight")
    is_available: bool = True
    last_updated: datetime
    updated_by: Optional[UUID] = None
    seller_id: Optional[UUID] = None
    tier: Optional[str] = None
    shift: Optional[str] = None
    update_reason: Optional[str] = None


class MealEditRequest(BaseModel):
    """Body of the tier and tier/shift edit endpoints"""

    items: Optional[List[MealItemIn]] = None
    meal_type: Optional[MealType] = None
    is_available: Optional[bool] = None


class OfferingMealEditRequest(MealEditRequest):
    """Body of the single-offering edit endpoint"""

    tier: Optional[str] = None
    shift: Optional[str] = None


class EditMealCommand(BaseModel):
    """Fully-specified meal edit handed to the propagation engine"""

    seller_id: UUID
    tier: Optional[str] = None
    offering_id: Optional[UUID] = None
    shift: Optional[str] = None
    items: Optional[List[MealItemIn]] = None
    meal_type: Optional[MealType] = None
    is_available: Optional[bool] = None
    actor_id: Optional[UUID] = None


class FailedUpdate(BaseModel):
    subscription_id: UUID
    customer_name: Optional[str] = None
    error: str


class AffectedSubscription(BaseModel):
    subscription_id: UUID
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    shift: str
    meal_type: MealType
    updated_at: datetime


class TemplateEcho(BaseModel):
    """The normalized content that was propagated, echoed back to the editor"""

    items: List[MealItem]
    meal_type: Optional[MealType] = None
    is_available: bool
    shift: str = Field(..., description='Edited shift, or "all"')
    updated_by: Optional[UUID] = None
    updated_at: datetime


class PropagationResult(BaseModel):
    seller_id: UUID
    tier: str
    offering_id: Optional[UUID] = None
    configuration_id: Optional[UUID] = None
    total_subscriptions: int = 0
    updated_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    failed_updates: List[FailedUpdate] = []
    affected_subscriptions: List[AffectedSubscription] = []
    template_echo: TemplateEcho
    configuration_updated: bool = True
    configuration_error: Optional[str] = None
    processing_time_ms: int = 0


class BulkMealEditRequest(BaseModel):
    """Body of the multi-tier edit endpoint: one meal per tier name"""

    meals_by_tier: Optional[Dict[str, MealEditRequest]] = None


class BulkPropagationResult(BaseModel):
    """Per-tier propagation results of one multi-tier edit, with their totals"""

    seller_id: UUID
    tiers: List[str]
    total_subscriptions: int = 0
    updated_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    results: List[PropagationResult] = []
    processing_time_ms: int = 0


class ConfigurationStats(BaseModel):
    total_subscriptions: int = 0
    active_subscriptions: int = 0
    last_meal_update: Optional[datetime] = None
    meal_update_count: int = 0


class ConfigurationResponse(BaseModel):
    configuration_id: UUID
    seller_id: UUID
    tier: str
    state: ConfigurationState
    legacy_meal: ShiftMeal
    shift_meals: Dict[str, ShiftMeal]
    meal_templates: Dict[str, Dict[str, List[MealItem]]]
    stats: ConfigurationStats
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, config) -> "ConfigurationResponse":
        return cls(
            configuration_id=config.configuration_id,
            seller_id=config.seller_id,
            tier=config.tier,
            state=config.state,
            legacy_meal=config.legacy_meal,
            shift_meals=config.shift_meals,
            meal_templates=config.meal_templates,
            stats=ConfigurationStats(
                total_subscriptions=config.total_subscriptions or 0,
                active_subscriptions=config.active_subscriptions or 0,
                last_meal_update=config.last_meal_update,
                meal_update_count=config.meal_update_count or 0,
            ),
            created_at=config.created_at,
            updated_at=config.updated_at,
        )


class ShiftMealResponse(BaseModel):
    seller_id: UUID
    tier: str
    shift: str
    meal: ShiftMeal
    subscription_count: int
