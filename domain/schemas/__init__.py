"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.meal_schemas import (
    MealItem,
    MealItemIn,
    ShiftMeal,
    MealSnapshot,
    MealEditRequest,
    OfferingMealEditRequest,
    EditMealCommand,
    FailedUpdate,
    AffectedSubscription,
    TemplateEcho,
    PropagationResult,
    BulkMealEditRequest,
    BulkPropagationResult,
    ConfigurationStats,
    ConfigurationResponse,
    ShiftMealResponse,
)
from domain.schemas.catalog_schemas import (
    OfferingResponse,
    TierDetail,
    TierListResponse,
    TierTemplate,
    RecentMeal,
    SuggestedTemplatesResponse,
)
from domain.schemas.subscription_schemas import (
    SubscriptionMealUpdate,
    SubscriptionMealResponse,
    SubscriptionSummary,
)
from domain.schemas.dashboard_schemas import (
    DashboardStatistics,
    SellerStaleness,
    RecentConfigurationUpdate,
    DashboardResponse,
)

__all__ = [
    # Meal schemas
    "MealItem",
    "MealItemIn",
    "ShiftMeal",
    "MealSnapshot",
    "MealEditRequest",
    "OfferingMealEditRequest",
    "EditMealCommand",
    "FailedUpdate",
    "AffectedSubscription",
    "TemplateEcho",
    "PropagationResult",
    "BulkMealEditRequest",
    "BulkPropagationResult",
    "ConfigurationStats",
    "ConfigurationResponse",
    "ShiftMealResponse",
    # Catalog schemas
    "OfferingResponse",
    "TierDetail",
    "TierListResponse",
    "TierTemplate",
    "RecentMeal",
    "SuggestedTemplatesResponse",
    # Subscription schemas
    "SubscriptionMealUpdate",
    "SubscriptionMealResponse",
    "SubscriptionSummary",
    # Dashboard schemas
    "DashboardStatistics",
    "SellerStaleness",
    "RecentConfigurationUpdate",
    "DashboardResponse",
]
