"""
Domain enums for MealSync.
Contains the enumeration types shared by models, schemas and services.
"""

import enum
from typing import Optional


class SubscriptionStatus(str, enum.Enum):
    """Subscription lifecycle states (owned by the subscription store)"""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class Shift(str, enum.Enum):
    """Service windows a subscription can be pinned to.

    ``BOTH`` only ever appears on a subscription; an edit is scoped to
    ``MORNING`` or ``EVENING`` (see ``EDITABLE_SHIFTS``).
    """

    MORNING = "morning"
    EVENING = "evening"
    BOTH = "both"

    def default_meal_type(self) -> "MealType":
        """Meal served in this window when the editor does not say otherwise"""
        return MealType.LUNCH if self is Shift.MORNING else MealType.DINNER


EDITABLE_SHIFTS = (Shift.MORNING, Shift.EVENING)


class MealType(str, enum.Enum):
    """Meal slot a snapshot is served as"""

    LUNCH = "lunch"
    DINNER = "dinner"
    BOTH = "both"


class ConfigurationState(str, enum.Enum):
    """Lifecycle of a per-(seller, tier) meal configuration"""

    SEEDED = "seeded"
    EDITED = "edited"


class TemplateKind(str, enum.Enum):
    """Starting-content families used for a tier with no customisation yet"""

    PREMIUM = "premium"
    LOW = "low"
    BASIC = "basic"


def shift_in_scope(subscription_shift: Optional[str], edit_shift: Optional[str]) -> bool:
    """
    Decide whether a subscription is targeted by an edit.

    An edit without a shift reaches every subscription. A shift-scoped edit
    reaches subscriptions pinned to that shift and dual-shift ("both")
    subscriptions, whose service spans both windows.
    """
    if edit_shift is None:
        return True
    return subscription_shift in (edit_shift, Shift.BOTH.value)
