"""
Heuristic starting content for tiers that have never been customised.

Tier names are free text, so the family is picked by substring rules evaluated
in order against the lower-cased name. A tier literally called "Not Premium"
lands in the premium family; letting sellers pick a template key explicitly
would remove that ambiguity.
"""

import logging
from datetime import timedelta
from typing import Callable, Dict, List, Tuple
from uuid import UUID
from sqlalchemy.orm import Session

from app.config import settings
from domain.enums import TemplateKind
from domain.schemas import (
    MealItem,
    MealSnapshot,
    OfferingResponse,
    RecentMeal,
    SuggestedTemplatesResponse,
    TierTemplate,
)
from repositories import OfferingRepository, SubscriptionRepository
from services.snapshot_writer import as_utc, utc_now

logger = logging.getLogger("mealsync.templates")


def _items(*rows: Tuple[str, str, str]) -> List[MealItem]:
    return [MealItem(name=n, description=d, quantity=q) for n, d, q in rows]


TEMPLATES: Dict[TemplateKind, TierTemplate] = {
    TemplateKind.PREMIUM: TierTemplate(
        lunch=_items(
            ("Paneer Butter Masala", "Cottage cheese in rich tomato gravy", "1 bowl"),
            ("Saffron Rice", "Basmati rice with saffron", "1 plate"),
            ("Dal Makhani", "Creamy black lentils", "1 bowl"),
            ("Butter Naan", "Leavened bread with butter", "2 pieces"),
            ("Mix Raita", "Yogurt with vegetables", "1 bowl"),
        ),
        dinner=_items(
            ("Chicken Curry", "Spiced chicken gravy", "1 bowl"),
            ("Biryani Rice", "Aromatic spiced rice", "1 plate"),
            ("Palak Paneer", "Spinach with cottage cheese", "1 serving"),
            ("Garlic Naan", "Bread with garlic", "2 pieces"),
        ),
    ),
    TemplateKind.LOW: TierTemplate(
        lunch=_items(
            ("Dal Rice", "Simple dal with rice", "1 plate"),
            ("Seasonal Vegetable", "Basic vegetable curry", "1 serving"),
            ("Chapati", "Wheat flatbread", "2 pieces"),
        ),
        dinner=_items(
            ("Khichdi", "Rice and lentil porridge", "1 bowl"),
            ("Curd", "Fresh yogurt", "1 small bowl"),
            ("Pickle", "Mixed pickle", "1 portion"),
        ),
    ),
    TemplateKind.BASIC: TierTemplate(
        lunch=_items(
            ("Dal Tadka", "Tempered yellow lentils", "1 bowl"),
            ("Basmati Rice", "Aromatic basmati rice", "1 plate"),
            ("Seasonal Sabzi", "Mixed vegetable curry", "1 serving"),
            ("Chapati", "Fresh wheat bread", "3 pieces"),
            ("Raita", "Cucumber yogurt salad", "1 small bowl"),
        ),
        dinner=_items(
            ("Rajma", "Kidney beans curry", "1 bowl"),
            ("Jeera Rice", "Cumin flavored rice", "1 plate"),
            ("Aloo Gobi", "Potato cauliflower curry", "1 serving"),
            ("Chapati", "Fresh wheat bread", "2 pieces"),
        ),
    ),
}

# Evaluated top to bottom; first match wins, BASIC otherwise.
CLASSIFICATION_RULES: List[Tuple[Callable[[str], bool], TemplateKind]] = [
    (lambda name: "premium" in name or "delux" in name, TemplateKind.PREMIUM),
    (lambda name: "low" in name or "budget" in name, TemplateKind.LOW),
]


class TemplateSeeder:
    @staticmethod
    def classify(tier: str) -> TemplateKind:
        """Pick the template family for a free-form tier name"""
        name = (tier or "").lower()
        for predicate, kind in CLASSIFICATION_RULES:
            if predicate(name):
                return kind
        return TemplateKind.BASIC

    @staticmethod
    def default_for(tier: str) -> TierTemplate:
        """Default lunch and dinner items for a tier (a fresh copy each call)"""
        return TEMPLATES[TemplateSeeder.classify(tier)].model_copy(deep=True)

    @staticmethod
    def suggested_templates(db: Session, seller_id: UUID) -> SuggestedTemplatesResponse:
        """
        Read-only suggestions for an editing surface.

        Combines the seller's offerings, meals recently served on their
        subscriptions, and the seeded defaults for every tier they sell.
        Nothing here is persisted.
        """
        offering_repo = OfferingRepository(db)
        subscription_repo = SubscriptionRepository(db)

        offerings = offering_repo.get_by_seller(seller_id)
        tiers = sorted(offering_repo.distinct_tiers(seller_id))

        cutoff = utc_now() - timedelta(days=settings.recent_meals_days)
        recent: List[RecentMeal] = []
        seen = set()
        for sub in subscription_repo.get_with_meals_by_seller(seller_id):
            try:
                snapshot = MealSnapshot.model_validate(sub.today_meal)
            except ValueError:
                logger.debug("Ignoring unreadable meal on subscription %s", sub.subscription_id)
                continue
            if as_utc(snapshot.date) < cutoff:
                continue
            key = (snapshot.tier, snapshot.shift, tuple(i.name for i in snapshot.items))
            if key in seen:
                continue
            seen.add(key)
            recent.append(
                RecentMeal(
                    tier=snapshot.tier or (sub.offering.tier if sub.offering else None),
                    shift=snapshot.shift,
                    snapshot=snapshot,
                )
            )

        recent.sort(key=lambda m: as_utc(m.snapshot.last_updated), reverse=True)

        return SuggestedTemplatesResponse(
            seller_id=seller_id,
            offerings=[OfferingResponse.model_validate(o) for o in offerings],
            recent_meals=recent[: settings.recent_meals_limit],
            available_tiers=tiers,
            default_templates={tier: TemplateSeeder.default_for(tier) for tier in tiers},
        )
