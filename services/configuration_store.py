"""
Configuration store - owns the canonical per-(seller, tier) meal configuration.

A configuration is created lazily (seeded from TemplateSeeder) the first time a
seller/tier pair is edited or viewed, then updated through two explicit
operations: ``update_legacy`` for the single-config field older clients read,
and ``update_shift`` for the shift-keyed entries.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from app.exceptions import InvalidShiftError
from domain.enums import EDITABLE_SHIFTS, MealType, Shift, SubscriptionStatus, shift_in_scope
from domain.models import MealConfiguration
from domain.schemas import MealItem, ShiftMeal, ShiftMealResponse
from repositories import (
    MealConfigurationRepository,
    OfferingRepository,
    SubscriptionRepository,
)
from services.snapshot_writer import utc_now
from services.template_seeder import TemplateSeeder
from services.tier_catalog import TierCatalog

logger = logging.getLogger("mealsync.configuration")


def meal_entry(
    items: List[MealItem],
    meal_type: MealType,
    is_available: bool = True,
    updated_at: Optional[datetime] = None,
    actor_id: Optional[UUID] = None,
) -> dict:
    """JSON document stored for the legacy field or one shift"""
    return ShiftMeal(
        items=items,
        meal_type=meal_type,
        is_available=is_available,
        last_updated=updated_at or utc_now(),
        updated_by=actor_id,
    ).model_dump(mode="json")


def parse_shift(shift) -> Shift:
    """Accept only an editable shift; "both" and unknown values are rejected"""
    try:
        parsed = Shift(shift)
    except ValueError:
        raise InvalidShiftError(shift)
    if parsed not in EDITABLE_SHIFTS:
        raise InvalidShiftError(shift)
    return parsed


class ConfigurationStore:
    @staticmethod
    def build_seeded(seller_id: UUID, tier: str) -> MealConfiguration:
        """New, unsaved configuration filled with the tier's default template"""
        template = TemplateSeeder.default_for(tier)
        now = utc_now()
        return MealConfiguration(
            seller_id=seller_id,
            tier=tier,
            legacy_meal=meal_entry(template.lunch, MealType.LUNCH, updated_at=now),
            shift_meals={
                Shift.MORNING.value: meal_entry(template.lunch, MealType.LUNCH, updated_at=now),
                Shift.EVENING.value: meal_entry(template.dinner, MealType.DINNER, updated_at=now),
            },
            meal_templates={
                Shift.MORNING.value: {
                    MealType.LUNCH.value: [i.model_dump() for i in template.lunch],
                    MealType.DINNER.value: [i.model_dump() for i in template.dinner],
                    MealType.BOTH.value: [i.model_dump() for i in template.lunch],
                },
                Shift.EVENING.value: {
                    MealType.LUNCH.value: [i.model_dump() for i in template.lunch],
                    MealType.DINNER.value: [i.model_dump() for i in template.dinner],
                    MealType.BOTH.value: [i.model_dump() for i in template.dinner],
                },
            },
            total_subscriptions=0,
            active_subscriptions=0,
            meal_update_count=0,
        )

    @staticmethod
    def get_or_create(db: Session, seller_id: UUID, tier: str) -> MealConfiguration:
        """Existing configuration for (seller, tier), or a newly seeded one"""
        repo = MealConfigurationRepository(db)
        config, created = repo.get_or_create(
            seller_id, tier, lambda: ConfigurationStore.build_seeded(seller_id, tier)
        )
        if created:
            logger.info(
                "Seeded %s configuration for seller %s tier %r",
                TemplateSeeder.classify(tier).value,
                seller_id,
                tier,
            )
        return config

    @staticmethod
    def _stamp(config: MealConfiguration, now: datetime) -> None:
        config.last_meal_update = now
        config.meal_update_count = (config.meal_update_count or 0) + 1

    @staticmethod
    def update_legacy(
        db: Session,
        config: MealConfiguration,
        items: List[MealItem],
        meal_type: MealType,
        is_available: bool,
        actor_id: Optional[UUID],
    ) -> MealConfiguration:
        """Overwrite the legacy meal field and bump the update stats"""
        now = utc_now()
        config.legacy_meal = meal_entry(items, meal_type, is_available, now, actor_id)
        ConfigurationStore._stamp(config, now)
        saved = MealConfigurationRepository(db).save(config)
        logger.info(
            "Updated legacy meal for seller %s tier %r (%d items, update #%d)",
            config.seller_id,
            config.tier,
            len(items),
            saved.meal_update_count,
        )
        return saved

    @staticmethod
    def update_shift(
        db: Session,
        config: MealConfiguration,
        shift,
        items: List[MealItem],
        meal_type: MealType,
        is_available: bool,
        actor_id: Optional[UUID],
    ) -> MealConfiguration:
        """
        Overwrite one shift's meal and bump the update stats.

        Raises:
            InvalidShiftError: if ``shift`` is not morning or evening (nothing is changed)
        """
        parsed = parse_shift(shift)
        now = utc_now()
        shift_meals = dict(config.shift_meals or {})
        shift_meals[parsed.value] = meal_entry(items, meal_type, is_available, now, actor_id)
        config.shift_meals = shift_meals
        ConfigurationStore._stamp(config, now)
        saved = MealConfigurationRepository(db).save(config)
        logger.info(
            "Updated %s meal for seller %s tier %r (%d items, update #%d)",
            parsed.value,
            config.seller_id,
            config.tier,
            len(items),
            saved.meal_update_count,
        )
        return saved

    @staticmethod
    def refresh_subscription_counts(db: Session, config: MealConfiguration) -> MealConfiguration:
        """Recompute total/active subscription counts for the configuration's tier"""
        offering_ids = [
            o.offering_id
            for o in OfferingRepository(db).get_by_seller_and_tier(config.seller_id, config.tier)
        ]
        subscription_repo = SubscriptionRepository(db)
        config.total_subscriptions = subscription_repo.count_for_offerings(
            config.seller_id, offering_ids
        )
        config.active_subscriptions = subscription_repo.count_for_offerings(
            config.seller_id, offering_ids, status=SubscriptionStatus.ACTIVE.value
        )
        return MealConfigurationRepository(db).save(config)

    @staticmethod
    def describe_shift_meal(
        db: Session, seller_id: UUID, tier: str, shift
    ) -> ShiftMealResponse:
        """Shift-keyed meal of a tier plus the number of active subscriptions it reaches"""
        parsed = parse_shift(shift)
        offerings = TierCatalog.require_offerings(db, seller_id, tier)
        config = ConfigurationStore.get_or_create(db, seller_id, tier)

        entry = (config.shift_meals or {}).get(parsed.value)
        meal = (
            ShiftMeal.model_validate(entry)
            if entry
            else ShiftMeal(meal_type=parsed.default_meal_type())
        )
        active = SubscriptionRepository(db).get_active_for_offerings(
            seller_id, [o.offering_id for o in offerings]
        )
        return ShiftMealResponse(
            seller_id=seller_id,
            tier=tier,
            shift=parsed.value,
            meal=meal,
            subscription_count=sum(1 for s in active if shift_in_scope(s.shift, parsed.value)),
        )
