"""
Tests for the per-(seller, tier) configuration store.

This test suite covers:
- Lazy creation seeded from the tier's template
- Idempotent and race-safe get-or-create
- Shift and legacy updates with their usage stats
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.orm import Session

from app.exceptions import InvalidShiftError, UnknownTierError
from domain.enums import ConfigurationState, MealType
from domain.models import MealConfiguration
from domain.schemas import MealItem
from repositories import MealConfigurationRepository
from services.configuration_store import ConfigurationStore, parse_shift
from test_fixtures import ACTOR_ID, make_offering, make_seller, make_subscription


def _items(*names):
    return [MealItem(name=n) for n in names]


def test_get_or_create_seeds_from_template(db_session: Session):
    seller = make_seller(db_session)
    make_offering(db_session, seller, tier="Premium Deluxe")

    config = ConfigurationStore.get_or_create(db_session, seller.seller_id, "Premium Deluxe")

    assert config.state == ConfigurationState.SEEDED
    assert config.meal_update_count == 0
    assert config.legacy_meal["items"][0]["name"] == "Paneer Butter Masala"
    assert config.shift_meals["morning"]["meal_type"] == "lunch"
    assert config.shift_meals["morning"]["items"][0]["name"] == "Paneer Butter Masala"
    assert config.shift_meals["evening"]["meal_type"] == "dinner"
    assert config.shift_meals["evening"]["items"][0]["name"] == "Chicken Curry"
    assert set(config.meal_templates["morning"]) == {"lunch", "dinner", "both"}


def test_get_or_create_is_idempotent(db_session: Session):
    seller = make_seller(db_session)

    first = ConfigurationStore.get_or_create(db_session, seller.seller_id, "basic")
    second = ConfigurationStore.get_or_create(db_session, seller.seller_id, "basic")

    assert first.configuration_id == second.configuration_id
    assert db_session.query(MealConfiguration).count() == 1


def test_concurrent_get_or_create_yields_single_row(session_factory):
    """
    Two callers racing past the existence check end up on the same row.

    Both threads are held until each has built its candidate, so both attempt
    the insert; the loser hits the unique constraint and re-fetches.
    """
    setup = session_factory()
    seller = make_seller(setup)
    seller_id = seller.seller_id
    setup.close()

    barrier = threading.Barrier(2, timeout=10)

    def worker():
        db = session_factory()
        try:

            def build():
                barrier.wait()
                return ConfigurationStore.build_seeded(seller_id, "basic")

            config, created = MealConfigurationRepository(db).get_or_create(seller_id, "basic", build)
            return config.configuration_id, created
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=2) as executor:
        results = [f.result() for f in [executor.submit(worker) for _ in range(2)]]

    assert len({config_id for config_id, _ in results}) == 1
    assert sorted(created for _, created in results) == [False, True]

    check = session_factory()
    try:
        assert check.query(MealConfiguration).count() == 1
    finally:
        check.close()


def test_update_shift_replaces_entry_and_bumps_stats(db_session: Session):
    seller = make_seller(db_session)
    config = ConfigurationStore.get_or_create(db_session, seller.seller_id, "basic")
    evening_before = dict(config.shift_meals["evening"])

    updated = ConfigurationStore.update_shift(
        db_session, config, "morning", _items("Poha", "Chai"), MealType.LUNCH, True, ACTOR_ID
    )

    assert [i["name"] for i in updated.shift_meals["morning"]["items"]] == ["Poha", "Chai"]
    assert updated.shift_meals["morning"]["updated_by"] == str(ACTOR_ID)
    assert updated.shift_meals["evening"] == evening_before
    assert updated.meal_update_count == 1
    assert updated.last_meal_update is not None
    assert updated.state == ConfigurationState.EDITED


def test_update_legacy_leaves_shift_entries(db_session: Session):
    seller = make_seller(db_session)
    config = ConfigurationStore.get_or_create(db_session, seller.seller_id, "basic")
    shift_before = dict(config.shift_meals)

    updated = ConfigurationStore.update_legacy(
        db_session, config, _items("Upma"), MealType.LUNCH, False, ACTOR_ID
    )
    updated = ConfigurationStore.update_legacy(
        db_session, updated, _items("Idli"), MealType.LUNCH, True, ACTOR_ID
    )

    assert updated.legacy_meal["items"][0]["name"] == "Idli"
    assert updated.legacy_meal["is_available"] is True
    assert updated.shift_meals == shift_before
    assert updated.meal_update_count == 2


@pytest.mark.parametrize("shift", ["both", "night", "", None, "Morning"])
def test_update_shift_rejects_invalid_shift(db_session: Session, shift):
    seller = make_seller(db_session)
    config = ConfigurationStore.get_or_create(db_session, seller.seller_id, "basic")

    with pytest.raises(InvalidShiftError):
        ConfigurationStore.update_shift(
            db_session, config, shift, _items("Poha"), MealType.LUNCH, True, ACTOR_ID
        )

    db_session.expire_all()
    assert db_session.get(MealConfiguration, config.configuration_id).meal_update_count == 0


def test_parse_shift_accepts_editable_shifts():
    assert parse_shift("morning").value == "morning"
    assert parse_shift("evening").value == "evening"


def test_refresh_subscription_counts(db_session: Session):
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller, tier="basic")
    make_subscription(db_session, offering)
    make_subscription(db_session, offering, customer_index=1, status="paused")
    config = ConfigurationStore.get_or_create(db_session, seller.seller_id, "basic")

    refreshed = ConfigurationStore.refresh_subscription_counts(db_session, config)

    assert refreshed.total_subscriptions == 2
    assert refreshed.active_subscriptions == 1


def test_describe_shift_meal(db_session: Session):
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller, tier="basic")
    make_subscription(db_session, offering, shift="morning")
    make_subscription(db_session, offering, shift="both", customer_index=1)
    make_subscription(db_session, offering, shift="evening", customer_index=2)

    result = ConfigurationStore.describe_shift_meal(db_session, seller.seller_id, "basic", "evening")

    assert result.shift == "evening"
    assert result.meal.meal_type == MealType.DINNER
    assert result.meal.items[0].name == "Rajma"
    assert result.subscription_count == 2


def test_describe_shift_meal_unknown_tier(db_session: Session):
    seller = make_seller(db_session)
    make_offering(db_session, seller, tier="basic")

    with pytest.raises(UnknownTierError):
        ConfigurationStore.describe_shift_meal(db_session, seller.seller_id, "gold", "morning")
