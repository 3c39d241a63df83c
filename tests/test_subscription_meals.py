"""
Tests for single-subscription meal reads and edits, and the seller listing.
"""

import uuid

import pytest
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError, ServiceValidationError
from domain.enums import MealType
from domain.schemas import MealItemIn, SubscriptionMealUpdate
from services.configuration_store import ConfigurationStore
from services.subscription_meal_service import SubscriptionMealService
from test_fixtures import (
    ACTOR_ID,
    make_offering,
    make_seller,
    make_subscription,
    reload,
    snapshot_dict,
    yesterday,
)


def test_get_today_meal(db_session: Session):
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller)
    sub = make_subscription(db_session, offering, today_meal=snapshot_dict(["Rajma"]))

    result = SubscriptionMealService.get_today_meal(db_session, sub.subscription_id)

    assert result.subscription_id == sub.subscription_id
    assert result.today_meal.items[0].name == "Rajma"


def test_get_today_meal_not_found(db_session: Session):
    with pytest.raises(NotFoundError):
        SubscriptionMealService.get_today_meal(db_session, uuid.uuid4())


def test_update_today_meal_only_touches_one_subscription(db_session: Session):
    """
    A direct edit writes one snapshot and leaves the tier configuration alone.

    Verifies:
    - Names are trimmed and meal type defaults from the shift
    - The sibling subscription keeps its meal
    - The configuration update count does not move
    """
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller, tier="basic")
    target = make_subscription(db_session, offering, shift="evening")
    sibling = make_subscription(db_session, offering, customer_index=1, today_meal=snapshot_dict(["Khichdi"]))
    config = ConfigurationStore.get_or_create(db_session, seller.seller_id, "basic")

    result = SubscriptionMealService.update_today_meal(
        db_session,
        target.subscription_id,
        SubscriptionMealUpdate(items=[MealItemIn(name=" Veg Pulao ")]),
        ACTOR_ID,
    )

    assert result.today_meal.items[0].name == "Veg Pulao"
    assert result.today_meal.meal_type == MealType.DINNER
    assert result.today_meal.tier == "basic"
    assert result.today_meal.update_reason == "Subscription meal update"
    assert reload(db_session, sibling).today_meal["items"][0]["name"] == "Khichdi"
    db_session.refresh(config)
    assert config.meal_update_count == 0


def test_update_today_meal_validation(db_session: Session):
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller)
    sub = make_subscription(db_session, offering)

    with pytest.raises(ServiceValidationError):
        SubscriptionMealService.update_today_meal(
            db_session, sub.subscription_id, SubscriptionMealUpdate(items=[])
        )
    assert reload(db_session, sub).today_meal is None


def test_update_today_meal_missing_or_inactive(db_session: Session):
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller)
    cancelled = make_subscription(db_session, offering, status="cancelled")
    update = SubscriptionMealUpdate(items=[MealItemIn(name="Poha")])

    with pytest.raises(NotFoundError):
        SubscriptionMealService.update_today_meal(db_session, uuid.uuid4(), update)

    with pytest.raises(ConflictError) as exc_info:
        SubscriptionMealService.update_today_meal(db_session, cancelled.subscription_id, update)
    assert exc_info.value.code == "SUBSCRIPTION_NOT_ACTIVE"


def test_list_seller_subscriptions_meal_status(db_session: Session):
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller, tier="basic")
    fresh = make_subscription(db_session, offering, today_meal=snapshot_dict(["Rajma"]))
    stale = make_subscription(db_session, offering, customer_index=1, today_meal=snapshot_dict(day=yesterday()))
    empty = make_subscription(db_session, offering, customer_index=2)
    make_subscription(db_session, offering, customer_index=3, status="cancelled")

    items, total = SubscriptionMealService.list_seller_subscriptions(db_session, seller.seller_id)

    assert total == 3
    status_by_id = {i.subscription_id: i.today_meal_status for i in items}
    assert status_by_id == {
        fresh.subscription_id: "available",
        stale.subscription_id: "not_set",
        empty.subscription_id: "not_set",
    }
    assert all(i.tier == "basic" for i in items)

    _, all_total = SubscriptionMealService.list_seller_subscriptions(
        db_session, seller.seller_id, status=None
    )
    assert all_total == 4


def test_list_seller_subscriptions_pagination(db_session: Session):
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller)
    for i in range(5):
        make_subscription(db_session, offering, customer_index=i)

    page_one, total = SubscriptionMealService.list_seller_subscriptions(
        db_session, seller.seller_id, page=1, page_size=2
    )
    page_three, _ = SubscriptionMealService.list_seller_subscriptions(
        db_session, seller.seller_id, page=3, page_size=2
    )

    assert total == 5
    assert len(page_one) == 2
    assert len(page_three) == 1


def test_list_offering_subscriptions(db_session: Session):
    """
    Verifies:
    - Only subscriptions of the requested offering are listed
    - The status filter and "all" (None) both apply
    - Meal status is derived the same way as for the seller listing
    """
    seller = make_seller(db_session)
    lunch_box = make_offering(db_session, seller, tier="basic", title="Lunch Box")
    dinner_box = make_offering(db_session, seller, tier="basic", title="Dinner Box")
    served = make_subscription(db_session, lunch_box, today_meal=snapshot_dict(["Rajma"]))
    waiting = make_subscription(db_session, lunch_box, customer_index=1)
    make_subscription(db_session, lunch_box, customer_index=2, status="paused")
    make_subscription(db_session, dinner_box, customer_index=3)

    items, total = SubscriptionMealService.list_offering_subscriptions(
        db_session, seller.seller_id, lunch_box.offering_id
    )

    assert total == 2
    assert {i.subscription_id: i.today_meal_status for i in items} == {
        served.subscription_id: "available",
        waiting.subscription_id: "not_set",
    }
    assert all(i.offering_id == lunch_box.offering_id for i in items)

    _, all_total = SubscriptionMealService.list_offering_subscriptions(
        db_session, seller.seller_id, lunch_box.offering_id, status=None
    )
    assert all_total == 3


def test_list_offering_subscriptions_rejects_foreign_offering(db_session: Session):
    seller = make_seller(db_session)
    other = make_seller(db_session, name="Ravi Menon", business_name="Ravi's Dabba")
    foreign = make_offering(db_session, other)

    for offering_id in (foreign.offering_id, uuid.uuid4()):
        with pytest.raises(NotFoundError) as exc_info:
            SubscriptionMealService.list_offering_subscriptions(
                db_session, seller.seller_id, offering_id
            )
        assert exc_info.value.code == "OFFERING_NOT_FOUND"
