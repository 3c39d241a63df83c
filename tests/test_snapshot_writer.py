"""
Tests for snapshot building, item normalization and single-subscription writes.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.exceptions import ServiceValidationError, SnapshotWriteError
from domain.enums import MealType
from domain.schemas import MealItemIn, MealSnapshot
from repositories import SubscriptionRepository
from services.snapshot_writer import (
    SnapshotWriter,
    is_served_today,
    normalize_items,
    read_snapshot,
    resolve_meal_type,
    snapshot_shift_tag,
    today_midnight,
    utc_now,
)
from test_fixtures import (
    ACTOR_ID,
    make_offering,
    make_seller,
    make_subscription,
    reload,
    snapshot_dict,
    yesterday,
)


def test_today_midnight():
    assert today_midnight(datetime(2024, 3, 9, 17, 45, 12)) == datetime(2024, 3, 9)


def test_today_midnight_converts_offset_times_to_utc():
    evening_in_new_york = datetime(2024, 3, 9, 21, 30, tzinfo=timezone(timedelta(hours=-5)))
    assert today_midnight(evening_in_new_york) == datetime(2024, 3, 10)


def test_utc_now_is_naive():
    assert utc_now().tzinfo is None


def test_normalize_items_trims_and_defaults():
    items = normalize_items(
        [
            MealItemIn(name="  Dal Tadka  "),
            MealItemIn(name="Chapati", description="Fresh wheat bread", quantity="3 pieces"),
        ]
    )

    assert items[0].name == "Dal Tadka"
    assert items[0].description == ""
    assert items[0].quantity == "1 serving"
    assert items[1].quantity == "3 pieces"


@pytest.mark.parametrize("items", [None, []])
def test_normalize_items_rejects_empty(items):
    with pytest.raises(ServiceValidationError) as exc_info:
        normalize_items(items)
    assert exc_info.value.code == "EMPTY_ITEMS"


@pytest.mark.parametrize("bad_name", [None, "", "   "])
def test_normalize_items_rejects_blank_name(bad_name):
    with pytest.raises(ServiceValidationError) as exc_info:
        normalize_items([MealItemIn(name="Rice"), MealItemIn(name=bad_name)])
    assert exc_info.value.code == "INVALID_ITEM"
    assert exc_info.value.details == {"index": 1}


@pytest.mark.parametrize(
    "shift, requested, expected",
    [
        ("morning", None, MealType.LUNCH),
        ("evening", None, MealType.DINNER),
        ("both", None, MealType.DINNER),
        ("morning", MealType.DINNER, MealType.DINNER),
        ("evening", MealType.BOTH, MealType.BOTH),
    ],
)
def test_resolve_meal_type(shift, requested, expected):
    assert resolve_meal_type(shift, requested) == expected


def test_snapshot_shift_tag(db_session: Session):
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller)
    morning = make_subscription(db_session, offering, shift="morning")
    dual = make_subscription(db_session, offering, shift="both", start_shift="evening", customer_index=1)
    dual_no_start = make_subscription(db_session, offering, shift="both", customer_index=2)

    assert snapshot_shift_tag(morning) == "morning"
    assert snapshot_shift_tag(dual) == "evening"
    assert snapshot_shift_tag(dual_no_start) == "both"


def test_apply_replaces_today_meal(db_session: Session):
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller, tier="basic")
    sub = make_subscription(db_session, offering, today_meal=snapshot_dict(["Old Dish"], day=yesterday()))

    snapshot = SnapshotWriter.build_snapshot(
        sub,
        normalize_items([MealItemIn(name="Poha")]),
        MealType.LUNCH,
        today_midnight(),
        actor_id=ACTOR_ID,
        tier="basic",
        update_reason="Tier meal update",
    )
    SnapshotWriter.apply(db_session, sub, snapshot)

    stored = reload(db_session, sub).today_meal
    assert [i["name"] for i in stored["items"]] == ["Poha"]
    assert stored["date"] == today_midnight().isoformat()
    assert stored["updated_by"] == str(ACTOR_ID)
    assert stored["seller_id"] == str(seller.seller_id)
    assert stored["tier"] == "basic"
    assert stored["shift"] == "morning"


def test_apply_rejects_unknown_subscription_shift(db_session: Session):
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller)
    sub = make_subscription(db_session, offering, shift="night")

    snapshot = SnapshotWriter.build_snapshot(
        sub, normalize_items([MealItemIn(name="Poha")]), MealType.DINNER, today_midnight()
    )
    with pytest.raises(SnapshotWriteError):
        SnapshotWriter.apply(db_session, sub, snapshot)

    assert reload(db_session, sub).today_meal is None


def test_apply_wraps_persistence_failure(db_session: Session):
    """
    A database error during the write surfaces as SnapshotWriteError.

    Verifies:
    - The error names the subscription
    - The stored meal is unchanged
    """
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller)
    original = snapshot_dict(["Khichdi"])
    sub = make_subscription(db_session, offering, today_meal=original)
    snapshot = SnapshotWriter.build_snapshot(
        sub, normalize_items([MealItemIn(name="Poha")]), MealType.LUNCH, today_midnight()
    )

    failure = OperationalError("UPDATE subscription", {}, Exception("disk I/O error"))
    with patch.object(SubscriptionRepository, "save_today_meal", side_effect=failure):
        with pytest.raises(SnapshotWriteError) as exc_info:
            SnapshotWriter.apply(db_session, sub, snapshot)

    assert exc_info.value.subscription_id == sub.subscription_id
    db_session.rollback()
    assert [i["name"] for i in reload(db_session, sub).today_meal["items"]] == ["Khichdi"]


def test_apply_in_session_rejects_inactive_subscription(session_factory, db_session: Session):
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller)
    sub = make_subscription(db_session, offering, status="cancelled")

    with pytest.raises(SnapshotWriteError, match="cancelled"):
        SnapshotWriter.apply_in_session(session_factory, sub.subscription_id, lambda s: None)


def test_read_snapshot_and_served_today(db_session: Session):
    seller = make_seller(db_session)
    offering = make_offering(db_session, seller)
    today = today_midnight()

    fresh = make_subscription(db_session, offering, today_meal=snapshot_dict())
    stale = make_subscription(db_session, offering, customer_index=1, today_meal=snapshot_dict(day=yesterday()))
    unavailable = make_subscription(
        db_session, offering, customer_index=2, today_meal=snapshot_dict(is_available=False)
    )
    empty = make_subscription(db_session, offering, customer_index=3)

    assert is_served_today(read_snapshot(fresh), today) is True
    assert is_served_today(read_snapshot(stale), today) is False
    assert is_served_today(read_snapshot(unavailable), today) is False
    assert read_snapshot(empty) is None
    assert is_served_today(None, today) is False


def test_served_today_compares_offset_dates_in_utc():
    """
    Verifies:
    - A snapshot dated with an offset is compared by its UTC instant
    - Naive and offset-aware dates can be mixed without errors
    """
    snapshot = MealSnapshot.model_validate(
        snapshot_dict(day=datetime(2024, 3, 10, 2, 0, tzinfo=timezone(timedelta(hours=5, minutes=30))))
    )

    # 02:00 +05:30 is 20:30 UTC on the previous day
    assert is_served_today(snapshot, datetime(2024, 3, 9)) is True
    assert is_served_today(snapshot, datetime(2024, 3, 10)) is False
    assert is_served_today(snapshot, datetime(2024, 3, 9, tzinfo=timezone.utc)) is True
