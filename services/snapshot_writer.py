"""
Snapshot writer - materializes one meal snapshot onto one subscription.

Each call is an isolated unit of failure: it either replaces ``today_meal``
completely or raises ``SnapshotWriteError`` and leaves the record as it was.
"""

import logging
from datetime import datetime, time, timezone
from typing import Callable, List, Optional, Sequence
from uuid import UUID
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import ServiceValidationError, SnapshotWriteError
from domain.enums import MealType, Shift, SubscriptionStatus
from domain.models import Subscription
from domain.schemas import MealItem, MealItemIn, MealSnapshot
from repositories import SubscriptionRepository

logger = logging.getLogger("mealsync.snapshots")


def utc_now() -> datetime:
    """Current time as naive UTC, the form every stored timestamp takes"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value: datetime) -> datetime:
    """Naive UTC form of ``value``; naive values are taken to be UTC already"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def today_midnight(now: Optional[datetime] = None) -> datetime:
    """Start of the current service day, in UTC"""
    return datetime.combine(as_utc(now or utc_now()).date(), time.min)


def normalize_items(items: Optional[Sequence[MealItemIn]]) -> List[MealItem]:
    """
    Trim names and fill item defaults.

    Raises:
        ServiceValidationError: if there are no items or any name is blank
    """
    if not items:
        raise ServiceValidationError(
            "Meal items are required and must be a non-empty array",
            code="EMPTY_ITEMS",
        )
    for index, item in enumerate(items):
        if not isinstance(item.name, str) or not item.name.strip():
            raise ServiceValidationError(
                "Each meal item must have a name",
                details={"index": index},
                code="INVALID_ITEM",
            )
    return [item.normalized() for item in items]


def snapshot_shift_tag(subscription: Subscription) -> Optional[str]:
    """
    Shift recorded on a snapshot.

    Dual-shift subscribers are tagged with the window they started in,
    whichever shift is being edited.
    """
    if subscription.shift == Shift.BOTH.value:
        return subscription.start_shift or subscription.shift
    return subscription.shift


def resolve_meal_type(subscription_shift: Optional[str], requested: Optional[MealType]) -> MealType:
    """Requested meal type, else lunch for morning subscribers and dinner otherwise"""
    if requested:
        return MealType(requested)
    if subscription_shift == Shift.MORNING.value:
        return MealType.LUNCH
    return MealType.DINNER


class SnapshotWriter:
    @staticmethod
    def build_snapshot(
        subscription: Subscription,
        items: List[MealItem],
        meal_type: MealType,
        day: datetime,
        is_available: bool = True,
        actor_id: Optional[UUID] = None,
        tier: Optional[str] = None,
        update_reason: Optional[str] = None,
    ) -> MealSnapshot:
        return MealSnapshot(
            items=items,
            meal_type=meal_type,
            date=day,
            is_available=is_available,
            last_updated=utc_now(),
            updated_by=actor_id,
            seller_id=subscription.seller_id,
            tier=tier,
            shift=snapshot_shift_tag(subscription),
            update_reason=update_reason,
        )

    @staticmethod
    def apply(db: Session, subscription: Subscription, snapshot: MealSnapshot) -> Subscription:
        """
        Replace ``subscription.today_meal`` with ``snapshot``.

        Raises:
            SnapshotWriteError: on an invalid snapshot, a corrupted subscription
                record, or a persistence failure
        """
        sub_id = subscription.subscription_id

        if not snapshot.items:
            raise SnapshotWriteError(sub_id, "Snapshot has no items")
        if any(not item.name.strip() for item in snapshot.items):
            raise SnapshotWriteError(sub_id, "Snapshot contains an item without a name")
        try:
            Shift(subscription.shift)
        except ValueError:
            raise SnapshotWriteError(
                sub_id, f"Subscription has unknown shift {subscription.shift!r}"
            )

        try:
            saved = SubscriptionRepository(db).save_today_meal(
                subscription, snapshot.model_dump(mode="json")
            )
        except SQLAlchemyError as e:
            logger.warning("Could not persist meal for subscription %s: %s", sub_id, e)
            raise SnapshotWriteError(sub_id, f"Failed to save meal: {e}") from e

        logger.debug("Wrote %s snapshot to subscription %s", snapshot.meal_type.value, sub_id)
        return saved

    @staticmethod
    def apply_in_session(
        session_factory: Callable[[], Session],
        subscription_id: UUID,
        build: Callable[[Subscription], MealSnapshot],
    ) -> MealSnapshot:
        """
        Load a subscription in a session of its own and write the snapshot ``build`` makes.

        Used by the propagation fan-out, where every subscription is written
        from a separate worker thread.
        """
        db = session_factory()
        try:
            subscription = SubscriptionRepository(db).get_by_id(subscription_id)
            if subscription is None:
                raise SnapshotWriteError(subscription_id, "Subscription no longer exists")
            if subscription.status != SubscriptionStatus.ACTIVE.value:
                raise SnapshotWriteError(
                    subscription_id, f"Subscription is {subscription.status}, not active"
                )
            snapshot = build(subscription)
            SnapshotWriter.apply(db, subscription, snapshot)
            return snapshot
        finally:
            db.close()


def read_snapshot(subscription: Subscription) -> Optional[MealSnapshot]:
    """Parsed ``today_meal`` of a subscription, or None if absent or unreadable"""
    if not subscription.today_meal:
        return None
    try:
        return MealSnapshot.model_validate(subscription.today_meal)
    except ValueError:
        logger.warning(
            "Subscription %s carries an unreadable meal snapshot",
            subscription.subscription_id,
        )
        return None


def is_served_today(snapshot: Optional[MealSnapshot], today: datetime) -> bool:
    """True iff the snapshot is for ``today`` (or later) and marked available"""
    if snapshot is None or not snapshot.is_available:
        return False
    return as_utc(snapshot.date) >= as_utc(today)
