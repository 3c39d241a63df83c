from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy.orm import Session
import logging

from app.exceptions import ConflictError, NotFoundError, SnapshotWriteError
from domain.enums import SubscriptionStatus
from domain.models import Subscription
from domain.schemas import (
    SubscriptionMealResponse,
    SubscriptionMealUpdate,
    SubscriptionSummary,
)
from repositories import OfferingRepository, SubscriptionRepository
from services.snapshot_writer import (
    SnapshotWriter,
    is_served_today,
    normalize_items,
    read_snapshot,
    resolve_meal_type,
    today_midnight,
)

logger = logging.getLogger("mealsync.subscriptions")

MEAL_AVAILABLE = "available"
MEAL_NOT_SET = "not_set"


def _to_response(subscription: Subscription) -> SubscriptionMealResponse:
    return SubscriptionMealResponse(
        subscription_id=subscription.subscription_id,
        seller_id=subscription.seller_id,
        offering_id=subscription.offering_id,
        customer_name=subscription.customer_name,
        status=subscription.status,
        shift=subscription.shift,
        today_meal=read_snapshot(subscription),
    )


def _to_summary(subscription: Subscription, today: datetime) -> SubscriptionSummary:
    snapshot = read_snapshot(subscription)
    return SubscriptionSummary(
        subscription_id=subscription.subscription_id,
        offering_id=subscription.offering_id,
        tier=subscription.offering.tier if subscription.offering else None,
        customer_id=subscription.customer_id,
        customer_name=subscription.customer_name,
        customer_phone=subscription.customer_phone,
        status=subscription.status,
        shift=subscription.shift,
        today_meal_status=MEAL_AVAILABLE if is_served_today(snapshot, today) else MEAL_NOT_SET,
        today_meal_items=snapshot.items if snapshot else [],
        created_at=subscription.created_at,
    )


class SubscriptionMealService:
    @staticmethod
    def get_today_meal(db: Session, subscription_id: UUID) -> SubscriptionMealResponse:
        subscription = SubscriptionRepository(db).get_by_id(subscription_id)
        if not subscription:
            raise NotFoundError(f"Subscription {subscription_id} not found")
        return _to_response(subscription)

    @staticmethod
    def update_today_meal(
        db: Session,
        subscription_id: UUID,
        update: SubscriptionMealUpdate,
        actor_id: Optional[UUID] = None,
    ) -> SubscriptionMealResponse:
        """
        Overwrite one subscription's meal for today, outside any tier propagation.

        The configuration of the subscription's tier is left untouched; the next
        tier-level edit replaces this snapshot again.

        Raises:
            NotFoundError: if the subscription does not exist
            ConflictError: if the subscription is no longer active
            ServiceValidationError: if the items are missing or malformed
        """
        items = normalize_items(update.items)

        repo = SubscriptionRepository(db)
        subscription = repo.get_with_offering(subscription_id)
        if not subscription:
            raise NotFoundError(f"Subscription {subscription_id} not found")
        if subscription.status != SubscriptionStatus.ACTIVE.value:
            raise ConflictError(
                f"Subscription {subscription_id} is {subscription.status}",
                details={"status": subscription.status},
                code="SUBSCRIPTION_NOT_ACTIVE",
            )

        snapshot = SnapshotWriter.build_snapshot(
            subscription,
            items,
            resolve_meal_type(subscription.shift, update.meal_type),
            today_midnight(),
            is_available=update.is_available if update.is_available is not None else True,
            actor_id=actor_id,
            tier=subscription.offering.tier if subscription.offering else None,
            update_reason="Subscription meal update",
        )
        try:
            saved = SnapshotWriter.apply(db, subscription, snapshot)
        except SnapshotWriteError:
            logger.exception("Direct meal edit failed for subscription %s", subscription_id)
            raise

        logger.info(
            "Subscription %s meal set directly (%d items)", subscription_id, len(items)
        )
        return _to_response(saved)

    @staticmethod
    def list_seller_subscriptions(
        db: Session,
        seller_id: UUID,
        status: Optional[str] = "active",
        page: int = 1,
        page_size: int = 20,
        offering_id: Optional[UUID] = None,
    ) -> Tuple[List[SubscriptionSummary], int]:
        """A page of the seller's subscriptions with their meal status; returns (items, total)"""
        repo = SubscriptionRepository(db)
        skip = (page - 1) * page_size
        subscriptions = repo.list_by_seller(
            seller_id, status=status, skip=skip, limit=page_size, offering_id=offering_id
        )
        total = repo.count_by_seller(seller_id, status=status, offering_id=offering_id)

        today = today_midnight()
        return [_to_summary(sub, today) for sub in subscriptions], total

    @staticmethod
    def list_offering_subscriptions(
        db: Session,
        seller_id: UUID,
        offering_id: UUID,
        status: Optional[str] = "active",
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[List[SubscriptionSummary], int]:
        """
        A page of the subscriptions of one of the seller's offerings.

        Raises:
            NotFoundError: if the offering does not exist or belongs to another seller
        """
        if OfferingRepository(db).get_for_seller(seller_id, offering_id) is None:
            raise NotFoundError(
                "Offering not found for this seller",
                details={"offering_id": str(offering_id)},
                code="OFFERING_NOT_FOUND",
            )
        return SubscriptionMealService.list_seller_subscriptions(
            db,
            seller_id,
            status=status,
            page=page,
            page_size=page_size,
            offering_id=offering_id,
        )
