"""
Subscription Repository - Targeting reads and today_meal writes
"""

from typing import List, Optional, Iterable
from uuid import UUID
from sqlalchemy import and_, func
from sqlalchemy.orm import Session, joinedload

from repositories.base import BaseRepository
from domain.enums import SubscriptionStatus
from domain.models import Subscription


class SubscriptionRepository(BaseRepository[Subscription]):
    """Repository for subscription data access"""

    id_column = "subscription_id"

    def __init__(self, db: Session):
        super().__init__(db, Subscription)

    def get_with_offering(self, subscription_id: UUID) -> Optional[Subscription]:
        return (
            self.db.query(Subscription)
            .options(joinedload(Subscription.offering))
            .filter(Subscription.subscription_id == subscription_id)
            .first()
        )

    def get_active_for_offerings(
        self, seller_id: UUID, offering_ids: Iterable[UUID]
    ) -> List[Subscription]:
        """Active subscriptions of a seller that reference any of the offerings"""
        ids = list(offering_ids)
        if not ids:
            return []
        return (
            self.db.query(Subscription)
            .filter(
                and_(
                    Subscription.seller_id == seller_id,
                    Subscription.offering_id.in_(ids),
                    Subscription.status == SubscriptionStatus.ACTIVE.value,
                )
            )
            .order_by(Subscription.created_at)
            .all()
        )

    def count_for_offerings(
        self,
        seller_id: UUID,
        offering_ids: Iterable[UUID],
        status: Optional[str] = None,
    ) -> int:
        ids = list(offering_ids)
        if not ids:
            return 0
        query = self.db.query(func.count(Subscription.subscription_id)).filter(
            and_(
                Subscription.seller_id == seller_id,
                Subscription.offering_id.in_(ids),
            )
        )
        if status:
            query = query.filter(Subscription.status == status)
        return query.scalar() or 0

    def list_by_seller(
        self,
        seller_id: UUID,
        status: Optional[str] = SubscriptionStatus.ACTIVE.value,
        skip: int = 0,
        limit: int = 20,
        offering_id: Optional[UUID] = None,
    ) -> List[Subscription]:
        """Page of a seller's subscriptions, newest first; status None means all"""
        query = (
            self.db.query(Subscription)
            .options(joinedload(Subscription.offering))
            .filter(Subscription.seller_id == seller_id)
        )
        if offering_id:
            query = query.filter(Subscription.offering_id == offering_id)
        if status:
            query = query.filter(Subscription.status == status)
        return (
            query.order_by(Subscription.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_seller(
        self,
        seller_id: UUID,
        status: Optional[str] = None,
        offering_id: Optional[UUID] = None,
    ) -> int:
        query = self.db.query(func.count(Subscription.subscription_id)).filter(
            Subscription.seller_id == seller_id
        )
        if offering_id:
            query = query.filter(Subscription.offering_id == offering_id)
        if status:
            query = query.filter(Subscription.status == status)
        return query.scalar() or 0

    def count_active(self) -> int:
        return (
            self.db.query(func.count(Subscription.subscription_id))
            .filter(Subscription.status == SubscriptionStatus.ACTIVE.value)
            .scalar()
            or 0
        )

    def get_active(self, seller_id: Optional[UUID] = None) -> List[Subscription]:
        """All active subscriptions, optionally for one seller"""
        query = self.db.query(Subscription).filter(
            Subscription.status == SubscriptionStatus.ACTIVE.value
        )
        if seller_id:
            query = query.filter(Subscription.seller_id == seller_id)
        return query.all()

    def get_with_meals_by_seller(self, seller_id: UUID) -> List[Subscription]:
        """A seller's subscriptions that carry a meal snapshot"""
        return (
            self.db.query(Subscription)
            .options(joinedload(Subscription.offering))
            .filter(
                and_(
                    Subscription.seller_id == seller_id,
                    Subscription.today_meal.isnot(None),
                )
            )
            .all()
        )

    def save_today_meal(self, subscription: Subscription, snapshot: dict) -> Subscription:
        """Replace today_meal as a whole and commit; nothing is kept on failure"""
        try:
            subscription.today_meal = snapshot
            self.db.commit()
            self.db.refresh(subscription)
            return subscription
        except Exception:
            self.db.rollback()
            raise
