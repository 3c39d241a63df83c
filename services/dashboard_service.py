"""
Read-only meal management overview across all sellers.
"""

from collections import defaultdict
from datetime import datetime
from typing import Dict, Optional
from uuid import UUID
from sqlalchemy.orm import Session
import logging

from domain.models import Subscription
from domain.schemas import (
    DashboardResponse,
    DashboardStatistics,
    RecentConfigurationUpdate,
    SellerStaleness,
)
from repositories import (
    MealConfigurationRepository,
    OfferingRepository,
    SellerRepository,
    SubscriptionRepository,
)
from services.snapshot_writer import is_served_today, read_snapshot, today_midnight

logger = logging.getLogger("mealsync.dashboard")


def is_stale(subscription: Subscription, today: datetime) -> bool:
    """
    A subscription needs attention when it has no meal, its meal is marked
    unavailable, or the meal belongs to an earlier day.
    """
    return not is_served_today(read_snapshot(subscription), today)


class DashboardAggregator:
    @staticmethod
    def compute_staleness(
        db: Session,
        seller_id: Optional[UUID] = None,
        today: Optional[datetime] = None,
    ) -> Dict[UUID, Dict[str, int]]:
        """Active and stale subscription counts per seller"""
        today = today or today_midnight()
        counts: Dict[UUID, Dict[str, int]] = defaultdict(lambda: {"active": 0, "stale": 0})
        for sub in SubscriptionRepository(db).get_active(seller_id):
            bucket = counts[sub.seller_id]
            bucket["active"] += 1
            if is_stale(sub, today):
                bucket["stale"] += 1
        return dict(counts)

    @staticmethod
    def get_meal_management_dashboard(db: Session, recent_limit: int = 10) -> DashboardResponse:
        today = today_midnight()
        seller_repo = SellerRepository(db)
        offering_repo = OfferingRepository(db)
        subscription_repo = SubscriptionRepository(db)

        sellers = seller_repo.get_all_sellers()
        offerings_per_seller = offering_repo.count_by_seller()
        staleness = DashboardAggregator.compute_staleness(db, today=today)

        attention = []
        for seller in sellers:
            counts = staleness.get(seller.seller_id)
            if not counts or counts["stale"] == 0:
                continue
            attention.append(
                SellerStaleness(
                    seller_id=seller.seller_id,
                    name=seller.name,
                    business_name=seller.business_name,
                    offerings_count=offerings_per_seller.get(seller.seller_id, 0),
                    active_subscriptions=counts["active"],
                    stale_subscriptions=counts["stale"],
                )
            )
        attention.sort(key=lambda s: s.stale_subscriptions, reverse=True)

        recent = [
            RecentConfigurationUpdate(
                configuration_id=config.configuration_id,
                seller_id=config.seller_id,
                seller_name=seller.business_name or seller.name if seller else None,
                tier=config.tier,
                last_meal_update=config.last_meal_update,
                meal_update_count=config.meal_update_count or 0,
            )
            for config, seller in MealConfigurationRepository(db).get_recently_updated(recent_limit)
        ]

        logger.debug(
            "Dashboard: %d sellers, %d need attention", len(sellers), len(attention)
        )
        return DashboardResponse(
            statistics=DashboardStatistics(
                total_sellers=seller_repo.count(),
                total_offerings=offering_repo.count(),
                total_subscriptions=subscription_repo.count(),
                active_subscriptions=subscription_repo.count_active(),
            ),
            sellers_needing_attention=attention,
            recent_updates=recent,
            today=today,
        )
