"""
Tier catalog - the single authority on which tiers a seller offers.

Tiers are free-form strings read from the seller's offerings; nothing here
keeps a fixed list.
"""

import logging
from collections import defaultdict
from typing import List, Set
from uuid import UUID
from sqlalchemy.orm import Session

from app.exceptions import UnknownTierError
from domain.enums import SubscriptionStatus
from domain.models import Offering
from domain.schemas import OfferingResponse, TierDetail, TierListResponse
from repositories import OfferingRepository, SubscriptionRepository

logger = logging.getLogger("mealsync.tiers")


class TierCatalog:
    @staticmethod
    def list_tiers(db: Session, seller_id: UUID) -> Set[str]:
        """Distinct tiers across the seller's offerings (empty set if none)"""
        return set(OfferingRepository(db).distinct_tiers(seller_id))

    @staticmethod
    def validate_tier(db: Session, seller_id: UUID, tier: str) -> bool:
        """True iff at least one offering of the seller has exactly this tier"""
        if not tier or not tier.strip():
            return False
        return OfferingRepository(db).count_by_seller_and_tier(seller_id, tier) > 0

    @staticmethod
    def require_offerings(db: Session, seller_id: UUID, tier: str) -> List[Offering]:
        """
        Offerings of the seller at ``tier``.

        Raises:
            UnknownTierError: if the seller has none, listing the tiers they do have
        """
        if not TierCatalog.validate_tier(db, seller_id, tier):
            available = TierCatalog.list_tiers(db, seller_id)
            logger.info(
                "Tier %r not offered by seller %s; available: %s",
                tier,
                seller_id,
                sorted(available),
            )
            raise UnknownTierError(seller_id, tier, available)
        return OfferingRepository(db).get_by_seller_and_tier(seller_id, tier)

    @staticmethod
    def describe_tiers(db: Session, seller_id: UUID) -> TierListResponse:
        """Tiers of a seller with their offerings and subscription counts"""
        offering_repo = OfferingRepository(db)
        subscription_repo = SubscriptionRepository(db)

        by_tier = defaultdict(list)
        for offering in offering_repo.get_by_seller(seller_id):
            if offering.tier and offering.tier.strip():
                by_tier[offering.tier].append(offering)

        details = []
        for tier in sorted(by_tier):
            offerings = by_tier[tier]
            ids = [o.offering_id for o in offerings]
            details.append(
                TierDetail(
                    tier=tier,
                    offerings=len(offerings),
                    total_subscriptions=subscription_repo.count_for_offerings(seller_id, ids),
                    active_subscriptions=subscription_repo.count_for_offerings(
                        seller_id, ids, status=SubscriptionStatus.ACTIVE.value
                    ),
                    offering_details=[OfferingResponse.model_validate(o) for o in offerings],
                )
            )

        return TierListResponse(
            seller_id=seller_id,
            available_tiers=[d.tier for d in details],
            tiers_with_details=details,
            total_tiers=len(details),
        )
