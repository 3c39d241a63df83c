"""
Offering Repository - Read-only access to the seller catalog
"""

from typing import Dict, List, Optional
from uuid import UUID
from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Offering, Seller


class OfferingRepository(BaseRepository[Offering]):
    """Repository for offering lookups (tier-filtered and distinct-tier)"""

    id_column = "offering_id"

    def __init__(self, db: Session):
        super().__init__(db, Offering)

    def get_by_seller(self, seller_id: UUID) -> List[Offering]:
        """All offerings of a seller, grouped by tier then newest first"""
        return (
            self.db.query(Offering)
            .filter(Offering.seller_id == seller_id)
            .order_by(Offering.tier, Offering.created_at.desc())
            .all()
        )

    def get_by_seller_and_tier(self, seller_id: UUID, tier: str) -> List[Offering]:
        """Offerings of a seller whose tier matches exactly (case-sensitive)"""
        return (
            self.db.query(Offering)
            .filter(and_(Offering.seller_id == seller_id, Offering.tier == tier))
            .all()
        )

    def get_for_seller(self, seller_id: UUID, offering_id: UUID) -> Optional[Offering]:
        """Get an offering only if it belongs to the seller"""
        return (
            self.db.query(Offering)
            .filter(
                and_(
                    Offering.offering_id == offering_id,
                    Offering.seller_id == seller_id,
                )
            )
            .first()
        )

    def distinct_tiers(self, seller_id: UUID) -> List[str]:
        """Distinct non-blank tier values across a seller's offerings"""
        rows = (
            self.db.query(Offering.tier)
            .filter(Offering.seller_id == seller_id)
            .distinct()
            .all()
        )
        return [tier for (tier,) in rows if tier and tier.strip()]

    def count_by_seller_and_tier(self, seller_id: UUID, tier: str) -> int:
        return (
            self.db.query(func.count(Offering.offering_id))
            .filter(and_(Offering.seller_id == seller_id, Offering.tier == tier))
            .scalar()
            or 0
        )

    def count_by_seller(self) -> Dict[UUID, int]:
        """Offering count per seller id"""
        rows = (
            self.db.query(Offering.seller_id, func.count(Offering.offering_id))
            .group_by(Offering.seller_id)
            .all()
        )
        return {seller_id: count for seller_id, count in rows}


class SellerRepository(BaseRepository[Seller]):
    """Read-only seller lookups"""

    id_column = "seller_id"

    def __init__(self, db: Session):
        super().__init__(db, Seller)

    def get_all_sellers(self) -> List[Seller]:
        return self.db.query(Seller).order_by(Seller.name).all()
