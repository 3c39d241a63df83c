"""
Meal Configuration Repository - Data access for per-(seller, tier) configurations
"""

import logging
from typing import Callable, List, Optional, Tuple
from uuid import UUID
from sqlalchemy import and_
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from app.exceptions import ConflictError
from repositories.base import BaseRepository
from domain.models import MealConfiguration, Seller

logger = logging.getLogger("mealsync.repositories.configuration")


class MealConfigurationRepository(BaseRepository[MealConfiguration]):
    """Repository for meal configuration records"""

    id_column = "configuration_id"

    def __init__(self, db: Session):
        super().__init__(db, MealConfiguration)

    def get_by_seller_and_tier(
        self, seller_id: UUID, tier: str
    ) -> Optional[MealConfiguration]:
        return (
            self.db.query(MealConfiguration)
            .filter(
                and_(
                    MealConfiguration.seller_id == seller_id,
                    MealConfiguration.tier == tier,
                )
            )
            .first()
        )

    def get_or_create(
        self,
        seller_id: UUID,
        tier: str,
        build: Callable[[], MealConfiguration],
    ) -> Tuple[MealConfiguration, bool]:
        """
        Get the configuration for (seller, tier), or insert the one ``build`` returns.

        Handles the creation race through the (seller_id, tier) unique constraint:
        when a concurrent caller wins the insert, the IntegrityError is swallowed,
        the transaction rolled back, and the winner's row re-fetched.

        Returns:
            (configuration, created) tuple
        """
        config = self.get_by_seller_and_tier(seller_id, tier)
        if config:
            return config, False

        config = build()
        self.db.add(config)

        try:
            self.db.commit()
            self.db.refresh(config)
            return config, True
        except IntegrityError:
            # Race condition - another request created it
            self.db.rollback()
            logger.info(
                "Configuration for seller %s tier %r created concurrently; re-fetching",
                seller_id,
                tier,
            )
            existing = self.get_by_seller_and_tier(seller_id, tier)
            if existing is None:
                raise ConflictError(
                    "Configuration could not be created",
                    details={"seller_id": str(seller_id), "tier": tier},
                    code="CONFIGURATION_CONFLICT",
                )
            return existing, False

    def save(self, config: MealConfiguration) -> MealConfiguration:
        """Commit changes to a configuration, rolling back on failure"""
        try:
            self.db.commit()
            self.db.refresh(config)
            return config
        except Exception:
            self.db.rollback()
            raise

    def get_recently_updated(
        self, limit: int = 10
    ) -> List[Tuple[MealConfiguration, Optional[Seller]]]:
        """Configurations ordered by their last meal update, with their seller"""
        return (
            self.db.query(MealConfiguration, Seller)
            .outerjoin(Seller, Seller.seller_id == MealConfiguration.seller_id)
            .filter(MealConfiguration.last_meal_update.isnot(None))
            .order_by(MealConfiguration.last_meal_update.desc())
            .limit(limit)
            .all()
        )
