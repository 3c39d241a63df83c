"""
Canonical per-(seller, tier) meal configuration.
"""

from sqlalchemy import (
    Column,
    Text,
    TIMESTAMP,
    ForeignKey,
    Integer,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid

from domain.enums import ConfigurationState
from domain.models.database import Base


class MealConfiguration(Base):
    """
    Meal definition for every subscription of a seller's tier.

    ``legacy_meal`` is the single-config field older clients read;
    ``shift_meals`` holds one entry per editable shift ("morning", "evening").
    Both are JSON documents replaced as a whole on every edit.
    """

    __tablename__ = "meal_configuration"

    configuration_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(
        UUID(as_uuid=True),
        ForeignKey("seller.seller_id", ondelete="CASCADE"),
        nullable=False,
    )
    tier = Column(Text, nullable=False)
    legacy_meal = Column(JSON, nullable=False)
    shift_meals = Column(JSON, nullable=False)
    meal_templates = Column(JSON, nullable=False)

    # Usage stats
    total_subscriptions = Column(Integer, nullable=False, default=0)
    active_subscriptions = Column(Integer, nullable=False, default=0)
    last_meal_update = Column(TIMESTAMP(timezone=True))
    meal_update_count = Column(Integer, nullable=False, default=0)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("seller_id", "tier", name="uq_meal_configuration_seller_tier"),
    )

    @property
    def state(self) -> ConfigurationState:
        if self.meal_update_count:
            return ConfigurationState.EDITED
        return ConfigurationState.SEEDED
