"""
Customer subscription model.

Subscriptions are created and cancelled elsewhere; MealSync reads the
targeting columns and writes only ``today_meal``.
"""

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, JSON, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base


class Subscription(Base):
    """A customer's enrollment in one offering"""

    __tablename__ = "subscription"

    subscription_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(
        UUID(as_uuid=True),
        ForeignKey("seller.seller_id", ondelete="CASCADE"),
        nullable=False,
    )
    offering_id = Column(
        UUID(as_uuid=True),
        ForeignKey("offering.offering_id", ondelete="CASCADE"),
        nullable=False,
    )
    customer_id = Column(UUID(as_uuid=True))
    customer_name = Column(Text)
    customer_phone = Column(Text)
    status = Column(Text, nullable=False, default="active")
    shift = Column(Text, nullable=False, default="morning")  # morning, evening, both
    start_shift = Column(Text)  # first window served, used to tag "both" snapshots
    today_meal = Column(JSON(none_as_null=True))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    offering = relationship("Offering", back_populates="subscriptions")

    __table_args__ = (
        Index("ix_subscription_seller_offering_status", "seller_id", "offering_id", "status"),
    )
