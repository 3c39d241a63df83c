"""
Seller catalog models: sellers and the offerings they sell at each tier.

Both tables are owned by the seller/catalog side of the platform; this service
only reads them.
"""

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Numeric, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base


class Seller(Base):
    """Meal seller (kitchen) account"""

    __tablename__ = "seller"

    seller_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    business_name = Column(Text)
    email = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    offerings = relationship(
        "Offering", back_populates="seller", cascade="all, delete-orphan"
    )


class Offering(Base):
    """A sellable meal plan at a free-form tier ("basic", "Premium Deluxe", ...)"""

    __tablename__ = "offering"

    offering_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(
        UUID(as_uuid=True),
        ForeignKey("seller.seller_id", ondelete="CASCADE"),
        nullable=False,
    )
    tier = Column(Text, nullable=False)
    title = Column(Text)
    description = Column(Text)
    price = Column(Numeric)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    seller = relationship("Seller", back_populates="offerings")
    subscriptions = relationship("Subscription", back_populates="offering")

    __table_args__ = (Index("ix_offering_seller_tier", "seller_id", "tier"),)
