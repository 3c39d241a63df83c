from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from uuid import UUID


class DashboardStatistics(BaseModel):
    total_sellers: int
    total_offerings: int
    total_subscriptions: int
    active_subscriptions: int


class SellerStaleness(BaseModel):
    """Active subscriptions of one seller that have no usable meal for today"""

    seller_id: UUID
    name: Optional[str] = None
    business_name: Optional[str] = None
    offerings_count: int
    active_subscriptions: int
    stale_subscriptions: int


class RecentConfigurationUpdate(BaseModel):
    configuration_id: UUID
    seller_id: UUID
    seller_name: Optional[str] = None
    tier: str
    last_meal_update: Optional[datetime] = None
    meal_update_count: int


class DashboardResponse(BaseModel):
    statistics: DashboardStatistics
    sellers_needing_attention: List[SellerStaleness]
    recent_updates: List[RecentConfigurationUpdate]
    today: datetime
