"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.offering_repository import OfferingRepository, SellerRepository
from repositories.subscription_repository import SubscriptionRepository
from repositories.configuration_repository import MealConfigurationRepository

__all__ = [
    "BaseRepository",
    "OfferingRepository",
    "SellerRepository",
    "SubscriptionRepository",
    "MealConfigurationRepository",
]
