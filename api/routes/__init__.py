"""API routes package"""

from . import health, tiers, meals, subscriptions, dashboard

__all__ = ["health", "tiers", "meals", "subscriptions", "dashboard"]
