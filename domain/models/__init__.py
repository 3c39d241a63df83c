"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
    get_session_factory,
)
from domain.models.seller import Seller, Offering
from domain.models.subscription import Subscription
from domain.models.meal_configuration import MealConfiguration

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    "get_session_factory",
    # Catalog models
    "Seller",
    "Offering",
    # Subscription models
    "Subscription",
    # Configuration models
    "MealConfiguration",
]
