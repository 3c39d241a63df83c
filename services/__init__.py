"""Services package - Business logic layer"""

from services.template_seeder import TemplateSeeder
from services.tier_catalog import TierCatalog
from services.configuration_store import ConfigurationStore
from services.snapshot_writer import SnapshotWriter
from services.propagation_service import PropagationEngine
from services.subscription_meal_service import SubscriptionMealService
from services.dashboard_service import DashboardAggregator

__all__ = [
    "TemplateSeeder",
    "TierCatalog",
    "ConfigurationStore",
    "SnapshotWriter",
    "PropagationEngine",
    "SubscriptionMealService",
    "DashboardAggregator",
]
