"""Seller tier catalog routes"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
from uuid import UUID

from api.dependencies import get_db
from domain.schemas import SuggestedTemplatesResponse, TierListResponse
from services.template_seeder import TemplateSeeder
from services.tier_catalog import TierCatalog

router = APIRouter(prefix="/sellers/{seller_id}", tags=["Tiers"])
logger = logging.getLogger("mealsync.api.tiers")


@router.get("/tiers", response_model=TierListResponse)
def list_tiers(seller_id: UUID, db: Session = Depends(get_db)):
    """Tiers the seller offers, with offerings and subscription counts per tier"""
    return TierCatalog.describe_tiers(db, seller_id)


@router.get("/meal-templates", response_model=SuggestedTemplatesResponse)
def get_meal_templates(seller_id: UUID, db: Session = Depends(get_db)):
    """
    Suggestions for the meal editor.

    Returns the seller's offerings, distinct meals served in the last few days,
    and the default template of every tier. Nothing is saved.
    """
    return TemplateSeeder.suggested_templates(db, seller_id)
