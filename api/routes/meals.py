"""Tier and offering meal configuration routes"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
from uuid import UUID

from api.dependencies import get_actor_id, get_db, get_propagation_engine
from api.responses import (
    ERROR_RESPONSES,
    BulkPropagationResponse,
    PropagationResponse,
    bulk_propagation_response,
    propagation_response,
)
from domain.schemas import (
    BulkMealEditRequest,
    ConfigurationResponse,
    EditMealCommand,
    MealEditRequest,
    OfferingMealEditRequest,
    ShiftMealResponse,
)
from services.configuration_store import ConfigurationStore
from services.propagation_service import PropagationEngine
from services.tier_catalog import TierCatalog

router = APIRouter(
    prefix="/sellers/{seller_id}", tags=["Meal Configuration"], responses=ERROR_RESPONSES
)
logger = logging.getLogger("mealsync.api.meals")


@router.get("/tiers/{tier}/configuration", response_model=ConfigurationResponse)
def get_configuration(seller_id: UUID, tier: str, db: Session = Depends(get_db)):
    """
    Get the meal configuration of a tier.

    The first read of a tier that has never been edited seeds it from the
    default template for the tier's name, so the result is never empty.
    """
    TierCatalog.require_offerings(db, seller_id, tier)
    config = ConfigurationStore.get_or_create(db, seller_id, tier)
    return ConfigurationResponse.from_model(config)


@router.get("/tiers/{tier}/shifts/{shift}/meal", response_model=ShiftMealResponse)
def get_shift_meal(seller_id: UUID, tier: str, shift: str, db: Session = Depends(get_db)):
    """Get the meal of one shift of a tier and how many active subscriptions it reaches"""
    return ConfigurationStore.describe_shift_meal(db, seller_id, tier, shift)


@router.put("/tiers/{tier}/meal", response_model=PropagationResponse)
async def update_tier_meal(
    seller_id: UUID,
    tier: str,
    body: MealEditRequest,
    actor_id: UUID = Depends(get_actor_id),
    engine: PropagationEngine = Depends(get_propagation_engine),
):
    """
    Replace the meal of every active subscription in a tier, whatever its shift.

    The content is also stored as the tier's legacy meal. Failures on individual
    subscriptions are reported in ``failed_updates`` and do not stop the rest.
    """
    result = await engine.propagate(
        EditMealCommand(
            seller_id=seller_id,
            tier=tier,
            items=body.items,
            meal_type=body.meal_type,
            is_available=body.is_available,
            actor_id=actor_id,
        )
    )
    return propagation_response(result)


@router.put("/tiers/{tier}/shifts/{shift}/meal", response_model=PropagationResponse)
async def update_tier_shift_meal(
    seller_id: UUID,
    tier: str,
    shift: str,
    body: MealEditRequest,
    actor_id: UUID = Depends(get_actor_id),
    engine: PropagationEngine = Depends(get_propagation_engine),
):
    """
    Replace the meal of one shift of a tier.

    Reaches subscriptions of that shift plus dual-shift ("both") subscriptions;
    the rest of the tier is counted as skipped.
    """
    result = await engine.propagate(
        EditMealCommand(
            seller_id=seller_id,
            tier=tier,
            shift=shift,
            items=body.items,
            meal_type=body.meal_type,
            is_available=body.is_available,
            actor_id=actor_id,
        )
    )
    return propagation_response(result)


@router.put("/offerings/{offering_id}/meal", response_model=PropagationResponse)
async def update_offering_meal(
    seller_id: UUID,
    offering_id: UUID,
    body: OfferingMealEditRequest,
    actor_id: UUID = Depends(get_actor_id),
    engine: PropagationEngine = Depends(get_propagation_engine),
):
    """Replace the meal of the subscriptions of a single offering"""
    result = await engine.propagate(
        EditMealCommand(
            seller_id=seller_id,
            tier=body.tier,
            offering_id=offering_id,
            shift=body.shift,
            items=body.items,
            meal_type=body.meal_type,
            is_available=body.is_available,
            actor_id=actor_id,
        )
    )
    return propagation_response(result)


@router.put("/meals", response_model=BulkPropagationResponse)
async def update_seller_meals(
    seller_id: UUID,
    body: BulkMealEditRequest,
    actor_id: UUID = Depends(get_actor_id),
    engine: PropagationEngine = Depends(get_propagation_engine),
):
    """
    Replace the meal of several tiers in one call.

    ``meals_by_tier`` maps each tier name to its meal. All entries are checked
    before anything is written; tiers left out keep their current meals.
    """
    result = await engine.propagate_bulk(seller_id, body.meals_by_tier, actor_id=actor_id)
    return bulk_propagation_response(result)
