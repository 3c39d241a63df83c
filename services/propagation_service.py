"""
Meal propagation engine.

One edit at (seller, tier[, shift]) or (seller, offering[, shift]) granularity
is fanned out to every active subscription it governs, then written back into
the tier's configuration so later subscribers start from the same content.

Flow of ``propagate``:
1. Validate the command (items, shift, tier) before touching anything.
2. Resolve offerings, get-or-create the configuration, resolve subscriptions.
3. Write one snapshot per subscription concurrently, each in its own session;
   a failing subscription is recorded and the rest carry on.
4. Persist the content on the configuration (shift entry or legacy field).
   If that write fails the subscription counts still stand and the result
   carries the error.

Snapshots are full replacements, so re-running an identical edit converges to
the same state.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional
from uuid import UUID

import anyio
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceValidationError,
    SnapshotWriteError,
)
from domain.enums import MealType, Shift, shift_in_scope
from domain.schemas import (
    AffectedSubscription,
    BulkPropagationResult,
    EditMealCommand,
    FailedUpdate,
    MealEditRequest,
    MealItem,
    PropagationResult,
    TemplateEcho,
)
from repositories import MealConfigurationRepository, OfferingRepository, SubscriptionRepository
from services.configuration_store import ConfigurationStore, parse_shift
from services.snapshot_writer import (
    SnapshotWriter,
    normalize_items,
    resolve_meal_type,
    today_midnight,
    utc_now,
)
from services.tier_catalog import TierCatalog

logger = logging.getLogger("mealsync.propagation")


@dataclass
class SubscriptionTarget:
    subscription_id: UUID
    shift: str
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None


@dataclass
class PropagationPlan:
    tier: str
    configuration_id: UUID
    offering_id: Optional[UUID] = None
    targets: List[SubscriptionTarget] = field(default_factory=list)
    skipped: int = 0

    @property
    def total(self) -> int:
        return len(self.targets) + self.skipped


class PropagationEngine:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        max_workers: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.max_workers = max_workers or settings.propagation_max_workers

    async def propagate(self, command: EditMealCommand) -> PropagationResult:
        """
        Apply one meal edit to every affected subscription and the configuration.

        Raises:
            ServiceValidationError: malformed command (no items, blank name, bad shift)
            NotFoundError: unknown tier or offering for the seller
        """
        started = time.perf_counter()

        items = self.validate(command)
        shift = parse_shift(command.shift).value if command.shift is not None else None

        logger.info(
            "Meal propagation started: seller=%s tier=%r offering=%s shift=%s items=%d",
            command.seller_id,
            command.tier,
            command.offering_id,
            shift or "all",
            len(items),
        )

        plan = await anyio.to_thread.run_sync(self._prepare, command, shift)
        today = today_midnight()
        affected, failed = await self._fan_out(plan, command, items, today)

        configuration_error = None
        try:
            await anyio.to_thread.run_sync(self._persist_configuration, plan, command, shift, items)
        except (SQLAlchemyError, ConflictError) as e:
            logger.exception(
                "Subscriptions updated but configuration for seller %s tier %r was not saved",
                command.seller_id,
                plan.tier,
            )
            configuration_error = str(e) or e.__class__.__name__

        processing_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Meal propagation finished for seller %s tier %r: %d updated, %d skipped, %d failed in %dms",
            command.seller_id,
            plan.tier,
            len(affected),
            plan.skipped,
            len(failed),
            processing_ms,
        )

        return PropagationResult(
            seller_id=command.seller_id,
            tier=plan.tier,
            offering_id=plan.offering_id,
            configuration_id=plan.configuration_id,
            total_subscriptions=plan.total,
            updated_count=len(affected),
            skipped_count=plan.skipped,
            failed_count=len(failed),
            failed_updates=failed,
            affected_subscriptions=affected,
            template_echo=TemplateEcho(
                items=items,
                meal_type=command.meal_type,
                is_available=self._is_available(command),
                shift=shift or "all",
                updated_by=command.actor_id,
                updated_at=utc_now(),
            ),
            configuration_updated=configuration_error is None,
            configuration_error=configuration_error,
            processing_time_ms=processing_ms,
        )

    async def propagate_bulk(
        self,
        seller_id: UUID,
        meals_by_tier: Optional[Dict[str, MealEditRequest]],
        actor_id: Optional[UUID] = None,
    ) -> BulkPropagationResult:
        """
        Apply a different meal to each named tier of one seller.

        Every entry is validated and every tier checked against the catalog
        before the first write, then tiers are propagated one after another.
        Subscriptions of tiers missing from ``meals_by_tier`` are left alone.

        Raises:
            ServiceValidationError: empty map or a malformed entry (``details["tier"]`` names it)
            NotFoundError: a tier the seller does not offer
        """
        started = time.perf_counter()
        if not meals_by_tier:
            raise ServiceValidationError(
                "meals_by_tier must map at least one tier to a meal",
                code="EMPTY_MEALS_BY_TIER",
            )

        commands = [
            EditMealCommand(
                seller_id=seller_id,
                tier=tier,
                items=edit.items,
                meal_type=edit.meal_type,
                is_available=edit.is_available,
                actor_id=actor_id,
            )
            for tier, edit in sorted(meals_by_tier.items())
        ]
        for command in commands:
            try:
                self.validate(command)
            except ServiceValidationError as e:
                raise ServiceValidationError(
                    f"Tier {command.tier!r}: {e.message}",
                    details={**(e.details or {}), "tier": command.tier},
                    code=e.code,
                ) from e
        await anyio.to_thread.run_sync(
            self._require_tiers, seller_id, [c.tier for c in commands]
        )

        results = []
        for command in commands:
            results.append(await self.propagate(command))

        processing_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Bulk meal update for seller %s across %d tiers: %d updated, %d failed in %dms",
            seller_id,
            len(results),
            sum(r.updated_count for r in results),
            sum(r.failed_count for r in results),
            processing_ms,
        )
        return BulkPropagationResult(
            seller_id=seller_id,
            tiers=[r.tier for r in results],
            total_subscriptions=sum(r.total_subscriptions for r in results),
            updated_count=sum(r.updated_count for r in results),
            skipped_count=sum(r.skipped_count for r in results),
            failed_count=sum(r.failed_count for r in results),
            results=results,
            processing_time_ms=processing_ms,
        )

    def _require_tiers(self, seller_id: UUID, tiers: List[str]) -> None:
        db = self.session_factory()
        try:
            for tier in tiers:
                TierCatalog.require_offerings(db, seller_id, tier)
        finally:
            db.close()

    @staticmethod
    def validate(command: EditMealCommand) -> List[MealItem]:
        """Shape checks that need no database; returns the normalized items"""
        items = normalize_items(command.items)
        if command.shift is not None:
            parse_shift(command.shift)
        if not command.offering_id and not (command.tier and command.tier.strip()):
            raise ServiceValidationError("A tier or an offering is required", code="MISSING_TIER")
        return items

    @staticmethod
    def _is_available(command: EditMealCommand) -> bool:
        return command.is_available if command.is_available is not None else True

    def _prepare(self, command: EditMealCommand, shift: Optional[str]) -> PropagationPlan:
        db = self.session_factory()
        try:
            if command.offering_id:
                offering = OfferingRepository(db).get_for_seller(
                    command.seller_id, command.offering_id
                )
                if offering is None or (command.tier and offering.tier != command.tier):
                    raise NotFoundError(
                        "Offering not found for this seller and tier",
                        details={
                            "offering_id": str(command.offering_id),
                            "available_tiers": sorted(
                                TierCatalog.list_tiers(db, command.seller_id)
                            ),
                        },
                        code="OFFERING_NOT_FOUND",
                    )
                tier = offering.tier
                offerings = [offering]
            else:
                tier = command.tier
                offerings = TierCatalog.require_offerings(db, command.seller_id, tier)

            config = ConfigurationStore.get_or_create(db, command.seller_id, tier)

            subscriptions = SubscriptionRepository(db).get_active_for_offerings(
                command.seller_id, [o.offering_id for o in offerings]
            )
            plan = PropagationPlan(
                tier=tier,
                configuration_id=config.configuration_id,
                offering_id=command.offering_id,
            )
            for sub in subscriptions:
                if not shift_in_scope(sub.shift, shift):
                    logger.debug(
                        "Skipping subscription %s: shift %s outside %s",
                        sub.subscription_id,
                        sub.shift,
                        shift,
                    )
                    plan.skipped += 1
                    continue
                plan.targets.append(
                    SubscriptionTarget(
                        subscription_id=sub.subscription_id,
                        shift=sub.shift,
                        customer_id=sub.customer_id,
                        customer_name=sub.customer_name,
                        customer_phone=sub.customer_phone,
                    )
                )
            return plan
        finally:
            db.close()

    async def _fan_out(
        self,
        plan: PropagationPlan,
        command: EditMealCommand,
        items: List[MealItem],
        today: datetime,
    ):
        limiter = anyio.CapacityLimiter(self.max_workers)
        affected: Dict[int, AffectedSubscription] = {}
        failed: Dict[int, FailedUpdate] = {}
        is_available = self._is_available(command)
        reason = "Offering meal update" if command.offering_id else "Tier meal update"

        def build(subscription):
            return SnapshotWriter.build_snapshot(
                subscription,
                items,
                resolve_meal_type(subscription.shift, command.meal_type),
                today,
                is_available=is_available,
                actor_id=command.actor_id,
                tier=plan.tier,
                update_reason=reason,
            )

        async def write_one(index: int, target: SubscriptionTarget):
            try:
                snapshot = await anyio.to_thread.run_sync(
                    SnapshotWriter.apply_in_session,
                    self.session_factory,
                    target.subscription_id,
                    build,
                    limiter=limiter,
                )
            except SnapshotWriteError as e:
                logger.warning("Subscription %s not updated: %s", target.subscription_id, e)
                failed[index] = FailedUpdate(
                    subscription_id=target.subscription_id,
                    customer_name=target.customer_name,
                    error=str(e),
                )
                return
            except Exception as e:
                logger.exception("Unexpected error updating subscription %s", target.subscription_id)
                failed[index] = FailedUpdate(
                    subscription_id=target.subscription_id,
                    customer_name=target.customer_name,
                    error=str(e) or e.__class__.__name__,
                )
                return

            affected[index] = AffectedSubscription(
                subscription_id=target.subscription_id,
                customer_id=target.customer_id,
                customer_name=target.customer_name,
                customer_phone=target.customer_phone,
                shift=target.shift,
                meal_type=snapshot.meal_type,
                updated_at=snapshot.last_updated,
            )

        async with anyio.create_task_group() as tg:
            for index, target in enumerate(plan.targets):
                tg.start_soon(write_one, index, target)

        return (
            [affected[i] for i in sorted(affected)],
            [failed[i] for i in sorted(failed)],
        )

    def _persist_configuration(
        self,
        plan: PropagationPlan,
        command: EditMealCommand,
        shift: Optional[str],
        items: List[MealItem],
    ) -> None:
        db = self.session_factory()
        try:
            config = MealConfigurationRepository(db).get_by_id(plan.configuration_id)
            if config is None:
                config = ConfigurationStore.get_or_create(db, command.seller_id, plan.tier)
            is_available = self._is_available(command)
            if shift:
                config = ConfigurationStore.update_shift(
                    db,
                    config,
                    shift,
                    items,
                    command.meal_type or Shift(shift).default_meal_type(),
                    is_available,
                    command.actor_id,
                )
            else:
                config = ConfigurationStore.update_legacy(
                    db,
                    config,
                    items,
                    command.meal_type or MealType.LUNCH,
                    is_available,
                    command.actor_id,
                )
            ConfigurationStore.refresh_subscription_counts(db, config)
        finally:
            db.close()
