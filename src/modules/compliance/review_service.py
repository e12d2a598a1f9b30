"""Admin review of drivers, suppliers and vehicles."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.exceptions import BusinessRuleException
from src.models.compliance_review_log import ComplianceReviewLog
from src.models.driver import Driver
from src.models.enums import AccountStatus, ComplianceReviewStatus, OwnerType, ReviewAction
from src.models.supplier import Supplier
from src.models.vehicle import Vehicle
from src.modules.compliance.constants import REVIEW_ACTION_TARGETS, VALID_COMPLIANCE_TRANSITIONS
from src.modules.compliance.service import ComplianceService, vehicle_flags

logger = logging.getLogger(__name__)

# Account status an actor ends up in after each compliance status
_ACCOUNT_STATUS_FOR = {
    ComplianceReviewStatus.APPROVED: AccountStatus.ACTIVE,
    ComplianceReviewStatus.REJECTED: AccountStatus.REJECTED,
    ComplianceReviewStatus.SUSPENDED: AccountStatus.SUSPENDED,
    ComplianceReviewStatus.PENDING: AccountStatus.PENDING_COMPLIANCE,
}


def _current_status(value: str) -> ComplianceReviewStatus:
    try:
        return ComplianceReviewStatus(value)
    except ValueError as exc:
        raise BusinessRuleException(f"Unknown compliance status '{value}'") from exc


class ComplianceReviewService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self._compliance = ComplianceService(db)

    async def _get_actor(
        self, actor_type: OwnerType, actor_id: uuid.UUID
    ) -> Supplier | Driver | Vehicle:
        if actor_type == OwnerType.SUPPLIER:
            return await self._compliance.get_supplier(actor_id)
        if actor_type == OwnerType.DRIVER:
            return await self._compliance.get_driver(actor_id)
        if actor_type == OwnerType.VEHICLE:
            return await self._compliance.get_vehicle(actor_id)
        raise BusinessRuleException(f"Actors of type '{actor_type.value}' are not reviewed")

    async def review_actor(
        self,
        actor_type: OwnerType,
        actor_id: uuid.UUID,
        action: ReviewAction,
        reviewer_id: uuid.UUID,
        notes: str | None = None,
    ) -> Supplier | Driver | Vehicle:
        """Apply a review decision and record it in the review log.

        Validates the compliance-status transition, then moves the account
        status along with it.
        """
        target = REVIEW_ACTION_TARGETS.get(action)
        if target is None:
            raise BusinessRuleException(f"Review action '{action.value}' is not supported")

        actor = await self._get_actor(actor_type, actor_id)

        if isinstance(actor, Vehicle):
            current = ComplianceReviewStatus(vehicle_flags(actor).compliance_status)
        else:
            current = _current_status(actor.compliance_status)

        allowed = VALID_COMPLIANCE_TRANSITIONS.get(current, set())
        if target not in allowed:
            raise BusinessRuleException(
                f"Cannot transition from '{current.value}' to '{target.value}'. "
                f"Allowed transitions: {sorted(s.value for s in allowed)}"
            )

        account_status = _ACCOUNT_STATUS_FOR[target]
        if isinstance(actor, Vehicle):
            actor.vehicle_status = account_status
        else:
            actor.compliance_status = target.value
            actor.status = account_status
            actor.compliance_reviewer_id = reviewer_id
            actor.compliance_review_date = datetime.now(UTC)
            if target == ComplianceReviewStatus.REJECTED:
                actor.compliance_rejection_reason = notes
            elif target == ComplianceReviewStatus.APPROVED:
                actor.compliance_rejection_reason = None

        self.db.add(
            ComplianceReviewLog(
                actor_type=actor_type,
                actor_id=actor_id,
                reviewer_id=reviewer_id,
                action=action,
                from_status=current.value,
                to_status=target.value,
                notes=notes,
            )
        )
        await self.db.flush()

        logger.info(
            "%s %s reviewed by %s: %s (%s -> %s)",
            actor_type.value,
            actor_id,
            reviewer_id,
            action.value,
            current.value,
            target.value,
        )
        return actor

    async def get_pending_reviews(self) -> dict[str, list]:
        """Drivers and suppliers whose compliance is awaiting a decision, oldest first."""
        pending = ComplianceReviewStatus.PENDING.value

        driver_result = await self.db.execute(
            select(Driver)
            .where(Driver.compliance_status == pending)
            .order_by(Driver.created_at.asc())
        )
        supplier_result = await self.db.execute(
            select(Supplier)
            .where(Supplier.compliance_status == pending)
            .order_by(Supplier.created_at.asc())
        )
        return {
            "drivers": list(driver_result.scalars().all()),
            "suppliers": list(supplier_result.scalars().all()),
        }

    async def get_review_history(
        self, actor_type: OwnerType, actor_id: uuid.UUID
    ) -> list[ComplianceReviewLog]:
        """Review log of one actor, newest first."""
        await self._get_actor(actor_type, actor_id)
        result = await self.db.execute(
            select(ComplianceReviewLog)
            .where(
                ComplianceReviewLog.actor_type == actor_type,
                ComplianceReviewLog.actor_id == actor_id,
            )
            .order_by(ComplianceReviewLog.created_at.desc())
        )
        return list(result.scalars().all())
