"""Loads actors and their documents and evaluates their compliance status."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.exceptions import ActorNotFoundException, ComplianceRequiredException
from src.models.document import Document
from src.models.driver import Driver
from src.models.enums import AccountStatus, ComplianceReviewStatus, OwnerType
from src.models.supplier import Supplier
from src.models.vehicle import Vehicle
from src.modules.compliance.constants import (
    CONDITION_NOT_REGISTERED_OWNER,
    CONDITION_TRANSPORTS_FUEL,
)
from src.modules.compliance.evaluator import (
    ActorStatusFlags,
    ComplianceEvaluator,
    ComplianceStatus,
    DocumentRecord,
)

logger = logging.getLogger(__name__)


def document_record(document: Document) -> DocumentRecord:
    return DocumentRecord(
        id=document.id,
        owner_id=document.owner_id,
        owner_type=document.owner_type,
        doc_type=document.doc_type,
        verification_status=document.verification_status,
        expiry_date=document.expiry_date,
        uploaded_at=document.created_at,
    )


def actor_flags(actor: Supplier | Driver) -> ActorStatusFlags:
    return ActorStatusFlags(
        status=actor.status,
        compliance_status=actor.compliance_status,
        rejection_reason=actor.compliance_rejection_reason,
        reviewer_id=actor.compliance_reviewer_id,
        review_date=actor.compliance_review_date,
    )


def vehicle_flags(vehicle: Vehicle) -> ActorStatusFlags:
    """Vehicles carry a single status; derive the compliance flag from it."""
    status = AccountStatus(vehicle.vehicle_status)
    if status is AccountStatus.ACTIVE:
        compliance = ComplianceReviewStatus.APPROVED
    elif status is AccountStatus.REJECTED:
        compliance = ComplianceReviewStatus.REJECTED
    elif status is AccountStatus.SUSPENDED:
        compliance = ComplianceReviewStatus.SUSPENDED
    else:
        compliance = ComplianceReviewStatus.PENDING
    return ActorStatusFlags(status=status, compliance_status=compliance)


def driver_conditions(driver: Driver) -> set[str]:
    if driver.prdp_required or driver.dg_training_required:
        return {CONDITION_TRANSPORTS_FUEL}
    return set()


def vehicle_conditions(vehicle: Vehicle) -> set[str]:
    conditions = set()
    if vehicle.dg_vehicle_permit_required:
        conditions.add(CONDITION_TRANSPORTS_FUEL)
    if vehicle.loa_required:
        conditions.add(CONDITION_NOT_REGISTERED_OWNER)
    return conditions


class ComplianceService:
    def __init__(self, db: AsyncSession, evaluator: ComplianceEvaluator | None = None):
        self.db = db
        self.evaluator = evaluator or ComplianceEvaluator()

    # ------------------------------------------------------------------
    # Actor lookups
    # ------------------------------------------------------------------

    async def get_supplier_by_owner(self, owner_id: uuid.UUID) -> Supplier:
        result = await self.db.execute(select(Supplier).where(Supplier.owner_id == owner_id))
        supplier = result.scalar_one_or_none()
        if supplier is None:
            raise ActorNotFoundException("Supplier profile not found")
        return supplier

    async def get_supplier(self, supplier_id: uuid.UUID) -> Supplier:
        result = await self.db.execute(select(Supplier).where(Supplier.id == supplier_id))
        supplier = result.scalar_one_or_none()
        if supplier is None:
            raise ActorNotFoundException(f"Supplier {supplier_id} not found")
        return supplier

    async def get_driver_by_user(self, user_id: uuid.UUID) -> Driver:
        result = await self.db.execute(select(Driver).where(Driver.user_id == user_id))
        driver = result.scalar_one_or_none()
        if driver is None:
            raise ActorNotFoundException("Driver profile not found")
        return driver

    async def get_driver(self, driver_id: uuid.UUID) -> Driver:
        result = await self.db.execute(select(Driver).where(Driver.id == driver_id))
        driver = result.scalar_one_or_none()
        if driver is None:
            raise ActorNotFoundException(f"Driver {driver_id} not found")
        return driver

    async def get_vehicle(self, vehicle_id: uuid.UUID) -> Vehicle:
        result = await self.db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
        vehicle = result.scalar_one_or_none()
        if vehicle is None:
            raise ActorNotFoundException(f"Vehicle {vehicle_id} not found")
        return vehicle

    # ------------------------------------------------------------------
    # Status evaluation
    # ------------------------------------------------------------------

    async def _load_documents(
        self, *owners: tuple[OwnerType, list[uuid.UUID]]
    ) -> list[Document]:
        clauses = [
            and_(Document.owner_type == owner_type, Document.owner_id.in_(owner_ids))
            for owner_type, owner_ids in owners
            if owner_ids
        ]
        if not clauses:
            return []
        result = await self.db.execute(
            select(Document).where(or_(*clauses)).order_by(Document.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_supplier_status(self, supplier: Supplier) -> ComplianceStatus:
        documents = await self._load_documents((OwnerType.SUPPLIER, [supplier.id]))
        return self.evaluator.evaluate_actor(
            OwnerType.SUPPLIER.value,
            [document_record(d) for d in documents],
            actor_flags(supplier),
        )

    async def get_driver_status(self, driver: Driver) -> ComplianceStatus:
        """Driver status. Documents of the driver's vehicles count towards the checklist."""
        vehicle_result = await self.db.execute(
            select(Vehicle.id).where(Vehicle.driver_id == driver.id)
        )
        vehicle_ids = list(vehicle_result.scalars().all())
        documents = await self._load_documents(
            (OwnerType.DRIVER, [driver.id]),
            (OwnerType.VEHICLE, vehicle_ids),
        )
        return self.evaluator.evaluate_actor(
            OwnerType.DRIVER.value,
            [document_record(d) for d in documents],
            actor_flags(driver),
            conditions=driver_conditions(driver),
        )

    async def get_vehicle_status(self, vehicle: Vehicle) -> ComplianceStatus:
        documents = await self._load_documents((OwnerType.VEHICLE, [vehicle.id]))
        return self.evaluator.evaluate_actor(
            OwnerType.VEHICLE.value,
            [document_record(d) for d in documents],
            vehicle_flags(vehicle),
            conditions=vehicle_conditions(vehicle),
        )

    @staticmethod
    def require_platform_access(status: ComplianceStatus) -> None:
        if status.can_access_platform:
            return
        logger.info("Platform access denied for %s: %s", status.role, status.overall_status.value)
        raise ComplianceRequiredException(
            "Your account must be approved before you can use this feature",
            details=[
                {
                    "overallStatus": status.overall_status.value,
                    "missing": status.checklist.missing,
                    "rejectionReason": status.rejection_reason,
                }
            ],
        )
