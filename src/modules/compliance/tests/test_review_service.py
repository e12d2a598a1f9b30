"""Unit tests for DocumentService and ComplianceReviewService."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.exceptions import ActorNotFoundException, BusinessRuleException, NotFoundException
from src.models.compliance_review_log import ComplianceReviewLog
from src.models.document import Document
from src.models.enums import (
    AccountStatus,
    DocumentType,
    OwnerType,
    ReviewAction,
    VerificationStatus,
)
from src.models.vehicle import Vehicle
from src.modules.compliance.document_service import DocumentService
from src.modules.compliance.review_service import ComplianceReviewService


def _result(scalar=None, scalars=None):
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalars.return_value.all.return_value = scalars or []
    return result


def _make_db(*results):
    db = AsyncMock()
    db.add = MagicMock()
    db.flush = AsyncMock()
    db.execute.side_effect = list(results)
    return db


def _make_actor(
    status: AccountStatus = AccountStatus.PENDING_COMPLIANCE,
    compliance_status: str = "pending",
):
    actor = MagicMock()
    actor.id = uuid.uuid4()
    actor.status = status
    actor.compliance_status = compliance_status
    actor.compliance_rejection_reason = None
    actor.compliance_reviewer_id = None
    actor.compliance_review_date = None
    return actor


def _added_log(db) -> ComplianceReviewLog:
    logs = [c.args[0] for c in db.add.call_args_list if isinstance(c.args[0], ComplianceReviewLog)]
    assert len(logs) == 1
    return logs[0]


# ---------------------------------------------------------------------------
# DocumentService
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_add_document_is_pending():
    db = _make_db()
    owner_id = uuid.uuid4()

    document = await DocumentService(db).add_document(
        owner_type=OwnerType.DRIVER,
        owner_id=owner_id,
        doc_type=DocumentType.DRIVERS_LICENSE,
        title="Driver's licence",
        file_path="documents/driver/licence.pdf",
    )

    assert isinstance(document, Document)
    assert document.verification_status == "pending"
    assert document.doc_type == "drivers_license"
    db.add.assert_called_once_with(document)


@pytest.mark.asyncio
async def test_review_document_verified():
    document = MagicMock()
    document.verification_status = "pending"
    reviewer_id = uuid.uuid4()
    db = _make_db(_result(document))

    reviewed = await DocumentService(db).review_document(
        uuid.uuid4(), VerificationStatus.VERIFIED, reviewer_id, notes="Looks good"
    )

    assert reviewed.verification_status == "verified"
    assert reviewed.verified_by == reviewer_id
    assert reviewed.verified_at is not None
    assert reviewed.notes == "Looks good"


@pytest.mark.asyncio
async def test_review_document_cannot_reset_to_pending():
    db = _make_db()

    with pytest.raises(BusinessRuleException):
        await DocumentService(db).review_document(
            uuid.uuid4(), VerificationStatus.PENDING, uuid.uuid4()
        )
    db.execute.assert_not_called()


@pytest.mark.asyncio
async def test_review_missing_document():
    db = _make_db(_result(None))

    with pytest.raises(NotFoundException):
        await DocumentService(db).review_document(
            uuid.uuid4(), VerificationStatus.REJECTED, uuid.uuid4()
        )


@pytest.mark.asyncio
async def test_find_expiring_documents():
    expiring = [MagicMock(), MagicMock()]
    db = _make_db(_result(scalars=expiring))

    found = await DocumentService(db).find_expiring_documents(
        30, now=datetime(2026, 3, 1, tzinfo=UTC)
    )

    assert found == expiring
    assert db.execute.call_count == 1


# ---------------------------------------------------------------------------
# ComplianceReviewService
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_approve_pending_supplier():
    supplier = _make_actor()
    reviewer_id = uuid.uuid4()
    db = _make_db(_result(supplier))

    actor = await ComplianceReviewService(db).review_actor(
        OwnerType.SUPPLIER, supplier.id, ReviewAction.APPROVE, reviewer_id
    )

    assert actor.compliance_status == "approved"
    assert actor.status == AccountStatus.ACTIVE
    assert actor.compliance_reviewer_id == reviewer_id
    assert actor.compliance_review_date is not None

    log = _added_log(db)
    assert log.action == ReviewAction.APPROVE
    assert (log.from_status, log.to_status) == ("pending", "approved")


@pytest.mark.asyncio
async def test_reject_driver_records_reason():
    driver = _make_actor()
    db = _make_db(_result(driver))

    actor = await ComplianceReviewService(db).review_actor(
        OwnerType.DRIVER, driver.id, ReviewAction.REJECT, uuid.uuid4(), notes="PrDP expired"
    )

    assert actor.compliance_status == "rejected"
    assert actor.status == AccountStatus.REJECTED
    assert actor.compliance_rejection_reason == "PrDP expired"


@pytest.mark.asyncio
async def test_suspend_approved_supplier():
    supplier = _make_actor(AccountStatus.ACTIVE, "approved")
    db = _make_db(_result(supplier))

    actor = await ComplianceReviewService(db).review_actor(
        OwnerType.SUPPLIER, supplier.id, ReviewAction.SUSPEND, uuid.uuid4()
    )

    assert actor.compliance_status == "suspended"
    assert actor.status == AccountStatus.SUSPENDED


@pytest.mark.asyncio
async def test_re_review_rejected_driver():
    driver = _make_actor(AccountStatus.REJECTED, "rejected")
    db = _make_db(_result(driver))

    actor = await ComplianceReviewService(db).review_actor(
        OwnerType.DRIVER, driver.id, ReviewAction.RE_REVIEW, uuid.uuid4()
    )

    assert actor.compliance_status == "pending"
    assert actor.status == AccountStatus.PENDING_COMPLIANCE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "compliance_status, action",
    [
        ("approved", ReviewAction.APPROVE),
        ("approved", ReviewAction.REJECT),
        ("pending", ReviewAction.SUSPEND),
        ("rejected", ReviewAction.APPROVE),
        ("suspended", ReviewAction.APPROVE),
    ],
)
async def test_invalid_transitions(compliance_status, action):
    supplier = _make_actor(compliance_status=compliance_status)
    db = _make_db(_result(supplier))

    with pytest.raises(BusinessRuleException, match="Cannot transition"):
        await ComplianceReviewService(db).review_actor(
            OwnerType.SUPPLIER, supplier.id, action, uuid.uuid4()
        )
    db.add.assert_not_called()


@pytest.mark.asyncio
async def test_review_unknown_actor():
    db = _make_db(_result(None))

    with pytest.raises(ActorNotFoundException):
        await ComplianceReviewService(db).review_actor(
            OwnerType.DRIVER, uuid.uuid4(), ReviewAction.APPROVE, uuid.uuid4()
        )


@pytest.mark.asyncio
async def test_customers_are_not_reviewed():
    db = _make_db()

    with pytest.raises(BusinessRuleException, match="not reviewed"):
        await ComplianceReviewService(db).review_actor(
            OwnerType.CUSTOMER, uuid.uuid4(), ReviewAction.APPROVE, uuid.uuid4()
        )


@pytest.mark.asyncio
async def test_approve_vehicle_activates_it():
    vehicle = MagicMock(spec=Vehicle)
    vehicle.id = uuid.uuid4()
    vehicle.vehicle_status = AccountStatus.PENDING_COMPLIANCE
    db = _make_db(_result(vehicle))

    actor = await ComplianceReviewService(db).review_actor(
        OwnerType.VEHICLE, vehicle.id, ReviewAction.APPROVE, uuid.uuid4()
    )

    assert actor.vehicle_status == AccountStatus.ACTIVE
    assert _added_log(db).actor_type == OwnerType.VEHICLE


@pytest.mark.asyncio
async def test_get_pending_reviews():
    drivers = [_make_actor()]
    suppliers = [_make_actor(), _make_actor()]
    db = _make_db(_result(scalars=drivers), _result(scalars=suppliers))

    pending = await ComplianceReviewService(db).get_pending_reviews()

    assert pending == {"drivers": drivers, "suppliers": suppliers}
