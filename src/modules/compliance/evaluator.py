"""Compliance checklist evaluation.

Turns an actor's current documents plus the reviewer-controlled status
flags into an overall compliance status and a platform-access decision.
Pure computation: no I/O, inputs are never mutated.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.models.enums import (
    AccountStatus,
    ComplianceReviewStatus,
    OverallComplianceStatus,
    VerificationStatus,
)
from src.modules.compliance.constants import (
    DEFAULT_COMPLIANCE_RULES,
    ComplianceRules,
    DocumentRequirement,
)

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    return value


class DocumentRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str | None = None
    owner_id: str | None = Field(None, validation_alias=AliasChoices("owner_id", "ownerId"))
    owner_type: str | None = Field(None, validation_alias=AliasChoices("owner_type", "ownerType"))
    doc_type: str = Field(validation_alias=AliasChoices("doc_type", "docType"))
    verification_status: str = Field(
        VerificationStatus.PENDING.value,
        validation_alias=AliasChoices("verification_status", "verificationStatus", "status"),
    )
    expiry_date: datetime | date | None = Field(
        None, validation_alias=AliasChoices("expiry_date", "expiryDate")
    )
    uploaded_at: datetime | None = Field(
        None, validation_alias=AliasChoices("uploaded_at", "uploadedAt", "created_at")
    )

    @field_validator("id", "owner_id", "owner_type", "doc_type", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        value = _plain(value)
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("verification_status", mode="before")
    @classmethod
    def _status_text(cls, value: Any) -> str:
        value = _plain(value)
        return VerificationStatus.PENDING.value if value is None else str(value)


class ActorStatusFlags(BaseModel):
    """Reviewer-controlled status fields of a driver, supplier or vehicle."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    status: str = AccountStatus.PENDING_COMPLIANCE.value
    compliance_status: str = Field(
        ComplianceReviewStatus.PENDING.value,
        validation_alias=AliasChoices("compliance_status", "complianceStatus"),
    )
    rejection_reason: str | None = Field(
        None,
        validation_alias=AliasChoices(
            "rejection_reason", "rejectionReason", "compliance_rejection_reason"
        ),
    )
    reviewer_id: str | None = Field(
        None,
        validation_alias=AliasChoices("reviewer_id", "reviewerId", "compliance_reviewer_id"),
    )
    review_date: datetime | None = Field(
        None,
        validation_alias=AliasChoices("review_date", "reviewDate", "compliance_review_date"),
    )

    @field_validator("status", "compliance_status", "reviewer_id", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        value = _plain(value)
        if value is None or isinstance(value, str):
            return value
        return str(value)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ComplianceChecklist(_CamelModel):
    required: list[str] = Field(default_factory=list)
    optional: list[str] = Field(default_factory=list)
    uploaded: list[str] = Field(default_factory=list)
    approved: list[str] = Field(default_factory=list)
    rejected: list[str] = Field(default_factory=list)
    pending: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)


class ComplianceStatus(_CamelModel):
    role: str
    overall_status: OverallComplianceStatus
    can_access_platform: bool
    checklist: ComplianceChecklist
    rejection_reason: str | None = None
    reviewer_id: str | None = None
    review_date: datetime | None = None


DocumentInput = Union[DocumentRecord, Mapping[str, Any]]
RequirementInput = Union[DocumentRequirement, str]


def _to_document(raw: DocumentInput) -> DocumentRecord:
    if isinstance(raw, DocumentRecord):
        return raw
    return DocumentRecord.model_validate(raw)


def _to_requirement(raw: RequirementInput) -> DocumentRequirement:
    if isinstance(raw, DocumentRequirement):
        return raw
    return DocumentRequirement(str(_plain(raw)))


def current_documents(documents: Iterable[DocumentInput]) -> list[DocumentRecord]:
    """Keep the most recent upload of each document type per owner.

    Records are grouped by ``(owner_type, owner_id, doc_type)``, so two
    vehicles of one driver each keep their own certificate. Within a group a
    later record replaces an earlier one unless both carry an upload time
    and the later one is older. Result order follows each group's first
    appearance.
    """
    latest: dict[tuple[str | None, str | None, str], DocumentRecord] = {}
    for record in map(_to_document, documents):
        key = (record.owner_type, record.owner_id, record.doc_type)
        held = latest.get(key)
        if (
            held is not None
            and held.uploaded_at is not None
            and record.uploaded_at is not None
            and record.uploaded_at < held.uploaded_at
        ):
            continue
        latest[key] = record
    return list(latest.values())


def _bucket(verification_status: str) -> str:
    if verification_status == VerificationStatus.VERIFIED.value:
        return "approved"
    if verification_status == VerificationStatus.REJECTED.value:
        return "rejected"
    # pending and anything unrecognised
    return "pending"


def build_checklist(
    required_doc_types: Iterable[RequirementInput],
    documents: Iterable[DocumentInput],
) -> ComplianceChecklist:
    requirements = [_to_requirement(r) for r in required_doc_types]
    current = current_documents(documents)

    # a type held by several owners (two vehicles) is listed once per bucket it reaches
    buckets: dict[str, dict[str, None]] = {"approved": {}, "rejected": {}, "pending": {}}
    for record in current:
        buckets[_bucket(record.verification_status)][record.doc_type] = None

    uploaded = list(dict.fromkeys(record.doc_type for record in current))
    uploaded_types = set(uploaded)
    missing = [
        req.doc_type for req in requirements if not (req.accepted_types & uploaded_types)
    ]

    return ComplianceChecklist(
        required=[req.doc_type for req in requirements],
        optional=[],
        uploaded=uploaded,
        approved=list(buckets["approved"]),
        rejected=list(buckets["rejected"]),
        pending=list(buckets["pending"]),
        missing=missing,
    )


def evaluate(
    role: str,
    required_doc_types: Iterable[RequirementInput],
    documents: Iterable[DocumentInput],
    actor_status_flags: ActorStatusFlags | Mapping[str, Any],
) -> ComplianceStatus:
    """Compute the overall compliance status of one actor.

    Decision order, first match wins:

    1. actor approved and active -> ``approved`` with platform access. The
       checklist is not consulted, so documents going missing or stale
       after approval do not revoke access; that takes a suspension.
    2. actor or compliance status rejected -> ``rejected``.
    3. any required document missing, or any document pending -> ``incomplete``.
    4. otherwise -> ``pending`` (waiting for a reviewer to approve the actor).
    """
    flags = (
        actor_status_flags
        if isinstance(actor_status_flags, ActorStatusFlags)
        else ActorStatusFlags.model_validate(actor_status_flags)
    )
    checklist = build_checklist(required_doc_types, documents)

    if (
        flags.compliance_status == ComplianceReviewStatus.APPROVED.value
        and flags.status == AccountStatus.ACTIVE.value
    ):
        overall = OverallComplianceStatus.APPROVED
    elif (
        flags.compliance_status == ComplianceReviewStatus.REJECTED.value
        or flags.status == AccountStatus.REJECTED.value
    ):
        overall = OverallComplianceStatus.REJECTED
    elif checklist.missing or checklist.pending:
        overall = OverallComplianceStatus.INCOMPLETE
    else:
        overall = OverallComplianceStatus.PENDING

    logger.debug(
        "Compliance for %s: %s (missing=%d, pending=%d)",
        role,
        overall.value,
        len(checklist.missing),
        len(checklist.pending),
    )

    return ComplianceStatus(
        role=str(_plain(role)),
        overall_status=overall,
        can_access_platform=overall is OverallComplianceStatus.APPROVED,
        checklist=checklist,
        rejection_reason=flags.rejection_reason,
        reviewer_id=flags.reviewer_id,
        review_date=flags.review_date,
    )


class ComplianceEvaluator:
    """Evaluates actors against an injected, immutable rules table."""

    def __init__(self, rules: ComplianceRules = DEFAULT_COMPLIANCE_RULES) -> None:
        self.rules = rules

    def required_for(
        self, role: str, conditions: Iterable[str] = ()
    ) -> tuple[DocumentRequirement, ...]:
        return self.rules.for_role(role, frozenset(conditions))

    def evaluate_actor(
        self,
        role: str,
        documents: Iterable[DocumentInput],
        actor_status_flags: ActorStatusFlags | Mapping[str, Any],
        conditions: Iterable[str] = (),
    ) -> ComplianceStatus:
        return evaluate(
            role,
            self.required_for(role, conditions),
            documents,
            actor_status_flags,
        )
