"""Required compliance documents per actor role and valid review transitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from src.models.enums import ComplianceReviewStatus, DocumentType, OwnerType, ReviewAction

# Conditions a caller may switch on when resolving requirements
CONDITION_TRANSPORTS_FUEL = "transports_fuel"
CONDITION_NOT_REGISTERED_OWNER = "not_registered_owner"


@dataclass(frozen=True)
class DocumentRequirement:
    """One checklist line.

    Satisfied by an upload of ``doc_type`` or of any of ``alternatives``.
    When ``condition`` is set the line only applies if the caller passes
    that condition.
    """

    doc_type: str
    alternatives: tuple[str, ...] = ()
    condition: str | None = None

    @property
    def accepted_types(self) -> frozenset[str]:
        return frozenset((self.doc_type, *self.alternatives))


@dataclass(frozen=True)
class ComplianceRules:
    """Immutable role -> required documents table."""

    requirements: Mapping[str, tuple[DocumentRequirement, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def for_role(
        self, role: str, conditions: frozenset[str] | set[str] = frozenset()
    ) -> tuple[DocumentRequirement, ...]:
        return tuple(
            req
            for req in self.requirements.get(_role_key(role), ())
            if req.condition is None or req.condition in conditions
        )


def _role_key(role: str | OwnerType) -> str:
    return role.value if isinstance(role, OwnerType) else str(role)


DRIVER_REQUIREMENTS: tuple[DocumentRequirement, ...] = (
    DocumentRequirement(DocumentType.ZA_ID.value, alternatives=(DocumentType.PASSPORT.value,)),
    DocumentRequirement(DocumentType.PROOF_OF_ADDRESS.value),
    DocumentRequirement(DocumentType.DRIVERS_LICENSE.value),
    DocumentRequirement(DocumentType.PRDP.value, condition=CONDITION_TRANSPORTS_FUEL),
    DocumentRequirement(
        DocumentType.DANGEROUS_GOODS_TRAINING.value, condition=CONDITION_TRANSPORTS_FUEL
    ),
    DocumentRequirement(DocumentType.MEDICAL_FITNESS.value, condition=CONDITION_TRANSPORTS_FUEL),
    DocumentRequirement(DocumentType.CRIMINAL_CHECK.value),
    DocumentRequirement(DocumentType.BANKING_PROOF.value),
)

SUPPLIER_REQUIREMENTS: tuple[DocumentRequirement, ...] = tuple(
    DocumentRequirement(doc_type.value)
    for doc_type in (
        DocumentType.CIPC_CERTIFICATE,
        DocumentType.VAT_CERTIFICATE,
        DocumentType.TAX_CLEARANCE,
        DocumentType.DMRE_LICENSE,
        DocumentType.SITE_LICENSE,
        DocumentType.ENVIRONMENTAL_AUTHORISATION,
        DocumentType.FIRE_CERTIFICATE,
        DocumentType.SABS_CERTIFICATE,
        DocumentType.CALIBRATION_CERTIFICATE,
        DocumentType.PUBLIC_LIABILITY_INSURANCE,
    )
)

VEHICLE_REQUIREMENTS: tuple[DocumentRequirement, ...] = (
    DocumentRequirement(DocumentType.VEHICLE_REGISTRATION.value),
    DocumentRequirement(DocumentType.ROADWORTHY_CERTIFICATE.value),
    DocumentRequirement(DocumentType.INSURANCE_CERTIFICATE.value),
    DocumentRequirement(DocumentType.DG_VEHICLE_PERMIT.value, condition=CONDITION_TRANSPORTS_FUEL),
    DocumentRequirement(
        DocumentType.LETTER_OF_AUTHORITY.value, condition=CONDITION_NOT_REGISTERED_OWNER
    ),
)

DEFAULT_COMPLIANCE_RULES = ComplianceRules(
    requirements=MappingProxyType(
        {
            OwnerType.DRIVER.value: DRIVER_REQUIREMENTS,
            OwnerType.SUPPLIER.value: SUPPLIER_REQUIREMENTS,
            OwnerType.VEHICLE.value: VEHICLE_REQUIREMENTS,
            OwnerType.CUSTOMER.value: (),
        }
    )
)

# Actor-level compliance transitions: current -> {allowed next}
VALID_COMPLIANCE_TRANSITIONS: dict[ComplianceReviewStatus, set[ComplianceReviewStatus]] = {
    ComplianceReviewStatus.PENDING: {
        ComplianceReviewStatus.APPROVED,
        ComplianceReviewStatus.REJECTED,
    },
    ComplianceReviewStatus.APPROVED: {
        ComplianceReviewStatus.SUSPENDED,
    },
    ComplianceReviewStatus.REJECTED: {
        ComplianceReviewStatus.PENDING,
    },
    ComplianceReviewStatus.SUSPENDED: {
        ComplianceReviewStatus.PENDING,
    },
}

# Review action -> target compliance status
REVIEW_ACTION_TARGETS: dict[ReviewAction, ComplianceReviewStatus] = {
    ReviewAction.APPROVE: ComplianceReviewStatus.APPROVED,
    ReviewAction.REJECT: ComplianceReviewStatus.REJECTED,
    ReviewAction.SUSPEND: ComplianceReviewStatus.SUSPENDED,
    ReviewAction.RE_REVIEW: ComplianceReviewStatus.PENDING,
}
