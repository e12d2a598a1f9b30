"""Compliance API routers: self-service status and uploads, plus admin review."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.database.session import get_db
from src.exceptions import ForbiddenException
from src.models.enums import OwnerType, UserRole
from src.models.vehicle import Vehicle
from src.modules.auth import AuthenticatedUser, get_current_user, require_platform_admin
from src.modules.compliance.constants import (
    CONDITION_NOT_REGISTERED_OWNER,
    CONDITION_TRANSPORTS_FUEL,
)
from src.modules.compliance.document_service import DocumentService
from src.modules.compliance.evaluator import ComplianceEvaluator, ComplianceStatus
from src.modules.compliance.review_service import ComplianceReviewService
from src.modules.compliance.schemas import (
    ActorReviewRequest,
    ActorReviewResponse,
    ActorSummaryResponse,
    DocumentCreate,
    DocumentResponse,
    DocumentReviewRequest,
    PendingReviewsResponse,
    RequirementResponse,
    ReviewLogResponse,
)
from src.modules.compliance.service import ComplianceService, vehicle_flags
from src.schemas.responses import ErrorResponse

router = APIRouter(
    prefix="/compliance",
    tags=["compliance"],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
admin_router = APIRouter(
    prefix="/admin/compliance",
    tags=["compliance-admin"],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _owned_vehicle(
    svc: ComplianceService, user: AuthenticatedUser, vehicle_id: uuid.UUID
) -> Vehicle:
    """Vehicle ``vehicle_id``, provided the caller drives it or is platform staff."""
    vehicle = await svc.get_vehicle(vehicle_id)
    if user.is_platform_admin:
        return vehicle
    driver = await svc.get_driver_by_user(user.id)
    if vehicle.driver_id != driver.id:
        raise ForbiddenException("This vehicle does not belong to you")
    return vehicle


async def _resolve_owner(
    svc: ComplianceService, user: AuthenticatedUser, vehicle_id: uuid.UUID | None
) -> tuple[OwnerType, uuid.UUID]:
    """Map the caller (or one of their vehicles) to a document owner."""
    if vehicle_id is not None:
        vehicle = await _owned_vehicle(svc, user, vehicle_id)
        return OwnerType.VEHICLE, vehicle.id
    if user.role == UserRole.SUPPLIER:
        supplier = await svc.get_supplier_by_owner(user.id)
        return OwnerType.SUPPLIER, supplier.id
    if user.role == UserRole.DRIVER:
        driver = await svc.get_driver_by_user(user.id)
        return OwnerType.DRIVER, driver.id
    if user.role == UserRole.CUSTOMER:
        return OwnerType.CUSTOMER, user.id
    raise ForbiddenException("Platform staff do not upload compliance documents")


# ---------------------------------------------------------------------------
# Self-service endpoints
# ---------------------------------------------------------------------------


@router.get("/supplier/status", response_model=ComplianceStatus)
async def get_supplier_compliance(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Compliance checklist and overall status of the caller's supplier account."""
    svc = ComplianceService(db)
    supplier = await svc.get_supplier_by_owner(user.id)
    return await svc.get_supplier_status(supplier)


@router.get("/driver/status", response_model=ComplianceStatus)
async def get_driver_compliance(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Compliance checklist and overall status of the caller's driver account."""
    svc = ComplianceService(db)
    driver = await svc.get_driver_by_user(user.id)
    return await svc.get_driver_status(driver)


@router.get("/vehicles/{vehicle_id}/status", response_model=ComplianceStatus)
async def get_vehicle_compliance(
    vehicle_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    svc = ComplianceService(db)
    vehicle = await _owned_vehicle(svc, user, vehicle_id)
    return await svc.get_vehicle_status(vehicle)


@router.post("/documents", response_model=DocumentResponse, status_code=201)
async def upload_document(
    body: DocumentCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Record an uploaded compliance document for the caller or one of their vehicles."""
    owner_type, owner_id = await _resolve_owner(ComplianceService(db), user, body.vehicle_id)
    document = await DocumentService(db).add_document(
        owner_type=owner_type,
        owner_id=owner_id,
        doc_type=body.doc_type,
        title=body.title,
        file_path=body.file_path,
        uploaded_by=user.id,
        file_size=body.file_size,
        mime_type=body.mime_type,
        expiry_date=body.expiry_date,
    )
    return DocumentResponse.model_validate(document)


@router.get("/documents", response_model=list[DocumentResponse])
async def list_my_documents(
    vehicle_id: uuid.UUID | None = Query(None),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    owner_type, owner_id = await _resolve_owner(ComplianceService(db), user, vehicle_id)
    documents = await DocumentService(db).list_documents(owner_type, owner_id)
    return [DocumentResponse.model_validate(d) for d in documents]


@router.get("/requirements/{role}", response_model=list[RequirementResponse])
async def get_required_documents(role: OwnerType):
    """Every document a role can be asked for, conditional ones included."""
    requirements = ComplianceEvaluator().required_for(
        role.value, {CONDITION_TRANSPORTS_FUEL, CONDITION_NOT_REGISTERED_OWNER}
    )
    return [
        RequirementResponse(
            doc_type=req.doc_type,
            alternatives=list(req.alternatives),
            condition=req.condition,
        )
        for req in requirements
    ]


# ---------------------------------------------------------------------------
# Admin endpoints
# ---------------------------------------------------------------------------


@admin_router.get("/pending", response_model=PendingReviewsResponse)
async def get_pending_reviews(
    admin: AuthenticatedUser = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
):
    """Drivers and suppliers awaiting a compliance decision."""
    pending = await ComplianceReviewService(db).get_pending_reviews()
    return PendingReviewsResponse(
        drivers=[ActorSummaryResponse.model_validate(d) for d in pending["drivers"]],
        suppliers=[ActorSummaryResponse.model_validate(s) for s in pending["suppliers"]],
    )


@admin_router.get("/documents/expiring", response_model=list[DocumentResponse])
async def get_expiring_documents(
    within_days: int = Query(settings.document_expiry_warning_days, ge=1, le=365),
    admin: AuthenticatedUser = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
):
    documents = await DocumentService(db).find_expiring_documents(within_days)
    return [DocumentResponse.model_validate(d) for d in documents]


@admin_router.patch("/documents/{document_id}", response_model=DocumentResponse)
async def review_document(
    document_id: uuid.UUID,
    body: DocumentReviewRequest,
    admin: AuthenticatedUser = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
):
    """Verify or reject a single document."""
    document = await DocumentService(db).review_document(
        document_id, body.status, reviewer_id=admin.id, notes=body.notes
    )
    return DocumentResponse.model_validate(document)


@admin_router.get("/{actor_type}/{actor_id}/status", response_model=ComplianceStatus)
async def get_actor_compliance(
    actor_type: OwnerType,
    actor_id: uuid.UUID,
    admin: AuthenticatedUser = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = ComplianceService(db)
    if actor_type == OwnerType.SUPPLIER:
        return await svc.get_supplier_status(await svc.get_supplier(actor_id))
    if actor_type == OwnerType.DRIVER:
        return await svc.get_driver_status(await svc.get_driver(actor_id))
    if actor_type == OwnerType.VEHICLE:
        return await svc.get_vehicle_status(await svc.get_vehicle(actor_id))
    raise ForbiddenException(f"Actors of type '{actor_type.value}' have no compliance status")


@admin_router.post("/{actor_type}/{actor_id}/review", response_model=ActorReviewResponse)
async def review_actor(
    actor_type: OwnerType,
    actor_id: uuid.UUID,
    body: ActorReviewRequest,
    admin: AuthenticatedUser = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
):
    """Approve, reject, suspend or send an actor back for re-review."""
    actor = await ComplianceReviewService(db).review_actor(
        actor_type, actor_id, body.action, reviewer_id=admin.id, notes=body.notes
    )
    if isinstance(actor, Vehicle):
        status = actor.vehicle_status
        compliance_status = vehicle_flags(actor).compliance_status
    else:
        status = actor.status
        compliance_status = actor.compliance_status
    return ActorReviewResponse(
        actor_type=actor_type,
        actor_id=actor.id,
        status=status,
        compliance_status=compliance_status,
    )


@admin_router.get("/{actor_type}/{actor_id}/history", response_model=list[ReviewLogResponse])
async def get_review_history(
    actor_type: OwnerType,
    actor_id: uuid.UUID,
    admin: AuthenticatedUser = Depends(require_platform_admin),
    db: AsyncSession = Depends(get_db),
):
    logs = await ComplianceReviewService(db).get_review_history(actor_type, actor_id)
    return [ReviewLogResponse.model_validate(log) for log in logs]
