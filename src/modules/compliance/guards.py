"""FastAPI dependencies that resolve the caller's actor and enforce compliance."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.session import get_db
from src.exceptions import ForbiddenException
from src.models.driver import Driver
from src.models.enums import UserRole
from src.models.supplier import Supplier
from src.modules.auth import AuthenticatedUser, get_current_user
from src.modules.compliance.service import ComplianceService


async def get_current_supplier(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Supplier:
    if user.role != UserRole.SUPPLIER:
        raise ForbiddenException("This action requires a supplier account")
    return await ComplianceService(db).get_supplier_by_owner(user.id)


async def get_current_driver(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Driver:
    if user.role != UserRole.DRIVER:
        raise ForbiddenException("This action requires a driver account")
    return await ComplianceService(db).get_driver_by_user(user.id)


async def require_supplier_access(
    supplier: Supplier = Depends(get_current_supplier),
    db: AsyncSession = Depends(get_db),
) -> Supplier:
    """Supplier of the caller, provided compliance has been approved."""
    svc = ComplianceService(db)
    svc.require_platform_access(await svc.get_supplier_status(supplier))
    return supplier


async def require_driver_access(
    driver: Driver = Depends(get_current_driver),
    db: AsyncSession = Depends(get_db),
) -> Driver:
    """Driver of the caller, provided compliance has been approved."""
    svc = ComplianceService(db)
    svc.require_platform_access(await svc.get_driver_status(driver))
    return driver
