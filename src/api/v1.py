"""Centralized v1 API router: all module routers are included here."""

from fastapi import APIRouter

from src.modules.compliance.router import admin_router as compliance_admin_router
from src.modules.compliance.router import router as compliance_router
from src.modules.pricing.router import router as pricing_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(pricing_router)
v1_router.include_router(compliance_router)
v1_router.include_router(compliance_admin_router)
