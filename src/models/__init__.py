# Import all models so SQLAlchemy metadata is populated for Alembic autogenerate
from src.models.compliance_review_log import ComplianceReviewLog
from src.models.depot import Depot
from src.models.depot_price import DepotPrice
from src.models.document import Document
from src.models.driver import Driver
from src.models.enums import (
    AccountStatus,
    ComplianceReviewStatus,
    DocumentType,
    OverallComplianceStatus,
    OwnerType,
    ReviewAction,
    UserRole,
    VerificationStatus,
)
from src.models.fuel_type import FuelType
from src.models.supplier import Supplier
from src.models.vehicle import Vehicle

__all__ = [
    "AccountStatus",
    "ComplianceReviewLog",
    "ComplianceReviewStatus",
    "Depot",
    "DepotPrice",
    "Document",
    "DocumentType",
    "Driver",
    "FuelType",
    "OverallComplianceStatus",
    "OwnerType",
    "ReviewAction",
    "Supplier",
    "UserRole",
    "Vehicle",
    "VerificationStatus",
]
