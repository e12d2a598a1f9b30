import enum


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    DRIVER = "driver"
    SUPPLIER = "supplier"
    ADMIN = "admin"


class OwnerType(str, enum.Enum):
    """Kind of actor a document belongs to."""

    DRIVER = "driver"
    VEHICLE = "vehicle"
    SUPPLIER = "supplier"
    CUSTOMER = "customer"


class AccountStatus(str, enum.Enum):
    PENDING_COMPLIANCE = "pending_compliance"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    REJECTED = "rejected"


class ComplianceReviewStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class OverallComplianceStatus(str, enum.Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    PENDING = "pending"
    INCOMPLETE = "incomplete"


class ReviewAction(str, enum.Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    SUSPEND = "SUSPEND"
    RE_REVIEW = "RE_REVIEW"


class DocumentType(str, enum.Enum):
    # Identity and driver
    ZA_ID = "za_id"
    PASSPORT = "passport"
    PROOF_OF_ADDRESS = "proof_of_address"
    DRIVERS_LICENSE = "drivers_license"
    PRDP = "prdp"
    DANGEROUS_GOODS_TRAINING = "dangerous_goods_training"
    MEDICAL_FITNESS = "medical_fitness"
    CRIMINAL_CHECK = "criminal_check"
    BANKING_PROOF = "banking_proof"
    # Vehicle
    VEHICLE_REGISTRATION = "vehicle_registration"
    ROADWORTHY_CERTIFICATE = "roadworthy_certificate"
    INSURANCE_CERTIFICATE = "insurance_certificate"
    DG_VEHICLE_PERMIT = "dg_vehicle_permit"
    LETTER_OF_AUTHORITY = "letter_of_authority"
    # Supplier
    CIPC_CERTIFICATE = "cipc_certificate"
    VAT_CERTIFICATE = "vat_certificate"
    TAX_CLEARANCE = "tax_clearance"
    DMRE_LICENSE = "dmre_license"
    SITE_LICENSE = "site_license"
    ENVIRONMENTAL_AUTHORISATION = "environmental_authorisation"
    FIRE_CERTIFICATE = "fire_certificate"
    SABS_CERTIFICATE = "sabs_certificate"
    CALIBRATION_CERTIFICATE = "calibration_certificate"
    PUBLIC_LIABILITY_INSURANCE = "public_liability_insurance"
    # Other
    BBBEE_CERTIFICATE = "bbbee_certificate"
    MSDS = "msds"
    OTHER = "other"
