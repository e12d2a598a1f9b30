"""Depots, tiered fuel pricing, compliance actors and documents

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ACCOUNT_STATUS_VALUES = "'pending_compliance', 'active', 'suspended', 'rejected'"


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto;")

    # ── 1. Enum types ─────────────────────────────────────────────────────
    for type_name in ("supplier_status", "driver_status", "vehicle_status"):
        op.execute(f"CREATE TYPE {type_name} AS ENUM ({_ACCOUNT_STATUS_VALUES});")
    op.execute("""
        CREATE TYPE owner_type AS ENUM ('driver', 'vehicle', 'supplier', 'customer');
    """)
    op.execute("""
        CREATE TYPE review_action AS ENUM ('APPROVE', 'REJECT', 'SUSPEND', 'RE_REVIEW');
    """)

    # ── 2. Fuel types ─────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE fuel_types (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            code VARCHAR(50) NOT NULL UNIQUE,
            label VARCHAR(100) NOT NULL,
            active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)

    # ── 3. Suppliers and depots ───────────────────────────────────────────
    op.execute("""
        CREATE TABLE suppliers (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            owner_id UUID NOT NULL UNIQUE,
            name VARCHAR(255) NOT NULL,
            registered_name VARCHAR(255),
            registration_number VARCHAR(50),
            vat_number VARCHAR(50),
            status supplier_status NOT NULL DEFAULT 'pending_compliance',
            compliance_status VARCHAR(32) NOT NULL DEFAULT 'pending',
            compliance_reviewer_id UUID,
            compliance_review_date TIMESTAMPTZ,
            compliance_rejection_reason VARCHAR(500),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute(
        "CREATE INDEX ix_suppliers_compliance_status ON suppliers (compliance_status);"
    )

    op.execute("""
        CREATE TABLE depots (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            supplier_id UUID NOT NULL REFERENCES suppliers(id) ON DELETE CASCADE,
            name VARCHAR(255) NOT NULL,
            lat NUMERIC(9, 6),
            lng NUMERIC(9, 6),
            open_hours VARCHAR(255),
            notes TEXT,
            is_active BOOLEAN NOT NULL DEFAULT true,
            address_street VARCHAR(255),
            address_city VARCHAR(100),
            address_province VARCHAR(100),
            address_postal_code VARCHAR(10),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX ix_depots_supplier_id ON depots (supplier_id);")

    # ── 4. Depot pricing tiers ────────────────────────────────────────────
    op.execute("""
        CREATE TABLE depot_prices (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            depot_id UUID NOT NULL REFERENCES depots(id) ON DELETE CASCADE,
            fuel_type_id UUID NOT NULL REFERENCES fuel_types(id),
            price_per_litre NUMERIC(12, 2) NOT NULL CHECK (price_per_litre > 0),
            min_litres NUMERIC(12, 2) NOT NULL DEFAULT 0 CHECK (min_litres >= 0),
            available_litres NUMERIC(12, 2),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_depot_prices_depot_fuel_min_litres
                UNIQUE (depot_id, fuel_type_id, min_litres)
        );
    """)
    op.execute("""
        CREATE INDEX ix_depot_prices_depot_fuel_min_litres
            ON depot_prices (depot_id, fuel_type_id, min_litres);
    """)

    # ── 5. Drivers and vehicles ───────────────────────────────────────────
    op.execute("""
        CREATE TABLE drivers (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL UNIQUE,
            status driver_status NOT NULL DEFAULT 'pending_compliance',
            prdp_required BOOLEAN NOT NULL DEFAULT false,
            dg_training_required BOOLEAN NOT NULL DEFAULT false,
            compliance_status VARCHAR(32) NOT NULL DEFAULT 'pending',
            compliance_reviewer_id UUID,
            compliance_review_date TIMESTAMPTZ,
            compliance_rejection_reason VARCHAR(500),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX ix_drivers_compliance_status ON drivers (compliance_status);")

    op.execute("""
        CREATE TABLE vehicles (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            driver_id UUID NOT NULL REFERENCES drivers(id) ON DELETE CASCADE,
            registration_number VARCHAR(20) NOT NULL,
            make VARCHAR(100),
            model VARCHAR(100),
            capacity_litres INTEGER,
            vehicle_status vehicle_status NOT NULL DEFAULT 'pending_compliance',
            dg_vehicle_permit_required BOOLEAN NOT NULL DEFAULT false,
            loa_required BOOLEAN NOT NULL DEFAULT false,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX ix_vehicles_driver_id ON vehicles (driver_id);")

    # ── 6. Compliance documents and review log ────────────────────────────
    op.execute("""
        CREATE TABLE documents (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            owner_type owner_type NOT NULL,
            owner_id UUID NOT NULL,
            doc_type VARCHAR(64) NOT NULL,
            title VARCHAR(255) NOT NULL,
            file_path VARCHAR(512) NOT NULL,
            file_size INTEGER,
            mime_type VARCHAR(100),
            uploaded_by UUID,
            verification_status VARCHAR(32) NOT NULL DEFAULT 'pending',
            verified_by UUID,
            verified_at TIMESTAMPTZ,
            expiry_date TIMESTAMPTZ,
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX ix_documents_owner ON documents (owner_type, owner_id);")
    op.execute(
        "CREATE INDEX ix_documents_verification_status ON documents (verification_status);"
    )

    op.execute("""
        CREATE TABLE compliance_review_logs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            actor_type owner_type NOT NULL,
            actor_id UUID NOT NULL,
            reviewer_id UUID,
            action review_action NOT NULL,
            from_status VARCHAR(32) NOT NULL,
            to_status VARCHAR(32) NOT NULL,
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute("""
        CREATE INDEX ix_compliance_review_logs_actor
            ON compliance_review_logs (actor_type, actor_id);
    """)
    op.execute(
        "CREATE INDEX ix_compliance_review_logs_action ON compliance_review_logs (action);"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS compliance_review_logs;")
    op.execute("DROP TABLE IF EXISTS documents;")
    op.execute("DROP TABLE IF EXISTS vehicles;")
    op.execute("DROP TABLE IF EXISTS drivers;")
    op.execute("DROP TABLE IF EXISTS depot_prices;")
    op.execute("DROP TABLE IF EXISTS depots;")
    op.execute("DROP TABLE IF EXISTS suppliers;")
    op.execute("DROP TABLE IF EXISTS fuel_types;")

    op.execute("DROP TYPE IF EXISTS review_action;")
    op.execute("DROP TYPE IF EXISTS owner_type;")
    op.execute("DROP TYPE IF EXISTS vehicle_status;")
    op.execute("DROP TYPE IF EXISTS driver_status;")
    op.execute("DROP TYPE IF EXISTS supplier_status;")
