"""init mpi schema

Revision ID: a1f3c2d4e5b6
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "a1f3c2d4e5b6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _active():
    return sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.sql.expression.true())


def _active_where(table: str) -> dict:
    return {
        "postgresql_where": sa.text(f"{table}.is_active IS true"),
        "sqlite_where": sa.text(f"{table}.is_active = 1"),
    }


def upgrade() -> None:
    # --- principals ---
    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("title", sa.String(length=50), nullable=True),
        _active(),
        *_timestamps(),
    )
    op.create_index(op.f("ix_admins_email"), "admins", ["email"], unique=True)

    op.create_table(
        "engineers",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("title", sa.String(length=50), nullable=False),
        _active(),
        *_timestamps(),
    )
    op.create_index(op.f("ix_engineers_email"), "engineers", ["email"], unique=True)
    op.create_index(op.f("ix_engineers_full_name"), "engineers", ["full_name"])
    op.create_index("ix_engineers_active", "engineers", ["is_active"])

    # --- reference data ---
    op.create_table(
        "customer_companies",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("company_name", sa.String(length=100), nullable=False),
        sa.Column("city", sa.String(length=50), nullable=False),
        sa.Column("state", sa.String(length=50), nullable=False),
        sa.Column("contact_person", sa.String(length=100), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("address", sa.String(length=200), nullable=True),
        _active(),
        *_timestamps(),
    )
    op.create_index(op.f("ix_customer_companies_city"), "customer_companies", ["city"])
    op.create_index(op.f("ix_customer_companies_state"), "customer_companies", ["state"])
    op.create_index(op.f("ix_customer_companies_is_active"), "customer_companies", ["is_active"])
    op.create_index(
        "uq_customer_companies_name",
        "customer_companies",
        [sa.text("lower(company_name)")],
        unique=True,
        **_active_where("customer_companies"),
    )

    op.create_table(
        "forms",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("form_id", sa.String(length=50), nullable=False),
        sa.Column("form_rev", sa.String(length=20), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=True),
        _active(),
        *_timestamps(),
    )
    op.create_index(op.f("ix_forms_form_id"), "forms", ["form_id"])
    op.create_index(op.f("ix_forms_is_active"), "forms", ["is_active"])
    op.create_index(
        "uq_forms_id_rev",
        "forms",
        [sa.text("lower(form_id)"), sa.text("lower(form_rev)")],
        unique=True,
        **_active_where("forms"),
    )

    op.create_table(
        "document_ids",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("doc_id", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=True),
        _active(),
        *_timestamps(),
    )
    op.create_index(op.f("ix_document_ids_is_active"), "document_ids", ["is_active"])
    op.create_index(
        "uq_document_ids_doc_id",
        "document_ids",
        [sa.text("lower(doc_id)")],
        unique=True,
        **_active_where("document_ids"),
    )

    op.create_table(
        "process_items",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("category_name", sa.String(length=100), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("created_by_model", sa.String(length=20), nullable=False),
        _active(),
        *_timestamps(),
        sa.CheckConstraint("usage_count >= 0", name="ck_process_items_usage"),
        sa.CheckConstraint("created_by_model IN ('Engineer', 'Admin')", name="ck_process_items_creator"),
    )
    op.create_index(op.f("ix_process_items_is_active"), "process_items", ["is_active"])
    op.create_index(
        "uq_process_items_category",
        "process_items",
        [sa.text("lower(category_name)")],
        unique=True,
        **_active_where("process_items"),
    )

    op.create_table(
        "process_steps",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("process_item_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("step_order", sa.Integer(), nullable=False, server_default="0"),
        _active(),
        *_timestamps(),
        sa.ForeignKeyConstraint(["process_item_id"], ["process_items.id"], ondelete="CASCADE"),
        sa.CheckConstraint("step_order >= 0", name="ck_process_steps_order"),
    )
    op.create_index(op.f("ix_process_steps_process_item_id"), "process_steps", ["process_item_id"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("step", sa.Text(), nullable=False),
        sa.Column("category_name", sa.String(length=100), nullable=False),
        sa.Column("process_item_id", sa.Integer(), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("created_by_model", sa.String(length=20), nullable=False),
        _active(),
        *_timestamps(),
        sa.ForeignKeyConstraint(["process_item_id"], ["process_items.id"]),
        sa.CheckConstraint("usage_count >= 0", name="ck_tasks_usage"),
    )
    op.create_index(op.f("ix_tasks_category_name"), "tasks", ["category_name"])
    op.create_index(op.f("ix_tasks_process_item_id"), "tasks", ["process_item_id"])
    op.create_index(op.f("ix_tasks_created_by"), "tasks", ["created_by"])
    op.create_index(op.f("ix_tasks_is_active"), "tasks", ["is_active"])
    op.create_index(
        "uq_tasks_category_step",
        "tasks",
        ["process_item_id", sa.text("lower(step)")],
        unique=True,
        **_active_where("tasks"),
    )

    # --- derived tracking records ---
    op.create_table(
        "docs",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("job_no", sa.String(), nullable=True),
        sa.Column("old_job_no", sa.String(), nullable=True),
        sa.Column("mpi_no", sa.String(), nullable=True),
        sa.Column("mpi_rev", sa.String(), nullable=True),
        sa.Column("process_item", sa.String(length=100), nullable=True),
        sa.Column("doc_id", sa.String(), nullable=True),
        sa.Column("form_id", sa.String(), nullable=True),
        sa.Column("form_rev", sa.String(), nullable=True),
        _active(),
        *_timestamps(),
    )
    for col in ("job_no", "old_job_no", "mpi_no", "doc_id", "form_id", "is_active"):
        op.create_index(op.f(f"ix_docs_{col}"), "docs", [col])

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("customer_company_id", sa.Integer(), nullable=True),
        sa.Column("customer_name", sa.String(length=100), nullable=False),
        sa.Column("assembly_name", sa.String(length=100), nullable=False),
        sa.Column("assembly_rev", sa.String(length=20), nullable=False),
        sa.Column("drawing_name", sa.String(length=100), nullable=False),
        sa.Column("drawing_rev", sa.String(length=20), nullable=False),
        sa.Column("assembly_quantity", sa.Integer(), nullable=False),
        sa.Column("kit_received_date", sa.Date(), nullable=True),
        sa.Column("kit_complete_date", sa.Date(), nullable=True),
        sa.Column("comments", sa.String(length=500), nullable=True),
        sa.Column("engineer_id", sa.Integer(), nullable=False),
        _active(),
        *_timestamps(),
        sa.ForeignKeyConstraint(["customer_company_id"], ["customer_companies.id"]),
        sa.ForeignKeyConstraint(["engineer_id"], ["engineers.id"]),
        sa.CheckConstraint("assembly_quantity >= 1", name="ck_customers_qty"),
    )
    for col in ("customer_company_id", "customer_name", "assembly_name", "engineer_id", "is_active"):
        op.create_index(op.f(f"ix_customers_{col}"), "customers", [col])

    # --- MPI ---
    op.create_table(
        "mpis",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("job_number", sa.String(), nullable=False),
        sa.Column("old_job_number", sa.String(), nullable=True),
        sa.Column("mpi_number", sa.String(), nullable=False),
        sa.Column("mpi_version", sa.String(), nullable=True),
        sa.Column("engineer_id", sa.Integer(), nullable=False),
        sa.Column("customer_company_id", sa.Integer(), nullable=False),
        sa.Column("form_id", sa.Integer(), nullable=True),
        sa.Column("form_rev", sa.String(), nullable=True),
        sa.Column("customer_assembly_name", sa.String(), nullable=False),
        sa.Column("assembly_rev", sa.String(), nullable=False),
        sa.Column("drawing_name", sa.String(), nullable=False),
        sa.Column("drawing_rev", sa.String(), nullable=False),
        sa.Column("assembly_quantity", sa.Integer(), nullable=False),
        sa.Column("kit_received_date", sa.Date(), nullable=False),
        sa.Column("date_released", sa.String(), nullable=True),
        sa.Column("pages", sa.String(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        _active(),
        sa.Column("docs_id", sa.Integer(), nullable=True),
        sa.Column("customer_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["engineer_id"], ["engineers.id"]),
        sa.ForeignKeyConstraint(["customer_company_id"], ["customer_companies.id"]),
        sa.ForeignKeyConstraint(["form_id"], ["forms.id"]),
        sa.ForeignKeyConstraint(["docs_id"], ["docs.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="SET NULL"),
        sa.CheckConstraint("assembly_quantity >= 1", name="ck_mpis_qty"),
        sa.CheckConstraint(
            "status IN ('draft', 'in-review', 'approved', 'rejected', 'archived')",
            name="ck_mpis_status",
        ),
    )
    op.create_index(op.f("ix_mpis_job_number"), "mpis", ["job_number"], unique=True)
    op.create_index(op.f("ix_mpis_mpi_number"), "mpis", ["mpi_number"], unique=True)
    for col in ("old_job_number", "engineer_id", "customer_company_id", "status", "is_active"):
        op.create_index(op.f(f"ix_mpis_{col}"), "mpis", [col])

    op.create_table(
        "mpi_sections",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("mpi_id", sa.Integer(), nullable=False),
        sa.Column("section_key", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("section_order", sa.Integer(), nullable=False),
        sa.Column("is_collapsed", sa.Boolean(), nullable=False, server_default=sa.sql.expression.false()),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("document_id", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["mpi_id"], ["mpis.id"], ondelete="CASCADE"),
    )
    op.create_index(op.f("ix_mpi_sections_mpi_id"), "mpi_sections", ["mpi_id"])

    op.create_table(
        "mpi_versions",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("mpi_id", sa.Integer(), nullable=False),
        sa.Column("version", sa.String(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("engineer_name", sa.String(), nullable=False),
        sa.ForeignKeyConstraint(["mpi_id"], ["mpis.id"], ondelete="CASCADE"),
    )
    op.create_index(op.f("ix_mpi_versions_mpi_id"), "mpi_versions", ["mpi_id"])


def downgrade() -> None:
    for table in (
        "mpi_versions",
        "mpi_sections",
        "mpis",
        "customers",
        "docs",
        "tasks",
        "process_steps",
        "process_items",
        "document_ids",
        "forms",
        "customer_companies",
        "engineers",
        "admins",
    ):
        op.drop_table(table)
