"""Add lists, list memberships, import jobs and export jobs.

Revision ID: 002_lists_imports_exports
Revises: 001_initial
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "002_lists_imports_exports"
down_revision = "001_initial"
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.String(30), nullable=False),
        sa.Column("updated_at", sa.String(30), nullable=False),
    ]


def upgrade() -> None:
    # Lists
    op.create_table(
        "crm_list",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        sa.Column("object_type_id", sa.String(20), sa.ForeignKey("object_type.id"), nullable=False),
        sa.Column("processing_type", sa.String(20), nullable=False),
        sa.Column("processing_status", sa.String(20), nullable=False),
        sa.Column("filter_branch", sa.JSON),
        sa.Column("list_version", sa.Integer, nullable=False),
        sa.Column("deleted_at", sa.String(30)),
        *_timestamps(),
        sa.Column("archived", sa.Boolean, nullable=False),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "list_membership",
        sa.Column(
            "list_id", sa.Integer,
            sa.ForeignKey("crm_list.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("object_id", sa.Integer, sa.ForeignKey("crm_object.id"), primary_key=True),
        sa.Column("added_at", sa.String(30), nullable=False),
    )

    # Imports
    op.create_table(
        "import_job",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("state", sa.String(20), nullable=False),
        sa.Column("opt_out_import", sa.Boolean, nullable=False),
        sa.Column("request_json", sa.JSON),
        sa.Column("metadata", sa.JSON),
        *_timestamps(),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "import_row_error",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "import_id", sa.Integer,
            sa.ForeignKey("import_job.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("error_type", sa.String(50), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("invalid_value", sa.Text),
        sa.Column("object_type_id", sa.String(20)),
        sa.Column("line_number", sa.Integer),
        sa.Column("created_at", sa.String(30), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_import_row_error_import_id", "import_row_error", ["import_id"])

    # Exports
    op.create_table(
        "export_job",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("state", sa.String(20), nullable=False),
        sa.Column("export_type", sa.String(20), nullable=False),
        sa.Column("object_type_id", sa.String(20), sa.ForeignKey("object_type.id"), nullable=False),
        sa.Column("object_properties", sa.JSON),
        sa.Column("request_json", sa.JSON),
        sa.Column("result_csv", sa.Text),
        sa.Column("record_count", sa.Integer, nullable=False),
        *_timestamps(),
        sqlite_autoincrement=True,
    )


def downgrade() -> None:
    op.drop_table("export_job")
    op.drop_index("ix_import_row_error_import_id", table_name="import_row_error")
    op.drop_table("import_row_error")
    op.drop_table("import_job")
    op.drop_table("list_membership")
    op.drop_table("crm_list")
