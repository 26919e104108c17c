"""Initial NotSpot schema.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.String(30), nullable=False),
        sa.Column("updated_at", sa.String(30), nullable=False),
    ]


def upgrade() -> None:
    # Object type registry
    op.create_table(
        "object_type",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("label_singular", sa.String(200), nullable=False),
        sa.Column("label_plural", sa.String(200), nullable=False),
        sa.Column("primary_display_property", sa.String(200)),
        sa.Column("is_custom", sa.Boolean, nullable=False),
        sa.Column("fully_qualified_name", sa.String(200)),
        sa.Column("description", sa.Text),
        *_timestamps(),
        sa.Column("archived", sa.Boolean, nullable=False),
    )

    # Records and their property values
    op.create_table(
        "crm_object",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("object_type_id", sa.String(20), sa.ForeignKey("object_type.id"), nullable=False),
        sa.Column("archived_at", sa.String(30)),
        sa.Column("merged_into_id", sa.Integer),
        *_timestamps(),
        sa.Column("archived", sa.Boolean, nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_crm_object_type_archived", "crm_object", ["object_type_id", "archived"])

    op.create_table(
        "property_value",
        sa.Column("object_id", sa.Integer, sa.ForeignKey("crm_object.id"), primary_key=True),
        sa.Column("property_name", sa.String(200), primary_key=True),
        sa.Column("value", sa.Text),
        sa.Column("updated_at", sa.String(30), nullable=False),
    )
    op.create_index("ix_property_value_name_value", "property_value", ["property_name", "value"])

    op.create_table(
        "property_value_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("object_id", sa.Integer, sa.ForeignKey("crm_object.id"), nullable=False),
        sa.Column("property_name", sa.String(200), nullable=False),
        sa.Column("value", sa.Text),
        sa.Column("timestamp", sa.String(30), nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index(
        "ix_property_history_lookup", "property_value_history",
        ["object_id", "property_name", "timestamp"],
    )

    # Associations
    op.create_table(
        "association_type",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("from_object_type", sa.String(20), nullable=False),
        sa.Column("to_object_type", sa.String(20), nullable=False),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("label", sa.String(200)),
        sa.Column("inverse_label", sa.String(200)),
        sa.UniqueConstraint(
            "from_object_type", "to_object_type", "category", "label",
            name="uq_association_type_pair_label",
        ),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_association_type_from_object_type", "association_type", ["from_object_type"])
    op.create_index("ix_association_type_to_object_type", "association_type", ["to_object_type"])

    op.create_table(
        "association",
        sa.Column("from_object_id", sa.Integer, sa.ForeignKey("crm_object.id"), primary_key=True),
        sa.Column("to_object_id", sa.Integer, sa.ForeignKey("crm_object.id"), primary_key=True),
        sa.Column(
            "association_type_id", sa.Integer,
            sa.ForeignKey("association_type.id"), primary_key=True,
        ),
        sa.Column("created_at", sa.String(30), nullable=False),
    )
    op.create_index("ix_association_from_type", "association", ["from_object_id", "association_type_id"])
    op.create_index("ix_association_to", "association", ["to_object_id"])

    # Property definitions and groups
    op.create_table(
        "property_definition",
        sa.Column("object_type_id", sa.String(20), primary_key=True),
        sa.Column("name", sa.String(200), primary_key=True),
        sa.Column("label", sa.String(200), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("field_type", sa.String(50), nullable=False),
        sa.Column("group_name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("display_order", sa.Integer, nullable=False),
        sa.Column("has_unique_value", sa.Boolean, nullable=False),
        sa.Column("hidden", sa.Boolean, nullable=False),
        sa.Column("form_field", sa.Boolean, nullable=False),
        sa.Column("calculated", sa.Boolean, nullable=False),
        sa.Column("external_options", sa.Boolean, nullable=False),
        sa.Column("hubspot_defined", sa.Boolean, nullable=False),
        sa.Column("options_json", sa.JSON),
        sa.Column("archived_at", sa.String(30)),
        *_timestamps(),
        sa.Column("archived", sa.Boolean, nullable=False),
    )

    op.create_table(
        "property_group",
        sa.Column("object_type_id", sa.String(20), primary_key=True),
        sa.Column("name", sa.String(200), primary_key=True),
        sa.Column("label", sa.String(200), nullable=False),
        sa.Column("display_order", sa.Integer, nullable=False),
        sa.Column("archived", sa.Boolean, nullable=False),
    )

    # Pipelines
    op.create_table(
        "pipeline",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("object_type_id", sa.String(20), nullable=False),
        sa.Column("label", sa.String(200), nullable=False),
        sa.Column("display_order", sa.Integer, nullable=False),
        *_timestamps(),
        sa.Column("archived", sa.Boolean, nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_pipeline_object_type_id", "pipeline", ["object_type_id"])

    op.create_table(
        "pipeline_stage",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "pipeline_id", sa.Integer,
            sa.ForeignKey("pipeline.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("label", sa.String(200), nullable=False),
        sa.Column("display_order", sa.Integer, nullable=False),
        sa.Column("metadata", sa.JSON),
        *_timestamps(),
        sa.Column("archived", sa.Boolean, nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_pipeline_stage_pipeline_id", "pipeline_stage", ["pipeline_id"])

    # Owners
    op.create_table(
        "owner",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("user_id", sa.Integer),
        *_timestamps(),
        sa.Column("archived", sa.Boolean, nullable=False),
        sqlite_autoincrement=True,
    )


def downgrade() -> None:
    op.drop_table("owner")
    op.drop_table("pipeline_stage")
    op.drop_table("pipeline")
    op.drop_table("property_group")
    op.drop_table("property_definition")
    op.drop_table("association")
    op.drop_table("association_type")
    op.drop_table("property_value_history")
    op.drop_table("property_value")
    op.drop_table("crm_object")
    op.drop_table("object_type")
