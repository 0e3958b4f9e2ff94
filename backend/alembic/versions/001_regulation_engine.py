"""Regulation engine: projects, versions, regulation types, regulations, statuses

Revision ID: 001_regulation_engine
Revises:
Create Date: 2026-10-19

Creates: projects, upload_versions, regulation_types, regulations,
         regulation_statuses, audit_log

regulation_statuses carries regulation_version_unique_constraint, the
conflict target of the status upserts.
"""
from alembic import op
import sqlalchemy as sa

revision = "001_regulation_engine"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── 1. Project side (read by the engine) ─────────────────────
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_table(
        "upload_versions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("catalog_id", sa.String(100), nullable=False, unique=True),
        sa.Column("project_id", sa.Integer,
                  sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )

    # ── 2. Regulation catalog and definitions ────────────────────
    op.create_table(
        "regulation_types",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
    )
    op.create_table(
        "regulations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("display_name", sa.String(300), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("config", sa.String(500), nullable=True),
        sa.Column("order", sa.Integer, server_default="0", nullable=False),
        sa.Column("type_id", sa.Integer, sa.ForeignKey("regulation_types.id"), nullable=False),
        sa.Column("project_id", sa.Integer,
                  sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("project_id", "name", name="uq_regulation_project_name"),
    )

    # ── 3. Per-version statuses ──────────────────────────────────
    op.create_table(
        "regulation_statuses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("regulation_id", sa.Integer,
                  sa.ForeignKey("regulations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version_id", sa.Integer,
                  sa.ForeignKey("upload_versions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("value", sa.Text, nullable=True),
        sa.Column("report_details", sa.JSON, nullable=True),
        sa.Column("is_compliant", sa.Boolean, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("regulation_id", "version_id", name="regulation_version_unique_constraint"),
    )

    # ── 4. Audit trail ───────────────────────────────────────────
    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, nullable=True),
        sa.Column("module", sa.String(50), nullable=False),
        sa.Column("action", sa.Enum("create", "update", "delete", name="audit_action"), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.Integer, nullable=False),
        sa.Column("field_name", sa.String(100), nullable=True),
        sa.Column("old_value", sa.Text, nullable=True),
        sa.Column("new_value", sa.Text, nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_audit_log_entity", "audit_log", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_index("idx_audit_log_entity", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_table("regulation_statuses")
    op.drop_table("regulations")
    op.drop_table("regulation_types")
    op.drop_table("upload_versions")
    op.drop_table("projects")
