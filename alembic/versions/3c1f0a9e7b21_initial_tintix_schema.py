"""initial tintix schema

Revision ID: 3c1f0a9e7b21
Revises:
Create Date: 2026-10-16 09:12:44.201733

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9e7b21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

NOW = sa.text("CURRENT_TIMESTAMP")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=False, server_default="installer"),
        sa.Column("hourly_rate", sa.Numeric(8, 2), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint("hourly_rate >= 0", name="ck_users_hourly_rate_nonnegative"),
    )
    op.create_index("ix_users_role", "users", ["role"], unique=False)

    op.create_table(
        "films",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("cost_per_sqft", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.UniqueConstraint("name", name="uq_films_name"),
        sa.CheckConstraint("cost_per_sqft >= 0", name="ck_films_cost_per_sqft_nonnegative"),
    )
    op.create_index("ix_films_id", "films", ["id"], unique=False)

    op.create_table(
        "film_inventory",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("film_id", sa.Integer(), sa.ForeignKey("films.id", ondelete="CASCADE"), nullable=False),
        sa.Column("current_stock", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("minimum_stock", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.UniqueConstraint("film_id", name="uq_film_inventory_film_id"),
        sa.CheckConstraint("minimum_stock >= 0", name="ck_film_inventory_minimum_nonnegative"),
    )
    op.create_index("ix_film_inventory_id", "film_inventory", ["id"], unique=False)

    op.create_table(
        "job_entries",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("job_number", sa.String(), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("vehicle_year", sa.String(), nullable=False),
        sa.Column("vehicle_make", sa.String(), nullable=False),
        sa.Column("vehicle_model", sa.String(), nullable=False),
        sa.Column("total_sqft", sa.Float(), nullable=True),
        sa.Column("film_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("start_time", sa.DateTime(), nullable=True),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.UniqueConstraint("job_number", name="uq_job_entries_job_number"),
    )
    op.create_index("ix_job_entries_id", "job_entries", ["id"], unique=False)
    op.create_index("ix_job_entries_date", "job_entries", ["date"], unique=False)

    op.create_table(
        "job_dimensions",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "job_entry_id",
            sa.Integer(),
            sa.ForeignKey("job_entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("film_id", sa.Integer(), sa.ForeignKey("films.id"), nullable=True),
        sa.Column("length_inches", sa.Numeric(8, 2), nullable=False),
        sa.Column("width_inches", sa.Numeric(8, 2), nullable=False),
        sa.Column("sqft", sa.Numeric(10, 4), nullable=False),
        sa.Column("film_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
    )
    op.create_index("ix_job_dimensions_id", "job_dimensions", ["id"], unique=False)
    op.create_index("ix_job_dimensions_job_entry_id", "job_dimensions", ["job_entry_id"], unique=False)
    op.create_index("ix_job_dimensions_film_id", "job_dimensions", ["film_id"], unique=False)

    op.create_table(
        "job_installers",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "job_entry_id",
            sa.Integer(),
            sa.ForeignKey("job_entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("installer_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("time_variance", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
    )
    op.create_index("ix_job_installers_id", "job_installers", ["id"], unique=False)
    op.create_index("ix_job_installers_job_entry_id", "job_installers", ["job_entry_id"], unique=False)
    op.create_index("ix_job_installers_installer_id", "job_installers", ["installer_id"], unique=False)

    op.create_table(
        "redo_entries",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "job_entry_id",
            sa.Integer(),
            sa.ForeignKey("job_entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("installer_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("part", sa.String(), nullable=False),
        sa.Column("length_inches", sa.Float(), nullable=True),
        sa.Column("width_inches", sa.Float(), nullable=True),
        sa.Column("sqft", sa.Float(), nullable=True),
        sa.Column("film_id", sa.Integer(), sa.ForeignKey("films.id"), nullable=True),
        sa.Column("material_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("time_minutes", sa.Integer(), nullable=True, server_default="0"),
        sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=NOW),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.CheckConstraint(
            "part IN ('windshield', 'back_windshield', 'rollups', 'quarter')",
            name="ck_redo_entries_part",
        ),
    )
    op.create_index("ix_redo_entries_id", "redo_entries", ["id"], unique=False)
    op.create_index("ix_redo_entries_job_entry_id", "redo_entries", ["job_entry_id"], unique=False)
    op.create_index("ix_redo_entries_installer_id", "redo_entries", ["installer_id"], unique=False)
    op.create_index("ix_redo_entries_part", "redo_entries", ["part"], unique=False)

    op.create_table(
        "installer_time_entries",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "job_entry_id",
            sa.Integer(),
            sa.ForeignKey("job_entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("installer_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("windows_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("time_minutes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.CheckConstraint("windows_completed >= 0", name="ck_installer_time_entries_windows_nonnegative"),
        sa.CheckConstraint("time_minutes >= 0", name="ck_installer_time_entries_minutes_nonnegative"),
    )
    op.create_index("ix_installer_time_entries_id", "installer_time_entries", ["id"], unique=False)
    op.create_index(
        "ix_installer_time_entries_job_entry_id", "installer_time_entries", ["job_entry_id"], unique=False
    )
    op.create_index(
        "ix_installer_time_entries_installer_id", "installer_time_entries", ["installer_id"], unique=False
    )

    op.create_table(
        "inventory_transactions",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("film_id", sa.Integer(), sa.ForeignKey("films.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("quantity", sa.Numeric(10, 2), nullable=False),
        sa.Column("previous_stock", sa.Numeric(10, 2), nullable=False),
        sa.Column("new_stock", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "job_entry_id",
            sa.Integer(),
            sa.ForeignKey("job_entries.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.CheckConstraint(
            "type IN ('addition', 'deduction', 'adjustment')",
            name="ck_inventory_transactions_type",
        ),
    )
    op.create_index("ix_inventory_transactions_id", "inventory_transactions", ["id"], unique=False)
    op.create_index("ix_inventory_transactions_film_id", "inventory_transactions", ["film_id"], unique=False)
    op.create_index(
        "ix_inventory_transactions_job_entry_id", "inventory_transactions", ["job_entry_id"], unique=False
    )
    op.create_index(
        "ix_inventory_transactions_created_at", "inventory_transactions", ["created_at"], unique=False
    )
    # dashboard range queries
    op.create_index(
        "ix_job_entries_date_id", "job_entries", ["date", "id"], unique=False
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_job_entries_date_id", table_name="job_entries")
    op.drop_table("inventory_transactions")
    op.drop_table("installer_time_entries")
    op.drop_table("redo_entries")
    op.drop_table("job_installers")
    op.drop_table("job_dimensions")
    op.drop_table("job_entries")
    op.drop_table("film_inventory")
    op.drop_table("films")
    op.drop_table("users")
