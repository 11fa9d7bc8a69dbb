"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CANONICAL_DEGREES = [
    {"slug": "college-3eme", "name": "3ème année collège", "position": 1},
    {"slug": "tronc-commun", "name": "Tronc Commun", "position": 2},
    {"slug": "bac1-se", "name": "1er année Bac (SE)", "position": 3},
    {"slug": "bac1-sm", "name": "1er année Bac (SM)", "position": 4},
    {"slug": "bac2", "name": "2ème année Bac", "position": 5},
]


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    degrees = op.create_table(
        "degrees",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=64), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_degrees_slug"), "degrees", ["slug"], unique=True)

    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.UniqueConstraint("code"),
    )

    op.create_table(
        "rooms",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("firstname", sa.String(length=100), nullable=True),
        sa.Column("lastname", sa.String(length=100), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("degree_id", sa.Integer(), nullable=True),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["degree_id"], ["degrees.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["parent_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_users_role"), "users", ["role"])
    op.create_index(op.f("ix_users_degree_id"), "users", ["degree_id"])
    op.create_index(op.f("ix_users_parent_id"), "users", ["parent_id"])

    op.create_table(
        "timetables",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("degree_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("teacher_id", sa.Integer(), nullable=False),
        sa.Column("room_id", sa.Integer(), nullable=True),
        sa.Column("day_of_week", sa.SmallInteger(), nullable=False),
        sa.Column("period", sa.String(length=50), nullable=True),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "day_of_week BETWEEN 1 AND 7", name="ck_timetables_day_of_week"
        ),
        sa.ForeignKeyConstraint(["degree_id"], ["degrees.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_timetables_degree_id"), "timetables", ["degree_id"])
    op.create_index(op.f("ix_timetables_subject_id"), "timetables", ["subject_id"])
    op.create_index(op.f("ix_timetables_teacher_id"), "timetables", ["teacher_id"])

    op.create_table(
        "monthly_subject_plans",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("plan_date", sa.Date(), nullable=False),
        sa.Column("degree_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("teacher_id", sa.Integer(), nullable=True),
        sa.Column(
            "teacher_key",
            sa.Integer(),
            sa.Computed("coalesce(teacher_id, 0)", persisted=True),
            nullable=False,
        ),
        sa.Column("sequence", sa.SmallInteger(), nullable=False, server_default="1"),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["degree_id"], ["degrees.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "plan_date",
            "degree_id",
            "subject_id",
            "teacher_key",
            "sequence",
            name="msp_uniq",
        ),
    )
    op.create_index(
        "msp_plan_deg_idx", "monthly_subject_plans", ["plan_date", "degree_id"]
    )

    # Canonical degrees, in display order
    op.bulk_insert(degrees, CANONICAL_DEGREES)


def downgrade() -> None:
    op.drop_index("msp_plan_deg_idx", table_name="monthly_subject_plans")
    op.drop_table("monthly_subject_plans")
    op.drop_index(op.f("ix_timetables_teacher_id"), table_name="timetables")
    op.drop_index(op.f("ix_timetables_subject_id"), table_name="timetables")
    op.drop_index(op.f("ix_timetables_degree_id"), table_name="timetables")
    op.drop_table("timetables")
    op.drop_index(op.f("ix_users_parent_id"), table_name="users")
    op.drop_index(op.f("ix_users_degree_id"), table_name="users")
    op.drop_index(op.f("ix_users_role"), table_name="users")
    op.drop_table("users")
    op.drop_table("rooms")
    op.drop_table("subjects")
    op.drop_index(op.f("ix_degrees_slug"), table_name="degrees")
    op.drop_table("degrees")
