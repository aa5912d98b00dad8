"""Create students and courses tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `students` and `courses` tables backing SqlDocumentStore.
How:   Portable column types only (String, Text, Date, JSON, TIMESTAMP), so the
       same migration runs against PostgreSQL and SQLite.

Rollback: downgrade() drops both tables (all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create both tables with their unique constraints and indexes."""
    op.create_table(
        "students",
        sa.Column("id", sa.String(32), nullable=False, comment="uuid4 hex generated by the app"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", sa.String(16), nullable=False, comment="Male, Female or Other"),
        sa.Column("student_code", sa.String(64), nullable=False),
        sa.Column(
            "addresses",
            sa.JSON(),
            nullable=False,
            comment="Ordered list of {type, street, city, state, zip_code}",
        ),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("mobile", sa.String(32), nullable=True),
        sa.Column("parents", sa.JSON(), nullable=True, comment="{father_name, mother_name}"),
        sa.Column(
            "course_refs",
            sa.JSON(),
            nullable=False,
            comment="Ids of enrolled courses; maintained by the enrollment service",
        ),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_code", name="uq_students_student_code"),
    )
    op.create_index("idx_students_name", "students", ["name"])
    op.create_index("idx_students_created_at", "students", ["created_at"])

    op.create_table(
        "courses",
        sa.Column("id", sa.String(32), nullable=False, comment="uuid4 hex generated by the app"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "type",
            sa.String(32),
            nullable=False,
            comment="Technical, Non-Technical, Language or Soft Skills",
        ),
        sa.Column("duration", sa.String(64), nullable=False),
        sa.Column("topics", sa.JSON(), nullable=False),
        sa.Column(
            "student_refs",
            sa.JSON(),
            nullable=False,
            comment="Ids of enrolled students; maintained by the enrollment service",
        ),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_courses_name"),
    )
    op.create_index("idx_courses_created_at", "courses", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_courses_created_at", table_name="courses")
    op.drop_table("courses")
    op.drop_index("idx_students_created_at", table_name="students")
    op.drop_index("idx_students_name", table_name="students")
    op.drop_table("students")
