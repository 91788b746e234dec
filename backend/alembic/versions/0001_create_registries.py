"""create registries and activity tables

Revision ID: 0001
Revises: 
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "states",
        sa.Column("id", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column("state_name", sa.String(length=200), nullable=False),
        sa.Column("state_code", sa.String(length=16), nullable=False, server_default=""),
        sa.Column("districts", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_states_state_name", "states", ["state_name"], unique=True)

    op.create_table(
        "schools",
        sa.Column("id", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=300), nullable=False),
        sa.Column("school_code", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("district_code", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("district_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("state", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_schools_name", "schools", ["name"], unique=False)
    op.create_index("ix_schools_school_code", "schools", ["school_code"], unique=False)

    op.create_table(
        "students",
        sa.Column("id", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column("auth_id", sa.String(length=128), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("student_id", sa.String(length=64), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("school_code", sa.String(length=64), nullable=True),
        sa.Column("school", sa.String(length=300), nullable=True),
        sa.Column("school_name", sa.String(length=300), nullable=True),
        sa.Column("district_code", sa.String(length=64), nullable=True),
        sa.Column("district_name", sa.String(length=200), nullable=True),
        sa.Column("state", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_students_auth_id", "students", ["auth_id"], unique=False)
    op.create_index("ix_students_email", "students", ["email"], unique=False)
    op.create_index("ix_students_student_id", "students", ["student_id"], unique=False)
    op.create_index("ix_students_school_code", "students", ["school_code"], unique=False)

    op.create_table(
        "content_items",
        sa.Column("id", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column(
            "kind",
            sa.Enum("quiz", "webinar", "workshop", name="contentkind"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=300), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("audience", sa.String(length=32), nullable=True),
        sa.Column("target_type", sa.String(length=32), nullable=False, server_default="all"),
        sa.Column("target_state_id", sa.String(length=128), nullable=True),
        sa.Column("target_district_code", sa.String(length=64), nullable=True),
        sa.Column("target_school_id", sa.String(length=128), nullable=True),
        sa.Column("expiry_type", sa.String(length=16), nullable=False, server_default="never"),
        sa.Column("expiry_value", sa.Integer(), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_content_items_kind", "content_items", ["kind"], unique=False)
    op.create_index("ix_content_items_target_type", "content_items", ["target_type"], unique=False)

    op.create_table(
        "quiz_attempts",
        sa.Column("id", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column("quiz_id", sa.String(length=128), sa.ForeignKey("content_items.id"), nullable=False),
        sa.Column("subject_key", sa.String(length=128), nullable=True),
        sa.Column("subject_email", sa.String(length=320), nullable=True),
        sa.Column("subject_name", sa.String(length=200), nullable=True),
        sa.Column("score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("correct_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completion_time_seconds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_quiz_attempts_quiz_id", "quiz_attempts", ["quiz_id"], unique=False)
    op.create_index("ix_quiz_attempts_subject_key", "quiz_attempts", ["subject_key"], unique=False)
    op.create_index("ix_quiz_attempts_submitted_at", "quiz_attempts", ["submitted_at"], unique=False)

    op.create_table(
        "practice_records",
        sa.Column("id", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column("subject_key", sa.String(length=128), nullable=True),
        sa.Column("subject_email", sa.String(length=320), nullable=True),
        sa.Column("school_code", sa.String(length=64), nullable=True),
        sa.Column("subject", sa.String(length=200), nullable=True),
        sa.Column("is_correct", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("points", sa.Integer(), nullable=True),
        sa.Column("time_taken_seconds", sa.Integer(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_practice_records_subject_key", "practice_records", ["subject_key"], unique=False)
    op.create_index("ix_practice_records_school_code", "practice_records", ["school_code"], unique=False)
    op.create_index("ix_practice_records_submitted_at", "practice_records", ["submitted_at"], unique=False)


def downgrade() -> None:
    op.drop_table("practice_records")
    op.drop_table("quiz_attempts")
    op.drop_table("content_items")
    op.drop_table("students")
    op.drop_table("schools")
    op.drop_table("states")
    op.execute("DROP TYPE IF EXISTS contentkind")
