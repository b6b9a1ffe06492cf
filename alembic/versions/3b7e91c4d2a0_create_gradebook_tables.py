"""create gradebook tables

Revision ID: 3b7e91c4d2a0
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b7e91c4d2a0"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("instructor_id", sa.Integer(), nullable=True),
    )
    op.create_table(
        "course_modules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column(
            "is_mandatory", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
    )
    op.create_index("ix_course_modules_course_id", "course_modules", ["course_id"])

    op.create_table(
        "module_quizzes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "module_id", sa.Integer(), sa.ForeignKey("course_modules.id"), nullable=False
        ),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("total_points", sa.Float(), nullable=True),
    )
    op.create_index("ix_module_quizzes_module_id", "module_quizzes", ["module_id"])

    op.create_table(
        "module_assignments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "module_id", sa.Integer(), sa.ForeignKey("course_modules.id"), nullable=False
        ),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("max_points", sa.Float(), nullable=True),
    )
    op.create_index(
        "ix_module_assignments_module_id", "module_assignments", ["module_id"]
    )

    op.create_table(
        "tests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "module_id", sa.Integer(), sa.ForeignKey("course_modules.id"), nullable=False
        ),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("total_marks", sa.Float(), nullable=True),
        sa.Column(
            "results_published",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
    )
    op.create_index("ix_tests_module_id", "tests", ["module_id"])

    op.create_table(
        "quiz_attempts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "quiz_id", sa.Integer(), sa.ForeignKey("module_quizzes.id"), nullable=False
        ),
        sa.Column("learner_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("points_earned", sa.Float(), nullable=True),
        sa.Column("completed_at", sa.Integer(), nullable=True),
    )
    op.create_index(
        "ix_quiz_attempts_learner_quiz", "quiz_attempts", ["learner_id", "quiz_id"]
    )

    op.create_table(
        "assignment_submissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "assignment_id",
            sa.Integer(),
            sa.ForeignKey("module_assignments.id"),
            nullable=False,
        ),
        sa.Column("learner_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("marks_obtained", sa.Float(), nullable=True),
        sa.Column("submitted_at", sa.Integer(), nullable=True),
    )
    op.create_index(
        "ix_assignment_submissions_learner_assignment",
        "assignment_submissions",
        ["learner_id", "assignment_id"],
    )

    op.create_table(
        "test_submissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("test_id", sa.Integer(), sa.ForeignKey("tests.id"), nullable=False),
        sa.Column("learner_id", sa.Integer(), nullable=False),
        sa.Column("submission_status", sa.String(length=32), nullable=False),
        sa.Column("total_score", sa.Float(), nullable=True),
        sa.Column("submitted_at", sa.Integer(), nullable=True),
    )
    op.create_index(
        "ix_test_submissions_learner_test",
        "test_submissions",
        ["learner_id", "test_id"],
    )

    op.create_table(
        "enrollments",
        sa.Column("learner_id", sa.Integer(), primary_key=True),
        sa.Column(
            "course_id", sa.Integer(), sa.ForeignKey("courses.id"), primary_key=True
        ),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("progress_percent", sa.Float(), nullable=False, server_default="0"),
        sa.Column("enrolled_at", sa.Integer(), nullable=False),
        sa.Column("last_accessed_at", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.Integer(), nullable=True),
    )

    op.create_table(
        "module_progress",
        sa.Column("learner_id", sa.Integer(), primary_key=True),
        sa.Column(
            "module_id",
            sa.Integer(),
            sa.ForeignKey("course_modules.id"),
            primary_key=True,
        ),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("started_at", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.Integer(), nullable=True),
    )

    op.create_table(
        "learner_activity_logs",
        sa.Column("learner_id", sa.Integer(), primary_key=True),
        sa.Column("activity_date", sa.Date(), primary_key=True),
        sa.Column("hours_spent", sa.Float(), nullable=False, server_default="0"),
        sa.Column(
            "lessons_completed", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("quizzes_taken", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "assignments_submitted", sa.Integer(), nullable=False, server_default="0"
        ),
    )

    op.create_table(
        "certificates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("learner_id", sa.Integer(), nullable=False),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.id"), nullable=False),
        sa.Column("certificate_number", sa.String(length=32), nullable=False),
        sa.Column("quiz_weight", sa.Float(), nullable=False),
        sa.Column("assignment_weight", sa.Float(), nullable=False),
        sa.Column("test_weight", sa.Float(), nullable=False),
        sa.Column("final_grade", sa.Float(), nullable=False),
        sa.Column("letter_grade", sa.String(length=2), nullable=False),
        sa.Column("status", sa.String(length=8), nullable=False),
        sa.Column("completed_at", sa.Integer(), nullable=True),
        sa.Column("issued_at", sa.Integer(), nullable=False),
        sa.Column("can_view", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("certificate_number"),
        sa.UniqueConstraint("learner_id", "course_id"),
    )
    op.create_index("ix_certificates_course_id", "certificates", ["course_id"])
    op.create_index("ix_certificates_issued_at", "certificates", ["issued_at"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("related_id", sa.Integer(), nullable=False),
        sa.Column("related_type", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.Column("read_at", sa.Integer(), nullable=True),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_certificates_issued_at", table_name="certificates")
    op.drop_index("ix_certificates_course_id", table_name="certificates")
    op.drop_table("certificates")
    op.drop_table("learner_activity_logs")
    op.drop_table("module_progress")
    op.drop_table("enrollments")
    op.drop_index("ix_test_submissions_learner_test", table_name="test_submissions")
    op.drop_table("test_submissions")
    op.drop_index(
        "ix_assignment_submissions_learner_assignment",
        table_name="assignment_submissions",
    )
    op.drop_table("assignment_submissions")
    op.drop_index("ix_quiz_attempts_learner_quiz", table_name="quiz_attempts")
    op.drop_table("quiz_attempts")
    op.drop_index("ix_tests_module_id", table_name="tests")
    op.drop_table("tests")
    op.drop_index("ix_module_assignments_module_id", table_name="module_assignments")
    op.drop_table("module_assignments")
    op.drop_index("ix_module_quizzes_module_id", table_name="module_quizzes")
    op.drop_table("module_quizzes")
    op.drop_index("ix_course_modules_course_id", table_name="course_modules")
    op.drop_table("course_modules")
    op.drop_table("courses")
