"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in gradebook/models/.
Repos convert between rows and dataclasses.

Catalog and score tables are owned by other services and read here;
enrollments, module_progress, learner_activity_logs, certificates and
notifications are written by this service.  Learner and instructor ids
come from the auth service, so they carry no foreign key.
"""

from __future__ import annotations

import datetime

from sqlalchemy import (
    Boolean,
    Date,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from gradebook.db.engine import Base

# --- Course catalog ---


class CourseRow(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    instructor_id: Mapped[int | None] = mapped_column(Integer, nullable=True)


class CourseModuleRow(Base):
    __tablename__ = "course_modules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    is_mandatory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class QuizRow(Base):
    __tablename__ = "module_quizzes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    module_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("course_modules.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    total_points: Mapped[float | None] = mapped_column(Float, nullable=True)


class AssignmentRow(Base):
    __tablename__ = "module_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    module_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("course_modules.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    max_points: Mapped[float | None] = mapped_column(Float, nullable=True)


class TestRow(Base):
    __tablename__ = "tests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    module_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("course_modules.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    total_marks: Mapped[float | None] = mapped_column(Float, nullable=True)
    results_published: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )


# --- Score records ---


class QuizAttemptRow(Base):
    __tablename__ = "quiz_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    quiz_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("module_quizzes.id"), nullable=False
    )
    learner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="in_progress"
    )  # in_progress|completed
    score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    points_earned: Mapped[float | None] = mapped_column(Float, nullable=True)
    completed_at: Mapped[int | None] = mapped_column(Integer, nullable=True)


class AssignmentSubmissionRow(Base):
    __tablename__ = "assignment_submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    assignment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("module_assignments.id"), nullable=False
    )
    learner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="draft"
    )  # draft|submitted|graded
    marks_obtained: Mapped[float | None] = mapped_column(Float, nullable=True)
    submitted_at: Mapped[int | None] = mapped_column(Integer, nullable=True)


class TestSubmissionRow(Base):
    __tablename__ = "test_submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    test_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tests.id"), nullable=False
    )
    learner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    submission_status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="in_progress"
    )  # in_progress|submitted|late
    total_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    submitted_at: Mapped[int | None] = mapped_column(Integer, nullable=True)


# --- Progress ---


class EnrollmentRow(Base):
    __tablename__ = "enrollments"

    learner_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id"), primary_key=True
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="active"
    )  # active|completed
    progress_percent: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    enrolled_at: Mapped[int] = mapped_column(Integer, nullable=False)
    last_accessed_at: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completed_at: Mapped[int | None] = mapped_column(Integer, nullable=True)


class ModuleProgressRow(Base):
    __tablename__ = "module_progress"

    learner_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    module_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("course_modules.id"), primary_key=True
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="not_started"
    )  # not_started|in_progress|completed
    started_at: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completed_at: Mapped[int | None] = mapped_column(Integer, nullable=True)


class ActivityLogRow(Base):
    __tablename__ = "learner_activity_logs"

    learner_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    activity_date: Mapped[datetime.date] = mapped_column(Date, primary_key=True)
    hours_spent: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    lessons_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quizzes_taken: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    assignments_submitted: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )


# --- Certificates ---


class CertificateRow(Base):
    __tablename__ = "certificates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    learner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id"), nullable=False, index=True
    )
    certificate_number: Mapped[str] = mapped_column(
        String(32), unique=True, nullable=False
    )
    quiz_weight: Mapped[float] = mapped_column(Float, nullable=False, default=0.15)
    assignment_weight: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.25
    )
    test_weight: Mapped[float] = mapped_column(Float, nullable=False, default=0.60)
    final_grade: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    letter_grade: Mapped[str] = mapped_column(String(2), nullable=False)
    status: Mapped[str] = mapped_column(String(8), nullable=False)  # pass|fail
    completed_at: Mapped[int | None] = mapped_column(Integer, nullable=True)
    issued_at: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    can_view: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (UniqueConstraint("learner_id", "course_id"),)


# --- Notifications (written by the worker) ---


class NotificationRow(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    related_id: Mapped[int] = mapped_column(Integer, nullable=False)
    related_type: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)
    read_at: Mapped[int | None] = mapped_column(Integer, nullable=True)
