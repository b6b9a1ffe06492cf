from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from gradebook.db.engine import async_session_factory, session_scope
from gradebook.models.principal import Principal
from gradebook.repos.certificate_repo import CertificateRepo, InMemoryCertificateRepo
from gradebook.repos.course_repo import CourseRepo, InMemoryCourseRepo
from gradebook.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from gradebook.repos.pg_certificate_repo import PgCertificateRepo
from gradebook.repos.pg_course_repo import PgCourseRepo
from gradebook.repos.pg_enrollment_repo import PgEnrollmentRepo
from gradebook.repos.pg_progress_repo import PgProgressRepo
from gradebook.repos.pg_submission_repo import PgSubmissionRepo
from gradebook.repos.progress_repo import InMemoryProgressRepo, ProgressRepo
from gradebook.repos.submission_repo import InMemorySubmissionRepo, SubmissionRepo
from gradebook.services import token_service
from gradebook.services.activity_log import ActivityLog
from gradebook.services.certificate_issuer import CertificateIssuer
from gradebook.services.grade_aggregator import GradeAggregator
from gradebook.services.locks import keyed_lock
from gradebook.services.notifier import Notifier
from gradebook.services.progress_tracker import ProgressTracker
from gradebook.services.publication import ResultsPublisher
from gradebook.services.streak import StreakService
from gradebook.services.task_queue import task_queue

logger = logging.getLogger(__name__)

# Tokens are issued by the auth service; tokenUrl only feeds the docs UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Validate the bearer token and return the caller as a Principal."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError):
        logger.warning("Token rejected: non-numeric sub=%r", claims["sub"])
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(
        user_id=user_id,
        roles=frozenset(claims.get("roles", [])),
    )
    logger.debug(
        "Token validated for user=%s roles=%s",
        principal.user_id,
        principal.roles,
    )
    return principal


def require_any_role(roles: set[str]):
    """Dependency factory: demand at least one of the given roles.

    Usage: Depends(require_any_role({"admin", "instructor"}))
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_any_role(roles):
            logger.warning(
                "Access denied: user=%s has none of roles=%s",
                principal.user_id,
                roles,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------
# In-memory stores back dev and tests when DATABASE_URL is unset.  With a
# database, every request gets Pg repos bound to one session, so a single
# REPEATABLE READ transaction covers the whole request.

course_repo = InMemoryCourseRepo()
submission_repo = InMemorySubmissionRepo()
enrollment_repo = InMemoryEnrollmentRepo()
progress_repo = InMemoryProgressRepo()
certificate_repo = InMemoryCertificateRepo()


@dataclass(frozen=True, slots=True)
class Repos:
    courses: CourseRepo
    submissions: SubmissionRepo
    enrollments: EnrollmentRepo
    progress: ProgressRepo
    certificates: CertificateRepo


def in_memory_repos() -> Repos:
    return Repos(
        courses=course_repo,
        submissions=submission_repo,
        enrollments=enrollment_repo,
        progress=progress_repo,
        certificates=certificate_repo,
    )


async def get_repos() -> AsyncGenerator[Repos, None]:
    if async_session_factory is None:
        yield in_memory_repos()
        return

    async with session_scope() as session:
        yield Repos(
            courses=PgCourseRepo(session),
            submissions=PgSubmissionRepo(session),
            enrollments=PgEnrollmentRepo(session),
            progress=PgProgressRepo(session),
            certificates=PgCertificateRepo(session),
        )


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@asynccontextmanager
async def committed_certificates() -> AsyncIterator[CertificateRepo]:
    """Certificate writes in their own transaction, committed on exit.

    The issuer opens this while holding its locks, so a new certificate is
    committed before the next issuer can read the latest number.
    """
    async with session_scope() as session:
        yield PgCertificateRepo(session)


def build_issuer(repos: Repos) -> CertificateIssuer:
    return CertificateIssuer(
        aggregator=GradeAggregator(repos.courses, repos.submissions),
        certificates=repos.certificates,
        enrollments=repos.enrollments,
        courses=repos.courses,
        lock=keyed_lock,
        notifier=Notifier(task_queue),
        certificate_scope=(
            committed_certificates if async_session_factory is not None else None
        ),
    )


def get_aggregator(
    repos: Annotated[Repos, Depends(get_repos)],
) -> GradeAggregator:
    return GradeAggregator(repos.courses, repos.submissions)


def get_activity_log(repos: Annotated[Repos, Depends(get_repos)]) -> ActivityLog:
    return ActivityLog(repos.progress, keyed_lock)


def get_tracker(repos: Annotated[Repos, Depends(get_repos)]) -> ProgressTracker:
    return ProgressTracker(
        courses=repos.courses,
        enrollments=repos.enrollments,
        progress=repos.progress,
        certificates=repos.certificates,
        issuer=build_issuer(repos),
        activity=ActivityLog(repos.progress, keyed_lock),
        lock=keyed_lock,
    )


def get_streak_service(
    repos: Annotated[Repos, Depends(get_repos)],
) -> StreakService:
    return StreakService(repos.progress)


def get_publisher(repos: Annotated[Repos, Depends(get_repos)]) -> ResultsPublisher:
    return ResultsPublisher(repos.courses, build_issuer(repos))
