from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True, slots=True)
class ActivityScore:
    """Aggregate for one activity type (quizzes, assignments or tests)."""

    total_score: float
    max_score: float
    percentage: float
    weight: float
    weighted_score: float
    count: int


@dataclass(frozen=True, slots=True)
class GradeBreakdown:
    quizzes: ActivityScore
    assignments: ActivityScore
    tests: ActivityScore
    final_grade: float
    letter_grade: str  # A|B|C|D|F
    status: str  # pass|fail

    def to_dict(self) -> dict:
        return asdict(self)
