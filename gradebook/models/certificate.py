from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Certificate:
    """Course certificate for one learner.

    certificate_number and issued_at are fixed at creation; every other
    field is recomputed in place on each issue/refresh.  can_view gates
    whether the learner may see the grade breakdown at all.
    """

    id: int
    learner_id: int
    course_id: int
    certificate_number: str  # CERT-YYYY-NNNNN
    issued_at: int
    quiz_weight: float = 0.15
    assignment_weight: float = 0.25
    test_weight: float = 0.60
    final_grade: float = 0.0
    letter_grade: str = "F"
    status: str = "fail"  # pass|fail
    completed_at: int | None = None
    can_view: bool = False
