from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True, slots=True)
class Notification:
    """Learner-facing notification event.

    The payload shape is fixed; the notification store and any UI that
    reads it depend on these field names.
    """

    user_id: int
    type: str  # course_completed|certificate_issued
    title: str
    message: str
    related_id: int
    related_type: str  # course|certificate
    created_at: int = 0

    def to_payload(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_payload(payload: dict) -> Notification:
        return Notification(
            user_id=int(payload["user_id"]),
            type=payload["type"],
            title=payload["title"],
            message=payload["message"],
            related_id=int(payload["related_id"]),
            related_type=payload["related_type"],
            created_at=int(payload.get("created_at", 0)),
        )
