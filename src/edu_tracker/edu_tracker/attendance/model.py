from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one clock-in/clock-out interval.

    `student_name` and `team_number` are copied at clock-in and never follow
    later roster edits. `end_time is None` means the student is still clocked in.
    """

    id: str
    student_id: str
    student_name: str
    team_number: str
    start_time: int
    end_time: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    def duration_ms(self, now: int) -> int:
        end = self.end_time if self.end_time is not None else now
        return end - self.start_time

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "teamNumber": self.team_number,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttendanceSession":
        end = data.get("endTime")
        return cls(
            id=str(data["id"]),
            student_id=str(data["studentId"]),
            student_name=str(data.get("studentName") or ""),
            team_number=str(data.get("teamNumber") or ""),
            start_time=int(data["startTime"]),
            end_time=int(end) if end is not None else None,
        )


@dataclass
class AggregatedStats:
    """Read-model: per-student totals, recomputed on every read."""

    student_id: str
    student_name: str
    team_number: str
    total_duration_ms: int = 0
    session_count: int = 0

    def to_dict(self) -> dict:
        return {
            "studentId": self.student_id,
            "studentName": self.student_name,
            "teamNumber": self.team_number,
            "totalDurationMs": self.total_duration_ms,
            "sessionCount": self.session_count,
        }
