from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Sequence

from ..attendance.model import AggregatedStats, AttendanceSession
from ..common.datetime_utils import format_duration, ms_to_hours

STATS_CSV_FIELDS = ["rank", "student_name", "team", "sessions", "total_hours", "total_duration"]


@dataclass(frozen=True)
class LeaderboardData:
    rows: list[dict]
    total_duration: str
    active_count: int


class ReportService:
    """Read-models for the teacher and student views (formatting only)."""

    def build_leaderboard(
        self,
        stats: Sequence[AggregatedStats],
        *,
        active: Sequence[AttendanceSession] = (),
    ) -> LeaderboardData:
        active_ids = {s.student_id for s in active}
        rows = []
        for rank, s in enumerate(stats, start=1):
            row = s.to_dict()
            row["rank"] = rank
            row["duration"] = format_duration(s.total_duration_ms)
            row["active"] = s.student_id in active_ids
            rows.append(row)

        total_ms = sum(s.total_duration_ms for s in stats)
        return LeaderboardData(rows=rows, total_duration=format_duration(total_ms), active_count=len(active_ids))

    def session_rows(self, sessions: Sequence[AttendanceSession], *, now: int) -> list[dict]:
        out = []
        for s in sessions:
            row = s.to_dict()
            row["duration"] = format_duration(s.duration_ms(now))
            row["active"] = s.is_active
            out.append(row)
        return out

    def stats_csv(self, stats: Sequence[AggregatedStats]) -> bytes:
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=STATS_CSV_FIELDS)
        writer.writeheader()
        for rank, s in enumerate(stats, start=1):
            writer.writerow(
                {
                    "rank": rank,
                    "student_name": s.student_name,
                    "team": s.team_number,
                    "sessions": s.session_count,
                    "total_hours": f"{ms_to_hours(s.total_duration_ms):.2f}",
                    "total_duration": format_duration(s.total_duration_ms),
                }
            )
        return out.getvalue().encode("utf-8-sig")
