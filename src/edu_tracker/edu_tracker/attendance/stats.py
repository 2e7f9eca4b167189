from __future__ import annotations

from typing import Iterable

from ..core.constants import UNASSIGNED_TEAM
from ..roster.model import Group, RegisteredStudent
from .model import AggregatedStats, AttendanceSession


def aggregate_stats(
    *,
    students: Iterable[RegisteredStudent],
    groups: Iterable[Group],
    sessions: Iterable[AttendanceSession],
    now: int,
) -> list[AggregatedStats]:
    """Fold sessions into one row per student id.

    Every roster student is seeded at zero. Students that only appear in
    sessions (removed from the roster) keep their snapshot name and team.
    """
    group_names = {g.id: g.name for g in groups}
    summary_map: dict[str, AggregatedStats] = {}

    for student in students:
        summary_map[student.id] = AggregatedStats(
            student_id=student.id,
            student_name=student.name,
            team_number=group_names.get(student.group_id, UNASSIGNED_TEAM),
        )

    for session in sessions:
        s = summary_map.get(session.student_id)
        if not s:
            s = AggregatedStats(
                student_id=session.student_id,
                student_name=session.student_name,
                team_number=session.team_number,
            )
            summary_map[session.student_id] = s
        s.total_duration_ms += session.duration_ms(now)
        s.session_count += 1

    # list.sort is stable, so ties keep insertion order
    summary = list(summary_map.values())
    summary.sort(key=lambda x: x.total_duration_ms, reverse=True)
    return summary
