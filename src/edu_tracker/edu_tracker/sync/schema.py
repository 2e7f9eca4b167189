"""
Remote bin document schema
==========================
Pydantic models that every fetched bin record is validated against before it
may touch local state. Unknown fields are ignored; a wrong shape rejects the
whole document.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from ..attendance.model import AttendanceSession
from ..roster.model import Group, RegisteredStudent


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GroupSchema(_WireModel):
    id: str
    name: str


class StudentSchema(_WireModel):
    id: str
    name: str
    group_id: str = Field("", alias="groupId")


class SessionSchema(_WireModel):
    id: str
    student_id: str = Field(..., alias="studentId")
    student_name: str = Field("", alias="studentName")
    team_number: str = Field("", alias="teamNumber")
    start_time: int = Field(..., alias="startTime")
    end_time: Optional[int] = Field(None, alias="endTime")


class SyncPayload(_WireModel):
    """The single remote document. `groups` is mandatory."""

    sessions: List[SessionSchema] = Field(default_factory=list)
    groups: List[GroupSchema]
    students: List[StudentSchema] = Field(default_factory=list)
    updated_at: Optional[int] = Field(None, alias="updatedAt")


@dataclass(frozen=True)
class RemoteSnapshot:
    """A validated remote document converted to domain entities."""

    sessions: List[AttendanceSession]
    groups: List[Group]
    students: List[RegisteredStudent]
    updated_at: Optional[int]


@dataclass(frozen=True)
class RemoteConfig:
    """Credentials for one JSONBin bin."""

    bin_id: str
    api_key: str

    def to_dict(self) -> dict:
        return {"binId": self.bin_id, "apiKey": self.api_key}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["RemoteConfig"]:
        if not isinstance(data, dict):
            return None
        bin_id = str(data.get("binId") or "").strip()
        api_key = str(data.get("apiKey") or "").strip()
        if not bin_id or not api_key:
            return None
        return cls(bin_id=bin_id, api_key=api_key)


def parse_remote_record(record: Any) -> Optional[RemoteSnapshot]:
    """Validate a fetched bin record; None when it is absent, empty or malformed."""
    if not isinstance(record, dict) or not record:
        return None
    try:
        payload = SyncPayload.model_validate(record)
    except SchemaError:
        return None

    return RemoteSnapshot(
        sessions=[
            AttendanceSession(
                id=s.id,
                student_id=s.student_id,
                student_name=s.student_name,
                team_number=s.team_number,
                start_time=s.start_time,
                end_time=s.end_time,
            )
            for s in payload.sessions
        ],
        groups=[Group(id=g.id, name=g.name) for g in payload.groups],
        students=[RegisteredStudent(id=s.id, name=s.name, group_id=s.group_id) for s in payload.students],
        updated_at=payload.updated_at,
    )
