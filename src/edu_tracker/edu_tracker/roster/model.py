from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class Group:
    """Domain entity: a named team students clock in under."""

    id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Group":
        return cls(id=str(data["id"]), name=str(data["name"]))


@dataclass(frozen=True)
class RegisteredStudent:
    """Domain entity: a roster entry.

    `group_id` is not enforced; a dangling id is rendered as unassigned.
    """

    id: str
    name: str
    group_id: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "groupId": self.group_id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RegisteredStudent":
        return cls(id=str(data["id"]), name=str(data["name"]), group_id=str(data.get("groupId") or ""))
