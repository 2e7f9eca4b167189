from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_ms
from ..common.ids import fresh_id
from ..common.validators import clean_name
from ..core.constants import UNASSIGNED_TEAM
from ..core.enums import ChangeOrigin, Collection
from ..core.exceptions import AlreadyActiveError, InvalidReferenceError, NoActiveSessionError
from ..roster.model import Group, RegisteredStudent
from ..storage.repository import KeyValueStore
from .model import AggregatedStats, AttendanceSession
from .stats import aggregate_stats

logger = logging.getLogger(__name__)

ChangeListener = Callable[[frozenset, ChangeOrigin], None]


class AttendanceStateManager:
    """Single owner of groups, students and sessions.

    Mutations are synchronous and must all run on the same event loop thread.
    Each one writes the changed collections through to the local store and then
    notifies subscribers (the cloud sync service) with the changed collection
    names and where the change came from.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        clock: Optional[Callable[[], int]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._store = store
        self._clock = clock or now_ms
        self._new_id = id_factory or fresh_id
        self._sessions: list[AttendanceSession] = []
        self._groups: list[Group] = []
        self._students: list[RegisteredStudent] = []
        self._listeners: list[ChangeListener] = []
        self._loaded = False

    # ---- lifecycle -------------------------------------------------------

    def load(self) -> None:
        """Read the three collections from the local store (startup only)."""
        self._sessions = self._read_collection(Collection.SESSIONS, AttendanceSession.from_dict)
        self._groups = self._read_collection(Collection.GROUPS, Group.from_dict)
        self._students = self._read_collection(Collection.STUDENTS, RegisteredStudent.from_dict)
        self._loaded = True
        logger.info(
            f"Loaded local state: {len(self._groups)} groups, "
            f"{len(self._students)} students, {len(self._sessions)} sessions"
        )

    @property
    def loaded(self) -> bool:
        return self._loaded

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def now(self) -> int:
        return self._clock()

    # ---- read side -------------------------------------------------------

    @property
    def sessions(self) -> tuple[AttendanceSession, ...]:
        return tuple(self._sessions)

    @property
    def groups(self) -> tuple[Group, ...]:
        return tuple(self._groups)

    @property
    def students(self) -> tuple[RegisteredStudent, ...]:
        return tuple(self._students)

    def find_group(self, group_id: str) -> Optional[Group]:
        return next((g for g in self._groups if g.id == group_id), None)

    def find_student(self, student_id: str) -> Optional[RegisteredStudent]:
        return next((s for s in self._students if s.id == student_id), None)

    def team_name_for(self, student: RegisteredStudent) -> str:
        group = self.find_group(student.group_id)
        return group.name if group else UNASSIGNED_TEAM

    def active_sessions(self) -> list[AttendanceSession]:
        return [s for s in self._sessions if s.is_active]

    def active_session_for(self, student_id: str) -> Optional[AttendanceSession]:
        return next((s for s in self._sessions if s.student_id == student_id and s.is_active), None)

    def sessions_for_student(self, student_id: str) -> list[AttendanceSession]:
        items = [s for s in self._sessions if s.student_id == student_id]
        items.sort(key=lambda s: s.start_time, reverse=True)
        return items

    def get_aggregated_stats(self, *, now: Optional[int] = None) -> list[AggregatedStats]:
        return aggregate_stats(
            students=self._students,
            groups=self._groups,
            sessions=self._sessions,
            now=self._clock() if now is None else now,
        )

    def snapshot(self, *, updated_at: int) -> dict:
        """The whole state as a remote bin document."""
        return {
            "sessions": [s.to_dict() for s in self._sessions],
            "groups": [g.to_dict() for g in self._groups],
            "students": [s.to_dict() for s in self._students],
            "updatedAt": updated_at,
        }

    # ---- roster ----------------------------------------------------------

    def add_group(self, name: str) -> Optional[Group]:
        clean = clean_name(name)
        if clean is None:
            return None
        group = Group(id=self._new_id(), name=clean)
        self._groups.append(group)
        self._commit(Collection.GROUPS)
        return group

    def remove_group(self, group_id: str) -> None:
        """Drop the group and its students; their sessions stay as history."""
        groups = [g for g in self._groups if g.id != group_id]
        students = [s for s in self._students if s.group_id != group_id]
        changed = []
        if len(groups) != len(self._groups):
            self._groups = groups
            changed.append(Collection.GROUPS)
        if len(students) != len(self._students):
            self._students = students
            changed.append(Collection.STUDENTS)
        if changed:
            self._commit(*changed)

    def add_student(self, name: str, group_id: str) -> Optional[RegisteredStudent]:
        clean = clean_name(name)
        if clean is None:
            return None
        student = RegisteredStudent(id=self._new_id(), name=clean, group_id=group_id)
        self._students.append(student)
        self._commit(Collection.STUDENTS)
        return student

    def remove_student(self, student_id: str) -> None:
        students = [s for s in self._students if s.id != student_id]
        if len(students) == len(self._students):
            return
        self._students = students
        self._commit(Collection.STUDENTS)

    # ---- attendance ------------------------------------------------------

    def clock_in(self, student_id: str) -> AttendanceSession:
        student = self.find_student(student_id)
        group = self.find_group(student.group_id) if student else None
        if not student or not group:
            raise InvalidReferenceError("Student or group information is invalid")

        if self.active_session_for(student_id):
            raise AlreadyActiveError("This student is already clocked in")

        session = AttendanceSession(
            id=self._new_id(),
            student_id=student.id,
            student_name=student.name,
            team_number=group.name,
            start_time=self._clock(),
            end_time=None,
        )
        self._sessions.append(session)
        self._commit(Collection.SESSIONS)
        return session

    def clock_out(self, student_id: str) -> str:
        active = self.active_session_for(student_id)
        if not active:
            raise NoActiveSessionError("No active session found for this student")

        closed = AttendanceSession(
            id=active.id,
            student_id=active.student_id,
            student_name=active.student_name,
            team_number=active.team_number,
            start_time=active.start_time,
            end_time=self._clock(),
        )
        self._sessions = [closed if s.id == active.id else s for s in self._sessions]
        self._commit(Collection.SESSIONS)
        return active.student_id

    def reset_data(self) -> None:
        """Clear every session. Groups and students are kept.

        Callers are expected to have asked for confirmation first.
        """
        self._sessions = []
        self._commit(Collection.SESSIONS)

    # ---- sync ------------------------------------------------------------

    def replace_all(
        self,
        *,
        sessions: Sequence[AttendanceSession],
        groups: Sequence[Group],
        students: Sequence[RegisteredStudent],
        origin: ChangeOrigin = ChangeOrigin.REMOTE,
    ) -> None:
        """Overwrite all three collections wholesale (no merge)."""
        self._sessions = list(sessions)
        self._groups = list(groups)
        self._students = list(students)
        self._commit(Collection.SESSIONS, Collection.GROUPS, Collection.STUDENTS, origin=origin)

    # ---- internals -------------------------------------------------------

    def _items(self, collection: Collection) -> Iterable[Any]:
        return {
            Collection.SESSIONS: self._sessions,
            Collection.GROUPS: self._groups,
            Collection.STUDENTS: self._students,
        }[collection]

    def _commit(self, *collections: Collection, origin: ChangeOrigin = ChangeOrigin.LOCAL) -> None:
        for collection in collections:
            self._store.write(collection.value, [item.to_dict() for item in self._items(collection)])

        changed = frozenset(collections)
        for listener in list(self._listeners):
            listener(changed, origin)

    def _read_collection(self, collection: Collection, factory: Callable[[dict], Any]) -> list:
        raw = self._store.read(collection.value, [])
        if not isinstance(raw, list):
            logger.warning(f"Ignoring malformed local '{collection.value}' (expected a list)")
            return []

        items = []
        for entry in raw:
            try:
                items.append(factory(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed {collection.value} entry: {e}")
        return items
