from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.edu_tracker.edu_tracker.attendance.service import AttendanceStateManager
from src.edu_tracker.edu_tracker.storage.json_store import JsonFileStore

DEMO_ROSTER = {
    "Team A": ["Alice", "Bob", "Chen"],
    "Team B": ["Dana", "Emeka"],
}


def seed(state: AttendanceStateManager, roster: dict[str, list[str]] = DEMO_ROSTER) -> int:
    """Add the demo groups/students that are not there yet. Returns students added."""
    added = 0
    for group_name, names in roster.items():
        group = next((g for g in state.groups if g.name == group_name), None) or state.add_group(group_name)
        existing = {s.name for s in state.students if s.group_id == group.id}
        for name in names:
            if name not in existing:
                state.add_student(name, group.id)
                added += 1
    return added


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    store = JsonFileStore(settings.DATA_DIR)
    state = AttendanceStateManager(store)
    state.load()

    added = seed(state)
    print(f"OK: Seeded {added} students -> {store.data_dir}")


if __name__ == "__main__":
    main()
