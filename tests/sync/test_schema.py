from __future__ import annotations

from src.edu_tracker.edu_tracker.sync.schema import RemoteConfig, parse_remote_record


def test_parse_full_document():
    record = {
        "groups": [{"id": "g1", "name": "Team A"}],
        "students": [{"id": "s1", "name": "Alice", "groupId": "g1"}],
        "sessions": [
            {
                "id": "x1",
                "studentId": "s1",
                "studentName": "Alice",
                "teamNumber": "Team A",
                "startTime": 1000,
                "endTime": None,
            }
        ],
        "updatedAt": 5000,
        "somethingElse": "ignored",
    }

    snap = parse_remote_record(record)

    assert snap.updated_at == 5000
    assert snap.groups[0].name == "Team A"
    assert snap.students[0].group_id == "g1"
    assert snap.sessions[0].is_active
    assert snap.sessions[0].team_number == "Team A"


def test_groups_are_mandatory():
    assert parse_remote_record({"sessions": [], "students": [], "updatedAt": 1}) is None


def test_missing_optional_collections_default_to_empty():
    snap = parse_remote_record({"groups": []})

    assert snap.sessions == []
    assert snap.students == []
    assert snap.updated_at is None


def test_empty_or_non_dict_records_are_rejected():
    assert parse_remote_record(None) is None
    assert parse_remote_record({}) is None
    assert parse_remote_record([{"groups": []}]) is None


def test_one_bad_session_rejects_the_document():
    record = {
        "groups": [{"id": "g1", "name": "Team A"}],
        "sessions": [{"id": "x1", "studentId": "s1"}],
    }

    assert parse_remote_record(record) is None


def test_remote_config_from_dict_requires_both_fields():
    assert RemoteConfig.from_dict({"binId": " abc ", "apiKey": "k"}) == RemoteConfig(bin_id="abc", api_key="k")
    assert RemoteConfig.from_dict({"binId": "abc", "apiKey": "  "}) is None
    assert RemoteConfig.from_dict("abc") is None
    assert RemoteConfig.from_dict(None) is None
