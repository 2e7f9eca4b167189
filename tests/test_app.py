from __future__ import annotations

import pytest

from src.edu_tracker.edu_tracker.core.exceptions import CloudConnectionFailed
from src.edu_tracker.edu_tracker.main import create_app


class FakeBlobStore:
    def __init__(self, record=None):
        self.record = record
        self.fetch_error = None
        self.replaced: list[dict] = []

    async def fetch_latest(self, config):
        if self.fetch_error:
            raise self.fetch_error
        return self.record

    async def replace(self, config, payload):
        self.replaced.append(payload)
        self.record = payload
        return {"record": payload}

    async def close(self):
        pass


@pytest.fixture()
def remote():
    return FakeBlobStore()


@pytest.fixture()
def app(tmp_path, monkeypatch, remote):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app({"DATA_DIR": str(tmp_path), "POLL_INTERVAL_SECONDS": 60}, blob_client=remote)
    yield app
    app.extensions["edu_tracker"].shutdown()


@pytest.fixture()
def client(app):
    return app.test_client()


def _login(client, password="admin"):
    return client.post("/admin/login", json={"password": password})


def _roster(client):
    _login(client)
    group = client.post("/teacher/groups", json={"name": "Team A"}).get_json()["group"]
    student = client.post("/teacher/students", json={"name": "Alice", "groupId": group["id"]}).get_json()["student"]
    return group, student


def test_home_overview(client):
    res = client.get("/")

    body = res.get_json()
    assert res.status_code == 200
    assert body["success"] is True
    assert body["groups"] == []
    assert body["cloud"]["status"] == "disconnected"


def test_teacher_routes_are_locked(client):
    assert client.get("/teacher/stats").status_code == 401
    assert client.post("/teacher/groups", json={"name": "x"}).status_code == 401
    assert client.post("/cloud/connect", json={"binId": "b", "apiKey": "k"}).status_code == 401


def test_login_and_logout(client):
    assert _login(client, "wrong").status_code == 401

    res = _login(client)
    assert res.status_code == 200
    assert res.get_json()["isDefaultPassword"] is True
    assert client.get("/teacher/groups").status_code == 200

    client.post("/admin/logout")
    assert client.get("/teacher/groups").status_code == 401


def test_change_password(client):
    _login(client)

    short = client.post("/admin/password", json={"current": "admin", "new": "ab", "confirm": "ab"})
    wrong = client.post("/admin/password", json={"current": "x", "new": "abcd", "confirm": "abcd"})
    good = client.post("/admin/password", json={"current": "admin", "new": "abcd", "confirm": "abcd"})

    assert short.status_code == 400
    assert wrong.status_code == 403
    assert good.status_code == 200
    client.post("/admin/logout")
    assert _login(client, "admin").status_code == 401
    assert _login(client, "abcd").get_json()["isDefaultPassword"] is False


def test_roster_validation(client):
    _login(client)

    assert client.post("/teacher/groups", json={"name": "  "}).status_code == 400
    assert client.post("/teacher/students", json={"name": "Alice"}).status_code == 400
    assert client.post("/teacher/students", json={"name": " ", "groupId": "g"}).status_code == 400


def test_clock_in_and_out_flow(client):
    group, student = _roster(client)

    res = client.post("/api/clock-in", json={"studentId": student["id"]})
    assert res.status_code == 200
    assert res.get_json()["session"]["teamNumber"] == "Team A"

    assert client.post("/api/clock-in", json={"studentId": student["id"]}).status_code == 409
    assert client.get("/").get_json()["leaderboard"]["activeCount"] == 1

    res = client.post("/api/clock-out", json={"studentId": student["id"]})
    body = res.get_json()
    assert res.status_code == 200
    assert body["studentName"] == "Alice"
    assert body["durationMs"] >= 0
    assert body["quote"] == "Great work today!"

    assert client.post("/api/clock-out", json={"studentId": student["id"]}).status_code == 409
    sessions = client.get(f"/api/students/{student['id']}/sessions").get_json()["sessions"]
    assert len(sessions) == 1
    assert sessions[0]["active"] is False


def test_clock_in_errors(client):
    assert client.post("/api/clock-in", json={}).status_code == 400
    assert client.post("/api/clock-in", json={"studentId": "ghost"}).status_code == 404


def test_remove_group_keeps_history(client):
    group, student = _roster(client)
    client.post("/api/clock-in", json={"studentId": student["id"]})
    client.post("/api/clock-out", json={"studentId": student["id"]})

    assert client.delete(f"/teacher/groups/{group['id']}").status_code == 200

    roster = client.get("/api/roster").get_json()
    assert roster["groups"] == []
    assert roster["students"] == []
    rows = client.get("/teacher/stats").get_json()["rows"]
    assert rows[0]["studentName"] == "Alice"
    assert rows[0]["teamNumber"] == "Team A"


def test_reset_requires_confirmation(client):
    group, student = _roster(client)
    client.post("/api/clock-in", json={"studentId": student["id"]})

    assert client.post("/teacher/reset", json={}).status_code == 400
    assert len(client.get("/teacher/sessions").get_json()["sessions"]) == 1

    assert client.post("/teacher/reset", json={"confirm": True}).status_code == 200
    assert client.get("/teacher/sessions").get_json()["sessions"] == []
    assert len(client.get("/api/roster").get_json()["students"]) == 1


def test_stats_csv_download(client):
    _roster(client)

    res = client.get("/teacher/stats.csv")

    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    assert "attachment" in res.headers["Content-Disposition"]
    assert "Alice" in res.data.decode("utf-8-sig")


def test_analysis_without_key(client):
    _login(client)

    res = client.post("/teacher/analysis")

    assert res.get_json()["report"] == "Cannot reach the AI service, please check the API key."


def test_cloud_connect_share_and_disconnect(client, remote):
    _roster(client)

    assert client.post("/cloud/connect", json={"binId": "", "apiKey": "k"}).status_code == 400
    res = client.post("/cloud/connect", json={"binId": "bin-1", "apiKey": "key-1"})
    assert res.status_code == 200
    assert res.get_json()["status"] == "idle"
    assert res.get_json()["binId"] == "bin-1"
    # empty bin was seeded from the local roster
    assert remote.replaced[0]["groups"][0]["name"] == "Team A"

    share = client.get("/cloud/share").get_json()
    assert share["withCredentials"] is True
    assert "binId=bin-1" in share["url"]
    qr = client.get("/cloud/share/qr.png")
    assert qr.mimetype == "image/png"

    assert client.post("/cloud/refresh").status_code == 200
    assert client.post("/cloud/disconnect").get_json()["status"] == "disconnected"
    assert client.post("/cloud/refresh").status_code == 409


def test_cloud_connect_failure(client, remote):
    _login(client)
    remote.fetch_error = CloudConnectionFailed("Invalid API key (Unauthorized)", status=401)

    res = client.post("/cloud/connect", json={"binId": "bin-1", "apiKey": "bad"})

    assert res.status_code == 502
    assert res.get_json()["message"] == "Invalid API key (Unauthorized)"
    assert client.get("/cloud/status").get_json()["status"] == "error"


def test_share_link_connects_and_strips_credentials(client, remote):
    remote.record = {"groups": [{"id": "g1", "name": "Team A"}], "updatedAt": 10}

    res = client.get("/?binId=bin-1&apiKey=key-1")

    assert res.status_code == 302
    assert "apiKey" not in res.headers["Location"]
    body = client.get("/").get_json()
    assert body["message"] == "Connected to the cloud database."
    assert body["groups"] == [{"id": "g1", "name": "Team A"}]
    assert body["cloud"]["binId"] == "bin-1"


def test_share_link_connect_failure(client, remote):
    remote.fetch_error = CloudConnectionFailed("Bin ID not found", status=404)

    res = client.get("/?binId=bin-1&apiKey=key-1")

    assert res.status_code == 502
    assert client.get("/cloud/status").get_json()["status"] == "error"


def test_state_survives_restart(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    overrides = {"DATA_DIR": str(tmp_path), "POLL_INTERVAL_SECONDS": 60}

    first = create_app(overrides, blob_client=FakeBlobStore())
    try:
        _roster(first.test_client())
    finally:
        first.extensions["edu_tracker"].shutdown()

    second = create_app(overrides, blob_client=FakeBlobStore())
    try:
        roster = second.test_client().get("/api/roster").get_json()
    finally:
        second.extensions["edu_tracker"].shutdown()

    assert [g["name"] for g in roster["groups"]] == ["Team A"]
    assert roster["students"][0]["teamNumber"] == "Team A"


def test_failed_refresh_keeps_cloud_link(client, remote):
    _login(client)
    client.post("/cloud/connect", json={"binId": "bin-1", "apiKey": "key-1"})
    remote.fetch_error = CloudConnectionFailed("Request timed out")

    res = client.post("/cloud/refresh")

    assert res.status_code == 502
    status = client.get("/cloud/status").get_json()
    assert status["status"] == "error"
    assert status["binId"] == "bin-1"
