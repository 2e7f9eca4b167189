from __future__ import annotations

import logging

from flask import Flask, redirect, request, session, url_for

from ..common.web import fail, json_body, ok
from ..container import Container
from ..core.exceptions import (
    AlreadyActiveError,
    CloudConnectionFailed,
    InvalidReferenceError,
    NoActiveSessionError,
)
from ..share.links import credentials_from_query

logger = logging.getLogger(__name__)

CONNECT_MESSAGE_KEY = "connect_message"


def register(app: Flask, container: Container) -> None:
    runner = container.runner
    state = container.state

    def _roster() -> dict:
        groups = [g.to_dict() for g in state.groups]
        students = []
        for s in state.students:
            row = s.to_dict()
            row["teamNumber"] = state.team_name_for(s)
            students.append(row)
        return {"groups": groups, "students": students}

    def _leaderboard() -> dict:
        stats = state.get_aggregated_stats()
        data = container.report_service.build_leaderboard(stats, active=state.active_sessions())
        return {"rows": data.rows, "totalDuration": data.total_duration, "activeCount": data.active_count}

    @app.route("/", methods=["GET"], endpoint="home")
    def home():
        config = credentials_from_query(request.args)
        if config:
            # Opened through a share link: connect, then drop the secret from the URL.
            try:
                runner.run(container.sync_service.connect(config))
            except CloudConnectionFailed as e:
                logger.warning(f"Auto-connect from share link failed: {e}")
                return fail("Connection failed, ask the teacher to regenerate the QR code.", 502)
            session[CONNECT_MESSAGE_KEY] = "Connected to the cloud database."
            return redirect(url_for("home"))

        overview = runner.call(
            lambda: {
                **_roster(),
                "activeSessions": [s.to_dict() for s in state.active_sessions()],
                "leaderboard": _leaderboard(),
                "cloud": container.sync_service.status(),
            }
        )
        return ok(message=session.pop(CONNECT_MESSAGE_KEY, None), **overview)

    @app.route("/api/roster", methods=["GET"], endpoint="api_roster")
    def api_roster():
        return ok(**runner.call(_roster))

    @app.route("/api/leaderboard", methods=["GET"], endpoint="api_leaderboard")
    def api_leaderboard():
        return ok(**runner.call(_leaderboard))

    @app.route("/api/clock-in", methods=["POST"], endpoint="api_clock_in")
    def api_clock_in():
        student_id = str(json_body().get("studentId") or "")
        if not student_id:
            return fail("Please choose a student first")
        try:
            record = runner.call(state.clock_in, student_id)
        except InvalidReferenceError as e:
            return fail(str(e), 404)
        except AlreadyActiveError as e:
            return fail(str(e), 409)
        return ok(session=record.to_dict())

    @app.route("/api/clock-out", methods=["POST"], endpoint="api_clock_out")
    def api_clock_out():
        student_id = str(json_body().get("studentId") or "")
        if not student_id:
            return fail("Please choose a student first")

        def _close() -> dict:
            active = state.active_session_for(student_id)
            state.clock_out(student_id)
            closed = next(s for s in state.sessions if s.id == active.id)
            return {"studentId": student_id, "studentName": closed.student_name, "durationMs": closed.duration_ms(state.now())}

        try:
            result = runner.call(_close)
        except NoActiveSessionError as e:
            return fail(str(e), 409)

        quote = runner.run(container.insights_service.congratulate(result["studentName"], result["durationMs"]))
        return ok(quote=quote, **result)

    @app.route("/api/students/<student_id>/sessions", methods=["GET"], endpoint="api_student_sessions")
    def api_student_sessions(student_id: str):
        rows = runner.call(
            lambda: container.report_service.session_rows(state.sessions_for_student(student_id), now=state.now())
        )
        return ok(sessions=rows)
