from __future__ import annotations

from datetime import datetime

from flask import Flask

from ..common.web import admin_required, fail, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    runner = container.runner
    state = container.state
    reports = container.report_service

    @app.route("/teacher/stats", methods=["GET"], endpoint="teacher_stats")
    @admin_required
    def teacher_stats():
        def _build() -> dict:
            data = reports.build_leaderboard(state.get_aggregated_stats(), active=state.active_sessions())
            return {"rows": data.rows, "totalDuration": data.total_duration, "activeCount": data.active_count}

        return ok(**runner.call(_build))

    @app.route("/teacher/stats.csv", methods=["GET"], endpoint="teacher_stats_csv")
    @admin_required
    def teacher_stats_csv():
        csv_bytes = runner.call(lambda: reports.stats_csv(state.get_aggregated_stats()))
        filename = f"attendance_{datetime.now().strftime('%Y%m%d_%H%M')}.csv"
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/teacher/sessions", methods=["GET"], endpoint="teacher_sessions")
    @admin_required
    def teacher_sessions():
        def _rows() -> list[dict]:
            ordered = sorted(state.sessions, key=lambda s: s.start_time, reverse=True)
            return reports.session_rows(ordered, now=state.now())

        return ok(sessions=runner.call(_rows))

    @app.route("/teacher/reset", methods=["POST"], endpoint="teacher_reset")
    @admin_required
    def teacher_reset():
        if json_body().get("confirm") is not True:
            return fail("Confirm clearing every attendance record (groups and students are kept)")
        runner.call(state.reset_data)
        return ok(message="All attendance records cleared")

    @app.route("/teacher/analysis", methods=["POST"], endpoint="teacher_analysis")
    @admin_required
    def teacher_analysis():
        stats = runner.call(state.get_aggregated_stats)
        report = runner.run(container.insights_service.analyze(stats))
        return ok(report=report)
