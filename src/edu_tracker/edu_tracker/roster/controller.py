from __future__ import annotations

from flask import Flask

from ..common.web import admin_required, fail, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    runner = container.runner
    state = container.state

    @app.route("/teacher/groups", methods=["GET"], endpoint="teacher_groups")
    @admin_required
    def teacher_groups():
        groups = runner.call(lambda: [g.to_dict() for g in state.groups])
        return ok(groups=groups)

    @app.route("/teacher/groups", methods=["POST"], endpoint="teacher_add_group")
    @admin_required
    def teacher_add_group():
        group = runner.call(state.add_group, str(json_body().get("name") or ""))
        if group is None:
            return fail("Group name is required")
        return ok(group=group.to_dict())

    @app.route("/teacher/groups/<group_id>", methods=["DELETE"], endpoint="teacher_remove_group")
    @admin_required
    def teacher_remove_group(group_id: str):
        runner.call(state.remove_group, group_id)
        return ok()

    @app.route("/teacher/students", methods=["GET"], endpoint="teacher_students")
    @admin_required
    def teacher_students():
        def _rows() -> list[dict]:
            rows = []
            for s in state.students:
                row = s.to_dict()
                row["teamNumber"] = state.team_name_for(s)
                rows.append(row)
            return rows

        return ok(students=runner.call(_rows))

    @app.route("/teacher/students", methods=["POST"], endpoint="teacher_add_student")
    @admin_required
    def teacher_add_student():
        data = json_body()
        group_id = str(data.get("groupId") or "")
        if not group_id:
            return fail("Please select a group")
        student = runner.call(state.add_student, str(data.get("name") or ""), group_id)
        if student is None:
            return fail("Student name is required")
        return ok(student=student.to_dict())

    @app.route("/teacher/students/<student_id>", methods=["DELETE"], endpoint="teacher_remove_student")
    @admin_required
    def teacher_remove_student(student_id: str):
        runner.call(state.remove_student, student_id)
        return ok()
