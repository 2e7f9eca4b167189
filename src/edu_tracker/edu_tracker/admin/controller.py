from __future__ import annotations

from flask import Flask, session

from ..common.web import ADMIN_SESSION_KEY, admin_required, fail, json_body, ok
from ..container import Container
from ..core.exceptions import AuthenticationError, ValidationError


def register(app: Flask, container: Container) -> None:
    gate = container.admin_gate

    @app.route("/admin/login", methods=["POST"], endpoint="admin_login")
    def admin_login():
        password = str(json_body().get("password") or "")
        try:
            gate.authenticate(password)
        except AuthenticationError as e:
            return fail(str(e), 401)

        # Not permanent: the unlock ends with the browser session.
        session.permanent = False
        session[ADMIN_SESSION_KEY] = True
        return ok(isDefaultPassword=gate.is_default)

    @app.route("/admin/logout", methods=["POST"], endpoint="admin_logout")
    def admin_logout():
        session.pop(ADMIN_SESSION_KEY, None)
        return ok()

    @app.route("/admin/password", methods=["POST"], endpoint="admin_change_password")
    @admin_required
    def admin_change_password():
        data = json_body()
        try:
            gate.change_password(
                current=str(data.get("current") or ""),
                new=str(data.get("new") or ""),
                confirm=str(data.get("confirm") or ""),
            )
        except AuthenticationError as e:
            return fail(str(e), 403)
        except ValidationError as e:
            return fail(str(e))
        return ok(message="Password updated")
