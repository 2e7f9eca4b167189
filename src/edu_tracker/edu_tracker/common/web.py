from __future__ import annotations

from functools import wraps
from typing import Any

from flask import jsonify, request, session

ADMIN_SESSION_KEY = "admin_unlocked"


def admin_required(view):
    """Teacher-only routes. The unlock lives in the browser session cookie."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get(ADMIN_SESSION_KEY):
            return fail("Teacher password required", 401)
        return view(*args, **kwargs)

    return wrapper


def fail(message: str, status: int = 400):
    return jsonify({"success": False, "message": message}), status


def ok(**payload: Any):
    return jsonify({"success": True, **payload}), 200


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
