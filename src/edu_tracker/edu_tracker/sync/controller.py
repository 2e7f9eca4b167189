from __future__ import annotations

import logging

from flask import Flask, request, send_file

from ..common.web import admin_required, fail, json_body, ok
from ..container import Container
from ..core.exceptions import CloudConnectionFailed
from ..share.links import build_share_url, render_qr_png
from .schema import RemoteConfig

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    runner = container.runner
    sync = container.sync_service

    def _share_url() -> str:
        return build_share_url(request.url_root, sync.config)

    @app.route("/cloud/status", methods=["GET"], endpoint="cloud_status")
    def cloud_status():
        return ok(**runner.call(sync.status))

    @app.route("/cloud/connect", methods=["POST"], endpoint="cloud_connect")
    @admin_required
    def cloud_connect():
        config = RemoteConfig.from_dict(json_body())
        if config is None:
            return fail("Bin ID and API key are required")
        try:
            runner.run(sync.connect(config))
        except CloudConnectionFailed as e:
            return fail(str(e), 502)
        return ok(**runner.call(sync.status))

    @app.route("/cloud/refresh", methods=["POST"], endpoint="cloud_refresh")
    def cloud_refresh():
        if not sync.is_configured:
            return fail("Cloud sync is not configured", 409)
        try:
            runner.run(sync.refresh())
        except CloudConnectionFailed as e:
            return fail(str(e), 502)
        return ok(**runner.call(sync.status))

    @app.route("/cloud/disconnect", methods=["POST"], endpoint="cloud_disconnect")
    @admin_required
    def cloud_disconnect():
        runner.run(sync.disconnect())
        return ok(**runner.call(sync.status))

    @app.route("/cloud/share", methods=["GET"], endpoint="cloud_share")
    @admin_required
    def cloud_share():
        return ok(url=_share_url(), withCredentials=sync.is_configured)

    @app.route("/cloud/share/qr.png", methods=["GET"], endpoint="cloud_share_qr")
    @admin_required
    def cloud_share_qr():
        try:
            buf = render_qr_png(_share_url())
        except Exception:
            logger.exception("QR rendering failed")
            return fail("Could not render the QR code", 500)
        return send_file(buf, mimetype="image/png")
