from __future__ import annotations

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from src.edu_tracker.edu_tracker.core.exceptions import CloudConnectionFailed, CloudSyncFailed
from src.edu_tracker.edu_tracker.sync.client import JsonBinClient
from src.edu_tracker.edu_tracker.sync.schema import RemoteConfig

GOOD = RemoteConfig(bin_id="bin-1", api_key="secret")


def _bin_app(bins: dict) -> web.Application:
    async def latest(request: web.Request):
        if request.headers.get("X-Master-Key") != "secret":
            return web.json_response({"message": "Invalid X-Master-Key"}, status=401)
        bin_id = request.match_info["bin_id"]
        if bin_id not in bins:
            return web.json_response({"message": "Bin not found"}, status=404)
        assert "t" in request.query
        return web.json_response({"record": bins[bin_id], "metadata": {"id": bin_id}})

    async def replace(request: web.Request):
        bin_id = request.match_info["bin_id"]
        if bin_id == "broken":
            return web.Response(status=500, text="boom")
        bins[bin_id] = await request.json()
        return web.json_response({"record": bins[bin_id], "metadata": {"parentId": bin_id}})

    app = web.Application()
    app.router.add_get("/v3/b/{bin_id}/latest", latest)
    app.router.add_put("/v3/b/{bin_id}", replace)
    return app


def _run(bins: dict, body):
    async def scenario():
        server = test_utils.TestServer(_bin_app(bins))
        await server.start_server()
        client = JsonBinClient(str(server.make_url("/v3/b")), timeout=5)
        try:
            return await body(client)
        finally:
            await client.close()
            await server.close()

    return asyncio.run(scenario())


def test_replace_then_fetch_latest():
    bins = {"bin-1": {}}
    payload = {"groups": [{"id": "g1", "name": "Team A"}], "sessions": [], "students": [], "updatedAt": 1}

    async def body(client):
        await client.replace(GOOD, payload)
        return await client.fetch_latest(GOOD)

    assert _run(bins, body) == payload


def test_unauthorized_key():
    async def body(client):
        await client.fetch_latest(RemoteConfig(bin_id="bin-1", api_key="wrong"))

    with pytest.raises(CloudConnectionFailed) as exc:
        _run({"bin-1": {}}, body)

    assert exc.value.status == 401
    assert "Unauthorized" in str(exc.value)


def test_unknown_bin():
    async def body(client):
        await client.fetch_latest(RemoteConfig(bin_id="nope", api_key="secret"))

    with pytest.raises(CloudConnectionFailed) as exc:
        _run({}, body)

    assert exc.value.status == 404
    assert str(exc.value) == "Bin ID not found"


def test_push_server_error():
    async def body(client):
        await client.replace(RemoteConfig(bin_id="broken", api_key="secret"), {"groups": []})

    with pytest.raises(CloudSyncFailed) as exc:
        _run({}, body)

    assert exc.value.status == 500


def test_unreachable_host_is_a_connection_failure():
    async def scenario():
        client = JsonBinClient("http://127.0.0.1:9/v3/b", timeout=2)
        try:
            await client.fetch_latest(GOOD)
        finally:
            await client.close()

    with pytest.raises(CloudConnectionFailed):
        asyncio.run(scenario())


def _html_app() -> web.Application:
    async def portal(request: web.Request):
        return web.Response(status=200, text="<html>captive portal</html>", content_type="text/html")

    app = web.Application()
    app.router.add_get("/v3/b/{bin_id}/latest", portal)
    app.router.add_put("/v3/b/{bin_id}", portal)
    return app


def _run_app(app: web.Application, body):
    async def scenario():
        server = test_utils.TestServer(app)
        await server.start_server()
        client = JsonBinClient(str(server.make_url("/v3/b")), timeout=5)
        try:
            return await body(client)
        finally:
            await client.close()
            await server.close()

    return asyncio.run(scenario())


def test_html_body_on_fetch_is_a_connection_failure():
    async def body(client):
        await client.fetch_latest(GOOD)

    with pytest.raises(CloudConnectionFailed) as exc:
        _run_app(_html_app(), body)

    assert exc.value.status == 200


def test_html_body_on_push_is_a_sync_failure():
    async def body(client):
        await client.replace(GOOD, {"groups": []})

    with pytest.raises(CloudSyncFailed) as exc:
        _run_app(_html_app(), body)

    assert exc.value.status == 200
