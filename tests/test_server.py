# File: tests/test_server.py
from __future__ import annotations

import asyncio
import json
import socket

import aiohttp
import pytest
from nautobot_http_sd.errors import ServerStartupError
from nautobot_http_sd.server import SNAPSHOT_KEY, create_app, serve, start_site
from nautobot_http_sd.snapshot import Snapshot
from nautobot_http_sd.transform import DATACENTER_LABEL, JOB_LABEL, ScrapeTarget


def make_snapshot(indent=2) -> Snapshot:
    return Snapshot.build(
        [
            ScrapeTarget(("192.0.2.1",), {JOB_LABEL: "switch", DATACENTER_LABEL: "dc1"}),
            ScrapeTarget(("192.0.2.2",), {JOB_LABEL: "router", DATACENTER_LABEL: "dc2"}),
        ],
        indent=indent,
    )


def test_snapshot_serialization():
    snap = make_snapshot()
    assert len(snap) == 2
    assert json.loads(snap.body) == [
        {
            "targets": ["192.0.2.1"],
            "labels": {"__meta_prometheus_job": "switch", "__meta_datacenter": "dc1"},
        },
        {
            "targets": ["192.0.2.2"],
            "labels": {"__meta_prometheus_job": "router", "__meta_datacenter": "dc2"},
        },
    ]
    assert snap.body.startswith(b"[\n  {")


def test_compact_snapshot():
    assert b"\n" not in make_snapshot(indent=None).body


def test_empty_snapshot_is_an_empty_array():
    assert Snapshot.empty().body == b"[]"
    assert Snapshot.build([]).body == b"[]"


def test_snapshot_is_immutable():
    snap = make_snapshot()
    with pytest.raises(AttributeError):
        snap.body = b"[]"


def test_app_holds_snapshot():
    snap = make_snapshot()
    app = create_app(snap)
    assert app[SNAPSHOT_KEY] is snap


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    "method,path",
    [("GET", "/"), ("GET", "/targets"), ("GET", "/a/b/c?x=1"), ("POST", "/"), ("PUT", "/sd")],
)
async def test_every_request_gets_the_snapshot(method, path):
    snap = make_snapshot()
    runner = await start_site(snap, "127.0.0.1", 0)
    port = runner.addresses[0][1]
    try:
        async with aiohttp.ClientSession() as session:
            async with session.request(method, f"http://127.0.0.1:{port}{path}", data=b"ignored") as resp:
                assert resp.status == 200
                assert resp.content_type == "application/json"
                assert await resp.read() == snap.body
    finally:
        await runner.cleanup()


@pytest.mark.asyncio()
async def test_empty_snapshot_served_as_empty_array():
    runner = await start_site(Snapshot.empty(), "127.0.0.1", 0)
    port = runner.addresses[0][1]
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(f"http://127.0.0.1:{port}/") as resp:
                assert resp.status == 200
                assert await resp.json() == []
    finally:
        await runner.cleanup()


@pytest.mark.asyncio()
async def test_port_in_use_is_fatal():
    with socket.socket() as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen()
        port = busy.getsockname()[1]
        with pytest.raises(ServerStartupError):
            await start_site(Snapshot.empty(), "127.0.0.1", port)


@pytest.mark.asyncio()
async def test_serve_runs_until_cancelled():
    with socket.socket() as probe:
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]

    task = asyncio.create_task(serve(make_snapshot(), "127.0.0.1", port))
    try:
        body = None
        for _ in range(50):
            try:
                async with aiohttp.ClientSession() as session:
                    async with session.get(f"http://127.0.0.1:{port}/") as resp:
                        body = await resp.json()
                break
            except aiohttp.ClientConnectionError:
                await asyncio.sleep(0.05)
        assert body is not None and len(body) == 2
    finally:
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
