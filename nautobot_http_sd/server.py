"""
HTTP service discovery endpoint.

Every request, whatever its path or method, receives the snapshot body with
``Content-Type: application/json`` and status 200.
"""
from __future__ import annotations

import asyncio

from aiohttp import web

from nautobot_http_sd.errors import ServerStartupError
from nautobot_http_sd.logger import logger
from nautobot_http_sd.snapshot import Snapshot

__all__ = ["SNAPSHOT_KEY", "create_app", "start_site", "serve"]

SNAPSHOT_KEY = web.AppKey("snapshot", Snapshot)


async def handle_discovery(request: web.Request) -> web.Response:
    snapshot = request.app[SNAPSHOT_KEY]
    return web.Response(body=snapshot.body, content_type="application/json")


def create_app(snapshot: Snapshot) -> web.Application:
    """Build the aiohttp application serving *snapshot*."""
    app = web.Application()
    app[SNAPSHOT_KEY] = snapshot
    app.router.add_route("*", "/{tail:.*}", handle_discovery)
    return app


async def start_site(snapshot: Snapshot, host: str, port: int) -> web.AppRunner:
    """
    Bind the listener and return the running AppRunner.

    The caller owns the runner and must call ``await runner.cleanup()``.
    Port 0 picks a free port; ``runner.addresses`` reports the bound one.
    """
    runner = web.AppRunner(create_app(snapshot))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    try:
        await site.start()
    except OSError as exc:
        await runner.cleanup()
        raise ServerStartupError(f"Cannot listen on {host}:{port}: {exc}") from exc
    return runner


async def serve(snapshot: Snapshot, host: str, port: int) -> None:
    """Serve *snapshot* until the task is cancelled."""
    runner = await start_site(snapshot, host, port)
    logger.info("Serving %d target(s) on %s:%d", len(snapshot), host, port)
    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
