# File: tests/conftest.py
import json
import logging
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from aiohttp import web

from nautobot_http_sd.config import DiscoveryConfig
from nautobot_http_sd.logger import LOGGER_NAME, init_logging

NO_DEVICES = json.dumps({"data": {"devices": []}})


class FakeNautobot:
    """
    Stand-in for the Nautobot GraphQL endpoint.

    Replies can be registered per query text; anything else gets the default
    reply. Every request is recorded.
    """

    def __init__(self) -> None:
        self.url = ""
        self.default: Tuple[int, str] = (200, NO_DEVICES)
        self.replies: Dict[str, Tuple[int, str]] = {}
        self.requests: List[Dict[str, Any]] = []

    def reply(
        self,
        status: int = 200,
        *,
        body: Any = None,
        text: Optional[str] = None,
        query: Optional[str] = None,
    ) -> None:
        payload = text if text is not None else json.dumps(body)
        if query is None:
            self.default = (status, payload)
        else:
            self.replies[query] = (status, payload)

    async def handle(self, request: web.Request) -> web.Response:
        payload = await request.json()
        self.requests.append(
            {
                "method": request.method,
                "authorization": request.headers.get("Authorization"),
                "content_type": request.content_type,
                "payload": payload,
            }
        )
        status, text = self.replies.get(payload.get("query"), self.default)
        return web.Response(status=status, text=text, content_type="application/json")


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI tests reconfigure the project logger; restore a plain one afterwards."""
    yield
    init_logging()


@pytest.fixture()
def log_records(caplog):
    """Route the project logger (which does not propagate) into caplog."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
    yield caplog
    lg.removeHandler(caplog.handler)


@pytest_asyncio.fixture
async def nautobot() -> AsyncIterator[FakeNautobot]:
    fake = FakeNautobot()
    app = web.Application()
    app.router.add_post("/api/graphql/", fake.handle)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = runner.addresses[0][1]
    fake.url = f"http://127.0.0.1:{port}/api/graphql/"
    try:
        yield fake
    finally:
        await runner.cleanup()


@pytest.fixture()
def query_dir(tmp_path) -> Path:
    """Directory holding a single job1.gql query."""
    qdir = tmp_path / "graphql_queries"
    qdir.mkdir()
    (qdir / "job1.gql").write_text("query { devices { name } }", encoding="utf-8")
    return qdir


@pytest.fixture()
def make_config(query_dir):
    """Return a factory for DiscoveryConfig pointing at a given Nautobot URL."""

    def _make(url: str, **overrides: Any) -> DiscoveryConfig:
        fields: Dict[str, Any] = {
            "nautobot_url": url,
            "api_token": "secret-token",
            "query_dir": query_dir,
        }
        fields.update(overrides)
        return DiscoveryConfig(**fields)

    return _make
