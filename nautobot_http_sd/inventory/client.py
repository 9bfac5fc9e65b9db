from __future__ import annotations

import asyncio
from typing import List, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout
from pydantic import ValidationError

from nautobot_http_sd.errors import DecodeError, UpstreamAuthError, UpstreamError
from nautobot_http_sd.inventory.models import Device, GraphQLResponse
from nautobot_http_sd.logger import logger

__all__ = ("InventoryClient",)


class InventoryClient:
    """
    GraphQL client for Nautobot.

    One POST per query, no retries. Use as an async context manager so the
    underlying aiohttp session is closed::

        async with InventoryClient(url, token) as client:
            devices = await client.execute(query_text)
    """

    def __init__(self, endpoint: str, token: str, timeout: Optional[float] = None) -> None:
        self.endpoint = endpoint
        self._token = token
        self.timeout = timeout
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> InventoryClient:
        kwargs = {}
        if self.timeout is not None:
            kwargs["timeout"] = ClientTimeout(total=self.timeout)
        self.session = ClientSession(
            headers={
                "Authorization": f"Token {self._token}",
                "Content-Type": "application/json",
            },
            raise_for_status=False,
            **kwargs,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def execute(self, query: str) -> List[Device]:
        """
        Send *query* and return the decoded devices.

        Raises UpstreamAuthError on HTTP 401, UpstreamError on any other
        non-200 status or transport failure, DecodeError when the body does
        not match the expected schema.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")

        try:
            async with self.session.post(self.endpoint, json={"query": query}) as resp:
                status = resp.status
                reason = resp.reason or ""
                raw = await resp.read()
        except (ClientError, asyncio.TimeoutError) as exc:
            raise UpstreamError(f"Request to {self.endpoint} failed: {exc!r}") from exc

        if status != 200:
            body = raw.decode("utf-8", errors="replace")
            if status == 401:
                raise UpstreamAuthError("Invalid token provided (HTTP 401)", body=body)
            raise UpstreamError(
                f"Unexpected HTTP status {status} {reason}".rstrip(),
                status=status,
                body=body,
            )

        try:
            response = GraphQLResponse.model_validate_json(raw)
        except ValidationError as exc:
            raise DecodeError(f"Cannot decode response from {self.endpoint}: {exc}") from exc

        if response.errors:
            messages = "; ".join(str(err.get("message", err)) for err in response.errors)
            logger.warning("GraphQL errors from %s: %s", self.endpoint, messages)

        return response.devices
