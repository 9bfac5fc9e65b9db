# File: nautobot_http_sd/pipeline.py
"""nautobot_http_sd.pipeline: query loading, inventory calls and transformation, run once at startup."""

from __future__ import annotations

import time
from itertools import chain
from typing import List, Tuple

from nautobot_http_sd.config import DiscoveryConfig
from nautobot_http_sd.errors import DecodeError, UpstreamAuthError, UpstreamError
from nautobot_http_sd.inventory.client import InventoryClient
from nautobot_http_sd.inventory.models import Device
from nautobot_http_sd.logger import logger
from nautobot_http_sd.queries import QueryDocument, load_queries
from nautobot_http_sd.snapshot import Snapshot
from nautobot_http_sd.transform import ScrapeTarget, transform

__all__ = ["fetch_document_targets", "collect_targets", "collect_devices", "build_snapshot"]


def _client_for(config: DiscoveryConfig) -> InventoryClient:
    return InventoryClient(config.endpoint, config.token, timeout=config.request_timeout)


def _load_documents(config: DiscoveryConfig) -> List[QueryDocument]:
    documents = load_queries(config.query_dir, config.query_suffix)
    if not documents:
        logger.warning(
            "No *%s query files found in %s; serving an empty target list",
            config.query_suffix,
            config.query_dir,
        )
    return documents


async def fetch_document_targets(
    client: InventoryClient,
    document: QueryDocument,
    config: DiscoveryConfig,
) -> List[ScrapeTarget]:
    """
    Run one query document and transform its devices.

    Inventory failures are logged and yield an empty list so the remaining
    documents still contribute.
    """
    try:
        devices = await client.execute(document.text)
    except UpstreamAuthError as exc:
        logger.error(
            "[%s] %s. Check NAUTOBOT_API_TOKEN. Response: %s",
            document.job_name,
            exc,
            exc.body,
        )
        return []
    except UpstreamError as exc:
        logger.error(
            "[%s] %s. HTTP status: %s. Response: %s",
            document.job_name,
            exc,
            exc.status if exc.status is not None else "n/a",
            exc.body,
        )
        return []
    except DecodeError as exc:
        logger.error("[%s] %s", document.job_name, exc)
        return []

    if not devices:
        logger.info(
            "[%s] No devices found in response. Check your GraphQL query or Nautobot instance.",
            document.job_name,
        )
        return []

    targets = transform(devices, document.job_name, job_from_role=config.job_from_role)
    logger.info(
        "[%s] %d device(s) returned, %d target(s) kept",
        document.job_name,
        len(devices),
        len(targets),
    )
    return targets


async def collect_targets(config: DiscoveryConfig) -> List[ScrapeTarget]:
    """Process every query document in load order and concatenate their targets."""
    documents = _load_documents(config)
    if not documents:
        return []

    async with _client_for(config) as client:
        per_document = [
            await fetch_document_targets(client, document, config) for document in documents
        ]
    return list(chain.from_iterable(per_document))


async def collect_devices(config: DiscoveryConfig) -> List[Tuple[QueryDocument, List[Device]]]:
    """
    Return the raw devices of every query document, for inspection.

    Unlike collect_targets, inventory failures propagate to the caller.
    """
    documents = _load_documents(config)
    if not documents:
        return []

    async with _client_for(config) as client:
        return [(document, await client.execute(document.text)) for document in documents]


async def build_snapshot(config: DiscoveryConfig) -> Snapshot:
    """Build the snapshot served for the lifetime of the process."""
    start = time.monotonic()
    targets = await collect_targets(config)
    snapshot = Snapshot.build(targets, indent=2 if config.pretty else None)
    logger.info(
        "Snapshot built: %d target(s) in %.2f s",
        len(snapshot),
        time.monotonic() - start,
    )
    return snapshot
