# nautobot_http_sd/queries.py
"""
Discovery of GraphQL query documents on disk.

Each ``<job>.gql`` file in the query directory becomes one QueryDocument.
The file name without its suffix is the document's job name.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from nautobot_http_sd.errors import QueryDirectoryError
from nautobot_http_sd.logger import logger

__all__ = ("QueryDocument", "load_queries")


@dataclass(frozen=True, slots=True)
class QueryDocument:
    """One GraphQL query read from disk."""

    job_name: str
    text: str
    path: Path


def load_queries(directory: Union[str, Path], suffix: str = ".gql") -> List[QueryDocument]:
    """
    Read every query file in *directory* whose name ends with *suffix*.

    Subdirectories and other files are ignored. Documents come back sorted by
    file name. A directory that cannot be listed raises QueryDirectoryError;
    a file that cannot be read is logged and skipped.
    """
    root = Path(directory)
    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise QueryDirectoryError(f"Cannot read query directory {root}: {exc}") from exc

    documents: List[QueryDocument] = []
    for entry in entries:
        if not entry.name.endswith(suffix) or not entry.is_file():
            continue
        try:
            text = entry.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Skipping query file %s: %s", entry, exc)
            continue
        job_name = entry.name[: -len(suffix)]
        documents.append(QueryDocument(job_name=job_name, text=text, path=entry))
        logger.debug("Loaded query %s from %s", job_name, entry)

    logger.info("Loaded %d query document(s) from %s", len(documents), root)
    return documents
