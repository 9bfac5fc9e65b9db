"""
Snapshot of the served target list.

A Snapshot is built once, after every query document has been processed,
and is never mutated afterwards. Request handlers share it without locking.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from nautobot_http_sd.transform import ScrapeTarget


@dataclass(frozen=True)
class Snapshot:
    """Target groups plus their pre-serialized JSON body."""

    targets: Tuple[ScrapeTarget, ...]
    body: bytes

    @classmethod
    def build(cls, targets: Iterable[ScrapeTarget], indent: Optional[int] = 2) -> Snapshot:
        """Serialize *targets* once. An empty iterable gives ``[]``."""
        frozen = tuple(targets)
        payload = [t.to_dict() for t in frozen]
        text = json.dumps(payload, ensure_ascii=False, indent=indent)
        return cls(targets=frozen, body=text.encode("utf-8"))

    @classmethod
    def empty(cls) -> Snapshot:
        return cls.build(())

    def __len__(self) -> int:
        return len(self.targets)
