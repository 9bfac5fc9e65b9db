# File: nautobot_http_sd/transform.py
"""nautobot_http_sd.transform: Nautobot devices to Prometheus HTTP SD target groups."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from nautobot_http_sd.inventory.models import Device

JOB_LABEL = "__meta_prometheus_job"
DATACENTER_LABEL = "__meta_datacenter"

_PREFIX_LENGTH_RE = re.compile(r"/[0-9]+.*")


@dataclass(frozen=True, slots=True)
class ScrapeTarget:
    """One Prometheus target group: addresses plus the labels attached to them."""

    targets: Tuple[str, ...]
    labels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(self.targets))
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))

    def __hash__(self) -> int:
        return hash((self.targets, tuple(sorted(self.labels.items()))))

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape expected by Prometheus http_sd_configs."""
        return {"targets": list(self.targets), "labels": dict(self.labels)}


def strip_prefix_length(address: str) -> str:
    """Drop a CIDR suffix: ``10.0.0.5/24`` -> ``10.0.0.5``. Bare addresses pass through."""
    return _PREFIX_LENGTH_RE.sub("", address)


def is_scrapable(device: Device) -> bool:
    """A device needs a primary IPv4 address and a named role to become a target."""
    return (
        device.primary_ip4 is not None
        and bool(device.primary_ip4.address)
        and device.role is not None
        and bool(device.role.name)
    )


def to_target(device: Device, job_label: str, *, job_from_role: bool = True) -> ScrapeTarget:
    job = device.role.name if job_from_role and device.role is not None else job_label
    return ScrapeTarget(
        targets=(strip_prefix_length(device.primary_ip4.address),),
        labels={JOB_LABEL: job, DATACENTER_LABEL: device.location.name},
    )


def transform(
    records: Iterable[Device],
    job_label: str,
    *,
    job_from_role: bool = True,
) -> List[ScrapeTarget]:
    """
    Map devices to target groups, keeping their order.

    Devices without a primary address or a named role are dropped. The job
    label is the device role unless *job_from_role* is False, in which case
    *job_label* (the query document's job name) is used.
    """
    return [
        to_target(device, job_label, job_from_role=job_from_role)
        for device in records
        if is_scrapable(device)
    ]


__all__ = [
    "ScrapeTarget",
    "strip_prefix_length",
    "is_scrapable",
    "to_target",
    "transform",
    "JOB_LABEL",
    "DATACENTER_LABEL",
]
