# nautobot_http_sd/inventory/models.py
"""
Schema of the Nautobot GraphQL device response.

Expected shape::

    {"data": {"devices": [
        {"name": "sw1",
         "role": {"name": "switch"},
         "location": {"name": "dc1"},
         "primary_ip4": {"address": "192.0.2.1/24"}}
    ]}}

``role`` and ``primary_ip4`` may be null, as may a whole device entry.
Missing names decode as empty strings. Extra fields selected by a query are
ignored.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Node(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Role(_Node):
    name: str = ""

    @field_validator("name", mode="before")
    def _null_name(cls, v: Any) -> Any:
        return "" if v is None else v


class Location(_Node):
    name: str = ""

    @field_validator("name", mode="before")
    def _null_name(cls, v: Any) -> Any:
        return "" if v is None else v


class IPAddress(_Node):
    address: str = ""

    @field_validator("address", mode="before")
    def _null_address(cls, v: Any) -> Any:
        return "" if v is None else v


class Device(_Node):
    """One inventory record as returned by Nautobot."""

    name: str = ""
    role: Optional[Role] = None
    location: Location = Field(default_factory=Location)
    primary_ip4: Optional[IPAddress] = None

    @field_validator("name", mode="before")
    def _null_name(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("location", mode="before")
    def _null_location(cls, v: Any) -> Any:
        return {} if v is None else v


class DeviceData(_Node):
    devices: List[Device] = Field(default_factory=list)

    @field_validator("devices", mode="before")
    def _null_devices(cls, v: Any) -> Any:
        if v is None:
            return []
        # a null entry decodes as an empty device, which is never scrapable
        if isinstance(v, list):
            return [{} if d is None else d for d in v]
        return v


class GraphQLResponse(_Node):
    """Top level GraphQL envelope; ``errors`` is kept for logging only."""

    data: Optional[DeviceData] = None
    errors: Optional[List[Dict[str, Any]]] = None

    @property
    def devices(self) -> List[Device]:
        return [] if self.data is None else list(self.data.devices)


__all__ = ["Role", "Location", "IPAddress", "Device", "DeviceData", "GraphQLResponse"]
