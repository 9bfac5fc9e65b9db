# File: nautobot_http_sd/inventory/__init__.py
"""nautobot_http_sd.inventory: Nautobot GraphQL client and response schema."""

from nautobot_http_sd.inventory.client import InventoryClient
from nautobot_http_sd.inventory.models import Device, GraphQLResponse, IPAddress, Location, Role

__all__ = ["InventoryClient", "Device", "GraphQLResponse", "IPAddress", "Location", "Role"]
