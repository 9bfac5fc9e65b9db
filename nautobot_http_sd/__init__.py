# nautobot_http_sd/__init__.py
"""
nautobot_http_sd package initializer.
Defines the package version; the console entry point is nautobot_http_sd.cli:cli.
"""
__version__ = "0.1.0"
