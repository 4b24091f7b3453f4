"""Platform transport implementations."""

from .http import HttpxPlatformTransport, get_realm_path

__all__: list[str] = ["HttpxPlatformTransport", "get_realm_path"]
