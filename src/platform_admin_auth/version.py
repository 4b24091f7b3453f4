"""Semantic version extraction from server version info."""

from __future__ import annotations

import re

from .exceptions import VersionParseError
from .ports import VersionInfo

_SEMANTIC_VERSION = re.compile(r"(\d\.\d\.\d(\.\d)*)")


def get_semantic_version(version_info: VersionInfo) -> str:
    """Extract the semantic version from a version info document.

    Args:
        version_info: Server version document.

    Returns:
        The first semantic version found, e.g. "7.3.0" for "7.3.0 Build abc".

    Raises:
        VersionParseError: If there is no version string or it holds no
            semantic version.
    """
    if version_info.version:
        match = _SEMANTIC_VERSION.search(version_info.version)
        if match:
            return match.group(1)
    raise VersionParseError("Cannot extract semantic version from version info object.")


__all__: list[str] = ["get_semantic_version"]
