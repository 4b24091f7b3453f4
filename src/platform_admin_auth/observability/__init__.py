"""Auth observability helpers."""

from __future__ import annotations

from .tracing import AuthTracing

__all__: list[str] = ["AuthTracing"]
