"""Auth tracing helpers for OpenTelemetry integration.

Spans are created through the OpenTelemetry API, which is a no-op until
the embedding application installs an SDK tracer provider.

Usage:
    ```python
    from platform_admin_auth.observability import AuthTracing

    with AuthTracing.span("journey", host=state.host) as span:
        outcome = await driver.run()
        AuthTracing.set_success(span)
    ```
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from collections.abc import Generator

    from ..state import SessionState


class _TracerRegistry:
    """Lazy tracer initialization."""

    def __init__(self) -> None:
        self._tracer: Any = None

    @property
    def tracer(self) -> Any:
        if self._tracer is None:
            self._tracer = trace.get_tracer("platform-admin-auth")
        return self._tracer


_registry = _TracerRegistry()


class AuthTracing:
    """Context managers and span helpers for authentication operations."""

    @staticmethod
    @contextmanager
    def span(
        operation: str,
        *,
        host: str | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> Generator[Any, None, None]:
        """Context manager for a traced auth operation.

        Args:
            operation: Operation name (get_tokens, detect_deployment, journey, ...).
            host: Tenant host.
            attributes: Additional span attributes.

        Yields:
            The active span.
        """
        with _registry.tracer.start_as_current_span(f"auth.{operation}") as span:
            try:
                span.set_attribute("auth.operation", operation)
                if host:
                    span.set_attribute("auth.host", host)
                if attributes:
                    for key, value in attributes.items():
                        span.set_attribute(key, str(value))
                yield span
            except Exception as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                raise

    @staticmethod
    def set_session(span: Any, state: SessionState) -> None:
        """Record non-secret session attributes on a span."""
        if not span:
            return
        if state.deployment_type:
            span.set_attribute("auth.deployment_type", state.deployment_type.value)
        if state.realm:
            span.set_attribute("auth.realm", state.realm)
        if state.am_version:
            span.set_attribute("auth.am_version", state.am_version)
        span.set_attribute("auth.bearer_mode", state.use_bearer_token_for_am_apis)

    @staticmethod
    def set_success(span: Any) -> None:
        """Mark span as successful."""
        if span:
            span.set_status(Status(StatusCode.OK))

    @staticmethod
    def set_error(span: Any, error: Exception) -> None:
        """Mark span as failed with error."""
        if span:
            span.set_status(Status(StatusCode.ERROR, str(error)))
            span.record_exception(error)


__all__: list[str] = ["AuthTracing"]
