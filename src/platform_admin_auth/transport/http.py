"""httpx implementation of the platform transport.

Redirects are never followed: the authorize endpoint answers with a 302
whose Location carries the authorization code, and callers read it from
the returned HttpResponse.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import httpx

from ..config import DEFAULT_CONFIG, PlatformAuthConfig
from ..exceptions import ConfigurationError, PlatformApiError, PlatformConnectionError
from ..ports import HttpResponse, IPlatformTransport, ServerInfo, VersionInfo

if TYPE_CHECKING:
    from types import TracebackType

    from ..state import SessionState

logger = logging.getLogger(__name__)

AUTHENTICATE_API_VERSION = "resource=2.1, protocol=1.0"
SERVER_INFO_API_VERSION = "resource=1.1"
VERSION_INFO_API_VERSION = "resource=1.0"
IDM_API_VERSION = "resource=1.0"


def get_realm_path(realm: str | None) -> str:
    """URL path segment for a realm, rooted at the top-level realm.

    Examples:
        "/" -> "/realms/root"
        "alpha" -> "/realms/root/realms/alpha"
        "/alpha/sub" -> "/realms/root/realms/alpha/realms/sub"
    """
    parts = [p for p in (realm or "/").split("/") if p and p != "root"]
    return "/realms/root" + "".join(f"/realms/{p}" for p in parts)


class HttpxPlatformTransport(IPlatformTransport):
    """Platform REST calls over an ``httpx.AsyncClient``.

    Example:
        ```python
        async with HttpxPlatformTransport() as transport:
            ok = await get_tokens(state, transport)
        ```

    An injected client is not closed by this transport.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        config: PlatformAuthConfig = DEFAULT_CONFIG,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=config.timeout,
            verify=config.verify,
            follow_redirects=False,
        )

    async def __aenter__(self) -> HttpxPlatformTransport:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ═══════════════════════════════════════════════════════════════
    # REQUEST HELPERS
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def _base_url(state: SessionState) -> str:
        if not state.host:
            raise ConfigurationError("No host specified")
        return state.host.rstrip("/")

    @staticmethod
    def _identity_headers(state: SessionState) -> dict[str, str]:
        headers: dict[str, str] = {}
        if state.use_bearer_token_for_am_apis and state.bearer_token:
            headers["Authorization"] = f"Bearer {state.bearer_token}"
        elif state.cookie_name and state.cookie_value:
            headers["Cookie"] = f"{state.cookie_name}={state.cookie_value}"
        return headers

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def _request(
        self,
        method: str,
        url: str,
        *,
        raise_for_status: bool = True,
        **kwargs: Any,
    ) -> HttpResponse:
        try:
            response = await self._client.request(
                method, url, follow_redirects=False, **kwargs
            )
        except httpx.HTTPError as e:
            raise PlatformConnectionError(f"{method} {url} failed: {e}") from e

        data = self._decode(response)
        logger.debug(f"{method} {url} -> {response.status_code}")
        if raise_for_status and response.status_code >= 400:
            raise PlatformApiError(response.status_code, url, data)
        return HttpResponse(
            status=response.status_code,
            headers={k.lower(): v for k, v in response.headers.items()},
            data=data,
        )

    # ═══════════════════════════════════════════════════════════════
    # AUTHENTICATION JOURNEY
    # ═══════════════════════════════════════════════════════════════

    async def step(
        self,
        state: SessionState,
        body: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        realm: str = "/",
        service: str | None = None,
    ) -> dict[str, Any]:
        url = f"{self._base_url(state)}/json{get_realm_path(realm)}/authenticate"
        params: dict[str, str] | None = None
        if service:
            params = {"authIndexType": "service", "authIndexValue": service}
        request_headers = {
            "Accept-API-Version": AUTHENTICATE_API_VERSION,
            **self._identity_headers(state),
            **state.authentication_header_overrides,
            **(headers or {}),
        }
        response = await self._request(
            "POST", url, json=body, params=params, headers=request_headers
        )
        return response.data if isinstance(response.data, dict) else {}

    # ═══════════════════════════════════════════════════════════════
    # OAUTH2
    # ═══════════════════════════════════════════════════════════════

    async def authorize(
        self,
        state: SessionState,
        form: dict[str, str],
        *,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        url = f"{self._base_url(state)}/oauth2/authorize"
        request_headers = {**self._identity_headers(state), **(headers or {})}
        return await self._request(
            "POST", url, data=form, headers=request_headers, raise_for_status=False
        )

    async def access_token(
        self,
        state: SessionState,
        form: dict[str, str],
        *,
        auth: tuple[str, str] | None = None,
    ) -> HttpResponse:
        url = f"{self._base_url(state)}/oauth2/access_token"
        if auth is not None:
            return await self._request("POST", url, data=form, auth=auth)
        return await self._request("POST", url, data=form)

    # ═══════════════════════════════════════════════════════════════
    # SERVER INFO
    # ═══════════════════════════════════════════════════════════════

    async def get_server_info(self, state: SessionState) -> ServerInfo:
        url = f"{self._base_url(state)}/json/serverinfo/*"
        response = await self._request(
            "GET", url, headers={"Accept-API-Version": SERVER_INFO_API_VERSION}
        )
        data = response.data if isinstance(response.data, dict) else {}
        if not data.get("cookieName"):
            raise PlatformApiError(response.status, url, "No cookieName in server info")
        return ServerInfo(cookie_name=data["cookieName"])

    async def get_server_version_info(self, state: SessionState) -> VersionInfo:
        url = f"{self._base_url(state)}/json/serverinfo/version"
        response = await self._request(
            "GET",
            url,
            headers={
                "Accept-API-Version": VERSION_INFO_API_VERSION,
                **self._identity_headers(state),
            },
        )
        data = response.data if isinstance(response.data, dict) else {}
        return VersionInfo(
            version=data.get("version"), full_version=data.get("fullVersion")
        )

    # ═══════════════════════════════════════════════════════════════
    # IDENTITY MANAGEMENT
    # ═══════════════════════════════════════════════════════════════

    async def get_service_account(
        self, state: SessionState, service_account_id: str
    ) -> dict[str, Any]:
        parsed = urlparse(self._base_url(state))
        url = f"{parsed.scheme}://{parsed.netloc}/openidm/managed/svcacct/{service_account_id}"
        headers = {"Accept-API-Version": IDM_API_VERSION}
        if state.bearer_token:
            headers["Authorization"] = f"Bearer {state.bearer_token}"
        response = await self._request("GET", url, headers=headers)
        return response.data if isinstance(response.data, dict) else {}


__all__: list[str] = ["HttpxPlatformTransport", "get_realm_path"]
