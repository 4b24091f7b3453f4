"""Connection profile stores.

Profiles are keyed by tenant URL. Lookups accept any unique substring of
a tenant URL, so ``"tenant"`` resolves ``"https://tenant.example.com/am"``
as long as no other saved tenant contains the same substring.

Secrets are stored as given; encrypting them at rest is left to the
embedding application.
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ..exceptions import ConnectionProfileError
from ..ports import IConnectionProfileSource
from ..state import is_valid_url
from .models import ConnectionProfile

if TYPE_CHECKING:
    from ..state import SessionState

logger = logging.getLogger(__name__)

CONNECTION_PROFILES_PATH_ENV = "PLATFORM_AUTH_CONNECTION_PROFILES_PATH"
PROFILE_FILENAME = "Connections.json"


def default_connection_profiles_path() -> Path:
    env_path = os.environ.get(CONNECTION_PROFILES_PATH_ENV)
    if env_path:
        return Path(env_path)
    return Path.home() / ".platform-admin" / PROFILE_FILENAME


def find_connection_profiles(
    profiles: dict[str, dict[str, Any]], host: str
) -> list[ConnectionProfile]:
    """All profiles whose tenant URL contains host.

    Raises:
        ConnectionProfileError: If a matching record is malformed.
    """
    found: list[ConnectionProfile] = []
    for tenant, record in profiles.items():
        if host in tenant:
            logger.debug(f"'{host}' identifies '{tenant}', including in result set")
            try:
                found.append(
                    ConnectionProfile.model_validate({**record, "tenant": tenant})
                )
            except ValidationError as e:
                raise ConnectionProfileError(
                    f"Invalid profile record for {tenant}: {e}"
                ) from e
    return found


class ConnectionProfileStore(IConnectionProfileSource, ABC):
    """Profile lookup and maintenance over an abstract backing dict."""

    @abstractmethod
    def _load(self, state: SessionState | None) -> dict[str, dict[str, Any]]:
        """Return all profile records keyed by tenant URL."""

    @abstractmethod
    def _save(
        self, state: SessionState | None, profiles: dict[str, dict[str, Any]]
    ) -> None:
        """Persist all profile records."""

    async def get_connection_profile_by_host(
        self, host: str, state: SessionState | None = None
    ) -> ConnectionProfile | None:
        """Resolve the unique profile matching host.

        Returns:
            The profile, or None when nothing or more than one profile
            matches or the backing file cannot be read.
        """
        try:
            found = find_connection_profiles(self._load(state), host)
        except ConnectionProfileError as e:
            logger.error(
                f"Can not read saved connection info, please specify credentials: {e}"
            )
            return None

        if not found:
            logger.error(
                f"Profile for {host} not found. Please specify credentials explicitly."
            )
            return None
        if len(found) > 1:
            tenants = ", ".join(p.tenant for p in found)
            logger.error(
                f"Multiple matching profiles found: {tenants}. "
                "Please specify a unique sub-string."
            )
            return None
        return found[0]

    async def get_connection_profile(
        self, state: SessionState
    ) -> ConnectionProfile | None:
        if not state.host:
            return None
        return await self.get_connection_profile_by_host(state.host, state)

    async def save_connection_profile(self, host: str, state: SessionState) -> bool:
        """Create or update the profile for host from the session's credentials.

        An existing profile is matched by substring. A new profile needs a
        full URL. The session's host is updated to the profile's tenant URL.

        Returns:
            True if the profile was written.
        """
        profiles = self._load(state)
        found = find_connection_profiles(profiles, host)
        if len(found) > 1:
            logger.error(
                f"Multiple matching profiles found for '{host}'. "
                "Please specify a unique sub-string."
            )
            return False
        if found:
            profile = found[0]
            logger.debug(f"Existing profile: {profile.tenant}")
        elif is_valid_url(host):
            profile = ConnectionProfile(tenant=host)
            logger.debug(f"New profile: {host}")
        else:
            logger.error(
                f"No existing profile found matching '{host}'. "
                "Provide a valid URL as the host to create a new profile."
            )
            return False
        state.host = profile.tenant

        updates: dict[str, Any] = {}
        if state.username:
            updates["username"] = state.username
        if state.password:
            updates["password"] = state.password
        if state.service_account_id:
            updates["svcacct_id"] = state.service_account_id
        if state.service_account_jwk:
            updates["svcacct_jwk"] = state.service_account_jwk
        if state.authentication_service:
            updates["authentication_service"] = state.authentication_service
        if state.authentication_header_overrides:
            updates["authentication_header_overrides"] = dict(
                state.authentication_header_overrides
            )
        profile = profile.model_copy(update=updates)

        profiles[profile.tenant] = profile.to_record()
        self._save(state, dict(sorted(profiles.items())))
        logger.info(f"Saved connection profile {profile.tenant}")
        return True

    async def delete_connection_profile(
        self, host: str, state: SessionState | None = None
    ) -> bool:
        """Delete the unique profile matching host.

        Returns:
            True if a profile was deleted.
        """
        profiles = self._load(state)
        found = find_connection_profiles(profiles, host)
        if len(found) > 1:
            logger.error(
                f"Multiple matching profiles found for '{host}'. "
                "Please specify a unique sub-string."
            )
            return False
        if not found:
            logger.info(f"No connection profile {host} found")
            return False
        del profiles[found[0].tenant]
        self._save(state, profiles)
        logger.info(f"Deleted connection profile {found[0].tenant}")
        return True


class JsonConnectionProfileStore(ConnectionProfileStore):
    """Profiles in a JSON file.

    The file location is, in order of precedence: the session's
    ``connection_profiles_path``, the path given here, the
    ``PLATFORM_AUTH_CONNECTION_PROFILES_PATH`` environment variable, and
    ``~/.platform-admin/Connections.json``.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else None

    def get_path(self, state: SessionState | None = None) -> Path:
        if state is not None and state.connection_profiles_path:
            return Path(state.connection_profiles_path)
        return self.path or default_connection_profiles_path()

    def _load(self, state: SessionState | None) -> dict[str, dict[str, Any]]:
        path = self.get_path(state)
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConnectionProfileError(f"Cannot read {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConnectionProfileError(f"{path} does not contain a JSON object")
        return data

    def _save(
        self, state: SessionState | None, profiles: dict[str, dict[str, Any]]
    ) -> None:
        path = self.get_path(state)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(profiles, indent=4), encoding="utf-8")
        except OSError as e:
            raise ConnectionProfileError(f"Cannot write {path}: {e}") from e


class InMemoryConnectionProfileStore(ConnectionProfileStore):
    """In-memory profile store for tests and embedding applications.

    Example:
        ```python
        store = InMemoryConnectionProfileStore({
            "https://tenant.example.com/am": {"username": "admin", "password": "pw"},
        })
        profile = await store.get_connection_profile_by_host("tenant")
        ```
    """

    def __init__(self, profiles: dict[str, dict[str, Any]] | None = None) -> None:
        try:
            for tenant, record in (profiles or {}).items():
                ConnectionProfile.model_validate({**record, "tenant": tenant})
        except ValidationError as e:
            raise ConnectionProfileError(f"Invalid profile record: {e}") from e
        self._profiles: dict[str, dict[str, Any]] = dict(profiles or {})

    def _load(self, state: SessionState | None) -> dict[str, dict[str, Any]]:
        return dict(self._profiles)

    def _save(
        self, state: SessionState | None, profiles: dict[str, dict[str, Any]]
    ) -> None:
        self._profiles = dict(profiles)


__all__: list[str] = [
    "CONNECTION_PROFILES_PATH_ENV",
    "default_connection_profiles_path",
    "find_connection_profiles",
    "ConnectionProfileStore",
    "JsonConnectionProfileStore",
    "InMemoryConnectionProfileStore",
]
