"""Connection profile persistence."""

from .models import ConnectionProfile
from .store import (
    CONNECTION_PROFILES_PATH_ENV,
    ConnectionProfileStore,
    InMemoryConnectionProfileStore,
    JsonConnectionProfileStore,
    default_connection_profiles_path,
    find_connection_profiles,
)

__all__: list[str] = [
    "ConnectionProfile",
    "CONNECTION_PROFILES_PATH_ENV",
    "ConnectionProfileStore",
    "InMemoryConnectionProfileStore",
    "JsonConnectionProfileStore",
    "default_connection_profiles_path",
    "find_connection_profiles",
]
