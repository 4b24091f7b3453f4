"""Connection profile model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ConnectionProfile(BaseModel):
    """Saved connection details for one tenant.

    Serialized with the camelCase aliases used in the profile file, keyed
    by tenant URL (the ``tenant`` field itself is not written).

    Attributes:
        tenant: Tenant base URL.
        username: Admin username.
        password: Admin password.
        log_api_key: Log API key.
        log_api_secret: Log API secret.
        authentication_service: Journey to authenticate with.
        authentication_header_overrides: Extra journey request headers.
        svcacct_id: Service account id.
        svcacct_jwk: Service account private JWK.
        svcacct_name: Service account display name.
    """

    model_config = ConfigDict(populate_by_name=True)

    tenant: str = ""
    username: str | None = None
    password: str | None = None
    log_api_key: str | None = Field(default=None, alias="logApiKey")
    log_api_secret: str | None = Field(default=None, alias="logApiSecret")
    authentication_service: str | None = Field(
        default=None, alias="authenticationService"
    )
    authentication_header_overrides: dict[str, str] = Field(
        default_factory=dict, alias="authenticationHeaderOverrides"
    )
    svcacct_id: str | None = Field(default=None, alias="svcacctId")
    svcacct_jwk: dict[str, Any] | None = Field(default=None, alias="svcacctJwk")
    svcacct_name: str | None = Field(default=None, alias="svcacctName")

    def to_record(self) -> dict[str, Any]:
        """Profile file entry, without the tenant key and empty values."""
        record = self.model_dump(by_alias=True, exclude={"tenant"}, exclude_none=True)
        if not record.get("authenticationHeaderOverrides"):
            record.pop("authenticationHeaderOverrides", None)
        return record


__all__: list[str] = ["ConnectionProfile"]
