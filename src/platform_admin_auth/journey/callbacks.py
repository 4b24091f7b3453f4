"""Authentication journey step and callback models.

A journey step is either terminal (``tokenId`` present) or carries a list
of callbacks whose inputs must be filled in before the step is posted
back. Callbacks are parsed into a closed set of known variants; anything
else becomes an UnrecognizedCallback so the driver can fail explicitly
instead of skipping it.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CallbackEntry(BaseModel):
    """One named output or input value of a callback."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    value: Any = None


class Callback(BaseModel):
    """Base journey callback.

    Attributes:
        type: Callback type name as sent by the server.
        output: Values presented by the server (prompts, options).
        input: Values to fill in and send back.
        id: Callback position id (``_id`` on the wire).
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    callback_type: ClassVar[str] = ""

    type: str
    output: list[CallbackEntry] = Field(default_factory=list)
    input: list[CallbackEntry] = Field(default_factory=list)
    id: int | None = Field(default=None, alias="_id")

    @property
    def prompt(self) -> str:
        """First output value as text."""
        if self.output and isinstance(self.output[0].value, str):
            return self.output[0].value
        return ""

    @property
    def value(self) -> Any:
        """Current value of the first input."""
        return self.input[0].value if self.input else None

    def answer(self, value: Any) -> None:
        """Set the first input's value."""
        if not self.input:
            self.input.append(CallbackEntry(name="IDToken1", value=value))
        else:
            self.input[0].value = value

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(by_alias=True)
        if payload.get("_id") is None:
            payload.pop("_id", None)
        return payload


class NameCallback(Callback):
    """Name entry: a username prompt, or a one-time code prompt."""

    callback_type: ClassVar[str] = "NameCallback"

    def is_code_prompt(self) -> bool:
        return "code" in self.prompt


class PasswordCallback(Callback):
    """Password entry."""

    callback_type: ClassVar[str] = "PasswordCallback"


class HiddenValueCallback(Callback):
    """Hidden marker whose current value signals a journey branch."""

    callback_type: ClassVar[str] = "HiddenValueCallback"

    def _current(self) -> str:
        return self.value if isinstance(self.value, str) else ""

    def is_skip_marker(self) -> bool:
        return "skip" in self._current()

    def is_webauthn_marker(self) -> bool:
        return "webAuthnOutcome" in self._current()


class SelectIdPCallback(Callback):
    """Identity provider selection offered when admin federation is enabled."""

    callback_type: ClassVar[str] = "SelectIdPCallback"

    LOCAL_AUTHENTICATION: ClassVar[str] = "localAuthentication"

    @property
    def providers(self) -> list[str]:
        if not self.output or not isinstance(self.output[0].value, list):
            return []
        return [
            p.get("provider", "")
            for p in self.output[0].value
            if isinstance(p, dict)
        ]

    def offers_local_authentication(self) -> bool:
        return self.LOCAL_AUTHENTICATION in self.providers


class TextOutputCallback(Callback):
    """Informational message; nothing to answer."""

    callback_type: ClassVar[str] = "TextOutputCallback"


class UnrecognizedCallback(Callback):
    """Any callback type outside the known set."""


KNOWN_CALLBACKS: dict[str, type[Callback]] = {
    cls.callback_type: cls
    for cls in (
        NameCallback,
        PasswordCallback,
        HiddenValueCallback,
        SelectIdPCallback,
        TextOutputCallback,
    )
}


def parse_callback(raw: dict[str, Any] | Callback) -> Callback:
    """Build the callback variant matching ``raw["type"]``."""
    if isinstance(raw, Callback):
        return raw
    cls = KNOWN_CALLBACKS.get(raw.get("type", ""), UnrecognizedCallback)
    return cls.model_validate(raw)


class JourneyStep(BaseModel):
    """One journey step response.

    Unknown keys (``header``, ``stage``, ...) are kept so the step can be
    posted back unchanged apart from the answered inputs.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    auth_id: str | None = Field(default=None, alias="authId")
    callbacks: list[Callback] = Field(default_factory=list)
    token_id: str | None = Field(default=None, alias="tokenId")
    success_url: str | None = Field(default=None, alias="successUrl")
    realm: str | None = None

    @field_validator("callbacks", mode="before")
    @classmethod
    def _parse_callbacks(cls, value: Any) -> Any:
        if value is None:
            return []
        return [parse_callback(raw) for raw in value]

    @property
    def is_terminal(self) -> bool:
        return self.token_id is not None

    def to_payload(self) -> dict[str, Any]:
        """Wire JSON for posting this step back with answers filled in."""
        payload: dict[str, Any] = dict(self.model_extra or {})
        if self.auth_id is not None:
            payload["authId"] = self.auth_id
        payload["callbacks"] = [cb.to_payload() for cb in self.callbacks]
        return payload


__all__: list[str] = [
    "CallbackEntry",
    "Callback",
    "NameCallback",
    "PasswordCallback",
    "HiddenValueCallback",
    "SelectIdPCallback",
    "TextOutputCallback",
    "UnrecognizedCallback",
    "KNOWN_CALLBACKS",
    "parse_callback",
    "JourneyStep",
]
