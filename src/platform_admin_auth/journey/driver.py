"""Authentication journey driver.

Drives the challenge/response journey for a username/password pair:

1. Post an empty first step with the credentials in bootstrap headers.
2. Terminal response (``tokenId``): success.
3. Otherwise answer every callback and post the step back, at most
   ``max_steps`` times after the first step.

Budget exhaustion and an empty non-terminal step are reported as a
failed outcome. Unsupported factors, unrecognized callbacks and
transport errors raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..config import DEFAULT_CONFIG, PlatformAuthConfig
from ..exceptions import UnrecognizedCallbackError, UnsupportedFactorError
from ..observability import AuthTracing
from .answerer import ConsoleChallengeAnswerer
from .callbacks import (
    HiddenValueCallback,
    JourneyStep,
    NameCallback,
    PasswordCallback,
    SelectIdPCallback,
    TextOutputCallback,
)

if TYPE_CHECKING:
    from ..ports import IChallengeAnswerer, IPlatformTransport
    from ..state import SessionState

logger = logging.getLogger(__name__)

USERNAME_HEADER = "X-OpenAM-Username"
PASSWORD_HEADER = "X-OpenAM-Password"  # noqa: S105


class FailureReason(str, Enum):
    """Why a journey ended without a session token."""

    NO_CALLBACKS = "no_callbacks"
    STEP_BUDGET_EXHAUSTED = "step_budget_exhausted"


@dataclass(frozen=True)
class JourneyOutcome:
    """Result of one journey run.

    Attributes:
        token_id: Session token on success.
        steps: Follow-up round-trips made after the first step.
        need_2fa: Whether a one-time code was supplied.
        reason: Failure reason when no token was obtained.
    """

    token_id: str | None
    steps: int
    need_2fa: bool = False
    reason: FailureReason | None = None

    @property
    def succeeded(self) -> bool:
        return self.token_id is not None


class JourneyDriver:
    """Runs one authentication journey for the session's user credentials.

    Example:
        ```python
        driver = JourneyDriver(state, transport, answerer=StaticChallengeAnswerer(["123456"]))
        outcome = await driver.run()
        if outcome.succeeded:
            state.cookie_value = outcome.token_id
        ```
    """

    def __init__(
        self,
        state: SessionState,
        transport: IPlatformTransport,
        *,
        answerer: IChallengeAnswerer | None = None,
        config: PlatformAuthConfig = DEFAULT_CONFIG,
        realm: str = "/",
    ) -> None:
        self.state = state
        self.transport = transport
        self.answerer = answerer or ConsoleChallengeAnswerer()
        self.max_steps = config.max_journey_steps
        self.realm = realm
        self._need_2fa = False

    async def run(self) -> JourneyOutcome:
        """Drive the journey to a terminal state.

        Raises:
            UnsupportedFactorError: The journey asks for WebAuthn.
            UnrecognizedCallbackError: A callback type outside the known set.
            PlatformApiError: A step request failed.
        """
        self._need_2fa = False
        with AuthTracing.span("journey", host=self.state.host) as span:
            step = await self._post(
                {},
                headers={
                    USERNAME_HEADER: self.state.username or "",
                    PASSWORD_HEADER: self.state.password or "",
                },
            )
            steps = 0
            while True:
                if step.is_terminal:
                    logger.debug(f"Journey complete after {steps} follow-up step(s)")
                    AuthTracing.set_success(span)
                    return JourneyOutcome(step.token_id, steps, self._need_2fa)
                if not step.callbacks:
                    logger.debug("Journey step has neither callbacks nor token")
                    return self._failed(steps, FailureReason.NO_CALLBACKS)
                if steps >= self.max_steps:
                    logger.debug(f"Journey step budget of {self.max_steps} exhausted")
                    return self._failed(steps, FailureReason.STEP_BUDGET_EXHAUSTED)
                await self._answer(step)
                steps += 1
                step = await self._post(step.to_payload())

    async def _post(
        self, body: dict[str, Any], *, headers: dict[str, str] | None = None
    ) -> JourneyStep:
        raw = await self.transport.step(
            self.state,
            body,
            headers=headers,
            realm=self.realm,
            service=self.state.authentication_service,
        )
        return JourneyStep.model_validate(raw)

    def _failed(self, steps: int, reason: FailureReason) -> JourneyOutcome:
        return JourneyOutcome(None, steps, self._need_2fa, reason)

    async def _answer(self, step: JourneyStep) -> None:
        """Fill in every callback of a non-terminal step, in order.

        A WebAuthn step is rejected before any prompt is answered.
        """
        if any(
            isinstance(cb, HiddenValueCallback) and cb.is_webauthn_marker()
            for cb in step.callbacks
        ):
            raise UnsupportedFactorError("WebAuthN")
        for callback in step.callbacks:
            if isinstance(callback, SelectIdPCallback):
                # Admin federation is enabled; prefer local login over SSO.
                logger.debug(f"Allowed providers: {callback.providers}")
                if callback.offers_local_authentication():
                    callback.answer(SelectIdPCallback.LOCAL_AUTHENTICATION)
            elif isinstance(callback, HiddenValueCallback):
                if callback.is_skip_marker():
                    callback.answer("Skip")
            elif isinstance(callback, NameCallback):
                if callback.is_code_prompt():
                    self._need_2fa = True
                    callback.answer(await self.answerer.answer(callback.prompt))
                else:
                    callback.answer(self.state.username)
            elif isinstance(callback, PasswordCallback):
                callback.answer(self.state.password)
            elif isinstance(callback, TextOutputCallback):
                continue
            else:
                raise UnrecognizedCallbackError(callback.type)


async def authenticate(
    state: SessionState,
    transport: IPlatformTransport,
    *,
    answerer: IChallengeAnswerer | None = None,
    config: PlatformAuthConfig = DEFAULT_CONFIG,
) -> str | None:
    """Run the journey and return the session token, or None."""
    outcome = await JourneyDriver(
        state, transport, answerer=answerer, config=config
    ).run()
    if not outcome.succeeded:
        logger.debug(f"Journey ended without session: {outcome.reason}")
    return outcome.token_id


__all__: list[str] = [
    "USERNAME_HEADER",
    "PASSWORD_HEADER",
    "FailureReason",
    "JourneyOutcome",
    "JourneyDriver",
    "authenticate",
]
