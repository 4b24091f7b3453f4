"""Challenge answerers for one-time-code journey prompts."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import TYPE_CHECKING

from ..exceptions import JourneyError
from ..ports import IChallengeAnswerer

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class ConsoleChallengeAnswerer(IChallengeAnswerer):
    """Prompt the operator on the terminal.

    The blocking ``input`` call runs in a worker thread so the event loop
    stays responsive while other sessions progress.
    """

    async def answer(self, prompt: str) -> str:
        logger.info("2FA is enabled and required for this user...")
        return await asyncio.to_thread(input, f"{prompt}: ")


class StaticChallengeAnswerer(IChallengeAnswerer):
    """Answer prompts from a pre-supplied sequence of codes.

    Example:
        ```python
        answerer = StaticChallengeAnswerer(["123456"])
        outcome = await JourneyDriver(state, transport, answerer=answerer).run()
        ```
    """

    def __init__(self, codes: Iterable[str]) -> None:
        self._codes = deque(codes)
        self.prompts: list[str] = []

    async def answer(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._codes:
            raise JourneyError(f"No code available to answer prompt: {prompt}")
        return self._codes.popleft()


__all__: list[str] = ["ConsoleChallengeAnswerer", "StaticChallengeAnswerer"]
