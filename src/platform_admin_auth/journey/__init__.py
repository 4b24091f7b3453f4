"""Authentication journey: callback models, answerers and the step driver."""

from .answerer import ConsoleChallengeAnswerer, StaticChallengeAnswerer
from .callbacks import (
    Callback,
    CallbackEntry,
    HiddenValueCallback,
    JourneyStep,
    NameCallback,
    PasswordCallback,
    SelectIdPCallback,
    TextOutputCallback,
    UnrecognizedCallback,
    parse_callback,
)
from .driver import FailureReason, JourneyDriver, JourneyOutcome, authenticate

__all__: list[str] = [
    # Models
    "CallbackEntry",
    "Callback",
    "NameCallback",
    "PasswordCallback",
    "HiddenValueCallback",
    "SelectIdPCallback",
    "TextOutputCallback",
    "UnrecognizedCallback",
    "JourneyStep",
    "parse_callback",
    # Answerers
    "ConsoleChallengeAnswerer",
    "StaticChallengeAnswerer",
    # Driver
    "FailureReason",
    "JourneyOutcome",
    "JourneyDriver",
    "authenticate",
]
