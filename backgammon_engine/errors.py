"""
Error Taxonomy

Hard failures are exceptions; recoverable data-quality problems are flags.

    BackgammonEngineError
        ImageReadError        Input image unreadable or corrupt (stage 1)
        BoardNotFoundError    No board in the image (stage 2)
        InvalidPositionError  Position rejected by a strict consumer
        EvaluatorUnavailable  Native evaluator not usable (never surfaced
                              by EvaluationEngine, triggers the fallback)

LowConfidencePosition is NOT an exception: extraction returns a best-effort
BoardPosition together with this flag and the caller decides acceptance.
"""

from dataclasses import dataclass
from typing import List, Tuple


class BackgammonEngineError(Exception):
    """Base class for all errors raised by backgammon_engine."""


class ImageReadError(BackgammonEngineError):
    """Raised when an image cannot be decoded."""


class BoardNotFoundError(BackgammonEngineError):
    """Raised when board detection reports no valid board."""


class InvalidPositionError(BackgammonEngineError):
    """Raised when a position fails validation and the caller asked for strictness."""

    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        super().__init__("Invalid position: " + "; ".join(self.violations))


class EvaluatorUnavailable(BackgammonEngineError):
    """Raised by a native evaluator that was not (or could not be) initialized."""


@dataclass(frozen=True)
class LowConfidencePosition:
    """
    Flag attached to a best-effort extraction result.

    Attributes:
        reasons: Human-readable descriptions of every detected problem
        confidence: Overall pipeline confidence at the time of flagging
    """

    reasons: Tuple[str, ...] = ()
    confidence: float = 0.0

    def __str__(self) -> str:
        return f"Low confidence position ({self.confidence:.2f}): " + "; ".join(self.reasons)
