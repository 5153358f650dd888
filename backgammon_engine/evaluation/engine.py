"""
Evaluation Engine

Front door for position analysis. The engine owns two strategies:

    1. Native evaluator (optional, preferred): probed once with init(), then
       used for every call while available
    2. Heuristic evaluator (always available): used when there is no native
       evaluator, when init() failed, or when a native call raises

Native failures are logged and never reach the caller. The only error the
engine raises is InvalidPositionError, and only in strict mode.

Data Flow:
    BoardPosition → encode_for_engine() → native.evaluate(str) → PositionAnalysis
                  ↘ (fallback) heuristic.evaluate(BoardPosition) ↗
"""

import asyncio
import logging
import threading
from typing import Optional

from backgammon_engine.board.position import BoardPosition
from backgammon_engine.board.representation import encode_for_engine
from backgammon_engine.errors import InvalidPositionError
from backgammon_engine.evaluation.base import Evaluator, NativeEvaluator, PositionAnalysis
from backgammon_engine.evaluation.heuristic import HeuristicEvaluator

logger = logging.getLogger(__name__)


class EvaluationEngine(Evaluator):
    """
    Native-first evaluator with a deterministic heuristic fallback.

    Attributes:
        native: Injected native evaluator (None for heuristic only)
        model_reference: Passed to native.init() on the first probe
        heuristic: Fallback evaluator
        strict: Reject positions that fail validation
    """

    def __init__(
        self,
        native: Optional[NativeEvaluator] = None,
        model_reference: Optional[str] = None,
        heuristic: Optional[HeuristicEvaluator] = None,
        strict: bool = False,
    ):
        self.native = native
        self.model_reference = model_reference
        self.heuristic = heuristic or HeuristicEvaluator()
        self.strict = strict
        self._native_available: Optional[bool] = None
        self._probe_lock = threading.Lock()

    def probe(self) -> bool:
        """
        Check (once) whether the native evaluator can be used.

        The first call runs native.init(); later calls return the memoized
        answer without touching the native evaluator again.

        Returns:
            bool: True if evaluations go through the native path
        """
        if self._native_available is not None:
            return self._native_available

        with self._probe_lock:
            if self._native_available is not None:
                return self._native_available

            if self.native is None:
                available = False
            else:
                try:
                    available = bool(self.native.init(self.model_reference))
                except Exception as e:
                    logger.warning(f"Native evaluator init failed, using heuristic fallback: {e}")
                    available = False

            self._native_available = available

        logger.info(f"Evaluation engine using {'native' if available else 'heuristic'} evaluator")
        return available

    def init(self) -> bool:
        """Alias of probe() for callers that initialize explicitly."""
        return self.probe()

    @property
    def is_native_available(self) -> bool:
        return self.probe()

    def evaluate(self, position: BoardPosition) -> PositionAnalysis:
        """
        Analyse a position.

        Args:
            position: Position to analyse

        Returns:
            PositionAnalysis from the native evaluator, or from the heuristic
            if the native path is unavailable or fails

        Raises:
            InvalidPositionError: In strict mode, if the position is invalid
        """
        if self.strict:
            violations = position.validate()
            if violations:
                raise InvalidPositionError(violations)

        if self.probe():
            encoded = encode_for_engine(position)
            try:
                result = self.native.evaluate(encoded)
            except Exception as e:
                logger.warning(f"Native evaluate failed, using heuristic fallback: {e}")
            else:
                if isinstance(result, PositionAnalysis):
                    return result
                logger.warning(
                    f"Native evaluate returned {type(result).__name__}, using heuristic fallback"
                )

        return self.heuristic.evaluate(position)

    async def evaluate_async(self, position: BoardPosition) -> PositionAnalysis:
        """evaluate() in a worker thread, for asyncio callers."""
        return await asyncio.to_thread(self.evaluate, position)

    def __repr__(self) -> str:
        return f"EvaluationEngine(native={self.native!r}, strict={self.strict})"


_default_engine: Optional[EvaluationEngine] = None


def get_default_engine() -> EvaluationEngine:
    """Process-wide heuristic-only engine, created on first use."""
    global _default_engine
    if _default_engine is None:
        _default_engine = EvaluationEngine()
    return _default_engine
