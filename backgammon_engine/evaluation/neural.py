"""
Neural network-based native evaluator.

Implements the NativeEvaluator capability with a BackgammonNet: the engine
hands it the engine-input string, it decodes it into feature planes and runs
the network. Candidate moves are not generated.
"""

import logging
import threading
from typing import Optional

import torch

from backgammon_engine.board.representation import (
    engine_input_to_features,
    parse_engine_encoding,
    position_id,
)
from backgammon_engine.errors import EvaluatorUnavailable
from backgammon_engine.evaluation.base import NativeEvaluator, PositionAnalysis, WinningChances
from backgammon_engine.training.model import BackgammonNet

logger = logging.getLogger(__name__)

EVALUATION_BOUND = 3.0


class NeuralEvaluator(NativeEvaluator):
    """Neural network native evaluator.

    The network outputs White's win, gammon and backgammon probabilities.
    The scalar evaluation is the cubeless equity estimate
    2*win - 1 + gammon + backgammon, clamped to [-3, 3].
    """

    def __init__(self, model: Optional[BackgammonNet] = None, device: str = "cpu"):
        """Initialize neural evaluator.

        Args:
            model: Optional ready model (otherwise init() loads a checkpoint)
            device: Device to run model on ("cpu" or "cuda")
        """
        self.model = model
        self.device = device
        self._ready: Optional[bool] = None
        self._init_lock = threading.Lock()

    def init(self, model_reference: Optional[str] = None) -> bool:
        """Load the model (first call only) and report availability.

        Args:
            model_reference: Path to a BackgammonNet checkpoint

        Returns:
            True if a model is loaded and ready
        """
        if self._ready is not None:
            return self._ready

        with self._init_lock:
            if self._ready is not None:
                return self._ready

            if model_reference is not None:
                try:
                    self.model = BackgammonNet.load(model_reference, device=self.device)
                except (FileNotFoundError, RuntimeError, KeyError) as e:
                    logger.warning(f"Could not load evaluator model {model_reference}: {e}")
                    self.model = None

            if self.model is None:
                self._ready = False
                return False

            self.model = self.model.to(self.device)
            self.model.eval()
            self._ready = True

        logger.info(f"Neural evaluator ready ({self.model.count_parameters():,} parameters)")
        return True

    def evaluate(self, encoded: str) -> PositionAnalysis:
        """Evaluate an engine-input string.

        Args:
            encoded: Output of encode_for_engine()

        Returns:
            PositionAnalysis without candidate moves

        Raises:
            EvaluatorUnavailable: If init() has not succeeded
            ValueError: If the encoding is malformed
        """
        if not self._ready or self.model is None:
            raise EvaluatorUnavailable("Neural evaluator is not initialized")

        engine_input = parse_engine_encoding(encoded)
        planes, globals_ = engine_input_to_features(engine_input)

        planes_t = torch.from_numpy(planes).unsqueeze(0).to(self.device)
        globals_t = torch.from_numpy(globals_).unsqueeze(0).to(self.device)

        with torch.no_grad():
            output = self.model(planes_t, globals_t)[0]

        win, gammon, backgammon = (float(v) for v in output.cpu())
        gammon = min(gammon, win)
        backgammon = min(backgammon, gammon)

        evaluation = max(-EVALUATION_BOUND, min(EVALUATION_BOUND, 2.0 * win - 1.0 + gammon + backgammon))

        return PositionAnalysis(
            position_id=position_id(engine_input.point_counts),
            winning_chances=WinningChances(
                win=win * 100.0,
                gammon=gammon * 100.0,
                backgammon=backgammon * 100.0,
            ),
            evaluation=evaluation,
            moves=(),
            confidence=max(win, 1.0 - win),
        )
