"""
Heuristic Position Evaluation

This module implements the always-available fallback evaluator. It is a pure,
deterministic function of the position: no randomness, no clock.

Evaluation Components (White's perspective, positive = White better):
    1. Pip count:  (red pips - white pips) / pip_divisor
    2. Blots:      blot_weight * (red blots - white blots)
    3. Material:   material_weight * (red in play - white in play)

    evaluation = clamp(pip + blots + material, -bound, +bound)

Pip count:
    A white checker on point p must travel 25 - p pips, a red one p pips.
    Checkers on the bar must travel the full 25.

Winning chances are affine functions of the evaluation, clamped to [0, 100]:
    win        = 50 + 15 * e
    gammon     = 10 +  5 * e
    backgammon =  2 +  1 * e

With the default coefficients win >= gammon >= backgammon holds for every
e in [-3, 3]; the ordering is additionally enforced after clamping so that
tuned coefficients cannot break it.

All constants are tunable defaults, not a calibrated model. The fallback
never proposes candidate moves.
"""

from dataclasses import dataclass

from backgammon_engine.board.position import BoardPosition, Color
from backgammon_engine.evaluation.base import Evaluator, PositionAnalysis, WinningChances


BAR_DISTANCE = 25
HEURISTIC_CONFIDENCE = 0.5


@dataclass(frozen=True)
class HeuristicConfig:
    """Coefficients of the heuristic evaluator."""

    # Evaluation terms
    pip_divisor: float = 30.0
    blot_weight: float = 0.2
    material_weight: float = 0.3
    evaluation_bound: float = 3.0

    # Percentage mappings: value = intercept + slope * evaluation
    win_intercept: float = 50.0
    win_slope: float = 15.0
    gammon_intercept: float = 10.0
    gammon_slope: float = 5.0
    backgammon_intercept: float = 2.0
    backgammon_slope: float = 1.0

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.pip_divisor <= 0:
            raise ValueError(f"pip_divisor must be positive, got {self.pip_divisor}")

        if self.evaluation_bound <= 0:
            raise ValueError(f"evaluation_bound must be positive, got {self.evaluation_bound}")


def pip_count(position: BoardPosition, color: Color) -> int:
    """
    Total pips the given side needs to bear off every checker in play.

    Args:
        position: Position to measure
        color: Side to count

    Returns:
        Pip count (0 when all checkers are borne off)
    """
    total = position.bar.get(color) * BAR_DISTANCE
    for point in position.points:
        count = point.count(color)
        if count:
            distance = BAR_DISTANCE - point.number if color == Color.WHITE else point.number
            total += count * distance
    return total


def blot_count(position: BoardPosition, color: Color) -> int:
    """Number of points holding exactly one checker of the given colour."""
    return sum(1 for point in position.points if point.count(color) == 1)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class HeuristicEvaluator(Evaluator):
    """
    Closed-form fallback evaluator.

    Attributes:
        config: Coefficients (see HeuristicConfig)
    """

    def __init__(self, config: HeuristicConfig = HeuristicConfig()):
        self.config = config

    def raw_score(self, position: BoardPosition) -> float:
        """Unclamped sum of the three weighted terms."""
        cfg = self.config

        pip_term = (pip_count(position, Color.RED) - pip_count(position, Color.WHITE)) / cfg.pip_divisor
        blot_term = cfg.blot_weight * (blot_count(position, Color.RED) - blot_count(position, Color.WHITE))
        material_term = cfg.material_weight * (
            position.checkers_in_play(Color.RED) - position.checkers_in_play(Color.WHITE)
        )

        return pip_term + blot_term + material_term

    def winning_chances(self, evaluation: float) -> WinningChances:
        """Map a (clamped) evaluation to win/gammon/backgammon percentages."""
        cfg = self.config

        win = _clamp(cfg.win_intercept + cfg.win_slope * evaluation, 0.0, 100.0)
        gammon = _clamp(cfg.gammon_intercept + cfg.gammon_slope * evaluation, 0.0, 100.0)
        backgammon = _clamp(cfg.backgammon_intercept + cfg.backgammon_slope * evaluation, 0.0, 100.0)

        gammon = min(gammon, win)
        backgammon = min(backgammon, gammon)

        return WinningChances(win=win, gammon=gammon, backgammon=backgammon)

    def evaluate(self, position: BoardPosition) -> PositionAnalysis:
        """
        Evaluate a position with the heuristic.

        Args:
            position: Position to evaluate

        Returns:
            PositionAnalysis with no candidate moves and confidence 0.5
        """
        bound = self.config.evaluation_bound
        evaluation = _clamp(self.raw_score(position), -bound, bound)

        return PositionAnalysis(
            position_id=position.id,
            winning_chances=self.winning_chances(evaluation),
            evaluation=evaluation,
            moves=(),
            confidence=HEURISTIC_CONFIDENCE,
        )

    def __repr__(self) -> str:
        return f"HeuristicEvaluator({self.config})"
