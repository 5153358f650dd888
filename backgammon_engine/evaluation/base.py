"""
Evaluator Interfaces and Analysis Types

Two capability interfaces exist because evaluators come in two shapes:

    Evaluator           Works on a BoardPosition directly
                        (HeuristicEvaluator, EvaluationEngine)
    NativeEvaluator     Injected engine working on the engine-input string
                        (NeuralEvaluator, or any external binding)

Conventions:
    - Evaluation is from White's perspective: positive = White better
    - Winning chances are percentages for the side the evaluation favours
      the way the evaluator reports them, with win >= gammon >= backgammon
    - Every call returns a fresh PositionAnalysis; analyses are immutable
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from backgammon_engine.board.position import BoardPosition


@dataclass(frozen=True)
class Move:
    """A candidate move (notation like "24/23 13/11")."""

    notation: str
    source: int
    destination: int
    evaluation: float
    win_rate: float


@dataclass(frozen=True)
class WinningChances:
    """Win / gammon / backgammon percentages in [0, 100]."""

    win: float
    gammon: float
    backgammon: float

    def __post_init__(self):
        for name in ("win", "gammon", "backgammon"):
            value = getattr(self, name)
            if not 0.0 <= value <= 100.0:
                raise ValueError(f"{name} must be in [0, 100], got {value}")
        if not self.win >= self.gammon >= self.backgammon:
            raise ValueError(
                f"Expected win >= gammon >= backgammon, got "
                f"{self.win} / {self.gammon} / {self.backgammon}"
            )


@dataclass(frozen=True)
class PositionAnalysis:
    """
    Result of evaluating one position.

    Attributes:
        position_id: Identifier of the analysed position
        winning_chances: Win / gammon / backgammon percentages
        evaluation: Scalar evaluation (bounded, White's perspective)
        moves: Candidate moves, best first (empty when not computed)
        confidence: Evaluator confidence in [0, 1]
    """

    position_id: str
    winning_chances: WinningChances
    evaluation: float
    moves: Tuple[Move, ...] = ()
    confidence: float = 0.5

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")
        object.__setattr__(self, "moves", tuple(self.moves))

    @property
    def best_move(self) -> Optional[Move]:
        return self.moves[0] if self.moves else None

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-compatible representation."""
        return {
            "positionId": self.position_id,
            "winningChances": {
                "win": self.winning_chances.win,
                "gammon": self.winning_chances.gammon,
                "backgammon": self.winning_chances.backgammon,
            },
            "evaluation": self.evaluation,
            "bestMoves": [
                {
                    "notation": m.notation,
                    "from": m.source,
                    "to": m.destination,
                    "evaluation": m.evaluation,
                    "winRate": m.win_rate,
                }
                for m in self.moves
            ],
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PositionAnalysis":
        """Inverse of to_dict()."""
        chances = data["winningChances"]
        return cls(
            position_id=data["positionId"],
            winning_chances=WinningChances(
                win=float(chances["win"]),
                gammon=float(chances["gammon"]),
                backgammon=float(chances["backgammon"]),
            ),
            evaluation=float(data["evaluation"]),
            moves=tuple(
                Move(
                    notation=m["notation"],
                    source=int(m["from"]),
                    destination=int(m["to"]),
                    evaluation=float(m["evaluation"]),
                    win_rate=float(m["winRate"]),
                )
                for m in data.get("bestMoves", [])
            ),
            confidence=float(data.get("confidence", 0.5)),
        )


class Evaluator(ABC):
    """
    Abstract base class for position evaluators.

    Implementations must be free of shared mutable state between calls so
    that evaluate() can run concurrently on different positions.
    """

    @abstractmethod
    def evaluate(self, position: BoardPosition) -> PositionAnalysis:
        """
        Evaluate a position.

        Args:
            position: Position to evaluate

        Returns:
            PositionAnalysis: Fresh analysis for this position
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class NativeEvaluator(ABC):
    """
    Capability interface for injected (native or learned) evaluators.

    The EvaluationEngine calls init() once and, if it returned True, sends
    every position through evaluate() as an engine-input string.
    """

    @abstractmethod
    def init(self, model_reference: Optional[str] = None) -> bool:
        """
        Prepare the evaluator.

        Args:
            model_reference: Optional model location (path, name, ...)

        Returns:
            bool: True if the evaluator is ready to evaluate
        """
        pass

    @abstractmethod
    def evaluate(self, encoded: str) -> PositionAnalysis:
        """
        Evaluate a position given as an engine-input string.

        Raises:
            EvaluatorUnavailable: If called before a successful init()
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
