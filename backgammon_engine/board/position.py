"""
Canonical Backgammon Position Model

A BoardPosition is an immutable value: 24 numbered points, bar and borne-off
counts per colour, side to move, optional dice and a creation timestamp.
Editing a position (e.g. applying a move) produces a new value, so position
ids and cached analyses always describe the value they were computed from.

Orientation:
    - White moves from point 1 towards point 24 (home board 19-24)
    - Red moves from point 24 towards point 1 (home board 1-6)

Standard starting position in this orientation:
    White: 2 on 1, 5 on 12, 3 on 17, 5 on 19
    Red:   5 on 6, 3 on 8, 5 on 13, 2 on 24

Validity is split in two levels:
    1. Structural (enforced at construction, raises ValueError):
       points are exactly 1..24, counts non-negative, dice in [1, 6]
    2. Game rules (reported by validate(), never raised here):
       15 checkers per colour, no point holding both colours
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from backgammon_engine.board.representation import position_id

NUM_POINTS = 24
CHECKERS_PER_SIDE = 15


class Color(str, Enum):
    """Checker colour. Values are the plain strings used in serialized forms."""

    WHITE = "white"
    RED = "red"

    @property
    def opponent(self) -> "Color":
        return Color.RED if self is Color.WHITE else Color.WHITE


@dataclass(frozen=True)
class Piece:
    """A single checker. The id token only distinguishes instances."""

    color: Color
    id: str


@dataclass(frozen=True)
class Point:
    """One of the 24 board points and the checkers stacked on it."""

    number: int
    pieces: Tuple[Piece, ...] = ()

    def count(self, color: Color) -> int:
        return sum(1 for piece in self.pieces if piece.color == color)

    @property
    def is_mixed(self) -> bool:
        return len({piece.color for piece in self.pieces}) > 1

    @property
    def owner(self) -> Optional[Color]:
        """Colour occupying the point, None if empty or mixed."""
        colors = {piece.color for piece in self.pieces}
        if len(colors) == 1:
            return next(iter(colors))
        return None


@dataclass(frozen=True)
class ColorCounts:
    """Per-colour checker count (used for the bar and borne-off trays)."""

    white: int = 0
    red: int = 0

    def __post_init__(self):
        if self.white < 0 or self.red < 0:
            raise ValueError(f"Counts must be non-negative, got white={self.white}, red={self.red}")

    def get(self, color: Color) -> int:
        return self.white if color == Color.WHITE else self.red


def empty_points() -> Tuple[Point, ...]:
    """Return 24 empty points numbered 1..24."""
    return tuple(Point(number=n) for n in range(1, NUM_POINTS + 1))


def points_from_counts(counts: Dict[int, Tuple[Color, int]]) -> Tuple[Point, ...]:
    """
    Build a full set of points from a {point_number: (color, count)} mapping.

    Piece tokens are "<point>-<index>", matching extraction output.

    Args:
        counts: Mapping of occupied point numbers to (colour, checker count)

    Returns:
        Tuple of 24 points numbered 1..24
    """
    points = []
    for number in range(1, NUM_POINTS + 1):
        color, count = counts.get(number, (Color.WHITE, 0))
        pieces = tuple(Piece(color=color, id=f"{number}-{i}") for i in range(count))
        points.append(Point(number=number, pieces=pieces))
    return tuple(points)


@dataclass(frozen=True)
class BoardPosition:
    """
    Immutable backgammon board state.

    Attributes:
        points: Exactly 24 points; lookup is by number, input order is irrelevant
        bar: Checkers on the bar per colour
        bear_off: Checkers borne off per colour
        to_move: Side to move
        dice: Optional pair of dice values in [1, 6]
        timestamp: Creation time (not part of identity)
        id: Identity string; defaults to the display position id

    Raises:
        ValueError: On structural problems (see module docstring)
    """

    points: Tuple[Point, ...] = field(default_factory=empty_points)
    bar: ColorCounts = field(default_factory=ColorCounts)
    bear_off: ColorCounts = field(default_factory=ColorCounts)
    to_move: Color = Color.WHITE
    dice: Optional[Tuple[int, int]] = None
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = ""

    def __post_init__(self):
        ordered = tuple(sorted(self.points, key=lambda p: p.number))
        numbers = [p.number for p in ordered]
        if numbers != list(range(1, NUM_POINTS + 1)):
            raise ValueError(
                f"Position must contain points numbered 1..{NUM_POINTS} exactly once, got {numbers}"
            )
        object.__setattr__(self, "points", ordered)
        object.__setattr__(self, "to_move", Color(self.to_move))

        if self.dice is not None:
            dice = tuple(self.dice)
            if len(dice) != 2 or not all(1 <= d <= 6 for d in dice):
                raise ValueError(f"Dice must be a pair of values in [1, 6], got {self.dice}")
            object.__setattr__(self, "dice", dice)

        if not self.id:
            object.__setattr__(self, "id", position_id(self.point_counts()))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def point(self, number: int) -> Point:
        """Return the point with the given number (1..24)."""
        if not 1 <= number <= NUM_POINTS:
            raise ValueError(f"Point number must be in [1, {NUM_POINTS}], got {number}")
        return self.points[number - 1]

    def point_counts(self) -> List[Tuple[int, int]]:
        """(white, red) checker counts for points 1..24 in order."""
        return [(p.count(Color.WHITE), p.count(Color.RED)) for p in self.points]

    def checkers_on_points(self, color: Color) -> int:
        return sum(p.count(color) for p in self.points)

    def checkers_in_play(self, color: Color) -> int:
        """Checkers still in the game: on points or on the bar."""
        return self.checkers_on_points(color) + self.bar.get(color)

    def total_checkers(self, color: Color) -> int:
        return self.checkers_in_play(color) + self.bear_off.get(color)

    def validate(self) -> List[str]:
        """
        Check game-rule invariants.

        Returns:
            List of violation messages (empty if the position is legal)
        """
        violations = []
        for color in Color:
            total = self.total_checkers(color)
            if total != CHECKERS_PER_SIDE:
                violations.append(
                    f"{color.value} has {total} checkers, expected {CHECKERS_PER_SIDE}"
                )
        for p in self.points:
            if p.is_mixed:
                violations.append(f"point {p.number} holds both colours")
        return violations

    @property
    def is_valid(self) -> bool:
        return not self.validate()

    # ------------------------------------------------------------------
    # Value replacement
    # ------------------------------------------------------------------

    def with_point(self, number: int, pieces: Iterable[Piece]) -> "BoardPosition":
        """
        Return a new position with the checkers on one point replaced.

        The id is recomputed; the original position is untouched.
        """
        self.point(number)  # range check
        points = tuple(
            Point(number=number, pieces=tuple(pieces)) if p.number == number else p
            for p in self.points
        )
        return replace(self, points=points, id="")

    def with_changes(self, **changes: Any) -> "BoardPosition":
        """dataclasses.replace() that also recomputes the id."""
        changes.setdefault("id", "")
        return replace(self, **changes)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-compatible representation."""
        return {
            "id": self.id,
            "points": [
                {
                    "number": p.number,
                    "pieces": [{"color": piece.color.value, "id": piece.id} for piece in p.pieces],
                }
                for p in self.points
            ],
            "bar": {"white": self.bar.white, "red": self.bar.red},
            "bearOff": {"white": self.bear_off.white, "red": self.bear_off.red},
            "toMove": self.to_move.value,
            "dice": list(self.dice) if self.dice is not None else None,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoardPosition":
        """Inverse of to_dict()."""
        points = tuple(
            Point(
                number=int(p["number"]),
                pieces=tuple(Piece(color=Color(x["color"]), id=str(x["id"])) for x in p["pieces"]),
            )
            for p in data["points"]
        )
        dice = data.get("dice")
        timestamp = data.get("timestamp")
        return cls(
            points=points,
            bar=ColorCounts(**data.get("bar", {})),
            bear_off=ColorCounts(**data.get("bearOff", {})),
            to_move=Color(data.get("toMove", Color.WHITE.value)),
            dice=tuple(dice) if dice else None,
            timestamp=datetime.fromisoformat(timestamp) if timestamp else datetime.now(),
            id=data.get("id", ""),
        )

    def __repr__(self) -> str:
        occupied = [
            f"{p.number}:{p.count(Color.WHITE)}w{p.count(Color.RED)}r"
            for p in self.points
            if p.pieces
        ]
        return (
            f"BoardPosition(id={self.id!r}, {' '.join(occupied)}, "
            f"bar={self.bar.white}/{self.bar.red}, off={self.bear_off.white}/{self.bear_off.red}, "
            f"to_move={self.to_move.value})"
        )


def starting_position() -> BoardPosition:
    """The standard backgammon opening position, white to move."""
    return BoardPosition(
        points=points_from_counts({
            1: (Color.WHITE, 2),
            6: (Color.RED, 5),
            8: (Color.RED, 3),
            12: (Color.WHITE, 5),
            13: (Color.RED, 5),
            17: (Color.WHITE, 3),
            19: (Color.WHITE, 5),
            24: (Color.RED, 2),
        })
    )
