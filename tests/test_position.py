"""
Unit Tests for the Position Model

Tests for BoardPosition, focusing on:
    - Structural validation at construction
    - Game-rule validation (checker totals, mixed points)
    - Value semantics (edits return new positions)
    - Dict serialization
"""

from datetime import datetime

import pytest

from backgammon_engine.board import (
    BoardPosition,
    Color,
    ColorCounts,
    Piece,
    Point,
    points_from_counts,
    starting_position,
)
from backgammon_engine.board.position import empty_points


@pytest.fixture
def start():
    """Standard opening position."""
    return starting_position()


class TestConstruction:
    """Tests for structural checks performed by the constructor."""

    def test_empty_position(self):
        """A default position has 24 empty points and an id."""
        position = BoardPosition()

        assert len(position.points) == 24
        assert [p.number for p in position.points] == list(range(1, 25))
        assert position.checkers_on_points(Color.WHITE) == 0
        assert position.id

    def test_points_are_sorted(self):
        """Points may be given in any order; lookup is by number."""
        points = tuple(reversed(points_from_counts({3: (Color.RED, 2)})))
        position = BoardPosition(points=points)

        assert position.points[0].number == 1
        assert position.point(3).count(Color.RED) == 2

    def test_missing_point_raises(self):
        """Fewer than 24 points is a structural error."""
        with pytest.raises(ValueError, match="points numbered"):
            BoardPosition(points=empty_points()[:23])

    def test_duplicate_point_raises(self):
        """A point number may appear only once."""
        points = empty_points()[:23] + (Point(number=5),)
        with pytest.raises(ValueError, match="points numbered"):
            BoardPosition(points=points)

    def test_negative_bar_raises(self):
        """Tray counts cannot be negative."""
        with pytest.raises(ValueError, match="non-negative"):
            ColorCounts(white=-1)

    @pytest.mark.parametrize("dice", [(0, 3), (1, 7), (2,), (1, 2, 3)])
    def test_invalid_dice_raise(self, dice):
        """Dice must be a pair of values in [1, 6]."""
        with pytest.raises(ValueError, match="Dice"):
            BoardPosition(dice=dice)

    def test_valid_dice_stored_as_tuple(self):
        position = BoardPosition(dice=[6, 1])
        assert position.dice == (6, 1)

    def test_to_move_coerced(self):
        """Plain strings are accepted for the side to move."""
        position = BoardPosition(to_move="red")
        assert position.to_move is Color.RED

    def test_point_lookup_out_of_range(self, start):
        with pytest.raises(ValueError):
            start.point(0)
        with pytest.raises(ValueError):
            start.point(25)


class TestValidation:
    """Tests for game-rule validation."""

    def test_starting_position_is_valid(self, start):
        """The opening position has 15 checkers per side and no mixed points."""
        assert start.validate() == []
        assert start.is_valid
        assert start.total_checkers(Color.WHITE) == 15
        assert start.total_checkers(Color.RED) == 15

    def test_starting_layout(self, start):
        assert start.point(1).count(Color.WHITE) == 2
        assert start.point(19).count(Color.WHITE) == 5
        assert start.point(6).count(Color.RED) == 5
        assert start.point(24).count(Color.RED) == 2
        assert start.point(24).owner is Color.RED
        assert start.point(2).owner is None

    def test_missing_checkers_reported(self):
        """A position with too few checkers reports both colours."""
        position = BoardPosition(points=points_from_counts({1: (Color.WHITE, 3)}))
        violations = position.validate()

        assert "white has 3 checkers, expected 15" in violations
        assert "red has 0 checkers, expected 15" in violations
        assert not position.is_valid

    def test_bar_and_bear_off_count_towards_total(self):
        """Checkers on the bar or borne off still count."""
        position = BoardPosition(
            points=points_from_counts({1: (Color.WHITE, 10), 24: (Color.RED, 15)}),
            bar=ColorCounts(white=2),
            bear_off=ColorCounts(white=3),
        )

        assert position.checkers_in_play(Color.WHITE) == 12
        assert position.validate() == []

    def test_mixed_point_reported(self, start):
        """A point holding both colours is a violation, not an exception."""
        pieces = start.point(1).pieces + (Piece(color=Color.RED, id="x"),)
        mixed = start.with_point(1, pieces)

        assert mixed.point(1).is_mixed
        assert mixed.point(1).owner is None
        assert "point 1 holds both colours" in mixed.validate()


class TestValueSemantics:
    """Tests for immutability and identity."""

    def test_id_is_deterministic(self, start):
        """Two independently built opening positions share an id."""
        assert start.id == starting_position().id
        assert start.id != BoardPosition().id

    def test_id_ignores_piece_tokens(self, start):
        """Renaming checkers does not change the id."""
        renamed = start.with_point(
            19, tuple(Piece(color=Color.WHITE, id=f"other-{i}") for i in range(5))
        )
        assert renamed.id == start.id

    def test_with_point_returns_new_position(self, start):
        """Editing a point leaves the original untouched."""
        edited = start.with_point(1, ())

        assert start.point(1).count(Color.WHITE) == 2
        assert edited.point(1).count(Color.WHITE) == 0
        assert edited.id != start.id

    def test_frozen(self, start):
        with pytest.raises(AttributeError):
            start.to_move = Color.RED

    def test_with_changes_recomputes_id(self, start):
        """with_changes() never carries over a stale id."""
        moved = start.with_changes(points=points_from_counts({1: (Color.WHITE, 15)}))
        assert moved.id == BoardPosition(points=points_from_counts({1: (Color.WHITE, 15)})).id

        red_turn = start.with_changes(to_move=Color.RED)
        assert red_turn.id == start.id
        assert red_turn.to_move is Color.RED


class TestSerialization:
    """Tests for to_dict() / from_dict()."""

    def test_dict_keys(self, start):
        data = start.to_dict()

        assert set(data) == {"id", "points", "bar", "bearOff", "toMove", "dice", "timestamp"}
        assert data["toMove"] == "white"
        assert len(data["points"]) == 24

    def test_round_trip(self):
        position = BoardPosition(
            points=starting_position().points,
            bar=ColorCounts(white=1),
            to_move=Color.RED,
            dice=(3, 5),
            timestamp=datetime(2024, 1, 2, 3, 4, 5),
        )

        restored = BoardPosition.from_dict(position.to_dict())

        assert restored == position

    def test_repr_mentions_occupied_points(self, start):
        text = repr(start)
        assert "1:2w0r" in text
        assert "to_move=white" in text
