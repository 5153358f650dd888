"""
Board Module

This module holds the canonical position model and its encodings.

Key Components:
    - BoardPosition: Immutable board state (24 points, bar, bear-off, side to move)
    - Color, Piece, Point, ColorCounts: Building blocks of a position
    - position_id: Compact display/identity ID from the 24 point counts
    - encode_for_engine / parse_engine_encoding: Engine-input string layout
    - position_to_features: Feature planes for the learned evaluator

Data Flow:
    BoardPosition → encode_for_engine() → "BM|...|turn:white" → evaluator
    BoardPosition → position_to_features() → (4, 24) + (5,) numpy arrays → NN model
"""

from backgammon_engine.board.position import (
    BoardPosition,
    Color,
    ColorCounts,
    Piece,
    Point,
    points_from_counts,
    starting_position,
)
from backgammon_engine.board.representation import (
    EngineInput,
    encode_for_engine,
    parse_engine_encoding,
    position_id,
    position_to_features,
)

__all__ = [
    'BoardPosition',
    'Color',
    'ColorCounts',
    'Piece',
    'Point',
    'points_from_counts',
    'starting_position',
    'EngineInput',
    'encode_for_engine',
    'parse_engine_encoding',
    'position_id',
    'position_to_features',
]
