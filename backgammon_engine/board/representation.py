"""
Position Encodings

This module turns board positions into the three representations the rest of
the engine consumes:

1. Display / identity ID (position_id):
    Compact string built only from the 24 (white, red) count pairs, in point
    order. Piece tokens and detection order never influence it.

    Bit layout (in the spirit of GNU Backgammon position ids):
        for colour in (white, red):
            for point in 1..24:
                <count> one-bits, then a single zero-bit
    Bits are packed little-endian into bytes and base64-encoded without
    padding. The unary/terminator scheme is prefix-free, so distinct count
    vectors always produce distinct ids, for any counts (not only legal ones).

2. Engine input (encode_for_engine):
    Fixed textual layout shared with every evaluator implementation:

        BM|w,r;w,r;...;w,r|bar:w,r|bear:w,r|turn:<white|red>

    24 semicolon-separated (white, red) pairs for points 1..24. Dice are not
    part of the encoding.

3. Feature planes (engine_input_to_features):
    Numeric input for the learned evaluator.

    Planes, shape (4, 24), one column per point:
        0: White checkers / 15
        1: Red checkers / 15
        2: White made point (>= 2 checkers)
        3: Red made point (>= 2 checkers)

    Globals, shape (5,):
        0: White bar / 15      2: White borne off / 15
        1: Red bar / 15        3: Red borne off / 15
        4: Side to move (1.0 if white, 0.0 if red)
"""

import base64
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Sequence, Tuple

import numpy as np

if TYPE_CHECKING:
    from backgammon_engine.board.position import BoardPosition

ENGINE_PREFIX = "BM"
NUM_PLANES = 4
NUM_GLOBALS = 5

# Normalizer for feature planes (checkers per side)
_CHECKERS = 15.0


@dataclass(frozen=True)
class EngineInput:
    """Decoded engine-input string."""

    point_counts: Tuple[Tuple[int, int], ...]  # (white, red) for points 1..24
    bar: Tuple[int, int]  # (white, red)
    bear_off: Tuple[int, int]  # (white, red)
    to_move: str  # "white" | "red"


# ============================================================================
# Display / identity ID
# ============================================================================

def position_id(point_counts: Sequence[Tuple[int, int]]) -> str:
    """
    Compute the display/identity ID from per-point counts.

    Args:
        point_counts: 24 (white, red) count pairs for points 1..24

    Returns:
        Base64 string (no padding)

    Raises:
        ValueError: If there are not exactly 24 pairs or a count is negative
    """
    if len(point_counts) != 24:
        raise ValueError(f"Expected 24 point counts, got {len(point_counts)}")

    bits: List[int] = []
    for side in (0, 1):
        for pair in point_counts:
            count = pair[side]
            if count < 0:
                raise ValueError(f"Negative checker count: {count}")
            bits.extend([1] * count)
            bits.append(0)

    data = bytearray((len(bits) + 7) // 8)
    for i, bit in enumerate(bits):
        if bit:
            data[i // 8] |= 1 << (i % 8)

    return base64.b64encode(bytes(data)).decode("ascii").rstrip("=")


# ============================================================================
# Engine input
# ============================================================================

def encode_for_engine(position: "BoardPosition") -> str:
    """
    Encode a position in the engine-input layout.

    Two positions encode identically iff they have the same point counts,
    bar, bear-off and side to move.

    Args:
        position: Position to encode

    Returns:
        Engine-input string
    """
    body = ";".join(f"{w},{r}" for w, r in position.point_counts())
    return (
        f"{ENGINE_PREFIX}|{body}"
        f"|bar:{position.bar.white},{position.bar.red}"
        f"|bear:{position.bear_off.white},{position.bear_off.red}"
        f"|turn:{position.to_move.value}"
    )


def _parse_pair(text: str) -> Tuple[int, int]:
    white, red = text.split(",")
    pair = (int(white), int(red))
    if pair[0] < 0 or pair[1] < 0:
        raise ValueError(f"Negative count in pair {text!r}")
    return pair


def parse_engine_encoding(encoded: str) -> EngineInput:
    """
    Decode an engine-input string.

    This is the inverse of encode_for_engine() for everything the encoding
    carries (piece tokens, dice and timestamp are not recoverable).

    Args:
        encoded: String produced by encode_for_engine()

    Returns:
        EngineInput

    Raises:
        ValueError: If the string does not follow the layout
    """
    fields = encoded.split("|")
    if len(fields) != 5 or fields[0] != ENGINE_PREFIX:
        raise ValueError(f"Malformed engine encoding: {encoded!r}")

    _, body, bar_field, bear_field, turn_field = fields
    try:
        pairs = tuple(_parse_pair(pair) for pair in body.split(";"))
        if len(pairs) != 24:
            raise ValueError(f"Expected 24 point pairs, got {len(pairs)}")

        if not (bar_field.startswith("bar:") and bear_field.startswith("bear:")
                and turn_field.startswith("turn:")):
            raise ValueError("Missing bar/bear/turn field")

        bar = _parse_pair(bar_field[len("bar:"):])
        bear_off = _parse_pair(bear_field[len("bear:"):])
    except ValueError as e:
        raise ValueError(f"Malformed engine encoding {encoded!r}: {e}") from e

    to_move = turn_field[len("turn:"):]
    if to_move not in ("white", "red"):
        raise ValueError(f"Malformed engine encoding {encoded!r}: bad side to move {to_move!r}")

    return EngineInput(point_counts=pairs, bar=bar, bear_off=bear_off, to_move=to_move)


# ============================================================================
# Feature planes
# ============================================================================

def engine_input_to_features(engine_input: EngineInput) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert a decoded position into feature planes and global features.

    Args:
        engine_input: Decoded engine input

    Returns:
        Tuple of (planes (4, 24) float32, globals (5,) float32)
    """
    counts = np.array(engine_input.point_counts, dtype=np.float32)  # (24, 2)

    planes = np.zeros((NUM_PLANES, 24), dtype=np.float32)
    planes[0] = counts[:, 0] / _CHECKERS
    planes[1] = counts[:, 1] / _CHECKERS
    planes[2] = (counts[:, 0] >= 2).astype(np.float32)
    planes[3] = (counts[:, 1] >= 2).astype(np.float32)

    globals_ = np.array(
        [
            engine_input.bar[0] / _CHECKERS,
            engine_input.bar[1] / _CHECKERS,
            engine_input.bear_off[0] / _CHECKERS,
            engine_input.bear_off[1] / _CHECKERS,
            1.0 if engine_input.to_move == "white" else 0.0,
        ],
        dtype=np.float32,
    )

    return planes, globals_


def position_to_features(position: "BoardPosition") -> Tuple[np.ndarray, np.ndarray]:
    """Shortcut: encode_for_engine() followed by engine_input_to_features()."""
    return engine_input_to_features(parse_engine_encoding(encode_for_engine(position)))
