"""
Stage 5 - Position Extraction

Turns piece detections into a BoardPosition.

    - Detections are grouped by point number, keeping detection order
    - Piece ids are "<point>-<index within point>"
    - Bar and bear-off default to zero, White to move, no dice
    - Rule violations (checker totals, mixed points) and detections with an
      impossible point number are reported, never raised: a partly occluded
      board is a legitimate input and the caller decides what to accept
"""

import logging
from collections import defaultdict
from typing import DefaultDict, List, Sequence, Tuple

from backgammon_engine.board.position import BoardPosition, Color, Piece, Point
from backgammon_engine.vision.types import PieceDetection

logger = logging.getLogger(__name__)


def extract_position(
    detections: Sequence[PieceDetection],
    to_move: Color = Color.WHITE,
) -> Tuple[BoardPosition, List[str]]:
    """
    Build a best-effort position from detections.

    Args:
        detections: Output of piece detection
        to_move: Side to move (no detection signal exists for it yet)

    Returns:
        Tuple of (position, problems); problems is empty for a legal position
    """
    problems: List[str] = []
    grouped: DefaultDict[int, List[PieceDetection]] = defaultdict(list)

    for detection in detections:
        if not 1 <= detection.point_number <= 24:
            problems.append(f"detection assigned to invalid point {detection.point_number}")
            continue
        grouped[detection.point_number].append(detection)

    points = tuple(
        Point(
            number=number,
            pieces=tuple(
                Piece(color=d.color, id=f"{number}-{index}")
                for index, d in enumerate(grouped.get(number, []))
            ),
        )
        for number in range(1, 25)
    )

    position = BoardPosition(points=points, to_move=to_move)
    problems.extend(position.validate())

    if problems:
        logger.warning(f"Extracted position {position.id} has {len(problems)} problem(s): {problems}")

    return position, problems
