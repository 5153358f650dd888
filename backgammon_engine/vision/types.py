"""
Data types exchanged between the extraction pipeline stages.

Image coordinates follow the OpenCV convention: x to the right, y downwards,
origin at the top-left corner of the normalized image.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from backgammon_engine.board.position import Color


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float

    def distance_to(self, other: "Point2D") -> float:
        return float(np.hypot(self.x - other.x, self.y - other.y))


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def contains(self, point: Point2D) -> bool:
        return (
            self.x <= point.x <= self.x + self.width
            and self.y <= point.y <= self.y + self.height
        )


@dataclass(frozen=True)
class NormalizedImage:
    """
    Output of the preprocessing stage.

    Attributes:
        bgr: Colour image (H, W, 3) uint8, downscaled to the working size
        gray: Blurred grayscale copy (H, W) uint8
        scale: Factor applied to the source image (<= 1.0)
        source: Description of where the image came from (for logging)
    """

    bgr: np.ndarray
    gray: np.ndarray
    scale: float = 1.0
    source: str = "<array>"

    @property
    def width(self) -> int:
        return int(self.bgr.shape[1])

    @property
    def height(self) -> int:
        return int(self.bgr.shape[0])


@dataclass(frozen=True)
class BoardDetection:
    """
    Result of board detection.

    Attributes:
        corners: Four corners clockwise from top-left (TL, TR, BR, BL)
        confidence: Detection confidence in [0, 1]
        board_rect: Axis-aligned bounding rectangle of the corners
        is_valid: False when no board was found
    """

    corners: Tuple[Point2D, Point2D, Point2D, Point2D]
    confidence: float
    board_rect: Rect
    is_valid: bool

    @classmethod
    def not_found(cls) -> "BoardDetection":
        origin = Point2D(0.0, 0.0)
        return cls(
            corners=(origin, origin, origin, origin),
            confidence=0.0,
            board_rect=Rect(0.0, 0.0, 0.0, 0.0),
            is_valid=False,
        )


@dataclass(frozen=True)
class PieceDetection:
    """
    A detected checker.

    Attributes:
        position: Checker centre in image coordinates
        color: Classified colour
        confidence: Classification confidence in [0, 1]
        point_number: Nearest board point (1..24)
    """

    position: Point2D
    color: Color
    confidence: float
    point_number: int
