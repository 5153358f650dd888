"""
Stage 4 - Piece Detection

Finds checkers near the segmented points, classifies their colour and
assigns each one to its nearest point.

Classical strategy:
    1. Region of interest: the span of the point locations plus a margin
    2. Circle detection (HoughCircles) with radii derived from the point
       width (a checker is about as wide as a point)
    3. HSV colour classification inside each circle:
         red   = hue near 0/180, saturated, not dark
         white = low saturation, bright
       confidence = fraction of the disc's pixels agreeing with the winner
    4. Circles with too little of either colour are not checkers and are
       dropped
    5. Nearest point location gives the point number
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from backgammon_engine.board.position import Color
from backgammon_engine.vision.types import NormalizedImage, PieceDetection, Point2D

logger = logging.getLogger(__name__)

# HSV thresholds (OpenCV hue range is 0-179)
RED_HUE_LOW = 10
RED_HUE_HIGH = 170
RED_MIN_SATURATION = 100
RED_MIN_VALUE = 60
WHITE_MAX_SATURATION = 60
WHITE_MIN_VALUE = 160


class PieceDetector(ABC):
    """Interface for checker detection strategies."""

    @abstractmethod
    def detect(
        self, image: NormalizedImage, point_locations: Sequence[Point2D]
    ) -> List[PieceDetection]:
        """
        Detect checkers.

        Args:
            image: Output of the preprocessing stage
            point_locations: 24 point locations (index i is point i + 1)

        Returns:
            Detections in discovery order, each assigned to a point
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def nearest_point(position: Point2D, point_locations: Sequence[Point2D]) -> int:
    """
    Number of the point whose location is closest to a position.

    Ties go to the lower point number.

    Args:
        position: Checker centre
        point_locations: 24 point locations (index i is point i + 1)

    Returns:
        Point number in 1..24
    """
    if len(point_locations) != 24:
        raise ValueError(f"Expected 24 point locations, got {len(point_locations)}")

    distances = [position.distance_to(loc) for loc in point_locations]
    return int(np.argmin(distances)) + 1


def classify_color(hsv_pixels: np.ndarray, min_fraction: float = 0.3) -> Optional[Tuple[Color, float]]:
    """
    Classify a set of HSV pixels as a red or white checker.

    Args:
        hsv_pixels: (N, 3) uint8 HSV pixels
        min_fraction: Minimum share of agreeing pixels to accept a colour

    Returns:
        (colour, confidence) or None if neither colour dominates
    """
    if len(hsv_pixels) == 0:
        return None

    h = hsv_pixels[:, 0].astype(np.int32)
    s = hsv_pixels[:, 1].astype(np.int32)
    v = hsv_pixels[:, 2].astype(np.int32)

    red = ((h <= RED_HUE_LOW) | (h >= RED_HUE_HIGH)) & (s >= RED_MIN_SATURATION) & (v >= RED_MIN_VALUE)
    white = (s <= WHITE_MAX_SATURATION) & (v >= WHITE_MIN_VALUE)

    red_fraction = float(red.mean())
    white_fraction = float(white.mean())

    if max(red_fraction, white_fraction) < min_fraction:
        return None
    if red_fraction >= white_fraction:
        return Color.RED, red_fraction
    return Color.WHITE, white_fraction


class ClassicalPieceDetector(PieceDetector):
    """
    Hough-circle checker detector with HSV colour classification.

    Attributes:
        min_radius_ratio: Smallest checker radius as a fraction of point width
        max_radius_ratio: Largest checker radius as a fraction of point width
        min_color_fraction: Minimum agreeing-pixel share to accept a checker
        accumulator_threshold: HoughCircles param2 (lower finds more circles)
    """

    def __init__(
        self,
        min_radius_ratio: float = 0.3,
        max_radius_ratio: float = 0.55,
        min_color_fraction: float = 0.3,
        accumulator_threshold: int = 20,
    ):
        if not 0.0 < min_radius_ratio < max_radius_ratio:
            raise ValueError(
                f"Radius ratios must satisfy 0 < min < max, got {min_radius_ratio}, {max_radius_ratio}"
            )
        self.min_radius_ratio = min_radius_ratio
        self.max_radius_ratio = max_radius_ratio
        self.min_color_fraction = min_color_fraction
        self.accumulator_threshold = accumulator_threshold

    def detect(
        self, image: NormalizedImage, point_locations: Sequence[Point2D]
    ) -> List[PieceDetection]:
        if len(point_locations) != 24:
            raise ValueError(f"Expected 24 point locations, got {len(point_locations)}")

        xs = [p.x for p in point_locations]
        ys = [p.y for p in point_locations]
        width = abs(point_locations[0].x - point_locations[1].x)
        if width < 2.0:
            logger.warning("Point locations too close together to detect checkers")
            return []

        margin = 3.0 * width
        x0 = int(max(0, min(xs) - width))
        x1 = int(min(image.width, max(xs) + width))
        y0 = int(max(0, min(ys) - margin))
        y1 = int(min(image.height, max(ys) + margin))
        if x1 <= x0 or y1 <= y0:
            return []

        gray = image.gray[y0:y1, x0:x1]
        hsv = cv2.cvtColor(image.bgr[y0:y1, x0:x1], cv2.COLOR_BGR2HSV)

        min_r = max(1, int(self.min_radius_ratio * width))
        max_r = max(min_r + 1, int(self.max_radius_ratio * width))

        circles = cv2.HoughCircles(
            gray,
            cv2.HOUGH_GRADIENT,
            dp=1.2,
            minDist=max(1.0, 1.6 * min_r),
            param1=100,
            param2=self.accumulator_threshold,
            minRadius=min_r,
            maxRadius=max_r,
        )
        if circles is None:
            logger.debug("No circles found")
            return []

        detections: List[PieceDetection] = []
        for cx, cy, r in circles[0]:
            mask = np.zeros(gray.shape, dtype=np.uint8)
            cv2.circle(mask, (int(round(cx)), int(round(cy))), max(1, int(r * 0.8)), 255, -1)
            classified = classify_color(hsv[mask > 0], self.min_color_fraction)
            if classified is None:
                continue

            color, confidence = classified
            center = Point2D(float(cx) + x0, float(cy) + y0)
            detections.append(
                PieceDetection(
                    position=center,
                    color=color,
                    confidence=confidence,
                    point_number=nearest_point(center, point_locations),
                )
            )

        logger.debug(f"Detected {len(detections)} checkers from {len(circles[0])} circles")
        return detections
