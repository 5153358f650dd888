"""
Stage 2 - Board Detection

Finds the backgammon board in a normalized image and reports its four
corners, a bounding rectangle and a confidence.

Classical strategy:
    1. Canny edges on the blurred grayscale image, dilated to close gaps
    2. External contours approximated to polygons
    3. Keep convex quadrilaterals covering at least min_area_ratio of the
       image with an aspect ratio within max_aspect (boards are wider than
       tall but never extremely so)
    4. Fall back to an Otsu threshold if the edge map gives no candidate
    5. The largest candidate wins

Confidence:
    rectangularity = contour area / minimum-area-rectangle area
    coverage       = min(1, contour area / (full_coverage * image area))
    confidence     = 0.6 * rectangularity + 0.4 * coverage

A detector that finds nothing returns BoardDetection.not_found()
(is_valid=False); raising is the pipeline's job.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import cv2
import numpy as np

from backgammon_engine.vision.types import BoardDetection, NormalizedImage, Point2D, Rect

logger = logging.getLogger(__name__)


class BoardDetector(ABC):
    """Interface for board detection strategies."""

    @abstractmethod
    def detect(self, image: NormalizedImage) -> BoardDetection:
        """
        Locate the board.

        Args:
            image: Output of the preprocessing stage

        Returns:
            BoardDetection (is_valid=False if no board was found)
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def order_corners(pts: np.ndarray) -> np.ndarray:
    """
    Order 4 points as top-left, top-right, bottom-right, bottom-left.

    Sum / difference heuristic:
        TL has the smallest x+y, BR the largest
        TR has the smallest y-x, BL the largest

    Args:
        pts: (4, 2) array of (x, y) points

    Returns:
        (4, 2) float32 array in clockwise order from top-left
    """
    pts = np.asarray(pts, dtype=np.float32).reshape(4, 2)
    s = pts.sum(axis=1)
    d = np.diff(pts, axis=1).flatten()
    ordered = np.zeros((4, 2), dtype=np.float32)
    ordered[0] = pts[np.argmin(s)]  # TL
    ordered[1] = pts[np.argmin(d)]  # TR
    ordered[2] = pts[np.argmax(s)]  # BR
    ordered[3] = pts[np.argmax(d)]  # BL
    return ordered


class ClassicalBoardDetector(BoardDetector):
    """
    Contour-based board detector.

    Attributes:
        min_area_ratio: Smallest board area as a fraction of the image
        max_aspect: Largest accepted long-side / short-side ratio
        full_coverage: Area fraction at which the coverage score saturates
    """

    def __init__(
        self,
        min_area_ratio: float = 0.1,
        max_aspect: float = 2.5,
        full_coverage: float = 0.3,
    ):
        if not 0.0 < min_area_ratio < 1.0:
            raise ValueError(f"min_area_ratio must be in (0, 1), got {min_area_ratio}")
        if max_aspect < 1.0:
            raise ValueError(f"max_aspect must be >= 1, got {max_aspect}")

        self.min_area_ratio = min_area_ratio
        self.max_aspect = max_aspect
        self.full_coverage = full_coverage

    def detect(self, image: NormalizedImage) -> BoardDetection:
        gray = image.gray
        image_area = float(gray.shape[0] * gray.shape[1])

        edges = cv2.Canny(gray, 50, 150)
        kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (3, 3))
        edges = cv2.dilate(edges, kernel, iterations=2)

        candidate = self._best_quadrilateral(edges, image_area)
        if candidate is None:
            _, mask = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
            candidate = self._best_quadrilateral(mask, image_area)

        if candidate is None:
            logger.info(f"No board found in {image.source}")
            return BoardDetection.not_found()

        quad, confidence = candidate
        ordered = order_corners(quad)
        x, y, w, h = cv2.boundingRect(ordered.astype(np.int32))

        corners = tuple(Point2D(float(px), float(py)) for px, py in ordered)
        logger.debug(f"Board found at ({x}, {y}, {w}, {h}) with confidence {confidence:.2f}")

        return BoardDetection(
            corners=corners,
            confidence=confidence,
            board_rect=Rect(float(x), float(y), float(w), float(h)),
            is_valid=True,
        )

    def _best_quadrilateral(
        self, binary: np.ndarray, image_area: float
    ) -> Optional[Tuple[np.ndarray, float]]:
        """Largest acceptable quadrilateral in a binary image and its confidence."""
        contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        best: Optional[Tuple[np.ndarray, float]] = None
        best_area = 0.0

        for cnt in contours:
            peri = cv2.arcLength(cnt, True)
            approx = cv2.approxPolyDP(cnt, 0.02 * peri, True)
            if len(approx) != 4 or not cv2.isContourConvex(approx):
                continue

            area = float(cv2.contourArea(approx))
            if area < self.min_area_ratio * image_area or area <= best_area:
                continue

            (_, _), (rw, rh), _ = cv2.minAreaRect(approx)
            if min(rw, rh) < 1.0 or max(rw, rh) / min(rw, rh) > self.max_aspect:
                continue

            rectangularity = min(1.0, area / (rw * rh))
            coverage = min(1.0, area / (self.full_coverage * image_area))
            confidence = float(np.clip(0.6 * rectangularity + 0.4 * coverage, 0.0, 1.0))

            best = (approx.reshape(4, 2).astype(np.float32), confidence)
            best_area = area

        return best
