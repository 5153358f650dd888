"""
End-to-end extraction pipeline: image → BoardPosition.

Orchestrates the five stages strictly in order:

    1. preprocess      image source → NormalizedImage        (ImageReadError)
    2. detect_board    → BoardDetection                      (BoardNotFoundError)
    3. segment_points  → 24 point locations                  (pure geometry)
    4. detect_pieces   → PieceDetection list                 (degrades gracefully)
    5. extract_position → BoardPosition + problems           (flagged, not raised)

Overall confidence:
    0.4 * board confidence + 0.6 * mean piece confidence
    (mean piece confidence is 0 when no piece was detected)

Only a complete PipelineResult or an exception ever leaves process_image().
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from backgammon_engine.board.position import BoardPosition, Color
from backgammon_engine.errors import BoardNotFoundError, LowConfidencePosition
from backgammon_engine.vision.board_detector import BoardDetector, ClassicalBoardDetector
from backgammon_engine.vision.extractor import extract_position
from backgammon_engine.vision.piece_detector import ClassicalPieceDetector, PieceDetector
from backgammon_engine.vision.preprocess import DEFAULT_MAX_SIDE, ImageSource, preprocess_image
from backgammon_engine.vision.segmentation import DEFAULT_ROW_FRACTION, segment_points
from backgammon_engine.vision.types import BoardDetection, NormalizedImage, PieceDetection, Point2D

logger = logging.getLogger(__name__)

BOARD_WEIGHT = 0.4
PIECE_WEIGHT = 0.6


@dataclass
class PipelineConfig:
    """Configuration for the extraction pipeline."""

    # Preprocessing
    max_image_side: int = DEFAULT_MAX_SIDE

    # Board detection
    min_board_confidence: float = 0.5

    # Point segmentation
    point_row_fraction: float = DEFAULT_ROW_FRACTION

    # Position extraction
    default_to_move: Color = Color.WHITE

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.max_image_side <= 0:
            raise ValueError(f"max_image_side must be positive, got {self.max_image_side}")

        if not 0.0 <= self.min_board_confidence <= 1.0:
            raise ValueError(
                f"min_board_confidence must be in [0, 1], got {self.min_board_confidence}"
            )

        if not 0.5 < self.point_row_fraction <= 1.0:
            raise ValueError(
                f"point_row_fraction must be in (0.5, 1], got {self.point_row_fraction}"
            )

        self.default_to_move = Color(self.default_to_move)


@dataclass(frozen=True)
class PipelineResult:
    """
    Complete output of the pipeline.

    Attributes:
        position: Extracted (possibly best-effort) position
        detection: Board detection used for segmentation
        confidence: Overall confidence in [0, 1]
        pieces: Piece detections the position was built from
        low_confidence: Set when the position should not be trusted blindly
    """

    position: BoardPosition
    detection: BoardDetection
    confidence: float
    pieces: List[PieceDetection] = field(default_factory=list)
    low_confidence: Optional[LowConfidencePosition] = None

    @property
    def is_low_confidence(self) -> bool:
        return self.low_confidence is not None


def overall_confidence(board_confidence: float, pieces: Sequence[PieceDetection]) -> float:
    """
    Combine board and piece confidences.

    Args:
        board_confidence: Board detection confidence
        pieces: Piece detections

    Returns:
        Confidence in [0, 1]; exactly 0.4 * board_confidence without pieces
    """
    mean_piece = sum(p.confidence for p in pieces) / len(pieces) if pieces else 0.0
    confidence = BOARD_WEIGHT * board_confidence + PIECE_WEIGHT * mean_piece
    return max(0.0, min(1.0, confidence))


class ExtractionPipeline:
    """Five-stage image → position pipeline with swappable detectors."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        board_detector: Optional[BoardDetector] = None,
        piece_detector: Optional[PieceDetector] = None,
    ):
        """
        Initialize extraction pipeline.

        Args:
            config: Pipeline configuration (uses defaults if None)
            board_detector: Board detection strategy (classical CV if None)
            piece_detector: Piece detection strategy (classical CV if None)
        """
        self.config = config or PipelineConfig()
        self.board_detector = board_detector or ClassicalBoardDetector()
        self.piece_detector = piece_detector or ClassicalPieceDetector()

        logger.info(
            f"Initialized pipeline: board={self.board_detector!r}, pieces={self.piece_detector!r}"
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def preprocess(self, image: ImageSource) -> NormalizedImage:
        """Stage 1. Raises ImageReadError on unreadable input."""
        return preprocess_image(image, max_side=self.config.max_image_side)

    def detect_board(self, image: NormalizedImage) -> BoardDetection:
        """Stage 2. Reports, but does not raise, a missing board."""
        return self.board_detector.detect(image)

    def segment_points(self, image: NormalizedImage, detection: BoardDetection) -> List[Point2D]:
        """Stage 3. The image is accepted for symmetry but not read."""
        return segment_points(detection, self.config.point_row_fraction)

    def detect_pieces(
        self, image: NormalizedImage, point_locations: Sequence[Point2D]
    ) -> List[PieceDetection]:
        """Stage 4."""
        return self.piece_detector.detect(image, point_locations)

    def extract_position(self, pieces: Sequence[PieceDetection]):
        """Stage 5. Returns (position, problems)."""
        return extract_position(pieces, to_move=self.config.default_to_move)

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def _check_board(self, detection: BoardDetection) -> None:
        if not detection.is_valid:
            raise BoardNotFoundError("Board not detected")

    def _finish(
        self,
        detection: BoardDetection,
        pieces: List[PieceDetection],
        position: BoardPosition,
        problems: List[str],
    ) -> PipelineResult:
        confidence = overall_confidence(detection.confidence, pieces)

        reasons = list(problems)
        if detection.confidence < self.config.min_board_confidence:
            reasons.insert(
                0,
                f"board confidence {detection.confidence:.2f} below "
                f"{self.config.min_board_confidence:.2f}",
            )
        if not pieces:
            reasons.append("no checkers detected")

        low_confidence = None
        if reasons:
            low_confidence = LowConfidencePosition(reasons=tuple(reasons), confidence=confidence)

        logger.info(
            f"Processed image: position={position.id} pieces={len(pieces)} "
            f"confidence={confidence:.2f} flagged={low_confidence is not None}"
        )

        return PipelineResult(
            position=position,
            detection=detection,
            confidence=confidence,
            pieces=list(pieces),
            low_confidence=low_confidence,
        )

    def process_image(self, image: ImageSource) -> PipelineResult:
        """
        Run all five stages on one image.

        Args:
            image: File path, encoded bytes or image array

        Returns:
            PipelineResult

        Raises:
            ImageReadError: If the image cannot be read
            BoardNotFoundError: If no board is detected
        """
        try:
            normalized = self.preprocess(image)
            detection = self.detect_board(normalized)
            self._check_board(detection)
            locations = self.segment_points(normalized, detection)
            pieces = self.detect_pieces(normalized, locations)
            position, problems = self.extract_position(pieces)
        except Exception as e:
            logger.error(f"Error processing image: {e}")
            raise

        return self._finish(detection, pieces, position, problems)

    async def process_image_async(self, image: ImageSource) -> PipelineResult:
        """
        process_image() for asyncio callers.

        Each stage runs in a worker thread and starts only after the previous
        one finished. Cancelling the task publishes nothing.
        """
        try:
            normalized = await asyncio.to_thread(self.preprocess, image)
            detection = await asyncio.to_thread(self.detect_board, normalized)
            self._check_board(detection)
            locations = await asyncio.to_thread(self.segment_points, normalized, detection)
            pieces = await asyncio.to_thread(self.detect_pieces, normalized, locations)
            position, problems = await asyncio.to_thread(self.extract_position, pieces)
        except asyncio.CancelledError:
            logger.info("Image processing cancelled")
            raise
        except Exception as e:
            logger.error(f"Error processing image: {e}")
            raise

        return self._finish(detection, pieces, position, problems)
