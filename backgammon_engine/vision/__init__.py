"""
Vision Module

Extraction pipeline turning a board photograph into a BoardPosition.

Key Components:
    - ExtractionPipeline: Runs the five stages in order
    - PipelineConfig / PipelineResult: Settings and output
    - BoardDetector / ClassicalBoardDetector: Stage 2 strategies
    - PieceDetector / ClassicalPieceDetector: Stage 4 strategies
    - preprocess_image, segment_points, extract_position: Stages 1, 3, 5

Data Flow:
    image → preprocess → detect_board → segment_points → detect_pieces
          → extract_position → PipelineResult(position, detection, confidence)
"""

from backgammon_engine.vision.board_detector import BoardDetector, ClassicalBoardDetector
from backgammon_engine.vision.extractor import extract_position
from backgammon_engine.vision.piece_detector import ClassicalPieceDetector, PieceDetector
from backgammon_engine.vision.pipeline import (
    ExtractionPipeline,
    PipelineConfig,
    PipelineResult,
    overall_confidence,
)
from backgammon_engine.vision.preprocess import preprocess_image
from backgammon_engine.vision.segmentation import point_locations, segment_points
from backgammon_engine.vision.types import (
    BoardDetection,
    NormalizedImage,
    PieceDetection,
    Point2D,
    Rect,
)

__all__ = [
    "BoardDetector",
    "ClassicalBoardDetector",
    "extract_position",
    "ClassicalPieceDetector",
    "PieceDetector",
    "ExtractionPipeline",
    "PipelineConfig",
    "PipelineResult",
    "overall_confidence",
    "preprocess_image",
    "point_locations",
    "segment_points",
    "BoardDetection",
    "NormalizedImage",
    "PieceDetection",
    "Point2D",
    "Rect",
]
