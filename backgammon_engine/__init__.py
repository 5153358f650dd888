"""
Backgammon Board Vision & Evaluation Engine

Turns a photograph of a backgammon board into a validated board position and
a quantitative assessment of it.

## Architecture

1. **board**: Canonical position model and encodings
   - Immutable BoardPosition with validation and plain-dict serialization
   - Position ID (identity/display) and engine-input string
   - Feature planes for the neural evaluator

2. **vision**: Five-stage extraction pipeline
   - Preprocess → detect board → segment points → detect pieces → extract position
   - Classical OpenCV detectors, swappable through BoardDetector / PieceDetector

3. **evaluation**: Position evaluation
   - EvaluationEngine: native evaluator first, heuristic fallback
   - HeuristicEvaluator: pip count, blots and material
   - NeuralEvaluator: BackgammonNet behind the native-evaluator interface

4. **data**: Random positions, history and datasets
   - PositionSampler: legal-looking random positions for tests and demos
   - PositionHistory: bounded, de-duplicated history
   - DatasetWriter: HDF5 datasets of labeled positions

5. **training**: BackgammonNet architecture

## Quick Start

```python
from backgammon_engine.vision import ExtractionPipeline
from backgammon_engine.evaluation import EvaluationEngine

result = ExtractionPipeline().process_image("board.jpg")
if result.is_low_confidence:
    print(result.low_confidence)

analysis = EvaluationEngine().evaluate(result.position)
print(f"{result.position.id}: {analysis.evaluation:+.2f} ({analysis.winning_chances.win:.1f}% win)")
```

## Version

0.1.0
"""

__version__ = "0.1.0"
__license__ = "MIT"

from backgammon_engine.board import BoardPosition, Color, encode_for_engine, position_id
from backgammon_engine.errors import (
    BackgammonEngineError,
    BoardNotFoundError,
    EvaluatorUnavailable,
    ImageReadError,
    InvalidPositionError,
    LowConfidencePosition,
)
from backgammon_engine.evaluation import EvaluationEngine, HeuristicEvaluator, PositionAnalysis

__all__ = [
    'BoardPosition',
    'Color',
    'encode_for_engine',
    'position_id',
    'BackgammonEngineError',
    'BoardNotFoundError',
    'EvaluatorUnavailable',
    'ImageReadError',
    'InvalidPositionError',
    'LowConfidencePosition',
    'EvaluationEngine',
    'HeuristicEvaluator',
    'PositionAnalysis',
]
