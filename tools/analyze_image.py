#!/usr/bin/env python3
"""
Run the extraction pipeline and the evaluation engine on one board photo.

Usage:
    python tools/analyze_image.py board.jpg
    python tools/analyze_image.py board.jpg --model models/backgammon_net.pt --json
    python tools/analyze_image.py board.jpg --history data/history.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backgammon_engine.data.history import HistoryItem, PositionHistory
from backgammon_engine.errors import BoardNotFoundError, ImageReadError
from backgammon_engine.evaluation.engine import EvaluationEngine
from backgammon_engine.evaluation.neural import NeuralEvaluator
from backgammon_engine.vision.pipeline import ExtractionPipeline, PipelineConfig


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Analyse a backgammon board photograph")
    parser.add_argument("image", help="Image file")
    parser.add_argument("--model", default=None, help="BackgammonNet checkpoint")
    parser.add_argument("--min-board-confidence", type=float, default=0.5)
    parser.add_argument("--history", default=None, help="JSON history file to append to")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)

    pipeline = ExtractionPipeline(PipelineConfig(min_board_confidence=args.min_board_confidence))
    engine = EvaluationEngine(
        native=NeuralEvaluator() if args.model else None,
        model_reference=args.model,
    )

    try:
        result = pipeline.process_image(args.image)
    except (ImageReadError, BoardNotFoundError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    analysis = engine.evaluate(result.position)

    if args.history:
        history = PositionHistory.load(args.history)
        history.add(HistoryItem(position=result.position, analysis=analysis, image_ref=args.image))
        history.save(args.history)

    if args.json:
        print(json.dumps({
            "position": result.position.to_dict(),
            "analysis": analysis.to_dict(),
            "confidence": result.confidence,
            "lowConfidence": list(result.low_confidence.reasons) if result.low_confidence else None,
        }, indent=2))
        return

    chances = analysis.winning_chances
    print(f"Position ID:  {result.position.id}")
    print(f"Confidence:   {result.confidence:.2f}")
    if result.low_confidence:
        for reason in result.low_confidence.reasons:
            print(f"  warning: {reason}")
    print(f"Evaluation:   {analysis.evaluation:+.3f}")
    print(f"Win:          {chances.win:.1f}%")
    print(f"Gammon:       {chances.gammon:.1f}%")
    print(f"Backgammon:   {chances.backgammon:.1f}%")
    if analysis.best_move:
        print(f"Best move:    {analysis.best_move.notation}")


if __name__ == "__main__":
    main()
