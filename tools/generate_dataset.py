#!/usr/bin/env python3
"""
CLI tool for generating labeled backgammon position datasets.

Positions come from the PositionSampler and are labeled by the evaluation
engine (heuristic unless a model checkpoint is given).

Usage:
    python tools/generate_dataset.py \\
        --output data/positions.h5 \\
        --num-positions 100000 \\
        --seed 42

    python tools/generate_dataset.py \\
        --output data/positions.h5 \\
        --model models/backgammon_net.pt \\
        --overwrite
"""

import argparse
import logging
import sys
from pathlib import Path

from tqdm import tqdm

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backgammon_engine.data.dataset_writer import DatasetWriter
from backgammon_engine.data.sampler import PositionSampler, SamplerConfig
from backgammon_engine.evaluation.engine import EvaluationEngine
from backgammon_engine.evaluation.neural import NeuralEvaluator


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def generate_dataset(args):
    """Sample, label and write positions."""
    output_path = Path(args.output)

    if output_path.exists() and not args.overwrite:
        print(f"Error: Output file already exists: {output_path}")
        print("Use --overwrite to replace it")
        sys.exit(1)

    total_ratio = args.train_ratio + args.val_ratio + args.test_ratio
    if not (0.99 < total_ratio < 1.01):
        print(f"Error: Split ratios must sum to 1.0, got {total_ratio}")
        sys.exit(1)

    try:
        sampler_config = SamplerConfig(
            min_points=args.min_points,
            max_points=args.max_points,
            max_per_point=args.max_per_point,
            max_bar=args.max_bar,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    sampler = PositionSampler(sampler_config, seed=args.seed)

    native = NeuralEvaluator() if args.model else None
    engine = EvaluationEngine(native=native, model_reference=args.model)
    if args.model and not engine.probe():
        print(f"Error: Could not load model: {args.model}")
        sys.exit(1)

    with DatasetWriter(
        output_path,
        train_ratio=args.train_ratio,
        val_ratio=args.val_ratio,
        test_ratio=args.test_ratio,
    ) as writer:
        positions, analyses = [], []
        for position in tqdm(sampler.sample_many(args.num_positions), total=args.num_positions,
                             desc="Generating positions"):
            positions.append(position)
            analyses.append(engine.evaluate(position))

            if len(positions) >= args.batch_size:
                writer.append_batch(positions, analyses)
                positions, analyses = [], []

        if positions:
            writer.append_batch(positions, analyses)

        counts = writer.get_counts()

    print(f"\nDataset generated successfully: {output_path}")
    for split, count in counts.items():
        print(f"  {split}: {count:,}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Generate labeled backgammon position datasets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--output", required=True, help="Output HDF5 file")
    parser.add_argument("--num-positions", type=int, default=10000, help="Number of positions")
    parser.add_argument("--batch-size", type=int, default=1000, help="Positions per write")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--model", default=None, help="BackgammonNet checkpoint used for labels")
    parser.add_argument("--overwrite", action="store_true", help="Replace existing output")

    sampling = parser.add_argument_group("sampling")
    sampling.add_argument("--min-points", type=int, default=3)
    sampling.add_argument("--max-points", type=int, default=8)
    sampling.add_argument("--max-per-point", type=int, default=5)
    sampling.add_argument("--max-bar", type=int, default=2)

    splits = parser.add_argument_group("splits")
    splits.add_argument("--train-ratio", type=float, default=0.8)
    splits.add_argument("--val-ratio", type=float, default=0.1)
    splits.add_argument("--test-ratio", type=float, default=0.1)

    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()
    setup_logging(args.verbose)

    if args.num_positions <= 0 or args.batch_size <= 0:
        print("Error: --num-positions and --batch-size must be positive")
        sys.exit(1)

    generate_dataset(args)


if __name__ == "__main__":
    main()
