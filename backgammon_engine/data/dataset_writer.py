"""
HDF5 dataset writer for labeled backgammon positions.

Writes feature planes and evaluation labels with train/validation/test
splits, e.g. sampled positions labeled by the heuristic evaluator for
bootstrapping the neural evaluator.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, cast

import h5py
import numpy as np

from backgammon_engine.board.position import BoardPosition
from backgammon_engine.board.representation import NUM_GLOBALS, NUM_PLANES, position_to_features
from backgammon_engine.evaluation.base import PositionAnalysis

logger = logging.getLogger(__name__)

SPLITS = ("train", "validation", "test")


class DatasetWriter:
    """Write backgammon position datasets to HDF5 format."""

    def __init__(
        self,
        output_path: Path,
        train_ratio: float = 0.8,
        val_ratio: float = 0.1,
        test_ratio: float = 0.1,
        chunk_size: int = 1000,
    ):
        """
        Initialize dataset writer.

        Args:
            output_path: Path to output HDF5 file
            train_ratio: Fraction of data for training (default: 0.8)
            val_ratio: Fraction of data for validation (default: 0.1)
            test_ratio: Fraction of data for testing (default: 0.1)
            chunk_size: Chunk size for HDF5 datasets

        Raises:
            ValueError: If ratios don't sum to 1.0
        """
        if not np.isclose(train_ratio + val_ratio + test_ratio, 1.0):
            raise ValueError(
                f"Split ratios must sum to 1.0, got {train_ratio + val_ratio + test_ratio}"
            )

        self.output_path = Path(output_path)
        self.ratios = {"train": train_ratio, "validation": val_ratio, "test": test_ratio}
        self.chunk_size = chunk_size

        self.h5file: Optional[h5py.File] = None
        self._counts = {split: 0 for split in SPLITS}
        self._total_count = 0

        logger.info(f"Initialized dataset writer: {output_path}")

    def create_datasets(self):
        """
        Create HDF5 file with empty datasets.

        Creates three groups (train, validation, test) each with:
        - planes: (N, 4, 24) float32
        - globals: (N, 5) float32
        - evaluations: (N,) float32
        - chances: (N, 3) float32 win/gammon/backgammon percentages
        - position_ids: (N,) variable-length string
        """
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.h5file = h5py.File(self.output_path, "w")

        for split in SPLITS:
            group = self.h5file.create_group(split)

            group.create_dataset(
                "planes",
                shape=(0, NUM_PLANES, 24),
                maxshape=(None, NUM_PLANES, 24),
                dtype=np.float32,
                chunks=(self.chunk_size, NUM_PLANES, 24),
                compression="gzip",
                compression_opts=4,
            )
            group.create_dataset(
                "globals",
                shape=(0, NUM_GLOBALS),
                maxshape=(None, NUM_GLOBALS),
                dtype=np.float32,
                chunks=(self.chunk_size, NUM_GLOBALS),
                compression="gzip",
            )
            group.create_dataset(
                "evaluations",
                shape=(0,),
                maxshape=(None,),
                dtype=np.float32,
                chunks=(self.chunk_size,),
                compression="gzip",
            )
            group.create_dataset(
                "chances",
                shape=(0, 3),
                maxshape=(None, 3),
                dtype=np.float32,
                chunks=(self.chunk_size, 3),
                compression="gzip",
            )
            group.create_dataset(
                "position_ids",
                shape=(0,),
                maxshape=(None,),
                dtype=h5py.string_dtype(encoding="utf-8"),
                chunks=(self.chunk_size,),
                compression="gzip",
            )

        self.h5file.attrs["creation_date"] = datetime.now().isoformat()
        for split, ratio in self.ratios.items():
            self.h5file.attrs[f"{split}_ratio"] = ratio
        self.h5file.attrs["version"] = "1.0"

        logger.info(f"Created HDF5 datasets at {self.output_path}")

    def append_batch(
        self,
        positions: Sequence[BoardPosition],
        analyses: Sequence[PositionAnalysis],
        split: str = "auto",
    ):
        """
        Append labeled positions to the dataset.

        Args:
            positions: Positions to store
            analyses: One analysis per position (the labels)
            split: "train", "validation", "test", or "auto" (by split ratios)

        Raises:
            RuntimeError: If create_datasets() was not called
            ValueError: If lengths differ or split is invalid
        """
        if self.h5file is None:
            raise RuntimeError("Must call create_datasets() first")

        if len(positions) != len(analyses):
            raise ValueError("positions and analyses must have same length")

        batch_size = len(positions)
        if batch_size == 0:
            return

        if split == "auto":
            split = self._auto_assign_split()
        elif split not in SPLITS:
            raise ValueError(f"Invalid split: {split}")

        features = [position_to_features(p) for p in positions]
        columns: Dict[str, Any] = {
            "planes": np.stack([f[0] for f in features]),
            "globals": np.stack([f[1] for f in features]),
            "evaluations": np.array([a.evaluation for a in analyses], dtype=np.float32),
            "chances": np.array(
                [
                    [a.winning_chances.win, a.winning_chances.gammon, a.winning_chances.backgammon]
                    for a in analyses
                ],
                dtype=np.float32,
            ),
            "position_ids": [p.id for p in positions],
        }

        group = cast(h5py.Group, self.h5file[split])
        current_size = cast(h5py.Dataset, group["planes"]).shape[0]
        new_size = current_size + batch_size

        for name, values in columns.items():
            dataset = cast(h5py.Dataset, group[name])
            dataset.resize(new_size, axis=0)
            dataset[current_size:new_size] = values

        self._counts[split] += batch_size
        self._total_count += batch_size

        logger.debug(f"Appended {batch_size} positions to {split} (total: {self._counts[split]})")

    def _auto_assign_split(self) -> str:
        """Split furthest below its target ratio ("train" for an empty dataset)."""
        if self._total_count == 0:
            return "train"

        deficits = {
            split: self.ratios[split] - self._counts[split] / self._total_count
            for split in SPLITS
        }
        return max(deficits, key=lambda split: deficits[split])

    def finalize(self):
        """Finalize and close the HDF5 file, recording final counts."""
        if self.h5file is None:
            return

        for split in SPLITS:
            self.h5file.attrs[f"{split}_count"] = self._counts[split]
        self.h5file.attrs["total_count"] = self._total_count

        self.h5file.close()
        self.h5file = None

        logger.info(f"Finalized dataset: {self.output_path} ({self._total_count:,} positions)")

    def get_counts(self) -> Dict[str, int]:
        """Get current position counts for each split."""
        return self._counts.copy()

    def __enter__(self):
        """Context manager entry."""
        self.create_datasets()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.finalize()


def read_split(path: Path, split: str) -> Dict[str, Any]:
    """
    Load one split of a dataset into memory.

    Returns:
        Dict with numpy arrays for planes, globals, evaluations, chances and
        a list of position id strings
    """
    with h5py.File(path, "r") as f:
        if split not in f:
            raise ValueError(f"Dataset has no split {split!r}")
        group = cast(h5py.Group, f[split])
        ids: List[str] = [
            x.decode() if isinstance(x, bytes) else str(x)
            for x in cast(h5py.Dataset, group["position_ids"])[:]
        ]
        return {
            "planes": cast(h5py.Dataset, group["planes"])[:],
            "globals": cast(h5py.Dataset, group["globals"])[:],
            "evaluations": cast(h5py.Dataset, group["evaluations"])[:],
            "chances": cast(h5py.Dataset, group["chances"])[:],
            "position_ids": ids,
        }
