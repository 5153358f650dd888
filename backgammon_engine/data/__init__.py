"""
Data module: random positions, position history and HDF5 datasets.
"""

from backgammon_engine.data.dataset_writer import DatasetWriter, read_split
from backgammon_engine.data.history import HistoryItem, PositionHistory
from backgammon_engine.data.sampler import PositionSampler, SamplerConfig

__all__ = [
    "DatasetWriter",
    "read_split",
    "HistoryItem",
    "PositionHistory",
    "PositionSampler",
    "SamplerConfig",
]
