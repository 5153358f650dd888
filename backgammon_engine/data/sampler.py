"""
Random legal-looking position generation for tests and demos.

Algorithm (per colour, White first):
    1. Both colours draw disjoint point sets from a shuffled pool of 1..24
       (min_points..max_points points each, limited by what is left)
    2. 15 checkers are dealt round-robin over the colour's points, the order
       reshuffled every round, never exceeding max_per_point on a point
    3. When every owned point is full, an unused point is borrowed from the
       pool
    4. If the pool runs dry, leftover checkers go to the bar (random draw
       capped at max_bar) and the rest are borne off

Guarantees: 15 checkers per colour, no point holding both colours.
"""

import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from backgammon_engine.board.position import (
    CHECKERS_PER_SIDE,
    BoardPosition,
    Color,
    ColorCounts,
    points_from_counts,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SamplerConfig:
    """Configuration for position sampling."""

    min_points: int = 3
    max_points: int = 8
    max_per_point: int = 5
    max_bar: int = 2

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not 1 <= self.min_points <= self.max_points:
            raise ValueError(
                f"Need 1 <= min_points <= max_points, got {self.min_points}, {self.max_points}"
            )

        if self.max_per_point <= 0:
            raise ValueError(f"max_per_point must be positive, got {self.max_per_point}")

        if self.max_bar < 0:
            raise ValueError(f"max_bar must be non-negative, got {self.max_bar}")


class PositionSampler:
    """Generate random positions that respect checker totals and point ownership."""

    def __init__(self, config: Optional[SamplerConfig] = None, seed: Optional[int] = None):
        """
        Initialize position sampler.

        Args:
            config: Sampling configuration (uses defaults if None)
            seed: Random seed for reproducibility (None for random)
        """
        self.config = config or SamplerConfig()
        self.rng = random.Random(seed)

    def _take_points(self, pool: List[int]) -> List[int]:
        wanted = self.rng.randint(self.config.min_points, self.config.max_points)
        taken = pool[:wanted]
        del pool[:wanted]
        return taken

    def _distribute(self, owned: List[int], pool: List[int]) -> Tuple[Dict[int, int], int]:
        """
        Deal 15 checkers over owned points, borrowing from the pool when full.

        Returns:
            Tuple of ({point: count}, checkers left unplaced)
        """
        cap = self.config.max_per_point
        counts = {number: 0 for number in owned}
        remaining = CHECKERS_PER_SIDE

        while remaining > 0:
            open_points = [n for n, c in counts.items() if c < cap]
            if not open_points:
                if not pool:
                    break
                counts[pool.pop()] = 0
                continue

            self.rng.shuffle(open_points)
            for number in open_points:
                if remaining == 0:
                    break
                counts[number] += 1
                remaining -= 1

        return {n: c for n, c in counts.items() if c > 0}, remaining

    def _split_leftover(self, leftover: int) -> Tuple[int, int]:
        """Split unplaced checkers into (bar, borne off)."""
        bar = self.rng.randint(0, min(leftover, self.config.max_bar))
        return bar, leftover - bar

    def sample(self) -> BoardPosition:
        """
        Generate one random position.

        Returns:
            BoardPosition with 15 checkers per colour and no mixed points
        """
        pool = list(range(1, 25))
        self.rng.shuffle(pool)

        owned = {Color.WHITE: self._take_points(pool)}
        owned[Color.RED] = self._take_points(pool)

        point_counts: Dict[int, Tuple[Color, int]] = {}
        bar: Dict[Color, int] = {}
        off: Dict[Color, int] = {}

        for color in (Color.WHITE, Color.RED):
            counts, leftover = self._distribute(owned[color], pool)
            for number, count in counts.items():
                point_counts[number] = (color, count)
            bar[color], off[color] = self._split_leftover(leftover)

        position = BoardPosition(
            points=points_from_counts(point_counts),
            bar=ColorCounts(white=bar[Color.WHITE], red=bar[Color.RED]),
            bear_off=ColorCounts(white=off[Color.WHITE], red=off[Color.RED]),
            to_move=self.rng.choice([Color.WHITE, Color.RED]),
        )

        logger.debug(f"Sampled position {position.id}")
        return position

    def sample_many(self, count: int) -> Iterator[BoardPosition]:
        """
        Generate several random positions.

        Args:
            count: Number of positions

        Yields:
            BoardPosition objects
        """
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        for _ in range(count):
            yield self.sample()
