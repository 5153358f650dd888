"""
Stage 3 - Point Segmentation

Maps the 24 board points onto image coordinates. Purely geometric: only the
detected board rectangle is used, never pixel content.

Layout (viewed from White's home side, 14 columns across the board):

     13 14 15 16 17 18 | bar | 19 20 21 22 23 24
     12 11 10  9  8  7 | bar |  6  5  4  3  2  1

    - Columns 0-5 and 8-13 hold points, columns 6-7 are the bar
    - Points 1-12 run right-to-left along the bottom edge
    - Points 13-24 run left-to-right along the top edge
    - Point n and point 25 - n share a column (mirrored halves)

Each location is the reference spot a checker on that point is measured
against: the column centre at row_fraction of the board height (bottom edge)
or 1 - row_fraction (top edge).
"""

from typing import List

from backgammon_engine.vision.types import BoardDetection, Point2D, Rect

COLUMNS = 14
BAR_COLUMNS = (6, 7)
POINTS_PER_SIDE = 12
DEFAULT_ROW_FRACTION = 0.8


def point_column(number: int) -> int:
    """
    Board column (0 = leftmost) of a point.

    Args:
        number: Point number in 1..24

    Returns:
        Column index in 0..13, never a bar column
    """
    if not 1 <= number <= 24:
        raise ValueError(f"Point number must be in [1, 24], got {number}")

    # Slot 0..11 from the left, ignoring the bar
    slot = POINTS_PER_SIDE - number if number <= POINTS_PER_SIDE else number - 13
    return slot if slot < BAR_COLUMNS[0] else slot + len(BAR_COLUMNS)


def point_width(rect: Rect) -> float:
    return rect.width / COLUMNS


def point_locations(rect: Rect, row_fraction: float = DEFAULT_ROW_FRACTION) -> List[Point2D]:
    """
    Reference locations of points 1..24 inside a board rectangle.

    Args:
        rect: Board bounding rectangle
        row_fraction: Vertical position of bottom-edge points (0.5 < f <= 1)

    Returns:
        24 locations; index i is point i + 1
    """
    if not 0.5 < row_fraction <= 1.0:
        raise ValueError(f"row_fraction must be in (0.5, 1], got {row_fraction}")

    width = point_width(rect)
    bottom_y = rect.y + rect.height * row_fraction
    top_y = rect.y + rect.height * (1.0 - row_fraction)

    locations = []
    for number in range(1, 25):
        x = rect.x + point_column(number) * width + width / 2
        y = bottom_y if number <= POINTS_PER_SIDE else top_y
        locations.append(Point2D(x, y))

    return locations


def segment_points(
    detection: BoardDetection, row_fraction: float = DEFAULT_ROW_FRACTION
) -> List[Point2D]:
    """Point locations for a board detection (see point_locations)."""
    return point_locations(detection.board_rect, row_fraction)
