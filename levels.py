"""
Level generation and validation for the Memory Match game.

A level is a rectangular matrix of integer card values in which every value
appears exactly twice, plus the asset keys used to display those values.
"""
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

from shared.models import LevelResponse

MAX_SIDE = 6
MAX_LEVEL = 20
DEFAULT_ASSET = "default"

# Ordered asset list; the Nth distinct card value uses the Nth name.
ASSET_NAMES = [
    "strawberry", "banana", "kiwi", "orange", "grape",
    "apple", "cherry", "lemon", "peach", "pear",
    "watermelon", "pineapple", "mango", "blueberry", "raspberry",
    "plum", "fig", "lime", "coconut", "apricot"
]


class LevelLoadError(Exception):
    """Raised when level data does not describe a playable grid."""


@dataclass
class Level:
    """Descriptor of a single level."""
    level_number: int
    matrix: List[List[int]]
    asset_keys: List[str] = field(default_factory=list)
    time_limit: Optional[int] = None

    @property
    def rows(self) -> int:
        return len(self.matrix)

    @property
    def columns(self) -> int:
        return len(self.matrix[0]) if self.matrix else 0

    @property
    def total_pairs(self) -> int:
        return (self.rows * self.columns) // 2

    def is_valid(self) -> bool:
        return validate_matrix(self.matrix) and valid_time_limit(self.time_limit)

    def asset_for(self, value) -> str:
        """Asset key for a card value, by the value's rank among distinct values."""
        distinct = sorted({v for row in self.matrix for v in row})
        try:
            index = distinct.index(value)
        except ValueError:
            return DEFAULT_ASSET
        if index < len(self.asset_keys):
            return self.asset_keys[index]
        return DEFAULT_ASSET

    def to_response(self, username='') -> LevelResponse:
        return LevelResponse(
            level_number=self.level_number,
            matrix=[list(row) for row in self.matrix],
            asset_keys=list(self.asset_keys),
            time_limit=self.time_limit,
            username=username
        )

    def __str__(self):
        return f"Level {self.level_number}: {self.rows}x{self.columns} grid, {self.total_pairs} pairs"


FIXED_LEVELS = {
    1: Level(1, [[1, 2],
                 [2, 1]],
             ASSET_NAMES[:2], time_limit=120),
    2: Level(2, [[1, 2, 3, 4],
                 [5, 6, 1, 2],
                 [3, 4, 5, 6]],
             ASSET_NAMES[:6], time_limit=180),
    3: Level(3, [[1, 2, 3, 4],
                 [5, 6, 7, 8],
                 [2, 1, 4, 3],
                 [8, 7, 6, 5]],
             ASSET_NAMES[:8], time_limit=300),
}


def validate_matrix(matrix) -> bool:
    """
    Check that a matrix can be played.

    Checks run in order and stop at the first failure: the grid is not
    empty, all rows have the same length, the cell count is even, and every
    value occurs exactly twice. Never raises.

    Args:
        matrix: Sequence of rows of card values

    Returns:
        True if the matrix is a valid grid of pairs
    """
    try:
        if not matrix or not matrix[0]:
            return False

        columns = len(matrix[0])
        for row in matrix:
            if len(row) != columns:
                return False

        if (len(matrix) * columns) % 2 != 0:
            return False

        counts = Counter(value for row in matrix for value in row)
    except (TypeError, KeyError, IndexError):
        return False

    return all(count == 2 for count in counts.values())


def grid_shape(level_number: int):
    """
    Rows and columns of a generated level.

    The side grows by one every two levels up to MAX_SIDE. Odd areas get one
    extra column so the cell count is always even.
    """
    side = min(3 + (level_number - 1) // 2, MAX_SIDE)
    columns = side if (side * side) % 2 == 0 else side + 1
    return side, columns


def valid_time_limit(time_limit) -> bool:
    """None (untimed) or a non-negative whole number of seconds."""
    if time_limit is None:
        return True
    return isinstance(time_limit, int) and not isinstance(time_limit, bool) and time_limit >= 0


def time_limit_for(level_number: int) -> int:
    return 60 + level_number * 30


def generate_level(level_number: int, rng=None) -> Level:
    """
    Build the level descriptor for a level number.

    Args:
        level_number: Level to build, starting at 1
        rng: Optional random.Random instance or integer seed

    Returns:
        A Level whose matrix passes validate_matrix
    """
    if level_number < 1:
        raise ValueError(f"Level number must be positive, got {level_number}")

    fixed = FIXED_LEVELS.get(level_number)
    if fixed is not None:
        return Level(fixed.level_number, [list(row) for row in fixed.matrix],
                     list(fixed.asset_keys), fixed.time_limit)

    if not isinstance(rng, random.Random):
        rng = random.Random(rng)

    rows, columns = grid_shape(level_number)
    pairs = (rows * columns) // 2

    values = []
    for value in range(1, pairs + 1):
        values.append(value)
        values.append(value)
    rng.shuffle(values)

    matrix = [values[r * columns:(r + 1) * columns] for r in range(rows)]
    return Level(level_number, matrix, ASSET_NAMES[:pairs], time_limit_for(level_number))


def default_level(level_number: int = 1) -> Level:
    """Minimal known-good level used when level data cannot be loaded."""
    return Level(level_number, [[1, 2], [1, 2]], ASSET_NAMES[:2], time_limit=None)


def level_from_response(response: LevelResponse) -> Level:
    """
    Turn externally sourced level data into a Level.

    Raises:
        LevelLoadError: if the matrix is not a valid grid of pairs
    """
    if not validate_matrix(response.matrix):
        raise LevelLoadError(f"Invalid matrix for level {response.level_number}")
    if not all(isinstance(value, int) and not isinstance(value, bool)
               for row in response.matrix for value in row):
        raise LevelLoadError(f"Card values for level {response.level_number} must be integers")
    if not valid_time_limit(response.time_limit):
        raise LevelLoadError(f"Invalid time limit for level {response.level_number}: {response.time_limit!r}")

    level = Level(
        level_number=response.level_number,
        matrix=[list(row) for row in response.matrix],
        asset_keys=list(response.asset_keys),
        time_limit=response.time_limit
    )
    if not level.asset_keys:
        level.asset_keys = ASSET_NAMES[:level.total_pairs]
    return level
