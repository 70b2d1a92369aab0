"""
Shared data models for both the game client and server.
This ensures consistency in data structures across components.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


@dataclass
class LevelResponse:
    """Level data as exchanged with the level server."""
    level_number: int
    matrix: List[List[int]]
    asset_keys: List[str] = field(default_factory=list)
    time_limit: Optional[int] = None
    username: str = ''

    @classmethod
    def from_dict(cls, data):
        """
        Create a LevelResponse object from a dictionary.

        The matrix may be a list of rows, or a flat list together with
        'gridSize' giving the number of columns.
        """
        matrix = data.get('matrix', [])
        if matrix and not isinstance(matrix[0], list):
            grid_size = int(data.get('gridSize') or 0)
            if grid_size <= 0:
                raise ValueError("A flat matrix needs a positive gridSize")
            matrix = [list(matrix[i:i + grid_size]) for i in range(0, len(matrix), grid_size)]

        level_number = data.get('levelNumber', data.get('level', data.get('newLevel', 1)))
        return cls(
            level_number=int(level_number),
            matrix=matrix,
            asset_keys=list(data.get('imageSet') or data.get('assetKeys') or []),
            time_limit=data.get('timeLimit'),
            username=data.get('username', '')
        )

    def to_dict(self):
        """Convert the LevelResponse object to a dictionary."""
        return {
            'levelNumber': self.level_number,
            'matrix': self.matrix,
            'gridSize': len(self.matrix[0]) if self.matrix else 0,
            'imageSet': self.asset_keys,
            'timeLimit': self.time_limit,
            'username': self.username
        }


@dataclass
class GameResult:
    """Result of a finished level, as submitted to the server."""
    username: str
    level_number: int
    score: int
    moves: int
    success: bool = True
    next_level: Optional[int] = None
    message: str = ''

    @classmethod
    def from_dict(cls, data):
        """Create a GameResult object from a dictionary."""
        return cls(
            username=data.get('username', ''),
            level_number=data.get('levelNumber', 0),
            score=data.get('score', 0),
            moves=data.get('moves', 0),
            success=data.get('success', True),
            next_level=data.get('nextLevel'),
            message=data.get('message', '')
        )

    def to_dict(self):
        """Convert the GameResult object to a dictionary."""
        return {
            'username': self.username,
            'levelNumber': self.level_number,
            'score': self.score,
            'moves': self.moves,
            'success': self.success,
            'nextLevel': self.next_level,
            'message': self.message
        }


class CompletionReason(Enum):
    SOLVED = "solved"
    TIMED_OUT = "timed_out"


# Session events, emitted by the matching engine to its listeners.

@dataclass(frozen=True)
class LevelStarted:
    level: int
    grid: Tuple[Tuple[int, ...], ...]
    time_limit: Optional[int] = None


@dataclass(frozen=True)
class CardFlipped:
    row: int
    col: int


@dataclass(frozen=True)
class PairResolved:
    matched: bool
    row1: int
    col1: int
    row2: int
    col2: int


@dataclass(frozen=True)
class ScoreChanged:
    new_score: int


@dataclass(frozen=True)
class TimeTicked:
    time_remaining: int


@dataclass(frozen=True)
class Completed:
    reason: CompletionReason
    final_score: int
    moves: int
    matched_pairs: int
