from typing import Callable, List, Optional, Tuple

from levels import Level, LevelLoadError
from settings import ScoringRules
from shared.models import (
    CardFlipped, Completed, CompletionReason, LevelStarted, PairResolved,
    ScoreChanged, TimeTicked
)


class Card:
    """
    A class representing a memory card in the memory card game.
    Each card has a value, can be face up or face down, and can be matched or unmatched.
    """

    def __init__(self, value, card_id=None, asset_key=None):
        """
        Initialize a new card.

        Args:
            value: The value of the card, shared with exactly one other card
            card_id: Optional unique identifier for the card
            asset_key: Name of the image the presentation layer shows for this value
        """
        self.value = value
        self.card_id = card_id
        self.asset_key = asset_key
        self.is_face_up = False
        self.is_matched = False

    @property
    def status(self) -> str:
        if self.is_matched:
            return "matched"
        return "face up" if self.is_face_up else "face down"

    def flip(self):
        """Flip the card over (change its face up status)."""
        self.is_face_up = not self.is_face_up

    def match(self):
        """Mark the card as matched. Matched cards stay face up."""
        self.is_face_up = True
        self.is_matched = True

    def __str__(self):
        return f"Card({self.value}, {self.status})"

    def __repr__(self):
        return f"Card(value={self.value}, card_id={self.card_id}, is_face_up={self.is_face_up}, is_matched={self.is_matched})"


class Board:
    """
    The grid of cards for one level, laid out row-major.
    """

    def __init__(self, level: Level):
        """
        Initialize a board from a level descriptor.

        Args:
            level: Level whose matrix gives the card values
        """
        self.rows = level.rows
        self.cols = level.columns
        self.cards = []
        for row in level.matrix:
            for value in row:
                self.cards.append(Card(value, card_id=len(self.cards), asset_key=level.asset_for(value)))

    def get_card(self, row, col) -> Optional[Card]:
        """
        Get the card at the specified position.

        Returns:
            Card at the specified position or None if position is invalid
        """
        if 0 <= row < self.rows and 0 <= col < self.cols:
            return self.cards[row * self.cols + col]
        return None

    def values(self) -> Tuple[Tuple[int, ...], ...]:
        """Snapshot of the card values as a tuple of rows."""
        return tuple(
            tuple(card.value for card in self.cards[r * self.cols:(r + 1) * self.cols])
            for r in range(self.rows)
        )

    def __str__(self) -> str:
        result = []
        for row in range(self.rows):
            row_cards = []
            for col in range(self.cols):
                card = self.get_card(row, col)
                if card.is_matched:
                    row_cards.append("M")
                elif card.is_face_up:
                    row_cards.append(str(card.value))
                else:
                    row_cards.append("#")
            result.append(" ".join(row_cards))
        return "\n".join(result)


def calculate_score(moves: int, time_remaining: Optional[int], rules: ScoringRules) -> int:
    """
    Points awarded for a match.

    Args:
        moves: Moves made so far, including the matching one
        time_remaining: Seconds left on the clock, or None for untimed levels
        rules: Scoring constants

    Returns:
        The score delta, never below rules.min_score
    """
    time_bonus = time_remaining * rules.time_bonus_factor if time_remaining is not None else 0
    move_penalty = 0
    if moves > rules.move_threshold:
        move_penalty = (moves - rules.move_threshold) * rules.penalty_per_move
    return max(rules.base_score + time_bonus - move_penalty, rules.min_score)


class MatchEngine:
    """
    Card matching state machine for one session.

    Cards go face down -> face up -> matched, or back to face down on a
    mismatch. At most two cards are pending at once. Resolution and the
    countdown run through a scheduler; without one, pairs resolve as soon
    as the second card is flipped and the countdown only advances through
    tick().
    """

    def __init__(self, level: Level, rules: Optional[ScoringRules] = None, scheduler=None,
                 emit: Optional[Callable] = None, resolve_delay: float = 1.0,
                 tick_interval: float = 1.0):
        if not isinstance(level, Level) or not level.is_valid():
            raise LevelLoadError(f"Refusing to start an invalid level: {level}")

        self.level = level
        self.rules = rules or ScoringRules()
        self.scheduler = scheduler
        self.resolve_delay = resolve_delay
        self.tick_interval = tick_interval
        self._emit = emit or (lambda event: None)

        self.board = Board(level)
        self.pending: List[Tuple[int, int]] = []
        self.moves = 0
        self.matched_pairs = 0
        self.score = 0
        self.time_remaining = level.time_limit
        self.completion: Optional[CompletionReason] = None

        self.active = False
        self.generation = 0
        self._resolve_task = None
        self._timer_task = None

    @property
    def total_pairs(self) -> int:
        return self.level.total_pairs

    @property
    def is_timed(self) -> bool:
        return self.level.time_limit is not None

    @property
    def is_complete(self) -> bool:
        return self.completion is not None

    def start(self):
        """Begin the session: announce the level and start the countdown."""
        if self.active or self.is_complete:
            return
        self.active = True
        self._emit(LevelStarted(self.level.level_number, self.board.values(), self.level.time_limit))
        if self.is_timed and self.scheduler is not None:
            self._timer_task = self.scheduler.call_every(self.tick_interval, self.tick)

    def stop(self):
        """Tear down the session. Scheduled callbacks from it become no-ops."""
        self.active = False
        self.generation += 1
        self._cancel_tasks()
        for row, col in self.pending:
            card = self.board.get_card(row, col)
            if not card.is_matched:
                card.is_face_up = False
        self.pending = []

    def flip(self, row, col) -> bool:
        """
        Turn a card face up.

        Args:
            row: Row index
            col: Column index

        Returns:
            True if the card was flipped, False if the request was ignored
        """
        if not self.active or self.is_complete or len(self.pending) >= 2:
            return False

        card = self.board.get_card(row, col)
        if card is None or card.is_matched or card.is_face_up:
            return False

        card.flip()
        self.pending.append((row, col))
        self._emit(CardFlipped(row, col))

        if len(self.pending) == 2:
            self.moves += 1
            if self.scheduler is None:
                self.resolve()
            else:
                self._resolve_task = self.scheduler.call_later(
                    self.resolve_delay, self._resolve_for, self.generation)
        return True

    def resolve(self) -> Optional[bool]:
        """
        Compare the two pending cards and apply the outcome.

        Returns:
            True on a match, False on a mismatch, None if nothing was pending
        """
        if len(self.pending) != 2 or self.is_complete:
            return None
        if self._resolve_task is not None:
            self._resolve_task.cancel()
            self._resolve_task = None

        (row1, col1), (row2, col2) = self.pending
        first = self.board.get_card(row1, col1)
        second = self.board.get_card(row2, col2)
        self.pending = []

        if first.value == second.value:
            first.match()
            second.match()
            self.matched_pairs += 1
            self.score += calculate_score(self.moves, self.time_remaining, self.rules)
            self._emit(PairResolved(True, row1, col1, row2, col2))
            self._emit(ScoreChanged(self.score))
            if self.matched_pairs == self.total_pairs:
                self._complete(CompletionReason.SOLVED)
            return True

        first.flip()
        second.flip()
        self._emit(PairResolved(False, row1, col1, row2, col2))
        if self.rules.mismatch_penalty > 0 and self.score > 0:
            self.score = max(self.score - self.rules.mismatch_penalty, 0)
            self._emit(ScoreChanged(self.score))
        return False

    def tick(self):
        """Advance the countdown by one second."""
        if not self.active or self.is_complete or not self.is_timed:
            return
        if self.time_remaining > 0:
            self.time_remaining -= 1
            self._emit(TimeTicked(self.time_remaining))
        if self.time_remaining <= 0:
            self._complete(CompletionReason.TIMED_OUT)

    def _resolve_for(self, generation):
        if generation != self.generation or not self.active:
            return
        self._resolve_task = None
        self.resolve()

    def _complete(self, reason: CompletionReason):
        if self.is_complete:
            return
        self.completion = reason
        self._cancel_tasks()
        self._emit(Completed(reason, self.score, self.moves, self.matched_pairs))

    def _cancel_tasks(self):
        if self._resolve_task is not None:
            self._resolve_task.cancel()
            self._resolve_task = None
        if self._timer_task is not None:
            self._timer_task.cancel()
            self._timer_task = None

    def __str__(self):
        status = self.completion.value if self.completion else ("active" if self.active else "idle")
        return (f"Level {self.level.level_number} ({status}): score={self.score}, "
                f"moves={self.moves}, matched={self.matched_pairs}/{self.total_pairs}\n{self.board}")
