"""
Session control for the Memory Match game.

The SessionController owns one MatchEngine at a time and is the seam between
the game core and whatever presents it. Time is cooperative: the
presentation layer calls Scheduler.run_pending() from its main loop, the way
a pygame loop updates its game once per frame.
"""
import itertools
import time
from typing import Callable, List, Optional

from classes import MatchEngine
from levels import Level, LevelLoadError, default_level, level_from_response
from settings import GameSettings
from shared.models import Completed, CompletionReason, GameResult


class ScheduledTask:
    """Handle for a callback registered with a Scheduler."""

    def __init__(self, due, seq, callback, args, interval=None):
        self.due = due
        self.seq = seq
        self.callback = callback
        self.args = args
        self.interval = interval
        self.cancelled = False

    def cancel(self):
        """Stop the task from firing. Safe to call more than once."""
        self.cancelled = True

    def __repr__(self):
        kind = f"every {self.interval}s" if self.interval else "once"
        state = "cancelled" if self.cancelled else f"due {self.due:.2f}"
        return f"ScheduledTask({getattr(self.callback, '__name__', self.callback)}, {kind}, {state})"


class Scheduler:
    """
    Single-threaded scheduler driven by a clock.

    Nothing fires on its own; run_pending() fires every task that is due.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._tasks: List[ScheduledTask] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable, *args) -> ScheduledTask:
        """Run callback(*args) once, delay seconds from now."""
        if delay < 0:
            raise ValueError("delay must not be negative")
        task = ScheduledTask(self.clock() + delay, next(self._counter), callback, args)
        self._tasks.append(task)
        return task

    def call_every(self, interval: float, callback: Callable, *args) -> ScheduledTask:
        """Run callback(*args) every interval seconds until cancelled."""
        if interval <= 0:
            raise ValueError("interval must be positive")
        task = ScheduledTask(self.clock() + interval, next(self._counter), callback, args, interval)
        self._tasks.append(task)
        return task

    def run_pending(self) -> int:
        """
        Fire all tasks due at the current clock time, in due order.

        A periodic task that fell behind fires once for every interval that
        has elapsed.

        Returns:
            Number of callbacks fired
        """
        now = self.clock()
        fired = 0
        while True:
            due = [t for t in self._tasks if not t.cancelled and t.due <= now]
            if not due:
                break
            task = min(due, key=lambda t: (t.due, t.seq))
            if task.interval is None:
                self._tasks.remove(task)
            else:
                task.due += task.interval
            task.callback(*task.args)
            fired += 1
        self._tasks = [t for t in self._tasks if not t.cancelled]
        return fired

    def __len__(self):
        return sum(1 for t in self._tasks if not t.cancelled)


class EventEmitter:
    """Delivers session events to subscribed listeners, in subscription order."""

    def __init__(self):
        self._listeners: List[Callable] = []

    def subscribe(self, listener: Callable) -> Callable:
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Callable) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event) -> None:
        for listener in list(self._listeners):
            listener(event)


class SessionController:
    """
    Owns the active game session and switches between levels.

    Args:
        provider: Level provider with request_level(level_number, username)
            and submit_result(result)
        scheduler: Scheduler used for delayed resolution and the countdown
        settings: GameSettings with scoring rules, delays and the max level
        username: Player name sent to the provider
    """

    def __init__(self, provider, scheduler: Optional[Scheduler] = None,
                 settings: Optional[GameSettings] = None, username: Optional[str] = None):
        self.provider = provider
        self.scheduler = scheduler if scheduler is not None else Scheduler()
        self.settings = settings or GameSettings()
        self.username = username or self.settings.username
        self.events = EventEmitter()
        self.engine: Optional[MatchEngine] = None
        self.level_number: Optional[int] = None
        self._fixed_level: Optional[Level] = None
        self.events.subscribe(self._on_event)

    def subscribe(self, listener: Callable) -> Callable:
        return self.events.subscribe(listener)

    def unsubscribe(self, listener: Callable) -> None:
        self.events.unsubscribe(listener)

    def start(self, level=1) -> MatchEngine:
        """
        Start a session, replacing any running one.

        Args:
            level: Level number to request from the provider, or a Level

        Returns:
            The engine of the new session
        """
        self.stop()

        if isinstance(level, Level):
            self._fixed_level = level
            descriptor = level
        else:
            self._fixed_level = None
            descriptor = self._load_level(level)

        try:
            engine = self._create_engine(descriptor)
        except LevelLoadError as e:
            print(f"{e}. Falling back to the default level")
            descriptor = default_level(getattr(descriptor, 'level_number', 1))
            engine = self._create_engine(descriptor)

        self.engine = engine
        self.level_number = descriptor.level_number
        engine.start()
        return engine

    def restart(self) -> MatchEngine:
        """Start the current level again with a fresh board."""
        if self._fixed_level is not None:
            return self.start(self._fixed_level)
        return self.start(self.level_number or 1)

    def advance(self) -> MatchEngine:
        """Start the next level, up to the configured max level."""
        next_level = min((self.level_number or 0) + 1, self.settings.max_level)
        return self.start(next_level)

    def stop(self) -> None:
        """End the current session, if any."""
        if self.engine is not None:
            self.engine.stop()
            self.engine = None

    def logout(self) -> None:
        """End the session and forget the player."""
        self.stop()
        self.username = self.settings.username
        self.level_number = None
        self._fixed_level = None

    def flip(self, row, col) -> bool:
        if self.engine is None:
            return False
        return self.engine.flip(row, col)

    def _load_level(self, level_number) -> Level:
        try:
            response = self.provider.request_level(level_number, self.username)
            return level_from_response(response)
        except LevelLoadError as e:
            print(f"Invalid level data: {e}. Falling back to the default level")
        except Exception as e:
            print(f"Level service error for level {level_number}: {e}. Falling back to the default level")
        return default_level(level_number)

    def _create_engine(self, level: Level) -> MatchEngine:
        return MatchEngine(
            level,
            rules=self.settings.scoring,
            scheduler=self.scheduler,
            emit=self.events.emit,
            resolve_delay=self.settings.resolve_delay,
            tick_interval=self.settings.tick_interval
        )

    def _on_event(self, event):
        if isinstance(event, Completed) and event.reason is CompletionReason.SOLVED:
            result = GameResult(self.username, self.level_number, event.final_score, event.moves)
            try:
                self.provider.submit_result(result)
            except Exception as e:
                print(f"Could not submit result for level {self.level_number}: {e}")
