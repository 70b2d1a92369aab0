"""
Settings management for the Memory Match game.

Settings live in a small JSON file next to the game. A missing or unreadable
file is not an error: the defaults are used instead.
"""
import json
import os
from dataclasses import dataclass, field, asdict

from levels import MAX_LEVEL

SETTINGS_FILE = "settings.json"
DEFAULT_SERVER = "localhost:5000"  # Default server if no settings file exists


@dataclass
class ScoringRules:
    """Constants used by the scoring function."""
    base_score: int = 100
    time_bonus_factor: int = 2
    move_threshold: int = 10
    penalty_per_move: int = 5
    min_score: int = 10
    # Points lost on a mismatch. 0 disables the penalty.
    mismatch_penalty: int = 0

    @classmethod
    def from_dict(cls, data):
        """Create a ScoringRules object from a dictionary."""
        defaults = cls()
        values = {}
        for name in asdict(defaults):
            value = data.get(name, getattr(defaults, name))
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"Scoring value '{name}' must be an integer, got {value!r}")
            values[name] = value
        return cls(**values)

    def to_dict(self):
        """Convert the ScoringRules object to a dictionary."""
        return asdict(self)


@dataclass
class GameSettings:
    """All tunable game settings."""
    server_url: str = DEFAULT_SERVER
    username: str = "Player"
    max_level: int = MAX_LEVEL
    resolve_delay: float = 1.0  # seconds both cards stay visible before resolution
    tick_interval: float = 1.0
    scoring: ScoringRules = field(default_factory=ScoringRules)

    @classmethod
    def from_dict(cls, data):
        """Create a GameSettings object from a dictionary."""
        defaults = cls()
        settings = cls(
            server_url=data.get('server_url', defaults.server_url),
            username=data.get('username', defaults.username),
            max_level=int(data.get('max_level', defaults.max_level)),
            resolve_delay=float(data.get('resolve_delay', defaults.resolve_delay)),
            tick_interval=float(data.get('tick_interval', defaults.tick_interval)),
            scoring=ScoringRules.from_dict(data.get('scoring', {}))
        )
        if settings.max_level < 1:
            raise ValueError("max_level must be at least 1")
        if settings.resolve_delay < 0 or settings.tick_interval <= 0:
            raise ValueError("resolve_delay must be >= 0 and tick_interval > 0")
        return settings

    def to_dict(self):
        """Convert the GameSettings object to a dictionary."""
        return {
            'server_url': self.server_url,
            'username': self.username,
            'max_level': self.max_level,
            'resolve_delay': self.resolve_delay,
            'tick_interval': self.tick_interval,
            'scoring': self.scoring.to_dict()
        }


def load_settings(path=SETTINGS_FILE) -> GameSettings:
    """Load settings from a JSON file, falling back to defaults."""
    if os.path.exists(path):
        try:
            with open(path, 'r') as f:
                return GameSettings.from_dict(json.load(f))
        except (json.JSONDecodeError, ValueError, TypeError, AttributeError) as e:
            print(f"Ignoring invalid settings file {path}: {e}")
            return GameSettings()
    return GameSettings()


def save_settings(settings: GameSettings, path=SETTINGS_FILE) -> None:
    """Save settings to a JSON file."""
    with open(path, 'w') as f:
        json.dump(settings.to_dict(), f, indent=2)
