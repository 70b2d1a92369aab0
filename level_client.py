"""
Level providers for the Memory Match game.

LocalLevelProvider generates levels in-process and keeps per-player progress
in memory; the mock server is built on it. LevelClient talks to that server
over HTTP and falls back to the default level whenever the server cannot be
reached, so a session can always start.
"""
import random
from typing import Dict, List, Optional

import requests

from levels import MAX_LEVEL, default_level, generate_level
from shared.models import GameResult, LevelResponse

SERVER_URL = "http://localhost:5000"


class LocalLevelProvider:
    """
    In-memory level service.

    Args:
        rng: Optional random.Random instance or seed used for generated levels
        max_level: Highest level a player can reach with level_up()
    """

    def __init__(self, rng=None, max_level=MAX_LEVEL):
        self.rng = rng if isinstance(rng, random.Random) else random.Random(rng)
        self.max_level = max_level
        self.user_levels: Dict[str, int] = {}
        self.results: List[GameResult] = []

    def request_level(self, level_number: int, username: str = '') -> LevelResponse:
        """Build a level and record it as the player's current level."""
        level = generate_level(level_number, self.rng)
        if username:
            self.user_levels[username] = level_number
        return level.to_response(username)

    def start_game(self, username: str) -> LevelResponse:
        """Level the player is currently on, starting at 1 for new players."""
        return self.request_level(self.user_levels.get(username, 1), username)

    def level_up(self, username: str) -> LevelResponse:
        new_level = min(self.user_levels.get(username, 1) + 1, self.max_level)
        return self.request_level(new_level, username)

    def reset_progress(self, username: str) -> bool:
        self.user_levels[username] = 1
        return True

    def submit_result(self, result: GameResult) -> GameResult:
        self.results.append(result)
        return GameResult(
            username=result.username,
            level_number=result.level_number,
            score=result.score,
            moves=result.moves,
            success=True,
            next_level=min(result.level_number + 1, self.max_level),
            message="Level completed successfully!"
        )


class LevelClient:
    """
    HTTP client for the level server.

    Args:
        server_url: Base URL of the server; 'http://' is added if missing
        timeout: Request timeout in seconds
    """

    def __init__(self, server_url=SERVER_URL, timeout=5):
        # Ensure server_url has the correct format with http:// prefix
        if server_url and not server_url.startswith(('http://', 'https://')):
            server_url = 'http://' + server_url

        # Ensure URL ends with a trailing slash for consistency
        if server_url and not server_url.endswith('/'):
            server_url += '/'

        self.server_url = server_url
        self.timeout = timeout
        self.online = False

    def check_server_connection(self) -> bool:
        """Check if the server is available."""
        try:
            response = requests.get(self.server_url, timeout=self.timeout)
            self.online = response.status_code == 200
            print(f"Server connection: {'Online' if self.online else 'Offline'} (Status code: {response.status_code})")
        except requests.exceptions.ConnectionError as e:
            self.online = False
            print(f"Server connection failed (ConnectionError): {e}")
        except requests.exceptions.Timeout as e:
            self.online = False
            print(f"Server connection timeout: {e}")
        return self.online

    def request_level(self, level_number: int, username: str = '') -> LevelResponse:
        """Fetch a specific level (GET /levels/<n>)."""
        data = self._request('GET', f"levels/{level_number}", params={'username': username})
        return self._level_or_default(data, level_number, username)

    def start_game(self, username: str) -> LevelResponse:
        """Fetch the player's current level (POST /game/start)."""
        data = self._request('POST', "game/start", json={'username': username})
        return self._level_or_default(data, 1, username)

    def level_up(self, username: str) -> LevelResponse:
        """Move the player to the next level (POST /game/level-up)."""
        data = self._request('POST', "game/level-up", json={'username': username})
        return self._level_or_default(data, 1, username)

    def reset_progress(self, username: str) -> bool:
        data = self._request('POST', "game/reset", json={'username': username})
        return bool(data and data.get('success'))

    def submit_result(self, result: GameResult) -> Optional[GameResult]:
        """Send a finished level to the server (POST /game/result)."""
        data = self._request('POST', "game/result", json=result.to_dict())
        if data is None:
            return None
        return GameResult.from_dict(data)

    def _request(self, method, path, **kwargs) -> Optional[dict]:
        url = self.server_url + path
        try:
            response = requests.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            self.online = True
            return response.json()
        except requests.exceptions.RequestException as e:
            self.online = False
            print(f"Error calling {url}: {e}")
        except ValueError as e:
            print(f"Invalid JSON from {url}: {e}")
        return None

    def _level_or_default(self, data, level_number, username) -> LevelResponse:
        if data is not None:
            try:
                return LevelResponse.from_dict(data)
            except (ValueError, TypeError, KeyError, IndexError, AttributeError) as e:
                print(f"Could not decode level data: {e}")
        print(f"Using default level {level_number}")
        return default_level(level_number).to_response(username)
