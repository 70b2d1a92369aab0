"""
Memory Match Level Server

A simple Flask server that hands out levels and tracks each
player's level progress in memory.
"""
import os
import sys

from flask import Flask, request, jsonify

# Add parent directory to path to allow importing shared modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from level_client import LocalLevelProvider
from shared.models import GameResult

app = Flask(__name__)
provider = LocalLevelProvider()


def get_username():
    """Read the username from a JSON body, or None if it is missing."""
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    if not isinstance(username, str) or not username.strip():
        return None
    return username.strip()


@app.route('/')
def index():
    """Serve a simple status page."""
    return """
    <html>
        <head>
            <title>Memory Match Level Server</title>
            <style>
                body { font-family: Arial, sans-serif; margin: 40px; }
                h1 { color: #2c3e50; }
            </style>
        </head>
        <body>
            <h1>Memory Match Level Server</h1>
            <p>Endpoints: POST /game/start, POST /game/level-up, POST /game/reset,
               GET /levels/&lt;n&gt;, POST /game/result</p>
        </body>
    </html>
    """


@app.route('/game/start', methods=['POST'])
def start_game():
    """Return the level the player is currently on."""
    username = get_username()
    if username is None:
        return jsonify({"error": "username is required"}), 400

    response = provider.start_game(username)
    print(f"Player {username} starting level {response.level_number}")
    return jsonify(response.to_dict())


@app.route('/game/level-up', methods=['POST'])
def level_up():
    """Move the player to the next level and return it."""
    username = get_username()
    if username is None:
        return jsonify({"error": "username is required"}), 400

    response = provider.level_up(username)
    print(f"Player {username} advanced to level {response.level_number}")
    return jsonify(response.to_dict())


@app.route('/game/reset', methods=['POST'])
def reset_progress():
    """Send the player back to level 1."""
    username = get_username()
    if username is None:
        return jsonify({"error": "username is required"}), 400

    provider.reset_progress(username)
    return jsonify({"success": True, "level": 1})


@app.route('/levels/<int:level_number>', methods=['GET'])
def get_level(level_number):
    """Return a generated level."""
    username = request.args.get('username', '')
    try:
        response = provider.request_level(level_number, username)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(response.to_dict())


@app.route('/game/result', methods=['POST'])
def submit_result():
    """Record a finished level."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({"error": "No data provided"}), 400

    # Validate required fields
    required_fields = ['username', 'levelNumber', 'score', 'moves']
    for field in required_fields:
        if field not in data:
            return jsonify({"error": f"Missing required field: {field}"}), 400

    try:
        result = GameResult.from_dict(data)
        reply = provider.submit_result(result)
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    print(f"Saved result for {result.username}: level {result.level_number}, score {result.score}")
    return jsonify(reply.to_dict())


if __name__ == '__main__':
    # Get port from environment or use default
    port = int(os.environ.get('PORT', 5000))

    # Start the server
    app.run(host='0.0.0.0', port=port, debug=True)
