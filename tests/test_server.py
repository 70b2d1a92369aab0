import pytest

from level_client import LocalLevelProvider
from levels import validate_matrix
from server import server


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(server, "provider", LocalLevelProvider(rng=3, max_level=5))
    server.app.config["TESTING"] = True
    return server.app.test_client()


def test_index(client):
    assert client.get("/").status_code == 200


def test_start_level_up_and_reset(client):
    data = client.post("/game/start", json={"username": "bob"}).get_json()
    assert data["levelNumber"] == 1
    assert data["username"] == "bob"
    assert validate_matrix(data["matrix"])

    data = client.post("/game/level-up", json={"username": "bob"}).get_json()
    assert data["levelNumber"] == 2

    reply = client.post("/game/reset", json={"username": "bob"}).get_json()
    assert reply["success"] is True
    assert client.post("/game/start", json={"username": "bob"}).get_json()["levelNumber"] == 1


def test_level_up_is_capped(client):
    for _ in range(10):
        data = client.post("/game/level-up", json={"username": "carol"}).get_json()
    assert data["levelNumber"] == 5


def test_username_required(client):
    assert client.post("/game/start", json={}).status_code == 400
    assert client.post("/game/level-up", json={"username": "  "}).status_code == 400
    assert client.post("/game/reset").status_code == 400


def test_get_generated_level(client):
    data = client.get("/levels/5").get_json()
    assert data["levelNumber"] == 5
    assert data["gridSize"] == 6
    assert len(data["matrix"]) == 5
    assert data["timeLimit"] == 210
    assert validate_matrix(data["matrix"])


def test_get_level_zero_is_rejected(client):
    response = client.get("/levels/0")
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_submit_result(client):
    body = {"username": "bob", "levelNumber": 2, "score": 180, "moves": 7}
    data = client.post("/game/result", json=body).get_json()
    assert data["success"] is True
    assert data["nextLevel"] == 3
    assert server.provider.results[0].score == 180


def test_submit_result_validation(client):
    assert client.post("/game/result").status_code == 400
    assert client.post("/game/result", json={"username": "bob"}).status_code == 400
    bad = {"username": "bob", "levelNumber": "two", "score": 1, "moves": 1}
    assert client.post("/game/result", json=bad).status_code == 400
