import pytest

from shared.models import GameResult, LevelResponse


def test_level_response_from_nested_matrix():
    response = LevelResponse.from_dict({
        "levelNumber": 2,
        "matrix": [[1, 2], [2, 1]],
        "assetKeys": ["kiwi", "lime"],
        "timeLimit": None,
    })
    assert response.level_number == 2
    assert response.asset_keys == ["kiwi", "lime"]
    assert response.time_limit is None


def test_level_response_reshapes_flat_matrix():
    response = LevelResponse.from_dict({"level": 4, "matrix": [1, 2, 3, 1, 2, 3], "gridSize": 3})
    assert response.level_number == 4
    assert response.matrix == [[1, 2, 3], [1, 2, 3]]


def test_level_response_accepts_level_up_shape():
    response = LevelResponse.from_dict({"newLevel": 5, "matrix": [[1, 1]], "username": "bob"})
    assert response.level_number == 5
    assert response.username == "bob"


def test_flat_matrix_needs_grid_size():
    with pytest.raises(ValueError):
        LevelResponse.from_dict({"levelNumber": 1, "matrix": [1, 2, 1, 2]})


def test_level_response_to_dict():
    data = LevelResponse(3, [[1, 2, 1, 2]], ["a", "b"], 90, "bob").to_dict()
    assert data == {
        "levelNumber": 3,
        "matrix": [[1, 2, 1, 2]],
        "gridSize": 4,
        "imageSet": ["a", "b"],
        "timeLimit": 90,
        "username": "bob",
    }


def test_game_result_from_server_reply():
    result = GameResult.from_dict({"score": 120, "nextLevel": 2, "message": "ok"})
    assert result.score == 120
    assert result.next_level == 2
    assert result.success is True
    assert result.to_dict()["nextLevel"] == 2
