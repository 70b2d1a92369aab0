import random

import pytest

from levels import (
    ASSET_NAMES, FIXED_LEVELS, Level, LevelLoadError, default_level, generate_level,
    grid_shape, level_from_response, validate_matrix
)
from shared.models import LevelResponse


def test_fixed_levels_are_valid_and_repeatable():
    for number in FIXED_LEVELS:
        first = generate_level(number)
        second = generate_level(number, rng=99)
        assert validate_matrix(first.matrix)
        assert first.matrix == second.matrix
        assert first.time_limit is not None


def test_fixed_level_is_a_copy():
    level = generate_level(1)
    level.matrix[0][0] = 42
    assert generate_level(1).matrix[0][0] == 1


@pytest.mark.parametrize("number", range(1, 21))
def test_generated_levels_pass_validation(number):
    level = generate_level(number)
    assert validate_matrix(level.matrix)
    assert level.rows * level.columns % 2 == 0
    assert len(level.asset_keys) >= level.total_pairs


def test_grid_shape_stays_even_and_capped():
    assert grid_shape(4) == (4, 4)
    assert grid_shape(5) == (5, 6)
    assert grid_shape(6) == (5, 6)
    assert grid_shape(7) == (6, 6)
    assert grid_shape(100) == (6, 6)


def test_generated_level_is_reproducible_with_seed():
    assert generate_level(8, rng=1234).matrix == generate_level(8, rng=1234).matrix
    assert generate_level(8, rng=random.Random(5)).matrix == generate_level(8, rng=5).matrix


def test_generated_level_details():
    level = generate_level(5, rng=3)
    assert (level.rows, level.columns) == (5, 6)
    assert sorted(v for row in level.matrix for v in row) == sorted(list(range(1, 16)) * 2)
    assert level.time_limit == 60 + 5 * 30
    assert level.asset_keys == ASSET_NAMES[:15]


def test_invalid_level_number():
    with pytest.raises(ValueError):
        generate_level(0)


@pytest.mark.parametrize("matrix", [
    [],
    [[]],
    [[1, 2], [1]],
    [[1, 1, 2]],
    [[1, 2, 3], [1, 2, 3], [1, 2, 3]],
    [[1, 1], [1, 1]],
    [[1, 2], [3, 4]],
    None,
    5,
    [[[1], [1]]],
])
def test_validate_rejects(matrix):
    assert validate_matrix(matrix) is False


def test_validate_accepts_pairs():
    assert validate_matrix([[1, 2], [1, 2]]) is True
    assert validate_matrix([[7, 3, 3, 7]]) is True


def test_asset_for_uses_sorted_rank():
    level = Level(1, [[10, 3], [3, 10]], ["first", "second"])
    assert level.asset_for(3) == "first"
    assert level.asset_for(10) == "second"
    assert level.asset_for(99) == "default"

    short = Level(1, [[1, 2], [1, 2]], ["only"])
    assert short.asset_for(2) == "default"


def test_default_level():
    level = default_level(4)
    assert level.matrix == [[1, 2], [1, 2]]
    assert level.level_number == 4
    assert level.time_limit is None
    assert level.is_valid()


def test_level_from_response():
    response = LevelResponse(level_number=2, matrix=[[1, 2], [2, 1]], time_limit=30)
    level = level_from_response(response)
    assert level.level_number == 2
    assert level.asset_keys == ASSET_NAMES[:2]
    assert level.time_limit == 30


def test_level_from_response_rejects_bad_matrix():
    with pytest.raises(LevelLoadError):
        level_from_response(LevelResponse(level_number=1, matrix=[[1, 2, 3], [1, 2, 3], [1, 2, 3]]))
    with pytest.raises(LevelLoadError):
        level_from_response(LevelResponse(level_number=1, matrix=[["a", "b"], ["a", "b"]]))
    for bad in ("30", -5, 2.5, True):
        with pytest.raises(LevelLoadError):
            level_from_response(LevelResponse(level_number=1, matrix=[[1, 2], [2, 1]], time_limit=bad))
    assert level_from_response(LevelResponse(level_number=1, matrix=[[1, 1]], time_limit=0)).time_limit == 0
