# tests/test_shuffle.py
"""Tests for the seeded permutation behind the default feed sort."""

import pytest

from quote_stage.services import shuffle


@pytest.mark.parametrize(
    "text, expected",
    [
        ("", 0),
        ("a", 97),
        ("ab", 97 * 31 + 98),
        ("hello", 99162322),
        # Wraps to exactly the smallest signed 32-bit integer.
        ("polygenelubricants", -2147483648),
    ],
)
def test_string_hash_matches_32bit_rolling_hash(text: str, expected: int) -> None:
    assert shuffle.string_hash(text) == expected


def test_string_hash_stays_in_int32_range() -> None:
    value = shuffle.string_hash("x" * 500)
    assert -(2**31) <= value < 2**31


def test_seed_string_is_compact_json_in_insertion_order() -> None:
    assert shuffle.seed_string({"filterType": "all"}) == '{"filterType":"all"}'
    assert (
        shuffle.seed_string({"filterType": "author", "authorFilter": "shake"})
        == '{"filterType":"author","authorFilter":"shake"}'
    )


def test_seeded_random_is_a_fraction() -> None:
    seed = shuffle.string_hash('{"filterType":"all"}')
    values = [shuffle.seeded_random(seed, i) for i in range(200)]
    assert all(0 <= value < 1 for value in values)
    assert len(set(values)) > 150


def test_shuffle_is_a_permutation() -> None:
    items = list(range(1, 51))
    result = shuffle.shuffle(items, seed=12345)
    assert sorted(result) == items
    assert items == list(range(1, 51))


def test_shuffle_is_deterministic() -> None:
    items = list(range(1, 31))
    params = {"filterType": "likes"}
    assert shuffle.permutation(items, params) == shuffle.permutation(items, params)


@pytest.mark.parametrize("items", [[], [7]])
def test_shuffle_trivial_inputs(items: list[int]) -> None:
    assert shuffle.shuffle(items, seed=99) == items
