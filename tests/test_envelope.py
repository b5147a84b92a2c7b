import struct

import pytest

from cadastral_exporter.services.envelope import EMPTY_MAX, EMPTY_MIN, Envelope, calculate_envelope


TREES = [
    [3.5, -1.0],
    [[0, 0], [5, 2], [-3, 7]],
    [[[0, 0], [0, 10], [10, 10], [10, 0], [0, 0]], [[2, 2], [2, 3], [3, 3], [2, 2]]],
    [
        [[[0, 0], [1, 0], [1, 1], [0, 0]]],
        [[[-100.5, 40], [-90, 40], [-90, 55.25], [-100.5, 40]]],
    ],
]


def _leaves(tree):
    if isinstance(tree[0], (int, float)):
        yield tree
        return
    for child in tree:
        yield from _leaves(child)


@pytest.mark.parametrize("tree", TREES)
def test_envelope_contains_every_position(tree):
    env = calculate_envelope(tree)
    assert not env.is_empty
    assert env.min_x <= env.max_x
    assert env.min_y <= env.max_y
    for x, y in _leaves(tree):
        assert env.min_x <= x <= env.max_x
        assert env.min_y <= y <= env.max_y


def test_envelope_is_tight():
    env = calculate_envelope(TREES[3])
    assert (env.min_x, env.max_x, env.min_y, env.max_y) == (-100.5, 1, 0, 55.25)


def test_point_envelope_is_degenerate():
    env = calculate_envelope((7.0, 8.0))
    assert (env.min_x, env.max_x, env.min_y, env.max_y) == (7.0, 7.0, 8.0, 8.0)


@pytest.mark.parametrize("tree", [[], [[]], [[[], []]], None, "abc", [[1]]])
def test_empty_tree_gives_sentinel(tree):
    env = calculate_envelope(tree)
    assert env == Envelope()
    assert env.is_empty
    assert (env.min_x, env.max_x) == (EMPTY_MIN, EMPTY_MAX)


def test_non_numeric_pairs_are_ignored():
    env = calculate_envelope([["a", "b"], [True, False], [1, 2]])
    assert (env.min_x, env.max_x, env.min_y, env.max_y) == (1, 1, 2, 2)


def test_union():
    a = Envelope(min_x=0, max_x=1, min_y=0, max_y=1)
    b = Envelope(min_x=-5, max_x=0.5, min_y=2, max_y=3)
    assert a.union(b) == b.union(a) == Envelope(min_x=-5, max_x=1, min_y=0, max_y=3)
    assert Envelope().union(a) == a


def test_to_bytes_order():
    env = Envelope(min_x=1, max_x=2, min_y=3, max_y=4)
    data = env.to_bytes()
    assert len(data) == 32
    assert struct.unpack("<4d", data) == (1.0, 2.0, 3.0, 4.0)
    assert Envelope.from_bytes(data) == env
