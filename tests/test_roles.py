"""Tests for impostor selection."""
import random
from collections import Counter

import pytest

from impostor.models import Player
from impostor.roles import assign_impostors, calculate_impostor_count


def make_players(n):
    return [Player(player_id=f"p{i}", name=f"Player {i}") for i in range(n)]


def distribution(player_count, draws=20000, seed=7):
    rng = random.Random(seed)
    counts = Counter(calculate_impostor_count(player_count, rng) for _ in range(draws))
    return {k: v / draws for k, v in counts.items()}


@pytest.mark.parametrize("player_count", [0, 1, 2, 3])
def test_small_rooms_always_get_one_impostor(player_count):
    rng = random.Random(0)
    assert {calculate_impostor_count(player_count, rng) for _ in range(500)} == {1}


@pytest.mark.parametrize("player_count,expected", [
    (4, {1: 0.70, 2: 0.30}),
    (5, {1: 0.70, 2: 0.30}),
    (6, {1: 0.50, 2: 0.30, 3: 0.20}),
    (8, {1: 0.50, 2: 0.30, 3: 0.20}),
    (9, {1: 0.50, 2: 0.25, 3: 0.15, 4: 0.10}),
    (12, {1: 0.50, 2: 0.25, 3: 0.15, 4: 0.10}),
    (13, {1: 0.50, 2: 0.20, 3: 0.15, 4: 0.10, 5: 0.05}),
    (15, {1: 0.50, 2: 0.20, 3: 0.15, 4: 0.10, 5: 0.05}),
])
def test_impostor_count_follows_table(player_count, expected):
    observed = distribution(player_count)
    assert set(observed) == set(expected)
    for count, probability in expected.items():
        assert observed[count] == pytest.approx(probability, abs=0.02)


def test_bucket_edges_use_draw():
    class FixedDraw:
        def __init__(self, value):
            self.value = value

        def random(self):
            return self.value / 100

    assert calculate_impostor_count(5, FixedDraw(69.9)) == 1
    assert calculate_impostor_count(5, FixedDraw(70.5)) == 2
    assert calculate_impostor_count(8, FixedDraw(79.9)) == 2
    assert calculate_impostor_count(8, FixedDraw(80.5)) == 3
    assert calculate_impostor_count(13, FixedDraw(94.9)) == 4
    assert calculate_impostor_count(13, FixedDraw(99.9)) == 5


def test_assign_marks_exactly_count_players():
    rng = random.Random(3)
    for n in (2, 3, 5, 8, 12, 15):
        players = make_players(n)
        count = assign_impostors(players, rng)
        assert 1 <= count <= 5
        assert sum(p.is_impostor for p in players) == count


def test_two_player_room_gets_one_impostor():
    rng = random.Random(11)
    for _ in range(200):
        players = make_players(2)
        assert assign_impostors(players, rng) == 1
        assert sum(p.is_impostor for p in players) == 1


def test_assign_clears_previous_flags():
    players = make_players(3)
    for p in players:
        p.is_impostor = True
    assign_impostors(players, random.Random(5))
    assert sum(p.is_impostor for p in players) == 1


@pytest.mark.parametrize("n", [0, 1])
def test_assign_is_noop_below_two_players(n):
    players = make_players(n)
    assert assign_impostors(players, random.Random(0)) == 0
    assert not any(p.is_impostor for p in players)


def test_every_player_can_be_picked():
    rng = random.Random(21)
    picked = Counter()
    for _ in range(300):
        players = make_players(3)
        assign_impostors(players, rng)
        picked.update(p.player_id for p in players if p.is_impostor)
    assert set(picked) == {"p0", "p1", "p2"}
