"""Tests for word rotation."""
import random

import pytest

from impostor.themes import get_theme, list_themes
from impostor.words import pick_word

WORDS = ["a", "b", "c", "d"]


def test_never_repeats_within_a_cycle():
    rng = random.Random(1)
    played = []
    seen = []
    for _ in range(len(WORDS)):
        word, played = pick_word(WORDS, played, rng)
        assert word not in seen
        seen.append(word)
    assert sorted(seen) == WORDS
    assert played == seen


def test_resets_once_exhausted():
    word, played = pick_word(WORDS, list(WORDS), random.Random(2))
    assert word in WORDS
    assert played == [word]


def test_only_remaining_word_is_picked():
    word, played = pick_word(WORDS, ["a", "b", "c"], random.Random(3))
    assert word == "d"
    assert played == ["a", "b", "c", "d"]


def test_history_is_not_mutated():
    history = ["a"]
    pick_word(WORDS, history, random.Random(4))
    assert history == ["a"]


def test_words_from_another_theme_are_ignored():
    word, played = pick_word(WORDS, ["zebra"], random.Random(5))
    assert word in WORDS
    assert played == ["zebra", word]


def test_empty_theme_is_rejected():
    with pytest.raises(ValueError):
        pick_word([], [], random.Random(0))


def test_catalog():
    themes = list_themes()
    assert {t.theme_id for t in themes} == {"animals", "food", "colors", "jobs", "sports", "countries"}
    for theme in themes:
        assert len(theme.words) == 10
        assert len(set(theme.words)) == 10
    assert get_theme("animals").name == "Animals"
    assert get_theme("nope") is None
    assert get_theme(None) is None
