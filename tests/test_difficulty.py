from __future__ import annotations

import random
from dataclasses import dataclass

import pytest

from npzr.ai.difficulty import DifficultyManager, get_profile, load_profiles
from npzr.services.content import DifficultyProfile


@dataclass(frozen=True)
class _Cand:
    name: str
    value: int
    category: str
    kind: str = "regular"


def _profile(**overrides: object) -> DifficultyProfile:
    base: dict[str, object] = {
        "level": "medium",
        "wild_card_conservation": 0.0,
        "disruption_aggression": 1.0,
        "mistake_rate": 0.0,
        "cascade_optimization": True,
        "mistake_style": "second_best",
    }
    base.update(overrides)
    return DifficultyProfile(**base)  # type: ignore[arg-type]


def test_packaged_profiles() -> None:
    profiles = load_profiles()
    assert set(profiles) == {"easy", "medium", "hard"}
    easy, medium, hard = profiles["easy"], profiles["medium"], profiles["hard"]
    assert (easy.wild_card_conservation, easy.disruption_aggression, easy.mistake_rate) == (0.2, 0.1, 0.2)
    assert not easy.cascade_optimization
    assert easy.mistake_style == "top3"
    assert (medium.wild_card_conservation, medium.disruption_aggression, medium.mistake_rate) == (0.6, 0.5, 0.1)
    assert medium.cascade_optimization
    assert (hard.wild_card_conservation, hard.disruption_aggression, hard.mistake_rate) == (0.9, 0.8, 0.02)
    assert hard.mistake_style == "second_best"


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ValueError):
        get_profile("impossible")


def test_easy_makes_more_mistakes_than_hard() -> None:
    easy = DifficultyManager(get_profile("easy"), random.Random(1))
    hard = DifficultyManager(get_profile("hard"), random.Random(1))
    easy_mistakes = sum(easy.should_make_mistake() for _ in range(1000))
    hard_mistakes = sum(hard.should_make_mistake() for _ in range(1000))
    assert easy_mistakes > hard_mistakes
    assert 120 < easy_mistakes < 280
    assert hard_mistakes < 60


def test_easy_never_selects_a_cascade() -> None:
    ranked = [_Cand("cascade", 1500, "cascade"), _Cand("tidy", 300, "organization"), _Cand("meh", 0, "neutral")]
    manager = DifficultyManager(get_profile("easy"), random.Random(7))
    for _ in range(1000):
        shaped = manager.apply_to_moves(ranked)
        assert shaped[0].category != "cascade"
        assert all(c.category != "cascade" for c in shaped)


def test_hard_usually_takes_the_cascade() -> None:
    ranked = [_Cand("cascade", 1500, "cascade"), _Cand("tidy", 300, "organization")]
    manager = DifficultyManager(get_profile("hard"), random.Random(7))
    picks = sum(manager.apply_to_moves(ranked)[0].name == "cascade" for _ in range(1000))
    assert picks > 900


def test_wild_conservation_drops_cheap_wild_plays() -> None:
    manager = DifficultyManager(_profile(wild_card_conservation=1.0), random.Random(0))
    cheap = [_Cand("wild", 500, "building", "wild"), _Cand("reg", 400, "building"), _Cand("low", 100, "neutral")]
    assert [c.name for c in manager.apply_to_plays(cheap)] == ["reg", "low"]

    worth_it = [_Cand("wild", 700, "building", "wild"), _Cand("reg", 400, "building")]
    assert manager.apply_to_plays(worth_it)[0].name == "wild"

    only_wilds = [_Cand("w1", 100, "neutral", "wild"), _Cand("w2", 50, "neutral", "wild")]
    assert [c.name for c in manager.apply_to_plays(only_wilds)] == ["w1", "w2"]


def test_passive_profile_skips_disruption_unless_nothing_else() -> None:
    manager = DifficultyManager(_profile(disruption_aggression=0.0), random.Random(0))
    ranked = [_Cand("hit", 800, "disruption"), _Cand("build", 300, "building")]
    assert [c.name for c in manager.apply_to_plays(ranked)] == ["build"]
    lone = [_Cand("hit", 800, "disruption")]
    assert [c.name for c in manager.apply_to_plays(lone)] == ["hit"]


def test_second_best_mistake_swaps_the_top_two() -> None:
    manager = DifficultyManager(_profile(mistake_rate=1.0, mistake_style="second_best"), random.Random(0))
    ranked = [_Cand("a", 3, "neutral"), _Cand("b", 2, "neutral"), _Cand("c", 1, "neutral")]
    assert [c.name for c in manager.apply_to_plays(ranked)] == ["b", "a", "c"]
    assert [c.name for c in ranked] == ["a", "b", "c"]


def test_top3_mistake_stays_within_the_top_three() -> None:
    manager = DifficultyManager(_profile(mistake_rate=1.0, mistake_style="top3"), random.Random(5))
    ranked = [_Cand(str(i), 10 - i, "neutral") for i in range(6)]
    seen = {manager.apply_to_plays(ranked)[0].name for _ in range(300)}
    assert seen == {"0", "1", "2"}


def test_no_mistake_keeps_the_ranking() -> None:
    manager = DifficultyManager(_profile(), random.Random(0))
    ranked = [_Cand("a", 3, "building"), _Cand("b", 2, "neutral")]
    assert manager.apply_to_plays(ranked) == ranked
    assert manager.apply_to_moves([]) == []
