from __future__ import annotations

from dataclasses import dataclass, field

from npzr.ai.analysis import analyze
from npzr.ai.card_play import CardPlayEvaluator
from npzr.engine.pieces import Score, Stack, build_cards
from npzr.engine.types import Card


@dataclass
class _View:
    cards: list[Card]
    mine: list[Stack] = field(default_factory=list)
    theirs: list[Stack] = field(default_factory=list)
    score: Score = field(default_factory=Score)
    opp_score: Score = field(default_factory=Score)
    deck: int = 30
    id: str = "me"

    def hand(self) -> tuple[Card, ...]:
        return tuple(self.cards)

    def my_stacks(self) -> list[Stack]:
        return list(self.mine)

    def opponent_stacks(self) -> list[Stack]:
        return list(self.theirs)

    def my_score(self) -> Score:
        return self.score

    def opponent_score(self) -> Score:
        return self.opp_score

    def deck_remaining(self) -> int:
        return self.deck


CARDS = {c.id: c for c in build_cards()}


def _stack(stack_id: str, owner: str, *card_ids: str) -> Stack:
    s = Stack(stack_id, owner)
    for cid in card_ids:
        card = CARDS[cid]
        s.add_card(card, card.body_part)
    return s


def test_completing_card_is_selected() -> None:
    mine = _stack("s1", "me", "ninja_head_1", "ninja_torso_1")
    view = _View([CARDS["pirate_head_1"], CARDS["ninja_legs_1"], CARDS["robot_torso_1"]], mine=[mine])
    best = CardPlayEvaluator().select_best(view)
    assert best is not None
    assert best.card.id == "ninja_legs_1"
    assert best.category == "completion"
    assert best.value >= 1000
    assert best.target_stack_id == "s1"
    assert best.pile == "legs"


def test_critical_disruption_beats_important() -> None:
    critical = _stack("a", "them", "pirate_head_1", "pirate_torso_1")
    important = _stack("b", "them", "zombie_legs_1")
    view = _View([CARDS["ninja_legs_1"], CARDS["robot_head_1"]], theirs=[critical, important])
    ranked = CardPlayEvaluator().evaluate(view)

    best = ranked[0]
    assert best.card.id == "robot_head_1"
    assert best.target_stack_id == "a"
    assert best.category == "disruption"
    assert best.value == 800

    other = next(c for c in ranked if c.card.id == "ninja_legs_1" and c.target_stack_id == "b")
    assert other.category == "disruption"
    assert other.value == 400
    assert ranked.index(other) > 0


def test_building_values() -> None:
    two = _stack("s1", "me", "robot_head_1")
    one = _stack("s2", "me", "pirate_head_1")
    view = _View([CARDS["robot_torso_1"], CARDS["zombie_legs_1"]], mine=[two, one])
    ranked = CardPlayEvaluator().evaluate(view)

    to_two = next(c for c in ranked if c.card.id == "robot_torso_1" and c.target_stack_id == "s1")
    assert (to_two.category, to_two.value) == ("building", 500)
    to_one = next(c for c in ranked if c.card.id == "zombie_legs_1" and c.target_stack_id == "s2")
    assert (to_one.category, to_one.value) == ("building", 300)
    assert ranked[0] is to_two


def test_new_stack_value_counts_same_character_cards() -> None:
    view = _View([CARDS["robot_head_1"], CARDS["robot_torso_1"], CARDS["robot_legs_1"], CARDS["ninja_head_1"]])
    ranked = CardPlayEvaluator().evaluate(view)
    robot = next(c for c in ranked if c.card.id == "robot_head_1")
    ninja = next(c for c in ranked if c.card.id == "ninja_head_1")
    assert robot.value == 150 + 2 * 25
    assert ninja.value == 150
    assert robot.category == "neutral"


def test_new_stack_for_scored_character_is_worth_less() -> None:
    score = Score()
    score.add("zombie")
    view = _View([CARDS["zombie_head_1"]], score=score)
    best = CardPlayEvaluator().select_best(view)
    assert best is not None and best.value == 50


def test_wild_conservation_penalty_in_early_phase() -> None:
    view = _View([CARDS["wild_wild"], CARDS["robot_head_1"]])
    assert analyze(view).phase == "early"
    ranked = CardPlayEvaluator().evaluate(view)

    wilds = [c for c in ranked if c.kind == "wild"]
    assert len(wilds) == 12
    assert all(c.value < 0 and "penalty" in c.reasoning for c in wilds)
    assert ranked[0].card.id == "robot_head_1"


def test_wild_completion_is_not_penalised() -> None:
    mine = _stack("s1", "me", "ninja_head_1", "ninja_torso_1")
    view = _View([CARDS["wild_wild"]], mine=[mine])
    best = CardPlayEvaluator().select_best(view)
    assert best is not None
    assert best.category == "completion"
    assert best.value == 1000
    assert best.nomination is not None
    assert (best.nomination.character, best.nomination.body_part) == ("ninja", "legs")


def test_wild_candidates_bundle_a_matching_nomination() -> None:
    mine = _stack("s1", "me", "pirate_head_1")
    view = _View([CARDS["zombie_wild"], CARDS["wild_torso"]], mine=[mine])
    for c in CardPlayEvaluator().evaluate(view):
        assert c.kind == "wild"
        assert c.nomination is not None
        assert c.nomination.body_part == c.pile
        assert c.card.can_nominate(c.nomination.character, c.nomination.body_part)


def test_regular_card_wins_ties_with_wild() -> None:
    mine = _stack("s1", "me", "ninja_head_1", "ninja_torso_1")
    view = _View([CARDS["wild_legs"], CARDS["ninja_legs_1"]], mine=[mine])
    ranked = CardPlayEvaluator().evaluate(view)
    assert ranked[0].card.id == "ninja_legs_1"
    assert ranked[1].card.id == "wild_legs"
    assert ranked[0].value == ranked[1].value == 1000


def test_feeding_or_completing_opponent_is_avoided() -> None:
    fed = _stack("a", "them", "pirate_head_1")
    nearly = _stack("b", "them", "zombie_head_1", "zombie_torso_1")
    view = _View([CARDS["pirate_torso_1"], CARDS["zombie_legs_1"]], theirs=[fed, nearly])
    ranked = CardPlayEvaluator().evaluate(view)

    feed = next(c for c in ranked if c.card.id == "pirate_torso_1" and c.target_stack_id == "a")
    assert feed.value == -200
    complete = next(c for c in ranked if c.card.id == "zombie_legs_1" and c.target_stack_id == "b")
    assert complete.value == -1000
    # covering their zombie torso with the pirate torso is the better use
    assert (ranked[0].card.id, ranked[0].target_stack_id, ranked[0].category) == ("pirate_torso_1", "b", "disruption")
