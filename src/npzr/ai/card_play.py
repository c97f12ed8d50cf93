from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from npzr.engine.pieces import Stack
from npzr.engine.types import BodyPart, Card, Character, Nomination

from .analysis import (
    GameAnalysis,
    PlayerView,
    Urgency,
    analyze,
    is_complete,
    leading_character,
    matching_count,
    pile_characters,
)

PlayCategory = Literal["completion", "disruption", "building", "neutral"]
CandidateKind = Literal["regular", "wild"]

CATEGORY_RANK: dict[PlayCategory, int] = {"completion": 0, "disruption": 1, "building": 2, "neutral": 3}

COMPLETION_VALUE = 1000
DISRUPTION_VALUES: dict[Urgency, int] = {"critical": 800, "important": 400, "minor": 200}
BUILD_TO_TWO_VALUE = 500
BUILD_TO_ONE_VALUE = 300
FILLER_VALUE = 50
FEED_OPPONENT_VALUE = -200
COMPLETE_OPPONENT_VALUE = -1000
NEW_STACK_VALUE = 150
NEW_STACK_SCORED_VALUE = 50
SAME_CHARACTER_BONUS = 25
SAME_CHARACTER_CAP = 4
WILD_PENALTY = 500


@dataclass(frozen=True)
class PlayCandidate:
    """One way to play one card. Wild candidates carry their nomination."""

    card: Card
    target_stack_id: str | None
    pile: BodyPart
    nomination: Nomination | None
    value: int
    category: PlayCategory
    reasoning: str
    order: int

    @property
    def kind(self) -> CandidateKind:
        return "wild" if self.card.is_wild() else "regular"


def rank_key(c: PlayCandidate) -> tuple[int, int, int, int]:
    return (-c.value, CATEGORY_RANK[c.category], 1 if c.kind == "wild" else 0, c.order)


def rank(candidates: list[PlayCandidate]) -> list[PlayCandidate]:
    return sorted(candidates, key=rank_key)


class CardPlayEvaluator:
    def candidates(self, view: PlayerView, analysis: GameAnalysis) -> list[PlayCandidate]:
        hand = view.hand()
        stacks = view.my_stacks() + view.opponent_stacks()
        out: list[PlayCandidate] = []
        order = 0
        for card in hand:
            for pile in card.legal_piles():
                nominations: list[Nomination | None] = (
                    list(card.nomination_options(pile)) if card.is_wild() else [None]
                )
                for target in [*stacks, None]:
                    for nomination in nominations:
                        out.append(self._score(view, analysis, hand, card, target, pile, nomination, order))
                        order += 1
        return out

    def evaluate(self, view: PlayerView, analysis: GameAnalysis | None = None) -> list[PlayCandidate]:
        analysis = analysis or analyze(view)
        return rank(self.candidates(view, analysis))

    def select_best(self, view: PlayerView, analysis: GameAnalysis | None = None) -> PlayCandidate | None:
        ranked = self.evaluate(view, analysis)
        return ranked[0] if ranked else None

    def _score(
        self,
        view: PlayerView,
        analysis: GameAnalysis,
        hand: tuple[Card, ...],
        card: Card,
        target: Stack | None,
        pile: BodyPart,
        nomination: Nomination | None,
        order: int,
    ) -> PlayCandidate:
        placed: Character = nomination.character if nomination is not None else card.character

        if target is None:
            value, category, reasoning = self._new_stack(view, hand, card, placed)
        elif target.owner_id == view.id:
            value, category, reasoning = self._own_stack(target, pile, placed)
        else:
            value, category, reasoning = self._opponent_stack(analysis, target, pile, placed)

        if nomination is not None:
            reasoning = f"{reasoning} as {nomination}"
        if (
            card.is_wild()
            and category != "completion"
            and not analysis.completion_opportunities
            and not analysis.has_critical_disruption()
            and analysis.phase == "early"
            and len(analysis.own_wild_cards) < 2
        ):
            value -= WILD_PENALTY
            reasoning += " (wild card conservation penalty)"

        return PlayCandidate(
            card=card,
            target_stack_id=None if target is None else target.id,
            pile=pile,
            nomination=nomination,
            value=value,
            category=category,
            reasoning=reasoning,
            order=order,
        )

    def _new_stack(
        self, view: PlayerView, hand: tuple[Card, ...], card: Card, placed: Character
    ) -> tuple[int, PlayCategory, str]:
        value = NEW_STACK_SCORED_VALUE if view.my_score().has(placed) else NEW_STACK_VALUE
        same = sum(1 for c in hand if c.id != card.id and not c.is_wild() and c.character == placed)
        value += SAME_CHARACTER_BONUS * min(same, SAME_CHARACTER_CAP)
        return value, "neutral", f"Starts new {placed} stack"

    def _own_stack(self, target: Stack, pile: BodyPart, placed: Character) -> tuple[int, PlayCategory, str]:
        before = pile_characters(target.top_cards())
        after = {**before, pile: placed}
        if is_complete(after):
            return COMPLETION_VALUE, "completion", f"Completes {placed} stack {target.id}"
        level_after = matching_count(after, placed)
        if level_after > matching_count(before, placed):
            if level_after >= 2:
                return BUILD_TO_TWO_VALUE, "building", f"Builds {placed} on {target.id} ({level_after}/3)"
            if before[pile] is None:
                return BUILD_TO_ONE_VALUE, "building", f"Builds {placed} on {target.id} (1/3)"
        return FILLER_VALUE, "neutral", f"Adds {placed} {pile} to {target.id} without progress"

    def _opponent_stack(
        self, analysis: GameAnalysis, target: Stack, pile: BodyPart, placed: Character
    ) -> tuple[int, PlayCategory, str]:
        before = pile_characters(target.top_cards())
        after = {**before, pile: placed}
        if is_complete(after):
            return COMPLETE_OPPONENT_VALUE, "neutral", f"Would complete opponent stack {target.id}"
        lead = leading_character(before)
        if lead is not None and before[pile] == lead[0] and placed != lead[0]:
            op = analysis.disruption_at(target.id, pile)
            urgency: Urgency = op.urgency if op is not None else "minor"
            return (
                DISRUPTION_VALUES[urgency],
                "disruption",
                f"Disrupts {lead[0]} {pile} on {target.id} ({urgency}) with {placed}",
            )
        if matching_count(after, placed) > matching_count(before, placed) and matching_count(after, placed) >= 2:
            return FEED_OPPONENT_VALUE, "neutral", f"Feeds opponent {placed} on {target.id}"
        return 0, "neutral", f"Places {placed} {pile} on opponent stack {target.id}"
