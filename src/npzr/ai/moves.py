from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from npzr.engine.game import MoveSpec, legal_moves
from npzr.engine.pieces import Stack
from npzr.engine.types import BodyPart, Card, Character

from .analysis import GameAnalysis, PlayerView, analyze, best_level, is_complete, pile_characters

MoveCategory = Literal["cascade", "disruption", "organization", "neutral"]

CATEGORY_RANK: dict[MoveCategory, int] = {"cascade": 0, "disruption": 1, "organization": 2, "neutral": 3}

CASCADE_VALUE = 1500
CASCADE_EXTRA_VALUE = 500
SETUP_VALUE = 250
SETUP_CAP = 2
DISRUPTION_BASE = 400
DISRUPTION_PER_LEVEL = 200
DISRUPTION_OWN_GAIN = 150
ORGANIZATION_BASE = 200
ORGANIZATION_STEP = 100
COMPLETE_OPPONENT_VALUE = -1000

_NEW = "__new__"

Piles = dict[BodyPart, "Character | None"]


@dataclass(frozen=True)
class MoveCandidate:
    card: Card
    from_stack_id: str
    from_pile: BodyPart
    to_stack_id: str | None
    to_pile: BodyPart
    value: int
    category: MoveCategory
    reasoning: str
    order: int

    @property
    def kind(self) -> Literal["regular", "wild"]:
        return "wild" if self.card.is_wild() else "regular"

    def spec(self) -> MoveSpec:
        return MoveSpec(
            card_id=self.card.id,
            from_stack_id=self.from_stack_id,
            from_pile=self.from_pile,
            to_pile=self.to_pile,
            to_stack_id=self.to_stack_id,
        )


def rank_key(c: MoveCandidate) -> tuple[int, int, int, int]:
    return (-c.value, CATEGORY_RANK[c.category], 1 if c.kind == "wild" else 0, c.order)


def rank(candidates: list[MoveCandidate]) -> list[MoveCandidate]:
    return sorted(candidates, key=rank_key)


def _below_top(stack: Stack, pile: BodyPart) -> Character | None:
    cards = stack.pile(pile)
    if len(cards) < 2:
        return None
    return cards[-2].effective_character()


class MoveEvaluator:
    """Scores relocations of visible top cards by simulating the resulting piles."""

    def candidates(self, view: PlayerView, analysis: GameAnalysis) -> list[MoveCandidate]:
        stacks = view.my_stacks() + view.opponent_stacks()
        by_id = {s.id: s for s in stacks}
        out: list[MoveCandidate] = []
        for order, move in enumerate(legal_moves(stacks, view.id)):
            out.append(self._score(view, by_id, move, order))
        return out

    def evaluate(self, view: PlayerView, analysis: GameAnalysis | None = None) -> list[MoveCandidate]:
        analysis = analysis or analyze(view)
        return rank(self.candidates(view, analysis))

    def select_best(self, view: PlayerView, analysis: GameAnalysis | None = None) -> MoveCandidate | None:
        ranked = self.evaluate(view, analysis)
        return ranked[0] if ranked else None

    def _score(self, view: PlayerView, by_id: dict[str, Stack], move: MoveSpec, order: int) -> MoveCandidate:
        source = by_id[move.from_stack_id]
        card = source.top_card(move.from_pile)
        assert card is not None
        # a moved wild loses its nomination
        moved: Character = card.character

        owners: dict[str, str] = {s.id: s.owner_id for s in by_id.values()}
        before: dict[str, Piles] = {}
        after: dict[str, Piles] = {}
        before[source.id] = pile_characters(source.top_cards())
        after[source.id] = {**before[source.id], move.from_pile: _below_top(source, move.from_pile)}

        to_key = move.to_stack_id if move.to_stack_id is not None else _NEW
        if to_key == _NEW:
            owners[_NEW] = view.id
            before[_NEW] = {p: None for p in after[source.id]}
            after[_NEW] = {**before[_NEW], move.to_pile: moved}
        elif to_key == source.id:
            after[source.id][move.to_pile] = moved
        else:
            dest = by_id[to_key]
            before[to_key] = pile_characters(dest.top_cards())
            after[to_key] = {**before[to_key], move.to_pile: moved}

        own_completed = 0
        opp_completed = 0
        own_gain = 0
        own_loss = 0
        setups = 0
        opp_before_level = 0
        opp_drop = 0
        opp_gain = 0
        for key in after:
            was = before[key]
            now = after[key]
            mine = owners[key] == view.id
            done = is_complete(now) and not is_complete(was)
            delta = best_level(now) - best_level(was)
            if mine:
                if done:
                    own_completed += 1
                    continue
                own_gain += max(delta, 0)
                own_loss += max(-delta, 0)
                if best_level(now) == 2 and best_level(was) < 2:
                    setups += 1
            else:
                if done:
                    opp_completed += 1
                elif delta < 0:
                    opp_before_level = max(opp_before_level, best_level(was))
                    opp_drop += -delta
                else:
                    opp_gain += delta

        source_is_opponent = source.owner_id != view.id
        category: MoveCategory
        target = "new stack" if to_key == _NEW else to_key
        where = f"{card} {source.id}/{move.from_pile} -> {target}/{move.to_pile}"
        if opp_completed:
            value, category = COMPLETE_OPPONENT_VALUE, "neutral"
            reasoning = f"Would complete an opponent stack: {where}"
        elif own_completed:
            value = CASCADE_VALUE + CASCADE_EXTRA_VALUE * (own_completed - 1) + SETUP_VALUE * min(setups, SETUP_CAP)
            category = "cascade"
            reasoning = f"Completes {own_completed} stack(s): {where}"
        elif source_is_opponent and opp_drop > 0:
            value = DISRUPTION_BASE + DISRUPTION_PER_LEVEL * opp_before_level + DISRUPTION_OWN_GAIN * own_gain
            category = "disruption"
            reasoning = f"Breaks opponent progress at level {opp_before_level}: {where}"
        elif own_gain > 0:
            value = ORGANIZATION_BASE + ORGANIZATION_STEP * own_gain - ORGANIZATION_STEP * own_loss
            category = "organization"
            reasoning = f"Improves own stacks by {own_gain}: {where}"
        else:
            value = own_gain - own_loss + opp_drop - opp_gain
            category = "neutral"
            reasoning = f"No clear gain: {where}"

        return MoveCandidate(
            card=card,
            from_stack_id=move.from_stack_id,
            from_pile=move.from_pile,
            to_stack_id=move.to_stack_id,
            to_pile=move.to_pile,
            value=value,
            category=category,
            reasoning=reasoning,
            order=order,
        )
