from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Literal, Protocol

from npzr.engine.pieces import Score, Stack, TopCards
from npzr.engine.types import BODY_PARTS, CHARACTERS, BodyPart, Card, Character

Phase = Literal["early", "mid", "late"]
Threat = Literal["low", "medium", "high"]
Urgency = Literal["critical", "important", "minor"]

# Effective character per pile, None for an empty pile.
PileCharacters = Mapping[BodyPart, "Character | None"]

_PHASE_ORDER: tuple[Phase, ...] = ("early", "mid", "late")


class PlayerView(Protocol):
    id: str

    def hand(self) -> tuple[Card, ...]: ...

    def my_stacks(self) -> list[Stack]: ...

    def opponent_stacks(self) -> list[Stack]: ...

    def my_score(self) -> Score: ...

    def opponent_score(self) -> Score: ...

    def deck_remaining(self) -> int: ...


@dataclass(frozen=True)
class StackProgress:
    character: Character
    level: int
    stack_id: str | None
    missing: tuple[BodyPart, ...]
    is_complete: bool = False


@dataclass(frozen=True)
class CompletionOpportunity:
    character: Character
    stack_id: str
    needed_pile: BodyPart


@dataclass(frozen=True)
class DisruptionOpportunity:
    character: Character
    stack_id: str
    pile: BodyPart
    urgency: Urgency


@dataclass(frozen=True)
class GameAnalysis:
    own_progress: dict[Character, StackProgress]
    opponent_progress: dict[Character, StackProgress]
    own_wild_cards: tuple[Card, ...]
    phase: Phase
    threat: Threat
    completion_opportunities: tuple[CompletionOpportunity, ...]
    disruption_opportunities: tuple[DisruptionOpportunity, ...]

    def has_completion(self) -> bool:
        return bool(self.completion_opportunities)

    def has_critical_disruption(self) -> bool:
        return any(d.urgency == "critical" for d in self.disruption_opportunities)

    def disruption_at(self, stack_id: str, pile: BodyPart) -> DisruptionOpportunity | None:
        for d in self.disruption_opportunities:
            if d.stack_id == stack_id and d.pile == pile:
                return d
        return None

    def summary(self) -> str:
        def fmt(progress: Mapping[Character, StackProgress]) -> str:
            return " ".join(f"{c}:{progress[c].level}" for c in CHARACTERS)

        return (
            f"phase={self.phase} threat={self.threat} "
            f"own[{fmt(self.own_progress)}] opp[{fmt(self.opponent_progress)}] "
            f"completions={len(self.completion_opportunities)} "
            f"disruptions={len(self.disruption_opportunities)} "
            f"wilds={len(self.own_wild_cards)}"
        )


def pile_characters(tops: TopCards) -> dict[BodyPart, Character | None]:
    out: dict[BodyPart, Character | None] = {}
    for p in BODY_PARTS:
        card = tops.get(p)
        out[p] = None if card is None else card.effective_character()
    return out


def matching_count(chars: PileCharacters, character: Character) -> int:
    return sum(1 for p in BODY_PARTS if chars.get(p) == character)


def best_level(chars: PileCharacters) -> int:
    return max(matching_count(chars, c) for c in CHARACTERS)


def leading_character(chars: PileCharacters) -> tuple[Character, int] | None:
    """Character with the most matching piles; ties go to the earlier character."""
    best: tuple[Character, int] | None = None
    for c in CHARACTERS:
        n = matching_count(chars, c)
        if n > 0 and (best is None or n > best[1]):
            best = (c, n)
    return best


def is_complete(chars: PileCharacters) -> bool:
    return any(matching_count(chars, c) == len(BODY_PARTS) for c in CHARACTERS)


def can_fill_as(card: Card, character: Character, pile: BodyPart) -> bool:
    """Whether `card` placed on `pile` can show `character` there."""
    if not card.fits_pile(pile):
        return False
    if not card.is_wild():
        return card.character == character
    return card.can_nominate(character, pile)


def can_cover_with_other(card: Card, character: Character, pile: BodyPart) -> bool:
    """Whether `card` placed on `pile` can show something other than `character`."""
    if not card.fits_pile(pile):
        return False
    if not card.is_wild():
        return card.character != character
    return any(c != character for c in CHARACTERS if card.can_nominate(c, pile))


def _progress(stacks: Sequence[Stack], score: Score, character: Character) -> StackProgress:
    if score.has(character):
        return StackProgress(character=character, level=3, stack_id=None, missing=(), is_complete=True)
    best: StackProgress | None = None
    for s in stacks:
        chars = pile_characters(s.top_cards())
        level = matching_count(chars, character)
        if best is None or level > best.level:
            missing = tuple(p for p in BODY_PARTS if chars[p] != character)
            best = StackProgress(character=character, level=level, stack_id=s.id, missing=missing)
    if best is None or best.level == 0:
        return StackProgress(character=character, level=0, stack_id=None, missing=BODY_PARTS)
    return best


def progress_by_character(stacks: Sequence[Stack], score: Score) -> dict[Character, StackProgress]:
    return {c: _progress(stacks, score, c) for c in CHARACTERS}


def _phase(deck_remaining: int, completions: int) -> Phase:
    if deck_remaining > 22:
        by_deck: Phase = "early"
    elif deck_remaining > 10:
        by_deck = "mid"
    else:
        by_deck = "late"
    if completions < 2:
        by_completions: Phase = "early"
    elif completions <= 4:
        by_completions = "mid"
    else:
        by_completions = "late"
    return max(by_deck, by_completions, key=_PHASE_ORDER.index)


def _threat(opponent: Mapping[Character, StackProgress], opponent_scored: int, characters_to_win: int) -> Threat:
    near = sum(1 for p in opponent.values() if p.level == 2 and not p.is_complete)
    if near >= 2 or opponent_scored >= characters_to_win - 1:
        return "high"
    if near >= 1 or opponent_scored >= 2:
        return "medium"
    return "low"


def _completion_opportunities(stacks: Sequence[Stack], hand: Sequence[Card]) -> list[CompletionOpportunity]:
    out: list[CompletionOpportunity] = []
    for s in stacks:
        chars = pile_characters(s.top_cards())
        for c in CHARACTERS:
            if matching_count(chars, c) != 2:
                continue
            needed = next(p for p in BODY_PARTS if chars[p] != c)
            if any(can_fill_as(card, c, needed) for card in hand):
                out.append(CompletionOpportunity(character=c, stack_id=s.id, needed_pile=needed))
    return out


def _disruption_opportunities(stacks: Sequence[Stack], hand: Sequence[Card]) -> list[DisruptionOpportunity]:
    out: list[DisruptionOpportunity] = []
    for s in stacks:
        chars = pile_characters(s.top_cards())
        lead = leading_character(chars)
        if lead is None:
            continue
        character, level = lead
        if level >= 2:
            urgency: Urgency = "critical"
        elif all(chars[p] is None for p in BODY_PARTS if chars[p] != character):
            urgency = "important"
        else:
            urgency = "minor"
        for p in BODY_PARTS:
            if chars[p] != character:
                continue
            if any(can_cover_with_other(card, character, p) for card in hand):
                out.append(DisruptionOpportunity(character=character, stack_id=s.id, pile=p, urgency=urgency))
    return out


def analyze(view: PlayerView, characters_to_win: int = len(CHARACTERS)) -> GameAnalysis:
    hand = view.hand()
    own_stacks = view.my_stacks()
    opp_stacks = view.opponent_stacks()
    own_score = view.my_score()
    opp_score = view.opponent_score()

    own = progress_by_character(own_stacks, own_score)
    opp = progress_by_character(opp_stacks, opp_score)
    return GameAnalysis(
        own_progress=own,
        opponent_progress=opp,
        own_wild_cards=tuple(c for c in hand if c.is_wild()),
        phase=_phase(view.deck_remaining(), len(own_score) + len(opp_score)),
        threat=_threat(opp, len(opp_score), characters_to_win),
        completion_opportunities=tuple(_completion_opportunities(own_stacks, hand)),
        disruption_opportunities=tuple(_disruption_opportunities(opp_stacks, hand)),
    )
