from __future__ import annotations

import random
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

from .errors import EmptyDeck, NotFound, ValidationError
from .types import BODY_PARTS, CHARACTERS, WILD, BodyPart, Card, Character

TopCards = Mapping[BodyPart, "Card | None"]

COPIES_PER_REGULAR = 3


def build_cards() -> list[Card]:
    """The full 44 card set in a fixed, unshuffled order."""
    cards: list[Card] = []
    for character in CHARACTERS:
        for body_part in BODY_PARTS:
            for copy in range(1, COPIES_PER_REGULAR + 1):
                cards.append(Card(id=f"{character}_{body_part}_{copy}", character=character, body_part=body_part))
    for character in CHARACTERS:
        cards.append(Card(id=f"{character}_wild", character=character, body_part=WILD))
    for body_part in BODY_PARTS:
        cards.append(Card(id=f"wild_{body_part}", character=WILD, body_part=body_part))
    cards.append(Card(id="wild_wild", character=WILD, body_part=WILD))
    return cards


class Deck:
    """Draw pile. The last element of the list is the top of the deck."""

    def __init__(self, rng: random.Random, cards: Sequence[Card] | None = None) -> None:
        self._rng = rng
        self._cards: list[Card] = list(cards) if cards is not None else build_cards()

    def __len__(self) -> int:
        return len(self._cards)

    def is_empty(self) -> bool:
        return not self._cards

    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    def shuffle(self) -> None:
        # Fisher-Yates, last index down to 1
        cards = self._cards
        for i in range(len(cards) - 1, 0, -1):
            j = self._rng.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]

    def draw(self) -> Card:
        if not self._cards:
            raise EmptyDeck("Deck is empty")
        return self._cards.pop()

    def peek(self) -> Card | None:
        if not self._cards:
            return None
        return self._cards[-1]

    def reshuffle(self, cards: Iterable[Card]) -> None:
        self._cards.extend(card.clone(clear_nomination=True) for card in cards)
        self.shuffle()


class Hand:
    def __init__(self) -> None:
        self._cards: list[Card] = []

    def __len__(self) -> int:
        return len(self._cards)

    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    def wild_cards(self) -> tuple[Card, ...]:
        return tuple(c for c in self._cards if c.is_wild())

    def is_empty(self) -> bool:
        return not self._cards

    def has(self, card_id: str) -> bool:
        return any(c.id == card_id for c in self._cards)

    def get(self, card_id: str) -> Card:
        for c in self._cards:
            if c.id == card_id:
                return c
        raise NotFound(f"Card {card_id} not found in hand")

    def add(self, card: Card) -> None:
        self._cards.append(card)

    def remove(self, card_id: str) -> Card:
        for i, c in enumerate(self._cards):
            if c.id == card_id:
                return self._cards.pop(i)
        raise NotFound(f"Card {card_id} not found in hand")


class Stack:
    """Three LIFO piles owned by one player; only the top card of a pile is visible."""

    def __init__(self, stack_id: str, owner_id: str) -> None:
        self.id = stack_id
        self.owner_id = owner_id
        self._piles: dict[BodyPart, list[Card]] = {p: [] for p in BODY_PARTS}

    def _pile_list(self, pile: BodyPart) -> list[Card]:
        if pile not in self._piles:
            raise ValidationError(f"Invalid pile: {pile}")
        return self._piles[pile]

    def can_accept_card(self, card: Card, pile: BodyPart) -> bool:
        if pile == WILD or pile not in self._piles:
            return False
        return card.body_part == pile or card.is_wild()

    def add_card(self, card: Card, pile: BodyPart) -> None:
        if not self.can_accept_card(card, pile):
            raise ValidationError(f"Cannot add {card} to {pile} pile of {self.id}")
        self._piles[pile].append(card)

    def remove_card(self, pile: BodyPart) -> Card:
        cards = self._pile_list(pile)
        if not cards:
            raise NotFound(f"{pile} pile of {self.id} is empty")
        return cards.pop()

    def pile(self, pile: BodyPart) -> tuple[Card, ...]:
        return tuple(self._pile_list(pile))

    def top_card(self, pile: BodyPart) -> Card | None:
        cards = self._pile_list(pile)
        return cards[-1] if cards else None

    def top_cards(self) -> TopCards:
        return MappingProxyType({p: (cs[-1] if cs else None) for p, cs in self._piles.items()})

    def all_cards(self) -> list[Card]:
        return [c for p in BODY_PARTS for c in self._piles[p]]

    def card_count(self) -> int:
        return sum(len(cs) for cs in self._piles.values())

    def is_empty(self) -> bool:
        return self.card_count() == 0

    def find_pile(self, card_id: str) -> BodyPart | None:
        for p, cs in self._piles.items():
            if any(c.id == card_id for c in cs):
                return p
        return None

    def is_complete(self) -> bool:
        return self.completed_character() is not None

    def completed_character(self) -> Character | None:
        return completed_character(self.top_cards())

    def clear(self) -> list[Card]:
        cards = self.all_cards()
        for cs in self._piles.values():
            cs.clear()
        return cards

    def __str__(self) -> str:
        tops = self.top_cards()
        parts = ", ".join(f"{p}: {tops[p] if tops[p] is not None else 'empty'}" for p in BODY_PARTS)
        return f"{self.id} ({self.owner_id}): {parts}"


def completed_character(tops: TopCards) -> Character | None:
    """The shared non-wild effective character of three filled piles, if any."""
    chars = set()
    for p in BODY_PARTS:
        card = tops.get(p)
        if card is None:
            return None
        chars.add(card.effective_character())
    if len(chars) != 1:
        return None
    (character,) = chars
    if character == WILD:
        return None
    return character


class Score:
    def __init__(self) -> None:
        self._characters: set[Character] = set()

    def __len__(self) -> int:
        return len(self._characters)

    def has(self, character: Character) -> bool:
        return character in self._characters

    def add(self, character: Character) -> bool:
        """Record a completed character; returns False if it was already scored."""
        if character == WILD:
            raise ValidationError("Cannot score the wild character")
        if character in self._characters:
            return False
        self._characters.add(character)
        return True

    def characters(self) -> tuple[Character, ...]:
        return tuple(c for c in CHARACTERS if c in self._characters)

    def missing(self) -> tuple[Character, ...]:
        return tuple(c for c in CHARACTERS if c not in self._characters)

    def __str__(self) -> str:
        return ", ".join(self.characters()) or "no characters scored"
