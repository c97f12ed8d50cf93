from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .errors import ValidationError

Character = Literal["ninja", "pirate", "zombie", "robot", "wild"]
BodyPart = Literal["head", "torso", "legs", "wild"]
WildKind = Literal["character", "position", "universal"]

WILD: Literal["wild"] = "wild"
CHARACTERS: tuple[Character, ...] = ("ninja", "pirate", "zombie", "robot")
BODY_PARTS: tuple[BodyPart, ...] = ("head", "torso", "legs")


@dataclass(frozen=True)
class Nomination:
    character: Character
    body_part: BodyPart

    def __str__(self) -> str:
        return f"{self.character} {self.body_part}"


@dataclass(eq=False)
class Card:
    """A single card. Identity is the id; only wild cards ever carry a nomination."""

    id: str
    character: Character
    body_part: BodyPart
    nomination: Nomination | None = None

    def is_wild(self) -> bool:
        return self.character == WILD or self.body_part == WILD

    def wild_kind(self) -> WildKind | None:
        if self.character == WILD and self.body_part == WILD:
            return "universal"
        if self.body_part == WILD:
            return "character"
        if self.character == WILD:
            return "position"
        return None

    def effective_character(self) -> Character:
        if self.nomination is not None:
            return self.nomination.character
        return self.character

    def effective_body_part(self) -> BodyPart:
        if self.nomination is not None:
            return self.nomination.body_part
        return self.body_part

    def can_nominate(self, character: Character, body_part: BodyPart) -> bool:
        if character not in CHARACTERS or body_part not in BODY_PARTS:
            return False
        kind = self.wild_kind()
        if kind == "character":
            return character == self.character
        if kind == "position":
            return body_part == self.body_part
        return kind == "universal"

    def nominate(self, character: Character, body_part: BodyPart) -> None:
        if not self.is_wild():
            raise ValidationError(f"Cannot nominate non-wild card {self.id}")
        if self.nomination is not None:
            raise ValidationError(f"Card {self.id} is already nominated as {self.nomination}")
        if not self.can_nominate(character, body_part):
            raise ValidationError(
                f"Invalid nomination {character} {body_part} for {self.wild_kind()} wild {self.id}"
            )
        self.nomination = Nomination(character=character, body_part=body_part)

    def clear_nomination(self) -> None:
        self.nomination = None

    def has_nomination(self) -> bool:
        return self.nomination is not None

    def fits_pile(self, pile: BodyPart) -> bool:
        if pile == WILD:
            return False
        return self.is_wild() or self.body_part == pile

    def legal_piles(self) -> tuple[BodyPart, ...]:
        if self.body_part == WILD:
            return BODY_PARTS
        return (self.body_part,)

    def nomination_options(self, pile: BodyPart) -> list[Nomination]:
        """Nominations that are valid for this wild once it sits on `pile`."""
        if not self.is_wild() or not self.fits_pile(pile):
            return []
        return [
            Nomination(character=c, body_part=pile)
            for c in CHARACTERS
            if self.can_nominate(c, pile)
        ]

    def clone(self, clear_nomination: bool = False) -> "Card":
        nomination = None if clear_nomination else self.nomination
        return Card(id=self.id, character=self.character, body_part=self.body_part, nomination=nomination)

    def __str__(self) -> str:
        base = f"{self.character} {self.body_part}"
        if self.nomination is not None:
            return f"{base} (as {self.nomination})"
        return base
