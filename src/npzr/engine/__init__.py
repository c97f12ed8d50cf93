"""Deterministic, headless rules engine for Ninja Pirate Zombie Robot.

IMPORTANT: This package must never import anything from npzr.ai.
"""

from .actions import DrawAction, MoveAction, NominateAction, PlayCardAction, StepResult, step
from .errors import EmptyDeck, EmptyResource, GameError, InvalidStateTransition, NotFound, ValidationError
from .game import Engine, EngineOps, GameConfig, MoveSpec, Player, legal_moves, new_game
from .pieces import Deck, Hand, Score, Stack, build_cards
from .state import PlayerState
from .types import BODY_PARTS, CHARACTERS, WILD, BodyPart, Card, Character, Nomination

__all__ = [
    "BODY_PARTS",
    "BodyPart",
    "CHARACTERS",
    "Card",
    "Character",
    "Deck",
    "DrawAction",
    "EmptyDeck",
    "EmptyResource",
    "Engine",
    "EngineOps",
    "GameConfig",
    "GameError",
    "Hand",
    "InvalidStateTransition",
    "MoveAction",
    "MoveSpec",
    "NominateAction",
    "NotFound",
    "PlayCardAction",
    "Player",
    "PlayerState",
    "Score",
    "Stack",
    "StepResult",
    "ValidationError",
    "WILD",
    "Nomination",
    "build_cards",
    "legal_moves",
    "new_game",
    "step",
]
