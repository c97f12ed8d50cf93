from __future__ import annotations

from .game import Engine
from .pieces import Stack
from .types import BODY_PARTS, Card


def card_to_dict(c: Card) -> dict[str, object]:
    return {
        "id": c.id,
        "character": c.character,
        "body_part": c.body_part,
        "nomination": (
            None
            if c.nomination is None
            else {"character": c.nomination.character, "body_part": c.nomination.body_part}
        ),
    }


def _stack_to_dict(s: Stack) -> dict[str, object]:
    return {
        "id": s.id,
        "owner": s.owner_id,
        "piles": {p: [card_to_dict(c) for c in s.pile(p)] for p in BODY_PARTS},
    }


def _player_to_dict(engine: Engine, player_id: str) -> dict[str, object]:
    state = engine.state_of(player_id)
    return {
        "id": player_id,
        "name": engine.name_of(player_id),
        "state": state.state,
        "hand": [c.id for c in engine.hand_of(player_id).cards()],
        "score": list(engine.score_of(player_id).characters()),
    }


def snapshot(engine: Engine) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current game."""
    pending = engine.pending_wild()
    return {
        "seed": engine.seed,
        "turn": engine.turn_number,
        "current_player": engine.current_player,
        "winner": engine.winner,
        "pending_moves": engine.pending_moves,
        "pending_wild": (
            None
            if pending is None
            else {"card_id": pending.card_id, "stack_id": pending.stack_id, "pile": pending.pile}
        ),
        "players": [_player_to_dict(engine, p.id) for p in engine.players],
        "stacks": [_stack_to_dict(s) for s in engine.stacks()],
        "deck": [c.id for c in engine.deck.cards()],
        "discard": [c.id for c in engine.discard()],
        "event_log": [dict(e) for e in engine.event_log],
    }
