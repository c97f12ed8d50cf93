from __future__ import annotations

from dataclasses import dataclass

from .errors import GameError
from .game import Engine, Event, MoveSpec
from .types import BodyPart, Character, Nomination


@dataclass(frozen=True)
class DrawAction:
    player: str


@dataclass(frozen=True)
class PlayCardAction:
    player: str
    card_id: str
    target_stack_id: str | None = None
    pile: BodyPart | None = None


@dataclass(frozen=True)
class NominateAction:
    player: str
    card_id: str
    character: Character
    body_part: BodyPart


@dataclass(frozen=True)
class MoveAction:
    player: str
    card_id: str
    from_stack_id: str
    from_pile: BodyPart
    to_pile: BodyPart
    to_stack_id: str | None = None

    def spec(self) -> MoveSpec:
        return MoveSpec(
            card_id=self.card_id,
            from_stack_id=self.from_stack_id,
            from_pile=self.from_pile,
            to_pile=self.to_pile,
            to_stack_id=self.to_stack_id,
        )


Action = DrawAction | PlayCardAction | NominateAction | MoveAction


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None
    error_kind: str | None = None


def step(engine: Engine, action: Action) -> StepResult:
    """Apply a single action to the engine.

    Rule violations come back as a failed result instead of an exception; the
    engine is left exactly as it was.
    """
    start = len(engine.event_log)
    try:
        if isinstance(action, DrawAction):
            engine.draw_card(action.player)
        elif isinstance(action, PlayCardAction):
            engine.play_card(action.player, action.card_id, action.target_stack_id, action.pile)
        elif isinstance(action, NominateAction):
            engine.nominate_wild(
                action.player, action.card_id, Nomination(character=action.character, body_part=action.body_part)
            )
        elif isinstance(action, MoveAction):
            engine.move_card(action.player, action.spec())
        else:
            return StepResult(ok=False, events=[], error="Unknown action.", error_kind="validation")
    except GameError as e:
        return StepResult(ok=False, events=[], error=str(e), error_kind=e.kind)
    return StepResult(ok=True, events=engine.event_log[start:])
