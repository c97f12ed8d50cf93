from __future__ import annotations

import logging
import random

from npzr.engine.game import Player
from npzr.engine.types import CHARACTERS
from npzr.services.content import DifficultyProfile
from npzr.services.telemetry import TelemetryService

from .analysis import analyze
from .card_play import CardPlayEvaluator
from .difficulty import DifficultyManager
from .moves import MoveEvaluator

logger = logging.getLogger(__name__)


class AIPlayer:
    """Drives one seat of a game through its Player facade.

    Errors raised while acting are logged and swallowed so a host loop can keep
    calling `make_move`.
    """

    def __init__(
        self,
        player: Player,
        difficulty: DifficultyManager | DifficultyProfile | str = "medium",
        rng: random.Random | None = None,
        telemetry: TelemetryService | None = None,
        characters_to_win: int = len(CHARACTERS),
    ) -> None:
        self.player = player
        self.rng = rng if rng is not None else random.Random()
        if isinstance(difficulty, DifficultyManager):
            self.difficulty = difficulty
        else:
            self.difficulty = DifficultyManager(difficulty, self.rng)
        self.telemetry = telemetry
        self.characters_to_win = characters_to_win
        self.plays = CardPlayEvaluator()
        self.moves = MoveEvaluator()
        self.last_error: str | None = None
        self._reported_result = False

    def make_move(self) -> bool:
        """Take one decision for the current state. Returns True if an action went through."""
        state = self.player.state
        action = state.state
        try:
            if state.can_draw_card():
                card = self.player.draw_card()
                self._emit(logging.DEBUG, "Drew a card", action="draw", card_id=None if card is None else card.id)
                return True
            if state.can_play_card():
                return self._play()
            if state.can_move_card():
                return self._move()
            if state.can_nominate():
                # plays nominate in the same step, so reaching this state means a play went wrong
                self._emit(logging.ERROR, "Wild card left without a nomination", action="nominate")
                return False
            if state.is_game_over():
                if not self._reported_result:
                    self._reported_result = True
                    self._emit(logging.INFO, state.message, action="game_over")
                return False
            return False
        except Exception as e:
            self.last_error = str(e)
            self._emit(
                logging.ERROR,
                f"AI action failed: {e}",
                action=action,
                state=self.player.state.state,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            return False

    def take_turn(self, max_steps: int = 20) -> int:
        steps = 0
        while steps < max_steps and self.player.is_my_turn():
            if not self.make_move():
                break
            steps += 1
        return steps

    def strategy(self) -> dict[str, object]:
        p = self.difficulty.profile
        return {
            "player": self.player.id,
            "difficulty": p.level,
            "wild_card_conservation": p.wild_card_conservation,
            "disruption_aggression": p.disruption_aggression,
            "mistake_rate": p.mistake_rate,
            "cascade_optimization": p.cascade_optimization,
            "analysis": analyze(self.player, self.characters_to_win).summary(),
        }

    def _play(self) -> bool:
        analysis = analyze(self.player, self.characters_to_win)
        ranked = self.plays.evaluate(self.player, analysis)
        if not ranked:
            self._emit(logging.WARNING, "No playable card", action="play")
            return False
        chosen = self.difficulty.apply_to_plays(ranked)[0]
        self._emit(
            logging.INFO,
            f"Playing {chosen.card}",
            action="play",
            card_id=chosen.card.id,
            value=chosen.value,
            reasoning=chosen.reasoning,
            category=chosen.category,
            target_stack_id=chosen.target_stack_id,
            pile=chosen.pile,
            nomination=None if chosen.nomination is None else str(chosen.nomination),
        )
        self.player.play_card(chosen.card, chosen.target_stack_id, chosen.pile)
        if chosen.nomination is not None:
            self.player.nominate_wild(chosen.card, chosen.nomination)
        return True

    def _move(self) -> bool:
        analysis = analyze(self.player, self.characters_to_win)
        ranked = self.moves.evaluate(self.player, analysis)
        if not ranked:
            self._emit(logging.WARNING, "No legal move", action="move")
            return False
        shaped = self.difficulty.apply_to_moves(ranked)
        # The engine has no way to pass an owed move. When the cascade gate
        # leaves nothing, the top raw move is taken even if it is a cascade;
        # this is the only way a profile without cascade optimization plays one.
        chosen = shaped[0] if shaped else ranked[0]
        self._emit(
            logging.INFO,
            f"Moving {chosen.card}",
            action="move",
            card_id=chosen.card.id,
            value=chosen.value,
            reasoning=chosen.reasoning,
            category=chosen.category,
        )
        self.player.move_card(chosen.spec())
        return True

    def _emit(self, level: int, message: str, *, exc_info: bool = False, **fields: object) -> None:
        record: dict[str, object] = {
            "level": logging.getLevelName(level).lower(),
            "message": message,
            "player": self.player.id,
            "difficulty": self.difficulty.level,
            "card_id": None,
            "value": None,
            "reasoning": None,
            "category": None,
        }
        record.update(fields)
        logger.log(level, message, exc_info=exc_info, extra={"event": record})
        if self.telemetry is not None:
            self.telemetry.log("ai_decision", record)
