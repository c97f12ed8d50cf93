from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

StateType = Literal[
    "waiting_for_opponent",
    "draw_card",
    "play_card",
    "nominate_wild",
    "move_card",
    "game_over",
]
ActionType = Literal["draw", "play", "nominate", "move"]


@dataclass(frozen=True)
class PlayerState:
    state: StateType
    message: str

    def can_draw_card(self) -> bool:
        return self.state == "draw_card"

    def can_play_card(self) -> bool:
        return self.state == "play_card"

    def can_nominate(self) -> bool:
        return self.state == "nominate_wild"

    def can_move_card(self) -> bool:
        return self.state == "move_card"

    def is_waiting(self) -> bool:
        return self.state == "waiting_for_opponent"

    def is_game_over(self) -> bool:
        return self.state == "game_over"

    def is_active(self) -> bool:
        return not (self.is_waiting() or self.is_game_over())

    def allows(self, action: ActionType) -> bool:
        return action in self.valid_actions()

    def valid_actions(self) -> list[ActionType]:
        actions: list[ActionType] = []
        if self.can_draw_card():
            actions.append("draw")
        if self.can_play_card():
            actions.append("play")
        if self.can_nominate():
            actions.append("nominate")
        if self.can_move_card():
            actions.append("move")
        return actions

    @staticmethod
    def waiting_for_opponent() -> "PlayerState":
        return PlayerState("waiting_for_opponent", "Waiting for opponent to complete their turn")

    @staticmethod
    def draw_card() -> "PlayerState":
        return PlayerState("draw_card", "Draw a card from the deck to start your turn")

    @staticmethod
    def play_card() -> "PlayerState":
        return PlayerState("play_card", "Play a card from your hand")

    @staticmethod
    def nominate_wild() -> "PlayerState":
        return PlayerState("nominate_wild", "Nominate what your wild card represents")

    @staticmethod
    def move_card(remaining: int = 1) -> "PlayerState":
        return PlayerState("move_card", f"Move a card between stacks ({remaining} remaining)")

    @staticmethod
    def game_over(winner_name: str) -> "PlayerState":
        return PlayerState("game_over", f"Game over! {winner_name} wins")
