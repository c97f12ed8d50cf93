from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from .errors import InvalidStateTransition, NotFound, ValidationError
from .pieces import Deck, Hand, Score, Stack
from .state import ActionType, PlayerState
from .types import BODY_PARTS, WILD, BodyPart, Card, Nomination

Event = dict[str, object]

MAX_PLAYERS = 2


@dataclass(frozen=True)
class GameConfig:
    starting_hand: int = 5
    characters_to_win: int = 4
    wild_continues_turn: bool = True


@dataclass(frozen=True)
class MoveSpec:
    card_id: str
    from_stack_id: str
    from_pile: BodyPart
    to_pile: BodyPart
    to_stack_id: str | None = None  # None = new stack owned by the mover


@dataclass
class PlayerRecord:
    id: str
    name: str
    hand: Hand = field(default_factory=Hand)
    score: Score = field(default_factory=Score)
    state: PlayerState = field(default_factory=PlayerState.waiting_for_opponent)


@dataclass(frozen=True)
class PendingWild:
    card_id: str
    stack_id: str
    pile: BodyPart


def legal_moves(stacks: Sequence[Stack], mover_id: str) -> list[MoveSpec]:
    """Every relocation of a visible top card the engine would accept right now."""
    moves: list[MoveSpec] = []
    for from_stack in stacks:
        for from_pile in BODY_PARTS:
            card = from_stack.top_card(from_pile)
            if card is None:
                continue
            for to_stack in stacks:
                for to_pile in card.legal_piles():
                    if to_stack is from_stack and to_pile == from_pile:
                        continue
                    moves.append(MoveSpec(card.id, from_stack.id, from_pile, to_pile, to_stack.id))
            for to_pile in card.legal_piles():
                if _is_noop_new_stack(from_stack, from_pile, to_pile, mover_id):
                    continue
                moves.append(MoveSpec(card.id, from_stack.id, from_pile, to_pile, None))
    return moves


def _is_noop_new_stack(from_stack: Stack, from_pile: BodyPart, to_pile: BodyPart, mover_id: str) -> bool:
    return from_stack.owner_id == mover_id and from_stack.card_count() == 1 and to_pile == from_pile


class EngineOps(Protocol):
    """The part of the engine a player facade is allowed to reach."""

    def state_of(self, player_id: str) -> PlayerState: ...

    def hand_of(self, player_id: str) -> Hand: ...

    def score_of(self, player_id: str) -> Score: ...

    def opponent_of(self, player_id: str) -> str: ...

    def stacks_for(self, player_id: str) -> list[Stack]: ...

    def opponent_stacks(self, player_id: str) -> list[Stack]: ...

    def deck_remaining(self) -> int: ...

    def draw_card(self, player_id: str) -> Card | None: ...

    def play_card(
        self, player_id: str, card_id: str, target_stack_id: str | None = None, pile: BodyPart | None = None
    ) -> Stack: ...

    def nominate_wild(self, player_id: str, card_id: str, nomination: Nomination) -> None: ...

    def move_card(self, player_id: str, move: MoveSpec) -> None: ...


class Player:
    """Per-player view and actions. State guards are checked before delegating."""

    def __init__(self, player_id: str, name: str, engine: EngineOps) -> None:
        self.id = player_id
        self.name = name
        self._engine = engine

    @property
    def state(self) -> PlayerState:
        return self._engine.state_of(self.id)

    def hand(self) -> tuple[Card, ...]:
        return self._engine.hand_of(self.id).cards()

    def hand_size(self) -> int:
        return len(self._engine.hand_of(self.id))

    def my_stacks(self) -> list[Stack]:
        return self._engine.stacks_for(self.id)

    def opponent_stacks(self) -> list[Stack]:
        return self._engine.opponent_stacks(self.id)

    def my_score(self) -> Score:
        return self._engine.score_of(self.id)

    def opponent_score(self) -> Score:
        return self._engine.score_of(self._engine.opponent_of(self.id))

    def deck_remaining(self) -> int:
        return self._engine.deck_remaining()

    def is_my_turn(self) -> bool:
        return self.state.is_active()

    def _guard(self, action: ActionType) -> None:
        state = self.state
        if not state.allows(action):
            raise InvalidStateTransition(f"Cannot {action} in state: {state.state}")

    def draw_card(self) -> Card | None:
        self._guard("draw")
        return self._engine.draw_card(self.id)

    def play_card(
        self, card: Card | str, target_stack_id: str | None = None, pile: BodyPart | None = None
    ) -> Stack:
        self._guard("play")
        card_id = card if isinstance(card, str) else card.id
        if not self._engine.hand_of(self.id).has(card_id):
            raise NotFound(f"Card {card_id} not found in hand")
        return self._engine.play_card(self.id, card_id, target_stack_id, pile)

    def nominate_wild(self, card: Card | str, nomination: Nomination) -> None:
        self._guard("nominate")
        if isinstance(card, Card) and not card.is_wild():
            raise ValidationError("Can only nominate wild cards")
        card_id = card if isinstance(card, str) else card.id
        self._engine.nominate_wild(self.id, card_id, nomination)

    def move_card(self, move: MoveSpec) -> None:
        self._guard("move")
        self._engine.move_card(self.id, move)

    def __repr__(self) -> str:
        return f"Player({self.id!r}, {self.name!r})"


class Engine:
    """Owns the deck, hands, stacks and scores; the only thing that mutates them.

    Every action validates first and raises a GameError without side effects;
    the turn state changes only as the last step of a successful action.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        config: GameConfig | None = None,
        seed: int | None = None,
        deck: Deck | None = None,
    ) -> None:
        self.config = config or GameConfig()
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)
        if deck is None:
            deck = Deck(self.rng)
            deck.shuffle()
        self.deck = deck
        self._discard: list[Card] = []
        self._records: list[PlayerRecord] = []
        self._players: list[Player] = []
        self._stacks: list[Stack] = []
        self._stack_counter = 0
        self._current_index = 0
        self._pending_wild: PendingWild | None = None
        self._last_played_wild = False
        self.pending_moves = 0
        self.turn_number = 0
        self.winner: str | None = None
        self.event_log: list[Event] = []

    # ------------------------------------------------------------------
    # registration

    def add_player(self, name: str) -> Player:
        if len(self._records) >= MAX_PLAYERS:
            raise ValidationError(f"Game already has {MAX_PLAYERS} players")
        player_id = f"player{len(self._records) + 1}"
        self._records.append(PlayerRecord(id=player_id, name=name))
        player = Player(player_id, name, self)
        self._players.append(player)
        self.event_log.append({"type": "PLAYER_JOINED", "player": player_id, "name": name})
        if len(self._records) == MAX_PLAYERS:
            self._start_game()
        return player

    def _start_game(self) -> None:
        for _ in range(self.config.starting_hand):
            for rec in self._records:
                if self.deck.is_empty():
                    break
                rec.hand.add(self.deck.draw())
        self._current_index = 0
        self.turn_number = 1
        self._records[0].state = PlayerState.draw_card()
        self._records[1].state = PlayerState.waiting_for_opponent()
        self.event_log.append({"type": "GAME_STARTED", "first_player": self._records[0].id})
        self.event_log.append({"type": "TURN_STARTED", "player": self._records[0].id, "turn": 1})

    # ------------------------------------------------------------------
    # queries

    @property
    def players(self) -> list[Player]:
        return list(self._players)

    def player(self, player_id: str) -> Player:
        for p in self._players:
            if p.id == player_id:
                return p
        raise NotFound(f"Player {player_id} not found")

    @property
    def current_player(self) -> str | None:
        if not self._records or self.winner is not None:
            return None
        return self._records[self._current_index].id

    def _record(self, player_id: str) -> PlayerRecord:
        for rec in self._records:
            if rec.id == player_id:
                return rec
        raise NotFound(f"Player {player_id} not found")

    def state_of(self, player_id: str) -> PlayerState:
        return self._record(player_id).state

    def hand_of(self, player_id: str) -> Hand:
        return self._record(player_id).hand

    def score_of(self, player_id: str) -> Score:
        return self._record(player_id).score

    def name_of(self, player_id: str) -> str:
        return self._record(player_id).name

    def opponent_of(self, player_id: str) -> str:
        self._record(player_id)
        for rec in self._records:
            if rec.id != player_id:
                return rec.id
        raise NotFound(f"Player {player_id} has no opponent yet")

    def stacks(self) -> list[Stack]:
        return list(self._stacks)

    def stacks_for(self, player_id: str) -> list[Stack]:
        return [s for s in self._stacks if s.owner_id == player_id]

    def opponent_stacks(self, player_id: str) -> list[Stack]:
        return [s for s in self._stacks if s.owner_id != player_id]

    def get_stack(self, stack_id: str) -> Stack:
        for s in self._stacks:
            if s.id == stack_id:
                return s
        raise NotFound(f"Stack {stack_id} not found")

    def deck_remaining(self) -> int:
        return len(self.deck)

    def discard(self) -> tuple[Card, ...]:
        return tuple(self._discard)

    def is_game_over(self) -> bool:
        return self.winner is not None

    def pending_wild(self) -> PendingWild | None:
        return self._pending_wild

    # ------------------------------------------------------------------
    # actions

    def _require(self, player_id: str, action: ActionType) -> PlayerRecord:
        rec = self._record(player_id)
        if self.winner is not None:
            raise InvalidStateTransition("Game already ended")
        if len(self._records) < MAX_PLAYERS:
            raise InvalidStateTransition("Game has not started")
        if not rec.state.allows(action):
            raise InvalidStateTransition(f"Cannot {action} in state: {rec.state.state}")
        return rec

    def draw_card(self, player_id: str) -> Card | None:
        rec = self._require(player_id, "draw")
        card = self._draw_one()
        if card is None:
            self.event_log.append({"type": "DECK_EXHAUSTED", "player": player_id})
        else:
            rec.hand.add(card)
            self.event_log.append({"type": "CARD_DRAWN", "player": player_id, "card_id": card.id})
        rec.state = PlayerState.play_card()
        if rec.hand.is_empty():
            self._end_turn(rec)
        return card

    def _draw_one(self) -> Card | None:
        if self.deck.is_empty():
            if not self._discard:
                return None
            recycled = len(self._discard)
            self.deck.reshuffle(self._discard)
            self._discard.clear()
            self.event_log.append({"type": "DECK_RESHUFFLED", "cards": recycled})
        return self.deck.draw()

    def play_card(
        self,
        player_id: str,
        card_id: str,
        target_stack_id: str | None = None,
        pile: BodyPart | None = None,
    ) -> Stack:
        rec = self._require(player_id, "play")
        card = rec.hand.get(card_id)
        if pile is None:
            if card.body_part == WILD:
                raise ValidationError(f"A target pile is required for {card}")
            pile = card.body_part
        if pile not in BODY_PARTS:
            raise ValidationError(f"Invalid pile: {pile}")
        if pile not in card.legal_piles():
            raise ValidationError(f"{card} cannot be placed on a {pile} pile")
        target = self.get_stack(target_stack_id) if target_stack_id is not None else None

        rec.hand.remove(card.id)
        if target is None:
            target = self._new_stack(player_id)
        target.add_card(card, pile)
        self._last_played_wild = card.is_wild()
        self.event_log.append(
            {
                "type": "CARD_PLAYED",
                "player": player_id,
                "card_id": card.id,
                "stack_id": target.id,
                "pile": pile,
            }
        )
        if card.is_wild():
            self._pending_wild = PendingWild(card_id=card.id, stack_id=target.id, pile=pile)
            rec.state = PlayerState.nominate_wild()
            return target
        self._resolve(rec, self._process_completions())
        return target

    def nominate_wild(self, player_id: str, card_id: str, nomination: Nomination) -> None:
        rec = self._require(player_id, "nominate")
        pending = self._pending_wild
        if pending is None:
            raise InvalidStateTransition("No wild card is awaiting nomination")
        if card_id != pending.card_id:
            raise ValidationError(f"Card {card_id} is not the wild card awaiting nomination")
        card = self.get_stack(pending.stack_id).top_card(pending.pile)
        if card is None or card.id != card_id:
            raise NotFound(f"Card {card_id} not found on {pending.stack_id}")
        if nomination.body_part != pending.pile:
            raise ValidationError(
                f"Nomination body part {nomination.body_part} does not match the {pending.pile} pile"
            )
        card.nominate(nomination.character, nomination.body_part)
        self._pending_wild = None
        self.event_log.append(
            {
                "type": "WILD_NOMINATED",
                "player": player_id,
                "card_id": card_id,
                "character": nomination.character,
                "body_part": nomination.body_part,
            }
        )
        self._resolve(rec, self._process_completions())

    def move_card(self, player_id: str, move: MoveSpec) -> None:
        rec = self._require(player_id, "move")
        from_stack = self.get_stack(move.from_stack_id)
        if move.from_pile not in BODY_PARTS:
            raise ValidationError(f"Invalid pile: {move.from_pile}")
        card = from_stack.top_card(move.from_pile)
        if card is None or card.id != move.card_id:
            if from_stack.find_pile(move.card_id) is None:
                raise NotFound(f"Card {move.card_id} not found in {move.from_pile} pile of {from_stack.id}")
            raise ValidationError(f"Card {move.card_id} is not the top of its pile")
        if move.to_pile not in card.legal_piles():
            raise ValidationError(f"{card} cannot be placed on a {move.to_pile} pile")
        to_stack: Stack | None = None
        if move.to_stack_id is not None:
            to_stack = self.get_stack(move.to_stack_id)
            if to_stack is from_stack and move.to_pile == move.from_pile:
                raise ValidationError("A move must change the card's position")
        elif _is_noop_new_stack(from_stack, move.from_pile, move.to_pile, player_id):
            raise ValidationError("Moving a lone card to a new stack changes nothing")

        from_stack.remove_card(move.from_pile)
        card.clear_nomination()
        if to_stack is None:
            to_stack = self._new_stack(player_id)
        to_stack.add_card(card, move.to_pile)
        self.pending_moves -= 1
        self._stacks = [s for s in self._stacks if not s.is_empty()]
        self.event_log.append(
            {
                "type": "CARD_MOVED",
                "player": player_id,
                "card_id": card.id,
                "from_stack": from_stack.id,
                "from_pile": move.from_pile,
                "to_stack": to_stack.id,
                "to_pile": move.to_pile,
            }
        )
        self._resolve(rec, self._process_completions())

    def legal_moves(self, player_id: str) -> list[MoveSpec]:
        return legal_moves(self._stacks, player_id)

    # ------------------------------------------------------------------
    # turn resolution

    def _new_stack(self, owner_id: str) -> Stack:
        self._stack_counter += 1
        stack = Stack(f"stack{self._stack_counter}", owner_id)
        self._stacks.append(stack)
        return stack

    def _process_completions(self) -> int:
        completed = 0
        for stack in [s for s in self._stacks if s.is_complete()]:
            character = stack.completed_character()
            assert character is not None
            owner = self._record(stack.owner_id)
            scored = owner.score.add(character)
            self._discard.extend(stack.clear())
            self._stacks.remove(stack)
            completed += 1
            self.event_log.append(
                {
                    "type": "STACK_COMPLETED",
                    "stack_id": stack.id,
                    "owner": owner.id,
                    "character": character,
                    "scored": scored,
                }
            )
        if completed:
            self._check_winner()
        return completed

    def _check_winner(self) -> None:
        if self.winner is not None:
            return
        active = self._records[self._current_index]
        ordered = [active] + [r for r in self._records if r is not active]
        for rec in ordered:
            if len(rec.score) >= self.config.characters_to_win:
                self._end_game(rec)
                return

    def _end_game(self, winner: PlayerRecord) -> None:
        self.winner = winner.id
        self.pending_moves = 0
        self._pending_wild = None
        for rec in self._records:
            rec.state = PlayerState.game_over(winner.name)
        self.event_log.append({"type": "GAME_ENDED", "winner": winner.id, "reason": "all_characters_scored"})

    def _resolve(self, rec: PlayerRecord, completed: int) -> None:
        if self.winner is not None:
            return
        self.pending_moves += completed
        if self.pending_moves > 0:
            if self.legal_moves(rec.id):
                rec.state = PlayerState.move_card(self.pending_moves)
                return
            self.event_log.append({"type": "MOVES_FORFEITED", "player": rec.id, "moves": self.pending_moves})
            self.pending_moves = 0
        if self.config.wild_continues_turn and self._last_played_wild and not rec.hand.is_empty():
            rec.state = PlayerState.play_card()
            return
        self._end_turn(rec)

    def _end_turn(self, rec: PlayerRecord) -> None:
        rec.state = PlayerState.waiting_for_opponent()
        self._current_index = (self._current_index + 1) % len(self._records)
        nxt = self._records[self._current_index]
        nxt.state = PlayerState.draw_card()
        self.pending_moves = 0
        self._last_played_wild = False
        self.turn_number += 1
        self.event_log.append({"type": "TURN_ENDED", "player": rec.id})
        self.event_log.append({"type": "TURN_STARTED", "player": nxt.id, "turn": self.turn_number})


def new_game(
    seed: int,
    config: GameConfig | None = None,
    names: tuple[str, str] = ("Player 1", "Player 2"),
) -> Engine:
    engine = Engine(rng=random.Random(seed), config=config, seed=seed)
    for name in names:
        engine.add_player(name)
    return engine
