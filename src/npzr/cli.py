from __future__ import annotations

import argparse
import logging
import random
from dataclasses import dataclass
from pathlib import Path

from npzr.ai.difficulty import DifficultyManager, get_profile
from npzr.ai.player import AIPlayer
from npzr.engine.game import Engine, GameConfig, new_game
from npzr.services.content import DIFFICULTY_LEVELS, ContentError
from npzr.services.telemetry import TelemetryService

logger = logging.getLogger("npzr.cli")


@dataclass(frozen=True)
class GameResult:
    seed: int
    winner: str | None
    turns: int
    scores: dict[str, tuple[str, ...]]
    stalled: bool = False


def play_game(
    seed: int,
    p1: str = "medium",
    p2: str = "medium",
    *,
    config: GameConfig | None = None,
    telemetry: TelemetryService | None = None,
    max_turns: int = 500,
) -> tuple[Engine, GameResult]:
    """Play one seeded AI-vs-AI game to completion or until `max_turns`."""
    engine = new_game(seed, config=config, names=(f"AI 1 ({p1})", f"AI 2 ({p2})"))
    cfg = engine.config
    ais: dict[str, AIPlayer] = {}
    for i, (player, level) in enumerate(zip(engine.players, (p1, p2))):
        rng = random.Random(seed * 31 + i + 1)
        manager = DifficultyManager(get_profile(level), rng)
        ais[player.id] = AIPlayer(player, manager, rng=rng, telemetry=telemetry, characters_to_win=cfg.characters_to_win)

    stalled = False
    while not engine.is_game_over() and engine.turn_number <= max_turns:
        current = engine.current_player
        assert current is not None
        turn = engine.turn_number
        ais[current].take_turn(max_steps=50)
        if engine.turn_number == turn and not engine.is_game_over():
            logger.warning("seed=%s: %s did not finish turn %d", seed, current, turn)
            stalled = True
            break

    if engine.is_game_over():
        for ai in ais.values():
            ai.make_move()  # reports the result once

    result = GameResult(
        seed=seed,
        winner=engine.winner,
        turns=engine.turn_number,
        scores={p.id: engine.score_of(p.id).characters() for p in engine.players},
        stalled=stalled,
    )
    return engine, result


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="npzr-sim", description="Play seeded AI-vs-AI games of npzr")
    parser.add_argument("--seed", "-s", type=int, default=None)
    parser.add_argument("--games", "-n", type=int, default=1)
    parser.add_argument("--p1", choices=DIFFICULTY_LEVELS, default="medium")
    parser.add_argument("--p2", choices=DIFFICULTY_LEVELS, default="medium")
    parser.add_argument("--telemetry", type=Path, default=None, help="append AI decisions to this JSONL file")
    parser.add_argument("--max-turns", type=int, default=500)
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    base_seed = args.seed if args.seed is not None else random.SystemRandom().randrange(2**31)
    telemetry = TelemetryService(args.telemetry, session=str(base_seed)) if args.telemetry else None

    wins: dict[str, int] = {"player1": 0, "player2": 0}
    unfinished = 0
    try:
        for i in range(args.games):
            seed = base_seed + i
            _, result = play_game(seed, args.p1, args.p2, telemetry=telemetry, max_turns=args.max_turns)
            if result.winner is None:
                unfinished += 1
            else:
                wins[result.winner] += 1
            scores = " ".join(f"{pid}=[{','.join(chars)}]" for pid, chars in result.scores.items())
            print(f"game {i + 1} seed={seed} winner={result.winner or '-'} turns={result.turns} {scores}")
    except ContentError as e:
        logger.error("%s", e)
        return 2

    print(
        f"totals: player1 ({args.p1})={wins['player1']} "
        f"player2 ({args.p2})={wins['player2']} unfinished={unfinished}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
