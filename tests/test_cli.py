from __future__ import annotations

import tempfile
from pathlib import Path

from npzr.cli import main, play_game
from npzr.services.telemetry import TelemetryService


def test_cli_plays_seeded_games() -> None:
    assert main(["--seed", "5", "--games", "2", "--p1", "hard", "--p2", "easy", "--max-turns", "40"]) == 0


def test_cli_writes_telemetry() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "out" / "ai.jsonl"
        assert main(["--seed", "9", "--max-turns", "6", "--telemetry", str(path)]) == 0
        records = TelemetryService(path).read()
        assert records
        assert all(r["session"] == "9" for r in records)


def test_play_game_respects_turn_limit() -> None:
    engine, result = play_game(3, "easy", "easy", max_turns=4)
    assert result.turns <= 5
    assert result.seed == 3
    assert set(result.scores) == {"player1", "player2"}
    assert engine.turn_number == result.turns
