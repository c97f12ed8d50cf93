from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping

from jsonschema import Draft202012Validator

DifficultyLevel = Literal["easy", "medium", "hard"]
MistakeStyle = Literal["top3", "second_best"]

DIFFICULTY_LEVELS: tuple[DifficultyLevel, ...] = ("easy", "medium", "hard")


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_float(obj: Mapping[str, object], key: str) -> float:
    v = obj.get(key)
    # bool is an int subclass; reject it explicitly
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ContentError(f"Expected number for {key}")
    return float(v)


def _require_bool(obj: Mapping[str, object], key: str) -> bool:
    v = obj.get(key)
    if not isinstance(v, bool):
        raise ContentError(f"Expected bool for {key}")
    return v


@dataclass(frozen=True)
class DifficultyProfile:
    level: DifficultyLevel
    wild_card_conservation: float
    disruption_aggression: float
    mistake_rate: float
    cascade_optimization: bool
    mistake_style: MistakeStyle = "second_best"


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_difficulty_profiles(self) -> dict[DifficultyLevel, DifficultyProfile]:
        path = self._data_dir / "difficulty.json"
        schema_path = self._schema_dir / "difficulty.schema.json"
        raw = _load_json(path)
        validate_json(raw, _load_json(schema_path), context=str(path))

        if not isinstance(raw, dict):
            raise ContentError("difficulty.json must be an object")
        raw_profiles = raw.get("profiles")
        if not isinstance(raw_profiles, list):
            raise ContentError("difficulty.json.profiles must be a list")

        profiles: dict[DifficultyLevel, DifficultyProfile] = {}
        for item in raw_profiles:
            if not isinstance(item, dict):
                continue
            level = _require_str(item, "level")
            if level not in DIFFICULTY_LEVELS:
                raise ContentError(f"Unknown difficulty level: {level}")
            if level in profiles:
                raise ContentError(f"Duplicate difficulty level: {level}")
            style = _require_str(item, "mistake_style")
            if style not in ("top3", "second_best"):
                raise ContentError(f"Unknown mistake style: {style}")
            profiles[level] = DifficultyProfile(  # type: ignore[index]
                level=level,  # type: ignore[arg-type]
                wild_card_conservation=_require_float(item, "wild_card_conservation"),
                disruption_aggression=_require_float(item, "disruption_aggression"),
                mistake_rate=_require_float(item, "mistake_rate"),
                cascade_optimization=_require_bool(item, "cascade_optimization"),
                mistake_style=style,  # type: ignore[arg-type]
            )

        missing = [lvl for lvl in DIFFICULTY_LEVELS if lvl not in profiles]
        if missing:
            raise ContentError(f"Missing difficulty profiles: {', '.join(missing)}")
        return profiles

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_difficulty_profiles()
