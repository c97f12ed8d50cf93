from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from npzr.paths import get_paths
from npzr.services.content import ContentError, ContentService, validate_json


def test_content_schemas_validate() -> None:
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    content.validate_all()


def test_out_of_range_profile_is_rejected() -> None:
    paths = get_paths()
    schema = json.loads((paths.schema_dir / "difficulty.schema.json").read_text(encoding="utf-8"))
    bad = {
        "version": 1,
        "profiles": [
            {
                "level": "easy",
                "wild_card_conservation": 1.5,
                "disruption_aggression": 0.1,
                "mistake_rate": 0.2,
                "cascade_optimization": False,
                "mistake_style": "top3",
            }
        ],
    }
    with pytest.raises(ContentError) as exc:
        validate_json(bad, schema, context="bad.json")
    assert "wild_card_conservation" in str(exc.value)


def test_missing_level_is_rejected() -> None:
    paths = get_paths()
    raw = json.loads((paths.data_dir / "difficulty.json").read_text(encoding="utf-8"))
    raw["profiles"] = [p for p in raw["profiles"] if p["level"] != "hard"]
    with tempfile.TemporaryDirectory() as tmp:
        (Path(tmp) / "difficulty.json").write_text(json.dumps(raw), encoding="utf-8")
        content = ContentService(Path(tmp), paths.schema_dir)
        with pytest.raises(ContentError):
            content.load_difficulty_profiles()


def test_missing_file_is_a_content_error() -> None:
    paths = get_paths()
    with tempfile.TemporaryDirectory() as tmp:
        content = ContentService(Path(tmp), paths.schema_dir)
        with pytest.raises(ContentError):
            content.validate_all()
