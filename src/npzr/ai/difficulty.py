from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from typing import Protocol, TypeVar

from npzr.paths import get_paths
from npzr.services.content import ContentService, DifficultyLevel, DifficultyProfile

logger = logging.getLogger(__name__)

WILD_VALUE_MARGIN = 1.5
TOP_N_MISTAKE = 3


class _Ranked(Protocol):
    @property
    def value(self) -> int: ...

    @property
    def category(self) -> str: ...

    @property
    def kind(self) -> str: ...


C = TypeVar("C", bound=_Ranked)


def load_profiles() -> dict[DifficultyLevel, DifficultyProfile]:
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir).load_difficulty_profiles()


def get_profile(level: str) -> DifficultyProfile:
    profiles = load_profiles()
    if level not in profiles:
        raise ValueError(f"Unknown difficulty level: {level}")
    return profiles[level]  # type: ignore[index]


class DifficultyManager:
    """Shapes an already ranked candidate list according to a difficulty profile.

    The first element of the returned list is the decision. Each stage only
    filters or reorders; nothing is rescored.
    """

    def __init__(self, profile: DifficultyProfile | str, rng: random.Random | None = None) -> None:
        self.profile = profile if isinstance(profile, DifficultyProfile) else get_profile(profile)
        self.rng = rng if rng is not None else random.Random()

    @property
    def level(self) -> DifficultyLevel:
        return self.profile.level

    def should_make_mistake(self) -> bool:
        return self.rng.random() < self.profile.mistake_rate

    def apply_to_plays(self, ranked: Sequence[C]) -> list[C]:
        out = self._conserve_wilds(list(ranked))
        out = self._filter_disruption(out)
        return self._maybe_mistake(out)

    def apply_to_moves(self, ranked: Sequence[C]) -> list[C]:
        out = list(ranked)
        if not self.profile.cascade_optimization:
            out = [c for c in out if c.category != "cascade"]
        out = self._filter_disruption(out)
        return self._maybe_mistake(out)

    def _conserve_wilds(self, out: list[C]) -> list[C]:
        regular = [c for c in out if c.kind == "regular"]
        if not regular or len(regular) == len(out):
            return out
        if self.rng.random() >= self.profile.wild_card_conservation:
            return out
        threshold = WILD_VALUE_MARGIN * max(c.value for c in regular)
        kept = [c for c in out if c.kind == "regular" or c.value > threshold]
        logger.debug("wild conservation dropped %d candidate(s)", len(out) - len(kept))
        return kept

    def _filter_disruption(self, out: list[C]) -> list[C]:
        if not any(c.category == "disruption" for c in out):
            return out
        if self.rng.random() < self.profile.disruption_aggression:
            return out
        rest = [c for c in out if c.category != "disruption"]
        if not rest:
            return out
        logger.debug("passive play skipped %d disruption(s)", len(out) - len(rest))
        return rest

    def _maybe_mistake(self, out: list[C]) -> list[C]:
        if len(out) < 2 or not self.should_make_mistake():
            return out
        if self.profile.mistake_style == "top3":
            idx = self.rng.randrange(min(TOP_N_MISTAKE, len(out)))
        else:
            idx = 1
        logger.debug("%s mistake: taking option %d instead of the best", self.profile.level, idx + 1)
        chosen = out.pop(idx)
        out.insert(0, chosen)
        return out
