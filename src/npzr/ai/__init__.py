"""Heuristic computer opponent built on the public Player facade."""

from .analysis import GameAnalysis, StackProgress, analyze
from .card_play import CardPlayEvaluator, PlayCandidate
from .difficulty import DifficultyManager, get_profile, load_profiles
from .moves import MoveCandidate, MoveEvaluator
from .player import AIPlayer

__all__ = [
    "AIPlayer",
    "CardPlayEvaluator",
    "DifficultyManager",
    "GameAnalysis",
    "MoveCandidate",
    "MoveEvaluator",
    "PlayCandidate",
    "StackProgress",
    "analyze",
    "get_profile",
    "load_profiles",
]
