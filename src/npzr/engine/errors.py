from __future__ import annotations


class GameError(RuntimeError):
    """Base class for rule violations raised by the engine and the player facade."""

    kind = "game_error"


class ValidationError(GameError):
    kind = "validation"


class NotFound(GameError):
    kind = "not_found"


class InvalidStateTransition(GameError):
    kind = "invalid_state"


class EmptyResource(GameError):
    kind = "empty_resource"


class EmptyDeck(EmptyResource):
    pass
