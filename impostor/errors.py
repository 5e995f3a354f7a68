# impostor/errors.py


class GameError(ValueError):
    """Base class for every failure a request can be answered with."""
    status_code = 400


class ValidationError(GameError):
    """Missing or invalid input (blank names, missing ids)."""


class AuthorizationError(GameError):
    """A non-host tried a host-only command."""


class NotFoundError(GameError):
    status_code = 404


class CapacityError(GameError):
    """Room is full."""


class StateError(GameError):
    """The room is not in a state that allows the operation."""


class StoreError(GameError):
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
