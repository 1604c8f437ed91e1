"""Domain errors raised by the services and the match engine.

The HTTP layer maps each class to a status code (see ``arena.main``); the
services themselves never raise ``HTTPException``.
"""


class ArenaError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ArenaError):
    """Malformed or missing input, same-competitor match, unregistered competitor."""
    status_code = 400


class NotFoundError(ArenaError):
    status_code = 404


class InvalidStateError(ArenaError):
    """Operation not permitted in the match's current status."""
    status_code = 409


class ConflictError(ArenaError):
    """The record changed since the caller last read it."""
    status_code = 409
