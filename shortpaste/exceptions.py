"""
Domain errors raised by the paste store and the services built on it.
"""


class ShortpasteError(Exception):
    """Base class for all Shortpaste errors."""


class PasteConflict(ShortpasteError):
    """A paste already occupies the requested identifier."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Identifier {identifier} is already taken")


class PasteNotFound(ShortpasteError):
    """No live paste exists for the identifier (never created, or expired)."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__("Paste not found")


class StoreUnavailable(ShortpasteError):
    """The persistence backend could not be reached."""


class IdentifierAllocationError(ShortpasteError):
    """Every identifier tried for a new paste was already taken."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not allocate a free identifier after {attempts} attempts")
