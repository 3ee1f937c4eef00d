"""
Short identifier generation for shareable paste URLs.
"""
import secrets
import string

ALPHABET = string.ascii_letters + string.digits
DEFAULT_LENGTH = 8
MIN_LENGTH = 6


class IdentifierGenerator:
    """
    Produces fixed-length random identifiers over a URL-safe alphabet.

    Identifiers are not derived from a counter, so they reveal neither
    creation order nor volume. Uniqueness is not guaranteed here; the
    store rejects occupied identifiers and the caller retries.
    """

    def __init__(self, length: int = DEFAULT_LENGTH, alphabet: str = ALPHABET):
        if length < MIN_LENGTH:
            raise ValueError(f"Identifier length must be at least {MIN_LENGTH}, got {length}")
        if len(set(alphabet)) != len(alphabet) or len(alphabet) < 2:
            raise ValueError("Alphabet must contain at least two distinct characters")
        self.length = length
        self.alphabet = alphabet

    @property
    def combinations(self) -> int:
        """Size of the identifier space."""
        return len(self.alphabet) ** self.length

    def generate(self) -> str:
        return "".join(secrets.choice(self.alphabet) for _ in range(self.length))

    __call__ = generate
