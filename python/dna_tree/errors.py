"""Exception hierarchy for dna-tree.

Every error derives from :class:`DnaTreeError` and from the builtin exception
a caller would naturally catch (``KeyError`` for lookups, ``ValueError`` for
bad input), so ``except KeyError`` keeps working for code that does not know
about this package.
"""

from __future__ import annotations


class DnaTreeError(Exception):
    """Base class for all dna-tree errors."""


class DuplicateSequenceError(DnaTreeError, KeyError):
    """Raised when inserting a sequence that is already stored."""

    def __init__(self, sequence: str) -> None:
        super().__init__(sequence)
        self.sequence = sequence

    def __str__(self) -> str:
        return f'sequence {self.sequence} already exists'


class SequenceNotFoundError(DnaTreeError, KeyError):
    """Raised when removing or fetching a sequence that is not stored."""

    def __init__(self, sequence: str) -> None:
        super().__init__(sequence)
        self.sequence = sequence

    def __str__(self) -> str:
        return f'sequence {self.sequence} does not exist'


class InvalidCharacterError(DnaTreeError, ValueError):
    """Raised when a sequence contains a base outside ``A, C, G, T``."""

    def __init__(self, char: str, position: int, sequence: str = '') -> None:
        super().__init__(char, position, sequence)
        self.char = char
        self.position = position
        self.sequence = sequence

    def __str__(self) -> str:
        return f'{self.char!r} at position {self.position} is not a valid base'


class AllocationExhaustedError(DnaTreeError, MemoryError):
    """Raised when the arena cannot grow to satisfy an allocation."""
