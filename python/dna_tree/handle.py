"""Arena handles.

A :class:`Handle` is a cheap, copyable ``(offset, length)`` token naming a
byte range inside the allocator's arena.  Handles never own the bytes they
point at; only :class:`~dna_tree.allocator.BlockAllocator` mints and retires
them.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Handle:
    """A byte range in the sequence arena.

    Handles compare and sort by ``(offset, length)``, which is the order the
    allocator keeps its free list in.

    Parameters
    ----------
    offset : int
        Byte offset of the first packed byte.
    length : int
        Number of bytes the record occupies (``ceil(bases / 4)``).

    Examples
    --------
    >>> h = Handle(0, 2)
    >>> str(h)
    '[0, 2]'
    >>> h.end
    2
    """

    offset: int
    length: int

    def __post_init__(self) -> None:
        if self.offset < 0 or self.length < 0:
            raise ValueError(
                f'Handle offset and length must be non-negative, got {self.offset}, {self.length}'
            )

    @property
    def end(self) -> int:
        """Offset one past the last byte of the range."""
        return self.offset + self.length

    def __str__(self) -> str:
        return f'[{self.offset}, {self.length}]'
