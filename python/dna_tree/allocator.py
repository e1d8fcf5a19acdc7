"""First-fit block allocator over a growable byte arena.

The allocator owns an arena (:class:`~dna_tree.arena.MemoryArena` or
:class:`~dna_tree.arena.FileArena`) and a free list of reclaimed byte ranges,
kept sorted by ascending offset.

Allocation policy
-----------------
``allocate(n)`` scans the free list in offset order and takes the first block
of at least ``n`` bytes.  An exact fit removes the block; a larger block is
shrunk from the front (its offset advances by ``n``).  When no block fits,
the arena grows by exactly ``n`` bytes.  The arena never shrinks.

``release(handle)`` puts the range back in offset order.  By default adjacent
free blocks are left separate; pass ``coalesce=True`` to merge a released
block with the free blocks that touch it.

Reads and writes are unchecked: the allocator trusts that callers pass
handles obtained from :meth:`BlockAllocator.allocate` and not yet released.

Examples
--------
>>> alloc = BlockAllocator()
>>> h = alloc.store('ACGTA')
>>> h
Handle(offset=0, length=2)
>>> alloc.read(h, 5)
'ACGTA'
>>> alloc.release(h)
>>> alloc.report()
'[0, 2]'
"""

from __future__ import annotations

from bisect import bisect_left
import logging
from typing import Optional, Union

from dna_tree.arena import FileArena, MemoryArena
from dna_tree.codec import decode, encode, packed_length
from dna_tree.errors import AllocationExhaustedError
from dna_tree.handle import Handle

_log = logging.getLogger(__name__)

NO_FREE_BLOCKS = 'No free memory blocks.'

Arena = Union[MemoryArena, FileArena]


class BlockAllocator:
    """Manage packed sequence records inside a byte arena.

    Parameters
    ----------
    arena : MemoryArena or FileArena, optional
        Backing storage.  Defaults to a fresh :class:`MemoryArena`.
    coalesce : bool, optional
        Merge released blocks with touching free neighbours.
        Default is ``False``.
    max_size : int, optional
        Upper bound on the arena size in bytes.  Allocations that would need
        to grow the arena past it raise :class:`AllocationExhaustedError`.
        Default is ``None`` (unbounded).
    """

    def __init__(
        self,
        arena: Optional[Arena] = None,
        *,
        coalesce: bool = False,
        max_size: Optional[int] = None,
    ) -> None:
        self.arena: Arena = arena if arena is not None else MemoryArena()
        self.coalesce = coalesce
        self.max_size = max_size
        self._free: list[Handle] = []

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    def allocate(self, nbytes: int) -> Handle:
        """Reserve *nbytes* bytes and return a handle to them.

        Parameters
        ----------
        nbytes : int
            Number of bytes to reserve; must be positive.

        Returns
        -------
        Handle
            A fresh handle covering the reserved range.

        Raises
        ------
        ValueError
            If *nbytes* is not positive.
        AllocationExhaustedError
            If no free block fits and growing the arena would exceed
            ``max_size``.
        """
        if nbytes <= 0:
            raise ValueError(f'Allocation size must be positive, got {nbytes}')

        for i, block in enumerate(self._free):
            if block.length < nbytes:
                continue
            if block.length == nbytes:
                del self._free[i]
            else:
                self._free[i] = Handle(block.offset + nbytes, block.length - nbytes)
            _log.debug('Allocated %d byte(s) at %d from free block %s', nbytes, block.offset, block)
            return Handle(block.offset, nbytes)

        if self.max_size is not None and self.arena.size + nbytes > self.max_size:
            raise AllocationExhaustedError(
                f'Cannot grow arena from {self.arena.size} to '
                f'{self.arena.size + nbytes} bytes (max_size={self.max_size})'
            )
        offset = self.arena.grow(nbytes)
        _log.debug('Grew arena by %d byte(s) to %d', nbytes, self.arena.size)
        return Handle(offset, nbytes)

    def release(self, handle: Handle) -> None:
        """Return the range covered by *handle* to the free list.

        Parameters
        ----------
        handle : Handle
            A handle previously returned by :meth:`allocate`.

        Raises
        ------
        ValueError
            If the range overlaps a block that is already free, which means
            the handle was released twice or never allocated.
        """
        if handle.length == 0:
            return
        i = bisect_left(self._free, handle)
        prev = self._free[i - 1] if i > 0 else None
        nxt = self._free[i] if i < len(self._free) else None
        if (prev is not None and prev.end > handle.offset) or (
            nxt is not None and handle.end > nxt.offset
        ):
            raise ValueError(f'Released block {handle} overlaps a free block')

        if not self.coalesce:
            self._free.insert(i, handle)
            return

        # Merge with whichever neighbours touch the released range.
        start, end = handle.offset, handle.end
        lo, hi = i, i
        if prev is not None and prev.end == start:
            start = prev.offset
            lo = i - 1
        if nxt is not None and nxt.offset == end:
            end = nxt.end
            hi = i + 1
        self._free[lo:hi] = [Handle(start, end - start)]

    # ------------------------------------------------------------------
    # Packed record I/O
    # ------------------------------------------------------------------

    def write(self, handle: Handle, sequence: str) -> None:
        """Encode *sequence* and write it into the range of *handle*."""
        data = encode(sequence)
        self.arena.write(handle.offset, data[:handle.length])

    def read(self, handle: Handle, bases: Optional[int] = None) -> str:
        """Read the range of *handle* and decode it.

        Parameters
        ----------
        handle : Handle
            Range to read.
        bases : int, optional
            Number of bases stored in the range.  When omitted every slot of
            every byte is decoded, padding included.

        Returns
        -------
        str
            The decoded sequence.
        """
        data = self.arena.read(handle.offset, handle.length)
        return decode(data, bases)

    def store(self, sequence: str) -> Handle:
        """Allocate room for *sequence*, write it, and return its handle."""
        handle = self.allocate(packed_length(len(sequence)))
        self.write(handle, sequence)
        return handle

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def free_blocks(self) -> list[Handle]:
        """Free blocks in ascending offset order (a copy)."""
        return list(self._free)

    @property
    def arena_size(self) -> int:
        return self.arena.size

    @property
    def free_bytes(self) -> int:
        return sum(block.length for block in self._free)

    def report(self) -> str:
        """Return the free list as concatenated ``[offset, length]`` pairs."""
        if not self._free:
            return NO_FREE_BLOCKS
        return ''.join(str(block) for block in self._free)

    def close(self) -> None:
        """Close the backing arena."""
        self.arena.close()

    def __enter__(self) -> 'BlockAllocator':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f'BlockAllocator(arena={self.arena!r}, '
            f'{len(self._free)} free block(s), coalesce={self.coalesce})'
        )
