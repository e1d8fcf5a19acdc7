"""Sequence database: the discriminator tree plus its packed-byte arena.

:class:`SequenceDatabase` is the entry point most callers want.  It keeps the
tree and the allocator in step: every stored sequence has exactly one leaf
and exactly one live arena handle, and a failed operation changes neither.

Examples
--------
>>> db = SequenceDatabase()
>>> db.insert('acgt')
0
>>> db.insert('AC')
3
>>> db.search('AC').sequences
['ACGT', 'AC']
>>> db.fetch('ACGT')
'ACGT'
>>> db.remove('ACGT')
Handle(offset=0, length=1)
>>> db.free_report()
'[0, 1]'
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional, Union

from dna_tree.allocator import BlockAllocator
from dna_tree.arena import FileArena, MemoryArena
from dna_tree.codec import normalize
from dna_tree.errors import (
    DuplicateSequenceError,
    InvalidCharacterError,
    SequenceNotFoundError,
)
from dna_tree.fasta import iter_fasta
from dna_tree.handle import Handle
from dna_tree.tree import DiscriminatorTree, SearchResult

_log = logging.getLogger(__name__)


class SequenceDatabase:
    """Store DNA sequences in a discriminator tree backed by a packed arena.

    Parameters
    ----------
    path : str or Path, optional
        Arena file.  The file is truncated on open.  When ``None`` (default)
        the arena lives in memory.
    coalesce : bool, optional
        Merge adjacent free blocks on removal.  Default is ``False``.
    max_size : int, optional
        Maximum arena size in bytes.  Default is ``None`` (unbounded).
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        *,
        coalesce: bool = False,
        max_size: Optional[int] = None,
    ) -> None:
        arena = FileArena(path) if path is not None else MemoryArena()
        self.path = path
        self.tree = DiscriminatorTree()
        self.allocator = BlockAllocator(arena, coalesce=coalesce, max_size=max_size)

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def insert(self, sequence: str) -> int:
        """Store *sequence* and return the depth of its tree leaf.

        Parameters
        ----------
        sequence : str
            Non-empty sequence over ``A, C, G, T`` (any case).

        Returns
        -------
        int
            Depth of the new leaf.

        Raises
        ------
        DuplicateSequenceError
            If the sequence is already stored.
        InvalidCharacterError
            If the sequence contains a character outside the alphabet.
        AllocationExhaustedError
            If the arena is full.
        ValueError
            If the sequence is empty.
        """
        if not sequence:
            raise ValueError('Sequence must not be empty')
        sequence = normalize(sequence)
        # Reject duplicates before touching the arena.
        if sequence in self.tree:
            raise DuplicateSequenceError(sequence)
        handle = self.allocator.store(sequence)
        depth = self.tree.insert(sequence, handle)
        _log.debug('Inserted %s at depth %d with handle %s', sequence, depth, handle)
        return depth

    def remove(self, sequence: str) -> Handle:
        """Remove *sequence*, release its arena bytes and return its old handle.

        Raises
        ------
        SequenceNotFoundError
            If the sequence is not stored.
        """
        handle = self.tree.remove(sequence)
        self.allocator.release(handle)
        _log.debug('Removed %s, released %s', sequence, handle)
        return handle

    def search(self, pattern: str) -> SearchResult:
        """Prefix search, or exact search when *pattern* ends in ``$``.

        See :meth:`~dna_tree.tree.DiscriminatorTree.search`.
        """
        return self.tree.search(pattern)

    def fetch(self, sequence: str) -> str:
        """Read the stored bytes of *sequence* back out of the arena.

        Raises
        ------
        SequenceNotFoundError
            If the sequence is not stored.
        """
        leaf = self.tree.get(sequence)
        if leaf is None:
            raise SequenceNotFoundError(normalize(sequence))
        return self.allocator.read(leaf.handle, len(leaf.sequence))

    # ------------------------------------------------------------------
    # Bulk loading
    # ------------------------------------------------------------------

    def load_fasta(self, path: Union[str, Path]) -> dict[str, int]:
        """Insert every record of a FASTA file.

        Records whose sequence is already stored, or that contain characters
        outside ``A, C, G, T`` (such as ``N``), are skipped with a warning.

        Parameters
        ----------
        path : str or Path
            FASTA or gzipped FASTA file.

        Returns
        -------
        dict[str, int]
            Mapping of inserted record name to leaf depth.

        Raises
        ------
        ValueError
            If the file cannot be read.
        """
        inserted: dict[str, int] = {}
        for name, seq in iter_fasta(path):
            try:
                inserted[name] = self.insert(seq)
            except DuplicateSequenceError:
                _log.warning('Skipping %r: sequence already stored', name)
            except InvalidCharacterError as e:
                _log.warning('Skipping %r: %s', name, e)
            except ValueError:
                _log.warning('Skipping %r: empty sequence', name)
        _log.info('Loaded %d sequence(s) from %s', len(inserted), path)
        return inserted

    # ------------------------------------------------------------------
    # Reports & introspection
    # ------------------------------------------------------------------

    def dump(self, lengths: bool = False, stats: bool = False) -> str:
        """Preorder listing of the stored sequences; see :meth:`DiscriminatorTree.dump`."""
        return self.tree.dump(lengths=lengths, stats=stats)

    def free_report(self) -> str:
        """Return the allocator's free list as ``[offset, length]`` pairs."""
        return self.allocator.report()

    def records(self) -> Iterator[tuple[str, Handle]]:
        """Yield ``(sequence, handle)`` for every stored sequence in preorder."""
        for leaf in self.tree:
            yield leaf.sequence, leaf.handle

    def sequences(self) -> list[str]:
        return [leaf.sequence for leaf in self.tree]

    def __len__(self) -> int:
        return len(self.tree)

    def __contains__(self, sequence: str) -> bool:
        return sequence in self.tree

    def close(self) -> None:
        """Close the arena file, if any."""
        self.allocator.close()

    def __enter__(self) -> 'SequenceDatabase':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f'SequenceDatabase({len(self)} sequence(s), '
            f'arena={self.allocator.arena_size} byte(s), '
            f'free={self.allocator.free_bytes} byte(s))'
        )
