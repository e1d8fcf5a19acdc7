"""
dna-tree: a discriminator tree index for DNA sequences over a packed byte arena.

This package provides:
- A five-way discriminator tree (A, C, G, T, end) with insert, remove,
  prefix search and exact search
- A first-fit block allocator over an in-memory or file-backed arena
- A 2-bit-per-base packing codec
- FASTA loading, text reports and matplotlib figures of the arena

Examples
--------
Basic usage:

>>> from dna_tree import SequenceDatabase
>>> db = SequenceDatabase()
>>> db.insert("ACGT")
0
>>> db.insert("ACGA")
4
>>> db.insert("AC")
3
>>> db.search("AC").sequences
['ACGA', 'ACGT', 'AC']
>>> db.search("AC$").sequences
['AC']
"""

from dna_tree.allocator import BlockAllocator  # noqa: F401
from dna_tree.arena import FileArena, MemoryArena  # noqa: F401
from dna_tree.codec import decode, encode, normalize, packed_length  # noqa: F401
from dna_tree.database import SequenceDatabase  # noqa: F401
from dna_tree.errors import (  # noqa: F401
    AllocationExhaustedError,
    DnaTreeError,
    DuplicateSequenceError,
    InvalidCharacterError,
    SequenceNotFoundError,
)
from dna_tree.fasta import iter_fasta, read_fasta  # noqa: F401
from dna_tree.handle import Handle  # noqa: F401
from dna_tree.tree import (  # noqa: F401
    EMPTY,
    DiscriminatorTree,
    Internal,
    Leaf,
    NodeKind,
    SearchResult,
)

__version__ = '0.1.0'
__all__ = [
    'SequenceDatabase',
    'DiscriminatorTree',
    'SearchResult',
    'NodeKind',
    'Leaf',
    'Internal',
    'EMPTY',
    'BlockAllocator',
    'MemoryArena',
    'FileArena',
    'Handle',
    'encode',
    'decode',
    'normalize',
    'packed_length',
    'read_fasta',
    'iter_fasta',
    'DnaTreeError',
    'DuplicateSequenceError',
    'SequenceNotFoundError',
    'InvalidCharacterError',
    'AllocationExhaustedError',
]
