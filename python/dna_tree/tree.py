"""Discriminator tree over DNA sequences.

The tree branches on successive characters of a key.  Every internal node
has exactly five children labelled ``A``, ``C``, ``G``, ``T`` and ``E``
(*end*); the ``E`` branch is taken once the branching position runs past the
end of the key, which is what lets ``AC`` live next to ``ACGT``.

Nodes
-----
Nodes are one closed set of three kinds, tagged by :class:`NodeKind`:

``EMPTY``
    The shared :data:`EMPTY` flyweight.  All absent branches point at this
    single object, so an emptiness test is a tag comparison.
``LEAF``
    :class:`Leaf` holding a sequence, its arena :class:`~dna_tree.handle.Handle`
    and the depth it currently sits at.
``INTERNAL``
    :class:`Internal` holding its branching position (``level``, equal to its
    depth) and the five children.

Shape
-----
- the root is ``EMPTY`` with no entries, a ``Leaf`` with one entry and an
  ``Internal`` with two or more;
- an insert that lands on a different leaf pushes that leaf one level down
  under a new internal node, repeating while both keys share the next
  character, so keys with a long common prefix hang off a chain of
  single-child internal nodes;
- a remove that leaves an internal node with a lone leaf child replaces the
  internal node by that leaf, bottom-up along the removal path.

Examples
--------
>>> tree = DiscriminatorTree()
>>> tree.insert('ACGT')
0
>>> tree.insert('AC')
3
>>> [leaf.sequence for leaf in tree]
['ACGT', 'AC']
>>> print(tree.search('AC$').report())
Number of nodes visited: 4
Key: AC
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
import enum
import logging
from typing import ClassVar, Iterator, Optional, Union

from dna_tree.codec import ALPHABET, normalize
from dna_tree.errors import DuplicateSequenceError, SequenceNotFoundError
from dna_tree.handle import Handle

_log = logging.getLogger(__name__)

END = 'E'
LABELS: tuple[str, ...] = tuple(ALPHABET) + (END,)

EXACT_SENTINEL = '$'
NO_MATCH = 'No sequence found'
DUMP_HEADER = 'Sequence IDs:'


class NodeKind(enum.Enum):
    """Tag distinguishing the three node kinds."""

    EMPTY = 'empty'
    LEAF = 'leaf'
    INTERNAL = 'internal'


class _Empty:
    """Type of the :data:`EMPTY` flyweight.  Do not instantiate."""

    __slots__ = ()
    kind: ClassVar[NodeKind] = NodeKind.EMPTY

    def __repr__(self) -> str:
        return 'EMPTY'


EMPTY = _Empty()


@dataclass(eq=False)
class Leaf:
    """Terminal node holding one stored sequence.

    Parameters
    ----------
    sequence : str
        The upper-case sequence.
    handle : Handle or None
        Arena handle of the packed sequence bytes.
    level : int
        Depth at which the leaf currently resides.
    """

    sequence: str
    handle: Optional[Handle] = None
    level: int = 0
    kind: ClassVar[NodeKind] = NodeKind.LEAF


@dataclass(eq=False)
class Internal:
    """Branching node over the five labels ``A, C, G, T, E``.

    Parameters
    ----------
    level : int
        Index into the key used to pick a child; equal to the node's depth.
    children : dict[str, Node]
        Exactly one entry per label in :data:`LABELS`.
    """

    level: int
    children: dict[str, 'Node'] = field(
        default_factory=lambda: dict.fromkeys(LABELS, EMPTY)
    )
    kind: ClassVar[NodeKind] = NodeKind.INTERNAL

    def occupied(self) -> list[tuple[str, 'Node']]:
        """Return ``(label, child)`` pairs for non-empty children, in label order."""
        return [
            (label, self.children[label])
            for label in LABELS
            if self.children[label].kind is not NodeKind.EMPTY
        ]


Node = Union[_Empty, Leaf, Internal]


def branch_label(sequence: str, level: int) -> str:
    """Return the child label *sequence* follows at branching position *level*.

    Parameters
    ----------
    sequence : str
        Upper-case key.
    level : int
        Branching position.

    Returns
    -------
    str
        ``sequence[level]``, or :data:`END` when *level* is past the key.
    """
    return sequence[level] if level < len(sequence) else END


@dataclass
class SearchResult:
    """Outcome of :meth:`DiscriminatorTree.search`.

    Parameters
    ----------
    pattern : str
        The query with any trailing ``$`` removed, upper-cased.
    exact : bool
        ``True`` for exact-match mode, ``False`` for prefix mode.
    visited : int
        Number of nodes examined, the root and any ``EMPTY`` branches
        included.
    matches : list[tuple[str, Handle or None]]
        Matching ``(sequence, handle)`` pairs in label order.
    """

    pattern: str
    exact: bool
    visited: int = 0
    matches: list[tuple[str, Optional[Handle]]] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.matches)

    @property
    def sequences(self) -> list[str]:
        """Matched sequences in report order."""
        return [seq for seq, _ in self.matches]

    def report(self) -> str:
        """Render the result as the human-readable search report.

        Returns
        -------
        str
            ``Number of nodes visited: <n>`` followed by a ``Key: <seq>`` line
            and a ``[offset, length]`` line per match, or by
            ``No sequence found``.
        """
        lines = [f'Number of nodes visited: {self.visited}']
        if not self.matches:
            lines.append(NO_MATCH)
        for seq, handle in self.matches:
            lines.append(f'Key: {seq}')
            if handle is not None:
                lines.append(str(handle))
        return '\n'.join(lines)


class DiscriminatorTree:
    """Five-way discriminator tree keyed by DNA sequences.

    Each leaf carries a payload :class:`~dna_tree.handle.Handle`; the tree
    never reads or frees arena bytes itself.  Sequences are upper-cased and
    validated on the way in.

    Examples
    --------
    >>> tree = DiscriminatorTree()
    >>> tree.insert('AAAA')
    0
    >>> tree.insert('AAAC')
    4
    >>> tree.remove('AAAC')
    >>> tree.root
    Leaf(sequence='AAAA', handle=None, level=0)
    """

    def __init__(self) -> None:
        self._root: Node = EMPTY
        self._size = 0

    @property
    def root(self) -> Node:
        return self._root

    # ------------------------------------------------------------------
    # Insert
    # ------------------------------------------------------------------

    def insert(self, sequence: str, handle: Optional[Handle] = None) -> int:
        """Insert *sequence* with its *handle* and return the new leaf's depth.

        Parameters
        ----------
        sequence : str
            Non-empty sequence over ``A, C, G, T`` (any case).
        handle : Handle, optional
            Payload stored on the new leaf.

        Returns
        -------
        int
            Depth of the leaf that now holds *sequence*.

        Raises
        ------
        DuplicateSequenceError
            If *sequence* is already in the tree.  The tree is unchanged.
        InvalidCharacterError
            If *sequence* contains a character outside the alphabet.
        ValueError
            If *sequence* is empty.
        """
        sequence = self._key(sequence)
        root = self._root

        if root.kind is NodeKind.EMPTY:
            self._root = Leaf(sequence, handle, 0)
            self._size += 1
            return 0

        if root.kind is NodeKind.LEAF:
            if root.sequence == sequence:
                raise DuplicateSequenceError(sequence)
            root = self._root = self._split(root)

        depth = self._insert(root, sequence, handle)
        self._size += 1
        return depth

    def _insert(self, node: Internal, sequence: str, handle: Optional[Handle]) -> int:
        # Nothing is mutated before the duplicate check on the path succeeds.
        while True:
            label = branch_label(sequence, node.level)
            child = node.children[label]
            if child.kind is NodeKind.EMPTY:
                node.children[label] = Leaf(sequence, handle, node.level + 1)
                return node.level + 1
            if child.kind is NodeKind.LEAF:
                if child.sequence == sequence:
                    raise DuplicateSequenceError(sequence)
                child = node.children[label] = self._split(child)
            node = child

    @staticmethod
    def _split(leaf: Leaf) -> Internal:
        """Replace *leaf* by an internal node at its level holding it one level down."""
        internal = Internal(leaf.level)
        internal.children[branch_label(leaf.sequence, leaf.level)] = leaf
        leaf.level += 1
        _log.debug('Pushed %s down to level %d', leaf.sequence, leaf.level)
        return internal

    # ------------------------------------------------------------------
    # Remove
    # ------------------------------------------------------------------

    def remove(self, sequence: str) -> Optional[Handle]:
        """Remove *sequence* and return the handle stored with it.

        Internal nodes left with a single leaf child along the removal path
        are replaced by that leaf, all the way up to the root.

        Parameters
        ----------
        sequence : str
            The sequence to remove (any case).

        Returns
        -------
        Handle or None
            The removed leaf's payload.

        Raises
        ------
        SequenceNotFoundError
            If *sequence* is not in the tree.  The tree is unchanged.
        """
        sequence = self._key(sequence)
        root = self._root

        if root.kind is NodeKind.EMPTY:
            raise SequenceNotFoundError(sequence)

        if root.kind is NodeKind.LEAF:
            if root.sequence != sequence:
                raise SequenceNotFoundError(sequence)
            self._root = EMPTY
            self._size -= 1
            return root.handle

        handle = self._remove(root, sequence)
        self._root = self._compact(root)
        self._size -= 1
        return handle

    def _remove(self, node: Internal, sequence: str) -> Optional[Handle]:
        label = branch_label(sequence, node.level)
        child = node.children[label]

        if child.kind is NodeKind.EMPTY:
            raise SequenceNotFoundError(sequence)

        if child.kind is NodeKind.LEAF:
            if child.sequence != sequence:
                raise SequenceNotFoundError(sequence)
            node.children[label] = EMPTY
            return child.handle

        handle = self._remove(child, sequence)
        node.children[label] = self._compact(child)
        return handle

    @staticmethod
    def _compact(node: Internal) -> Node:
        """Return the node that should stand where *node* stands.

        That is the lone leaf of *node* (moved up to *node*'s level) when only
        one leaf is left, otherwise *node* itself.  A lone internal child is
        never hoisted: its level is its branching position, which only holds
        at its current depth.
        """
        occupied = node.occupied()
        if not occupied:
            return EMPTY
        if len(occupied) == 1:
            _, survivor = occupied[0]
            if survivor.kind is NodeKind.LEAF:
                _log.debug(
                    'Collapsed level %d internal node into %s', node.level, survivor.sequence
                )
                survivor.level = node.level
                return survivor
        return node

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, pattern: str) -> SearchResult:
        """Search the tree in prefix or exact mode.

        A trailing ``$`` selects exact mode and is stripped before matching.
        In prefix mode every stored sequence starting with the pattern is
        reported, in label order ``A, C, G, T, E``.

        Parameters
        ----------
        pattern : str
            Query sequence, optionally ending in ``$``.

        Returns
        -------
        SearchResult
            Matches and the number of nodes visited.

        Raises
        ------
        InvalidCharacterError
            If the pattern contains a character outside the alphabet.
        """
        exact = pattern.endswith(EXACT_SENTINEL)
        if exact:
            pattern = pattern[: -len(EXACT_SENTINEL)]
        pattern = normalize(pattern)
        result = SearchResult(pattern=pattern, exact=exact, visited=1)
        root = self._root

        if root.kind is NodeKind.EMPTY:
            return result

        if root.kind is NodeKind.LEAF:
            if self._leaf_matches(root, pattern, exact):
                result.matches.append((root.sequence, root.handle))
            return result

        if exact:
            self._search_exact(root, pattern, result)
        else:
            self._search_prefix(root, pattern, result)
        return result

    @staticmethod
    def _leaf_matches(leaf: Leaf, pattern: str, exact: bool) -> bool:
        if exact:
            return leaf.sequence == pattern
        return leaf.sequence.startswith(pattern)

    def _search_exact(self, node: Internal, pattern: str, result: SearchResult) -> None:
        while True:
            child = node.children[branch_label(pattern, node.level)]
            result.visited += 1
            if child.kind is NodeKind.INTERNAL:
                node = child
                continue
            if child.kind is NodeKind.LEAF and child.sequence == pattern:
                result.matches.append((child.sequence, child.handle))
            return

    def _search_prefix(self, node: Internal, pattern: str, result: SearchResult) -> None:
        # Follow the pattern through internal nodes only.
        while node.level < len(pattern):
            child = node.children[pattern[node.level]]
            if child.kind is not NodeKind.INTERNAL:
                break
            node = child
            result.visited += 1

        if node.level >= len(pattern):
            # Pattern exhausted: everything below shares it as a prefix.
            nodes = list(self._preorder(node))
            result.visited += len(nodes) - 1
            result.matches.extend(
                (n.sequence, n.handle) for n in nodes if n.kind is NodeKind.LEAF
            )
            return

        child = node.children[pattern[node.level]]
        result.visited += 1
        if child.kind is NodeKind.LEAF and child.sequence.startswith(pattern):
            result.matches.append((child.sequence, child.handle))

    # ------------------------------------------------------------------
    # Lookup & traversal
    # ------------------------------------------------------------------

    def get(self, sequence: str) -> Optional[Leaf]:
        """Return the leaf holding *sequence*, or ``None``."""
        sequence = normalize(sequence)
        node = self._root
        while node.kind is NodeKind.INTERNAL:
            node = node.children[branch_label(sequence, node.level)]
        if node.kind is NodeKind.LEAF and node.sequence == sequence:
            return node
        return None

    def __contains__(self, sequence: str) -> bool:
        return self.get(sequence) is not None

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Leaf]:
        """Yield leaves in preorder (label order ``A, C, G, T, E``)."""
        for node in self._preorder(self._root):
            if node.kind is NodeKind.LEAF:
                yield node

    def _preorder(self, node: Node) -> Iterator[Node]:
        """Yield *node* and every node below it, ``EMPTY`` branches included."""
        yield node
        if node.kind is NodeKind.INTERNAL:
            for label in LABELS:
                yield from self._preorder(node.children[label])

    def node_count(self) -> int:
        """Return the number of non-empty nodes in the tree."""
        return sum(
            1 for node in self._preorder(self._root) if node.kind is not NodeKind.EMPTY
        )

    def height(self) -> int:
        """Return the deepest leaf level, or ``-1`` for an empty tree."""
        return max((leaf.level for leaf in self), default=-1)

    def clear(self) -> None:
        """Drop every entry.  Handles are not released."""
        self._root = EMPTY
        self._size = 0

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def dump(self, lengths: bool = False, stats: bool = False) -> str:
        """Return a preorder listing of the stored sequences.

        Parameters
        ----------
        lengths : bool, optional
            Append ``: length <n>`` to every sequence.
        stats : bool, optional
            Append the length and per-base percentages formatted as
            ``A(25.00), C(25.00), G(25.00), T(25.00)``.  Implies *lengths*.

        Returns
        -------
        str
            ``Sequence IDs:`` followed by one line per stored sequence.
        """
        lines = [DUMP_HEADER]
        for leaf in self:
            line = leaf.sequence
            if lengths or stats:
                line += f': length {len(leaf.sequence)}'
            if stats:
                line += ' ' + ', '.join(
                    f'{base}({pct:.2f})' for base, pct in base_percentages(leaf.sequence).items()
                )
            lines.append(line)
        return '\n'.join(lines)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _key(sequence: str) -> str:
        if not sequence:
            raise ValueError('Sequence must not be empty')
        return normalize(sequence)

    def _validate(self) -> None:
        """Assert the structural invariants; used by the test suite."""
        root = self._root
        if self._size == 0:
            assert root is EMPTY, 'empty tree must have the EMPTY root'
        elif self._size == 1:
            assert root.kind is NodeKind.LEAF, 'single entry must be a leaf root'
        else:
            assert root.kind is NodeKind.INTERNAL, 'two or more entries need an internal root'
        assert sum(1 for _ in self) == self._size, 'size out of sync with leaves'
        self._validate_node(root, 0, '')

    def _validate_node(self, node: Node, depth: int, path: str) -> None:
        if node.kind is NodeKind.EMPTY:
            assert node is EMPTY, 'empty branches must share the flyweight'
            return
        assert node.level == depth, f'{node!r} level {node.level} != depth {depth}'
        if node.kind is NodeKind.LEAF:
            for i, label in enumerate(path):
                assert branch_label(node.sequence, i) == label, (
                    f'{node.sequence} does not follow path {path}'
                )
            return
        assert set(node.children) == set(LABELS), 'internal node must have five branches'
        occupied = node.occupied()
        assert occupied, 'internal node with no children'
        assert not (len(occupied) == 1 and occupied[0][1].kind is NodeKind.LEAF), (
            'internal node with a lone leaf child'
        )
        for label, child in occupied:
            self._validate_node(child, depth + 1, path + label)

    def __repr__(self) -> str:
        return f'DiscriminatorTree({self._size} sequence(s), height={self.height()})'


def base_percentages(sequence: str) -> dict[str, float]:
    """Return the percentage of each base of ``A, C, G, T`` in *sequence*.

    Parameters
    ----------
    sequence : str
        Upper-case sequence.

    Returns
    -------
    dict[str, float]
        Mapping ``base -> percent`` in alphabet order; all zeros for an empty
        sequence.
    """
    counts = Counter(sequence)
    total = len(sequence)
    return {
        base: (100.0 * counts[base] / total if total else 0.0) for base in ALPHABET
    }
