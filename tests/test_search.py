"""Tests for prefix and exact search."""

import pytest

from dna_tree.errors import InvalidCharacterError
from dna_tree.handle import Handle
from dna_tree.tree import NO_MATCH, DiscriminatorTree, SearchResult


def test_prefix_search_enumerates_all(prefix_tree):
    result = prefix_tree.search('AC')
    assert not result.exact
    assert result.pattern == 'AC'
    assert result.sequences == ['ACGA', 'ACGT', 'AC']


def test_exact_search_matches_only_exact(prefix_tree):
    result = prefix_tree.search('AC$')
    assert result.exact
    assert result.pattern == 'AC'
    assert result.sequences == ['AC']


def test_exact_search_long_key(prefix_tree):
    assert prefix_tree.search('ACGT$').sequences == ['ACGT']


def test_exact_search_miss(prefix_tree):
    for pattern in ['ACG$', 'A$', 'ACGTA$', 'T$']:
        result = prefix_tree.search(pattern)
        assert not result.found, pattern


def test_prefix_search_partial(prefix_tree):
    assert prefix_tree.search('ACG').sequences == ['ACGA', 'ACGT']
    assert prefix_tree.search('A').sequences == ['ACGA', 'ACGT', 'AC']


def test_prefix_search_reaches_leaf_before_pattern_ends():
    tree = DiscriminatorTree()
    tree.insert('ACGTTT')
    tree.insert('GGG')
    assert tree.search('ACGT').sequences == ['ACGTTT']
    assert tree.search('ACGA').sequences == []


def test_prefix_longer_than_every_key(prefix_tree):
    assert prefix_tree.search('ACGTACGT').sequences == []


def test_prefix_no_branch(prefix_tree):
    assert prefix_tree.search('G').sequences == []


def test_empty_pattern_enumerates_everything(prefix_tree):
    assert prefix_tree.search('').sequences == ['ACGA', 'ACGT', 'AC']


def test_search_is_case_insensitive(prefix_tree):
    assert prefix_tree.search('acg').sequences == ['ACGA', 'ACGT']
    assert prefix_tree.search('ac$').sequences == ['AC']


def test_search_root_leaf():
    tree = DiscriminatorTree()
    tree.insert('ACGT', Handle(0, 1))
    assert tree.search('AC').sequences == ['ACGT']
    assert tree.search('ACGT$').sequences == ['ACGT']
    assert tree.search('AC$').sequences == []
    assert tree.search('ACGTA').sequences == []
    assert tree.search('AC').visited == 1


def test_search_empty_tree():
    result = DiscriminatorTree().search('ACGT')
    assert result.visited == 1
    assert result.matches == []


def test_search_invalid_pattern_raises(prefix_tree):
    with pytest.raises(InvalidCharacterError):
        prefix_tree.search('ACN')


def test_search_returns_handles():
    tree = DiscriminatorTree()
    tree.insert('ACGT', Handle(0, 1))
    tree.insert('AC', Handle(1, 1))
    assert tree.search('AC').matches == [('ACGT', Handle(0, 1)), ('AC', Handle(1, 1))]


# ---------------------------------------------------------------------------
# Visited-node counts
# ---------------------------------------------------------------------------


def test_visited_exact(prefix_tree):
    # root, A-internal, C-internal, E-leaf
    assert prefix_tree.search('AC$').visited == 4
    # root, A, C, G internals, then the T leaf
    assert prefix_tree.search('ACGT$').visited == 5


def test_visited_exact_miss_counts_empty_branch(prefix_tree):
    # root, A, C, G internals, then the empty E branch
    assert prefix_tree.search('ACG$').visited == 5


def test_visited_prefix_enumeration(prefix_tree):
    # root, A, C on the way down; under C: E, E, G-internal, its 5 children, E, AC leaf
    assert prefix_tree.search('AC').visited == 13


def test_visited_prefix_stops_at_leaf():
    tree = DiscriminatorTree()
    tree.insert('ACGTTT')
    tree.insert('GGG')
    # root, then the A leaf
    assert tree.search('ACGT').visited == 2


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


def test_report_with_handles():
    tree = DiscriminatorTree()
    tree.insert('ACGT', Handle(0, 1))
    tree.insert('AC', Handle(1, 1))
    assert tree.search('AC$').report() == 'Number of nodes visited: 4\nKey: AC\n[1, 1]'


def test_report_no_match(prefix_tree):
    report = prefix_tree.search('T').report()
    assert report.splitlines()[1] == NO_MATCH


def test_report_multiple_matches():
    result = SearchResult(
        pattern='A',
        exact=False,
        visited=9,
        matches=[('AA', Handle(0, 1)), ('AC', Handle(1, 1))],
    )
    assert result.report().splitlines() == [
        'Number of nodes visited: 9',
        'Key: AA',
        '[0, 1]',
        'Key: AC',
        '[1, 1]',
    ]
