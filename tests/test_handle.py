"""Tests for arena handles."""

import dataclasses

import pytest

from dna_tree.handle import Handle


def test_str_format():
    assert str(Handle(12, 3)) == '[12, 3]'


def test_end():
    assert Handle(12, 3).end == 15


def test_handles_are_immutable():
    h = Handle(0, 1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        h.offset = 5


def test_handles_sort_by_offset():
    assert sorted([Handle(10, 1), Handle(2, 8), Handle(5, 2)]) == [
        Handle(2, 8),
        Handle(5, 2),
        Handle(10, 1),
    ]


def test_negative_values_rejected():
    with pytest.raises(ValueError):
        Handle(-1, 2)
    with pytest.raises(ValueError):
        Handle(0, -2)


def test_handles_are_hashable():
    assert len({Handle(0, 1), Handle(0, 1), Handle(1, 1)}) == 2
