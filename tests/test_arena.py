"""Tests for the in-memory and file-backed arenas."""

import os

import pytest

from dna_tree.allocator import BlockAllocator
from dna_tree.arena import FileArena, MemoryArena
from dna_tree.handle import Handle


@pytest.fixture(params=['memory', 'file'])
def arena(request, tmp_path):
    """Each arena backend, closed after the test."""
    if request.param == 'memory':
        backend = MemoryArena()
    else:
        backend = FileArena(tmp_path / 'biofile.bin')
    yield backend
    backend.close()


def test_grow_returns_old_end(arena):
    assert arena.size == 0
    assert arena.grow(3) == 0
    assert arena.grow(2) == 3
    assert arena.size == 5


def test_grown_bytes_are_zero(arena):
    arena.grow(4)
    assert arena.read(0, 4) == b'\x00' * 4


def test_write_then_read(arena):
    arena.grow(4)
    arena.write(1, b'\x1b\xff')
    assert arena.read(0, 4) == b'\x00\x1b\xff\x00'


def test_file_arena_truncates_existing_file(tmp_path):
    path = tmp_path / 'biofile.bin'
    path.write_bytes(b'stale data')
    arena = FileArena(path)
    assert arena.size == 0
    arena.close()
    assert os.path.getsize(path) == 0


def test_file_arena_creates_parent_dirs(tmp_path):
    path = tmp_path / 'nested' / 'dir' / 'biofile.bin'
    arena = FileArena(path)
    arena.close()
    assert path.exists()


def test_file_arena_persists_packed_bytes(tmp_path):
    path = tmp_path / 'biofile.bin'
    with BlockAllocator(FileArena(path)) as alloc:
        h = alloc.store('ACGTC')
    assert h == Handle(0, 2)
    assert path.read_bytes() == bytes([0b00011011, 0b01000000])


def test_file_arena_close_is_idempotent(tmp_path):
    arena = FileArena(tmp_path / 'biofile.bin')
    arena.close()
    arena.close()
    assert arena.closed


def test_file_arena_unwritable_path_raises(tmp_path):
    blocker = tmp_path / 'blocker'
    blocker.write_text('')
    with pytest.raises(OSError):
        FileArena(blocker / 'biofile.bin')
