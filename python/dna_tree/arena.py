"""Byte arenas backing the block allocator.

Two backends share one small interface (``size``, ``grow``, ``read``,
``write``, ``close``):

- :class:`MemoryArena` keeps the bytes in a ``bytearray``.
- :class:`FileArena` keeps them in a binary file that is truncated when the
  arena is opened.  There is no header and no persisted free list: the file
  is only meaningful alongside the in-memory tree that produced it.

Arenas never shrink and perform no bounds checking beyond what the
underlying storage does; the allocator is the only intended caller.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

_log = logging.getLogger(__name__)


class MemoryArena:
    """In-memory growable byte arena.

    Examples
    --------
    >>> arena = MemoryArena()
    >>> arena.grow(2)
    0
    >>> arena.write(0, b'\\x1b\\x00')
    >>> arena.read(0, 1)
    b'\\x1b'
    """

    def __init__(self) -> None:
        self._buf = bytearray()

    @property
    def size(self) -> int:
        """Current arena size in bytes."""
        return len(self._buf)

    def grow(self, nbytes: int) -> int:
        """Append *nbytes* zero bytes and return the old end offset."""
        start = len(self._buf)
        self._buf.extend(bytes(nbytes))
        return start

    def read(self, offset: int, nbytes: int) -> bytes:
        return bytes(self._buf[offset:offset + nbytes])

    def write(self, offset: int, data: bytes) -> None:
        self._buf[offset:offset + len(data)] = data

    def close(self) -> None:
        pass

    def __repr__(self) -> str:
        return f'MemoryArena(size={self.size})'


class FileArena:
    """File-backed growable byte arena.

    Parameters
    ----------
    path : str or Path
        Path of the arena file.  Parent directories are created as needed and
        any existing file is truncated to zero length.

    Raises
    ------
    OSError
        If the file cannot be created or opened.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = open(self.path, 'w+b')
        self._size = 0
        _log.debug('Opened arena file %s', self.path)

    @property
    def size(self) -> int:
        """Current arena size in bytes."""
        return self._size

    @property
    def closed(self) -> bool:
        return self._fh.closed

    def grow(self, nbytes: int) -> int:
        """Extend the file by *nbytes* bytes and return the old end offset."""
        start = self._size
        self._fh.truncate(start + nbytes)
        self._size = start + nbytes
        return start

    def read(self, offset: int, nbytes: int) -> bytes:
        self._fh.seek(offset)
        return self._fh.read(nbytes)

    def write(self, offset: int, data: bytes) -> None:
        self._fh.seek(offset)
        self._fh.write(data)
        self._fh.flush()

    def close(self) -> None:
        """Flush and close the underlying file."""
        if not self._fh.closed:
            self._fh.flush()
            os.fsync(self._fh.fileno())
            self._fh.close()
            _log.debug('Closed arena file %s', self.path)

    def __repr__(self) -> str:
        return f'FileArena(path={str(self.path)!r}, size={self.size})'
