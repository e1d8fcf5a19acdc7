"""FASTA reading.

Plain and gzip-compressed files are supported; compression is detected from
a ``.gz`` suffix.  Sequence names are the record identifier up to the first
whitespace, and sequences are returned upper-cased.
"""

from __future__ import annotations

import gzip
import logging
from pathlib import Path
from typing import Generator, TextIO, Union

_log = logging.getLogger(__name__)


def _open_text(path: Path) -> TextIO:
    if path.suffix == '.gz':
        return gzip.open(path, 'rt', encoding='utf-8')
    return path.open('r', encoding='utf-8')


def iter_fasta(path: Union[str, Path]) -> Generator[tuple[str, str], None, None]:
    """Yield ``(name, sequence)`` records from a FASTA file in file order.

    Parameters
    ----------
    path : str or Path
        Path to a FASTA (``.fa``, ``.fasta``) or gzipped FASTA file.

    Yields
    ------
    tuple[str, str]
        Record name and upper-cased sequence.

    Raises
    ------
    ValueError
        If the file cannot be opened, or sequence data appears before the
        first ``>`` header.
    """
    path = Path(path)
    try:
        fh = _open_text(path)
    except OSError as e:
        raise ValueError(f'Cannot open FASTA file {str(path)!r}: {e}') from e

    with fh:
        name = None
        chunks: list[str] = []
        for lineno, line in enumerate(fh, start=1):
            line = line.strip()
            if not line or line.startswith(';'):
                continue
            if line.startswith('>'):
                if name is not None:
                    yield name, ''.join(chunks).upper()
                header = line[1:].split()
                name = header[0] if header else ''
                chunks = []
                continue
            if name is None:
                raise ValueError(
                    f'{path}:{lineno}: sequence data before the first FASTA header'
                )
            chunks.append(line)
        if name is not None:
            yield name, ''.join(chunks).upper()


def read_fasta(path: Union[str, Path]) -> dict[str, str]:
    """Read every record of a FASTA file into a ``name -> sequence`` dict.

    Raises
    ------
    ValueError
        If the file cannot be read or contains duplicate record names.
    """
    records: dict[str, str] = {}
    for name, seq in iter_fasta(path):
        if name in records:
            raise ValueError(f'Duplicate sequence name {name!r} in {path}')
        records[name] = seq
    _log.debug('Read %d record(s) from %s', len(records), path)
    return records
