"""Two-bit packing codec for DNA sequences.

Bases are mapped ``A=00``, ``C=01``, ``G=10``, ``T=11`` and packed four per
byte, most significant bits first: the first base of every group of four
occupies bits 7-6.  A trailing partial byte is padded with zero bits, so the
number of bases cannot be recovered from the bytes alone; :func:`decode`
takes it as an argument.

Examples
--------
>>> encode('ACGT')
b'\\x1b'
>>> decode(b'\\x1b', 4)
'ACGT'
>>> packed_length(5)
2
"""

from __future__ import annotations

from typing import Optional

from dna_tree.errors import InvalidCharacterError

ALPHABET = 'ACGT'

_CODE: dict[str, int] = {base: i for i, base in enumerate(ALPHABET)}

# Every byte value decodes to the same four characters; build the table once.
_BYTE_TO_BASES: list[str] = [
    ALPHABET[(b >> 6) & 0b11]
    + ALPHABET[(b >> 4) & 0b11]
    + ALPHABET[(b >> 2) & 0b11]
    + ALPHABET[b & 0b11]
    for b in range(256)
]


def packed_length(bases: int) -> int:
    """Return the number of bytes needed to pack *bases* bases.

    Parameters
    ----------
    bases : int
        Number of bases.

    Returns
    -------
    int
        ``ceil(bases / 4)``.
    """
    return (bases + 3) // 4


def normalize(sequence: str) -> str:
    """Upper-case *sequence* and check every character is a valid base.

    Parameters
    ----------
    sequence : str
        Raw sequence text, any case.

    Returns
    -------
    str
        The upper-cased sequence.

    Raises
    ------
    InvalidCharacterError
        If any character is not one of ``A, C, G, T``.
    """
    upper = sequence.upper()
    for i, char in enumerate(upper):
        if char not in _CODE:
            raise InvalidCharacterError(sequence[i], i, sequence)
    return upper


def encode(sequence: str) -> bytes:
    """Pack *sequence* into bytes, four bases per byte.

    Parameters
    ----------
    sequence : str
        Sequence over ``A, C, G, T`` (case-insensitive).

    Returns
    -------
    bytes
        ``packed_length(len(sequence))`` bytes.

    Raises
    ------
    InvalidCharacterError
        If *sequence* contains a character outside the alphabet.
    """
    out = bytearray(packed_length(len(sequence)))
    for i, char in enumerate(sequence):
        code = _CODE.get(char.upper())
        if code is None:
            raise InvalidCharacterError(char, i, sequence)
        out[i >> 2] |= code << (6 - 2 * (i & 3))
    return bytes(out)


def decode(data: bytes, bases: Optional[int] = None) -> str:
    """Unpack *bases* bases from *data*.

    Parameters
    ----------
    data : bytes
        Packed bytes as produced by :func:`encode`.
    bases : int, optional
        Number of bases to emit.  Padding slots beyond this count are
        ignored.  Defaults to ``4 * len(data)``.

    Returns
    -------
    str
        The decoded upper-case sequence.

    Raises
    ------
    ValueError
        If *bases* needs more bytes than *data* holds.
    """
    if bases is None:
        bases = 4 * len(data)
    if bases < 0 or packed_length(bases) > len(data):
        raise ValueError(
            f'Cannot decode {bases} bases from {len(data)} byte(s)'
        )
    text = ''.join(_BYTE_TO_BASES[b] for b in data[:packed_length(bases)])
    return text[:bases]
