"""Tests for FASTA reading functionality."""

import pytest

from dna_tree.fasta import iter_fasta, read_fasta


def test_read_fasta_plain(fasta_file):
    """Test reading a plain FASTA file."""
    seqs = read_fasta(fasta_file)
    assert 'seq1' in seqs
    assert 'seq2' in seqs
    assert 'seq3' in seqs
    assert seqs['seq1'] == 'ACGTACGTACGTACGTACGT'


def test_read_fasta_joins_wrapped_lines(fasta_file):
    """Test that multi-line records are concatenated."""
    seqs = read_fasta(fasta_file)
    assert seqs['seq2'] == 'TACGTACGTACGTACGTACG'


def test_read_fasta_gzip(gzip_fasta_file):
    """Test reading a gzipped FASTA file."""
    seqs = read_fasta(gzip_fasta_file)
    assert 'seq1' in seqs
    assert 'seq2' in seqs
    assert seqs['seq1'] == 'ACGTACGTACGTACGTACGT'


def test_read_fasta_missing_file():
    """Test that a missing file raises ValueError."""
    with pytest.raises(ValueError):
        read_fasta('/nonexistent/path/file.fasta')


def test_read_fasta_returns_uppercase(fasta_file):
    """Test that sequences are returned in uppercase."""
    seqs = read_fasta(fasta_file)
    for seq in seqs.values():
        assert seq == seq.upper()


def test_name_is_first_header_word(fasta_file):
    """Test that the description after the identifier is dropped."""
    names = [name for name, _ in iter_fasta(fasta_file)]
    assert names == ['seq1', 'seq2', 'seq3']


def test_duplicate_names_raise(tmp_path):
    """Test that duplicate record names raise ValueError."""
    path = tmp_path / 'dup.fasta'
    path.write_text('>a\nACGT\n>a\nGGGG\n')
    with pytest.raises(ValueError):
        read_fasta(str(path))


def test_sequence_before_header_raises(tmp_path):
    """Test that data before the first header is rejected."""
    path = tmp_path / 'bad.fasta'
    path.write_text('ACGT\n>a\nACGT\n')
    with pytest.raises(ValueError):
        list(iter_fasta(str(path)))


def test_empty_file(tmp_path):
    path = tmp_path / 'empty.fasta'
    path.write_text('')
    assert read_fasta(str(path)) == {}
