"""Tests for the arena and composition figures."""

import logging
import os

import matplotlib.figure
import matplotlib.pyplot as plt
import pytest

from dna_tree.database import SequenceDatabase
from dna_tree.plotting import BASE_COLORS, ArenaPlotter


@pytest.fixture
def plot_db():
    """Database with one freed block between two live records."""
    db = SequenceDatabase()
    for seq in ['ACGTACGT', 'AAAAC', 'GG']:
        db.insert(seq)
    db.remove('AAAAC')
    return db


def test_plotter_creation(plot_db):
    plotter = ArenaPlotter(plot_db)
    assert plotter.database is plot_db


def test_plot_arena_returns_figure(plot_db):
    fig = ArenaPlotter(plot_db).plot_arena()
    assert isinstance(fig, matplotlib.figure.Figure)
    ax = fig.axes[0]
    assert ax.get_xlim() == (0, 5)
    assert 'Arena: 5 byte(s), 2 free' in ax.get_title()
    plt.close(fig)


def test_plot_arena_saves_file(plot_db, tmp_path):
    output = str(tmp_path / 'arena.png')
    fig = ArenaPlotter(plot_db).plot_arena(output_path=output)
    assert os.path.exists(output)
    assert os.path.getsize(output) > 0
    plt.close(fig)


def test_plot_arena_svg_format(plot_db, tmp_path):
    output = str(tmp_path / 'arena.out')
    fig = ArenaPlotter(plot_db).plot_arena(output_path=output, format='svg')
    with open(output) as fh:
        assert '<svg' in fh.read()
    plt.close(fig)


def test_plot_arena_empty_warns(caplog):
    with caplog.at_level(logging.WARNING, logger='dna_tree.plotting'):
        fig = ArenaPlotter(SequenceDatabase()).plot_arena()
    assert 'Arena is empty' in caplog.text
    plt.close(fig)


def test_plot_arena_custom_title(plot_db):
    fig = ArenaPlotter(plot_db).plot_arena(title='My arena')
    assert fig.axes[0].get_title() == 'My arena'
    plt.close(fig)


def test_plot_composition_default_sequences(plot_db):
    fig = ArenaPlotter(plot_db).plot_composition()
    ax = fig.axes[0]
    labels = [t.get_text() for t in ax.get_xticklabels()]
    assert labels == plot_db.sequences()
    # one bar per base per sequence
    assert len(ax.patches) == len(BASE_COLORS) * len(labels)
    plt.close(fig)


def test_plot_composition_subset_skips_missing(plot_db, caplog):
    with caplog.at_level(logging.WARNING, logger='dna_tree.plotting'):
        fig = ArenaPlotter(plot_db).plot_composition(sequences=['gg', 'TTTT'])
    labels = [t.get_text() for t in fig.axes[0].get_xticklabels()]
    assert labels == ['GG']
    assert "'TTTT'" in caplog.text
    plt.close(fig)


def test_plot_composition_empty_raises():
    with pytest.raises(ValueError):
        ArenaPlotter(SequenceDatabase()).plot_composition()


def test_plot_composition_saves_file(plot_db, tmp_path):
    output = str(tmp_path / 'composition.png')
    fig = ArenaPlotter(plot_db).plot_composition(output_path=output, title='Bases')
    assert os.path.exists(output)
    assert fig.axes[0].get_title() == 'Bases'
    plt.close(fig)
