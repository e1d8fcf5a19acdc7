"""Figures for a :class:`~dna_tree.database.SequenceDatabase`.

Provides :class:`ArenaPlotter`, which draws

- an **arena map**: every byte range of the arena as a horizontal bar,
  coloured by whether a live sequence or the free list owns it; and
- a **base composition** chart: stacked ``A/C/G/T`` percentages for each
  stored sequence, in tree preorder.

Examples
--------
>>> from dna_tree import SequenceDatabase
>>> from dna_tree.plotting import ArenaPlotter
>>> db = SequenceDatabase()
>>> for seq in ['ACGT', 'AAAAC', 'GG']:
...     _ = db.insert(seq)
>>> _ = db.remove('AAAAC')
>>> plotter = ArenaPlotter(db)
>>> fig = plotter.plot_arena(output_path="arena.png")
>>> fig = plotter.plot_composition()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

import matplotlib.figure
import matplotlib.patches as mpatches
import matplotlib.pyplot as plt

from dna_tree.codec import ALPHABET
from dna_tree.tree import base_percentages

if TYPE_CHECKING:
    from dna_tree.database import SequenceDatabase

_log = logging.getLogger(__name__)

# One colour per base, in alphabet order.
BASE_COLORS: dict[str, str] = {
    'A': '#2ca02c',
    'C': '#1f77b4',
    'G': '#ff7f0e',
    'T': '#d62728',
}


class ArenaPlotter:
    """Draw arena occupancy and base composition figures.

    Parameters
    ----------
    database : SequenceDatabase
        The database to plot.  It is read, never modified.
    """

    def __init__(self, database: 'SequenceDatabase') -> None:
        self.database = database

    def plot_arena(
        self,
        output_path: Optional[Union[str, Path]] = None,
        figsize: tuple[float, float] = (10.0, 2.0),
        live_color: str = 'tab:blue',
        free_color: str = 'lightgrey',
        title: Optional[str] = None,
        dpi: int = 150,
        format: Optional[str] = None,
    ) -> matplotlib.figure.Figure:
        """Plot the arena as a strip of live and free byte ranges.

        Parameters
        ----------
        output_path : str or Path, optional
            Where to save the figure.  When ``None`` the figure is only
            returned.
        figsize : tuple[float, float], optional
            Figure size in inches.  Default is ``(10.0, 2.0)``.
        live_color : str, optional
            Colour of ranges owned by stored sequences.
        free_color : str, optional
            Colour of ranges on the free list.
        title : str, optional
            Figure title.
        dpi : int, optional
            Resolution used when saving.  Default is ``150``.
        format : str, optional
            File format passed to ``savefig``; inferred from the suffix when
            ``None``.

        Returns
        -------
        matplotlib.figure.Figure
            The generated figure.
        """
        allocator = self.database.allocator
        live = [(h.offset, h.length) for _, h in self.database.records()]
        free = [(h.offset, h.length) for h in allocator.free_blocks]
        size = allocator.arena_size
        if size == 0:
            _log.warning('Arena is empty; the arena map will have no bars.')

        fig, ax = plt.subplots(figsize=figsize)
        if live:
            ax.broken_barh(live, (0, 1), facecolors=live_color, edgecolor='black', linewidth=0.3)
        if free:
            ax.broken_barh(free, (0, 1), facecolors=free_color, edgecolor='black', linewidth=0.3)
        ax.set_xlim(0, max(size, 1))
        ax.set_ylim(0, 1)
        ax.set_yticks([])
        ax.set_xlabel('Byte offset')
        ax.legend(
            handles=[
                mpatches.Patch(color=live_color, label=f'live ({len(live)})'),
                mpatches.Patch(color=free_color, label=f'free ({len(free)})'),
            ],
            loc='upper right',
            fontsize=8,
        )
        ax.set_title(title if title else f'Arena: {size} byte(s), {allocator.free_bytes} free')

        plt.tight_layout()
        if output_path is not None:
            plt.savefig(str(output_path), dpi=dpi, bbox_inches='tight', format=format)
        return fig

    def plot_composition(
        self,
        sequences: Optional[list[str]] = None,
        output_path: Optional[Union[str, Path]] = None,
        figsize: Optional[tuple[float, float]] = None,
        title: Optional[str] = None,
        dpi: int = 150,
        format: Optional[str] = None,
    ) -> matplotlib.figure.Figure:
        """Plot stacked base percentages for stored sequences.

        Parameters
        ----------
        sequences : list[str], optional
            Sequences to include.  Defaults to every stored sequence in tree
            preorder.  Sequences not in the database are skipped with a
            warning.
        output_path : str or Path, optional
            Where to save the figure.
        figsize : tuple[float, float], optional
            Figure size; scales with the number of sequences when ``None``.
        title : str, optional
            Figure title.
        dpi : int, optional
            Resolution used when saving.  Default is ``150``.
        format : str, optional
            File format passed to ``savefig``.

        Returns
        -------
        matplotlib.figure.Figure
            The generated figure.

        Raises
        ------
        ValueError
            If there is nothing to plot.
        """
        if sequences is None:
            names = self.database.sequences()
        else:
            names = []
            for seq in sequences:
                if seq in self.database:
                    names.append(seq.upper())
                else:
                    _log.warning('Sequence %r is not stored and will not be plotted.', seq)
        if not names:
            raise ValueError('No sequences to plot.')

        if figsize is None:
            figsize = (max(4.0, 0.5 * len(names) + 2.0), 4.0)
        fig, ax = plt.subplots(figsize=figsize)

        positions = list(range(len(names)))
        bottoms = [0.0] * len(names)
        for base in ALPHABET:
            heights = [base_percentages(seq)[base] for seq in names]
            ax.bar(positions, heights, bottom=bottoms, color=BASE_COLORS[base], label=base)
            bottoms = [b + h for b, h in zip(bottoms, heights)]

        ax.set_xticks(positions)
        ax.set_xticklabels(names, rotation=45, ha='right', fontsize=8)
        ax.set_ylim(0, 100)
        ax.set_ylabel('Percent of bases')
        ax.legend(loc='upper right', fontsize=8)
        if title:
            ax.set_title(title)

        plt.tight_layout()
        if output_path is not None:
            plt.savefig(str(output_path), dpi=dpi, bbox_inches='tight', format=format)
        return fig
