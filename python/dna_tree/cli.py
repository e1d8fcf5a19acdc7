"""Command-script front end for dna-tree.

Reads one command per line from a script file (or STDIN) and writes results
to STDOUT; logs go to STDERR.

Commands
--------
``insert <sequence>``
    Store a sequence and report the level it landed at.
``remove <sequence>``
    Remove a sequence and release its arena bytes.
``search <pattern>``
    Prefix search; a trailing ``$`` makes it an exact search.
``print [lengths|stats]``
    Preorder listing of stored sequences, followed by the free block list.
``fetch <sequence>``
    Read a stored sequence back from the arena.
``free``
    Print the free block list.
``load <fasta>``
    Insert every record of a FASTA file.
``plot <png> [composition]``
    Save the arena map (or the base composition chart).
``exit``
    Stop processing.

Blank lines and lines starting with ``#`` are ignored.
"""

from __future__ import annotations

import argparse
import logging
import os
import shlex
import sys
from typing import Callable, Iterable, Optional, TextIO

from dna_tree import __version__
from dna_tree.database import SequenceDatabase
from dna_tree.errors import DnaTreeError

_log = logging.getLogger(__name__)

LOG_LEVEL_ENV = 'DNA_TREE_LOG_LEVEL'

ERR_SYNTAX = 'ERR syntax'
ERR_UNKNOWN_CMD = 'ERR unknown command'
EXIT = 'EXIT'

USAGE: dict[str, str] = {
    'insert': 'ERR usage: insert <sequence>',
    'remove': 'ERR usage: remove <sequence>',
    'search': 'ERR usage: search <pattern>',
    'print': 'ERR usage: print [lengths|stats]',
    'fetch': 'ERR usage: fetch <sequence>',
    'free': 'ERR usage: free',
    'load': 'ERR usage: load <fasta>',
    'plot': 'ERR usage: plot <png> [composition]',
}

Handler = Callable[[list[str], SequenceDatabase, TextIO], Optional[str]]


def _emit(out: TextIO, text: str) -> None:
    out.write(text + '\n')
    out.flush()


# -------------------- Command handlers --------------------


def handle_insert(args: list[str], db: SequenceDatabase, out: TextIO) -> None:
    if len(args) != 1:
        _emit(out, USAGE['insert'])
        return
    level = db.insert(args[0])
    _emit(out, f'sequence {args[0].upper()} inserted at level {level}')


def handle_remove(args: list[str], db: SequenceDatabase, out: TextIO) -> None:
    if len(args) != 1:
        _emit(out, USAGE['remove'])
        return
    handle = db.remove(args[0])
    _emit(out, f'sequence {args[0].upper()} removed, freed {handle}')


def handle_search(args: list[str], db: SequenceDatabase, out: TextIO) -> None:
    if len(args) != 1:
        _emit(out, USAGE['search'])
        return
    _emit(out, db.search(args[0]).report())


def handle_print(args: list[str], db: SequenceDatabase, out: TextIO) -> None:
    if len(args) > 1 or (args and args[0].lower() not in ('lengths', 'stats')):
        _emit(out, USAGE['print'])
        return
    mode = args[0].lower() if args else ''
    _emit(out, db.dump(lengths=mode == 'lengths', stats=mode == 'stats'))
    _emit(out, f'Free Block List: {db.free_report()}')


def handle_fetch(args: list[str], db: SequenceDatabase, out: TextIO) -> None:
    if len(args) != 1:
        _emit(out, USAGE['fetch'])
        return
    _emit(out, db.fetch(args[0]))


def handle_free(args: list[str], db: SequenceDatabase, out: TextIO) -> None:
    if args:
        _emit(out, USAGE['free'])
        return
    _emit(out, db.free_report())


def handle_load(args: list[str], db: SequenceDatabase, out: TextIO) -> None:
    if len(args) != 1:
        _emit(out, USAGE['load'])
        return
    inserted = db.load_fasta(args[0])
    _emit(out, f'loaded {len(inserted)} sequence(s) from {args[0]}')


def handle_plot(args: list[str], db: SequenceDatabase, out: TextIO) -> None:
    if not args or len(args) > 2 or (len(args) == 2 and args[1].lower() != 'composition'):
        _emit(out, USAGE['plot'])
        return
    # matplotlib is only imported when a plot is requested.
    import matplotlib.pyplot as plt

    from dna_tree.plotting import ArenaPlotter

    plotter = ArenaPlotter(db)
    if len(args) == 2:
        fig = plotter.plot_composition(output_path=args[0])
    else:
        fig = plotter.plot_arena(output_path=args[0])
    plt.close(fig)
    _emit(out, f'saved plot to {args[0]}')


def handle_exit(args: list[str], db: SequenceDatabase, out: TextIO) -> str:
    return EXIT


DISPATCH: dict[str, Handler] = {
    'insert': handle_insert,
    'remove': handle_remove,
    'search': handle_search,
    'print': handle_print,
    'fetch': handle_fetch,
    'free': handle_free,
    'load': handle_load,
    'plot': handle_plot,
    'exit': handle_exit,
}


def _parse_command(line: str) -> Optional[list[str]]:
    """Split a line into tokens with shell-like rules; ``None`` on bad quoting."""
    try:
        return shlex.split(line)
    except ValueError:
        return None


def run_commands(lines: Iterable[str], db: SequenceDatabase, out: TextIO) -> int:
    """Execute command *lines* against *db*, writing results to *out*.

    Errors raised by a command (duplicate or missing sequences, bad bases,
    unreadable files) are reported on *out* and processing continues with the
    next line.

    Returns
    -------
    int
        Number of commands that reported an error.
    """
    errors = 0
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith('#'):
            continue

        tokens = _parse_command(line)
        if not tokens:
            _emit(out, ERR_SYNTAX)
            errors += 1
            continue

        cmd, args = tokens[0].lower(), tokens[1:]
        handler = DISPATCH.get(cmd)
        if handler is None:
            _emit(out, f'{ERR_UNKNOWN_CMD}: {tokens[0]}')
            errors += 1
            continue

        try:
            if handler(args, db, out) == EXIT:
                break
        except (DnaTreeError, ValueError, OSError) as e:
            _log.debug('Line %d (%s) failed: %r', lineno, cmd, e)
            _emit(out, str(e))
            errors += 1
    return errors


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dna-tree',
        description='Run dna-tree commands from a script file or STDIN.',
    )
    parser.add_argument(
        'script',
        nargs='?',
        help='Command file to execute. Reads STDIN when omitted.',
    )
    parser.add_argument(
        '--arena',
        metavar='PATH',
        help='Store packed sequences in this file (truncated on start). '
        'Defaults to an in-memory arena.',
    )
    parser.add_argument(
        '--coalesce',
        action='store_true',
        help='Merge adjacent free blocks when sequences are removed.',
    )
    parser.add_argument(
        '--max-size',
        type=int,
        metavar='BYTES',
        help='Maximum arena size in bytes.',
    )
    parser.add_argument(
        '--log-level',
        default=os.environ.get(LOG_LEVEL_ENV, 'WARNING'),
        type=str.upper,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help=f'Logging level for STDERR (default: ${LOG_LEVEL_ENV} or WARNING).',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Console entry point.  Returns ``1`` if any command failed."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        stream=sys.stderr,
        level=args.log_level,
        format='%(levelname)s: %(message)s',
    )

    with SequenceDatabase(args.arena, coalesce=args.coalesce, max_size=args.max_size) as db:
        if args.script is None:
            errors = run_commands(sys.stdin, db, sys.stdout)
        else:
            with open(args.script, encoding='utf-8') as fh:
                errors = run_commands(fh, db, sys.stdout)
    return 1 if errors else 0


if __name__ == '__main__':
    raise SystemExit(main())
