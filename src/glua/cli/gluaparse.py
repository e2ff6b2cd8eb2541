"""
gluaparse - GLUA Parser Command-Line Interface
==============================================

Parses GLUA source files and reports the first syntax error in each.

Usage Examples
--------------
Check files:
    $ gluaparse main.lua lib/util.lua

Dump the syntax tree:
    $ gluaparse --ast main.lua

Re-emit normalized source:
    $ gluaparse --format main.lua

Verbose mode:
    $ gluaparse -v main.lua
"""

import logging
import sys
from pathlib import Path

import click

from glua import __version__
from glua.ast import ASTPrinter
from glua.cli.errors import ExitCode, handle_cli_exception
from glua.errors import LuaSyntaxError
from glua.parser import DEFAULT_MAX_DEPTH, ParserOptions, parse
from glua.printer import SourcePrinter


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the syntax tree of each file",
)
@click.option(
    "--format", "format_",
    is_flag=True,
    help="Print each file re-emitted from its syntax tree",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_DEPTH,
    show_default=True,
    help="Maximum nesting of blocks and expressions",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="gluaparse")
def main(
    files: tuple[Path, ...],
    ast: bool,
    format_: bool,
    max_depth: int,
    verbose: bool,
) -> None:
    """
    Parse GLUA source files.

    FILES are the source files to parse. Each one is parsed independently;
    a syntax error in one file does not stop the others from being checked.

    \b
    Examples:
        gluaparse main.lua            # Prints "main.lua: ok"
        gluaparse --ast main.lua      # Dump the syntax tree
        gluaparse --format main.lua   # Re-emit the source

    \b
    Exit codes:
        0  all files parsed
        1  at least one syntax error
        2  invalid arguments or missing file
        3  internal error
    """
    if ast and format_:
        raise click.UsageError("--ast and --format cannot be used together")

    setup_logging(verbose)
    options = ParserOptions(max_depth=max_depth)
    failures = 0

    try:
        for path in files:
            logger.debug(f"Reading {path}")
            source = path.read_bytes()

            try:
                chunk = parse(source, str(path), options)
            except LuaSyntaxError as e:
                click.echo(str(e), err=True)
                failures += 1
                continue

            if ast:
                click.echo(ASTPrinter().print(chunk))
            elif format_:
                click.echo(SourcePrinter().print(chunk))
            else:
                click.echo(f"{path}: ok")

    except Exception as e:
        handle_cli_exception(e, verbose)

    if failures:
        logger.debug(f"{failures} of {len(files)} files failed to parse")
        sys.exit(ExitCode.SYNTAX_ERROR)


if __name__ == "__main__":
    main()
