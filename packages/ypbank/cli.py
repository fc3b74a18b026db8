"""CLI for the ``ypbank`` package.

Typer-based console interface over :mod:`ypbank.api`. Environment variables
(``YPBANK_LOG_LEVEL``) are loaded from a local ``.env`` using
``python-dotenv`` before any command runs. All parsing, conversion and
reconciliation logic lives in the library; this module only opens files,
prints, and maps failures to exit codes:

- ``0``: success (``compare``: records are identical)
- ``1``: ``compare`` found differences
- ``2``: usage, format or I/O error (message on stderr)
"""

from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .api import convert, decode_all
from .errors import BankFormatError
from .formats import BankFormat, available_formats, format_for_path, get_format
from .logging_setup import configure_logging, get_logger
from .models import ComparisonReport, Identical, Mismatch
from .reconciliation import duplicate_ids, reconcile

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2

_logger = get_logger("ypbank.cli")


def _fail(message: str) -> typer.Exit:
    print(f"Error: {message}", file=sys.stderr)
    return typer.Exit(EXIT_ERROR)


def _resolve_format(name: str | None, path: Path | None, *, flag: str) -> BankFormat:
    """Pick a codec from an explicit ``--*-format`` value or the file extension."""

    try:
        if name:
            return get_format(name)
        if path is not None:
            return format_for_path(path)
    except ValueError as e:
        raise _fail(str(e)) from e
    raise _fail(f"{flag} is required when it cannot be inferred from a file name")


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as e:
        raise _fail(f"File not found: {path}") from e
    except PermissionError as e:
        raise _fail(f"Permission denied: {path}") from e
    except IsADirectoryError as e:
        raise _fail(f"Not a file: {path}") from e


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Convert and reconcile bank transaction files in binary, csv or txt "
        "format. Loads YPBANK_* settings from a local .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
INPUT_OPTION: OptionInfo = typer.Option(
    ...,
    "--input",
    "-i",
    help="Path to the file to convert.",
    dir_okay=False,
    exists=False,  # the handler reports missing files itself
)
OUTPUT_OPTION: OptionInfo = typer.Option(
    "--output",
    "-o",
    help="Write converted records here instead of stdout.",
    dir_okay=False,
)
FILE1_OPTION: OptionInfo = typer.Option(
    ..., "--file1", help="First transaction file.", dir_okay=False
)
FILE2_OPTION: OptionInfo = typer.Option(
    ..., "--file2", help="Second transaction file.", dir_okay=False
)


@app.command("convert")
def convert_cmd(
    input_path: Annotated[Path, INPUT_OPTION],
    output_path: Annotated[Path | None, OUTPUT_OPTION] = None,
    *,
    input_format: str | None = typer.Option(
        None, "--input-format", help="binary, csv or txt (default: from --input extension)."
    ),
    output_format: str | None = typer.Option(
        None, "--output-format", help="binary, csv or txt (default: from --output extension)."
    ),
) -> None:
    """Convert a transaction file from one format to another."""

    source_fmt = _resolve_format(input_format, input_path, flag="--input-format")
    dest_fmt = _resolve_format(output_format, output_path, flag="--output-format")
    if source_fmt.name == dest_fmt.name:
        raise _fail("input and output formats can not be the same")

    data = _read_bytes(input_path)

    # Render into memory first so a failed conversion never leaves a partial
    # output file behind.
    out = io.BytesIO()
    try:
        count = convert(source_fmt, io.BytesIO(data), dest_fmt, out)
    except BankFormatError as e:
        raise _fail(f"Failed to convert '{input_path}': {e}") from e

    if output_path is None:
        sink = typer.get_binary_stream("stdout")
        sink.write(out.getvalue())
        sink.flush()
    else:
        try:
            output_path.write_bytes(out.getvalue())
        except OSError as e:
            raise _fail(f"Failed to write '{output_path}': {e}") from e

    _logger.info(
        "converted %d records from %s (%s) to %s (%s)",
        count,
        input_path,
        source_fmt.name,
        output_path or "<stdout>",
        dest_fmt.name,
    )


@app.command("compare")
def compare_cmd(
    file1: Annotated[Path, FILE1_OPTION],
    file2: Annotated[Path, FILE2_OPTION],
    *,
    format1: str | None = typer.Option(
        None, "--format1", help="Format of --file1 (default: from extension)."
    ),
    format2: str | None = typer.Option(
        None, "--format2", help="Format of --file2 (default: from extension)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print a JSON report instead of text."),
) -> None:
    """Compare two transaction files (formats may differ) by transaction id."""

    fmt1 = _resolve_format(format1, file1, flag="--format1")
    fmt2 = _resolve_format(format2, file2, flag="--format2")

    sides = []
    for path, fmt in ((file1, fmt1), (file2, fmt2)):
        data = _read_bytes(path)
        try:
            records = decode_all(fmt, io.BytesIO(data))
        except BankFormatError as e:
            raise _fail(f"Failed to parse '{path}' as {fmt.name}: {e}") from e
        dupes = duplicate_ids(records)
        if dupes:
            # Reconciliation keeps the last record per id; say so.
            _logger.warning(
                "%s contains duplicate ids (last record wins): %s",
                path,
                ", ".join(str(i) for i in dupes),
            )
        sides.append(records)

    result = reconcile(sides[0], sides[1])

    if as_json:
        typer.echo(ComparisonReport.from_result(result).model_dump_json(indent=2))
    elif isinstance(result, Identical):
        typer.echo(f"The transaction records in '{file1}' and '{file2}' are identical.")
    else:
        _print_mismatch(result.sorted(), file1, file2)

    raise typer.Exit(EXIT_OK if isinstance(result, Identical) else EXIT_MISMATCH)


def _print_mismatch(result: Mismatch, file1: Path, file2: Path) -> None:
    for tx_id in result.missing_in_a:
        typer.echo(f"Transaction {tx_id} is missing in '{file1}'")
    for tx_id in result.missing_in_b:
        typer.echo(f"Transaction {tx_id} is missing in '{file2}'")
    for diff in result.differing:
        typer.echo(f"Transaction {diff.id} differs: {', '.join(diff.changed_fields())}")


@app.command("formats")
def formats_cmd() -> None:
    """List the supported formats and their file extensions."""

    for name in available_formats():
        typer.echo(f"{name}\t{get_format(name).extension}")


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    log_level: str | None = typer.Option(
        None, "--log-level", help="Logging level (default: env YPBANK_LOG_LEVEL or INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(EXIT_ERROR)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m ypbank.cli`
    app()
