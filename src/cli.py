"""Typer CLI entry points for the ctflow extraction pipeline."""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from loguru import logger

SRC_DIR = Path(__file__).resolve().parent
if str(SRC_DIR) not in sys.path:  # pragma: no cover - runtime convenience
    sys.path.insert(0, str(SRC_DIR))

try:  # pragma: no cover
    from .collection import ClinicalTrialsCollection
    from .io_utils import write_jsonl
    from .parsers.xml_tree import DocumentParseError
    from .segment import InputUnavailableError
except ImportError:  # pragma: no cover
    from collection import ClinicalTrialsCollection  # type: ignore
    from io_utils import write_jsonl  # type: ignore
    from parsers.xml_tree import DocumentParseError  # type: ignore
    from segment import InputUnavailableError  # type: ignore

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"
RAW_DIR = DATA_DIR / "raw"
OUTPUT_DIR = DATA_DIR / "documents"

DEFAULT_INPUT = RAW_DIR
DEFAULT_OUTPUT = OUTPUT_DIR / "documents.jsonl"

DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVEL_CHOICES = [
    "TRACE",
    "DEBUG",
    "INFO",
    "SUCCESS",
    "WARNING",
    "ERROR",
    "CRITICAL",
]


def configure_logger(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Route loguru output to stderr at ``level``."""
    normalised = level.upper()
    if normalised not in LOG_LEVEL_CHOICES:
        raise typer.BadParameter(f"Unsupported log level '{level}'.")
    logger.remove()
    logger.add(
        sys.stderr,
        level=normalised,
        enqueue=False,
        colorize=True,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level:<8}</level> | {message}",
    )


app = typer.Typer(help="ctflow ClinicalTrials.gov extraction CLI.")


@app.callback()
def main(
    log_level: str = typer.Option(
        DEFAULT_LOG_LEVEL,
        "--log-level",
        help="Log verbosity (TRACE, DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL).",
    ),
) -> None:
    """ctflow ClinicalTrials.gov extraction CLI."""
    configure_logger(log_level)


def _input_option(default: Path = DEFAULT_INPUT) -> Path:
    return typer.Option(
        default,
        "--input",
        "-i",
        exists=True,
        readable=True,
        resolve_path=True,
        help="XML file, ZIP archive, or directory of either.",
    )


@app.command("dump")
def dump_cli(
    input_path: Path = _input_option(),
    output_path: Path = typer.Option(
        DEFAULT_OUTPUT,
        "--output",
        "-o",
        resolve_path=True,
        help="Destination JSONL file with one row per document.",
    ),
    fail_fast: bool = typer.Option(
        False,
        "--fail-fast",
        help="Stop at the first unreadable input or malformed document.",
    ),
) -> None:
    """Extract every document and write id, content and fields as JSONL."""
    collection = ClinicalTrialsCollection(input_path)
    documents = collection.iter_documents(skip_errors=not fail_fast)
    try:
        written = write_jsonl(output_path, (document.to_row() for document in documents))
    except (DocumentParseError, InputUnavailableError) as exc:
        typer.echo(f"Extraction failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    logger.info("cli:dump | documents={} stats={}", written, dict(collection.stats))
    typer.echo(f"Wrote {written} documents to {output_path}")


@app.command("describe")
def describe_cli(
    input_path: Path = _input_option(),
    limit: int = typer.Option(
        0,
        "--limit",
        "-n",
        min=0,
        help="Maximum number of records to print (0 prints all).",
    ),
) -> None:
    """Print a field summary for each extracted record."""
    collection = ClinicalTrialsCollection(input_path)
    for index, document in enumerate(collection.iter_documents(), start=1):
        typer.echo(document.record.describe())
        if limit and index >= limit:
            break


@app.command("count")
def count_cli(input_path: Path = _input_option()) -> None:
    """Count input units and documents without writing anything."""
    collection = ClinicalTrialsCollection(input_path)
    for _document in collection.iter_documents():
        pass
    stats = collection.stats
    typer.echo(
        f"segments={stats['segments']} documents={stats['documents']} "
        f"skipped={stats['skipped']} failed={stats['failed']}"
    )


def run() -> None:
    """Entrypoint when invoking via `python -m` or the console script."""
    app()


if __name__ == "__main__":
    run()
