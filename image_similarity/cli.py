"""Command line entry point.

Usage example:
  image-similarity ./photos extra.png 0.95 -p 3 -r 256 256 --out-dir ./reports

Tokens are handed to the input resolver exactly as typed, so flags such as
``-p``, ``-nr`` and negative numbers are not interpreted by the option parser.
"""
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

import typer

from .inputs import UsageError, resolve_inputs
from .logging import get_logger
from .matcher import ScanSummary, scan_pairs
from .report import ReportWriter, summary_lines
from .store import build_store

EXIT_NO_IMAGES = 1
EXIT_USAGE = 2

app = typer.Typer(
    help="Find duplicate and near-duplicate images by pixel comparison.",
    add_completion=False,
)


def run(
    tokens: Sequence,
    output_dir: Path = Path("."),
    console: Callable[[str], None] = print,
) -> Tuple[Path, ScanSummary]:
    """Resolve ``tokens``, load the images and write the report.

    Raises UsageError before anything is written when the inputs are unusable.
    """
    logger = get_logger(__name__)

    resolved = resolve_inputs(tokens, console=console, output_dir=output_dir)
    store = build_store(resolved.candidates, resolved.config, console=console)
    config = store.config

    for line in summary_lines(config, len(store)):
        console(line)
    console("")

    with ReportWriter(config, console=console) as writer:
        logger.info("Writing report to %s", writer.path)
        summary = scan_pairs(store.source, config, writer)
    return writer.path, summary


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def compare(
    ctx: typer.Context,
    out_dir: Path = typer.Option(Path("."), "--out-dir", help="Directory for the similar_images report"),
) -> None:
    """
    Compare every pair of images given as files and/or folders.

    Arguments are read left to right: a number in [0, 1] sets the similarity
    threshold (default 1), numbers above 1 set the resize rows then columns,
    '-p N' sets the pixel precision (default 0), '-r'/'-nr' turn resizing
    on/off (default off) and '-s'/'-ns' keep images in memory or reload them
    for every comparison (default keep).
    """
    logger = get_logger(__name__)
    tokens = list(ctx.args)

    try:
        report_path, summary = run(tokens, output_dir=out_dir)
    except UsageError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=EXIT_USAGE) from exc

    typer.echo(f"\nREPORT: {report_path}")
    logger.info(
        "%d match(es) among %d image(s); %d pair(s) skipped for dimension mismatch",
        summary.matches,
        summary.images,
        summary.mismatched,
    )
    if summary.images == 0:
        typer.echo("NO VALID IMAGES TO COMPARE")
        raise typer.Exit(code=EXIT_NO_IMAGES)


def main(argv: Optional[Sequence[str]] = None) -> None:
    app(args=list(argv) if argv is not None else None)


if __name__ == "__main__":
    main()
