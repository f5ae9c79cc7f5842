"""CLI interface for bundle2docx."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from bundle2docx import __version__
from bundle2docx.bundle import open_bundle, output_name_for
from bundle2docx.converter import HtmlToDocxConverter
from bundle2docx.errors import BundleError, ConversionError
from bundle2docx.model.options import MATCH_POLICY_ENV, ConversionOptions

app = typer.Typer(
    name="bundle2docx",
    help="Convert a ZIP bundle (HTML file + images + stylesheets) into a DOCX document.",
    no_args_is_help=True,
)


def _configure_logging(verbose: int) -> None:
    # Warnings reach the console through the summary below, not the log
    level = logging.ERROR
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, markup=False)],
        force=True,
    )


@app.command()
def convert(
    bundle: Annotated[
        Path,
        typer.Argument(
            help="Path to the ZIP bundle",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    out: Annotated[
        Path | None,
        typer.Option(
            "--out",
            "-o",
            help="Output DOCX path (default: <bundle-name>.docx next to the bundle)",
        ),
    ] = None,
    match_policy: Annotated[
        str | None,
        typer.Option(
            "--match-policy",
            help=(
                "Resource matching: 'exact' (relative to the common base directory) or "
                f"'suffix'. Defaults to ${MATCH_POLICY_ENV}, then 'exact'"
            ),
        ),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase log output (-v, -vv)"),
    ] = 0,
) -> None:
    """
    Convert an HTML bundle into a DOCX document.

    Examples:

        # Basic conversion, writes report.docx next to report.zip
        bundle2docx convert report.zip

        # Custom output path and lenient resource matching
        bundle2docx convert report.zip --out out/report.docx --match-policy suffix
    """
    _configure_logging(verbose)

    try:
        if match_policy is None:
            options = ConversionOptions.from_env()
        else:
            options = ConversionOptions.from_cli(match_policy=match_policy)
    except ValueError as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(1) from exc

    target = out if out is not None else bundle.with_name(output_name_for(bundle))

    typer.echo(f"📦 Converting bundle: {bundle}")
    typer.echo(f"🔎 Match policy: {options.match_policy.value}")

    try:
        with open_bundle(bundle) as opened:
            typer.echo(f"📄 HTML file: {opened.html_path.name} ({len(opened.resources)} resources)")
            result = HtmlToDocxConverter(options=options).convert(opened.to_request())
    except (BundleError, ConversionError) as exc:
        typer.echo(f"\n❌ Conversion failed: {exc}")
        raise typer.Exit(1) from exc

    for record in result.warnings:
        typer.echo(f"⚠️  {record.event_code}: {record.message}")

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(result.document)
    typer.echo(
        f"\n✅ Wrote {target} ({result.images} image(s), {result.stylesheets} stylesheet(s))"
    )


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"bundle2docx version {__version__}")


def version_callback(value: bool) -> None:
    """Version callback for --version flag."""
    if value:
        typer.echo(f"bundle2docx version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """
    bundle2docx - Convert HTML bundles into DOCX documents.

    The bundle is a ZIP file with one HTML document and the images and
    stylesheets it references. Scripts and inline styles are stripped, linked
    stylesheets are inlined, images are embedded as pictures, and references
    to files missing from the bundle are dropped with a warning.

    For detailed usage, run: bundle2docx convert --help
    """
    pass


if __name__ == "__main__":  # pragma: no cover - executed only via `python -m`
    app()
