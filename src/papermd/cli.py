"""papermd CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from papermd.convert import SOURCE_FORMATS, convert_file
from papermd.renderer.markdown_renderer import MarkdownRenderer


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), required=True, help="Output Markdown path")
@click.option(
    "--format",
    "source_format",
    type=click.Choice(SOURCE_FORMATS, case_sensitive=False),
    default="auto",
    show_default=True,
    help="Input format (auto detects from suffix and content)",
)
@click.option("--no-floats", is_flag=True, help="Omit the trailing Figures and Tables section")
@click.option("--no-footnotes", is_flag=True, help="Omit the trailing Footnotes section")
@click.option("--verbose", "-v", is_flag=True, help="Log parsing details to stderr")
def main(
    input_path: Path,
    output: Path,
    source_format: str,
    no_floats: bool,
    no_footnotes: bool,
    verbose: bool,
) -> None:
    """Convert a JATS XML (PMC) or arXiv HTML article into Markdown."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    renderer = MarkdownRenderer(include_floats=not no_floats, include_footnotes=not no_footnotes)
    result = convert_file(input_path, output, source_format=source_format.lower(), renderer=renderer)
    if not result.success:
        raise click.ClickException(f"Could not convert {input_path.name}: {result.error}")

    click.echo(f"Converted: {output} ({result.sections} sections, {result.references} references)")


if __name__ == "__main__":  # pragma: no cover
    main()
