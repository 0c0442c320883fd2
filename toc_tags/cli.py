"""
Creates or updates the tables of contents between marker tags in Markdown files.
With --check, reports out-of-date tables of contents instead of writing them.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .config import ConfigError, DocumentConfig, TocOptions, build_config, parse_levels
from .dialect import Variant
from .filesystem import (
    collect_file_stat,
    enforce_file_size,
    get_max_file_size,
    normalize_filepath,
    read_text,
)
from .models import Mode, Style
from .splice import insert_tocs_in_file

__all__ = ["cli"]

OUT_OF_DATE_MESSAGE = "Table of Contents is out of date. Run toc-tags without --check to update."
CHECK_FAILED_MESSAGE = (
    "One or more Table of Contents are out of date. Run toc-tags without --check to update."
)


def _relative(path: Path, base_dir: Path) -> str:
    try:
        return str(path.relative_to(base_dir))
    except ValueError:
        return str(path)


def _warn(message: str) -> None:
    click.echo(message, err=True)


def _select_documents(
    filepaths: tuple[str, ...], documents: list[DocumentConfig], options: TocOptions, base_dir: Path
) -> list[DocumentConfig]:
    if not filepaths:
        if not documents:
            raise click.UsageError("No files given and no documents configured.")
        return documents

    configured = {}
    for document in documents:
        try:
            configured[normalize_filepath(document.path, base_dir)] = document
        except ValueError:
            continue

    selected = []
    for filepath in filepaths:
        try:
            path = normalize_filepath(filepath, base_dir)
        except ValueError as error:
            raise click.BadParameter(str(error)) from error
        selected.append(configured.get(path) or DocumentConfig(path, options.child()))
    return selected


def _process_document(
    document: DocumentConfig, base_dir: Path, max_file_size: int, check: bool
) -> bool:
    """Insert or check the TOCs of one document; return True when out of date."""
    try:
        input_path = normalize_filepath(document.path, base_dir)
        targets = [
            (normalize_filepath(output, base_dir, must_exist=False), options)
            for output, options in document.targets()
        ]
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    relative_input = _relative(input_path, base_dir)
    out_of_date = False

    try:
        enforce_file_size(collect_file_stat(input_path), max_file_size, input_path)
    except IOError as error:
        raise click.ClickException(str(error)) from error

    for output_path, options in targets:
        try:
            result = insert_tocs_in_file(
                input_path, output_path, options, write_changes=not check, warn=_warn
            )
        except IOError as error:
            raise click.ClickException(str(error)) from error

        if result.error is not None:
            if not check:
                raise click.ClickException(f"{relative_input}: {result.error}")
            _warn(f"{relative_input}: {result.error}")
            continue

        for warning in result.warnings:
            _warn(f"{relative_input}: {warning}")

        if check:
            current = read_text(output_path) if output_path.exists() else None
            if current != result.text:
                _warn(f"{_relative(output_path, base_dir)}: {OUT_OF_DATE_MESSAGE}")
                out_of_date = True

    return out_of_date


@click.command()
@click.version_option(package_name="toc-tags")
@click.option("--check", is_flag=True, help="Report out-of-date TOCs instead of updating them")
@click.option("--tag", help="Name of the marker tag (default: toc)")
@click.option(
    "--variant",
    type=click.Choice([variant.value for variant in Variant], case_sensitive=False),
    help="Markdown dialect",
)
@click.option("--style", type=click.Choice([style.value for style in Style]), help="TOC style")
@click.option("--mode", type=click.Choice([mode.value for mode in Mode]), help="Headings to include")
@click.option("--levels", help="Heading levels to include, e.g. 1-3,5")
@click.option("--bold/--no-bold", default=None, help="Render entries in bold")
@click.option("--numbered/--no-numbered", default=None, help="Number the entries")
@click.option("--plain/--no-plain", default=None, help="Render entries without links")
@click.option("--remove-emojis/--keep-emojis", default=None, help="Strip :emoji: shortcodes")
@click.option("-v", "--verbose", is_flag=True, help="Log debug information")
@click.argument("filepaths", nargs=-1, type=click.Path(exists=True, dir_okay=False))
def cli(
    filepaths: tuple[str, ...],
    check: bool = False,
    tag: str | None = None,
    variant: str | None = None,
    style: str | None = None,
    mode: str | None = None,
    levels: str | None = None,
    bold: bool | None = None,
    numbered: bool | None = None,
    plain: bool | None = None,
    remove_emojis: bool | None = None,
    verbose: bool = False,
):
    """
    Entry point for inserting or checking Markdown tables of contents.

    Without FILEPATHS, the documents listed in the configuration file are
    processed, including their configured output files.

    Raises:
        click.BadParameter: If CLI parameters reference invalid paths or contain
            unsupported overrides, including invalid configuration values.
        click.ClickException: If marker tags are malformed, filesystem safety
            checks fail, or a checked TOC is out of date.

    Examples:
        toc-tags README.md --style flat --levels 2-3
        toc-tags --check
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    base_dir = Path.cwd().resolve()
    try:
        config = build_config(
            base_dir,
            tag=tag,
            variant=Variant.from_name(variant) if variant else None,
            style=Style(style) if style else None,
            mode=Mode(mode) if mode else None,
            levels=parse_levels(levels) if levels else None,
            bold=bold,
            numbered=numbered,
            plain=plain,
            remove_emojis=remove_emojis,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size()
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    documents = _select_documents(filepaths, config.documents, config.options, base_dir)

    out_of_date = False
    for document in documents:
        out_of_date = _process_document(document, base_dir, max_file_size, check) or out_of_date

    if out_of_date:
        raise click.ClickException(CHECK_FAILED_MESSAGE)


if __name__ == "__main__":
    cli()
