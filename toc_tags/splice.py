"""Insertion of rendered TOCs between marker tags."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from .arguments import parse_arguments
from .config import TocOptions
from .constants import TAG_LINE_END_PATTERN, TOC_LINE_PATTERN
from .exceptions import TagMismatchError, TocBoundsError
from .filesystem import collect_file_stat, read_text, write_text_atomic
from .generator import generate_toc
from .models import Document, SpliceResult, Tag, TagPair
from .parser import parse_document
from .selector import select_headings
from .tags import collect_tag_pairs

logger = logging.getLogger(__name__)


def check_bounds(pair: TagPair) -> None:
    """Ensure the start tag ends before the end tag begins.

    Raises:
        TocBoundsError: If the tags overlap.
    """
    if pair.start.end_offset > pair.end.start_offset:
        raise TocBoundsError(pair.start.end_offset, pair.end.start_offset)


def content_start(text: str, tag: Tag) -> int:
    """Return the offset where the TOC body begins: the line after `tag`.

    Blanks trailing the tag on its line stay with the tag.
    """
    match = TAG_LINE_END_PATTERN.match(text, tag.end_offset)
    return match.end() if match else tag.end_offset


def line_break_after(text: str, tag: Tag) -> str:
    """Return the line break ending the tag's line, ``\\n`` when there is none."""
    match = TAG_LINE_END_PATTERN.match(text, tag.end_offset)
    return match.group(1) if match else "\n"


def inner_content(text: str, pair: TagPair) -> str:
    check_bounds(pair)
    return text[pair.start.end_offset : pair.end.start_offset]


def looks_like_toc(content: str) -> bool:
    """Check whether text between tags could be a generated TOC.

    Every non-blank line has to look like a list item.

    Examples:
        looks_like_toc("\\n- [Intro](#intro)\\n")  # True
        looks_like_toc("\\nSome prose.\\n")  # False
    """
    return all(
        TOC_LINE_PATTERN.match(line) for line in content.splitlines() if line.strip()
    )


def insert_tocs(
    document: Document, options: TocOptions, check_current_content: bool = False
) -> SpliceResult:
    """Replace the content between every pair of marker tags with a fresh TOC.

    Tag pairs are processed from last to first and every replacement is
    applied in a single pass over the original text, so tag offsets never
    shift. Inline options in a start tag apply to that pair only.

    Args:
        document: Parsed document.
        options: Options layer the tags inherit from.
        check_current_content: Leave pairs alone whose current content does not
            look like a TOC, with a warning. Used when rewriting a file in place.

    Returns:
        SpliceResult: The new text and warnings, or an error and no text when
            the tags are malformed.

    Examples:
        result = insert_tocs(parse_document(text), TocOptions())
    """
    tag_name = options.resolve("tag")

    try:
        pairs = collect_tag_pairs(document, tag_name)
    except TagMismatchError as error:
        return SpliceResult(text=None, error=str(error))

    text = document.text
    warnings: list[str] = []
    edits: list[tuple[int, int, str]] = []

    for pair in reversed(pairs):
        check_bounds(pair)

        if check_current_content and not looks_like_toc(inner_content(text, pair)):
            logger.debug("Skipping %s tags on lines %d-%d", tag_name, pair.start.line, pair.end.line)
            warnings.insert(
                0,
                f"It doesn't look like the current content between the {tag_name} tags on line "
                f"{pair.start.line} and line {pair.end.line} is a toc. Not making changes here, "
                "just in case.",
            )
            continue

        tag_options, argument_warnings = parse_arguments(options, pair.start.args)
        warnings[0:0] = [f"line {pair.start.line}: {warning}" for warning in argument_warnings]

        resolved = tag_options.resolved()
        headings = select_headings(document.headings, resolved, pair)
        toc = generate_toc(headings, resolved, line_break_after(text, pair.start))
        logger.debug(
            "Rendering %d headings between %s tags on lines %d-%d",
            len(headings),
            tag_name,
            pair.start.line,
            pair.end.line,
        )

        edits.append((content_start(text, pair.start), pair.end.start_offset, toc))

    parts = []
    cursor = 0
    for start, end, toc in reversed(edits):
        parts.append(text[cursor:start])
        parts.append(toc)
        cursor = end
    parts.append(text[cursor:])

    return SpliceResult(text="".join(parts), warnings=warnings)


def insert_tocs_in_text(
    text: str, options: TocOptions | None = None, check_current_content: bool = False
) -> SpliceResult:
    """Parse `text` with the options' dialect and insert its TOCs.

    Examples:
        insert_tocs_in_text("<!-- toc -->\\n<!-- /toc -->\\n# Title\\n").text
    """
    options = options or TocOptions()
    document = parse_document(text, options.to_parser_options())
    return insert_tocs(document, options, check_current_content=check_current_content)


def insert_tocs_in_file(
    input_path: Path,
    output_path: Path | None,
    options: TocOptions,
    write_changes: bool = False,
    warn: Callable[[str], None] | None = None,
) -> SpliceResult:
    """Insert TOCs into a file's content, optionally writing the result.

    Existing content is only checked for TOC-likeness when the result
    overwrites the input file. Files whose content would not change are not
    rewritten.

    Args:
        input_path: Markdown file to read.
        output_path: File to write to; defaults to `input_path`.
        options: Options layer the tags inherit from.
        write_changes: Write the result to `output_path`.
        warn: Optional callback for non-fatal filesystem warnings.

    Returns:
        SpliceResult: Result of the insertion.

    Raises:
        IOError: If the input cannot be read, changes while being processed,
            or the output cannot be written.
    """
    output_path = output_path or input_path
    in_place = input_path == output_path
    input_stat = collect_file_stat(input_path)
    original = read_text(input_path)

    result = insert_tocs_in_text(
        original, options, check_current_content=write_changes and in_place
    )

    if write_changes and result.text is not None:
        current = original if in_place else _read_if_exists(output_path)
        if result.text != current:
            logger.debug("Writing %s", output_path)
            write_text_atomic(
                output_path,
                result.text,
                expected_stat=input_stat if in_place else None,
                warn=warn,
            )

    return result


def _read_if_exists(path: Path) -> str | None:
    return read_text(path) if path.exists() else None
