"""Selection of the headings a TOC lists."""

from __future__ import annotations

from collections.abc import Sequence

from .config import ResolvedOptions
from .models import Heading, TagPair


def enclosing_headings(
    headings: Sequence[Heading], pair: TagPair
) -> tuple[Heading | None, Heading | None]:
    """Find the section a TOC sits in.

    The section starts at the last heading before the start tag and ends at
    the first heading after the end tag whose level is at or above the
    starting heading's level.

    Returns:
        tuple[Heading | None, Heading | None]: The starting heading (None when
            the tag precedes every heading) and the ending heading (None when
            the section runs to the end of the document).
    """
    start_heading = None
    for heading in headings:
        if heading.start_offset >= pair.start.start_offset:
            break
        start_heading = heading

    if start_heading is None:
        return None, None

    for heading in headings:
        if heading.start_offset < pair.end.start_offset:
            continue
        if heading.level <= start_heading.level:
            return start_heading, heading

    return start_heading, None


def select_headings(
    headings: Sequence[Heading], options: ResolvedOptions, pair: TagPair
) -> list[Heading]:
    """Filter headings by level and mode, keeping document order.

    Normal mode keeps headings after the end tag's comment block, full mode
    keeps headings anywhere, and local mode further restricts normal mode to
    the section enclosing the tags.

    Examples:
        select_headings(document.headings, options.resolved(), pair)
    """
    if options.is_local:
        start_heading, end_heading = enclosing_headings(headings, pair)
        if start_heading is None:
            return []
    else:
        start_heading = end_heading = None

    boundary = pair.end.container.start_offset
    selected = []

    for heading in headings:
        if not options.is_level_included(heading.level):
            continue
        if not options.is_full and heading.start_offset <= boundary:
            continue
        if start_heading is not None and heading.start_offset <= start_heading.start_offset:
            continue
        if end_heading is not None and heading.start_offset >= end_heading.start_offset:
            continue
        selected.append(heading)

    return selected
