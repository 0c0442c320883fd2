"""Table of contents rendering."""

from __future__ import annotations

from collections.abc import Sequence

from .config import ResolvedOptions
from .constants import EMOJI_PATTERN, INDENT, MAX_LEVEL, SPACES_PATTERN
from .models import Heading, Style


def remove_emojis(text: str) -> str:
    """Strip ``:shortcode:`` emojis and collapse the spaces they leave.

    Examples:
        remove_emojis(":rocket: Launch :tada: day")  # " Launch day"
    """
    return SPACES_PATTERN.sub(" ", EMOJI_PATTERN.sub("", text))


def heading_entries(headings: Sequence[Heading], options: ResolvedOptions) -> list[str]:
    """Build the text of each TOC entry.

    Entries are links to the heading anchors unless `plain` is set. Sorted
    styles sort the entries by their rendered text; reversed styles reverse
    the resulting order.

    Examples:
        heading_entries(document.headings, options.resolved())
    """
    entries = []

    for heading in headings:
        text = heading.text if options.plain else f"[{heading.text}](#{heading.anchor_id})"
        if options.remove_emojis:
            text = remove_emojis(text)
        entries.append(f"__{text}__" if options.bold else text)

    if options.style.is_sorted:
        entries.sort()
    if options.style.is_reversed:
        entries.reverse()

    return entries


def render_toc(
    headings: Sequence[Heading],
    entries: Sequence[str],
    options: ResolvedOptions,
    line_break: str = "\n",
) -> str:
    """Render TOC entries as a Markdown list.

    Only the hierarchy style nests entries; every other style renders a
    single level. Nested entries are indented by two spaces per level, with
    the shallowest level present at column 0. Numbered lists keep one
    counter per level and restart a level's counter when leaving it.

    Args:
        headings: Selected headings, in the order the entries were built from.
        entries: Entry texts from `heading_entries`.
        options: Resolved options of the TOC.
        line_break: Line ending of every entry, matching the document's.

    Returns:
        str: The list, one entry per line, ending with a line break; empty
            when there are no entries.

    Examples:
        render_toc(headings, heading_entries(headings, options), options)
    """
    hierarchical = options.style is Style.HIERARCHY
    numbers = [0] * (MAX_LEVEL + 2)
    opened = [False] * (MAX_LEVEL + 2)
    lines = []

    depth = 0
    if hierarchical and headings:
        depth = headings[0].level - min(heading.level for heading in headings)

    last_level = None
    for heading, entry in zip(headings, entries):
        level = heading.level if hierarchical else 1
        if last_level is None:
            last_level = level

        if last_level < level:
            for skipped in range(last_level + 1, level + 1):
                opened[skipped] = False
            depth += level - last_level
        elif last_level > level:
            for exited in range(last_level, level, -1):
                if opened[exited]:
                    numbers[exited] = 0
            depth -= last_level - level

        opened[level] = True
        if options.numbered:
            numbers[level] += 1
            marker = f"{numbers[level]}. "
        else:
            marker = "- "

        lines.append(f"{INDENT * depth}{marker}{entry}{line_break}")
        last_level = level

    return "".join(lines)


def generate_toc(
    headings: Sequence[Heading], options: ResolvedOptions, line_break: str = "\n"
) -> str:
    """Render the TOC for already selected headings."""
    return render_toc(headings, heading_entries(headings, options), options, line_break)
