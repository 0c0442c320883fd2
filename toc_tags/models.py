"""Data models for toc-tags."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from enum import Enum, auto


class Style(Enum):
    """Order and shape of a rendered TOC.

    Attributes:
        HIERARCHY: Nested by heading level, in document order.
        FLAT: Single level, in document order.
        REVERSED: Single level, in reverse document order.
        INCREASING: Single level, sorted by rendered text.
        DECREASING: Single level, sorted by rendered text, descending.
    """

    HIERARCHY = "hierarchy"
    FLAT = "flat"
    REVERSED = "reversed"
    INCREASING = "increasing"
    DECREASING = "decreasing"

    @property
    def is_sorted(self) -> bool:
        return self in (Style.INCREASING, Style.DECREASING)

    @property
    def is_reversed(self) -> bool:
        return self in (Style.REVERSED, Style.DECREASING)


class Mode(Enum):
    """Which headings a TOC considers.

    Attributes:
        NORMAL: Headings after the TOC.
        FULL: All headings in the document.
        LOCAL: Headings after the TOC within the enclosing section.
    """

    NORMAL = "normal"
    FULL = "full"
    LOCAL = "local"


class ParserState(Enum):
    """Parser states used while scanning Markdown content.

    Attributes:
        NORMAL: Default state for regular text.
        IN_FENCED_CODE: Inside a fenced code block.
        IN_INDENTED_CODE: Inside an indented code block.
        IN_COMMENT: Inside a multi-line HTML comment block.
    """

    NORMAL = auto()
    IN_FENCED_CODE = auto()
    IN_INDENTED_CODE = auto()
    IN_COMMENT = auto()


@dataclass
class ParserContext:
    """Encapsulate parser state while walking Markdown text.

    Attributes:
        state: Current parser state.
        fence_char: Fence character that opened a fenced code block, if any.
        fence_length: Number of fence characters that opened the block.
        fence_indent_columns: Indentation width preceding the opening fence.
        paragraph: Offsets and text of the lines of the open paragraph.
        item_content_column: Content column of the list item whose paragraph
            is open, or None.
        comment_start: Offset where the open comment block started.
    """

    state: ParserState = ParserState.NORMAL
    fence_char: str | None = None
    fence_length: int = 0
    fence_indent_columns: int = 0
    paragraph: list[tuple[int, str]] = field(default_factory=list)
    item_content_column: int | None = None
    comment_start: int = 0


@dataclass(frozen=True)
class Heading:
    """A heading located in a document.

    Attributes:
        level: Nesting level, 1 to 6.
        start_offset: Offset of the first character of the heading.
        anchor_id: Unique anchor generated for the heading.
        text: Plain text of the heading, without formatting.
    """

    level: int
    start_offset: int
    anchor_id: str
    text: str


@dataclass(frozen=True)
class CommentBlock:
    """An HTML comment block.

    Attributes:
        start_offset: Offset of the first character of the block.
        end_offset: Offset just past the last character of the block.
        text: Source text of the block.
    """

    start_offset: int
    end_offset: int
    text: str


@dataclass(frozen=True)
class Document:
    """Parsed, read-only view of a Markdown document.

    Attributes:
        text: Full source text.
        headings: Headings in document order.
        comment_blocks: HTML comment blocks in document order.
        line_starts: Offset of the first character of every line.
    """

    text: str
    headings: tuple[Heading, ...]
    comment_blocks: tuple[CommentBlock, ...]
    line_starts: tuple[int, ...] = field(default=(0,), repr=False, compare=False)

    def line_of(self, offset: int) -> int:
        """Return the 1-based line number containing `offset`."""
        return bisect.bisect_right(self.line_starts, offset)


@dataclass(frozen=True, eq=False)
class Tag:
    """One occurrence of a marker tag.

    Attributes:
        container: Comment block holding the tag.
        name: Tag name.
        is_end_tag: True for ``<!-- /name -->``.
        args: Inline argument text following the name.
        start_offset: Offset of the comment's ``<!--``.
        end_offset: Offset just past the comment's ``-->``.
        line: 1-based line number of the comment.
    """

    container: CommentBlock
    name: str
    is_end_tag: bool
    args: str
    start_offset: int
    end_offset: int
    line: int

    @property
    def is_start_tag(self) -> bool:
        return not self.is_end_tag


@dataclass(frozen=True)
class TagPair:
    """Matched start and end tags."""

    start: Tag
    end: Tag


@dataclass
class SpliceResult:
    """Outcome of inserting TOCs into a document.

    Attributes:
        text: New document text, or None when `error` is set.
        warnings: Non-fatal problems, in tag order.
        error: Structural error that aborted the pass, or None.
    """

    text: str | None
    warnings: list[str] = field(default_factory=list)
    error: str | None = None
