"""Markdown parsing utilities.

Scans a Markdown document line by line to locate headings and HTML comment
blocks, skipping fenced and indented code.
"""

from __future__ import annotations

import html
import re
import unicodedata
from collections.abc import Iterator

from .constants import (
    AUTOLINK_PATTERN,
    CLOSING_FENCE_MAX_INDENT,
    CLOSING_SEQUENCE_PATTERN,
    CODE_FENCE_PATTERN,
    COMMENT_CLOSE,
    COMMENT_OPEN,
    DELIMITER_RUN_PATTERN,
    ESCAPABLE_PATTERN,
    INLINE_HTML_PATTERN,
    LIST_ITEM_PATTERN,
    SETEXT_UNDERLINE_PATTERN,
    THEMATIC_BREAK_PATTERN,
)
from .dialect import ParserOptions
from .models import CommentBlock, Document, Heading, ParserContext, ParserState
from .slugify import AnchorIdGenerator


def is_escaped(text: str, pos: int) -> bool:
    """Determine whether a character is escaped by preceding backslashes.

    Counts consecutive backslashes immediately before `pos`; an odd count marks
    the character as escaped.

    Examples:
        is_escaped("\\\\*", 2)  # False, two backslashes
        is_escaped("\\*", 1)  # True, one backslash
    """
    backslash_count = 0
    i = pos - 1
    while i >= 0 and text[i] == "\\":
        backslash_count += 1
        i -= 1

    return backslash_count % 2 == 1


def find_inline_code_spans(text: str) -> list[tuple[int, int]]:
    """Locate inline code spans using CommonMark-style backticks.

    Inline spans must start and end with backtick sequences of equal length.

    Returns:
        list[tuple[int, int]]: Start (inclusive) and end (exclusive) positions
            for each inline code span.

    Examples:
        find_inline_code_spans("`code`")  # [(0, 6)]
        find_inline_code_spans("``more`` text")  # [(0, 8)]
    """
    spans = []
    i = 0

    while i < len(text):
        if text[i] != "`" or is_escaped(text, i):
            i += 1
            continue

        start = i
        while i < len(text) and text[i] == "`":
            i += 1
        opening_length = i - start

        # Closing run must have exactly the opening length
        probe = i
        while probe < len(text):
            if text[probe] != "`":
                probe += 1
                continue
            run_start = probe
            while probe < len(text) and text[probe] == "`":
                probe += 1
            if probe - run_start == opening_length:
                spans.append((start, probe))
                i = probe
                break

    return spans


def _match_link(text: str, pos: int) -> tuple[str, int] | None:
    """Match ``[label](dest)`` or ``[label][ref]`` starting at `pos`.

    Returns:
        tuple[str, int] | None: The label and the offset just past the link.
    """
    depth = 0
    j = pos
    while j < len(text):
        if text[j] == "\\":
            j += 2
            continue
        if text[j] == "[":
            depth += 1
        elif text[j] == "]":
            depth -= 1
            if depth == 0:
                break
        j += 1
    else:
        return None

    label = text[pos + 1 : j]
    k = j + 1
    if k < len(text) and text[k] == "(":
        depth = 1
        k += 1
        while k < len(text) and depth:
            if text[k] == "\\":
                k += 2
                continue
            if text[k] == "(":
                depth += 1
            elif text[k] == ")":
                depth -= 1
            k += 1
        if depth:
            return None
        return label, k

    if k < len(text) and text[k] == "[":
        close = text.find("]", k + 1)
        if close == -1:
            return None
        return label, close + 1

    return None


def _strip_links(text: str) -> str:
    result: list[str] = []
    i = 0
    while i < len(text):
        if text[i] == "[":
            match = _match_link(text, i)
            if match is not None:
                label, end = match
                # Images keep their alt text
                if result and result[-1] == "!":
                    result.pop()
                result.append(_strip_links(label))
                i = end
                continue
        result.append(text[i])
        i += 1
    return "".join(result)


def _is_punctuation(character: str) -> bool:
    return unicodedata.category(character)[0] in "PS"


def _strip_emphasis(text: str) -> str:
    """Drop matched emphasis and strikethrough delimiter runs."""
    runs = []
    for match in DELIMITER_RUN_PATTERN.finditer(text):
        before = text[match.start() - 1] if match.start() > 0 else " "
        after = text[match.end()] if match.end() < len(text) else " "
        left_flanking = not after.isspace() and (
            not _is_punctuation(after) or before.isspace() or _is_punctuation(before)
        )
        right_flanking = not before.isspace() and (
            not _is_punctuation(before) or after.isspace() or _is_punctuation(after)
        )
        if match.group()[0] == "_":
            can_open = left_flanking and (not right_flanking or _is_punctuation(before))
            can_close = right_flanking and (not left_flanking or _is_punctuation(after))
        else:
            can_open, can_close = left_flanking, right_flanking
        runs.append((match.start(), match.end(), match.group()[0], can_open, can_close))

    removed: list[tuple[int, int]] = []
    openers: list[tuple[int, int, str, bool, bool]] = []
    for run in runs:
        start, end, character, can_open, can_close = run
        if can_close:
            for index in range(len(openers) - 1, -1, -1):
                if openers[index][2] == character:
                    removed.append(openers[index][:2])
                    removed.append((start, end))
                    del openers[index:]
                    break
            else:
                if can_open:
                    openers.append(run)
            continue
        if can_open:
            openers.append(run)

    for start, end in sorted(removed, reverse=True):
        text = text[:start] + text[end:]
    return text


def heading_plain_text(raw: str) -> str:
    """Reduce inline Markdown to the plain text a reader sees.

    Code span contents and backslash-escaped characters are kept literally;
    links and images keep their text; emphasis markers, inline HTML tags and
    entity references are resolved.

    Examples:
        heading_plain_text("Use **bold** and `code`")  # "Use bold and code"
        heading_plain_text("See [docs](https://example.com)")  # "See docs"
    """
    literals: list[str] = []

    def placeholder(literal: str) -> str:
        literals.append(literal)
        return f"\x00{len(literals) - 1}\x00"

    def protect_escapes(segment: str) -> str:
        return ESCAPABLE_PATTERN.sub(lambda match: placeholder(match.group(1)), segment)

    parts: list[str] = []
    offset = 0
    for start, end in find_inline_code_spans(raw):
        parts.append(protect_escapes(raw[offset:start]))
        fence = len(raw[start:end]) - len(raw[start:end].lstrip("`"))
        code = raw[start + fence : end - fence].replace("\n", " ")
        if code.startswith(" ") and code.endswith(" ") and code.strip():
            code = code[1:-1]
        parts.append(placeholder(code))
        offset = end
    parts.append(protect_escapes(raw[offset:]))

    text = _strip_links("".join(parts))
    text = AUTOLINK_PATTERN.sub(r"\1", text)
    text = INLINE_HTML_PATTERN.sub("", text)
    text = _strip_emphasis(text)
    text = html.unescape(text)

    for index, literal in enumerate(literals):
        text = text.replace(f"\x00{index}\x00", literal)

    return text.strip()


def _leading_whitespace_columns(line: str) -> int:
    """Compute the column width of leading whitespace.

    Tabs advance to the next multiple of four columns to match Markdown
    indentation rules.

    Examples:
        _leading_whitespace_columns("    text")  # 4
        _leading_whitespace_columns("\\ttext")  # 4
    """
    columns = 0
    for character in line:
        if character == " ":
            columns += 1
            continue
        if character == "\t":
            columns += 4 - (columns % 4)
            continue
        break
    return columns


def _try_open_fence(ctx: ParserContext, line: str) -> bool:
    """Detect the start of a fenced code block.

    Examples:
        _try_open_fence(ParserContext(), "```python\\n")  # True
    """
    if ctx.state is not ParserState.NORMAL:
        return False

    fence_match = CODE_FENCE_PATTERN.match(line)
    if not fence_match:
        return False

    indent_columns = _leading_whitespace_columns(fence_match.group("indent") or "")
    if indent_columns > CLOSING_FENCE_MAX_INDENT:
        return False

    fence_sequence = fence_match.group("fence")
    if fence_sequence[0] == "`" and "`" in fence_match.group("info"):
        return False

    ctx.state = ParserState.IN_FENCED_CODE
    ctx.fence_char = fence_sequence[0]
    ctx.fence_length = len(fence_sequence)
    ctx.fence_indent_columns = indent_columns
    return True


def _try_close_fence(ctx: ParserContext, line: str) -> bool:
    """Attempt to close the active fenced code block.

    Examples:
        ctx = ParserContext(state=ParserState.IN_FENCED_CODE, fence_char="`", fence_length=3)
        _try_close_fence(ctx, "```\\n")
    """
    if ctx.state is not ParserState.IN_FENCED_CODE or ctx.fence_char is None:
        return False

    indent_columns = _leading_whitespace_columns(line)
    stripped_line = line.lstrip(" \t")
    if not stripped_line or stripped_line[0] != ctx.fence_char:
        return False

    fence_run_length = len(stripped_line) - len(stripped_line.lstrip(ctx.fence_char))
    if fence_run_length < ctx.fence_length:
        return False

    if stripped_line[fence_run_length:].strip():
        return False

    if indent_columns > CLOSING_FENCE_MAX_INDENT:
        return False

    ctx.state = ParserState.NORMAL
    ctx.fence_char = None
    ctx.fence_length = 0
    ctx.fence_indent_columns = 0
    return True


def _try_enter_indented_code(ctx: ParserContext, line: str) -> bool:
    """Detect entry into an indented code block.

    Indented code cannot interrupt a paragraph.

    Examples:
        _try_enter_indented_code(ParserContext(), "    indented")  # True
    """
    if ctx.state is not ParserState.NORMAL or ctx.paragraph:
        return False

    if ctx.item_content_column is not None:
        return False

    if line.strip() and _leading_whitespace_columns(line) >= 4:
        ctx.state = ParserState.IN_INDENTED_CODE
        return True

    return False


def _try_exit_indented_code(ctx: ParserContext, line: str) -> bool:
    """Determine whether to stay in an indented code block.

    Returns:
        bool: True when the parser should remain in code mode for the line
            (blank or still indented); False when the parser should resume
            normal processing.
    """
    if ctx.state is not ParserState.IN_INDENTED_CODE:
        return False

    if line.strip() == "":
        return True

    if _leading_whitespace_columns(line) >= 4:
        return True

    ctx.state = ParserState.NORMAL
    return False


def _match_atx_heading(body: str, options: ParserOptions) -> tuple[int, str] | None:
    """Match an ATX heading in a line stripped of its indentation.

    Returns:
        tuple[int, str] | None: The level and raw heading content.

    Examples:
        _match_atx_heading("## Title ##", ParserOptions())  # (2, "Title")
        _match_atx_heading("#Title", ParserOptions())  # None
    """
    level = len(body) - len(body.lstrip("#"))
    if not 1 <= level <= 6:
        return None

    rest = body[level:]
    if not rest.strip():
        if not rest and not options.empty_heading_without_space:
            return None
        return level, ""
    if rest[0] not in " \t" and options.require_space:
        return None

    content = CLOSING_SEQUENCE_PATTERN.sub("", rest.strip())
    return level, content.strip()


def _match_setext_underline(body: str, options: ParserOptions) -> int | None:
    match = SETEXT_UNDERLINE_PATTERN.match(body)
    if not match or len(match.group("marker")) < options.setext_marker_length:
        return None
    return 1 if match.group("marker")[0] == "=" else 2


def _iter_lines(text: str) -> Iterator[tuple[int, int, str]]:
    """Yield each line's start and end offsets and its text.

    The end offset includes the line break; the text does not.
    """
    offset = 0
    for line in text.split("\n"):
        end = min(offset + len(line) + 1, len(text))
        yield offset, end, line.removesuffix("\r")
        offset += len(line) + 1


def _close_paragraph(ctx: ParserContext) -> None:
    ctx.paragraph = []
    ctx.item_content_column = None


def parse_document(text: str, options: ParserOptions | None = None) -> Document:
    """Parse Markdown text into a `Document` of headings and comment blocks.

    Recognizes ATX and setext headings and HTML comment blocks outside code
    blocks. Headings get anchor ids in document order.

    Args:
        text: The Markdown source.
        options: Dialect options. Defaults to `ParserOptions()`.

    Returns:
        Document: Headings, comment blocks and line offsets of `text`.

    Examples:
        parse_document("# Title\\n\\n## Section\\n").headings[1].anchor_id  # "section"
    """
    options = options or ParserOptions()
    anchors = AnchorIdGenerator(options)
    headings: list[Heading] = []
    comment_blocks: list[CommentBlock] = []
    line_starts = [0]
    line_starts.extend(match.end() for match in re.finditer("\n", text))

    def add_heading(level: int, start_offset: int, raw: str) -> None:
        plain = heading_plain_text(raw)
        headings.append(Heading(level, start_offset, anchors.next_id(plain), plain))

    ctx = ParserContext()

    for offset, line_end, line in _iter_lines(text):
        if ctx.state is ParserState.IN_COMMENT:
            if COMMENT_CLOSE in line:
                comment_blocks.append(
                    CommentBlock(ctx.comment_start, line_end, text[ctx.comment_start : line_end])
                )
                ctx.state = ParserState.NORMAL
            continue

        # Tracks fenced code blocks (``` or ~~~, including info strings)
        if ctx.state is ParserState.IN_FENCED_CODE:
            _try_close_fence(ctx, line)
            continue

        if ctx.state is ParserState.IN_INDENTED_CODE:
            if _try_exit_indented_code(ctx, line):
                continue

        if not line.strip():
            _close_paragraph(ctx)
            continue

        if _try_enter_indented_code(ctx, line):
            continue

        indent = _leading_whitespace_columns(line)
        body = line.lstrip(" \t")
        body_offset = offset + len(line) - len(body)
        in_item = ctx.item_content_column is not None and indent >= ctx.item_content_column
        block_indent = indent - ctx.item_content_column if in_item else indent
        if block_indent > 3 or (block_indent and not options.allow_leading_space):
            # Too indented to start a block: paragraph continuation
            if ctx.item_content_column is None:
                ctx.paragraph.append((body_offset, body))
            continue

        if _try_open_fence(ctx, body):
            _close_paragraph(ctx)
            continue

        if body.startswith(COMMENT_OPEN):
            _close_paragraph(ctx)
            if COMMENT_CLOSE in body[len(COMMENT_OPEN) :]:
                comment_blocks.append(CommentBlock(offset, line_end, text[offset:line_end]))
            else:
                ctx.state = ParserState.IN_COMMENT
                ctx.comment_start = offset
            continue

        setext_level = _match_setext_underline(body, options) if ctx.paragraph else None
        if setext_level is not None:
            start_offset = ctx.paragraph[0][0]
            raw = " ".join(part.strip() for _, part in ctx.paragraph)
            add_heading(setext_level, start_offset, raw)
            _close_paragraph(ctx)
            continue

        atx = _match_atx_heading(body, options)
        if atx is not None:
            if in_item and not options.heading_interrupts_item_paragraph:
                continue
            add_heading(atx[0], body_offset, atx[1])
            _close_paragraph(ctx)
            continue

        if THEMATIC_BREAK_PATTERN.match(body):
            _close_paragraph(ctx)
            continue

        item_match = LIST_ITEM_PATTERN.match(body)
        if item_match:
            _close_paragraph(ctx)
            ctx.item_content_column = indent + len(item_match.group(0))
            continue

        if ctx.item_content_column is None:
            ctx.paragraph.append((body_offset, body))

    if ctx.state is ParserState.IN_COMMENT:
        comment_blocks.append(
            CommentBlock(ctx.comment_start, len(text), text[ctx.comment_start :])
        )

    return Document(
        text=text,
        headings=tuple(headings),
        comment_blocks=tuple(comment_blocks),
        line_starts=tuple(line_starts),
    )
