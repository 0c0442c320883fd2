"""Discovery and pairing of TOC marker tags."""

from __future__ import annotations

from .constants import TAG_COMMENT_PATTERN, TAG_CONTENT_PATTERN
from .exceptions import TagMismatchError
from .models import CommentBlock, Document, Tag, TagPair


def tags_in_block(document: Document, block: CommentBlock, name: str) -> list[Tag]:
    """Find the tags called `name` inside one comment block.

    A comment only counts as a tag when it starts a line; comments further
    along a line are ignored.

    Examples:
        tags_in_block(document, block, "toc")
    """
    tags = []

    for match in TAG_COMMENT_PATTERN.finditer(block.text):
        start = block.start_offset + match.start()
        if start != 0 and document.text[start - 1] != "\n":
            continue

        content = TAG_CONTENT_PATTERN.fullmatch(match.group(1))
        if content is None or content.group(2) != name:
            continue

        tags.append(
            Tag(
                container=block,
                name=content.group(2),
                is_end_tag=bool(content.group(1)),
                args=content.group(3),
                start_offset=start,
                end_offset=block.start_offset + match.end(),
                line=document.line_of(start),
            )
        )

    return tags


def collect_tag_pairs(document: Document, name: str) -> list[TagPair]:
    """Pair up the start and end tags called `name`, in document order.

    Args:
        document: Parsed document to scan.
        name: Tag name, for example ``"toc"``.

    Returns:
        list[TagPair]: Matched pairs, ordered by start tag position.

    Raises:
        TagMismatchError: If a start tag opens while another is open, an end
            tag has no start tag, or a start tag is never closed.

    Examples:
        collect_tag_pairs(parse_document("<!-- toc -->\\n<!-- /toc -->\\n"), "toc")
    """
    pairs: list[TagPair] = []
    open_tag: Tag | None = None

    for block in document.comment_blocks:
        for tag in tags_in_block(document, block, name):
            if tag.is_start_tag:
                if open_tag is not None:
                    raise TagMismatchError(
                        f"Opening {name} tag found on line {tag.line} while previous "
                        f"{name} tag (on line {open_tag.line}) wasn't closed yet"
                    )
                open_tag = tag
                continue

            if open_tag is None:
                raise TagMismatchError(
                    f"Closing {name} tag on line {tag.line} does not have a corresponding "
                    "opening tag"
                )
            pairs.append(TagPair(open_tag, tag))
            open_tag = None

    if open_tag is not None:
        raise TagMismatchError(
            f"Opening {name} tag on line {open_tag.line} does not have a corresponding "
            "closing tag"
        )

    return pairs
