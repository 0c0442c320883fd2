from __future__ import annotations

import pytest

from toc_tags.exceptions import TagMismatchError
from toc_tags.parser import parse_document
from toc_tags.tags import collect_tag_pairs, tags_in_block


def _pairs(text: str, name: str = "toc"):
    return collect_tag_pairs(parse_document(text), name)


def test_collects_pairs_in_document_order():
    text = "<!-- toc -->\n<!-- /toc -->\n# A\n<!-- toc levels=2 -->\n<!-- /toc -->\n"
    pairs = _pairs(text)

    assert [(pair.start.line, pair.end.line) for pair in pairs] == [(1, 2), (4, 5)]
    assert pairs[1].start.args == "levels=2"
    assert pairs[0].start.is_start_tag
    assert pairs[0].end.is_end_tag


def test_tag_offsets_cover_the_comment():
    text = "Intro\n\n<!-- toc -->\n<!-- /toc -->\n"
    (pair,) = _pairs(text)

    assert text[pair.start.start_offset : pair.start.end_offset] == "<!-- toc -->"
    assert text[pair.end.start_offset : pair.end.end_offset] == "<!-- /toc -->"


def test_flexible_comment_delimiters():
    text = "<!----   foobar numbered=true--->\n<!-- /foobar -->\n"
    (pair,) = _pairs(text, "foobar")

    assert pair.start.args == "numbered=true"


def test_other_tag_names_are_ignored():
    text = "<!-- toc -->\n<!-- tocx -->\n<!-- comment -->\n<!-- /toc -->\n"

    assert len(_pairs(text)) == 1


def test_inline_comments_are_not_tags():
    document = parse_document("<!-- toc --> <!-- /toc -->\n")

    assert [tag.is_end_tag for tag in tags_in_block(document, document.comment_blocks[0], "toc")] == [
        False
    ]


def test_tags_in_multiline_comment_block():
    text = "<!-- note\n-->\n<!-- toc -->\n<!-- /toc -->\n"

    assert len(_pairs(text)) == 1


def test_tags_in_fenced_code_are_ignored():
    text = "```\n<!-- toc -->\n```\n"

    assert _pairs(text) == []


def test_no_tags():
    assert _pairs("# Title\n\nText.\n") == []


@pytest.mark.parametrize(
    ("text", "message"),
    [
        (
            "<!-- toc -->\n<!-- toc -->\n<!-- /toc -->",
            "Opening toc tag found on line 2 while previous toc tag (on line 1) wasn't closed yet",
        ),
        (
            "<!-- /toc -->\n",
            "Closing toc tag on line 1 does not have a corresponding opening tag",
        ),
        (
            "# Title\n<!-- toc -->\n",
            "Opening toc tag on line 2 does not have a corresponding closing tag",
        ),
        (
            "<!-- toc -->\n<!-- /toc -->\n\n<!-- /toc -->\n",
            "Closing toc tag on line 4 does not have a corresponding opening tag",
        ),
    ],
)
def test_mismatched_tags(text: str, message: str):
    with pytest.raises(TagMismatchError) as excinfo:
        _pairs(text)

    assert str(excinfo.value) == message
