from __future__ import annotations

import pytest

from toc_tags.config import ResolvedOptions, TocOptions
from toc_tags.generator import generate_toc, heading_entries, remove_emojis, render_toc
from toc_tags.models import Heading, Style
from toc_tags.slugify import generate_slug


def _headings(*items: tuple[int, str]) -> list[Heading]:
    return [
        Heading(level, index, generate_slug(text), text) for index, (level, text) in enumerate(items)
    ]


def _options(**values) -> ResolvedOptions:
    values.setdefault("bold", False)
    return TocOptions(**values).resolved()


def test_generate_toc_preserves_hierarchy():
    headings = _headings((1, "Intro"), (2, "Setup"), (3, "Deep"), (2, "Use"))

    assert generate_toc(headings, _options()) == (
        "- [Intro](#intro)\n"
        "  - [Setup](#setup)\n"
        "    - [Deep](#deep)\n"
        "  - [Use](#use)\n"
    )


def test_shallowest_level_starts_at_column_zero():
    headings = _headings((2, "B"), (1, "A"))

    assert generate_toc(headings, _options()) == "  - [B](#b)\n- [A](#a)\n"


def test_skipped_levels_indent_one_step_per_level():
    headings = _headings((1, "A"), (3, "B"))

    assert generate_toc(headings, _options()) == "- [A](#a)\n    - [B](#b)\n"


def test_numbered_counters_reset_when_leaving_a_level():
    headings = _headings((1, "A"), (2, "B"), (1, "C"))

    assert generate_toc(headings, _options(numbered=True)) == (
        "1. [A](#a)\n"
        "  1. [B](#b)\n"
        "2. [C](#c)\n"
    )


def test_numbered_siblings_count_up():
    headings = _headings((2, "a"), (3, "b"), (3, "c"), (2, "d"), (3, "e"))

    assert generate_toc(headings, _options(numbered=True)) == (
        "1. [a](#a)\n"
        "  1. [b](#b)\n"
        "  2. [c](#c)\n"
        "2. [d](#d)\n"
        "  1. [e](#e)\n"
    )


def test_numbered_bold_entries():
    headings = _headings((1, "Header1"), (3, "Header2"))

    assert generate_toc(headings, _options(numbered=True, bold=True)) == (
        "1. __[Header1](#header1)__\n"
        "    1. __[Header2](#header2)__\n"
    )


def test_bold_is_the_default():
    assert generate_toc(_headings((1, "A")), TocOptions().resolved()) == "- __[A](#a)__\n"


def test_plain_entries_have_no_links():
    assert generate_toc(_headings((1, "A"), (2, "B")), _options(plain=True)) == "- A\n  - B\n"


@pytest.mark.parametrize(
    ("style", "expected"),
    [
        (Style.FLAT, ["Banana", "Apple", "Cherry"]),
        (Style.REVERSED, ["Cherry", "Apple", "Banana"]),
        (Style.INCREASING, ["Apple", "Banana", "Cherry"]),
        (Style.DECREASING, ["Cherry", "Banana", "Apple"]),
    ],
)
def test_non_hierarchical_styles_render_flat(style: Style, expected: list[str]):
    headings = _headings((2, "Banana"), (1, "Apple"), (3, "Cherry"))

    toc = generate_toc(headings, _options(style=style, plain=True))

    assert toc == "".join(f"- {text}\n" for text in expected)


def test_sorted_numbered_entries():
    headings = _headings((2, "Banana"), (1, "Apple"))

    assert generate_toc(headings, _options(style=Style.INCREASING, numbered=True)) == (
        "1. [Apple](#apple)\n"
        "2. [Banana](#banana)\n"
    )


def test_heading_entries_sort_on_rendered_text():
    headings = _headings((1, "b"), (1, "a"))

    assert heading_entries(headings, _options(style=Style.INCREASING, bold=True)) == [
        "__[a](#a)__",
        "__[b](#b)__",
    ]


def test_remove_emojis():
    assert remove_emojis("Launch :rocket: day :+1:") == "Launch day "
    headings = _headings((1, "Launch :rocket: day"))

    assert generate_toc(headings, _options(plain=True, remove_emojis=True)) == "- Launch day\n"
    assert generate_toc(headings, _options(plain=True)) == "- Launch :rocket: day\n"


def test_emoji_shortcodes_are_ascii_only():
    assert remove_emojis("Menu :café: :tada:") == "Menu :café: "


def test_entries_use_the_given_line_break():
    headings = _headings((1, "A"), (2, "B"))

    assert generate_toc(headings, _options(), "\r\n") == "- [A](#a)\r\n  - [B](#b)\r\n"


def test_empty_headings_render_nothing():
    assert render_toc([], [], _options()) == ""
    assert generate_toc([], _options()) == ""
