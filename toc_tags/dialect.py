"""Markdown dialects and the parser options derived from them."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


@dataclass(frozen=True)
class ParserOptions:
    """Knobs controlling how headings are recognized and anchored.

    Attributes:
        require_space: ATX headings need whitespace after the ``#`` run.
        allow_leading_space: Heading markers may be indented by up to three
            spaces; when False they must start at column 0.
        setext_marker_length: Minimum length of a setext underline.
        empty_heading_without_space: A bare ``#`` run forms an empty heading
            even when `require_space` is set.
        heading_interrupts_item_paragraph: An indented heading line may
            interrupt a list item's paragraph.
        duped_dashes: Keep consecutive dashes in anchor ids.
        resolve_dupes: Suffix repeated anchor ids with ``-1``, ``-2``, ...
        dash_chars: Characters replaced by ``-`` in anchor ids.
        allowed_chars: Characters kept verbatim in anchor ids.
    """

    require_space: bool = True
    allow_leading_space: bool = True
    setext_marker_length: int = 1
    empty_heading_without_space: bool = True
    heading_interrupts_item_paragraph: bool = True
    duped_dashes: bool = True
    resolve_dupes: bool = True
    dash_chars: str = " -_"
    allowed_chars: str = ""


_COMMONMARK = ParserOptions()
_LEGACY = ParserOptions(
    require_space=False,
    empty_heading_without_space=False,
    heading_interrupts_item_paragraph=False,
)


class Variant(Enum):
    """Markdown dialect profiles.

    Each member carries the parser options used when no explicit knob
    overrides them.
    """

    COMMONMARK = "commonmark"
    COMMONMARK26 = "commonmark26"
    COMMONMARK27 = "commonmark27"
    COMMONMARK28 = "commonmark28"
    KRAMDOWN = "kramdown"
    MARKDOWN = "markdown"
    GITHUB_DOC = "githubdoc"
    GITHUB = "github"
    MULTI_MARKDOWN = "multimarkdown"
    PEGDOWN = "pegdown"
    PEGDOWN_STRICT = "pegdownstrict"
    GITLAB = "gitlab"

    @classmethod
    def from_name(cls, name: str) -> Variant:
        """Look up a variant by case-insensitive name.

        Raises:
            ValueError: If no variant has that name.

        Examples:
            Variant.from_name("GitHub")  # Variant.GITHUB
        """
        key = name.strip().lower().replace("-", "").replace("_", "")
        for variant in cls:
            if variant.value == key:
                return variant
        valid = ", ".join(variant.value for variant in cls)
        raise ValueError(f"Unknown variant '{name}'. Valid variants are: {valid}")

    @property
    def profile(self) -> ParserOptions:
        return _PROFILES[self]


_PROFILES = {
    Variant.COMMONMARK: _COMMONMARK,
    Variant.COMMONMARK26: _COMMONMARK,
    Variant.COMMONMARK27: _COMMONMARK,
    Variant.COMMONMARK28: _COMMONMARK,
    Variant.KRAMDOWN: replace(_LEGACY, require_space=True),
    Variant.MARKDOWN: _LEGACY,
    Variant.GITHUB_DOC: _COMMONMARK,
    Variant.GITHUB: _COMMONMARK,
    Variant.MULTI_MARKDOWN: _LEGACY,
    Variant.PEGDOWN: _LEGACY,
    Variant.PEGDOWN_STRICT: replace(_LEGACY, allow_leading_space=False),
    Variant.GITLAB: replace(_COMMONMARK, duped_dashes=False),
}
