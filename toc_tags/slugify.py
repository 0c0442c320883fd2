"""Anchor id generation for Markdown headings."""

from __future__ import annotations

from .dialect import ParserOptions


def generate_slug(title: str, options: ParserOptions | None = None) -> str:
    """Generate a GitHub-style anchor id from a heading's plain text.

    Letters are lowercased and digits kept. Characters listed in
    ``allowed_chars`` are kept verbatim; characters listed in ``dash_chars``
    become ``-``; everything else is dropped. Consecutive dashes collapse to
    one unless ``duped_dashes`` is set.

    Args:
        title: Plain heading text.
        options: Parser options supplying the character classes. Defaults to
            `ParserOptions()`.

    Returns:
        str: The anchor id, possibly empty.

    Examples:
        generate_slug("Hello World")  # "hello-world"
        generate_slug("What's New?")  # "whats-new"
        generate_slug("Hea der   3")  # "hea-der---3"
    """
    options = options or ParserOptions()
    slug: list[str] = []

    for character in title:
        if character.isalpha():
            slug.append(character.lower())
        elif character.isdigit():
            slug.append(character)
        elif character in options.allowed_chars:
            slug.append(character)
        elif character in options.dash_chars:
            if not options.duped_dashes and slug and slug[-1] == "-":
                continue
            slug.append("-")

    return "".join(slug)


class AnchorIdGenerator:
    """Hand out unique anchor ids for the headings of one document.

    Deduplicates ids using GitHub-style numbering, including cascading
    collisions (for example, ``"Header"``, ``"Header"``, ``"Header 1"``
    yields ``header``, ``header-1``, ``header-1-1``).

    Examples:
        generator = AnchorIdGenerator()
        generator.next_id("Intro")  # "intro"
        generator.next_id("Intro")  # "intro-1"
    """

    def __init__(self, options: ParserOptions | None = None):
        self.options = options or ParserOptions()
        # slug_counters: next counter for each base slug
        # used_slugs: every slug handed out so far
        self.slug_counters: dict[str, int] = {}
        self.used_slugs: set[str] = set()

    def next_id(self, title: str) -> str:
        base_slug = generate_slug(title, self.options)
        if not base_slug or not self.options.resolve_dupes:
            return base_slug

        # First occurrence gets no suffix (count=0), then -1, -2, etc.
        count = self.slug_counters.get(base_slug, 0)
        link = base_slug if count == 0 else f"{base_slug}-{count}"

        # A slug might already be taken by a different heading whose base
        # slug happens to match our generated slug with counter.
        while link in self.used_slugs:
            count += 1
            link = f"{base_slug}-{count}"

        self.slug_counters[base_slug] = count + 1
        self.used_slugs.add(link)
        return link
