from __future__ import annotations

import os

import pytest

from toc_tags.slugify import generate_slug
from toc_tags.splice import insert_tocs_in_text

atheris = pytest.importorskip("atheris")


def test_generate_slug_with_fuzzed_input():
    data = os.urandom(4096)
    provider = atheris.FuzzedDataProvider(data)
    generated = set()

    for _ in range(128):
        if provider.remaining_bytes() == 0:
            break
        text = provider.ConsumeUnicodeNoSurrogates(64)
        slug = generate_slug(text)
        assert " " not in slug
        generated.add(slug)

    assert generated  # ensure we exercised the loop


def test_insert_tocs_with_fuzzed_headings():
    data = os.urandom(4096)
    provider = atheris.FuzzedDataProvider(data)
    lines = ["<!-- toc -->", "<!-- /toc -->"]

    while provider.remaining_bytes() > 0 and len(lines) < 34:
        level = provider.ConsumeIntInRange(1, 6)
        title = provider.ConsumeUnicodeNoSurrogates(32) or "Section"
        lines.append(f"{'#' * level} {title}")

    result = insert_tocs_in_text("\n".join(lines) + "\n")
    assert (result.text is None) != (result.error is None)


def test_insert_tocs_with_fuzzed_documents():
    data = os.urandom(4096)
    provider = atheris.FuzzedDataProvider(data)

    for _ in range(64):
        if provider.remaining_bytes() == 0:
            break
        text = provider.ConsumeUnicodeNoSurrogates(256)
        result = insert_tocs_in_text(text, check_current_content=provider.ConsumeBool())
        if result.error is None:
            assert result.text is not None
