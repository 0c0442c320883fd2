"""
toc-tags: Table of Contents synthesis for Markdown files.

Tables of contents are written between ``<!-- toc -->`` and ``<!-- /toc -->``
marker comments. This package can be used both as a CLI tool and as a library.

CLI Usage:
    toc-tags README.md
    toc-tags --check

Library Usage:
    from pathlib import Path
    from toc_tags import TocOptions, insert_tocs_in_text

    content = Path("README.md").read_text()
    result = insert_tocs_in_text(content, TocOptions(numbered=True))
    if result.error is None:
        Path("README.md").write_text(result.text)
"""

from .arguments import parse_arguments
from .config import ResolvedOptions, TocOptions, load_config, parse_levels
from .dialect import ParserOptions, Variant
from .exceptions import ConfigError, LevelsError, ParseError, TagMismatchError, TocBoundsError
from .generator import generate_toc, heading_entries, render_toc
from .models import Document, Heading, Mode, SpliceResult, Style
from .parser import heading_plain_text, parse_document
from .selector import select_headings
from .slugify import AnchorIdGenerator, generate_slug
from .splice import insert_tocs, insert_tocs_in_file, insert_tocs_in_text
from .tags import collect_tag_pairs

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "parse_document",
    "insert_tocs",
    "insert_tocs_in_text",
    "insert_tocs_in_file",
    "collect_tag_pairs",
    "parse_arguments",
    "select_headings",
    "generate_toc",
    "heading_entries",
    "render_toc",
    "generate_slug",
    "heading_plain_text",
    "AnchorIdGenerator",
    # Configuration
    "TocOptions",
    "ResolvedOptions",
    "ParserOptions",
    "Variant",
    "Style",
    "Mode",
    "load_config",
    "parse_levels",
    # Data models
    "Document",
    "Heading",
    "SpliceResult",
    # Exceptions
    "ParseError",
    "TagMismatchError",
    "TocBoundsError",
    "ConfigError",
    "LevelsError",
    # Version
    "__version__",
]
