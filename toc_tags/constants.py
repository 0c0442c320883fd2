"""Constants used across the toc-tags package."""

from __future__ import annotations

import re

DEFAULT_TAG = "toc"

# Inline option names accepted in a start tag
OPT_STYLE = "style"
OPT_MODE = "mode"
OPT_LEVELS = "levels"
OPT_NUMBERED = "numbered"
OPT_PLAIN = "plain"
OPT_BOLD = "bold"
OPT_VARIANT = "variant"

# Rendering
INDENT = "  "
MAX_LEVEL = 6

# Markdown block patterns
CODE_FENCE_PATTERN = re.compile(r"^(?P<indent>\s{0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
CLOSING_FENCE_MAX_INDENT = 3
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"
SETEXT_UNDERLINE_PATTERN = re.compile(r"^(?P<marker>=+|-+)[ \t]*$")
THEMATIC_BREAK_PATTERN = re.compile(r"^(?:(?:\*[ \t]*){3,}|(?:-[ \t]*){3,}|(?:_[ \t]*){3,})$")
LIST_ITEM_PATTERN = re.compile(r"^(?:[-+*]|\d{1,9}[.)])(?:[ \t]+|$)")
CLOSING_SEQUENCE_PATTERN = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")

# Inline patterns used to reduce heading content to plain text
ESCAPABLE_PATTERN = re.compile(r"\\([!-/:-@\[-`{-~])")
DELIMITER_RUN_PATTERN = re.compile(r"\*+|_+|~~")
AUTOLINK_PATTERN = re.compile(r"<([A-Za-z][A-Za-z0-9+.-]{1,31}:[^<>\s]*)>")
INLINE_HTML_PATTERN = re.compile(
    r"<!--.*?-->|</?[A-Za-z][A-Za-z0-9-]*(?:\s+[^<>]*)?/?>", re.DOTALL
)

# Marker tags: `<!-- name args -->`, comment delimiters may be longer
TAG_COMMENT_PATTERN = re.compile(r"<!--+\s*(.*?)\s*--+>")
TAG_CONTENT_PATTERN = re.compile(r"\s*(/?)(\S*)\s*(.*)", re.DOTALL)
ARGUMENT_PATTERN = re.compile(r"""\b([^\s=]+)\s*(?:=\s*(["'][^"']*["']|\S+))?""")

# A line that looks like part of a generated TOC
TOC_LINE_PATTERN = re.compile(r"^\s*(?:-|\d+\.)\s.*")

# Rest of the start tag line: trailing blanks and the line break
TAG_LINE_END_PATTERN = re.compile(r"[ \t]*(\r?\n)")

EMOJI_PATTERN = re.compile(r":[\w+-]+:", re.ASCII)
SPACES_PATTERN = re.compile(r" +")

# Files
MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mdown", ".mkd", ".mkdn", ".mdwn", ".mdtxt")
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
