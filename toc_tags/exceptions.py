"""Package-specific exception types."""

from __future__ import annotations


class ParseError(ValueError):
    """Base class for parsing-related errors.

    Represents errors encountered while reading the structure of a Markdown
    document, such as badly nested TOC marker tags.
    """


class TagMismatchError(ParseError):
    """Raised when start and end marker tags do not pair up.

    Args:
        message: Human-readable description, including 1-based line numbers.
    """


class TocBoundsError(ParseError):
    """Raised when a start tag ends after its matching end tag begins.

    Correct tag scanning never produces such a pair.

    Args:
        start_offset: Offset just past the start tag's comment.
        end_offset: Offset of the end tag's comment.
    """

    def __init__(self, start_offset: int, end_offset: int):
        self.start_offset = start_offset
        self.end_offset = end_offset
        super().__init__(
            f"Start tag ends at offset {start_offset}, after the end tag starts "
            f"at offset {end_offset}"
        )


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`style` must be one of: hierarchy, flat")
    """


class LevelsError(ConfigError):
    """Raised when a heading level specification cannot be parsed.

    Args:
        spec: The full specification string.
        detail: Description of the offending part.
    """

    def __init__(self, spec: str, detail: str):
        self.spec = spec
        self.detail = detail
        super().__init__(f"Invalid level specification: '{spec}' ({detail})")
