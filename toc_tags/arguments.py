"""Parsing of the inline options written inside a start tag."""

from __future__ import annotations

from .config import TocOptions, parse_levels
from .constants import (
    ARGUMENT_PATTERN,
    OPT_BOLD,
    OPT_LEVELS,
    OPT_MODE,
    OPT_NUMBERED,
    OPT_PLAIN,
    OPT_STYLE,
    OPT_VARIANT,
)
from .exceptions import LevelsError
from .models import Mode, Style

STYLE_VALUES = ", ".join(f"'{style.value}'" for style in Style)
MODE_VALUES = ", ".join(f"'{mode.value}'" for mode in (Mode.NORMAL, Mode.FULL, Mode.LOCAL))


def split_arguments(text: str) -> list[tuple[str, str]]:
    """Split inline tag arguments into key/value pairs.

    Values may be quoted with single or double quotes; quotes and surrounding
    whitespace are removed. A key without ``=value`` gets an empty value.

    Examples:
        split_arguments('style=flat levels="1-2" numbered')
        # [("style", "flat"), ("levels", "1-2"), ("numbered", "")]
    """
    return [
        (match.group(1), (match.group(2) or "").strip().strip("\"'").strip())
        for match in ARGUMENT_PATTERN.finditer(text)
    ]


def _parse_boolean(key: str, value: str, warnings: list[str]) -> bool | None:
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    if not value.strip():
        warnings.append(f"No value specified for option '{key}'")
    else:
        warnings.append(f"Option '{key}' should be 'true' or 'false'")
    return None


def _choice_warning(key: str, value: str, valid: str) -> str:
    if not value.strip():
        return f"Missing argument for parameter {key}. Valid arguments are: {valid}."
    return f"Invalid argument for parameter {key}: '{value}'. Valid arguments are: {valid}."


def parse_arguments(base: TocOptions, text: str) -> tuple[TocOptions, list[str]]:
    """Overlay the inline options of a start tag on top of `base`.

    Bad options never raise: each problem becomes a warning and the affected
    option keeps its inherited value.

    Args:
        base: Options the tag inherits from.
        text: Argument text following the tag name.

    Returns:
        tuple[TocOptions, list[str]]: A new layer whose parent is `base`, and
            the warnings produced while parsing.

    Examples:
        options, warnings = parse_arguments(TocOptions(), "style=flat numbered=true")
    """
    options = base.child()
    warnings: list[str] = []

    for key, value in split_arguments(text):
        if key == OPT_STYLE:
            try:
                options.style = Style(value)
            except ValueError:
                warnings.append(_choice_warning(OPT_STYLE, value, STYLE_VALUES))

        elif key == OPT_MODE:
            try:
                options.mode = Mode(value)
            except ValueError:
                warnings.append(_choice_warning(OPT_MODE, value, MODE_VALUES))

        elif key in (OPT_NUMBERED, OPT_PLAIN, OPT_BOLD):
            parsed = _parse_boolean(key, value, warnings)
            if parsed is not None:
                setattr(options, key, parsed)

        elif key == OPT_LEVELS:
            if not value.strip():
                warnings.append(f"Missing argument for parameter {OPT_LEVELS}")
                continue
            try:
                options.levels = parse_levels(value)
            except LevelsError as error:
                warnings.append(f"Invalid argument for parameter {OPT_LEVELS}: {error.detail}")

        elif key == OPT_VARIANT:
            warnings.append(
                f"The option '{OPT_VARIANT}' can only be specified in the configuration, "
                f"not in the '{base.resolve('tag')}' tag"
            )

        else:
            warnings.append(f"Unknown option: '{key}'")

    return options, warnings
