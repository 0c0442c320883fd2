"""Configuration layers, loading and management."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_TAG, MAX_LEVEL
from .dialect import ParserOptions, Variant
from .exceptions import ConfigError, LevelsError
from .models import Mode, Style

TABLE_NAME = "toc-tags"
DOCUMENTS_KEY = "documents"
OUTPUTS_KEY = "outputs"

PARSER_KNOBS = tuple(knob.name for knob in fields(ParserOptions))


def parse_levels(spec: str) -> frozenset[int]:
    """Parse a heading level specification such as ``"1-3,5"``.

    Args:
        spec: Comma-separated single levels or inclusive ``lo-hi`` ranges.

    Returns:
        frozenset[int]: The selected levels.

    Raises:
        LevelsError: If an item is not an integer or range, a level is outside
            1-6, or a range is descending.

    Examples:
        parse_levels("1-3,4")  # frozenset({1, 2, 3, 4})
        parse_levels("2")  # frozenset({2})
    """
    levels: set[int] = set()

    for raw_item in spec.split(","):
        item = raw_item.strip()
        if not item:
            raise LevelsError(spec, "empty level")

        low_text, separator, high_text = item.partition("-")
        try:
            low = int(low_text.strip())
            high = int(high_text.strip()) if separator else low
        except ValueError as error:
            raise LevelsError(spec, f"'{item}' is not a level or a range of levels") from error

        for level in (low, high):
            if not 1 <= level <= MAX_LEVEL:
                raise LevelsError(spec, f"level {level} is not in the range 1-{MAX_LEVEL}")
        if low > high:
            raise LevelsError(spec, f"range '{item}' is descending")

        levels.update(range(low, high + 1))

    return frozenset(levels)


@dataclass(frozen=True)
class ResolvedOptions:
    """Fully resolved options used to render one TOC.

    Attributes:
        tag: Marker tag name.
        variant: Markdown dialect.
        style: TOC list style.
        mode: Which headings are considered.
        levels: Heading levels included.
        bold: Wrap entries in bold markup.
        numbered: Use ordered list numbers instead of dashes.
        plain: Render heading text without links.
        remove_emojis: Strip ``:shortcode:`` emojis from entries.
    """

    tag: str
    variant: Variant
    style: Style
    mode: Mode
    levels: frozenset[int]
    bold: bool
    numbered: bool
    plain: bool
    remove_emojis: bool

    @property
    def is_local(self) -> bool:
        return self.mode is Mode.LOCAL

    @property
    def is_full(self) -> bool:
        return self.mode is Mode.FULL

    def is_level_included(self, level: int) -> bool:
        return level in self.levels


ROOT_DEFAULTS = ResolvedOptions(
    tag=DEFAULT_TAG,
    variant=Variant.GITHUB,
    style=Style.HIERARCHY,
    mode=Mode.NORMAL,
    levels=frozenset({1, 2, 3}),
    bold=True,
    numbered=False,
    plain=False,
    remove_emojis=False,
)


@dataclass
class TocOptions:
    """One layer of TOC options.

    Every field is optional. Resolution walks up the `parent` chain and
    returns the first value that is set, falling back to `ROOT_DEFAULTS`.
    The parser knobs (``require_space`` and onwards) fall back to the
    resolved variant's profile instead.

    Examples:
        project = TocOptions(levels=parse_levels("1-2"))
        tag_layer = TocOptions(parent=project, numbered=True)
        tag_layer.resolve("levels")  # frozenset({1, 2})
    """

    parent: TocOptions | None = field(default=None, repr=False)

    tag: str | None = None
    variant: Variant | None = None
    style: Style | None = None
    mode: Mode | None = None
    levels: frozenset[int] | None = None
    bold: bool | None = None
    numbered: bool | None = None
    plain: bool | None = None
    remove_emojis: bool | None = None

    require_space: bool | None = None
    allow_leading_space: bool | None = None
    setext_marker_length: int | None = None
    empty_heading_without_space: bool | None = None
    heading_interrupts_item_paragraph: bool | None = None
    duped_dashes: bool | None = None
    resolve_dupes: bool | None = None
    dash_chars: str | None = None
    allowed_chars: str | None = None

    def chain(self) -> list[TocOptions]:
        """Return this layer followed by its ancestors."""
        layers: list[TocOptions] = []
        layer: TocOptions | None = self
        while layer is not None:
            if any(layer is seen for seen in layers):
                raise ConfigError("Option layers form a cycle")
            layers.append(layer)
            layer = layer.parent
        return layers

    def resolve(self, name: str) -> object:
        for layer in self.chain():
            value = getattr(layer, name)
            if value is not None:
                return value
        if name in PARSER_KNOBS:
            return getattr(self.resolve("variant").profile, name)
        return getattr(ROOT_DEFAULTS, name)

    def resolved(self) -> ResolvedOptions:
        return ResolvedOptions(
            **{option.name: self.resolve(option.name) for option in fields(ResolvedOptions)}
        )

    def to_parser_options(self) -> ParserOptions:
        return ParserOptions(**{name: self.resolve(name) for name in PARSER_KNOBS})

    def child(self, **values: object) -> TocOptions:
        """Create a new layer on top of this one."""
        return TocOptions(parent=self, **values)

    def levels_from(self, spec: str) -> frozenset[int]:
        """Parse `spec` and set it as this layer's levels.

        Raises:
            LevelsError: If `spec` is invalid.
        """
        self.levels = parse_levels(spec)
        return self.levels


@dataclass
class DocumentConfig:
    """Options for one configured document and its extra output files.

    Attributes:
        path: Input document path.
        options: Document layer, whose parent is the project layer.
        outputs: Output file layers keyed by path; each has `options` as parent.
    """

    path: Path
    options: TocOptions
    outputs: dict[Path, TocOptions] = field(default_factory=dict)

    def targets(self) -> list[tuple[Path, TocOptions]]:
        """Return output paths with their options; the input itself when none."""
        if not self.outputs:
            return [(self.path, self.options)]
        return list(self.outputs.items())


@dataclass
class TocConfig:
    """Loaded configuration: the project layer plus configured documents.

    Attributes:
        options: Project-level options layer.
        documents: Documents listed in the configuration file.
        base_dir: Directory relative document paths are resolved against.
    """

    options: TocOptions = field(default_factory=TocOptions)
    documents: list[DocumentConfig] = field(default_factory=list)
    base_dir: Path | None = None


_ENUM_OPTIONS = {"variant": Variant.from_name, "style": Style, "mode": Mode}
_BOOL_OPTIONS = {
    "bold",
    "numbered",
    "plain",
    "remove_emojis",
    "require_space",
    "allow_leading_space",
    "empty_heading_without_space",
    "heading_interrupts_item_paragraph",
    "duped_dashes",
    "resolve_dupes",
}
_STR_OPTIONS = {"tag", "dash_chars", "allowed_chars"}


def _coerce_option(name: str, value: object) -> object:
    if name in _ENUM_OPTIONS:
        if not isinstance(value, str):
            raise ConfigError(f"`{name}` must be a string")
        try:
            return _ENUM_OPTIONS[name](value.lower() if name != "variant" else value)
        except ValueError as error:
            raise ConfigError(f"Invalid `{name}`: '{value}'") from error

    if name in _BOOL_OPTIONS:
        if not isinstance(value, bool):
            raise ConfigError(f"`{name}` must be a boolean")
        return value

    if name in _STR_OPTIONS:
        if not isinstance(value, str):
            raise ConfigError(f"`{name}` must be a string")
        if name == "tag" and not value.strip():
            raise ConfigError("`tag` must not be empty")
        return value

    if name == "levels":
        if isinstance(value, str):
            return parse_levels(value)
        if isinstance(value, list) and all(
            isinstance(level, int) and not isinstance(level, bool) for level in value
        ):
            if not value or any(not 1 <= level <= MAX_LEVEL for level in value):
                raise ConfigError(f"`levels` must contain levels in the range 1-{MAX_LEVEL}")
            return frozenset(value)
        raise ConfigError("`levels` must be a range string or a list of integers")

    if name == "setext_marker_length":
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError("`setext_marker_length` must be a positive integer")
        return value

    raise ConfigError(f"Unknown option: `{name}`")


def options_from_mapping(
    raw: dict[str, object], parent: TocOptions | None = None, exclude: Collection[str] = ()
) -> TocOptions:
    """Build an options layer from a configuration table.

    Keys may use dashes or underscores.

    Raises:
        ConfigError: If a key is unknown or a value has the wrong type.

    Examples:
        options_from_mapping({"style": "flat", "levels": "1-2"})
    """
    values = {}
    for key, value in raw.items():
        if key in exclude:
            continue
        name = key.replace("-", "_")
        values[name] = _coerce_option(name, value)
    return TocOptions(parent=parent, **values)


_MISSING = object()


def load_config(search_path: Path) -> TocConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.toc-tags]`` table from `pyproject.toml` and the ``[toc-tags]``
    or ``[tool.toc-tags]`` table from `.toc-tags.toml` when present. Returns
    default values when no configuration is found. TOML files that cannot be
    read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        TocConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but is not a mapping, contains
            unsupported keys, or holds invalid values.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", TABLE_NAME)]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / f".{TABLE_NAME}.toml",
            table_paths=[(TABLE_NAME,), ("tool", TABLE_NAME)],
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return TocConfig()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> TocConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> TocConfig:
    table_display = ".".join(table_path)
    base_dir = config_file.parent

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    try:
        project = options_from_mapping(raw_config, exclude=(DOCUMENTS_KEY,))
        raw_documents = raw_config.get(DOCUMENTS_KEY, {})
        if not isinstance(raw_documents, dict):
            raise ConfigError(f"`{DOCUMENTS_KEY}` must be a table")

        documents = []
        for name, raw_document in raw_documents.items():
            if not isinstance(raw_document, dict):
                raise ConfigError(f"Settings for document '{name}' must be a table")
            document_options = options_from_mapping(
                raw_document, parent=project, exclude=(OUTPUTS_KEY,)
            )
            raw_outputs = raw_document.get(OUTPUTS_KEY, {})
            if isinstance(raw_outputs, list):
                raw_outputs = {output: {} for output in raw_outputs}
            if not isinstance(raw_outputs, dict):
                raise ConfigError(f"`{OUTPUTS_KEY}` of document '{name}' must be a table or list")

            outputs = {}
            for output_name, raw_output in raw_outputs.items():
                if not isinstance(raw_output, dict):
                    raise ConfigError(f"Settings for output '{output_name}' must be a table")
                outputs[base_dir / output_name] = options_from_mapping(
                    raw_output, parent=document_options
                )
            documents.append(DocumentConfig(base_dir / name, document_options, outputs))
    except ConfigError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}: {error}") from error

    return TocConfig(options=project, documents=documents, base_dir=base_dir)


def apply_overrides(options: TocOptions, **overrides: object) -> TocOptions:
    """Apply override values to an options layer.

    Args:
        options: Layer to update.
        overrides: Override values keyed by option name; values set to None
            are ignored.

    Returns:
        TocOptions: New layer with the overrides applied, sharing the parent
        of `options`. The original layer is returned when no changes are
        supplied.

    Raises:
        TypeError: If an override name is not defined on `TocOptions`.

    Examples:
        updated = apply_overrides(options, style=Style.FLAT, numbered=True)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return options
    return replace(options, **changes)


def build_config(search_path: Path, **overrides: object) -> TocConfig:
    """Load configuration and apply overrides to its project layer.

    Documents keep pointing at the updated project layer.

    Raises:
        ConfigError: If configuration loading fails.

    Examples:
        config = build_config(Path.cwd(), style=Style.FLAT)
    """
    config = load_config(search_path)
    project = apply_overrides(config.options, **overrides)
    if project is not config.options:
        for document in config.documents:
            document.options.parent = project
        config.options = project
    return config
