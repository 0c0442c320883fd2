"""Safe reading and writing of the Markdown files toc-tags rewrites."""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from .constants import DEFAULT_MAX_FILE_SIZE, MARKDOWN_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "TOC_TAGS_MAX_FILE_SIZE"


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Read the file size limit from `TOC_TAGS_MAX_FILE_SIZE`.

    Args:
        default: Limit in bytes used when the variable is unset.

    Returns:
        int: The limit in bytes.

    Raises:
        ValueError: If the variable is set to anything but a positive integer.

    Examples:
        os.environ["TOC_TAGS_MAX_FILE_SIZE"] = "204800"
        get_max_file_size()  # 204800
    """
    raw_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw_value is None:
        return default

    try:
        limit = int(raw_value)
    except ValueError:
        limit = 0

    if limit <= 0:
        raise ValueError(
            f"{MAX_FILE_SIZE_ENV_VAR} must be a positive number of bytes, got {raw_value!r}."
        )

    return limit


def _is_symlink(path: Path) -> bool:
    try:
        return path.is_symlink()
    except OSError:
        return False


def contains_symlink(path: Path) -> bool:
    """Tell whether `path` or one of its parent directories is a symlink."""
    return any(_is_symlink(candidate) for candidate in (path, *path.parents))


def normalize_filepath(raw_path: str | Path, base_dir: Path, must_exist: bool = True) -> Path:
    """Turn a user-supplied path into an absolute Markdown path under `base_dir`.

    Args:
        raw_path: Absolute path, or path relative to `base_dir`.
        base_dir: Resolved working directory the file must live in.
        must_exist: Output files may be created, so they only need a valid
            location.

    Returns:
        Path: The resolved path.

    Raises:
        ValueError: If the path is missing, a symlink, not a regular file,
            outside `base_dir`, or not a Markdown file.

    Examples:
        normalize_filepath("docs/guide.md", Path.cwd().resolve())
    """
    candidate = Path(raw_path).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate

    if contains_symlink(candidate):
        raise ValueError(f"Symlinks are not supported for security reasons: {candidate}")

    try:
        resolved = candidate.resolve(strict=must_exist)
    except FileNotFoundError as error:
        raise ValueError(f"{candidate} does not exist.") from error
    except OSError as error:
        raise ValueError(f"Cannot resolve {candidate}: {error}") from error

    if not resolved.is_relative_to(base_dir):
        raise ValueError(f"{resolved} is outside of the working directory {base_dir}.")

    if resolved.exists() and not resolved.is_file():
        raise ValueError(f"{resolved} is not a regular file.")

    if resolved.suffix.lower() not in MARKDOWN_EXTENSIONS:
        supported = ", ".join(MARKDOWN_EXTENSIONS)
        raise ValueError(f"{resolved} is not a Markdown file (expected one of {supported}).")

    return resolved


def collect_file_stat(filepath: Path) -> os.stat_result:
    """Stat `filepath` without following symlinks.

    Raises:
        IOError: If the file cannot be accessed or is not a regular file.
    """
    try:
        file_stat = os.lstat(filepath)
    except OSError as error:
        raise IOError(f"Cannot access {filepath}: {error}") from error

    if stat.S_ISLNK(file_stat.st_mode):
        raise IOError(f"Symlinks are not supported: {filepath}.")
    if not stat.S_ISREG(file_stat.st_mode):
        raise IOError(f"{filepath} is not a regular file.")

    return file_stat


def enforce_file_size(file_stat: os.stat_result, max_size: int, filepath: Path) -> None:
    """Raise IOError when the file is larger than `max_size` bytes."""
    if file_stat.st_size > max_size:
        raise IOError(
            f"{filepath} is {file_stat.st_size} bytes, "
            f"more than the maximum allowed size of {max_size} bytes."
        )


def _fingerprint(file_stat: os.stat_result) -> tuple[object, ...]:
    return (file_stat.st_dev, file_stat.st_ino, file_stat.st_size, file_stat.st_mtime_ns)


def ensure_file_unchanged(
    expected_stat: os.stat_result, current_stat: os.stat_result, filepath: Path
) -> None:
    """Refuse to continue when a file was modified since `expected_stat`.

    Raises:
        IOError: If device, inode, size or modification time differ.
    """
    if _fingerprint(expected_stat) != _fingerprint(current_stat):
        raise IOError(f"{filepath} changed during processing; refusing to overwrite.")


def safe_read(filepath: Path) -> TextIO:
    """Open a UTF-8 file for reading with line endings left untouched.

    Raises:
        IOError: If the file cannot be opened.

    Examples:
        with safe_read(Path("README.md")) as handle:
            text = handle.read()
    """
    try:
        return open(filepath, encoding="UTF-8", newline="")
    except OSError as error:
        raise IOError(f"Cannot open {filepath}: {error}") from error


def read_text(filepath: Path) -> str:
    """Return the whole content of a UTF-8 Markdown file.

    Raises:
        IOError: If the file cannot be read or is not valid UTF-8.
    """
    with safe_read(filepath) as handle:
        try:
            return handle.read()
        except UnicodeDecodeError as error:
            raise IOError(f"Invalid UTF-8 in {filepath}: {error}") from error


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def _copy_ownership(
    source_stat: os.stat_result, target: str, filepath: Path, warn: Callable[[str], None] | None
) -> None:
    if not hasattr(os, "chown"):
        return
    try:
        os.chown(target, source_stat.st_uid, source_stat.st_gid)
    except PermissionError:
        if warn is not None:
            warn(f"Warning: Could not preserve file ownership for {filepath.name}")


def write_text_atomic(
    filepath: Path,
    text: str,
    expected_stat: os.stat_result | None = None,
    warn: Callable[[str], None] | None = None,
) -> None:
    """Write `text` to `filepath` through a temporary file in the same directory.

    The temporary file takes over the mode and, when permitted, the owner of
    the file it replaces, then is moved into place with `os.replace`.

    Args:
        filepath: Destination file. It may not exist yet.
        text: Content to write, with its line endings kept as is.
        expected_stat: Stat taken when the content was read. The write is
            refused if the file was modified since.
        warn: Callback for non-fatal problems, such as ownership that could
            not be kept.

    Raises:
        IOError: If the file changed since `expected_stat` or the write fails.
    """
    current_stat = collect_file_stat(filepath) if filepath.exists() else None
    if current_stat is not None and expected_stat is not None:
        ensure_file_unchanged(expected_stat, current_stat, filepath)

    temp_name: str | None = None
    try:
        descriptor, temp_name = tempfile.mkstemp(
            dir=filepath.parent, prefix=f".{filepath.name}.", suffix=".tmp"
        )
        with os.fdopen(descriptor, "w", encoding="UTF-8", newline="") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())

        if current_stat is not None:
            os.chmod(temp_name, stat.S_IMODE(current_stat.st_mode))
            _copy_ownership(current_stat, temp_name, filepath, warn)
        else:
            os.chmod(temp_name, 0o666 & ~_current_umask())

        os.replace(temp_name, filepath)
        temp_name = None
    except OSError as error:
        raise IOError(f"Error writing {filepath}: {error}") from error
    finally:
        if temp_name is not None:
            Path(temp_name).unlink(missing_ok=True)
