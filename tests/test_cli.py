from __future__ import annotations

import os
import textwrap
from pathlib import Path

import pytest

from toc_tags.cli import cli


def _write(base: Path, filename: str, content: str) -> Path:
    path = base / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return path


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


DOCUMENT = """
    # Project
    <!-- toc -->
    <!-- /toc -->
    ## Introduction
    ### Basics
    """


def test_cli_updates_toc_in_place(cli_runner, workdir):
    target = _write(workdir, "doc.md", DOCUMENT)

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert result.output == ""
    assert target.read_text(encoding="utf-8") == (
        "# Project\n"
        "<!-- toc -->\n"
        "- __[Introduction](#introduction)__\n"
        "  - __[Basics](#basics)__\n"
        "<!-- /toc -->\n"
        "## Introduction\n"
        "### Basics\n"
    )


def test_cli_is_idempotent(cli_runner, workdir):
    target = _write(workdir, "doc.md", DOCUMENT)

    cli_runner.invoke(cli, [str(target)])
    first = target.read_text(encoding="utf-8")
    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8") == first


def test_cli_leaves_files_without_tags_alone(cli_runner, workdir):
    target = _write(workdir, "plain.md", "# Title\n\nText.\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8") == "# Title\n\nText.\n"


def test_cli_accepts_relative_paths(cli_runner, workdir):
    target = _write(workdir, "docs/guide.md", DOCUMENT)

    result = cli_runner.invoke(cli, ["docs/guide.md"])

    assert result.exit_code == 0
    assert "- __[Introduction](#introduction)__" in target.read_text(encoding="utf-8")


def test_cli_flags_override_defaults(cli_runner, workdir):
    target = _write(workdir, "doc.md", DOCUMENT)

    result = cli_runner.invoke(
        cli, ["--style", "flat", "--no-bold", "--numbered", "--levels", "2-3", str(target)]
    )

    assert result.exit_code == 0
    assert "<!-- toc -->\n1. [Introduction](#introduction)\n2. [Basics](#basics)\n<!-- /toc -->" in (
        target.read_text(encoding="utf-8")
    )


def test_cli_plain_and_mode_flags(cli_runner, workdir):
    target = _write(workdir, "doc.md", DOCUMENT)

    result = cli_runner.invoke(cli, ["--plain", "--mode", "full", str(target)])

    assert result.exit_code == 0
    assert "<!-- toc -->\n- __Project__\n  - __Introduction__\n    - __Basics__\n<!-- /toc -->" in (
        target.read_text(encoding="utf-8")
    )


def test_cli_custom_tag(cli_runner, workdir):
    target = _write(
        workdir,
        "doc.md",
        """
        <!-- contents -->
        <!-- /contents -->
        # Heading
        """,
    )

    result = cli_runner.invoke(cli, ["--tag", "contents", "--no-bold", str(target)])

    assert result.exit_code == 0
    assert "- [Heading](#heading)\n" in target.read_text(encoding="utf-8")


def test_cli_variant_flag(cli_runner, workdir):
    target = _write(
        workdir,
        "doc.md",
        """
        <!-- toc -->
        <!-- /toc -->
        # A - B
        """,
    )

    result = cli_runner.invoke(cli, ["--variant", "GitLab", "--no-bold", str(target)])

    assert result.exit_code == 0
    assert "- [A - B](#a-b)\n" in target.read_text(encoding="utf-8")


def test_cli_remove_emojis_flag(cli_runner, workdir):
    target = _write(
        workdir,
        "doc.md",
        """
        <!-- toc -->
        <!-- /toc -->
        # Launch :rocket: day
        """,
    )

    result = cli_runner.invoke(cli, ["--remove-emojis", "--plain", "--no-bold", str(target)])

    assert result.exit_code == 0
    assert "- Launch day\n" in target.read_text(encoding="utf-8")


def test_cli_rejects_invalid_levels(cli_runner, workdir):
    target = _write(workdir, "doc.md", DOCUMENT)

    result = cli_runner.invoke(cli, ["--levels", "3-1", str(target)])

    assert result.exit_code == 2
    assert "Invalid level specification: '3-1'" in result.output


def test_cli_prints_warnings_with_path(cli_runner, workdir):
    target = _write(
        workdir,
        "doc.md",
        """
        <!-- toc foo=bar -->
        <!-- /toc -->
        # Heading
        """,
    )

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert "doc.md: line 1: Unknown option: 'foo'" in result.output
    assert "- __[Heading](#heading)__" in target.read_text(encoding="utf-8")


def test_cli_refuses_to_overwrite_prose(cli_runner, workdir):
    original = "<!-- toc -->\nHand-written notes.\n<!-- /toc -->\n# Heading\n"
    target = _write(workdir, "doc.md", original)

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert "doesn't look like the current content between the toc tags" in result.output
    assert target.read_text(encoding="utf-8") == original


def test_cli_reports_tag_errors(cli_runner, workdir):
    original = "<!-- toc -->\n# Heading\n"
    target = _write(workdir, "doc.md", original)

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 1
    assert (
        "doc.md: Opening toc tag on line 1 does not have a corresponding closing tag"
        in result.output
    )
    assert target.read_text(encoding="utf-8") == original


def test_cli_check_passes_when_up_to_date(cli_runner, workdir):
    target = _write(workdir, "doc.md", DOCUMENT)
    cli_runner.invoke(cli, [str(target)])

    result = cli_runner.invoke(cli, ["--check", str(target)])

    assert result.exit_code == 0
    assert result.output == ""


def test_cli_check_fails_when_out_of_date(cli_runner, workdir):
    target = _write(workdir, "doc.md", DOCUMENT)
    original = target.read_text(encoding="utf-8")

    result = cli_runner.invoke(cli, ["--check", str(target)])

    assert result.exit_code == 1
    assert "doc.md: Table of Contents is out of date." in result.output
    assert "One or more Table of Contents are out of date." in result.output
    assert target.read_text(encoding="utf-8") == original


def test_cli_check_reports_tag_errors_without_failing(cli_runner, workdir):
    target = _write(workdir, "doc.md", "<!-- /toc -->\n")

    result = cli_runner.invoke(cli, ["--check", str(target)])

    assert result.exit_code == 0
    assert "doc.md: Closing toc tag on line 1" in result.output


def test_cli_reads_config_from_pyproject(cli_runner, workdir):
    _write_pyproject(
        workdir,
        """
        [tool.toc-tags]
        bold = false
        numbered = true
        levels = "2"
        """,
    )
    target = _write(workdir, "doc.md", DOCUMENT)

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert "<!-- toc -->\n1. [Introduction](#introduction)\n<!-- /toc -->" in target.read_text(
        encoding="utf-8"
    )


def test_cli_flags_override_config(cli_runner, workdir):
    _write_pyproject(
        workdir,
        """
        [tool.toc-tags]
        bold = false
        numbered = true
        """,
    )
    target = _write(workdir, "doc.md", DOCUMENT)

    result = cli_runner.invoke(cli, ["--no-numbered", str(target)])

    assert result.exit_code == 0
    assert "- [Introduction](#introduction)\n" in target.read_text(encoding="utf-8")


def test_cli_rejects_invalid_config(cli_runner, workdir):
    _write_pyproject(
        workdir,
        """
        [tool.toc-tags]
        style = "sideways"
        """,
    )
    target = _write(workdir, "doc.md", DOCUMENT)

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 2
    assert "Invalid `style`" in result.output


def test_cli_processes_configured_documents_and_outputs(cli_runner, workdir):
    _write_pyproject(
        workdir,
        """
        [tool.toc-tags]
        bold = false

        [tool.toc-tags.documents."README.md"]
        numbered = true

        [tool.toc-tags.documents."docs/src.md".outputs."docs/flat.md"]
        style = "flat"
        """,
    )
    readme = _write(workdir, "README.md", DOCUMENT)
    source = _write(workdir, "docs/src.md", DOCUMENT)
    source_text = source.read_text(encoding="utf-8")

    result = cli_runner.invoke(cli, [])

    assert result.exit_code == 0
    assert "1. [Introduction](#introduction)\n  1. [Basics](#basics)\n" in readme.read_text(
        encoding="utf-8"
    )
    assert source.read_text(encoding="utf-8") == source_text
    flat = (workdir / "docs" / "flat.md").read_text(encoding="utf-8")
    assert "- [Introduction](#introduction)\n- [Basics](#basics)\n" in flat

    check = cli_runner.invoke(cli, ["--check"])
    assert check.exit_code == 0


def test_cli_check_reports_missing_outputs(cli_runner, workdir):
    _write_pyproject(
        workdir,
        """
        [tool.toc-tags.documents."src.md"]
        outputs = ["out.md"]
        """,
    )
    _write(workdir, "src.md", DOCUMENT)

    result = cli_runner.invoke(cli, ["--check"])

    assert result.exit_code == 1
    assert "out.md: Table of Contents is out of date." in result.output
    assert not (workdir / "out.md").exists()


def test_cli_file_argument_uses_document_config(cli_runner, workdir):
    _write_pyproject(
        workdir,
        """
        [tool.toc-tags.documents."doc.md"]
        plain = true
        """,
    )
    target = _write(workdir, "doc.md", DOCUMENT)

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert "- __Introduction__\n" in target.read_text(encoding="utf-8")


def test_cli_requires_files_or_configured_documents(cli_runner, workdir):

    result = cli_runner.invoke(cli, [])

    assert result.exit_code == 2
    assert "No files given and no documents configured." in result.output


def test_cli_rejects_non_markdown_files(cli_runner, workdir):
    target = _write(workdir, "notes.txt", "# Heading\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code != 0
    assert "not a Markdown file" in result.output


def test_cli_rejects_paths_outside_working_directory(cli_runner, tmp_path, monkeypatch):
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    outside = _write(tmp_path, "outside.md", DOCUMENT)

    result = cli_runner.invoke(cli, [str(outside)])

    assert result.exit_code != 0
    assert "outside of the working directory" in result.output


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlink support is required")
def test_cli_rejects_symlinks(cli_runner, workdir):
    source = _write(workdir, "source.md", DOCUMENT)
    link = workdir / "alias.md"
    try:
        os.symlink(source, link)
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create symlink: {error}")

    result = cli_runner.invoke(cli, [str(link)])

    assert result.exit_code != 0
    assert "Symlinks" in result.output


def test_cli_enforces_file_size_limit(cli_runner, workdir, monkeypatch):
    monkeypatch.setenv("TOC_TAGS_MAX_FILE_SIZE", "10")
    target = _write(workdir, "large.md", DOCUMENT)

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 1
    assert "maximum allowed size" in result.output


def test_cli_rejects_invalid_file_size_setting(cli_runner, workdir, monkeypatch):
    monkeypatch.setenv("TOC_TAGS_MAX_FILE_SIZE", "lots")
    target = _write(workdir, "doc.md", DOCUMENT)

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 1
    assert "TOC_TAGS_MAX_FILE_SIZE" in result.output


def test_cli_verbose_flag(cli_runner, workdir):
    target = _write(workdir, "doc.md", DOCUMENT)

    result = cli_runner.invoke(cli, ["--verbose", str(target)])

    assert result.exit_code == 0
    assert "- __[Introduction](#introduction)__" in target.read_text(encoding="utf-8")
