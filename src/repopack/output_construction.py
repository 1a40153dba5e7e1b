from __future__ import annotations

import io
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from repopack.config import OutputConfig, OutputStyle, RepopackConfig, SanitizedFile
from repopack.file_manipulation import format_generation_date, generate_tree_string, utc_now

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import datetime

    Clock = Callable[[], datetime]
    TreeRenderer = Callable[[Sequence[str]], str]
    Renderer = Callable[["RenderSnapshot"], str]

PLAIN_SEPARATOR = "=" * 16
PLAIN_LONG_SEPARATOR = "=" * 64

TITLE = "Repopack Output File"
REPOPACK_URL = "https://github.com/yamadashy/repopack"
ATTRIBUTION = f"For more information about Repopack, visit: {REPOPACK_URL}"

COMMENTS_REMOVED_NOTE = "- Code comments have been removed."
LINE_NUMBERS_NOTE = "- Line numbers have been added to the beginning of each line."

PURPOSE_TEXT = """\
This file contains a packed representation of the entire repository's contents.
It is designed to be easily consumable by AI systems for analysis, code review,
or other automated processes."""

PLAIN_FILE_FORMAT_TEXT = f"""\
The content is organized as follows:
1. This header section
2. Repository structure
3. Multiple file entries, each consisting of:
  a. A separator line ({PLAIN_SEPARATOR})
  b. The file path (File: path/to/file)
  c. Another separator line
  d. The full contents of the file
  e. A blank line"""

PLAIN_USAGE_GUIDELINES_TEXT = """\
1. This file should be treated as read-only. Any changes should be made to the
  original repository files, not this packed version.
2. When processing this file, use the separators and "File:" markers to
  distinguish between different files in the repository.
3. Be aware that this file may contain sensitive information. Handle it with
  the same level of security as you would the original repository."""

PLAIN_NOTES: tuple[str, ...] = (
    "- Some files may have been excluded based on .gitignore rules and Repopack's\n  configuration.",
    "- Binary files are not included in this packed representation. Please refer to\n"
    "  the Repository Structure section for a complete list of file paths, including\n"
    "  binary files.",
)

XML_FILE_FORMAT_TEXT = """\
The content is organized as follows:
1. This summary section
2. Repository structure
3. Repository files, each consisting of:
    - File path as an attribute
    - Full contents of the file"""

XML_USAGE_GUIDELINES_TEXT = """\
1. This file should be treated as read-only. Any changes should be made to the
    original repository files, not this packed version.
2. When processing this file, use the file path attributes to distinguish
    between different files in the repository.
3. Be aware that this file may contain sensitive information. Handle it with
    the same level of security as you would the original repository."""

XML_NOTES: tuple[str, ...] = (
    "- Some files may have been excluded based on .gitignore rules and Repopack's\n  configuration.",
    "- Binary files are not included in this packed representation.",
)


class RenderSnapshot(BaseModel):
    """Everything a renderer needs to produce one document.

    Built once per output generation by `assemble` and consumed by exactly one renderer.

    Attributes:
        generation_date: ISO 8601 UTC timestamp printed in the header.
        tree_string: Pre-rendered directory tree, embedded verbatim.
        sanitized_files: Files to embed, in output order.
        config: The merged configuration.
    """

    model_config = ConfigDict(frozen=True)

    generation_date: str = Field(..., description="ISO 8601 UTC generation timestamp")
    tree_string: str = Field(..., description="Rendered directory tree")
    sanitized_files: tuple[SanitizedFile, ...] = Field(default=(), description="Files in output order")
    config: RepopackConfig = Field(default_factory=RepopackConfig, description="Merged configuration")


def assemble(
    config: RepopackConfig,
    all_file_paths: Sequence[str],
    sanitized_files: Iterable[SanitizedFile],
    *,
    clock: Clock = utc_now,
    tree_renderer: TreeRenderer = generate_tree_string,
) -> RenderSnapshot:
    """Gather the data shared by both renderers into a snapshot.

    Args:
        config (RepopackConfig): the merged configuration
        all_file_paths (Sequence[str]): every known relative path, including files whose
            content is not embedded (binaries, ...); only used to build the tree
        sanitized_files (Iterable[SanitizedFile]): the files to embed, in output order
        clock (Clock): returns the generation instant
        tree_renderer (TreeRenderer): renders `all_file_paths` as a tree string

    Returns:
        RenderSnapshot: the immutable snapshot
    """
    return RenderSnapshot(
        generation_date=format_generation_date(clock()),
        tree_string=tree_renderer(all_file_paths),
        sanitized_files=tuple(sanitized_files),
        config=config,
    )


def _notes(output: OutputConfig, static_notes: Sequence[str]) -> str:
    lines = list(static_notes)
    if output.remove_comments:
        lines.append(COMMENTS_REMOVED_NOTE)
    if output.show_line_numbers:
        lines.append(LINE_NUMBERS_NOTE)
    return "\n".join(lines)


def _generated_on(generation_date: str) -> str:
    return f"This file was generated by Repopack on: {generation_date}"


def _finalize(document: str) -> str:
    return document.strip() + "\n"


def render_plain(snapshot: RenderSnapshot) -> str:
    """Render the snapshot as the separator-delimited plain document.

    File content is embedded without escaping: content that itself contains
    separator lines or "File: " lines makes the document ambiguous to split.

    Args:
        snapshot (RenderSnapshot): the data to render

    Returns:
        str: the document, ending with exactly one newline
    """
    output = snapshot.config.output
    out = io.StringIO()

    out.write(f"{PLAIN_LONG_SEPARATOR}\n{TITLE}\n{PLAIN_LONG_SEPARATOR}\n\n")
    out.write(f"{_generated_on(snapshot.generation_date)}\n\n")
    out.write(f"Purpose:\n--------\n{PURPOSE_TEXT}\n\n")
    out.write(f"File Format:\n------------\n{PLAIN_FILE_FORMAT_TEXT}\n\n")
    out.write(f"Usage Guidelines:\n-----------------\n{PLAIN_USAGE_GUIDELINES_TEXT}\n\n")
    out.write(f"Notes:\n------\n{_notes(output, PLAIN_NOTES)}\n\n")
    out.write(f"{ATTRIBUTION}\n\n")

    if output.header_text:
        out.write("Additional User-Provided Header:\n--------------------------------\n")
        out.write(f"{output.header_text}\n\n")

    out.write(f"{PLAIN_LONG_SEPARATOR}\nRepository Structure\n{PLAIN_LONG_SEPARATOR}\n")
    out.write(f"{snapshot.tree_string}\n\n")
    out.write(f"{PLAIN_LONG_SEPARATOR}\nRepository Files\n{PLAIN_LONG_SEPARATOR}\n\n")

    for file in snapshot.sanitized_files:
        out.write(f"{PLAIN_SEPARATOR}\nFile: {file.path}\n{PLAIN_SEPARATOR}\n{file.content}\n\n")

    return _finalize(out.getvalue())


def render_xml(snapshot: RenderSnapshot) -> str:
    """Render the snapshot as the tag-delimited XML-like document.

    Paths and content are not escaped, so the result is not guaranteed to be
    well-formed XML; readers should split on the `<file path="...">` blocks.

    Args:
        snapshot (RenderSnapshot): the data to render

    Returns:
        str: the document, ending with exactly one newline
    """
    output = snapshot.config.output
    out = io.StringIO()

    out.write("<summary>\n\n")
    out.write(f"<header>\n{TITLE}\n{_generated_on(snapshot.generation_date)}\n</header>\n\n")
    out.write(f"<purpose>\n{PURPOSE_TEXT}\n</purpose>\n\n")
    out.write(f"<file_format>\n{XML_FILE_FORMAT_TEXT}\n</file_format>\n\n")
    out.write(f"<usage_guidelines>\n{XML_USAGE_GUIDELINES_TEXT}\n</usage_guidelines>\n\n")
    out.write(f"<notes>\n{_notes(output, XML_NOTES)}\n</notes>\n\n")
    out.write(f"<additional_info>\n{ATTRIBUTION}\n</additional_info>\n\n")
    out.write("</summary>\n\n")

    if output.header_text:
        out.write(f"<user_provided_header>\n{output.header_text}\n</user_provided_header>\n\n")

    out.write(f"<repository_structure>\n{snapshot.tree_string}\n</repository_structure>\n\n")
    out.write("<repository_files>\n\n")
    for file in snapshot.sanitized_files:
        out.write(f'<file path="{file.path}">\n{file.content}\n</file>\n\n')
    out.write("</repository_files>\n")

    return _finalize(out.getvalue())


_RENDERERS: dict[OutputStyle, Renderer] = {
    OutputStyle.PLAIN: render_plain,
    OutputStyle.XML: render_xml,
}


def render_output(snapshot: RenderSnapshot) -> str:
    """Render the snapshot with the renderer selected by `output.style`.

    Args:
        snapshot (RenderSnapshot): the data to render

    Returns:
        str: the rendered document
    """
    return _RENDERERS[snapshot.config.output.style](snapshot)


def resolve_output_path(root_dir: str | Path, config: RepopackConfig) -> Path:
    """Resolve `output.file_path` against `root_dir`; absolute paths win.

    Args:
        root_dir (str | Path): the repository root
        config (RepopackConfig): the merged configuration

    Returns:
        Path: the absolute destination path
    """
    return (Path(root_dir) / config.output.file_path).resolve()


def write_output(root_dir: str | Path, config: RepopackConfig, document: str) -> Path:
    """Write the document to its destination, replacing any existing file.

    The document is encoded before the file is opened, so an encoding error
    leaves an existing file untouched. Missing parent directories are not
    created; any `OSError` propagates.

    Args:
        root_dir (str | Path): the repository root
        config (RepopackConfig): the merged configuration
        document (str): the rendered document

    Returns:
        Path: the path written to
    """
    out_path = resolve_output_path(root_dir, config)
    data = document.encode("utf-8")
    out_path.write_bytes(data)
    return out_path


def generate_output(
    root_dir: str | Path,
    config: RepopackConfig,
    sanitized_files: Iterable[SanitizedFile],
    all_file_paths: Sequence[str],
    *,
    clock: Clock = utc_now,
    tree_renderer: TreeRenderer = generate_tree_string,
) -> Path:
    """Assemble, render with the configured style and write the packed document.

    Args:
        root_dir (str | Path): the repository root, base of `output.file_path`
        config (RepopackConfig): the merged configuration
        sanitized_files (Iterable[SanitizedFile]): the files to embed, in output order
        all_file_paths (Sequence[str]): every known relative path, for the tree
        clock (Clock): returns the generation instant
        tree_renderer (TreeRenderer): renders the path list as a tree string

    Returns:
        Path: the path written to
    """
    snapshot = assemble(
        config,
        all_file_paths,
        sanitized_files,
        clock=clock,
        tree_renderer=tree_renderer,
    )
    return write_output(root_dir, config, render_output(snapshot))
