"""Read the JSONL file manifest produced by the file collector.

Each non-blank line is a JSON object ``{"path": "...", "content": "..."}``.
A record whose ``content`` is missing or null (binaries, skipped files) only
shows up in the repository tree.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from repopack.config import SanitizedFile
from repopack.exceptions import ManifestError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


class Manifest(BaseModel):
    """Inputs of one output generation, as read from a manifest.

    Attributes:
        all_file_paths: Every listed path, in manifest order.
        sanitized_files: Records that carry content, in manifest order.
    """

    model_config = ConfigDict(frozen=True)

    all_file_paths: tuple[str, ...] = Field(default=(), description="Paths shown in the tree")
    sanitized_files: tuple[SanitizedFile, ...] = Field(default=(), description="Files to embed")


def read_manifest(lines: Iterable[str]) -> Manifest:
    """Parse manifest lines.

    Args:
        lines (Iterable[str]): JSONL lines, e.g. an open text file or `sys.stdin`

    Raises:
        ManifestError: if a line is not a JSON object with a string `path`,
            or if `content` is neither a string nor null

    Returns:
        Manifest: the paths and files, in manifest order
    """
    paths: list[str] = []
    files: list[SanitizedFile] = []
    for lineno, raw in enumerate(lines, start=1):
        if not raw.strip():
            continue
        try:
            item = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ManifestError(line=lineno, message=f"invalid JSON: {e.msg}") from e
        if not isinstance(item, dict):
            raise ManifestError(line=lineno, message="expected a JSON object")

        path = item.get("path")
        if not isinstance(path, str) or not path.strip():
            raise ManifestError(line=lineno, message="missing or empty 'path'")
        content = item.get("content")
        if content is not None and not isinstance(content, str):
            raise ManifestError(line=lineno, message="'content' must be a string or null")

        paths.append(path)
        if content is not None:
            files.append(SanitizedFile(path=path, content=content))

    return Manifest(all_file_paths=tuple(paths), sanitized_files=tuple(files))


def load_manifest(path: Path) -> Manifest:
    """Read a manifest file encoded in UTF-8.

    Args:
        path (Path): the JSONL manifest to read

    Returns:
        Manifest: the paths and files, in manifest order
    """
    with path.open(encoding="utf-8") as f:
        return read_manifest(f)
