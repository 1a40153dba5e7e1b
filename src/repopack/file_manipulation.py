from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

# Tree node key holding the file names of a directory.
_FILES = object()


def normalize_rel_path(path: str) -> str:
    """Normalize a relative path to POSIX separators without surrounding slashes.

    Args:
        path (str): the relative path to normalize

    Returns:
        str: the normalized path, with backslashes turned into "/"
    """
    return path.strip().replace("\\", "/").strip("/")


def build_tree_lines(rel_paths: Sequence[str]) -> list[str]:
    """Build a visual tree representation of file paths.

    Paths are de-duplicated and sorted case-insensitively; at every level
    directories come before files and carry a trailing "/".

    Args:
        rel_paths (Sequence[str]): the file paths relative to the root, e.g. "src/main.py"

    Returns:
        list[str]: one string per tree entry, suitable for joining with newlines
    """
    rels = sorted(
        {normalize_rel_path(p) for p in rel_paths if p.strip()} - {""},
        key=str.lower,
    )
    tree: dict[Any, Any] = {}
    for rp in rels:
        cur = tree
        parts = [part for part in rp.split("/") if part]
        for i, part in enumerate(parts):
            if i == len(parts) - 1:
                cur.setdefault(_FILES, set()).add(part)
            else:
                cur = cur.setdefault(part, {})

    lines: list[str] = []

    def walk(node: dict[Any, Any], prefix: str) -> None:
        dirs = sorted([k for k in node if k is not _FILES], key=str.lower)
        files = sorted(node.get(_FILES, set()), key=str.lower)
        entries: list[tuple[str, str, Any]] = []
        entries.extend(("dir", d, node[d]) for d in dirs)
        entries.extend(("file", f, None) for f in files)
        for idx, (kind, name, child) in enumerate(entries):
            last = idx == len(entries) - 1
            branch = "└── " if last else "├── "
            lines.append(prefix + branch + name + ("/" if kind == "dir" else ""))
            if kind == "dir":
                ext = "    " if last else "│   "
                walk(child, prefix + ext)

    walk(tree, "")
    return lines


def generate_tree_string(rel_paths: Sequence[str]) -> str:
    """Render the directory tree of `rel_paths` as a single string.

    Args:
        rel_paths (Sequence[str]): the file paths relative to the root

    Returns:
        str: the tree, one entry per line, or an empty string for no paths
    """
    return "\n".join(build_tree_lines(rel_paths))


def utc_now() -> datetime:
    """Return the current instant as a timezone-aware UTC datetime.

    Returns:
        datetime: the current date and time in UTC
    """
    return datetime.now(UTC)


def format_generation_date(moment: datetime) -> str:
    """Format an instant as ISO 8601 UTC with millisecond precision.

    Naive datetimes are taken to be UTC already.

    Args:
        moment (datetime): the instant to format

    Returns:
        str: e.g. "2024-05-01T12:30:00.000Z"
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    stamp = moment.astimezone(UTC).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")
