"""
repopack — Pack already-collected repository files into a single document.

Overview
--------
The file collector (discovery, ignore rules, decoding, optional comment
stripping and line numbering) writes a JSONL manifest, one record per file:

    {"path": "src/app.py", "content": "print('hi')\\n"}
    {"path": "assets/logo.png", "content": null}

Records without content only appear in the repository tree. This command turns
the manifest into one of two documents:

1) **Plain (`--style plain`)** — separator-framed sections and file entries.
2) **XML (`--style xml`, alias `structured`)** — tag-delimited sections and
   one `<file path="...">` block per file.

Options come from `repopack.config.json` in the root directory (or `--config`,
or the `REPOPACK_CONFIG` environment variable, `.env` files included), and
command-line flags override the file.

Usage
-----
    - Plain output next to the repository:
        uv run python -m repopack.cli --root . --input files.jsonl

    - XML output with a custom header, reading the manifest from stdin:
        collect-files | uv run python -m repopack.cli --style xml --header-text "Release 1.2"

    - Log to a file:
        uv run python -m repopack.cli --input files.jsonl --log-file pack.log
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from repopack import __version__
from repopack.config import load_config_file, merge_configs
from repopack.logging import logger, setup_logging
from repopack.manifest import Manifest, load_manifest, read_manifest
from repopack.output_construction import generate_output
from repopack.settings import CONFIG_ENV_VAR, ENV_FILE, Settings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from repopack.config import RepopackConfig, SanitizedFile


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command-line arguments into `Settings`.

    Args:
        argv (Sequence[str] | None): the arguments, `sys.argv[1:]` when None

    Returns:
        Settings: the parsed settings
    """
    p = argparse.ArgumentParser(
        prog="repopack",
        description="Pack sanitized repository files into one plain or XML document.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--root", type=str, default=".", help="Repository root.")
    p.add_argument(
        "--input",
        type=str,
        default="-",
        help="JSONL file manifest ('-' reads stdin).",
    )
    p.add_argument(
        "--config",
        type=str,
        default=os.environ.get(CONFIG_ENV_VAR, ""),
        help=f"Configuration file (default: repopack.config.json, or ${CONFIG_ENV_VAR}).",
    )
    p.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output file, relative to the root.",
    )
    p.add_argument(
        "--style",
        type=str,
        choices=["plain", "xml", "structured"],
        default=None,
        help="Output style.",
    )
    p.add_argument(
        "--remove-comments",
        action="store_true",
        default=None,
        help="Mention that comments were removed.",
    )
    p.add_argument(
        "--show-line-numbers",
        action="store_true",
        default=None,
        help="Mention that line numbers were added.",
    )
    p.add_argument("--header-text", type=str, default=None, help="Additional header text.")
    p.add_argument(
        "--tree-path",
        action="append",
        default=[],
        help="Extra path shown in the tree only (repeatable).",
    )
    p.add_argument(
        "--top-files-len",
        type=int,
        default=None,
        help="Number of largest files listed in the summary.",
    )
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    args = p.parse_args(argv)
    return Settings(**vars(args))


def read_input(source: str) -> Manifest:
    """Read the manifest from a file, or from stdin when `source` is "-".

    Args:
        source (str): the manifest path or "-"

    Returns:
        Manifest: the parsed manifest
    """
    if source == "-":
        return read_manifest(sys.stdin)
    return load_manifest(Path(source))


def format_summary(
    out_path: Path,
    config: RepopackConfig,
    files: Sequence[SanitizedFile],
) -> str:
    """Describe a finished run, listing the largest files when configured.

    Args:
        out_path (Path): the written document
        config (RepopackConfig): the merged configuration
        files (Sequence[SanitizedFile]): the embedded files

    Returns:
        str: a multi-line summary
    """
    total_chars = sum(f.char_count for f in files)
    lines = [f"Wrote {out_path} style={config.output.style} files={len(files)} chars={total_chars}"]
    top_n = config.output.top_files_length
    if top_n and files:
        ranked = sorted(files, key=lambda f: f.char_count, reverse=True)[:top_n]
        lines.append(f"Top {len(ranked)} files by character count:")
        lines.extend(f"{i}. {f.path} ({f.char_count} chars)" for i, f in enumerate(ranked, start=1))
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    if ENV_FILE:
        load_dotenv(ENV_FILE)
    settings = parse_args(argv)
    if settings.log_file:
        setup_logging(settings.log_file)

    root = Path(settings.root).resolve()
    file_config = load_config_file(root, settings.config or None)
    config = merge_configs(file_config, settings.cli_overrides())

    manifest = read_input(settings.input)
    all_file_paths = [*manifest.all_file_paths, *settings.tree_path]
    logger.info(
        "Packing %d files (%d paths) style=%s",
        len(manifest.sanitized_files),
        len(all_file_paths),
        config.output.style,
    )

    out_path = generate_output(root, config, manifest.sanitized_files, all_file_paths)

    print(format_summary(out_path, config, manifest.sanitized_files))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
