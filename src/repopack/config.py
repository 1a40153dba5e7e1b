from __future__ import annotations

import json
from enum import StrEnum, auto
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel, to_snake

from repopack.exceptions import ConfigFileNotFoundError, ConfigLoadError
from repopack.logging import logger

DEFAULT_CONFIG_FILENAME = "repopack.config.json"
DEFAULT_OUTPUT_FILE_PATH = "repopack-output.txt"
DEFAULT_TOP_FILES_LENGTH = 5

_STYLE_ALIASES: dict[str, str] = {
    "structured": "xml",
}


class OutputStyle(StrEnum):
    """Serialization schema of the packed document.

    `PLAIN` frames files with separator lines, `XML` wraps every section and
    file in tag-delimited blocks.
    """

    PLAIN = auto()
    XML = auto()


class OutputConfig(BaseModel):
    """Options of the `output` section.

    Field names are snake_case in Python and camelCase in JSON
    (`filePath`, `headerText`, `removeComments`, ...); both spellings are accepted.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    file_path: str = Field(
        default=DEFAULT_OUTPUT_FILE_PATH,
        description="Destination file, resolved against the root directory.",
    )
    style: OutputStyle = Field(default=OutputStyle.PLAIN, description="Document schema.")
    header_text: str | None = Field(
        default=None,
        description="Extra user-provided header block; omitted when empty.",
    )
    remove_comments: bool = Field(
        default=False,
        description="Upstream stripped comments; adds a notice line.",
    )
    show_line_numbers: bool = Field(
        default=False,
        description="Upstream numbered lines; adds a notice line.",
    )
    top_files_length: int = Field(
        default=DEFAULT_TOP_FILES_LENGTH,
        ge=0,
        description="Number of largest files listed in the run summary.",
    )

    @field_validator("style", mode="before")
    @classmethod
    def normalize_style(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, str):
            lowered = value.strip().lower()
            return _STYLE_ALIASES.get(lowered, lowered)
        return value


class RepopackConfig(BaseModel):
    """Merged configuration consumed by the output generator.

    Unknown top-level sections (for instance ignore rules meant for the file
    collector) are ignored; unknown keys inside `output` are rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    output: OutputConfig = Field(default_factory=OutputConfig)


class SanitizedFile(BaseModel):
    """A file whose content is ready to be embedded in the packed document.

    Attributes:
        path: Path relative to the repository root, as shown in the output.
        content: Decoded text, already filtered or transformed upstream.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="File path relative to repository root")
    content: str = Field(..., description="Text embedded verbatim in the output")

    @property
    def char_count(self) -> int:
        """Number of characters of the content."""
        return len(self.content)


def _snake_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively convert mapping keys to snake_case.

    Args:
        data (dict[str, Any]): a mapping using camelCase and/or snake_case keys

    Returns:
        dict[str, Any]: a copy of `data` with snake_case keys at every level
    """
    out: dict[str, Any] = {}
    for key, value in data.items():
        out[to_snake(key)] = _snake_keys(value) if isinstance(value, dict) else value
    return out


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge `override` into a copy of `base`, nested mappings key by key.

    Args:
        base (dict[str, Any]): the lower-priority mapping
        override (dict[str, Any]): the higher-priority mapping

    Returns:
        dict[str, Any]: the merged mapping; neither input is modified
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config_file(root_dir: Path, config_path: str | Path | None = None) -> dict[str, Any]:
    """Read a JSON configuration file.

    Without `config_path`, `repopack.config.json` in `root_dir` is used when it exists.
    A relative `config_path` is resolved against `root_dir`.

    Args:
        root_dir (Path): the repository root
        config_path (str | Path | None): explicit configuration file, if any

    Raises:
        ConfigFileNotFoundError: if an explicitly requested file does not exist
        ConfigLoadError: if the file is not valid JSON or not a JSON object

    Returns:
        dict[str, Any]: the raw configuration mapping, empty when no default file exists
    """
    if config_path is None:
        path = Path(root_dir) / DEFAULT_CONFIG_FILENAME
        if not path.is_file():
            logger.info("No config file at %s, using defaults", path)
            return {}
    else:
        path = Path(root_dir) / config_path
        if not path.is_file():
            raise ConfigFileNotFoundError(path=path)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigLoadError(path=path, message=str(e)) from e
    if not isinstance(data, dict):
        raise ConfigLoadError(path=path, message="top-level value must be a JSON object")

    logger.info("Loaded config from %s", path)
    return data


def merge_configs(
    file_config: dict[str, Any],
    cli_config: dict[str, Any] | None = None,
) -> RepopackConfig:
    """Merge configuration layers into a validated `RepopackConfig`.

    Precedence is defaults < file < command line.

    Args:
        file_config (dict[str, Any]): values read from the configuration file
        cli_config (dict[str, Any] | None): values given on the command line

    Raises:
        ConfigLoadError: if the merged values do not validate

    Returns:
        RepopackConfig: the merged configuration
    """
    merged = deep_merge(_snake_keys(file_config), _snake_keys(cli_config or {}))
    try:
        return RepopackConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigLoadError(path=None, message=str(e)) from e
