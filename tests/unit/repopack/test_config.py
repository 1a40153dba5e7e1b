from __future__ import annotations

import json
from pathlib import Path

import pytest

from repopack.config import (
    DEFAULT_CONFIG_FILENAME,
    OutputConfig,
    OutputStyle,
    RepopackConfig,
    SanitizedFile,
    deep_merge,
    load_config_file,
    merge_configs,
)
from repopack.exceptions import ConfigFileNotFoundError, ConfigLoadError


@pytest.mark.unit
def test_defaults() -> None:
    config = RepopackConfig()

    assert config.output.style is OutputStyle.PLAIN
    assert config.output.file_path == "repopack-output.txt"
    assert config.output.header_text is None
    assert config.output.remove_comments is False
    assert config.output.show_line_numbers is False
    assert config.output.top_files_length == 5  # noqa: PLR2004


@pytest.mark.unit
def test_output_config_accepts_camel_case_and_structured_alias() -> None:
    output = OutputConfig.model_validate(
        {"filePath": "pack.xml", "style": "Structured", "headerText": "hi", "showLineNumbers": True},
    )

    assert output.file_path == "pack.xml"
    assert output.style is OutputStyle.XML
    assert output.header_text == "hi"
    assert output.show_line_numbers is True


@pytest.mark.unit
def test_sanitized_file_char_count() -> None:
    assert SanitizedFile(path="a.txt", content="héllo").char_count == 5  # noqa: PLR2004


@pytest.mark.unit
def test_deep_merge_merges_nested_mappings() -> None:
    base = {"output": {"style": "plain", "filePath": "a.txt"}, "ignore": {"x": 1}}

    merged = deep_merge(base, {"output": {"style": "xml"}})

    assert merged == {"output": {"style": "xml", "filePath": "a.txt"}, "ignore": {"x": 1}}
    assert base["output"]["style"] == "plain"


@pytest.mark.unit
def test_merge_configs_cli_overrides_file() -> None:
    file_config = {"output": {"filePath": "from-file.txt", "style": "xml", "removeComments": True}}
    cli_config = {"output": {"file_path": "from-cli.txt"}}

    config = merge_configs(file_config, cli_config)

    assert config.output.file_path == "from-cli.txt"
    assert config.output.style is OutputStyle.XML
    assert config.output.remove_comments is True


@pytest.mark.unit
def test_merge_configs_ignores_unknown_sections() -> None:
    config = merge_configs({"ignore": {"useDefaultPatterns": True}, "include": ["src/**"]})

    assert config == RepopackConfig()


@pytest.mark.unit
@pytest.mark.parametrize(
    "file_config",
    [
        {"output": {"style": "markdown"}},
        {"output": {"unknownOption": 1}},
        {"output": {"topFilesLength": -1}},
    ],
)
def test_merge_configs_rejects_invalid_values(file_config: dict) -> None:
    with pytest.raises(ConfigLoadError):
        merge_configs(file_config)


@pytest.mark.unit
def test_load_config_file_without_default_file(tmp_path: Path) -> None:
    assert load_config_file(tmp_path) == {}


@pytest.mark.unit
def test_load_config_file_reads_default_file(tmp_path: Path) -> None:
    data = {"output": {"style": "xml"}}
    (tmp_path / DEFAULT_CONFIG_FILENAME).write_text(json.dumps(data), encoding="utf-8")

    assert load_config_file(tmp_path) == data


@pytest.mark.unit
def test_load_config_file_resolves_explicit_path_against_root(tmp_path: Path) -> None:
    (tmp_path / "conf").mkdir()
    (tmp_path / "conf" / "pack.json").write_text('{"output": {"headerText": "x"}}', encoding="utf-8")

    assert load_config_file(tmp_path, "conf/pack.json") == {"output": {"headerText": "x"}}


@pytest.mark.unit
def test_load_config_file_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigFileNotFoundError) as exc_info:
        load_config_file(tmp_path, "nope.json")

    assert exc_info.value.path == tmp_path / "nope.json"


@pytest.mark.unit
@pytest.mark.parametrize("text", ["{not json", "[1, 2]"])
def test_load_config_file_invalid_content(tmp_path: Path, text: str) -> None:
    path = tmp_path / DEFAULT_CONFIG_FILENAME
    path.write_text(text, encoding="utf-8")

    with pytest.raises(ConfigLoadError) as exc_info:
        load_config_file(tmp_path)

    assert exc_info.value.path == path
    assert str(path) in str(exc_info.value)
