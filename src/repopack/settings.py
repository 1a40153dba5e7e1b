from __future__ import annotations

from pathlib import Path
from typing import Any

from dotenv import find_dotenv
from pydantic import BaseModel, ConfigDict, Field

ENV_FILE = find_dotenv(usecwd=True)
CONFIG_ENV_VAR = "REPOPACK_CONFIG"


class Settings(BaseModel):
    """Command-line settings for the repopack entry point."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root: Path = Field(default_factory=Path.cwd, description="Repository root.")
    input: str = Field(default="-", description="JSONL file manifest ('-' for stdin).")
    config: str = Field(default="", description="Configuration file (JSON).")
    log_file: str = Field(default="", description="Log file path.")

    output: str | None = Field(default=None, description="Output file path.")
    style: str | None = Field(default=None, description="Output style.")
    remove_comments: bool | None = Field(default=None, description="Comments were stripped upstream.")
    show_line_numbers: bool | None = Field(default=None, description="Line numbers were added upstream.")
    header_text: str | None = Field(default=None, description="Additional header text.")
    top_files_len: int | None = Field(default=None, description="Number of largest files to list.")

    tree_path: list[str] = Field(default_factory=list, description="Extra tree-only path.")

    def cli_overrides(self) -> dict[str, Any]:
        """Return the configuration values given on the command line.

        Options left unset are omitted so they do not shadow the configuration file.

        Returns:
            dict[str, Any]: a partial configuration mapping, e.g. {"output": {"style": "xml"}}
        """
        candidates = {
            "file_path": self.output,
            "style": self.style,
            "remove_comments": self.remove_comments,
            "show_line_numbers": self.show_line_numbers,
            "header_text": self.header_text,
            "top_files_length": self.top_files_len,
        }
        output = {k: v for k, v in candidates.items() if v is not None}
        return {"output": output} if output else {}
