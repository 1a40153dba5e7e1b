from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RepopackError(Exception):
    """Base exception for errors in the repopack package."""


@dataclass(frozen=True)
class ConfigLoadError(RepopackError):
    """Raised when a configuration file cannot be parsed or validated."""

    path: Path | None
    message: str

    def __str__(self) -> str:
        where = str(self.path) if self.path is not None else "<merged config>"
        return f"Invalid configuration ({where}): {self.message}"


@dataclass(frozen=True)
class ConfigFileNotFoundError(RepopackError):
    """Raised when an explicitly requested configuration file does not exist."""

    path: Path
    message: str = "The specified configuration file does not exist."

    def __str__(self) -> str:
        return f"{self.message} ({self.path})"


@dataclass(frozen=True)
class ManifestError(RepopackError):
    """Raised when a line of the JSONL file manifest is malformed."""

    line: int
    message: str

    def __str__(self) -> str:
        return f"Manifest line {self.line}: {self.message}"
