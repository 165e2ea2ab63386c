"""Configuration management with environment variable overrides."""
from dataclasses import dataclass, field
from pathlib import Path
import os

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Configuration for the markdownlint MCP server."""

    # Directory .markdownlint files may be read from (symlinks may not escape it)
    workspace_root: Path = field(default_factory=Path.cwd)

    # Optional markdownlint config file used when a directory has none
    default_config: Path | None = None

    # Tools refuse files larger than this
    max_file_bytes: int = 200_000

    # Logging
    log_level: str = "INFO"

    # Versioning
    version: str = "1.0.0"

    @classmethod
    def load(cls) -> "Config":
        """Load config with environment variable overrides."""
        config = cls()

        if val := os.environ.get("MARKDOWNLINT_MCP_WORKSPACE_ROOT"):
            config.workspace_root = Path(val).expanduser()

        if val := os.environ.get("MARKDOWNLINT_MCP_DEFAULT_CONFIG"):
            config.default_config = Path(val).expanduser()

        if val := os.environ.get("MARKDOWNLINT_MCP_MAX_FILE_BYTES"):
            config.max_file_bytes = int(val)

        if val := os.environ.get("MARKDOWNLINT_MCP_LOG_LEVEL"):
            if val.upper() in LOG_LEVELS:
                config.log_level = val.upper()

        config.workspace_root = config.workspace_root.resolve()

        return config
