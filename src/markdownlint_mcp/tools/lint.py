"""lint_markdown, fix_markdown and get_configuration tool implementations."""
import logging
from pathlib import Path

import yaml

from markdownlint_mcp.config import Config
from markdownlint_mcp.core.config_loader import load_configuration, parse_config_file
from markdownlint_mcp.core.linter import engine
from markdownlint_mcp.core.linter.models import FallbackCounter
from markdownlint_mcp.core.linter.rules import get_implemented_rules

logger = logging.getLogger(__name__)


def resolve_markdown_path(file_path: str, config: Config) -> Path:
    """Resolve a tool path argument; relative paths are taken from the workspace root."""
    path = Path(file_path).expanduser()
    if not path.is_absolute():
        path = config.workspace_root / path
    return path


def check_markdown_file(path: Path, config: Config) -> str | None:
    """Return an error message if ``path`` cannot be linted, else None."""
    if not path.exists():
        return f"File not found: {path}"
    if not path.is_file():
        return f"Not a file: {path}"
    size = path.stat().st_size
    if size > config.max_file_bytes:
        return f"File too large: {size} bytes (limit {config.max_file_bytes})"
    return None


def base_config(config: Config) -> dict | None:
    """Parse the server-wide default markdownlint config, if one is configured."""
    if config.default_config is None:
        return None
    try:
        return parse_config_file(config.default_config)
    except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring default config {config.default_config}: {e}")
        return None


def config_for(directory: Path | str, config: Config, counter: FallbackCounter) -> dict:
    return load_configuration(
        directory,
        workspace_root=config.workspace_root,
        counter=counter,
        defaults=base_config(config),
    )


def register(mcp, config: Config):
    """Register markdownlint tools with MCP server."""

    @mcp.tool()
    async def lint_markdown(file_path: str) -> dict:
        """
        Lint a Markdown file against the markdownlint rule set.

        Uses the .markdownlint.json/.yaml file in the document's directory
        when there is one inside the workspace, otherwise the defaults
        (line length 120, inline HTML allowed, no first-line heading required).

        Args:
            file_path: Path to the Markdown file (absolute or relative to the workspace)

        Returns:
            Dictionary with:
            - path (str): Path that was linted
            - total_issues (int): Total issues found
            - fixable (int): Issues a fixer exists for
            - issues (list): Individual issues with rule, line, message and range

        Example:
            {"file_path": "docs/README.md"}
        """
        path = resolve_markdown_path(file_path, config)
        if error := check_markdown_file(path, config):
            return {"error": error}

        logger.info(f"Linting {path}")

        try:
            counter = FallbackCounter()
            md_config = config_for(path.parent, config, counter)
            report = await engine.lint_file(path, config=md_config, counter=counter)

            logger.info(f"Lint complete: {report.total_issues} issues ({report.fixable} fixable)")

            result = report.to_dict()
            if diagnostics := counter.snapshot():
                result["diagnostics"] = diagnostics
            return result

        except Exception as e:
            logger.error(f"Lint failed: {e}", exc_info=True)
            return {"error": str(e)}

    @mcp.tool()
    async def fix_markdown(file_path: str, write_file: bool = True) -> dict:
        """
        Apply automatic fixes to a Markdown file.

        Fixers run in the order their rules first report an issue, then the
        document is linted again. Rules without a fixer (for example MD013
        line-length) are reported under ``remaining``.

        Args:
            file_path: Path to the Markdown file (absolute or relative to the workspace)
            write_file: Write the fixed content back to the file (default: True)

        Returns:
            Dictionary with:
            - path (str): Path that was fixed
            - rules_applied (list): Rule ids whose fixers ran, in order
            - issues_before / issues_after / resolved (int): Issue counts
            - estimated_fixes (int): Rough line-based estimate of edits made
            - changed (bool): Whether the content changed
            - written (bool): Whether the file was written
            - remaining (list): Issues left after fixing
            - content (str): The fixed content, when write_file is False
        """
        path = resolve_markdown_path(file_path, config)
        if error := check_markdown_file(path, config):
            return {"error": error}

        logger.info(f"Fixing {path} (write_file={write_file})")

        try:
            counter = FallbackCounter()
            md_config = config_for(path.parent, config, counter)
            report = await engine.fix_file(path, write=write_file, config=md_config, counter=counter)

            logger.info(
                f"Fix complete: {report.issues_before} -> {report.issues_after} issues "
                f"({', '.join(report.rules_applied) or 'no fixers applied'})"
            )

            result = report.to_dict()
            if not write_file:
                result["content"] = report.content
            if diagnostics := counter.snapshot():
                result["diagnostics"] = diagnostics
            return result

        except Exception as e:
            logger.error(f"Fix failed: {e}", exc_info=True)
            return {"error": str(e)}

    @mcp.tool()
    async def get_configuration(directory: str | None = None) -> dict:
        """
        Show the markdownlint configuration that applies to a directory.

        Args:
            directory: Directory to inspect (default: the workspace root)

        Returns:
            Dictionary with:
            - directory (str): Directory that was inspected
            - configuration (dict): Effective markdownlint configuration
            - source (str): "file" if a config file was used, else "default"
            - fixable_rules (list): Rule ids that have an automatic fix
        """
        target = directory if directory else str(config.workspace_root)

        try:
            counter = FallbackCounter()
            md_config = config_for(target, config, counter)
            used_default = any(name.startswith("config_") for name in counter.snapshot())

            return {
                "directory": target,
                "configuration": md_config,
                "source": "default" if used_default else "file",
                "fixable_rules": get_implemented_rules(),
            }

        except Exception as e:
            logger.error(f"Reading configuration failed: {e}", exc_info=True)
            return {"error": str(e)}
