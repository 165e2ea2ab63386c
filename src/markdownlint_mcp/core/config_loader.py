"""Per-directory markdownlint configuration discovery."""
import copy
import json
import logging
import os
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# Used when no configuration file is found or it cannot be trusted
DEFAULT_CONFIG = {
    "default": True,
    "MD013": {"line_length": 120},  # Allow longer lines for modern displays
    "MD033": False,  # Allow HTML
    "MD041": False,  # Allow files to not start with a heading
}

CONFIG_FILES = (
    ".markdownlint.json",
    ".markdownlint.jsonc",
    ".markdownlint.yaml",
    ".markdownlint.yml",
)

# Keys that would load code or other files
UNSAFE_KEYS = ("customRules", "extends")

MAX_PATH_LENGTH = 1024


def get_default_config() -> dict:
    """Return a fresh copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def _fallback(counter, reason: str, detail: str, defaults: dict | None = None) -> dict:
    logger.warning(f"Using default markdownlint config ({reason}): {detail}")
    if counter is not None:
        counter.record(f"config_{reason}")
    return copy.deepcopy(defaults) if defaults is not None else get_default_config()


def _is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


def resolve_directory(directory: str | Path, workspace_root: Path) -> Path | None:
    """
    Canonicalize ``directory`` and make sure it stays inside ``workspace_root``.

    Relative paths are taken from the workspace root and may not contain
    ``..`` segments. Symlinks are resolved before the containment check,
    so a link pointing outside the workspace is rejected.

    Returns:
        The resolved directory, or None if it is unsafe or missing
    """
    raw = str(directory)
    if not raw or "\0" in raw or len(raw) > MAX_PATH_LENGTH:
        return None

    root = Path(os.path.realpath(workspace_root))

    if os.path.isabs(raw):
        candidate = Path(raw)
    else:
        segments = [s for s in raw.replace("\\", "/").split("/") if s]
        if ".." in segments:
            return None
        candidate = root.joinpath(*segments)

    resolved = Path(os.path.realpath(candidate))
    if not resolved.is_dir() or not _is_within(resolved, root):
        return None
    return resolved


def strip_json_comments(text: str) -> str:
    """Remove // and /* */ comments outside of JSON strings."""
    out = []
    i = 0
    in_string = False
    while i < len(text):
        char = text[i]
        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < len(text):
                out.append(text[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
            out.append(char)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = len(text) if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = len(text) if end == -1 else end + 2
        else:
            out.append(char)
            i += 1
    return "".join(out)


def parse_config_file(path: Path) -> dict:
    """
    Parse one configuration file by extension.

    Raises:
        ValueError: If the file does not hold a mapping
    """
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    elif path.suffix == ".jsonc":
        data = json.loads(strip_json_comments(text))
    else:
        data = json.loads(text)

    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a mapping, got {type(data).__name__}")
    return data


def load_configuration(
    directory: str | Path,
    workspace_root: Path | None = None,
    counter=None,
    defaults: dict | None = None,
) -> dict:
    """
    Load markdownlint configuration for a directory, or the defaults.

    Args:
        directory: Directory to look for a .markdownlint file in
        workspace_root: Directory configuration may be read from (default: cwd)
        counter: Optional FallbackCounter recording why defaults were used
        defaults: Configuration to fall back on instead of DEFAULT_CONFIG

    Returns:
        The parsed configuration with unsafe keys removed, or a copy of
        the defaults on any rejection or parse failure
    """
    root = workspace_root if workspace_root is not None else Path.cwd()

    resolved = resolve_directory(directory, root)
    if resolved is None:
        return _fallback(counter, "rejected_path", str(directory)[:200], defaults)

    for name in CONFIG_FILES:
        path = resolved / name
        if not path.is_file():
            continue
        try:
            config = parse_config_file(path)
        except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as e:
            return _fallback(counter, "parse_error", f"{path}: {e}", defaults)

        for key in UNSAFE_KEYS:
            if config.pop(key, None) is not None:
                logger.warning(f"Ignoring '{key}' in {path}")
        logger.debug(f"Loaded markdownlint config from {path}")
        return config

    logger.debug(f"No markdownlint config in {resolved}, using defaults")
    if counter is not None:
        counter.record("config_missing")
    return copy.deepcopy(defaults) if defaults is not None else get_default_config()
