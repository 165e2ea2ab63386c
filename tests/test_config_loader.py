"""Tests for .markdownlint configuration discovery and sandboxing."""
import json
import os

import pytest

from markdownlint_mcp.core.config_loader import (
    DEFAULT_CONFIG,
    get_default_config,
    load_configuration,
    resolve_directory,
    strip_json_comments,
)
from markdownlint_mcp.core.linter.models import FallbackCounter


@pytest.fixture
def workspace(tmp_path):
    root = tmp_path / "workspace"
    root.mkdir()
    return root


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def test_missing_file_uses_defaults(workspace):
    counter = FallbackCounter()
    config = load_configuration(workspace, workspace_root=workspace, counter=counter)
    assert config == DEFAULT_CONFIG
    assert counter.snapshot() == {"config_missing": 1}


def test_json_config(workspace):
    (workspace / ".markdownlint.json").write_text(json.dumps({"MD013": {"line_length": 80}}))
    counter = FallbackCounter()
    config = load_configuration(workspace, workspace_root=workspace, counter=counter)
    assert config == {"MD013": {"line_length": 80}}
    assert counter.snapshot() == {}


def test_jsonc_config(workspace):
    (workspace / ".markdownlint.jsonc").write_text(
        '{\n'
        '  // Longer lines\n'
        '  "MD013": {"line_length": 80},\n'
        '  /* inline HTML\n'
        '     is fine */\n'
        '  "MD033": {"allowed_elements": ["a//b"]}\n'
        '}\n'
    )
    config = load_configuration(workspace, workspace_root=workspace)
    assert config == {"MD013": {"line_length": 80}, "MD033": {"allowed_elements": ["a//b"]}}


def test_yaml_config(workspace):
    (workspace / ".markdownlint.yaml").write_text("default: true\nMD041: false\nline-length:\n  line_length: 100\n")
    config = load_configuration(workspace, workspace_root=workspace)
    assert config == {"default": True, "MD041": False, "line-length": {"line_length": 100}}


def test_json_takes_precedence_over_yaml(workspace):
    (workspace / ".markdownlint.yml").write_text("MD001: false\n")
    (workspace / ".markdownlint.json").write_text('{"MD002": false}')
    assert load_configuration(workspace, workspace_root=workspace) == {"MD002": False}


def test_unsafe_keys_are_dropped(workspace):
    (workspace / ".markdownlint.json").write_text(
        json.dumps({"extends": "../base.json", "customRules": ["rule.js"], "MD001": False})
    )
    assert load_configuration(workspace, workspace_root=workspace) == {"MD001": False}


def test_relative_directory_is_taken_from_workspace(workspace):
    sub = workspace / "docs"
    sub.mkdir()
    (sub / ".markdownlint.yaml").write_text("MD009: false\n")
    assert load_configuration("docs", workspace_root=workspace) == {"MD009": False}


# ---------------------------------------------------------------------------
# Fallbacks
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("text", ["{not json", "[1, 2]", '"just a string"'])
def test_unparseable_json_falls_back(workspace, text):
    (workspace / ".markdownlint.json").write_text(text)
    counter = FallbackCounter()
    assert load_configuration(workspace, workspace_root=workspace, counter=counter) == DEFAULT_CONFIG
    assert counter.get("config_parse_error") == 1


def test_non_mapping_yaml_falls_back(workspace):
    (workspace / ".markdownlint.yaml").write_text("- MD001\n- MD002\n")
    counter = FallbackCounter()
    assert load_configuration(workspace, workspace_root=workspace, counter=counter) == DEFAULT_CONFIG
    assert counter.get("config_parse_error") == 1


def test_invalid_yaml_falls_back(workspace):
    (workspace / ".markdownlint.yaml").write_text("MD001: [unclosed\n")
    counter = FallbackCounter()
    assert load_configuration(workspace, workspace_root=workspace, counter=counter) == DEFAULT_CONFIG
    assert counter.get("config_parse_error") == 1


def test_custom_defaults(workspace):
    defaults = {"default": False, "MD001": True}
    config = load_configuration(workspace, workspace_root=workspace, defaults=defaults)
    assert config == defaults
    config["MD002"] = True
    assert "MD002" not in defaults


def test_default_config_is_a_copy():
    config = get_default_config()
    config["MD013"]["line_length"] = 10
    assert DEFAULT_CONFIG["MD013"]["line_length"] == 120


# ---------------------------------------------------------------------------
# Sandboxing
# ---------------------------------------------------------------------------


def test_directory_outside_workspace_is_rejected(tmp_path, workspace):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / ".markdownlint.json").write_text('{"MD001": false}')

    counter = FallbackCounter()
    config = load_configuration(outside, workspace_root=workspace, counter=counter)
    assert config == DEFAULT_CONFIG
    assert counter.get("config_rejected_path") == 1


@pytest.mark.parametrize("directory", ["../outside", "docs/../../outside", "a\0b", "a" * 2000, "", "missing"])
def test_unsafe_relative_paths_are_rejected(workspace, directory):
    assert resolve_directory(directory, workspace) is None


def test_symlink_escape_is_rejected(tmp_path, workspace):
    outside = tmp_path / "outside"
    outside.mkdir()
    link = workspace / "link"
    os.symlink(outside, link)

    assert resolve_directory(link, workspace) is None
    assert resolve_directory("link", workspace) is None


def test_symlink_inside_workspace_is_allowed(workspace):
    target = workspace / "docs"
    target.mkdir()
    os.symlink(target, workspace / "alias")
    assert resolve_directory("alias", workspace) == target.resolve()


def test_workspace_root_itself_is_allowed(workspace):
    assert resolve_directory(workspace, workspace) == workspace.resolve()


# ---------------------------------------------------------------------------
# JSON comments
# ---------------------------------------------------------------------------


def test_strip_json_comments_keeps_strings():
    text = '{"url": "http://a.org/*x*/", "q": "say \\"//hi\\""} // trailing'
    assert json.loads(strip_json_comments(text)) == {"url": "http://a.org/*x*/", "q": 'say "//hi"'}


def test_unterminated_block_comment_runs_to_end():
    assert strip_json_comments('{"a": 1} /* open') == '{"a": 1} '
