"""Tests for whitespace rules (MD009, MD010, MD012, MD013, MD027, MD028, MD047)."""
from markdownlint_mcp.core.linter.rules import whitespace


def _lines(violations):
    return [v.line_number for v in violations]


# ---------------------------------------------------------------------------
# MD009 no-trailing-spaces
# ---------------------------------------------------------------------------


def test_trailing_spaces():
    violations = whitespace.no_trailing_spaces(["Text   ", "Line  ", "More"])
    assert _lines(violations) == [1]
    assert violations[0].details == "Expected: 0 or 2; Actual: 3"
    assert violations[0].range == (4, 7)
    assert whitespace.fix_no_trailing_spaces(["Text   ", "Line  ", "More"]) == ["Text", "Line  ", "More"]


def test_trailing_spaces_strict_only_keeps_real_breaks():
    config = {"strict": True}
    assert whitespace.no_trailing_spaces(["Line  ", "Next"], config) == []
    assert _lines(whitespace.no_trailing_spaces(["Line  ", ""], config)) == [1]


def test_trailing_spaces_in_code_are_ignored():
    assert whitespace.no_trailing_spaces(["```", "x   ", "```"]) == []


def test_blank_list_lines_can_be_exempt():
    lines = ["- a", "   ", "  b"]
    assert _lines(whitespace.no_trailing_spaces(lines)) == [2]
    assert whitespace.no_trailing_spaces(lines, {"list_item_empty_lines": True}) == []


# ---------------------------------------------------------------------------
# MD010 no-hard-tabs
# ---------------------------------------------------------------------------


def test_hard_tabs():
    violations = whitespace.no_hard_tabs(["a\t\tb"])
    assert violations[0].details == "Column: 2"
    assert violations[0].range == (1, 3)


def test_hard_tabs_code_block_options():
    lines = ["```make", "\tx", "```", "\ty"]
    assert _lines(whitespace.no_hard_tabs(lines)) == [2, 4]
    assert _lines(whitespace.no_hard_tabs(lines, {"code_blocks": False})) == [4]
    assert _lines(whitespace.no_hard_tabs(lines, {"ignore_code_languages": ["MAKE"]})) == [4]


def test_fix_hard_tabs():
    assert whitespace.fix_no_hard_tabs(["Text\there"]) == ["Text here"]
    assert whitespace.fix_no_hard_tabs(["\ty"], {"spaces_per_tab": 4}) == ["    y"]


# ---------------------------------------------------------------------------
# MD012 no-multiple-blanks
# ---------------------------------------------------------------------------


def test_multiple_blanks():
    lines = ["a", "", "", "b"]
    violations = whitespace.no_multiple_blanks(lines)
    assert _lines(violations) == [3]
    assert violations[0].details == "Expected: 1; Actual: 2"
    assert whitespace.fix_no_multiple_blanks(lines) == ["a", "", "b"]
    assert whitespace.no_multiple_blanks(lines, {"maximum": 2}) == []


def test_blank_lines_in_fences_are_kept():
    lines = ["```", "a", "", "", "b", "```"]
    assert whitespace.no_multiple_blanks(lines) == []


# ---------------------------------------------------------------------------
# MD013 line-length
# ---------------------------------------------------------------------------


def test_line_length():
    line = "a " * 45
    violations = whitespace.line_length([line])
    assert violations[0].details == "Expected: 80; Actual: 90"
    assert whitespace.line_length([line], {"line_length": 100}) == []


def test_unbreakable_line_is_allowed_unless_strict():
    url = "https://example.com/" + "x" * 100
    assert whitespace.line_length([url]) == []
    assert _lines(whitespace.line_length([url], {"strict": True})) == [1]


def test_line_length_section_options():
    long_text = "word " * 20
    assert whitespace.line_length(["```", long_text, "```"], {"code_blocks": False}) == []
    assert whitespace.line_length(["# " + long_text], {"headings": False}) == []
    assert whitespace.line_length(["# " + long_text], {"heading_line_length": 200}) == []


def test_reference_definitions_are_exempt():
    line = "[label]: https://example.com/ " + "a " * 40
    assert whitespace.line_length([line]) == []


# ---------------------------------------------------------------------------
# MD027 / MD028 blockquotes
# ---------------------------------------------------------------------------


def test_multiple_spaces_after_blockquote():
    assert _lines(whitespace.no_multiple_space_blockquote([">  Quote"])) == [1]
    assert whitespace.fix_no_multiple_space_blockquote([">  Quote"]) == ["> Quote"]
    assert whitespace.fix_no_multiple_space_blockquote(["> >  nested"]) == ["> > nested"]


def test_blank_line_inside_blockquote():
    lines = ["> a", "", "> b"]
    assert _lines(whitespace.no_blanks_blockquote(lines)) == [2]
    assert whitespace.fix_no_blanks_blockquote(lines) == ["> a", ">", "> b"]
    assert whitespace.no_blanks_blockquote(["> a", "", "b"]) == []


# ---------------------------------------------------------------------------
# MD047 single-trailing-newline
# ---------------------------------------------------------------------------


def test_single_trailing_newline():
    assert whitespace.single_trailing_newline([]) == []
    assert whitespace.single_trailing_newline(["a", ""]) == []
    assert _lines(whitespace.single_trailing_newline(["a"])) == [1]
    assert whitespace.fix_single_trailing_newline(["a"]) == ["a", ""]
