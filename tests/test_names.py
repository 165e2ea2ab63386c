"""Tests for proper name capitalization (MD044)."""
from markdownlint_mcp.core.linter.rules import names


def _lines(violations):
    return [v.line_number for v in violations]


def test_names_inside_fences_are_skipped():
    lines = ["```", "myword here", "```", "myword here"]
    violations = names.proper_names(lines, {"names": ["MyWord"]})
    assert _lines(violations) == [4]
    assert violations[0].details == 'Proper name "myword" should be "MyWord"'
    assert violations[0].range == (0, 6)


def test_code_blocks_option_checks_code_but_not_fences():
    lines = ["```", "myword here", "```", "myword here"]
    config = {"names": ["MyWord"], "code_blocks": False}
    assert _lines(names.proper_names(lines, config)) == [2, 4]


def test_round_trip_fix():
    lines = ["# Title", "We use c++ and C++ inconsistently."]
    config = {"names": ["C++"]}
    assert _lines(names.proper_names(lines, config)) == [2]

    fixed = names.fix_proper_names(lines, config)
    assert fixed == ["# Title", "We use C++ and C++ inconsistently."]
    assert names.proper_names(fixed, config) == []


def test_no_names_configured():
    assert names.proper_names(["javascript"]) == []
    assert names.fix_proper_names(["javascript"], {"names": []}) == ["javascript"]


def test_partial_words_are_left_alone():
    config = {"names": ["Go"]}
    assert names.proper_names(["going google go_lang"], config) == []
    assert names.fix_proper_names(["go, GO and gO"], config) == ["Go, Go and Go"]


def test_later_duplicate_spelling_wins():
    config = {"names": ["javascript", "JavaScript"]}
    assert names.fix_proper_names(["I like javascript"], config) == ["I like JavaScript"]


def test_overlapping_names():
    config = {"names": ["Java", "JavaScript"]}
    assert names.fix_proper_names(["javascript and java"], config) == ["JavaScript and Java"]


def test_metacharacter_names_are_literal():
    config = {"names": ["evil(pattern)"]}
    assert _lines(names.proper_names(["an EVIL(pattern) here"], config)) == [1]
    assert names.fix_proper_names(["an EVIL(pattern) here"], config) == ["an evil(pattern) here"]


def test_pathological_names_do_not_hang():
    config = {"names": ["(a+)+$", "(a|aa)*" * 1500, "a" * 2000]}
    lines = ["a" * 50 + "!", "text " * 200]
    assert names.proper_names(lines, config) == []
    assert names.fix_proper_names(lines, config) == lines


def test_very_long_name_is_matched_literally():
    name = "a" * 10000
    config = {"names": [name]}
    assert names.proper_names([name], config) == []
    assert _lines(names.proper_names([name.upper()], config)) == [1]
    assert names.fix_proper_names([name.upper()], config) == [name]


def test_non_string_names_are_ignored():
    assert names.proper_names(["java"], {"names": [1, None, "Java"]})[0].line_number == 1
    assert names.proper_names(["java"], {"names": "Java"}) == []
