"""Tests for the rule registry, config resolution and fix composition."""
import random

import pytest

from markdownlint_mcp.core.linter.models import Rule
from markdownlint_mcp.core.linter import rules as registry
from markdownlint_mcp.core.linter.rules import (
    RULES,
    apply_rule_fixes,
    enabled_rules,
    get_implemented_rules,
    get_rule,
    rule_settings,
)

# One document per fixable rule: it violates that rule, and the fixed
# output violates it no longer.
FIX_SAMPLES = {
    "MD001": (["# A", "", "### B", "", "#### C"], {}),
    "MD003": (["# A", "", "B", "---"], {}),
    "MD004": (["* a", "- b"], {}),
    "MD005": (["- a", " - b"], {}),
    "MD007": (["- a", "   - b"], {}),
    "MD009": (["Text   ", "More"], {}),
    "MD010": (["Text\there"], {}),
    "MD011": (["See (link)[https://example.com] now"], {}),
    "MD012": (["a", "", "", "b"], {}),
    "MD014": (["```sh", "$ ls", "$ pwd", "```"], {}),
    "MD018": (["#Heading"], {}),
    "MD019": (["#  Heading"], {}),
    "MD020": (["#Heading#"], {}),
    "MD021": (["#  Heading  #"], {}),
    "MD022": (["# A", "Text"], {}),
    "MD023": (["Text", "", "  # Heading"], {}),
    "MD025": (["---", "title: Example", "---", "# Heading", "# Another"], {}),
    "MD026": (["# Heading."], {}),
    "MD027": ([">  Quote"], {}),
    "MD028": (["> a", "", "> b"], {}),
    "MD029": (["1. a", "3. b", "4. c"], {}),
    "MD030": (["-  a", "-  b"], {}),
    "MD031": (["Text", "```", "code", "```", "More"], {}),
    "MD032": (["Text", "- a", "", "More"], {}),
    "MD034": (["Visit https://example.com today"], {}),
    "MD035": (["Text", "", "---", "", "***"], {}),
    "MD036": (["**Bold title**", "", "Text"], {}),
    "MD037": (["Some ** bold ** text"], {}),
    "MD038": (["Use ` code ` here"], {}),
    "MD039": (["[ link ](https://example.com)"], {}),
    "MD044": (["# Title", "We use c++ and C++ inconsistently."], {"names": ["C++"]}),
    "MD046": (["Text", "", "```", "a", "```", "", "    indented", "", "End"], {}),
    "MD047": (["Text"], {}),
    "MD048": (["```", "a", "```", "", "~~~", "b", "~~~"], {}),
    "MD049": (["*a* and _b_"], {}),
    "MD050": (["**a** and __b__"], {}),
    "MD053": (["[used][a]", "", "[a]: https://a.example", "[b]: https://b.example"], {}),
    "MD055": (["| a | b |", "| - | - |", "| 1 | 2"], {}),
    "MD058": (["Text", "| a | b |", "| - | - |"], {}),
}

# Every option key the rules read, set to hostile or ill-typed values.
HOSTILE_CONFIG = {
    "names": ["(a+)+$" * 2000, "", "[", "a" * 10000],
    "punctuation": "!" * 10000,
    "front_matter_title": "(x+x+)+y" * 1250,
    "style": "bogus",
    "level": 99,
    "line_length": "80",
    "maximum": -5,
    "indent": "two",
    "start_indent": -3,
    "lines_above": -1,
    "lines_below": 50,
    "br_spaces": 10**4,
    "spaces_per_tab": -3,
    "ul_multi": 0,
    "headings": ["*", "+", "?", "*"],
    "allowed_elements": [1, None],
    "prohibited_texts": ["(a+)+", ""],
    "ignored_labels": "x",
    "code_blocks": "yes",
}

SAMPLE_DOCUMENT = [
    "---",
    "title: Sample",
    "---",
    "#Heading",
    "Intro with https://example.com and (a)[b].",
    "",
    "* one",
    "+ two",
    "   1. nested",
    "",
    "```",
    "$ ls",
    "```",
    "| a | b |",
    "|---|---",
    "| 1 |",
    "",
    "> quote",
    "",
    "> more  ",
    "",
    "**Bold**",
    "",
    "    indented\t",
    "",
    "[x][missing] ![](img.png) [here](#nowhere) <div>",
    "[unused]: https://a.org",
]

# Self-contained line groups for assembling documents: fences close and
# tables carry their delimiter row.
FRAGMENTS = [
    ["# Heading"],
    ["## Section"],
    ["### Closed ###"],
    ["  # indented"],
    ["Title", "====="],
    ["Subtitle", "-----"],
    ["Some text."],
    ["**Bold line**"],
    ["- item", "- item two"],
    ["* star"],
    ["1. one", "3. three"],
    ["  - nested"],
    ["> quote"],
    ["```", "code", "```"],
    ["~~~py", "more code", "~~~"],
    ["| a | b |", "| - | - |", "| 1 | 2 |"],
    ["***"],
    [""],
    [""],
]


def _assembled_documents(count=200, seed=1729):
    rng = random.Random(seed)
    documents = []
    for _ in range(count):
        lines = []
        for fragment in rng.choices(FRAGMENTS, k=rng.randint(2, 8)):
            lines.extend(fragment)
        documents.append(lines)
    return documents


ASSEMBLED_DOCUMENTS = _assembled_documents()


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def test_registry_size_and_ids():
    assert len(RULES) == 52
    assert all(rule_id == rule.name for rule_id, rule in RULES.items())


def test_implemented_rules_are_sorted_fixers():
    implemented = get_implemented_rules()
    assert implemented == sorted(implemented)
    assert all(RULES[rule_id].fixable for rule_id in implemented)
    assert "MD044" in implemented
    assert "MD013" not in implemented
    assert len(implemented) == len(FIX_SAMPLES)


def test_get_rule_by_id_or_alias():
    assert get_rule("md044").name == "MD044"
    assert get_rule("Line-Length").name == "MD013"
    assert get_rule("single-h1").name == "MD025"
    assert get_rule("single-title").name == "MD025"
    assert get_rule("MD999") is None
    assert get_rule(None) is None


# ---------------------------------------------------------------------------
# Config resolution
# ---------------------------------------------------------------------------


def test_rule_settings():
    md013 = RULES["MD013"]
    assert rule_settings(None, md013) == (True, {})
    assert rule_settings({"MD013": False}, md013) == (False, {})
    assert rule_settings({"md013": {"line_length": 100}}, md013) == (True, {"line_length": 100})
    assert rule_settings({"line-length": {"line_length": 100}}, md013) == (True, {"line_length": 100})
    assert rule_settings({"default": False}, md013) == (False, {})
    assert rule_settings({"default": False, "MD013": True}, md013) == (True, {})


def test_later_key_wins():
    md013 = RULES["MD013"]
    config = {"MD013": {"line_length": 100}, "line-length": False}
    assert rule_settings(config, md013) == (False, {})


def test_enabled_rules():
    assert len(enabled_rules(None)) == 52
    ids = [rule.name for rule, _ in enabled_rules({"default": False, "MD001": True, "ul-style": {}})]
    assert ids == ["MD001", "MD004"]


# ---------------------------------------------------------------------------
# Fix composition
# ---------------------------------------------------------------------------


def test_unknown_and_detect_only_ids_are_skipped():
    lines = ["Text   ", "a"]
    assert apply_rule_fixes(lines, ["MD999", "MD013", "MD041"]) == lines


def test_input_is_not_modified():
    lines = ["#Heading", "Text"]
    fixed = apply_rule_fixes(lines, ["MD018", "MD022", "MD047"])
    assert fixed == ["# Heading", "", "Text", ""]
    assert lines == ["#Heading", "Text"]


def test_composition_order_matters():
    lines = ["# A", "", "# B", "", "### C"]
    increment_first = apply_rule_fixes(lines, ["MD001", "MD025"])
    title_first = apply_rule_fixes(lines, ["MD025", "MD001"])

    assert increment_first == ["# A", "", "## B", "", "## C"]
    assert title_first == ["# A", "", "## B", "", "### C"]
    assert apply_rule_fixes(lines, ["MD001", "MD025"]) == increment_first


def test_composer_passes_resolved_options():
    lines = ["\tx"]
    assert apply_rule_fixes(lines, ["MD010"], {"no-hard-tabs": {"spaces_per_tab": 2}}) == ["  x"]


def test_failing_fixer_aborts_the_pass(monkeypatch):
    def explode(lines, config=None):
        raise RuntimeError("fixer bug")

    broken = Rule("MD009", "Trailing spaces", RULES["MD009"].validate, explode)
    monkeypatch.setitem(registry._BY_NAME, "md009", broken)

    lines = ["#Heading", "Text  x   "]
    with pytest.raises(RuntimeError, match="fixer bug"):
        apply_rule_fixes(lines, ["MD018", "MD009"])
    assert lines == ["#Heading", "Text  x   "]


# ---------------------------------------------------------------------------
# Per-rule fix behaviour
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("rule_id", sorted(FIX_SAMPLES))
def test_fix_resolves_and_is_idempotent(rule_id):
    rule = RULES[rule_id]
    lines, config = FIX_SAMPLES[rule_id]

    assert rule.validate(lines, config), f"{rule_id} sample should have violations"

    fixed = rule.fix(lines, config)
    assert fixed != lines
    assert rule.validate(fixed, config) == []
    assert rule.fix(fixed, config) == fixed


@pytest.mark.parametrize("rule_id", sorted(RULES))
def test_rules_accept_empty_documents(rule_id):
    rule = RULES[rule_id]
    for lines in ([], [""]):
        assert rule.validate(lines, None) == []
        if rule.fixable:
            assert rule.fix(lines, None) == lines


@pytest.mark.parametrize("rule_id", sorted(RULES))
def test_rules_survive_hostile_config(rule_id):
    rule = RULES[rule_id]
    violations = rule.validate(SAMPLE_DOCUMENT, HOSTILE_CONFIG)
    assert all(v.line_number >= 1 for v in violations)
    if rule.fixable:
        fixed = rule.fix(SAMPLE_DOCUMENT, HOSTILE_CONFIG)
        assert isinstance(fixed, list)


@pytest.mark.parametrize("rule_id", sorted(RULES))
def test_fixers_do_not_mutate_their_input(rule_id):
    rule = RULES[rule_id]
    snapshot = list(SAMPLE_DOCUMENT)
    rule.validate(SAMPLE_DOCUMENT, {})
    if rule.fixable:
        rule.fix(SAMPLE_DOCUMENT, {})
    assert SAMPLE_DOCUMENT == snapshot


@pytest.mark.parametrize("rule_id", get_implemented_rules())
def test_fix_is_idempotent_on_assembled_documents(rule_id):
    rule = RULES[rule_id]
    for lines in ASSEMBLED_DOCUMENTS:
        fixed = rule.fix(lines, None)
        assert rule.fix(fixed, None) == fixed, lines
