"""Rule registry and fix composer."""
from typing import Iterable, Optional

from ..models import Rule, RuleConfig
from . import code, headings, inline, lists, names, tables, whitespace

# Registry of all available rules, keyed by rule id
RULES: dict[str, Rule] = {rule.name: rule for rule in [
    # Headings
    Rule("MD001", "Heading levels should only increment by one level at a time",
         headings.heading_increment, headings.fix_heading_increment, ("heading-increment",)),
    Rule("MD003", "Heading style",
         headings.heading_style, headings.fix_heading_style, ("heading-style",)),
    Rule("MD018", "No space after hash on atx style heading",
         headings.no_missing_space_atx, headings.fix_no_missing_space_atx, ("no-missing-space-atx",)),
    Rule("MD019", "Multiple spaces after hash on atx style heading",
         headings.no_multiple_space_atx, headings.fix_no_multiple_space_atx, ("no-multiple-space-atx",)),
    Rule("MD020", "No space inside hashes on closed atx style heading",
         headings.no_missing_space_closed_atx, headings.fix_no_missing_space_closed_atx,
         ("no-missing-space-closed-atx",)),
    Rule("MD021", "Multiple spaces inside hashes on closed atx style heading",
         headings.no_multiple_space_closed_atx, headings.fix_no_multiple_space_closed_atx,
         ("no-multiple-space-closed-atx",)),
    Rule("MD022", "Headings should be surrounded by blank lines",
         headings.blanks_around_headings, headings.fix_blanks_around_headings, ("blanks-around-headings",)),
    Rule("MD023", "Headings must start at the beginning of the line",
         headings.heading_start_left, headings.fix_heading_start_left, ("heading-start-left",)),
    Rule("MD024", "Multiple headings with the same content",
         headings.no_duplicate_heading, None, ("no-duplicate-heading",)),
    Rule("MD025", "Multiple top-level headings in the same document",
         headings.single_title, headings.fix_single_title, ("single-title", "single-h1")),
    Rule("MD026", "Trailing punctuation in heading",
         headings.no_trailing_punctuation, headings.fix_no_trailing_punctuation, ("no-trailing-punctuation",)),
    Rule("MD036", "Emphasis used instead of a heading",
         headings.no_emphasis_as_heading, headings.fix_no_emphasis_as_heading, ("no-emphasis-as-heading",)),
    Rule("MD041", "First line in a file should be a top-level heading",
         headings.first_line_heading, None, ("first-line-heading", "first-line-h1")),
    Rule("MD043", "Required heading structure",
         headings.required_headings, None, ("required-headings",)),

    # Whitespace
    Rule("MD009", "Trailing spaces",
         whitespace.no_trailing_spaces, whitespace.fix_no_trailing_spaces, ("no-trailing-spaces",)),
    Rule("MD010", "Hard tabs",
         whitespace.no_hard_tabs, whitespace.fix_no_hard_tabs, ("no-hard-tabs",)),
    Rule("MD012", "Multiple consecutive blank lines",
         whitespace.no_multiple_blanks, whitespace.fix_no_multiple_blanks, ("no-multiple-blanks",)),
    Rule("MD013", "Line length",
         whitespace.line_length, None, ("line-length",)),
    Rule("MD027", "Multiple spaces after blockquote symbol",
         whitespace.no_multiple_space_blockquote, whitespace.fix_no_multiple_space_blockquote,
         ("no-multiple-space-blockquote",)),
    Rule("MD028", "Blank line inside blockquote",
         whitespace.no_blanks_blockquote, whitespace.fix_no_blanks_blockquote, ("no-blanks-blockquote",)),
    Rule("MD047", "Files should end with a single newline character",
         whitespace.single_trailing_newline, whitespace.fix_single_trailing_newline,
         ("single-trailing-newline",)),

    # Lists
    Rule("MD004", "Unordered list style",
         lists.ul_style, lists.fix_ul_style, ("ul-style",)),
    Rule("MD005", "Inconsistent indentation for list items at the same level",
         lists.list_indent, lists.fix_list_indent, ("list-indent",)),
    Rule("MD007", "Unordered list indentation",
         lists.ul_indent, lists.fix_ul_indent, ("ul-indent",)),
    Rule("MD029", "Ordered list item prefix",
         lists.ol_prefix, lists.fix_ol_prefix, ("ol-prefix",)),
    Rule("MD030", "Spaces after list markers",
         lists.list_marker_space, lists.fix_list_marker_space, ("list-marker-space",)),
    Rule("MD032", "Lists should be surrounded by blank lines",
         lists.blanks_around_lists, lists.fix_blanks_around_lists, ("blanks-around-lists",)),

    # Code
    Rule("MD014", "Dollar signs used before commands without showing output",
         code.commands_show_output, code.fix_commands_show_output, ("commands-show-output",)),
    Rule("MD031", "Fenced code blocks should be surrounded by blank lines",
         code.blanks_around_fences, code.fix_blanks_around_fences, ("blanks-around-fences",)),
    Rule("MD038", "Spaces inside code span elements",
         code.no_space_in_code, code.fix_no_space_in_code, ("no-space-in-code",)),
    Rule("MD040", "Fenced code blocks should have a language specified",
         code.fenced_code_language, None, ("fenced-code-language",)),
    Rule("MD046", "Code block style",
         code.code_block_style, code.fix_code_block_style, ("code-block-style",)),
    Rule("MD048", "Code fence style",
         code.code_fence_style, code.fix_code_fence_style, ("code-fence-style",)),

    # Inline
    Rule("MD011", "Reversed link syntax",
         inline.no_reversed_links, inline.fix_no_reversed_links, ("no-reversed-links",)),
    Rule("MD033", "Inline HTML",
         inline.no_inline_html, None, ("no-inline-html",)),
    Rule("MD034", "Bare URL used",
         inline.no_bare_urls, inline.fix_no_bare_urls, ("no-bare-urls",)),
    Rule("MD035", "Horizontal rule style",
         inline.hr_style, inline.fix_hr_style, ("hr-style",)),
    Rule("MD037", "Spaces inside emphasis markers",
         inline.no_space_in_emphasis, inline.fix_no_space_in_emphasis, ("no-space-in-emphasis",)),
    Rule("MD039", "Spaces inside link text",
         inline.no_space_in_links, inline.fix_no_space_in_links, ("no-space-in-links",)),
    Rule("MD042", "No empty links",
         inline.no_empty_links, None, ("no-empty-links",)),
    Rule("MD045", "Images should have alternate text (alt text)",
         inline.no_alt_text, None, ("no-alt-text",)),
    Rule("MD049", "Emphasis style",
         inline.emphasis_style, inline.fix_emphasis_style, ("emphasis-style",)),
    Rule("MD050", "Strong style",
         inline.strong_style, inline.fix_strong_style, ("strong-style",)),
    Rule("MD051", "Link fragments should be valid",
         inline.link_fragments, None, ("link-fragments",)),
    Rule("MD052", "Reference links and images should use a label that is defined",
         inline.reference_links_images, None, ("reference-links-images",)),
    Rule("MD053", "Link and image reference definitions should be needed",
         inline.link_image_reference_definitions, inline.fix_link_image_reference_definitions,
         ("link-image-reference-definitions",)),
    Rule("MD054", "Link and image style",
         inline.link_image_style, None, ("link-image-style",)),
    Rule("MD059", "Link text should be descriptive",
         inline.descriptive_link_text, None, ("descriptive-link-text",)),

    # Tables
    Rule("MD055", "Table pipe style",
         tables.table_pipe_style, tables.fix_table_pipe_style, ("table-pipe-style",)),
    Rule("MD056", "Table column count",
         tables.table_column_count, None, ("table-column-count",)),
    Rule("MD058", "Tables should be surrounded by blank lines",
         tables.blanks_around_tables, tables.fix_blanks_around_tables, ("blanks-around-tables",)),

    # Names
    Rule("MD044", "Proper names should have the correct capitalization",
         names.proper_names, names.fix_proper_names, ("proper-names",)),
]}

_BY_NAME: dict[str, Rule] = {
    name.lower(): rule for rule in RULES.values() for name in rule.names
}


def get_rule(name: str) -> Optional[Rule]:
    """Look up a rule by id or alias, case-insensitively."""
    if not isinstance(name, str):
        return None
    return _BY_NAME.get(name.lower())


def get_implemented_rules() -> list[str]:
    """Ids of every rule that has a fixer, in id order."""
    return sorted(rule.name for rule in RULES.values() if rule.fixable)


def rule_settings(config: Optional[dict], rule: Rule) -> tuple[bool, RuleConfig]:
    """
    Resolve whether ``rule`` is enabled in a markdownlint-style config,
    and with which options.

    Keys may be the rule id or any alias, in any case. ``false`` disables
    the rule, ``true`` enables it with defaults and a mapping enables it
    with those options. Rules not mentioned follow ``default``.
    """
    if not isinstance(config, dict):
        return True, {}

    enabled = config.get('default', True) is not False
    options: RuleConfig = {}
    keys = {name.lower() for name in rule.names}

    for key, value in config.items():
        if not isinstance(key, str) or key.lower() not in keys:
            continue
        if value is False:
            enabled, options = False, {}
        elif value is True:
            enabled = True
        elif isinstance(value, dict):
            enabled = True
            options = {**options, **value}

    return enabled, options


def enabled_rules(config: Optional[dict] = None) -> list[tuple[Rule, RuleConfig]]:
    """Every enabled rule with its resolved options, in id order."""
    found = []
    for rule_id in sorted(RULES):
        rule = RULES[rule_id]
        enabled, options = rule_settings(config, rule)
        if enabled:
            found.append((rule, options))
    return found


def apply_rule_fixes(lines: list[str], rule_ids: Iterable[str], config: Optional[dict] = None) -> list[str]:
    """
    Run each rule's fixer over the output of the previous one.

    Order matters: ``rule_ids`` is applied exactly as given. Unknown ids
    and detect-only rules are skipped. A fixer that raises aborts the
    whole pass; the input list is never modified.
    """
    working = list(lines)
    for rule_id in rule_ids:
        rule = get_rule(rule_id)
        if rule is None or rule.fix is None:
            continue
        _, options = rule_settings(config, rule)
        working = rule.fix(working, options)
    return working


def describe_rule(rule: Rule) -> dict:
    return {
        "id": rule.name,
        "aliases": list(rule.aliases),
        "description": rule.description,
        "fixable": rule.fixable,
    }


__all__ = [
    "RULES",
    "get_rule",
    "get_implemented_rules",
    "rule_settings",
    "enabled_rules",
    "apply_rule_fixes",
    "describe_rule",
]
