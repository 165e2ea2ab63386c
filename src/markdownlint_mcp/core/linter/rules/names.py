"""
Proper name capitalization (MD044).

Names come from user configuration, so they are matched with
``find_word_matches`` and never turned into regular expressions.
"""
from typing import Optional

from ..blocks import code_block_mask, is_fence
from ..models import RuleConfig, RuleViolation, get_option
from ..safe_match import find_word_matches


def _name_map(config: Optional[RuleConfig]) -> dict[str, str]:
    """Lowercase form -> canonical form; a later duplicate wins."""
    return {name.lower(): name for name in get_option(config, 'names', []) if name}


def _checked_lines(lines: list[str], config: Optional[RuleConfig]) -> list[int]:
    skip_code = get_option(config, 'code_blocks', True)
    mask = code_block_mask(lines) if skip_code else [False] * len(lines)
    return [i for i, line in enumerate(lines) if not mask[i] and not is_fence(line)]


def proper_names(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Proper names should have the correct capitalization."""
    names = _name_map(config)
    if not names:
        return []

    violations = []
    for i in _checked_lines(lines, config):
        line = lines[i]
        for correct in names.values():
            for idx in find_word_matches(line, correct):
                found = line[idx:idx + len(correct)]
                if found != correct:
                    violations.append(RuleViolation(
                        i + 1,
                        f'Proper name "{found}" should be "{correct}"',
                        (idx, idx + len(found)),
                    ))
    return violations


def _splice_name(line: str, correct: str) -> str:
    matches = find_word_matches(line, correct)
    if not matches:
        return line

    parts = []
    cursor = 0
    for idx in matches:
        # Overlapping occurrence of a span already replaced.
        if idx < cursor:
            continue
        parts.append(line[cursor:idx])
        parts.append(correct)
        cursor = idx + len(correct)
    parts.append(line[cursor:])
    return ''.join(parts)


def fix_proper_names(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    names = _name_map(config)
    if not names:
        return fixed

    for i in _checked_lines(lines, config):
        line = fixed[i]
        for correct in names.values():
            line = _splice_name(line, correct)
        fixed[i] = line
    return fixed
