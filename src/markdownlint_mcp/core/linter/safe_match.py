"""Literal, word-boundary-aware matching for configured names and patterns.

Configured strings (proper names, front matter keys, punctuation sets)
come from user files and are never compiled into regular expressions.
Everything here is plain substring search with single-character boundary
checks, so the worst case is O(len(line) * len(needle)).
"""
import re

# Fixed patterns written here, never built from configuration.
_WORD_CHAR = re.compile(r'[A-Za-z0-9_]')
_DEFAULT_TITLE = re.compile(r'^title\s*[:=]', re.IGNORECASE)
_PATTERN_META = set('\\[]^$.|?*+(){}')

MAX_PATTERN_LENGTH = 200
DEFAULT_PUNCTUATION = '.,;:!?'


def _is_word_char(char: str) -> bool:
    return bool(char) and _WORD_CHAR.match(char) is not None


def _fold(text: str) -> str:
    # Length-preserving lowercase; str.lower() can expand some code points.
    if text.isascii():
        return text.lower()
    return ''.join(c.lower()[:1] for c in text)


def find_word_matches(line: str, search: str) -> list[int]:
    """
    Find whole-word, case-insensitive occurrences of ``search`` in ``line``.

    The scan advances one character past each candidate so overlapping
    occurrences are each tested. Start and end of line count as boundaries.

    Args:
        line: Line to search
        search: Literal text to look for

    Returns:
        Start offsets of every bounded occurrence, in order
    """
    results: list[int] = []
    if not search:
        return results

    lower_line = _fold(line)
    lower_search = _fold(search)
    size = len(lower_search)

    start = 0
    while True:
        idx = lower_line.find(lower_search, start)
        if idx == -1:
            break

        before = line[idx - 1] if idx > 0 else ''
        after = line[idx + size] if idx + size < len(line) else ''

        if not _is_word_char(before) and not _is_word_char(after):
            results.append(idx)

        start = idx + 1

    return results


def _strip_pattern_meta(pattern: str) -> str:
    return ''.join(c for c in pattern if c not in _PATTERN_META)


def has_front_matter_title(line: str, pattern: str | None = None) -> bool:
    """
    Check whether a front matter line declares a title.

    With no pattern, matches ``title:`` or ``title =`` (case-insensitive).
    A configured pattern is treated as literal text: pattern metacharacters
    are dropped and the rest is checked with substring containment.
    """
    trimmed = line.strip()

    if not pattern:
        return _DEFAULT_TITLE.match(trimmed) is not None

    normalized = pattern.strip().lower()
    if len(normalized) > MAX_PATTERN_LENGTH:
        return False

    if any(c in _PATTERN_META for c in normalized):
        normalized = _strip_pattern_meta(normalized)

    if not normalized:
        return False

    return normalized in trimmed.lower()


def ends_with_punctuation(content: str, punctuation: str | None = None) -> bool:
    """Check whether ``content`` ends with one of the ``punctuation`` characters."""
    if not content:
        return False
    if punctuation is None:
        return content[-1] in DEFAULT_PUNCTUATION
    if len(punctuation) == 0 or len(punctuation) > MAX_PATTERN_LENGTH:
        return False

    return content[-1] in punctuation


def strip_trailing_punctuation(content: str, punctuation: str) -> str:
    """Remove every trailing character found in ``punctuation``."""
    if not punctuation or len(punctuation) > MAX_PATTERN_LENGTH:
        return content

    end = len(content)
    while end > 0 and content[end - 1] in punctuation:
        end -= 1
    return content[:end]
