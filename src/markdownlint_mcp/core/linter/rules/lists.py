"""List marker, indentation and spacing rules."""
from dataclasses import dataclass, field
from typing import Optional

from ..blocks import (
    Document,
    ListItem,
    indent_of,
    is_blank,
    is_blockquote,
    is_fence,
    is_thematic_break,
    parse_atx,
    parse_list_item,
)
from ..models import RuleConfig, RuleViolation, get_option

UL_MARKERS = {'asterisk': '*', 'dash': '-', 'plus': '+'}
UL_STYLE_NAMES = {v: k for k, v in UL_MARKERS.items()}
SUBLIST_CYCLE = ['*', '+', '-']


@dataclass
class NestedItem:
    item: ListItem
    depth: int
    parent: Optional[int]  # line index of the parent item
    ancestors_unordered: bool


@dataclass
class ListBlock:
    """A run of lines forming one top-level list, ``end`` exclusive."""
    start: int
    end: int
    items: list[ListItem] = field(default_factory=list)
    loose: bool = False

    def nested(self) -> list[NestedItem]:
        return nest_items(self.items)

    def content_indent(self) -> int:
        """Indent a line needs to sit inside the latest top-level item."""
        top = [item for item in self.items if item.indent <= self.items[0].indent]
        return top[-1].content_offset


def nest_items(items: list[ListItem]) -> list[NestedItem]:
    """Assign a nesting depth and parent to each item by indentation."""
    nested: list[NestedItem] = []
    stack: list[NestedItem] = []

    for item in items:
        while stack and item.indent < stack[-1].item.content_offset:
            stack.pop()
        parent = stack[-1] if stack else None
        entry = NestedItem(
            item=item,
            depth=len(stack),
            parent=parent.item.index if parent else None,
            ancestors_unordered=all(not e.item.ordered for e in stack),
        )
        nested.append(entry)
        stack.append(entry)

    return nested


def _interrupts_list(line: str) -> bool:
    return (
        parse_atx(line) is not None
        or is_thematic_break(line)
        or is_fence(line)
        or (is_blockquote(line) and indent_of(line) == 0)
    )


def list_blocks(doc: Document) -> list[ListBlock]:
    """Group list item lines and their continuation lines into list blocks."""
    lines = doc.lines
    blocks: list[ListBlock] = []
    current: Optional[ListBlock] = None
    pending_blank = False

    fence_indent = {}
    for block in doc.fences:
        stop = block.end if block.end is not None else len(lines) - 1
        for i in range(block.start, stop + 1):
            fence_indent[i] = block.indent

    def close() -> None:
        nonlocal current
        if current is not None:
            blocks.append(current)
        current = None

    for i, line in enumerate(lines):
        if doc.in_front_matter(i):
            continue

        if not doc.is_prose(i):
            if current is None:
                continue
            if i in fence_indent:
                inside = fence_indent[i] > current.items[0].indent
            else:
                inside = indent_of(line) > current.items[0].indent or is_blank(line)
            if inside:
                if not is_blank(line):
                    current.end = i + 1
                    current.loose = current.loose or pending_blank
                    pending_blank = False
            else:
                close()
            continue

        item = parse_list_item(line, i)
        if item is not None:
            if current is None:
                current = ListBlock(start=i, end=i + 1)
                pending_blank = False
            current.items.append(item)
            current.end = i + 1
            current.loose = current.loose or pending_blank
            pending_blank = False
            continue

        if is_blank(line):
            if current is not None:
                pending_blank = True
            continue

        if current is None:
            continue

        if indent_of(line) >= current.content_indent():
            continuation = True
        elif pending_blank:
            continuation = False
        else:
            continuation = not _interrupts_list(line)

        if continuation:
            current.end = i + 1
            current.loose = current.loose or pending_blank
            pending_blank = False
        else:
            close()

    close()
    return blocks


def _all_items(lines: list[str]) -> list[tuple[ListBlock, NestedItem]]:
    doc = Document.from_lines(lines)
    return [(block, entry) for block in list_blocks(doc) for entry in block.nested()]


def _replace_marker(line: str, item: ListItem, marker: str) -> str:
    start = item.indent
    return line[:start] + marker + line[start + len(item.marker):]


def _reindent(line: str, item: ListItem, indent: int) -> str:
    return ' ' * indent + line[item.indent:]


# ---------------------------------------------------------------------------
# MD004 ul-style
# ---------------------------------------------------------------------------


def _expected_markers(lines: list[str], config: Optional[RuleConfig]) -> list[tuple[ListItem, str]]:
    style = get_option(config, 'style', 'consistent')
    expected: list[tuple[ListItem, str]] = []
    document_marker: Optional[str] = UL_MARKERS.get(style)
    by_depth: dict[int, str] = {}

    for _, entry in _all_items(lines):
        item = entry.item
        if item.ordered:
            continue
        if style == 'sublist':
            if entry.depth not in by_depth:
                marker = item.marker
                parent = by_depth.get(entry.depth - 1)
                if parent is not None and marker == parent:
                    marker = SUBLIST_CYCLE[(SUBLIST_CYCLE.index(parent) + 1) % 3]
                by_depth[entry.depth] = marker
            expected.append((item, by_depth[entry.depth]))
            continue
        if document_marker is None:
            document_marker = item.marker
        expected.append((item, document_marker))

    return expected


def ul_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Unordered list style."""
    violations = []
    for item, marker in _expected_markers(lines, config):
        if item.marker != marker:
            violations.append(RuleViolation(
                item.index + 1,
                f"Expected: {UL_STYLE_NAMES[marker]}; Actual: {UL_STYLE_NAMES[item.marker]}",
                (item.indent, item.indent + 1),
            ))
    return violations


def fix_ul_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for item, marker in _expected_markers(lines, config):
        if item.marker != marker:
            fixed[item.index] = _replace_marker(fixed[item.index], item, marker)
    return fixed


# ---------------------------------------------------------------------------
# MD005 list-indent
# ---------------------------------------------------------------------------


def _misaligned_items(lines: list[str]) -> list[tuple[ListItem, int]]:
    """(item, expected_indent) for items not aligned with their first sibling."""
    found = []
    first_sibling: dict[tuple[int, Optional[int]], ListItem] = {}

    for block, entry in _all_items(lines):
        key = (block.start, entry.parent)
        item = entry.item
        first = first_sibling.setdefault(key, item)
        if item.indent == first.indent:
            continue
        if item.ordered and first.ordered and (
            item.indent + len(item.marker) == first.indent + len(first.marker)
        ):
            continue
        found.append((item, first.indent))

    return found


def list_indent(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Inconsistent indentation for list items at the same level."""
    return [
        RuleViolation(
            item.index + 1,
            f"Expected: {expected}; Actual: {item.indent}",
            (0, item.indent + len(item.marker)),
        )
        for item, expected in _misaligned_items(lines)
    ]


def fix_list_indent(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for item, expected in _misaligned_items(lines):
        fixed[item.index] = _reindent(fixed[item.index], item, expected)
    return fixed


# ---------------------------------------------------------------------------
# MD007 ul-indent
# ---------------------------------------------------------------------------


def _ul_indent_targets(lines: list[str], config: Optional[RuleConfig]) -> list[tuple[ListItem, int]]:
    indent = get_option(config, 'indent', 2)
    start_indented = get_option(config, 'start_indented', False)
    start_indent = get_option(config, 'start_indent', indent)
    base = start_indent if start_indented else 0

    targets = []
    for _, entry in _all_items(lines):
        item = entry.item
        if item.ordered or not entry.ancestors_unordered:
            continue
        expected = base + entry.depth * indent
        if item.indent != expected:
            targets.append((item, expected))
    return targets


def ul_indent(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Unordered list indentation."""
    return [
        RuleViolation(
            item.index + 1,
            f"Expected: {expected}; Actual: {item.indent}",
            (0, item.indent + 1),
        )
        for item, expected in _ul_indent_targets(lines, config)
    ]


def fix_ul_indent(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for item, expected in _ul_indent_targets(lines, config):
        fixed[item.index] = _reindent(fixed[item.index], item, expected)
    return fixed


# ---------------------------------------------------------------------------
# MD029 ol-prefix
# ---------------------------------------------------------------------------


def _ordered_groups(lines: list[str]) -> list[list[ListItem]]:
    groups: dict[tuple[int, Optional[int], str], list[ListItem]] = {}
    for block, entry in _all_items(lines):
        item = entry.item
        if not item.ordered:
            continue
        key = (block.start, entry.parent, item.marker[-1])
        groups.setdefault(key, []).append(item)
    return list(groups.values())


def _expected_numbers(items: list[ListItem], style: str) -> tuple[list[int], str]:
    numbers = [item.number for item in items]
    if style == 'one_or_ordered':
        if len(numbers) >= 2 and numbers[0] == numbers[1] and numbers[0] in (0, 1):
            style = 'one' if numbers[0] == 1 else 'zero'
        else:
            style = 'ordered'

    if style == 'one':
        return [1] * len(numbers), '1/1/1'
    if style == 'zero':
        return [0] * len(numbers), '0/0/0'
    start = numbers[0]
    return list(range(start, start + len(numbers))), f"{start}/{start + 1}/{start + 2}"


def _ol_prefix_mismatches(lines: list[str], config: Optional[RuleConfig]) -> list[tuple[ListItem, int, str]]:
    style = get_option(config, 'style', 'one_or_ordered')
    if style not in ('one', 'ordered', 'one_or_ordered', 'zero'):
        style = 'one_or_ordered'

    found = []
    for items in _ordered_groups(lines):
        expected, pattern = _expected_numbers(items, style)
        for item, number in zip(items, expected):
            if item.number != number:
                found.append((item, number, pattern))
    return found


def ol_prefix(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Ordered list item prefix."""
    return [
        RuleViolation(
            item.index + 1,
            f"Expected: {number}; Actual: {item.number}; Style: {pattern}",
            (item.indent, item.indent + len(item.marker)),
        )
        for item, number, pattern in _ol_prefix_mismatches(lines, config)
    ]


def fix_ol_prefix(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for item, number, _ in _ol_prefix_mismatches(lines, config):
        marker = f"{number}{item.marker[-1]}"
        fixed[item.index] = _replace_marker(fixed[item.index], item, marker)
    return fixed


# ---------------------------------------------------------------------------
# MD030 list-marker-space
# ---------------------------------------------------------------------------


def _marker_gaps(lines: list[str], config: Optional[RuleConfig]) -> list[tuple[ListItem, int]]:
    found = []
    for block, entry in _all_items(lines):
        item = entry.item
        if not item.content.strip():
            continue
        kind = 'ol' if item.ordered else 'ul'
        size = 'multi' if block.loose else 'single'
        expected = get_option(config, f"{kind}_{size}", 1)
        if expected < 1:
            expected = 1
        if len(item.gap) != expected:
            found.append((item, expected))
    return found


def list_marker_space(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Spaces after list markers."""
    return [
        RuleViolation(
            item.index + 1,
            f"Expected: {expected}; Actual: {len(item.gap)}",
            (item.indent + len(item.marker), item.content_offset),
        )
        for item, expected in _marker_gaps(lines, config)
    ]


def fix_list_marker_space(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for item, expected in _marker_gaps(lines, config):
        line = fixed[item.index]
        marker_end = item.indent + len(item.marker)
        fixed[item.index] = line[:marker_end] + ' ' * expected + line[item.content_offset:]
    return fixed


# ---------------------------------------------------------------------------
# MD032 blanks-around-lists
# ---------------------------------------------------------------------------


def _list_gaps(lines: list[str]) -> list[tuple[int, str]]:
    """(line_index, side) where a list lacks a surrounding blank line."""
    doc = Document.from_lines(lines)
    gaps = []
    for block in list_blocks(doc):
        if block.start > doc.front_matter and not is_blank(lines[block.start - 1]):
            gaps.append((block.start, 'above'))
        if block.end < len(lines) and not is_blank(lines[block.end]):
            gaps.append((block.end - 1, 'below'))
    return gaps


def blanks_around_lists(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Lists should be surrounded by blank lines."""
    return [
        RuleViolation(i + 1, f"Missing blank line {side} list", (0, len(lines[i])))
        for i, side in _list_gaps(lines)
    ]


def fix_blanks_around_lists(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    before = set()
    after = set()
    for i, side in _list_gaps(lines):
        (before if side == 'above' else after).add(i)

    fixed = []
    for i, line in enumerate(lines):
        if i in before:
            fixed.append('')
        fixed.append(line)
        if i in after:
            fixed.append('')
    return fixed
