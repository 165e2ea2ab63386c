"""Data models for the linter."""
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

RuleConfig = dict[str, Any]
Validator = Callable[[list[str], Optional[RuleConfig]], list["RuleViolation"]]
Fixer = Callable[[list[str], Optional[RuleConfig]], list[str]]


@dataclass(frozen=True)
class RuleViolation:
    """One reported instance of a document failing a rule.

    ``line_number`` is 1-indexed; ``range`` is a half-open column span.
    """
    line_number: int
    details: str
    range: tuple[int, int] = (0, 0)

    def to_dict(self) -> dict:
        return {
            "lineNumber": self.line_number,
            "details": self.details,
            "range": list(self.range),
        }


@dataclass(frozen=True)
class Rule:
    """A named style convention with a detector and an optional fixer."""
    name: str
    description: str
    validate: Validator
    fix: Optional[Fixer] = None
    aliases: tuple[str, ...] = ()

    @property
    def fixable(self) -> bool:
        return self.fix is not None

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


@dataclass
class LintIssue:
    """A single lint issue found in the document."""
    rule: str
    line: int
    message: str
    range: tuple[int, int] = (0, 0)
    aliases: tuple[str, ...] = ()
    fixable: bool = False

    def to_dict(self) -> dict:
        return {
            "rule": self.rule,
            "rule_names": [self.rule, *self.aliases],
            "line": self.line,
            "message": self.message,
            "range": list(self.range),
            "has_fix": self.fixable,
        }


@dataclass
class LintReport:
    """Complete lint report for a document."""
    path: str
    total_issues: int = 0
    fixable: int = 0
    issues: list[LintIssue] = field(default_factory=list)

    def add_issue(self, issue: LintIssue) -> None:
        """Add an issue to the report and update counts."""
        self.issues.append(issue)
        self.total_issues += 1

        if issue.fixable:
            self.fixable += 1

    def rule_ids(self) -> list[str]:
        """Rule ids in first-seen order."""
        seen: dict[str, None] = {}
        for issue in self.issues:
            seen.setdefault(issue.rule, None)
        return list(seen)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "total_issues": self.total_issues,
            "fixable": self.fixable,
            "issues": [i.to_dict() for i in self.issues],
        }


@dataclass
class FixReport:
    """Outcome of a fix pass over one document.

    ``estimated_fixes`` is a line-count heuristic kept for reporting only;
    it is not the number of violations resolved.
    """
    path: str
    content: str
    rules_applied: list[str] = field(default_factory=list)
    issues_before: int = 0
    issues_after: int = 0
    estimated_fixes: int = 0
    changed: bool = False
    written: bool = False
    remaining: list[LintIssue] = field(default_factory=list)

    @property
    def resolved(self) -> int:
        return max(self.issues_before - self.issues_after, 0)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "rules_applied": self.rules_applied,
            "issues_before": self.issues_before,
            "issues_after": self.issues_after,
            "resolved": self.resolved,
            "estimated_fixes": self.estimated_fixes,
            "changed": self.changed,
            "written": self.written,
            "remaining": [i.to_dict() for i in self.remaining],
        }


class FallbackCounter:
    """Counts how often slower or degraded code paths were taken.

    Advisory telemetry only. Callers create one and pass it in, so
    nothing here is process-global.
    """

    def __init__(self) -> None:
        self._counts: Counter[str] = Counter()

    def record(self, name: str, amount: int = 1) -> None:
        self._counts[name] += amount

    def get(self, name: str) -> int:
        return self._counts[name]

    def snapshot(self) -> dict[str, int]:
        return dict(self._counts)

    def reset(self) -> None:
        self._counts.clear()


def get_option(config: Optional[RuleConfig], key: str, default: Any) -> Any:
    """
    Read one rule option, falling back to ``default``.

    Missing keys, a non-mapping config, and values of the wrong type all
    resolve to the default; configuration never raises.
    """
    if not isinstance(config, dict) or key not in config:
        return default

    value = config[key]
    if default is None:
        return value
    if isinstance(default, bool):
        return value if isinstance(value, bool) else default
    if isinstance(default, int):
        return value if isinstance(value, int) and not isinstance(value, bool) else default
    if isinstance(default, str):
        return value if isinstance(value, str) else default
    if isinstance(default, (list, tuple)):
        if isinstance(value, (list, tuple)):
            return [v for v in value if isinstance(v, str)]
        return list(default)
    return value
