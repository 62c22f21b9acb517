"""Rule table rows and the helpers every rule engine shares."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from sourceguard.scanner.models import (
    CODE_PREVIEW_LENGTH,
    Issue,
    ScannedFile,
    Severity,
)


@dataclass(frozen=True)
class Rule:
    """A detection rule: compiled regex plus how to report a match.

    ``message`` and ``suggestion`` are format templates; ``{0}`` is the whole
    match and ``{1}`` the first group, when the regex has one.
    """

    name: str
    regex: re.Pattern[str]
    severity: Severity
    category: str
    message: str
    suggestion: str = ""
    # Optional per-line exemption, checked against the line holding the match
    exempt: Callable[[str], bool] | None = None


def has_directive(content: str, directive: str) -> bool:
    """Check for a ``'use client'`` / ``'use server'`` style directive."""
    return f"'{directive}'" in content or f'"{directive}"' in content


def line_number_at(content: str, offset: int) -> int:
    """1-based line number of a character offset."""
    return content.count("\n", 0, offset) + 1


def first_line_matching(file: ScannedFile, predicate: Callable[[str], bool]) -> int:
    """1-based number of the first line satisfying ``predicate``, or 0."""
    for number, line in enumerate(file.lines, start=1):
        if predicate(line):
            return number
    return 0


def truncate(text: str, limit: int = CODE_PREVIEW_LENGTH) -> str:
    """Cut a snippet to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def _render(template: str, match: re.Match[str]) -> str:
    group = match.group(1) if match.re.groups else ""
    return template.format(match.group(0), group)


def iter_matches(
    file: ScannedFile, rule: Rule
) -> Iterator[tuple[re.Match[str], int, str]]:
    """Yield every non-exempt match of ``rule`` with its line number and line."""
    for match in rule.regex.finditer(file.content):
        line_num = line_number_at(file.content, match.start())
        line = file.line(line_num)
        if rule.exempt and rule.exempt(line):
            continue
        yield match, line_num, line


def iter_rule_issues(
    file: ScannedFile,
    rules: Iterable[Rule],
    with_code: bool = False,
) -> Iterator[Issue]:
    """Apply a rule table to a file, one issue per match."""
    for rule in rules:
        for match, line_num, line in iter_matches(file, rule):
            yield Issue(
                severity=rule.severity,
                category=rule.category,
                message=_render(rule.message, match),
                file=file.path,
                line=line_num,
                code=truncate(line.strip()) if with_code else None,
                suggestion=_render(rule.suggestion, match) or None,
            )
