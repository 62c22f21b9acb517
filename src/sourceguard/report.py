"""Issue construction, report aggregation, rendering, and exit codes."""

from __future__ import annotations

import json
from collections.abc import Iterable

from rich.console import Console
from rich.markup import escape

from sourceguard.scanner.models import Issue, Report, Severity, Summary

_SEVERITY_COLORS = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "dark_orange",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
    Severity.INFO: "white",
}

_SEVERITY_ICONS = {
    Severity.CRITICAL: "🔴",
    Severity.HIGH: "🟠",
    Severity.MEDIUM: "🟡",
    Severity.LOW: "🔵",
    Severity.INFO: "⚪",
}

_RULE_WIDTH = 80


def _emit(console: Console, text: str) -> None:
    # Snippets may contain :name: sequences rich would turn into emoji
    console.print(text, emoji=False, highlight=False)


def create_issue(
    severity: Severity,
    category: str,
    message: str,
    **details: object,
) -> Issue:
    """Build an issue; ``details`` may set file, line, code, and suggestion."""
    return Issue(severity, category, message, **details)


def generate_report(title: str, issues: Iterable[Issue]) -> Report:
    issues = tuple(issues)
    counts = {s: 0 for s in Severity}
    for issue in issues:
        counts[issue.severity] += 1

    summary = Summary(
        total=len(issues),
        critical=counts[Severity.CRITICAL],
        high=counts[Severity.HIGH],
        medium=counts[Severity.MEDIUM],
        low=counts[Severity.LOW],
        info=counts[Severity.INFO],
    )
    return Report(title=title, summary=summary, issues=issues)


def print_report(report: Report, console: Console | None = None) -> None:
    """Render a report grouped by severity, most severe first."""
    console = console or Console()
    rule = "=" * _RULE_WIDTH

    _emit(console, f"\n{rule}")
    _emit(console, f"📊 [bold]{escape(report.title)}[/bold]")
    _emit(console, rule)
    _emit(console, f"\n⏰ Scanned at: {report.timestamp:%Y-%m-%d %H:%M:%S}")
    _emit(console, "\n📈 Summary:")
    _emit(console, f"   Total issues: {report.summary.total}")
    for severity in Severity:
        color = _SEVERITY_COLORS[severity]
        _emit(
            console,
            f"   {_SEVERITY_ICONS[severity]} [{color}]{severity.name}[/{color}]: "
            f"{report.summary.count(severity)}",
        )

    if not report.issues:
        _emit(console, "\n[green]✅ No issues found![/green]")
        _emit(console, f"{rule}\n")
        return

    grouped: dict[Severity, list[Issue]] = {}
    for issue in report.issues:
        grouped.setdefault(issue.severity, []).append(issue)

    for severity in Severity:
        issues = grouped.get(severity)
        if not issues:
            continue

        color = _SEVERITY_COLORS[severity]
        _emit(
            console,
            f"\n{_SEVERITY_ICONS[severity]} [{color}]{severity.name}[/{color}] "
            f"({len(issues)}):",
        )
        _emit(console, "-" * _RULE_WIDTH)

        for index, issue in enumerate(issues, start=1):
            _emit(
                console,
                f"\n{index}. [bold]\\[{escape(issue.category)}][/bold] "
                f"{escape(issue.message)}",
            )
            if issue.file:
                location = f"{issue.file}:{issue.line}" if issue.line else issue.file
                _emit(console, f"   📁 Location: [cyan]{escape(location)}[/cyan]")
            if issue.code:
                _emit(console, f"   💻 Code: {escape(issue.code)}")
            if issue.suggestion:
                _emit(console, f"   💡 Suggestion: {escape(issue.suggestion)}")

    _emit(console, f"\n{rule}\n")


def report_to_dict(report: Report) -> dict:
    return {
        "title": report.title,
        "summary": {
            "total": report.summary.total,
            "critical": report.summary.critical,
            "high": report.summary.high,
            "medium": report.summary.medium,
            "low": report.summary.low,
            "info": report.summary.info,
        },
        "issues": [
            {
                "severity": issue.severity.value,
                "category": issue.category,
                "message": issue.message,
                "file": issue.file,
                "line": issue.line,
                "code": issue.code,
                "suggestion": issue.suggestion,
            }
            for issue in report.issues
        ],
        "timestamp": report.timestamp.isoformat(),
    }


def report_to_json(report: Report) -> str:
    return json.dumps(report_to_dict(report), indent=2, ensure_ascii=False)


def get_exit_code(report: Report) -> int:
    """0 = clean enough, 1 = HIGH issues, 2 = CRITICAL issues."""
    if report.summary.critical > 0:
        return 2
    if report.summary.high > 0:
        return 1
    return 0
