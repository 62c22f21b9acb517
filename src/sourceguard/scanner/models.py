"""Scanner data models — scanned files, issues, and reports."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime

# Max characters of source shown in an issue snippet
CODE_PREVIEW_LENGTH = 50


class Severity(enum.Enum):
    """Issue severity, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


@dataclass(frozen=True)
class ScannedFile:
    """A source file loaded for one scan."""

    path: str
    content: str
    # POSIX path below the scan root; path conventions are matched on this
    relative_path: str = ""
    lines: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.relative_path:
            object.__setattr__(self, "relative_path", self.path.replace("\\", "/"))
        if not self.lines:
            object.__setattr__(self, "lines", tuple(self.content.split("\n")))

    def line(self, number: int) -> str:
        """Return the 1-based line, or an empty string when out of range."""
        if 1 <= number <= len(self.lines):
            return self.lines[number - 1]
        return ""


@dataclass(frozen=True)
class Issue:
    """A single finding produced by a rule engine."""

    severity: Severity
    category: str
    message: str
    file: str | None = None
    line: int | None = None
    code: str | None = None
    suggestion: str | None = None


@dataclass(frozen=True)
class Summary:
    """Issue counts per severity bucket."""

    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0

    def count(self, severity: Severity) -> int:
        return getattr(self, severity.value)


@dataclass(frozen=True)
class Report:
    """Aggregate result of one scan."""

    title: str
    summary: Summary
    issues: tuple[Issue, ...] = ()
    timestamp: datetime = field(default_factory=datetime.now)
