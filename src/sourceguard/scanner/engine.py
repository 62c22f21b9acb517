"""Audit engine — directory → files → rule evaluation → report."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from sourceguard.config import AuditConfig
from sourceguard.report import generate_report
from sourceguard.scanner.files import (
    DEFAULT_EXCLUDE,
    read_files,
    relative_to_root,
    scan_directory,
)
from sourceguard.scanner.models import Issue, Report, ScannedFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Checker:
    """One audit: its rule function plus the files it looks at."""

    name: str
    title: str
    check: Callable[[ScannedFile], list[Issue]]
    extensions: tuple[str, ...]
    include_hidden: bool = False
    # Called with the POSIX path relative to the scan root
    path_filter: Callable[[str], bool] | None = None
    advice: tuple[str, ...] = field(default_factory=tuple)


def run_checker(checker: Checker, files: Iterable[ScannedFile]) -> list[Issue]:
    """Evaluate every file in order; a failing rule drops only that file."""
    issues: list[Issue] = []
    for file in files:
        try:
            issues.extend(checker.check(file))
        except Exception:
            logger.warning(
                "%s rules failed on %s, skipping file",
                checker.name,
                file.path,
                exc_info=True,
            )
    return issues


class AuditEngine:
    """Runs a checker over a directory and builds its report."""

    def __init__(self, config: AuditConfig | None = None) -> None:
        self._config = config or AuditConfig()

    def collect(self, directory: str | Path, checker: Checker) -> list[str]:
        """List the files ``checker`` should see under ``directory``."""
        config = self._config
        include_hidden = checker.include_hidden
        if config.include_hidden is not None:
            include_hidden = config.include_hidden

        paths = scan_directory(
            directory,
            extensions=config.extensions.get(checker.name, checker.extensions),
            exclude=(*DEFAULT_EXCLUDE, *config.exclude),
            include_hidden=include_hidden,
        )
        if checker.path_filter:
            paths = [
                p
                for p in paths
                if checker.path_filter(relative_to_root(p, directory))
            ]
        return paths

    async def scan_async(self, directory: str | Path, checker: Checker) -> Report:
        start = time.time()
        paths = self.collect(directory, checker)
        logger.info("%s: %d relevant files in %s", checker.title, len(paths), directory)

        files = await read_files(paths, root=directory)
        issues = run_checker(checker, files)

        logger.debug(
            "%s finished in %.2fs with %d issues",
            checker.name,
            time.time() - start,
            len(issues),
        )
        return generate_report(checker.title, issues)

    def scan(self, directory: str | Path, checker: Checker) -> Report:
        """Scan a directory and return the report."""
        return asyncio.run(self.scan_async(directory, checker))
