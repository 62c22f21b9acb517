"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from sourceguard.scanner.models import ScannedFile


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write ``{relative path: content}`` under tmp_path and return the root."""

    def _make(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture
def make_file() -> Callable[..., ScannedFile]:
    def _make(content: str, path: str = "src/example.ts") -> ScannedFile:
        return ScannedFile(path=path, content=content)

    return _make
