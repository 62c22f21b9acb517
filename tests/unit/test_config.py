"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from sourceguard.config import AuditConfig


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("SOURCEGUARD_EXCLUDE", raising=False)


def test_defaults(tmp_path: Path):
    config = AuditConfig.load()
    assert config.config_dir == tmp_path / "xdg" / "sourceguard"
    assert config.exclude == []
    assert config.include_hidden is None
    assert config.extensions == {}


def test_yaml_file(tmp_path: Path):
    path = tmp_path / "audit.yaml"
    path.write_text(
        "exclude:\n  - generated\n  - vendor\n"
        "include_hidden: true\n"
        "extensions:\n  types: [.ts]\n  secrets: .js\n"
    )
    config = AuditConfig.load(path)
    assert config.exclude == ["generated", "vendor"]
    assert config.include_hidden is True
    assert config.extensions == {"types": (".ts",), "secrets": (".js",)}


def test_default_config_file_in_xdg_dir(tmp_path: Path):
    config_dir = tmp_path / "xdg" / "sourceguard"
    config_dir.mkdir(parents=True)
    (config_dir / "config.yaml").write_text("exclude: legacy\n")
    assert AuditConfig.load().exclude == ["legacy"]


def test_env_exclude_appends(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "audit.yaml"
    path.write_text("exclude: [generated]\n")
    monkeypatch.setenv("SOURCEGUARD_EXCLUDE", "tmp, fixtures ,")
    assert AuditConfig.load(path).exclude == ["generated", "tmp", "fixtures"]


def test_empty_file(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert AuditConfig.load(path).exclude == []


def test_non_mapping_raises(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="mapping"):
        AuditConfig.load(path)


def test_missing_explicit_file_raises(tmp_path: Path):
    with pytest.raises(OSError):
        AuditConfig.load(tmp_path / "missing.yaml")
