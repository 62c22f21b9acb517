"""Global configuration — XDG paths, YAML file, env vars, defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "sourceguard"
    return Path.home() / ".config" / "sourceguard"


@dataclass
class AuditConfig:
    """Scan settings layered over each checker's built-in policy."""

    config_dir: Path = field(default_factory=_default_config_dir)
    # Extra exclude substrings, added to the defaults
    exclude: list[str] = field(default_factory=list)
    # Overrides the checker's hidden-file policy when set
    include_hidden: bool | None = None
    # Checker name -> file suffixes to scan
    extensions: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def load(cls, path: str | Path | None = None) -> AuditConfig:
        """Load defaults, then the YAML file, then environment variables."""
        config = cls()

        config_file = Path(path) if path else config.config_dir / "config.yaml"
        if path or config_file.is_file():
            config._apply_file(config_file)

        env_exclude = os.environ.get("SOURCEGUARD_EXCLUDE")
        if env_exclude:
            config.exclude.extend(p.strip() for p in env_exclude.split(",") if p.strip())

        return config

    def _apply_file(self, path: Path) -> None:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if data is None:
            return
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must be a mapping")
        logger.debug("Loaded config from %s", path)

        exclude = data.get("exclude", [])
        if isinstance(exclude, str):
            exclude = [exclude]
        self.exclude.extend(str(p) for p in exclude)

        if "include_hidden" in data:
            self.include_hidden = bool(data["include_hidden"])

        extensions = data.get("extensions", {})
        if not isinstance(extensions, dict):
            raise ValueError("'extensions' must map checker names to suffix lists")
        for name, suffixes in extensions.items():
            if isinstance(suffixes, str):
                suffixes = [suffixes]
            self.extensions[str(name)] = tuple(str(s) for s in suffixes)
