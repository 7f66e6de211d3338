"""Application configuration loaded from config.yaml."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-haiku-4-5-20251001"
    max_attempts: int = 1  # 1 = no automatic retry
    timeout: int = 60
    analysis_temperature: float = 0.1
    rewrite_temperature: float = 0.3
    match_temperature: float = 0.2


@dataclass(frozen=True)
class ExportConfig:
    basename: str = "ATS_Optimized_Resume"
    output_dir: str = "."


@dataclass(frozen=True)
class SessionConfig:
    db_path: str = "~/.ats-optimizer/session.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    session: SessionConfig = field(default_factory=SessionConfig)


CONFIG_ENV_VAR = "ATS_OPTIMIZER_CONFIG"


def _find_config() -> Path | None:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    for candidate in (
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ):
        if candidate.exists():
            return candidate
    return None


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML, falling back to defaults.

    Without ``path``, ``$ATS_OPTIMIZER_CONFIG`` is used if set, then
    ``config.yaml`` in the working directory or the project root.
    """
    if path is None:
        path = _find_config()

    raw: dict = {}
    if path is not None and Path(path).exists():
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}

    return AppConfig(
        llm=LLMConfig(**(raw.get("llm") or {})),
        export=ExportConfig(**(raw.get("export") or {})),
        session=SessionConfig(**(raw.get("session") or {})),
    )
