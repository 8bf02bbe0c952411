"""
Project root lookup and `.env` loading.
"""

from __future__ import annotations

import os
from pathlib import Path

ENV_FILENAMES = (".env", ".env.local")


def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = (part.strip() for part in line.split("=", 1))
    if not key:
        return None
    return key, value.strip("\"'")


def load_env_files(root: Path | None = None) -> None:
    """
    Apply KEY=VALUE pairs from the project's env files without overriding the process env.
    """

    base = root or project_root()
    for env_path in (base / name for name in ENV_FILENAMES):
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            entry = _parse_env_line(raw_line)
            if entry is not None:
                os.environ.setdefault(*entry)


def resolve_project_path(raw_path: str) -> Path:
    """
    Resolve a configured path; relative paths are anchored at the project root.
    """

    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (project_root() / candidate).resolve()
