from __future__ import annotations

import os
from pathlib import Path


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def load_dotenv_if_present(path: str | None = None) -> list[str]:
    """
    Lightweight .env loader used for local runs of the chart pipeline.

    - Reads KEY=VALUE pairs from the given file (default: ".env" in CWD).
    - Ignores empty lines, comments starting with "#" and a leading
      "export " prefix.
    - Strips matching single/double quotes around values.
    - Does *not* overwrite variables that are already present in os.environ.

    Returns the list of keys that were actually set.
    """
    env_path = Path(path or ".env")
    if not env_path.exists():
        return []

    try:
        text = env_path.read_text(encoding="utf-8")
    except OSError:
        return []

    loaded: list[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):]
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        if key not in os.environ:
            os.environ[key] = _strip_quotes(value.strip())
            loaded.append(key)
    return loaded


def env_path(name: str, default: Path | str) -> Path:
    """Return the path stored in env var `name`, or `default` when unset/empty."""
    value = os.getenv(name)
    return Path(value) if value else Path(default)


__all__ = ["load_dotenv_if_present", "env_path"]
