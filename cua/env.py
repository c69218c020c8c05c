"""Loading of environment variables from ``.env`` files."""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

__all__ = ["load_env"]

_PARENT_LEVELS = 3


def _candidates() -> list[Path]:
    try:
        cwd = Path.cwd()
    except OSError:
        return [Path(".env")]
    return [cwd / ".env", *(parent / ".env" for parent in cwd.parents[:_PARENT_LEVELS])]


def load_env() -> Path | None:
    """Load the nearest ``.env`` file from the working directory or up to three parents.

    Variables that are already set are left unchanged. Returns the path of the
    file that was loaded, or None when no readable file was found.
    """
    for path in _candidates():
        if not path.is_file():
            continue
        try:
            load_dotenv(path, override=False)
        except OSError:
            continue
        return path
    return None