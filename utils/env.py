"""Environment helper utilities.

Loads a `.env` file from the project root so that ``PRICING_*`` settings
defined there become available via ``os.getenv``.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

__all__ = ["load_project_dotenv"]


def _find_project_root(start: Path | None = None) -> Path:
    """Traverse upwards until we find a directory that contains `pyproject.toml`."""
    current = start or Path(__file__).resolve().parent
    for _ in range(10):
        if (current / "pyproject.toml").exists():
            return current
        if current.parent == current:
            break
        current = current.parent
    return Path(__file__).resolve().parent


def load_project_dotenv(filename: str = ".env") -> bool:
    """
    Load pricing settings from a dotenv file at the project root.
    Variables already set in the process environment win. Returns True when
    a file was found and loaded.
    """
    dotenv_path = _find_project_root() / filename
    if not dotenv_path.exists():
        return False
    return load_dotenv(dotenv_path=dotenv_path, override=False)
