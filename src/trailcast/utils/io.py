"""Project path helpers."""

from pathlib import Path

# Project root is 4 levels up from this file
_PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


def get_project_root() -> Path:
    """Get the project root directory."""
    return _PROJECT_ROOT
