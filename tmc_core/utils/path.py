"""
Utilities for handling local exercise paths.
"""

from pathlib import Path

from pathvalidate import sanitize_filename


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def exercise_dir_name(exercise_name: str) -> str:
    """Turns an exercise name into a safe directory name."""
    return sanitize_filename(exercise_name, platform="auto") or "exercise"
