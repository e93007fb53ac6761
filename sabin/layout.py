"""
layout.py: Directory layout of a sabin root.

    <root>/config.json
    <root>/tasks/open/<id>.md
    <root>/tasks/completed/<id>.md

Older roots used tickets/open and tickets/resolved; those are still read but
never written.
"""
from pathlib import Path

CONFIG_FILE = 'config.json'
TASKS = 'tasks'
OPEN = 'open'
COMPLETED = 'completed'
LEGACY_TASKS = 'tickets'
LEGACY_COMPLETED = 'resolved'
EXTRA_DIRS = ('plans', 'research')


def config_path(root: Path) -> Path:
    return Path(root) / CONFIG_FILE


def tasks_dir(root: Path) -> Path:
    """Path to the <root>/tasks directory."""
    return Path(root) / TASKS


def open_dir(root: Path) -> Path:
    return tasks_dir(root) / OPEN


def completed_dir(root: Path) -> Path:
    return tasks_dir(root) / COMPLETED


def open_like_dirs(root: Path) -> list[Path]:
    return [open_dir(root), Path(root) / LEGACY_TASKS / OPEN]


def completed_like_dirs(root: Path) -> list[Path]:
    return [completed_dir(root), Path(root) / LEGACY_TASKS / LEGACY_COMPLETED]


def search_dirs(root: Path) -> list[Path]:
    """Every directory that may hold task files, open-like ones first."""
    return open_like_dirs(root) + completed_like_dirs(root)


def is_completed_status(status: str) -> bool:
    return status == COMPLETED


def target_dir(root: Path, status: str) -> Path:
    """Directory a task with *status* belongs in."""
    return completed_dir(root) if is_completed_status(status) else open_dir(root)


def init_dirs(root: Path) -> list[Path]:
    """Directories created by ``sabin init``."""
    return [open_dir(root), completed_dir(root)] + [Path(root) / d for d in EXTRA_DIRS]
