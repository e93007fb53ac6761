"""
numbering.py: Sequential task ids of the form <prefix>-<number>.
"""
import re
from pathlib import Path

from .layout import search_dirs


def _task_numbers(root: Path, prefix: str):
    pattern = re.compile(rf"^{re.escape(prefix)}-([0-9]+)\.md$")
    for d in search_dirs(root):
        if not d.is_dir():
            continue
        for p in d.iterdir():
            m = pattern.match(p.name)
            if m:
                yield int(m.group(1))


def next_number(root: Path, prefix: str, padding: int) -> str:
    """Return one past the highest existing number for *prefix*, zero-padded.

    Other prefixes and custom ids are ignored. Gaps are never reused, and a
    number wider than *padding* is returned in full.
    """
    highest = max(_task_numbers(root, prefix), default=0)
    return str(highest + 1).zfill(padding)


def format_task_id(prefix: str, number: str) -> str:
    return f"{prefix}-{number}"
