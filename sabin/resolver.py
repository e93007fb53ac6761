"""
resolver.py: Locate the sabin root for a project directory.

A project holds either a ``.sabin`` directory (self-contained root) or a
``.sabin`` file pointing at a shared root elsewhere:

    {"sabinDir": "../.sabin"}
"""
import json
import logging
import os
import stat
from pathlib import Path
from typing import Literal, NamedTuple, Optional, Union

from .errors import LinkFormatError, RootNotFoundError

logger = logging.getLogger(__name__)

ROOT_NAME = '.sabin'
LINK_FIELD = 'sabinDir'

PathLike = Union[str, Path]


class ResolvedRoot(NamedTuple):
    root: Path
    is_linked: bool
    project_dir: Path


def _abspath(p: PathLike) -> Path:
    return Path(os.path.abspath(p))


def resolve_root(start_dir: Optional[PathLike] = None) -> ResolvedRoot:
    """Return the effective root for *start_dir* (cwd by default).

    Raises RootNotFoundError when nothing named ``.sabin`` exists, and
    LinkFormatError when a link file cannot be used.
    """
    project_dir = _abspath(start_dir if start_dir is not None else os.getcwd())
    candidate = project_dir / ROOT_NAME
    try:
        st = candidate.stat()
    except FileNotFoundError:
        raise RootNotFoundError(candidate) from None

    if stat.S_ISDIR(st.st_mode):
        return ResolvedRoot(candidate, False, project_dir)
    if not stat.S_ISREG(st.st_mode):
        raise LinkFormatError(candidate, 'exists but is neither a file nor a directory')

    try:
        data = json.loads(candidate.read_text(encoding='utf-8'))
    except ValueError as e:
        raise LinkFormatError(candidate, f"invalid JSON ({e})") from e
    if not isinstance(data, dict):
        raise LinkFormatError(candidate, f'expected a JSON object with a "{LINK_FIELD}" field')
    target = data.get(LINK_FIELD)
    if not isinstance(target, str) or not target.strip():
        raise LinkFormatError(candidate, f'must contain a non-empty "{LINK_FIELD}" field')

    root = Path(os.path.normpath(os.path.join(project_dir, target)))
    logger.debug('%s links to %s', candidate, root)
    return ResolvedRoot(root, True, project_dir)


def root_type(project_dir: PathLike) -> Literal['file', 'directory', 'none']:
    """Report what ``.sabin`` is in *project_dir*, without raising."""
    candidate = Path(project_dir) / ROOT_NAME
    try:
        st = candidate.stat()
    except OSError:
        return 'none'
    if stat.S_ISREG(st.st_mode):
        return 'file'
    if stat.S_ISDIR(st.st_mode):
        return 'directory'
    return 'none'


def write_link(project_dir: PathLike, target_root: PathLike) -> Path:
    """Write a ``.sabin`` link in *project_dir* pointing at *target_root*."""
    project_dir = _abspath(project_dir)
    rel = os.path.relpath(_abspath(target_root), project_dir)
    link = project_dir / ROOT_NAME
    link.write_text(json.dumps({LINK_FIELD: rel}, indent=2) + '\n', encoding='utf-8')
    logger.info('Linked %s -> %s', link, rel)
    return link


def working_dir_name(shared_root: PathLike, project_dir: PathLike) -> str:
    """Name of *project_dir* relative to the directory holding *shared_root*.

    Example: shared root /projects/.sabin and project /projects/project-1
    give ``project-1``; the parent itself gives ``.``.
    """
    parent = _abspath(shared_root).parent
    return os.path.relpath(_abspath(project_dir), parent)
