"""
Load, save and move task files under a sabin root.

A task is one markdown file whose stem is the task id. Its status decides the
directory: ``completed`` tasks live in tasks/completed, everything else in
tasks/open.
"""
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import frontmatter
from .config import SabinConfig, read_config
from .errors import (
    DuplicateIdError,
    InvalidIdError,
    InvalidStatusError,
    ParseError,
    TaskNotFoundError,
)
from .layout import open_dir, search_dirs, target_dir
from .numbering import format_task_id, next_number
from .resolver import ResolvedRoot, working_dir_name

logger = logging.getLogger(__name__)

STATUSES = ('open', 'ready', 'in_progress', 'review', 'completed')
LEGACY_STATUS_ALIASES = {'resolved': 'completed'}
IN_PROGRESS = 'in_progress'

# Frontmatter keys mapped onto Task fields, in output order.
KNOWN_KEYS = ('status', 'title', 'plan', 'workingDir')


def normalize_status(status: str) -> str:
    return LEGACY_STATUS_ALIASES.get(status, status)


def validate_status(status: str) -> str:
    """Return the canonical form of *status* or raise InvalidStatusError."""
    canonical = normalize_status(status)
    if canonical not in STATUSES:
        raise InvalidStatusError(status, STATUSES)
    return canonical


class Task(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    status: str = 'open'
    title: Optional[str] = None
    plan: Optional[str] = None
    working_dir: Optional[str] = Field(default=None, alias='workingDir')
    content: str = ''
    path: Path
    extra: Dict[Any, Any] = Field(default_factory=dict)

    @field_validator('status', mode='before')
    @classmethod
    def _default_status(cls, v):
        if v is None or v == '':
            return 'open'
        return normalize_status(str(v))

    @field_validator('title', 'plan', 'working_dir', mode='before')
    @classmethod
    def _scalar_text(cls, v):
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (dict, list)):
            raise ValueError(f'expected a scalar, got {type(v).__name__}')
        return str(v)

    def metadata(self) -> Dict[Any, Any]:
        meta: Dict[Any, Any] = {
            'status': self.status,
            'title': self.title,
            'plan': self.plan,
            'workingDir': self.working_dir,
        }
        meta.update(self.extra)
        return meta


def load_task(path: Path) -> Task:
    meta, body = frontmatter.decode_file(path)
    try:
        return Task(
            id=path.stem,
            status=meta.get('status'),
            title=meta.get('title'),
            plan=meta.get('plan'),
            working_dir=meta.get('workingDir'),
            content=body,
            path=path,
            extra={k: v for k, v in meta.items() if k not in KNOWN_KEYS},
        )
    except ValidationError as e:
        raise ParseError(str(e), path) from e


def _write(path: Path, text: str, exclusive: bool = False) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'x' if exclusive else 'w', encoding='utf-8', newline='') as f:
        f.write(text)


def save_task(task: Task, exclusive: bool = False) -> None:
    _write(task.path, frontmatter.encode(task.metadata(), task.content), exclusive)


def _check_custom_id(task_id: str) -> str:
    stripped = task_id.strip()
    if not stripped:
        raise InvalidIdError(task_id)
    if stripped in ('.', '..') or '/' in stripped or '\\' in stripped:
        raise InvalidIdError(task_id, 'Task ID cannot contain path separators')
    return stripped


class Problem(NamedTuple):
    path: Path
    message: str


class TaskStore:
    """Task operations against one resolved root.

    Build one per command. ``is_linked`` and ``project_dir`` describe how the
    root was reached; they only matter when a task is claimed (moved to
    in_progress) from a project that shares a linked root.
    """

    def __init__(self, root: Union[str, Path], *, is_linked: bool = False,
                 project_dir: Optional[Union[str, Path]] = None):
        self.root = Path(root)
        self.is_linked = is_linked
        self.project_dir = Path(project_dir) if project_dir is not None else self.root.parent

    @classmethod
    def from_resolved(cls, resolved: ResolvedRoot) -> 'TaskStore':
        return cls(resolved.root, is_linked=resolved.is_linked, project_dir=resolved.project_dir)

    def config(self) -> SabinConfig:
        return read_config(self.root)

    def _task_files(self) -> Iterator[Path]:
        for d in search_dirs(self.root):
            if not d.is_dir():
                continue
            for p in sorted(d.iterdir()):
                if p.suffix == '.md' and p.is_file():
                    yield p

    def _existing(self, task_id: str) -> Optional[Path]:
        for d in search_dirs(self.root):
            candidate = d / f'{task_id}.md'
            if candidate.exists():
                return candidate
        return None

    def locate(self, task_id: str, exact: bool = False) -> Path:
        """Path of the file for *task_id*.

        The first stem, scanning open directories before completed ones, that
        equals *task_id* or, unless *exact*, contains it.
        """
        if not task_id.strip():
            raise TaskNotFoundError(task_id)
        for p in self._task_files():
            if p.stem == task_id or (not exact and task_id in p.stem):
                logger.debug('Matched %r to %s', task_id, p)
                return p
        raise TaskNotFoundError(task_id)

    def find(self, task_id: str) -> Task:
        return load_task(self.locate(task_id))

    def create(self, title: Optional[str] = None, content: str = '',
               task_id: Optional[str] = None) -> Task:
        if task_id is not None:
            task_id = _check_custom_id(task_id)
        else:
            cfg = self.config()
            number = next_number(self.root, cfg.project_prefix, cfg.task_number_padding)
            task_id = format_task_id(cfg.project_prefix, number)

        existing = self._existing(task_id)
        if existing is not None:
            raise DuplicateIdError(task_id, existing.parent.relative_to(self.root))

        task = Task(id=task_id, status='open', title=title, content=content,
                    path=open_dir(self.root) / f'{task_id}.md')
        try:
            save_task(task, exclusive=True)
        except FileExistsError:
            raise DuplicateIdError(task_id, task.path.parent.relative_to(self.root)) from None
        logger.info('Created %s', task.path)
        return task

    def update_status(self, task_id: str, new_status: str) -> Task:
        status = validate_status(new_status)
        task = self.find(task_id)
        old_path = task.path
        task.status = status
        if status == IN_PROGRESS and self.is_linked:
            task.working_dir = working_dir_name(self.root, self.project_dir)

        new_dir = target_dir(self.root, status)
        if old_path.parent == new_dir:
            save_task(task)
            return task

        new_path = new_dir / old_path.name
        if new_path.exists():
            raise DuplicateIdError(task.id, new_dir.relative_to(self.root))
        # New copy first, then drop the old one.
        task.path = new_path
        save_task(task)
        old_path.unlink()
        logger.info('Moved %s -> %s', old_path, task.path)
        return task

    def list_tasks(self, status: Optional[str] = None) -> list[Task]:
        if status is not None:
            status = validate_status(status)
        tasks = [load_task(p) for p in self._task_files()]
        if status is not None:
            tasks = [t for t in tasks if t.status == status]
        return tasks

    def delete(self, task_id: str) -> Path:
        path = self.locate(task_id, exact=True)
        path.unlink()
        logger.info('Deleted %s', path)
        return path

    def organize(self) -> list[tuple[Path, Path]]:
        """Move every task file into the directory its status calls for.

        Covers tasks left in the wrong status directory as well as files in
        the legacy tickets/ layout.
        """
        moves: list[tuple[Path, Path]] = []
        for path in list(self._task_files()):
            task = load_task(path)
            dest = target_dir(self.root, task.status) / path.name
            if dest == path:
                continue
            if dest.exists():
                logger.warning('Not moving %s: %s already exists', path, dest)
                continue
            task.path = dest
            save_task(task)
            path.unlink()
            logger.info('Moved %s -> %s', path, dest)
            moves.append((path, dest))
        return moves

    def check(self) -> list[Problem]:
        """Report unreadable, misplaced, duplicated and non-markdown files."""
        problems: list[Problem] = []
        seen: dict[str, Path] = {}
        for d in search_dirs(self.root):
            if not d.is_dir():
                continue
            for p in sorted(d.iterdir()):
                if p.name.startswith('.'):
                    continue
                if not p.is_file() or p.suffix != '.md':
                    problems.append(Problem(p, 'not a markdown task file'))
                    continue
                if p.stem in seen:
                    problems.append(Problem(p, f'duplicate task id {p.stem} (also {seen[p.stem]})'))
                else:
                    seen[p.stem] = p
                try:
                    task = load_task(p)
                except ParseError as e:
                    problems.append(Problem(p, e.reason))
                    continue
                if task.status not in STATUSES:
                    problems.append(Problem(p, f'unknown status {task.status!r}'))
                expected = target_dir(self.root, task.status)
                if p.parent != expected:
                    problems.append(Problem(
                        p, f'status {task.status} belongs in {expected.relative_to(self.root)}'))
        return problems
