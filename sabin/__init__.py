"""
sabin: file-based task workflow for agentic coding.

Tasks are markdown files with YAML frontmatter kept under a ``.sabin`` root,
which may be shared between several project checkouts through a link file.
"""
from .config import SabinConfig, read_config, write_config
from .errors import (
    DuplicateIdError,
    InvalidIdError,
    InvalidStatusError,
    LinkFormatError,
    ParseError,
    RootExistsError,
    RootNotFoundError,
    SabinError,
    TaskNotFoundError,
)
from .resolver import ResolvedRoot, resolve_root, root_type, working_dir_name, write_link
from .tasklib import STATUSES, Task, TaskStore, load_task, save_task

__version__ = '0.1.0'
__all__ = [
    'DuplicateIdError',
    'InvalidIdError',
    'InvalidStatusError',
    'LinkFormatError',
    'ParseError',
    'ResolvedRoot',
    'RootExistsError',
    'RootNotFoundError',
    'STATUSES',
    'SabinConfig',
    'SabinError',
    'Task',
    'TaskNotFoundError',
    'TaskStore',
    'load_task',
    'read_config',
    'resolve_root',
    'root_type',
    'save_task',
    'working_dir_name',
    'write_config',
    'write_link',
]
