"""
errors.py: Exception types raised by the sabin core.

Every error carries a short ``code`` that the CLI prints next to the message.
Plain filesystem failures are left as ``OSError`` and are not wrapped here.
"""
from pathlib import Path
from typing import Iterable, Optional, Union


class SabinError(Exception):
    code = 'SABIN_ERROR'


class RootNotFoundError(SabinError):
    code = 'SABIN_DIR_NOT_FOUND'

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"Sabin directory not found: {path}. Run 'sabin init' to initialize.")


class LinkFormatError(SabinError):
    code = 'INVALID_LINK'

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid sabin link {path}: {reason}")


class TaskNotFoundError(SabinError):
    code = 'TASK_NOT_FOUND'

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class DuplicateIdError(SabinError):
    code = 'DUPLICATE_ID'

    def __init__(self, task_id: str, location: Union[str, Path]):
        self.task_id = task_id
        self.location = location
        super().__init__(f"Task {task_id} already exists in {location}")


class InvalidIdError(SabinError):
    code = 'INVALID_ID'

    def __init__(self, value: str, reason: str = 'Task ID cannot be empty'):
        self.value = value
        super().__init__(f"{reason}: {value!r}")


class InvalidStatusError(SabinError):
    code = 'INVALID_STATUS'

    def __init__(self, status: str, valid: Iterable[str]):
        self.status = status
        self.valid = tuple(valid)
        super().__init__(f"Invalid task status: {status}. Must be one of: {', '.join(self.valid)}")


class ParseError(SabinError):
    code = 'PARSE_ERROR'

    def __init__(self, reason: str, path: Optional[Path] = None):
        self.reason = reason
        self.path = path
        where = f" in {path}" if path is not None else ''
        super().__init__(f"Malformed frontmatter{where}: {reason}")


class RootExistsError(SabinError):
    code = 'SABIN_DIR_EXISTS'

    def __init__(self, path: Union[str, Path], hint: str = ''):
        self.path = Path(path)
        msg = f"{path} already exists."
        super().__init__(f"{msg} {hint}" if hint else msg)
