"""
config.py: Per-root settings stored in <root>/config.json.

    {"projectPrefix": "TASK", "taskNumberPadding": 4}

A missing or unreadable file yields the defaults; a partial file is merged
over the defaults key by key.
"""
import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .layout import config_path

logger = logging.getLogger(__name__)


class SabinConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    project_prefix: str = Field(default='TASK', alias='projectPrefix', min_length=1)
    task_number_padding: int = Field(default=4, alias='taskNumberPadding', ge=1)


def defaults() -> SabinConfig:
    return SabinConfig()


def merge(base: SabinConfig, overrides: dict) -> SabinConfig:
    """Apply the known, valid keys of *overrides* on top of *base*.

    Each key is validated on its own; rejected keys keep the value from
    *base* and are logged.
    """
    data = base.model_dump(by_alias=True)
    for key, value in overrides.items():
        if key not in data:
            continue
        try:
            SabinConfig.model_validate({key: value})
        except ValidationError as e:
            logger.warning('Ignoring invalid config value %s=%r: %s', key, value, e)
            continue
        data[key] = value
    return SabinConfig.model_validate(data)


def read_config(root: Path) -> SabinConfig:
    path = config_path(root)
    try:
        raw = json.loads(path.read_text(encoding='utf-8'))
    except FileNotFoundError:
        logger.debug('No config at %s; using defaults', path)
        return defaults()
    except ValueError as e:
        logger.warning('Ignoring unreadable config %s: %s', path, e)
        return defaults()
    if not isinstance(raw, dict):
        logger.warning('Ignoring config %s: expected a JSON object', path)
        return defaults()
    return merge(defaults(), raw)


def write_config(root: Path, config: SabinConfig) -> Path:
    path = config_path(root)
    path.write_text(json.dumps(config.model_dump(by_alias=True), indent=2) + '\n', encoding='utf-8')
    return path
