"""
Load and dump task documents: a YAML frontmatter block delimited by ``---``
lines followed by a free-form markdown body.

The body is kept byte-for-byte; only the metadata block is re-rendered on
dump. ``None`` is the "absent" marker and such keys are left out of the
output entirely.
"""
import re
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional

import yaml

from .errors import ParseError

FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)??---[ \t]*(?:\r?\n|\Z)", re.S)

# Characters the YAML reader folds as line breaks inside quoted scalars.
LINE_BREAKS = ('\x85', '\u2028', '\u2029')


class _Dumper(yaml.SafeDumper):
    pass


def _represent_str(dumper, data):
    style = '"' if any(ch in data for ch in LINE_BREAKS) else None
    return dumper.represent_scalar('tag:yaml.org,2002:str', data, style=style)


_Dumper.add_representer(str, _represent_str)


class Document(NamedTuple):
    metadata: Dict[str, Any]
    body: str


def decode(text: str, path: Optional[Path] = None) -> Document:
    """Split *text* into its frontmatter mapping and body."""
    m = FRONTMATTER_RE.match(text)
    if not m:
        return Document({}, text)
    block = m.group(1) or ''
    try:
        meta = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise ParseError(str(e), path) from e
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise ParseError(f"expected a mapping, got {type(meta).__name__}", path)
    return Document(meta, text[m.end():])


def encode(metadata: Dict[str, Any], body: str) -> str:
    present = {k: v for k, v in metadata.items() if v is not None}
    if present:
        fm = yaml.dump(present, Dumper=_Dumper, sort_keys=False, default_flow_style=False,
                       allow_unicode=True, width=float('inf'))
    else:
        fm = ''
    return f"---\n{fm}---\n{body}"


def decode_file(path: Path) -> Document:
    # newline='' keeps CRLF bodies intact.
    try:
        with open(path, encoding='utf-8', newline='') as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise ParseError(str(e), path) from e
    return decode(text, path)
