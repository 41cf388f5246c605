"""
Scaffold file output.

Every write goes to a temporary file in the target directory and is moved
into place with os.replace(), so a file is either fully written or left as
it was. Existing files are never overwritten; the route-wiring file is the
one exception and is only ever edited by substituting known anchors.
"""
import enum
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from crudforge.utils.logging import get_logger

logger = get_logger(__name__)


class WriteStatus(str, enum.Enum):
    CREATED = "created"
    EXISTS = "already exists"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class WriteResult:
    label: str
    path: Path
    status: WriteStatus
    detail: str = ""

    def describe(self) -> str:
        line = f"{self.label} file {self.status.value}: {self.path}"
        if self.detail:
            line += f" ({self.detail})"
        return line


def atomic_write(path: Path, content: str) -> None:
    """Write `content` to `path` in one step, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def write_new(label: str, path: Path, content: str) -> WriteResult:
    """Create `path` unless something is already there."""
    if path.exists():
        logger.info(f"{label} file already exists: {path}")
        return WriteResult(label, path, WriteStatus.EXISTS)
    atomic_write(path, content)
    logger.info(f"{label} file created: {path}")
    return WriteResult(label, path, WriteStatus.CREATED)


def substitute_anchors(
    text: str,
    marker: str,
    anchors: Tuple[Tuple[str, str], ...],
) -> Tuple[str, str]:
    """
    Replace each (old, new) anchor once.

    Returns the new text and a note. When `marker` is already present the
    substitution was applied before; when any anchor is missing the file was
    edited by hand. Either way the text comes back unchanged.
    """
    if marker in text:
        return text, "already applied"
    missing = [old for old, _ in anchors if old not in text]
    if missing:
        return text, "expected anchors not found, update it by hand"
    for old, new in anchors:
        text = text.replace(old, new, 1)
    return text, ""


def update_existing(
    label: str,
    path: Path,
    marker: str,
    anchors: Tuple[Tuple[str, str], ...],
) -> WriteResult:
    """Apply `substitute_anchors` to the file at `path`."""
    original = path.read_text(encoding="utf-8")
    updated, note = substitute_anchors(original, marker, anchors)
    if updated == original:
        logger.info(f"{label} file unchanged: {path} ({note})")
        return WriteResult(label, path, WriteStatus.UNCHANGED, note)
    atomic_write(path, updated)
    logger.info(f"{label} file updated: {path}")
    return WriteResult(label, path, WriteStatus.UPDATED)
