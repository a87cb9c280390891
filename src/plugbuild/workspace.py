"""Lifecycle helpers for the ephemeral build workspace.

A workspace is a fresh directory created next to the caller (or under a
configured parent) for exactly one build. Files are written into it with
:func:`write_file` and :func:`append_file`; :func:`remove_workspace`
deletes it at the end of a successful build.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from plugbuild.exceptions import WorkspaceError

logger = logging.getLogger(__name__)


def create_workspace(prefix: str, parent: Optional[str] = None) -> Path:
    """Create a new, empty workspace directory and return its absolute path.

    Args:
        prefix: Directory name prefix, e.g. ``answer_build``.
        parent: Directory to create the workspace in. Defaults to the
            current working directory.

    Raises:
        WorkspaceError: If the directory cannot be created.
    """
    base = Path(parent).resolve() if parent else Path.cwd().resolve()
    try:
        return Path(tempfile.mkdtemp(prefix=prefix, dir=base))
    except OSError as exc:
        raise WorkspaceError(f"Cannot create workspace in {base}: {exc}") from exc


def write_file(path: Path, content: str) -> None:
    """Write *content* to *path*, creating parent directories.

    Raises:
        WorkspaceError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise WorkspaceError(f"Cannot write {path}: {exc}") from exc


def append_file(path: Path, content: str) -> None:
    """Append *content* to the end of *path*.

    Raises:
        WorkspaceError: If the file cannot be opened or written.
    """
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(content)
    except OSError as exc:
        raise WorkspaceError(f"Cannot append to {path}: {exc}") from exc


def remove_workspace(workspace: Path) -> bool:
    """Delete *workspace* and everything in it, best effort.

    Failures are logged as warnings rather than raised; a leftover
    directory never fails a build that already produced its binary.

    Returns:
        ``True`` if the directory is gone afterwards.
    """
    try:
        shutil.rmtree(workspace)
    except OSError as exc:
        logger.warning("Cannot remove workspace %s: %s", workspace, exc)
    return not workspace.exists()
