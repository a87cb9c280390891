"""Copy the base application's static asset bundle into the workspace.

The bundle is any read-only tree implementing
:class:`importlib.resources.abc.Traversable`: a plain directory
(:class:`pathlib.Path`) or data shipped inside an installed package
(:func:`importlib.resources.files`). Structure and bytes are copied
verbatim over whatever the vendored base module contains.
"""

from __future__ import annotations

import logging
from importlib.resources.abc import Traversable
from pathlib import Path

from plugbuild.exceptions import AssetError

logger = logging.getLogger(__name__)


def copy_asset_tree(source: Traversable, target: Path) -> int:
    """Recursively copy *source* into *target*.

    Intermediate directories are created as needed and existing files
    are overwritten.

    Args:
        source: Root of the asset tree.
        target: Destination directory.

    Returns:
        Number of files copied.

    Raises:
        AssetError: On any read or write failure.
    """
    try:
        target.mkdir(parents=True, exist_ok=True)
        entries = sorted(source.iterdir(), key=lambda e: e.name)
    except OSError as exc:
        raise AssetError(f"Cannot copy assets into {target}: {exc}") from exc

    copied = 0
    for entry in entries:
        destination = target / entry.name
        if entry.is_dir():
            copied += copy_asset_tree(entry, destination)
            continue
        try:
            destination.write_bytes(entry.read_bytes())
        except OSError as exc:
            raise AssetError(f"Cannot copy asset {entry.name} to {destination}: {exc}") from exc
        copied += 1
    return copied


def install_assets(source: Traversable, vendored_base: Path, subdir: str) -> Path:
    """Install the asset bundle at ``<vendored_base>/<subdir>``.

    Returns:
        The directory the assets were copied into.
    """
    target = vendored_base / subdir
    count = copy_asset_tree(source, target)
    logger.debug("Copied %d asset files into %s", count, target)
    return target
