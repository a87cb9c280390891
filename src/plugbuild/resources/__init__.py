"""Resource handling for the composed binary.

* :mod:`plugbuild.resources.i18n` -- Merge plugin translation files into the
  base application's translation set.
* :mod:`plugbuild.resources.assets` -- Copy the base application's static
  asset bundle into the workspace.
"""

from plugbuild.resources.assets import copy_asset_tree, install_assets
from plugbuild.resources.i18n import (
    append_translations,
    collect_translations,
    merge_translations,
)

__all__ = [
    "append_translations",
    "collect_translations",
    "copy_asset_tree",
    "install_assets",
    "merge_translations",
]
