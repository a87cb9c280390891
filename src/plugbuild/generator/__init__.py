"""Entry-point and manifest generation for the composed binary.

Public API:

* :func:`plan_entry_point` -- Render the entry point source, the manifest,
  and the replacement directives for local plugins.
* :func:`write_entry_point` -- Write the rendered artifacts into a workspace.
* :class:`EntryPoint` -- Container for the rendered artifacts.
"""

from plugbuild.generator.entry_point import (
    ENTRY_POINT_FILENAME,
    MANIFEST_FILENAME,
    EntryPoint,
    plan_entry_point,
    write_entry_point,
)

__all__ = [
    "ENTRY_POINT_FILENAME",
    "MANIFEST_FILENAME",
    "EntryPoint",
    "plan_entry_point",
    "write_entry_point",
]
