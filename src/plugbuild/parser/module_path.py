"""Semantic import versioning for module paths.

Modules at major version 2 and above are imported through a path ending in
``/vN``. :func:`versioned_module_path` derives that path from a module
reference and the version requested on the command line.
"""

from __future__ import annotations

import posixpath
from typing import Optional

import semver


def _strict_version(text: str) -> Optional[semver.Version]:
    """Parse *text* as a strict ``MAJOR.MINOR.PATCH[-pre][+build]`` version.

    Shortened forms such as ``2`` or ``2.0``, leading zeros and anything
    outside the semver grammar return ``None``.
    """
    try:
        return semver.Version.parse(text)
    except ValueError:
        return None


def versioned_module_path(module: str, version: str) -> str:
    """Return the import path of *module* at *version*.

    An empty *version* leaves the path unchanged. Otherwise a leading ``v``
    is stripped and the rest is parsed as a strict semantic version. When
    the major version exceeds 1, ``/v<major>`` is appended and the result
    is normalised.

    A version that does not parse (``latest``, a branch name, a typo) also
    leaves the path unchanged. No error is raised, so a misspelled version
    silently falls back to the unversioned import path.

    Example::

        versioned_module_path("example.com/m", "v2.0.0")  # 'example.com/m/v2'
        versioned_module_path("example.com/m", "v1.5.0")  # 'example.com/m'
        versioned_module_path("example.com/m", "v3.0.0-20191109021931-daa7c04131f5")
        # 'example.com/m/v3'
    """
    if not version:
        return module
    parsed = _strict_version(version.removeprefix("v"))
    if parsed is None:
        return module
    if parsed.major > 1:
        module += f"/v{parsed.major}"
    return posixpath.normpath(module)
