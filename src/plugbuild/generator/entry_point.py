"""Generate the composition entry point and dependency manifest.

The composed binary is an ordinary toolchain module whose ``main`` package
does nothing but import every plugin for its side effects and hand control
to the base application's command package. This module renders that
package (:data:`_MAIN_TEMPLATE`), the manifest (:data:`_MANIFEST_TEMPLATE`),
and the replacement directives that point local plugins at their
checkouts.

:func:`plan_entry_point` is pure and backs ``plugbuild plan``;
:func:`write_entry_point` puts the artifacts into a workspace.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from plugbuild.exceptions import WorkspaceError
from plugbuild.models import BuildConfig, PluginSpec, Replacement
from plugbuild.workspace import write_file

ENTRY_POINT_FILENAME = "main.go"
MANIFEST_FILENAME = "go.mod"

_CMD_ALIAS = "basecmd"

_MAIN_TEMPLATE = """\
package main

import (
\t{cmd_alias} "{cmd_package}"

  // remote plugins
{remote_imports}
  // local plugins
{local_imports}
)

func main() {{
\t{cmd_alias}.{cmd_entry}()
}}
"""

_MANIFEST_TEMPLATE = """\
module {main_module}

go {language_version}
"""


@dataclass
class EntryPoint:
    """Rendered artifacts for one build.

    Attributes:
        main_source: Source of the generated ``main`` package.
        manifest: Dependency manifest text.
        replacements: Directives for plugins with a local checkout, in
            plugin order.
        remote_imports: Import paths of remotely fetched plugins.
        local_imports: Local-namespace import paths of local plugins.
    """

    main_source: str
    manifest: str
    replacements: list[Replacement] = field(default_factory=list)
    remote_imports: list[str] = field(default_factory=list)
    local_imports: list[str] = field(default_factory=list)


def local_import_path(plugin: PluginSpec, config: BuildConfig) -> str:
    """Import path used for a plugin that has a local checkout."""
    return f"{config.main_module}/{plugin.name}"


def replacement_for(plugin: PluginSpec) -> Replacement:
    """Directive redirecting *plugin* to its local checkout.

    Only meaningful when ``plugin.is_local``. Without a version the whole
    module is replaced.
    """
    return Replacement(module=plugin.name, version=plugin.version, path=plugin.local_path)


def _import_lines(paths: Sequence[str]) -> str:
    return "\n".join(f'\t_ "{p}"' for p in paths)


def plan_entry_point(plugins: Sequence[PluginSpec], config: BuildConfig) -> EntryPoint:
    """Render the entry point, manifest and replacements without touching disk.

    Args:
        plugins: Plugins in input order.
        config: Build configuration naming the base command package and
            manifest module.

    Returns:
        The rendered :class:`EntryPoint`.
    """
    remote: list[str] = []
    local: list[str] = []
    replacements: list[Replacement] = []
    for plugin in plugins:
        if plugin.is_local:
            local.append(local_import_path(plugin, config))
            replacements.append(replacement_for(plugin))
        else:
            remote.append(plugin.module_path)

    main_source = _MAIN_TEMPLATE.format(
        cmd_alias=_CMD_ALIAS,
        cmd_package=config.resolved_cmd_package,
        cmd_entry=config.cmd_entry,
        remote_imports=_import_lines(remote),
        local_imports=_import_lines(local),
    )
    manifest = _MANIFEST_TEMPLATE.format(
        main_module=config.main_module,
        language_version=config.language_version,
    )
    return EntryPoint(
        main_source=main_source,
        manifest=manifest,
        replacements=replacements,
        remote_imports=remote,
        local_imports=local,
    )


def write_entry_point(entry: EntryPoint, workspace: Path) -> None:
    """Write the entry point and manifest into *workspace*.

    Raises:
        WorkspaceError: If either file cannot be written.
    """
    if not workspace.is_dir():
        raise WorkspaceError(f"Workspace does not exist: {workspace}")
    write_file(workspace / ENTRY_POINT_FILENAME, entry.main_source)
    write_file(workspace / MANIFEST_FILENAME, entry.manifest)
