"""Build commands -- compose a binary, or preview what would be composed.

* ``plugbuild build`` runs the full pipeline through
  :class:`~plugbuild.pipeline.BuildOrchestrator`.
* ``plugbuild plan`` renders the entry point, manifest, and replacement
  directives to stdout without creating a workspace or touching the
  toolchain.

Both take plugins as repeated ``--with`` descriptors::

    plugbuild build --with github.com/acme/connector@v2.1.0 \\
        --with github.com/acme/search=../search --output ./new_answer
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import typer

from plugbuild.exceptions import PlugbuildError
from plugbuild.output import (
    OutputFormat,
    error,
    get_output,
    print_json,
    print_source,
    print_table,
    success,
    suggest,
)


def _resolve_config(overrides: dict[str, Any]):
    """Resolve the build config, turning config errors into exit codes."""
    from plugbuild.config import resolve_build_config

    try:
        return resolve_build_config(overrides)
    except PlugbuildError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _import_path(spec, config) -> str:
    from plugbuild.generator.entry_point import local_import_path

    return local_import_path(spec, config) if spec.is_local else spec.module_path


def build_command(
    plugins: Optional[list[str]] = typer.Option(
        None, "--with", "-w",
        help="Plugin descriptor: module[@version][=local_path]. Repeatable.",
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o",
        help="Path of the new binary. [default: ./new_<module>]",
    ),
    assets: Optional[str] = typer.Option(
        None, "--assets",
        help="Directory holding the static asset bundle to install.",
    ),
    base_replacement: Optional[str] = typer.Option(
        None, "--base-replacement",
        help="Local checkout replacing the base module.",
    ),
    stamp_version: str = typer.Option(
        "", "--stamp-version",
        help="Version string stamped into the binary.",
    ),
    revision: str = typer.Option(
        "", "--revision",
        help="Revision string stamped into the binary.",
    ),
    build_time: Optional[str] = typer.Option(
        None, "--build-time",
        help="Build time stamped into the binary. [default: now, UTC]",
    ),
    keep_workspace: Optional[bool] = typer.Option(
        None, "--keep-workspace/--clean",
        help="Keep the workspace after a successful build.",
    ),
) -> None:
    """Build a new binary from the base application and the given plugins.

    The pipeline generates an entry point importing every plugin, resolves
    and vendors dependencies, installs the static assets, merges plugin
    translations into the base set, and compiles the result with version
    metadata. The first failing stage aborts the build and leaves the
    workspace on disk.

    Example:
        ::

            plugbuild build -w github.com/acme/connector@v2.1.0 -o ./app
            plugbuild build -w github.com/acme/search=../search --keep-workspace
    """
    from plugbuild.models import VersionInfo
    from plugbuild.pipeline import BuildOrchestrator

    config = _resolve_config({
        "assets_dir": assets,
        "base_module_replacement": base_replacement,
        "keep_workspace": keep_workspace,
    })
    version_info = VersionInfo(
        version=stamp_version,
        revision=revision,
        time=build_time or datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    )

    orchestrator = BuildOrchestrator(config)
    result = orchestrator.build(output, plugins or [], version_info)

    if not result.ok:
        stage = result.failed_stage.value if result.failed_stage else "unknown"
        error(f"Build failed during {stage}: {result.error}")
        if result.workspace is not None:
            suggest(f"Workspace left for inspection: {result.workspace}")
        exit_code = result.error.exit_code if isinstance(result.error, PlugbuildError) else 1
        raise typer.Exit(code=exit_code)

    success(f"Built: {result.output_path}")
    suggest(f"Check it: {result.output_path} --version")


def plan_command(
    plugins: Optional[list[str]] = typer.Option(
        None, "--with", "-w",
        help="Plugin descriptor: module[@version][=local_path]. Repeatable.",
    ),
) -> None:
    """Show the entry point, manifest and replacements a build would use.

    Nothing is written to disk and the toolchain is not invoked. With
    ``--json`` the plan is printed as a single JSON object.

    Example:
        ::

            plugbuild plan -w github.com/acme/connector@v2.1.0
            plugbuild --json plan -w github.com/acme/search=../search
    """
    from plugbuild.generator import ENTRY_POINT_FILENAME, MANIFEST_FILENAME, plan_entry_point
    from plugbuild.parser import parse_plugin_specs

    config = _resolve_config({})
    specs = parse_plugin_specs(plugins or [])
    entry = plan_entry_point(specs, config)
    directives = [r.directive for r in entry.replacements]
    if config.base_module_replacement:
        directives.append(f"{config.base_module}={config.base_module_replacement}")

    if get_output().format == OutputFormat.JSON:
        print_json({
            "plugins": [s.model_dump() | {"import_path": _import_path(s, config)} for s in specs],
            "entry_point": entry.main_source,
            "manifest": entry.manifest,
            "replacements": directives,
        })
        return

    print_table(
        ["Module", "Version", "Local path", "Import path"],
        [
            [
                s.name,
                s.version or "latest",
                s.local_path or "-",
                _import_path(s, config),
            ]
            for s in specs
        ],
        title="Plugins",
    )
    print_source(entry.main_source, "go", title=ENTRY_POINT_FILENAME)
    print_source(entry.manifest, "text", title=MANIFEST_FILENAME)
    if directives:
        print_source(
            "\n".join(f"-replace {d}" for d in directives), "text", title="replacements"
        )
