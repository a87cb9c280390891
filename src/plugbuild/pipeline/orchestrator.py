"""Sequential build pipeline with first-failure abort.

:class:`BuildOrchestrator` runs a fixed, ordered list of :class:`Stage`
objects against one :class:`~plugbuild.models.BuildMaterial`:

1. ``generate_entry_point`` -- write the entry point and manifest, apply
   replacement directives for local plugins.
2. ``resolve_dependencies`` -- apply the base module replacement, then
   tidy and vendor dependencies.
3. ``install_assets`` -- copy the static asset bundle over the vendored
   base module.
4. ``merge_resources`` -- append plugin translations to the base files.
5. ``compile`` -- build the binary with version link constants.
6. ``cleanup`` -- remove the workspace.

The fold stops at the first stage that raises a
:class:`~plugbuild.exceptions.PlugbuildError` or :class:`OSError`; nothing
after it runs, cleanup included, so a failed build leaves its workspace on
disk for inspection. The outcome is returned as a
:class:`~plugbuild.models.BuildResult`, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from plugbuild.exceptions import PlugbuildError, WorkspaceError
from plugbuild.generator import plan_entry_point, write_entry_point
from plugbuild.models import (
    BuildConfig,
    BuildMaterial,
    BuildResult,
    BuildStage,
    PluginSpec,
    VersionInfo,
)
from plugbuild.output import debug, info, step
from plugbuild.parser import parse_plugin_spec
from plugbuild.resources import install_assets, merge_translations
from plugbuild.toolchain import GoToolchain, Toolchain
from plugbuild.workspace import create_workspace, remove_workspace

logger = logging.getLogger(__name__)

ToolchainFactory = Callable[[Path, BuildConfig], Toolchain]


def go_toolchain_factory(workspace: Path, config: BuildConfig) -> Toolchain:
    """Default factory: a :class:`~plugbuild.toolchain.GoToolchain` for *workspace*."""
    return GoToolchain(
        workspace,
        cmd_package=config.resolved_cmd_package,
        executable=config.toolchain,
        timeout=config.toolchain_timeout,
    )


@dataclass(frozen=True)
class Stage:
    """One step of the pipeline.

    Attributes:
        state: Pipeline state this stage represents.
        description: Short label announced when the stage starts.
        run: Callable doing the work; raises to fail the build.
    """

    state: BuildStage
    description: str
    run: Callable[[BuildMaterial, Toolchain], None]


class BuildOrchestrator:
    """Drive a build from plugin descriptors to a stamped binary.

    Args:
        config: Effective build configuration.
        toolchain_factory: Creates the toolchain bound to a fresh
            workspace. Defaults to :func:`go_toolchain_factory`.
        assets: Static asset bundle. Defaults to ``config.assets_dir``
            when set; with neither, asset installation is skipped.

    Example::

        orchestrator = BuildOrchestrator(BuildConfig())
        result = orchestrator.build(
            "./new_answer",
            ["github.com/acme/connector@v2.1.0"],
            VersionInfo(version="1.2.0"),
        )
        if not result.ok:
            raise result.error
    """

    def __init__(
        self,
        config: Optional[BuildConfig] = None,
        toolchain_factory: Optional[ToolchainFactory] = None,
        assets: Optional[Traversable] = None,
    ) -> None:
        self.config = config or BuildConfig()
        self.toolchain_factory = toolchain_factory or go_toolchain_factory
        if assets is None and self.config.assets_dir:
            assets = Path(self.config.assets_dir)
        self.assets = assets

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def stages(self) -> list[Stage]:
        """The pipeline, in execution order."""
        return [
            Stage(BuildStage.GENERATE_ENTRY_POINT, "generate entry point", self._generate_entry_point),
            Stage(BuildStage.RESOLVE_DEPENDENCIES, "resolve dependencies", self._resolve_dependencies),
            Stage(BuildStage.INSTALL_ASSETS, "install assets", self._install_assets),
            Stage(BuildStage.MERGE_RESOURCES, "merge translations", self._merge_resources),
            Stage(BuildStage.COMPILE, "compile", self._compile),
            Stage(BuildStage.CLEANUP, "clean up", self._cleanup),
        ]

    def _generate_entry_point(self, material: BuildMaterial, toolchain: Toolchain) -> None:
        entry = plan_entry_point(material.plugins, material.config)
        write_entry_point(entry, material.workspace)
        for replacement in entry.replacements:
            toolchain.apply_replacement(replacement.target, replacement.path)

    def _resolve_dependencies(self, material: BuildMaterial, toolchain: Toolchain) -> None:
        replacement = material.config.base_module_replacement
        if replacement:
            toolchain.apply_replacement(material.config.base_module, replacement)
        toolchain.resolve_dependencies()

    def _install_assets(self, material: BuildMaterial, toolchain: Toolchain) -> None:
        if self.assets is None:
            info("No asset bundle configured, keeping vendored assets.")
            return
        target = install_assets(
            self.assets,
            material.vendored(material.config.base_module),
            material.config.asset_subdir,
        )
        debug(f"Assets installed into {target}")

    def _merge_resources(self, material: BuildMaterial, toolchain: Toolchain) -> None:
        extended = merge_translations(material)
        debug(f"Extended translation files: {', '.join(extended) or 'none'}")

    def _compile(self, material: BuildMaterial, toolchain: Toolchain) -> None:
        toolchain.compile(material.output_path, material.version_info.link_constants())

    def _cleanup(self, material: BuildMaterial, toolchain: Toolchain) -> None:
        if material.config.keep_workspace:
            info(f"Keeping workspace: {material.workspace}")
            return
        if not remove_workspace(material.workspace):
            logger.warning("Workspace left behind: %s", material.workspace)

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def resolve_output_path(self, output_path: Union[str, Path, None]) -> Path:
        """Absolute output path; empty means ``./new_<main module>``.

        Relative paths are anchored at the current directory, not at the
        workspace the compiler runs in.
        """
        if not output_path:
            return Path.cwd() / self.config.default_output_name
        return Path(output_path).expanduser().resolve()

    def build(
        self,
        output_path: Union[str, Path, None],
        plugins: Sequence[Union[str, PluginSpec]],
        version_info: Optional[VersionInfo] = None,
    ) -> BuildResult:
        """Run every stage in order and report the outcome.

        Args:
            output_path: Where the binary is written.
            plugins: Raw descriptors or already parsed specs, in link order.
            version_info: Version metadata stamped into the binary.

        Returns:
            A :class:`~plugbuild.models.BuildResult` in state ``DONE``, or
            ``FAILED`` carrying the first error and the stage that raised it.
        """
        specs = [p if isinstance(p, PluginSpec) else parse_plugin_spec(p) for p in plugins]
        output = self.resolve_output_path(output_path)

        try:
            workspace = create_workspace(self.config.workspace_prefix, self.config.workspace_parent)
        except WorkspaceError as exc:
            return BuildResult(
                state=BuildStage.FAILED,
                output_path=output,
                failed_stage=BuildStage.INIT,
                error=exc,
            )
        step(f"workspace: {workspace}")

        material = BuildMaterial(
            plugins=specs,
            output_path=output,
            workspace=workspace,
            config=self.config,
            version_info=version_info or VersionInfo(),
        )
        toolchain = self.toolchain_factory(workspace, self.config)
        return self.run_stages(material, toolchain)

    def run_stages(self, material: BuildMaterial, toolchain: Toolchain) -> BuildResult:
        """Fold :meth:`stages` over *material*, stopping at the first failure."""
        result = BuildResult(
            state=BuildStage.INIT,
            output_path=material.output_path,
            workspace=material.workspace,
        )
        for stage in self.stages():
            step(stage.description)
            try:
                stage.run(material, toolchain)
            except (PlugbuildError, OSError) as exc:
                logger.debug("Stage %s failed: %s", stage.state.value, exc)
                result.state = BuildStage.FAILED
                result.failed_stage = stage.state
                result.error = exc
                return result
            result.completed.append(stage.state)
        result.state = BuildStage.DONE
        return result


def build_binary(
    output_path: Union[str, Path, None],
    plugins: Sequence[Union[str, PluginSpec]],
    version_info: Optional[VersionInfo] = None,
    config: Optional[BuildConfig] = None,
    toolchain_factory: Optional[ToolchainFactory] = None,
    assets: Optional[Traversable] = None,
) -> BuildResult:
    """Build a new binary from the base application and *plugins*.

    Shorthand for ``BuildOrchestrator(config, ...).build(...)``.
    """
    orchestrator = BuildOrchestrator(config, toolchain_factory=toolchain_factory, assets=assets)
    return orchestrator.build(output_path, plugins, version_info)
