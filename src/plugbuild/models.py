"""Canonical models shared across all plugbuild modules.

The models fall into three groups:

**Build inputs** -- parsed from the command line and frozen once created:
    :class:`PluginSpec`, :class:`VersionInfo`, :class:`Replacement`.

**Configuration** -- serialised as JSON in the user's config directory or a
project-local ``plugbuild.json``:
    :class:`BuildConfig`, :class:`GlobalConfig`.

**Pipeline state** -- owned by a single build invocation:
    :class:`BuildMaterial`, :data:`TranslationBundle`, :class:`BuildStage`,
    :class:`BuildResult`.

Configuration and input models use Pydantic v2. Pipeline state uses plain
dataclasses because it carries exception objects and live paths.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Build inputs ---


class PluginSpec(BaseModel):
    """One plugin to link into the composed binary.

    Produced by :func:`~plugbuild.parser.parse_plugin_spec` from a
    descriptor such as ``github.com/acme/connector@v2.1.0=../connector``.
    Empty fields mean "use the default": no version selects the latest
    remote release and no local path fetches the module remotely.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", description="Module reference, e.g. github.com/acme/connector")
    version: str = Field(default="", description="Optional semantic version, e.g. v2.1.0")
    local_path: str = Field(default="", description="Optional local checkout overriding the fetch")

    @property
    def is_local(self) -> bool:
        """Whether the plugin is read from the local filesystem."""
        return bool(self.local_path)

    @property
    def module_path(self) -> str:
        """The import path qualified with the plugin's major version."""
        from plugbuild.parser.module_path import versioned_module_path

        return versioned_module_path(self.name, self.version)


class VersionInfo(BaseModel):
    """Version metadata stamped into the binary as link-time constants.

    Values are opaque strings; nothing here checks that ``version`` looks
    like a version number.
    """

    model_config = ConfigDict(frozen=True)

    version: str = ""
    revision: str = ""
    time: str = ""

    def link_constants(self) -> dict[str, str]:
        """Map of symbol name to value injected into the command package."""
        return {"Version": self.version, "Revision": self.revision, "Time": self.time}


class Replacement(BaseModel):
    """A module replacement directive handed to the toolchain.

    Example::

        Replacement(module="a.com/p2", version="1.2.0", path="/src/p2").directive
        # 'a.com/p2@v1.2.0=/src/p2'
    """

    model_config = ConfigDict(frozen=True)

    module: str
    path: str
    version: str = ""

    @property
    def target(self) -> str:
        """Left-hand side of the directive: the module, pinned when versioned."""
        if not self.version:
            return self.module
        return f"{self.module}@v{self.version.removeprefix('v')}"

    @property
    def directive(self) -> str:
        return f"{self.target}={self.path}"


# --- Configuration ---


class BuildConfig(BaseModel):
    """Every tunable of a build.

    Defaults reproduce the layout of the Answer Q&A platform, the base
    application plugbuild was written for. The base module replacement is
    an explicit field: :func:`~plugbuild.config.resolve_build_config` reads
    the environment once and stores the result here, and nothing in the
    pipeline looks at ``os.environ`` again.
    """

    base_module: str = Field(
        default="github.com/answerdev/answer",
        description="Module path of the base application",
    )
    main_module: str = Field(
        default="answer", description="Module name written to the generated manifest"
    )
    language_version: str = Field(
        default="1.19", description="Toolchain language version for the manifest"
    )
    cmd_package: Optional[str] = Field(
        default=None,
        description="Package holding the entry function and version symbols "
        "(default: <base_module>/cmd)",
    )
    cmd_entry: str = Field(default="Main", description="Entry function in the command package")
    base_module_replacement: Optional[str] = Field(
        default=None, description="Local checkout replacing the whole base module"
    )
    toolchain: str = Field(default="go", description="Toolchain executable")
    toolchain_timeout: Optional[float] = Field(
        default=None, description="Seconds before a toolchain command is killed; none waits forever"
    )
    workspace_parent: Optional[str] = Field(
        default=None, description="Directory in which the workspace is created (default: cwd)"
    )
    resource_dir: str = Field(default="i18n", description="Translation directory name")
    resource_namespace: str = Field(
        default="plugin", description="Top-level key holding plugin translations"
    )
    resource_extensions: list[str] = Field(default_factory=lambda: [".yaml"])
    resource_index: str = Field(
        default="i18n.yaml", description="Base index file merged regardless of extension"
    )
    asset_subdir: str = Field(default="ui", description="Asset directory inside the vendored base module")
    assets_dir: Optional[str] = Field(
        default=None, description="Directory holding the static asset bundle"
    )
    keep_workspace: bool = Field(
        default=False, description="Leave the workspace on disk after a successful build"
    )

    @property
    def resolved_cmd_package(self) -> str:
        return self.cmd_package or f"{self.base_module}/cmd"

    @property
    def workspace_prefix(self) -> str:
        return f"{self.main_module}_build"

    @property
    def default_output_name(self) -> str:
        return f"new_{self.main_module}"


class GlobalConfig(BaseModel):
    """User-level defaults stored in ``<config_dir>/config.json``.

    The ``build`` section is a partial :class:`BuildConfig`; it is layered
    under project config, environment, and CLI flags by
    :func:`~plugbuild.config.resolve_build_config`.
    """

    build: dict[str, Any] = Field(default_factory=dict)


# --- Pipeline state ---


TranslationBundle = dict[str, dict[str, Any]]
"""Resource file name -> translation key -> value, accumulated across plugins."""


class BuildStage(str, enum.Enum):
    """States of the build pipeline, in execution order."""

    INIT = "init"
    GENERATE_ENTRY_POINT = "generate_entry_point"
    RESOLVE_DEPENDENCIES = "resolve_dependencies"
    INSTALL_ASSETS = "install_assets"
    MERGE_RESOURCES = "merge_resources"
    COMPILE = "compile"
    CLEANUP = "cleanup"
    DONE = "done"
    FAILED = "failed"


@dataclass
class BuildMaterial:
    """Aggregate context handed to every pipeline stage.

    Created once per build invocation. ``workspace`` is created fresh by
    the orchestrator and belongs to this invocation alone.
    """

    plugins: list[PluginSpec]
    output_path: Path
    workspace: Path
    config: BuildConfig
    version_info: VersionInfo = field(default_factory=VersionInfo)

    @property
    def vendor_dir(self) -> Path:
        return self.workspace / "vendor"

    def vendored(self, module: str) -> Path:
        """Location of *module* inside the vendored dependency tree."""
        return self.vendor_dir.joinpath(*module.split("/"))


@dataclass
class BuildResult:
    """Outcome of one build: success, or the first error encountered."""

    state: BuildStage
    output_path: Path
    workspace: Optional[Path] = None
    completed: list[BuildStage] = field(default_factory=list)
    failed_stage: Optional[BuildStage] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.state == BuildStage.DONE
