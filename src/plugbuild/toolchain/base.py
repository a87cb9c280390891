"""Abstract toolchain capability driven by the build pipeline.

The pipeline never spawns processes itself. It talks to a
:class:`Toolchain` bound to the workspace, which lets tests substitute a
recording double for the real :class:`~plugbuild.toolchain.go.GoToolchain`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping


class Toolchain(ABC):
    """External build toolchain operating on one workspace.

    Every method blocks until the underlying command exits and raises
    :class:`~plugbuild.exceptions.ToolchainError` when it fails.
    """

    def __init__(self, workspace: Path) -> None:
        self.workspace = workspace

    @abstractmethod
    def apply_replacement(self, module: str, path: str) -> None:
        """Redirect *module* (optionally ``module@version``) to a local *path*."""
        ...

    @abstractmethod
    def resolve_dependencies(self) -> None:
        """Tidy the manifest and vendor every dependency into the workspace."""
        ...

    @abstractmethod
    def compile(self, output_path: Path, link_constants: Mapping[str, str]) -> None:
        """Build the workspace into *output_path*.

        Args:
            output_path: Where the binary is written.
            link_constants: Symbol name to string value, injected into the
                base application's command package at link time.
        """
        ...
