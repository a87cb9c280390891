"""Go toolchain driven through ``go mod`` and ``go build`` subprocesses.

Each command runs with the workspace as working directory and inherits
this process's stdout and stderr, so the toolchain's own diagnostics reach
the user as they happen. The command line is echoed before it runs.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from plugbuild.exceptions import ToolchainError
from plugbuild.output import info
from plugbuild.toolchain.base import Toolchain

logger = logging.getLogger(__name__)

_NEEDS_QUOTING = re.compile(r"[\s'\"]")


def _quote(field: str) -> str:
    """Quote *field* so the toolchain's flag splitter keeps it whole.

    Raises:
        ToolchainError: If *field* contains both quote characters and
            cannot be represented.
    """
    if not _NEEDS_QUOTING.search(field):
        return field
    if "'" not in field:
        return f"'{field}'"
    if '"' not in field:
        return f'"{field}"'
    raise ToolchainError(f"Cannot quote link flag containing both ' and \": {field}")


def format_ldflags(package: str, link_constants: Mapping[str, str]) -> str:
    """Render ``-X package.Name=value`` flags for each link constant.

    Assignments containing whitespace or quotes are wrapped in single
    quotes, or in double quotes when they hold a single quote.

    Example::

        format_ldflags("a.com/app/cmd", {"Version": "1.2.0"})
        # '-X a.com/app/cmd.Version=1.2.0'

    Raises:
        ToolchainError: If a value contains both ``'`` and ``"``.
    """
    flags = []
    for name, value in link_constants.items():
        flags.append(f"-X {_quote(f'{package}.{name}={value}')}")
    return " ".join(flags)


class GoToolchain(Toolchain):
    """:class:`~plugbuild.toolchain.base.Toolchain` backed by the ``go`` command.

    Args:
        workspace: Module root every command runs in.
        cmd_package: Package receiving the link-time constants.
        executable: Name or path of the ``go`` binary.
        timeout: Seconds before a command is killed. ``None`` waits
            indefinitely.
    """

    def __init__(
        self,
        workspace: Path,
        cmd_package: str,
        executable: str = "go",
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(workspace)
        self.cmd_package = cmd_package
        self.executable = executable
        self.timeout = timeout

    def run(self, *args: str) -> None:
        """Run ``<executable> *args`` in the workspace.

        Raises:
            ToolchainError: If the executable is missing, the command times
                out, or it exits non-zero.
        """
        command = [self.executable, *args]
        info(_display(command))
        logger.debug("Running %s in %s", command, self.workspace)
        try:
            result = subprocess.run(command, cwd=self.workspace, timeout=self.timeout)
        except FileNotFoundError as exc:
            raise ToolchainError(
                f"Toolchain executable not found: {self.executable}", command
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise ToolchainError(
                f"'{_display(command)}' timed out after {self.timeout} seconds", command
            ) from exc
        if result.returncode != 0:
            raise ToolchainError(
                f"'{_display(command)}' failed with exit status {result.returncode}",
                command,
                result.returncode,
            )

    def apply_replacement(self, module: str, path: str) -> None:
        self.run("mod", "edit", "-replace", f"{module}={path}")

    def resolve_dependencies(self) -> None:
        self.run("mod", "tidy")
        self.run("mod", "vendor")

    def compile(self, output_path: Path, link_constants: Mapping[str, str]) -> None:
        ldflags = format_ldflags(self.cmd_package, link_constants)
        self.run("build", "-ldflags", ldflags, "-o", str(output_path), ".")


def _display(command: Sequence[str]) -> str:
    return " ".join(command)
