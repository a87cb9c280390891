"""Exception hierarchy for plugbuild.

All exceptions inherit from :class:`PlugbuildError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`plugbuild.exit_codes`.
The build pipeline reports the first ``PlugbuildError`` raised by a stage,
and :func:`plugbuild.app.main` turns it into a process exit code.

Subclass hierarchy::

    PlugbuildError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 1)
    +-- WorkspaceError      (exit 11)
    +-- AssetError          (exit 12)
    +-- ToolchainError      (exit 13)
"""

from __future__ import annotations

from typing import Optional, Sequence

from plugbuild.exit_codes import (
    EXIT_ASSET_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_TOOLCHAIN_FAILURE,
    EXIT_WORKSPACE_ERROR,
)


class PlugbuildError(Exception):
    """Base exception for all plugbuild errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(PlugbuildError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(PlugbuildError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE


class WorkspaceError(PlugbuildError):
    """Raised when the build workspace cannot be created, read, or written."""

    exit_code = EXIT_WORKSPACE_ERROR


class AssetError(PlugbuildError):
    """Raised when copying the static asset bundle fails."""

    exit_code = EXIT_ASSET_ERROR


class ToolchainError(PlugbuildError):
    """Raised when an external toolchain command fails.

    The child's output has already been streamed to the caller's own
    stdout/stderr, so the message only names the command.

    Args:
        message: Human-readable error description.
        command: The argv that was executed.
        returncode: Exit status of the child, or ``None`` if it never ran
            to completion (missing executable, timeout).
    """

    exit_code = EXIT_TOOLCHAIN_FAILURE

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.command = list(command) if command is not None else []
        self.returncode = returncode
