"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a failure category and is referenced by the
corresponding :class:`~plugbuild.exceptions.PlugbuildError` subclass.
CI scripts can inspect the exit code to tell a broken toolchain run from
a bad workspace without parsing stderr.

Example::

    $ plugbuild build --with example.com/plugin@v2.0.0
    $ echo $?
    13   # EXIT_TOOLCHAIN_FAILURE -- "go mod tidy" exited non-zero
"""

EXIT_SUCCESS = 0
"""The build completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_WORKSPACE_ERROR = 11
"""Reading or writing the build workspace failed."""

EXIT_ASSET_ERROR = 12
"""The static asset bundle could not be copied into the workspace."""

EXIT_TOOLCHAIN_FAILURE = 13
"""An external toolchain command could not run or exited non-zero."""
