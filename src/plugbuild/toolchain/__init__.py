"""Toolchain capability and its Go implementation.

* :class:`Toolchain` -- Abstract operations the pipeline needs: apply a
  module replacement, resolve dependencies, compile.
* :class:`GoToolchain` -- Runs the operations through the ``go`` command.
"""

from plugbuild.toolchain.base import Toolchain
from plugbuild.toolchain.go import GoToolchain, format_ldflags

__all__ = ["GoToolchain", "Toolchain", "format_ldflags"]
