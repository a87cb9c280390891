"""The build pipeline.

* :class:`BuildOrchestrator` -- Runs the ordered stages with
  first-failure abort and returns a :class:`~plugbuild.models.BuildResult`.
* :func:`build_binary` -- One-call shorthand around the orchestrator.
"""

from plugbuild.pipeline.orchestrator import (
    BuildOrchestrator,
    Stage,
    build_binary,
    go_toolchain_factory,
)

__all__ = ["BuildOrchestrator", "Stage", "build_binary", "go_toolchain_factory"]
