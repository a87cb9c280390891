"""Shared test fixtures for plugbuild.

Provides isolated config environments, output and logging resets, a CLI
runner, and a recording toolchain double that simulates vendoring and
compilation without a real toolchain. These fixtures are discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Mapping, Optional

import pytest

from plugbuild.exceptions import ToolchainError
from plugbuild.models import BuildConfig
from plugbuild.output import OutputFormat, OutputManager, reset_output, set_output
from plugbuild.toolchain.base import Toolchain


BASE_MODULE = "github.com/answerdev/answer"


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams and the
    test finishes, the cached references become stale.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_logging_between_tests() -> None:
    """Drop the Rich handler installed by the CLI callback.

    The handler holds a console bound to the CliRunner's stderr, and with
    ``propagate`` disabled ``caplog`` would see nothing.
    """
    yield
    logger = logging.getLogger("plugbuild")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG variables at subdirectories of tmp_path, clears every
    variable plugbuild reads, and changes the working directory to
    tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("plugbuild.config._is_xdg_platform", lambda: True)

    for var in [
        "PLUGBUILD_BASE_REPLACEMENT",
        "PLUGBUILD_TOOLCHAIN",
        "ANSWER_MODULE",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


# ---------------------------------------------------------------------------
# Toolchain double
# ---------------------------------------------------------------------------


class RecordingToolchain(Toolchain):
    """Toolchain double recording every call.

    ``resolve_dependencies`` writes *vendor_files* (paths relative to the
    workspace) to simulate vendoring; ``compile`` writes a small file at
    the output path. Naming an operation in *fail_on* makes it raise
    :class:`~plugbuild.exceptions.ToolchainError` instead.
    """

    def __init__(
        self,
        workspace: Path,
        vendor_files: Optional[Mapping[str, str]] = None,
        fail_on: Optional[str] = None,
    ) -> None:
        super().__init__(workspace)
        self.vendor_files = dict(vendor_files or {})
        self.fail_on = fail_on
        self.calls: list[tuple] = []

    def _maybe_fail(self, operation: str) -> None:
        if self.fail_on == operation:
            raise ToolchainError(f"{operation} failed", ["go", operation], 1)

    def apply_replacement(self, module: str, path: str) -> None:
        self.calls.append(("apply_replacement", module, path))
        self._maybe_fail("apply_replacement")

    def resolve_dependencies(self) -> None:
        self.calls.append(("resolve_dependencies",))
        self._maybe_fail("resolve_dependencies")
        for relative, content in self.vendor_files.items():
            path = self.workspace / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

    def compile(self, output_path: Path, link_constants: Mapping[str, str]) -> None:
        self.calls.append(("compile", output_path, dict(link_constants)))
        self._maybe_fail("compile")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"\x7fELF")


class ToolchainRecorder:
    """Factory handed to the orchestrator; keeps every toolchain it made."""

    def __init__(self) -> None:
        self.vendor_files: dict[str, str] = {}
        self.fail_on: Optional[str] = None
        self.created: list[RecordingToolchain] = []

    def __call__(self, workspace: Path, config: BuildConfig) -> RecordingToolchain:
        toolchain = RecordingToolchain(workspace, self.vendor_files, self.fail_on)
        self.created.append(toolchain)
        return toolchain

    @property
    def last(self) -> RecordingToolchain:
        return self.created[-1]


@pytest.fixture
def toolchain_recorder() -> ToolchainRecorder:
    """Recording toolchain factory with the base translation set pre-vendored."""
    recorder = ToolchainRecorder()
    recorder.vendor_files = {
        f"vendor/{BASE_MODULE}/i18n/en_US.yaml": "ui:\n  title: Answer\n",
        f"vendor/{BASE_MODULE}/i18n/i18n.yaml": "language_options:\n  - label: English\n",
    }
    return recorder


@pytest.fixture
def write_tree() -> Callable[[Path, Mapping[str, str]], None]:
    """Helper writing ``{relative_path: text}`` under a root directory."""

    def _write(root: Path, files: Mapping[str, str]) -> None:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

    return _write
