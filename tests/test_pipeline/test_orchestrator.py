"""Tests for plugbuild.pipeline.orchestrator -- the staged build."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from plugbuild.exceptions import ToolchainError, WorkspaceError
from plugbuild.models import BuildConfig, BuildStage, VersionInfo
from plugbuild.pipeline import BuildOrchestrator, build_binary, go_toolchain_factory
from plugbuild.toolchain import GoToolchain

BASE_MODULE = "github.com/answerdev/answer"

BASE_I18N = f"vendor/{BASE_MODULE}/i18n"


@pytest.fixture
def config(tmp_path: Path) -> BuildConfig:
    parent = tmp_path / "builds"
    parent.mkdir()
    return BuildConfig(workspace_parent=str(parent))


def _op_names(toolchain) -> list[str]:
    return [call[0] for call in toolchain.calls]


class TestSuccessfulBuild:
    def test_all_stages_complete(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        output = tmp_path / "bin" / "new_answer"
        result = BuildOrchestrator(config, toolchain_recorder).build(
            output, ["github.com/acme/connector@v2.1.0"], VersionInfo(version="1.2.0")
        )

        assert result.ok
        assert result.state == BuildStage.DONE
        assert result.error is None
        assert result.completed == [
            BuildStage.GENERATE_ENTRY_POINT,
            BuildStage.RESOLVE_DEPENDENCIES,
            BuildStage.INSTALL_ASSETS,
            BuildStage.MERGE_RESOURCES,
            BuildStage.COMPILE,
            BuildStage.CLEANUP,
        ]
        assert result.output_path == output
        assert output.read_bytes() == b"\x7fELF"

    def test_workspace_removed_after_success(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        result = BuildOrchestrator(config, toolchain_recorder).build(tmp_path / "out", [])
        assert result.ok
        assert result.workspace is not None
        assert not result.workspace.exists()
        assert list((tmp_path / "builds").iterdir()) == []

    def test_workspace_created_with_prefix(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        result = BuildOrchestrator(config, toolchain_recorder).build(tmp_path / "out", [])
        assert result.workspace.parent == (tmp_path / "builds").resolve()
        assert result.workspace.name.startswith("answer_build")

    def test_toolchain_bound_to_workspace(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        result = BuildOrchestrator(config, toolchain_recorder).build(tmp_path / "out", [])
        assert toolchain_recorder.last.workspace == result.workspace

    def test_version_constants_passed_to_compile(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        info = VersionInfo(version="1.2.0", revision="abc123", time="2024-01-01T00:00:00Z")
        BuildOrchestrator(config, toolchain_recorder).build(tmp_path / "out", [], info)
        compile_call = toolchain_recorder.last.calls[-1]
        assert compile_call[0] == "compile"
        assert compile_call[2] == {
            "Version": "1.2.0",
            "Revision": "abc123",
            "Time": "2024-01-01T00:00:00Z",
        }

    def test_toolchain_call_order(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        BuildOrchestrator(config, toolchain_recorder).build(
            tmp_path / "out", ["a.com/p1@v1.0.0=../p1", "a.com/p2"]
        )
        assert _op_names(toolchain_recorder.last) == [
            "apply_replacement",
            "resolve_dependencies",
            "compile",
        ]

    def test_translations_merged_into_base(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        toolchain_recorder.vendor_files.update({
            "vendor/a.com/p1/i18n/en_US.yaml": "plugin:\n  greeting: p1\n",
            "vendor/a.com/p2/i18n/en_US.yaml": "plugin:\n  greeting: p2\n",
        })
        config = config.model_copy(update={"keep_workspace": True})
        result = BuildOrchestrator(config, toolchain_recorder).build(
            tmp_path / "out", ["a.com/p1", "a.com/p2"]
        )
        merged = yaml.safe_load((result.workspace / BASE_I18N / "en_US.yaml").read_text())
        assert merged == {"ui": {"title": "Answer"}, "plugin": {"greeting": "p2"}}

    def test_keep_workspace(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        config = config.model_copy(update={"keep_workspace": True})
        result = BuildOrchestrator(config, toolchain_recorder).build(
            tmp_path / "out", ["a.com/p"]
        )
        assert result.ok
        assert BuildStage.CLEANUP in result.completed
        assert (result.workspace / "main.go").is_file()
        assert (result.workspace / "go.mod").read_text().startswith("module answer\n")

    def test_plugins_accepted_as_specs(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        from plugbuild.parser import parse_plugin_spec

        config = config.model_copy(update={"keep_workspace": True})
        result = BuildOrchestrator(config, toolchain_recorder).build(
            tmp_path / "out", [parse_plugin_spec("a.com/p@v2.0.0")]
        )
        assert '_ "a.com/p/v2"' in (result.workspace / "main.go").read_text()


class TestReplacements:
    def test_local_plugins_replaced(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        BuildOrchestrator(config, toolchain_recorder).build(
            tmp_path / "out", ["a.com/p1", "a.com/p2@1.2.0=/src/p2", "a.com/p3=/src/p3"]
        )
        replacements = [c for c in toolchain_recorder.last.calls if c[0] == "apply_replacement"]
        assert replacements == [
            ("apply_replacement", "a.com/p2@v1.2.0", "/src/p2"),
            ("apply_replacement", "a.com/p3", "/src/p3"),
        ]

    def test_base_replacement_applied_before_resolution(
        self, config, toolchain_recorder, tmp_path, quiet_output
    ) -> None:
        config = config.model_copy(update={"base_module_replacement": "/src/answer"})
        BuildOrchestrator(config, toolchain_recorder).build(tmp_path / "out", [])
        calls = toolchain_recorder.last.calls
        assert calls[0] == ("apply_replacement", BASE_MODULE, "/src/answer")
        assert calls[1] == ("resolve_dependencies",)

    def test_no_base_replacement_by_default(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        BuildOrchestrator(config, toolchain_recorder).build(tmp_path / "out", [])
        assert "apply_replacement" not in _op_names(toolchain_recorder.last)


class TestFailure:
    def test_dependency_failure_aborts_pipeline(
        self, config, toolchain_recorder, tmp_path, quiet_output
    ) -> None:
        toolchain_recorder.fail_on = "resolve_dependencies"
        output = tmp_path / "out"
        result = BuildOrchestrator(config, toolchain_recorder).build(output, ["a.com/p"])

        assert not result.ok
        assert result.state == BuildStage.FAILED
        assert result.failed_stage == BuildStage.RESOLVE_DEPENDENCIES
        assert isinstance(result.error, ToolchainError)
        assert str(result.error) == "resolve_dependencies failed"
        assert result.completed == [BuildStage.GENERATE_ENTRY_POINT]
        assert "compile" not in _op_names(toolchain_recorder.last)
        assert result.workspace.is_dir()
        assert not output.exists()

    def test_compile_failure_keeps_workspace(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        toolchain_recorder.fail_on = "compile"
        result = BuildOrchestrator(config, toolchain_recorder).build(tmp_path / "out", [])
        assert result.failed_stage == BuildStage.COMPILE
        assert BuildStage.CLEANUP not in result.completed
        assert result.workspace.is_dir()

    def test_replacement_failure_stops_at_generation(
        self, config, toolchain_recorder, tmp_path, quiet_output
    ) -> None:
        toolchain_recorder.fail_on = "apply_replacement"
        result = BuildOrchestrator(config, toolchain_recorder).build(
            tmp_path / "out", ["a.com/p=../p"]
        )
        assert result.failed_stage == BuildStage.GENERATE_ENTRY_POINT
        assert result.completed == []
        assert _op_names(toolchain_recorder.last) == ["apply_replacement"]

    def test_missing_base_translations_fail_merge(
        self, config, toolchain_recorder, tmp_path, quiet_output
    ) -> None:
        toolchain_recorder.vendor_files = {}
        result = BuildOrchestrator(config, toolchain_recorder).build(tmp_path / "out", [])
        assert result.failed_stage == BuildStage.MERGE_RESOURCES
        assert isinstance(result.error, WorkspaceError)
        assert "compile" not in _op_names(toolchain_recorder.last)

    def test_workspace_creation_failure(self, tmp_path, toolchain_recorder, quiet_output) -> None:
        config = BuildConfig(workspace_parent=str(tmp_path / "missing"))
        result = BuildOrchestrator(config, toolchain_recorder).build(tmp_path / "out", [])
        assert result.failed_stage == BuildStage.INIT
        assert isinstance(result.error, WorkspaceError)
        assert result.workspace is None
        assert toolchain_recorder.created == []


class TestAssets:
    def test_bundle_installed_over_vendored_base(
        self, config, toolchain_recorder, tmp_path, write_tree, quiet_output
    ) -> None:
        bundle = tmp_path / "bundle"
        write_tree(bundle, {"index.html": "<html></html>", "static/app.js": "1"})
        config = config.model_copy(update={"keep_workspace": True})
        result = BuildOrchestrator(config, toolchain_recorder, assets=bundle).build(
            tmp_path / "out", []
        )
        installed = result.workspace / "vendor" / BASE_MODULE / "ui"
        assert (installed / "index.html").read_text() == "<html></html>"
        assert (installed / "static/app.js").is_file()

    def test_assets_dir_from_config(self, config, toolchain_recorder, tmp_path, write_tree, quiet_output) -> None:
        write_tree(tmp_path / "bundle", {"index.html": "x"})
        config = config.model_copy(
            update={"keep_workspace": True, "assets_dir": str(tmp_path / "bundle")}
        )
        result = BuildOrchestrator(config, toolchain_recorder).build(tmp_path / "out", [])
        assert (result.workspace / "vendor" / BASE_MODULE / "ui" / "index.html").is_file()

    def test_missing_bundle_fails_install(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        result = BuildOrchestrator(config, toolchain_recorder, assets=tmp_path / "nope").build(
            tmp_path / "out", []
        )
        assert result.failed_stage == BuildStage.INSTALL_ASSETS


class TestOutputPath:
    def test_empty_defaults_to_new_module_in_cwd(self, config, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert BuildOrchestrator(config).resolve_output_path("") == tmp_path / "new_answer"
        assert BuildOrchestrator(config).resolve_output_path(None) == tmp_path / "new_answer"

    def test_relative_anchored_at_cwd(self, config, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        resolved = BuildOrchestrator(config).resolve_output_path("bin/app")
        assert resolved == (tmp_path / "bin" / "app").resolve()

    def test_relative_output_written_outside_workspace(
        self, config, toolchain_recorder, tmp_path, monkeypatch, quiet_output
    ) -> None:
        monkeypatch.chdir(tmp_path)
        result = BuildOrchestrator(config, toolchain_recorder).build("app", [])
        assert result.output_path == (tmp_path / "app").resolve()
        assert (tmp_path / "app").is_file()


class TestFactories:
    def test_go_toolchain_factory(self, tmp_path) -> None:
        config = BuildConfig(toolchain="/opt/go/bin/go", toolchain_timeout=30)
        toolchain = go_toolchain_factory(tmp_path, config)
        assert isinstance(toolchain, GoToolchain)
        assert toolchain.executable == "/opt/go/bin/go"
        assert toolchain.timeout == 30
        assert toolchain.cmd_package == f"{BASE_MODULE}/cmd"

    def test_build_binary_shorthand(self, config, toolchain_recorder, tmp_path, quiet_output) -> None:
        result = build_binary(
            tmp_path / "out", ["a.com/p"], config=config, toolchain_factory=toolchain_recorder
        )
        assert result.ok
