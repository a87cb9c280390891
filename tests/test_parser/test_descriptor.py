"""Tests for plugbuild.parser.descriptor -- plugin descriptor parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from plugbuild.models import PluginSpec
from plugbuild.parser import parse_plugin_spec, parse_plugin_specs


class TestParsePluginSpec:
    """Splitting ``module[@version][=path]`` descriptors."""

    def test_all_parts(self) -> None:
        spec = parse_plugin_spec("M@V=P")
        assert spec == PluginSpec(name="M", version="V", local_path="P")

    def test_name_only(self) -> None:
        spec = parse_plugin_spec("M")
        assert spec.name == "M"
        assert spec.version == ""
        assert spec.local_path == ""

    def test_version_without_path(self) -> None:
        spec = parse_plugin_spec("github.com/acme/connector@v2.1.0")
        assert spec.name == "github.com/acme/connector"
        assert spec.version == "v2.1.0"
        assert spec.is_local is False

    def test_path_without_version(self) -> None:
        spec = parse_plugin_spec("github.com/acme/search=../search")
        assert spec.name == "github.com/acme/search"
        assert spec.version == ""
        assert spec.local_path == "../search"
        assert spec.is_local is True

    def test_path_is_split_before_version(self) -> None:
        """An ``@`` inside the local path stays part of the path."""
        spec = parse_plugin_spec("a.com/p@v1.0.0=/home/me@work/p")
        assert spec.name == "a.com/p"
        assert spec.version == "v1.0.0"
        assert spec.local_path == "/home/me@work/p"

    def test_only_first_separators_split(self) -> None:
        spec = parse_plugin_spec("a.com/p@v1@x=/a=b")
        assert spec.version == "v1@x"
        assert spec.local_path == "/a=b"

    def test_surrounding_whitespace_is_ignored(self) -> None:
        spec = parse_plugin_spec("  a.com/p@v1.0.0 \n")
        assert spec.name == "a.com/p"
        assert spec.version == "v1.0.0"

    def test_empty_descriptor_yields_empty_spec(self) -> None:
        assert parse_plugin_spec("") == PluginSpec()

    def test_spec_is_immutable(self) -> None:
        spec = parse_plugin_spec("a.com/p")
        with pytest.raises(ValidationError):
            spec.name = "other"  # type: ignore[misc]


class TestParsePluginSpecs:
    def test_preserves_order(self) -> None:
        specs = parse_plugin_specs(["b.com/two", "a.com/one@v1.0.0", "c.com/three=/x"])
        assert [s.name for s in specs] == ["b.com/two", "a.com/one", "c.com/three"]

    def test_empty_list(self) -> None:
        assert parse_plugin_specs([]) == []
