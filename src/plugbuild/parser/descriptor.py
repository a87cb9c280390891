"""Parse plugin descriptors given on the command line.

A descriptor names a plugin module with an optional version and an
optional local checkout::

    github.com/acme/connector
    github.com/acme/connector@v2.1.0
    github.com/acme/connector@v2.1.0=/home/me/src/connector
    github.com/acme/connector=../connector

Parsing never fails. Missing parts become empty strings, which the rest of
the pipeline reads as "use the default".
"""

from __future__ import annotations

from typing import Iterable

from plugbuild.models import PluginSpec


def parse_plugin_spec(descriptor: str) -> PluginSpec:
    """Split *descriptor* into name, version and local path.

    The local path is cut off at the first ``=``, then the remainder is
    split at the first ``@``. Any further ``=`` or ``@`` characters stay in
    the later field.

    Args:
        descriptor: Raw ``module[@version][=path]`` string. Surrounding
            whitespace is ignored.

    Returns:
        The parsed :class:`~plugbuild.models.PluginSpec`.
    """
    remainder, _, local_path = descriptor.strip().partition("=")
    name, _, version = remainder.partition("@")
    return PluginSpec(name=name, version=version, local_path=local_path)


def parse_plugin_specs(descriptors: Iterable[str]) -> list[PluginSpec]:
    """Parse every descriptor in *descriptors*, preserving input order."""
    return [parse_plugin_spec(d) for d in descriptors]
