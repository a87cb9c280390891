"""plugbuild -- Assemble an application binary from a base module plus plugins.

This package composes a fixed base application with an arbitrary set of
plugin modules. Plugins are linked statically: a generated entry point
imports every plugin for its side effects, the toolchain resolves and
vendors their dependencies (or substitutes local copies), and the plugins'
translation files are merged into the base application's own before the
final compile stamps version metadata into the binary.

Typical workflow::

    plugbuild build --with github.com/acme/connector@v2.1.0 --output ./app
    plugbuild plan --with github.com/acme/connector=../connector

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr diagnostics with Rich support.
"""

__version__ = "0.3.0"
