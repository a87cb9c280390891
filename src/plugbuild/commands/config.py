"""Config commands -- view and modify build defaults.

Provides the ``plugbuild config`` sub-command group. ``show`` prints the
effective :class:`~plugbuild.models.BuildConfig` after every precedence
layer is applied; ``set`` and ``reset`` edit the ``build`` section of the
user's global config file.
"""

from __future__ import annotations

from typing import Any, get_args

import typer
from pydantic import ValidationError

from plugbuild.exceptions import InvalidUsageError
from plugbuild.output import error, info, print_json, success


config_app = typer.Typer(no_args_is_help=True)


def _coerce(key: str, value: str, current: Any, annotation: Any) -> Any:
    """Convert *value* to the type of field *key*.

    *current* is the field's present value; for fields that are ``None``
    the type is taken from the field *annotation*. ``none``, ``null`` and
    the empty string clear an optional field.

    Raises:
        InvalidUsageError: If *value* cannot be converted.
    """
    optional = current is None or type(None) in get_args(annotation)
    if optional and value.lower() in ("", "none", "null"):
        return None
    if current is None:
        current = next((a() for a in get_args(annotation) if a in (bool, int, float)), None)
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, (int, float)):
        try:
            return type(current)(value)
        except ValueError:
            raise InvalidUsageError(
                f"Expected {type(current).__name__} for {key}, got: {value}"
            ) from None
    if isinstance(current, list):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


@config_app.command("show")
def config_show() -> None:
    """Show the effective build configuration.

    Example::

        plugbuild config show
        plugbuild --json config show
    """
    from plugbuild.config import get_config_dir, resolve_build_config

    config = resolve_build_config()
    info(f"Config directory: {get_config_dir()}")
    print_json(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Build config key, e.g. 'base_module'."),
    value: str = typer.Argument(help="Value to set. Lists are comma-separated."),
) -> None:
    """Set a build default in the global configuration.

    The value is coerced to the field's type and the resulting build
    section is validated before saving.

    Example::

        plugbuild config set base_module github.com/acme/app
        plugbuild config set toolchain_timeout 900
        plugbuild config set toolchain_timeout none
        plugbuild config set resource_extensions .yaml,.yml
    """
    from plugbuild.config import load_global_config, save_global_config
    from plugbuild.models import BuildConfig, GlobalConfig

    config = load_global_config()
    build = dict(config.build)
    try:
        if key not in BuildConfig.model_fields:
            raise InvalidUsageError(f"Unknown config key: {key}")
        current = build.get(key, getattr(BuildConfig(), key))
        build[key] = _coerce(key, value, current, BuildConfig.model_fields[key].annotation)
        try:
            BuildConfig.model_validate(build)
        except ValidationError as exc:
            raise InvalidUsageError(f"Validation error: {exc}") from exc
    except InvalidUsageError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    save_global_config(GlobalConfig(build=build))
    success(f"Set {key} = {build[key]}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset build defaults to the built-in values.

    Example::

        plugbuild config reset --force
    """
    from plugbuild.config import save_global_config
    from plugbuild.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all build defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
