"""Merge plugin translations into the base application's translation files.

Every plugin may ship YAML translation files under ``<module>/i18n/``, each
holding its strings below a single namespace key::

    plugin:
      connector_github_name: GitHub
      connector_github_description: Sign in with GitHub

:func:`collect_translations` reads those files from the vendored plugins
and folds them into one :data:`~plugbuild.models.TranslationBundle`, with
later plugins overwriting keys set by earlier ones. :func:`append_translations`
then appends the combined block to the base application's file of the same
name. Files only plugins provide are dropped; the base set decides which
languages exist.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from plugbuild.exceptions import WorkspaceError
from plugbuild.models import BuildConfig, BuildMaterial, PluginSpec, TranslationBundle
from plugbuild.workspace import append_file

logger = logging.getLogger(__name__)


class TranslationDecodeError(ValueError):
    """A plugin translation file is not a mapping under the namespace key."""


def _resource_files(directory: Path, config: BuildConfig, include_index: bool = False) -> list[Path]:
    """Regular files in *directory* with a recognised extension, sorted by name."""
    files = []
    for entry in sorted(directory.iterdir()):
        if not entry.is_file():
            continue
        if entry.suffix in config.resource_extensions or (
            include_index and entry.name == config.resource_index
        ):
            files.append(entry)
    return files


def decode_translations(text: str, namespace: str) -> dict[str, Any]:
    """Return the mapping stored under *namespace* in a YAML document.

    An empty document, or one without the namespace key, yields ``{}``.

    Raises:
        TranslationDecodeError: If the document is not valid YAML, is not a
            mapping, or its namespace value is not a mapping.
    """
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise TranslationDecodeError(str(exc)) from exc
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise TranslationDecodeError(f"expected a mapping, got {type(document).__name__}")
    section = document.get(namespace)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise TranslationDecodeError(
            f"'{namespace}' must be a mapping, got {type(section).__name__}"
        )
    return section


def encode_translations(translations: dict[str, Any], namespace: str) -> str:
    """Serialise *translations* below *namespace* as a YAML document."""
    return yaml.safe_dump(
        {namespace: translations},
        allow_unicode=True,
        sort_keys=True,
        default_flow_style=False,
    )


def plugin_resource_dir(material: BuildMaterial, plugin: PluginSpec) -> Optional[Path]:
    """Locate the vendored translation directory of *plugin*, if any.

    The versioned module path is tried first (``vendor/a.com/p/v2/i18n``),
    then the bare module name.
    """
    candidates = [plugin.module_path]
    if plugin.name not in candidates:
        candidates.append(plugin.name)
    for module in candidates:
        directory = material.vendored(module) / material.config.resource_dir
        if directory.is_dir():
            return directory
    return None


def collect_translations(material: BuildMaterial) -> TranslationBundle:
    """Accumulate every plugin's translations, in plugin order.

    Duplicate keys are resolved last-write-wins: a plugin later in
    ``material.plugins`` overrides the same key from an earlier one.
    Unreadable or malformed plugin files are logged and skipped.

    Raises:
        WorkspaceError: If a plugin's translation directory cannot be listed.
    """
    config = material.config
    bundle: TranslationBundle = {}
    for plugin in material.plugins:
        directory = plugin_resource_dir(material, plugin)
        if directory is None:
            logger.debug("No translations for plugin %s", plugin.name)
            continue
        logger.debug("Reading translations from %s", directory)
        try:
            files = _resource_files(directory, config)
        except OSError as exc:
            raise WorkspaceError(f"Cannot list {directory}: {exc}") from exc

        for path in files:
            try:
                translations = decode_translations(
                    path.read_text(encoding="utf-8"), config.resource_namespace
                )
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Cannot read translation file %s: %s", path, exc)
                continue
            except TranslationDecodeError as exc:
                logger.warning("Cannot decode translation file %s: %s", path, exc)
                continue
            bundle.setdefault(path.name, {}).update(translations)
    return bundle


def append_translations(material: BuildMaterial, bundle: TranslationBundle) -> list[str]:
    """Append the combined translations to the matching base files.

    Only file names present in the base translation directory receive a
    block; the rest of *bundle* is ignored. The block is appended after a
    newline, not merged into the existing document.

    Returns:
        Names of the base files that were extended.

    Raises:
        WorkspaceError: If the base translation directory is missing or a
            base file cannot be written.
    """
    config = material.config
    base_dir = material.vendored(config.base_module) / config.resource_dir
    if not base_dir.is_dir():
        raise WorkspaceError(f"Base translation directory not found: {base_dir}")
    try:
        files = _resource_files(base_dir, config, include_index=True)
    except OSError as exc:
        raise WorkspaceError(f"Cannot list {base_dir}: {exc}") from exc

    extended = []
    for path in files:
        translations = bundle.get(path.name)
        if translations is None:
            continue
        append_file(path, "\n" + encode_translations(translations, config.resource_namespace))
        extended.append(path.name)
    return extended


def merge_translations(material: BuildMaterial) -> list[str]:
    """Collect plugin translations and append them to the base files.

    Returns:
        Names of the base files that were extended.
    """
    bundle = collect_translations(material)
    return append_translations(material, bundle)
