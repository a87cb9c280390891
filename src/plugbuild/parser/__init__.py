"""Plugin descriptor parsing and module path versioning.

Public API:

* :func:`parse_plugin_spec` -- Turn one ``module[@version][=path]`` descriptor
  into a :class:`~plugbuild.models.PluginSpec`.
* :func:`parse_plugin_specs` -- Parse a list of descriptors, keeping order.
* :func:`versioned_module_path` -- Append the ``/vN`` major-version suffix
  to a module path.
"""

from plugbuild.parser.descriptor import parse_plugin_spec, parse_plugin_specs
from plugbuild.parser.module_path import versioned_module_path

__all__ = ["parse_plugin_spec", "parse_plugin_specs", "versioned_module_path"]
