"""Built-in CLI commands for plugbuild.

Each module registers on the root :data:`~plugbuild.app.app`:

* :mod:`plugbuild.commands.build` -- ``build`` and ``plan``.
* :mod:`plugbuild.commands.config` -- ``config show``, ``config set``,
  ``config reset``.
"""
