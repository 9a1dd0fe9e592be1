"""Bundled server modules.

Each submodule is enabled by name (``enable helloworld /hi``) and must
define either ``module`` (a ``ServerModule`` or a factory returning one)
or a ``create_module()`` factory.
"""
