"""Application configuration layer.

Resolves run settings from defaults, configuration files and CLI options.
"""

from . import config

__all__ = ["config"]
