"""Interface layer for storeapps.

Packages under ``storeapps.interfaces`` expose boundary adapters such as CLI
commands.
"""

from . import cli

__all__ = ["cli"]
