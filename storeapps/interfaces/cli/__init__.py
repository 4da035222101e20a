"""CLI interface for storeapps.

This package is the home for all Click commands. Run it with
``python -m storeapps.interfaces.cli`` or the ``storeapps`` console script.
"""

from .__main__ import cli
from .add_apps import add_android_apps

__all__ = ["add_android_apps", "cli"]
