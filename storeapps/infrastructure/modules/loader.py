"""Load the management API client module from a filesystem path.

The client is any Python module, either a single ``.py`` file or a package
directory, that exposes two callables::

    connect(settings: Mapping[str, Any]) -> session
    create_android_store_app(session, payload: dict) -> Any

``storeapps.infrastructure.graph`` is a ready-made implementation against
Microsoft Graph; its directory can be passed to the CLI as-is.
"""

from __future__ import annotations

import hashlib
import importlib.util
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Mapping

from storeapps.infrastructure.observability import get_logger

REQUIRED_CALLABLES = ("connect", "create_android_store_app")

logger = get_logger(__name__)


class ModuleLoadError(Exception):
    """Raised when the management API module cannot be loaded."""


@dataclass(frozen=True)
class ManagementApi:
    """Loaded management API module with typed entry points."""

    module: ModuleType
    path: Path

    @property
    def name(self) -> str:
        return self.module.__name__

    def connect(self, settings: Mapping[str, Any]) -> Any:
        return self.module.connect(settings)

    def create_android_store_app(self, session: Any, payload: dict[str, Any]) -> Any:
        return self.module.create_android_store_app(session, payload)


def _module_name_for(path: Path) -> str:
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:8]
    stem = path.stem if path.is_file() else path.name
    safe = "".join(ch if ch.isalnum() else "_" for ch in stem)
    return f"storeapps_client_{safe}_{digest}"


def load_management_module(path: str | Path) -> ManagementApi:
    """Import the management API module found at ``path``.

    Raises:
        ModuleLoadError: If the path does not exist, the module fails to
            import, or it lacks one of the required callables.
    """
    module_path = Path(path).expanduser().resolve()
    if not module_path.exists():
        raise ModuleLoadError(f"Module path does not exist: {module_path}")

    module_name = _module_name_for(module_path)
    if module_path.is_dir():
        init_file = module_path / "__init__.py"
        if not init_file.is_file():
            raise ModuleLoadError(
                f"Module directory has no __init__.py: {module_path}"
            )
        spec = importlib.util.spec_from_file_location(
            module_name, init_file, submodule_search_locations=[str(module_path)]
        )
    else:
        spec = importlib.util.spec_from_file_location(module_name, module_path)

    if spec is None or spec.loader is None:
        raise ModuleLoadError(f"Unable to create spec for module: {module_path}")

    module = importlib.util.module_from_spec(spec)
    # Registered before execution so package-relative imports resolve.
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise ModuleLoadError(
            f"Importing module {module_path} failed: {exc}"
        ) from exc

    missing = [
        attr for attr in REQUIRED_CALLABLES if not callable(getattr(module, attr, None))
    ]
    if missing:
        sys.modules.pop(module_name, None)
        raise ModuleLoadError(
            f"Module {module_path} does not provide: {', '.join(missing)}"
        )

    logger.info("Loaded management module %s from %s", module_name, module_path)
    return ManagementApi(module=module, path=module_path)


__all__ = [
    "REQUIRED_CALLABLES",
    "ManagementApi",
    "ModuleLoadError",
    "load_management_module",
]
