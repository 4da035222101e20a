"""Loading of the external management API client."""

from .loader import (
    REQUIRED_CALLABLES,
    ManagementApi,
    ModuleLoadError,
    load_management_module,
)

__all__ = [
    "REQUIRED_CALLABLES",
    "ManagementApi",
    "ModuleLoadError",
    "load_management_module",
]
