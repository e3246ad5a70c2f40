"""Module descriptors, the module registry and catalog loading."""

from .descriptor import ModuleConflict, ModuleDependency, ModuleDescriptor, descriptor_from_dict
from .module_registry import ModuleRegistry, RegistryEntry

__all__ = [
    "ModuleConflict",
    "ModuleDependency",
    "ModuleDescriptor",
    "ModuleRegistry",
    "RegistryEntry",
    "descriptor_from_dict",
]
