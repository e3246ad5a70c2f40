"""Catalog file loading (YAML or JSON).

A catalog file lists module descriptors under ``modules`` and may carry a
default ``request`` (modules, framework, exclude) and ``settings`` section::

    modules:
      - id: user_analytics
        version: 1.0.0
        category: analytics
        frameworks:
          nextjs: full
          flutter: {level: partial, limitations: [no offline queue]}
      - id: business_intelligence
        version: 1.2.0
        dependencies:
          - {module: user_analytics, version: "^1.0.0", reason: event source}
        frameworks: {nextjs: full, flutter: unsupported}
    request:
      modules: [business_intelligence]
      framework: nextjs
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

import yaml

from constants import Constants
from errors import CatalogError, InvalidDescriptorError

from .descriptor import ModuleDescriptor, descriptor_from_dict
from .module_registry import ModuleRegistry

logger = logging.getLogger(__name__)


@dataclass
class Catalog:
    """Parsed contents of a catalog file."""
    path: str
    descriptors: List[ModuleDescriptor] = field(default_factory=list)
    request: Dict[str, Any] = field(default_factory=dict)
    settings: Dict[str, Any] = field(default_factory=dict)


def find_catalog(directory: str = ".") -> Optional[str]:
    """Return the first default catalog filename present in ``directory``."""
    for name in Constants.CATALOG_FILES:
        candidate = os.path.join(directory, name)
        if os.path.isfile(candidate):
            return candidate
    return None


def _read_document(path: str) -> Any:
    """Read a YAML/JSON document from ``path``."""
    if not os.path.isfile(path):
        raise CatalogError(path, "file not found")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            if path.lower().endswith(".json"):
                return json.load(fh)
            return yaml.safe_load(fh)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise CatalogError(path, f"cannot be parsed: {e}") from e


def parse_catalog(document: Any, path: str = "<memory>") -> Catalog:
    """Build a Catalog from an already-loaded document.

    Raises:
        CatalogError: If the document does not have the catalog shape.
    """
    if document is None:
        document = {}
    if isinstance(document, list):
        document = {Constants.CATALOG_MODULES_KEY: document}
    if not isinstance(document, Mapping):
        raise CatalogError(path, "top level must be a mapping or a list of modules")

    raw_modules = document.get(Constants.CATALOG_MODULES_KEY) or []
    if not isinstance(raw_modules, list):
        raise CatalogError(path, f"'{Constants.CATALOG_MODULES_KEY}' must be a list")

    descriptors = []
    for index, entry in enumerate(raw_modules):
        try:
            descriptors.append(descriptor_from_dict(entry))
        except ValueError as e:
            raise CatalogError(path, f"module #{index + 1}: {e}") from e

    request = document.get(Constants.CATALOG_REQUEST_KEY) or {}
    settings = document.get(Constants.CATALOG_SETTINGS_KEY) or {}
    if not isinstance(request, Mapping) or not isinstance(settings, Mapping):
        raise CatalogError(path, "'request' and 'settings' must be mappings")
    return Catalog(path=path, descriptors=descriptors, request=dict(request), settings=dict(settings))


def load_catalog(path: str) -> Catalog:
    """Load and parse the catalog at ``path``."""
    catalog = parse_catalog(_read_document(path), path)
    logger.info("Loaded %d module descriptors from %s", len(catalog.descriptors), path)
    return catalog


def register_catalog(
    registry: ModuleRegistry,
    catalog: Catalog,
    factories: Optional[Mapping[str, Callable[..., Any]]] = None,
    overwrite: bool = False,
) -> List[str]:
    """Register every descriptor of ``catalog``; returns the registered ids.

    Raises:
        CatalogError: If a descriptor is invalid (wrapping InvalidDescriptorError).
        DuplicateModuleError: If an id is registered twice without overwrite.
    """
    factories = factories or {}
    registered = []
    for descriptor in catalog.descriptors:
        try:
            registry.register(descriptor, factories.get(descriptor.id), overwrite=overwrite)
        except InvalidDescriptorError as e:
            raise CatalogError(catalog.path, str(e)) from e
        registered.append(descriptor.id)
    return registered
