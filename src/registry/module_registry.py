"""In-memory catalog of DNA module descriptors and their factories.

One ``ModuleRegistry`` is built at process start and passed explicitly to the
planner, the installer and tests. Mutations (``register``/``clear``) are
serialized by a writer lock; lookups take no lock and are safe once the
initialization phase has completed.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Set

from common.logging_utils import extra_context, is_debug_enabled
from constants import SupportLevel
from errors import DuplicateModuleError

from .descriptor import ModuleDescriptor

logger = logging.getLogger(__name__)

ModuleFactory = Callable[..., Any]


@dataclass(frozen=True)
class RegistryEntry:
    """A registered descriptor together with its optional factory."""
    descriptor: ModuleDescriptor
    factory: Optional[ModuleFactory] = None


class ModuleRegistry:
    """Registry mapping module id to descriptor and factory."""

    def __init__(self) -> None:
        self._entries: Dict[str, RegistryEntry] = {}
        self._write_lock = threading.Lock()

    def register(
        self,
        descriptor: ModuleDescriptor,
        factory: Optional[ModuleFactory] = None,
        overwrite: bool = False,
    ) -> ModuleDescriptor:
        """Register a descriptor.

        Args:
            descriptor: Module metadata; validated before it is stored.
            factory: Callable building a module instance, used by the installer.
            overwrite: Replace an existing registration with the same id.

        Returns:
            The registered descriptor.

        Raises:
            DuplicateModuleError: If the id is present and overwrite is False.
            InvalidDescriptorError: If the descriptor fails validation.
        """
        descriptor.validate()
        if factory is not None and not callable(factory):
            raise TypeError(f"factory for {descriptor.id} must be callable")

        with self._write_lock:
            existing = self._entries.get(descriptor.id)
            if existing is not None and not overwrite:
                raise DuplicateModuleError(descriptor.id, existing.descriptor.version)
            # Copy-on-write keeps concurrent readers on a consistent mapping
            entries = dict(self._entries)
            entries[descriptor.id] = RegistryEntry(descriptor=descriptor, factory=factory)
            self._entries = entries

        if is_debug_enabled(logger):
            logger.debug(
                "Module registered",
                extra=extra_context(
                    event="module_registered",
                    component="registry",
                    action="register",
                    module_id=descriptor.id,
                    outcome="replaced" if existing is not None else "added",
                ),
            )
        return descriptor

    def get(self, module_id: str) -> Optional[ModuleDescriptor]:
        """Return the descriptor for ``module_id`` or None."""
        entry = self._entries.get(module_id)
        return entry.descriptor if entry else None

    def get_factory(self, module_id: str) -> Optional[ModuleFactory]:
        """Return the factory registered for ``module_id`` or None."""
        entry = self._entries.get(module_id)
        return entry.factory if entry else None

    def has(self, module_id: str) -> bool:
        """Return True if ``module_id`` is registered."""
        return module_id in self._entries

    def list_ids(self) -> Set[str]:
        """Return the set of registered ids."""
        return set(self._entries)

    def clear(self) -> None:
        """Remove every registration."""
        with self._write_lock:
            self._entries = {}
        logger.debug("Registry cleared")

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ModuleDescriptor]:
        return iter(self.all_descriptors())

    def all_descriptors(self) -> List[ModuleDescriptor]:
        """All descriptors sorted by id."""
        entries = self._entries
        return [entries[k].descriptor for k in sorted(entries)]

    def modules_by_category(self, category: str) -> List[ModuleDescriptor]:
        """Descriptors whose category equals ``category`` (case-insensitive)."""
        wanted = category.strip().lower()
        return [d for d in self.all_descriptors() if d.category.lower() == wanted]

    def modules_for_framework(self, framework: str) -> List[ModuleDescriptor]:
        """Descriptors with full or partial support for ``framework``."""
        return [
            d for d in self.all_descriptors()
            if d.support_for(framework) != SupportLevel.UNSUPPORTED
        ]

    def search(self, query: str) -> List[ModuleDescriptor]:
        """Case-insensitive search over id, name, description and keywords."""
        q = query.strip().lower()
        if not q:
            return self.all_descriptors()
        results = []
        for d in self.all_descriptors():
            haystack = [d.id, d.name, d.description, *d.keywords]
            if any(q in (text or "").lower() for text in haystack):
                results.append(d)
        return results

    def dependency_tree(self, module_id: str) -> Dict[str, List[str]]:
        """Map each module reachable from ``module_id`` to its dependency ids.

        Unknown ids appear as keys with no dependencies; cycles are visited once.
        """
        tree: Dict[str, List[str]] = {}
        stack = [module_id]
        while stack:
            current = stack.pop()
            if current in tree:
                continue
            descriptor = self.get(current)
            deps = [d.module_id for d in descriptor.dependencies] if descriptor else []
            tree[current] = deps
            stack.extend(reversed([d for d in deps if d not in tree]))
        return tree
