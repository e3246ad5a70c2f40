"""Exceptions raised outside the structured resolution results.

Resolution failures (unknown modules, conflicts, cycles, ...) are reported as
``Problem`` values inside a ``Rejection``. The exceptions here cover
registration-time, catalog and installation failures.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence


class DnaPlanError(Exception):
    """Base class for all dnaplan errors."""


class DuplicateModuleError(DnaPlanError):
    """A module id is already registered and overwrite was not requested."""

    def __init__(self, module_id: str, existing_version: Optional[str] = None):
        self.module_id = module_id
        self.existing_version = existing_version
        detail = f"@{existing_version}" if existing_version else ""
        super().__init__(f"Module {module_id}{detail} is already registered")


class InvalidDescriptorError(DnaPlanError):
    """A module descriptor failed schema validation at registration."""

    def __init__(self, module_id: str, reasons: Iterable[str]):
        self.module_id = module_id
        self.reasons = list(reasons)
        super().__init__(
            f"Invalid module descriptor for {module_id or '<empty id>'}: {'; '.join(self.reasons)}"
        )


class CatalogError(DnaPlanError):
    """A catalog file could not be read or does not have the expected shape."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Catalog {path}: {reason}")


class InstallationError(DnaPlanError):
    """A module factory or file generator failed while installing a plan."""

    def __init__(self, module_id: str, cause: BaseException, completed: Sequence[str] = ()):
        self.module_id = module_id
        self.cause = cause
        self.completed = list(completed)
        super().__init__(f"Installing {module_id} failed: {cause}")
