"""Module descriptor schema.

A descriptor is the static metadata of one DNA module: identity, declared
dependencies and conflicts, and the support level per target framework.
Descriptors are immutable; ``validate()`` is run once when a descriptor is
registered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from constants import Severity, SupportLevel
from errors import InvalidDescriptorError
from versioning.parser import is_valid_version, parse_version_range


@dataclass(frozen=True)
class ModuleDependency:
    """A dependency edge declared by a module."""
    module_id: str
    version_range: str = "*"
    optional: bool = False
    reason: str = ""


@dataclass(frozen=True)
class ModuleConflict:
    """A conflict declared by a module against another module."""
    module_id: str
    severity: Severity = Severity.ERROR
    reason: str = ""
    resolution: Optional[str] = None
    version_range: Optional[str] = None

    @property
    def is_error(self) -> bool:
        """True for blocking conflicts."""
        return self.severity == Severity.ERROR


@dataclass(frozen=True)
class ModuleDescriptor:  # pylint: disable=too-many-instance-attributes
    """Immutable metadata record describing one module."""
    id: str
    version: str
    dependencies: Tuple[ModuleDependency, ...] = ()
    conflicts: Tuple[ModuleConflict, ...] = ()
    framework_support: Mapping[str, SupportLevel] = field(default_factory=dict)
    category: str = ""
    name: str = ""
    description: str = ""
    keywords: Tuple[str, ...] = ()
    deprecated: bool = False
    experimental: bool = False
    framework_limitations: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze container fields so a registered descriptor cannot change.
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "conflicts", tuple(self.conflicts))
        object.__setattr__(self, "keywords", tuple(self.keywords))
        support: Dict[str, Any] = {}
        for framework, level in dict(self.framework_support).items():
            try:
                support[str(framework).strip().lower()] = SupportLevel.parse(level)
            except ValueError:
                # Kept raw so validate() can report it
                support[str(framework).strip().lower()] = level
        object.__setattr__(self, "framework_support", MappingProxyType(support))
        limitations = {
            str(framework).strip().lower(): tuple(notes)
            for framework, notes in dict(self.framework_limitations).items()
        }
        object.__setattr__(self, "framework_limitations", MappingProxyType(limitations))

    def __hash__(self) -> int:
        # Ids are unique within a registry; the mapping fields are not hashable.
        return hash((self.id, self.version))

    @property
    def display_name(self) -> str:
        """Human readable name, falling back to the id."""
        return self.name or self.id

    def support_for(self, framework: str) -> SupportLevel:
        """Return the support level for ``framework`` (absent means unsupported)."""
        level = self.framework_support.get(str(framework).strip().lower())
        if isinstance(level, SupportLevel):
            return level
        return SupportLevel.UNSUPPORTED

    def limitations_for(self, framework: str) -> Tuple[str, ...]:
        """Known limitations declared for ``framework``, if any."""
        return self.framework_limitations.get(str(framework).strip().lower(), ())

    def required_dependencies(self) -> List[ModuleDependency]:
        """Non-optional dependencies in declaration order."""
        return [d for d in self.dependencies if not d.optional]

    def conflict_with(self, module_id: str) -> Optional[ModuleConflict]:
        """Return the first conflict entry naming ``module_id``, if any."""
        for conflict in self.conflicts:
            if conflict.module_id == module_id:
                return conflict
        return None

    def validation_errors(self) -> List[str]:
        """Return every schema violation found in this descriptor."""
        errors: List[str] = []
        if not isinstance(self.id, str) or not self.id.strip():
            errors.append("id must be a non-empty string")
        if not is_valid_version(self.version):
            errors.append(f"version '{self.version}' is not a valid semantic version")

        seen_deps = set()
        for dep in self.dependencies:
            if not isinstance(dep, ModuleDependency) or not dep.module_id:
                errors.append(f"invalid dependency entry: {dep!r}")
                continue
            if dep.module_id in seen_deps:
                errors.append(f"dependency {dep.module_id} is declared more than once")
            seen_deps.add(dep.module_id)
            if dep.module_id == self.id:
                errors.append("module declares itself as a dependency")
            try:
                parse_version_range(dep.version_range)
            except ValueError:
                errors.append(f"dependency {dep.module_id} has invalid version range '{dep.version_range}'")

        seen_conflicts = set()
        for conflict in self.conflicts:
            if not isinstance(conflict, ModuleConflict) or not conflict.module_id:
                errors.append(f"invalid conflict entry: {conflict!r}")
                continue
            if conflict.module_id in seen_conflicts:
                errors.append(f"conflict with {conflict.module_id} is declared more than once")
            seen_conflicts.add(conflict.module_id)
            if conflict.module_id == self.id:
                errors.append("module declares a conflict with itself")
            if not isinstance(conflict.severity, Severity):
                errors.append(f"conflict with {conflict.module_id} has unknown severity '{conflict.severity}'")
            if conflict.version_range is not None:
                try:
                    parse_version_range(conflict.version_range)
                except ValueError:
                    errors.append(
                        f"conflict with {conflict.module_id} has invalid version range '{conflict.version_range}'"
                    )

        for framework, level in self.framework_support.items():
            if not isinstance(level, SupportLevel):
                errors.append(f"framework {framework} has unknown support level '{level}'")
        return errors

    def validate(self) -> "ModuleDescriptor":
        """Raise InvalidDescriptorError unless the descriptor is well formed."""
        errors = self.validation_errors()
        if errors:
            raise InvalidDescriptorError(self.id if isinstance(self.id, str) else "", errors)
        return self

    def _framework_entry(self, framework: str, level: Any) -> Any:
        notes = self.limitations_for(framework)
        if not notes:
            return level
        return {"level": level, "limitations": list(notes)}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the catalog file shape."""
        return {
            "id": self.id,
            "version": self.version,
            "name": self.name or None,
            "category": self.category or None,
            "dependencies": [
                {
                    "module": d.module_id,
                    "version": d.version_range,
                    "optional": d.optional,
                    "reason": d.reason,
                }
                for d in self.dependencies
            ],
            "conflicts": [
                {
                    "module": c.module_id,
                    "severity": c.severity.value if isinstance(c.severity, Severity) else c.severity,
                    "reason": c.reason,
                    "resolution": c.resolution,
                    "version": c.version_range,
                }
                for c in self.conflicts
            ],
            "frameworks": {
                fw: self._framework_entry(fw, lvl.value if isinstance(lvl, SupportLevel) else lvl)
                for fw, lvl in self.framework_support.items()
            },
            "deprecated": self.deprecated,
            "experimental": self.experimental,
        }


def _parse_dependency(raw: Any) -> ModuleDependency:
    """Build a dependency from a string id or a mapping."""
    if isinstance(raw, str):
        return ModuleDependency(module_id=raw.strip())
    if not isinstance(raw, Mapping):
        raise ValueError(f"dependency must be a string or mapping, got {type(raw).__name__}")
    module_id = raw.get("module") or raw.get("module_id") or raw.get("moduleId") or raw.get("id")
    version = raw.get("version", raw.get("version_range", raw.get("versionRange", "*")))
    return ModuleDependency(
        module_id=str(module_id or "").strip(),
        version_range="*" if version is None else str(version),
        optional=bool(raw.get("optional", False)),
        reason=str(raw.get("reason", "") or ""),
    )


def _parse_conflict(raw: Any) -> ModuleConflict:
    """Build a conflict from a string id or a mapping."""
    if isinstance(raw, str):
        return ModuleConflict(module_id=raw.strip())
    if not isinstance(raw, Mapping):
        raise ValueError(f"conflict must be a string or mapping, got {type(raw).__name__}")
    module_id = raw.get("module") or raw.get("module_id") or raw.get("moduleId") or raw.get("id")
    severity_raw = str(raw.get("severity", Severity.ERROR.value)).strip().lower()
    try:
        severity: Any = Severity(severity_raw)
    except ValueError:
        severity = severity_raw
    version = raw.get("version", raw.get("version_range"))
    return ModuleConflict(
        module_id=str(module_id or "").strip(),
        severity=severity,
        reason=str(raw.get("reason", "") or ""),
        resolution=raw.get("resolution"),
        version_range=None if version is None else str(version),
    )


def _sequence_field(data: Mapping[str, Any], key: str) -> Sequence[Any]:
    """List-valued entry of a module mapping; a bare string is a schema error."""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{key} must be a list, got {type(value).__name__}")
    return value


def descriptor_from_dict(data: Mapping[str, Any]) -> ModuleDescriptor:
    """Build a ModuleDescriptor from catalog data (YAML/JSON mapping).

    Raises:
        ValueError: If the mapping does not have the expected shape.
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"module entry must be a mapping, got {type(data).__name__}")
    frameworks = data.get("frameworks", data.get("framework_support", data.get("frameworkSupport"))) or {}
    if not isinstance(frameworks, Mapping):
        raise ValueError("frameworks must be a mapping of framework to support level")
    dependencies = _sequence_field(data, "dependencies")
    conflicts = _sequence_field(data, "conflicts")
    keywords = _sequence_field(data, "keywords")

    support: Dict[str, Any] = {}
    limitations: Dict[str, Tuple[str, ...]] = {}
    for framework, entry in frameworks.items():
        if isinstance(entry, Mapping):
            support[framework] = entry.get("level", entry.get("compatibility", SupportLevel.UNSUPPORTED.value))
            notes = entry.get("limitations") or []
            if not isinstance(notes, (list, tuple)):
                raise ValueError(f"limitations for framework {framework} must be a list")
            if notes:
                limitations[framework] = tuple(str(n) for n in notes)
        else:
            support[framework] = entry

    return ModuleDescriptor(
        id=str(data.get("id", "") or "").strip(),
        version=str(data.get("version", "") or "").strip(),
        dependencies=tuple(_parse_dependency(d) for d in dependencies),
        conflicts=tuple(_parse_conflict(c) for c in conflicts),
        framework_support=support,
        framework_limitations=limitations,
        category=str(data.get("category", "") or ""),
        name=str(data.get("name", "") or ""),
        description=str(data.get("description", "") or ""),
        keywords=tuple(str(k) for k in keywords),
        deprecated=bool(data.get("deprecated", False)),
        experimental=bool(data.get("experimental", False)),
    )
