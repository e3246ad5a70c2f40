"""Structured problems reported by the compatibility checker and resolver."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from constants import Severity


class ProblemCode(Enum):
    """Every failure or advisory mode maps to exactly one code."""
    UNKNOWN_MODULE = "UnknownModuleError"
    FRAMEWORK_UNSUPPORTED = "FrameworkUnsupportedError"
    MISSING_DEPENDENCY = "MissingDependencyError"
    VERSION_MISMATCH = "VersionMismatchError"
    CONFLICT = "ConflictError"
    CYCLE = "CycleError"
    EXCLUDED_DEPENDENCY = "ExcludedDependencyError"
    CONFLICT_WARNING = "ConflictWarning"
    PARTIAL_SUPPORT = "PartialSupportWarning"
    DEPRECATED_MODULE = "DeprecatedModuleWarning"
    EXPERIMENTAL_MODULE = "ExperimentalModuleWarning"


_WARNING_CODES = {
    ProblemCode.CONFLICT_WARNING,
    ProblemCode.PARTIAL_SUPPORT,
    ProblemCode.DEPRECATED_MODULE,
    ProblemCode.EXPERIMENTAL_MODULE,
}


def default_severity(code: ProblemCode) -> Severity:
    """Advisory codes are warnings, everything else is an error."""
    return Severity.WARNING if code in _WARNING_CODES else Severity.ERROR


@dataclass(frozen=True)
class Problem:
    """One independent problem with a resolution request."""
    code: ProblemCode
    message: str
    involved_module_ids: Tuple[str, ...] = ()
    severity: Severity = Severity.ERROR
    details: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, code: ProblemCode, message: str, involved: Iterable[str] = (), **details: Any) -> "Problem":
        """Build a problem with the code's default severity."""
        return cls(
            code=code,
            message=message,
            involved_module_ids=tuple(involved),
            severity=default_severity(code),
            details=dict(details),
        )

    def __hash__(self) -> int:
        # details is a plain dict and stays out of the hash
        return hash((self.code, self.message, self.involved_module_ids, self.severity))

    @property
    def is_error(self) -> bool:
        """True if this problem blocks a plan."""
        return self.severity == Severity.ERROR

    def as_error(self) -> "Problem":
        """Copy of this problem promoted to error severity."""
        return Problem(self.code, self.message, self.involved_module_ids, Severity.ERROR, dict(self.details))

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation."""
        return {
            "code": self.code.value,
            "severity": self.severity.value,
            "message": self.message,
            "involvedModuleIds": list(self.involved_module_ids),
            "details": dict(self.details),
        }


def unknown_module(module_id: str) -> Problem:
    return Problem.of(
        ProblemCode.UNKNOWN_MODULE,
        f"Module {module_id} not found in registry",
        [module_id],
        id=module_id,
    )


def framework_unsupported(module_id: str, framework: str, declared: bool) -> Problem:
    if declared:
        message = f"Module {module_id} explicitly does not support {framework}"
    else:
        message = f"Module {module_id} does not declare support for framework {framework}"
    return Problem.of(
        ProblemCode.FRAMEWORK_UNSUPPORTED,
        message,
        [module_id],
        id=module_id,
        framework=framework,
    )


def partial_support(module_id: str, framework: str, limitations: Iterable[str] = ()) -> Problem:
    notes = list(limitations)
    message = f"Module {module_id} has partial support for {framework}"
    if notes:
        message += f". Limitations: {', '.join(notes)}"
    return Problem.of(
        ProblemCode.PARTIAL_SUPPORT,
        message,
        [module_id],
        id=module_id,
        framework=framework,
        limitations=notes,
    )


def missing_dependency(module_id: str, required_by: str, reason: str = "") -> Problem:
    suffix = f" ({reason})" if reason else ""
    return Problem.of(
        ProblemCode.MISSING_DEPENDENCY,
        f"Module {required_by} requires {module_id}, which is not registered{suffix}",
        [module_id, required_by],
        moduleId=module_id,
        requiredBy=required_by,
    )


def excluded_dependency(module_id: str, required_by: str) -> Problem:
    return Problem.of(
        ProblemCode.EXCLUDED_DEPENDENCY,
        f"Module {required_by} requires {module_id}, which was excluded from the request",
        [module_id, required_by],
        moduleId=module_id,
        requiredBy=required_by,
    )


def version_mismatch(module_id: str, required_by: str, required: str, actual: str, error: str = "") -> Problem:
    suffix = f": {error}" if error else ""
    return Problem.of(
        ProblemCode.VERSION_MISMATCH,
        f"Module {required_by} requires {module_id}@{required} but {actual} is registered{suffix}",
        [module_id, required_by],
        moduleId=module_id,
        requiredBy=required_by,
        required=required,
        actual=actual,
    )


def conflict(module_a: str, module_b: str, reason: str, is_error: bool, resolution: Optional[str] = None) -> Problem:
    code = ProblemCode.CONFLICT if is_error else ProblemCode.CONFLICT_WARNING
    verb = "conflicts with" if is_error else "may conflict with"
    message = f"{module_a} {verb} {module_b}"
    if reason:
        message += f": {reason}"
    details: Dict[str, Any] = {"moduleA": module_a, "moduleB": module_b, "reason": reason}
    if resolution:
        details["resolution"] = resolution
    return Problem.of(code, message, [module_a, module_b], **details)


def cycle(members: List[str]) -> Problem:
    return Problem.of(
        ProblemCode.CYCLE,
        f"Circular dependency detected between {', '.join(members)}",
        members,
        cycleMembers=list(members),
    )


def deprecated_module(module_id: str) -> Problem:
    return Problem.of(ProblemCode.DEPRECATED_MODULE, f"Module {module_id} is deprecated", [module_id], id=module_id)


def experimental_module(module_id: str) -> Problem:
    return Problem.of(ProblemCode.EXPERIMENTAL_MODULE, f"Module {module_id} is experimental", [module_id], id=module_id)
