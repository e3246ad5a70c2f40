"""Request and result models for installation planning."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from .problems import Problem, ProblemCode


def _dedupe(ids: Iterable[str]) -> Tuple[str, ...]:
    """Deduplicate while keeping first-seen order."""
    seen = set()
    out = []
    for module_id in ids:
        if module_id in seen:
            continue
        seen.add(module_id)
        out.append(module_id)
    return tuple(out)


@dataclass(frozen=True)
class PlanOptions:
    """Optional planning behavior."""
    exclude: FrozenSet[str] = frozenset()
    warnings_as_errors: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "exclude", frozenset(self.exclude))


@dataclass(frozen=True)
class InstallationRequest:
    """Requested module ids plus the target framework."""
    module_ids: Tuple[str, ...]
    framework: str
    options: PlanOptions = field(default_factory=PlanOptions)

    @classmethod
    def build(cls, module_ids: Iterable[str], framework: str,
              options: Optional[PlanOptions] = None) -> "InstallationRequest":
        """Normalize ids (deduplicated, excluded ids dropped) into a request."""
        options = options or PlanOptions()
        if isinstance(module_ids, str):
            module_ids = [module_ids]
        ids = [m for m in _dedupe(module_ids) if m not in options.exclude]
        return cls(module_ids=tuple(ids), framework=str(framework).strip().lower(), options=options)


@dataclass(frozen=True)
class CompatibilityReport:
    """Checker output: the expanded module set and every problem found."""
    expanded_ids: Tuple[str, ...]
    problems: Tuple[Problem, ...] = ()

    @property
    def errors(self) -> List[Problem]:
        return [p for p in self.problems if p.is_error]

    @property
    def warnings(self) -> List[Problem]:
        return [p for p in self.problems if not p.is_error]

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class Plan:
    """Dependency-respecting installation order."""
    module_ids: Tuple[str, ...]
    framework: str
    requested_ids: Tuple[str, ...] = ()
    warnings: Tuple[Problem, ...] = ()
    complexity: int = 0

    ok = True

    def __iter__(self):
        return iter(self.module_ids)

    def __len__(self) -> int:
        return len(self.module_ids)

    def index(self, module_id: str) -> int:
        """Position of ``module_id`` in the plan."""
        return self.module_ids.index(module_id)

    @property
    def implicit_ids(self) -> Tuple[str, ...]:
        """Modules added by dependency expansion rather than requested."""
        requested = set(self.requested_ids)
        return tuple(m for m in self.module_ids if m not in requested)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "planned",
            "framework": self.framework,
            "requested": list(self.requested_ids),
            "plan": list(self.module_ids),
            "warnings": [w.to_dict() for w in self.warnings],
            "complexity": self.complexity,
        }


@dataclass(frozen=True)
class Rejection:
    """Exhaustive, structured list of reasons a request cannot be planned."""
    problems: Tuple[Problem, ...]
    framework: str = ""
    requested_ids: Tuple[str, ...] = ()
    warnings: Tuple[Problem, ...] = ()

    ok = False

    def __len__(self) -> int:
        return len(self.problems)

    def codes(self) -> List[ProblemCode]:
        """Problem codes in report order."""
        return [p.code for p in self.problems]

    def by_code(self, code: ProblemCode) -> List[Problem]:
        """Problems carrying ``code``, in report order."""
        return [p for p in self.problems if p.code == code]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "rejected",
            "framework": self.framework,
            "requested": list(self.requested_ids),
            "problems": [p.to_dict() for p in self.problems],
            "warnings": [w.to_dict() for w in self.warnings],
        }


PlanResult = Union[Plan, Rejection]
