"""Compatibility checks for a requested module set.

Given a request and the registry, expand the set along required
dependencies and report every problem found: unknown modules, missing or
excluded dependencies, unsupported frameworks, conflicts and version
mismatches. Nothing here raises for an expected failure; the checker never
stops at the first problem.
"""

from __future__ import annotations

import logging
from collections import deque
from itertools import combinations
from typing import Dict, List, Optional

from common.logging_utils import extra_context, is_debug_enabled
from constants import SupportLevel
from registry.descriptor import ModuleConflict, ModuleDescriptor
from registry.module_registry import ModuleRegistry
from versioning.matching import check_range

from . import problems as P
from .models import CompatibilityReport, InstallationRequest

logger = logging.getLogger(__name__)


def expand_dependencies(request: InstallationRequest, registry: ModuleRegistry,
                        found: List[P.Problem]) -> Dict[str, ModuleDescriptor]:
    """Return the transitive closure of required dependencies.

    Breadth-first from the requested ids. Unknown requested ids, unregistered
    required dependencies and excluded required dependencies are appended to
    ``found``. Absent optional dependencies are skipped and never expand the
    set.
    """
    expanded: Dict[str, ModuleDescriptor] = {}
    queue = deque()
    for module_id in request.module_ids:
        descriptor = registry.get(module_id)
        if descriptor is None:
            found.append(P.unknown_module(module_id))
            continue
        if module_id not in expanded:
            expanded[module_id] = descriptor
            queue.append(descriptor)

    while queue:
        descriptor = queue.popleft()
        for dep in descriptor.required_dependencies():
            if dep.module_id in expanded:
                continue
            if dep.module_id in request.options.exclude:
                found.append(P.excluded_dependency(dep.module_id, descriptor.id))
                continue
            target = registry.get(dep.module_id)
            if target is None:
                found.append(P.missing_dependency(dep.module_id, descriptor.id, dep.reason))
                continue
            expanded[dep.module_id] = target
            queue.append(target)
    return expanded


def check_framework_support(expanded: Dict[str, ModuleDescriptor], framework: str) -> List[P.Problem]:
    """Report unsupported (error) and partial (warning) framework support."""
    found = []
    for module_id in sorted(expanded):
        descriptor = expanded[module_id]
        level = descriptor.support_for(framework)
        if level == SupportLevel.UNSUPPORTED:
            declared = framework in descriptor.framework_support
            found.append(P.framework_unsupported(module_id, framework, declared))
        elif level == SupportLevel.PARTIAL:
            found.append(P.partial_support(module_id, framework, descriptor.limitations_for(framework)))
    return found


def _applicable_conflict(owner: ModuleDescriptor, other: ModuleDescriptor) -> Optional[ModuleConflict]:
    """Conflict entry of ``owner`` naming ``other``, honoring its version range."""
    entry = owner.conflict_with(other.id)
    if entry is None:
        return None
    if entry.version_range is not None and not check_range(entry.version_range, other.version).satisfied:
        return None
    return entry


def check_conflicts(expanded: Dict[str, ModuleDescriptor]) -> List[P.Problem]:
    """One problem per conflicting unordered pair, whichever side declares it."""
    found = []
    for a_id, b_id in combinations(sorted(expanded), 2):
        a, b = expanded[a_id], expanded[b_id]
        forward = _applicable_conflict(a, b)
        reverse = _applicable_conflict(b, a)
        if forward is None and reverse is None:
            continue
        # The error-severity declaration wins when both sides declare one
        if forward is not None and (forward.is_error or reverse is None or not reverse.is_error):
            found.append(P.conflict(a_id, b_id, forward.reason, forward.is_error, forward.resolution))
        else:
            found.append(P.conflict(b_id, a_id, reverse.reason, reverse.is_error, reverse.resolution))
    return found


def check_versions(expanded: Dict[str, ModuleDescriptor]) -> List[P.Problem]:
    """Check every dependency edge inside the expanded set against its range."""
    found = []
    for module_id in sorted(expanded):
        for dep in expanded[module_id].dependencies:
            target = expanded.get(dep.module_id)
            if target is None:
                continue
            result = check_range(dep.version_range, target.version)
            if not result.satisfied:
                found.append(P.version_mismatch(
                    dep.module_id, module_id, result.required, result.actual, result.error or ""
                ))
    return found


def check_lifecycle_flags(expanded: Dict[str, ModuleDescriptor]) -> List[P.Problem]:
    """Advisory warnings for deprecated and experimental modules."""
    found = []
    for module_id in sorted(expanded):
        descriptor = expanded[module_id]
        if descriptor.deprecated:
            found.append(P.deprecated_module(module_id))
        if descriptor.experimental:
            found.append(P.experimental_module(module_id))
    return found


def check_compatibility(request: InstallationRequest, registry: ModuleRegistry) -> CompatibilityReport:
    """Run every compatibility check for ``request`` against ``registry``.

    Returns:
        CompatibilityReport with the expanded ids (sorted) and all problems,
        errors and warnings alike.
    """
    found: List[P.Problem] = []
    expanded = expand_dependencies(request, registry, found)
    found.extend(check_framework_support(expanded, request.framework))
    found.extend(check_conflicts(expanded))
    found.extend(check_versions(expanded))
    found.extend(check_lifecycle_flags(expanded))

    report = CompatibilityReport(expanded_ids=tuple(sorted(expanded)), problems=tuple(found))
    if is_debug_enabled(logger):
        logger.debug(
            "Compatibility checked",
            extra=extra_context(
                event="decision",
                component="compatibility",
                action="check",
                framework=request.framework,
                outcome="ok" if report.ok else "problems",
                count=len(found),
            ),
        )
    return report


def suggest_alternatives(module_id: str, selected: List[str], registry: ModuleRegistry,
                         framework: Optional[str] = None) -> List[str]:
    """Modules of the same category as ``module_id`` that conflict with nothing selected.

    Candidates must not be ``module_id`` itself or already selected, must
    not have an error-severity conflict (either direction) with any selected
    module, and, when ``framework`` is given, must support it.
    """
    replaced = registry.get(module_id)
    if replaced is None:
        return []
    chosen = [registry.get(s) for s in selected if s != module_id]
    chosen = [c for c in chosen if c is not None]

    alternatives = []
    for candidate in registry.modules_by_category(replaced.category):
        if candidate.id == module_id or candidate.id in selected:
            continue
        if framework and candidate.support_for(framework) == SupportLevel.UNSUPPORTED:
            continue
        clashes = False
        for other in chosen:
            for entry in (_applicable_conflict(candidate, other), _applicable_conflict(other, candidate)):
                if entry is not None and entry.is_error:
                    clashes = True
        if not clashes:
            alternatives.append(candidate.id)
    return alternatives
