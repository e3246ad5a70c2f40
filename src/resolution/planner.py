"""Installation planning: compatibility check, then ordering.

``plan()`` is the entry point used by the CLI and by installers. It is a pure
function of its arguments and the registry contents at call time; no module
is instantiated while planning.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants, SupportLevel
from registry.module_registry import ModuleRegistry

from . import problems as P
from .compatibility import check_compatibility
from .models import InstallationRequest, Plan, PlanOptions, PlanResult, Rejection
from .resolver import resolve_order

logger = logging.getLogger(__name__)
STG = f"{Constants.PLANNING} "


def complexity_score(module_ids: Iterable[str], registry: ModuleRegistry) -> int:
    """Rough effort score for a plan.

    10 per module, 5 per declared dependency, 3 per declared conflict and 15
    per distinct framework supported by any module of the plan.
    """
    score = 0
    frameworks = set()
    for module_id in module_ids:
        descriptor = registry.get(module_id)
        if descriptor is None:
            continue
        score += 10 + 5 * len(descriptor.dependencies) + 3 * len(descriptor.conflicts)
        frameworks.update(
            fw for fw in descriptor.framework_support
            if descriptor.support_for(fw) != SupportLevel.UNSUPPORTED
        )
    return score + 15 * len(frameworks)


def plan_request(request: InstallationRequest, registry: ModuleRegistry) -> PlanResult:
    """Plan an already-built InstallationRequest."""
    if registry is None:
        raise TypeError("plan() requires a ModuleRegistry, got None")

    with Timer() as t:
        report = check_compatibility(request, registry)
        warnings = report.warnings
        errors = report.errors
        if request.options.warnings_as_errors and warnings:
            errors = errors + [w.as_error() for w in warnings]
            warnings = []

        if errors:
            result: PlanResult = Rejection(
                problems=tuple(errors),
                framework=request.framework,
                requested_ids=request.module_ids,
                warnings=tuple(warnings),
            )
        else:
            ordered = resolve_order(report.expanded_ids, registry)
            if not ordered.ok:
                result = Rejection(
                    problems=tuple(P.cycle(list(c)) for c in ordered.cycles),
                    framework=request.framework,
                    requested_ids=request.module_ids,
                    warnings=tuple(warnings),
                )
            else:
                result = Plan(
                    module_ids=ordered.order,
                    framework=request.framework,
                    requested_ids=request.module_ids,
                    warnings=tuple(warnings),
                    complexity=complexity_score(ordered.order, registry),
                )

    if isinstance(result, Rejection):
        logger.info("%sRequest rejected with %d problem(s)", STG, len(result.problems))
    else:
        logger.info("%sPlanned %d module(s) for %s", STG, len(result.module_ids), request.framework)
    if is_debug_enabled(logger):
        logger.debug(
            "Planning finished",
            extra=extra_context(
                event="function_exit",
                component="planner",
                action="plan",
                framework=request.framework,
                outcome="planned" if result.ok else "rejected",
                duration_ms=t.duration_ms(),
            ),
        )
    return result


def plan(requested_ids: Iterable[str], target_framework: str, registry: ModuleRegistry,
         options: Optional[PlanOptions] = None) -> PlanResult:
    """Produce an installation Plan or a Rejection.

    Args:
        requested_ids: Module ids the caller wants installed (duplicates ignored).
        target_framework: Framework id, e.g. "nextjs".
        registry: Registry to resolve ids against.
        options: Optional exclusions and warning policy.

    Returns:
        Plan listing dependencies before dependents, annotated with warnings;
        or Rejection listing every blocking problem.

    Raises:
        TypeError: If ``registry`` is None.
    """
    if registry is None:
        raise TypeError("plan() requires a ModuleRegistry, got None")
    request = InstallationRequest.build(requested_ids, target_framework, options)
    return plan_request(request, registry)
