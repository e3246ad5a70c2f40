"""Compatibility checking, dependency ordering and installation planning."""

from .compatibility import check_compatibility, suggest_alternatives
from .models import CompatibilityReport, InstallationRequest, Plan, PlanOptions, PlanResult, Rejection
from .planner import plan, plan_request
from .problems import Problem, ProblemCode
from .resolver import ResolverResult, resolve_order

__all__ = [
    "CompatibilityReport",
    "InstallationRequest",
    "Plan",
    "PlanOptions",
    "PlanResult",
    "Problem",
    "ProblemCode",
    "Rejection",
    "ResolverResult",
    "check_compatibility",
    "plan",
    "plan_request",
    "resolve_order",
    "suggest_alternatives",
]
