"""Installation ordering for a validated module set.

Edges run from a module to its required dependencies inside the set: a
dependency is always installed before the modules that need it. Cycles are
the strongly connected components found by an iterative Tarjan search.
Ordering uses Kahn's algorithm taking ready modules in ascending id order, so
the same input always yields the same plan.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Set, Tuple

from common.logging_utils import Timer, extra_context, is_debug_enabled
from registry.module_registry import ModuleRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolverResult:
    """Topological order, or the cycles that prevent one."""
    order: Tuple[str, ...]
    cycles: Tuple[Tuple[str, ...], ...] = ()

    @property
    def ok(self) -> bool:
        return not self.cycles


def build_graph(module_ids: Iterable[str], registry: ModuleRegistry) -> Dict[str, List[str]]:
    """Adjacency map id -> sorted required dependency ids within the set."""
    members = set(module_ids)
    graph: Dict[str, List[str]] = {}
    for module_id in members:
        descriptor = registry.get(module_id)
        deps = descriptor.required_dependencies() if descriptor else []
        graph[module_id] = sorted({d.module_id for d in deps if d.module_id in members})
    return graph


def find_cycles(graph: Dict[str, List[str]]) -> List[Tuple[str, ...]]:
    """Return every strongly connected component of more than one module.

    Iterative Tarjan search (no recursion limit) in ascending id order.
    Members of a component are sorted, and components are sorted, e.g.
    ``[("A", "B", "C")]`` for ``A -> B, A -> C, B -> A, C -> B``.
    """
    index: Dict[str, int] = {}
    low: Dict[str, int] = {}
    on_stack: Set[str] = set()
    stack: List[str] = []
    components: List[Tuple[str, ...]] = []

    for root in sorted(graph):
        if root in index:
            continue
        index[root] = low[root] = len(index)
        stack.append(root)
        on_stack.add(root)
        work = [(root, iter(graph[root]))]
        while work:
            node, children = work[-1]
            advanced = False
            for child in children:
                if child not in index:
                    index[child] = low[child] = len(index)
                    stack.append(child)
                    on_stack.add(child)
                    work.append((child, iter(graph[child])))
                    advanced = True
                    break
                if child in on_stack:
                    low[node] = min(low[node], index[child])
            if advanced:
                continue
            work.pop()
            if work:
                parent = work[-1][0]
                low[parent] = min(low[parent], low[node])
            if low[node] == index[node]:
                members = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    members.append(member)
                    if member == node:
                        break
                if len(members) > 1:
                    components.append(tuple(sorted(members)))
    return sorted(components)


def topological_order(graph: Dict[str, List[str]]) -> List[str]:
    """Kahn's algorithm; ties broken by ascending id. Assumes no cycles."""
    pending = {node: len(deps) for node, deps in graph.items()}
    dependents: Dict[str, List[str]] = {node: [] for node in graph}
    for node, deps in graph.items():
        for dep in deps:
            dependents[dep].append(node)

    ready = [node for node, count in pending.items() if count == 0]
    heapq.heapify(ready)
    order: List[str] = []
    while ready:
        node = heapq.heappop(ready)
        order.append(node)
        for dependent in dependents[node]:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, dependent)
    return order


def resolve_order(module_ids: Iterable[str], registry: ModuleRegistry) -> ResolverResult:
    """Order ``module_ids`` so dependencies come first, or report cycles."""
    with Timer() as t:
        graph = build_graph(module_ids, registry)
        cycles = find_cycles(graph)
        order: List[str] = [] if cycles else topological_order(graph)

    if is_debug_enabled(logger):
        logger.debug(
            "Resolved installation order",
            extra=extra_context(
                event="decision",
                component="resolver",
                action="resolve_order",
                outcome="cycle" if cycles else "ordered",
                count=len(graph),
                duration_ms=t.duration_ms(),
            ),
        )
    return ResolverResult(order=tuple(order), cycles=tuple(cycles))
