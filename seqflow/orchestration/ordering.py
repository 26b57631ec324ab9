"""Orchestration layer — Ordering engine.

Sorts a sequence so that every element follows the elements it depends on.

``topological_sort`` is a stable depth-first sort: elements with no
dependency relation keep their input order, and dependencies are emitted
in the order the extractor yields them.  Traversal uses an explicit work
stack of ``(element, remaining dependencies)`` frames so deep chains cannot
exhaust the interpreter stack.

``execution_waves`` groups the same relation into batches of mutually
independent elements that can be dispatched concurrently, e.g. one
``for_each_async`` call per wave.

Dependencies that are not part of the input are treated as already
satisfied and skipped.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

import networkx as nx

from seqflow.exceptions import CycleDetectedError

T = TypeVar("T")

DependencyExtractor = Callable[[T], Iterable[T] | None]
KeyExtractor = Callable[[T], Hashable]


class VisitState(Enum):
    UNVISITED = "unvisited"
    IN_PROGRESS = "in_progress"
    DONE = "done"


@dataclass
class _Frame:
    """One element on the work stack and the dependencies still to visit."""

    key: Hashable
    pending: Iterator[Any]


def _identity(element: Any) -> Hashable:
    return element


def _index_elements(elements: Iterable[T], key: KeyExtractor) -> dict[Hashable, T]:
    """Map each equality key to its first element, keeping input order."""
    nodes: dict[Hashable, T] = {}
    for element in elements:
        nodes.setdefault(key(element), element)
    return nodes


def _dependencies_of(element: T, get_dependencies: DependencyExtractor) -> Iterator[T]:
    return iter(get_dependencies(element) or ())


def topological_sort(
    elements: Iterable[T],
    get_dependencies: DependencyExtractor,
    key: KeyExtractor | None = None,
) -> list[T]:
    """Return *elements* ordered so that dependencies precede their dependents.

    Args:
        elements:         The elements to sort.  Duplicates (by *key*) are
                          emitted once, at the position of the first one.
        get_dependencies: Maps an element to the elements it depends on.
        key:              Maps an element to its hashable identity.  Defaults
                          to the element itself.

    Returns:
        A new list; the input is not modified.

    Raises:
        CycleDetectedError: If the dependency relation contains a cycle.  The
            error's ``cycle`` lists the chain, e.g. ``[a, b, a]``.

    Example::

        >>> deps = {"app": ["lib"], "lib": ["core"], "core": []}
        >>> topological_sort(["app", "lib", "core"], deps.get)
        ['core', 'lib', 'app']
    """
    key = key or _identity
    nodes = _index_elements(elements, key)
    state = {node_key: VisitState.UNVISITED for node_key in nodes}
    order: list[T] = []

    for root_key in nodes:
        if state[root_key] is not VisitState.UNVISITED:
            continue

        state[root_key] = VisitState.IN_PROGRESS
        stack = [_Frame(root_key, _dependencies_of(nodes[root_key], get_dependencies))]

        while stack:
            frame = stack[-1]
            for dependency in frame.pending:
                dep_key = key(dependency)
                dep_state = state.get(dep_key)
                if dep_state is None or dep_state is VisitState.DONE:
                    continue
                if dep_state is VisitState.IN_PROGRESS:
                    raise CycleDetectedError(_cycle_chain(stack, dep_key, nodes))
                state[dep_key] = VisitState.IN_PROGRESS
                stack.append(_Frame(dep_key, _dependencies_of(nodes[dep_key], get_dependencies)))
                break
            else:
                # All dependencies emitted.
                stack.pop()
                state[frame.key] = VisitState.DONE
                order.append(nodes[frame.key])

    return order


def _cycle_chain(stack: list[_Frame], repeated: Hashable, nodes: dict[Hashable, T]) -> list[T]:
    start = next(i for i, frame in enumerate(stack) if frame.key == repeated)
    return [nodes[frame.key] for frame in stack[start:]] + [nodes[repeated]]


# ---------------------------------------------------------------------------
# Execution waves
# ---------------------------------------------------------------------------


def build_dependency_graph(
    elements: Iterable[T],
    get_dependencies: DependencyExtractor,
    key: KeyExtractor | None = None,
) -> tuple[nx.DiGraph, dict[Hashable, T]]:
    """Build a DiGraph over element keys with an edge ``dependency -> dependent``.

    Returns the graph together with the key-to-element index.  Node insertion
    order follows the input order.
    """
    key = key or _identity
    nodes = _index_elements(elements, key)
    graph: nx.DiGraph = nx.DiGraph()
    graph.add_nodes_from(nodes)
    for node_key, element in nodes.items():
        for dependency in _dependencies_of(element, get_dependencies):
            dep_key = key(dependency)
            if dep_key in nodes:
                graph.add_edge(dep_key, node_key)
    return graph, nodes


def execution_waves(
    elements: Iterable[T],
    get_dependencies: DependencyExtractor,
    key: KeyExtractor | None = None,
) -> list[list[T]]:
    """Group *elements* into waves of mutually independent elements.

    Every dependency of an element in wave ``n`` lives in a wave before ``n``.
    Within a wave elements keep their input order.

    Raises:
        CycleDetectedError: If the dependency relation contains a cycle.
    """
    graph, nodes = build_dependency_graph(elements, get_dependencies, key)

    if not nx.is_directed_acyclic_graph(graph):
        cycle = nx.find_cycle(graph)
        cycle_keys = [edge[0] for edge in cycle] + [cycle[-1][1]]
        raise CycleDetectedError([nodes[k] for k in cycle_keys])

    waves: list[list[T]] = []
    while graph.nodes:
        # Kahn's algorithm: every zero in-degree node forms the next wave.
        ready = [n for n in graph.nodes if graph.in_degree(n) == 0]
        waves.append([nodes[k] for k in ready])
        graph.remove_nodes_from(ready)
    return waves
