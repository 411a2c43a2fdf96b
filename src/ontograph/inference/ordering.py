from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Tuple

from ontograph.graph.graph_store import GraphStore


@dataclass(frozen=True)
class Condensation:
    """
    Strongly-connected components of a digraph and the DAG between them.

    Components are numbered in discovery order (Tarjan pops sinks first);
    each component lists its vertices in the order they were popped.
    """

    components: List[List[str]]
    component_of: Dict[str, int]
    dag: Dict[int, List[int]]


def _successors(store: GraphStore, vertex: str) -> List[str]:
    return [e.target_id for e in store.out_edges(vertex)]


def strongly_connected_components(store: GraphStore, roots: Iterable[str]) -> List[List[str]]:
    """
    Tarjan's algorithm, iterative.

    Hand-written rather than networkx's, whose components are unordered
    sets: the schedule depends on component pop order and on the order
    vertices are popped within each component.

    Depth-first search from each unvisited root, tracking discovery index
    and low-link; a component is popped whenever a vertex's low-link
    equals its own index.
    """
    index: Dict[str, int] = {}
    low: Dict[str, int] = {}
    stack: List[str] = []
    on_stack = set()
    components: List[List[str]] = []
    counter = 0

    def visit(vertex: str) -> Tuple[str, Iterator[str]]:
        nonlocal counter
        index[vertex] = low[vertex] = counter
        counter += 1
        stack.append(vertex)
        on_stack.add(vertex)
        return vertex, iter(_successors(store, vertex))

    for root in roots:
        if root in index or not store.contains(root):
            continue

        work = [visit(root)]
        while work:
            vertex, successors = work[-1]

            descended = False
            for nbr in successors:
                if nbr not in index:
                    work.append(visit(nbr))
                    descended = True
                    break
                if nbr in on_stack:
                    low[vertex] = min(low[vertex], index[nbr])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                low[parent] = min(low[parent], low[vertex])

            if low[vertex] == index[vertex]:
                component: List[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == vertex:
                        break
                components.append(component)

    return components


def condense(store: GraphStore, roots: Iterable[str]) -> Condensation:
    components = strongly_connected_components(store, roots)

    component_of: Dict[str, int] = {}
    for i, component in enumerate(components):
        for vertex in component:
            component_of[vertex] = i

    dag: Dict[int, List[int]] = {}
    for edge in store.get_edges():
        a = component_of.get(edge.source_id)
        b = component_of.get(edge.target_id)
        if a is None or b is None or a == b:
            continue
        successors = dag.setdefault(a, [])
        if b not in successors:
            successors.append(b)

    return Condensation(components=components, component_of=component_of, dag=dag)


def pseudo_topological_order(store: GraphStore, sources: Iterable[str]) -> List[str]:
    """
    Vertex order for a possibly cyclic digraph.

    Cycles are condensed first, the condensation is scheduled with Kahn's
    algorithm (in-degree-zero components first) and components are
    flattened back into vertices. Discovery starts from ``sources``, then
    covers every remaining vertex so none is left out.
    """
    roots = [*sources, *store.vertices()]
    condensation = condense(store, roots)

    indegree: Dict[int, int] = {i: 0 for i in range(len(condensation.components))}
    for successors in condensation.dag.values():
        for b in successors:
            indegree[b] += 1

    queue = deque(i for i, d in indegree.items() if d == 0)
    scheduled: List[int] = []
    while queue:
        c = queue.popleft()
        scheduled.append(c)
        for b in condensation.dag.get(c, []):
            indegree[b] -= 1
            if indegree[b] == 0:
                queue.append(b)

    order: List[str] = []
    for c in scheduled:
        order.extend(condensation.components[c])
    return order
