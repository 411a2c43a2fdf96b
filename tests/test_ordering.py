from conftest import chain, make_edge, make_graph, make_node
from ontograph.graph.graph_store import GraphStore
from ontograph.inference.ordering import (
    condense,
    pseudo_topological_order,
    strongly_connected_components,
)


def _cyclic_store():
    # S -> A -> B -> A, B -> T
    s, a, b, t = (make_node(n) for n in "SABT")
    edges = [
        make_edge("SA", s.id, a.id),
        make_edge("AB", a.id, b.id),
        make_edge("BA", b.id, a.id),
        make_edge("BT", b.id, t.id),
    ]
    return GraphStore(make_graph("cyclic", [s, a, b, t], edges))


def test_components_of_a_dag_are_singletons():
    store = GraphStore(chain("A", "B", "C"))

    components = strongly_connected_components(store, ["node_A"])

    assert sorted(len(c) for c in components) == [1, 1, 1]


def test_components_group_cycles():
    components = strongly_connected_components(_cyclic_store(), ["node_S"])

    assert sorted(sorted(c) for c in components) == [
        ["node_A", "node_B"],
        ["node_S"],
        ["node_T"],
    ]


def test_unknown_roots_are_skipped():
    assert strongly_connected_components(GraphStore(chain("A")), ["node_missing"]) == []


def test_condensation_dag_links_components():
    condensation = condense(_cyclic_store(), ["node_S"])

    cycle = condensation.component_of["node_A"]
    assert condensation.component_of["node_B"] == cycle
    assert condensation.dag[condensation.component_of["node_S"]] == [cycle]
    assert condensation.dag[cycle] == [condensation.component_of["node_T"]]


def test_order_of_a_chain_follows_edges():
    order = pseudo_topological_order(GraphStore(chain("A", "B", "C", "D")), ["node_A"])
    assert order == ["node_A", "node_B", "node_C", "node_D"]


def test_order_places_cycle_between_source_and_target():
    order = pseudo_topological_order(_cyclic_store(), ["node_S"])

    assert order[0] == "node_S"
    assert order[-1] == "node_T"
    assert set(order[1:3]) == {"node_A", "node_B"}


def test_order_covers_vertices_not_reachable_from_sources():
    a, b, c = make_node("A"), make_node("B"), make_node("C")
    graph = make_graph("g", [a, b, c], [make_edge("CB", c.id, b.id)])

    order = pseudo_topological_order(GraphStore(graph), [a.id])

    assert sorted(order) == ["node_A", "node_B", "node_C"]
    assert order.index("node_C") < order.index("node_B")


def test_order_handles_self_loops():
    a, b = make_node("A"), make_node("B")
    graph = make_graph(
        "g", [a, b], [make_edge("AA", a.id, a.id), make_edge("AB", a.id, b.id)]
    )

    assert pseudo_topological_order(GraphStore(graph), [a.id]) == ["node_A", "node_B"]


def test_deep_chain_does_not_recurse():
    names = [f"n{i}" for i in range(3000)]

    order = pseudo_topological_order(GraphStore(chain(*names)), ["node_n0"])

    assert order[0] == "node_n0"
    assert order[-1] == "node_n2999"


def test_components_keep_pop_order():
    components = strongly_connected_components(_cyclic_store(), ["node_S"])

    assert components == [["node_T"], ["node_B", "node_A"], ["node_S"]]
