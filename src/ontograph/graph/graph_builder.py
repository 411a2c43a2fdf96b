from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional, Sequence, Union

from ontograph.embeddings.encoder import EmbeddingProvider
from ontograph.graph.graph_schema import Edge, Entity, Graph, Node, Property
from ontograph.graph.identifiers import IdFactory, namespaced_id


class GraphBuilder:
    """
    Two-phase construction of graph entities.

    Each ``create_*`` call returns the entity immediately with no
    embedding and schedules a readiness task on the running event loop
    that fills the embedding in. Callers that need embeddings must
    ``await_ready`` first; nothing waits implicitly.

    Must be used from inside a running event loop.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        *,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self.provider = provider
        self.id_factory = id_factory

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    def create_property(self, local_id: str, *, name: str, description: str) -> Property:
        prop = Property(
            id=namespaced_id("property", local_id, self.id_factory),
            name=name,
            description=description,
        )
        prop._ready = self._schedule(self._populate(prop))
        return prop

    def create_node(
        self,
        local_id: str,
        *,
        name: str,
        description: str,
        properties: Sequence[Property] = (),
    ) -> Node:
        node = Node(
            id=namespaced_id("node", local_id, self.id_factory),
            name=name,
            description=description,
            properties=list(properties),
        )
        node._ready = self._schedule(self._populate(node, after=node.properties))
        return node

    def create_edge(
        self,
        local_id: str,
        *,
        name: str,
        description: str,
        source_id: str,
        target_id: str,
        properties: Sequence[Property] = (),
    ) -> Edge:
        edge = Edge(
            id=namespaced_id("edge", local_id, self.id_factory),
            name=name,
            description=description,
            source_id=source_id,
            target_id=target_id,
            properties=list(properties),
        )
        edge._ready = self._schedule(self._populate(edge, after=edge.properties))
        return edge

    def create_graph(
        self,
        local_id: str,
        *,
        nodes: Iterable[Node] = (),
        edges: Iterable[Edge] = (),
    ) -> Graph:
        nodes = list(nodes)
        edges = list(edges)
        ready = self._schedule(_wait_all([*nodes, *edges]))
        return Graph(
            id=namespaced_id("graph", local_id, self.id_factory),
            nodes=nodes,
            edges=edges,
            _ready=ready,
        )

    # ------------------------------------------------------------------
    # Readiness
    # ------------------------------------------------------------------

    async def await_ready(self, target: Union[Entity, Graph]) -> None:
        await await_ready(target)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _schedule(coro) -> asyncio.Task:
        return asyncio.get_running_loop().create_task(coro)

    async def _populate(self, entity: Entity, after: Sequence[Property] = ()) -> None:
        await _wait_all(after)

        try:
            vector = await self.provider.embed(entity.text())
        except Exception:
            logging.getLogger("ontograph.builder").warning(
                "embedding failed for %s; embedding left unset",
                entity.id,
                exc_info=True,
            )
            return

        entity.attach_embedding(vector)


async def await_ready(target: Union[Entity, Graph]) -> None:
    """
    Wait until ``target`` (and, for a graph, every node and edge) has
    finished its embedding task. Failed embeddings do not raise here.
    """
    if isinstance(target, Graph):
        await _wait_all([*target.nodes, *target.edges])
        if target.ready_task is not None:
            await target.ready_task
        return

    if target.ready_task is not None:
        await target.ready_task


async def _wait_all(entities: Iterable[Union[Entity, Graph]]) -> None:
    tasks = [e.ready_task for e in entities if e.ready_task is not None]
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
