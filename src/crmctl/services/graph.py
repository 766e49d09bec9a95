"""GraphService: node/edge extraction for the network view.

Reads the lazy-built undirected NetworkX graph from the Store. Every node
and edge carries a ``type`` discriminator so a view can render it without
querying again. Degrees are always counted on the full graph.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import networkx as nx
from sqlalchemy.exc import SQLAlchemyError

from crmctl.infrastructure.graph import node_key
from crmctl.infrastructure.graph.engine import PERSON_PREFIX
from crmctl.services.base import BaseService
from crmctl.services.contracts import GraphData, dump_validated
from crmctl.services.result import ErrorCode, ServiceResult, failure
from crmctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from collections.abc import Iterable

MAX_NEIGHBORHOOD_DEPTH = 3

_NODE_ATTRS = ("type", "entity_id", "label", "org_type")
_EDGE_ATTRS = ("id", "type", "source", "target", "notes", "role")


def _sort_key(key: str) -> tuple[str, int]:
    kind, _, entity_id = key.partition(":")
    return kind, int(entity_id)


def _edge_sort_key(edge: tuple[str, str, dict[str, Any]]) -> tuple[str, int]:
    attrs = edge[2]
    return attrs["type"], attrs["relationship_id"]


class GraphService(BaseService):
    """Relationship graph views."""

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _serialize(
        full: nx.Graph,
        node_keys: Iterable[str],
        edges: Iterable[tuple[str, str, dict[str, Any]]],
    ) -> dict[str, Any]:
        nodes = []
        for key in sorted(node_keys, key=_sort_key):
            attrs = full.nodes[key]
            node = {"id": key, "degree": full.degree(key)}
            node.update({a: attrs[a] for a in _NODE_ATTRS if a in attrs})
            nodes.append(node)

        edge_list = [
            {a: attrs[a] for a in _EDGE_ATTRS if a in attrs}
            for _, _, attrs in sorted(edges, key=_edge_sort_key)
        ]
        return {
            "nodes": nodes,
            "edges": edge_list,
            "node_count": len(nodes),
            "edge_count": len(edge_list),
        }

    # ------------------------------------------------------------------
    # network: whole graph
    # ------------------------------------------------------------------

    @traced
    def network(self) -> ServiceResult:
        """Every person and organization with every relationship."""
        op = "graph_network"
        try:
            with trace_span("graph_build"):
                g = self._store.graph()
        except SQLAlchemyError as exc:
            return self._storage(op, exc)
        data = self._serialize(g, g.nodes, g.edges(data=True))
        return ServiceResult(ok=True, op=op, data=dump_validated(GraphData, data))

    # ------------------------------------------------------------------
    # neighborhood: ego network around one person
    # ------------------------------------------------------------------

    @traced
    def neighborhood(self, person_id: int, *, depth: int = 1) -> ServiceResult:
        """Nodes within *depth* hops (1-3) of *person_id*, plus edges among them.

        Organizations count as hops, so depth 2 reaches colleagues at a
        shared organization.
        """
        op = "graph_neighborhood"
        if not 1 <= depth <= MAX_NEIGHBORHOOD_DEPTH:
            return failure(
                op,
                ErrorCode.VALIDATION_FAILED,
                f"depth must be between 1 and {MAX_NEIGHBORHOOD_DEPTH}, got {depth}",
            )

        try:
            g = self._store.graph()
        except SQLAlchemyError as exc:
            return self._storage(op, exc)
        center = node_key(PERSON_PREFIX, person_id)
        if center not in g:
            return self._not_found(op, "person", person_id)

        sub = nx.ego_graph(g, center, radius=depth)
        data = self._serialize(g, sub.nodes, sub.edges(data=True))
        data["center"] = center
        data["depth"] = depth
        return ServiceResult(ok=True, op=op, data=dump_validated(GraphData, data))
