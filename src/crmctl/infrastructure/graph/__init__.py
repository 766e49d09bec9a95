"""Relationship graph built from the database with NetworkX."""

from crmctl.infrastructure.graph.engine import GraphEngine, node_key

__all__ = ["GraphEngine", "node_key"]
