"""Site map: nodes and the builder that links them."""

from .builder import MapEntry, SiteMap, UnresolvedReference, build_map
from .node import Node, NodeKind, make_node_id

__all__ = [
    "MapEntry",
    "Node",
    "NodeKind",
    "SiteMap",
    "UnresolvedReference",
    "build_map",
    "make_node_id",
]
