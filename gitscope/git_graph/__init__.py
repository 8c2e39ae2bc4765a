"""Commit graph layout: columns, edges and stable branch colours."""

from gitscope.git_graph.colors import BranchColorRegistry, get_lane_color
from gitscope.git_graph.layout import GraphLayoutEngine, LayoutState
from gitscope.git_graph.paginator import GraphPaginator
from gitscope.git_graph.types import CommitNode, GraphEdge, GraphLayout, GraphRow

__all__ = [
    "BranchColorRegistry",
    "CommitNode",
    "GraphEdge",
    "GraphLayout",
    "GraphLayoutEngine",
    "GraphPaginator",
    "GraphRow",
    "LayoutState",
    "get_lane_color",
]
