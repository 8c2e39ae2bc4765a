"""Commit graph drawing components."""

from gitscope.ui.git_graph.edges import SplineEdge, edge_path, edge_pen, lane_center

__all__ = ["SplineEdge", "edge_path", "edge_pen", "lane_center"]
