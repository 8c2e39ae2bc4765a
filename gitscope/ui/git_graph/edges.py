"""Edge rendering for the commit graph - connections from a row to its parents."""

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QColor, QPainterPath, QPen
from PySide6.QtWidgets import QGraphicsItem, QGraphicsPathItem

from gitscope.git_graph.colors import get_lane_color
from gitscope.git_graph.types import GraphEdge

COLUMN_WIDTH = 20
ROW_HEIGHT = 28
EDGE_WIDTH = 2.0


def lane_center(column: int, row: int) -> QPointF:
    """Centre of a commit dot in scene coordinates."""
    return QPointF(column * COLUMN_WIDTH + COLUMN_WIDTH / 2, row * ROW_HEIGHT + ROW_HEIGHT / 2)


def edge_path(start: QPointF, end: QPointF) -> QPainterPath:
    """
    Path from a child (start, above) to its parent (end, below).

    Same column: a straight segment. Otherwise two quadratic curves that
    meet halfway across at the vertical midpoint, so the edge leaves the
    child vertically and enters the parent vertically.
    """
    path = QPainterPath()
    path.moveTo(start)

    if start.x() == end.x():
        path.lineTo(end)
        return path

    mid_y = (start.y() + end.y()) / 2
    mid_x = (start.x() + end.x()) / 2
    path.quadTo(QPointF(start.x(), mid_y), QPointF(mid_x, mid_y))
    path.quadTo(QPointF(end.x(), mid_y), end)
    return path


def edge_pen(color: QColor) -> QPen:
    pen = QPen(color, EDGE_WIDTH)
    pen.setCapStyle(Qt.PenCapStyle.RoundCap)
    pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
    return pen


class SplineEdge(QGraphicsPathItem):
    """
    Graphics item for one GraphEdge.

    Rows grow downward: the child sits at the lower y value, its parent
    further down, so the path is always drawn top to bottom.
    """

    def __init__(
        self,
        edge: GraphEdge,
        from_row: int,
        to_row: int,
        parent: QGraphicsItem | None = None,
    ) -> None:
        super().__init__(parent)
        self.edge = edge
        self.start = lane_center(edge.from_column, from_row)
        self.end = lane_center(edge.to_column, to_row)
        self.color = get_lane_color(edge.color_index)

        self.setPath(edge_path(self.start, self.end))
        self.setPen(edge_pen(self.color))
        self.setBrush(Qt.BrushStyle.NoBrush)

        # Draw behind commit dots
        self.setZValue(-1)
