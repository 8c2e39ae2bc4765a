"""Lane colours and the per-session branch colour registry."""

from PySide6.QtGui import QColor

from gitscope.constants import DEFAULT_PALETTE_SIZE

# Colors for different columns (branches)
LANE_COLORS = [
    QColor("#4CAF50"),  # Green
    QColor("#2196F3"),  # Blue
    QColor("#FF9800"),  # Orange
    QColor("#9C27B0"),  # Purple
    QColor("#F44336"),  # Red
    QColor("#00BCD4"),  # Cyan
    QColor("#E91E63"),  # Pink
    QColor("#795548"),  # Brown
    QColor("#3F51B5"),  # Indigo
    QColor("#8BC34A"),  # Light green
    QColor("#FFC107"),  # Amber
    QColor("#607D8B"),  # Blue grey
]


def get_lane_color(color_index: int) -> QColor:
    """Get color for a lane/column or a branch colour index."""
    return LANE_COLORS[color_index % len(LANE_COLORS)]


def hash_branch_name(name: str) -> int:
    """Stable 32-bit rolling hash of a branch name.

    h = h * 31 + unit over UTF-16 code units, wrapped to a signed 32-bit
    integer at each step, then made non-negative. Deterministic across
    processes, unlike the builtin ``hash()``.
    """
    encoded = name.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


class BranchColorRegistry:
    """
    Branch name -> colour index, fixed the first time a name is seen.

    Owned by one view session and shared by every layout pass of that
    session (including pagination), so a branch never changes colour once
    drawn. Do not share across unrelated repositories; call reset().
    """

    def __init__(self, palette_size: int = DEFAULT_PALETTE_SIZE) -> None:
        if palette_size < 1:
            raise ValueError("palette_size must be at least 1")
        self.palette_size = palette_size
        self._colors: dict[str, int] = {}

    def color_for(self, branch_name: str) -> int:
        color = self._colors.get(branch_name)
        if color is None:
            color = hash_branch_name(branch_name) % self.palette_size
            self._colors[branch_name] = color
        return color

    def __contains__(self, branch_name: object) -> bool:
        return branch_name in self._colors

    def __len__(self) -> int:
        return len(self._colors)

    def snapshot(self) -> dict[str, int]:
        return dict(self._colors)

    def reset(self) -> None:
        self._colors.clear()
