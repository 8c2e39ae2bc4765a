"""
Commit graph layout - assigns columns, edges and colours to a commit DAG.

The layout is a single forward pass over commits in emitted order
(children before parents). All of its memory lives in LayoutState, so the
pass can be resumed when the next page of history arrives: laying out
pages one after another gives exactly the same result as laying out the
concatenated history at once.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from gitscope.constants import DEFAULT_PALETTE_SIZE
from gitscope.git_graph.colors import BranchColorRegistry
from gitscope.git_graph.types import (
    CommitNode,
    EdgeKind,
    GraphEdge,
    GraphLayout,
    GraphRow,
    ParentLink,
)
from gitscope.utils.logger import get_logger

logger = get_logger("git_graph.layout")


@dataclass
class LayoutState:
    """
    Fold state threaded between layout passes.

    column_of:      commit hash -> column, for rendered commits and for
                    parents that have a column reserved but no row yet
    active_columns: column -> hash of the lineage occupying it, None if free
    row_of:         commit hash -> row index of rendered commits
    pending:        parent hash -> edges waiting for that parent's row
    """

    branch_colors: BranchColorRegistry
    column_of: dict[str, int] = field(default_factory=dict)
    active_columns: list[str | None] = field(default_factory=list)
    row_of: dict[str, int] = field(default_factory=dict)
    pending: dict[str, list[GraphEdge]] = field(default_factory=dict)
    rows: list[GraphRow] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def fork(self) -> "LayoutState":
        """Copy that can be extended without touching this state.

        The branch colour registry is shared on purpose: it belongs to the
        session, not to one layout.
        """
        return LayoutState(
            branch_colors=self.branch_colors,
            column_of=dict(self.column_of),
            active_columns=list(self.active_columns),
            row_of=dict(self.row_of),
            pending={parent: list(edges) for parent, edges in self.pending.items()},
            rows=list(self.rows),
            edges=list(self.edges),
        )

    def next_free_column(self) -> int:
        """Lowest free column, or one past the end when all are taken."""
        for column, occupant in enumerate(self.active_columns):
            if occupant is None:
                return column
        return len(self.active_columns)

    def occupy(self, column: int, commit_hash: str) -> None:
        if column >= len(self.active_columns):
            self.active_columns.append(commit_hash)
        else:
            self.active_columns[column] = commit_hash

    def release(self, column: int) -> None:
        if column < len(self.active_columns):
            self.active_columns[column] = None

    @property
    def max_column(self) -> int:
        """Lane count, counting columns reserved for parents not yet laid out."""
        return max(self.column_of.values(), default=0) + 1


class GraphLayoutEngine:
    """Lays out commit rows. Pure apart from the session's branch colours."""

    def __init__(
        self,
        palette_size: int = DEFAULT_PALETTE_SIZE,
        branch_colors: BranchColorRegistry | None = None,
    ) -> None:
        if branch_colors is None:
            branch_colors = BranchColorRegistry(palette_size)
        self.branch_colors = branch_colors

    def new_state(self) -> LayoutState:
        return LayoutState(branch_colors=self.branch_colors)

    def layout(self, commits: Iterable[CommitNode]) -> GraphLayout:
        """Lay out a full sequence of commits from scratch."""
        state = self.new_state()
        self.fold(state, commits)
        return self.snapshot(state)

    def snapshot(self, state: LayoutState) -> GraphLayout:
        return GraphLayout(
            rows=list(state.rows),
            edges=list(state.edges),
            max_column=state.max_column,
            state=state,
        )

    def fold(self, state: LayoutState, commits: Iterable[CommitNode]) -> LayoutState:
        """Append commits to a layout state in place."""
        for commit in commits:
            if commit.hash in state.row_of:
                # Overlapping pages are a caller bug; keep the first row.
                logger.warning("Duplicate commit in layout input", commit=commit.short_hash)
                continue
            self._place(state, commit)
        return state

    def _place(self, state: LayoutState, commit: CommitNode) -> None:
        column = state.column_of.get(commit.hash)
        if column is None:
            column = state.next_free_column()
            state.column_of[commit.hash] = column
            state.occupy(column, commit.hash)

        color_index = self._row_color(state, commit, column)

        parents: list[ParentLink] = []
        outgoing: list[GraphEdge] = []
        for i, parent_hash in enumerate(commit.parent_hashes):
            parent_column = state.column_of.get(parent_hash)
            if parent_column is None:
                # First parent continues straight down this column
                parent_column = column if i == 0 else state.next_free_column()
                state.column_of[parent_hash] = parent_column
                state.occupy(parent_column, parent_hash)

            parents.append(ParentLink(parent_hash, parent_column))
            outgoing.append(
                GraphEdge(
                    from_hash=commit.hash,
                    to_hash=parent_hash,
                    from_column=column,
                    to_column=parent_column,
                    color_index=self._edge_color(state, color_index, column, parent_column),
                    kind=self._edge_kind(i, column, parent_column),
                )
            )

        # No parent continues this lineage: the column is free for later rows
        if not any(link.column == column for link in parents):
            state.release(column)

        row_index = len(state.rows)
        state.rows.append(
            GraphRow(
                commit=commit,
                row=row_index,
                column=column,
                color_index=color_index,
                parents=tuple(parents),
            )
        )
        state.row_of[commit.hash] = row_index

        # Edges from earlier children into this commit are now complete
        state.edges.extend(state.pending.pop(commit.hash, []))

        for edge in outgoing:
            if edge.to_hash in state.row_of:
                state.edges.append(edge)
            else:
                state.pending.setdefault(edge.to_hash, []).append(edge)

    @staticmethod
    def _row_color(state: LayoutState, commit: CommitNode, column: int) -> int:
        # The state carries the registry, so extending a layout keeps its palette
        branch = commit.first_branch
        if branch is not None:
            return state.branch_colors.color_for(branch.name)
        return column % state.branch_colors.palette_size

    @staticmethod
    def _edge_color(state: LayoutState, row_color: int, column: int, parent_column: int) -> int:
        if parent_column == column:
            return row_color
        return parent_column % state.branch_colors.palette_size

    @staticmethod
    def _edge_kind(parent_index: int, column: int, parent_column: int) -> EdgeKind:
        if parent_column == column:
            return EdgeKind.STRAIGHT
        if parent_index > 0:
            return EdgeKind.MERGE
        return EdgeKind.BRANCH
