"""Incremental (append-only) layout of paged commit history."""

from collections.abc import Iterable
from typing import TYPE_CHECKING

from gitscope.constants import DEFAULT_PAGE_SIZE
from gitscope.git_graph.layout import GraphLayoutEngine
from gitscope.git_graph.types import CommitNode, GraphLayout
from gitscope.utils.logger import get_logger

if TYPE_CHECKING:
    from gitscope.git_backend.service import RepositoryService

logger = get_logger("git_graph.paginator")


class GraphPaginator:
    """
    Extends a layout as more commits are fetched.

    Rows already laid out are never re-columned or re-coloured: each page
    is folded onto the state left by the previous one. Pages must arrive
    in fetch order; load_more() refuses to start while a fetch is out.
    """

    def __init__(
        self,
        service: "RepositoryService | None" = None,
        engine: GraphLayoutEngine | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.service = service
        self.engine = engine or GraphLayoutEngine()
        self.page_size = max(1, page_size)
        self.layout = self.engine.layout([])
        self.has_more = True
        self._fetched = 0
        self._loading = False

    @property
    def is_loading(self) -> bool:
        return self._loading

    def extend(self, existing: GraphLayout, new_commits: Iterable[CommitNode]) -> GraphLayout:
        """Layout of ``existing`` followed by ``new_commits``.

        ``existing`` is left untouched; the result equals laying out the
        concatenated sequence in one pass.
        """
        if existing.state is None:
            raise ValueError("Layout has no fold state; build it with GraphLayoutEngine.layout()")
        state = existing.state.fork()
        self.engine.fold(state, new_commits)
        return self.engine.snapshot(state)

    def append(self, new_commits: Iterable[CommitNode]) -> GraphLayout:
        """Extend the paginator's own layout."""
        self.layout = self.extend(self.layout, new_commits)
        return self.layout

    async def load_more(self) -> GraphLayout:
        """Fetch the next page from the service and fold it in."""
        if self.service is None:
            raise ValueError("GraphPaginator has no repository service")
        if self._loading or not self.has_more:
            return self.layout

        self._loading = True
        try:
            skip = self._fetched
            batch = await self.service.list_commits(self.page_size, skip)
            self._fetched += len(batch)
            self.has_more = len(batch) >= self.page_size
            self.append(batch)
            logger.info(
                "Loaded commit page",
                count=len(batch),
                skip=skip,
                has_more=self.has_more,
            )
        finally:
            self._loading = False
        return self.layout

    def reset(self) -> None:
        """Start over, e.g. after the repository's refs changed.

        Branch colours are kept; they belong to the session.
        """
        self.layout = self.engine.layout([])
        self.has_more = True
        self._fetched = 0
