"""
StagingController - hunk-level stage/unstage/revert for one file.

Each action is one call to the repository service. The hunk shows its
in-flight state right away; the backend's answer settles it. A success
changes the file's hunk boundaries, so the current snapshot is
invalidated and the diff is fetched again before any further action on
the file is accepted. A failure rolls the hunk back and leaves the rest
of the snapshot usable.
"""

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, Signal

from gitscope.constants import DEFAULT_REFETCH_DELAY
from gitscope.diff.hunks import HunkAction, HunkModel, HunkState
from gitscope.diff.parser import parse_unified_diff
from gitscope.diff.types import FileDiff
from gitscope.errors import ConcurrentHunkAction, RepositoryServiceFailure, StaleHunkIndex
from gitscope.utils.logger import get_logger

if TYPE_CHECKING:
    from gitscope.git_backend.service import RepositoryService

logger = get_logger("diff.staging")


@dataclass(frozen=True)
class HunkActionResult:
    """Outcome of a successful hunk action."""

    file_path: str
    hunk_index: int
    action: HunkAction
    state: HunkState
    refreshed: bool  # False if the follow-up fetch failed; the file then needs refresh()


class StagingController(QObject):
    """
    Mediates hunk actions for a single file between the view and the
    repository service.

    Signals are optional; a headless caller simply doesn't connect them.
    """

    hunk_state_changed = Signal(int, str)  # hunk index, HunkState value
    diff_refreshed = Signal(int)  # generation of the new snapshot
    action_failed = Signal(int, str)  # hunk index, error message

    def __init__(
        self,
        service: "RepositoryService",
        file_path: str,
        staged: bool = False,
        refetch_delay: float = DEFAULT_REFETCH_DELAY,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.service = service
        self.file_path = file_path
        self.staged = staged
        self.refetch_delay = max(0.0, refetch_delay)
        self._model: HunkModel | None = None
        self._busy: str | None = None  # state of the action in flight, or "refreshing"

    @property
    def model(self) -> HunkModel | None:
        """The current snapshot, or None before the first fetch."""
        return self._model

    async def refresh(self) -> HunkModel:
        """Fetch the file's diff and replace the current snapshot."""
        result = await self.service.get_diff(self.file_path, self.staged)
        diff = self._to_file_diff(result)

        previous = self._model
        if previous is not None:
            previous.invalidate()
        self._model = HunkModel(diff, staged=self.staged)

        logger.debug(
            "Diff refreshed",
            file=self.file_path,
            hunks=len(self._model),
            generation=self._model.generation,
        )
        self.diff_refreshed.emit(self._model.generation)
        return self._model

    def _to_file_diff(self, result: FileDiff | str) -> FileDiff:
        if isinstance(result, FileDiff):
            return result
        for file_diff in parse_unified_diff(result):
            if file_diff.path == self.file_path or file_diff.old_path == self.file_path:
                return file_diff
        # No changes left for this file
        return FileDiff(path=self.file_path)

    async def stage_hunk(self, hunk_index: int, snapshot: HunkModel | None = None) -> HunkActionResult:
        return await self._run(HunkAction.STAGE, hunk_index, snapshot)

    async def unstage_hunk(self, hunk_index: int, snapshot: HunkModel | None = None) -> HunkActionResult:
        return await self._run(HunkAction.UNSTAGE, hunk_index, snapshot)

    async def revert_hunk(self, hunk_index: int, snapshot: HunkModel | None = None) -> HunkActionResult:
        return await self._run(HunkAction.REVERT, hunk_index, snapshot)

    async def _run(
        self, action: HunkAction, hunk_index: int, snapshot: HunkModel | None
    ) -> HunkActionResult:
        """
        Run one action against the snapshot the caller computed the index on.

        ``snapshot`` defaults to the current model. Passing an older model
        (e.g. a hunk list kept from before the last action) is rejected with
        StaleHunkIndex instead of acting on whatever now sits at that index.

        One action per file at a time: while an action or its follow-up
        fetch is running, any other action raises ConcurrentHunkAction.
        """
        if self._busy is not None:
            raise ConcurrentHunkAction(self.file_path, hunk_index, self._busy)

        model = snapshot if snapshot is not None else self._model
        if model is None or model is not self._model or model.invalidated:
            raise StaleHunkIndex(self.file_path, hunk_index)

        # Raises ConcurrentHunkAction / InvalidHunkTransition / UnknownHunkIndex
        state = model.begin_action(hunk_index, action)
        self._busy = state.value
        try:
            return await self._perform(model, action, hunk_index, state)
        finally:
            self._busy = None

    async def _perform(
        self, model: HunkModel, action: HunkAction, hunk_index: int, state: HunkState
    ) -> HunkActionResult:
        self.hunk_state_changed.emit(hunk_index, state.value)
        logger.info("Hunk action started", file=self.file_path, hunk=hunk_index, action=action.value)

        try:
            await self._call_service(action, hunk_index)
        except RepositoryServiceFailure as e:
            state = model.complete_action(hunk_index, success=False)
            self.hunk_state_changed.emit(hunk_index, state.value)
            self.action_failed.emit(hunk_index, str(e))
            logger.warning(
                "Hunk action failed",
                file=self.file_path,
                hunk=hunk_index,
                action=action.value,
                error=e.message,
            )
            raise

        state = model.complete_action(hunk_index, success=True)
        model.invalidate()
        self.hunk_state_changed.emit(hunk_index, state.value)
        logger.info("Hunk action succeeded", file=self.file_path, hunk=hunk_index, action=action.value)

        self._busy = "refreshing"
        refreshed = await self._refetch()
        return HunkActionResult(self.file_path, hunk_index, action, state, refreshed)

    async def _call_service(self, action: HunkAction, hunk_index: int) -> None:
        if action is HunkAction.STAGE:
            await self.service.stage_hunk(self.file_path, hunk_index)
        elif action is HunkAction.UNSTAGE:
            await self.service.unstage_hunk(self.file_path, hunk_index)
        else:
            await self.service.revert_hunk(self.file_path, hunk_index)

    async def _refetch(self) -> bool:
        if self.refetch_delay:
            await asyncio.sleep(self.refetch_delay)
        try:
            await self.refresh()
        except RepositoryServiceFailure as e:
            # Snapshot stays invalidated: actions are refused until refresh() succeeds
            logger.warning("Re-fetch after hunk action failed", file=self.file_path, error=e.message)
            return False
        return True
