"""
HunkModel - one snapshot of a file's diff and the staging state of its hunks.

Hunk indices are positional: staging, unstaging or reverting any hunk
moves the boundaries of the others. A model is therefore only valid until
the next action on its file succeeds; after that it is invalidated and
every index-based query raises StaleHunkIndex until a fresh snapshot is
fetched.

Per-hunk state machine::

    UNSTAGED --stage--> STAGING --ok--> STAGED
                                --fail--> UNSTAGED
    STAGED --unstage--> UNSTAGING --ok--> UNSTAGED
                                  --fail--> STAGED
    UNSTAGED --revert--> REVERTING --ok--> REVERTED (hidden)
                                   --fail--> UNSTAGED

At most one hunk per snapshot is in flight at a time.
"""

import itertools
from enum import Enum

from gitscope.constants import HUNK_PREVIEW_LENGTH
from gitscope.diff.types import DiffHunkData, DiffLineType, FileDiff, HunkInfo, HunkPosition, WordDiff
from gitscope.diff.word_diff import pair_index, word_diff
from gitscope.errors import ConcurrentHunkAction, InvalidHunkTransition, StaleHunkIndex, UnknownHunkIndex


class HunkState(Enum):
    UNSTAGED = "unstaged"
    STAGING = "staging"
    STAGED = "staged"
    UNSTAGING = "unstaging"
    REVERTING = "reverting"
    REVERTED = "reverted"

    @property
    def in_flight(self) -> bool:
        return self in (HunkState.STAGING, HunkState.UNSTAGING, HunkState.REVERTING)


class HunkAction(Enum):
    STAGE = "stage"
    UNSTAGE = "unstage"
    REVERT = "revert"


# (settled state, action) -> in-flight state
_BEGIN: dict[tuple[HunkState, HunkAction], HunkState] = {
    (HunkState.UNSTAGED, HunkAction.STAGE): HunkState.STAGING,
    (HunkState.STAGED, HunkAction.UNSTAGE): HunkState.UNSTAGING,
    (HunkState.UNSTAGED, HunkAction.REVERT): HunkState.REVERTING,
}

# in-flight state -> (state on success, state on failure)
_SETTLE: dict[HunkState, tuple[HunkState, HunkState]] = {
    HunkState.STAGING: (HunkState.STAGED, HunkState.UNSTAGED),
    HunkState.UNSTAGING: (HunkState.UNSTAGED, HunkState.STAGED),
    HunkState.REVERTING: (HunkState.REVERTED, HunkState.UNSTAGED),
}

_generations = itertools.count(1)


class HunkModel:
    """Structured hunks of one file plus per-hunk staging state."""

    def __init__(self, diff: FileDiff, staged: bool = False) -> None:
        self.diff = diff
        self.staged = staged
        self.generation = next(_generations)
        self._invalidated = False
        initial = HunkState.STAGED if staged else HunkState.UNSTAGED
        self._states: list[HunkState] = [initial] * len(diff.hunks)
        self._word_diffs: dict[tuple[int, int], WordDiff] = {}

    @property
    def file_path(self) -> str:
        return self.diff.path

    @property
    def hunks(self) -> tuple[DiffHunkData, ...]:
        return self.diff.hunks

    def __len__(self) -> int:
        return len(self.diff.hunks)

    # -- snapshot validity -------------------------------------------------

    @property
    def invalidated(self) -> bool:
        return self._invalidated

    def invalidate(self) -> None:
        """Mark every index of this snapshot as stale."""
        self._invalidated = True
        self._word_diffs.clear()

    def _check_index(self, hunk_index: int) -> None:
        if self._invalidated:
            raise StaleHunkIndex(self.file_path, hunk_index)
        if not 0 <= hunk_index < len(self.diff.hunks):
            raise UnknownHunkIndex(hunk_index, len(self.diff.hunks))

    # -- aggregate queries -------------------------------------------------

    @property
    def line_count(self) -> int:
        return sum(len(hunk.lines) for hunk in self.diff.hunks)

    @property
    def additions_count(self) -> int:
        return sum(hunk.additions for hunk in self.diff.hunks)

    @property
    def deletions_count(self) -> int:
        return sum(hunk.deletions for hunk in self.diff.hunks)

    def hunk(self, hunk_index: int) -> DiffHunkData:
        self._check_index(hunk_index)
        return self.diff.hunks[hunk_index]

    def visible_hunks(self) -> list[tuple[int, DiffHunkData]]:
        """Hunks still shown; a reverted hunk drops out of the view."""
        return [
            (i, hunk)
            for i, (hunk, state) in enumerate(zip(self.diff.hunks, self._states, strict=True))
            if state is not HunkState.REVERTED
        ]

    def word_diff_for(self, hunk_index: int, line_index: int) -> WordDiff | None:
        """Word diff for a line, identical for both lines of a pair."""
        lines = self.hunk(hunk_index).lines
        if not 0 <= line_index < len(lines):
            raise IndexError(f"Line index {line_index} out of range for hunk {hunk_index}")

        start = pair_index(lines, line_index)
        if start is None:
            return None

        key = (hunk_index, start)
        cached = self._word_diffs.get(key)
        if cached is None:
            cached = word_diff(lines[start].content, lines[start + 1].content)
            self._word_diffs[key] = cached
        return cached

    def hunk_infos(self) -> list[HunkInfo]:
        infos = []
        for i, hunk in enumerate(self.diff.hunks):
            preview = ""
            for line in hunk.lines:
                if line.type in (DiffLineType.ADDITION, DiffLineType.DELETION):
                    preview = line.content[:HUNK_PREVIEW_LENGTH]
                    break
            infos.append(
                HunkInfo(
                    index=i,
                    header=hunk.header,
                    old_start=hunk.old_start,
                    old_lines=hunk.old_lines,
                    new_start=hunk.new_start,
                    new_lines=hunk.new_lines,
                    additions=hunk.additions,
                    deletions=hunk.deletions,
                    content_preview=preview,
                )
            )
        return infos

    def positions(self) -> list[HunkPosition]:
        return [
            HunkPosition(
                index=i,
                start_line=hunk.new_start,
                end_line=hunk.new_start + max(hunk.new_lines - 1, 0),
                header=hunk.header,
            )
            for i, hunk in enumerate(self.diff.hunks)
        ]

    def navigate(self, current_line: int, direction: str) -> HunkPosition | None:
        """Next/previous hunk relative to a line of the new file, wrapping around."""
        positions = self.positions()
        if direction not in ("next", "previous"):
            raise ValueError(f"Invalid direction '{direction}': expected 'next' or 'previous'")
        if not positions:
            return None

        if direction == "next":
            for position in positions:
                if position.start_line > current_line:
                    return position
            return positions[0]

        for position in reversed(positions):
            if position.start_line < current_line:
                return position
        return positions[-1]

    # -- staging state -----------------------------------------------------

    def state_of(self, hunk_index: int) -> HunkState:
        self._check_index(hunk_index)
        return self._states[hunk_index]

    @property
    def staged_indices(self) -> frozenset[int]:
        """Indices currently known to be staged in this snapshot."""
        return frozenset(i for i, state in enumerate(self._states) if state is HunkState.STAGED)

    @property
    def busy(self) -> bool:
        return any(state.in_flight for state in self._states)

    def begin_action(self, hunk_index: int, action: HunkAction) -> HunkState:
        """Move a settled hunk into its in-flight state.

        Only one hunk of the file may be in flight: whichever action lands
        first shifts the positions of every other hunk in this snapshot.
        """
        state = self.state_of(hunk_index)
        if state.in_flight:
            raise ConcurrentHunkAction(self.file_path, hunk_index, state.value)
        for other in self._states:
            if other.in_flight:
                raise ConcurrentHunkAction(self.file_path, hunk_index, other.value)

        target = _BEGIN.get((state, action))
        if target is None:
            raise InvalidHunkTransition(hunk_index, state.value, action.value)

        self._states[hunk_index] = target
        return target

    def complete_action(self, hunk_index: int, success: bool) -> HunkState:
        """Settle an in-flight hunk after the backend answered.

        Works on an invalidated snapshot too: an action that was already
        running when another one invalidated the file still has to settle.
        """
        if not 0 <= hunk_index < len(self._states):
            raise UnknownHunkIndex(hunk_index, len(self._states))
        state = self._states[hunk_index]
        if not state.in_flight:
            raise InvalidHunkTransition(hunk_index, state.value, "complete")

        on_success, on_failure = _SETTLE[state]
        self._states[hunk_index] = on_success if success else on_failure
        return self._states[hunk_index]
