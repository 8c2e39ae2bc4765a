"""Types for file diffs, hunks and word-level changes."""

from dataclasses import dataclass, field
from enum import Enum


class DiffLineType(Enum):
    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"
    HEADER = "header"  # e.g. "\ No newline at end of file"

    @property
    def prefix(self) -> str:
        """Unified diff prefix character for this line type."""
        if self is DiffLineType.ADDITION:
            return "+"
        if self is DiffLineType.DELETION:
            return "-"
        if self is DiffLineType.CONTEXT:
            return " "
        return ""


@dataclass(frozen=True)
class DiffLine:
    """
    One line of a hunk, without its trailing newline.

    Context lines carry both line numbers, additions only the new one,
    deletions only the old one.
    """

    type: DiffLineType
    content: str
    old_line_number: int | None = None
    new_line_number: int | None = None


@dataclass(frozen=True)
class DiffHunkData:
    """A contiguous block of a file diff and its range header."""

    header: str
    lines: tuple[DiffLine, ...] = ()
    old_start: int = 0
    old_lines: int = 0
    new_start: int = 0
    new_lines: int = 0

    @property
    def additions(self) -> int:
        return sum(1 for line in self.lines if line.type is DiffLineType.ADDITION)

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.lines if line.type is DiffLineType.DELETION)

    def to_text(self) -> str:
        body = "\n".join(line.type.prefix + line.content for line in self.lines)
        return f"{self.header}\n{body}" if body else self.header


@dataclass(frozen=True)
class FileDiff:
    """All hunks of one file's diff."""

    path: str
    hunks: tuple[DiffHunkData, ...] = ()
    old_path: str | None = None
    binary: bool = False
    reported_additions: int | None = None
    reported_deletions: int | None = None

    @property
    def additions(self) -> int:
        """Backend-reported count when present, else counted from the hunks."""
        if self.reported_additions:
            return self.reported_additions
        return sum(hunk.additions for hunk in self.hunks)

    @property
    def deletions(self) -> int:
        if self.reported_deletions:
            return self.reported_deletions
        return sum(hunk.deletions for hunk in self.hunks)

    def to_text(self) -> str:
        """Hunks as copyable text, separated by blank lines."""
        return "\n\n".join(hunk.to_text() for hunk in self.hunks)


@dataclass(frozen=True)
class WordChange:
    """A token of a line; at most one of added/removed is set."""

    value: str
    added: bool = False
    removed: bool = False


@dataclass(frozen=True)
class WordDiff:
    """Token alignment of an old/new line pair."""

    old: tuple[WordChange, ...] = ()
    new: tuple[WordChange, ...] = ()


@dataclass(frozen=True)
class HunkInfo:
    """Summary of one hunk for navigation lists."""

    index: int
    header: str
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    additions: int
    deletions: int
    content_preview: str = ""


@dataclass(frozen=True)
class HunkPosition:
    """Line span a hunk covers in the new file."""

    index: int
    start_line: int
    end_line: int
    header: str


@dataclass
class SplitHunk:
    """Side-by-side rendering of a hunk; None marks a gap on that side."""

    left: list[DiffLine | None] = field(default_factory=list)
    right: list[DiffLine | None] = field(default_factory=list)
