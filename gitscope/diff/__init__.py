"""File diffs, word-level highlighting and hunk staging"""

from gitscope.diff.hunks import HunkAction, HunkModel, HunkState
from gitscope.diff.parser import format_hunk_patch, format_reverse_hunk_patch, parse_unified_diff
from gitscope.diff.types import DiffHunkData, DiffLine, DiffLineType, FileDiff, WordChange, WordDiff
from gitscope.diff.word_diff import split_lines, word_diff

__all__ = [
    "DiffHunkData",
    "DiffLine",
    "DiffLineType",
    "FileDiff",
    "HunkAction",
    "HunkModel",
    "HunkState",
    "WordChange",
    "WordDiff",
    "format_hunk_patch",
    "format_reverse_hunk_patch",
    "parse_unified_diff",
    "split_lines",
    "word_diff",
]
