"""
Word-level diff between a deleted line and the added line that replaced it.

The alignment is greedy and positional: both token streams are walked in
lock-step and a mismatch marks one token removed and one added. It does
not look for a minimal edit script, so a long insertion early in a line
shifts every later token. Pairing is only ever attempted between a
deletion and the addition right after it, where lines are usually close.
"""

import re
from collections.abc import Sequence

from gitscope.diff.types import DiffHunkData, DiffLine, DiffLineType, SplitHunk, WordChange, WordDiff

# Capturing group keeps the whitespace runs as tokens, so "".join() is lossless
_TOKEN_RE = re.compile(r"(\s+)")


def tokenize(line: str) -> list[str]:
    """Split on whitespace runs, keeping the whitespace (and edge empties)."""
    return _TOKEN_RE.split(line)


def word_diff(old_line: str, new_line: str) -> WordDiff:
    """Align the tokens of an old/new line pair."""
    old_tokens = tokenize(old_line)
    new_tokens = tokenize(new_line)
    old_result: list[WordChange] = []
    new_result: list[WordChange] = []

    i = j = 0
    while i < len(old_tokens) or j < len(new_tokens):
        if i >= len(old_tokens):
            new_result.append(WordChange(new_tokens[j], added=True))
            j += 1
        elif j >= len(new_tokens):
            old_result.append(WordChange(old_tokens[i], removed=True))
            i += 1
        elif old_tokens[i] == new_tokens[j]:
            old_result.append(WordChange(old_tokens[i]))
            new_result.append(WordChange(new_tokens[j]))
            i += 1
            j += 1
        else:
            old_result.append(WordChange(old_tokens[i], removed=True))
            new_result.append(WordChange(new_tokens[j], added=True))
            i += 1
            j += 1

    return WordDiff(old=tuple(old_result), new=tuple(new_result))


def pair_index(lines: Sequence[DiffLine], index: int) -> int | None:
    """Index of the deletion line of the pair ``lines[index]`` belongs to.

    A deletion pairs with an addition directly after it; an addition with
    a deletion directly before it. Anything else is unpaired.
    """
    line = lines[index]
    if line.type is DiffLineType.DELETION:
        if index + 1 < len(lines) and lines[index + 1].type is DiffLineType.ADDITION:
            return index
    elif line.type is DiffLineType.ADDITION:
        if index > 0 and lines[index - 1].type is DiffLineType.DELETION:
            return index - 1
    return None


def paired_word_diff(lines: Sequence[DiffLine], index: int) -> WordDiff | None:
    """Word diff for a line under the pairing rule, None when unpaired."""
    start = pair_index(lines, index)
    if start is None:
        return None
    return word_diff(lines[start].content, lines[start + 1].content)


def split_lines(hunk: DiffHunkData) -> SplitHunk:
    """Arrange a hunk for side-by-side display."""
    split = SplitHunk()
    lines = hunk.lines
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.type is DiffLineType.CONTEXT:
            split.left.append(line)
            split.right.append(line)
            i += 1
        elif line.type is DiffLineType.DELETION:
            following = lines[i + 1] if i + 1 < len(lines) else None
            if following is not None and following.type is DiffLineType.ADDITION:
                split.left.append(line)
                split.right.append(following)
                i += 2
            else:
                split.left.append(line)
                split.right.append(None)
                i += 1
        elif line.type is DiffLineType.ADDITION:
            split.left.append(None)
            split.right.append(line)
            i += 1
        else:
            i += 1
    return split
