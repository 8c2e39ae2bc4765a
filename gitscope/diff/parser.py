"""
Unified diff parsing and single-hunk patch generation.

parse_unified_diff() turns `git diff` output into FileDiff records. The
format_* helpers go the other way for one hunk, producing the patch text
that stages, unstages or reverts exactly that hunk.
"""

import re

from gitscope.constants import NO_NEWLINE_MARKER
from gitscope.diff.types import DiffHunkData, DiffLine, DiffLineType, FileDiff

HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")


def parse_hunk_header(header: str) -> tuple[int, int, int, int] | None:
    """Parse "@@ -a,b +c,d @@" into (old_start, old_lines, new_start, new_lines).

    Omitted counts default to 1, as in the unified diff format. Returns
    None for anything that is not a hunk header.
    """
    match = HUNK_HEADER_RE.match(header.strip())
    if not match:
        return None
    old_start, old_lines, new_start, new_lines, _ = match.groups()
    return (
        int(old_start),
        int(old_lines) if old_lines is not None else 1,
        int(new_start),
        int(new_lines) if new_lines is not None else 1,
    )


def _strip_prefix_path(path: str) -> str | None:
    path = path.split("\t")[0].strip()
    if path == "/dev/null":
        return None
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


class _HunkBuilder:
    """Accumulates hunk lines while assigning old/new line numbers."""

    def __init__(self, header: str, ranges: tuple[int, int, int, int]) -> None:
        self.header = header
        self.old_start, self.old_lines, self.new_start, self.new_lines = ranges
        self.old_remaining = self.old_lines
        self.new_remaining = self.new_lines
        self.old_no = self.old_start
        self.new_no = self.new_start
        self.lines: list[DiffLine] = []

    @property
    def complete(self) -> bool:
        return self.old_remaining <= 0 and self.new_remaining <= 0

    def add(self, raw: str) -> None:
        if raw.startswith("\\"):
            self.lines.append(DiffLine(DiffLineType.HEADER, raw))
            return

        prefix, content = raw[:1], raw[1:]
        if prefix == "+":
            self.lines.append(DiffLine(DiffLineType.ADDITION, content, new_line_number=self.new_no))
            self.new_no += 1
            self.new_remaining -= 1
        elif prefix == "-":
            self.lines.append(DiffLine(DiffLineType.DELETION, content, old_line_number=self.old_no))
            self.old_no += 1
            self.old_remaining -= 1
        else:
            # " " prefix, or an empty line whose trailing space was stripped
            self.lines.append(
                DiffLine(
                    DiffLineType.CONTEXT,
                    content,
                    old_line_number=self.old_no,
                    new_line_number=self.new_no,
                )
            )
            self.old_no += 1
            self.new_no += 1
            self.old_remaining -= 1
            self.new_remaining -= 1

    def build(self) -> DiffHunkData:
        return DiffHunkData(
            header=self.header,
            lines=tuple(self.lines),
            old_start=self.old_start,
            old_lines=self.old_lines,
            new_start=self.new_start,
            new_lines=self.new_lines,
        )


class _FileBuilder:
    def __init__(self, path: str = "") -> None:
        self.path = path
        self.old_path: str | None = None
        self.binary = False
        self.hunks: list[DiffHunkData] = []

    def build(self) -> FileDiff:
        old_path = self.old_path if self.old_path and self.old_path != self.path else None
        return FileDiff(path=self.path, hunks=tuple(self.hunks), old_path=old_path, binary=self.binary)


def parse_unified_diff(text: str) -> list[FileDiff]:
    """Parse unified diff text (one or many files) into FileDiff records."""
    files: list[FileDiff] = []
    current: _FileBuilder | None = None
    hunk: _HunkBuilder | None = None

    def finish_hunk() -> None:
        nonlocal hunk
        if hunk is not None and current is not None:
            current.hunks.append(hunk.build())
        hunk = None

    def finish_file() -> None:
        nonlocal current
        finish_hunk()
        if current is not None:
            files.append(current.build())
        current = None

    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    for raw in lines:
        raw = raw.rstrip("\r")

        # A trailing marker may follow the line that completed the hunk
        if hunk is not None and (not hunk.complete or raw.startswith("\\")):
            hunk.add(raw)
            continue

        if raw.startswith("@@"):
            ranges = parse_hunk_header(raw)
            if ranges is None:
                continue
            finish_hunk()
            if current is None:
                current = _FileBuilder()
            hunk = _HunkBuilder(raw.strip(), ranges)
            continue

        finish_hunk()

        if raw.startswith("diff --git "):
            finish_file()
            parts = raw[len("diff --git ") :].split(" b/", 1)
            current = _FileBuilder(parts[1] if len(parts) == 2 else "")
            current.old_path = _strip_prefix_path(parts[0])
        elif raw.startswith("--- "):
            if current is None or current.hunks:
                finish_file()
                current = _FileBuilder()
            old = _strip_prefix_path(raw[4:])
            if old is not None:
                current.old_path = old
                if not current.path:
                    current.path = old
        elif raw.startswith("+++ ") and current is not None:
            new = _strip_prefix_path(raw[4:])
            if new is not None:
                current.path = new
        elif raw.startswith("rename from ") and current is not None:
            current.old_path = raw[len("rename from ") :]
        elif raw.startswith("rename to ") and current is not None:
            current.path = raw[len("rename to ") :]
        elif current is not None and (raw.startswith("Binary files ") or raw == "GIT binary patch"):
            current.binary = True

    finish_file()
    return files


def _patch_header(file_path: str) -> str:
    return f"diff --git a/{file_path} b/{file_path}\n--- a/{file_path}\n+++ b/{file_path}\n"


def _ranges_header(old_start: int, old_lines: int, new_start: int, new_lines: int) -> str:
    return f"@@ -{old_start},{old_lines} +{new_start},{new_lines} @@"


def format_hunk_patch(file_path: str, hunk: DiffHunkData) -> str:
    """Patch text that applies exactly this hunk."""
    parts = [_patch_header(file_path), hunk.header.rstrip("\n"), "\n"]
    for line in hunk.lines:
        if line.type is DiffLineType.HEADER:
            parts.append(line.content or NO_NEWLINE_MARKER)
        else:
            parts.append(line.type.prefix + line.content)
        parts.append("\n")
    return "".join(parts)


def format_reverse_hunk_patch(file_path: str, hunk: DiffHunkData) -> str:
    """Patch text that undoes this hunk: ranges swapped, +/- swapped."""
    header = _ranges_header(hunk.new_start, hunk.new_lines, hunk.old_start, hunk.old_lines)
    parts = [_patch_header(file_path), header, "\n"]
    for line in hunk.lines:
        if line.type is DiffLineType.ADDITION:
            parts.append("-" + line.content)
        elif line.type is DiffLineType.DELETION:
            parts.append("+" + line.content)
        elif line.type is DiffLineType.CONTEXT:
            parts.append(" " + line.content)
        else:
            parts.append(line.content or NO_NEWLINE_MARKER)
        parts.append("\n")
    return "".join(parts)
