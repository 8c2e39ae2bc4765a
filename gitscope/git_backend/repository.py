"""
Git repository access using pygit2
"""

import itertools
from datetime import datetime, timezone
from pathlib import Path
from typing import cast

import pygit2

from gitscope.constants import DEFAULT_CONTEXT_LINES, HEAD_REF, NO_NEWLINE_MARKER
from gitscope.diff.parser import format_hunk_patch, format_reverse_hunk_patch
from gitscope.diff.types import DiffHunkData, DiffLine, DiffLineType, FileDiff
from gitscope.errors import NotARepository
from gitscope.git_graph.types import CommitNode, CommitRef, RefKind


def file_diff_from_patch(patch: pygit2.Patch) -> FileDiff:
    """Convert one pygit2 patch into a FileDiff."""
    delta = patch.delta
    hunks: list[DiffHunkData] = []
    for hunk in patch.hunks:
        lines: list[DiffLine] = []
        for line in hunk.lines:
            content = line.content.removesuffix("\n")
            if line.origin == "+":
                lines.append(DiffLine(DiffLineType.ADDITION, content, new_line_number=line.new_lineno))
            elif line.origin == "-":
                lines.append(DiffLine(DiffLineType.DELETION, content, old_line_number=line.old_lineno))
            elif line.origin == " ":
                lines.append(
                    DiffLine(
                        DiffLineType.CONTEXT,
                        content,
                        old_line_number=line.old_lineno,
                        new_line_number=line.new_lineno,
                    )
                )
            else:
                # "<", ">", "=": end-of-file newline markers
                lines.append(DiffLine(DiffLineType.HEADER, NO_NEWLINE_MARKER))
        hunks.append(
            DiffHunkData(
                header=hunk.header.strip(),
                lines=tuple(lines),
                old_start=hunk.old_start,
                old_lines=hunk.old_lines,
                new_start=hunk.new_start,
                new_lines=hunk.new_lines,
            )
        )

    _, additions, deletions = patch.line_stats
    old_path = delta.old_file.path
    return FileDiff(
        path=delta.new_file.path or old_path,
        hunks=tuple(hunks),
        old_path=old_path if old_path != delta.new_file.path else None,
        binary=delta.is_binary,
        reported_additions=additions,
        reported_deletions=deletions,
    )


class GitScopeRepository:
    """Reads history and diffs, and applies single-hunk patches."""

    def __init__(self, repo_path: str | None = None) -> None:
        """Initialize repository"""
        if repo_path is None:
            repo_path = self._find_repo()

        try:
            self.repo = pygit2.Repository(repo_path)
        except pygit2.GitError as e:
            raise NotARepository(repo_path) from e

    def _find_repo(self) -> str:
        """Find git repository in current directory or parents"""
        current = Path.cwd()
        while current != current.parent:
            if (current / ".git").exists():
                return str(current)
            current = current.parent
        raise NotARepository(str(Path.cwd()))

    # -- history -------------------------------------------------------------

    def get_ref_labels(self) -> dict[str, list[CommitRef]]:
        """Map commit oid -> refs pointing at it (HEAD, branches, remotes, tags)."""
        labels: dict[str, list[CommitRef]] = {}

        def add(commit: pygit2.Commit, ref: CommitRef) -> None:
            labels.setdefault(str(commit.id), []).append(ref)

        if not self.repo.head_is_unborn:
            add(self.repo.head.peel(pygit2.Commit), CommitRef(HEAD_REF, RefKind.HEAD))

        for branch_name in self.repo.branches.local:
            branch = self.repo.branches.local[branch_name]
            add(branch.peel(pygit2.Commit), CommitRef(branch_name, RefKind.BRANCH))

        for branch_name in self.repo.branches.remote:
            if branch_name.endswith("/HEAD"):
                continue
            branch = self.repo.branches.remote[branch_name]
            add(branch.peel(pygit2.Commit), CommitRef(branch_name, RefKind.REMOTE))

        for ref_name in self.repo.references:
            if not ref_name.startswith("refs/tags/"):
                continue
            try:
                commit = self.repo.references[ref_name].peel(pygit2.Commit)
            except (pygit2.GitError, ValueError):
                continue  # Tag of a tree or blob
            add(commit, CommitRef(ref_name[len("refs/tags/") :], RefKind.TAG))

        return labels

    def list_commits(self, max_count: int, skip: int = 0) -> list[CommitNode]:
        """Commits reachable from any ref, children before parents, newest first."""
        labels = self.get_ref_labels()
        if not labels:
            return []

        tips = [pygit2.Oid(hex=oid) for oid in labels]
        sort = pygit2.enums.SortMode.TOPOLOGICAL | pygit2.enums.SortMode.TIME
        walker = self.repo.walk(tips[0], sort)
        for tip in tips[1:]:
            walker.push(tip)

        commits = []
        for c in itertools.islice(walker, skip, skip + max_count):
            oid = str(c.id)
            commits.append(
                CommitNode(
                    hash=oid,
                    parent_hashes=tuple(str(p) for p in c.parent_ids),
                    refs=tuple(labels.get(oid, ())),
                    author=c.author.name,
                    email=c.author.email,
                    date=datetime.fromtimestamp(c.commit_time, tz=timezone.utc).isoformat(),
                    timestamp=c.commit_time,
                    message=c.message.strip().split("\n")[0],
                )
            )
        return commits

    # -- diffs ---------------------------------------------------------------

    def _head_tree(self) -> pygit2.Tree:
        if self.repo.head_is_unborn:
            return cast(pygit2.Tree, self.repo[self.repo.TreeBuilder().write()])
        return self.repo.head.peel(pygit2.Tree)

    def _diff(self, staged: bool, context_lines: int) -> pygit2.Diff:
        index = self.repo.index
        index.read()
        if staged:
            return index.diff_to_tree(self._head_tree(), context_lines=context_lines)
        return index.diff_to_workdir(context_lines=context_lines)

    def get_file_diff(
        self, file_path: str, staged: bool = False, context_lines: int = DEFAULT_CONTEXT_LINES
    ) -> FileDiff:
        """Unstaged (index -> workdir) or staged (HEAD -> index) diff of one file."""
        for patch in self._diff(staged, context_lines):
            if patch is None:
                continue
            delta = patch.delta
            if file_path in (delta.new_file.path, delta.old_file.path):
                return file_diff_from_patch(patch)
        return FileDiff(path=file_path)

    def _select_hunk(self, file_diff: FileDiff, hunk_index: int) -> DiffHunkData:
        if not 0 <= hunk_index < len(file_diff.hunks):
            raise ValueError(
                f"Hunk index {hunk_index} out of range (file has {len(file_diff.hunks)} hunks)"
            )
        return file_diff.hunks[hunk_index]

    def _apply(self, patch_text: str, location: pygit2.enums.ApplyLocation) -> None:
        diff = pygit2.Diff.parse_diff(patch_text)
        self.repo.apply(diff, location)

    # -- hunk actions ----------------------------------------------------------

    def stage_hunk(
        self, file_path: str, hunk_index: int, context_lines: int = DEFAULT_CONTEXT_LINES
    ) -> None:
        """Apply one hunk of the unstaged diff to the index."""
        file_diff = self.get_file_diff(file_path, staged=False, context_lines=context_lines)
        hunk = self._select_hunk(file_diff, hunk_index)
        self._apply(format_hunk_patch(file_path, hunk), pygit2.enums.ApplyLocation.INDEX)

    def unstage_hunk(
        self, file_path: str, hunk_index: int, context_lines: int = DEFAULT_CONTEXT_LINES
    ) -> None:
        """Undo one hunk of the staged diff in the index."""
        file_diff = self.get_file_diff(file_path, staged=True, context_lines=context_lines)
        hunk = self._select_hunk(file_diff, hunk_index)
        self._apply(format_reverse_hunk_patch(file_path, hunk), pygit2.enums.ApplyLocation.INDEX)

    def revert_hunk(
        self, file_path: str, hunk_index: int, context_lines: int = DEFAULT_CONTEXT_LINES
    ) -> None:
        """Discard one hunk of the unstaged diff from the working tree."""
        file_diff = self.get_file_diff(file_path, staged=False, context_lines=context_lines)
        hunk = self._select_hunk(file_diff, hunk_index)
        self._apply(format_reverse_hunk_patch(file_path, hunk), pygit2.enums.ApplyLocation.WORKDIR)
