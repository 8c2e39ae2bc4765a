"""Types for commit graph layout."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from gitscope.constants import HEAD_REF, SHORT_HASH_LENGTH, TAG_REF_PREFIX

if TYPE_CHECKING:
    from gitscope.git_graph.layout import LayoutState


class RefKind(Enum):
    """Kinds of labels attached to a commit."""

    BRANCH = "branch"
    TAG = "tag"
    REMOTE = "remote"
    HEAD = "head"


@dataclass(frozen=True)
class CommitRef:
    """A branch/tag/HEAD label attached to a commit."""

    name: str
    kind: RefKind

    @property
    def is_head(self) -> bool:
        return self.kind is RefKind.HEAD


def parse_ref(label: str) -> CommitRef:
    """Classify a raw ref label as reported by the repository service.

    "HEAD" is the head marker, "tag: v1" a tag, anything with a slash a
    remote-tracking branch, everything else a local branch.
    """
    if label == HEAD_REF:
        return CommitRef(HEAD_REF, RefKind.HEAD)
    if label.startswith(TAG_REF_PREFIX):
        return CommitRef(label[len(TAG_REF_PREFIX) :], RefKind.TAG)
    if "/" in label:
        return CommitRef(label, RefKind.REMOTE)
    return CommitRef(label, RefKind.BRANCH)


@dataclass(frozen=True)
class CommitNode:
    """A commit as received from the repository service. Never mutated."""

    hash: str
    parent_hashes: tuple[str, ...] = ()
    refs: tuple[CommitRef, ...] = ()
    author: str = ""
    email: str = ""
    date: str = ""
    timestamp: int = 0
    message: str = ""

    @property
    def is_merge(self) -> bool:
        return len(self.parent_hashes) > 1

    @property
    def short_hash(self) -> str:
        return self.hash[:SHORT_HASH_LENGTH]

    @property
    def first_branch(self) -> CommitRef | None:
        """First local branch ref, the one that picks the branch colour."""
        for ref in self.refs:
            if ref.kind is RefKind.BRANCH:
                return ref
        return None

    @classmethod
    def create(
        cls,
        hash: str,
        parents: list[str] | tuple[str, ...] = (),
        refs: list[str] | tuple[str, ...] = (),
        **kwargs: object,
    ) -> "CommitNode":
        """Build a node from plain hashes and raw ref labels."""
        return cls(
            hash=hash,
            parent_hashes=tuple(parents),
            refs=tuple(parse_ref(label) for label in refs),
            **kwargs,  # type: ignore[arg-type]
        )


class EdgeKind(Enum):
    STRAIGHT = "straight"  # Same column, vertical segment
    BRANCH = "branch"  # Primary parent living in another column
    MERGE = "merge"  # Second or later parent of a merge


@dataclass(frozen=True)
class ParentLink:
    """Where a row's parent lives, whether or not it is in the window yet."""

    hash: str
    column: int


@dataclass(frozen=True)
class GraphRow:
    """A commit with its layout position."""

    commit: CommitNode
    row: int
    column: int
    color_index: int
    parents: tuple[ParentLink, ...] = ()


@dataclass(frozen=True)
class GraphEdge:
    """A rendered connection from a child row down to one of its parents."""

    from_hash: str
    to_hash: str
    from_column: int
    to_column: int
    color_index: int
    kind: EdgeKind = EdgeKind.STRAIGHT


@dataclass
class GraphLayout:
    """
    Result of laying out a window of commits.

    rows/edges/max_column are what a renderer needs. ``state`` is the fold
    state that lets GraphPaginator continue the layout when more commits
    arrive; it is excluded from equality so two layouts compare by what
    they render.
    """

    rows: list[GraphRow] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    max_column: int = 1
    state: "LayoutState | None" = field(default=None, repr=False, compare=False)

    def __len__(self) -> int:
        return len(self.rows)

    def row_for(self, commit_hash: str) -> GraphRow | None:
        if self.state is not None:
            index = self.state.row_of.get(commit_hash)
            return self.rows[index] if index is not None else None
        for row in self.rows:
            if row.commit.hash == commit_hash:
                return row
        return None

    @property
    def dangling_edges(self) -> list[GraphEdge]:
        """Edges whose parent has not (yet) appeared in the window."""
        if self.state is None:
            return []
        return [edge for edges in self.state.pending.values() for edge in edges]

    def filter(self, query: str) -> list[GraphRow]:
        """Rows matching a search query, layout untouched."""
        needle = query.lower()
        if not needle:
            return list(self.rows)

        matches = []
        for row in self.rows:
            commit = row.commit
            if (
                needle in commit.message.lower()
                or needle in commit.author.lower()
                or needle in commit.hash.lower()
                or any(needle in ref.name.lower() for ref in commit.refs)
            ):
                matches.append(row)
        return matches
