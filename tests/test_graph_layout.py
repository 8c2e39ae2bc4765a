"""Tests for commit graph lane layout."""

import random

import pytest

from gitscope.git_graph.colors import BranchColorRegistry, hash_branch_name
from gitscope.git_graph.layout import GraphLayoutEngine
from gitscope.git_graph.paginator import GraphPaginator
from gitscope.git_graph.types import CommitNode, EdgeKind, RefKind, parse_ref


def node(hash, parents=(), refs=(), message=""):
    return CommitNode.create(hash, parents=parents, refs=refs, message=message, author="Ann")


class TestColumns:
    """Column assignment."""

    def test_linear_history_single_column(self):
        layout = GraphLayoutEngine().layout([node("c", ["b"]), node("b", ["a"]), node("a")])

        assert [row.column for row in layout.rows] == [0, 0, 0]
        assert [row.row for row in layout.rows] == [0, 1, 2]
        assert layout.max_column == 1
        assert all(edge.kind is EdgeKind.STRAIGHT for edge in layout.edges)

    def test_shared_parent_processed_first(self):
        """A commit with two children: only one child continues its column."""
        layout = GraphLayoutEngine().layout([node("A"), node("B", ["A"]), node("C", ["A"])])

        a, b, c = layout.rows
        assert b.column != c.column
        assert a.column == b.column
        assert c.column == 1

    def test_shared_parent_processed_last(self):
        layout = GraphLayoutEngine().layout([node("B", ["A"]), node("C", ["A"]), node("A")])

        b, c, a = layout.rows
        assert b.column == 0
        assert c.column == 1
        assert a.column == 0
        kinds = {(e.from_hash, e.to_hash): e.kind for e in layout.edges}
        assert kinds[("B", "A")] is EdgeKind.STRAIGHT
        assert kinds[("C", "A")] is EdgeKind.BRANCH

    def test_merge_reserves_new_column_for_second_parent(self):
        layout = GraphLayoutEngine().layout(
            [node("M", ["A", "F"]), node("F", ["A"]), node("A")]
        )

        m, f, a = layout.rows
        assert m.column == 0
        assert f.column == 1
        assert a.column == 0
        assert layout.max_column == 2
        kinds = {(e.from_hash, e.to_hash): e.kind for e in layout.edges}
        assert kinds[("M", "F")] is EdgeKind.MERGE
        assert kinds[("F", "A")] is EdgeKind.BRANCH

    def test_freed_column_is_reused(self):
        # Side branch F ends in A; the next unrelated root takes column 1 again
        layout = GraphLayoutEngine().layout(
            [
                node("M", ["A", "F"]),
                node("F", ["A"]),
                node("A", ["R"]),
                node("X", ["R"]),
                node("R"),
            ]
        )
        columns = {row.commit.hash: row.column for row in layout.rows}
        assert columns["X"] == 1
        assert layout.max_column == 2

    def test_row_parent_links(self):
        layout = GraphLayoutEngine().layout([node("M", ["A", "F"])])

        (row,) = layout.rows
        assert [(link.hash, link.column) for link in row.parents] == [("A", 0), ("F", 1)]
        assert layout.max_column == 2

    def test_empty_input(self):
        layout = GraphLayoutEngine().layout([])

        assert layout.rows == []
        assert layout.edges == []
        assert layout.max_column == 1


class TestEdges:
    """Edge emission and dangling edges."""

    def test_every_edge_has_both_endpoints(self):
        commits = [node("M", ["A", "F"]), node("F", ["A"]), node("A")]
        layout = GraphLayoutEngine().layout(commits)
        hashes = {c.hash for c in commits}

        assert len(layout.edges) == 3
        for edge in layout.edges:
            assert edge.from_hash in hashes
            assert edge.to_hash in hashes

    def test_parent_outside_window_is_dangling(self):
        layout = GraphLayoutEngine().layout([node("B", ["A"])])

        assert layout.edges == []
        assert len(layout.dangling_edges) == 1
        assert layout.dangling_edges[0].to_hash == "A"

    def test_edge_colors(self):
        engine = GraphLayoutEngine(palette_size=12)
        layout = engine.layout([node("M", ["A", "F"]), node("F", ["A"]), node("A")])

        rows = {row.commit.hash: row for row in layout.rows}
        for edge in layout.edges:
            if edge.from_column == edge.to_column:
                assert edge.color_index == rows[edge.from_hash].color_index
            else:
                assert edge.color_index == edge.to_column % 12

    def test_duplicate_commit_is_skipped(self):
        layout = GraphLayoutEngine().layout([node("B", ["A"]), node("A"), node("A")])

        assert [row.commit.hash for row in layout.rows] == ["B", "A"]


class TestRowColors:
    """Branch-driven row colours."""

    def test_branch_ref_picks_color(self):
        layout = GraphLayoutEngine().layout([node("b", ["a"], refs=["HEAD", "main"]), node("a")])

        assert layout.rows[0].color_index == hash_branch_name("main") % 12
        assert layout.rows[0].color_index == 1

    def test_no_branch_uses_column(self):
        layout = GraphLayoutEngine().layout([node("M", ["A", "F"]), node("F", ["A"]), node("A")])

        assert layout.rows[1].color_index == 1

    def test_colors_are_stable_across_layouts(self):
        registry = BranchColorRegistry()
        engine = GraphLayoutEngine(branch_colors=registry)
        first = engine.layout([node("a", refs=["feature"])])
        second = engine.layout([node("x", refs=["other"]), node("y", refs=["feature"])])

        assert first.rows[0].color_index == second.rows[1].color_index
        assert "feature" in registry


class TestRefParsing:
    """Ref label classification."""

    def test_labels(self):
        assert parse_ref("HEAD").kind is RefKind.HEAD
        assert parse_ref("tag: v1.0").kind is RefKind.TAG
        assert parse_ref("tag: v1.0").name == "v1.0"
        assert parse_ref("origin/main").kind is RefKind.REMOTE
        assert parse_ref("main").kind is RefKind.BRANCH

    def test_first_branch_skips_head_and_tags(self):
        commit = node("a", refs=["HEAD", "tag: v1", "origin/dev", "dev"])

        assert commit.first_branch is not None
        assert commit.first_branch.name == "dev"


class TestFilter:
    """Row filtering."""

    def test_filter_matches_message_author_hash_and_refs(self):
        layout = GraphLayoutEngine().layout(
            [
                node("abc123", ["def456"], refs=["release"], message="Fix parser"),
                node("def456", message="Initial commit"),
            ]
        )

        assert [r.commit.hash for r in layout.filter("PARSER")] == ["abc123"]
        assert [r.commit.hash for r in layout.filter("def4")] == ["def456"]
        assert [r.commit.hash for r in layout.filter("releas")] == ["abc123"]
        assert len(layout.filter("ann")) == 2
        assert len(layout.filter("")) == 2

    def test_filter_keeps_layout(self):
        layout = GraphLayoutEngine().layout([node("M", ["A", "F"]), node("F", ["A"]), node("A")])

        (row,) = layout.filter("F")
        assert row.column == 1
        assert row.row == 1


def random_history(seed, size=40):
    """Children-first DAG with forks, merges and several roots."""
    rng = random.Random(seed)
    commits = []
    for i in range(size):
        later = list(range(i + 1, size))
        count = min(len(later), rng.choice([0, 1, 1, 1, 2, 2]))
        parents = [f"c{j}" for j in rng.sample(later, count)]
        commits.append(node(f"c{i}", parents))
    return commits


def assert_no_premature_reuse(layout):
    """Replay the rows, tracking parents that hold a column but have no row yet."""
    waiting: dict[str, int] = {}
    placed: dict[str, int] = {}
    for row in layout.rows:
        commit_hash = row.commit.hash
        if commit_hash in waiting:
            assert row.column == waiting.pop(commit_hash)
        else:
            # A new lineage must not land on a column a pending parent holds
            assert row.column not in waiting.values(), (commit_hash, row.column, waiting)
        placed[commit_hash] = row.column

        for link in row.parents:
            if link.hash in placed:
                assert link.column == placed[link.hash]
            elif link.hash in waiting:
                assert link.column == waiting[link.hash]
            else:
                assert link.column not in waiting.values(), (link.hash, link.column, waiting)
                waiting[link.hash] = link.column


class TestColumnReuse:
    """A column is only handed out again once its lineage has ended."""

    @pytest.mark.parametrize("seed", range(12))
    def test_generated_histories(self, seed):
        commits = random_history(seed)
        layout = GraphLayoutEngine().layout(commits)

        assert len(layout.rows) == len(commits)
        assert_no_premature_reuse(layout)

    @pytest.mark.parametrize("seed", range(4))
    def test_generated_histories_in_pages(self, seed):
        commits = random_history(seed, size=60)
        paginator = GraphPaginator()
        for start in range(0, len(commits), 7):
            paginator.append(commits[start : start + 7])

        assert_no_premature_reuse(paginator.layout)

    def test_wide_octopus_merges(self):
        commits = [
            node("m", ["a", "b", "c", "d"]),
            node("b", ["x"]),
            node("n", ["c", "e"]),
            node("a", ["x"]),
            node("e", ["x"]),
            node("c", ["x"]),
            node("d"),
            node("x"),
        ]
        layout = GraphLayoutEngine().layout(commits)

        assert_no_premature_reuse(layout)
        assert layout.max_column == 6
