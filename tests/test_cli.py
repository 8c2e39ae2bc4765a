"""Tests for the gitscope command line."""

from pathlib import Path

import pygit2
import pytest

from gitscope.git_graph.layout import GraphLayoutEngine
from gitscope.git_graph.types import CommitNode
from gitscope.main import parse_args, render_graph, run

SIG = pygit2.Signature("Test User", "test@example.com", 1_700_000_000, 0)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("GITSCOPE_CONFIG", str(tmp_path / "settings.json"))
    monkeypatch.setenv("GITSCOPE_LOG_LEVEL", "WARNING")


@pytest.fixture
def repo(tmp_path):
    path = tmp_path / "repo"
    repo = pygit2.init_repository(str(path), initial_head="main")
    (path / "notes.txt").write_text("alpha\nbeta\ngamma\n")
    repo.index.add("notes.txt")
    repo.index.write()
    repo.create_commit("HEAD", SIG, SIG, "Add notes", repo.index.write_tree(), [])
    return repo


class TestParseArgs:
    def test_graph(self):
        args = parse_args(["graph", "--path", "/tmp/x", "--max-count", "5"])

        assert args.command == "graph"
        assert args.path == "/tmp/x"
        assert args.max_count == 5

    def test_hunks(self):
        args = parse_args(["hunks", "src/app.py", "--staged"])

        assert args.command == "hunks"
        assert args.file == "src/app.py"
        assert args.staged
        assert not args.words

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestRenderGraph:
    def test_lanes(self):
        commits = [
            CommitNode.create("m" * 40, parents=["a" * 40, "f" * 40], refs=["HEAD", "main"], message="Merge"),
            CommitNode.create("f" * 40, parents=["a" * 40], refs=["tag: v1"], message="Feature"),
            CommitNode.create("a" * 40, message="Base"),
        ]
        lines = render_graph(GraphLayoutEngine().layout(commits))

        assert lines == [
            "*    mmmmmmm (HEAD, main) Merge",
            "| *  fffffff (tag: v1) Feature",
            "*    aaaaaaa Base",
        ]


class TestRun:
    def test_graph(self, repo, capsys):
        assert run(["graph", "--path", repo.workdir]) == 0

        out = capsys.readouterr().out
        assert "Add notes" in out
        assert "(HEAD, main)" in out

    def test_hunks(self, repo, capsys):
        (Path(repo.workdir) / "notes.txt").write_text("alpha\nBETA\ngamma\n")

        assert run(["hunks", "notes.txt", "--path", repo.workdir, "--words"]) == 0

        out = capsys.readouterr().out
        assert out.startswith("notes.txt: 1 hunks, +1 -1")
        assert "#0 @@ -1,3 +1,3 @@" in out
        assert "[-beta-]" in out
        assert "{+BETA+}" in out

    def test_not_a_repository(self, tmp_path, capsys):
        assert run(["graph", "--path", str(tmp_path / "nowhere")]) == 1

        assert "Not in a git repository" in capsys.readouterr().err
