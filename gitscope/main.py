#!/usr/bin/env python3
"""
gitscope - commit graph and hunk staging for git repositories
"""

import argparse
import asyncio
import os
import sys

from gitscope.config.settings import Settings
from gitscope.diff.hunks import HunkModel
from gitscope.diff.staging import StagingController
from gitscope.diff.types import DiffLineType, WordChange
from gitscope.errors import NotARepository, RepositoryServiceFailure
from gitscope.git_backend.service import LocalRepositoryService
from gitscope.git_graph.colors import BranchColorRegistry
from gitscope.git_graph.layout import GraphLayoutEngine
from gitscope.git_graph.paginator import GraphPaginator
from gitscope.git_graph.types import GraphLayout, RefKind
from gitscope.utils.logger import configure_logging, get_logger

logger = get_logger("main")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="gitscope",
        description="gitscope - commit graph and hunk staging for git repositories",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--path", default=None, help="Repository path (default: search from cwd)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    graph = subparsers.add_parser("graph", parents=[common], help="Print the commit graph with lanes")
    graph.add_argument(
        "--max-count",
        type=int,
        default=None,
        help="Number of commits to show (default: graph.page_size setting)",
    )

    hunks = subparsers.add_parser("hunks", parents=[common], help="List the hunks of one file's diff")
    hunks.add_argument("file", help="Path of the file, relative to the repository root")
    hunks.add_argument("--staged", action="store_true", help="Show the staged diff (HEAD -> index)")
    hunks.add_argument("--words", action="store_true", help="Show word-level changes of paired lines")

    return parser.parse_args(argv)


def render_graph(layout: GraphLayout) -> list[str]:
    """Text rendering: one line per row, lanes drawn with '*' and '|'."""
    width = max(layout.max_column, 1)
    row_of = {row.commit.hash: row.row for row in layout.rows}
    through: list[set[int]] = [set() for _ in layout.rows]

    # A branching edge turns into the parent's column right below the child
    for edge in layout.edges:
        for row in range(row_of[edge.from_hash] + 1, row_of[edge.to_hash]):
            through[row].add(edge.to_column)
    for edge in layout.dangling_edges:
        for row in range(row_of[edge.from_hash] + 1, len(layout.rows)):
            through[row].add(edge.to_column)

    lines = []
    for row in layout.rows:
        lanes = [" "] * width
        for column in through[row.row]:
            if column < width:
                lanes[column] = "|"
        lanes[row.column] = "*"

        commit = row.commit
        labels = []
        for ref in commit.refs:
            if ref.kind is RefKind.TAG:
                labels.append(f"tag: {ref.name}")
            else:
                labels.append(ref.name)
        decoration = f" ({', '.join(labels)})" if labels else ""
        lines.append(f"{' '.join(lanes)}  {commit.short_hash}{decoration} {commit.message}")
    return lines


def _markup(changes: tuple[WordChange, ...]) -> str:
    parts = []
    for change in changes:
        if change.removed:
            parts.append(f"[-{change.value}-]")
        elif change.added:
            parts.append(f"{{+{change.value}+}}")
        else:
            parts.append(change.value)
    return "".join(parts)


def render_hunks(model: HunkModel, words: bool = False) -> list[str]:
    diff = model.diff
    if diff.binary:
        return [f"{diff.path}: binary file"]

    lines = [f"{diff.path}: {len(model)} hunks, +{diff.additions} -{diff.deletions}"]
    for info in model.hunk_infos():
        lines.append(f"  #{info.index} {info.header}  +{info.additions} -{info.deletions}  {info.content_preview}")
        if not words:
            continue
        hunk_lines = model.hunk(info.index).lines
        for line_index, line in enumerate(hunk_lines):
            if line.type is not DiffLineType.DELETION:
                continue
            pair = model.word_diff_for(info.index, line_index)
            if pair is not None:
                lines.append(f"    - {_markup(pair.old)}")
                lines.append(f"    + {_markup(pair.new)}")
    return lines


async def show_graph(service: LocalRepositoryService, settings: Settings, max_count: int | None) -> int:
    engine = GraphLayoutEngine(branch_colors=BranchColorRegistry(settings.get_palette_size()))
    paginator = GraphPaginator(service, engine, page_size=settings.get_page_size())
    limit = max_count if max_count is not None else paginator.page_size

    layout = paginator.layout
    while len(layout) < limit and paginator.has_more:
        layout = await paginator.load_more()

    for line in render_graph(layout)[:limit]:
        print(line)
    return 0


async def show_hunks(
    service: LocalRepositoryService, settings: Settings, file_path: str, staged: bool, words: bool
) -> int:
    controller = StagingController(
        service,
        file_path,
        staged=staged,
        refetch_delay=settings.get_refetch_delay(),
    )
    model = await controller.refresh()
    for line in render_hunks(model, words=words and settings.word_diff_enabled()):
        print(line)
    return 0


def run(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = Settings()

    # Environment variables take precedence over the settings file
    configure_logging(
        log_format=None if "GITSCOPE_LOG_FORMAT" in os.environ else settings.get("logging.format"),
        level=None if "GITSCOPE_LOG_LEVEL" in os.environ else settings.get("logging.level"),
    )

    try:
        service = LocalRepositoryService.open(args.path, context_lines=settings.get_context_lines())
        if args.command == "graph":
            return asyncio.run(show_graph(service, settings, args.max_count))
        return asyncio.run(show_hunks(service, settings, args.file, args.staged, args.words))
    except NotARepository as e:
        print(f"gitscope: {e}", file=sys.stderr)
        return 1
    except RepositoryServiceFailure as e:
        logger.error("Command failed", command=args.command, error=e.message)
        print(f"gitscope: {e}", file=sys.stderr)
        return 1


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
