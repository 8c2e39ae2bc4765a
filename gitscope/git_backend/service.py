"""
Repository service - the asynchronous boundary between the view core and git.

The graph and diff code never talks to git directly; it awaits these calls.
LocalRepositoryService runs the blocking pygit2 work of GitScopeRepository
on a worker thread so the event loop stays responsive.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import pygit2

from gitscope.constants import DEFAULT_CONTEXT_LINES
from gitscope.diff.types import FileDiff
from gitscope.errors import RepositoryServiceFailure
from gitscope.git_backend.repository import GitScopeRepository
from gitscope.git_graph.types import CommitNode
from gitscope.utils.logger import get_logger

logger = get_logger("git_backend.service")

T = TypeVar("T")


class RepositoryService(ABC):
    """Operations the view core needs from a repository.

    Implementations raise RepositoryServiceFailure for any failed call.
    """

    @abstractmethod
    async def list_commits(self, max_count: int, skip: int = 0) -> list[CommitNode]:
        """Commits in display order (children before parents)."""
        ...

    @abstractmethod
    async def get_diff(self, file_path: str, staged: bool = False) -> FileDiff | str:
        """Structured diff of one file, or raw unified diff text."""
        ...

    @abstractmethod
    async def stage_hunk(self, file_path: str, hunk_index: int) -> None: ...

    @abstractmethod
    async def unstage_hunk(self, file_path: str, hunk_index: int) -> None: ...

    @abstractmethod
    async def revert_hunk(self, file_path: str, hunk_index: int) -> None: ...


class LocalRepositoryService(RepositoryService):
    """Repository service backed by a local pygit2 repository."""

    def __init__(self, repo: GitScopeRepository, context_lines: int = DEFAULT_CONTEXT_LINES) -> None:
        self.repo = repo
        self.context_lines = context_lines
        # Index writes are read-modify-write on .git/index; one at a time
        self._write_lock = asyncio.Lock()

    @classmethod
    def open(cls, repo_path: str | Path | None = None, context_lines: int = DEFAULT_CONTEXT_LINES) -> "LocalRepositoryService":
        path = str(repo_path) if repo_path is not None else None
        return cls(GitScopeRepository(path), context_lines=context_lines)

    async def _call(
        self,
        operation: str,
        func: Callable[..., T],
        *args: object,
        file_path: str | None = None,
        hunk_index: int | None = None,
    ) -> T:
        try:
            return await asyncio.to_thread(func, *args)
        except RepositoryServiceFailure:
            raise
        except (pygit2.GitError, KeyError, ValueError, OSError) as e:
            logger.error(
                "Repository call failed",
                operation=operation,
                file=file_path,
                hunk=hunk_index,
                error=str(e),
            )
            raise RepositoryServiceFailure(
                operation, str(e), file_path=file_path, hunk_index=hunk_index
            ) from e

    async def _write(self, operation: str, func: Callable[..., None], file_path: str, hunk_index: int) -> None:
        async with self._write_lock:
            await self._call(
                operation,
                func,
                file_path,
                hunk_index,
                self.context_lines,
                file_path=file_path,
                hunk_index=hunk_index,
            )

    async def list_commits(self, max_count: int, skip: int = 0) -> list[CommitNode]:
        return await self._call("list_commits", self.repo.list_commits, max_count, skip)

    async def get_diff(self, file_path: str, staged: bool = False) -> FileDiff:
        return await self._call(
            "get_diff",
            self.repo.get_file_diff,
            file_path,
            staged,
            self.context_lines,
            file_path=file_path,
        )

    async def stage_hunk(self, file_path: str, hunk_index: int) -> None:
        await self._write("stage_hunk", self.repo.stage_hunk, file_path, hunk_index)

    async def unstage_hunk(self, file_path: str, hunk_index: int) -> None:
        await self._write("unstage_hunk", self.repo.unstage_hunk, file_path, hunk_index)

    async def revert_hunk(self, file_path: str, hunk_index: int) -> None:
        await self._write("revert_hunk", self.repo.revert_hunk, file_path, hunk_index)
