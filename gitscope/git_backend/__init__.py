"""Git backend: pygit2 repository access behind an async service"""

from gitscope.git_backend.repository import GitScopeRepository
from gitscope.git_backend.service import LocalRepositoryService, RepositoryService

__all__ = ["GitScopeRepository", "LocalRepositoryService", "RepositoryService"]
