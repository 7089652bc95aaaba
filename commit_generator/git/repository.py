"""
Repository handle management.

Opening a repository walks the directory tree and parses its config, so the
opened handle is kept on a context object and reused for as long as the
process stays in the same working directory.
"""

import os
import logging
import threading
from typing import Optional

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from ..exceptions import NotARepositoryError, RepositoryIOError

logger = logging.getLogger(__name__)


class RepositoryContext:
    """Owns the opened repository handle for the current working directory."""

    def __init__(self):
        self._repo: Optional[Repo] = None
        self._workdir: Optional[str] = None
        self._lock = threading.Lock()

    def open(self) -> Repo:
        """
        Return the repository for the current working directory.

        The cached handle is reused only when the working directory string is
        unchanged. The lock covers the open-or-reuse decision, not the use of
        the returned handle.

        Raises:
            NotARepositoryError: If no repository exists here or in any parent
            RepositoryIOError: If the filesystem cannot be read
        """
        with self._lock:
            try:
                workdir = os.getcwd()
            except OSError as e:
                raise RepositoryIOError(f"failed to get working directory: {e}") from e

            if self._repo is not None and self._workdir == workdir:
                return self._repo

            if self._workdir is not None:
                logger.debug(f"Working directory changed from {self._workdir} to {workdir}")

            try:
                repo = Repo.discover(workdir)
            except NotGitRepository as e:
                raise NotARepositoryError(workdir) from e
            except OSError as e:
                raise RepositoryIOError(f"failed to open repository at {workdir}: {e}") from e

            self._repo = repo
            self._workdir = workdir
            logger.debug(f"Opened git repository: {repo.path}")
            return repo

    def reset(self) -> None:
        """Forget the cached handle so the next open() rediscovers it."""
        with self._lock:
            self._repo = None
            self._workdir = None

    def is_inside_repo(self) -> bool:
        """Check whether the current directory belongs to a git repository."""
        try:
            self.open()
        except NotARepositoryError:
            return False
        return True

    def repo_root(self) -> str:
        """Return the root directory of the repository's working tree."""
        return os.path.abspath(self.open().path)
