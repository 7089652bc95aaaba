"""
Git operations module for Commit Generator.

This module reads the repository directly through dulwich: it classifies
staged paths, synthesizes a diff of the staged changes and writes commits,
all without calling the git executable.
"""

import logging
from typing import Dict

from ..exceptions import RepositoryIOError
from .commit import CommitWriter, read_identity
from .content import ContentResolver, ResolvedContent, head_tree
from .diff import (
    DiffStrategy, DiffSynthesizer, FullReplacementDiff,
    MAX_DIFF_CHARS, TRUNCATION_MARKER, truncate_diff
)
from .repository import RepositoryContext
from .status import ChangeKind, FileState, PathStatus, StatusClassifier, is_staged

logger = logging.getLogger(__name__)

__all__ = [
    'GitOperations', 'RepositoryContext', 'StatusClassifier', 'ContentResolver',
    'DiffSynthesizer', 'DiffStrategy', 'FullReplacementDiff', 'CommitWriter',
    'PathStatus', 'FileState', 'ChangeKind', 'ResolvedContent',
    'MAX_DIFF_CHARS', 'TRUNCATION_MARKER', 'head_tree', 'is_staged',
    'read_identity', 'truncate_diff',
]


class GitOperations:
    """Handles git operations for Commit Generator."""

    def __init__(self, context: RepositoryContext = None, max_diff_chars: int = MAX_DIFF_CHARS):
        """
        Initialize Git operations handler.

        Args:
            context: Repository context to share; a new one is created if omitted
            max_diff_chars: Size cap applied to the synthesized diff
        """
        self.context = context or RepositoryContext()
        self.max_diff_chars = max_diff_chars

    def is_inside_repo(self) -> bool:
        """Check whether the current directory is inside a git repository."""
        return self.context.is_inside_repo()

    def validate_git_repository(self) -> None:
        """
        Validate that current directory is a git repository.

        Raises:
            NotARepositoryError: If not in a git repository
        """
        repo = self.context.open()
        logger.debug(f"Git repository found: {repo.path}")

    def get_repo_root(self) -> str:
        """Return the root directory of the repository."""
        return self.context.repo_root()

    def get_path_statuses(self) -> Dict[str, PathStatus]:
        """
        Classify all changed paths of the repository.

        Raises:
            RepositoryIOError: If the status cannot be computed
        """
        repo = self.context.open()
        try:
            return StatusClassifier(repo).classify()
        except RepositoryIOError as e:
            raise RepositoryIOError(f"failed to get status: {e}") from e

    def validate_staged_changes(self) -> bool:
        """
        Validate that there are staged changes for commit.

        Returns:
            True if staged changes exist, False otherwise
        """
        repo = self.context.open()
        try:
            has_changes = StatusClassifier(repo).has_staged_changes()
        except RepositoryIOError as e:
            raise RepositoryIOError(f"failed to check for staged changes: {e}") from e
        logger.debug(f"Staged changes present: {has_changes}")
        return has_changes

    def get_staged_diff(self) -> str:
        """
        Get a synthesized diff of the staged changes.

        Returns:
            Diff text capped at max_diff_chars characters

        Raises:
            RepositoryIOError: If the status or HEAD cannot be read
        """
        statuses = self.get_path_statuses()
        repo = self.context.open()
        try:
            resolver = ContentResolver.for_repository(repo)
        except RepositoryIOError as e:
            raise RepositoryIOError(f"failed to get HEAD tree: {e}") from e

        diff = DiffSynthesizer(resolver, max_chars=self.max_diff_chars).synthesize(statuses)
        logger.info(f"Retrieved staged diff: {len(diff)} characters")
        return diff

    def commit_changes(self, commit_message: str) -> bytes:
        """
        Commit staged changes with the provided message.

        Returns:
            Id of the new commit

        Raises:
            MissingIdentityError: If user.name or user.email is not configured
            CommitFailureError: If commit fails
        """
        return CommitWriter(self.context.open()).commit(commit_message)
