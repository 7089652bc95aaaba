"""
Staged-state classification.

The index is compared against the HEAD tree to find staged changes, and the
working tree against the index to record unstaged edits. Only the staged side
decides whether a path takes part in diff synthesis.
"""

import os
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from dulwich.diff_tree import (
    CHANGE_ADD, CHANGE_COPY, CHANGE_DELETE, CHANGE_MODIFY, CHANGE_RENAME,
    RenameDetector, tree_changes
)
from dulwich.errors import ObjectFormatException
from dulwich.index import ConflictedIndexEntry, UnmergedEntries, get_unstaged_changes
from dulwich.object_store import MemoryObjectStore, OverlayObjectStore
from dulwich.repo import Repo

from ..exceptions import RepositoryIOError

logger = logging.getLogger(__name__)


class FileState(Enum):
    """State of a path on one side of the comparison."""
    UNMODIFIED = "unmodified"
    UNTRACKED = "untracked"
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"


class ChangeKind(Enum):
    """Kind of staged change a diff fragment is rendered for."""
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


STAGED_STATES = frozenset({
    FileState.ADDED, FileState.MODIFIED, FileState.DELETED,
    FileState.RENAMED, FileState.COPIED,
})

_CHANGE_STATES = {
    CHANGE_ADD: FileState.ADDED,
    CHANGE_MODIFY: FileState.MODIFIED,
    CHANGE_DELETE: FileState.DELETED,
    CHANGE_RENAME: FileState.RENAMED,
    CHANGE_COPY: FileState.COPIED,
}

_CHANGE_KINDS = {
    FileState.ADDED: ChangeKind.ADDED,
    FileState.COPIED: ChangeKind.ADDED,
    FileState.MODIFIED: ChangeKind.MODIFIED,
    FileState.DELETED: ChangeKind.DELETED,
    FileState.RENAMED: ChangeKind.RENAMED,
}


@dataclass
class PathStatus:
    """Index and working-tree state of a single repository path."""
    path: str
    staging: FileState
    worktree: FileState = FileState.UNMODIFIED
    source: Optional[str] = None
    old_id: Optional[str] = None
    new_id: Optional[str] = None

    @property
    def is_staged(self) -> bool:
        return is_staged(self)

    @property
    def change_kind(self) -> Optional[ChangeKind]:
        """Change kind used for diff synthesis, None when not staged."""
        return _CHANGE_KINDS.get(self.staging)


def is_staged(status: PathStatus) -> bool:
    """Check whether a path has a change recorded in the index."""
    return status.staging in STAGED_STATES


def _decode_path(path: Optional[bytes]) -> Optional[str]:
    return os.fsdecode(path) if path is not None else None


def _decode_id(sha: Optional[bytes]) -> Optional[str]:
    return sha.decode('ascii') if sha is not None else None


def head_tree_id(repo: Repo) -> Optional[bytes]:
    """Return the tree id of the HEAD commit, or None in a repository with no commits."""
    try:
        head = repo.head()
    except KeyError:
        return None
    try:
        return repo[head].tree
    except (KeyError, ObjectFormatException) as e:
        raise RepositoryIOError(f"HEAD points to missing commit {head.decode('ascii')}") from e


def _check_unmerged(index) -> None:
    unmerged = sorted(
        _decode_path(path) for path, entry in index.items()
        if isinstance(entry, ConflictedIndexEntry))
    if unmerged:
        raise RepositoryIOError(f"index has unmerged paths: {', '.join(unmerged)}")


class StatusClassifier:
    """Computes the staged state of every path relative to the last commit."""

    def __init__(self, repo: Repo):
        self.repo = repo

    def _open_index(self):
        try:
            index = self.repo.open_index()
        except OSError as e:
            raise RepositoryIOError(f"failed to read index: {e}") from e
        _check_unmerged(index)
        return index

    def _index_store(self, index):
        """
        Write the index as a tree into a throwaway store layered over the
        repository's, leaving the on-disk object store untouched.

        Returns:
            Tuple of the layered store and the index tree id
        """
        scratch = MemoryObjectStore()
        store = OverlayObjectStore([scratch, self.repo.object_store], scratch)
        try:
            return store, index.commit(store)
        except UnmergedEntries as e:
            raise RepositoryIOError(f"index has unmerged paths: {e}") from e
        except (OSError, KeyError, ObjectFormatException) as e:
            raise RepositoryIOError(f"failed to build index tree: {e}") from e

    def has_staged_changes(self) -> bool:
        """
        Check whether anything is staged.

        Stops at the first index-vs-HEAD difference instead of classifying
        every path.
        """
        index = self._open_index()
        tree_id = head_tree_id(self.repo)
        try:
            for change in index.changes_from_tree(self.repo.object_store, tree_id):
                logger.debug(f"First staged change: {change[0]}")
                return True
        except UnmergedEntries as e:
            raise RepositoryIOError(f"index has unmerged paths: {e}") from e
        except (OSError, KeyError, ObjectFormatException) as e:
            raise RepositoryIOError(f"failed to compare index with HEAD: {e}") from e
        return False

    def classify(self) -> Dict[str, PathStatus]:
        """
        Classify every tracked or previously tracked path.

        Returns:
            Mapping of repository-relative path to its status, sorted by path
        """
        index = self._open_index()
        store, index_tree_id = self._index_store(index)
        statuses: Dict[str, PathStatus] = {}

        try:
            changes = list(tree_changes(
                store,
                head_tree_id(self.repo),
                index_tree_id,
                rename_detector=RenameDetector(store),
            ))
        except (OSError, KeyError, ObjectFormatException) as e:
            raise RepositoryIOError(f"failed to compare index with HEAD: {e}") from e

        for change in changes:
            state = _CHANGE_STATES.get(change.type)
            if state is None:
                continue
            if state is FileState.DELETED:
                path = _decode_path(change.old.path)
                source = None
            else:
                path = _decode_path(change.new.path)
                source = _decode_path(change.old.path) if state in (
                    FileState.RENAMED, FileState.COPIED) else None
            # Newer dulwich leaves the missing side of an add or delete as None
            statuses[path] = PathStatus(
                path=path,
                staging=state,
                source=source,
                old_id=_decode_id(change.old.sha) if change.old is not None else None,
                new_id=_decode_id(change.new.sha) if change.new is not None else None,
            )

        root = self.repo.path
        try:
            unstaged = [_decode_path(p) for p in get_unstaged_changes(index, root)]
        except (OSError, UnmergedEntries) as e:
            raise RepositoryIOError(f"failed to compare working tree: {e}") from e

        for path in unstaged:
            exists = os.path.lexists(os.path.join(root, path))
            worktree = FileState.MODIFIED if exists else FileState.DELETED
            status = statuses.get(path)
            if status is None:
                statuses[path] = PathStatus(
                    path=path, staging=FileState.UNMODIFIED, worktree=worktree)
            else:
                status.worktree = worktree

        staged = sum(1 for s in statuses.values() if s.is_staged)
        logger.info(f"Found {staged} staged, {len(statuses) - staged} unstaged paths")
        return dict(sorted(statuses.items()))
