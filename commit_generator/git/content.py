"""
Before/after content lookup for staged paths.

Old content comes from the HEAD tree, new content from the live working copy.
Lookups return None instead of raising: a path that cannot be read simply
contributes no lines to the diff.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from dulwich.errors import ObjectFormatException
from dulwich.objects import Tree
from dulwich.repo import Repo

from ..exceptions import RepositoryIOError
from .status import ChangeKind, PathStatus, head_tree_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedContent:
    """Old and new bytes of a path; None means absent or unreadable."""
    old: Optional[bytes] = None
    new: Optional[bytes] = None


def head_tree(repo: Repo) -> Optional[Tree]:
    """Return the HEAD commit's tree, or None when the repository has no commits."""
    tree_id = head_tree_id(repo)
    if tree_id is None:
        return None
    try:
        return repo[tree_id]
    except (KeyError, ObjectFormatException) as e:
        raise RepositoryIOError(f"HEAD tree {tree_id.decode('ascii')} cannot be read: {e}") from e


class ContentResolver:
    """Fetches path content from the HEAD tree or the working directory."""

    def __init__(self, repo: Repo, tree: Optional[Tree], workdir: str):
        """
        Args:
            repo: Opened repository used to dereference blobs
            tree: HEAD tree, or None for a repository without commits
            workdir: Directory repository-relative paths are resolved against
        """
        self.repo = repo
        self.tree = tree
        self.workdir = workdir

    @classmethod
    def for_repository(cls, repo: Repo, workdir: Optional[str] = None) -> 'ContentResolver':
        return cls(repo, head_tree(repo), workdir or repo.path)

    def old_content(self, path: str) -> Optional[bytes]:
        if self.tree is None:
            return None
        try:
            _mode, sha = self.tree.lookup_path(self.repo.__getitem__, os.fsencode(path))
            return self.repo[sha].data
        except Exception as e:
            logger.debug(f"No HEAD content for {path}: {e}")
            return None

    def new_content(self, path: str) -> Optional[bytes]:
        try:
            with open(os.path.join(self.workdir, path), 'rb') as f:
                return f.read()
        except OSError as e:
            logger.debug(f"Cannot read {path} from working tree: {e}")
            return None

    def resolve(self, status: PathStatus, kind: ChangeKind) -> ResolvedContent:
        """
        Resolve the content pair needed to render one path.

        Renames only need their path names, so nothing is read for them.
        """
        if kind is ChangeKind.ADDED:
            return ResolvedContent(new=self.new_content(status.path))
        if kind is ChangeKind.DELETED:
            return ResolvedContent(old=self.old_content(status.path))
        if kind is ChangeKind.MODIFIED:
            return ResolvedContent(
                old=self.old_content(status.path),
                new=self.new_content(status.path),
            )
        return ResolvedContent()
