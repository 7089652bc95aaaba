"""
Commit creation over the staged snapshot.
"""

import logging
from typing import Tuple

from dulwich import porcelain
from dulwich.repo import Repo

from ..exceptions import CommitFailureError, MissingIdentityError

logger = logging.getLogger(__name__)


def _config_value(config, section: bytes, name: bytes) -> str:
    try:
        value = config.get((section,), name)
    except KeyError:
        return ""
    return value.decode('utf-8', errors='replace').strip()


def read_identity(repo: Repo) -> Tuple[str, str]:
    """
    Read the author identity from the repository config stack.

    Raises:
        MissingIdentityError: If user.name or user.email is empty
    """
    config = repo.get_config_stack()
    name = _config_value(config, b"user", b"name")
    email = _config_value(config, b"user", b"email")

    if not name:
        raise MissingIdentityError("user.name", "Your Name")
    if not email:
        raise MissingIdentityError("user.email", "your.email@example.com")
    return name, email


class CommitWriter:
    """Records the current index as a new commit."""

    def __init__(self, repo: Repo):
        self.repo = repo

    def commit(self, message: str) -> bytes:
        """
        Commit the staged changes with the given message.

        Args:
            message: Commit message

        Returns:
            Id of the new commit

        Raises:
            MissingIdentityError: If no author identity is configured
            CommitFailureError: If the commit cannot be written
        """
        name, email = read_identity(self.repo)
        signature = f"{name} <{email}>".encode('utf-8')

        try:
            # Hooks are skipped: the installed pre-commit hook runs this tool.
            commit_id = porcelain.commit(
                self.repo,
                message=message.encode('utf-8'),
                author=signature,
                committer=signature,
                no_verify=True,
            )
        except Exception as e:
            raise CommitFailureError(f"failed to commit: {e}") from e

        logger.info(f"Changes committed successfully: {commit_id.decode('ascii')[:7]}")
        return commit_id
