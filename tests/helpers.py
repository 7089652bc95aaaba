"""
Helpers for building throwaway git repositories in tests.
"""

import os
import shutil
import tempfile
from unittest.mock import patch

from dulwich import porcelain
from dulwich.repo import Repo

AUTHOR = b"Test User <test@example.com>"


class RepoTestCase:
    """Mixin that creates a fresh repository and runs the test inside it."""

    def setUp(self):
        super().setUp()
        self.temp_dir = os.path.realpath(tempfile.mkdtemp())
        self.home_dir = os.path.join(self.temp_dir, 'home')
        self.repo_dir = os.path.join(self.temp_dir, 'repo')
        os.makedirs(self.home_dir)
        os.makedirs(self.repo_dir)

        # Keep the user's global git config out of the tests
        self.env_patcher = patch.dict(os.environ, {
            'HOME': self.home_dir,
            'XDG_CONFIG_HOME': os.path.join(self.home_dir, '.config'),
            'GIT_CONFIG_NOSYSTEM': '1',
        })
        self.env_patcher.start()

        self.repo = porcelain.init(self.repo_dir)
        self.old_cwd = os.getcwd()
        os.chdir(self.repo_dir)

    def tearDown(self):
        os.chdir(self.old_cwd)
        self.env_patcher.stop()
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        super().tearDown()

    def write(self, path: str, content: bytes) -> None:
        full_path = os.path.join(self.repo_dir, path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, 'wb') as f:
            f.write(content)

    def stage(self, *paths: str) -> None:
        porcelain.add(self.repo, paths=[os.path.join(self.repo_dir, p) for p in paths])

    def stage_removal(self, path: str) -> None:
        """Remove a path from the index and the working tree."""
        index = self.repo.open_index()
        del index[path.encode('utf-8')]
        index.write()
        full_path = os.path.join(self.repo_dir, path)
        if os.path.exists(full_path):
            os.remove(full_path)

    def commit(self, message: str = "initial") -> bytes:
        return porcelain.commit(
            self.repo, message=message.encode('utf-8'), author=AUTHOR, committer=AUTHOR)

    def set_identity(self, name: bytes = b"", email: bytes = b"") -> None:
        config = self.repo.get_config()
        if name:
            config.set((b"user",), b"name", name)
        if email:
            config.set((b"user",), b"email", email)
        config.write_to_path()

    def reopen(self) -> Repo:
        return Repo(self.repo_dir)
