"""
Team commit rules.

Rules live in a plain-text file in the repository root and are passed to the
message generator verbatim.
"""

import logging
import threading
from pathlib import Path
from typing import Optional

from . import find_repo_root
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

RULES_FILE_NAME = '.git-commit-rules-for-ai'

RULES_TEMPLATE = """# Git Commit Rules for AI Generator
# Customize these rules to match your team's conventions

# Example rules:
# - Always start with a verb (Add, Fix, Update)
# - If the change affects the UI, mention it
# - Max 50 characters for the subject line
# - Include Jira ticket ID if applicable
"""


class RulesLoader:
    """Loads the rules file, caching the result per repository root."""

    def __init__(self):
        self._cached_root: Optional[Path] = None
        self._cached_rules = ""
        self._lock = threading.Lock()

    def load_rules(self) -> str:
        """
        Read the rules file from the repository root.

        Returns:
            File content, or an empty string if there is no repository or file

        Raises:
            ConfigurationError: If the file exists but cannot be read
        """
        with self._lock:
            repo_root = find_repo_root()
            if repo_root is None:
                return ""

            if self._cached_root == repo_root:
                return self._cached_rules

            rules_path = repo_root / RULES_FILE_NAME
            try:
                # Undecodable bytes become U+FFFD
                rules = rules_path.read_bytes().decode('utf-8', errors='replace')
            except FileNotFoundError:
                rules = ""
            except OSError as e:
                raise ConfigurationError(f"failed to read {rules_path}: {e}")

            self._cached_root = repo_root
            self._cached_rules = rules
            logger.debug(f"Loaded {len(rules)} characters of rules from {rules_path}")
            return rules


def write_rules_template(repo_root: str) -> bool:
    """
    Create the rules template unless a rules file already exists.

    Returns:
        True if the file was created
    """
    rules_path = Path(repo_root) / RULES_FILE_NAME
    if rules_path.exists():
        return False
    try:
        rules_path.write_text(RULES_TEMPLATE, encoding='utf-8')
    except OSError as e:
        raise ConfigurationError(f"failed to create rules file: {e}")
    return True
