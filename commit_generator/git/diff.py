"""
Synthetic diff generation for staged changes.

Each staged path becomes a git-style fragment. The body is produced by a
DiffStrategy; the default strategy replaces the whole file rather than
computing a minimal line diff, which is enough context for summarizing.
"""

import logging
from typing import List, Mapping, Optional

from .content import ContentResolver, ResolvedContent
from .status import ChangeKind, PathStatus

logger = logging.getLogger(__name__)

MAX_DIFF_CHARS = 10000
TRUNCATION_MARKER = "\n...[TRUNCATED]"
NULL_ID = "0000000"
FILE_MODE = "100644"


def split_lines(content: Optional[bytes]) -> List[str]:
    """
    Decode content as UTF-8 and split it into lines, empty for absent content.

    Only \\n ends a line; form feeds and other separators stay inside the line.
    """
    if not content:
        return []
    lines = content.decode('utf-8', errors='replace').split('\n')
    if lines[-1] == "":
        lines.pop()
    return lines


def short_id(object_id: Optional[str]) -> str:
    return object_id[:7] if object_id else NULL_ID


def truncate_diff(diff: str, max_chars: int = MAX_DIFF_CHARS) -> str:
    """Cut diff to max_chars characters and mark it, if it is longer."""
    if len(diff) > max_chars:
        logger.info(f"Diff truncated from {len(diff)} to {max_chars} characters")
        return diff[:max_chars] + TRUNCATION_MARKER
    return diff


class DiffStrategy:
    """Renders the body lines of a fragment from old and new lines."""

    def render(self, old_lines: List[str], new_lines: List[str]) -> List[str]:
        raise NotImplementedError


class FullReplacementDiff(DiffStrategy):
    """Shows every old line as removed followed by every new line as added."""

    def render(self, old_lines: List[str], new_lines: List[str]) -> List[str]:
        return [f"-{line}" for line in old_lines] + [f"+{line}" for line in new_lines]


class DiffSynthesizer:
    """Builds the staged diff text from classified path statuses."""

    def __init__(self, resolver: ContentResolver, strategy: Optional[DiffStrategy] = None,
                 max_chars: int = MAX_DIFF_CHARS):
        self.resolver = resolver
        self.strategy = strategy or FullReplacementDiff()
        self.max_chars = max_chars

    def synthesize(self, statuses: Mapping[str, PathStatus]) -> str:
        """
        Render all staged paths and concatenate the fragments.

        Args:
            statuses: Classified paths; unstaged ones are skipped

        Returns:
            Diff text, at most max_chars characters plus the truncation marker
        """
        fragments = []
        for status in statuses.values():
            kind = status.change_kind
            if kind is None:
                continue
            content = self.resolver.resolve(status, kind)
            fragments.append(self.render_fragment(status, kind, content))

        logger.debug(f"Synthesized {len(fragments)} diff fragments")
        return truncate_diff("".join(fragments), self.max_chars)

    def render_fragment(self, status: PathStatus, kind: ChangeKind,
                        content: ResolvedContent) -> str:
        path = status.path
        if kind is ChangeKind.RENAMED:
            lines = [
                f"diff --git a/{status.source} b/{path}",
                f"rename from {status.source}",
                f"rename to {path}",
            ]
        elif kind is ChangeKind.ADDED:
            lines = [
                f"diff --git a/{path} b/{path}",
                f"new file mode {FILE_MODE}",
                f"index {NULL_ID}..{short_id(status.new_id)}",
                "--- /dev/null",
                f"+++ b/{path}",
            ]
            lines.extend(self.strategy.render([], split_lines(content.new)))
        elif kind is ChangeKind.DELETED:
            lines = [
                f"diff --git a/{path} b/{path}",
                f"deleted file mode {FILE_MODE}",
                f"index {short_id(status.old_id)}..{NULL_ID}",
                f"--- a/{path}",
                "+++ /dev/null",
            ]
            lines.extend(self.strategy.render(split_lines(content.old), []))
        else:
            lines = [
                f"diff --git a/{path} b/{path}",
                f"index {short_id(status.old_id)}..{short_id(status.new_id)} {FILE_MODE}",
                f"--- a/{path}",
                f"+++ b/{path}",
            ]
            lines.extend(self.strategy.render(
                split_lines(content.old), split_lines(content.new)))
        return "".join(f"{line}\n" for line in lines)
