"""Per-traversal record of node paths that have already been checked."""

from __future__ import annotations


class VisitationTracker:
    """Set of processed node paths, owned by one checker for one traversal.

    Paths are only ever added; a tracker is discarded with its checker.
    """

    def __init__(self) -> None:
        self._visited: set[str] = set()

    def should_process(self, node_path: str) -> bool:
        """Return True and record *node_path* the first time it is seen."""
        if node_path in self._visited:
            return False
        self._visited.add(node_path)
        return True

    def __contains__(self, node_path: object) -> bool:
        return node_path in self._visited

    def __len__(self) -> int:
        return len(self._visited)
