"""Depth-first worklist of canonical URLs with a visited set."""

from typing import Optional

from .url_resolver import LinkKind, classify


class Frontier:
    """LIFO stack of URLs awaiting a visit plus the set already visited.

    Pages are popped most-recent-first, so the crawl runs depth first and
    siblings are visited in reverse order of discovery. A URL can sit on
    the stack more than once (pushed from two pages before either copy is
    popped); ``mark_visited_and_proceed`` filters the duplicates at pop
    time.
    """

    def __init__(self):
        self.stack: list[str] = []
        # dict keeps visit order for the visited log
        self._visited: dict[str, None] = {}

    def __len__(self) -> int:
        return len(self.stack)

    def __contains__(self, url: str) -> bool:
        return url in self._visited

    @property
    def visited(self) -> list[str]:
        """Every visited URL, in the order it was marked."""
        return list(self._visited)

    def seed(self, url: str) -> None:
        self.stack.append(url)

    def pop(self) -> Optional[str]:
        """Pop the most recently pushed URL, or None when exhausted."""
        if not self.stack:
            return None
        return self.stack.pop()

    def mark_visited_and_proceed(self, url: str) -> bool:
        """Mark a popped URL visited. False means it was already handled."""
        if url in self._visited:
            return False
        self._visited[url] = None
        return True

    def offer(self, url: str, kind: Optional[LinkKind] = None) -> bool:
        """Offer a newly discovered URL.

        Pages not yet visited are pushed. Files are terminal: they are
        marked visited on first sight and never pushed.

        Returns:
            True if the URL is new work (a page pushed, or a file the
            caller should now download).
        """
        if url in self._visited:
            return False

        if kind is None:
            kind = classify(url)

        if kind is LinkKind.FILE:
            self._visited[url] = None
        else:
            self.stack.append(url)
        return True
