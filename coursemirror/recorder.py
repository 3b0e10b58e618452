"""Filename-to-URL mapping table and end-of-run artifacts."""

import json
import os
from threading import Lock
from typing import Iterable

from .errors import MappingCollisionError


class MappingRecorder:
    """Accumulates archive-relative path -> source URL pairs.

    A path is claimed with ``reserve`` before anything is written to it,
    so the second claimant fails with ``MappingCollisionError`` while the
    first writer's file is still intact. Both the page-saving path (crawl
    thread) and the download workers claim here, so access is serialized
    with a lock. A writer that fails gives its claim back with ``release``.
    """

    def __init__(self):
        self.mappings: dict[str, str] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self.mappings)

    def reserve(self, path: str, url: str) -> None:
        with self._lock:
            existing = self.mappings.get(path)
            if existing is not None:
                raise MappingCollisionError(path, existing, url)
            self.mappings[path] = url

    def release(self, path: str, url: str) -> None:
        """Drop a claim whose write failed. Claims held by other URLs are kept."""
        with self._lock:
            if self.mappings.get(path) == url:
                del self.mappings[path]

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self.mappings)

    def flush(
        self,
        visited: Iterable[str],
        repos: Iterable[str],
        visited_file: str,
        mappings_file: str,
        repos_file: str,
    ) -> None:
        """Write the visited log, the mapping table and the repository list.

        The mapping table is written key-sorted so repeated runs produce
        identical files.
        """
        _write_lines(visited_file, visited)
        _write_json(mappings_file, dict(sorted(self.snapshot().items())))
        _write_lines(repos_file, sorted(repos))


def _ensure_parent(path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def _write_lines(path: str, lines: Iterable[str]) -> None:
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))


def _write_json(path: str, data: dict) -> None:
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
