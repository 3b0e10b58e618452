"""Concurrent file downloads that run alongside the page crawl."""

import sys
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from threading import Lock
from typing import Optional

import requests

from .config import CrawlConfig
from .errors import DownloadError, MappingCollisionError
from .file_saver import archive_relpath, has_cached_copy, save_stream, url_to_filepath
from .recorder import MappingRecorder
from .url_resolver import LinkKind

CHUNK_SIZE = 64 * 1024


@dataclass
class DownloadResult:
    """Outcome of one submitted download."""

    url: str
    filepath: str
    status: str  # "downloaded", "cached" or "failed"
    size: int = 0
    error: Optional[DownloadError] = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"


class DownloadQueue:
    """Bounded thread pool of streamed file downloads.

    ``submit`` returns at once so slow downloads never hold up the page
    crawl; ``join`` is the barrier the crawl waits on before writing its
    artifacts. A failed download is reported in its ``DownloadResult`` and
    leaves no file and no mapping behind.
    """

    def __init__(
        self,
        config: CrawlConfig,
        recorder: MappingRecorder,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.recorder = recorder
        self.pending: list[Future] = []
        self.collision: Optional[MappingCollisionError] = None
        self._lock = Lock()

        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": config.user_agent})
        self.session = session

        self._pool = ThreadPoolExecutor(
            max_workers=max(1, config.max_workers),
            thread_name_prefix="download",
        )

    def __len__(self) -> int:
        return len(self.pending)

    def submit(self, url: str) -> "Future[DownloadResult]":
        """Queue a file URL for download and return its future."""
        future = self._pool.submit(self._download, url)
        self.pending.append(future)
        return future

    def join(self) -> list[DownloadResult]:
        """Wait for every submitted download.

        Returns:
            Results in submission order.

        Raises:
            MappingCollisionError: A download resolved to an archive path
                that was already mapped.
        """
        wait(self.pending)
        results = []
        collision = None
        for future in self.pending:
            try:
                results.append(future.result())
            except MappingCollisionError as e:
                if collision is None:
                    collision = e
        if collision is not None:
            raise collision
        return results

    def check_collision(self) -> None:
        """Re-raise the first mapping collision hit by a download worker."""
        with self._lock:
            collision = self.collision
        if collision is not None:
            raise collision

    def shutdown(self) -> None:
        self._pool.shutdown(wait=True)
        self.session.close()

    def _claim(self, relpath: str, url: str) -> None:
        try:
            self.recorder.reserve(relpath, url)
        except MappingCollisionError as e:
            with self._lock:
                if self.collision is None:
                    self.collision = e
            raise

    def _download(self, url: str) -> DownloadResult:
        filepath = url_to_filepath(url, self.config.output_folder, LinkKind.FILE)
        relpath = archive_relpath(filepath, self.config.output_folder)

        # Claimed before any byte is written, so a collision never clobbers the other file
        self._claim(relpath, url)

        if self.config.use_cache and has_cached_copy(url, self.config.output_folder):
            print(f"  [SKIP] Already downloaded: {relpath}")
            sys.stdout.flush()
            return DownloadResult(url=url, filepath=filepath, status="cached")

        print(f"  [DOWNLOAD] {url}")
        sys.stdout.flush()

        try:
            with self.session.get(url, timeout=self.config.timeout, stream=True) as response:
                response.raise_for_status()
                size = save_stream(filepath, response.iter_content(chunk_size=CHUNK_SIZE))
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            return self._failed(url, filepath, relpath, f"HTTP {status}")
        except requests.exceptions.RequestException as e:
            return self._failed(url, filepath, relpath, str(e))
        except OSError as e:
            return self._failed(url, filepath, relpath, f"Could not write {filepath}: {e}")

        if self.config.verbose:
            print(f"  [SAVED] {relpath} ({size / 1024:.1f} KB)")
            sys.stdout.flush()
        return DownloadResult(url=url, filepath=filepath, status="downloaded", size=size)

    def _failed(self, url: str, filepath: str, relpath: str, reason: str) -> DownloadResult:
        self.recorder.release(relpath, url)
        error = DownloadError(url, reason)
        print(f"  [WARN] {error}")
        sys.stdout.flush()
        return DownloadResult(url=url, filepath=filepath, status="failed", error=error)
