"""Core crawl engine - depth-first frontier, page rendering, concurrent downloads."""

import sys
from typing import Optional

import requests

from .config import CrawlConfig
from .downloader import DownloadQueue, DownloadResult
from .file_saver import archive_relpath, has_cached_copy, save_page, url_to_filepath
from .frontier import Frontier
from .link_extractor import LinkExtractor
from .recorder import MappingRecorder
from .renderer import PageRenderer
from .url_resolver import LinkKind, canonicalize


def _flush() -> None:
    """Flush stdout so output appears immediately in piped/buffered contexts."""
    sys.stdout.flush()


class Crawler:
    """Mirrors a course website to disk.

    Pages are rendered one at a time in a headless browser, starting from
    config.course_url and following in-scope links depth first. Linked
    files download concurrently in the background. Every archived file is
    recorded in a path -> URL mapping table, and links into the code host
    are collected as repository roots.

    With config.use_cache, pages and files archived by an earlier run are
    loaded from disk instead of the network, so an interrupted crawl can
    simply be run again.

    All crawl state lives on the instance; nothing is shared between two
    Crawler objects.
    """

    def __init__(
        self,
        config: CrawlConfig,
        renderer: Optional[PageRenderer] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.frontier = Frontier()
        self.recorder = MappingRecorder()
        self.repos: set[str] = set()
        self.failed: dict[str, str] = {}
        self.saved_count: int = 0  # Pages written this run
        self.cached_count: int = 0  # Pages loaded from the archive
        self.download_results: list[DownloadResult] = []

        self.renderer = renderer if renderer is not None else PageRenderer(config)
        self.downloads = DownloadQueue(config, self.recorder, session=session)
        self.extractor = LinkExtractor(config, self.frontier, self.downloads, self.repos)

    @property
    def visited(self) -> list[str]:
        return self.frontier.visited

    def crawl(self) -> None:
        """Run the crawl process.

        Renders pages until the frontier is exhausted, then waits for all
        downloads and writes the visited log, mapping table and repository
        list. The artifacts are written even when the crawl aborts, so a
        partial run still leaves a usable partial mirror.

        Raises:
            NavigationError: A page could not be loaded.
            MappingCollisionError: Two URLs resolved to the same archive path.
        """
        seed = canonicalize(self.config.course_url)
        self.frontier.seed(seed)

        print("=" * 70)
        print("  CourseMirror - Starting crawl")
        print(f"  Course:  {seed}")
        print(f"  Repos:   {self.config.git_url}")
        print(f"  Output:  {self.config.output_folder}")
        print(f"  Cache:   {'ON (reusing archived files)' if self.config.use_cache else 'OFF'}")
        print(f"  Workers: {self.config.max_workers} | Timeout: {self.config.timeout}s")
        print("=" * 70)
        print()
        _flush()

        try:
            self.renderer.start()
            while True:
                url = self.frontier.pop()
                if url is None:
                    break

                if not self.frontier.mark_visited_and_proceed(url):
                    continue

                self._process_page(url)
                self.downloads.check_collision()
        finally:
            self.renderer.close()
            try:
                self._finish_downloads()
            finally:
                self.downloads.shutdown()
                self._write_artifacts()
                self._print_summary()

    def _process_page(self, url: str) -> None:
        """Render a page, queue its links and archive it.

        Args:
            url: Canonical page URL, already marked visited.
        """
        in_cache = has_cached_copy(url, self.config.output_folder)
        use_local = self.config.use_cache and in_cache

        source = "local" if use_local else "remote"
        print(f"[PAGE {len(self.frontier.visited)}] (queue: {len(self.frontier)}) {url} -- {source}")
        _flush()

        page = self.renderer.render(url, use_local)
        counts = self.extractor.extract_links(page)
        if counts.pages or counts.files:
            print(f"  [LINKS] {counts.pages} new page(s), {counts.files} new file(s)")

        filepath = url_to_filepath(url, self.config.output_folder, LinkKind.PAGE)
        relpath = archive_relpath(filepath, self.config.output_folder)

        # Claim the path first; a collision must leave the other writer's file untouched
        self.recorder.reserve(relpath, url)

        if use_local:
            # Already archived by an earlier run; keep the file, keep the mapping
            self.cached_count += 1
            _flush()
            return

        try:
            save_page(filepath, page.html)
        except OSError as e:
            self.recorder.release(relpath, url)
            self.failed[url] = "Could not save page"
            print(f"  [ERROR] Failed to save {filepath}: {e}")
        else:
            self.saved_count += 1
            print(f"  [SAVED] {relpath}")
        _flush()

    def _finish_downloads(self) -> None:
        if len(self.downloads):
            print(f"\nFinishing {len(self.downloads)} download(s)...")
            _flush()
        self.download_results = self.downloads.join()
        for result in self.download_results:
            if not result.ok:
                self.failed[result.url] = result.error.reason if result.error else "failed"

    def _write_artifacts(self) -> None:
        self.recorder.flush(
            visited=self.frontier.visited,
            repos=self.repos,
            visited_file=self.config.visited_file,
            mappings_file=self.config.mappings_file,
            repos_file=self.config.repos_file,
        )

    def _print_summary(self) -> None:
        """Print a crawl summary after completion."""
        downloaded = sum(1 for r in self.download_results if r.status == "downloaded")
        cached_files = sum(1 for r in self.download_results if r.status == "cached")

        print()
        print("=" * 70)
        print("  Crawl Complete")
        print(f"  Pages visited:     {len(self.frontier.visited)}")
        print(f"  Pages saved:       {self.saved_count}")
        print(f"  Pages from cache:  {self.cached_count}")
        print(f"  Files downloaded:  {downloaded}")
        print(f"  Files from cache:  {cached_files}")
        print(f"  Failed:            {len(self.failed)}")
        print(f"  Repositories:      {len(self.repos)}")
        print(f"  Mappings:          {len(self.recorder)} -> {self.config.mappings_file}")
        print("=" * 70)

        if self.failed:
            print()
            print("  Failed URLs:")
            for url, reason in self.failed.items():
                print(f"    [{reason}] {url}")
            print()
        _flush()
