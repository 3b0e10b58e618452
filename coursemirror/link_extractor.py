"""Anchor extraction and classification for rendered pages."""

import sys
from dataclasses import dataclass

from bs4 import BeautifulSoup, FeatureNotFound

from .config import CrawlConfig
from .downloader import DownloadQueue
from .frontier import Frontier
from .renderer import RenderedPage
from .url_resolver import (
    LinkKind,
    archive_url_path,
    canonicalize,
    classify,
    is_in_scope,
    repository_root,
    resolve_href,
)


def find_hrefs(html: str) -> list[str]:
    """Return the href of every anchor in the document, in document order."""
    try:
        soup = BeautifulSoup(html, "lxml")
    except FeatureNotFound:
        soup = BeautifulSoup(html, "html.parser")
    return [anchor["href"] for anchor in soup.find_all("a", href=True)]


@dataclass
class LinkCounts:
    """New work discovered on one page."""

    pages: int = 0
    files: int = 0
    repos: int = 0


class LinkExtractor:
    """Sorts the links of a page into crawl work.

    - Course pages go onto the frontier.
    - Course files are marked visited and handed to the download queue.
    - Code-host links are collapsed to their repository root and collected.
    - Everything else is ignored.
    """

    def __init__(
        self,
        config: CrawlConfig,
        frontier: Frontier,
        downloads: DownloadQueue,
        repos: set[str],
    ):
        self.config = config
        self.frontier = frontier
        self.downloads = downloads
        self.repos = repos
        self._archive_root = archive_url_path(config.output_folder)

    def extract_links(self, page: RenderedPage) -> LinkCounts:
        counts = LinkCounts()

        for href in find_hrefs(page.html):
            absolute = resolve_href(page.document_url, href)
            if not absolute:
                continue

            url = canonicalize(
                absolute,
                from_cache=page.from_cache,
                course_url=self.config.course_url,
                archive_root=self._archive_root,
            )

            if is_in_scope(url, self.config.course_url):
                kind = classify(url)
                if not self.frontier.offer(url, kind):
                    continue
                if kind is LinkKind.FILE:
                    self.downloads.submit(url)
                    counts.files += 1
                else:
                    counts.pages += 1
                    if self.config.verbose:
                        print(f"    + {url}")
            elif is_in_scope(url, self.config.git_url):
                repo = repository_root(url)
                if repo not in self.repos:
                    self.repos.add(repo)
                    counts.repos += 1
                    print(f"  [REPO] {repo}")
            elif self.config.verbose:
                print(f"  [OUT-OF-SCOPE] {absolute}")

        sys.stdout.flush()
        return counts
