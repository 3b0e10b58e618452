"""Shared fakes: an in-memory browser and an in-memory HTTP session."""

import threading
from pathlib import Path

import pytest
import requests

from coursemirror.config import CrawlConfig
from coursemirror.errors import NavigationError
from coursemirror.file_saver import url_to_filepath
from coursemirror.renderer import RenderedPage
from coursemirror.url_resolver import LinkKind

COURSE = "https://site/course"
GIT = "https://git.host"


class FakeRenderer:
    """Serves pages from a dict instead of driving Chromium."""

    def __init__(self, pages: dict[str, str], output_folder: str):
        self.pages = pages
        self.output_folder = output_folder
        self.remote: list[str] = []
        self.local: list[str] = []
        self.started = False
        self.closed = False

    def start(self):
        self.started = True

    def close(self):
        self.closed = True

    def render(self, url: str, use_local: bool) -> RenderedPage:
        if use_local:
            path = Path(url_to_filepath(url, self.output_folder, LinkKind.PAGE))
            self.local.append(url)
            return RenderedPage(
                url=url,
                document_url=path.absolute().as_uri(),
                html=path.read_text(encoding="utf-8"),
                from_cache=True,
            )

        self.remote.append(url)
        if url not in self.pages:
            raise NavigationError(url, "net::ERR_NAME_NOT_RESOLVED")
        return RenderedPage(url=url, document_url=url, html=self.pages[url], from_cache=False)


class FakeResponse:
    def __init__(self, url: str, status: int, chunks: list):
        self.url = url
        self.status_code = status
        self._chunks = chunks

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def iter_content(self, chunk_size=1):
        for chunk in self._chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


class FakeSession:
    """Maps URL -> bytes, (status, bytes) or a list of chunks/exceptions."""

    def __init__(self, files: dict):
        self.files = files
        self.requested: list[str] = []
        self._lock = threading.Lock()

    def get(self, url, timeout=None, stream=False):
        with self._lock:
            self.requested.append(url)
        entry = self.files.get(url)
        if entry is None:
            return FakeResponse(url, 404, [])
        if isinstance(entry, tuple):
            status, body = entry
            return FakeResponse(url, status, [body])
        if isinstance(entry, list):
            return FakeResponse(url, 200, entry)
        return FakeResponse(url, 200, [entry])

    def close(self):
        pass


def page(*hrefs: str) -> str:
    anchors = "".join(f'<a href="{href}">link</a>' for href in hrefs)
    return f"<html><head><title>t</title></head><body>{anchors}</body></html>"


@pytest.fixture
def config(tmp_path):
    return CrawlConfig(
        course_url=COURSE,
        git_url=GIT,
        output_folder=str(tmp_path / "out"),
        use_cache=False,
        max_workers=4,
        visited_file=str(tmp_path / "visited.txt"),
        mappings_file=str(tmp_path / "website-mappings.json"),
        repos_file=str(tmp_path / "repos.txt"),
    )
