"""URL canonicalization, page/file classification and scope checking."""

import re
from enum import Enum
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse


class LinkKind(Enum):
    """What a course URL points at."""

    PAGE = "page"
    FILE = "file"


# A path is a file when its last segment carries an extension and sits
# under at least one directory, e.g. /cs3214/fall2023/slides.pdf
#   /[^\0/]+/        - parent directory, dots allowed (/v1.2/)
#   [^\0/.]+          - file stem
#   (?:\.[^\0/.]+)+$  - one or more extensions, ending the path
_FILE_PATTERN = re.compile(r"/[^\0/]+/[^\0/.]+(?:\.[^\0/.]+)+$")

_WEB_SCHEMES = ("http", "https")


def classify(url: str) -> LinkKind:
    """Classify a URL (or bare path) as a page or a downloadable file.

    Extensionless files are reported as pages. That is a known limitation
    of the path-shape heuristic.
    """
    path = urlparse(url).path if "://" in url else url
    return LinkKind.FILE if _FILE_PATTERN.search(path) else LinkKind.PAGE


def archive_url_path(output_folder: str) -> str:
    """Return the URL path of the archive root as it appears in file:// URLs."""
    return urlparse(Path(output_folder).absolute().as_uri()).path.rstrip("/")


def canonicalize(
    url: str,
    from_cache: bool = False,
    course_url: Optional[str] = None,
    archive_root: Optional[str] = None,
) -> str:
    """Turn a discovered link into the key used for dedup and archiving.

    Query and fragment are dropped and exactly one trailing slash is
    removed, so ``/a``, ``/a/``, ``/a?x=1`` and ``/a#top`` all collapse
    to the same key.

    When the link came from a page rendered out of the local archive the
    browser resolves it against a ``file://`` document, e.g.
    ``file:///home/me/out/cs3214/fall2023/faq``. Such links are mapped
    back onto the course origin (``https://courses.cs.vt.edu/cs3214/fall2023/faq``),
    stripping the archive root from the path when present.

    Args:
        url: Absolute URL to canonicalize.
        from_cache: Whether the page holding the link was loaded from disk.
        course_url: Course base URL; required to rewrite cached links.
        archive_root: URL path of the archive root (see ``archive_url_path``).

    Returns:
        Canonical URL string.
    """
    parsed = urlparse(url)
    scheme, netloc, path = parsed.scheme, parsed.netloc, parsed.path

    if from_cache and scheme == "file" and course_url:
        if archive_root and (path == archive_root or path.startswith(archive_root + "/")):
            path = path[len(archive_root):]
        course = urlparse(course_url)
        scheme, netloc = course.scheme, course.netloc

    result = urlunparse((scheme, netloc, path, "", "", ""))
    if result.endswith("/"):
        result = result[:-1]
    return result


def resolve_href(document_url: str, href: str) -> str:
    """Resolve an anchor's href against the document it was found in.

    Returns an empty string for links that can never be archived
    (fragment-only, javascript:, mailto:, tel:, data:).
    """
    href = (href or "").strip()
    if not href or href.startswith(("#", "javascript:", "mailto:", "tel:", "data:")):
        return ""
    return urljoin(document_url, href)


def is_in_scope(url: str, base_url: str) -> bool:
    """Check if a URL falls within the scope of a base URL.

    A URL is in scope if:
    - Same netloc (domain) and an http(s) scheme
    - Path equals the base path or continues it at a segment boundary

    Args:
        url: URL to check.
        base_url: URL defining the scope (course site or code host).

    Returns:
        True if the URL is within scope.
    """
    if not url:
        return False

    url_parsed = urlparse(url)
    base_parsed = urlparse(base_url)

    if url_parsed.scheme not in _WEB_SCHEMES:
        return False

    if url_parsed.netloc != base_parsed.netloc:
        return False

    base_path = base_parsed.path.rstrip("/")
    url_path = url_parsed.path

    if not url_path.startswith(base_path):
        return False

    # /cs3214/fall2023-old should NOT match /cs3214/fall2023
    remaining = url_path[len(base_path):]
    return not remaining or remaining.startswith("/")


def repository_root(url: str) -> str:
    """Collapse a code-host link to the repository it belongs to.

    Examples:
        https://git.cs.vt.edu/cs3214-staff/cs3214-cush/blob/master/tests/basic.tst
        -> https://git.cs.vt.edu/cs3214-staff/cs3214-cush
    """
    parsed = urlparse(url)
    segments = parsed.path.split("/")
    # Leading "" before the first slash, then owner and repository
    path = "/".join(segments[:3])
    return urlunparse((parsed.scheme, parsed.netloc, path, "", "", ""))
