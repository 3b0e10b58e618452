"""URL-to-filesystem path mapping, cache probing and file saving."""

import os
from pathlib import PurePosixPath
from typing import Iterable, Optional
from urllib.parse import urlparse, unquote

from .url_resolver import LinkKind, classify

PAGE_SUFFIX = ".html"
PART_SUFFIX = ".part"


def url_to_filepath(url: str, output_folder: str, kind: Optional[LinkKind] = None) -> str:
    """Map a canonical URL to its location in the archive.

    The archive mirrors the URL path under the output folder. Pages get an
    ``.html`` suffix; files keep their own name and extension. The mapping
    depends on nothing but its arguments, so a later run finds the files
    an earlier run wrote.

    Examples:
        url  = "https://courses.cs.vt.edu/cs3214/fall2023/faq"
        -> output_folder/cs3214/fall2023/faq.html

        url  = "https://courses.cs.vt.edu/cs3214/fall2023/lectures/intro.pdf"
        -> output_folder/cs3214/fall2023/lectures/intro.pdf

    Args:
        url: Canonical URL to map.
        output_folder: Local filesystem folder for output.
        kind: Page or file; classified from the URL when omitted.

    Returns:
        Filesystem path for the archived content.
    """
    if kind is None:
        kind = classify(url)

    path = unquote(urlparse(url).path)
    parts = [part for part in path.split("/") if part not in ("", ".", "..")]
    if not parts:
        # Site root
        parts = ["index"]

    filepath = os.path.join(output_folder, *parts)
    if kind is LinkKind.PAGE:
        filepath += PAGE_SUFFIX
    return filepath


def archive_relpath(filepath: str, output_folder: str) -> str:
    """Path of an archived file relative to the output folder, with / separators."""
    relative = os.path.relpath(filepath, output_folder)
    return PurePosixPath(*relative.split(os.sep)).as_posix()


def has_cached_copy(url: str, output_folder: str) -> bool:
    """Check whether an earlier run already archived this URL.

    Args:
        url: Canonical URL.
        output_folder: Local filesystem folder for output.

    Returns:
        True if the archived file exists.
    """
    return os.path.isfile(url_to_filepath(url, output_folder))


def save_page(filepath: str, html: str) -> int:
    """Write a rendered page to the archive as UTF-8.

    Goes through ``save_stream``, so a failed write never leaves a
    truncated page in place.

    Returns:
        Number of bytes written.

    Raises:
        OSError: The page could not be written.
    """
    return save_stream(filepath, [html.encode("utf-8")])


def save_stream(filepath: str, chunks: Iterable[bytes]) -> int:
    """Stream binary chunks to a file, creating directories as needed.

    Chunks go to ``<filepath>.part`` first and the file is moved into place
    only once every chunk is written. On any error the partial file is
    removed and the exception propagates.

    Args:
        filepath: Full filesystem path for the file.
        chunks: Iterable of byte strings (e.g. ``response.iter_content()``).

    Returns:
        Number of bytes written.
    """
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    part_path = filepath + PART_SUFFIX
    written = 0
    try:
        with open(part_path, "wb") as f:
            for chunk in chunks:
                if not chunk:
                    continue
                f.write(chunk)
                written += len(chunk)
        os.replace(part_path, filepath)
    except BaseException:
        if os.path.exists(part_path):
            os.remove(part_path)
        raise

    return written
