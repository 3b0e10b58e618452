"""Exception types raised by the crawl engine."""


class CourseMirrorError(Exception):
    """Base class for all course mirror errors."""


class ConfigError(CourseMirrorError):
    """The seed configuration is missing or malformed."""


class NavigationError(CourseMirrorError):
    """A page could not be loaded by the browser. Fatal to the crawl."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to load {url}: {reason}")
        self.url = url
        self.reason = reason


class DownloadError(CourseMirrorError):
    """A single file fetch failed. Reported, never fatal."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to download {url}: {reason}")
        self.url = url
        self.reason = reason


class MappingCollisionError(CourseMirrorError):
    """Two writes resolved to the same archive path."""

    def __init__(self, path: str, existing_url: str, new_url: str):
        super().__init__(
            f"Archive path {path!r} already maps to {existing_url}; "
            f"refusing to overwrite with {new_url}"
        )
        self.path = path
        self.existing_url = existing_url
        self.new_url = new_url
