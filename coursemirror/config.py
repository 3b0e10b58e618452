"""Configuration dataclass for the course mirror."""

import json
from dataclasses import dataclass

from .errors import ConfigError


@dataclass
class CrawlConfig:
    """Configuration for a crawl session."""

    course_url: str
    git_url: str
    output_folder: str = "out"
    use_cache: bool = True  # Load pages / skip downloads already on disk
    max_workers: int = 8  # Simultaneous file downloads
    timeout: int = 30
    wait_for: str = "networkidle"  # Playwright load state; networkidle = 500ms without connections
    verbose: bool = False
    visited_file: str = "visited.txt"
    mappings_file: str = "website-mappings.json"
    repos_file: str = "repos.txt"
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36 CourseMirror/1.0"
    )


def load_config_file(path: str) -> dict[str, str]:
    """Read the seed URLs from a JSON config file.

    The file holds an object with a ``course`` key (the site to mirror)
    and a ``git`` key (the code host whose repositories are collected).

    Args:
        path: Path to the JSON file.

    Returns:
        Dict with ``course_url`` and ``git_url`` entries.

    Raises:
        ConfigError: If the file cannot be read or a key is missing.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    missing = [key for key in ("course", "git") if not data.get(key)]
    if missing:
        raise ConfigError(f"Config file {path} is missing: {', '.join(missing)}")

    return {"course_url": data["course"], "git_url": data["git"]}
