"""CLI entry point for CourseMirror.

Usage:
    python -m coursemirror [--config config.json] [--course-url URL --git-url URL] [options]
"""

import argparse
import os
import sys

from .config import CrawlConfig, load_config_file
from .crawler import Crawler
from .errors import ConfigError, CourseMirrorError
from .prompt import ask_use_cache


def parse_args(argv: list[str] | None = None, interactive: bool | None = None) -> CrawlConfig:
    """Parse command-line arguments into a CrawlConfig.

    Seed URLs come from ``--config`` (JSON with ``course`` and ``git``
    keys); ``--course-url`` / ``--git-url`` override the file. When neither
    ``--use-cache`` nor ``--no-use-cache`` is given, the user is asked on
    an interactive terminal and the cache is used otherwise.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).
        interactive: Whether the cache question may be asked (defaults to
            whether stdin is a terminal).

    Returns:
        Populated CrawlConfig instance.
    """
    parser = argparse.ArgumentParser(
        prog="coursemirror",
        description="CourseMirror - archive a course website and collect its linked code repositories.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Seed URLs from config.json ({"course": "...", "git": "..."})
  python -m coursemirror

  # Explicit seeds, re-download everything
  python -m coursemirror --course-url "https://courses.cs.vt.edu/cs3214/fall2023" --git-url "https://git.cs.vt.edu/cs3214-staff" --no-use-cache
        """,
    )

    parser.add_argument(
        "--config",
        default="config.json",
        help="JSON file with the 'course' and 'git' seed URLs (default: config.json)",
    )

    parser.add_argument("--course-url", default=None, help="Course website to mirror")

    parser.add_argument("--git-url", default=None, help="Code host whose repository links are collected")

    parser.add_argument(
        "--output-folder",
        default="out",
        help="Local folder for the mirrored pages and files (default: out)",
    )

    parser.add_argument(
        "--use-cache",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Reuse pages and files already in the output folder (default: ask, or yes when not interactive)",
    )

    parser.add_argument(
        "--max-workers",
        type=int,
        default=8,
        help="Maximum simultaneous file downloads (default: 8)",
    )

    parser.add_argument(
        "--timeout",
        type=int,
        default=30,
        help="Navigation and download timeout in seconds (default: 30)",
    )

    parser.add_argument(
        "--wait-for",
        default="networkidle",
        choices=["networkidle", "domcontentloaded", "load", "commit"],
        help="Playwright wait condition before reading the page (default: networkidle)",
    )

    parser.add_argument("--visited-file", default="visited.txt", help="Visited URL log (default: visited.txt)")

    parser.add_argument(
        "--mappings-file",
        default="website-mappings.json",
        help="Archive path -> URL table (default: website-mappings.json)",
    )

    parser.add_argument("--repos-file", default="repos.txt", help="Repository URL list (default: repos.txt)")

    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable verbose logging (queued pages, out-of-scope links, file sizes)",
    )

    args = parser.parse_args(argv)

    seeds = {"course_url": args.course_url, "git_url": args.git_url}
    if not all(seeds.values()):
        if not os.path.exists(args.config):
            parser.error(f"--course-url and --git-url are required when {args.config} does not exist")
        from_file = load_config_file(args.config)
        seeds = {key: value or from_file[key] for key, value in seeds.items()}

    use_cache = args.use_cache
    if use_cache is None:
        if interactive is None:
            interactive = sys.stdin.isatty()
        use_cache = ask_use_cache() if interactive else True

    return CrawlConfig(
        course_url=seeds["course_url"],
        git_url=seeds["git_url"],
        output_folder=args.output_folder,
        use_cache=use_cache,
        max_workers=args.max_workers,
        timeout=args.timeout,
        wait_for=args.wait_for,
        verbose=args.verbose,
        visited_file=args.visited_file,
        mappings_file=args.mappings_file,
        repos_file=args.repos_file,
    )


def main() -> None:
    """Main entry point."""
    try:
        config = parse_args()
    except ConfigError as e:
        print(f"[FATAL] {e}")
        sys.exit(1)

    crawler = Crawler(config)

    try:
        crawler.crawl()
    except KeyboardInterrupt:
        print("\n\n[INTERRUPTED] Crawl stopped by user.")
        print(f"  Pages saved so far: {crawler.saved_count}")
        print(f"  Pages visited: {len(crawler.visited)}")
        print(f"  Output folder: {config.output_folder}")
        sys.exit(1)
    except CourseMirrorError as e:
        print(f"\n[FATAL] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
