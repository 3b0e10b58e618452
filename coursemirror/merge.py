"""Combine several path -> URL mapping files into one.

Usage:
    python -m coursemirror.merge website-mappings.json gitlab-mappings.json [-o OUT]
"""

import argparse
import json
import sys
from typing import Iterable, Mapping

from .errors import CourseMirrorError, MappingCollisionError


def merge_mappings(mappings: Iterable[Mapping[str, str]]) -> dict[str, str]:
    """Merge mapping tables, refusing duplicate archive paths.

    Raises:
        MappingCollisionError: The same key appears in two tables.
    """
    merged: dict[str, str] = {}
    for table in mappings:
        for path, url in table.items():
            if path in merged:
                raise MappingCollisionError(path, merged[path], url)
            merged[path] = url
    return merged


def merge_files(inputs: list[str], output: str) -> dict[str, str]:
    """Read mapping files, merge them and write the result to ``output``."""
    tables = []
    for path in inputs:
        try:
            with open(path, "r", encoding="utf-8") as f:
                tables.append(json.load(f))
        except (OSError, json.JSONDecodeError) as e:
            raise CourseMirrorError(f"Could not read mapping file {path}: {e}") from e

    merged = merge_mappings(tables)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(merged, f, indent=2, ensure_ascii=False)
    return merged


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="coursemirror.merge",
        description="Merge path -> URL mapping files, failing on duplicate paths.",
    )
    parser.add_argument("inputs", nargs="+", help="Mapping JSON files, merged in order")
    parser.add_argument(
        "-o", "--output",
        default="website-mappings.json",
        help="Merged output file (default: website-mappings.json)",
    )
    args = parser.parse_args(argv)

    try:
        merged = merge_files(args.inputs, args.output)
    except CourseMirrorError as e:
        print(f"[FATAL] {e}")
        sys.exit(1)

    print(f"[MERGED] {len(merged)} mapping(s) from {len(args.inputs)} file(s) -> {args.output}")


if __name__ == "__main__":
    main()
