"""
nyimbo: command line access to the hymn data.

Usage:
    nyimbo list
    nyimbo get 1
    nyimbo get 1 --lyrics
    nyimbo category praise
    nyimbo tag worship
    nyimbo search mungu
    nyimbo validate 1
    nyimbo check
    nyimbo bundle -o build/nyimbo_bundle.json
    nyimbo build-index --version 1.1.0
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .bundle import bundle_json, generate_bundle, write_bundle
from .config import Settings, configure_logging
from .exceptions import NyimboError, ValidationError
from .index_builder import build_index, write_index
from .library import HymnLibrary
from .validator import assert_integrity, validate_hymn


# ── commands ──────────────────────────────────────────────────────────────────

def _cmd_list(library: HymnLibrary, args: argparse.Namespace) -> int:
    print("Available hymns:")
    for info in library.list_hymns():
        print(f"{info.id}: {info.title} ({info.category.value})")
    return 0


def _cmd_get(library: HymnLibrary, args: argparse.Namespace) -> int:
    if not args.lyrics:
        print(json.dumps(library.load_record(args.hymn_id), indent=2, ensure_ascii=False))
        return 0

    hymn = library.load_hymn(args.hymn_id)
    print(f"{hymn.id}. {hymn.title}")
    if hymn.subtitle:
        print(f"   {hymn.subtitle}")
    for section in hymn.lyrics():
        print()
        print(f"[{section['label']}]")
        for line in section["lines"]:
            print(f"  {line}")
    return 0


def _cmd_category(library: HymnLibrary, args: argparse.Namespace) -> int:
    if not args.name:
        print("Available categories:", ", ".join(library.get_categories()))
        return 0
    print(f'Hymns in category "{args.name}":')
    for hymn in library.get_hymns_by_category(args.name):
        print(f"{hymn.id}: {hymn.title}")
    return 0


def _cmd_tag(library: HymnLibrary, args: argparse.Namespace) -> int:
    if not args.name:
        print("Available tags:", ", ".join(library.get_tags()))
        return 0
    print(f'Hymns tagged "{args.name}":')
    for hymn in library.get_hymns_by_tag(args.name):
        print(f"{hymn.id}: {hymn.title}")
    return 0


def _cmd_search(library: HymnLibrary, args: argparse.Namespace) -> int:
    results = library.search_hymns_by_title(args.term)
    if not results:
        print(f'No hymns match "{args.term}".')
        return 0
    for hymn in results:
        print(f"{hymn.id}: {hymn.title}")
    return 0


def _cmd_validate(library: HymnLibrary, args: argparse.Namespace) -> int:
    result = validate_hymn(library.load_record(args.hymn_id))
    if result.is_valid:
        print("Hymn is valid!")
        return 0
    print("Validation errors:")
    for error in result.errors:
        print(f"- {error}")
    return 1


def _cmd_check(library: HymnLibrary, args: argparse.Namespace) -> int:
    try:
        assert_integrity(library)
    except ValidationError as exc:
        print(f"Integrity check failed ({len(exc.errors)} errors):")
        for error in exc.errors:
            print(f"- {error}")
        return 1
    print(f"All {library.load_index().total_hymns} hymns match the index.")
    return 0


def _cmd_bundle(library: HymnLibrary, args: argparse.Namespace) -> int:
    bundle = generate_bundle(library)
    if args.output:
        path = write_bundle(bundle, args.output)
        print(f"Bundle written to {path} ({len(bundle.hymns)} hymns)")
    else:
        print(bundle_json(bundle))
    return 0


def _cmd_build_index(library: HymnLibrary, args: argparse.Namespace) -> int:
    index = build_index(library.data_dir, version=args.version)
    output = args.output or library.index_path
    write_index(index, output)
    print(f"Index written to {output} ({index.total_hymns} hymns)")
    return 0


# ── parser ────────────────────────────────────────────────────────────────────

def _hymn_id(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"hymn id must be a number, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nyimbo",
        description="Query, validate and bundle the Nyimbo Zetu hymn data.",
    )
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Hymn data directory (default: $NYIMBO_DATA_DIR or ./data)")
    parser.add_argument("--schema", type=Path, default=None,
                        help="Schema document (default: $NYIMBO_SCHEMA_PATH or ./schema.json)")
    parser.add_argument("--log-level", default=None,
                        help="Log level for stderr (default: $NYIMBO_LOG_LEVEL or WARNING)")

    sub = parser.add_subparsers(dest="command", metavar="<command>")
    sub.required = True

    p = sub.add_parser("list", help="List all hymns")
    p.set_defaults(func=_cmd_list)

    p = sub.add_parser("get", help="Print a hymn record")
    p.add_argument("hymn_id", type=_hymn_id)
    p.add_argument("--lyrics", action="store_true", help="Print lyrics in singing order")
    p.set_defaults(func=_cmd_get)

    p = sub.add_parser("category", help="Hymns in a category (lists categories without a name)")
    p.add_argument("name", nargs="?")
    p.set_defaults(func=_cmd_category)

    p = sub.add_parser("tag", help="Hymns with a tag (lists tags without a name)")
    p.add_argument("name", nargs="?")
    p.set_defaults(func=_cmd_tag)

    p = sub.add_parser("search", help="Search titles and subtitles")
    p.add_argument("term")
    p.set_defaults(func=_cmd_search)

    p = sub.add_parser("validate", help="Validate the structure of a hymn record")
    p.add_argument("hymn_id", type=_hymn_id)
    p.set_defaults(func=_cmd_validate)

    p = sub.add_parser("check", help="Cross-check every index entry against its record")
    p.set_defaults(func=_cmd_check)

    p = sub.add_parser("bundle", help="Generate the offline bundle")
    p.add_argument("-o", "--output", type=Path, default=None, metavar="PATH",
                   help="Write to PATH instead of stdout")
    p.set_defaults(func=_cmd_bundle)

    p = sub.add_parser("build-index", help="Regenerate the index from the hymn files")
    p.add_argument("-o", "--output", type=Path, default=None, metavar="PATH",
                   help="Index path (default: the library's index file)")
    p.add_argument("--version", default="1.0.0", help="Index version string")
    p.set_defaults(func=_cmd_build_index)

    return parser


# ── main ──────────────────────────────────────────────────────────────────────

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = Settings.from_env(default_log_level="WARNING")
    if args.data_dir is not None:
        settings.data_dir = args.data_dir
    if args.schema is not None:
        settings.schema_path = args.schema

    # stdout carries command output; logs go to stderr
    configure_logging(args.log_level or settings.log_level)

    library = HymnLibrary.from_settings(settings)
    try:
        return args.func(library, args)
    except NyimboError as exc:
        logger.debug(f"{args.command} failed: {exc!r}")
        print(f"Error: {exc}", file=sys.stderr)
        if isinstance(exc, ValidationError):
            for error in exc.errors:
                print(f"- {error}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
