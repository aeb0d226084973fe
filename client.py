"""Command line entry point: dump the rows or index entries of one B-tree.

Usage:
    magpie path/to/file.db
    magpie path/to/file.db --root 2 --min-rowid 300 --max-rowid 320
"""

import argparse
import logging
import sys

from config import settings
from db import MagpieDB
from exceptions import MagpieError
from storage.btree import IndexEntry, TableRow


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def format_item(item: TableRow | IndexEntry) -> str:
    if isinstance(item, TableRow):
        return f"[{item.rowid}]: {item.values!r}"
    key = item.key.value if item.key is not None else None
    value = item.value.value if item.value is not None else None
    return f"{key!r} => {value!r}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Decode a database file and print the contents of one B-tree")
    parser.add_argument("path", help="Path to database file")
    parser.add_argument("--root", type=int, default=settings.root_page, help="Root page of the tree to walk")
    parser.add_argument("--min-rowid", type=int, help="Smallest rowid to print (inclusive)")
    parser.add_argument("--max-rowid", type=int, help="Largest rowid to print (inclusive)")
    parser.add_argument(
        "--full-index-scan",
        action="store_true",
        help="Also descend into the right-most child of index interior pages",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    config = settings
    if args.full_index_scan:
        config = settings.model_copy(update={"include_index_right_most": True})

    try:
        # Pages that fail to decode are reported by the page store's logger
        db = MagpieDB.open(args.path, config)
        for item in db.walk(args.root, args.min_rowid, args.max_rowid):
            print(format_item(item))
    except (OSError, MagpieError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
