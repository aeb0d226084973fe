#!/usr/bin/env python3
"""Database inspection tool for debugging and learning.

Usage:
    uv run python tools/db_inspect.py --db ./tmp/dev.db --summary
    uv run python tools/db_inspect.py --db ./tmp/dev.db --page 3
    uv run python tools/db_inspect.py --db ./tmp/dev.db --tree --root 2
"""

import argparse
import logging
import sys
from collections import Counter
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import settings  # noqa: E402
from exceptions import MagpieError  # noqa: E402
from models import Cell, Record  # noqa: E402
from storage.btree import BTree  # noqa: E402
from storage.page_store import PageStore  # noqa: E402


def print_header(store: PageStore) -> None:
    """Print file header information."""
    header = store.header
    print("=== File Header ===")
    print(f"  Page Size: {header.resolved_page_size} bytes")
    print(f"  Page Count: {header.page_count}")
    print(f"  Text Encoding: {header.text_encoding}{'' if header.supports_text else ' (unsupported)'}")
    print()


def print_summary(store: PageStore) -> None:
    """Print database summary."""
    print("=" * 50)
    print("DATABASE SUMMARY")
    print("=" * 50)
    print()

    print_header(store)

    print("=== Page Statistics ===")
    print(f"  Decoded Pages: {len(store)}")
    counts = Counter(store[page_number].page_type.name for page_number in store)
    for name, count in sorted(counts.items()):
        print(f"    {name}: {count}")

    failures = store.failures
    print(f"  Failed Pages: {len(failures)}")
    for page_number, error in sorted(failures.items())[:20]:
        print(f"    [{page_number}] {error}")
    if len(failures) > 20:
        print(f"    ... and {len(failures) - 20} more")
    print()


def print_page(store: PageStore, page_number: int) -> None:
    """Print details of a specific page."""
    failures = store.failures
    if page_number in failures:
        print(f"=== Page {page_number} ===")
        print(f"  Not decoded: {failures[page_number]}")
        return

    page = store[page_number]
    header = page.header

    print(f"=== Page {page_number} ===")
    print(f"  Type: {header.page_type.name}")
    print(f"  First Free Block: {header.first_free_block}")
    print(f"  Cell Count: {header.cells_count}")
    print(f"  Cell Content Start: {header.cells_content_start}")
    print(f"  Fragmented Free Bytes: {header.fragmented_free_bytes}")
    if header.right_most_pointer is not None:
        print(f"  Right-most Pointer: {header.right_most_pointer}")

    for i, (offset, cell) in enumerate(zip(page.cell_offsets[:10], page.cells[:10])):
        print(f"    [{i}] offset={offset} {_cell_repr(cell)}")
    if len(page.cells) > 10:
        print(f"    ... and {len(page.cells) - 10} more cells")

    print()


def print_tree(store: PageStore, root_page: int) -> None:
    """Print B-tree structure starting at root_page."""
    btree = BTree(store, max_depth=settings.max_tree_depth)

    print(f"=== B-Tree Structure (root {root_page}) ===")
    print(f"  Tree Height: {btree.tree_height(root_page)}")
    print(f"  Total Entries: {btree.count_entries(root_page)}")
    print()

    print("  Tree Layout:")
    _print_tree_node(store, root_page, depth=0)
    print()


def _print_tree_node(store: PageStore, page_number: int, depth: int) -> None:
    """Recursively print tree node information."""
    indent = "    " + "  " * depth
    if page_number not in store:
        print(f"{indent}[Missing {page_number}]")
        return

    page = store[page_number]
    kind = "Interior" if page.page_type.is_interior else "Leaf"
    print(f"{indent}[{kind} {page_number}] {page.page_type.name}, {len(page.cells)} cells")

    if page.cells and depth < 3:
        print(f"{indent}  keys: {_key_repr(page.cells[0])} .. {_key_repr(page.cells[-1])}")

    if page.page_type.is_leaf:
        return
    children = [cell.left_child_page_number for cell in page.cells] + [page.header.right_most_pointer]
    # Limit depth to avoid huge output
    if depth < 2:
        for child in children:
            _print_tree_node(store, child, depth + 1)
    elif depth == 2:
        print(f"{indent}  ({len(children)} children not expanded)")


def _cell_repr(cell: Cell) -> str:
    parts = []
    if cell.left_child_page_number is not None:
        parts.append(f"left_child={cell.left_child_page_number}")
    if cell.rowid is not None:
        parts.append(f"rowid={cell.rowid}")
    if cell.payload_length is not None:
        parts.append(f"payload_length={cell.payload_length}")
    if cell.payload is not None:
        parts.append(f"values={_record_repr(cell.payload)}")
    return " ".join(parts)


def _record_repr(record: Record, max_len: int = 40) -> str:
    text = repr(record.values)
    if len(text) > max_len:
        return text[:max_len] + "..."
    return text


def _key_repr(cell: Cell, max_len: int = 20) -> str:
    """Format a cell key for display."""
    key = cell.key
    if isinstance(key, bytes):
        hex_str = key[:max_len].hex()
        return f"0x{hex_str}..." if len(key) > max_len else f"0x{hex_str}"
    text = repr(key)
    return text[:max_len] + "..." if len(text) > max_len else text


def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect database files")
    parser.add_argument("--db", required=True, help="Path to database file")
    parser.add_argument("--summary", action="store_true", help="Show database summary")
    parser.add_argument("--page", type=int, help="Show specific page")
    parser.add_argument("--tree", action="store_true", help="Show B-tree structure")
    parser.add_argument("--root", type=int, default=settings.root_page, help="Root page for --tree")

    args = parser.parse_args()

    db_path = Path(args.db)
    if not db_path.exists():
        print(f"Error: Database file not found: {db_path}", file=sys.stderr)
        sys.exit(1)

    # Page failures are listed in the summary instead
    logging.basicConfig(level=logging.ERROR)

    try:
        store = PageStore.open(db_path)
        if args.summary:
            print_summary(store)
        elif args.page is not None:
            print_page(store, args.page)
        elif args.tree:
            print_tree(store, args.root)
        else:
            print_summary(store)
    except MagpieError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
