"""Storage layer: stream decoding, the in-memory page store, and tree traversal."""

from storage.btree import BTree, Filter, IndexEntry, TableRow
from storage.page_store import PageStore
from storage.pages import (
    encode_record,
    read_cell,
    read_file_header,
    read_page,
    read_page_header,
    read_record,
)

__all__ = [
    "PageStore",
    "BTree",
    "Filter",
    "TableRow",
    "IndexEntry",
    "read_file_header",
    "read_page_header",
    "read_page",
    "read_cell",
    "read_record",
    "encode_record",
]
