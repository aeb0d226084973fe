from collections.abc import Iterator
from pathlib import Path
from typing import Self

from config import Settings, settings
from exceptions import DecodeError
from models import FileHeader
from storage.btree import BTree, Filter, IndexEntry, TableRow
from storage.page_store import PageStore


class MagpieDB:
    """Read-only view of a database file, fully decoded on open."""

    def __init__(self, store: PageStore, config: Settings = settings):
        self.store = store
        self._config = config
        self._btree = BTree(
            store,
            max_depth=config.max_tree_depth,
            include_index_right_most=config.include_index_right_most,
        )

    @classmethod
    def open(cls, path: Path | str, config: Settings = settings) -> Self:
        return cls(PageStore.open(path), config)

    @property
    def header(self) -> FileHeader:
        return self.store.header

    @property
    def failures(self) -> dict[int, DecodeError]:
        """Pages that could not be decoded, by page number"""
        return self.store.failures

    def walk(
        self,
        root_page: int | None = None,
        min_rowid: int | None = None,
        max_rowid: int | None = None,
    ) -> Iterator[TableRow | IndexEntry]:
        """
        Yield the rows or index entries of the tree at root_page in tree order.
        root_page defaults to the configured root (page 1, the schema table).
        """
        if root_page is None:
            root_page = self._config.root_page
        return self._btree.walk(root_page, Filter(min_rowid=min_rowid, max_rowid=max_rowid))

    def rows(
        self,
        root_page: int | None = None,
        min_rowid: int | None = None,
        max_rowid: int | None = None,
    ) -> list[TableRow]:
        """Table rows only. Index entries met along the way are skipped."""
        return [item for item in self.walk(root_page, min_rowid, max_rowid) if isinstance(item, TableRow)]

    def index_entries(self, root_page: int) -> list[IndexEntry]:
        return [item for item in self.walk(root_page) if isinstance(item, IndexEntry)]

    def count(self, root_page: int | None = None) -> int:
        return sum(1 for _ in self.walk(root_page))
