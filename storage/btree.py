"""B-tree traversal over a decoded PageStore.

Walks the tree rooted at a page and yields its contents in tree order:

- Table trees yield TableRow(rowid, record) in ascending rowid order. Interior
  cells hold the largest rowid of their left subtree, so each left child is
  visited in cell order and the right-most child last.
- Index trees yield IndexEntry(record) in key order. Each interior cell's
  left subtree comes before the cell's own record.

An optional Filter restricts table rows to an inclusive rowid range. Index
cells have no rowid, so a bounded filter matches no index entries.

Traversal uses an explicit stack instead of recursion. A page reached twice
(a cycle in a corrupted file) or a tree deeper than max_depth stops the walk
with an error, as does a reference to a page missing from the store.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from config import DEFAULT_MAX_TREE_DEPTH, DEFAULT_ROOT_PAGE
from exceptions import PageCycleError, TreeDepthExceeded
from models import Cell, Page, PageType, Record, RecordEntry
from storage.page_store import PageStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Filter:
    """Inclusive rowid range. A missing bound leaves that side open."""

    min_rowid: int | None = None
    max_rowid: int | None = None

    @property
    def is_bounded(self) -> bool:
        return self.min_rowid is not None or self.max_rowid is not None

    def matches(self, cell: Cell) -> bool:
        """True if the cell's rowid lies in range. Cells without a rowid only match an open filter."""
        if not self.is_bounded:
            return True
        if cell.rowid is None:
            return False
        if self.min_rowid is not None and cell.rowid < self.min_rowid:
            return False
        if self.max_rowid is not None and cell.rowid > self.max_rowid:
            return False
        return True

    def admits_subtree(self, lower: int | None, upper: int) -> bool:
        """Whether rowids in (lower, upper] can match. lower=None means unbounded below."""
        if self.min_rowid is not None and upper < self.min_rowid:
            return False
        if self.max_rowid is not None and lower is not None and lower >= self.max_rowid:
            return False
        return True


@dataclass(frozen=True)
class TableRow:
    """A row from a table leaf page."""

    rowid: int
    record: Record

    @property
    def values(self) -> list:
        return self.record.values


@dataclass(frozen=True)
class IndexEntry:
    """A key record from an index page (key columns followed by the rowid)."""

    record: Record

    @property
    def key(self) -> RecordEntry | None:
        return self.record[0] if len(self.record) > 0 else None

    @property
    def value(self) -> RecordEntry | None:
        return self.record[1] if len(self.record) > 1 else None

    @property
    def values(self) -> list:
        return self.record.values


@dataclass(frozen=True)
class _Visit:
    """Pending descent into a child page."""

    page_number: int
    depth: int


class BTree:
    """Read-only walker over the trees in a PageStore."""

    def __init__(
        self,
        store: PageStore,
        max_depth: int = DEFAULT_MAX_TREE_DEPTH,
        include_index_right_most: bool = False,
    ):
        self.store = store
        self.max_depth = max_depth
        self.include_index_right_most = include_index_right_most

    def walk(
        self,
        root_page_id: int = DEFAULT_ROOT_PAGE,
        row_filter: Filter | None = None,
    ) -> Iterator[TableRow | IndexEntry]:
        """Yield rows and index entries of the tree rooted at root_page_id, in tree order."""
        row_filter = row_filter or Filter()
        visited: set[int] = set()
        stack: list[_Visit | TableRow | IndexEntry] = [_Visit(root_page_id, depth=1)]

        while stack:
            item = stack.pop()
            if not isinstance(item, _Visit):
                yield item
                continue

            page = self._enter(item, visited)
            # Push in reverse so the leftmost work item is popped first
            stack.extend(reversed(self._expand(page, item.depth, row_filter)))

    def _enter(self, visit: _Visit, visited: set[int]) -> Page:
        if visit.page_number in visited:
            raise PageCycleError(visit.page_number)
        if visit.depth > self.max_depth:
            raise TreeDepthExceeded(visit.page_number, visit.depth)
        visited.add(visit.page_number)

        page = self.store[visit.page_number]
        logger.debug("Entering page %d (%s) at depth %d", visit.page_number, page.page_type.name, visit.depth)
        return page

    def _expand(self, page: Page, depth: int, row_filter: Filter) -> list[_Visit | TableRow | IndexEntry]:
        """Work items for one page, in output order."""
        items: list[_Visit | TableRow | IndexEntry] = []

        match page.page_type:
            case PageType.TABLE_INTERIOR:
                lower = None
                for cell in page.cells:
                    # A separator above max_rowid still bounds rows up to max_rowid
                    if row_filter.matches(cell) or row_filter.admits_subtree(lower, cell.rowid):
                        items.append(_Visit(cell.left_child_page_number, depth + 1))
                    lower = cell.rowid
                # The right-most subtree's range is unknown from the cells alone
                items.append(_Visit(page.header.right_most_pointer, depth + 1))

            case PageType.TABLE_LEAF:
                for cell in page.cells:
                    if row_filter.matches(cell):
                        items.append(TableRow(cell.rowid, cell.payload))

            case PageType.INDEX_INTERIOR:
                for cell in page.cells:
                    if row_filter.matches(cell):
                        items.append(_Visit(cell.left_child_page_number, depth + 1))
                        items.append(IndexEntry(cell.payload))
                if self.include_index_right_most and not row_filter.is_bounded:
                    items.append(_Visit(page.header.right_most_pointer, depth + 1))

            case PageType.INDEX_LEAF:
                for cell in page.cells:
                    if row_filter.matches(cell):
                        items.append(IndexEntry(cell.payload))

        return items

    def tree_height(self, root_page_id: int = DEFAULT_ROOT_PAGE) -> int:
        """Number of levels from root_page_id down its left-most path."""
        height = 0
        visited: set[int] = set()
        visit = _Visit(root_page_id, depth=1)

        while True:
            page = self._enter(visit, visited)
            height += 1
            if page.page_type.is_leaf:
                return height
            child = page.cells[0].left_child_page_number if page.cells else page.header.right_most_pointer
            visit = _Visit(child, visit.depth + 1)

    def count_entries(self, root_page_id: int = DEFAULT_ROOT_PAGE) -> int:
        return sum(1 for _ in self.walk(root_page_id))
