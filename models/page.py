"""B-tree page models.

Every page starts with an 8 or 12 byte header:

    offset  size  field
    ------  ----  -----
    0       1     page_type
    1       2     first_free_block
    3       2     cells_count
    5       2     cells_content_start
    7       1     fragmented_free_bytes
    8       4     right_most_pointer (interior pages only)

The header is followed by cells_count 2-byte cell offsets, relative to the
start of the page. Page 1's header sits after the 100-byte file header.
"""

from enum import IntEnum
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, model_validator

from models.record import Record

LEAF_HEADER_SIZE = 8
INTERIOR_HEADER_SIZE = 12


class PageType(IntEnum):
    """Page type discriminant, the first byte of every B-tree page."""

    INDEX_INTERIOR = 0x02
    TABLE_INTERIOR = 0x05
    INDEX_LEAF = 0x0A
    TABLE_LEAF = 0x0D

    @property
    def is_interior(self) -> bool:
        return self in (PageType.INDEX_INTERIOR, PageType.TABLE_INTERIOR)

    @property
    def is_leaf(self) -> bool:
        return not self.is_interior

    @property
    def is_table(self) -> bool:
        return self in (PageType.TABLE_INTERIOR, PageType.TABLE_LEAF)

    @property
    def is_index(self) -> bool:
        return not self.is_table


class PageHeader(BaseModel):
    """Per-page metadata. Interior pages also carry the right-most child pointer."""

    model_config = ConfigDict(frozen=True)

    LEAF_SIZE: ClassVar[int] = LEAF_HEADER_SIZE
    INTERIOR_SIZE: ClassVar[int] = INTERIOR_HEADER_SIZE

    page_type: PageType
    first_free_block: int = 0
    cells_count: int = 0
    cells_content_start: int = 0
    fragmented_free_bytes: int = 0
    right_most_pointer: int | None = None

    @model_validator(mode="after")
    def validate_right_most_pointer(self) -> Self:
        """Ensure only interior pages carry a right-most pointer."""
        if self.page_type.is_interior and self.right_most_pointer is None:
            raise ValueError(f"{self.page_type.name} page requires a right-most pointer")
        if self.page_type.is_leaf and self.right_most_pointer is not None:
            raise ValueError(f"{self.page_type.name} page cannot have a right-most pointer")
        return self

    @property
    def size(self) -> int:
        return INTERIOR_HEADER_SIZE if self.page_type.is_interior else LEAF_HEADER_SIZE


class Cell(BaseModel):
    """One B-tree entry. Which fields are set depends on the owning page type:

        field                   TableInterior  TableLeaf  IndexInterior  IndexLeaf
        left_child_page_number  yes            no         yes            no
        payload_length          no             yes        yes            yes
        rowid                   yes            yes        no             no
        payload                 no             yes        yes            yes
    """

    model_config = ConfigDict(frozen=True)

    left_child_page_number: int | None = None
    payload_length: int | None = None
    rowid: int | None = None
    payload: Record | None = None

    @model_validator(mode="after")
    def validate_payload(self) -> Self:
        if self.payload is not None and self.payload_length is None:
            raise ValueError("A cell without a payload length cannot own a payload")
        return self

    @property
    def key(self) -> Any:
        """Ordering key: the rowid, or the leading record value on index pages."""
        if self.rowid is not None:
            return self.rowid
        if self.payload is not None and len(self.payload):
            return self.payload[0].value
        return None


class Page(BaseModel):
    """A decoded B-tree page: header plus cells in cell-offset-array order."""

    model_config = ConfigDict(frozen=True)

    page_number: int
    header: PageHeader
    cell_offsets: list[int] = []
    cells: list[Cell] = []

    @property
    def page_type(self) -> PageType:
        return self.header.page_type
