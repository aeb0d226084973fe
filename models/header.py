"""Database file header model.

Only three fields of the 100-byte header are used:

    offset  size  field
    ------  ----  -----
    16      2     page_size (1 means 65536)
    28      4     page_count
    56      4     text_encoding (1 = UTF-8)

All multi-byte integers are big-endian.
"""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict

from exceptions import InvalidPageSize

FILE_HEADER_SIZE = 100

PAGE_SIZE_OFFSET = 16
PAGE_COUNT_OFFSET = 28
TEXT_ENCODING_OFFSET = 56

TEXT_ENCODING_UTF8 = 1


class FileHeader(BaseModel):
    """Fields read from the start of the database file.

    The header is read as-is; callers validate the page size with
    check_page_size() and the text encoding through supports_text before
    relying on them.
    """

    model_config = ConfigDict(frozen=True)

    SIZE: ClassVar[int] = FILE_HEADER_SIZE

    page_size: int
    page_count: int
    text_encoding: int

    @property
    def resolved_page_size(self) -> int:
        """Page size in bytes. The 2-byte field stores 65536 as 1."""
        return 65536 if self.page_size == 1 else self.page_size

    @property
    def supports_text(self) -> bool:
        return self.text_encoding == TEXT_ENCODING_UTF8

    def check_page_size(self) -> None:
        size = self.resolved_page_size
        if size <= 0 or size & (size - 1) != 0:
            raise InvalidPageSize(self.page_size)

    def page_offset(self, page_number: int) -> int:
        """Absolute offset of a page's header (page 1 follows the file header)."""
        if page_number == 1:
            return FILE_HEADER_SIZE
        return (page_number - 1) * self.resolved_page_size
