"""Whole-file page decoding.

The PageStore reads the file header, then decodes every page in file order
into an in-memory map keyed by page number (1-based, as on disk). Children
are referenced by page number and resolved through the store at traversal
time.

Pages that fail to decode (freelist or overflow pages, corruption) are logged
and left out; they are kept in `failures` so callers can report them. Looking
up such a page later raises MissingPage.
"""

import io
import logging
import os
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import BinaryIO, Self

from exceptions import DecodeError, MissingPage
from models import FileHeader, Page
from storage.pages import read_file_header, read_page

logger = logging.getLogger(__name__)


class PageStore(Mapping[int, Page]):
    """Read-only map of page number -> decoded Page."""

    def __init__(
        self,
        header: FileHeader,
        pages: dict[int, Page],
        failures: dict[int, DecodeError] | None = None,
    ):
        self.header = header
        self._pages = dict(pages)
        self._failures = dict(failures or {})

    @classmethod
    def load(cls, stream: BinaryIO) -> Self:
        """Decode every page from a seekable binary stream.

        Header errors and an invalid page size are fatal. Page-level decode
        errors are not.
        """
        header = read_file_header(stream)
        header.check_page_size()
        page_size = header.resolved_page_size

        file_size = stream.seek(0, os.SEEK_END)
        page_count = header.page_count
        if page_count == 0:
            page_count = file_size // page_size
            logger.info("Header page count is 0, using %d pages from file size", page_count)
        else:
            # A partial last page is still attempted so its failure is recorded
            file_pages = -(-file_size // page_size)
            if page_count > file_pages:
                logger.info("Header page count %d exceeds file size, using %d pages", page_count, file_pages)
                page_count = file_pages
        stream.seek(header.page_offset(1))

        pages: dict[int, Page] = {}
        failures: dict[int, DecodeError] = {}

        for page_number in range(1, page_count + 1):
            try:
                page = read_page(stream, header, page_number)
            except DecodeError as exc:
                logger.warning("Page %d: %s", page_number, exc)
                failures[page_number] = exc
            else:
                logger.debug("Page %d: %s with %d cells", page_number, page.page_type.name, len(page.cells))
                pages[page_number] = page

            stream.seek(page_size * page_number)

        logger.info("Decoded %d of %d pages (%d failed)", len(pages), page_count, len(failures))
        return cls(header, pages, failures)

    @classmethod
    def open(cls, path: Path | str) -> Self:
        """Load a database file from disk."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Database file not found: {path}")

        with open(path, "rb") as f:
            return cls.load(f)

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        return cls.load(io.BytesIO(data))

    @property
    def failures(self) -> dict[int, DecodeError]:
        """Page number -> error for every page that could not be decoded."""
        return dict(self._failures)

    def __getitem__(self, page_number: int) -> Page:
        try:
            return self._pages[page_number]
        except KeyError:
            raise MissingPage(page_number) from None

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._pages))

    def __len__(self) -> int:
        return len(self._pages)
