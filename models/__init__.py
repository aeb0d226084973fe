"""Pydantic models for the decoded database file."""

from models.header import FILE_HEADER_SIZE, TEXT_ENCODING_UTF8, FileHeader
from models.page import Cell, Page, PageHeader, PageType
from models.record import Record, RecordEntry, StorageClass

__all__ = [
    "FileHeader",
    "FILE_HEADER_SIZE",
    "TEXT_ENCODING_UTF8",
    "PageType",
    "PageHeader",
    "Cell",
    "Page",
    "Record",
    "RecordEntry",
    "StorageClass",
]
