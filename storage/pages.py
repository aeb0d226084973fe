"""Decoding of the file header, pages, cells and records from a seekable stream.

File layout:
    Offset 0:   100-byte file header (page 1 shares its page with it)
    Page 1:     B-tree header at offset 100
    Page N>1:   B-tree header at offset (N - 1) * page_size

Cell layouts (u32 = 4-byte big-endian, varint = 1 to 9 bytes):
    TableInterior: [left_child:u32][rowid:varint]
    TableLeaf:     [payload_length:varint][rowid:varint][record]
    IndexInterior: [left_child:u32][payload_length:varint][record]
    IndexLeaf:     [payload_length:varint][record]

Records: [header_size:varint][serial_type:varint...][bodies...]. The header
size counts its own varint. Overflow pages are not followed, so payloads that
spill past their page are decoded from whatever bytes follow the cell.
"""

from typing import BinaryIO

from exceptions import DecodeError, InvalidPageType, UnsupportedEncoding
from models import Cell, FileHeader, Page, PageHeader, PageType, Record, RecordEntry, StorageClass
from models.header import FILE_HEADER_SIZE, PAGE_COUNT_OFFSET, PAGE_SIZE_OFFSET, TEXT_ENCODING_OFFSET
from models.record import INTEGER_WIDTHS, SERIAL_TYPE_ZERO, serial_type_width, storage_class_for
from storage.codec import (
    encode_varint,
    read_exact,
    read_f64,
    read_int,
    read_u8,
    read_u16,
    read_u32,
    read_varint,
)


def read_file_header(stream: BinaryIO) -> FileHeader:
    """Read the fixed header fields and leave the stream at page 1's B-tree header."""
    stream.seek(PAGE_SIZE_OFFSET)
    page_size = read_u16(stream)

    stream.seek(PAGE_COUNT_OFFSET)
    page_count = read_u32(stream)

    stream.seek(TEXT_ENCODING_OFFSET)
    text_encoding = read_u32(stream)

    stream.seek(FILE_HEADER_SIZE)

    return FileHeader(page_size=page_size, page_count=page_count, text_encoding=text_encoding)


def read_page_type(stream: BinaryIO) -> PageType:
    value = read_u8(stream)
    try:
        return PageType(value)
    except ValueError:
        raise InvalidPageType(value) from None


def read_page_header(stream: BinaryIO) -> PageHeader:
    page_type = read_page_type(stream)
    first_free_block = read_u16(stream)
    cells_count = read_u16(stream)
    cells_content_start = read_u16(stream)
    fragmented_free_bytes = read_u8(stream)

    right_most_pointer = read_u32(stream) if page_type.is_interior else None

    return PageHeader(
        page_type=page_type,
        first_free_block=first_free_block,
        cells_count=cells_count,
        cells_content_start=cells_content_start,
        fragmented_free_bytes=fragmented_free_bytes,
        right_most_pointer=right_most_pointer,
    )


def read_entry(stream: BinaryIO, serial_type: int, file_header: FileHeader) -> RecordEntry:
    """Decode one value body for the given serial type."""
    storage_class = storage_class_for(serial_type)

    match storage_class:
        case StorageClass.NULL:
            value = None
        case StorageClass.INTEGER:
            width = INTEGER_WIDTHS.get(serial_type)
            # Types 8 and 9 are the zero-width constants 0 and 1
            value = read_int(stream, width) if width else serial_type - SERIAL_TYPE_ZERO
        case StorageClass.FLOAT:
            value = read_f64(stream)
        case StorageClass.BLOB:
            value = read_exact(stream, serial_type_width(serial_type))
        case StorageClass.TEXT:
            if not file_header.supports_text:
                raise UnsupportedEncoding(file_header.text_encoding)
            offset = stream.tell()
            raw = read_exact(stream, serial_type_width(serial_type))
            try:
                value = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise DecodeError(f"Invalid UTF-8 text at offset {offset}: {exc.reason}") from exc

    return RecordEntry(serial_type=serial_type, value=value)


def read_record(stream: BinaryIO, file_header: FileHeader) -> Record:
    """Decode a record: serial type header first, then one body per type."""
    record_start = stream.tell()
    header_size = read_varint(stream)
    header_end = record_start + header_size

    serial_types = []
    while stream.tell() < header_end:
        serial_types.append(read_varint(stream))

    entries = [read_entry(stream, serial_type, file_header) for serial_type in serial_types]
    return Record(entries=entries)


def read_cell(stream: BinaryIO, page_type: PageType, file_header: FileHeader) -> Cell:
    """Decode one cell; the fields present depend on the owning page type."""
    left_child_page_number = read_u32(stream) if page_type.is_interior else None

    payload_length = None
    if page_type is not PageType.TABLE_INTERIOR:
        payload_length = read_varint(stream)

    rowid = read_varint(stream) if page_type.is_table else None

    payload = None
    if payload_length is not None:
        payload = read_record(stream, file_header)

    return Cell(
        left_child_page_number=left_child_page_number,
        payload_length=payload_length,
        rowid=rowid,
        payload=payload,
    )


def read_page(stream: BinaryIO, file_header: FileHeader, page_number: int | None = None) -> Page:
    """Decode the page whose B-tree header starts at the current stream position.

    Cell offsets are relative to the page start, found by masking the position
    down to a page boundary (page 1's header sits after the file header).
    Cells are decoded in cell-offset-array order.
    """
    page_size = file_header.resolved_page_size
    start = stream.tell() & ~(page_size - 1)
    if page_number is None:
        page_number = start // page_size + 1

    header = read_page_header(stream)
    cell_offsets = [read_u16(stream) for _ in range(header.cells_count)]

    cells = []
    for offset in cell_offsets:
        if offset >= page_size:
            raise DecodeError(f"Cell offset {offset} lies outside page {page_number} ({page_size} bytes)")
        stream.seek(start + offset)
        cells.append(read_cell(stream, header.page_type, file_header))

    return Page(page_number=page_number, header=header, cell_offsets=cell_offsets, cells=cells)


def encode_record(record: Record) -> bytes:
    """Serialize a record exactly as read_record expects it."""
    codes = b"".join(encode_varint(entry.serial_type) for entry in record.entries)
    body = b"".join(entry.to_bytes() for entry in record.entries)

    # The header size includes its own varint, which may grow the header
    header_size = len(codes) + 1
    while header_size != len(codes) + len(encode_varint(header_size)):
        header_size = len(codes) + len(encode_varint(header_size))

    return encode_varint(header_size) + codes + body
