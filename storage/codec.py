"""Primitive readers for the big-endian file format.

Struct format reference (https://docs.python.org/3/library/struct.html):
    >  = big-endian byte order
    B  = unsigned char (1 byte)
    H  = unsigned short (2 bytes)
    I  = unsigned int (4 bytes)
    d  = double float (8 bytes)

Varints store 7 bits per byte, most significant group first. The high bit of
each byte is set while more bytes follow; a varint is at most 9 bytes long.
"""

import struct
from typing import BinaryIO

from exceptions import InvalidVarint, UnexpectedEof

U8_FMT = ">B"
U16_FMT = ">H"
U32_FMT = ">I"
F64_FMT = ">d"

MAX_VARINT_BYTES = 9

# Largest page size; longer reads are done in chunks of this size
READ_CHUNK_SIZE = 65536


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly size bytes or raise UnexpectedEof.

    Sizes come from untrusted serial types, so buffered streams are never
    asked for more than READ_CHUNK_SIZE bytes at once. A corrupt width then
    fails at end of file instead of allocating the whole request up front.
    """
    offset = stream.tell()
    if size <= READ_CHUNK_SIZE:
        data = stream.read(size)
    else:
        chunks = []
        remaining = size
        while remaining:
            chunk = stream.read(min(remaining, READ_CHUNK_SIZE))
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        data = b"".join(chunks)

    if len(data) < size:
        raise UnexpectedEof(f"Expected {size} bytes at offset {offset}, got {len(data)}")
    return data


def _unpack(stream: BinaryIO, fmt: str) -> int | float:
    (value,) = struct.unpack(fmt, read_exact(stream, struct.calcsize(fmt)))
    return value


def read_u8(stream: BinaryIO) -> int:
    return _unpack(stream, U8_FMT)


def read_u16(stream: BinaryIO) -> int:
    return _unpack(stream, U16_FMT)


def read_u32(stream: BinaryIO) -> int:
    return _unpack(stream, U32_FMT)


def read_f64(stream: BinaryIO) -> float:
    return _unpack(stream, F64_FMT)


def read_int(stream: BinaryIO, width: int) -> int:
    """Read a two's-complement big-endian integer of any byte width (3 and 6 included)."""
    return int.from_bytes(read_exact(stream, width), "big", signed=True)


def _to_signed64(value: int) -> int:
    value &= (1 << 64) - 1
    return value - (1 << 64) if value & (1 << 63) else value


def read_varint(stream: BinaryIO) -> int:
    """Decode one varint, consuming 1 to 9 bytes."""
    start = stream.tell()
    result = 0
    for _ in range(MAX_VARINT_BYTES):
        (byte,) = read_exact(stream, 1)
        result = (result << 7) | (byte & 0x7F)
        if byte & 0x80 == 0:
            return _to_signed64(result)
    raise InvalidVarint(f"Varint at offset {start} is longer than {MAX_VARINT_BYTES} bytes")


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer below 2**63 as a varint."""
    if value < 0 or value >= 1 << (7 * MAX_VARINT_BYTES):
        raise ValueError(f"Value {value} cannot be encoded as a varint")

    groups = [value & 0x7F]
    value >>= 7
    while value:
        groups.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(groups))
