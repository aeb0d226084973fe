"""Record models.

A record is a header of serial type codes (one varint per value) followed by
the value bodies. The serial type determines both the storage class and the
number of body bytes:

    code        value                        body bytes
    ----        -----                        ----------
    0           NULL                         0
    1..4        signed big-endian integer    1, 2, 3, 4
    5           signed big-endian integer    6
    6           signed big-endian integer    8
    7           IEEE-754 float, big-endian   8
    8, 9        integer constant 0, 1        0
    10, 11      reserved                     -
    N>=12 even  BLOB                         (N-12)/2
    N>=13 odd   TEXT                         (N-13)/2

Entries keep their serial type, so the on-disk width of an integer is never
lost; as_int() gives the widened value when only the number matters.
"""

import struct
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, model_validator

from exceptions import InvalidRecordType

SERIAL_TYPE_NULL = 0
SERIAL_TYPE_FLOAT = 7
SERIAL_TYPE_ZERO = 8
SERIAL_TYPE_ONE = 9
SERIAL_TYPE_BLOB_BASE = 12
SERIAL_TYPE_TEXT_BASE = 13

# Integer serial type -> body width in bytes
INTEGER_WIDTHS = {1: 1, 2: 2, 3: 3, 4: 4, 5: 6, 6: 8}

FLOAT_FMT = ">d"


class StorageClass(StrEnum):
    NULL = "NULL"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    BLOB = "BLOB"
    TEXT = "TEXT"


def storage_class_for(serial_type: int) -> StorageClass:
    """Map a serial type code to its storage class, rejecting reserved codes."""
    if serial_type == SERIAL_TYPE_NULL:
        return StorageClass.NULL
    if serial_type in INTEGER_WIDTHS or serial_type in (SERIAL_TYPE_ZERO, SERIAL_TYPE_ONE):
        return StorageClass.INTEGER
    if serial_type == SERIAL_TYPE_FLOAT:
        return StorageClass.FLOAT
    if serial_type >= SERIAL_TYPE_BLOB_BASE and serial_type % 2 == 0:
        return StorageClass.BLOB
    if serial_type >= SERIAL_TYPE_TEXT_BASE and serial_type % 2 == 1:
        return StorageClass.TEXT
    raise InvalidRecordType(serial_type)


def serial_type_width(serial_type: int) -> int:
    """Number of body bytes a value with this serial type occupies."""
    storage_class = storage_class_for(serial_type)
    if storage_class is StorageClass.INTEGER:
        return INTEGER_WIDTHS.get(serial_type, 0)
    if storage_class is StorageClass.FLOAT:
        return 8
    if storage_class is StorageClass.BLOB:
        return (serial_type - SERIAL_TYPE_BLOB_BASE) // 2
    if storage_class is StorageClass.TEXT:
        return (serial_type - SERIAL_TYPE_TEXT_BASE) // 2
    return 0


def _fits(value: int, width: int) -> bool:
    bound = 1 << (width * 8 - 1)
    return -bound <= value < bound


class RecordEntry(BaseModel):
    """A single decoded value tagged with its serial type."""

    model_config = ConfigDict(frozen=True)

    serial_type: int
    value: None | int | float | bytes | str = None

    @model_validator(mode="after")
    def validate_value(self) -> Self:  # noqa: C901
        """Ensure the value agrees with the serial type's class and width."""
        storage_class = storage_class_for(self.serial_type)
        value = self.value

        match storage_class:
            case StorageClass.NULL:
                if value is not None:
                    raise ValueError(f"Serial type 0 holds NULL, got {value!r}")
            case StorageClass.INTEGER:
                if not isinstance(value, int):
                    raise ValueError(f"Serial type {self.serial_type} holds an integer, got {value!r}")
                if self.serial_type == SERIAL_TYPE_ZERO and value != 0:
                    raise ValueError(f"Serial type 8 is the constant 0, got {value}")
                if self.serial_type == SERIAL_TYPE_ONE and value != 1:
                    raise ValueError(f"Serial type 9 is the constant 1, got {value}")
                width = INTEGER_WIDTHS.get(self.serial_type)
                if width is not None and not _fits(value, width):
                    raise ValueError(f"Integer {value} does not fit serial type {self.serial_type}")
            case StorageClass.FLOAT:
                if not isinstance(value, float):
                    raise ValueError(f"Serial type 7 holds a float, got {value!r}")
            case StorageClass.BLOB:
                if not isinstance(value, bytes):
                    raise ValueError(f"Serial type {self.serial_type} holds a blob, got {value!r}")
                if len(value) != self.width:
                    raise ValueError(f"Blob length {len(value)} does not match serial type {self.serial_type}")
            case StorageClass.TEXT:
                if not isinstance(value, str):
                    raise ValueError(f"Serial type {self.serial_type} holds text, got {value!r}")
                if len(value.encode("utf-8")) != self.width:
                    raise ValueError(f"Text length does not match serial type {self.serial_type}")
        return self

    @classmethod
    def from_value(cls, value: Any) -> "RecordEntry":
        """Build an entry using the narrowest serial type that holds value."""
        if value is None:
            return cls(serial_type=SERIAL_TYPE_NULL)
        if isinstance(value, bool):
            value = int(value)
        if isinstance(value, int):
            if value == 0:
                return cls(serial_type=SERIAL_TYPE_ZERO, value=0)
            if value == 1:
                return cls(serial_type=SERIAL_TYPE_ONE, value=1)
            for serial_type, width in INTEGER_WIDTHS.items():
                if _fits(value, width):
                    return cls(serial_type=serial_type, value=value)
            raise ValueError(f"Integer {value} does not fit in 64 bits")
        if isinstance(value, float):
            return cls(serial_type=SERIAL_TYPE_FLOAT, value=value)
        if isinstance(value, (bytes, bytearray)):
            return cls(serial_type=SERIAL_TYPE_BLOB_BASE + 2 * len(value), value=bytes(value))
        if isinstance(value, str):
            encoded = value.encode("utf-8")
            return cls(serial_type=SERIAL_TYPE_TEXT_BASE + 2 * len(encoded), value=value)
        raise TypeError(f"Cannot store {type(value).__name__} in a record")

    @property
    def storage_class(self) -> StorageClass:
        return storage_class_for(self.serial_type)

    @property
    def width(self) -> int:
        """Body bytes used on disk."""
        return serial_type_width(self.serial_type)

    @property
    def is_null(self) -> bool:
        return self.serial_type == SERIAL_TYPE_NULL

    def as_int(self) -> int:
        """Widened integer value regardless of the stored width."""
        if self.storage_class is not StorageClass.INTEGER:
            raise TypeError(f"{self.storage_class} entry has no integer value")
        return self.value

    def to_bytes(self) -> bytes:
        """Serialize the value body (the serial type lives in the record header)."""
        if self.width == 0:
            return b""
        match self.storage_class:
            case StorageClass.INTEGER:
                return self.value.to_bytes(self.width, "big", signed=True)
            case StorageClass.FLOAT:
                return struct.pack(FLOAT_FMT, self.value)
            case StorageClass.BLOB:
                return self.value
            case StorageClass.TEXT:
                return self.value.encode("utf-8")
        return b""


class Record(BaseModel):
    """The ordered values decoded from one cell payload."""

    model_config = ConfigDict(frozen=True)

    entries: list[RecordEntry] = []

    @classmethod
    def from_values(cls, values: list[Any]) -> "Record":
        return cls(entries=[RecordEntry.from_value(v) for v in values])

    @property
    def values(self) -> list[Any]:
        return [entry.value for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> RecordEntry:
        return self.entries[index]
