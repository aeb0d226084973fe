"""Unit tests for magpie-db models."""

import pytest
from pydantic import ValidationError

from exceptions import InvalidPageSize, InvalidRecordType
from models import Cell, FileHeader, PageHeader, PageType, Record, RecordEntry, StorageClass
from models.record import serial_type_width, storage_class_for


class TestFileHeader:
    """Tests for FileHeader model."""

    def test_resolved_page_size(self):
        assert FileHeader(page_size=4096, page_count=1, text_encoding=1).resolved_page_size == 4096

    def test_page_size_one_means_65536(self):
        header = FileHeader(page_size=1, page_count=1, text_encoding=1)
        assert header.resolved_page_size == 65536
        header.check_page_size()

    def test_page_size_not_power_of_two(self):
        header = FileHeader(page_size=1000, page_count=1, text_encoding=1)
        with pytest.raises(InvalidPageSize, match="power of 2, got 1000"):
            header.check_page_size()

    def test_page_size_zero(self):
        with pytest.raises(InvalidPageSize):
            FileHeader(page_size=0, page_count=1, text_encoding=1).check_page_size()

    def test_supports_text(self):
        assert FileHeader(page_size=512, page_count=1, text_encoding=1).supports_text
        assert not FileHeader(page_size=512, page_count=1, text_encoding=2).supports_text

    def test_page_offset(self):
        header = FileHeader(page_size=512, page_count=4, text_encoding=1)
        assert header.page_offset(1) == 100
        assert header.page_offset(2) == 512
        assert header.page_offset(4) == 1536


class TestPageType:
    """Tests for PageType enum."""

    def test_page_type_values(self):
        assert PageType.INDEX_INTERIOR == 0x02
        assert PageType.TABLE_INTERIOR == 0x05
        assert PageType.INDEX_LEAF == 0x0A
        assert PageType.TABLE_LEAF == 0x0D

    def test_classification(self):
        assert PageType.TABLE_INTERIOR.is_interior and PageType.TABLE_INTERIOR.is_table
        assert PageType.INDEX_INTERIOR.is_interior and PageType.INDEX_INTERIOR.is_index
        assert PageType.TABLE_LEAF.is_leaf and PageType.TABLE_LEAF.is_table
        assert PageType.INDEX_LEAF.is_leaf and PageType.INDEX_LEAF.is_index


class TestPageHeader:
    """Tests for PageHeader model."""

    def test_interior_requires_right_most_pointer(self):
        with pytest.raises(ValidationError, match="requires a right-most pointer"):
            PageHeader(page_type=PageType.TABLE_INTERIOR)

    def test_leaf_rejects_right_most_pointer(self):
        with pytest.raises(ValidationError, match="cannot have a right-most pointer"):
            PageHeader(page_type=PageType.INDEX_LEAF, right_most_pointer=3)

    def test_header_sizes(self):
        assert PageHeader(page_type=PageType.TABLE_LEAF).size == 8
        assert PageHeader(page_type=PageType.INDEX_INTERIOR, right_most_pointer=2).size == 12


class TestCell:
    """Tests for Cell model."""

    def test_payload_requires_payload_length(self):
        with pytest.raises(ValidationError, match="cannot own a payload"):
            Cell(left_child_page_number=2, rowid=5, payload=Record.from_values([1]))

    def test_key_is_rowid_for_table_cells(self):
        cell = Cell(payload_length=3, rowid=42, payload=Record.from_values(["x"]))
        assert cell.key == 42

    def test_key_is_leading_value_for_index_cells(self):
        cell = Cell(payload_length=5, payload=Record.from_values(["apple", 7]))
        assert cell.key == "apple"


class TestSerialTypes:
    """Tests for serial type classification."""

    def test_widths(self):
        assert [serial_type_width(code) for code in range(10)] == [0, 1, 2, 3, 4, 6, 8, 8, 0, 0]
        assert serial_type_width(12) == 0
        assert serial_type_width(14) == 1
        assert serial_type_width(13) == 0
        assert serial_type_width(25) == 6

    def test_reserved_codes(self):
        for code in (10, 11, -1):
            with pytest.raises(InvalidRecordType) as exc_info:
                storage_class_for(code)
            assert exc_info.value.code == code

    def test_storage_classes(self):
        assert storage_class_for(0) is StorageClass.NULL
        assert storage_class_for(5) is StorageClass.INTEGER
        assert storage_class_for(9) is StorageClass.INTEGER
        assert storage_class_for(7) is StorageClass.FLOAT
        assert storage_class_for(100) is StorageClass.BLOB
        assert storage_class_for(101) is StorageClass.TEXT


class TestRecordEntry:
    """Tests for RecordEntry model."""

    def test_from_value_picks_narrowest_integer(self):
        assert RecordEntry.from_value(0).serial_type == 8
        assert RecordEntry.from_value(1).serial_type == 9
        assert RecordEntry.from_value(-1).serial_type == 1
        assert RecordEntry.from_value(300).serial_type == 2
        assert RecordEntry.from_value(2**23 - 1).serial_type == 3
        assert RecordEntry.from_value(2**31).serial_type == 5
        assert RecordEntry.from_value(-(2**63)).serial_type == 6

    def test_from_value_other_classes(self):
        assert RecordEntry.from_value(None).serial_type == 0
        assert RecordEntry.from_value(1.5).serial_type == 7
        assert RecordEntry.from_value(b"ab").serial_type == 16
        assert RecordEntry.from_value("héllo").serial_type == 13 + 2 * 6

    def test_from_value_too_large(self):
        with pytest.raises(ValueError, match="does not fit in 64 bits"):
            RecordEntry.from_value(2**63)

    def test_width_is_preserved(self):
        narrow = RecordEntry(serial_type=1, value=7)
        wide = RecordEntry(serial_type=6, value=7)
        assert narrow.as_int() == wide.as_int() == 7
        assert narrow.width == 1
        assert wide.width == 8
        assert narrow != wide

    def test_as_int_rejects_non_integers(self):
        with pytest.raises(TypeError):
            RecordEntry.from_value("7").as_int()

    def test_constant_values_enforced(self):
        with pytest.raises(ValidationError):
            RecordEntry(serial_type=8, value=1)
        with pytest.raises(ValidationError):
            RecordEntry(serial_type=9, value=0)

    def test_value_must_fit_width(self):
        with pytest.raises(ValidationError, match="does not fit serial type 1"):
            RecordEntry(serial_type=1, value=200)

    def test_value_type_must_match(self):
        with pytest.raises(ValidationError):
            RecordEntry(serial_type=7, value="1.0")
        with pytest.raises(ValidationError):
            RecordEntry(serial_type=0, value=3)

    def test_blob_length_must_match(self):
        with pytest.raises(ValidationError, match="Blob length"):
            RecordEntry(serial_type=14, value=b"ab")

    def test_reserved_serial_type_rejected(self):
        with pytest.raises(ValidationError):
            RecordEntry(serial_type=10, value=None)

    def test_to_bytes(self):
        assert RecordEntry(serial_type=3, value=-2).to_bytes() == b"\xff\xff\xfe"
        assert RecordEntry(serial_type=8, value=0).to_bytes() == b""
        assert RecordEntry(serial_type=9, value=1).to_bytes() == b""
        assert RecordEntry(serial_type=0).to_bytes() == b""
        assert RecordEntry.from_value("hi").to_bytes() == b"hi"
        assert RecordEntry.from_value(1.0).to_bytes() == b"\x3f\xf0\x00\x00\x00\x00\x00\x00"


class TestRecord:
    """Tests for Record model."""

    def test_values_and_indexing(self):
        record = Record.from_values([None, 5, "x"])
        assert record.values == [None, 5, "x"]
        assert len(record) == 3
        assert record[2].storage_class is StorageClass.TEXT

    def test_empty_record(self):
        assert Record().values == []
        assert len(Record()) == 0
