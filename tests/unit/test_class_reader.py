"""Tests for parsers/class_reader.py.

Tests:
- Header, pool and member decoding
- Two-slot Long/Double entries
- Structural failures (bad magic, truncation, unknown tag, trailing bytes)
- Modified UTF-8 decoding
- read_class_name
"""

import struct

import pytest

from classlens.core.errors import StructuralDecodeError
from classlens.core.models import (
    ClassInfo,
    DoubleInfo,
    IntegerInfo,
    LongInfo,
    StringInfo,
    Utf8Info,
)
from classlens.parsers.class_reader import (
    ByteCursor,
    ClassFileReader,
    decode_modified_utf8,
    parse_raw_class,
    read_class_name,
)
from tests.factories import ClassFileBuilder, make_square_bytes


class TestClassFileReader:
    """Tests for ClassFileReader.read."""

    def test_header_versions(self) -> None:
        """Minor and major versions are read in file order."""
        raw = parse_raw_class(ClassFileBuilder("A", major=52, minor=3).build())

        assert raw.magic == 0xCAFEBABE
        assert raw.major_version == 52
        assert raw.minor_version == 3

    def test_pool_slots_match_count(self) -> None:
        """The pool holds count - 1 slots."""
        builder = ClassFileBuilder("A")
        raw = parse_raw_class(builder.build())

        # A, java/lang/Object: two Utf8 and two Class entries
        assert len(raw.constant_pool) == 4
        assert raw.constant_pool_count == 5

    def test_this_and_super_indices(self) -> None:
        """this_class and super_class point at Class entries."""
        builder = ClassFileBuilder("A", "B")
        raw = parse_raw_class(builder.build())

        assert raw.this_class == builder.this_index
        assert raw.super_class == builder.super_index
        assert isinstance(raw.constant_pool[raw.this_class - 1], ClassInfo)

    def test_members_and_attributes(self) -> None:
        """Fields, methods and class attributes are read with their raw attributes."""
        raw = parse_raw_class(make_square_bytes())

        assert len(raw.fields) == 1
        assert len(raw.methods) == 3
        assert len(raw.attributes) == 2
        assert len(raw.interfaces) == 2
        assert raw.methods[0].attributes[0].length > 0

    def test_scalar_entries(self) -> None:
        """Integer, String and Utf8 bodies are decoded."""
        builder = ClassFileBuilder("A")
        int_index = builder.integer(-7)
        string_index = builder.string("hello")
        raw = parse_raw_class(builder.build())

        assert raw.constant_pool[int_index - 1] == IntegerInfo(value=-7)
        string_entry = raw.constant_pool[string_index - 1]
        assert isinstance(string_entry, StringInfo)
        assert raw.constant_pool[string_entry.string_index - 1] == Utf8Info(raw=b"hello", text="hello")

    def test_long_and_double_take_two_slots(self) -> None:
        """The slot after a Long or Double is unusable and later indices shift."""
        builder = ClassFileBuilder("A")
        long_index = builder.long(2**40)
        double_index = builder.double(1.5)
        after = builder.utf8("after")
        raw = parse_raw_class(builder.build())

        assert double_index == long_index + 2
        assert after == double_index + 2
        assert raw.constant_pool[long_index - 1] == LongInfo(value=2**40)
        assert raw.constant_pool[long_index] is None
        double_entry = raw.constant_pool[double_index - 1]
        assert isinstance(double_entry, DoubleInfo)
        assert double_entry.value == 1.5
        assert raw.constant_pool[double_index] is None
        assert raw.constant_pool[after - 1] == Utf8Info(raw=b"after", text="after")

    def test_float_entry_value(self) -> None:
        """Float entries keep raw bits and expose the value."""
        builder = ClassFileBuilder("A")
        index = builder.float_(0.25)
        raw = parse_raw_class(builder.build())

        assert raw.constant_pool[index - 1].value == 0.25


class TestStructuralFailures:
    """Malformed inputs raise StructuralDecodeError."""

    def test_bad_magic(self) -> None:
        """A wrong magic number is rejected."""
        data = b"\xde\xad\xbe\xef" + make_square_bytes()[4:]

        with pytest.raises(StructuralDecodeError, match="bad magic"):
            parse_raw_class(data)

    def test_empty_input(self) -> None:
        """Empty input fails on the magic read."""
        with pytest.raises(StructuralDecodeError, match="magic"):
            parse_raw_class(b"")

    def test_truncated_input_reports_offset(self) -> None:
        """A short read names the offset and missing byte count."""
        data = make_square_bytes()

        with pytest.raises(StructuralDecodeError) as excinfo:
            parse_raw_class(data[:-1])

        assert excinfo.value.offset is not None
        assert "1 missing" in str(excinfo.value)

    def test_truncated_everywhere(self) -> None:
        """Every strict prefix of a valid class fails cleanly."""
        data = ClassFileBuilder("A").build()

        for size in range(len(data)):
            with pytest.raises(StructuralDecodeError):
                parse_raw_class(data[:size])

    def test_unknown_tag(self) -> None:
        """An unknown constant-pool tag is a hard failure."""
        builder = ClassFileBuilder("A")
        builder.raw_entry(2, b"")

        with pytest.raises(StructuralDecodeError, match="unknown constant pool tag 2"):
            parse_raw_class(builder.build())

    def test_trailing_bytes(self) -> None:
        """Bytes after the class attributes are rejected."""
        with pytest.raises(StructuralDecodeError, match="3 trailing bytes"):
            parse_raw_class(make_square_bytes() + b"\x00\x00\x00")

    def test_long_in_last_slot(self) -> None:
        """A Long whose second slot lies outside the pool is rejected."""
        header = struct.pack(">IHH", 0xCAFEBABE, 0, 65)
        pool = struct.pack(">H", 2) + struct.pack(">Bq", 5, 1)

        with pytest.raises(StructuralDecodeError, match="needs two slots"):
            parse_raw_class(header + pool)

    def test_attribute_length_past_end(self) -> None:
        """An attribute claiming more bytes than remain is rejected."""
        builder = ClassFileBuilder("A")
        data = builder.build()
        # Replace the empty class attribute table with one oversized attribute.
        data = data[:-2] + struct.pack(">HHI", 1, builder.utf8("A"), 100)

        with pytest.raises(StructuralDecodeError, match="attribute info"):
            parse_raw_class(data)


class TestByteCursor:
    """Tests for ByteCursor."""

    def test_reads_big_endian(self) -> None:
        """Multi-byte reads are big-endian."""
        cursor = ByteCursor(b"\x01\x02\x00\x00\x00\x03\x04")

        assert cursor.read_u16() == 0x0102
        assert cursor.read_u32() == 3
        assert cursor.read_u8() == 4
        assert cursor.remaining == 0

    def test_expect_end(self) -> None:
        """Unread bytes are reported."""
        cursor = ByteCursor(b"\x00\x01\x02")
        cursor.read_u16()

        with pytest.raises(StructuralDecodeError, match="1 trailing bytes after payload"):
            cursor.expect_end("payload")


class TestModifiedUtf8:
    """Tests for decode_modified_utf8."""

    def test_ascii(self) -> None:
        assert decode_modified_utf8(b"java/lang/Object") == "java/lang/Object"

    def test_encoded_nul(self) -> None:
        """The two-byte NUL form decodes to U+0000."""
        assert decode_modified_utf8(b"a\xc0\x80b") == "a\x00b"

    def test_surrogate_pair(self) -> None:
        """Separately encoded surrogates combine into one code point."""
        assert decode_modified_utf8(b"\xed\xa0\xbd\xed\xb8\x80") == "\U0001F600"

    def test_lone_surrogate_replaced(self) -> None:
        assert decode_modified_utf8(b"x\xed\xa0\xbd") == "x\ufffd"

    def test_invalid_bytes_replaced(self) -> None:
        """Invalid sequences are replaced, never fatal."""
        assert decode_modified_utf8(b"ok\xff") == "ok\ufffd"

    def test_pool_keeps_raw_bytes(self) -> None:
        """Utf8 entries keep the stored bytes alongside the text."""
        builder = ClassFileBuilder("A")
        index = builder.utf8_raw(b"bad\xff")
        raw = parse_raw_class(builder.build())

        entry = raw.constant_pool[index - 1]
        assert entry.raw == b"bad\xff"
        assert entry.text == "bad\ufffd"


class TestReadClassName:
    """Tests for read_class_name."""

    def test_returns_declared_name(self) -> None:
        assert read_class_name(make_square_bytes()) == "Square"

    def test_ignores_body(self) -> None:
        """Only the prefix up to this_class is decoded."""
        data = ClassFileBuilder("com/example/Thing").build()

        assert read_class_name(data[:-4]) == "com/example/Thing"

    def test_reader_offset_advances(self) -> None:
        reader = ClassFileReader(make_square_bytes())
        reader.read()

        assert reader.remaining == 0
