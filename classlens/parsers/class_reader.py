"""
JVM Class File Reader
======================

Manual struct-based decoder for the JVM ``ClassFile`` structure.  The
reader turns a byte buffer into an immutable :class:`RawClass` tree; it
does not interpret descriptors or attribute payloads beyond their length
prefixes.

All multi-byte quantities are big-endian.  Every read is bounds-checked
before slicing, so truncated input raises :class:`StructuralDecodeError`
naming the offset and the number of missing bytes rather than producing a
partial tree.

The reader extracts:
    - header (magic, minor/major version)
    - constant pool, all fourteen entry kinds; Long and Double take two slots
    - access flags, ``this_class``, ``super_class`` and interface indices
    - field and method records with their raw attributes
    - class-level raw attributes

References:
    - Lindholm, T. et al. (2023). The Java Virtual Machine Specification,
      Java SE 21 Edition, Section 4.1 (The ClassFile Structure) and
      Section 4.4 (The Constant Pool).
"""

from __future__ import annotations

import struct
from typing import Optional, Union

from classlens.core.constant_pool import ConstantPool
from classlens.core.errors import StructuralDecodeError
from classlens.core.models import (
    CLASS_FILE_MAGIC,
    ClassInfo,
    ConstantPoolEntry,
    ConstantTag,
    DoubleInfo,
    FieldRefInfo,
    FloatInfo,
    IntegerInfo,
    InterfaceMethodRefInfo,
    InvokeDynamicInfo,
    LongInfo,
    MethodHandleInfo,
    MethodRefInfo,
    MethodTypeInfo,
    NameAndTypeInfo,
    RawAttributeInfo,
    RawClass,
    RawFieldInfo,
    RawMethodInfo,
    StringInfo,
    Utf8Info,
)
from shared.logger import LensLogger

logger = LensLogger("reader")

_U8 = struct.Struct(">B")
_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")
_I32 = struct.Struct(">i")
_I64 = struct.Struct(">q")
_U64 = struct.Struct(">Q")


# ---------------------------------------------------------------------------
# Modified UTF-8
# ---------------------------------------------------------------------------

def decode_modified_utf8(raw: bytes) -> str:
    """Decode the JVM's modified UTF-8, replacing what cannot be decoded.

    ``\\xc0\\x80`` encodes NUL and supplementary characters are stored as
    two separately encoded surrogates; both are folded back into regular
    Unicode here.
    """
    data = raw.replace(b"\xc0\x80", b"\x00")
    try:
        text = data.decode("utf-8", errors="surrogatepass")
    except UnicodeDecodeError:
        return data.decode("utf-8", errors="replace")
    # Pair up surrogates; lone ones become U+FFFD.
    return text.encode("utf-16", errors="surrogatepass").decode("utf-16", errors="replace")


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------

class ByteCursor:
    """Bounds-checked big-endian reads over a byte buffer.

    Each read names what it is reading so a short buffer produces a
    readable :class:`StructuralDecodeError`.
    """

    __slots__ = ("_data", "_offset")

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def expect_end(self, what: str) -> None:
        """Raise if any bytes are left unread."""
        if self._offset != len(self._data):
            raise StructuralDecodeError(
                f"{len(self._data) - self._offset} trailing bytes after {what}",
                offset=self._offset,
            )

    def _require(self, size: int, what: str) -> int:
        start = self._offset
        available = len(self._data) - start
        if size > available:
            raise StructuralDecodeError(
                f"unexpected end of data reading {what}: "
                f"need {size} bytes, {size - available} missing",
                offset=start,
            )
        self._offset = start + size
        return start

    def unpack(self, fmt: struct.Struct, what: str) -> int:
        start = self._require(fmt.size, what)
        return fmt.unpack_from(self._data, start)[0]

    def read_u8(self, what: str = "u1") -> int:
        return self.unpack(_U8, what)

    def read_u16(self, what: str = "u2") -> int:
        return self.unpack(_U16, what)

    def read_u32(self, what: str = "u4") -> int:
        return self.unpack(_U32, what)

    def read_bytes(self, size: int, what: str) -> bytes:
        start = self._require(size, what)
        return self._data[start:start + size]


_Member = Union[RawFieldInfo, RawMethodInfo]


class ClassFileReader(ByteCursor):
    """Single-use cursor over the bytes of one class file.

    Usage::

        raw = ClassFileReader(data).read()
        raw.major_version
    """

    __slots__ = ()

    # ------------------------------------------------------------------ #
    #  Structure reads
    # ------------------------------------------------------------------ #

    def _read_header(self) -> tuple[int, int]:
        magic = self.read_u32("magic")
        if magic != CLASS_FILE_MAGIC:
            raise StructuralDecodeError(
                f"bad magic 0x{magic:08X}, expected 0x{CLASS_FILE_MAGIC:08X}",
                offset=0,
            )
        minor = self.read_u16("minor_version")
        major = self.read_u16("major_version")
        return minor, major

    def _read_constant_pool(self) -> tuple[Optional[ConstantPoolEntry], ...]:
        count = self.read_u16("constant_pool_count")
        slots = max(count - 1, 0)
        pool: list[Optional[ConstantPoolEntry]] = []
        while len(pool) < slots:
            entry_offset = self._offset
            entry = self._read_pool_entry()
            pool.append(entry)
            if entry.slots == 2:
                if len(pool) >= slots:
                    raise StructuralDecodeError(
                        f"{entry.tag.name} entry at pool index {len(pool)} "
                        f"needs two slots but the pool has {slots}",
                        offset=entry_offset,
                    )
                pool.append(None)
        return tuple(pool)

    def _read_pool_entry(self) -> ConstantPoolEntry:
        tag_offset = self._offset
        tag = self.read_u8("constant pool tag")

        if tag == ConstantTag.UTF8:
            length = self.read_u16("utf8 length")
            raw = self.read_bytes(length, "utf8 bytes")
            return Utf8Info(raw=raw, text=decode_modified_utf8(raw))
        if tag == ConstantTag.INTEGER:
            return IntegerInfo(value=self.unpack(_I32, "integer"))
        if tag == ConstantTag.FLOAT:
            return FloatInfo(bits=self.read_u32("float"))
        if tag == ConstantTag.LONG:
            return LongInfo(value=self.unpack(_I64, "long"))
        if tag == ConstantTag.DOUBLE:
            return DoubleInfo(bits=self.unpack(_U64, "double"))
        if tag == ConstantTag.CLASS:
            return ClassInfo(name_index=self.read_u16("class name_index"))
        if tag == ConstantTag.STRING:
            return StringInfo(string_index=self.read_u16("string_index"))
        if tag == ConstantTag.FIELD_REF:
            return FieldRefInfo(
                class_index=self.read_u16("class_index"),
                name_and_type_index=self.read_u16("name_and_type_index"),
            )
        if tag == ConstantTag.METHOD_REF:
            return MethodRefInfo(
                class_index=self.read_u16("class_index"),
                name_and_type_index=self.read_u16("name_and_type_index"),
            )
        if tag == ConstantTag.INTERFACE_METHOD_REF:
            return InterfaceMethodRefInfo(
                class_index=self.read_u16("class_index"),
                name_and_type_index=self.read_u16("name_and_type_index"),
            )
        if tag == ConstantTag.NAME_AND_TYPE:
            return NameAndTypeInfo(
                name_index=self.read_u16("name_index"),
                descriptor_index=self.read_u16("descriptor_index"),
            )
        if tag == ConstantTag.METHOD_HANDLE:
            return MethodHandleInfo(
                reference_kind=self.read_u8("reference_kind"),
                reference_index=self.read_u16("reference_index"),
            )
        if tag == ConstantTag.METHOD_TYPE:
            return MethodTypeInfo(descriptor_index=self.read_u16("descriptor_index"))
        if tag == ConstantTag.INVOKE_DYNAMIC:
            return InvokeDynamicInfo(
                bootstrap_method_attr_index=self.read_u16("bootstrap_method_attr_index"),
                name_and_type_index=self.read_u16("name_and_type_index"),
            )

        raise StructuralDecodeError(f"unknown constant pool tag {tag}", offset=tag_offset)

    def _read_interfaces(self) -> tuple[int, ...]:
        count = self.read_u16("interfaces_count")
        return tuple(self.read_u16("interface index") for _ in range(count))

    def _read_attributes(self) -> tuple[RawAttributeInfo, ...]:
        count = self.read_u16("attributes_count")
        attributes = []
        for _ in range(count):
            name_index = self.read_u16("attribute_name_index")
            length = self.read_u32("attribute_length")
            attributes.append(
                RawAttributeInfo(name_index=name_index, info=self.read_bytes(length, "attribute info"))
            )
        return tuple(attributes)

    def _read_members(self, model: type[_Member], what: str) -> tuple[_Member, ...]:
        count = self.read_u16(f"{what}_count")
        members = []
        for _ in range(count):
            access_flags = self.read_u16(f"{what} access_flags")
            name_index = self.read_u16(f"{what} name_index")
            descriptor_index = self.read_u16(f"{what} descriptor_index")
            members.append(
                model(
                    access_flags=access_flags,
                    name_index=name_index,
                    descriptor_index=descriptor_index,
                    attributes=self._read_attributes(),
                )
            )
        return tuple(members)

    # ------------------------------------------------------------------ #
    #  Public API
    # ------------------------------------------------------------------ #

    def read(self) -> RawClass:
        """Decode the complete class file.

        Raises:
            StructuralDecodeError: On bad magic, truncation, an unknown
                pool tag, or bytes left over after the class attributes.
        """
        minor, major = self._read_header()
        constant_pool = self._read_constant_pool()
        access_flags = self.read_u16("access_flags")
        this_class = self.read_u16("this_class")
        super_class = self.read_u16("super_class")
        interfaces = self._read_interfaces()
        fields = self._read_members(RawFieldInfo, "field")
        methods = self._read_members(RawMethodInfo, "method")
        attributes = self._read_attributes()

        self.expect_end("class attributes")

        logger.debug(
            "Decoded class file v%d.%d",
            major,
            minor,
            pool_slots=len(constant_pool),
            fields=len(fields),
            methods=len(methods),
        )
        return RawClass(
            minor_version=minor,
            major_version=major,
            constant_pool=constant_pool,
            access_flags=access_flags,
            this_class=this_class,
            super_class=super_class,
            interfaces=interfaces,
            fields=fields,
            methods=methods,
            attributes=attributes,
        )

    def read_name(self) -> str:
        """Decode only as far as ``this_class`` and return the class name."""
        self._read_header()
        pool = ConstantPool(self._read_constant_pool())
        self.read_u16("access_flags")
        return pool.class_name(self.read_u16("this_class"))


def parse_raw_class(data: bytes) -> RawClass:
    """Decode *data* into a :class:`RawClass`."""
    return ClassFileReader(data).read()


def read_class_name(data: bytes) -> str:
    """Return the ``/``-delimited name a class file declares for itself."""
    return ClassFileReader(data).read_name()
