"""Test factories for assembling class files.

No JVM is needed: :class:`ClassFileBuilder` writes class-file bytes
directly, allocating constant-pool entries as they are referenced.  The
``make_*`` helpers build the small shape hierarchy used across tests and
write classes into directories and jars.
"""

import struct
import zipfile
from pathlib import Path
from typing import Optional, Sequence

ACC_PUBLIC = 0x0001
ACC_PRIVATE = 0x0002
ACC_STATIC = 0x0008
ACC_FINAL = 0x0010
ACC_SUPER = 0x0020
ACC_INTERFACE = 0x0200
ACC_ABSTRACT = 0x0400

OBJECT = "java/lang/Object"

# (start_pc, end_pc, handler_pc, catch class name or None)
ExceptionRow = tuple[int, int, int, Optional[str]]


class ClassFileBuilder:
    """Assemble the bytes of one class file.

    Args:
        name: Internal name, e.g. ``com/example/Square``
        super_name: Superclass internal name, ``None`` for ``super_class = 0``
        interfaces: Implemented interface names
        access: Class access flags
        major: Major version (default 65, Java 21)
        minor: Minor version
    """

    def __init__(
        self,
        name: str,
        super_name: Optional[str] = OBJECT,
        interfaces: Sequence[str] = (),
        access: int = ACC_PUBLIC | ACC_SUPER,
        major: int = 65,
        minor: int = 0,
    ) -> None:
        self.major = major
        self.minor = minor
        self.access = access
        self._pool: list[bytes] = []
        self._slots = 0
        self._utf8: dict[bytes, int] = {}
        self._classes: dict[str, int] = {}
        self.this_index = self.class_ref(name)
        self.super_index = 0 if super_name is None else self.class_ref(super_name)
        self.interface_indices = [self.class_ref(iface) for iface in interfaces]
        self._fields: list[bytes] = []
        self._methods: list[bytes] = []
        self._attributes: list[tuple[str, bytes]] = []

    # -- constant pool -----------------------------------------------------

    def raw_entry(self, tag: int, body: bytes, slots: int = 1) -> int:
        """Append an entry verbatim and return its index."""
        self._pool.append(struct.pack(">B", tag) + body)
        index = self._slots + 1
        self._slots += slots
        return index

    def utf8_raw(self, raw: bytes) -> int:
        if raw not in self._utf8:
            self._utf8[raw] = self.raw_entry(1, struct.pack(">H", len(raw)) + raw)
        return self._utf8[raw]

    def utf8(self, text: str) -> int:
        return self.utf8_raw(text.encode("utf-8"))

    def class_ref(self, name: str) -> int:
        if name not in self._classes:
            self._classes[name] = self.raw_entry(7, struct.pack(">H", self.utf8(name)))
        return self._classes[name]

    def string(self, text: str) -> int:
        return self.raw_entry(8, struct.pack(">H", self.utf8(text)))

    def integer(self, value: int) -> int:
        return self.raw_entry(3, struct.pack(">i", value))

    def float_(self, value: float) -> int:
        return self.raw_entry(4, struct.pack(">f", value))

    def long(self, value: int) -> int:
        return self.raw_entry(5, struct.pack(">q", value), slots=2)

    def double(self, value: float) -> int:
        return self.raw_entry(6, struct.pack(">d", value), slots=2)

    def name_and_type(self, name: str, descriptor: str) -> int:
        return self.raw_entry(12, struct.pack(">HH", self.utf8(name), self.utf8(descriptor)))

    def method_ref(self, owner: str, name: str, descriptor: str) -> int:
        return self.raw_entry(10, struct.pack(">HH", self.class_ref(owner), self.name_and_type(name, descriptor)))

    # -- attributes --------------------------------------------------------

    def _encode_attributes(self, attributes: Sequence[tuple[str, bytes]]) -> bytes:
        out = struct.pack(">H", len(attributes))
        for name, payload in attributes:
            out += struct.pack(">HI", self.utf8(name), len(payload)) + payload
        return out

    def source_file(self, path: str) -> tuple[str, bytes]:
        return "SourceFile", struct.pack(">H", self.utf8(path))

    def signature(self, text: str) -> tuple[str, bytes]:
        return "Signature", struct.pack(">H", self.utf8(text))

    @staticmethod
    def line_number_table(pairs: Sequence[tuple[int, int]]) -> tuple[str, bytes]:
        payload = struct.pack(">H", len(pairs))
        for start_pc, line in pairs:
            payload += struct.pack(">HH", start_pc, line)
        return "LineNumberTable", payload

    def code(
        self,
        bytecode: bytes,
        max_stack: int = 1,
        max_locals: int = 1,
        exception_table: Sequence[ExceptionRow] = (),
        attributes: Sequence[tuple[str, bytes]] = (),
    ) -> tuple[str, bytes]:
        payload = struct.pack(">HHI", max_stack, max_locals, len(bytecode)) + bytecode
        payload += struct.pack(">H", len(exception_table))
        for start_pc, end_pc, handler_pc, catch_type in exception_table:
            catch_index = 0 if catch_type is None else self.class_ref(catch_type)
            payload += struct.pack(">HHHH", start_pc, end_pc, handler_pc, catch_index)
        payload += self._encode_attributes(attributes)
        return "Code", payload

    # -- members -----------------------------------------------------------

    def add_field(
        self,
        name: str,
        descriptor: str,
        access: int = ACC_PRIVATE,
        attributes: Sequence[tuple[str, bytes]] = (),
    ) -> "ClassFileBuilder":
        self._fields.append(
            struct.pack(">HHH", access, self.utf8(name), self.utf8(descriptor))
            + self._encode_attributes(attributes)
        )
        return self

    def add_method(
        self,
        name: str,
        descriptor: str,
        access: int = ACC_PUBLIC,
        attributes: Sequence[tuple[str, bytes]] = (),
    ) -> "ClassFileBuilder":
        self._methods.append(
            struct.pack(">HHH", access, self.utf8(name), self.utf8(descriptor))
            + self._encode_attributes(attributes)
        )
        return self

    def add_attribute(self, attribute: tuple[str, bytes]) -> "ClassFileBuilder":
        self._attributes.append(attribute)
        return self

    # -- output ------------------------------------------------------------

    def build(self) -> bytes:
        # Encode trailing sections first so their pool entries exist.
        attributes = self._encode_attributes(self._attributes)
        out = struct.pack(">IHH", 0xCAFEBABE, self.minor, self.major)
        out += struct.pack(">H", self._slots + 1) + b"".join(self._pool)
        out += struct.pack(">HHH", self.access, self.this_index, self.super_index)
        out += struct.pack(">H", len(self.interface_indices))
        out += b"".join(struct.pack(">H", index) for index in self.interface_indices)
        out += struct.pack(">H", len(self._fields)) + b"".join(self._fields)
        out += struct.pack(">H", len(self._methods)) + b"".join(self._methods)
        return out + attributes


def make_class_bytes(name: str, super_name: Optional[str] = OBJECT, interfaces: Sequence[str] = ()) -> bytes:
    """Create a minimal class file with no members.

    Args:
        name: Internal class name
        super_name: Superclass (default java/lang/Object)
        interfaces: Implemented interfaces

    Returns:
        Class-file bytes
    """
    return ClassFileBuilder(name, super_name, interfaces).build()


def make_interface_bytes(name: str, extends: Sequence[str] = ()) -> bytes:
    """Create an interface, optionally extending other interfaces."""
    return ClassFileBuilder(
        name,
        OBJECT,
        extends,
        access=ACC_PUBLIC | ACC_INTERFACE | ACC_ABSTRACT,
    ).build()


def make_square_bytes() -> bytes:
    """``Square extends Rectangle implements Shape, Comparable<Square>``.

    Carries a SourceFile, a generic class Signature, a ``side`` field, a
    constructor whose Code has LineNumberTable [(0, 10), (5, 11)] and an
    exception handler, an ``area()D`` method with a body and an abstract
    ``compareTo`` with no Code.
    """
    builder = ClassFileBuilder("Square", "Rectangle", ["Shape", "java/lang/Comparable"])
    builder.add_field("side", "D", access=ACC_PRIVATE | ACC_FINAL)
    builder.add_method(
        "<init>",
        "(D)V",
        attributes=[
            builder.code(
                bytes([0x2A, 0x27, 0x27, 0xB7, 0x00, 0x01, 0xB1]),
                max_stack=5,
                max_locals=3,
                exception_table=[(0, 5, 6, "java/lang/IllegalArgumentException"), (0, 5, 6, None)],
                attributes=[builder.line_number_table([(0, 10), (5, 11)])],
            )
        ],
    )
    builder.add_method(
        "area",
        "()D",
        attributes=[builder.code(bytes([0x0E, 0xAF]), max_stack=2, max_locals=1)],
    )
    builder.add_method("compareTo", "(LSquare;)I")
    builder.add_attribute(builder.source_file("Square.java"))
    builder.add_attribute(builder.signature("LRectangle;LShape;Ljava/lang/Comparable<LSquare;>;"))
    return builder.build()


def make_rectangle_bytes() -> bytes:
    """``Rectangle`` with two double fields; its superclass is java/lang/Object."""
    builder = ClassFileBuilder("Rectangle")
    builder.add_field("width", "D", access=ACC_PRIVATE)
    builder.add_field("height", "D")
    builder.add_method("<init>", "(DD)V", attributes=[builder.code(bytes([0xB1]))])
    builder.add_attribute(builder.source_file("Rectangle.java"))
    return builder.build()


def make_shape_bytes() -> bytes:
    """The ``Shape`` interface with one abstract method."""
    builder = ClassFileBuilder("Shape", access=ACC_PUBLIC | ACC_INTERFACE | ACC_ABSTRACT)
    builder.add_method("area", "()D", access=ACC_PUBLIC | ACC_ABSTRACT)
    return builder.build()


def make_shape_classes() -> dict[str, bytes]:
    """Square, Rectangle and Shape keyed by internal name."""
    return {
        "Square": make_square_bytes(),
        "Rectangle": make_rectangle_bytes(),
        "Shape": make_shape_bytes(),
    }


def write_classes(directory: Path, classes: dict[str, bytes]) -> Path:
    """Write each class under *directory* at ``<name>.class``.

    Returns:
        The directory
    """
    for name, data in classes.items():
        target = directory.joinpath(*f"{name}.class".split("/"))
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    return directory


def write_jar(path: Path, classes: dict[str, bytes]) -> Path:
    """Write *classes* into a jar at *path*.

    Returns:
        The jar path
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as jar:
        jar.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
        for name, data in classes.items():
            jar.writestr(f"{name}.class", data)
    return path
