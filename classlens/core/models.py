"""
ClassLens Data Models
======================

Pydantic models for the immutable records ClassLens produces: the raw
class-file tree, the constant-pool entry variants and the type signature
tree.  Every model is frozen; instances are hashable and compare by value.

References:
    - Lindholm, T., Yellin, F., Bracha, G., Buckley, A. (2023).
      The Java Virtual Machine Specification, Java SE 21 Edition,
      Chapter 4: The class File Format.
"""

from __future__ import annotations

import enum
import struct
from typing import ClassVar, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from classlens.core.fqname import FQNameBuf

_FROZEN = ConfigDict(frozen=True, extra="forbid")

CLASS_FILE_MAGIC: int = 0xCAFEBABE


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ConstantTag(enum.IntEnum):
    """Constant-pool tag bytes."""
    UTF8 = 1
    INTEGER = 3
    FLOAT = 4
    LONG = 5
    DOUBLE = 6
    CLASS = 7
    STRING = 8
    FIELD_REF = 9
    METHOD_REF = 10
    INTERFACE_METHOD_REF = 11
    NAME_AND_TYPE = 12
    METHOD_HANDLE = 15
    METHOD_TYPE = 16
    INVOKE_DYNAMIC = 18


class AccessFlag(enum.IntFlag):
    """Access and property flags of classes, fields and methods.

    Several bits mean different things depending on where they appear
    (``0x0020`` is ``ACC_SUPER`` on a class and ``ACC_SYNCHRONIZED`` on a
    method); use :func:`access_flag_names` for a context-aware rendering.
    """
    PUBLIC = 0x0001
    PRIVATE = 0x0002
    PROTECTED = 0x0004
    STATIC = 0x0008
    FINAL = 0x0010
    SUPER = 0x0020
    SYNCHRONIZED = 0x0020
    VOLATILE = 0x0040
    BRIDGE = 0x0040
    TRANSIENT = 0x0080
    VARARGS = 0x0080
    NATIVE = 0x0100
    INTERFACE = 0x0200
    ABSTRACT = 0x0400
    STRICT = 0x0800
    SYNTHETIC = 0x1000
    ANNOTATION = 0x2000
    ENUM = 0x4000
    MODULE = 0x8000


class FlagContext(str, enum.Enum):
    CLASS = "class"
    FIELD = "field"
    METHOD = "method"


_FLAG_NAMES: dict[FlagContext, list[tuple[int, str]]] = {
    FlagContext.CLASS: [
        (0x0001, "public"), (0x0010, "final"), (0x0020, "super"),
        (0x0200, "interface"), (0x0400, "abstract"), (0x1000, "synthetic"),
        (0x2000, "annotation"), (0x4000, "enum"), (0x8000, "module"),
    ],
    FlagContext.FIELD: [
        (0x0001, "public"), (0x0002, "private"), (0x0004, "protected"),
        (0x0008, "static"), (0x0010, "final"), (0x0040, "volatile"),
        (0x0080, "transient"), (0x1000, "synthetic"), (0x4000, "enum"),
    ],
    FlagContext.METHOD: [
        (0x0001, "public"), (0x0002, "private"), (0x0004, "protected"),
        (0x0008, "static"), (0x0010, "final"), (0x0020, "synchronized"),
        (0x0040, "bridge"), (0x0080, "varargs"), (0x0100, "native"),
        (0x0400, "abstract"), (0x0800, "strict"), (0x1000, "synthetic"),
    ],
}


def access_flag_names(flags: int, context: FlagContext) -> list[str]:
    """Render *flags* as Java keywords valid in *context*, in JVMS order."""
    return [name for mask, name in _FLAG_NAMES[context] if flags & mask]


# ---------------------------------------------------------------------------
# Constant-pool entries
# ---------------------------------------------------------------------------

class _PoolEntry(BaseModel):
    model_config = _FROZEN

    tag: ClassVar[ConstantTag]
    slots: ClassVar[int] = 1


class Utf8Info(_PoolEntry):
    """Modified UTF-8 text.

    ``raw`` holds the bytes exactly as stored; ``text`` is their lossy
    decoding (invalid sequences replaced).
    """
    tag: ClassVar[ConstantTag] = ConstantTag.UTF8
    raw: bytes
    text: str


class IntegerInfo(_PoolEntry):
    tag: ClassVar[ConstantTag] = ConstantTag.INTEGER
    value: int


class FloatInfo(_PoolEntry):
    """An IEEE 754 single; stored as raw bits so NaN entries compare equal."""
    tag: ClassVar[ConstantTag] = ConstantTag.FLOAT
    bits: int

    @property
    def value(self) -> float:
        return struct.unpack(">f", struct.pack(">I", self.bits))[0]


class LongInfo(_PoolEntry):
    tag: ClassVar[ConstantTag] = ConstantTag.LONG
    slots: ClassVar[int] = 2
    value: int


class DoubleInfo(_PoolEntry):
    tag: ClassVar[ConstantTag] = ConstantTag.DOUBLE
    slots: ClassVar[int] = 2
    bits: int

    @property
    def value(self) -> float:
        return struct.unpack(">d", struct.pack(">Q", self.bits))[0]


class ClassInfo(_PoolEntry):
    tag: ClassVar[ConstantTag] = ConstantTag.CLASS
    name_index: int


class StringInfo(_PoolEntry):
    tag: ClassVar[ConstantTag] = ConstantTag.STRING
    string_index: int


class FieldRefInfo(_PoolEntry):
    tag: ClassVar[ConstantTag] = ConstantTag.FIELD_REF
    class_index: int
    name_and_type_index: int


class MethodRefInfo(_PoolEntry):
    tag: ClassVar[ConstantTag] = ConstantTag.METHOD_REF
    class_index: int
    name_and_type_index: int


class InterfaceMethodRefInfo(_PoolEntry):
    tag: ClassVar[ConstantTag] = ConstantTag.INTERFACE_METHOD_REF
    class_index: int
    name_and_type_index: int


class NameAndTypeInfo(_PoolEntry):
    tag: ClassVar[ConstantTag] = ConstantTag.NAME_AND_TYPE
    name_index: int
    descriptor_index: int


class MethodHandleInfo(_PoolEntry):
    tag: ClassVar[ConstantTag] = ConstantTag.METHOD_HANDLE
    reference_kind: int
    reference_index: int


class MethodTypeInfo(_PoolEntry):
    tag: ClassVar[ConstantTag] = ConstantTag.METHOD_TYPE
    descriptor_index: int


class InvokeDynamicInfo(_PoolEntry):
    tag: ClassVar[ConstantTag] = ConstantTag.INVOKE_DYNAMIC
    bootstrap_method_attr_index: int
    name_and_type_index: int


ConstantPoolEntry = Union[
    Utf8Info,
    IntegerInfo,
    FloatInfo,
    LongInfo,
    DoubleInfo,
    ClassInfo,
    StringInfo,
    FieldRefInfo,
    MethodRefInfo,
    InterfaceMethodRefInfo,
    NameAndTypeInfo,
    MethodHandleInfo,
    MethodTypeInfo,
    InvokeDynamicInfo,
]


# ---------------------------------------------------------------------------
# Raw class-file records
# ---------------------------------------------------------------------------

class RawAttributeInfo(BaseModel):
    """An undecoded ``attribute_info``: name index plus opaque payload."""
    model_config = _FROZEN

    name_index: int
    info: bytes

    @property
    def length(self) -> int:
        return len(self.info)


class RawFieldInfo(BaseModel):
    model_config = _FROZEN

    access_flags: int
    name_index: int
    descriptor_index: int
    attributes: tuple[RawAttributeInfo, ...] = ()


class RawMethodInfo(BaseModel):
    model_config = _FROZEN

    access_flags: int
    name_index: int
    descriptor_index: int
    attributes: tuple[RawAttributeInfo, ...] = ()


class RawClass(BaseModel):
    """The untranslated ``ClassFile`` structure.

    ``constant_pool`` holds ``count - 1`` slots; slot ``i`` is pool index
    ``i + 1``.  The slot following a Long or Double entry is ``None``.
    """
    model_config = _FROZEN

    magic: int = CLASS_FILE_MAGIC
    minor_version: int
    major_version: int
    constant_pool: tuple[Optional[ConstantPoolEntry], ...]
    access_flags: int
    this_class: int
    super_class: int
    interfaces: tuple[int, ...] = ()
    fields: tuple[RawFieldInfo, ...] = ()
    methods: tuple[RawMethodInfo, ...] = ()
    attributes: tuple[RawAttributeInfo, ...] = ()

    @property
    def constant_pool_count(self) -> int:
        """The ``constant_pool_count`` header field (slots + 1)."""
        return len(self.constant_pool) + 1


# ---------------------------------------------------------------------------
# Type signatures
# ---------------------------------------------------------------------------

class PrimitiveKind(str, enum.Enum):
    """Base types and ``void``, valued by their descriptor character."""
    BOOLEAN = "Z"
    BYTE = "B"
    CHAR = "C"
    SHORT = "S"
    INT = "I"
    LONG = "J"
    FLOAT = "F"
    DOUBLE = "D"
    VOID = "V"

    @property
    def java_name(self) -> str:
        return self.name.lower()


class PrimitiveSignature(BaseModel):
    model_config = _FROZEN

    kind: PrimitiveKind

    def descriptor(self) -> str:
        return self.kind.value

    def __str__(self) -> str:
        return self.kind.java_name


class ObjectSignature(BaseModel):
    """A class or interface reference, ``L<class_name>;``."""
    model_config = _FROZEN

    class_name: str = Field(min_length=1)

    @property
    def fqname(self) -> FQNameBuf:
        return FQNameBuf(self.class_name)

    def descriptor(self) -> str:
        return f"L{self.class_name};"

    def __str__(self) -> str:
        return self.class_name.replace("/", ".")


class ArraySignature(BaseModel):
    model_config = _FROZEN

    component: Signature

    @property
    def dimensions(self) -> int:
        return self._unwrap()[0]

    def _unwrap(self) -> tuple[int, Signature]:
        depth = 1
        inner = self.component
        while isinstance(inner, ArraySignature):
            depth += 1
            inner = inner.component
        return depth, inner

    def descriptor(self) -> str:
        depth, inner = self._unwrap()
        return "[" * depth + inner.descriptor()

    def __str__(self) -> str:
        depth, inner = self._unwrap()
        return str(inner) + "[]" * depth


class MethodSignature(BaseModel):
    """Ordered argument types and one return type."""
    model_config = _FROZEN

    args: tuple[Signature, ...] = ()
    return_type: Signature

    def descriptor(self) -> str:
        return "(" + "".join(arg.descriptor() for arg in self.args) + ")" + self.return_type.descriptor()

    def __str__(self) -> str:
        return f"{self.return_type} ({', '.join(str(arg) for arg in self.args)})"


Signature = Union[PrimitiveSignature, ObjectSignature, ArraySignature, MethodSignature]

ArraySignature.model_rebuild()
MethodSignature.model_rebuild()

PRIMITIVES: dict[str, PrimitiveSignature] = {
    kind.value: PrimitiveSignature(kind=kind) for kind in PrimitiveKind
}

BOOLEAN = PRIMITIVES["Z"]
BYTE = PRIMITIVES["B"]
CHAR = PRIMITIVES["C"]
SHORT = PRIMITIVES["S"]
INT = PRIMITIVES["I"]
LONG = PRIMITIVES["J"]
FLOAT = PRIMITIVES["F"]
DOUBLE = PRIMITIVES["D"]
VOID = PRIMITIVES["V"]
