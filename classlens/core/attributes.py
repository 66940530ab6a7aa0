"""
Attribute Decoding
===================

Turns raw ``attribute_info`` payloads into typed attributes.  Dispatch is
by attribute name; names without a decoder surface as :class:`Unknown`
with their bytes untouched, so an unfamiliar attribute never fails a
decode.

Recognised layouts:

==================  ====================================================
``SourceFile``      u2 pool index of the file name
``Signature``       u2 pool index of a descriptor, parsed into a Signature
``Code``            max_stack, max_locals, bytecode, exception table and
                    nested attributes (decoded on demand)
``LineNumberTable`` u2 count followed by (start_pc, line_number) pairs
``Deprecated``      empty
==================  ====================================================

The :class:`AttributeResolver` wraps the owning class's constant pool and
is handed to every decode explicitly; decoded attributes never point back
at the class they came from.

References:
    - Lindholm, T. et al. (2023). The Java Virtual Machine Specification,
      Java SE 21 Edition, Section 4.7 (Attributes).
"""

from __future__ import annotations

import enum
from pathlib import PurePosixPath
from typing import Iterator, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict

from classlens.core.constant_pool import ConstantPool
from classlens.core.errors import (
    AttributeResolutionError,
    ReferenceResolutionError,
    StructuralDecodeError,
)
from classlens.core.fqname import FQNameBuf
from classlens.core.models import RawAttributeInfo, Signature
from classlens.parsers.class_reader import ByteCursor
from classlens.parsers.descriptor import parse_descriptor
from shared.logger import LensLogger

logger = LensLogger("attributes")

_FROZEN = ConfigDict(frozen=True, extra="forbid")


class AttributeKind(str, enum.Enum):
    SOURCE_FILE = "SourceFile"
    SIGNATURE = "Signature"
    CODE = "Code"
    LINE_NUMBER_TABLE = "LineNumberTable"
    DEPRECATED = "Deprecated"
    UNKNOWN = "Unknown"


# ---------------------------------------------------------------------------
# Payload records
# ---------------------------------------------------------------------------

class SourceFile(BaseModel):
    model_config = _FROZEN

    path: str

    def as_path(self) -> PurePosixPath:
        return PurePosixPath(self.path)


class SignatureAttribute(BaseModel):
    model_config = _FROZEN

    signature: Signature


class LineNumberEntry(BaseModel):
    model_config = _FROZEN

    start_pc: int
    line_number: int


class LineNumberTable(BaseModel):
    """Mapping from bytecode offsets to source lines."""
    model_config = _FROZEN

    entries: tuple[LineNumberEntry, ...] = ()

    @classmethod
    def from_pairs(cls, pairs: Sequence[tuple[int, int]]) -> LineNumberTable:
        return cls(entries=tuple(LineNumberEntry(start_pc=pc, line_number=line) for pc, line in pairs))

    def pc_to_line(self, pc: int) -> Optional[int]:
        """Return the line of the entry with the greatest ``start_pc <= pc``.

        ``None`` when *pc* precedes every entry.
        """
        best: Optional[LineNumberEntry] = None
        for entry in self.entries:
            if entry.start_pc <= pc and (best is None or entry.start_pc > best.start_pc):
                best = entry
        return None if best is None else best.line_number

    def __len__(self) -> int:
        return len(self.entries)


class Deprecated(BaseModel):
    model_config = _FROZEN


class Unknown(BaseModel):
    model_config = _FROZEN

    data: bytes


class ExceptionEntry(BaseModel):
    """One exception-table row; ``catch_type`` ``None`` catches everything."""
    model_config = _FROZEN

    start_pc: int
    end_pc: int
    handler_pc: int
    catch_type: Optional[str] = None

    @property
    def catches_all(self) -> bool:
        return self.catch_type is None

    @property
    def catch_fqname(self) -> Optional[FQNameBuf]:
        return None if self.catch_type is None else FQNameBuf(self.catch_type)

    def covers(self, pc: int) -> bool:
        return self.start_pc <= pc < self.end_pc


# ---------------------------------------------------------------------------
# Attribute containers
# ---------------------------------------------------------------------------

class HasAttributes:
    """Attribute access shared by classes, fields, methods and ``Code``.

    Subclasses provide ``_raw_attributes`` and ``_resolver``.
    """

    __slots__ = ()

    _raw_attributes: tuple[RawAttributeInfo, ...]
    _resolver: AttributeResolver

    @property
    def raw_attributes(self) -> tuple[RawAttributeInfo, ...]:
        return self._raw_attributes

    def attribute_names(self) -> list[str]:
        return [self._resolver.attribute_name(raw) for raw in self._raw_attributes]

    def iter_attributes(self) -> Iterator[Attribute]:
        for raw in self._raw_attributes:
            yield self._resolver.resolve_raw(raw)

    def attributes(self) -> list[Attribute]:
        """Decode every attribute, in declaration order."""
        return list(self.iter_attributes())

    def get_attribute(self, name: str) -> Optional[Attribute]:
        """Decode and return the first attribute called *name*.

        Attributes with other names are not decoded.
        """
        for raw in self._raw_attributes:
            if self._resolver.attribute_name(raw) == name:
                return self._resolver.resolve(name, raw.info)
        return None


class Code(HasAttributes):
    """The body of a non-abstract, non-native method.

    Nested attributes (``LineNumberTable`` and friends) stay raw until
    asked for and are then decoded through the resolver that decoded this
    ``Code``.
    """

    __slots__ = ("max_stack", "max_locals", "code", "exception_table", "_raw_attributes", "_resolver")

    def __init__(
        self,
        max_stack: int,
        max_locals: int,
        code: bytes,
        exception_table: Sequence[ExceptionEntry],
        raw_attributes: Sequence[RawAttributeInfo],
        resolver: AttributeResolver,
    ) -> None:
        self.max_stack = max_stack
        self.max_locals = max_locals
        self.code = code
        self.exception_table = tuple(exception_table)
        self._raw_attributes = tuple(raw_attributes)
        self._resolver = resolver

    @property
    def line_numbers(self) -> Optional[LineNumberTable]:
        attribute = self.get_attribute(AttributeKind.LINE_NUMBER_TABLE.value)
        return None if attribute is None else attribute.payload

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Code):
            return NotImplemented
        return (
            self.max_stack == other.max_stack
            and self.max_locals == other.max_locals
            and self.code == other.code
            and self.exception_table == other.exception_table
            and self._raw_attributes == other._raw_attributes
        )

    def __hash__(self) -> int:
        return hash((self.max_stack, self.max_locals, self.code, self.exception_table))

    def __repr__(self) -> str:
        return (
            f"Code(max_stack={self.max_stack}, max_locals={self.max_locals}, "
            f"code_length={len(self.code)}, handlers={len(self.exception_table)})"
        )


AttributePayload = Union[SourceFile, SignatureAttribute, Code, LineNumberTable, Deprecated, Unknown]

_PAYLOAD_KINDS: dict[type, AttributeKind] = {
    SourceFile: AttributeKind.SOURCE_FILE,
    SignatureAttribute: AttributeKind.SIGNATURE,
    Code: AttributeKind.CODE,
    LineNumberTable: AttributeKind.LINE_NUMBER_TABLE,
    Deprecated: AttributeKind.DEPRECATED,
    Unknown: AttributeKind.UNKNOWN,
}


class Attribute:
    """A decoded attribute: its name plus a typed payload."""

    __slots__ = ("name", "payload")

    def __init__(self, name: str, payload: AttributePayload) -> None:
        self.name = name
        self.payload = payload

    @property
    def kind(self) -> AttributeKind:
        return _PAYLOAD_KINDS[type(self.payload)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attribute):
            return NotImplemented
        return self.name == other.name and self.payload == other.payload

    def __hash__(self) -> int:
        return hash((self.name, self.payload))

    def __repr__(self) -> str:
        return f"Attribute({self.name!r}, {self.payload!r})"


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class AttributeResolver:
    """Decodes attributes against one class's constant pool.

    Usage::

        resolver = AttributeResolver(pool)
        attribute = resolver.resolve("SourceFile", payload)
        attribute.payload.path
    """

    __slots__ = ("_pool",)

    def __init__(self, pool: ConstantPool) -> None:
        self._pool = pool

    @property
    def pool(self) -> ConstantPool:
        return self._pool

    def attribute_name(self, raw: RawAttributeInfo) -> str:
        return self._pool.utf8(raw.name_index)

    def resolve_raw(self, raw: RawAttributeInfo) -> Attribute:
        return self.resolve(self.attribute_name(raw), raw.info)

    def resolve(self, name: str, payload: bytes) -> Attribute:
        """Decode *payload* according to *name*.

        Raises:
            StructuralDecodeError: The payload is shorter or longer than
                its layout requires.
            AttributeResolutionError: A pool index in the payload does not
                resolve to the required entry.
            SignatureGrammarError: A ``Signature`` attribute holds a
                malformed descriptor.
        """
        if name == AttributeKind.SOURCE_FILE.value:
            decoded: AttributePayload = self._source_file(name, payload)
        elif name == AttributeKind.SIGNATURE.value:
            decoded = self._signature(name, payload)
        elif name == AttributeKind.CODE.value:
            decoded = self._code(name, payload)
        elif name == AttributeKind.LINE_NUMBER_TABLE.value:
            decoded = self._line_number_table(payload)
        elif name == AttributeKind.DEPRECATED.value:
            ByteCursor(payload).expect_end("Deprecated attribute")
            decoded = Deprecated()
        else:
            logger.debug("Keeping unknown attribute %s raw", name, length=len(payload))
            decoded = Unknown(data=bytes(payload))
        return Attribute(name, decoded)

    # ------------------------------------------------------------------ #
    #  Layouts
    # ------------------------------------------------------------------ #

    def _string_at(self, name: str, index: int) -> str:
        text = self._pool.resolve_string(index)
        if text is None:
            raise AttributeResolutionError(name, index, "Utf8")
        return text

    def _source_file(self, name: str, payload: bytes) -> SourceFile:
        cursor = ByteCursor(payload)
        index = cursor.read_u16("sourcefile_index")
        cursor.expect_end("SourceFile attribute")
        return SourceFile(path=self._string_at(name, index))

    def _signature(self, name: str, payload: bytes) -> SignatureAttribute:
        cursor = ByteCursor(payload)
        index = cursor.read_u16("signature_index")
        cursor.expect_end("Signature attribute")
        return SignatureAttribute(signature=parse_descriptor(self._string_at(name, index)))

    def _code(self, name: str, payload: bytes) -> Code:
        cursor = ByteCursor(payload)
        max_stack = cursor.read_u16("max_stack")
        max_locals = cursor.read_u16("max_locals")
        code_length = cursor.read_u32("code_length")
        code = cursor.read_bytes(code_length, "bytecode")

        exception_table = []
        for _ in range(cursor.read_u16("exception_table_length")):
            start_pc = cursor.read_u16("start_pc")
            end_pc = cursor.read_u16("end_pc")
            handler_pc = cursor.read_u16("handler_pc")
            catch_index = cursor.read_u16("catch_type")
            exception_table.append(
                ExceptionEntry(
                    start_pc=start_pc,
                    end_pc=end_pc,
                    handler_pc=handler_pc,
                    catch_type=self._catch_type(name, catch_index),
                )
            )

        nested = []
        for _ in range(cursor.read_u16("attributes_count")):
            name_index = cursor.read_u16("attribute_name_index")
            length = cursor.read_u32("attribute_length")
            nested.append(
                RawAttributeInfo(name_index=name_index, info=cursor.read_bytes(length, "attribute info"))
            )
        cursor.expect_end("Code attribute")

        return Code(max_stack, max_locals, code, exception_table, nested, self)

    def _catch_type(self, name: str, index: int) -> Optional[str]:
        if index == 0:
            return None
        try:
            return self._pool.class_name(index)
        except ReferenceResolutionError as exc:
            raise AttributeResolutionError(name, index, "Class -> Utf8") from exc

    def _line_number_table(self, payload: bytes) -> LineNumberTable:
        cursor = ByteCursor(payload)
        count = cursor.read_u16("line_number_table_length")
        pairs = [(cursor.read_u16("start_pc"), cursor.read_u16("line_number")) for _ in range(count)]
        cursor.expect_end("LineNumberTable attribute")
        return LineNumberTable.from_pairs(pairs)
