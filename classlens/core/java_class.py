"""
Class Facade
=============

Read-only views over a decoded :class:`RawClass`: :class:`JavaClass` for
the class itself and :class:`Field` / :class:`Method` for its members.
Names and descriptors are resolved through the constant pool on access;
the class's own and super names are resolved up front so a corrupt
``this``/``super`` chain fails at construction.
"""

from __future__ import annotations

from typing import Optional

from classlens.core.attributes import AttributeKind, AttributeResolver, Code, HasAttributes
from classlens.core.constant_pool import ConstantPool
from classlens.core.fqname import FQNameBuf
from classlens.core.models import (
    AccessFlag,
    FlagContext,
    MethodSignature,
    RawClass,
    RawFieldInfo,
    RawMethodInfo,
    Signature,
    access_flag_names,
)
from classlens.parsers.descriptor import parse_descriptor, parse_method_descriptor


class Field(HasAttributes):
    """A field declared by a class."""

    __slots__ = ("_raw", "_raw_attributes", "_resolver")

    def __init__(self, raw: RawFieldInfo, resolver: AttributeResolver) -> None:
        self._raw = raw
        self._raw_attributes = raw.attributes
        self._resolver = resolver

    @property
    def raw(self) -> RawFieldInfo:
        return self._raw

    @property
    def name(self) -> str:
        return self._resolver.pool.utf8(self._raw.name_index)

    @property
    def descriptor(self) -> str:
        return self._resolver.pool.utf8(self._raw.descriptor_index)

    @property
    def signature(self) -> Signature:
        return parse_descriptor(self.descriptor)

    @property
    def access_flags(self) -> AccessFlag:
        return AccessFlag(self._raw.access_flags)

    @property
    def modifiers(self) -> list[str]:
        return access_flag_names(self._raw.access_flags, FlagContext.FIELD)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Field):
            return NotImplemented
        return self._raw == other._raw and self._resolver.pool == other._resolver.pool

    def __hash__(self) -> int:
        return hash(self._raw)

    def __repr__(self) -> str:
        return f"Field({self.name!r}, {self.descriptor!r})"


class Method(HasAttributes):
    """A method declared by a class."""

    __slots__ = ("_raw", "_raw_attributes", "_resolver")

    def __init__(self, raw: RawMethodInfo, resolver: AttributeResolver) -> None:
        self._raw = raw
        self._raw_attributes = raw.attributes
        self._resolver = resolver

    @property
    def raw(self) -> RawMethodInfo:
        return self._raw

    @property
    def name(self) -> str:
        return self._resolver.pool.utf8(self._raw.name_index)

    @property
    def descriptor(self) -> str:
        return self._resolver.pool.utf8(self._raw.descriptor_index)

    @property
    def signature(self) -> MethodSignature:
        return parse_method_descriptor(self.descriptor)

    @property
    def args(self) -> tuple[Signature, ...]:
        return self.signature.args

    @property
    def return_type(self) -> Signature:
        return self.signature.return_type

    @property
    def access_flags(self) -> AccessFlag:
        return AccessFlag(self._raw.access_flags)

    @property
    def modifiers(self) -> list[str]:
        return access_flag_names(self._raw.access_flags, FlagContext.METHOD)

    def code(self) -> Optional[Code]:
        """The method's ``Code`` attribute; ``None`` for abstract and native methods."""
        attribute = self.get_attribute(AttributeKind.CODE.value)
        return None if attribute is None else attribute.payload

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Method):
            return NotImplemented
        return self._raw == other._raw and self._resolver.pool == other._resolver.pool

    def __hash__(self) -> int:
        return hash(self._raw)

    def __repr__(self) -> str:
        return f"Method({self.name!r}, {self.descriptor!r})"


class JavaClass(HasAttributes):
    """A decoded class file.

    Usage::

        cls = JavaClass(parse_raw_class(data))
        cls.this_name          # 'com/example/Square'
        cls.super_name         # 'com/example/Rectangle'
        [m.name for m in cls.methods()]

    Raises:
        ReferenceResolutionError: If ``this_class`` or a non-zero
            ``super_class`` does not resolve through ``Class -> Utf8``.
    """

    __slots__ = ("_raw", "_pool", "_raw_attributes", "_resolver", "_this_name", "_super_name")

    def __init__(self, raw: RawClass) -> None:
        self._raw = raw
        self._pool = ConstantPool(raw.constant_pool)
        self._raw_attributes = raw.attributes
        self._resolver = AttributeResolver(self._pool)
        self._this_name = self._pool.class_name(raw.this_class)
        # Only java/lang/Object has no superclass.
        self._super_name = None if raw.super_class == 0 else self._pool.class_name(raw.super_class)

    @property
    def raw(self) -> RawClass:
        return self._raw

    @property
    def constant_pool(self) -> ConstantPool:
        return self._pool

    @property
    def resolver(self) -> AttributeResolver:
        return self._resolver

    @property
    def version(self) -> tuple[int, int]:
        """``(major, minor)`` class-file version."""
        return self._raw.major_version, self._raw.minor_version

    @property
    def access_flags(self) -> AccessFlag:
        return AccessFlag(self._raw.access_flags)

    @property
    def modifiers(self) -> list[str]:
        return access_flag_names(self._raw.access_flags, FlagContext.CLASS)

    @property
    def is_interface(self) -> bool:
        return bool(self._raw.access_flags & AccessFlag.INTERFACE)

    @property
    def this_name(self) -> str:
        return self._this_name

    @property
    def fqname(self) -> FQNameBuf:
        return FQNameBuf(self._this_name)

    @property
    def super_name(self) -> Optional[str]:
        return self._super_name

    @property
    def source_file(self) -> Optional[str]:
        attribute = self.get_attribute(AttributeKind.SOURCE_FILE.value)
        return None if attribute is None else attribute.payload.path

    def interfaces(self) -> list[str]:
        return [self._pool.class_name(index) for index in self._raw.interfaces]

    def fields(self) -> list[Field]:
        return [Field(raw, self._resolver) for raw in self._raw.fields]

    def methods(self) -> list[Method]:
        return [Method(raw, self._resolver) for raw in self._raw.methods]

    def find_method(self, name: str, descriptor: Optional[str] = None) -> Optional[Method]:
        for method in self.methods():
            if method.name == name and (descriptor is None or method.descriptor == descriptor):
                return method
        return None

    def find_field(self, name: str) -> Optional[Field]:
        for field in self.fields():
            if field.name == name:
                return field
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JavaClass):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)

    def __repr__(self) -> str:
        return f"JavaClass({self._this_name!r})"
