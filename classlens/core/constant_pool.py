"""
Constant Pool Model
====================

1-based access to a decoded constant pool and the multi-hop lookups the
rest of ClassLens needs (``Class -> Utf8``, ``String -> Utf8``).

:meth:`ConstantPool.get` and :meth:`ConstantPool.resolve_string` are
lenient and answer ``None``; the typed helpers (:meth:`utf8`,
:meth:`class_name`, :meth:`require`) raise
:class:`ReferenceResolutionError` carrying the index and expected kind.
"""

from __future__ import annotations

from typing import Iterator, Optional, Sequence, TypeVar

from classlens.core.errors import ReferenceResolutionError
from classlens.core.models import ClassInfo, ConstantPoolEntry, StringInfo, Utf8Info

_E = TypeVar("_E")


class ConstantPool:
    """Read-only view over the constant-pool slots of one class.

    Args:
        entries: The ``count - 1`` pool slots; slot ``i`` is index ``i + 1``.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Sequence[Optional[ConstantPoolEntry]]) -> None:
        self._entries = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[int, ConstantPoolEntry]]:
        """Yield ``(index, entry)`` for every usable slot."""
        for position, entry in enumerate(self._entries):
            if entry is not None:
                yield position + 1, entry

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConstantPool):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"ConstantPool({len(self._entries)} slots)"

    def get(self, index: int) -> Optional[ConstantPoolEntry]:
        """Return the entry at 1-based *index*.

        ``None`` for index 0, out-of-range indices and the unusable slot
        that follows a Long or Double entry.
        """
        if index < 1 or index > len(self._entries):
            return None
        return self._entries[index - 1]

    def resolve_string(self, index: int) -> Optional[str]:
        """Resolve *index* to text.

        A Utf8 entry yields its text; a String entry is followed one hop to
        its Utf8.  Anything else yields ``None``.
        """
        entry = self.get(index)
        if isinstance(entry, StringInfo):
            entry = self.get(entry.string_index)
        if isinstance(entry, Utf8Info):
            return entry.text
        return None

    def require(self, index: int, kind: type[_E]) -> _E:
        """Return the entry at *index*, which must be of type *kind*."""
        entry = self.get(index)
        if not isinstance(entry, kind):
            found = "nothing" if entry is None else type(entry).__name__
            raise ReferenceResolutionError(index, kind.__name__, f"found {found}")
        return entry

    def utf8(self, index: int) -> str:
        return self.require(index, Utf8Info).text

    def class_name(self, index: int) -> str:
        """Follow a Class entry to the text of its name."""
        class_info = self.require(index, ClassInfo)
        name = self.get(class_info.name_index)
        if not isinstance(name, Utf8Info):
            raise ReferenceResolutionError(
                index, "Class -> Utf8", f"name_index {class_info.name_index} is not Utf8"
            )
        return name.text
