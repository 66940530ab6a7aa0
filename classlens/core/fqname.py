"""
Fully Qualified Names
======================

A fully qualified name (FQN) is a path of Java identifiers separated by
``/`` (the class-file form, ``java/lang/Object``) or ``.`` (the source
form, ``java.lang.Object``).

Two representations exist:

- :class:`FQName` -- a view over a span of an existing string.  Nothing is
  copied at construction; the text is only materialised when asked for.
- :class:`FQNameBuf` -- an owned buffer, used as dictionary and graph keys.

Both compare and hash by their normalised (``/``-delimited) content, so a
view and an owned name holding the same path are interchangeable as keys.
A plain ``str`` compares equal to a name only in its normalised form,
keeping equality consistent with hashing.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Optional, Union

JAVA_IDENTIFIER = r"(?:[^\W\d]|\$)[\w$]*"
_QUALIFIED_NAME_RE = re.compile(rf"{JAVA_IDENTIFIER}(?:[/.]{JAVA_IDENTIFIER})*")

CLASS_FILE_SUFFIX = ".class"


def is_qualified_name(text: str, start: int = 0, stop: Optional[int] = None) -> bool:
    """Return ``True`` if ``text[start:stop]`` is a valid ``/``-or-``.`` path."""
    end = len(text) if stop is None else stop
    return _QUALIFIED_NAME_RE.fullmatch(text, start, end) is not None


class _QualifiedName:
    """Comparison, hashing and path helpers shared by both name forms."""

    __slots__ = ()

    @property
    def text(self) -> str:
        raise NotImplementedError

    @property
    def normalized(self) -> str:
        """The name with ``/`` separators."""
        return self.text.replace(".", "/")

    @property
    def dotted(self) -> str:
        """The name with ``.`` separators, as written in Java source."""
        return self.normalized.replace("/", ".")

    @property
    def simple_name(self) -> str:
        return self.normalized.rsplit("/", 1)[-1]

    @property
    def package(self) -> str:
        """``/``-delimited package, empty for the default package."""
        head, _, _ = self.normalized.rpartition("/")
        return head

    def as_path(self) -> PurePosixPath:
        return PurePosixPath(self.normalized)

    def resource_path(self) -> str:
        """Relative classpath location of the class file for this name."""
        return self.normalized + CLASS_FILE_SUFFIX

    def __eq__(self, other: object) -> bool:
        if isinstance(other, _QualifiedName):
            return self.normalized == other.normalized
        if isinstance(other, str):
            return self.normalized == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.normalized)

    def __str__(self) -> str:
        return self.text

    def __fspath__(self) -> str:
        return str(self.as_path())


class FQName(_QualifiedName):
    """A validated, non-owning view over ``source[start:stop]``.

    Usage::

        descriptor = "Ljava/lang/Object;"
        name = FQName(descriptor, 1, len(descriptor) - 1)
        assert name == "java/lang/Object"

    Raises:
        ValueError: If the span is not a qualified name.
    """

    __slots__ = ("_source", "_start", "_stop")

    def __init__(self, source: str, start: int = 0, stop: Optional[int] = None) -> None:
        end = len(source) if stop is None else stop
        if not 0 <= start <= end <= len(source):
            raise ValueError(f"span [{start}:{end}] outside of source of length {len(source)}")
        if not is_qualified_name(source, start, end):
            raise ValueError(f"{source[start:end]!r} is not a fully qualified name")
        self._source = source
        self._start = start
        self._stop = end

    @property
    def text(self) -> str:
        if self._start == 0 and self._stop == len(self._source):
            return self._source
        return self._source[self._start:self._stop]

    def to_owned(self) -> FQNameBuf:
        return FQNameBuf(self.text)

    def __repr__(self) -> str:
        return f"FQName({self.text!r})"


class FQNameBuf(_QualifiedName):
    """An owned fully qualified name.

    Raises:
        ValueError: If *text* is not a qualified name.
    """

    __slots__ = ("_buf",)

    def __init__(self, text: str) -> None:
        if not is_qualified_name(text):
            raise ValueError(f"{text!r} is not a fully qualified name")
        self._buf = text

    @property
    def text(self) -> str:
        return self._buf

    def as_view(self) -> FQName:
        return FQName(self._buf)

    def to_owned(self) -> FQNameBuf:
        return self

    def __repr__(self) -> str:
        return f"FQNameBuf({self._buf!r})"


NameLike = Union[str, FQName, FQNameBuf]


def as_fqname(name: NameLike) -> FQName:
    """View any name-like value as an :class:`FQName` without copying."""
    if isinstance(name, FQName):
        return name
    if isinstance(name, FQNameBuf):
        return name.as_view()
    return FQName(name)
