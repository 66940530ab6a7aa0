"""
Descriptor Grammar Parser
==========================

Recursive-descent parser for JVM field and method descriptors::

    signature := primitive | object | array | method
    primitive := 'Z' | 'B' | 'C' | 'S' | 'I' | 'J' | 'F' | 'D' | 'V'
    object    := 'L' path ';'
    array     := '[' signature
    method    := '(' signature* ')' signature

The whole input must be consumed.  Parsing is the exact inverse of
:meth:`Signature.descriptor`, so ``parse_descriptor(s).descriptor() == s``
for every valid ``s``.

References:
    - Lindholm, T. et al. (2023). The Java Virtual Machine Specification,
      Java SE 21 Edition, Section 4.3 (Descriptors).
"""

from __future__ import annotations

import re
from typing import Optional

from classlens.core.errors import SignatureGrammarError
from classlens.core.fqname import JAVA_IDENTIFIER
from classlens.core.models import (
    PRIMITIVES,
    ArraySignature,
    MethodSignature,
    ObjectSignature,
    Signature,
)

# The class-file format caps arrays at 255 dimensions. Method descriptors
# never nest in class files; a few levels are accepted for display strings.
MAX_ARRAY_DIMENSIONS = 255
MAX_METHOD_NESTING = 32

_JAVA_PATH_RE = re.compile(rf"{JAVA_IDENTIFIER}(?:/{JAVA_IDENTIFIER})*")


def is_java_path(text: str, start: int = 0, stop: Optional[int] = None) -> bool:
    """Return ``True`` if ``text[start:stop]`` is a ``/``-separated identifier path."""
    end = len(text) if stop is None else stop
    return _JAVA_PATH_RE.fullmatch(text, start, end) is not None


class _DescriptorParser:
    """Cursor over one descriptor string."""

    __slots__ = ("_text", "_pos", "_depth")

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self._depth = 0

    def _fail(self, reason: str, position: Optional[int] = None) -> SignatureGrammarError:
        return SignatureGrammarError(self._text, self._pos if position is None else position, reason)

    def parse(self) -> Signature:
        if not self._text:
            raise self._fail("empty descriptor")
        signature = self._signature()
        if self._pos != len(self._text):
            raise self._fail(f"trailing input {self._text[self._pos:]!r}")
        return signature

    def _signature(self) -> Signature:
        text = self._text
        if self._pos >= len(text):
            raise self._fail("unexpected end of descriptor")

        # Arrays are unrolled here rather than recursed into.
        opening = self._pos
        dimensions = 0
        while self._pos < len(text) and text[self._pos] == "[":
            dimensions += 1
            self._pos += 1
        if dimensions > MAX_ARRAY_DIMENSIONS:
            raise self._fail(f"too many array dimensions ({dimensions})", opening)
        if dimensions:
            signature: Signature = self._signature()
            for _ in range(dimensions):
                signature = ArraySignature(component=signature)
            return signature

        char = text[self._pos]
        if char in PRIMITIVES:
            self._pos += 1
            return PRIMITIVES[char]
        if char == "L":
            return self._object()
        if char == "(":
            return self._method()
        raise self._fail(f"unexpected character {char!r}")

    def _object(self) -> ObjectSignature:
        start = self._pos + 1
        end = self._text.find(";", start)
        if end < 0:
            raise self._fail("unterminated object reference")
        if not is_java_path(self._text, start, end):
            raise self._fail(f"invalid class path {self._text[start:end]!r}", start)
        self._pos = end + 1
        return ObjectSignature(class_name=self._text[start:end])

    def _method(self) -> MethodSignature:
        opening = self._pos
        if self._depth >= MAX_METHOD_NESTING:
            raise self._fail("method descriptor nested too deeply", opening)
        self._depth += 1
        self._pos += 1
        args: list[Signature] = []
        while True:
            if self._pos >= len(self._text):
                raise self._fail("unterminated argument list", opening)
            if self._text[self._pos] == ")":
                self._pos += 1
                break
            args.append(self._signature())
        return_type = self._signature()
        self._depth -= 1
        return MethodSignature(args=tuple(args), return_type=return_type)


def parse_descriptor(text: str) -> Signature:
    """Parse a field or method descriptor.

    Example::

        >>> str(parse_descriptor("(ZI)Ljava/lang/Object;"))
        'java.lang.Object (boolean, int)'

    Raises:
        SignatureGrammarError: If *text* is empty, malformed, or has
            trailing characters.
    """
    return _DescriptorParser(text).parse()


def parse_method_descriptor(text: str) -> MethodSignature:
    """Parse *text*, which must describe a method."""
    signature = parse_descriptor(text)
    if not isinstance(signature, MethodSignature):
        raise SignatureGrammarError(text, 0, "not a method descriptor")
    return signature
