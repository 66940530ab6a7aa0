"""
ClassLens Error Taxonomy
=========================

Every failure raised by ClassLens derives from :class:`ClassLensError`.
Only :class:`ClassNotFoundError` is recovered internally (by
``ClassParser.find_interfaces`` and the inheritance graph builder); all
other kinds propagate to the caller.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ClassLensError(Exception):
    """Base class for all ClassLens errors."""


class StructuralDecodeError(ClassLensError):
    """The byte stream does not follow the class-file layout.

    Raised for truncated input, bad magic, unknown constant-pool tags and
    trailing bytes.

    Attributes:
        offset: Byte offset at which decoding failed, when known.
    """

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class ReferenceResolutionError(ClassLensError):
    """A constant-pool index is out of range or names the wrong kind of entry.

    Attributes:
        index:    The offending pool index.
        expected: The entry kind the caller required.
    """

    def __init__(self, index: int, expected: str, detail: str = "") -> None:
        self.index = index
        self.expected = expected
        message = f"constant pool index {index} does not resolve to {expected}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class AttributeResolutionError(ReferenceResolutionError):
    """A recognised attribute refers to a pool entry that cannot be resolved.

    Attributes:
        attribute_name: Name of the attribute being decoded.
    """

    def __init__(self, attribute_name: str, index: int, expected: str) -> None:
        self.attribute_name = attribute_name
        super().__init__(index, expected, f"while resolving attribute {attribute_name}")


class ClassNotFoundError(ClassLensError):
    """No class with the given fully qualified name is on the classpath.

    Attributes:
        name: The fully qualified name that was looked up.
    """

    def __init__(self, name: str) -> None:
        self.name = str(name)
        super().__init__(f"No class found for name {self.name!r}")


class ClasspathConfigurationError(ClassLensError):
    """A classpath entry is unsupported or cannot be read.

    Attributes:
        path: The offending classpath entry.
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Unsupported entry in classpath {str(self.path)!r}: {reason}")


class SignatureGrammarError(ClassLensError):
    """A type descriptor is malformed.

    Attributes:
        text:     The descriptor being parsed.
        position: Character position of the failure.
    """

    def __init__(self, text: str, position: int, reason: str) -> None:
        self.text = text
        self.position = position
        super().__init__(f"invalid descriptor {text!r} at position {position}: {reason}")


class InheritanceGraphError(ClassLensError):
    """An inheritance edge was added twice; the traversal expanded a node twice."""

    def __init__(self, source: str, target: str, kind: str) -> None:
        self.source = source
        self.target = target
        self.kind = kind
        super().__init__(
            f"adding inheritance of {source} failed: "
            f"edge {source} -> {target} ({kind}) already exists"
        )
