"""
ClassLens Engine
=================

:class:`ClassParser` -- the entry point that maps fully qualified names to
decoded :class:`JavaClass` facades.  It owns a :class:`ClasspathResolver`
and a decode cache keyed by owned :class:`FQNameBuf`; a cache hit returns
the same facade without touching the classpath again.

Pipeline for a cache miss::

    name -> "<name>.class" -> ClasspathResolver.get -> bytes
         -> ClassFileReader.read -> RawClass -> JavaClass -> cache

``parse_bytes`` and ``parse_file`` run the decode half of the pipeline
without a classpath.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from classlens.collectors.classpath import Classpath, ClasspathResolver, Resource
from classlens.core.errors import ClassNotFoundError, ClasspathConfigurationError
from classlens.core.fqname import FQNameBuf, NameLike, as_fqname
from classlens.core.java_class import JavaClass
from classlens.parsers.class_reader import parse_raw_class
from shared.config import LensConfig
from shared.logger import LensLogger


def parse_bytes(data: bytes) -> JavaClass:
    """Decode a class file held in memory."""
    return JavaClass(parse_raw_class(data))


def parse_file(path: str | Path) -> JavaClass:
    """Decode the class file at *path*."""
    return parse_bytes(Path(path).read_bytes())


class ClassParser:
    """Finds, decodes and caches classes on a classpath.

    The parser is not thread-safe; use one per thread or guard it with a
    lock.

    Usage::

        with ClassParser.from_string("build/classes:lib/shapes.jar") as parser:
            square = parser.find("com.example.Square")
            rectangle = parser.find_super(square)
            shapes = parser.find_interfaces(square)
    """

    def __init__(
        self,
        classpath: Classpath,
        config: LensConfig | None = None,
        logger: LensLogger | None = None,
    ) -> None:
        """Initialise the parser.

        Args:
            classpath: Entries searched first, in order.
            config:    ClassLens configuration.  ``[classpath].entries``
                       are appended after *classpath*.
            logger:    Logger instance.  A new one is created if not provided.
        """
        self._config: LensConfig = config or LensConfig()
        self._logger: LensLogger = logger or LensLogger("engine")
        self._classpath = classpath + Classpath(self._config.classpath.entries)
        self._resolver = ClasspathResolver(self._classpath, logger=self._logger)
        self._cache: dict[FQNameBuf, JavaClass] = {}

    @classmethod
    def from_string(
        cls,
        text: str,
        config: LensConfig | None = None,
        logger: LensLogger | None = None,
    ) -> ClassParser:
        """Build a parser from a delimited classpath string.

        The separator is ``[classpath].separator`` from *config*, which
        defaults to the platform path separator.
        """
        config = config or LensConfig()
        return cls(Classpath.parse(text, config.classpath.separator), config=config, logger=logger)

    # ------------------------------------------------------------------ #
    #  Properties
    # ------------------------------------------------------------------ #

    @property
    def classpath(self) -> Classpath:
        return self._classpath

    @property
    def resolver(self) -> ClasspathResolver:
        return self._resolver

    @property
    def cached(self) -> int:
        """Number of decoded classes held in the cache."""
        return len(self._cache)

    def is_cached(self, name: NameLike) -> bool:
        return as_fqname(name) in self._cache

    # ------------------------------------------------------------------ #
    #  Lookups
    # ------------------------------------------------------------------ #

    def find(self, name: NameLike) -> JavaClass:
        """Return the class called *name* (``/`` or ``.`` delimited).

        Raises:
            ClassNotFoundError: Nothing on the classpath has that name.
            StructuralDecodeError: The class file is malformed.
            ReferenceResolutionError: The class file's pool is inconsistent.
            ClasspathConfigurationError: A classpath entry is unusable.
        """
        try:
            key = as_fqname(name).to_owned()
        except ValueError as exc:
            raise ClassNotFoundError(str(name)) from exc

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        with self._logger.operation(f"find {key.normalized}"):
            self._logger.debug("Cache miss for %s", key.normalized)
            resource = self._resolver.get(key.resource_path())
            if resource is None:
                raise ClassNotFoundError(key.normalized)

            java_class = parse_bytes(self._read(resource))
            if java_class.this_name != key.normalized:
                self._logger.warning(
                    f"{resource.url} declares {java_class.this_name}, expected {key.normalized}"
                )
            self._cache[key] = java_class
            self._logger.debug("Cached %s", key.normalized, source=resource.url)
        return java_class

    @staticmethod
    def _read(resource: Resource) -> bytes:
        try:
            return resource.read()
        except OSError as exc:
            raise ClasspathConfigurationError(resource.path or resource.url, f"cannot read: {exc}") from exc

    def find_super(self, java_class: JavaClass) -> JavaClass:
        """Return the superclass of *java_class*.

        Raises:
            ClassNotFoundError: The class has no superclass or it is not on
                the classpath.
        """
        super_name = java_class.super_name
        if super_name is None:
            raise ClassNotFoundError(f"superclass of {java_class.this_name}")
        return self.find(super_name)

    def find_interfaces(self, java_class: JavaClass) -> list[JavaClass]:
        """Return the directly implemented interfaces found on the classpath.

        Interfaces that are not on the classpath are left out; any other
        failure propagates.
        """
        found: list[JavaClass] = []
        for name in java_class.interfaces():
            try:
                found.append(self.find(name))
            except ClassNotFoundError:
                self._logger.debug(
                    "Interface %s of %s not on classpath", name, java_class.this_name
                )
        return found

    def find_optional(self, name: NameLike) -> Optional[JavaClass]:
        try:
            return self.find(name)
        except ClassNotFoundError:
            return None

    # ------------------------------------------------------------------ #
    #  Lifecycle
    # ------------------------------------------------------------------ #

    def close(self) -> None:
        """Release archive handles.  Cached classes stay usable."""
        self._resolver.close()

    def __enter__(self) -> ClassParser:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
