"""
Classpath Resolution
=====================

An ordered :class:`Classpath` and the :class:`ClasspathResolver` that
looks resources up across it with class-loader precedence: entries are
consulted in order and the first one holding the resource wins.

Supported entries:
    - directories, searched by joining the relative path
    - ``.jar`` / ``.zip`` archives, opened once per resolver and searched
      by exact member name
    - single ``.class`` files, which only answer for the name the class
      file declares for itself

Anything else is a :class:`ClasspathConfigurationError`.  Directories that
do not exist are skipped.
"""

from __future__ import annotations

import io
import os
import zipfile
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Iterable, Iterator, Optional, Union

from classlens.core.errors import (
    ClasspathConfigurationError,
    ReferenceResolutionError,
    StructuralDecodeError,
)
from classlens.core.fqname import CLASS_FILE_SUFFIX
from classlens.parsers.class_reader import read_class_name
from shared.logger import LensLogger

ARCHIVE_SUFFIXES = frozenset({".jar", ".zip"})

PathLike = Union[str, "os.PathLike[str]"]


# ---------------------------------------------------------------------------
# Classpath
# ---------------------------------------------------------------------------

class Classpath:
    """An ordered list of classpath entries; earlier entries take precedence.

    Usage::

        cp = Classpath.parse("build/classes:lib/runtime.jar")
        cp.push_front("overrides")
        cp += Classpath(["extra.jar"])
        str(cp)   # 'overrides:build/classes:lib/runtime.jar:extra.jar'
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[PathLike] = ()) -> None:
        self._entries: list[Path] = [Path(entry) for entry in entries]

    @classmethod
    def parse(cls, text: str, separator: str = os.pathsep) -> Classpath:
        """Split *text* on *separator*, ignoring empty segments."""
        return cls(part for part in text.split(separator) if part.strip())

    @property
    def entries(self) -> tuple[Path, ...]:
        return tuple(self._entries)

    def push_back(self, entry: PathLike) -> None:
        self._entries.append(Path(entry))

    def push_front(self, entry: PathLike) -> None:
        self._entries.insert(0, Path(entry))

    def join(self, other: Classpath) -> Classpath:
        """Return a new classpath with *other*'s entries after this one's."""
        return Classpath([*self._entries, *other._entries])

    def to_string(self, separator: str = os.pathsep) -> str:
        return separator.join(str(entry) for entry in self._entries)

    def __add__(self, other: object) -> Classpath:
        if not isinstance(other, Classpath):
            return NotImplemented
        return self.join(other)

    def __iadd__(self, other: object) -> Classpath:
        if not isinstance(other, Classpath):
            return NotImplemented
        self._entries.extend(other._entries)
        return self

    def __iter__(self) -> Iterator[Path]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Classpath):
            return NotImplemented
        return self._entries == other._entries

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Classpath({[str(entry) for entry in self._entries]!r})"


# ---------------------------------------------------------------------------
# Resource
# ---------------------------------------------------------------------------

class Resource:
    """A located resource: its origin URL and a way to read its bytes.

    File-backed resources are read from disk on demand; archive members
    are buffered when found since the archive handle is shared.
    """

    __slots__ = ("_url", "_path", "_data")

    def __init__(self, url: str, *, path: Optional[Path] = None, data: Optional[bytes] = None) -> None:
        if (path is None) == (data is None):
            raise ValueError("a resource is backed by exactly one of path or data")
        self._url = url
        self._path = path
        self._data = data

    @classmethod
    def from_file(cls, path: Path) -> Resource:
        return cls(path.resolve().as_uri(), path=path)

    @classmethod
    def from_archive(cls, archive: Path, member: str, data: bytes) -> Resource:
        return cls(f"jar:{archive.resolve().as_uri()}!/{member}", data=data)

    @property
    def url(self) -> str:
        return self._url

    @property
    def path(self) -> Optional[Path]:
        """The backing file, or ``None`` for buffered archive members."""
        return self._path

    def open(self) -> BinaryIO:
        if self._path is not None:
            return self._path.open("rb")
        return io.BytesIO(self._data)

    def read(self) -> bytes:
        with self.open() as stream:
            return stream.read()

    def __repr__(self) -> str:
        return f"Resource({self._url!r})"


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class ClasspathResolver:
    """Finds resources on a :class:`Classpath`.

    Archive handles and the declared names of direct class-file entries are
    cached for the resolver's lifetime; :meth:`close` (or leaving the
    ``with`` block) releases the archives.

    Usage::

        with ClasspathResolver(Classpath.parse("lib/app.jar")) as resolver:
            resource = resolver.get("com/example/Square.class")
    """

    def __init__(self, classpath: Classpath, logger: LensLogger | None = None) -> None:
        self._classpath = classpath
        self._logger = logger or LensLogger("classpath")
        self._archives: dict[Path, zipfile.ZipFile] = {}
        self._class_names: dict[Path, str] = {}

    @property
    def classpath(self) -> Classpath:
        return self._classpath

    @property
    def open_archives(self) -> int:
        return len(self._archives)

    def get(self, relative_path: str) -> Optional[Resource]:
        """Return the first resource at *relative_path*, or ``None``.

        Raises:
            ClasspathConfigurationError: An entry consulted before a match
                is of an unsupported type, or is an unreadable archive.
        """
        relative = relative_path.lstrip("/")
        for entry in self._classpath:
            resource = self._lookup(entry, relative)
            if resource is not None:
                self._logger.debug("Resolved %s to %s", relative, resource.url)
                return resource
        self._logger.debug("%s not found on classpath", relative)
        return None

    def _lookup(self, entry: Path, relative: str) -> Optional[Resource]:
        if entry.is_dir():
            candidate = entry.joinpath(*PurePosixPath(relative).parts)
            return Resource.from_file(candidate) if candidate.is_file() else None

        suffix = entry.suffix.lower()
        if suffix in ARCHIVE_SUFFIXES:
            return self._lookup_archive(entry, relative)
        if suffix == CLASS_FILE_SUFFIX:
            return self._lookup_class_file(entry, relative)
        if not entry.exists():
            self._logger.debug("Skipping missing classpath directory %s", entry)
            return None
        raise ClasspathConfigurationError(entry, "expected a directory, .jar, .zip or .class file")

    def _archive(self, path: Path) -> zipfile.ZipFile:
        archive = self._archives.get(path)
        if archive is not None:
            return archive
        if not path.is_file():
            raise ClasspathConfigurationError(path, "archive does not exist")
        try:
            archive = zipfile.ZipFile(path)
        except (zipfile.BadZipFile, OSError) as exc:
            raise ClasspathConfigurationError(path, f"cannot open archive: {exc}") from exc
        self._logger.debug("Opened archive %s", path, members=len(archive.namelist()))
        self._archives[path] = archive
        return archive

    def _lookup_archive(self, path: Path, relative: str) -> Optional[Resource]:
        archive = self._archive(path)
        try:
            archive.getinfo(relative)
        except KeyError:
            return None
        try:
            data = archive.read(relative)
        except (zipfile.BadZipFile, OSError) as exc:
            raise ClasspathConfigurationError(path, f"cannot read {relative}: {exc}") from exc
        return Resource.from_archive(path, relative, data)

    def _lookup_class_file(self, path: Path, relative: str) -> Optional[Resource]:
        declared = self._class_names.get(path)
        if declared is None:
            try:
                data = path.read_bytes()
            except OSError as exc:
                raise ClasspathConfigurationError(path, f"cannot read class file: {exc}") from exc
            try:
                declared = read_class_name(data)
            except (StructuralDecodeError, ReferenceResolutionError) as exc:
                raise ClasspathConfigurationError(path, f"cannot read class name: {exc}") from exc
            self._class_names[path] = declared
        if relative != declared + CLASS_FILE_SUFFIX:
            return None
        return Resource.from_file(path)

    def close(self) -> None:
        for archive in self._archives.values():
            archive.close()
        self._archives.clear()

    def __enter__(self) -> ClasspathResolver:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
