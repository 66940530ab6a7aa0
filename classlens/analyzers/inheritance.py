"""
Inheritance Graph Analysis
===========================

Builds the ancestry of a class as a NetworkX multigraph.  Nodes are keyed
by :class:`FQNameBuf` and carry the decoded :class:`JavaClass` under the
``java_class`` attribute; edges point from a class to its direct ancestor
and are keyed by :class:`InheritKind`, so a pair of classes holds at most
one edge of each kind.

Construction walks a work stack from the root.  A node is pushed only
when it is first added, so every class is expanded exactly once even if
the input hierarchy is cyclic.  Superclasses and interfaces that are not
on the classpath end the walk along that edge.

Queries walk the finished graph breadth-first, so :meth:`inherits` lists
nearer ancestors first and, per class, the superclass before interfaces.

References:
    - Hagberg, A. A., Schult, D. A., & Swart, P. J. (2008). Exploring
      Network Structure, Dynamics, and Function using NetworkX.
      Proceedings of the 7th Python in Science Conference, 11-15.
"""

from __future__ import annotations

import enum
from collections import deque
from typing import Union

import networkx as nx

from classlens.core.engine import ClassParser
from classlens.core.errors import ClassNotFoundError, InheritanceGraphError
from classlens.core.fqname import FQName, FQNameBuf, NameLike, as_fqname
from classlens.core.java_class import JavaClass
from shared.logger import LensLogger

_CLASS_ATTR = "java_class"


class InheritKind(str, enum.Enum):
    EXTENDS = "Extends"
    IMPLEMENTS = "Implements"


class InheritanceGraph:
    """Immutable ancestry graph rooted at one class.

    Usage::

        graph = build_inheritance_graph("com/example/Square", parser)
        for ancestor, kind in graph.inherits("com/example/Square"):
            print(ancestor.this_name, kind.value)
    """

    __slots__ = ("_graph", "_root")

    def __init__(self, graph: nx.MultiDiGraph, root: FQNameBuf) -> None:
        if root not in graph:
            raise ValueError(f"root {root} is not a node of the graph")
        self._graph = nx.freeze(graph)
        self._root = root

    @property
    def graph(self) -> nx.MultiDiGraph:
        """The underlying (frozen) NetworkX graph."""
        return self._graph

    @property
    def root_name(self) -> FQNameBuf:
        return self._root

    @property
    def root(self) -> JavaClass:
        return self._graph.nodes[self._root][_CLASS_ATTR]

    def get(self, name: NameLike) -> JavaClass:
        """Return the class node called *name*.

        Raises:
            ClassNotFoundError: *name* is not part of the graph.
        """
        key = self._key(name)
        return self._graph.nodes[key][_CLASS_ATTR]

    def contains(self, name: NameLike) -> bool:
        try:
            return as_fqname(name) in self._graph
        except ValueError:
            return False

    def __contains__(self, name: object) -> bool:
        return isinstance(name, (str, FQName, FQNameBuf)) and self.contains(name)

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def nodes(self) -> list[JavaClass]:
        """Every class in the graph, in insertion order (root first)."""
        return [data[_CLASS_ATTR] for _, data in self._graph.nodes(data=True)]

    def edges(self) -> list[tuple[str, str, InheritKind]]:
        """``(subclass, ancestor, kind)`` for every edge, in insertion order."""
        return [
            (source.normalized, target.normalized, kind)
            for source, target, kind in self._graph.edges(keys=True)
        ]

    def inherits(self, name: NameLike) -> list[tuple[JavaClass, InheritKind]]:
        """Ancestors of *name*, breadth-first, each listed once.

        Each ancestor is paired with the kind of the edge it was first
        reached through.

        Raises:
            ClassNotFoundError: *name* is not part of the graph.
        """
        start = self._key(name)
        visited = {start}
        queue = deque([start])
        ancestors: list[tuple[JavaClass, InheritKind]] = []
        while queue:
            node = queue.popleft()
            for _, target, kind in self._graph.out_edges(node, keys=True):
                if target in visited:
                    continue
                visited.add(target)
                ancestors.append((self._graph.nodes[target][_CLASS_ATTR], kind))
                queue.append(target)
        return ancestors

    def _key(self, name: NameLike) -> FQNameBuf:
        try:
            key = as_fqname(name).to_owned()
        except ValueError as exc:
            raise ClassNotFoundError(str(name)) from exc
        if key not in self._graph:
            raise ClassNotFoundError(key.normalized)
        return key

    def __repr__(self) -> str:
        return (
            f"InheritanceGraph(root={self._root.normalized!r}, "
            f"nodes={self._graph.number_of_nodes()}, edges={self._graph.number_of_edges()})"
        )


class InheritanceGraphBuilder:
    """Walks a class's superclass and interface chains through a parser."""

    def __init__(self, parser: ClassParser, logger: LensLogger | None = None) -> None:
        self._parser = parser
        self._logger = logger or LensLogger("inheritance")

    def build(self, root: Union[JavaClass, NameLike]) -> InheritanceGraph:
        """Build the ancestry graph of *root*.

        Raises:
            ClassNotFoundError: *root* is given by name and is not on the
                classpath.
            InheritanceGraphError: An edge would be added twice.
        """
        root_class = root if isinstance(root, JavaClass) else self._parser.find(root)
        root_key = root_class.fqname

        graph = nx.MultiDiGraph()
        graph.add_node(root_key, **{_CLASS_ATTR: root_class})

        with self._logger.timed(f"inheritance graph for {root_key.normalized}"):
            stack = [root_class]
            while stack:
                current = stack.pop()
                source = current.fqname

                try:
                    parent = self._parser.find_super(current)
                except ClassNotFoundError:
                    parent = None
                if parent is not None:
                    if self._add_node(graph, parent):
                        stack.append(parent)
                    self._add_edge(graph, source, parent.fqname, InheritKind.EXTENDS)

                for interface in self._parser.find_interfaces(current):
                    if self._add_node(graph, interface):
                        stack.append(interface)
                    self._add_edge(graph, source, interface.fqname, InheritKind.IMPLEMENTS)

        self._logger.info(
            f"Inheritance graph for {root_key.normalized}: "
            f"{graph.number_of_nodes()} classes, {graph.number_of_edges()} edges"
        )
        return InheritanceGraph(graph, root_key)

    @staticmethod
    def _add_node(graph: nx.MultiDiGraph, java_class: JavaClass) -> bool:
        key = java_class.fqname
        if key in graph:
            return False
        graph.add_node(key, **{_CLASS_ATTR: java_class})
        return True

    @staticmethod
    def _add_edge(graph: nx.MultiDiGraph, source: FQNameBuf, target: FQNameBuf, kind: InheritKind) -> None:
        if graph.has_edge(source, target, key=kind):
            raise InheritanceGraphError(source.normalized, target.normalized, kind.value)
        graph.add_edge(source, target, key=kind)


def build_inheritance_graph(
    root: Union[JavaClass, NameLike],
    parser: ClassParser,
    logger: LensLogger | None = None,
) -> InheritanceGraph:
    """Build the ancestry graph of *root* using *parser*."""
    return InheritanceGraphBuilder(parser, logger=logger).build(root)
