"""
ClassLens -- JVM Class File Inspection
=======================================

ClassLens decodes compiled JVM class files into a structured, queryable
model and resolves superclass and interface chains across a classpath of
directories, jar/zip archives and individual class files, without a JVM.

Capabilities:
    - Struct-based class-file decoding (all constant-pool entry kinds)
    - Constant-pool reference resolution
    - Field and method descriptor parsing and re-encoding
    - Attribute decoding (SourceFile, Signature, Code, LineNumberTable,
      Deprecated) with lazily decoded nested attributes
    - Classpath lookup with class-loader precedence and archive caching
    - Cached class lookup by fully qualified name
    - Inheritance graphs with breadth-first ancestry queries
    - Rich console and JSON output

References:
    - Lindholm, T., Yellin, F., Bracha, G., Buckley, A. (2023).
      The Java Virtual Machine Specification, Java SE 21 Edition.
"""

from classlens.analyzers.inheritance import (
    InheritanceGraph,
    InheritanceGraphBuilder,
    InheritKind,
    build_inheritance_graph,
)
from classlens.collectors.classpath import Classpath, ClasspathResolver, Resource
from classlens.core.engine import ClassParser, parse_bytes, parse_file
from classlens.core.fqname import FQName, FQNameBuf
from classlens.core.java_class import Field, JavaClass, Method
from classlens.parsers.descriptor import parse_descriptor

__version__ = "0.1.0"
__all__ = [
    "ClassParser",
    "Classpath",
    "ClasspathResolver",
    "FQName",
    "FQNameBuf",
    "Field",
    "InheritKind",
    "InheritanceGraph",
    "InheritanceGraphBuilder",
    "JavaClass",
    "Method",
    "Resource",
    "build_inheritance_graph",
    "parse_bytes",
    "parse_descriptor",
    "parse_file",
]
