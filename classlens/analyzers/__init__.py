"""
ClassLens Analyzers
====================

- ``inheritance``  -- Inheritance graph construction and ancestry queries
"""

from classlens.analyzers.inheritance import InheritanceGraph, InheritanceGraphBuilder, InheritKind

__all__ = ["InheritanceGraph", "InheritanceGraphBuilder", "InheritKind"]
