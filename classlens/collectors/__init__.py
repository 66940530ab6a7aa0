"""
ClassLens Collectors
=====================

- ``classpath``  -- Classpath model and resource resolution
"""

from classlens.collectors.classpath import Classpath, ClasspathResolver, Resource

__all__ = ["Classpath", "ClasspathResolver", "Resource"]
