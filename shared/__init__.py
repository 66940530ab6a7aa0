"""
ClassLens Shared Module
=======================

Configuration, logging and console utilities used by every ClassLens
component.
"""

from shared.config import LensConfig, get_config

__all__ = ["LensConfig", "get_config"]
