"""
ClassLens Parsers
==================

- ``class_reader``  -- Struct-based class-file decoder
- ``descriptor``    -- Field and method descriptor grammar
"""
