"""
ClassLens Core
===============

- ``errors``         -- Error taxonomy
- ``fqname``         -- Fully qualified names (view and owned forms)
- ``models``         -- Pydantic records: raw class tree, pool entries, signatures
- ``constant_pool``  -- 1-based constant-pool access and reference following
- ``attributes``     -- Attribute decoding
- ``java_class``     -- Class, field and method facades
- ``engine``         -- Class parser and cache
"""
