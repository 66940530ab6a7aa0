"""
ClassLens Output
=================

- ``console``  -- Rich terminal rendering
- ``report``   -- Summary models and JSON reports
"""
