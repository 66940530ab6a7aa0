"""
ClassLens Entry Point
======================

Allows running the ClassLens CLI via: python -m classlens
"""

from classlens.cli import main

if __name__ == "__main__":
    main()
