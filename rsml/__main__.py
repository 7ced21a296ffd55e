"""
RSML CLI Entry Point
====================

Allows running rsml as a module: python -m rsml
"""

from rsml.cli.main import main

if __name__ == "__main__":
    main()
