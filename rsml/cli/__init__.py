"""
RSML CLI
========

Command-line interface for the RSML compiler.

Commands:
- compile: Compile an .rsml file to Rust code
- expand: Expand rsml! invocations in a Rust source file
- check: Compile every .rsml file under the given paths and report results
- tokens / tree: Dump the token stream or markup tree
"""

from rsml.cli.main import main, cli

__all__ = ["main", "cli"]
