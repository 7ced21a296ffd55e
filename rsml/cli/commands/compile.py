"""
RSML CLI Compile Commands
=========================

Compile markup files and expand rsml! invocations in Rust sources.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from rsml.engine.expander import expand_file
from rsml.engine.markup import compile_file
from rsml.engine.rsml_compiler import CompilerOptions
from rsml.utils.logger import get_logger

logger = get_logger("rsml.cli")


def compile_command(
    path: str,
    output: Optional[str],
    options: CompilerOptions,
) -> int:
    """
    Compile one markup file.

    Args:
        path: Markup file
        output: Destination file, or None for stdout
        options: Compiler options

    Returns:
        Exit code
    """
    code = compile_file(path, options)
    _write_output(code + "\n", output)
    logger.info("Compiled markup", file=path, size=len(code))
    return 0


def expand_command(
    path: str,
    output: Optional[str],
    options: CompilerOptions,
) -> int:
    """Expand rsml! invocations in one Rust source file."""
    expanded = expand_file(path, options)
    _write_output(expanded, output)
    logger.info("Expanded source", file=path)
    return 0


def _write_output(text: str, output: Optional[str]) -> None:
    if output is None:
        sys.stdout.write(text)
        return

    destination = Path(output)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(text, encoding="utf-8")
    logger.info("Wrote output", path=str(destination))
