"""
RSML CLI Check Command
======================

Compiles every markup file under a set of paths and reports a PASS or
FAIL line per file followed by a summary.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from rsml.engine.markup import MarkupError, MarkupNotFoundError, compile_file
from rsml.engine.rsml_compiler import CompilerOptions
from rsml.utils.logger import get_logger

logger = get_logger("rsml.cli")


def collect_files(paths: Iterable[str], pattern: str = "*.rsml") -> List[Path]:
    """Expand directories to matching files; files are taken as given."""
    files: List[Path] = []

    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            files.extend(sorted(p for p in path.rglob(pattern) if p.is_file()))
        elif path.is_file():
            files.append(path)
        else:
            raise MarkupNotFoundError(f"Path not found: {path}")

    return files


def check_paths(
    paths: Iterable[str],
    options: CompilerOptions,
    pattern: str = "*.rsml",
    verbose: bool = True,
) -> int:
    """
    Compile every file and print results.

    Returns:
        0 if every file compiled, 1 if any failed or none were found
    """
    files = collect_files(paths, pattern)
    if not files:
        print(f"No {pattern} files found")
        return 1

    passed = 0
    for path in files:
        try:
            code = compile_file(path, options)
        except MarkupError as e:
            print(f"Testing {path}: FAIL ({e})")
            logger.warning("Markup failed to compile", file=str(path))
            continue

        passed += 1
        print(f"Testing {path}: PASS")
        if verbose:
            print(f"  Output: {code}")

    print(f"Results: {passed}/{len(files)} files passed")
    return 0 if passed == len(files) else 1
