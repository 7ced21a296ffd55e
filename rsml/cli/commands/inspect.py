"""
RSML CLI Inspect Commands
=========================

Debugging dumps of the token stream and the markup tree.
"""

from __future__ import annotations

from pathlib import Path

import orjson

from rsml.engine.markup import Markup, MarkupNotFoundError, MarkupSyntaxError
from rsml.engine.rsml_compiler import CompilerOptions
from rsml.engine.rsml_parser import RsmlParseError, RsmlTokenizer


def _read_markup(path: str) -> str:
    file = Path(path)
    if not file.is_file():
        raise MarkupNotFoundError(f"Markup file not found: {file}")
    return file.read_text(encoding="utf-8")


def _dump_json(data: object) -> str:
    return orjson.dumps(data, option=orjson.OPT_INDENT_2).decode("utf-8")


def tokens_command(path: str, options: CompilerOptions, as_json: bool = False) -> int:
    """Print one token per line: position, type and value."""
    tokenizer = RsmlTokenizer(_read_markup(path), strict=options.strict)
    try:
        tokens = tokenizer.tokenize()
    except RsmlParseError as e:
        raise MarkupSyntaxError(f"RSML parse error: {e}") from e

    if as_json:
        print(_dump_json([token.to_dict() for token in tokens]))
        return 0

    for token in tokens:
        print(f"{token.line}:{token.column}\t{token.type.name}\t{token.value}")
    return 0


def tree_command(path: str, options: CompilerOptions) -> int:
    """Print the parsed markup tree as JSON."""
    markup = Markup(_read_markup(path), name=path, options=options, auto_compile=False)
    print(_dump_json(markup.tree.to_dict()))
    return 0
