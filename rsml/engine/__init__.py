"""
RSML Engine Module
==================

The markup compiler: RSML text in, Rust builder code out.

Components:
- RSML Parser: Tokenizes markup and builds the markup tree
- RSML Compiler: Generates Rust code from the markup tree
- Markup: High-level compile interface and error types
- Expander: Replaces rsml! invocations in Rust source
"""

from rsml.engine.rsml_parser import (
    Attribute,
    AttributeValue,
    NodeType,
    RsmlNode,
    RsmlParseError,
    RsmlParser,
    RsmlTokenizer,
    Token,
    TokenType,
    ValueKind,
)
from rsml.engine.rsml_compiler import (
    CompiledMarkup,
    CompilerOptions,
    RsmlCodeGenerator,
    RsmlCompiler,
    RsmlGenerationError,
)
from rsml.engine.markup import (
    Markup,
    MarkupError,
    MarkupGenerationError,
    MarkupNotFoundError,
    MarkupSyntaxError,
    compile_file,
    compile_markup,
)
from rsml.engine.expander import MacroExpander, expand_file, expand_source

__all__ = [
    "Attribute",
    "AttributeValue",
    "NodeType",
    "RsmlNode",
    "RsmlParseError",
    "RsmlParser",
    "RsmlTokenizer",
    "Token",
    "TokenType",
    "ValueKind",
    "CompiledMarkup",
    "CompilerOptions",
    "RsmlCodeGenerator",
    "RsmlCompiler",
    "RsmlGenerationError",
    "Markup",
    "MarkupError",
    "MarkupGenerationError",
    "MarkupNotFoundError",
    "MarkupSyntaxError",
    "compile_file",
    "compile_markup",
    "MacroExpander",
    "expand_file",
    "expand_source",
]
