"""
RSML - RuSt Markup Language compiler
====================================

Compiles JSX-like markup into Rust code that builds a hyprui element
tree. The compiler is a pure text-to-text pipeline:

    tokenizer -> parser -> code generator

Quick Start:
    >>> from rsml import compile_markup
    >>> compile_markup('<container center><text>Hello</text></container>')
    'Box::new(hyprui::Container::new().center().child(hyprui::Text::new("Hello")))'

Command line:
    $ rsml compile ui/counter.rsml
    $ rsml expand src/main.rs -o build/main.rs
    $ rsml check rsml_tests/
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

from typing import TYPE_CHECKING

# Core compile API (always available)
from rsml.engine.markup import (
    Markup,
    MarkupError,
    MarkupGenerationError,
    MarkupNotFoundError,
    MarkupSyntaxError,
    compile_file,
    compile_markup,
)
from rsml.engine.rsml_compiler import CompilerOptions

if TYPE_CHECKING:
    from rsml.core.config import Config
    from rsml.engine.expander import MacroExpander, expand_file, expand_source
    from rsml.engine.rsml_compiler import RsmlCompiler
    from rsml.engine.rsml_parser import RsmlParser, RsmlTokenizer
    from rsml.utils.logger import Logger


def __getattr__(name: str):
    """Lazy loading of the less common entry points."""
    _imports = {
        "RsmlTokenizer": "rsml.engine.rsml_parser",
        "RsmlParser": "rsml.engine.rsml_parser",
        "RsmlCompiler": "rsml.engine.rsml_compiler",
        "MacroExpander": "rsml.engine.expander",
        "expand_source": "rsml.engine.expander",
        "expand_file": "rsml.engine.expander",
        "Config": "rsml.core.config",
        "Logger": "rsml.utils.logger",
    }

    if name in _imports:
        import importlib
        module = importlib.import_module(_imports[name])
        return getattr(module, name)

    raise AttributeError(f"module 'rsml' has no attribute '{name}'")


__all__ = [
    "__version__",
    "__license__",
    # Compile API
    "Markup",
    "MarkupError",
    "MarkupGenerationError",
    "MarkupNotFoundError",
    "MarkupSyntaxError",
    "CompilerOptions",
    "compile_file",
    "compile_markup",
    # Lazy
    "RsmlTokenizer",
    "RsmlParser",
    "RsmlCompiler",
    "MacroExpander",
    "expand_source",
    "expand_file",
    "Config",
    "Logger",
]
