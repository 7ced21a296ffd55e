"""
RSML Markup Interface
=====================

High-level API for compiling RSML markup into Rust code.

Each compilation runs tokenizer -> parser -> generator to completion and
either returns the generated code or raises; nothing is cached or shared
between calls.

Example:
    # Compile a string
    code = compile_markup("<container center><text>Hi</text></container>")

    # Compile a file
    code = compile_file("ui/counter.rsml")

    # Using Markup class
    markup = Markup.from_file("ui/counter.rsml")
    print(markup.components, markup.code)
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from rsml.engine.rsml_compiler import (
    CompiledMarkup,
    CompilerOptions,
    RsmlCompiler,
    RsmlGenerationError,
)
from rsml.engine.rsml_parser import RsmlNode, RsmlParseError, RsmlParser
from rsml.utils.logger import get_logger

logger = get_logger("rsml.engine")


class MarkupError(Exception):
    """Base exception for markup compilation errors."""
    pass


class MarkupNotFoundError(MarkupError):
    """Raised when a markup file is not found."""
    pass


class MarkupSyntaxError(MarkupError):
    """Raised when markup has syntax errors."""
    pass


class MarkupGenerationError(MarkupError):
    """Raised when a parsed tree cannot be compiled."""
    pass


class Markup:
    """
    One block of RSML markup and its generated code.

    Example:
        markup = Markup('<MyComp name="x" active/>')
        markup.code        # "Box::new(hyprui::Component::new(MyComp, {...}))"
        markup.components  # ["MyComp"]
    """

    def __init__(
        self,
        source: str,
        name: str = "markup",
        options: Optional[CompilerOptions] = None,
        auto_compile: bool = True,
    ) -> None:
        """
        Create markup from source string.

        Args:
            source: RSML markup source
            name: Name used in messages and logs
            options: Compiler options
            auto_compile: Whether to compile immediately
        """
        self.source = source
        self.name = name
        self.options = options or CompilerOptions()
        self._tree: Optional[RsmlNode] = None
        self._compiled: Optional[CompiledMarkup] = None

        if auto_compile:
            self.compile()

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        options: Optional[CompilerOptions] = None,
        encoding: str = "utf-8",
    ) -> "Markup":
        """
        Load markup from file.

        Raises:
            MarkupNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.is_file():
            raise MarkupNotFoundError(f"Markup file not found: {path}")

        source = path.read_text(encoding=encoding)
        return cls(source, name=str(path), options=options)

    @classmethod
    def from_string(
        cls,
        source: str,
        name: str = "string",
        options: Optional[CompilerOptions] = None,
    ) -> "Markup":
        return cls(source, name=name, options=options)

    def parse(self) -> RsmlNode:
        """Parse the source into a markup tree."""
        parser = RsmlParser(strict=self.options.strict, merge_text=self.options.merge_text)
        try:
            self._tree = parser.parse(self.source)
        except RsmlParseError as e:
            raise MarkupSyntaxError(f"RSML parse error: {e}") from e
        return self._tree

    def compile(self) -> CompiledMarkup:
        """
        Parse and compile the markup.

        Raises:
            MarkupSyntaxError: If the markup cannot be parsed
            MarkupGenerationError: If the tree cannot be compiled
        """
        tree = self.parse()

        try:
            self._compiled = RsmlCompiler(self.options).compile(tree, self.name)
        except RsmlGenerationError as e:
            raise MarkupGenerationError(f"RSML generation error: {e}") from e

        logger.debug(
            "Compiled markup",
            markup=self.name,
            hash=self._compiled.source_hash,
            size=len(self._compiled.code),
        )
        return self._compiled

    @property
    def tree(self) -> RsmlNode:
        if self._tree is None:
            self.parse()
        return self._tree

    @property
    def compiled(self) -> CompiledMarkup:
        if self._compiled is None:
            self.compile()
        return self._compiled

    @property
    def code(self) -> str:
        return self.compiled.code

    @property
    def components(self) -> List[str]:
        return self.compiled.components

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Markup({self.name!r})"


def compile_markup(
    source: str,
    options: Optional[CompilerOptions] = None,
    name: str = "markup",
) -> str:
    """
    Compile RSML source to Rust code.

    Args:
        source: RSML markup
        options: Compiler options
        name: Name used in messages and logs

    Returns:
        Generated Rust expression
    """
    return Markup(source, name=name, options=options).code


def compile_file(
    path: Union[str, Path],
    options: Optional[CompilerOptions] = None,
    encoding: str = "utf-8",
) -> str:
    """Compile an .rsml file to Rust code."""
    return Markup.from_file(path, options=options, encoding=encoding).code
