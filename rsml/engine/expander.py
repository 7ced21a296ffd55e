"""
RSML Macro Expander
===================

Expands rsml! invocations inside Rust source files, the way the
procedural macro does at build time:

    fn root(_: ()) -> Box<dyn Element> {
        rsml! {
            <container padding_all={16} center>
                <text>Hello</text>
            </container>
        }
    }

becomes

    fn root(_: ()) -> Box<dyn Element> {
        Box::new(hyprui::Container::new().padding_all(16).center()...)
    }

Invocations may use {...}, (...) or [...] delimiters. The closing
delimiter is found by nesting depth, ignoring delimiters inside string
and char literals. A quote that does not close a one-character literal
is a lifetime and is left alone. Invocations inside comments and string
literals of the host source are not expanded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from rsml.engine.markup import (
    Markup,
    MarkupGenerationError,
    MarkupNotFoundError,
    MarkupSyntaxError,
)
from rsml.engine.rsml_compiler import CompilerOptions
from rsml.utils.logger import get_logger

logger = get_logger("rsml.expander")

CLOSING_DELIMITERS = {"{": "}", "(": ")", "[": "]"}

_RAW_STRING = re.compile(r'b?r(#*)"')

# '\u{10FFFF}' is the longest char literal
_MAX_CHAR_LITERAL = 12


@dataclass
class Invocation:
    """A macro invocation found in host source."""
    start: int   # offset of the macro name
    end: int     # offset just past the closing delimiter
    line: int    # 1-based line of the macro name
    body: str    # markup between the delimiters


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _skip_string(source: str, pos: int) -> int:
    """Return the offset just past the double-quoted string at pos."""
    index = pos + 1
    while index < len(source):
        ch = source[index]
        if ch == "\\":
            index += 2
            continue
        if ch == '"':
            return index + 1
        index += 1
    return len(source)


def _skip_char(source: str, pos: int) -> int:
    """
    Return the offset just past the char literal at pos.

    A quote not closed after one character or one escape sequence starts
    a lifetime or loop label; only the quote itself is skipped then.
    """
    if source.startswith("\\", pos + 1):
        close = source.find("'", pos + 3)
        if close != -1 and close - pos < _MAX_CHAR_LITERAL:
            return close + 1
    elif source.startswith("'", pos + 2):
        return pos + 3
    return pos + 1


def _skip_raw_string(source: str, pos: int) -> Optional[int]:
    """Return the offset just past r"..." / r#"..."# at pos, or None."""
    match = _RAW_STRING.match(source, pos)
    if match is None:
        return None
    terminator = '"' + match.group(1)
    close = source.find(terminator, match.end())
    if close == -1:
        return len(source)
    return close + len(terminator)


def _skip_comment(source: str, pos: int) -> Optional[int]:
    """Return the offset just past the comment at pos, or None."""
    if source.startswith("//", pos):
        end = source.find("\n", pos)
        return len(source) if end == -1 else end

    if not source.startswith("/*", pos):
        return None

    # Block comments nest
    depth = 0
    index = pos
    while index < len(source):
        if source.startswith("/*", index):
            depth += 1
            index += 2
        elif source.startswith("*/", index):
            depth -= 1
            index += 2
            if depth == 0:
                return index
        else:
            index += 1
    return len(source)


def _skip_literal(source: str, pos: int) -> Optional[int]:
    """Skip a comment, string or char literal of the host source."""
    ch = source[pos]
    if ch == '"':
        return _skip_string(source, pos)
    if ch == "'":
        return _skip_char(source, pos)
    if ch == "/":
        return _skip_comment(source, pos)
    if ch in "br" and (pos == 0 or not _is_ident_char(source[pos - 1])):
        return _skip_raw_string(source, pos)
    return None


def _find_closing(source: str, pos: int, opener: str, closer: str) -> int:
    """Return the offset of the delimiter closing the one before pos, or -1."""
    depth = 1
    index = pos

    while index < len(source):
        ch = source[index]
        if ch == '"':
            index = _skip_string(source, index)
            continue
        if ch == "'":
            index = _skip_char(source, index)
            continue

        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return index
        index += 1

    return -1


class MacroExpander:
    """
    Replaces macro invocations in host source with generated code.

    Example:
        expander = MacroExpander()
        rust = expander.expand(Path("src/main.rs").read_text(), name="main.rs")
    """

    def __init__(
        self,
        options: Optional[CompilerOptions] = None,
        macro_name: str = "rsml",
    ) -> None:
        self.options = options or CompilerOptions()
        self.macro_name = macro_name
        self._pattern = re.compile(rf"{re.escape(macro_name)}!\s*([{{(\[])")

    def find_invocations(self, source: str, name: str = "<source>") -> Iterator[Invocation]:
        """
        Yield invocations in order of appearance.

        Raises:
            MarkupSyntaxError: If an invocation is never closed
        """
        index = 0
        while index < len(source):
            skipped = _skip_literal(source, index)
            if skipped is not None:
                index = skipped
                continue

            match = self._pattern.match(source, index)
            if match is None or (index > 0 and _is_ident_char(source[index - 1])):
                index += 1
                continue

            opener = match.group(1)
            body_start = match.end()
            body_end = _find_closing(source, body_start, opener, CLOSING_DELIMITERS[opener])
            line = source.count("\n", 0, index) + 1

            if body_end < 0:
                raise MarkupSyntaxError(
                    f"{name}:{line}: unterminated {self.macro_name}! invocation"
                )

            yield Invocation(
                start=index,
                end=body_end + 1,
                line=line,
                body=source[body_start:body_end],
            )
            index = body_end + 1

    def expand(self, source: str, name: str = "<source>") -> str:
        """
        Expand every invocation in source.

        Raises:
            MarkupSyntaxError: If an invocation's markup cannot be parsed
            MarkupGenerationError: If an invocation's markup cannot be compiled
        """
        parts = []
        last = 0
        count = 0

        for invocation in self.find_invocations(source, name):
            parts.append(source[last:invocation.start])
            parts.append(self._compile(invocation, name))
            last = invocation.end
            count += 1

        parts.append(source[last:])
        logger.debug("Expanded macros", source=name, invocations=count)
        return "".join(parts)

    def _compile(self, invocation: Invocation, name: str) -> str:
        label = f"{name}:{invocation.line}"
        try:
            return Markup(invocation.body, name=label, options=self.options).code
        except MarkupSyntaxError as e:
            raise MarkupSyntaxError(f"{label}: {e}") from e
        except MarkupGenerationError as e:
            raise MarkupGenerationError(f"{label}: {e}") from e


def expand_source(
    source: str,
    options: Optional[CompilerOptions] = None,
    name: str = "<source>",
) -> str:
    """Expand rsml! invocations in a string of Rust source."""
    return MacroExpander(options).expand(source, name)


def expand_file(
    path: Union[str, Path],
    options: Optional[CompilerOptions] = None,
    encoding: str = "utf-8",
) -> str:
    """Expand rsml! invocations in a Rust source file."""
    path = Path(path)
    if not path.is_file():
        raise MarkupNotFoundError(f"Source file not found: {path}")
    return expand_source(path.read_text(encoding=encoding), options, name=str(path))
