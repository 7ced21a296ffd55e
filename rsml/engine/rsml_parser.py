"""
RSML Parser
===========

The RSML (RuSt Markup Language) parser is the front half of the markup
compiler. It tokenizes JSX-like markup and builds a tree of element, text
and expression nodes that the code generator walks.

RSML Format:
    - <tag attr="value">children</tag>: Elements with children
    - <tag />: Self-closing elements
    - name="value": String attributes
    - name={expression}: Expression attributes (Rust code, kept verbatim)
    - name: Flag attributes (presence means true)
    - {expression}: Embedded Rust code between tags
    - <Component />: Uppercase tags reference user components

Example .rsml:
    <container padding_all={16} center>
        <text font_size={18}>Hello</text>
        <MyComponent name="test" active />
    </container>
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, List, Optional


class TokenType(Enum):
    """Token types for the RSML tokenizer."""
    TAG_OPEN = auto()          # <
    TAG_CLOSE = auto()         # >
    TAG_SELF_CLOSE = auto()    # />
    TAG_END_OPEN = auto()      # </
    IDENTIFIER = auto()        # container, font_size, data-id
    STRING = auto()            # "value" or 'value', quotes stripped
    EXPRESSION = auto()        # {code}, braces stripped
    EQUALS = auto()            # =
    EOF = auto()


_PUNCTUATION = {
    TokenType.TAG_OPEN: "'<'",
    TokenType.TAG_CLOSE: "'>'",
    TokenType.TAG_SELF_CLOSE: "'/>'",
    TokenType.TAG_END_OPEN: "'</'",
    TokenType.EQUALS: "'='",
    TokenType.EOF: "end of input",
}


@dataclass
class Token:
    """Represents a tokenizer token."""
    type: TokenType
    value: str = ""
    line: int = 0
    column: int = 0

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    def describe(self) -> str:
        """Short description used in error messages."""
        if self.type in _PUNCTUATION:
            return _PUNCTUATION[self.type]
        if self.type == TokenType.IDENTIFIER:
            return f"identifier '{self.value}'"
        if self.type == TokenType.STRING:
            return f"string \"{self.value}\""
        return f"expression {{{self.value}}}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.name,
            "value": self.value,
            "line": self.line,
            "column": self.column,
        }


class RsmlParseError(SyntaxError):
    """Raised when markup does not follow the RSML grammar."""

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        location = f" at line {line}:{column}" if line else ""
        super().__init__(f"{message}{location}")
        self.message = message
        self.line = line
        self.column = column


class NodeType(Enum):
    """Markup tree node types."""
    ELEMENT = auto()
    TEXT = auto()
    EXPRESSION = auto()


class ValueKind(Enum):
    """Kinds of attribute values."""
    STRING = auto()
    EXPRESSION = auto()


@dataclass
class AttributeValue:
    """Value assigned to an attribute: a string literal or Rust expression."""
    kind: ValueKind
    text: str

    @classmethod
    def string(cls, text: str) -> "AttributeValue":
        return cls(ValueKind.STRING, text)

    @classmethod
    def expression(cls, text: str) -> "AttributeValue":
        return cls(ValueKind.EXPRESSION, text)


@dataclass
class Attribute:
    """
    An attribute on an element.

    A value of None marks a flag attribute such as `center` or `active`.
    """
    name: str
    value: Optional[AttributeValue] = None

    @property
    def is_flag(self) -> bool:
        return self.value is None

    def to_dict(self) -> Dict[str, Any]:
        if self.value is None:
            return {"name": self.name, "value": None}
        return {
            "name": self.name,
            "value": {"kind": self.value.kind.name, "text": self.value.text},
        }


@dataclass
class RsmlNode:
    """
    Node of the markup tree.

    Represents one of:
    - Elements (tag, attributes, children, self_closing)
    - Text runs between tags (content)
    - Embedded expressions between tags (content)
    """
    type: NodeType
    tag: Optional[str] = None
    attributes: List[Attribute] = field(default_factory=list)
    children: List["RsmlNode"] = field(default_factory=list)
    content: Optional[str] = None
    self_closing: bool = False
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    @classmethod
    def element(
        cls,
        tag: str,
        attributes: Optional[List[Attribute]] = None,
        children: Optional[List["RsmlNode"]] = None,
        self_closing: bool = False,
        line: int = 0,
        column: int = 0,
    ) -> "RsmlNode":
        """Create an element node."""
        return cls(
            type=NodeType.ELEMENT,
            tag=tag,
            attributes=list(attributes or []),
            children=list(children or []),
            self_closing=self_closing,
            line=line,
            column=column,
        )

    @classmethod
    def text(cls, content: str, line: int = 0, column: int = 0) -> "RsmlNode":
        """Create a text node."""
        return cls(type=NodeType.TEXT, content=content, line=line, column=column)

    @classmethod
    def expression(cls, content: str, line: int = 0, column: int = 0) -> "RsmlNode":
        """Create an expression node."""
        return cls(type=NodeType.EXPRESSION, content=content, line=line, column=column)

    @property
    def is_component(self) -> bool:
        """Uppercase element tags reference user-defined components."""
        return self.type == NodeType.ELEMENT and self.tag[:1].isupper()

    @property
    def is_blank(self) -> bool:
        """Whitespace-only text carries no content."""
        return self.type == NodeType.TEXT and not (self.content or "").strip()

    def add_child(self, child: "RsmlNode") -> None:
        self.children.append(child)

    def get_attribute(self, name: str) -> Optional[Attribute]:
        """Return the first attribute with the given name."""
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def find_by_tag(self, tag: str) -> List["RsmlNode"]:
        """Find all descendant nodes with given tag."""
        results = []
        if self.tag == tag:
            results.append(self)
        for child in self.children:
            results.extend(child.find_by_tag(tag))
        return results

    def find_by_type(self, node_type: NodeType) -> List["RsmlNode"]:
        """Find all descendant nodes with given type."""
        results = []
        if self.type == node_type:
            results.append(self)
        for child in self.children:
            results.extend(child.find_by_type(node_type))
        return results

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        if self.type != NodeType.ELEMENT:
            return {"type": self.type.name, "content": self.content}
        return {
            "type": self.type.name,
            "tag": self.tag,
            "attributes": [a.to_dict() for a in self.attributes],
            "self_closing": self.self_closing,
            "children": [c.to_dict() for c in self.children],
        }


class RsmlTokenizer:
    """
    Tokenizer for RSML markup.

    Produces tokens lazily through next_token(). Once the input is
    exhausted every further call returns EOF. A tokenizer cannot be
    rewound; build a new one to scan the same text again.

    Malformed input (unterminated strings or expressions) is consumed up to
    the end of the input and never raises. Characters that start no token
    are skipped unless strict is set.
    """

    QUOTES = ('"', "'")
    ESCAPE = "\\"

    def __init__(self, source: str, strict: bool = False) -> None:
        self.source = source
        self.strict = strict
        self.pos = 0
        self.line = 1
        self.column = 1

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including the first EOF."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def tokenize(self) -> List[Token]:
        """Tokenize the remaining source."""
        return list(self)

    def _current(self) -> Optional[str]:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return None

    def _peek(self, offset: int = 1) -> Optional[str]:
        pos = self.pos + offset
        if pos < len(self.source):
            return self.source[pos]
        return None

    def _advance(self, count: int = 1) -> None:
        """Advance position in source."""
        for _ in range(count):
            if self.pos < len(self.source):
                if self.source[self.pos] == "\n":
                    self.line += 1
                    self.column = 1
                else:
                    self.column += 1
                self.pos += 1

    def next_token(self) -> Token:
        """Return the next token from the source."""
        while True:
            ch = self._current()
            line, column = self.line, self.column

            if ch is None:
                return Token(TokenType.EOF, "", line, column)

            if ch.isspace():
                self._skip_whitespace()
                continue

            if ch == "<":
                if self._peek() == "/":
                    self._advance(2)
                    return Token(TokenType.TAG_END_OPEN, "</", line, column)
                self._advance()
                return Token(TokenType.TAG_OPEN, "<", line, column)

            if ch == "/" and self._peek() == ">":
                self._advance(2)
                return Token(TokenType.TAG_SELF_CLOSE, "/>", line, column)

            if ch == ">":
                self._advance()
                return Token(TokenType.TAG_CLOSE, ">", line, column)

            if ch == "=":
                self._advance()
                return Token(TokenType.EQUALS, "=", line, column)

            if ch in self.QUOTES:
                return Token(TokenType.STRING, self._read_string(), line, column)

            if ch == "{":
                return Token(TokenType.EXPRESSION, self._read_expression(), line, column)

            if ch.isalpha() or ch == "_":
                return Token(TokenType.IDENTIFIER, self._read_identifier(), line, column)

            if self.strict:
                raise RsmlParseError(f"Unexpected character {ch!r}", line, column)
            self._advance()

    def _skip_whitespace(self) -> None:
        while self._current() is not None and self._current().isspace():
            self._advance()

    def _read_identifier(self) -> str:
        """Read a tag or attribute name: letters, digits, '_' and '-'."""
        start = self.pos
        while True:
            ch = self._current()
            if ch is None or not (ch.isalnum() or ch in "_-"):
                break
            self._advance()
        return self.source[start:self.pos]

    def _read_string(self) -> str:
        """
        Read a quoted string literal.

        Escape sequences are kept as written: the backslash and the
        character after it both end up in the value.
        """
        quote = self._current()
        self._advance()

        chars: List[str] = []
        escaped = False
        while True:
            ch = self._current()
            if ch is None:
                break
            self._advance()
            if escaped:
                chars.append(ch)
                escaped = False
            elif ch == self.ESCAPE:
                chars.append(ch)
                escaped = True
            elif ch == quote:
                break
            else:
                chars.append(ch)

        return "".join(chars)

    def _read_expression(self) -> str:
        """
        Read Rust code between matching braces.

        Braces inside string literals of the expression do not count
        toward the nesting depth. The outer braces are dropped.
        """
        self._advance()

        chars: List[str] = []
        depth = 1
        string_quote: Optional[str] = None
        escaped = False

        while True:
            ch = self._current()
            if ch is None:
                break
            self._advance()

            if escaped:
                escaped = False
            elif string_quote is not None:
                if ch == self.ESCAPE:
                    escaped = True
                elif ch == string_quote:
                    string_quote = None
            elif ch in self.QUOTES:
                string_quote = ch
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    break

            chars.append(ch)

        return "".join(chars)


class RsmlParser:
    """
    Recursive descent parser for RSML markup.

    Pulls tokens from an RsmlTokenizer one at a time and builds the
    markup tree rooted at a single element.

    Example:
        parser = RsmlParser()
        root = parser.parse('<container center><text>Hi</text></container>')
        print(root.children[0].tag)  # "text"
    """

    def __init__(self, strict: bool = False, merge_text: bool = True) -> None:
        """
        Args:
            strict: Reject unknown characters and content after the root
            merge_text: Join consecutive words between tags into one text node
        """
        self.strict = strict
        self.merge_text = merge_text
        self._tokenizer: Optional[RsmlTokenizer] = None
        self._token = Token(TokenType.EOF)

    def parse(self, source: str) -> RsmlNode:
        """
        Parse RSML source into a markup tree.

        Args:
            source: RSML markup text

        Returns:
            The root element node

        Raises:
            RsmlParseError: If the markup is malformed
        """
        self._tokenizer = RsmlTokenizer(source, strict=self.strict)
        self._token = self._tokenizer.next_token()

        root = self._parse_element()

        if self.strict and self._token.type != TokenType.EOF:
            raise self._error(
                f"Unexpected trailing content after <{root.tag}>: "
                f"found {self._token.describe()}"
            )
        return root

    def _advance(self) -> Token:
        """Move to the next token and return the one just consumed."""
        token = self._token
        self._token = self._tokenizer.next_token()
        return token

    def _error(self, message: str) -> RsmlParseError:
        return RsmlParseError(message, self._token.line, self._token.column)

    def _expect(self, type: TokenType) -> Token:
        """Expect specific token type."""
        if self._token.type != type:
            raise self._error(
                f"Expected {_PUNCTUATION.get(type, type.name)}, "
                f"found {self._token.describe()}"
            )
        return self._advance()

    def _parse_element(self) -> RsmlNode:
        """Parse an element and everything up to its closing tag."""
        self._expect(TokenType.TAG_OPEN)

        if self._token.type != TokenType.IDENTIFIER:
            raise self._error("Expected tag name after '<'")
        tag_token = self._advance()
        tag_name = tag_token.value

        node = RsmlNode.element(tag_name, line=tag_token.line, column=tag_token.column)
        node.attributes = self._parse_attributes()

        if self._token.type == TokenType.TAG_SELF_CLOSE:
            self._advance()
            node.self_closing = True
            return node

        self._expect(TokenType.TAG_CLOSE)

        while self._token.type != TokenType.TAG_END_OPEN:
            token = self._token
            if token.type == TokenType.TAG_OPEN:
                node.add_child(self._parse_element())
            elif token.type == TokenType.EXPRESSION:
                node.add_child(RsmlNode.expression(token.value, token.line, token.column))
                self._advance()
            elif token.type == TokenType.IDENTIFIER:
                node.add_child(self._parse_text())
            elif token.type == TokenType.EOF:
                raise self._error(f"Unexpected end of input while parsing <{tag_name}>")
            else:
                self._advance()

        self._advance()

        if self._token.type != TokenType.IDENTIFIER:
            raise self._error("Expected tag name in closing tag")
        if self._token.value != tag_name:
            raise self._error(
                f"Mismatched closing tag: expected </{tag_name}>, "
                f"found </{self._token.value}>"
            )
        self._advance()
        self._expect(TokenType.TAG_CLOSE)

        return node

    def _parse_attributes(self) -> List[Attribute]:
        """Parse attributes until the first token that is not a name."""
        attributes: List[Attribute] = []

        while self._token.type == TokenType.IDENTIFIER:
            name = self._advance().value
            value: Optional[AttributeValue] = None

            if self._token.type == TokenType.EQUALS:
                self._advance()
                if self._token.type == TokenType.STRING:
                    value = AttributeValue.string(self._advance().value)
                elif self._token.type == TokenType.EXPRESSION:
                    value = AttributeValue.expression(self._advance().value)
                else:
                    raise self._error(
                        f"Expected string literal or expression after '{name}=', "
                        f"found {self._token.describe()}"
                    )

            attributes.append(Attribute(name, value))

        return attributes

    def _parse_text(self) -> RsmlNode:
        """Parse a text run between tags."""
        first = self._advance()
        words = [first.value]
        if self.merge_text:
            while self._token.type == TokenType.IDENTIFIER:
                words.append(self._advance().value)
        return RsmlNode.text(" ".join(words), first.line, first.column)
