"""
RSML Compiler
=============

Compiles an RSML markup tree into Rust source that builds the element
tree through the hyprui builder API.

Code generation:
    - Built-in primitives (lowercase tags) become constructor calls with
      one chained method call per attribute and one .child(...) per child
    - <text> builds its content string in the constructor
    - <clickable> takes its key and single child in the constructor
    - Components (uppercase tags) become Component::new(Name, props) with
      props assembled from attributes and children
    - The root element is boxed to satisfy Box<dyn Element>

Example:
    <container padding_all={16} center>
        <text font_size={18}>Hello</text>
    </container>

    compiles to:

    Box::new(hyprui::Container::new().padding_all(16).center()
        .child(hyprui::Text::new("Hello").font_size(18)))
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Tuple

from rsml.engine.rsml_parser import Attribute, NodeType, RsmlNode, ValueKind

if TYPE_CHECKING:
    from rsml.core.config import Config


# Parameterless setters that only toggle a flag on the element
DEFAULT_BOOLEAN_METHODS: FrozenSet[str] = frozenset(
    {"h_expand", "w_expand", "w_fit", "center"}
)

DEFAULT_CLICKABLE_KEY = "default_key"


class RsmlGenerationError(ValueError):
    """Raised when a markup tree cannot be turned into code."""
    pass


def _string_literal(text: str) -> str:
    """
    Quote an attribute string for Rust.

    Escapes are kept as written. A bare double quote can only come from a
    single-quoted attribute and is escaped.
    """
    chars: List[str] = []
    escaped = False
    for ch in text:
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == '"':
            chars.append("\\")
        chars.append(ch)
    return '"' + "".join(chars) + '"'


@dataclass(frozen=True)
class CompilerOptions:
    """
    Settings shared by the parser and code generator.

    Attributes:
        crate_path: Path prefix of the builder types (hyprui::Container)
        boolean_methods: Setters compiled to a conditional call when given
            an expression value
        strict: Reject unknown characters and content after the root element
        merge_text: Join consecutive words between tags into one text node
    """
    crate_path: str = "hyprui"
    boolean_methods: FrozenSet[str] = DEFAULT_BOOLEAN_METHODS
    strict: bool = False
    merge_text: bool = True

    @classmethod
    def from_config(cls, config: "Config") -> "CompilerOptions":
        """Build options from the compiler.* configuration section."""
        extra = config.get_list("compiler.boolean_methods")
        return cls(
            crate_path=config.get("compiler.crate_path", "hyprui"),
            boolean_methods=DEFAULT_BOOLEAN_METHODS | frozenset(extra),
            strict=config.get_bool("compiler.strict", False),
            merge_text=config.get_bool("compiler.merge_text", True),
        )


@dataclass
class CompiledMarkup:
    """
    Generated code for one markup block, with metadata about the tree.
    """
    name: str
    source_hash: str
    code: str
    components: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return self.code


class RsmlCodeGenerator:
    """
    Turns markup tree nodes into Rust builder expressions.

    The generator keeps no state between calls; the same tree always
    produces the same text.
    """

    def __init__(self, options: Optional[CompilerOptions] = None) -> None:
        self.options = options or CompilerOptions()

    def generate(self, node: RsmlNode) -> str:
        """Generate code for a top-level node, boxing elements."""
        return self.generate_with_box(node, True)

    def generate_with_box(self, node: RsmlNode, boxed: bool) -> str:
        """
        Generate code for a node.

        Expressions are copied verbatim. Elements and text are wrapped in
        Box::new(...) when boxed is set.
        """
        if node.type == NodeType.EXPRESSION:
            return node.content or ""

        if node.type == NodeType.TEXT:
            code = f'{self._type_path("Text")}::new("{node.content}")'
        elif node.type == NodeType.ELEMENT:
            code = self.generate_element(node)
        else:
            raise RsmlGenerationError(f"Unknown node type: {node.type}")

        if boxed:
            return f"Box::new({code})"
        return code

    def generate_element(self, element: RsmlNode) -> str:
        """Generate unboxed code for an element."""
        if element.is_component:
            return self._generate_component(element)

        tag = element.tag
        if tag == "clickable":
            code = self._clickable_constructor(element)
            skip: Tuple[str, ...] = ("key",)
        elif tag == "text":
            code = self._text_constructor(element)
            skip = ()
        else:
            code = f"{self._primitive_type(tag)}::new()"
            skip = ()

        code = self._apply_attributes(code, element.attributes, skip)

        if tag not in ("clickable", "text"):
            for child in self._content_children(element):
                code = f"{code}.child({self.generate_with_box(child, False)})"

        return code

    def is_boolean_method(self, name: str) -> bool:
        return name in self.options.boolean_methods

    def _type_path(self, name: str) -> str:
        if self.options.crate_path:
            return f"{self.options.crate_path}::{name}"
        return name

    def _primitive_type(self, tag: str) -> str:
        """Map a lowercase tag to its constructor type."""
        if tag == "container":
            return self._type_path("Container")
        if tag == "text":
            return self._type_path("Text")
        if tag == "clickable":
            return self._type_path("Clickable")
        # Unknown tags name a custom primitive type directly
        return tag

    def _content_children(self, element: RsmlNode) -> List[RsmlNode]:
        return [child for child in element.children if not child.is_blank]

    def _clickable_constructor(self, element: RsmlNode) -> str:
        """Clickable::new(key, child)"""
        key = f'"{DEFAULT_CLICKABLE_KEY}"'
        attribute = element.get_attribute("key")
        if attribute is not None and attribute.value is not None:
            if attribute.value.kind == ValueKind.STRING:
                key = _string_literal(attribute.value.text)
            else:
                key = attribute.value.text

        children = self._content_children(element)
        if children:
            child = self.generate_with_box(children[0], False)
        else:
            child = f'{self._type_path("Text")}::new("")'

        return f"{self._primitive_type('clickable')}::new({key}, {child})"

    def _text_constructor(self, element: RsmlNode) -> str:
        """
        Text::new(content)

        Literal-only content collapses to a single string literal; any
        embedded expression produces a format! call with one placeholder
        per child.
        """
        literals: List[str] = []
        args: List[str] = []
        dynamic = False

        for child in self._content_children(element):
            if child.type == NodeType.ELEMENT:
                raise RsmlGenerationError(
                    f"Text element cannot contain other elements, "
                    f"but found <{child.tag}>"
                )
            if child.type == NodeType.TEXT:
                text = child.content.strip()
                literals.append(text)
                args.append(f'"{text}"')
            else:
                dynamic = True
                args.append(child.content)

        text_type = self._primitive_type("text")
        if not dynamic:
            return f'{text_type}::new("{" ".join(literals)}")'

        template = " ".join("{}" for _ in args)
        return f'{text_type}::new(format!("{template}", {", ".join(args)}))'

    def _apply_attributes(
        self,
        code: str,
        attributes: List[Attribute],
        skip: Tuple[str, ...] = (),
    ) -> str:
        """Chain one method call per attribute, in source order."""
        for attribute in attributes:
            if attribute.name in skip:
                continue

            name = attribute.name
            value = attribute.value

            if value is None:
                code = f"{code}.{name}()"
            elif value.kind == ValueKind.STRING:
                code = f"{code}.{name}({_string_literal(value.text)})"
            elif self.is_boolean_method(name):
                code = f"(if {value.text} {{ {code}.{name}() }} else {{ {code} }})"
            else:
                code = f"{code}.{name}({value.text})"

        return code

    def _generate_component(self, element: RsmlNode) -> str:
        """
        Component::new(Name, props)

        Props start from Default::default() and receive one field
        assignment per attribute, plus props.children when the element
        has content.
        """
        assignments: List[str] = []

        for attribute in element.attributes:
            value = attribute.value
            if value is None:
                assignments.append(f"props.{attribute.name} = true;")
            elif value.kind == ValueKind.STRING:
                assignments.append(f"props.{attribute.name} = {_string_literal(value.text)};")
            else:
                assignments.append(f"props.{attribute.name} = {value.text};")

        children = [
            self.generate_with_box(child, True)
            for child in self._content_children(element)
        ]
        if children:
            assignments.append(f"props.children = vec![{', '.join(children)}];")

        component_type = self._type_path("Component")
        if not assignments:
            return f"{component_type}::new({element.tag}, Default::default())"

        lines = ["let mut props = Default::default();", *assignments, "props"]
        body = "\n".join(f"        {line}" for line in lines)
        return f"{component_type}::new({element.tag}, {{\n{body}\n    }})"


class RsmlCompiler:
    """
    Compiles a markup tree to a CompiledMarkup.

    Example:
        root = RsmlParser().parse(source)
        compiled = RsmlCompiler().compile(root, name="counter")
        print(compiled.code)
    """

    def __init__(self, options: Optional[CompilerOptions] = None) -> None:
        self.options = options or CompilerOptions()
        self.generator = RsmlCodeGenerator(self.options)

    def compile(self, root: RsmlNode, name: str = "markup") -> CompiledMarkup:
        """
        Compile markup tree to CompiledMarkup.

        Args:
            root: Root node returned by the parser
            name: Markup name for identification

        Returns:
            CompiledMarkup with the generated code

        Raises:
            RsmlGenerationError: If the tree cannot be compiled
        """
        code = self.generator.generate(root)

        source_repr = str(root.to_dict())
        source_hash = hashlib.md5(source_repr.encode()).hexdigest()[:12]

        return CompiledMarkup(
            name=name,
            source_hash=source_hash,
            code=code,
            components=self._collect_components(root),
        )

    def _collect_components(self, root: RsmlNode) -> List[str]:
        """Component tags referenced in the tree, in first-seen order."""
        components: List[str] = []
        for node in root.find_by_type(NodeType.ELEMENT):
            if node.is_component and node.tag not in components:
                components.append(node.tag)
        return components
