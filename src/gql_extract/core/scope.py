"""Per-file symbol table.

The table is built in a single walk over the tree. Each binding is attached
to the scope node that owns it, and ``resolve`` walks from a use site up
through the enclosing scopes, so inner declarations shadow outer ones the way
they do at runtime.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass

from tree_sitter import Node

from gql_extract.core.syntax import NodeKey, SyntaxTree, ancestors, node_key, string_value

logger = logging.getLogger(__name__)

ALIAS_HOP_LIMIT = 16

_FUNCTION_SCOPES = frozenset(
    {
        "arrow_function",
        "function",
        "function_declaration",
        "function_expression",
        "generator_function",
        "generator_function_declaration",
        "method_definition",
    }
)
_BLOCK_SCOPES = frozenset({"statement_block", "for_statement", "for_in_statement", "class_body", "switch_body"})
_SCOPES = _FUNCTION_SCOPES | _BLOCK_SCOPES | {"program"}


@dataclass(frozen=True)
class Binding:
    """A declared name.

    ``kind`` is one of ``variable``, ``pattern``, ``import``, ``require``,
    ``function``, ``class`` or ``param``. For imports ``imported`` is the
    exported name, ``default`` or ``*``; for destructured requires it is the
    property name and for whole-module requires it is None.
    """

    name: str
    kind: str
    node: Node
    source: str | None = None
    imported: str | None = None

    @property
    def value(self) -> Node | None:
        if self.node.type != "variable_declarator":
            return None
        return self.node.child_by_field_name("value")


class SymbolTable:
    def __init__(self, tree: SyntaxTree) -> None:
        self.tree = tree
        self._scopes: dict[NodeKey, dict[str, Binding]] = defaultdict(dict)
        self._program_key = node_key(tree.root)

    @classmethod
    def build(cls, tree: SyntaxTree) -> SymbolTable:
        table = cls(tree)
        for node in tree.walk():
            if node.type == "import_statement":
                table._add_import(node)
            elif node.type == "variable_declarator":
                table._add_declarator(node)
            elif node.type in ("function_declaration", "generator_function_declaration", "class_declaration"):
                name = node.child_by_field_name("name")
                if name is not None:
                    kind = "class" if node.type == "class_declaration" else "function"
                    table._bind(table._scope_of(node), Binding(tree.text_of(name), kind, node))
            if node.type in _FUNCTION_SCOPES:
                table._add_params(node)
        return table

    # -- lookups -------------------------------------------------------------

    def resolve(self, name: str, at: Node) -> Binding | None:
        """Find the binding ``name`` refers to when used at ``at``."""
        for scope in (at, *ancestors(at)):
            if scope.type not in _SCOPES:
                continue
            binding = self._scopes.get(node_key(scope), {}).get(name)
            if binding is not None:
                return binding
        return None

    def module_binding(self, name: str) -> Binding | None:
        return self._scopes.get(self._program_key, {}).get(name)

    def is_bound(self, name: str, at: Node) -> bool:
        return self.resolve(name, at) is not None

    def references_module(self, name: str, at: Node, source: str) -> bool:
        """True if ``name`` at ``at`` is an import from, or a ``require`` of, ``source``."""
        binding = self.resolve(name, at)
        return binding is not None and binding.kind in ("import", "require") and binding.source == source

    def follow_aliases(self, binding: Binding | None) -> Binding | None:
        """Follow ``const a = b`` declarators until the value is no longer a plain identifier."""
        for _ in range(ALIAS_HOP_LIMIT):
            if binding is None or binding.kind != "variable":
                return binding
            value = binding.value
            if value is None or value.type != "identifier":
                return binding
            binding = self.resolve(self.tree.text_of(value), binding.node)
        logger.debug("Alias chain in %s exceeded %d hops", self.tree.file_path, ALIAS_HOP_LIMIT)
        return None

    # -- construction --------------------------------------------------------

    def _bind(self, scope: Node, binding: Binding) -> None:
        self._scopes[node_key(scope)].setdefault(binding.name, binding)

    def _scope_of(self, node: Node, *, function_level: bool = False) -> Node:
        allowed = _FUNCTION_SCOPES if function_level else _SCOPES
        for parent in ancestors(node):
            if parent.type in allowed or parent.type == "program":
                return parent
        return self.tree.root

    def _add_import(self, node: Node) -> None:
        source_node = node.child_by_field_name("source")
        source = string_value(self.tree, source_node) if source_node is not None else None
        program = self.tree.root
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for part in clause.named_children:
                if part.type == "identifier":
                    self._bind(program, Binding(self.tree.text_of(part), "import", part, source, "default"))
                elif part.type == "namespace_import":
                    for ident in part.named_children:
                        if ident.type == "identifier":
                            self._bind(program, Binding(self.tree.text_of(ident), "import", part, source, "*"))
                elif part.type == "named_imports":
                    for spec in part.named_children:
                        if spec.type != "import_specifier":
                            continue
                        imported_node = spec.child_by_field_name("name")
                        alias_node = spec.child_by_field_name("alias")
                        if imported_node is None:
                            continue
                        imported = self.tree.text_of(imported_node).strip("'\"")
                        local = self.tree.text_of(alias_node) if alias_node is not None else imported
                        self._bind(program, Binding(local, "import", spec, source, imported))

    def _add_declarator(self, node: Node) -> None:
        declaration = node.parent
        hoisted = declaration is not None and declaration.type == "variable_declaration"
        scope = self._scope_of(node, function_level=hoisted)
        name = node.child_by_field_name("name")
        if name is None:
            return
        required = self._required_module(node.child_by_field_name("value"))

        if name.type == "identifier":
            if required is not None:
                binding = Binding(self.tree.text_of(name), "require", node, required)
            else:
                binding = Binding(self.tree.text_of(name), "variable", node)
            self._bind(scope, binding)
            return

        if name.type == "object_pattern" and required is not None:
            for prop in name.named_children:
                if prop.type == "shorthand_property_identifier_pattern":
                    text = self.tree.text_of(prop)
                    self._bind(scope, Binding(text, "require", node, required, text))
                elif prop.type == "pair_pattern":
                    key = prop.child_by_field_name("key")
                    value = prop.child_by_field_name("value")
                    if key is not None and value is not None and value.type == "identifier":
                        imported = self.tree.text_of(key)
                        self._bind(scope, Binding(self.tree.text_of(value), "require", node, required, imported))
            return

        for ident in self._pattern_identifiers(name):
            self._bind(scope, Binding(self.tree.text_of(ident), "pattern", node))

    def _add_params(self, function: Node) -> None:
        params = function.child_by_field_name("parameters")
        if params is None:
            params = function.child_by_field_name("parameter")
        if params is None:
            return
        for ident in self._pattern_identifiers(params):
            self._bind(function, Binding(self.tree.text_of(ident), "param", ident))

    def _pattern_identifiers(self, pattern: Node) -> Iterator[Node]:
        if pattern.type in ("identifier", "shorthand_property_identifier_pattern"):
            yield pattern
            return
        if pattern.type in ("assignment_pattern", "object_assignment_pattern"):
            left = pattern.child_by_field_name("left")
            if left is not None:
                yield from self._pattern_identifiers(left)
            return
        if pattern.type == "pair_pattern":
            value = pattern.child_by_field_name("value")
            if value is not None:
                yield from self._pattern_identifiers(value)
            return
        # TypeScript wraps parameters as required_parameter / optional_parameter.
        if pattern.type in ("required_parameter", "optional_parameter"):
            inner = pattern.child_by_field_name("pattern")
            if inner is not None:
                yield from self._pattern_identifiers(inner)
            return
        for child in pattern.named_children:
            if child.type in ("type_annotation", "accessibility_modifier"):
                continue
            yield from self._pattern_identifiers(child)

    def _required_module(self, value: Node | None) -> str | None:
        """Return ``X`` when ``value`` is ``require("X")``."""
        if value is None or value.type != "call_expression":
            return None
        function = value.child_by_field_name("function")
        if function is None or function.type != "identifier" or self.tree.text_of(function) != "require":
            return None
        arguments = value.child_by_field_name("arguments")
        if arguments is None or not arguments.named_children:
            return None
        return string_value(self.tree, arguments.named_children[0])
