"""Recognize ``graphql`` tagged templates and turn them into GraphQL documents."""

from __future__ import annotations

import hashlib
import re
import unicodedata
from dataclasses import dataclass

from graphql import DefinitionNode, DocumentNode, GraphQLError, NameNode, parse, strip_ignored_characters
from tree_sitter import Node

from gql_extract.config import ExtractorSettings
from gql_extract.core.errors import (
    DeprecatedAmbientTagError,
    EmptyFragmentError,
    FragmentSyntaxError,
    InterpolationNotAllowedError,
)
from gql_extract.core.scope import SymbolTable
from gql_extract.core.syntax import SyntaxTree
from gql_extract.models import SourceRange

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")
# Characters kept by a URL slug; whitespace runs collapse to one space.
_SLUG_DROP_RE = re.compile(r"[^\w\s$*_+~.()'\"!\-:@]+")
_SLUG_SPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class GraphQLTag:
    doc: DocumentNode
    text: str
    hash: str
    template_loc: SourceRange
    location_key: tuple[int, int]


def is_tagged_template(node: Node) -> bool:
    if node.type != "call_expression":
        return False
    arguments = node.child_by_field_name("arguments")
    return arguments is not None and arguments.type == "template_string"


def fragment_hash(text: str) -> str:
    """Stable 32-bit digest of the stripped fragment text, in decimal."""
    return str(int(hashlib.sha256(text.encode("utf-8")).hexdigest()[:8], 16))


def read_graphql_tag(
    tree: SyntaxTree,
    table: SymbolTable,
    node: Node,
    settings: ExtractorSettings,
) -> GraphQLTag | None:
    """Parse the fragment in a tagged template, or return None when the tag is not ours.

    Raises ``DeprecatedAmbientTagError`` for an unbound ``graphql`` tag and the
    fragment errors for interpolations, empty bodies and GraphQL syntax errors.
    """
    if not is_tagged_template(node):
        return None
    tag = node.child_by_field_name("function")
    if tag is None or not _is_graphql_tag(tree, table, tag, settings):
        return None

    template = node.child_by_field_name("arguments")
    assert template is not None

    substitutions = [child for child in template.named_children if child.type == "template_substitution"]
    if substitutions:
        raise InterpolationNotAllowedError(tree.range_of(substitutions[0]))

    body_start, body_end = template.start_byte + 1, template.end_byte - 1
    raw = tree.source_bytes[body_start:body_end].decode("utf-8", errors="replace")
    template_loc = tree.range_between(body_start, body_end)

    try:
        stripped = strip_ignored_characters(raw)
        if not stripped:
            raise EmptyFragmentError(template_loc)
        doc = parse(raw)
    except GraphQLError as err:
        raise FragmentSyntaxError(raw, err, template_loc) from err

    doc_start = doc.loc.start if doc.loc is not None else 0
    return GraphQLTag(
        doc=doc,
        text=stripped,
        hash=fragment_hash(stripped),
        template_loc=template_loc,
        location_key=(tree.position_at(node.start_byte).offset, doc_start),
    )


def _is_graphql_tag(tree: SyntaxTree, table: SymbolTable, tag: Node, settings: ExtractorSettings) -> bool:
    if tag.type == "identifier":
        name = tree.text_of(tag)
        binding = table.resolve(name, tag)
        if binding is None:
            if name == settings.tag_name:
                raise DeprecatedAmbientTagError(tree.file_path)
            return False
        return (
            binding.kind in ("import", "require")
            and binding.source == settings.package_name
            and binding.imported == settings.tag_name
        )

    if tag.type == "member_expression":
        obj = tag.child_by_field_name("object")
        prop = tag.child_by_field_name("property")
        if obj is None or prop is None or obj.type != "identifier" or tree.text_of(prop) != settings.tag_name:
            return False
        binding = table.resolve(tree.text_of(obj), tag)
        if binding is None or binding.source != settings.package_name:
            return False
        return (binding.kind == "import" and binding.imported == "*") or (
            binding.kind == "require" and binding.imported is None
        )

    return False


def _camel_case(value: str) -> str:
    ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    words = _WORD_RE.findall(ascii_value)
    if not words:
        return ""
    return words[0].lower() + "".join(word[:1].upper() + word[1:].lower() for word in words[1:])


def slugify_path(file_path: str) -> str:
    """Drop the characters a URL slug cannot hold, keeping case. ``/`` is among them."""
    value = unicodedata.normalize("NFKD", file_path)
    value = _SLUG_DROP_RE.sub("", value)
    return _SLUG_SPACE_RE.sub(" ", value).strip()


def generate_query_name(query_type: str, file_path: str, hash: str) -> str:
    return _camel_case(f"{query_type}-{slugify_path(file_path)}-{hash}")


def _with_name(definition: DefinitionNode, name: str) -> DefinitionNode:
    fields = {key: getattr(definition, key) for key in definition.keys}
    fields["name"] = NameNode(value=name)
    return type(definition)(**fields)


def name_definitions(doc: DocumentNode, query_type: str, file_path: str, hash: str) -> tuple[DocumentNode, str, bool]:
    """Give every unnamed definition a generated name.

    Parsed nodes are never modified. Returns a document carrying the names,
    the name of its first definition and whether any name was generated.
    """
    generated = generate_query_name(query_type, file_path, hash)
    definitions: list[DefinitionNode] = []
    auto_named = False
    for definition in doc.definitions:
        if "name" in definition.keys:
            current = definition.name
            if current is None or not current.value:
                definition = _with_name(definition, generated)
                auto_named = True
        definitions.append(definition)

    if auto_named:
        doc = DocumentNode(loc=doc.loc, definitions=tuple(definitions))

    for definition in doc.definitions:
        name = getattr(definition, "name", None)
        if name is not None and name.value:
            return doc, name.value, auto_named
    return doc, generated, auto_named
