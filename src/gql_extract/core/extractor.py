"""Locate GraphQL fragments in a component file.

Three independent passes feed one list:

1. ``<StaticQuery query={...} />`` elements (can be switched off),
2. ``useStaticQuery(...)`` calls whose callee comes from the framework package,
3. named exports, including export specifiers followed back to their declarations.

The same tagged template can be reached by several passes; fragments are
deduplicated by location key and the first pass to see a template wins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from tree_sitter import Node

from gql_extract.config import ExtractorSettings
from gql_extract.core.errors import ExportNotAsyncError
from gql_extract.core.features import CONFIG_EXPORT
from gql_extract.core.scope import SymbolTable
from gql_extract.core.syntax import SyntaxTree, ancestors
from gql_extract.core.tags import is_tagged_template, name_definitions, read_graphql_tag
from gql_extract.models import ExtractionResult, QueryFragment, UnresolvedVariableWarning

logger = logging.getLogger(__name__)

_FUNCTION_VALUES = frozenset({"arrow_function", "function", "function_expression"})


@dataclass(frozen=True)
class _Context:
    tree: SyntaxTree
    table: SymbolTable
    file_path: str
    settings: ExtractorSettings


@dataclass
class _PassResult:
    fragments: list[QueryFragment]
    warnings: list[UnresolvedVariableWarning]


def find_graphql_tags(
    tree: SyntaxTree,
    file_path: str,
    settings: ExtractorSettings | None = None,
) -> ExtractionResult:
    ctx = _Context(tree, SymbolTable.build(tree), file_path, settings or ExtractorSettings())

    passes: list[_PassResult] = []
    if ctx.settings.static_query_elements:
        passes.append(_static_query_elements(ctx))
    passes.append(_hook_calls(ctx))
    passes.append(_PassResult(_exported_fragments(ctx), []))

    fragments = [fragment for result in passes for fragment in result.fragments]
    warnings = [warning for result in passes for warning in result.warnings]
    for warning in warnings:
        logger.warning(warning.message)
    return ExtractionResult(fragments=_unique_by_location(fragments), warnings=warnings)


def _unique_by_location(fragments: list[QueryFragment]) -> list[QueryFragment]:
    seen: set[tuple[int, int]] = set()
    unique: list[QueryFragment] = []
    for fragment in fragments:
        if fragment.location_key in seen:
            continue
        seen.add(fragment.location_key)
        unique.append(fragment)
    return unique


# ---------------------------------------------------------------------------
# Static fragments (passes 1 and 2)
# ---------------------------------------------------------------------------


def _static_fragment(ctx: _Context, node: Node, is_hook: bool) -> QueryFragment | None:
    tag = read_graphql_tag(ctx.tree, ctx.table, node, ctx.settings)
    if tag is None:
        return None
    doc, name, auto_named = name_definitions(tag.doc, "static", ctx.file_path, tag.hash)
    return QueryFragment(
        file_path=ctx.file_path,
        name=name,
        doc=doc,
        text=tag.text,
        hash=tag.hash,
        template_loc=tag.template_loc,
        location_key=tag.location_key,
        is_static_query=True,
        is_hook=is_hook,
        is_config_query=False,
        is_auto_named=auto_named,
    )


def _extract_query_argument(ctx: _Context, expr: Node, usage: str, is_hook: bool) -> _PassResult:
    """Handle the expression passed as a query: an inline tag or a variable holding one."""
    result = _PassResult([], [])
    if is_tagged_template(expr):
        fragment = _static_fragment(ctx, expr, is_hook)
        if fragment is not None:
            result.fragments.append(fragment)
        return result

    if expr.type != "identifier":
        return result
    var_name = ctx.tree.text_of(expr)
    if var_name in (ctx.settings.tag_name, ctx.settings.hook_name):
        return result

    binding = ctx.table.resolve(var_name, expr)
    value = binding.value if binding is not None and binding.kind == "variable" else None
    if value is None or not is_tagged_template(value):
        result.warnings.append(UnresolvedVariableWarning(var_name=var_name, file_path=ctx.file_path, usage=usage))
        return result

    fragment = _static_fragment(ctx, value, is_hook)
    if fragment is not None:
        result.fragments.append(fragment)
    return result


def _first_expression(node: Node) -> Node | None:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


def _static_query_elements(ctx: _Context) -> _PassResult:
    result = _PassResult([], [])
    usage = f"<{ctx.settings.element_name}>"
    for node in ctx.tree.walk():
        if node.type not in ("jsx_opening_element", "jsx_self_closing_element"):
            continue
        name = node.child_by_field_name("name")
        if name is None or ctx.tree.text_of(name) != ctx.settings.element_name:
            continue
        for attribute in node.named_children:
            value = _query_attribute_value(ctx, attribute)
            if value is None:
                continue
            found = _extract_query_argument(ctx, value, usage, is_hook=False)
            result.fragments.extend(found.fragments)
            result.warnings.extend(found.warnings)
    return result


def _query_attribute_value(ctx: _Context, attribute: Node) -> Node | None:
    if attribute.type != "jsx_attribute" or len(attribute.named_children) < 2:
        return None
    attr_name, value = attribute.named_children[0], attribute.named_children[-1]
    if ctx.tree.text_of(attr_name) != "query" or value.type != "jsx_expression":
        return None
    return _first_expression(value)


def _is_hook_call(ctx: _Context, call: Node) -> bool:
    callee = call.child_by_field_name("function")
    if callee is None:
        return False
    package, hook = ctx.settings.package_name, ctx.settings.hook_name

    if callee.type == "identifier":
        return ctx.tree.text_of(callee) == hook and ctx.table.references_module(hook, callee, package)

    if callee.type == "member_expression":
        obj = callee.child_by_field_name("object")
        prop = callee.child_by_field_name("property")
        if obj is None or prop is None or obj.type != "identifier" or ctx.tree.text_of(prop) != hook:
            return False
        return ctx.table.references_module(ctx.tree.text_of(obj), callee, package)

    return False


def _hook_calls(ctx: _Context) -> _PassResult:
    result = _PassResult([], [])
    for node in ctx.tree.walk():
        if node.type != "call_expression" or is_tagged_template(node) or not _is_hook_call(ctx, node):
            continue
        arguments = node.child_by_field_name("arguments")
        first = _first_expression(arguments) if arguments is not None else None
        if first is None:
            continue
        found = _extract_query_argument(ctx, first, ctx.settings.hook_name, is_hook=True)
        result.fragments.extend(found.fragments)
        result.warnings.extend(found.warnings)
    return result


# ---------------------------------------------------------------------------
# Exported fragments (pass 3)
# ---------------------------------------------------------------------------


def _named_exports(tree: SyntaxTree) -> Iterator[Node]:
    """Top-level ``export`` statements that are neither default exports nor re-exports."""
    for node in tree.root.named_children:
        if node.type != "export_statement":
            continue
        if node.child_by_field_name("source") is not None:
            continue
        if any(child.type == "default" for child in node.children):
            continue
        yield node


def exported_name(tree: SyntaxTree, export: Node) -> str | None:
    """Name declared by ``export function name`` / ``export const name = ...``."""
    declaration = export.child_by_field_name("declaration")
    if declaration is None:
        return None
    if declaration.type in ("function_declaration", "generator_function_declaration"):
        name = declaration.child_by_field_name("name")
        return tree.text_of(name) if name is not None else None
    if declaration.type in ("lexical_declaration", "variable_declaration"):
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is not None and name.type == "identifier":
                return tree.text_of(name)
            return None
    return None


def _is_async_export(export: Node) -> bool:
    declaration = export.child_by_field_name("declaration")
    if declaration is None:
        return False
    if declaration.type == "function_declaration":
        return any(child.type == "async" for child in declaration.children)
    for declarator in declaration.named_children:
        if declarator.type == "variable_declarator":
            value = declarator.child_by_field_name("value")
            return (
                value is not None
                and value.type in _FUNCTION_VALUES
                and any(child.type == "async" for child in value.children)
            )
    return False


def _enclosing_export(node: Node) -> Node | None:
    for parent in ancestors(node):
        if parent.type == "export_statement":
            return parent
    return None


def _page_fragment(ctx: _Context, node: Node) -> QueryFragment | None:
    tag = read_graphql_tag(ctx.tree, ctx.table, node, ctx.settings)
    if tag is None:
        return None

    export = _enclosing_export(node)
    is_config = export is not None and exported_name(ctx.tree, export) == CONFIG_EXPORT
    if is_config and export is not None and not _is_async_export(export):
        raise ExportNotAsyncError(CONFIG_EXPORT, ctx.tree.range_between(export.start_byte, export.start_byte))

    doc, name, auto_named = name_definitions(tag.doc, "config" if is_config else "page", ctx.file_path, tag.hash)
    return QueryFragment(
        file_path=ctx.file_path,
        name=name,
        doc=doc,
        text=tag.text,
        hash=tag.hash,
        template_loc=tag.template_loc,
        location_key=tag.location_key,
        is_static_query=False,
        is_hook=False,
        is_config_query=is_config,
        is_auto_named=auto_named,
    )


def _templates_in(ctx: _Context, root: Node) -> list[QueryFragment]:
    fragments: list[QueryFragment] = []
    for node in ctx.tree.walk(root):
        if is_tagged_template(node):
            fragment = _page_fragment(ctx, node)
            if fragment is not None:
                fragments.append(fragment)
    return fragments


def _exported_fragments(ctx: _Context) -> list[QueryFragment]:
    fragments: list[QueryFragment] = []
    for export in _named_exports(ctx.tree):
        fragments.extend(_templates_in(ctx, export))
        for clause in export.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                if specifier.type != "export_specifier":
                    continue
                local = specifier.child_by_field_name("name")
                if local is None:
                    continue
                binding = ctx.table.follow_aliases(ctx.table.module_binding(ctx.tree.text_of(local)))
                if binding is not None:
                    fragments.extend(_templates_in(ctx, binding.node))
    return fragments
