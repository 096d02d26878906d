from gql_extract.core.syntax import SyntaxTree
from gql_extract.models import FeatureFlags

SERVER_DATA_EXPORT = "getServerData"
CONFIG_EXPORT = "config"
HEAD_EXPORT = "Head"


def find_api_export(tree: SyntaxTree, api: str) -> bool:
    """True if the file has a named export called ``api``.

    Matches ``export { x as api }`` specifiers (including re-exports) as well
    as ``export function api`` and ``export const api = ...`` declarations.
    """
    for export in tree.root.named_children:
        if export.type != "export_statement" or any(child.type == "default" for child in export.children):
            continue

        for clause in export.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                if specifier.type != "export_specifier":
                    continue
                exported = specifier.child_by_field_name("alias")
                if exported is None:
                    exported = specifier.child_by_field_name("name")
                if exported is not None and tree.text_of(exported) == api:
                    return True

        declaration = export.child_by_field_name("declaration")
        if declaration is None:
            continue
        declared: str | None = None
        if declaration.type == "function_declaration":
            name = declaration.child_by_field_name("name")
            declared = tree.text_of(name) if name is not None else None
        elif declaration.type in ("lexical_declaration", "variable_declaration"):
            declarators = [d for d in declaration.named_children if d.type == "variable_declarator"]
            name = declarators[0].child_by_field_name("name") if declarators else None
            if name is not None and name.type == "identifier":
                declared = tree.text_of(name)
        if declared == api:
            return True
    return False


def scan_features(tree: SyntaxTree) -> FeatureFlags:
    return FeatureFlags(
        server_data=find_api_export(tree, SERVER_DATA_EXPORT),
        config=find_api_export(tree, CONFIG_EXPORT),
        head=find_api_export(tree, HEAD_EXPORT),
    )
