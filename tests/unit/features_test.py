from __future__ import annotations

from collections.abc import Callable

from gql_extract.core.features import find_api_export, scan_features
from gql_extract.core.syntax import SyntaxTree
from gql_extract.models import FeatureFlags

TreeFactory = Callable[..., SyntaxTree]


def test_config_and_head_without_server_data(make_tree: TreeFactory) -> None:
    tree = make_tree(
        'import * as React from "react"\n'
        "export const config = async () => ({ defer: true })\n"
        "export function Head() {\n"
        "  return <title>Home</title>\n"
        "}\n"
        "export default function Page() {\n"
        "  return null\n"
        "}\n"
    )

    assert scan_features(tree) == FeatureFlags(server_data=False, config=True, head=True)


def test_export_specifier_uses_exported_name(make_tree: TreeFactory) -> None:
    tree = make_tree(
        "async function loadData() {\n"
        "  return { props: {} }\n"
        "}\n"
        "const Head = () => null\n"
        "export { loadData as getServerData, Head as SeoHead }\n"
    )

    assert find_api_export(tree, "getServerData") is True
    assert find_api_export(tree, "loadData") is False
    assert find_api_export(tree, "Head") is False


def test_reexport_counts(make_tree: TreeFactory) -> None:
    tree = make_tree('export { Head } from "../components/seo"\n')

    assert find_api_export(tree, "Head") is True


def test_default_export_does_not_count(make_tree: TreeFactory) -> None:
    tree = make_tree("export default function Head() {\n  return null\n}\n")

    assert find_api_export(tree, "Head") is False


def test_nothing_exported(make_tree: TreeFactory) -> None:
    tree = make_tree("const config = {}\nfunction Head() {}\n")

    assert scan_features(tree) == FeatureFlags()
