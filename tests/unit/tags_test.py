from __future__ import annotations

from graphql import parse, print_ast

from gql_extract.core.tags import _camel_case, fragment_hash, generate_query_name, name_definitions, slugify_path


class TestCamelCase:
    def test_path_separators_and_dashes(self) -> None:
        assert _camel_case("page-/site/src/pages/index.js-42") == "pageSiteSrcPagesIndexJs42"

    def test_existing_camel_case_words_are_split(self) -> None:
        assert _camel_case("static-/src/components/SiteHeader.tsx-7") == "staticSrcComponentsSiteHeaderTsx7"

    def test_accents_are_folded(self) -> None:
        assert _camel_case("page-café") == "pageCafe"

    def test_empty(self) -> None:
        assert _camel_case("---") == ""


class TestSlugifyPath:
    def test_slashes_are_dropped_and_case_kept(self) -> None:
        assert slugify_path("/site/src/pages/About.js") == "sitesrcpagesAbout.js"

    def test_whitespace_collapses(self) -> None:
        assert slugify_path("my  docs\tpage.js") == "my docs page.js"

    def test_allowed_punctuation_survives(self) -> None:
        assert slugify_path("/src/[id]/blog-post_(old).js") == "srcidblog-post_(old).js"


class TestQueryNames:
    def test_generated_name_is_deterministic(self) -> None:
        first = generate_query_name("page", "/site/src/pages/about.js", "123")
        second = generate_query_name("page", "/site/src/pages/about.js", "123")
        assert first == second == "pageSitesrcpagesaboutJs123"

    def test_camel_case_file_names_split_into_words(self) -> None:
        name = generate_query_name("static", "/src/components/SiteHeader.tsx", "7")
        assert name == "staticSrccomponentsSiteHeaderTsx7"

    def test_generated_name_depends_on_type_path_and_hash(self) -> None:
        base = generate_query_name("page", "/a.js", "1")
        assert generate_query_name("static", "/a.js", "1") != base
        assert generate_query_name("page", "/b.js", "1") != base
        assert generate_query_name("page", "/a.js", "2") != base

    def test_fragment_hash_is_stable_decimal(self) -> None:
        value = fragment_hash("{site{id}}")
        assert value == fragment_hash("{site{id}}")
        assert value.isdigit()
        assert int(value) < 2**32
        assert value != fragment_hash("{site{title}}")


class TestNameDefinitions:
    def test_anonymous_query_is_named(self) -> None:
        doc = parse("{ site { id } }")

        named, name, auto_named = name_definitions(doc, "page", "/src/pages/index.js", "9")

        assert auto_named is True
        assert name == "pageSrcpagesindexJs9"
        assert named.definitions[0].name.value == name
        assert print_ast(named).startswith(f"query {name} ")

    def test_parsed_document_is_left_alone(self) -> None:
        doc = parse("{ site { id } }")

        named, _, _ = name_definitions(doc, "page", "/src/pages/index.js", "9")

        assert named is not doc
        assert doc.definitions[0].name is None
        assert named.definitions[0].selection_set is doc.definitions[0].selection_set

    def test_named_query_is_untouched(self) -> None:
        doc = parse("query Named { site { id } }")

        named, name, auto_named = name_definitions(doc, "page", "/src/pages/index.js", "9")

        assert (name, auto_named) == ("Named", False)
        assert named is doc

    def test_fragments_keep_their_names_and_first_name_wins(self) -> None:
        doc = parse("fragment SiteId on Site { id }\nquery { site { ...SiteId } }")

        named, name, auto_named = name_definitions(doc, "static", "/src/a.js", "1")

        assert name == "SiteId"
        assert auto_named is True
        assert named.definitions[0] is doc.definitions[0]
        assert named.definitions[1].name.value == "staticSrcaJs1"
