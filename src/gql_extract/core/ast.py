import logging
from pathlib import Path
from typing import cast

from tree_sitter_language_pack import SupportedLanguage, get_parser

from gql_extract.core.errors import ParseError
from gql_extract.core.languages import resolve_language
from gql_extract.core.ports.preprocess import PreprocessHook
from gql_extract.core.ports.sink import ComponentSink
from gql_extract.core.source import clean_file_path
from gql_extract.core.syntax import SyntaxTree, find_parse_error
from gql_extract.models import SourceRange

logger = logging.getLogger(__name__)


class SourceSyntaxError(Exception):
    def __init__(self, location: SourceRange | None) -> None:
        super().__init__("source text contains syntax errors")
        self.location = location


def parse_source(text: str, file_path: str, language: str | None = None) -> SyntaxTree:
    """Parse ``text`` with the grammar matching ``file_path``.

    Raises ``SourceSyntaxError`` when the tree contains error or missing nodes.
    """
    resolved = resolve_language(language, Path(file_path))
    parser = get_parser(cast(SupportedLanguage, resolved))
    tree = SyntaxTree(parser.parse(text.encode("utf-8")), text, file_path, resolved)
    if tree.root.has_error:
        error_node = find_parse_error(tree.root)
        location = tree.range_of(error_node) if error_node is not None else None
        raise SourceSyntaxError(location)
    return tree


async def parse_to_ast(
    file_path: str,
    text: str,
    sink: ComponentSink,
    preprocess: PreprocessHook | None = None,
) -> SyntaxTree:
    """Build the syntax tree for a component file.

    The preprocessing hook may offer several variants of the text; the first
    one that parses cleanly wins. When nothing parses, the sink is told about
    the failure and ``ParseError`` is raised.
    """
    clean_path = clean_file_path(file_path)
    variants = await preprocess(clean_path, text) if preprocess is not None else None

    if variants:
        for index, variant in enumerate(variants):
            try:
                return parse_source(variant, clean_path)
            except SourceSyntaxError:
                logger.debug("Preprocessed variant %d of %s did not parse", index, clean_path)
        await sink.extraction_failed(file_path)
        raise ParseError(file_path, error_id="85912")

    try:
        return parse_source(text, clean_path)
    except SourceSyntaxError as err:
        parse_error = ParseError(file_path, err.location, error_id="85911")
        await sink.extraction_failed(file_path, parse_error)
        raise parse_error from err
