import asyncio
import logging
from collections.abc import Callable, Sequence

from gql_extract.config import ExtractorSettings
from gql_extract.core.ast import parse_to_ast
from gql_extract.core.diagnostics import to_diagnostic
from gql_extract.core.errors import ErrorKind, ExtractionError, ReadError
from gql_extract.core.extractor import find_graphql_tags
from gql_extract.core.features import scan_features
from gql_extract.core.ports.cache import ResultCache
from gql_extract.core.ports.preprocess import PreprocessHook
from gql_extract.core.ports.sink import ComponentSink
from gql_extract.core.source import passes_prefilter, prefilter_markers, read_source
from gql_extract.models import Diagnostic, FeatureFlags, FileExtraction, QueryFragment, SourceFile
from gql_extract.store.cache import InMemoryResultCache, get_or_compute

logger = logging.getLogger(__name__)

Reporter = Callable[[Diagnostic], None]


class FileParser:
    """Extract GraphQL fragments from component files.

    The cache, sink, reporter and preprocessing hook are injected so a parser
    instance is a pure function of its inputs and collaborators.
    """

    def __init__(
        self,
        reporter: Reporter,
        sink: ComponentSink,
        cache: ResultCache | None = None,
        preprocess: PreprocessHook | None = None,
        settings: ExtractorSettings | None = None,
    ) -> None:
        self._reporter = reporter
        self._sink = sink
        self._cache: ResultCache = cache if cache is not None else InMemoryResultCache()
        self._preprocess = preprocess
        self._settings = settings or ExtractorSettings()
        self._markers = prefilter_markers(self._settings.tag_name)

    async def parse_file(self, path: str) -> list[QueryFragment] | None:
        """Return the fragments of one file, or None when it was skipped or failed.

        Non-fatal failures, unexpected exceptions included, are reported and
        swallowed here; the deprecated ambient tag error propagates.
        """
        try:
            source = await read_source(path)
        except ReadError as err:
            self._report(err, None, path)
            await self._sink.extraction_failed(path, err)
            return None

        if not passes_prefilter(source.text, self._markers):
            logger.debug("Skipping %s: no query or export markers", path)
            await self._sink.set_component_features(path, FeatureFlags())
            return None

        try:
            entry = await get_or_compute(self._cache, source.content_hash, lambda: self._extract(source))
        except ExtractionError as err:
            if err.kind.fatal:
                raise
            self._report(err, source.text, path)
            # The AST builder has already told the sink about parse failures.
            if err.kind is not ErrorKind.PARSE_ERROR:
                await self._sink.extraction_failed(path, err)
            return None
        except Exception as err:
            logger.exception("Unexpected error while extracting %s", path)
            self._report(err, source.text, path)
            await self._sink.extraction_failed(path, err)
            return None

        # Reported even when all flags are false so earlier values get reset.
        await self._sink.set_component_features(path, entry.features)
        if entry.fragments:
            await self._sink.extraction_succeeded(path)
        return entry.fragments

    async def parse_files(self, paths: Sequence[str]) -> list[QueryFragment]:
        semaphore = asyncio.Semaphore(self._settings.max_concurrency)

        async def _bounded(path: str) -> list[QueryFragment] | None:
            async with semaphore:
                return await self.parse_file(path)

        results = await asyncio.gather(*(_bounded(path) for path in paths))
        fragments = [fragment for docs in results for fragment in docs or []]
        logger.info("Extracted %d fragment(s) from %d file(s)", len(fragments), len(paths))
        return fragments

    async def _extract(self, source: SourceFile) -> FileExtraction:
        tree = await parse_to_ast(source.path, source.text, self._sink, self._preprocess)
        result = find_graphql_tags(tree, source.path, self._settings)
        return FileExtraction(fragments=result.fragments, features=scan_features(tree))

    def _report(self, error: BaseException, text: str | None, path: str) -> None:
        self._reporter(to_diagnostic(error, text, path, highlight=self._settings.highlight_code_frames))
