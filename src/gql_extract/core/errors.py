"""Extraction error taxonomy.

Every failure raised while reading, parsing or extracting a file is an
:class:`ExtractionError`. The ``kind`` discriminant selects how the failure is
reported; the subclasses below are named constructors for each kind.
"""

from __future__ import annotations

from enum import Enum

from graphql import GraphQLError

from gql_extract.models import SourceRange


class ErrorKind(str, Enum):
    READ_ERROR = "read_error"
    PARSE_ERROR = "parse_error"
    INTERPOLATION_NOT_ALLOWED = "interpolation_not_allowed"
    EMPTY_FRAGMENT = "empty_fragment"
    FRAGMENT_SYNTAX = "fragment_syntax"
    EXPORT_NOT_ASYNC = "export_not_async"
    DEPRECATED_AMBIENT_TAG = "deprecated_ambient_tag"

    @property
    def fatal(self) -> bool:
        return self is ErrorKind.DEPRECATED_AMBIENT_TAG


class ExtractionError(Exception):
    kind: ErrorKind

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        file_path: str | None = None,
        location: SourceRange | None = None,
        export_name: str | None = None,
        source_error: GraphQLError | None = None,
        error_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.file_path = file_path
        self.location = location
        self.export_name = export_name
        self.source_error = source_error
        self.error_id = error_id


class ReadError(ExtractionError):
    def __init__(self, file_path: str, cause: OSError | UnicodeDecodeError) -> None:
        super().__init__(ErrorKind.READ_ERROR, f"Could not read {file_path}: {cause}", file_path=file_path)
        self.cause = cause


class ParseError(ExtractionError):
    def __init__(self, file_path: str, location: SourceRange | None = None, *, error_id: str = "85911") -> None:
        super().__init__(
            ErrorKind.PARSE_ERROR,
            f"Could not parse {file_path}",
            file_path=file_path,
            location=location,
            error_id=error_id,
        )


class InterpolationNotAllowedError(ExtractionError):
    def __init__(self, location: SourceRange) -> None:
        super().__init__(
            ErrorKind.INTERPOLATION_NOT_ALLOWED,
            "String interpolations are not allowed in graphql fragments.",
            location=location,
        )


class EmptyFragmentError(ExtractionError):
    def __init__(self, location: SourceRange | None) -> None:
        super().__init__(ErrorKind.EMPTY_FRAGMENT, "Empty graphql tag", location=location)


class FragmentSyntaxError(ExtractionError):
    """``location`` is the template body; the GraphQL-relative position lives on ``source_error``."""

    def __init__(self, text: str, source_error: GraphQLError, location: SourceRange) -> None:
        super().__init__(
            ErrorKind.FRAGMENT_SYNTAX,
            f"GraphQL syntax error in query:\n\n{text}\n\nmessage:\n\n{source_error.message}",
            location=location,
            source_error=source_error,
        )


class ExportNotAsyncError(ExtractionError):
    def __init__(self, export_name: str, location: SourceRange) -> None:
        super().__init__(
            ErrorKind.EXPORT_NOT_ASYNC,
            f'The "{export_name}" export must be async when using it with graphql',
            location=location,
            export_name=export_name,
        )


class DeprecatedAmbientTagError(ExtractionError):
    def __init__(self, file_path: str) -> None:
        super().__init__(
            ErrorKind.DEPRECATED_AMBIENT_TAG,
            "Using the global `graphql` tag for queries isn't supported.\n"
            "Import it instead like:  import { graphql } from 'gatsby' in file:\n" + file_path,
            file_path=file_path,
        )
