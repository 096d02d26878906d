from typing import Any

from graphql import DocumentNode
from pydantic import BaseModel, ConfigDict


class Position(BaseModel):
    """A point in the original source. ``line`` and ``column`` are 1-based, ``offset`` counts characters."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int
    offset: int


class SourceRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position | None = None


class SourceFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    text: str
    content_hash: str


class FeatureFlags(BaseModel):
    model_config = ConfigDict(frozen=True)

    server_data: bool = False
    config: bool = False
    head: bool = False


class QueryFragment(BaseModel):
    """One GraphQL document found in a tagged template of a component file."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    file_path: str
    name: str
    doc: DocumentNode
    text: str
    hash: str
    template_loc: SourceRange
    location_key: tuple[int, int]
    is_static_query: bool = False
    is_hook: bool = False
    is_config_query: bool = False
    is_auto_named: bool = False

    @property
    def query_type(self) -> str:
        if self.is_config_query:
            return "config"
        if self.is_static_query:
            return "static"
        return "page"


GraphQLDocumentInFile = QueryFragment


class UnresolvedVariableWarning(BaseModel):
    model_config = ConfigDict(frozen=True)

    var_name: str
    file_path: str
    usage: str

    @property
    def message(self) -> str:
        return (
            f'We were unable to find the declaration of variable "{self.var_name}", which you passed as the '
            f'"query" prop into the {self.usage} declaration in "{self.file_path}".\n\n'
            "Perhaps the variable name has a typo?\n\n"
            f"Also note that queries defined in files other than the file where the {self.usage} is defined "
            f'are not supported. If you are importing the query, move it into "{self.file_path}".'
        )


class ExtractionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    fragments: list[QueryFragment] = []
    warnings: list[UnresolvedVariableWarning] = []


class FileExtraction(BaseModel):
    """Cached outcome of extracting one file version."""

    model_config = ConfigDict(frozen=True)

    fragments: list[QueryFragment] = []
    features: FeatureFlags = FeatureFlags()


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True)

    error_id: str
    kind: str
    file_path: str
    location: SourceRange | None = None
    code_frame: str | None = None
    source_message: str | None = None
    context: dict[str, Any] = {}
