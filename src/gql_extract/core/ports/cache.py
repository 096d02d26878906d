from typing import Protocol

from gql_extract.models import FileExtraction


class ResultCache(Protocol):
    def get(self, key: str) -> FileExtraction | None: ...

    def set(self, key: str, entry: FileExtraction) -> FileExtraction:
        """Store ``entry`` unless ``key`` already has one; return the entry of record."""
        ...
