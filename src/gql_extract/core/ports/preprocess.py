from collections.abc import Sequence
from typing import Protocol


class PreprocessHook(Protocol):
    """Produce alternative source texts to try, in order. None or empty means "parse the raw text"."""

    async def __call__(self, file_path: str, text: str) -> Sequence[str] | None: ...
