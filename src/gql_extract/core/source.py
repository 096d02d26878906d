import asyncio
import hashlib
from pathlib import Path

from gql_extract.core.errors import ReadError
from gql_extract.models import SourceFile

# Every construct that can yield a fragment or a feature flag contains one of
# these substrings: the tag name and each capability export name. Removing an
# entry makes the pre-filter drop files that do have results.
FEATURE_MARKERS: tuple[str, ...] = ("gatsby-plugin-image", "getServerData", "config", "Head")
PREFILTER_MARKERS: tuple[str, ...] = ("graphql", *FEATURE_MARKERS)

_RESOURCE_QUERY_SEPARATOR = "?"


def clean_file_path(path: str) -> str:
    """Strip a loader resource query, e.g. ``layout.js?__contentFilePath=post.mdx``."""
    return path.split(_RESOURCE_QUERY_SEPARATOR, 1)[0]


def compute_content_hash(path: str, text: str) -> str:
    h = hashlib.md5()
    h.update(path.encode("utf-8"))
    h.update(text.encode("utf-8"))
    return h.hexdigest()


def prefilter_markers(tag_name: str) -> tuple[str, ...]:
    """Markers for a configured tag name; the hook and element forms always contain the tag."""
    return (tag_name, *FEATURE_MARKERS)


def passes_prefilter(text: str, markers: tuple[str, ...] = PREFILTER_MARKERS) -> bool:
    return any(marker in text for marker in markers)


async def read_source(path: str) -> SourceFile:
    """Read a component file and derive its content hash.

    Raises ``ReadError`` when the file is missing, unreadable or not UTF-8.
    """
    file_path = Path(clean_file_path(path))
    try:
        text = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        raise ReadError(path, err) from err
    return SourceFile(path=path, text=text, content_hash=compute_content_hash(path, text))
