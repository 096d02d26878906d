from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from gql_extract.core.errors import ErrorKind, ReadError
from gql_extract.core.source import (
    clean_file_path,
    compute_content_hash,
    passes_prefilter,
    prefilter_markers,
    read_source,
)


@pytest.mark.parametrize(
    "text",
    [
        "export const query = graphql`{ site { id } }`",
        'import { StaticImage } from "gatsby-plugin-image"',
        "export async function getServerData() {}",
        "export const config = async () => ({})",
        "export const Head = () => null",
    ],
    ids=["tag", "image", "server-data", "config", "head"],
)
def test_prefilter_accepts_marker(text: str) -> None:
    assert passes_prefilter(text) is True


def test_prefilter_rejects_plain_component() -> None:
    assert passes_prefilter("export default function Page() { return null }") is False


def test_prefilter_markers_follow_configured_tag() -> None:
    markers = prefilter_markers("gql")
    text = "export const query = gql`{ site { id } }`"

    assert passes_prefilter(text) is False
    assert passes_prefilter(text, markers) is True
    assert passes_prefilter("export const Head = () => null", markers) is True


def test_clean_file_path_strips_resource_query() -> None:
    assert clean_file_path("/src/layout.js?__contentFilePath=/posts/a.mdx") == "/src/layout.js"
    assert clean_file_path("/src/layout.js") == "/src/layout.js"


def test_content_hash_covers_path_and_text() -> None:
    expected = hashlib.md5(b"/src/a.jsconst a = 1").hexdigest()

    assert compute_content_hash("/src/a.js", "const a = 1") == expected
    assert compute_content_hash("/src/b.js", "const a = 1") != expected
    assert compute_content_hash("/src/a.js", "const a = 2") != expected


@pytest.mark.asyncio
async def test_read_source(tmp_path: Path) -> None:
    path = tmp_path / "page.js"
    path.write_text("export const a = 1\n", encoding="utf-8")

    source = await read_source(f"{path}?x=1")

    assert source.path == f"{path}?x=1"
    assert source.text == "export const a = 1\n"
    assert source.content_hash == compute_content_hash(f"{path}?x=1", source.text)


@pytest.mark.asyncio
async def test_read_source_missing_file(tmp_path: Path) -> None:
    missing = str(tmp_path / "missing.js")

    with pytest.raises(ReadError) as excinfo:
        await read_source(missing)

    assert excinfo.value.kind is ErrorKind.READ_ERROR
    assert excinfo.value.file_path == missing
    assert isinstance(excinfo.value.cause, FileNotFoundError)


@pytest.mark.asyncio
async def test_read_source_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "binary.js"
    path.write_bytes(b"\xff\xfe\x00graphql")

    with pytest.raises(ReadError):
        await read_source(str(path))
