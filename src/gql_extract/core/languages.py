from pathlib import Path

_LANGUAGE_ALIASES = {
    "javascript": "javascript",
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "typescript": "typescript",
    "tsx": "tsx",
}

_EXTENSION_LANGUAGE_MAP = {
    ".cjs": "javascript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
}

_SUPPORTED_LANGUAGES = set(_EXTENSION_LANGUAGE_MAP.values())

_IGNORED_DIRECTORIES: frozenset[str] = frozenset({".cache", ".git", "node_modules", "public"})


def normalize_language(language: str) -> str:
    normalized = language.strip().lower()
    resolved = _LANGUAGE_ALIASES.get(normalized, normalized)
    if resolved not in _SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language '{language}'. Supported: {sorted(_SUPPORTED_LANGUAGES)}")
    return resolved


def detect_language_from_path(file_path: Path) -> str:
    suffix = file_path.suffix.lower()
    if suffix in _EXTENSION_LANGUAGE_MAP:
        return _EXTENSION_LANGUAGE_MAP[suffix]
    raise ValueError(f"Unsupported file extension: {suffix}")


def resolve_language(language: str | None, file_path: Path | None) -> str:
    if language:
        return normalize_language(language)
    if file_path:
        try:
            return detect_language_from_path(file_path)
        except ValueError:
            # Unknown extensions are parsed as plain JavaScript with JSX.
            return "javascript"
    raise ValueError("Language must be provided when no file path is available.")


def is_supported_path(file_path: Path) -> bool:
    return file_path.suffix.lower() in _EXTENSION_LANGUAGE_MAP


def is_component_path(file_path: Path) -> bool:
    """Supported source file outside build output and dependency directories."""
    return is_supported_path(file_path) and not _IGNORED_DIRECTORIES.intersection(file_path.parts)
