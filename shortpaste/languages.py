"""
Language tags a paste can carry, with display labels and file suffixes.
"""
from typing import List, NamedTuple


class Language(NamedTuple):
    id: str
    label: str
    file_extension: str


LANGUAGES: List[Language] = [
    Language("plaintext", "Plain Text", "txt"),
    Language("javascript", "JavaScript", "js"),
    Language("typescript", "TypeScript", "ts"),
    Language("jsx", "JSX", "jsx"),
    Language("tsx", "TSX", "tsx"),
    Language("python", "Python", "py"),
    Language("html", "HTML", "html"),
    Language("css", "CSS", "css"),
    Language("json", "JSON", "json"),
    Language("markdown", "Markdown", "md"),
    Language("sql", "SQL", "sql"),
    Language("xml", "XML", "xml"),
    Language("yaml", "YAML", "yaml"),
]

DEFAULT_LANGUAGE = LANGUAGES[0]

_BY_ID = {language.id: language for language in LANGUAGES}


def get_language(language_id: str) -> Language:
    """Look up a language tag, falling back to plain text for unknown tags."""
    return _BY_ID.get(language_id, DEFAULT_LANGUAGE)


def get_file_extension(language_id: str) -> str:
    return get_language(language_id).file_extension


def download_filename(identifier: str, language_id: str) -> str:
    """Filename offered when a paste is downloaded."""
    return f"paste-{identifier}.{get_file_extension(language_id)}"
