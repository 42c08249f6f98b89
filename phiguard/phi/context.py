"""Infer a ScanContext from where the text came from."""
from __future__ import annotations

from pathlib import PurePath

from phiguard.phi.patterns import ScanContext

_DATA_LANGUAGES = frozenset({"json", "jsonc", "csv", "xml"})
_GENERAL_LANGUAGES = frozenset({"markdown", "plaintext"})

_DATA_EXTENSIONS = frozenset({"json", "jsonc", "csv", "tsv", "xml", "hl7", "ndjson"})
_GENERAL_EXTENSIONS = frozenset({"md", "markdown", "txt", "text", "rst"})


def context_for_language(language_id: str) -> ScanContext:
    """Map an editor language id to the context used for scoring."""
    language = language_id.strip().lower()
    if language in _DATA_LANGUAGES:
        return ScanContext.DATA
    if language in _GENERAL_LANGUAGES:
        return ScanContext.GENERAL
    return ScanContext.CODE


def context_for_filename(filename: str) -> ScanContext:
    """Map a file name to a context by extension; unknown extensions count as code."""
    ext = PurePath(filename).suffix.lstrip(".").lower()
    if ext in _DATA_EXTENSIONS:
        return ScanContext.DATA
    if ext in _GENERAL_EXTENSIONS:
        return ScanContext.GENERAL
    return ScanContext.CODE
