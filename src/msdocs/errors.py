from typing import Any, Dict


class DocsError(Exception):
    """Base error carrying a JSON-ready payload (``error``, ``hint``, optional ``path``)."""

    def __init__(self, payload: Dict[str, Any]):
        super().__init__(payload.get("hint") or payload.get("error"))
        self.payload = payload


class SourceMissingError(DocsError, FileNotFoundError):
    """Raised when the markdown catalog to index does not exist."""


class FetchError(DocsError):
    """Raised when a documentation file is neither downloadable nor bundled."""
