"""Download the published documentation, falling back to bundled copies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import requests

from msdocs.config import Settings
from msdocs.errors import FetchError
from msdocs.indexer import build_index_from_file, dump_index

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocFile:
    """A documentation file: its installed name and its path under the base URL."""
    name: str
    remote_path: str


DOC_FILES: Tuple[DocFile, ...] = (
    DocFile("complete.md", "docs/memberstack-complete.md"),
    DocFile("index.json", "docs/memberstack-index.json"),
    DocFile("quickref.md", "docs/memberstack-quickref.md"),
)
REQUIRED_FILES = tuple(doc.name for doc in DOC_FILES)


@dataclass
class FetchedFile:
    name: str
    path: Path
    source: str               # "remote" | "bundled" | "compiled"
    size: int


class DocFetcher:
    """Fetch each documentation file from ``settings.base_url``.

    Any HTTP failure falls back to the copy bundled with the package. The index
    has one more fallback: it is compiled from the bundled catalog.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def url_for(self, doc: DocFile) -> str:
        return f"{self.settings.base_url}/{doc.remote_path}"

    def fetch_remote(self, doc: DocFile) -> str:
        """Download one file. Raises ``requests.RequestException`` on failure."""
        url = self.url_for(doc)
        LOGGER.debug("Fetching %s", url)
        response = requests.get(url, timeout=self.settings.timeout)
        response.raise_for_status()
        return response.text

    def load_fallback(self, doc: DocFile) -> Tuple[str, str]:
        """Return ``(text, source)`` from the bundled docs.

        Raises:
            FetchError: If no bundled copy exists and none can be compiled.
        """
        bundled = self.settings.bundled_dir / doc.name
        if bundled.is_file():
            return bundled.read_text(encoding="utf-8"), "bundled"
        catalog = self.settings.bundled_dir / "complete.md"
        if doc.name == "index.json" and catalog.is_file():
            return dump_index(build_index_from_file(catalog)), "compiled"
        raise FetchError({
            "error": "fetch_failed",
            "path": doc.name,
            "hint": f"Could not download {doc.name} and no bundled copy is available",
        })

    def fetch(self, doc: DocFile) -> Tuple[str, str]:
        """Return ``(text, source)`` for one file, remote first."""
        try:
            return self.fetch_remote(doc), "remote"
        except requests.RequestException as exc:
            LOGGER.warning("Download of %s failed (%s), using local copy", doc.name, exc)
            return self.load_fallback(doc)

    def download_all(self, dest_dir: Optional[Path] = None) -> List[FetchedFile]:
        """Fetch every documentation file into ``dest_dir`` (the docs dir by default)."""
        dest = Path(dest_dir) if dest_dir else self.settings.docs_dir
        dest.mkdir(parents=True, exist_ok=True)
        fetched: List[FetchedFile] = []
        for doc in DOC_FILES:
            text, source = self.fetch(doc)
            path = dest / doc.name
            path.write_text(text, encoding="utf-8")
            fetched.append(FetchedFile(doc.name, path, source, path.stat().st_size))
            LOGGER.info("Saved %s (%s)", doc.name, source)
        return fetched
