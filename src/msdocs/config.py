"""Runtime settings: module defaults overridable from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

DOCS_DIR = ".memberstack"
GITHUB_BASE_URL = "https://raw.githubusercontent.com/julianmemberstack/memberstack-ai-docs/main"
FETCH_TIMEOUT = 10.0

BASE_URL_ENV = "MEMBERSTACK_DOCS_BASE_URL"
TIMEOUT_ENV = "MEMBERSTACK_DOCS_TIMEOUT"

# Bundled copies of the published docs, used when the download fails
BUNDLED_DOCS_DIR = Path(__file__).parent / "docs"
TEMPLATES_DIR = Path(__file__).parent / "templates"


@dataclass
class Settings:
    """Where the docs come from and where they are installed."""
    project_root: Path = field(default_factory=Path.cwd)
    docs_dir_name: str = DOCS_DIR
    base_url: str = GITHUB_BASE_URL
    timeout: float = FETCH_TIMEOUT
    bundled_dir: Path = BUNDLED_DOCS_DIR

    @property
    def docs_dir(self) -> Path:
        return self.project_root / self.docs_dir_name

    @classmethod
    def from_env(cls, project_root: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``MEMBERSTACK_DOCS_*`` environment variables.

        Raises:
            ValueError: If the timeout variable is not a positive number.
        """
        env = os.environ if environ is None else environ
        timeout_raw = env.get(TIMEOUT_ENV)
        timeout = FETCH_TIMEOUT
        if timeout_raw:
            try:
                timeout = float(timeout_raw)
            except ValueError:
                raise ValueError(f"{TIMEOUT_ENV} must be a number, got {timeout_raw!r}")
            if timeout <= 0:
                raise ValueError(f"{TIMEOUT_ENV} must be positive, got {timeout_raw!r}")
        return cls(
            project_root=Path(project_root) if project_root else Path.cwd(),
            base_url=env.get(BASE_URL_ENV, GITHUB_BASE_URL).rstrip("/"),
            timeout=timeout,
        )
