"""Assemble the searchable index document from the markdown catalog."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from jsonschema import validate as jsonschema_validate

from msdocs.catalog import INDEX_SCHEMA, IndexDocument, MethodDescriptor, MethodRecord, MethodSummary
from msdocs.errors import SourceMissingError
from msdocs.keywords import KeywordIndex, build_keyword_index
from msdocs.rules import QUICK_REFERENCE_GROUPS
from msdocs.scanner import DEFAULT_NAMESPACE, scan_methods

LOGGER = logging.getLogger(__name__)

INDEX_VERSION = "2.0.0"
DEFAULT_DOC_NAME = "complete.md"


def group_by_category(methods: Iterable[MethodDescriptor]) -> Dict[str, List[MethodRecord]]:
    """Return category -> method records, categories in first-seen order."""
    categories: Dict[str, List[MethodRecord]] = {}
    for method in methods:
        categories.setdefault(method.category, []).append(method.to_dict())
    return categories


def build_quick_reference(
    methods: Sequence[MethodDescriptor],
    groups: Mapping[str, Sequence[str]] = QUICK_REFERENCE_GROUPS,
) -> Dict[str, List[str]]:
    """Filter each curated group down to the names present in ``methods``.

    Names missing from the corpus are dropped silently; curated order is kept.
    """
    known = {method.name for method in methods}
    return {group: [name for name in names if name in known] for group, names in groups.items()}


def format_timestamp(moment: datetime) -> str:
    """Render a UTC ISO-8601 timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def assemble_index(
    methods: Sequence[MethodDescriptor],
    *,
    keywords: Optional[KeywordIndex] = None,
    quick_reference_groups: Mapping[str, Sequence[str]] = QUICK_REFERENCE_GROUPS,
    doc_name: str = DEFAULT_DOC_NAME,
    now: Optional[datetime] = None,
) -> IndexDocument:
    """Combine scanned methods into a plain, JSON-serializable index document.

    Args:
        methods: Descriptors in source order.
        keywords: Precomputed keyword index; built from ``methods`` when omitted.
        quick_reference_groups: Curated group -> method names.
        doc_name: File name used in each ``docLocation`` pointer.
        now: Timestamp for ``lastUpdated`` (defaults to the current UTC time).

    Returns:
        The index document.
    """
    if keywords is None:
        keywords = build_keyword_index(methods)
    all_methods: List[MethodSummary] = [
        {
            "name": m.name,
            "category": m.category,
            "signature": m.signature,
            "returns": m.returns,
            "docLocation": f"{doc_name}#L{m.line_number}",
        }
        for m in methods
    ]
    return {
        "version": INDEX_VERSION,
        "totalMethods": len(all_methods),
        "lastUpdated": format_timestamp(now or datetime.now(timezone.utc)),
        "categories": group_by_category(methods),
        "searchKeywords": {keyword: list(names) for keyword, names in keywords.items()},
        "quickReference": build_quick_reference(methods, quick_reference_groups),
        "allMethods": all_methods,
    }


def build_index(content: str, namespace: str = DEFAULT_NAMESPACE, **kwargs) -> IndexDocument:
    """Scan markdown text and assemble its index document."""
    return assemble_index(scan_methods(content, namespace), **kwargs)


def build_index_from_file(
    path: Union[str, os.PathLike],
    namespace: str = DEFAULT_NAMESPACE,
    **kwargs,
) -> IndexDocument:
    """Read a markdown catalog from disk and assemble its index document.

    Raises:
        SourceMissingError: If ``path`` does not exist.
    """
    source = Path(path)
    if not source.is_file():
        raise SourceMissingError({
            "error": "source_missing",
            "path": str(source),
            "hint": f"Documentation source not found: {source}",
        })
    content = source.read_text(encoding="utf-8")
    LOGGER.info("Building index from %s", source)
    return build_index(content, namespace, **kwargs)


def validate_index(index: IndexDocument) -> None:
    """Validate an index document against ``INDEX_SCHEMA`` and its invariants.

    Raises:
        ValidationError: When JSON schema validation fails.
        ValueError: If counts or quick-reference entries are inconsistent.
    """
    jsonschema_validate(instance=index, schema=INDEX_SCHEMA)
    names = {entry["name"] for entry in index["allMethods"]}
    if index["totalMethods"] != len(index["allMethods"]):
        raise ValueError("totalMethods does not match allMethods length")
    for group, members in index["quickReference"].items():
        unknown = [name for name in members if name not in names]
        if unknown:
            raise ValueError(f"quickReference group '{group}' lists unknown methods: {unknown}")


def dump_index(index: IndexDocument) -> str:
    """Serialize an index document as 2-space indented JSON."""
    return json.dumps(index, indent=2, ensure_ascii=False)


def write_index(index: IndexDocument, path: Union[str, os.PathLike]) -> Path:
    """Validate and write an index document, creating parent directories."""
    validate_index(index)
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(dump_index(index), encoding="utf-8")
    LOGGER.info("Wrote index with %d methods to %s", index["totalMethods"], target)
    return target
