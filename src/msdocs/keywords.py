"""Keyword -> method-name inverted index built from the keyword rule table."""

from __future__ import annotations

from typing import Dict, Iterable, List

from msdocs.catalog import MethodDescriptor
from msdocs.rules import keywords_for

KeywordIndex = Dict[str, List[str]]


def add_method_keywords(index: KeywordIndex, method_name: str) -> KeywordIndex:
    """Return a new index with ``method_name`` filed under each keyword it fires.

    A name already listed under a keyword is not added again; untouched keyword
    lists are shared with the input.
    """
    updated = dict(index)
    for keyword in keywords_for(method_name):
        names = updated.get(keyword, [])
        if method_name not in names:
            updated[keyword] = names + [method_name]
    return updated


def build_keyword_index(methods: Iterable[MethodDescriptor]) -> KeywordIndex:
    """Fold every method name into a fresh keyword index, in source order."""
    index: KeywordIndex = {}
    for method in methods:
        index = add_method_keywords(index, method.name)
    return index
