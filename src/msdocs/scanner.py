"""Line scanner that extracts method descriptors from the markdown catalog.

The scanner is a fold over lines: ``step`` takes a ``ScanState`` and one line
and returns the next state without mutating its input. Headings are recognized
only outside fenced code blocks. A fence closes only on a run of the same
character at least as long as the one that opened it. Signatures and return
types are matched on any line, fenced or not.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Dict, List, Optional, Pattern, Tuple

from msdocs.catalog import MethodDescriptor
from msdocs.rules import DEFAULT_CATEGORY, classify_heading

LOGGER = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "memberstack"

HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
METHOD_HEADING_RE = re.compile(r"^###\s+(\w+)\(\)")
FENCE_RE = re.compile(r"^\s{0,3}(`{3,}|~{3,})(.*)$")
PROMISE_RE = re.compile(r"Promise<([^>]+)>")
QUOTED_RE = re.compile(r"'[^']*'|\"[^\"]*\"|`[^`]*`")
IDENTIFIER_RE = re.compile(r"^(?:\.\.\.)?([A-Za-z_$][\w$]*)")
NON_PROSE_PREFIXES = ("|", ">", "-", "*", "+", "<", "```", "~~~", "!")
ORDERED_LIST_RE = re.compile(r"^\d+[.)]\s")


@dataclass(frozen=True)
class ScanState:
    """Everything the scanner carries from one line to the next."""
    category: str = DEFAULT_CATEGORY
    current: Optional[MethodDescriptor] = None
    opened_by: str = ""
    fence: str = ""           # opening fence run while inside a code block
    methods: Tuple[MethodDescriptor, ...] = ()

    @property
    def in_fence(self) -> bool:
        return bool(self.fence)


@lru_cache(maxsize=16)
def _invocation_pattern(namespace: str) -> Pattern[str]:
    return re.compile(re.escape(namespace) + r"\.(\w+)\(([^)]*)\)")


def extract_signature(line: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Return ``name(args)`` for an ``await <namespace>.name(args)`` line, else ""."""
    if f"await {namespace}." not in line:
        return ""
    match = _invocation_pattern(namespace).search(line)
    if not match:
        return ""
    return f"{match.group(1)}({match.group(2)})"


def extract_return_type(line: str) -> str:
    """Return the first ``Promise<...>`` annotation on a line, else "".

    Angle brackets are balanced so ``Promise<Array<Plan>>`` is kept whole.
    An unbalanced annotation falls back to the text up to the first ``>``.
    """
    start = line.find("Promise<")
    if start == -1:
        return ""
    depth = 0
    for idx in range(start + len("Promise"), len(line)):
        char = line[idx]
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
            if depth == 0:
                if idx == start + len("Promise<"):
                    break
                return line[start:idx + 1]
    match = PROMISE_RE.search(line, start)
    return f"Promise<{match.group(1)}>" if match else ""


def _split_top_level(text: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    buf: List[str] = []
    for char in text:
        if char in "{[(":
            depth += 1
        elif char in "}])":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(buf))
            buf = []
            continue
        buf.append(char)
    parts.append("".join(buf))
    return parts


def parse_parameters(signature: str) -> Tuple[str, ...]:
    """Derive parameter names from a captured ``name(args)`` signature.

    Object literal arguments contribute their keys; positional arguments
    contribute their identifiers. Literals are skipped.
    """
    open_idx = signature.find("(")
    if open_idx == -1 or not signature.endswith(")"):
        return ()
    args = QUOTED_RE.sub('""', signature[open_idx + 1:-1]).strip()
    if not args:
        return ()
    if args.startswith("{"):
        close_idx = args.rfind("}")
        args = args[1:close_idx] if close_idx > 0 else args[1:]
    names: List[str] = []
    for part in _split_top_level(args):
        match = IDENTIFIER_RE.match(part.strip())
        if match and match.group(1) not in names:
            names.append(match.group(1))
    return tuple(names)


def _is_prose(line: str) -> bool:
    stripped = line.strip()
    if not stripped:
        return False
    if stripped.startswith(NON_PROSE_PREFIXES):
        return False
    return not ORDERED_LIST_RE.match(stripped)


def _flush(state: ScanState) -> ScanState:
    if state.current is None:
        return state
    LOGGER.debug("method %s closed (category=%s)", state.current.name, state.current.category)
    return replace(state, current=None, opened_by="", methods=state.methods + (state.current,))


def _step_heading(state: ScanState, line_number: int, line: str, level: int, text: str) -> ScanState:
    if level == 1:
        category = classify_heading(text)
        if category is not None:
            state = replace(state, category=category)

    method_match = METHOD_HEADING_RE.match(line)
    if method_match:
        if state.current is not None and line == state.opened_by:
            return state
        state = _flush(state)
        opened = MethodDescriptor(
            name=method_match.group(1),
            category=state.category,
            line_number=line_number,
        )
        return replace(state, current=opened, opened_by=line)

    if level <= 2:
        return _flush(state)
    return state


def _step_body(state: ScanState, line: str, namespace: str) -> ScanState:
    method = state.current
    if method is None:
        return state
    signature = extract_signature(line, namespace)
    returns = extract_return_type(line)
    updates: Dict[str, Any] = {}
    # first match wins for every field
    if signature and not method.signature:
        updates["signature"] = signature
        updates["parameters"] = parse_parameters(signature)
    if returns and not method.returns:
        updates["returns"] = returns
    if (not method.description and not signature and not returns
            and not state.in_fence and _is_prose(line)):
        updates["description"] = line.strip()
    if not updates:
        return state
    return replace(state, current=replace(method, **updates))


def step(state: ScanState, line_number: int, line: str, namespace: str = DEFAULT_NAMESPACE) -> ScanState:
    """Advance the scan by one line and return the new state."""
    line = line.rstrip("\r")
    fence = FENCE_RE.match(line)
    if fence:
        run, rest = fence.group(1), fence.group(2)
        if not state.fence:
            return replace(state, fence=run)
        # closing run: same character, at least as long, nothing after it
        if run[0] == state.fence[0] and len(run) >= len(state.fence) and not rest.strip():
            return replace(state, fence="")
    if not state.in_fence:
        heading = HEADING_RE.match(line)
        if heading:
            return _step_heading(state, line_number, line, len(heading.group(1)), heading.group(2))
    return _step_body(state, line, namespace)


def finish(state: ScanState) -> ScanState:
    """Flush a method still open at end of input."""
    return _flush(state)


def scan(content: str, namespace: str = DEFAULT_NAMESPACE) -> ScanState:
    """Fold every line of ``content`` through ``step`` and return the final state."""
    state = ScanState()
    for line_number, line in enumerate(content.split("\n"), start=1):
        state = step(state, line_number, line, namespace)
    return finish(state)


def scan_methods(content: str, namespace: str = DEFAULT_NAMESPACE) -> List[MethodDescriptor]:
    """Return the method descriptors of a markdown catalog in source order."""
    methods = list(scan(content, namespace).methods)
    LOGGER.info("scanned %d methods", len(methods))
    return methods
