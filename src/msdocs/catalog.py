from dataclasses import dataclass, field
from typing import TypedDict, List, Dict, Tuple, Any

from msdocs.rules import DEFAULT_CATEGORY


@dataclass(frozen=True)
class MethodDescriptor:
    """One documented API method as discovered by the scanner."""
    name: str
    category: str = DEFAULT_CATEGORY
    line_number: int = 0
    signature: str = ""
    description: str = ""
    returns: str = ""
    parameters: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> "MethodRecord":
        return {
            "name": self.name,
            "category": self.category,
            "lineNumber": self.line_number,
            "signature": self.signature,
            "description": self.description,
            "returns": self.returns,
            "parameters": list(self.parameters),
        }


# Index document payload (JSON-facing)
class MethodRecord(TypedDict):
    """Full method entry as stored under `categories`."""
    name: str
    category: str
    lineNumber: int           # 1-based line of the `### name()` heading
    signature: str
    description: str
    returns: str
    parameters: List[str]

class MethodSummary(TypedDict):
    """Flattened method entry stored under `allMethods`."""
    name: str
    category: str
    signature: str
    returns: str
    docLocation: str          # "complete.md#L<lineNumber>"

class IndexDocument(TypedDict):
    """Top-level index written to index.json."""
    version: str
    totalMethods: int
    lastUpdated: str
    categories: Dict[str, List[MethodRecord]]
    searchKeywords: Dict[str, List[str]]
    quickReference: Dict[str, List[str]]
    allMethods: List[MethodSummary]


INDEX_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": [
        "version", "totalMethods", "lastUpdated", "categories",
        "searchKeywords", "quickReference", "allMethods",
    ],
    "properties": {
        "version": {"type": "string"},
        "totalMethods": {"type": "integer", "minimum": 0},
        "lastUpdated": {"type": "string"},
        "categories": {
            "type": "object",
            "additionalProperties": {
                "type": "array",
                "items": {
                    "type": "object",
                    "required": ["name", "category", "lineNumber", "signature", "returns"],
                    "properties": {
                        "name": {"type": "string"},
                        "category": {"type": "string"},
                        "lineNumber": {"type": "integer", "minimum": 1},
                        "signature": {"type": "string"},
                        "description": {"type": "string"},
                        "returns": {"type": "string"},
                        "parameters": {"type": "array", "items": {"type": "string"}},
                    },
                },
            },
        },
        "searchKeywords": {
            "type": "object",
            "additionalProperties": {
                "type": "array",
                "items": {"type": "string"},
                "uniqueItems": True,
            },
        },
        "quickReference": {
            "type": "object",
            "additionalProperties": {"type": "array", "items": {"type": "string"}},
        },
        "allMethods": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "category", "signature", "returns", "docLocation"],
                "properties": {
                    "name": {"type": "string"},
                    "category": {"type": "string"},
                    "signature": {"type": "string"},
                    "returns": {"type": "string"},
                    "docLocation": {"type": "string"},
                },
            },
        },
    },
    "additionalProperties": False,
}
