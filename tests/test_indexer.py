import json
from datetime import datetime, timezone

import pytest
from jsonschema import ValidationError

from msdocs.catalog import MethodDescriptor
from msdocs.config import BUNDLED_DOCS_DIR
from msdocs.errors import SourceMissingError
from msdocs.indexer import (
    assemble_index,
    build_index,
    build_index_from_file,
    build_quick_reference,
    format_timestamp,
    validate_index,
    write_index,
)

FIXED_NOW = datetime(2025, 1, 11, 12, 0, 0, tzinfo=timezone.utc)

CATALOG = (
    "# Authentication\n"
    "### loginMemberEmailPassword()\n"
    "const { data } = await memberstack.loginMemberEmailPassword({ email, password })\n"
    "**Returns:** `Promise<LoginResult>`\n"
    "# Member Management\n"
    "### getCurrentMember()\n"
    "await memberstack.getCurrentMember()\n"
)


@pytest.fixture
def index():
    return build_index(CATALOG, now=FIXED_NOW)


def test_index_shape(index):
    assert index["version"] == "2.0.0"
    assert index["totalMethods"] == 2
    assert index["lastUpdated"] == "2025-01-11T12:00:00.000Z"
    assert list(index["categories"]) == ["authentication", "members"]
    validate_index(index)


def test_category_records(index):
    (login,) = index["categories"]["authentication"]
    assert login == {
        "name": "loginMemberEmailPassword",
        "category": "authentication",
        "lineNumber": 2,
        "signature": "loginMemberEmailPassword({ email, password })",
        "description": "",
        "returns": "Promise<LoginResult>",
        "parameters": ["email", "password"],
    }


def test_all_methods_point_into_the_catalog(index):
    assert [entry["docLocation"] for entry in index["allMethods"]] == [
        "complete.md#L2",
        "complete.md#L6",
    ]
    custom = build_index(CATALOG, now=FIXED_NOW, doc_name="reference.md")
    assert custom["allMethods"][0]["docLocation"] == "reference.md#L2"


def test_quick_reference_only_lists_known_methods(index):
    assert index["quickReference"] == {
        "authentication": ["loginMemberEmailPassword"],
        "members": ["getCurrentMember"],
        "plans": [],
    }


def test_quick_reference_keeps_curated_order():
    methods = [MethodDescriptor(name) for name in ("b", "c", "a")]
    assert build_quick_reference(methods, {"group": ["a", "missing", "b"]}) == {"group": ["a", "b"]}


def test_precomputed_keywords_are_used():
    methods = [MethodDescriptor("logoutMember", "authentication", 3)]
    index = assemble_index(methods, keywords={"bye": ["logoutMember"]}, now=FIXED_NOW)
    assert index["searchKeywords"] == {"bye": ["logoutMember"]}


def test_empty_catalog():
    index = build_index("# Nothing here\n", now=FIXED_NOW)
    assert index["totalMethods"] == 0
    assert index["categories"] == {}
    assert index["searchKeywords"] == {}
    assert index["allMethods"] == []
    validate_index(index)


def test_format_timestamp_converts_to_utc():
    moment = datetime(2025, 1, 11, 12, 0, 0, 123456, tzinfo=timezone.utc)
    assert format_timestamp(moment) == "2025-01-11T12:00:00.123Z"


def test_validate_index_rejects_count_mismatch(index):
    index["totalMethods"] = 5
    with pytest.raises(ValueError, match="totalMethods"):
        validate_index(index)


def test_validate_index_rejects_unknown_quick_reference(index):
    index["quickReference"]["plans"] = ["getPlans"]
    with pytest.raises(ValueError, match="getPlans"):
        validate_index(index)


def test_validate_index_rejects_extra_fields(index):
    index["extra"] = True
    with pytest.raises(ValidationError):
        validate_index(index)


def test_missing_source(tmp_path):
    missing = tmp_path / "nope.md"
    with pytest.raises(SourceMissingError) as excinfo:
        build_index_from_file(missing)
    assert excinfo.value.payload["error"] == "source_missing"
    assert excinfo.value.payload["path"] == str(missing)
    assert isinstance(excinfo.value, FileNotFoundError)


def test_write_index_creates_parent_dirs(tmp_path, index):
    target = write_index(index, tmp_path / "out" / "index.json")
    assert json.loads(target.read_text(encoding="utf-8")) == index


def test_bundled_catalog_index():
    index = build_index_from_file(BUNDLED_DOCS_DIR / "complete.md", now=FIXED_NOW)
    validate_index(index)
    assert index["totalMethods"] == 28
    assert list(index["categories"]) == ["authentication", "members", "plans", "ui", "advanced"]
    assert len(index["categories"]["authentication"]) == 10
    assert index["quickReference"]["plans"] == ["purchasePlansWithCheckout"]
    assert "getMemberMetaData" not in index["quickReference"]["members"]
    assert index["searchKeywords"]["modal"] == ["openModal", "hideModal"]
