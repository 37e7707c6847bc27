from msdocs.catalog import MethodDescriptor
from msdocs.keywords import add_method_keywords, build_keyword_index
from msdocs.rules import CATEGORY_RULES, KEYWORD_RULES, classify_heading, keywords_for


def methods(*names):
    return [MethodDescriptor(name=name) for name in names]


# ============================================================================
# Rule tables
# ============================================================================

class TestRules:
    def test_rule_tables_are_plain_data(self):
        assert all(isinstance(category, str) for _, category in CATEGORY_RULES)
        assert [trigger for trigger, _ in KEYWORD_RULES][:3] == ["login", "signup", "logout"]

    def test_classify_heading(self):
        assert classify_heading("Authentication") == "authentication"
        assert classify_heading("Member Management") == "members"
        assert classify_heading("Plans & Subscriptions") == "plans"
        assert classify_heading("UI Components") == "ui"
        assert classify_heading("Advanced") == "advanced"
        assert classify_heading("Getting Started") is None

    def test_classify_heading_priority(self):
        assert classify_heading("Member Authentication") == "authentication"
        assert classify_heading("Subscription Components") == "plans"

    def test_keywords_for_fires_every_matching_rule(self):
        assert keywords_for("deleteMember") == ["member", "user", "profile", "delete", "remove"]
        assert keywords_for("onAuthChange") == []


# ============================================================================
# Keyword index
# ============================================================================

def test_method_lands_under_every_fired_keyword():
    index = build_keyword_index(methods("getMemberPlans"))
    assert list(index) == [
        "member", "user", "profile",
        "plan", "subscription", "pricing",
        "get", "fetch", "retrieve",
    ]
    assert all(names == ["getMemberPlans"] for names in index.values())


def test_insertion_order_and_no_duplicates():
    index = build_keyword_index(methods(
        "loginMemberEmailPassword",
        "loginWithProvider",
        "loginMemberEmailPassword",
    ))
    assert index["login"] == ["loginMemberEmailPassword", "loginWithProvider"]
    assert index["password"] == ["loginMemberEmailPassword"]
    for names in index.values():
        assert len(names) == len(set(names))


def test_building_twice_is_identical():
    corpus = methods("updateMember", "openModal", "sendMemberResetPasswordEmail", "getPlans")
    first = build_keyword_index(corpus)
    second = build_keyword_index(corpus)
    assert first == second
    assert list(first) == list(second)


def test_builds_do_not_share_state():
    first = build_keyword_index(methods("updateMember"))
    first["update"].append("tampered")
    second = build_keyword_index(methods("updateMember"))
    assert second["update"] == ["updateMember"]


def test_add_method_keywords_returns_new_index():
    empty = {}
    updated = add_method_keywords(empty, "openModal")
    assert empty == {}
    assert updated == {"modal": ["openModal"], "ui": ["openModal"], "dialog": ["openModal"]}


def test_unmatched_names_produce_empty_index():
    assert build_keyword_index(methods("onAuthChange")) == {}
