"""Rule tables driving category detection, keyword derivation and quick reference.

Each table is ordered data: the first matching category rule wins, while every
matching keyword rule fires.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

DEFAULT_CATEGORY = "general"

# (substring triggers, category) checked against the lowercased heading text
CATEGORY_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("authentication",), "authentication"),
    (("member",), "members"),
    (("plan", "subscription"), "plans"),
    (("ui", "component"), "ui"),
    (("advanced",), "advanced"),
]

# (substring trigger, keywords) checked against the lowercased method name
KEYWORD_RULES: List[Tuple[str, Tuple[str, ...]]] = [
    ("login", ("login", "signin", "authenticate")),
    ("signup", ("signup", "register", "create account")),
    ("logout", ("logout", "signout")),
    ("password", ("password",)),
    ("email", ("email",)),
    ("social", ("social", "oauth", "google", "facebook")),
    ("member", ("member", "user", "profile")),
    ("plan", ("plan", "subscription", "pricing")),
    ("payment", ("payment", "billing", "checkout")),
    ("update", ("update", "modify", "change")),
    ("delete", ("delete", "remove")),
    ("get", ("get", "fetch", "retrieve")),
    ("modal", ("modal", "ui", "dialog")),
]

QUICK_REFERENCE_GROUPS: Dict[str, List[str]] = {
    "authentication": [
        "loginMemberEmailPassword",
        "signupMemberEmailPassword",
        "loginMemberPasswordless",
        "signupMemberPasswordless",
        "logoutMember",
        "sendMemberResetPasswordEmail",
        "resetMemberPassword",
        "updateMemberPassword",
    ],
    "members": [
        "getCurrentMember",
        "updateMember",
        "getMemberMetaData",
        "updateMemberMetaData",
        "deleteMember",
        "getMemberJSON",
        "updateMemberJSON",
    ],
    "plans": [
        "purchasePlansWithCheckout",
        "openBillingPortal",
        "getActivePlans",
        "updatePlan",
        "cancelPlan",
        "getMemberPlans",
    ],
}


def classify_heading(text: str) -> Optional[str]:
    """Return the category for a heading, or None when no rule matches."""
    lowered = text.lower()
    for triggers, category in CATEGORY_RULES:
        if any(trigger in lowered for trigger in triggers):
            return category
    return None


def keywords_for(method_name: str) -> List[str]:
    """Return every keyword fired by a method name, in rule order."""
    lowered = method_name.lower()
    fired: List[str] = []
    for trigger, keywords in KEYWORD_RULES:
        if trigger in lowered:
            fired.extend(keywords)
    return fired
