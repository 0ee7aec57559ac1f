"""
Loan-Type Classifier
====================
Picks the single best-fit loan type for the short intake
(purpose, amount, collateral). The decision lives entirely in
LOAN_TYPE_RULES so it can be reviewed and versioned as data.
"""

import re
from typing import Dict, List, Optional, Tuple

from loan_advisor.exceptions import InvalidArgument
from loan_advisor.models import LOAN_PURPOSES, LoanTypeRecommendation


LOAN_TYPE_RULES_VERSION = "2026.1"

# Row: (max_amount inclusive or None for any, collateral True/False or None for any,
#       loan_type, subtype). First matching row wins; every purpose ends with
#       a catch-all row so classification is total.
Rule = Tuple[Optional[float], Optional[bool], str, Optional[str]]

LOAN_TYPE_RULES: Dict[str, List[Rule]] = {
    "education": [
        (750000, None, "Education Loan", "Unsecured education loan (no collateral up to ₹7.5 L)"),
        (None, True, "Education Loan", "Secured education loan against collateral"),
        (None, None, "Education Loan", "Education loan with co-borrower guarantee"),
    ],
    "home_purchase": [
        (3500000, None, "Home Loan", "Affordable housing loan (PMAY eligible)"),
        (None, None, "Home Loan", "Regular home loan"),
    ],
    "home_rent": [
        (None, True, "Loan Against Property", "Secured loan for rent deposit"),
        (None, None, "Personal Loan", "Rent deposit / relocation loan"),
    ],
    "business": [
        (50000, None, "MUDRA Loan", "Shishu (up to ₹50,000)"),
        (500000, None, "MUDRA Loan", "Kishore (₹50,000 to ₹5 L)"),
        (1000000, None, "MUDRA Loan", "Tarun (₹5 L to ₹10 L)"),
        (None, True, "Business Loan", "Secured business loan / loan against property"),
        (None, None, "Business Loan", "Unsecured business loan (CGTMSE cover)"),
    ],
    "vehicle": [
        (200000, None, "Two-Wheeler Loan", None),
        (None, None, "Car Loan", "New or used four-wheeler loan"),
    ],
    "medical": [
        (None, True, "Gold Loan", "Quick secured loan for medical expenses"),
        (None, None, "Personal Loan", "Medical emergency loan"),
    ],
    "debt_consolidation": [
        (None, True, "Loan Against Property", "Debt consolidation at secured rates"),
        (None, None, "Personal Loan", "Debt consolidation / balance transfer"),
    ],
    "other": [
        (None, True, "Loan Against Property", None),
        (None, None, "Personal Loan", None),
    ],
}

# Free-text words that identify a purpose, checked in this order
PURPOSE_ALIASES = [
    ("home_rent", ["rent", "deposit", "lease"]),
    ("home_purchase", ["home", "house", "flat", "apartment", "property", "griha"]),
    ("education", ["education", "study", "studies", "college", "university",
                   "course", "school", "fees"]),
    ("business", ["business", "shop", "startup", "vyapar", "dukaan"]),
    ("vehicle", ["vehicle", "car", "bike", "scooter", "two wheeler", "gaadi"]),
    ("medical", ["medical", "hospital", "surgery", "treatment", "health"]),
    ("debt_consolidation", ["debt", "debts", "consolidation", "consolidate",
                            "credit card", "repay"]),
]


def normalize_purpose(text: str) -> str:
    """
    Map free-text purpose onto one of LOAN_PURPOSES.

    Exact enum values (with spaces or hyphens in place of underscores) are
    accepted as-is; otherwise the first alias found in the text decides.
    Aliases match whole words only. Anything unrecognised is "other".
    """
    cleaned = re.sub(r"[\s\-]+", "_", (text or "").strip().lower())
    if cleaned in LOAN_PURPOSES:
        return cleaned
    spaced = cleaned.replace("_", " ")
    for purpose, aliases in PURPOSE_ALIASES:
        if any(re.search(rf"\b{re.escape(alias)}\b", spaced) for alias in aliases):
            return purpose
    return "other"


def _rule_matches(rule: Rule, amount: float, has_collateral: bool) -> bool:
    max_amount, collateral, _, _ = rule
    if max_amount is not None and amount > max_amount:
        return False
    if collateral is not None and collateral != has_collateral:
        return False
    return True


def recommend_loan_type(purpose: str, amount: float,
                        has_collateral: bool) -> LoanTypeRecommendation:
    """Best-fit loan type for the intake answers. Never returns "no recommendation"."""
    if amount is None or amount <= 0:
        raise InvalidArgument(f"amount must be positive, got {amount}")
    key = normalize_purpose(purpose)
    for rule in LOAN_TYPE_RULES[key]:
        if _rule_matches(rule, amount, bool(has_collateral)):
            return LoanTypeRecommendation(loan_type=rule[2], subtype=rule[3])
    # Unreachable while every purpose keeps its catch-all row
    raise InvalidArgument(f"No loan type rule covers purpose {key!r}")
