"""
Loan Recommendation Engine for the Loan Advisor
===============================================
Maps eligibility score + income → suggested loan products with:
  - Affordable loan amount (income multiplier by score band)
  - Interest rate, tenure and EMI per product
  - Document checklists
  - Lender shortlists
  - Indian-style currency formatting (L / Cr)

Every function here is pure; profiles are passed in by value.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional

from loan_advisor.emi_calculator import calculate_emi
from loan_advisor.models import LoanSuggestion
from loan_advisor.scoring_engine import (
    ProfileLike, calculate_eligibility_score, coerce_profile,
)

logger = logging.getLogger(__name__)


# ─── Score Bands ────────────────────────────────────────────────────────────

HIGH_SCORE = 70
MEDIUM_SCORE = 50

# (minimum score, × monthly income)
LOAN_MULTIPLIERS = [
    (HIGH_SCORE, 24),
    (MEDIUM_SCORE, 18),
]
BASE_LOAN_MULTIPLIER = 12


# ─── Loan Product Catalog ───────────────────────────────────────────────────

# Emitted in this order when the score clears min_score
LOAN_PRODUCTS = [
    {
        "type": "Personal Loan",
        "min_score": MEDIUM_SCORE,
        "income_share": 0.5,          # × affordable amount
        "max_amount": 2000000,
        "tenure_months": 60,
        "rates": {"high": 10.5, "medium": 14.5},
    },
    {
        "type": "Car Loan",
        "min_score": MEDIUM_SCORE,
        "income_share": 0.7,
        "max_amount": 5000000,
        "tenure_months": 84,
        "rates": {"high": 8.7, "medium": 11.5},
    },
    {
        "type": "Home Loan",
        "min_score": HIGH_SCORE,
        "income_share": 3,
        "max_amount": 20000000,
        "tenure_months": 240,
        "rates": {"high": 8.4},
    },
]

FALLBACK_LOAN_TYPE = "Personal Loan"


# ─── Document Checklists ────────────────────────────────────────────────────

COMMON_DOCUMENTS = [
    "Aadhaar Card",
    "PAN Card",
    "Passport-size photographs",
    "Address proof (Aadhaar, utility bill, passport)",
]

LOAN_DOCUMENTS = {
    "Personal Loan": [
        "Salary slips (last 3 months)",
        "Bank statements (last 6 months)",
        "Employment certificate",
    ],
    "Home Loan": [
        "Property documents",
        "Sale agreement",
        "NOC from builder",
        "ITR (last 2-3 years)",
        "Salary slips (last 6 months)",
    ],
    "Car Loan": [
        "Car quotation",
        "Driver's license",
        "Salary slips (last 3 months)",
        "Bank statements (last 3 months)",
    ],
    "Education Loan": [
        "Admission letter",
        "Fee structure",
        "Academic records",
        "Co-borrower documents",
    ],
    "Two-Wheeler Loan": [
        "Vehicle quotation",
        "Driver's license",
        "Bank statements (last 3 months)",
    ],
    "Business Loan": [
        "Business registration / Udyam certificate",
        "GST returns (last 12 months)",
        "ITR (last 2 years)",
        "Bank statements (last 12 months)",
    ],
    "MUDRA Loan": [
        "Business plan / quotation",
        "Proof of business address",
        "Bank statements (last 6 months)",
    ],
    "Loan Against Property": [
        "Property title documents",
        "Approved building plan",
        "ITR (last 2-3 years)",
        "Bank statements (last 6 months)",
    ],
    "Gold Loan": [
        "Gold ornaments for pledging",
    ],
}


# ─── Lender Shortlists ──────────────────────────────────────────────────────

BANK_RECOMMENDATIONS = {
    "Personal Loan": [
        {
            "name": "HDFC Bank",
            "interest_rate": "10.5% - 21%",
            "processing_fee": "2%",
            "features": ["Instant approval", "No collateral", "Flexible tenure"],
        },
        {
            "name": "ICICI Bank",
            "interest_rate": "10.75% - 19%",
            "processing_fee": "2.25%",
            "features": ["Quick disbursal", "Online process",
                         "Low interest for high credit score"],
        },
        {
            "name": "SBI",
            "interest_rate": "11.15% - 16%",
            "processing_fee": "1.5%",
            "features": ["Lowest processing fee", "Government bank",
                         "Transparent charges"],
        },
    ],
    "Home Loan": [
        {
            "name": "SBI",
            "interest_rate": "8.4% - 9.65%",
            "processing_fee": "0.4%",
            "features": ["Lowest interest", "Long tenure (30 years)", "Balance transfer"],
        },
        {
            "name": "HDFC",
            "interest_rate": "8.45% - 9.35%",
            "processing_fee": "0.5%",
            "features": ["Quick processing", "Online application", "Good customer service"],
        },
    ],
    "Car Loan": [
        {
            "name": "SBI",
            "interest_rate": "8.75% - 9.8%",
            "processing_fee": "0.25%",
            "features": ["Up to 90% on-road funding", "Tenure up to 7 years"],
        },
        {
            "name": "HDFC Bank",
            "interest_rate": "8.8% - 10%",
            "processing_fee": "0.5%",
            "features": ["Pre-approved offers", "Dealer tie-ups"],
        },
    ],
    "Education Loan": [
        {
            "name": "SBI Scholar Loan",
            "interest_rate": "8.05% - 10.3%",
            "processing_fee": "Nil",
            "features": ["Moratorium during course + 1 year",
                         "No collateral up to ₹7.5 L"],
        },
        {
            "name": "Bank of Baroda",
            "interest_rate": "8.4% - 10.5%",
            "processing_fee": "Nil",
            "features": ["Vidya Lakshmi portal", "Interest concession for girls"],
        },
    ],
}


# ─── Affordability ──────────────────────────────────────────────────────────

def get_loan_multiplier(score: float) -> int:
    """Months of income a borrower with this score can borrow."""
    for min_score, multiplier in LOAN_MULTIPLIERS:
        if score >= min_score:
            return multiplier
    return BASE_LOAN_MULTIPLIER


def get_eligibility_tier(score: float) -> str:
    return "high" if score >= HIGH_SCORE else "medium"


def max_loan_amount(profile: ProfileLike) -> float:
    """Affordable loan amount: monthly income × score-band multiplier."""
    p = coerce_profile(profile)
    score = calculate_eligibility_score(p)
    return p.monthly_income * get_loan_multiplier(score)


# ─── Suggestions ────────────────────────────────────────────────────────────

def get_loan_suggestions(profile: ProfileLike) -> List[LoanSuggestion]:
    """
    Suggested products for a complete profile, in catalog order
    (Personal, Car, Home). Empty when the score is below 50.
    """
    p = coerce_profile(profile)
    score = calculate_eligibility_score(p)
    max_amount = p.monthly_income * get_loan_multiplier(score)
    tier = get_eligibility_tier(score)

    suggestions = []
    for product in LOAN_PRODUCTS:
        if score < product["min_score"]:
            continue
        amount = min(max_amount * product["income_share"], product["max_amount"])
        if amount <= 0:
            logger.debug(f"Skipping {product['type']}: no affordable amount")
            continue
        suggestions.append(LoanSuggestion(
            type=product["type"],
            amount=amount,
            tenure_months=product["tenure_months"],
            interest_rate=product["rates"][tier],
            eligibility_tier=tier,
        ))

    return suggestions


# ─── Lookups ────────────────────────────────────────────────────────────────

def get_required_documents(loan_type: str) -> List[str]:
    """Common KYC documents followed by the loan-specific ones."""
    return [*COMMON_DOCUMENTS, *LOAN_DOCUMENTS.get(loan_type, [])]


def get_bank_recommendations(loan_type: str) -> List[Dict]:
    """Lender shortlist; unknown loan types get the personal loan list."""
    banks = BANK_RECOMMENDATIONS.get(loan_type, BANK_RECOMMENDATIONS[FALLBACK_LOAN_TYPE])
    return [{**bank, "features": list(bank["features"])} for bank in banks]


# ─── Currency Formatting ────────────────────────────────────────────────────

def _to_fixed(value: float, places: str) -> str:
    # Ties round away from zero on the exact binary value
    return format(Decimal(value).quantize(Decimal(places), rounding=ROUND_HALF_UP), "f")


def _group_indian(amount: float) -> str:
    """en-IN grouping: 12,34,567.891 (at most three fraction digits)."""
    text = _to_fixed(amount, "0.001")
    sign = ""
    if text.startswith("-"):
        sign, text = "-", text[1:]
    whole, _, frac = text.partition(".")
    frac = frac.rstrip("0")

    head, tail = whole[:-3], whole[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    grouped = ",".join(groups + [tail])

    if sign and grouped.strip("0,") == "" and not frac:
        sign = ""
    return f"{sign}{grouped}.{frac}" if frac else f"{sign}{grouped}"


def format_currency(amount: float) -> str:
    """₹1.25 Cr, ₹2.50 L or ₹5,000 depending on magnitude."""
    if amount >= 10000000:
        return f"₹{_to_fixed(amount / 10000000, '0.01')} Cr"
    if amount >= 100000:
        return f"₹{_to_fixed(amount / 100000, '0.01')} L"
    return f"₹{_group_indian(amount)}"


# ─── Report ─────────────────────────────────────────────────────────────────

def format_suggestion(suggestion: LoanSuggestion) -> str:
    return (
        f"{suggestion.type}: {format_currency(suggestion.amount)} for "
        f"{suggestion.tenure_months} months @ {suggestion.interest_rate}% "
        f"→ EMI {format_currency(suggestion.emi)}/month "
        f"({suggestion.eligibility_tier} eligibility)"
    )


def format_recommendation_report(profile: ProfileLike,
                                 suggestions: Optional[List[LoanSuggestion]] = None) -> str:
    """Multi-line summary of score, affordability, suggestions, documents and lenders."""
    p = coerce_profile(profile)
    score = calculate_eligibility_score(p)
    if suggestions is None:
        suggestions = get_loan_suggestions(p)

    lines = [
        f"📊 Eligibility score: {score:.1f}/100",
        f"💰 Affordable loan amount: {format_currency(max_loan_amount(p))}",
        "",
    ]

    if not suggestions:
        lines.append(
            "Based on your profile, you are not eligible for our standard loan "
            "products right now. A higher income, a steady job or a credit score "
            "above 650 would improve your chances."
        )
        return "\n".join(lines)

    lines.append("Suggested loans:")
    for i, suggestion in enumerate(suggestions, 1):
        lines.append(f"{i}. {format_suggestion(suggestion)}")

    best = suggestions[0].type
    lines.append("")
    lines.append(f"📄 Documents for {best}:")
    lines.extend(f"• {doc}" for doc in get_required_documents(best))
    lines.append("")
    lines.append(f"🏦 Lenders for {best}:")
    for bank in get_bank_recommendations(best):
        lines.append(f"• {bank['name']}: {bank['interest_rate']}, "
                     f"processing fee {bank['processing_fee']}")
    return "\n".join(lines)
