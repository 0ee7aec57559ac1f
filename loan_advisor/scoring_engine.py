"""
Scoring Engine for the Loan Advisor
Computes a 0–100 eligibility score from five weighted buckets:
income, age, employment, city tier and credit score.
"""

from typing import Any, Dict, Mapping, Union

import numpy as np
from pydantic import ValidationError

from loan_advisor.exceptions import InvalidArgument
from loan_advisor.models import REQUIRED_PROFILE_FIELDS, UserProfile, is_profile_complete


MAX_SCORE = 100
MIN_SCORE = 0

# (minimum monthly income, points), checked top-down
INCOME_BANDS = [
    (100000, 40),
    (50000, 30),
    (25000, 20),
]
INCOME_FLOOR_POINTS = 10

# (min age, max age, points), inclusive; first match wins
AGE_BANDS = [
    (28, 45, 25),
    (25, 50, 20),
    (22, 60, 15),
]
AGE_FLOOR_POINTS = 5

EMPLOYMENT_POINTS = {
    "salaried": 20,
    "business": 15,
    "self-employed": 10,
    "unemployed": 5,
}

CREDIT_BANDS = [
    (750, 5),
    (650, 3),
]

ProfileLike = Union[UserProfile, Mapping[str, Any]]


def coerce_profile(profile: ProfileLike) -> UserProfile:
    """Accept a UserProfile or a plain mapping; reject incomplete input."""
    if isinstance(profile, UserProfile):
        return profile
    if not isinstance(profile, Mapping):
        raise InvalidArgument(f"Expected a profile, got {type(profile).__name__}")
    if not is_profile_complete(profile):
        missing = [f for f in REQUIRED_PROFILE_FIELDS if profile.get(f) is None]
        raise InvalidArgument(f"Profile is incomplete, missing: {', '.join(missing)}")
    try:
        return UserProfile.model_validate(dict(profile))
    except ValidationError as e:
        raise InvalidArgument(f"Invalid profile: {e}") from e


# ─── Component Scores ───────────────────────────────────────────────────────

def income_points(monthly_income: float) -> int:
    for threshold, points in INCOME_BANDS:
        if monthly_income >= threshold:
            return points
    return INCOME_FLOOR_POINTS


def age_points(age: int) -> int:
    for low, high, points in AGE_BANDS:
        if low <= age <= high:
            return points
    return AGE_FLOOR_POINTS


def employment_points(employment_type: str) -> int:
    return EMPLOYMENT_POINTS[employment_type]


def city_tier_points(city_tier: int) -> float:
    # Tier 1: 10, Tier 2: 6.67, Tier 3: 3.33
    return (4 - city_tier) * 10 / 3


def credit_points(credit_score) -> int:
    if credit_score is None:
        return 0
    for threshold, points in CREDIT_BANDS:
        if credit_score >= threshold:
            return points
    return 0


# ─── Final Score ────────────────────────────────────────────────────────────

def get_score_breakdown(profile: ProfileLike) -> Dict[str, float]:
    """Points contributed by each bucket, rounded for display."""
    p = coerce_profile(profile)
    return {
        "income": income_points(p.monthly_income),
        "age": age_points(p.age),
        "employment": employment_points(p.employment_type),
        "city_tier": round(city_tier_points(p.city_tier), 2),
        "credit_score": credit_points(p.credit_score),
    }


def calculate_eligibility_score(profile: ProfileLike) -> float:
    """
    Sum the bucket points and cap the total at 100.

    Deterministic: the same profile always yields the same score.
    """
    p = coerce_profile(profile)
    raw = (
        income_points(p.monthly_income)
        + age_points(p.age)
        + employment_points(p.employment_type)
        + city_tier_points(p.city_tier)
        + credit_points(p.credit_score)
    )
    return float(np.clip(raw, MIN_SCORE, MAX_SCORE))
