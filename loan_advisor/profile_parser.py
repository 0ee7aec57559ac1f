"""Pull profile numbers out of a free-form chat message."""

import re
from typing import Dict, Optional


def _numbers(message: str):
    return [int(n) for n in re.findall(r"\d+", message)]


def _first_between(numbers, low: int, high: int) -> Optional[int]:
    return next((n for n in numbers if low < n < high), None)


def extract_profile_from_message(message: str) -> Optional[Dict[str, int]]:
    """
    Partial profile from phrases like "I'm 30, earning 75000 salary".

    Income is read only when the message talks about income, salary or
    earnings; age when it mentions age or "old"; existing EMIs when it
    mentions EMI or an existing loan. Returns None when nothing was found.
    """
    lowered = (message or "").lower()
    numbers = _numbers(lowered.replace(",", ""))
    profile = {}

    if any(word in lowered for word in ("income", "salary", "earn")):
        income = _first_between(numbers, 10000, 1000000)
        if income:
            profile["monthly_income"] = income

    if "age" in lowered or "old" in lowered:
        age = _first_between(numbers, 18, 70)
        if age:
            profile["age"] = age

    if "emi" in lowered or "existing loan" in lowered:
        emi = _first_between(numbers, 1000, 100000)
        if emi:
            profile["existing_emis"] = emi

    return profile or None
