"""
EMI Calculator
==============
Equated Monthly Installment maths shared by the recommendation engine,
the loan suggestion model and the presentation hosts:
  - EMI for a principal, annual rate and tenure
  - Total interest over the tenure
  - Month-by-month amortization schedule
"""

import math
from typing import Dict, List

import pandas as pd

from loan_advisor.exceptions import InvalidArgument


MONTHS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _check_loan_terms(principal: float, annual_rate: float, tenure_months: int) -> None:
    if principal <= 0:
        raise InvalidArgument(f"principal must be positive, got {principal}")
    if tenure_months <= 0:
        raise InvalidArgument(f"tenure_months must be positive, got {tenure_months}")
    if annual_rate < 0:
        raise InvalidArgument(f"annual_rate cannot be negative, got {annual_rate}")


# ─── EMI ────────────────────────────────────────────────────────────────────

def calculate_emi(principal: float, annual_rate: float,
                  tenure_months: int) -> int:
    """
    Standard EMI formula: EMI = P × r × (1+r)^n / ((1+r)^n - 1)
    with r = annual_rate / 12 / 100. A zero rate degenerates to P / n.
    Returns the monthly EMI rounded to the nearest rupee (halves round up).
    """
    _check_loan_terms(principal, annual_rate, tenure_months)
    if annual_rate == 0:
        return _round_half_up(principal / tenure_months)

    r = annual_rate / 12 / 100  # monthly rate
    n = tenure_months
    growth = math.pow(1 + r, n)
    emi = principal * r * growth / (growth - 1)
    return _round_half_up(emi)


def calculate_total_interest(principal: float, annual_rate: float,
                             tenure_months: int) -> int:
    """Total interest payable over the loan tenure."""
    emi = calculate_emi(principal, annual_rate, tenure_months)
    return _round_half_up(emi * tenure_months - principal)


# ─── Repayment Schedule ─────────────────────────────────────────────────────

def generate_repayment_schedule(
    principal: float, annual_rate: float,
    tenure_months: int, start_month: str = "Jan 2026"
) -> List[Dict]:
    """
    Month-by-month split of each EMI into principal and interest.
    The final installment absorbs the rounding residue so the balance
    closes at zero.
    """
    emi = calculate_emi(principal, annual_rate, tenure_months)
    r = annual_rate / (12 * 100)
    balance = float(principal)

    try:
        parts = start_month.split()
        start_month_idx = MONTHS.index(parts[0])
        start_year = int(parts[1])
    except (ValueError, IndexError):
        raise InvalidArgument(f"start_month must look like 'Jan 2026', got {start_month!r}")

    schedule = []
    for i in range(tenure_months):
        interest_component = balance * r
        principal_component = emi - interest_component
        installment = emi
        if i == tenure_months - 1:
            principal_component = balance
            installment = balance + interest_component
        balance = max(balance - principal_component, 0.0)

        month_idx = (start_month_idx + i) % 12
        year = start_year + (start_month_idx + i) // 12

        schedule.append({
            "month": f"{MONTHS[month_idx]} {year}",
            "emi": round(installment, 2),
            "principal": round(principal_component, 2),
            "interest": round(interest_component, 2),
            "balance": round(balance, 2),
        })

    return schedule


def repayment_schedule_frame(principal: float, annual_rate: float,
                             tenure_months: int,
                             start_month: str = "Jan 2026") -> pd.DataFrame:
    """Repayment schedule as a DataFrame, ready for tabular display."""
    schedule = generate_repayment_schedule(principal, annual_rate, tenure_months, start_month)
    return pd.DataFrame(schedule, columns=["month", "emi", "principal", "interest", "balance"])
