"""
Data model for the loan advisor.

Profiles and intake answers are validated pydantic models; loan suggestions
derive their EMI on every access so it always reflects the current amount,
rate and tenure.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from loan_advisor.emi_calculator import calculate_emi


EmploymentType = Literal["salaried", "self-employed", "business", "unemployed"]
EligibilityTier = Literal["high", "medium", "low"]
LoanPurpose = Literal[
    "education", "home_purchase", "home_rent", "business",
    "vehicle", "medical", "debt_consolidation", "other",
]
FlowName = Literal["loan_type", "eligibility"]

EMPLOYMENT_TYPES = ("salaried", "self-employed", "business", "unemployed")
LOAN_PURPOSES = (
    "education", "home_purchase", "home_rent", "business",
    "vehicle", "medical", "debt_consolidation", "other",
)

# Fields a profile needs before it can be scored
REQUIRED_PROFILE_FIELDS = ("monthly_income", "age", "employment_type", "city_tier")

INTAKE_FLOW_VERSION = "2"


class UserProfile(BaseModel):
    """Borrower facts collected over the conversation or supplied at once."""

    model_config = ConfigDict(frozen=True)

    monthly_income: float = Field(..., ge=0, description="Monthly income in INR")
    age: int = Field(..., ge=0, description="Age in years")
    employment_type: EmploymentType
    city_tier: Literal[1, 2, 3] = Field(..., description="1 = largest metros")
    credit_score: Optional[int] = Field(None, ge=300, le=900, description="CIBIL score")
    existing_emis: float = Field(0, ge=0, description="Sum of existing monthly EMIs")


class LoanIntakeAnswer(BaseModel):
    """Answers gathered by the short loan-type intake."""

    model_config = ConfigDict(frozen=True)

    purpose: LoanPurpose
    amount: float = Field(..., gt=0)
    has_collateral: bool


class LoanSuggestion(BaseModel):
    """One candidate loan product. ``emi`` is derived, never stored."""

    model_config = ConfigDict(validate_assignment=True)

    type: str
    amount: float = Field(..., gt=0)
    tenure_months: int = Field(..., gt=0)
    interest_rate: float = Field(..., ge=0, description="Annual rate in percent")
    eligibility_tier: EligibilityTier

    @computed_field
    @property
    def emi(self) -> int:
        return calculate_emi(self.amount, self.interest_rate, self.tenure_months)


class LoanTypeRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    loan_type: str
    subtype: Optional[str] = None


class ConversationState(BaseModel):
    """
    Per-session intake state.

    ``step`` indexes the current question of the flow; a step equal to the
    number of questions means the flow is complete. ``answers`` holds the
    partially built intake answer or profile.
    """

    flow: FlowName = "loan_type"
    version: str = INTAKE_FLOW_VERSION
    step: int = Field(0, ge=0)
    answers: Dict[str, Any] = Field(default_factory=dict)


class AdviceResult(BaseModel):
    """Advice text plus where it came from, so fallback use is observable."""

    model_config = ConfigDict(frozen=True)

    text: str
    source: Literal["provider", "fallback"]
    fallback_used: bool
    topic: Optional[str] = None
    error: Optional[str] = None


def is_profile_complete(answers: Dict[str, Any]) -> bool:
    """True when every non-optional profile field has been set."""
    return all(answers.get(field) is not None for field in REQUIRED_PROFILE_FIELDS)
