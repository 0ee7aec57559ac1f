"""
Conversational Intake
=====================
Turn-based question flows that collect borrower answers one message at a
time, then hand the completed answers to the classifier or the
recommendation engine.

Two flows share the same machinery:
  1. loan_type   : purpose → amount → collateral → loan-type suggestion
  2. eligibility : income → age → employment → city tier → credit score
                   → existing EMIs → scored loan suggestions

State is a ConversationState value; process_turn never mutates the state
it is given and returns exactly one reply per input.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Literal, NamedTuple, Optional, Tuple

from pydantic import BaseModel

from loan_advisor.config import AdvisorSettings
from loan_advisor.exceptions import (
    InvalidChoiceInput, InvalidInput, InvalidNumericInput,
)
from loan_advisor.loan_engine import format_recommendation_report, get_required_documents
from loan_advisor.loan_type import normalize_purpose, recommend_loan_type
from loan_advisor.models import (
    ConversationState, FlowName, LoanIntakeAnswer, UserProfile,
)

logger = logging.getLogger(__name__)


RESTART_COMMAND = "restart"
FOLLOW_STEPS_MESSAGE = 'Please follow the steps or type "restart" to start over.'
RESTARTED_PREFIX = "Loan flow restarted. "
RESTART_HINT = 'If you want to try again with different details, type "restart".'


# ─── Settings ───────────────────────────────────────────────────────────────

class IntakeSettings(BaseModel):
    """
    How strictly answers are matched.

    ``word`` mode compares whole tokens, so "has" does not count as "ha".
    ``substring`` mode keeps the legacy keyword containment check.
    """

    affirmative_keywords: Tuple[str, ...] = (
        "yes", "y", "yeah", "yep", "sure", "ha", "haan", "han", "hai", "ji", "houdu",
    )
    match_mode: Literal["word", "substring"] = "word"
    keyword_version: str = "2026.1"

    @classmethod
    def from_settings(cls, settings: AdvisorSettings) -> "IntakeSettings":
        if settings.collateral_match == "substring":
            return LEGACY_INTAKE_SETTINGS
        return cls()


LEGACY_INTAKE_SETTINGS = IntakeSettings(
    affirmative_keywords=("yes", "ha", "haan", "houdu"),
    match_mode="substring",
    keyword_version="2025.1",
)
DEFAULT_INTAKE_SETTINGS = IntakeSettings()


def is_affirmative(text: str, settings: IntakeSettings = DEFAULT_INTAKE_SETTINGS) -> bool:
    lowered = (text or "").lower()
    if settings.match_mode == "substring":
        return any(keyword in lowered for keyword in settings.affirmative_keywords)
    tokens = set(re.findall(r"[a-z]+", lowered))
    return any(keyword in tokens for keyword in settings.affirmative_keywords)


# ─── Answer Parsers ─────────────────────────────────────────────────────────

_SKIP_WORDS = {"skip", "no", "none", "dont", "don't", "not", "na", "unknown", "nil"}
_ZERO_WORDS = {"no", "none", "nil", "zero", "nothing", "nahi"}

EMPLOYMENT_KEYWORDS = [
    ("self-employed", ["self", "freelance", "freelancer", "gig"]),
    ("unemployed", ["unemployed", "jobless", "student", "homemaker", "none"]),
    ("business", ["business", "shop", "owner", "trader"]),
    ("salaried", ["salaried", "salary", "job", "employee", "service", "naukri"]),
]

CITY_TIER_KEYWORDS = {
    "metro": 1,
    "town": 3,
    "village": 3,
    "rural": 3,
}


# Up to ₹99,999 crore; anything longer is not a real answer
MAX_ANSWER_DIGITS = 12


def _digits_value(text: str) -> Optional[int]:
    digits = re.sub(r"[^0-9]", "", text or "")
    if not digits:
        return None
    if len(digits.lstrip("0")) > MAX_ANSWER_DIGITS:
        raise InvalidNumericInput(f"Number too large: {len(digits)} digits")
    return int(digits.lstrip("0") or "0")


def _words(text: str) -> List[str]:
    return re.findall(r"[a-z']+", (text or "").lower())


def parse_purpose(text: str, settings: IntakeSettings) -> str:
    purpose = (text or "").strip().lower()
    if not purpose:
        raise InvalidChoiceInput("Empty purpose")
    return purpose


def parse_amount(text: str, settings: IntakeSettings) -> int:
    value = _digits_value(text)
    if value is None or value <= 0:
        raise InvalidNumericInput(f"Not a positive amount: {text!r}")
    return value


def parse_collateral(text: str, settings: IntakeSettings) -> bool:
    return is_affirmative(text, settings)


def parse_income(text: str, settings: IntakeSettings) -> int:
    value = _digits_value(text)
    if value is None:
        if set(_words(text)) & _ZERO_WORDS:
            return 0
        raise InvalidNumericInput(f"Not an income: {text!r}")
    return value


def parse_age(text: str, settings: IntakeSettings) -> int:
    value = _digits_value(text)
    if value is None or not 18 <= value <= 100:
        raise InvalidNumericInput(f"Not a valid age: {text!r}")
    return value


def parse_employment(text: str, settings: IntakeSettings) -> str:
    words = _words(text)
    joined = " ".join(words)
    if "self employed" in joined or "self-employed" in (text or "").lower():
        return "self-employed"
    for employment_type, keywords in EMPLOYMENT_KEYWORDS:
        if any(keyword in words for keyword in keywords):
            return employment_type
    raise InvalidChoiceInput(f"Unknown employment type: {text!r}")


def parse_city_tier(text: str, settings: IntakeSettings) -> int:
    value = _digits_value(text)
    if value is not None:
        if value in (1, 2, 3):
            return value
        raise InvalidChoiceInput(f"City tier out of range: {value}")
    for word in _words(text):
        if word in CITY_TIER_KEYWORDS:
            return CITY_TIER_KEYWORDS[word]
    raise InvalidChoiceInput(f"Unknown city tier: {text!r}")


def parse_credit_score(text: str, settings: IntakeSettings) -> Optional[int]:
    value = _digits_value(text)
    if value is None:
        if set(_words(text)) & _SKIP_WORDS:
            return None
        raise InvalidNumericInput(f"Not a credit score: {text!r}")
    if not 300 <= value <= 900:
        raise InvalidNumericInput(f"Credit score out of range: {value}")
    return value


def parse_existing_emis(text: str, settings: IntakeSettings) -> int:
    return parse_income(text, settings)


# ─── Flow Definitions ───────────────────────────────────────────────────────

class IntakeQuestion(NamedTuple):
    field: str
    prompt: str
    parse: Callable[[str, IntakeSettings], Any]
    error_prompt: str


class IntakeFlowDefinition(NamedTuple):
    name: str
    welcome: str
    questions: List[IntakeQuestion]
    complete: Callable[[Dict[str, Any]], str]


PURPOSE_PROMPT = (
    "What is the purpose of your loan?\n"
    "Options: education, home_purchase, home_rent, business, vehicle, "
    "medical, debt_consolidation, other."
)

LOAN_TYPE_QUESTIONS = [
    IntakeQuestion(
        "purpose", PURPOSE_PROMPT, parse_purpose,
        "Please tell me the purpose of your loan.\n" + PURPOSE_PROMPT,
    ),
    IntakeQuestion(
        "amount",
        "Got it. Approximately how much loan amount do you need? (only numbers, in rupees)",
        parse_amount,
        "Please enter a valid number for the amount.",
    ),
    IntakeQuestion(
        "has_collateral",
        "Do you have any collateral (property/vehicle) to keep as security? (yes / no)",
        parse_collateral,
        "Please answer yes or no.",
    ),
]

ELIGIBILITY_QUESTIONS = [
    IntakeQuestion(
        "monthly_income",
        "What is your monthly income? (only numbers, in rupees)",
        parse_income,
        "Please enter a valid number for your monthly income.",
    ),
    IntakeQuestion(
        "age", "How old are you?", parse_age,
        "Please enter a valid age between 18 and 100.",
    ),
    IntakeQuestion(
        "employment_type",
        "What is your employment type? (salaried / self-employed / business / unemployed)",
        parse_employment,
        "Please choose one of: salaried, self-employed, business, unemployed.",
    ),
    IntakeQuestion(
        "city_tier",
        "Which city tier do you live in? (1 = metro, 2 = mid-size city, 3 = small town)",
        parse_city_tier,
        "Please enter 1, 2 or 3 for your city tier.",
    ),
    IntakeQuestion(
        "credit_score",
        'What is your credit (CIBIL) score? Type "skip" if you don\'t know it.',
        parse_credit_score,
        'Please enter a credit score between 300 and 900, or type "skip".',
    ),
    IntakeQuestion(
        "existing_emis",
        'How much do you currently pay in EMIs every month? (type "0" if none)',
        parse_existing_emis,
        "Please enter a valid number for your existing EMIs.",
    ),
]


def intake_answer(answers: Dict[str, Any]) -> LoanIntakeAnswer:
    return LoanIntakeAnswer(
        purpose=normalize_purpose(answers.get("purpose") or "other"),
        amount=answers["amount"],
        has_collateral=bool(answers["has_collateral"]),
    )


def _complete_loan_type(answers: Dict[str, Any]) -> str:
    answer = intake_answer(answers)
    recommendation = recommend_loan_type(answer.purpose, answer.amount, answer.has_collateral)
    logger.info(f"Loan type suggested: {recommendation.loan_type} for purpose {answer.purpose}")

    text = (
        "Based on your answers, the most suitable loan for you is:\n\n"
        f"👉 {recommendation.loan_type}\n\n"
    )
    if recommendation.subtype:
        text += f"Type: {recommendation.subtype}\n\n"
    text += "Documents you will need:\n"
    text += "\n".join(f"• {doc}" for doc in get_required_documents(recommendation.loan_type))
    text += (
        "\n\nThis is a rough suggestion. A lender will confirm documents, "
        "interest range and next steps.\n\n" + RESTART_HINT
    )
    return text


def _complete_eligibility(answers: Dict[str, Any]) -> str:
    profile = UserProfile.model_validate(answers)
    return format_recommendation_report(profile) + "\n\n" + RESTART_HINT


FLOWS: Dict[str, IntakeFlowDefinition] = {
    "loan_type": IntakeFlowDefinition(
        "loan_type",
        "Welcome! Let's understand which loan fits you.\n\n" + PURPOSE_PROMPT,
        LOAN_TYPE_QUESTIONS,
        _complete_loan_type,
    ),
    "eligibility": IntakeFlowDefinition(
        "eligibility",
        "Welcome! Let's check which loans you are eligible for.\n\n"
        + ELIGIBILITY_QUESTIONS[0].prompt,
        ELIGIBILITY_QUESTIONS,
        _complete_eligibility,
    ),
}


# ─── State Machine ──────────────────────────────────────────────────────────

def start_conversation(flow: FlowName = "loan_type") -> Tuple[ConversationState, str]:
    """Fresh state for a new session plus the opening message."""
    state = ConversationState(flow=flow)
    return state, FLOWS[flow].welcome


def is_complete(state: ConversationState) -> bool:
    return state.step >= len(FLOWS[state.flow].questions)


def current_prompt(state: ConversationState) -> str:
    questions = FLOWS[state.flow].questions
    if state.step >= len(questions):
        return FOLLOW_STEPS_MESSAGE
    return questions[state.step].prompt


def process_turn(state: ConversationState, raw_text: str,
                 settings: Optional[IntakeSettings] = None) -> Tuple[ConversationState, str]:
    """
    Apply one user message to the intake and return (new_state, reply).

    Rejected answers leave the step unchanged and re-prompt. Once complete,
    only "restart" moves the flow, and it resets every answer.
    """
    settings = settings or DEFAULT_INTAKE_SETTINGS
    flow = FLOWS[state.flow]
    new_state = state.model_copy(deep=True)
    text = (raw_text or "").strip()

    if is_complete(new_state):
        if text.lower() == RESTART_COMMAND:
            logger.info(f"Intake '{flow.name}' restarted")
            restarted = ConversationState(flow=state.flow)
            return restarted, RESTARTED_PREFIX + flow.questions[0].prompt
        return new_state, FOLLOW_STEPS_MESSAGE

    question = flow.questions[new_state.step]
    try:
        value = question.parse(text, settings)
    except InvalidInput as e:
        logger.debug(f"Rejected answer for {question.field}: {e}")
        return new_state, question.error_prompt

    new_state.answers[question.field] = value
    new_state.step += 1

    if is_complete(new_state):
        return new_state, flow.complete(new_state.answers)
    return new_state, flow.questions[new_state.step].prompt


class IntakeSession:
    """Mutable per-session wrapper for hosts that keep one object per chat."""

    def __init__(self, flow: FlowName = "loan_type",
                 settings: Optional[IntakeSettings] = None):
        self.settings = settings or DEFAULT_INTAKE_SETTINGS
        self.state, self.welcome = start_conversation(flow)

    @property
    def complete(self) -> bool:
        return is_complete(self.state)

    def send(self, text: str) -> str:
        self.state, reply = process_turn(self.state, text, self.settings)
        return reply

    def restart(self) -> str:
        self.state, self.welcome = start_conversation(self.state.flow)
        return self.welcome
