"""
Advice for free-form loan questions.

A generative-AI provider answers when one is configured; otherwise, or when
it fails, a fixed keyword table answers instead. The table is consulted in
priority order with case-insensitive substring matching and the first topic
whose keyword appears in the message wins.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Tuple

from langchain_google_genai import ChatGoogleGenerativeAI

from loan_advisor.config import AdvisorSettings
from loan_advisor.exceptions import ProviderUnavailable
from loan_advisor.models import AdviceResult

logger = logging.getLogger(__name__)


ADVICE_TABLE_VERSION = "2026.1"

# (topic, keywords, answer), checked top-down
ADVICE_TABLE: List[Tuple[str, List[str], str]] = [
    (
        "greeting", ["hello", "hi", "hey"],
        "👋 Hello! I'm your AI Loan Advisor. How can I help you with loans today?",
    ),
    (
        "eligibility", ["eligibility", "eligible"],
        "To check loan eligibility, I need:\n1. Monthly Income\n2. Age\n"
        "3. Employment Type\n4. City Tier\n5. Existing EMIs\n\n"
        "Example: \"I'm 30, salaried, earning ₹75,000/month\"",
    ),
    (
        "emi", ["emi", "monthly payment"],
        "EMI = [P × R × (1+R)^N] / [(1+R)^N-1]\n\n"
        "Example: ₹5 lakhs at 11% for 5 years = ₹10,871/month",
    ),
    (
        "interest_rate", ["interest rate", "interest"],
        "Current rates:\n• Personal Loans: 10.5-15.5%\n• Home Loans: 8.5-9.5%\n"
        "• Car Loans: 9.0-12.0%",
    ),
    (
        "personal_loan", ["personal loan"],
        "Personal Loan:\n• Amount: ₹50K-₹25L\n• Tenure: 1-5 years\n"
        "• Rate: 10.5-15.5%\n• Processing: 1-3%",
    ),
    (
        "home_loan", ["home loan", "housing"],
        "Home Loan:\n• Amount: Up to ₹5Cr\n• Tenure: Up to 30 years\n"
        "• Rate: 8.5-9.5%\n• LTV: 80-90%",
    ),
    (
        "car_loan", ["car loan", "vehicle"],
        "Car Loan:\n• Amount: Up to 90% of car value\n• Tenure: 1-7 years\n"
        "• Rate: 9.0-12.0%\n• Quick approval available",
    ),
    (
        "documents", ["document", "paper"],
        "Required documents:\n1. PAN & Aadhaar\n2. Income proof\n"
        "3. Address proof\n4. Bank statements",
    ),
    (
        "thanks", ["thank"],
        "You're welcome! 😊 Let me know if you have more questions about loans.",
    ),
    (
        "goodbye", ["bye", "goodbye"],
        "Goodbye! 👋 Feel free to return if you need more loan advice.",
    ),
    (
        "test", ["test", "debug"],
        "🟢 TEST SUCCESSFUL!\n\nThe advice service is working correctly.",
    ),
]

DEFAULT_TOPIC = "default"
DEFAULT_ADVICE = (
    "I can help with:\n• Loan eligibility\n• EMI calculations\n• Interest rates\n"
    "• Document requirements\n\nTry: \"What loans can I get with ₹50k salary?\""
)

ADVICE_PROMPT = (
    "You are an AI loan advisor. Respond helpfully and concisely to this "
    "loan-related question: \"{message}\"\n\n"
    "Keep response under 150 words. Focus on practical loan advice."
)


# ─── Fallback Table ─────────────────────────────────────────────────────────

def match_advice_topic(message: str) -> str:
    """Topic key of the first table row whose keyword occurs in the message."""
    lowered = (message or "").lower().strip()
    for topic, keywords, _ in ADVICE_TABLE:
        if any(keyword in lowered for keyword in keywords):
            return topic
    return DEFAULT_TOPIC


def advice_for_topic(topic: str) -> str:
    for key, _, answer in ADVICE_TABLE:
        if key == topic:
            return answer
    return DEFAULT_ADVICE


def lookup_advice(message: str) -> str:
    """Canned answer for a free-form question."""
    return advice_for_topic(match_advice_topic(message))


# ─── Providers ──────────────────────────────────────────────────────────────

class AdviceProvider(ABC):
    """External capability that answers a free-form question with text."""

    name = "provider"

    @abstractmethod
    def advise(self, message: str) -> str:
        """Return advice text, or raise ProviderUnavailable."""


class GeminiAdviceProvider(AdviceProvider):
    """Google Gemini through langchain-google-genai."""

    name = "gemini"

    def __init__(self, api_key: Optional[str], model: str = "gemini-1.5-flash",
                 temperature: float = 0.7, max_output_tokens: int = 500):
        if not api_key:
            raise ProviderUnavailable("No Gemini API key configured")
        self.model = model
        self._llm = ChatGoogleGenerativeAI(
            model=model,
            google_api_key=api_key,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )

    @classmethod
    def from_settings(cls, settings: AdvisorSettings) -> "GeminiAdviceProvider":
        return cls(
            settings.google_api_key,
            model=settings.advice_model,
            temperature=settings.advice_temperature,
            max_output_tokens=settings.advice_max_tokens,
        )

    def advise(self, message: str) -> str:
        try:
            reply = self._llm.invoke(ADVICE_PROMPT.format(message=message))
        except Exception as exc:  # pylint: disable=broad-except
            raise ProviderUnavailable(f"Gemini request failed: {exc}") from exc
        content = getattr(reply, "content", str(reply))
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        if not content or not content.strip():
            raise ProviderUnavailable("Gemini returned an empty response")
        return content.strip()


# ─── Service ────────────────────────────────────────────────────────────────

class AdviceService:
    """
    Answers free-form questions, preferring the provider.

    The provider is injected; with none (or in mock mode) every answer comes
    from the fallback table. Each AdviceResult records whether fallback was
    used and why.
    """

    def __init__(self, provider: Optional[AdviceProvider] = None,
                 mock_mode: bool = False,
                 fallback: Callable[[str], str] = lookup_advice):
        self.provider = provider
        self.mock_mode = mock_mode
        self.fallback = fallback

    @classmethod
    def from_settings(cls, settings: AdvisorSettings) -> "AdviceService":
        provider = None
        if not settings.mock_mode:
            try:
                provider = GeminiAdviceProvider.from_settings(settings)
            except ProviderUnavailable as e:
                logger.warning(f"Advice provider not configured, using fallback table: {e}")
        return cls(provider=provider, mock_mode=settings.mock_mode)

    @property
    def provider_enabled(self) -> bool:
        return self.provider is not None and not self.mock_mode

    def get_advice(self, message: str) -> AdviceResult:
        error = None
        if self.provider_enabled:
            try:
                text = self.provider.advise(message)
                return AdviceResult(text=text, source="provider", fallback_used=False)
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning(f"Advice provider '{self.provider.name}' failed, "
                               f"falling back to table: {exc}")
                error = str(exc)
        else:
            error = "mock mode" if self.mock_mode else "no provider configured"

        topic = match_advice_topic(message)
        text = self.fallback(message)
        if topic == "test":
            text += (f"\nMock mode: {'ON' if self.mock_mode else 'OFF'}"
                     f"\nProvider: {'AVAILABLE' if self.provider_enabled else 'NOT AVAILABLE'}")
        return AdviceResult(text=text, source="fallback", fallback_used=True,
                            topic=topic, error=error)

    def health_check(self) -> Dict:
        """Check the fallback table and, when enabled, a live provider call."""
        test_response = self.fallback("test")
        fallback_working = bool(test_response)

        provider_available = False
        if self.provider_enabled:
            try:
                provider_available = bool(self.provider.advise("Say 'working' if you can read this."))
            except Exception as exc:  # pylint: disable=broad-except
                logger.info(f"Provider health check failed: {exc}")

        return {
            "status": "PASS" if fallback_working else "FAIL",
            "fallback_working": fallback_working,
            "provider_available": provider_available,
            "test_response": test_response,
        }
