"""Console entrypoint: run an intake flow, or ask free-form questions with '?'."""

from __future__ import annotations

import argparse

from loan_advisor.advice import AdviceService
from loan_advisor.config import configure_logging, load_settings
from loan_advisor.intake_flow import IntakeSession, IntakeSettings


def run_chat(flow: str) -> None:
    settings = load_settings()
    configure_logging(settings)
    session = IntakeSession(flow, IntakeSettings.from_settings(settings))
    advice = AdviceService.from_settings(settings)

    print("--- Loan Advisor is Online (type 'exit' to quit, '?question' for advice) ---")
    print(f"Advisor: {session.welcome}")

    while True:
        user_input = input("You: ").strip()
        if user_input.lower() in {"exit", "quit"}:
            break
        if not user_input:
            print("Advisor: I didn't catch that. Could you rephrase?")
            continue

        if user_input.startswith("?"):
            result = advice.get_advice(user_input[1:].strip())
            print(f"Advisor: {result.text}")
            continue

        print(f"Advisor: {session.send(user_input)}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Conversational loan advisor")
    parser.add_argument(
        "--flow", choices=["loan_type", "eligibility"], default="loan_type",
        help="loan_type asks purpose/amount/collateral; eligibility asks for a full profile",
    )
    args = parser.parse_args()
    run_chat(args.flow)


if __name__ == "__main__":
    main()
