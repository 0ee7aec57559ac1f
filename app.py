"""
Loan Advisor: Conversational Loan Finder
Main Streamlit Application
"""

import os
import sys

import plotly.graph_objects as go
import streamlit as st

# Add project root to path
sys.path.insert(0, os.path.dirname(__file__))

from loan_advisor.advice import AdviceService
from loan_advisor.config import configure_logging, load_settings
from loan_advisor.emi_calculator import (
    calculate_emi, calculate_total_interest, repayment_schedule_frame,
)
from loan_advisor.exceptions import InvalidArgument
from loan_advisor.intake_flow import IntakeSession, IntakeSettings
from loan_advisor.loan_engine import format_currency
from loan_advisor.profile_parser import extract_profile_from_message

# ─── Page Config ────────────────────────────────────────────────────────────
st.set_page_config(
    page_title="Loan Advisor",
    page_icon="₹",
    layout="centered",
)

PAGES = ["💬 Loan Finder", "📊 Eligibility Check", "🤖 Ask the Advisor", "🧮 EMI Calculator"]
FLOW_FOR_PAGE = {"💬 Loan Finder": "loan_type", "📊 Eligibility Check": "eligibility"}


@st.cache_resource
def get_settings():
    settings = load_settings()
    configure_logging(settings)
    return settings


def get_advice_service() -> AdviceService:
    if "advice_service" not in st.session_state:
        st.session_state.advice_service = AdviceService.from_settings(get_settings())
    return st.session_state.advice_service


def get_session(flow: str) -> IntakeSession:
    key = f"intake_{flow}"
    if key not in st.session_state:
        session = IntakeSession(flow, IntakeSettings.from_settings(get_settings()))
        st.session_state[key] = session
        st.session_state[f"{key}_messages"] = [{"role": "assistant", "content": session.welcome}]
    return st.session_state[key]


def render_messages(messages):
    for msg in messages:
        with st.chat_message(msg["role"]):
            st.markdown(msg["content"].replace("\n", "  \n"))


# ─── Intake Pages ───────────────────────────────────────────────────────────

def intake_page(flow: str):
    session = get_session(flow)
    messages = st.session_state[f"intake_{flow}_messages"]

    if st.button("🔄 Start over", key=f"reset_{flow}"):
        welcome = session.restart()
        messages.clear()
        messages.append({"role": "assistant", "content": welcome})

    render_messages(messages)

    user_input = st.chat_input("Type your answer...")
    if user_input and user_input.strip():
        reply = session.send(user_input)
        messages.append({"role": "user", "content": user_input.strip()})
        messages.append({"role": "assistant", "content": reply})
        st.rerun()


# ─── Advice Page ────────────────────────────────────────────────────────────

def advice_page():
    service = get_advice_service()
    if "advice_messages" not in st.session_state:
        st.session_state.advice_messages = [{
            "role": "assistant",
            "content": "Hello! I am your AI Loan Advisor. How can I help you today?",
        }]
    messages = st.session_state.advice_messages
    render_messages(messages)

    with st.expander("🩺 Service status"):
        st.json(service.health_check())

    question = st.chat_input("Ask about loans, EMI, documents...")
    if question and question.strip():
        result = service.get_advice(question.strip())
        reply = result.text
        profile = extract_profile_from_message(question)
        if profile:
            found = ", ".join(f"{k.replace('_', ' ')}: {v:,}" for k, v in profile.items())
            reply += f"\n\n_Noted from your message: {found}_"
        if result.fallback_used:
            reply += "\n\n_(answered from the offline guide)_"
        messages.append({"role": "user", "content": question.strip()})
        messages.append({"role": "assistant", "content": reply})
        st.rerun()


# ─── EMI Calculator Page ────────────────────────────────────────────────────

def emi_page():
    c1, c2, c3 = st.columns(3)
    principal = c1.number_input("Loan amount (₹)", min_value=1000, value=500000, step=10000)
    rate = c2.number_input("Interest rate (% p.a.)", min_value=0.0, value=10.5, step=0.1)
    tenure = c3.number_input("Tenure (months)", min_value=1, value=60, step=6)

    try:
        emi = calculate_emi(principal, rate, int(tenure))
        total_interest = calculate_total_interest(principal, rate, int(tenure))
        schedule = repayment_schedule_frame(principal, rate, int(tenure))
    except InvalidArgument as e:
        st.error(str(e))
        return

    m1, m2, m3 = st.columns(3)
    m1.metric("Monthly EMI", format_currency(emi))
    m2.metric("Total Interest", format_currency(total_interest))
    m3.metric("Total Payable", format_currency(emi * int(tenure)))

    first_year = schedule.head(12)
    sched_df = first_year.copy()
    sched_df.columns = ["Month", "EMI (₹)", "Principal (₹)", "Interest (₹)", "Balance (₹)"]
    st.dataframe(sched_df, use_container_width=True, hide_index=True)

    fig = go.Figure()
    fig.add_trace(go.Bar(x=first_year["month"],
                         y=first_year["principal"],
                         name="Principal", marker_color="#22c55e"))
    fig.add_trace(go.Bar(x=first_year["month"],
                         y=first_year["interest"],
                         name="Interest", marker_color="#ef4444"))
    fig.update_layout(
        barmode="stack", height=300, title="Monthly EMI Breakdown",
        xaxis_title="Month", yaxis_title="Amount (₹)",
        paper_bgcolor="rgba(0,0,0,0)", plot_bgcolor="rgba(0,0,0,0)",
    )
    st.plotly_chart(fig, use_container_width=True)


# ─── Main ───────────────────────────────────────────────────────────────────

def main():
    if "current_page" not in st.session_state:
        st.session_state.current_page = PAGES[0]

    with st.sidebar:
        st.markdown("## ₹ Loan Advisor")
        st.session_state.current_page = st.radio(
            "Go to", PAGES, index=PAGES.index(st.session_state.current_page)
        )

    page = st.session_state.current_page
    st.title(page)

    if page in FLOW_FOR_PAGE:
        intake_page(FLOW_FOR_PAGE[page])
    elif page == "🤖 Ask the Advisor":
        advice_page()
    else:
        emi_page()


main()
