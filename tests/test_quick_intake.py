"""Tests for the quick-plan questionnaire builder."""

from datetime import date

from finplan.planner.normalizer import normalize
from finplan.planner.quick_intake import (
    ESTIMATED_CARD_NAME,
    QUICK_PLAN_CONTEXT_KEY,
    build_quick_plan_questionnaire,
)
from finplan.planner.sections import completed_section_keys
from finplan.planner.tiers import QUICK_PLAN_SENTINEL_NAME, classify


def _quick(**overrides):
    base = {
        "annualHouseholdIncome": 85000,
        "monthlyHousingCost": 1800,
        "currentSavings": 6000,
        "retirementBalance": 40000,
        "totalDebt": 12000,
        "employmentStatus": "employed",
        "emergencyFundCoverage": "1-3 months",
        "riskTolerance": "moderate",
        "retirementTimeline": "20+ years",
    }
    base.update(overrides)
    return base


def test_sentinel_and_defaults():
    data = build_quick_plan_questionnaire(_quick())
    assert data["personal"]["name"] == QUICK_PLAN_SENTINEL_NAME
    assert data["income"]["retirementAge"] == 65
    assert data["expenses"]["housing"] == 1800
    assert classify(data) == "quick"


def test_debt_becomes_estimated_card():
    cards = build_quick_plan_questionnaire(_quick())["liabilities"]["creditCards"]
    assert cards == [{"name": ESTIMATED_CARD_NAME, "balance": 12000, "limit": 24000, "rate": 18}]


def test_no_debt_means_no_card():
    data = build_quick_plan_questionnaire(_quick(totalDebt=0))
    assert data["liabilities"]["creditCards"] == []


def test_float_amounts_are_truncated():
    data = build_quick_plan_questionnaire(_quick(totalDebt=999.9, currentSavings=1500.5))
    assert data["liabilities"]["creditCards"][0]["balance"] == 999
    assert data["assets"]["savings"] == 1500


def test_normalizes_through_fallback_keys():
    payload = normalize(build_quick_plan_questionnaire(_quick()), date(2025, 1, 1)).to_payload()
    assert payload["expenses"]["housing"]["monthly_payment"] == 1800
    assert payload["liabilities"]["credit_cards"][0]["rate"] == 18.0
    assert payload["assets"]["investments"]["401k_balance"] == 40000
    assert payload["risk_assessment"]["risk_tolerance"]["investment_timeline"] == "20+ years"


def test_tolerates_missing_input():
    data = build_quick_plan_questionnaire(None)
    assert data["income"]["annualIncome"] == 0
    assert data["liabilities"]["creditCards"] == []


def test_stated_age_reaches_the_analysis_request():
    data = build_quick_plan_questionnaire(_quick(age=34))
    assert data["personal"]["age"] == 34
    payload = normalize(data, date(2025, 1, 1)).to_payload()
    assert payload["client_profile"]["personal_info"]["age"] == 34


def test_unmapped_answers_are_kept_on_the_record():
    data = build_quick_plan_questionnaire(
        _quick(
            primaryFinancialGoal="pay off debt",
            monthlyExpenses=3200.75,
            monthlyDebtPayments=450,
            jobSecurity="stable",
            urgentFinancialConcern="credit card interest",
            expectedLifeChanges="new baby",
            additionalContext="freelance on weekends",
        )
    )
    assert data[QUICK_PLAN_CONTEXT_KEY] == {
        "primaryFinancialGoal": "pay off debt",
        "monthlyExpenses": 3200,
        "monthlyDebtPayments": 450,
        "jobSecurity": "stable",
        "urgentFinancialConcern": "credit card interest",
        "expectedLifeChanges": "new baby",
        "additionalContext": "freelance on weekends",
    }


def test_context_block_is_not_a_catalog_section():
    data = build_quick_plan_questionnaire(_quick(additionalContext=None))
    assert data[QUICK_PLAN_CONTEXT_KEY]["additionalContext"] == ""
    assert QUICK_PLAN_CONTEXT_KEY not in completed_section_keys(data)
    assert normalize(data, date(2025, 1, 1)).analysis_context.completed_sections == 6
