# backend/finplan/planner/quick_intake.py
from __future__ import annotations

from typing import Any, Dict, List

from . import assumptions
from .parsers import parse_int, parse_text
from .tiers import QUICK_PLAN_SENTINEL_NAME

ESTIMATED_CARD_NAME = "Credit Cards (estimated)"

# Kept on the record outside the section catalog, so they never count as answered sections.
QUICK_PLAN_CONTEXT_KEY = "quickPlanContext"


def _estimated_cards(total_debt: int) -> List[Dict[str, Any]]:
    if total_debt <= 0:
        return []
    return [
        {
            "name": ESTIMATED_CARD_NAME,
            "balance": total_debt,
            "limit": total_debt * assumptions.QUICK_PLAN_CARD_LIMIT_MULTIPLIER,
            "rate": assumptions.QUICK_PLAN_CARD_RATE,
        }
    ]


def build_quick_plan_questionnaire(quick: Dict[str, Any]) -> Dict[str, Any]:
    """
    Expand the short quick-plan form into a questionnaire record.

    The record carries the sentinel name so the classifier always treats it
    as a quick plan, and only fills the sections the short form covers.
    Total debt is booked as a single estimated credit-card balance. Answers
    with no questionnaire field are kept under QUICK_PLAN_CONTEXT_KEY.
    """
    quick = quick if isinstance(quick, dict) else {}
    total_debt = parse_int(quick.get("totalDebt"))

    return {
        "personal": {
            "name": QUICK_PLAN_SENTINEL_NAME,
            "dateOfBirth": "",
            "age": parse_int(quick.get("age")),
            "maritalStatus": "unknown",
            "dependents": 0,
            "dependentAges": "",
            "state": "",
            "country": "",
            "employmentStatus": parse_text(quick.get("employmentStatus")),
            "industry": "",
            "profession": "",
        },
        "income": {
            "annualIncome": parse_int(quick.get("annualHouseholdIncome")),
            "stability": "",
            "growthExpectation": "",
            "spouseIncome": 0,
            "rentalIncome": 0,
            "businessIncome": 0,
            "investmentIncome": 0,
            "otherIncome": 0,
            "retirementAge": assumptions.QUICK_PLAN_RETIREMENT_AGE,
        },
        "expenses": {
            "housingType": "unknown",
            "housing": parse_int(quick.get("monthlyHousingCost")),
            "transportation": 0,
            "food": 0,
            "entertainment": 0,
        },
        "assets": {
            "checking": 0,
            "savings": parse_int(quick.get("currentSavings")),
            "emergencyTarget": parse_text(quick.get("emergencyFundCoverage")),
            "retirement401k": parse_int(quick.get("retirementBalance")),
            "ira": 0,
            "taxableAccounts": 0,
            "homeValue": 0,
        },
        "liabilities": {
            "mortgageBalance": 0,
            "mortgageRate": 0,
            "mortgageYears": 0,
            "autoLoans": [],
            "creditCards": _estimated_cards(total_debt),
            "studentLoans": [],
        },
        "risk": {
            "experienceLevel": parse_text(quick.get("riskTolerance")),
            "largestLoss": "",
            "portfolioDrop": "",
            "timeline": parse_text(quick.get("retirementTimeline")),
        },
        QUICK_PLAN_CONTEXT_KEY: {
            "primaryFinancialGoal": parse_text(quick.get("primaryFinancialGoal")),
            "monthlyExpenses": parse_int(quick.get("monthlyExpenses")),
            "monthlyDebtPayments": parse_int(quick.get("monthlyDebtPayments")),
            "jobSecurity": parse_text(quick.get("jobSecurity")),
            "urgentFinancialConcern": parse_text(quick.get("urgentFinancialConcern")),
            "expectedLifeChanges": parse_text(quick.get("expectedLifeChanges")),
            "additionalContext": parse_text(quick.get("additionalContext")),
        },
    }
