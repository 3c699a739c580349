# backend/finplan/planner/sections.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

QUESTIONNAIRE_SECTIONS = [
    {"key": "personal", "label": "Personal Information"},
    {"key": "income", "label": "Income"},
    {"key": "expenses", "label": "Expenses"},
    {"key": "assets", "label": "Assets"},
    {"key": "liabilities", "label": "Liabilities"},
    {"key": "goals", "label": "Goals"},
    {"key": "preferences", "label": "Preferences"},
    {"key": "risk", "label": "Risk Assessment"},
    {"key": "employerBenefits", "label": "Employer Benefits"},
    {"key": "insurance", "label": "Insurance"},
    {"key": "taxSituation", "label": "Tax Situation"},
    {"key": "estatePlanning", "label": "Estate Planning"},
    {"key": "behavioral", "label": "Behavioral Assessment"},
    {"key": "cashFlow", "label": "Cash Flow Analysis"},
    {"key": "lifeCareer", "label": "Life & Career Planning"},
    {"key": "investmentPhilosophy", "label": "Investment Philosophy"},
]

QUESTIONNAIRE_SECTION_KEYS = [entry["key"] for entry in QUESTIONNAIRE_SECTIONS]


@dataclass(frozen=True)
class ReportSection:
    id: str
    title: str
    quick: bool
    upgrade_title: str = ""
    upgrade_description: str = ""


# Order is the dashboard render order.
REPORT_SECTIONS: List[ReportSection] = [
    ReportSection("executive", "Executive Summary", quick=True),
    ReportSection(
        "assets",
        "Asset Allocation",
        quick=False,
        upgrade_title="Unlock Asset Allocation Strategy",
        upgrade_description=(
            "Get detailed investment recommendations and portfolio optimization strategies "
            "tailored to your risk profile and goals."
        ),
    ),
    ReportSection(
        "retirement",
        "Retirement Planning",
        quick=False,
        upgrade_title="Unlock Advanced Retirement Planning",
        upgrade_description=(
            "Access Monte Carlo projections, Social Security optimization, and detailed "
            "retirement income planning."
        ),
    ),
    ReportSection("debt", "Debt Management", quick=True),
    ReportSection("risk", "Risk Assessment", quick=True),
    ReportSection("actions", "Priority Actions", quick=True),
    ReportSection(
        "goals",
        "Goal Timeline",
        quick=False,
        upgrade_title="Unlock Goal Timeline Planning",
        upgrade_description=(
            "Create detailed timelines for your financial goals with milestone tracking "
            "and progress monitoring."
        ),
    ),
    ReportSection(
        "cashflow",
        "Cash Flow Analysis",
        quick=False,
        upgrade_title="Unlock Cash Flow Analysis",
        upgrade_description=(
            "Get comprehensive income and expense optimization with savings rate analysis "
            "and budget recommendations."
        ),
    ),
    ReportSection(
        "insurance",
        "Insurance Coverage",
        quick=False,
        upgrade_title="Unlock Insurance Coverage Analysis",
        upgrade_description=(
            "Receive detailed insurance needs analysis including life, disability, and "
            "property coverage recommendations."
        ),
    ),
    ReportSection(
        "tax",
        "Tax Strategy",
        quick=False,
        upgrade_title="Unlock Tax Strategy Planning",
        upgrade_description=(
            "Access advanced tax optimization strategies including Roth conversions, "
            "tax-loss harvesting, and deduction planning."
        ),
    ),
]

REPORT_SECTIONS_BY_ID: Dict[str, ReportSection] = {s.id: s for s in REPORT_SECTIONS}


def is_section_completed(value: Any) -> bool:
    return isinstance(value, dict) and len(value) > 0


def completed_section_indices(data: Any) -> List[int]:
    """Catalog indices of the answered sections, in catalog order."""
    if not isinstance(data, dict):
        return []
    return [
        idx
        for idx, key in enumerate(QUESTIONNAIRE_SECTION_KEYS)
        if is_section_completed(data.get(key))
    ]


def completed_section_keys(data: Any) -> List[str]:
    return [QUESTIONNAIRE_SECTION_KEYS[idx] for idx in completed_section_indices(data)]


def data_completeness_score(data: Any) -> float:
    """Percentage of the catalog answered, rounded to one decimal."""
    done = len(completed_section_indices(data))
    return round(done / len(QUESTIONNAIRE_SECTION_KEYS) * 100, 1)
