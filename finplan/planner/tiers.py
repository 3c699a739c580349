# backend/finplan/planner/tiers.py
from __future__ import annotations

from typing import Any, Dict, FrozenSet, List, Literal, Optional

from .sections import REPORT_SECTIONS, REPORT_SECTIONS_BY_ID, completed_section_keys

PlanType = Literal["quick", "comprehensive"]

# Written by the quick-intake flow in place of a real name.
QUICK_PLAN_SENTINEL_NAME = "Quick Plan User"

COMPREHENSIVE_MIN_SECTIONS = 7

ACCESS_POLICY: Dict[str, FrozenSet[str]] = {
    "quick": frozenset(s.id for s in REPORT_SECTIONS if s.quick),
    "comprehensive": frozenset(s.id for s in REPORT_SECTIONS),
}

DEFAULT_UPGRADE_MESSAGE = {
    "title": "Unlock Premium Features",
    "description": "Upgrade to our comprehensive plan for detailed analysis and personalized recommendations.",
}


def is_quick_intake(data: Any) -> bool:
    """True when the record was produced by the quick-intake flow."""
    if not isinstance(data, dict):
        return False
    personal = data.get("personal")
    if not isinstance(personal, dict):
        return False
    return personal.get("name") == QUICK_PLAN_SENTINEL_NAME


def classify(data: Any) -> PlanType:
    if is_quick_intake(data):
        return "quick"
    if len(completed_section_keys(data)) < COMPREHENSIVE_MIN_SECTIONS:
        return "quick"
    return "comprehensive"


def can_access_section(section_id: str, plan_type: str) -> bool:
    allowed = ACCESS_POLICY.get(plan_type)
    if allowed is None:
        return False
    return section_id in allowed


def gated_sections() -> List[str]:
    """Sections a quick plan cannot open, in render order."""
    return [s.id for s in REPORT_SECTIONS if not s.quick]


def upgrade_message(section_id: str) -> Dict[str, str]:
    section = REPORT_SECTIONS_BY_ID.get(section_id)
    if section is None or section.quick:
        return dict(DEFAULT_UPGRADE_MESSAGE)
    return {"title": section.upgrade_title, "description": section.upgrade_description}


def section_access(section_id: str, plan_type: str) -> Dict[str, Any]:
    accessible = can_access_section(section_id, plan_type)
    section = REPORT_SECTIONS_BY_ID.get(section_id)
    upgrade: Optional[Dict[str, str]] = None if accessible else upgrade_message(section_id)
    return {
        "id": section_id,
        "title": section.title if section else "",
        "accessible": accessible,
        "upgrade": upgrade,
    }


def plan_access(data: Any) -> Dict[str, Any]:
    plan_type = classify(data)
    return {
        "planType": plan_type,
        "isQuickPlan": plan_type == "quick",
        "isComprehensivePlan": plan_type == "comprehensive",
        "completedSections": completed_section_keys(data),
        "sections": [section_access(s.id, plan_type) for s in REPORT_SECTIONS],
    }
