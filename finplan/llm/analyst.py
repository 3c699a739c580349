from __future__ import annotations

import json
import logging
import os
import re
import time
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ValidationError

from finplan.planner import assumptions
from finplan.planner.metrics import emergency_fund_months, liquid_assets, weighted_card_apr
from finplan.planner.schema import NormalizedAnalysisRequest

from .schema import (
    ActionPlan,
    CashFlowAnalysis,
    ClientSummary,
    DebtManagement,
    DetailedAnalysis,
    FinancialAnalysis,
    InsuranceAnalysis,
    InvestmentStrategy,
    PriorityRecommendation,
    RetirementPlanning,
    TaxOptimization,
    clamp_score,
)

try:
    from openai import OpenAI
except Exception:  # pragma: no cover - runtime dependency
    OpenAI = None

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.1
DEFAULT_MAX_OUTPUT_TOKENS = 4000

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

DISCLAIMERS = [
    "This analysis is for educational purposes and is not individualized investment, tax or legal advice.",
    "Figures are based on the information you provided and have not been independently verified.",
    "Consult a licensed professional before making significant financial decisions.",
]


class AnalysisResult(BaseModel):
    analysis: FinancialAnalysis
    source: Literal["llm", "fallback"]
    model: str
    tokensEstimate: int
    responseTimeMs: int


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _system_prompt(max_recommendations: int) -> str:
    return (
        "You are a Certified Financial Planner (CFP) with 20+ years of experience providing "
        "comprehensive financial planning advice. Analyze the client financial data and return "
        "a detailed financial plan as JSON.\n"
        "Rules:\n"
        "- Follow fiduciary standards and act in the client's best interest.\n"
        "- Give specific, actionable recommendations with timelines and expected outcomes.\n"
        "- Use client_profile.financial_situation for net worth, cash flow and debt-to-income; do not recompute them.\n"
        "- Assess emergency fund adequacy (3-6 months of expenses), debt payoff order, retirement "
        "readiness, investment allocation against risk tolerance, tax and insurance gaps.\n"
        f"- Return at most {max_recommendations} priority_recommendations, ordered by urgency.\n"
        "- Output must be valid JSON matching the schema below ONLY. No markdown fences, commentary or extra keys.\n"
        "\n"
        "Schema:\n"
        "{\n"
        '  "client_summary": {"name": "string", "age": number, "financial_health_score": number (1-100), '
        '"net_worth": number, "monthly_cash_flow": number},\n'
        '  "priority_recommendations": [{"id": number, "category": "cash_flow|investment|retirement|debt|insurance|tax", '
        '"title": "string", "description": "string", "priority": "high|medium|low", "timeline": "string", '
        '"estimated_impact": "string", "implementation_steps": ["string"]}],\n'
        '  "detailed_analysis": {\n'
        '    "cash_flow": {"monthly_surplus_deficit": number, "annual_savings_rate": number, "recommendations": ["string"]},\n'
        '    "investment_strategy": {"current_allocation": "string", "recommended_allocation": "string", '
        '"risk_tolerance_assessment": "string", "specific_recommendations": ["string"]},\n'
        '    "retirement_planning": {"retirement_readiness_score": number (1-100), "projected_retirement_income": number, '
        '"savings_gap": number, "catch_up_recommendations": ["string"]},\n'
        '    "debt_management": {"debt_to_income_ratio": number, "total_debt": number, "payoff_strategy": "string", '
        '"priority_debts": ["string"]},\n'
        '    "insurance_analysis": {"coverage_gaps": ["string"], "cost_optimization_opportunities": ["string"]},\n'
        '    "tax_optimization": {"current_tax_efficiency": "string", "optimization_opportunities": ["string"], '
        '"estimated_annual_savings": number}\n'
        "  },\n"
        '  "action_plan": {"immediate_actions": ["string"], "short_term_goals": ["string"], "long_term_strategy": ["string"]},\n'
        '  "disclaimers": ["string"]\n'
        "}\n"
    )


def _user_prompt(payload: Dict[str, Any]) -> str:
    request_json = json.dumps(payload, ensure_ascii=True, separators=(",", ":"))
    return (
        "Context: locale=US, currency=USD.\n"
        "Client Financial Data JSON:\n"
        f"{request_json}\n"
        "Return the analysis JSON only."
    )


def _extract_response_text(resp: Any) -> str:
    if resp is None:
        return ""
    text = getattr(resp, "output_text", None)
    if text:
        return text
    choices = getattr(resp, "choices", None)
    if choices:
        msg = getattr(choices[0], "message", None)
        if msg and getattr(msg, "content", None):
            return msg.content
    output = getattr(resp, "output", None)
    if isinstance(output, list):
        for item in output:
            content = getattr(item, "content", None)
            if isinstance(content, list):
                for part in content:
                    if getattr(part, "type", None) == "output_text":
                        return getattr(part, "text", "")
    return ""


def _call_openai(system: str, user: str, model: str, temperature: float, max_tokens: int) -> str:
    if OpenAI is None:
        logger.warning("openai SDK not installed; skipping analysis call")
        return ""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        logger.warning("OPENAI_API_KEY not set; skipping analysis call")
        return ""
    client = OpenAI(api_key=api_key)

    try:
        resp = client.responses.create(
            model=model,
            input=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=temperature,
            max_output_tokens=max_tokens,
        )
        return _extract_response_text(resp)
    except Exception:
        logger.info("responses API failed for model=%s; retrying with chat completions", model)
        try:
            resp = client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
            return _extract_response_text(resp)
        except Exception:
            logger.exception("analysis call failed for model=%s", model)
            return ""


def parse_analysis_text(raw: str) -> Optional[Dict[str, Any]]:
    """
    Best-effort JSON extraction from a model reply: markdown fences are
    stripped, then the outermost {...} span is tried. None when nothing parses
    to an object.
    """
    if not raw:
        return None
    text = _FENCE_RE.sub("", raw.strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        start = text.find("{")
        end = text.rfind("}")
        if start < 0 or end <= start:
            return None
        try:
            data = json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            return None
    return data if isinstance(data, dict) else None


def validate_analysis(data: Optional[Dict[str, Any]], max_recommendations: int) -> Optional[FinancialAnalysis]:
    if not data:
        return None
    try:
        parsed = FinancialAnalysis.model_validate(data)
    except ValidationError as exc:
        logger.info("analysis failed validation: %d error(s)", exc.error_count())
        return None
    if len(parsed.priority_recommendations) > max_recommendations:
        parsed = parsed.model_copy(
            update={"priority_recommendations": parsed.priority_recommendations[:max_recommendations]}
        )
    return parsed


def _health_score(request: NormalizedAnalysisRequest) -> int:
    situation = request.client_profile.financial_situation
    months = emergency_fund_months(request.assets, request.expenses)

    score = 50
    score += 15 if situation.monthly_cash_flow > 0 else -15
    if situation.total_income > 0:
        if situation.debt_to_income_ratio <= assumptions.HEALTHY_DEBT_TO_INCOME:
            score += 15
        elif situation.debt_to_income_ratio > assumptions.HIGH_DEBT_TO_INCOME:
            score -= 15
    if months >= assumptions.EMERGENCY_FUND_TARGET_MONTHS:
        score += 20
    elif months >= 3:
        score += 10
    else:
        score -= 10
    if situation.net_worth > 0:
        score += 5
    return clamp_score(score)


def _retirement_readiness(request: NormalizedAnalysisRequest) -> int:
    # Retirement savings against a 10x-income benchmark.
    income = request.client_profile.financial_situation.total_income
    inv = request.assets.investments
    saved = inv.retirement_401k_balance + inv.ira_balance + inv.taxable_accounts
    if income <= 0:
        return clamp_score(0)
    return clamp_score(round(saved / (income * assumptions.RETIREMENT_INCOME_MULTIPLE) * 100))


def _fallback_recommendations(request: NormalizedAnalysisRequest) -> List[PriorityRecommendation]:
    situation = request.client_profile.financial_situation
    monthly = situation.monthly_expenses
    months = emergency_fund_months(request.assets, request.expenses)
    cards = weighted_card_apr(request.liabilities)
    recs: List[PriorityRecommendation] = []

    def add(category: str, title: str, description: str, priority: str, timeline: str, steps: List[str]) -> None:
        recs.append(
            PriorityRecommendation(
                id=len(recs) + 1,
                category=category,
                title=title,
                description=description,
                priority=priority,
                timeline=timeline,
                estimated_impact="",
                implementation_steps=steps,
            )
        )

    if situation.monthly_cash_flow <= 0:
        add(
            "cash_flow",
            "Close the monthly cash flow gap",
            f"Monthly expenses of ${monthly:,} exceed take-home income by ${-situation.monthly_cash_flow:,}.",
            "high",
            "Next 30 days",
            ["List every recurring expense", "Cut or renegotiate the largest discretionary lines"],
        )
    if cards["balance"] > 0 and cards["apr"] >= assumptions.HIGH_INTEREST_APR:
        add(
            "debt",
            "Pay down high-interest credit card debt",
            f"${cards['balance']:,} of card balances carry a weighted APR of {cards['apr']}%.",
            "high",
            "0-12 months",
            ["Pay minimums on every card", "Send extra payments to the highest-rate card first"],
        )
    if monthly > 0 and months < assumptions.EMERGENCY_FUND_TARGET_MONTHS:
        target = monthly * assumptions.EMERGENCY_FUND_TARGET_MONTHS
        gap = max(0, target - liquid_assets(request.assets))
        add(
            "cash_flow",
            "Build the emergency fund",
            f"Liquid savings cover {months} months of expenses; the "
            f"{assumptions.EMERGENCY_FUND_TARGET_MONTHS}-month target is ${target:,} (gap ${gap:,}).",
            "high" if months < 3 else "medium",
            "3-12 months",
            ["Open a high-yield savings account", "Automate a fixed monthly transfer"],
        )
    if situation.debt_to_income_ratio > assumptions.HIGH_DEBT_TO_INCOME:
        add(
            "debt",
            "Reduce total debt relative to income",
            f"Total liabilities are {situation.debt_to_income_ratio:.0%} of annual income.",
            "medium",
            "12 months",
            ["Avoid new borrowing", "Review refinancing options for the largest balances"],
        )
    add(
        "retirement",
        "Review retirement contributions",
        "Confirm you are capturing any employer match and increasing contributions with each raise.",
        "medium",
        "Next 90 days",
        ["Check the employer match formula", "Raise the contribution rate by 1-2%"],
    )
    add(
        "insurance",
        "Review insurance coverage",
        "Confirm life, disability and property coverage match your dependents and assets.",
        "low",
        "6 months",
        ["Gather current policies", "Compare coverage to income replacement needs"],
    )
    return recs[: request.analysis_requirements.priority_recommendations]


def _fallback_analysis(request: NormalizedAnalysisRequest) -> FinancialAnalysis:
    """Deterministic analysis built from the derived totals when no valid model answer is available."""
    profile = request.client_profile
    situation = profile.financial_situation
    recs = _fallback_recommendations(request)
    income_monthly = round(situation.total_income / 12)
    savings_rate = round(situation.monthly_cash_flow / income_monthly * 100, 1) if income_monthly > 0 else 0.0

    priority_debts = [
        f"{card.name or 'Credit card'} at {card.rate}%"
        for card in sorted(request.liabilities.credit_cards, key=lambda c: c.rate, reverse=True)
        if card.balance > 0
    ]

    return FinancialAnalysis(
        client_summary=ClientSummary(
            name=profile.personal_info.name,
            age=profile.personal_info.age,
            financial_health_score=_health_score(request),
            net_worth=situation.net_worth,
            monthly_cash_flow=situation.monthly_cash_flow,
        ),
        priority_recommendations=recs,
        detailed_analysis=DetailedAnalysis(
            cash_flow=CashFlowAnalysis(
                monthly_surplus_deficit=situation.monthly_cash_flow,
                annual_savings_rate=savings_rate,
                recommendations=[r.title for r in recs if r.category == "cash_flow"],
            ),
            investment_strategy=InvestmentStrategy(
                risk_tolerance_assessment=request.risk_assessment.investment_experience.experience_level,
            ),
            retirement_planning=RetirementPlanning(
                retirement_readiness_score=_retirement_readiness(request),
            ),
            debt_management=DebtManagement(
                debt_to_income_ratio=situation.debt_to_income_ratio,
                total_debt=situation.total_liabilities,
                payoff_strategy="avalanche" if priority_debts else "",
                priority_debts=priority_debts,
            ),
            insurance_analysis=InsuranceAnalysis(),
            tax_optimization=TaxOptimization(),
        ),
        action_plan=ActionPlan(
            immediate_actions=[r.title for r in recs if r.priority == "high"],
            short_term_goals=[r.title for r in recs if r.priority == "medium"],
            long_term_strategy=[r.title for r in recs if r.priority == "low"],
        ),
        disclaimers=list(DISCLAIMERS),
    )


def _estimate_tokens(*texts: str) -> int:
    return sum(len(t) for t in texts if t) // 4


def generate_analysis(request: NormalizedAnalysisRequest) -> AnalysisResult:
    model = os.getenv("LLM_MODEL_ANALYST", DEFAULT_MODEL)
    temperature = _env_float("LLM_TEMPERATURE_ANALYST", DEFAULT_TEMPERATURE)
    max_tokens = _env_int("LLM_MAX_OUTPUT_TOKENS_ANALYST", DEFAULT_MAX_OUTPUT_TOKENS)
    max_recs = request.analysis_requirements.priority_recommendations

    started = time.monotonic()
    system = _system_prompt(max_recs)
    user = _user_prompt(request.to_payload())

    raw = _call_openai(system, user, model, temperature, max_tokens)
    tokens = _estimate_tokens(system, user, raw)
    parsed = validate_analysis(parse_analysis_text(raw), max_recs)
    if not parsed and raw:
        fix_prompt = (
            "The previous response was invalid JSON or did not match the schema. "
            "Return ONLY valid analysis JSON with no extra text."
        )
        retry_user = f"{user}\n\n{fix_prompt}\n\nPrevious response:\n{raw}"
        raw = _call_openai(system, retry_user, model, temperature, max_tokens)
        tokens += _estimate_tokens(system, retry_user, raw)
        parsed = validate_analysis(parse_analysis_text(raw), max_recs)

    source: Literal["llm", "fallback"] = "llm"
    if not parsed:
        logger.warning("using fallback analysis (model=%s)", model)
        parsed = _fallback_analysis(request)
        source = "fallback"

    return AnalysisResult(
        analysis=parsed,
        source=source,
        model=model,
        tokensEstimate=tokens,
        responseTimeMs=int((time.monotonic() - started) * 1000),
    )
