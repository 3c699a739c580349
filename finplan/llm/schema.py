from __future__ import annotations

from typing import Any, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finplan.planner.parsers import parse_float, parse_int, parse_text

Priority = Literal["high", "medium", "low"]


def clamp_score(value: Any) -> int:
    return max(1, min(100, parse_int(value)))


def normalize_priority(value: Any) -> str:
    text = parse_text(value).strip().lower()
    if text in ("high", "medium", "low"):
        return text
    return "medium"


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ClientSummary(_Strict):
    name: str = ""
    age: int = 0
    financial_health_score: int = 1
    net_worth: float = 0.0
    monthly_cash_flow: float = 0.0

    @field_validator("name", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return parse_text(v)

    @field_validator("age", mode="before")
    @classmethod
    def _int(cls, v: Any) -> int:
        return parse_int(v)

    @field_validator("financial_health_score", mode="before")
    @classmethod
    def _score(cls, v: Any) -> int:
        return clamp_score(v)

    @field_validator("net_worth", "monthly_cash_flow", mode="before")
    @classmethod
    def _number(cls, v: Any) -> float:
        return parse_float(v)


class PriorityRecommendation(_Strict):
    id: int
    category: str
    title: str
    description: str
    priority: Priority = "medium"
    timeline: str = ""
    estimated_impact: str = ""
    implementation_steps: List[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, v: Any) -> int:
        return parse_int(v)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, v: Any) -> str:
        return normalize_priority(v)

    @field_validator("implementation_steps", mode="before")
    @classmethod
    def _steps(cls, v: Any) -> List[str]:
        return _string_list(v)


class CashFlowAnalysis(_Strict):
    monthly_surplus_deficit: float = 0.0
    annual_savings_rate: float = 0.0
    recommendations: List[str] = Field(default_factory=list)

    @field_validator("monthly_surplus_deficit", "annual_savings_rate", mode="before")
    @classmethod
    def _number(cls, v: Any) -> float:
        return parse_float(v)

    @field_validator("recommendations", mode="before")
    @classmethod
    def _lines(cls, v: Any) -> List[str]:
        return _string_list(v)


class InvestmentStrategy(_Strict):
    current_allocation: str = ""
    recommended_allocation: str = ""
    risk_tolerance_assessment: str = ""
    specific_recommendations: List[str] = Field(default_factory=list)

    @field_validator("specific_recommendations", mode="before")
    @classmethod
    def _lines(cls, v: Any) -> List[str]:
        return _string_list(v)


class RetirementPlanning(_Strict):
    retirement_readiness_score: int = 1
    projected_retirement_income: float = 0.0
    savings_gap: float = 0.0
    catch_up_recommendations: List[str] = Field(default_factory=list)

    @field_validator("retirement_readiness_score", mode="before")
    @classmethod
    def _score(cls, v: Any) -> int:
        return clamp_score(v)

    @field_validator("projected_retirement_income", "savings_gap", mode="before")
    @classmethod
    def _number(cls, v: Any) -> float:
        return parse_float(v)

    @field_validator("catch_up_recommendations", mode="before")
    @classmethod
    def _lines(cls, v: Any) -> List[str]:
        return _string_list(v)


class DebtManagement(_Strict):
    debt_to_income_ratio: float = 0.0
    total_debt: float = 0.0
    payoff_strategy: str = ""
    priority_debts: List[str] = Field(default_factory=list)

    @field_validator("debt_to_income_ratio", "total_debt", mode="before")
    @classmethod
    def _number(cls, v: Any) -> float:
        return parse_float(v)

    @field_validator("priority_debts", mode="before")
    @classmethod
    def _lines(cls, v: Any) -> List[str]:
        return _string_list(v)


class InsuranceAnalysis(_Strict):
    coverage_gaps: List[str] = Field(default_factory=list)
    cost_optimization_opportunities: List[str] = Field(default_factory=list)

    @field_validator("coverage_gaps", "cost_optimization_opportunities", mode="before")
    @classmethod
    def _lines(cls, v: Any) -> List[str]:
        return _string_list(v)


class TaxOptimization(_Strict):
    current_tax_efficiency: str = ""
    optimization_opportunities: List[str] = Field(default_factory=list)
    estimated_annual_savings: float = 0.0

    @field_validator("optimization_opportunities", mode="before")
    @classmethod
    def _lines(cls, v: Any) -> List[str]:
        return _string_list(v)

    @field_validator("estimated_annual_savings", mode="before")
    @classmethod
    def _number(cls, v: Any) -> float:
        return parse_float(v)


class DetailedAnalysis(_Strict):
    cash_flow: CashFlowAnalysis
    investment_strategy: InvestmentStrategy
    retirement_planning: RetirementPlanning
    debt_management: DebtManagement
    insurance_analysis: InsuranceAnalysis
    tax_optimization: TaxOptimization


class ActionPlan(_Strict):
    immediate_actions: List[str] = Field(default_factory=list)
    short_term_goals: List[str] = Field(default_factory=list)
    long_term_strategy: List[str] = Field(default_factory=list)

    @field_validator("immediate_actions", "short_term_goals", "long_term_strategy", mode="before")
    @classmethod
    def _lines(cls, v: Any) -> List[str]:
        return _string_list(v)


class FinancialAnalysis(_Strict):
    client_summary: ClientSummary
    priority_recommendations: List[PriorityRecommendation]
    detailed_analysis: DetailedAnalysis
    action_plan: ActionPlan
    disclaimers: List[str] = Field(default_factory=list)

    @field_validator("disclaimers", mode="before")
    @classmethod
    def _lines(cls, v: Any) -> List[str]:
        return _string_list(v)
