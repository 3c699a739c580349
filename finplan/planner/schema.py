from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class Dependents(_Strict):
    count: int = 0
    ages: List[int] = Field(default_factory=list)


class Location(_Strict):
    state: str = ""
    country: str = ""


class Employment(_Strict):
    status: str = ""
    industry: str = ""
    profession: str = ""


class PersonalInfo(_Strict):
    name: str = ""
    age: int = 0
    marital_status: str = ""
    dependents: Dependents = Field(default_factory=Dependents)
    location: Location = Field(default_factory=Location)
    employment: Employment = Field(default_factory=Employment)


class FinancialSituation(_Strict):
    total_income: int = 0
    total_assets: int = 0
    total_liabilities: int = 0
    net_worth: int = 0
    monthly_expenses: int = 0
    monthly_cash_flow: int = 0
    debt_to_income_ratio: float = 0.0


class ClientProfile(_Strict):
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    financial_situation: FinancialSituation = Field(default_factory=FinancialSituation)


class PrimaryIncome(_Strict):
    annual_gross: int = 0
    stability: str = ""
    growth_expectation: str = ""


class AdditionalIncome(_Strict):
    spouse_income: int = 0
    rental_income: int = 0
    investment_income: int = 0
    business_income: int = 0
    other_income: int = 0


class IncomeTimeline(_Strict):
    expected_retirement_age: int = 0


class IncomeBlock(_Strict):
    primary: PrimaryIncome = Field(default_factory=PrimaryIncome)
    additional_sources: AdditionalIncome = Field(default_factory=AdditionalIncome)
    timeline: IncomeTimeline = Field(default_factory=IncomeTimeline)


class Housing(_Strict):
    monthly_payment: int = 0
    type: str = ""


class LivingExpenses(_Strict):
    monthly_food_groceries: int = 0
    monthly_utilities: int = 0
    monthly_transportation: int = 0
    monthly_entertainment: int = 0


class ExpensesBlock(_Strict):
    housing: Housing = Field(default_factory=Housing)
    living_expenses: LivingExpenses = Field(default_factory=LivingExpenses)


class LiquidAssets(_Strict):
    checking_balance: int = 0
    savings_balance: int = 0
    emergency_fund_target: str = ""


class Investments(_Strict):
    retirement_401k_balance: int = Field(default=0, alias="401k_balance")
    ira_balance: int = 0
    taxable_accounts: int = 0


class RealEstate(_Strict):
    primary_residence: int = 0


class AssetsBlock(_Strict):
    liquid: LiquidAssets = Field(default_factory=LiquidAssets)
    investments: Investments = Field(default_factory=Investments)
    real_estate: RealEstate = Field(default_factory=RealEstate)


class MortgageDebt(_Strict):
    primary_balance: int = 0
    primary_rate: float = 0.0
    years_remaining: int = 0


class AutoLoan(_Strict):
    balance: int = 0
    rate: float = 0.0
    term: str = ""
    description: str = ""


class CreditCard(_Strict):
    name: str = ""
    balance: int = 0
    limit: int = 0
    rate: float = 0.0


class StudentLoan(_Strict):
    balance: int = 0
    rate: float = 0.0
    servicer: str = ""
    type: str = ""


class LiabilitiesBlock(_Strict):
    mortgage_debt: MortgageDebt = Field(default_factory=MortgageDebt)
    auto_loans: List[AutoLoan] = Field(default_factory=list)
    credit_cards: List[CreditCard] = Field(default_factory=list)
    student_loans: List[StudentLoan] = Field(default_factory=list)


class PriorityRanking(_Strict):
    retirement_security: int = 0
    emergency_fund: int = 0
    debt_elimination: int = 0


class RetirementGoal(_Strict):
    target_age: int = 0
    desired_annual_income: int = 0


class SpecificGoals(_Strict):
    retirement: RetirementGoal = Field(default_factory=RetirementGoal)


class FinancialGoals(_Strict):
    priority_ranking: PriorityRanking = Field(default_factory=PriorityRanking)
    specific_goals: SpecificGoals = Field(default_factory=SpecificGoals)


class RealEstateGoal(_Strict):
    second_home_interest: str = ""
    second_home_budget: int = 0


class BusinessGoal(_Strict):
    entrepreneurship_interest: str = ""
    business_capital_needed: int = 0


class SpecificLifeGoals(_Strict):
    real_estate: RealEstateGoal = Field(default_factory=RealEstateGoal)
    business: BusinessGoal = Field(default_factory=BusinessGoal)


class InvestmentExperience(_Strict):
    experience_level: str = ""
    largest_loss: str = ""


class RiskTolerance(_Strict):
    portfolio_drop_20_percent: str = ""
    investment_timeline: str = ""


class RiskAssessment(_Strict):
    investment_experience: InvestmentExperience = Field(default_factory=InvestmentExperience)
    risk_tolerance: RiskTolerance = Field(default_factory=RiskTolerance)


class MarketContext(_Strict):
    request_date: str
    market_conditions: str


class AnalysisRequirements(_Strict):
    comprehensive_assessment: bool
    priority_recommendations: int
    implementation_timeline: str
    regulatory_compliance: str


class AnalysisContext(_Strict):
    completed_sections: int = 0
    data_completeness_score: float = 0.0


class NormalizedAnalysisRequest(_Strict):
    """Fully populated request document handed to the analysis collaborator."""

    client_profile: ClientProfile
    income: IncomeBlock
    expenses: ExpensesBlock
    assets: AssetsBlock
    liabilities: LiabilitiesBlock
    financial_goals: FinancialGoals
    specific_life_goals: SpecificLifeGoals
    risk_assessment: RiskAssessment
    current_market_context: MarketContext
    analysis_requirements: AnalysisRequirements
    analysis_context: AnalysisContext

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
