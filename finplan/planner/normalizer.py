# backend/finplan/planner/normalizer.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Union

from . import assumptions
from .metrics import build_financial_situation
from .parsers import (
    age_from_birth_date,
    first_present_int,
    parse_age_list,
    parse_float,
    parse_int,
    parse_text,
)
from .schema import (
    AdditionalIncome,
    AnalysisContext,
    AnalysisRequirements,
    AssetsBlock,
    AutoLoan,
    BusinessGoal,
    ClientProfile,
    CreditCard,
    Dependents,
    Employment,
    ExpensesBlock,
    FinancialGoals,
    Housing,
    IncomeBlock,
    IncomeTimeline,
    InvestmentExperience,
    Investments,
    LiabilitiesBlock,
    LiquidAssets,
    LivingExpenses,
    Location,
    MarketContext,
    MortgageDebt,
    NormalizedAnalysisRequest,
    PersonalInfo,
    PrimaryIncome,
    PriorityRanking,
    RealEstate,
    RealEstateGoal,
    RetirementGoal,
    RiskAssessment,
    RiskTolerance,
    SpecificGoals,
    SpecificLifeGoals,
    StudentLoan,
)
from .sections import completed_section_indices, data_completeness_score

# Form key first, then the alternate names the quick intake and typed records use.
EXPENSE_KEYS = {
    "monthly_payment": ["housingPayment", "housing"],
    "monthly_food_groceries": ["food", "foodGroceries"],
    "monthly_utilities": ["utilities"],
    "monthly_transportation": ["transportation", "gasoline"],
    "monthly_entertainment": ["entertainment", "diningEntertainment"],
}


def _section(data: Any, key: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        return {}
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _rows(section: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = section.get(key)
    if not isinstance(value, list):
        return []
    return [row if isinstance(row, dict) else {} for row in value]


def _age(personal: Dict[str, Any], today: date) -> int:
    # Quick-intake records carry a stated age instead of a birth date.
    return age_from_birth_date(personal.get("dateOfBirth"), today) or parse_int(personal.get("age"))


def _personal_info(personal: Dict[str, Any], today: date) -> PersonalInfo:
    return PersonalInfo(
        name=parse_text(personal.get("name")),
        age=_age(personal, today),
        marital_status=parse_text(personal.get("maritalStatus")),
        dependents=Dependents(
            count=parse_int(personal.get("dependents")),
            ages=parse_age_list(personal.get("dependentAges")),
        ),
        location=Location(
            state=parse_text(personal.get("state")),
            country=parse_text(personal.get("country")),
        ),
        employment=Employment(
            status=parse_text(personal.get("employmentStatus")),
            industry=parse_text(personal.get("industry")),
            profession=parse_text(personal.get("profession")),
        ),
    )


def _income(income: Dict[str, Any]) -> IncomeBlock:
    return IncomeBlock(
        primary=PrimaryIncome(
            annual_gross=parse_int(income.get("annualIncome")),
            stability=parse_text(income.get("stability")),
            growth_expectation=parse_text(income.get("growthExpectation")),
        ),
        additional_sources=AdditionalIncome(
            spouse_income=parse_int(income.get("spouseIncome")),
            rental_income=parse_int(income.get("rentalIncome")),
            investment_income=parse_int(income.get("investmentIncome")),
            business_income=parse_int(income.get("businessIncome")),
            other_income=parse_int(income.get("otherIncome")),
        ),
        timeline=IncomeTimeline(
            expected_retirement_age=parse_int(income.get("retirementAge")),
        ),
    )


def _expenses(expenses: Dict[str, Any]) -> ExpensesBlock:
    return ExpensesBlock(
        housing=Housing(
            monthly_payment=first_present_int(expenses, EXPENSE_KEYS["monthly_payment"]),
            type=parse_text(expenses.get("housingType")),
        ),
        living_expenses=LivingExpenses(
            monthly_food_groceries=first_present_int(expenses, EXPENSE_KEYS["monthly_food_groceries"]),
            monthly_utilities=first_present_int(expenses, EXPENSE_KEYS["monthly_utilities"]),
            monthly_transportation=first_present_int(expenses, EXPENSE_KEYS["monthly_transportation"]),
            monthly_entertainment=first_present_int(expenses, EXPENSE_KEYS["monthly_entertainment"]),
        ),
    )


def _assets(assets: Dict[str, Any]) -> AssetsBlock:
    return AssetsBlock(
        liquid=LiquidAssets(
            checking_balance=parse_int(assets.get("checking")),
            savings_balance=parse_int(assets.get("savings")),
            emergency_fund_target=parse_text(assets.get("emergencyTarget")),
        ),
        investments=Investments(
            retirement_401k_balance=parse_int(assets.get("retirement401k")),
            ira_balance=parse_int(assets.get("ira")),
            taxable_accounts=parse_int(assets.get("taxableAccounts")),
        ),
        real_estate=RealEstate(
            primary_residence=parse_int(assets.get("homeValue")),
        ),
    )


def _liabilities(liabilities: Dict[str, Any]) -> LiabilitiesBlock:
    return LiabilitiesBlock(
        mortgage_debt=MortgageDebt(
            primary_balance=parse_int(liabilities.get("mortgageBalance")),
            primary_rate=parse_float(liabilities.get("mortgageRate")),
            years_remaining=parse_int(liabilities.get("mortgageYears")),
        ),
        auto_loans=[
            AutoLoan(
                balance=parse_int(row.get("balance")),
                rate=parse_float(row.get("rate")),
                term=parse_text(row.get("term")),
                description=parse_text(row.get("description")),
            )
            for row in _rows(liabilities, "autoLoans")
        ],
        credit_cards=[
            CreditCard(
                name=parse_text(row.get("name")),
                balance=parse_int(row.get("balance")),
                limit=parse_int(row.get("limit")),
                rate=parse_float(row.get("rate")),
            )
            for row in _rows(liabilities, "creditCards")
        ],
        student_loans=[
            StudentLoan(
                balance=parse_int(row.get("balance")),
                rate=parse_float(row.get("rate")),
                servicer=parse_text(row.get("servicer")),
                type=parse_text(row.get("type")),
            )
            for row in _rows(liabilities, "studentLoans")
        ],
    )


def _goals(goals: Dict[str, Any]) -> FinancialGoals:
    return FinancialGoals(
        priority_ranking=PriorityRanking(
            retirement_security=parse_int(goals.get("retirementPriority")),
            emergency_fund=parse_int(goals.get("emergencyPriority")),
            debt_elimination=parse_int(goals.get("debtPriority")),
        ),
        specific_goals=SpecificGoals(
            retirement=RetirementGoal(
                target_age=parse_int(goals.get("retirementAge")),
                desired_annual_income=parse_int(goals.get("retirementIncome")),
            ),
        ),
    )


def _life_goals(preferences: Dict[str, Any]) -> SpecificLifeGoals:
    return SpecificLifeGoals(
        real_estate=RealEstateGoal(
            second_home_interest=parse_text(preferences.get("secondHome")),
            second_home_budget=parse_int(preferences.get("secondHomeBudget")),
        ),
        business=BusinessGoal(
            entrepreneurship_interest=parse_text(preferences.get("businessInterest")),
            business_capital_needed=parse_int(preferences.get("businessCapital")),
        ),
    )


def _risk(risk: Dict[str, Any]) -> RiskAssessment:
    return RiskAssessment(
        investment_experience=InvestmentExperience(
            experience_level=parse_text(risk.get("experienceLevel")),
            largest_loss=parse_text(risk.get("largestLoss")),
        ),
        risk_tolerance=RiskTolerance(
            portfolio_drop_20_percent=parse_text(risk.get("portfolioDrop")),
            investment_timeline=parse_text(risk.get("timeline")),
        ),
    )


def normalize(data: Any, now: Union[datetime, date]) -> NormalizedAnalysisRequest:
    """
    Turn raw questionnaire sections into the analysis request document.

    Every numeric field is coerced (integers, floats for rates), every text
    field defaults to "", and absent sections yield all-default blocks, so the
    result is always complete. `now` supplies the request date.
    """
    today = now.date() if isinstance(now, datetime) else now

    income = _income(_section(data, "income"))
    expenses = _expenses(_section(data, "expenses"))
    assets = _assets(_section(data, "assets"))
    liabilities = _liabilities(_section(data, "liabilities"))

    return NormalizedAnalysisRequest(
        client_profile=ClientProfile(
            personal_info=_personal_info(_section(data, "personal"), today),
            financial_situation=build_financial_situation(income, expenses, assets, liabilities),
        ),
        income=income,
        expenses=expenses,
        assets=assets,
        liabilities=liabilities,
        financial_goals=_goals(_section(data, "goals")),
        specific_life_goals=_life_goals(_section(data, "preferences")),
        risk_assessment=_risk(_section(data, "risk")),
        current_market_context=MarketContext(
            request_date=today.isoformat(),
            market_conditions=assumptions.MARKET_CONDITIONS,
        ),
        analysis_requirements=AnalysisRequirements(
            comprehensive_assessment=assumptions.COMPREHENSIVE_ASSESSMENT,
            priority_recommendations=assumptions.PRIORITY_RECOMMENDATIONS,
            implementation_timeline=assumptions.IMPLEMENTATION_TIMELINE,
            regulatory_compliance=assumptions.REGULATORY_COMPLIANCE,
        ),
        analysis_context=AnalysisContext(
            completed_sections=len(completed_section_indices(data)),
            data_completeness_score=data_completeness_score(data),
        ),
    )
