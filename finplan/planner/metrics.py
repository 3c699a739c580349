# backend/finplan/planner/metrics.py
from __future__ import annotations

from typing import Dict, Union

from .schema import (
    AssetsBlock,
    ExpensesBlock,
    FinancialSituation,
    IncomeBlock,
    LiabilitiesBlock,
)


def total_income(income: IncomeBlock) -> int:
    extra = income.additional_sources
    return (
        income.primary.annual_gross
        + extra.spouse_income
        + extra.rental_income
        + extra.investment_income
        + extra.business_income
        + extra.other_income
    )


def total_assets(assets: AssetsBlock) -> int:
    return (
        assets.liquid.checking_balance
        + assets.liquid.savings_balance
        + assets.investments.retirement_401k_balance
        + assets.investments.ira_balance
        + assets.investments.taxable_accounts
        + assets.real_estate.primary_residence
    )


def liquid_assets(assets: AssetsBlock) -> int:
    return assets.liquid.checking_balance + assets.liquid.savings_balance


def total_liabilities(liabilities: LiabilitiesBlock) -> int:
    total = liabilities.mortgage_debt.primary_balance
    total += sum(loan.balance for loan in liabilities.auto_loans)
    total += sum(card.balance for card in liabilities.credit_cards)
    total += sum(loan.balance for loan in liabilities.student_loans)
    return total


def monthly_expenses(expenses: ExpensesBlock) -> int:
    living = expenses.living_expenses
    return (
        expenses.housing.monthly_payment
        + living.monthly_food_groceries
        + living.monthly_utilities
        + living.monthly_transportation
        + living.monthly_entertainment
    )


def debt_to_income(liabilities_total: int, income_total: int) -> float:
    if income_total <= 0:
        return 0.0
    return round(liabilities_total / income_total, 4)


def build_financial_situation(
    income: IncomeBlock,
    expenses: ExpensesBlock,
    assets: AssetsBlock,
    liabilities: LiabilitiesBlock,
) -> FinancialSituation:
    income_total = total_income(income)
    assets_total = total_assets(assets)
    liabilities_total = total_liabilities(liabilities)
    expenses_monthly = monthly_expenses(expenses)

    return FinancialSituation(
        total_income=income_total,
        total_assets=assets_total,
        total_liabilities=liabilities_total,
        net_worth=assets_total - liabilities_total,
        monthly_expenses=expenses_monthly,
        monthly_cash_flow=round(income_total / 12) - expenses_monthly,
        debt_to_income_ratio=debt_to_income(liabilities_total, income_total),
    )


def emergency_fund_months(assets: AssetsBlock, expenses: ExpensesBlock) -> float:
    """Months of expenses covered by checking + savings."""
    monthly = monthly_expenses(expenses)
    if monthly <= 0:
        return 0.0
    return round(liquid_assets(assets) / monthly, 1)


def weighted_card_apr(liabilities: LiabilitiesBlock) -> Dict[str, Union[int, float]]:
    balance = sum(card.balance for card in liabilities.credit_cards)
    if balance <= 0:
        return {"balance": 0, "apr": 0.0}
    weighted = sum(card.balance * card.rate for card in liabilities.credit_cards)
    return {"balance": balance, "apr": round(weighted / balance, 2)}
