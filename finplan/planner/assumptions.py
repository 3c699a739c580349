# backend/finplan/planner/assumptions.py

# Fixed terms of the analysis request contract. Sent verbatim on every request.
MARKET_CONDITIONS = "Please use current market data and economic conditions"
COMPREHENSIVE_ASSESSMENT = True
PRIORITY_RECOMMENDATIONS = 5
IMPLEMENTATION_TIMELINE = "12 months"
REGULATORY_COMPLIANCE = "fiduciary_standard"

# Fallback analysis thresholds.
EMERGENCY_FUND_TARGET_MONTHS = 6
HEALTHY_DEBT_TO_INCOME = 0.36
HIGH_DEBT_TO_INCOME = 0.5
HIGH_INTEREST_APR = 10.0
RETIREMENT_INCOME_MULTIPLE = 10

# Quick-intake defaults.
QUICK_PLAN_RETIREMENT_AGE = 65
QUICK_PLAN_CARD_RATE = 18
QUICK_PLAN_CARD_LIMIT_MULTIPLIER = 2
