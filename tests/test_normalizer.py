"""Tests for questionnaire normalization into the analysis request document."""

from datetime import date, datetime, timezone

from finplan.planner.normalizer import normalize

NOW = date(2025, 1, 15)


class TestNormalizeEmpty:

    def test_empty_input_yields_complete_defaults(self):
        payload = normalize({}, NOW).to_payload()

        personal = payload["client_profile"]["personal_info"]
        assert personal["name"] == ""
        assert personal["age"] == 0
        assert personal["dependents"] == {"count": 0, "ages": []}
        assert payload["income"]["primary"]["annual_gross"] == 0
        assert payload["liabilities"]["credit_cards"] == []
        assert payload["liabilities"]["mortgage_debt"]["primary_rate"] == 0.0
        assert payload["assets"]["investments"]["401k_balance"] == 0
        assert payload["analysis_context"] == {"completed_sections": 0, "data_completeness_score": 0.0}
        assert payload["client_profile"]["financial_situation"]["debt_to_income_ratio"] == 0.0

    def test_none_and_garbage_do_not_raise(self):
        for data in (None, "junk", 7, {"personal": "nope", "liabilities": {"creditCards": "nope"}}):
            payload = normalize(data, NOW).to_payload()
            assert payload["client_profile"]["personal_info"]["name"] == ""
            assert payload["liabilities"]["credit_cards"] == []

    def test_fixed_request_terms(self):
        payload = normalize({}, NOW).to_payload()
        assert payload["current_market_context"] == {
            "request_date": "2025-01-15",
            "market_conditions": "Please use current market data and economic conditions",
        }
        assert payload["analysis_requirements"] == {
            "comprehensive_assessment": True,
            "priority_recommendations": 5,
            "implementation_timeline": "12 months",
            "regulatory_compliance": "fiduciary_standard",
        }

    def test_request_date_from_datetime(self):
        now = datetime(2025, 3, 1, 23, 30, tzinfo=timezone.utc)
        assert normalize({}, now).current_market_context.request_date == "2025-03-01"


class TestNormalizeAnswers:

    def test_personal_and_income(self, comprehensive_data):
        payload = normalize(comprehensive_data, NOW).to_payload()
        personal = payload["client_profile"]["personal_info"]
        assert personal["name"] == "Jane Doe"
        assert personal["age"] == 39
        assert personal["dependents"] == {"count": 2, "ages": [7, 10]}
        assert personal["location"] == {"state": "CA", "country": "US"}
        assert payload["income"]["primary"]["annual_gross"] == 120000
        assert payload["income"]["additional_sources"]["spouse_income"] == 30000
        assert payload["income"]["timeline"]["expected_retirement_age"] == 65

    def test_credit_card_rate_keeps_decimals(self, comprehensive_data):
        cards = normalize(comprehensive_data, NOW).to_payload()["liabilities"]["credit_cards"]
        assert cards == [{"name": "Visa", "balance": 5000, "limit": 10000, "rate": 19.99}]

    def test_list_liabilities_preserve_order_and_cardinality(self):
        data = {
            "liabilities": {
                "autoLoans": [{"balance": "12000", "rate": "4.9", "term": "60"}, "bad-row", {"balance": 3000}],
            }
        }
        loans = normalize(data, NOW).to_payload()["liabilities"]["auto_loans"]
        assert [loan["balance"] for loan in loans] == [12000, 0, 3000]
        assert loans[0]["rate"] == 4.9
        assert loans[0]["term"] == "60"
        assert loans[1] == {"balance": 0, "rate": 0.0, "term": "", "description": ""}

    def test_expense_keys_fall_back_to_quick_intake_names(self):
        data = {"expenses": {"housing": 1800, "entertainment": "150"}}
        expenses = normalize(data, NOW).to_payload()["expenses"]
        assert expenses["housing"]["monthly_payment"] == 1800
        assert expenses["living_expenses"]["monthly_entertainment"] == 150

    def test_expense_answers_keep_their_sign(self):
        data = {"expenses": {"housingPayment": "-500", "food": "-20"}}
        expenses = normalize(data, NOW).to_payload()["expenses"]
        assert expenses["housing"]["monthly_payment"] == -500
        assert expenses["living_expenses"]["monthly_food_groceries"] == -20

    def test_explicit_zero_in_form_key_beats_alternate(self):
        data = {"expenses": {"housingPayment": 0, "housing": 1800, "food": "", "foodGroceries": "400"}}
        expenses = normalize(data, NOW).to_payload()["expenses"]
        assert expenses["housing"]["monthly_payment"] == 0
        assert expenses["living_expenses"]["monthly_food_groceries"] == 400

    def test_stated_age_used_without_birth_date(self):
        data = {"personal": {"dateOfBirth": "", "age": "42"}}
        assert normalize(data, NOW).client_profile.personal_info.age == 42

    def test_birth_date_beats_stated_age(self):
        data = {"personal": {"dateOfBirth": "1985-06-01", "age": 20}}
        assert normalize(data, NOW).client_profile.personal_info.age == 39

    def test_derived_totals(self, comprehensive_data):
        situation = normalize(comprehensive_data, NOW).client_profile.financial_situation
        assert situation.total_income == 150000
        assert situation.total_assets == 550000
        assert situation.total_liabilities == 305000
        assert situation.net_worth == 245000
        assert situation.monthly_expenses == 3800
        assert situation.monthly_cash_flow == 12500 - 3800
        assert situation.debt_to_income_ratio == 2.0333

    def test_analysis_context(self, comprehensive_data):
        context = normalize(comprehensive_data, NOW).analysis_context
        assert context.completed_sections == 7
        assert context.data_completeness_score == round(7 / 16 * 100, 1)

    def test_deterministic_and_fresh(self, comprehensive_data):
        first = normalize(comprehensive_data, NOW)
        second = normalize(comprehensive_data, NOW)
        assert first.to_payload() == second.to_payload()
        first.liabilities.credit_cards.clear()
        assert len(second.liabilities.credit_cards) == 1

    def test_input_is_not_mutated(self, comprehensive_data):
        before = repr(comprehensive_data)
        normalize(comprehensive_data, NOW)
        assert repr(comprehensive_data) == before
