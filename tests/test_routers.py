"""
HTTP tests for the questionnaire and plans routers.

Auth and Firestore are swapped through dependency overrides (see conftest);
the LLM call is stubbed so analyses come from the deterministic fallback.
"""

from finplan.deps.store import ANALYSES, API_USAGE, QUESTIONNAIRES


def _save(client, data, **extra):
    return client.put("/questionnaire", json={"questionnaireData": data, **extra})


class TestHealth:

    def test_root_and_health(self, client):
        assert client.get("/health").json() == {"ok": True}
        assert client.get("/").json()["service"] == "finplan-api"


class TestQuestionnaire:

    def test_me_before_save_is_404(self, client):
        assert client.get("/questionnaire/me").status_code == 404

    def test_save_and_load(self, client, db, comprehensive_data):
        response = _save(client, comprehensive_data, completionStatus="submitted")
        assert response.status_code == 200
        body = response.json()
        assert body["planType"] == "comprehensive"
        assert body["sectionsCompleted"] == [0, 1, 2, 3, 4, 5, 7]
        assert body["overallProgress"] == 44
        assert body["lastSectionCompleted"] == 7

        stored = db.doc(QUESTIONNAIRES, "user-1")
        assert stored["formVersion"] == "2024.1"
        assert stored["completionStatus"] == "submitted"
        assert "submittedAt" in stored

        me = client.get("/questionnaire/me").json()
        assert me["questionnaireData"] == comprehensive_data
        assert me["planType"] == "comprehensive"

    def test_save_replaces_wholesale(self, client, db, comprehensive_data):
        _save(client, comprehensive_data)
        _save(client, {"personal": {"name": "Jane Doe"}})
        stored = db.doc(QUESTIONNAIRES, "user-1")
        assert stored["questionnaireData"] == {"personal": {"name": "Jane Doe"}}
        assert "submittedAt" not in stored

    def test_missing_body_field_is_422(self, client):
        assert client.put("/questionnaire", json={"completionStatus": "in_progress"}).status_code == 422

    def test_bad_completion_status_is_422(self, client):
        response = client.put("/questionnaire", json={"questionnaireData": {}, "completionStatus": "done"})
        assert response.status_code == 422

    def test_quick_plan(self, client, db):
        response = client.post(
            "/questionnaire/quick",
            json={"annualHouseholdIncome": 60000, "totalDebt": 4000, "age": 41, "jobSecurity": "stable"},
        )
        assert response.status_code == 200
        assert response.json()["planType"] == "quick"

        data = db.doc(QUESTIONNAIRES, "user-1")["questionnaireData"]
        assert data["personal"]["name"] == "Quick Plan User"
        assert data["liabilities"]["creditCards"][0]["limit"] == 8000
        assert data["personal"]["age"] == 41
        assert data["quickPlanContext"]["jobSecurity"] == "stable"

    def test_quick_plan_rejects_negative_amounts(self, client):
        assert client.post("/questionnaire/quick", json={"totalDebt": -1}).status_code == 422


class TestPlanAccess:

    def test_no_questionnaire_is_quick(self, client):
        body = client.get("/plans/access").json()
        assert body["hasQuestionnaire"] is False
        assert body["planType"] == "quick"

    def test_comprehensive_access(self, client, comprehensive_data):
        _save(client, comprehensive_data)
        body = client.get("/plans/access").json()
        assert body["isComprehensivePlan"] is True
        assert all(row["accessible"] for row in body["sections"])

    def test_gated_section_for_quick_plan(self, client):
        client.post("/questionnaire/quick", json={})
        body = client.get("/plans/sections/tax").json()
        assert body["planType"] == "quick"
        assert body["accessible"] is False
        assert body["upgrade"]["title"] == "Unlock Tax Strategy Planning"

        assert client.get("/plans/sections/debt").json()["accessible"] is True


class TestAnalysis:

    def test_requires_questionnaire(self, client):
        assert client.post("/plans/analysis", json={}).status_code == 404

    def test_generates_and_persists(self, client, db, comprehensive_data):
        _save(client, comprehensive_data)
        response = client.post("/plans/analysis", json={})
        assert response.status_code == 200
        body = response.json()
        assert body["planType"] == "comprehensive"
        assert body["source"] == "fallback"
        assert body["analysis"]["client_summary"]["name"] == "Jane Doe"

        stored = db.doc(ANALYSES, "user-1")
        assert stored["planType"] == "comprehensive"
        assert stored["analysisRequest"]["assets"]["investments"]["401k_balance"] == 80000

        usage = db.collection(API_USAGE).rows()
        assert len(usage) == 1
        assert usage[0]["userId"] == "user-1"
        assert usage[0]["success"] is False

        latest = client.get("/plans/analysis/me").json()
        assert latest["analysis"] == body["analysis"]
        assert latest["planType"] == "comprehensive"

    def test_inline_questionnaire(self, client, db):
        response = client.post("/plans/analysis", json={"questionnaireData": {"personal": {"name": "Sam"}}})
        assert response.status_code == 200
        assert response.json()["planType"] == "quick"
        assert db.doc(QUESTIONNAIRES, "user-1") is None

    def test_latest_before_generation_is_404(self, client):
        assert client.get("/plans/analysis/me").status_code == 404


class TestCrossUserAccess:

    def test_non_admin_cannot_act_for_client(self, client):
        assert client.post("/plans/analysis", json={"clientId": "other"}).status_code == 403
        assert client.get("/questionnaire/me", params={"clientId": "other"}).status_code == 403

    def test_admin_claim_can_act_for_client(self, client, db, user_ctx, comprehensive_data):
        db.collection(QUESTIONNAIRES).document("other").set({"questionnaireData": comprehensive_data})
        user_ctx["admin"] = True
        response = client.post("/plans/analysis", json={"clientId": "other"})
        assert response.status_code == 200
        assert response.json()["clientId"] == "other"
        assert db.doc(ANALYSES, "other") is not None

    def test_admin_via_firestore_doc(self, client, db):
        db.collection("admins").document("user-1").set({"enabled": True})
        assert client.get("/plans/access", params={"clientId": "other"}).status_code == 200

    def test_admin_via_uid_allowlist(self, client, monkeypatch):
        monkeypatch.setenv("ADMIN_UID_ALLOWLIST", "someone, USER-1")
        assert client.get("/plans/access", params={"clientId": "other"}).status_code == 200

    def test_admin_route_requires_admin(self, client):
        assert client.get("/admin/analyses/other").status_code == 403

    def test_admin_route(self, client, db, user_ctx, comprehensive_data):
        _save(client, comprehensive_data)
        client.post("/plans/analysis", json={})
        user_ctx["admin"] = True
        body = client.get("/admin/analyses/user-1").json()
        assert body["planType"] == "comprehensive"
        assert body["analysisRequest"]["client_profile"]["personal_info"]["name"] == "Jane Doe"
