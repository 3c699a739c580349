"""
Shared pytest fixtures: an in-memory Firestore stand-in, an authenticated
TestClient, and questionnaire builders.
"""

import copy
from datetime import datetime, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient
from firebase_admin import firestore

import finplan.llm.analyst as analyst
from finplan.deps.authz import get_user_ctx
from finplan.deps.store import get_db
from main import app


def _resolve_sentinels(value):
    if value is firestore.SERVER_TIMESTAMP:
        return datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
    if isinstance(value, dict):
        return {k: _resolve_sentinels(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_sentinels(v) for v in value]
    return value


class FakeSnapshot:
    def __init__(self, data):
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocument:
    def __init__(self, store, path):
        self._store = store
        self._path = path

    def get(self):
        return FakeSnapshot(self._store.get(self._path))

    def set(self, data, merge=False):
        data = _resolve_sentinels(copy.deepcopy(data))
        if merge and self._path in self._store:
            self._store[self._path].update(data)
        else:
            self._store[self._path] = data


class FakeCollection:
    def __init__(self, store, name, ids):
        self._store = store
        self._name = name
        self._ids = ids

    def document(self, doc_id):
        return FakeDocument(self._store, (self._name, doc_id))

    def add(self, data):
        ref = self.document(f"auto-{next(self._ids)}")
        ref.set(data)
        return None, ref

    def rows(self):
        return [v for (name, _), v in self._store.items() if name == self._name]


class FakeFirestore:
    """Just enough of the Firestore client surface for the routers."""

    def __init__(self):
        self.docs = {}
        self._ids = count(1)

    def collection(self, name):
        return FakeCollection(self.docs, name, self._ids)

    def doc(self, collection, doc_id):
        return self.docs.get((collection, doc_id))


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def user_ctx():
    return {"uid": "user-1", "email": "client@example.com"}


@pytest.fixture
def client(db, user_ctx, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("ADMIN_UID_ALLOWLIST", raising=False)
    monkeypatch.delenv("ADMIN_EMAIL_ALLOWLIST", raising=False)
    monkeypatch.setattr(analyst, "_call_openai", lambda *args, **kwargs: "")

    app.dependency_overrides[get_user_ctx] = lambda: user_ctx
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def comprehensive_data():
    """Seven answered catalog sections with a real name."""
    return {
        "personal": {
            "name": "Jane Doe",
            "dateOfBirth": "1985-06-15",
            "maritalStatus": "married",
            "dependents": "2",
            "dependentAges": "7, 10",
            "state": "CA",
            "country": "US",
            "employmentStatus": "employed",
        },
        "income": {"annualIncome": "120000", "spouseIncome": 30000, "retirementAge": "65"},
        "expenses": {"housingPayment": "2500", "food": 800, "utilities": "200", "transportation": 300},
        "assets": {"checking": 5000, "savings": "15000", "retirement401k": 80000, "homeValue": 450000},
        "liabilities": {
            "mortgageBalance": 300000,
            "mortgageRate": "6.5",
            "creditCards": [{"name": "Visa", "balance": "5000", "limit": "10000", "rate": "19.99"}],
        },
        "goals": {"retirementPriority": 1, "retirementAge": 62},
        "risk": {"experienceLevel": "intermediate", "timeline": "20+ years"},
    }
