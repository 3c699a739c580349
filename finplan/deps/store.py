# backend/finplan/deps/store.py
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import credentials, firestore

from finplan.planner.sections import QUESTIONNAIRE_SECTION_KEYS, completed_section_indices

logger = logging.getLogger(__name__)

QUESTIONNAIRES = "questionnaireResponses"
ANALYSES = "financialAnalyses"
API_USAGE = "apiUsageLog"

FORM_VERSION = "2024.1"
COMPLETION_STATUSES = {"in_progress", "completed", "submitted"}
DEFAULT_COST_PER_TOKEN = 0.0000025


def ensure_firebase_db():
    # Safe to call multiple times
    if not firebase_admin._apps:
        cred_path = os.getenv("FIREBASE_ADMIN_CREDENTIALS") or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        json_blob = os.getenv("FIREBASE_ADMIN_JSON")

        if cred_path and os.path.exists(cred_path):
            cred = credentials.Certificate(cred_path)
        elif json_blob:
            cred = credentials.Certificate(json.loads(json_blob))
        else:
            raise RuntimeError(
                "Firebase admin credentials not found. Set FIREBASE_ADMIN_CREDENTIALS, "
                "GOOGLE_APPLICATION_CREDENTIALS or FIREBASE_ADMIN_JSON."
            )

        options = {"projectId": os.getenv("FIREBASE_PROJECT_ID")} if os.getenv("FIREBASE_PROJECT_ID") else None
        firebase_admin.initialize_app(cred, options)
        logger.info("firebase admin initialised")
    return firestore.client()


def get_db():
    """FastAPI dependency; overridden in tests."""
    return ensure_firebase_db()


def cost_per_token() -> float:
    raw = os.getenv("LLM_COST_PER_TOKEN")
    if raw is None or raw.strip() == "":
        return DEFAULT_COST_PER_TOKEN
    try:
        return float(raw)
    except ValueError:
        return DEFAULT_COST_PER_TOKEN


def progress_fields(data: Any) -> Dict[str, Any]:
    indices = completed_section_indices(data)
    return {
        "sectionsCompleted": indices,
        "overallProgress": round(len(indices) / len(QUESTIONNAIRE_SECTION_KEYS) * 100),
        "lastSectionCompleted": max(indices) if indices else 0,
    }


def load_questionnaire(db, uid: str) -> Optional[Dict[str, Any]]:
    snap = db.collection(QUESTIONNAIRES).document(uid).get()
    if not snap.exists:
        return None
    return snap.to_dict() or {}


def save_questionnaire(db, uid: str, data: Dict[str, Any], completion_status: str = "in_progress") -> Dict[str, Any]:
    """Replace the stored questionnaire wholesale; returns the progress fields written."""
    status = completion_status if completion_status in COMPLETION_STATUSES else "in_progress"
    progress = progress_fields(data)
    doc: Dict[str, Any] = {
        "userId": uid,
        "questionnaireData": data,
        "formVersion": FORM_VERSION,
        "completionStatus": status,
        **progress,
        "updatedAt": firestore.SERVER_TIMESTAMP,
    }
    if status == "submitted":
        doc["submittedAt"] = firestore.SERVER_TIMESTAMP

    # questionnaireData is replaced, not merged key by key
    db.collection(QUESTIONNAIRES).document(uid).set(doc)
    return {"completionStatus": status, **progress}


def load_analysis(db, uid: str) -> Optional[Dict[str, Any]]:
    snap = db.collection(ANALYSES).document(uid).get()
    if not snap.exists:
        return None
    return snap.to_dict() or {}


def save_analysis(
    db,
    uid: str,
    analysis_request: Dict[str, Any],
    analysis: Dict[str, Any],
    source: str,
    plan_type: str,
    model: str,
) -> None:
    db.collection(ANALYSES).document(uid).set(
        {
            "userId": uid,
            "analysisType": "comprehensive_plan",
            "analysisRequest": analysis_request,
            "analysis": analysis,
            "source": source,
            "model": model,
            "planType": plan_type,
            "generatedAt": firestore.SERVER_TIMESTAMP,
        },
        merge=True,
    )


def log_api_usage(
    db,
    uid: str,
    tokens_used: int,
    response_time_ms: int,
    success: bool,
    error_message: Optional[str] = None,
    request_type: str = "financial_analysis",
) -> None:
    # Best effort: errors are logged, not raised.
    try:
        db.collection(API_USAGE).add(
            {
                "userId": uid,
                "requestType": request_type,
                "tokensUsed": tokens_used,
                "costEstimate": round(tokens_used * cost_per_token(), 6),
                "responseTimeMs": response_time_ms,
                "success": success,
                "errorMessage": error_message,
                "createdAt": firestore.SERVER_TIMESTAMP,
            }
        )
    except Exception:
        logger.exception("failed to write api usage row for uid=%s", uid)
