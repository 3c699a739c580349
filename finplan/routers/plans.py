# backend/finplan/routers/plans.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from finplan.deps.authz import get_user_ctx, require_admin, resolve_target_uid
from finplan.deps.store import get_db, load_analysis, load_questionnaire, log_api_usage, save_analysis
from finplan.llm.analyst import generate_analysis
from finplan.planner.normalizer import normalize
from finplan.planner.tiers import classify, plan_access, section_access
from models import AnalysisRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["plans"])


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _stored_answers(db, uid: str) -> Optional[Dict[str, Any]]:
    stored = load_questionnaire(db, uid)
    if stored is None:
        return None
    data = stored.get("questionnaireData")
    return data if isinstance(data, dict) else {}


@router.get("/plans/access")
def plans_access(
    clientId: Optional[str] = None,
    user: Dict[str, Any] = Depends(get_user_ctx),
    db=Depends(get_db),
):
    target_uid = resolve_target_uid(user, clientId, db)
    data = _stored_answers(db, target_uid)
    return {
        "clientId": target_uid,
        "hasQuestionnaire": data is not None,
        **plan_access(data or {}),
    }


@router.get("/plans/sections/{section_id}")
def plans_section(
    section_id: str,
    clientId: Optional[str] = None,
    user: Dict[str, Any] = Depends(get_user_ctx),
    db=Depends(get_db),
):
    target_uid = resolve_target_uid(user, clientId, db)
    plan_type = classify(_stored_answers(db, target_uid) or {})
    return {"planType": plan_type, **section_access(section_id, plan_type)}


@router.post("/plans/analysis")
def plans_analysis(
    req: AnalysisRequest = AnalysisRequest(),
    user: Dict[str, Any] = Depends(get_user_ctx),
    db=Depends(get_db),
):
    target_uid = resolve_target_uid(user, req.clientId, db)

    # 1) Questionnaire: inline override or the stored one
    if req.questionnaireData is not None:
        data = req.questionnaireData
    else:
        data = _stored_answers(db, target_uid)
        if data is None:
            raise HTTPException(status_code=404, detail=f"questionnaireResponses/{target_uid} not found")

    # 2) Classify + normalize
    plan_type = classify(data)
    request_doc = normalize(data, datetime.now(timezone.utc))
    logger.info(
        "analysis requested uid=%s plan=%s completeness=%s",
        target_uid,
        plan_type,
        request_doc.analysis_context.data_completeness_score,
    )

    # 3) Analyse
    try:
        result = generate_analysis(request_doc)
    except Exception as e:
        logger.exception("analysis failed uid=%s", target_uid)
        log_api_usage(db, target_uid, 0, 0, success=False, error_message=str(e))
        raise HTTPException(status_code=502, detail="Analysis generation failed")

    # 4) Persist analysis + usage row
    analysis_payload = result.analysis.model_dump()
    save_analysis(
        db,
        target_uid,
        request_doc.to_payload(),
        analysis_payload,
        result.source,
        plan_type,
        result.model,
    )
    log_api_usage(
        db,
        target_uid,
        result.tokensEstimate,
        result.responseTimeMs,
        success=result.source == "llm",
        error_message=None if result.source == "llm" else "fallback analysis used",
    )
    logger.info("analysis stored uid=%s source=%s ms=%s", target_uid, result.source, result.responseTimeMs)

    return {
        "clientId": target_uid,
        "planType": plan_type,
        "access": plan_access(data),
        "analysis": analysis_payload,
        "source": result.source,
        "model": result.model,
        "generatedAt": _now_iso(),
    }


@router.get("/plans/analysis/me")
def plans_analysis_me(
    clientId: Optional[str] = None,
    user: Dict[str, Any] = Depends(get_user_ctx),
    db=Depends(get_db),
):
    target_uid = resolve_target_uid(user, clientId, db)
    stored = load_analysis(db, target_uid)
    if stored is None:
        raise HTTPException(status_code=404, detail="Analysis not generated yet")

    data = _stored_answers(db, target_uid) or {}
    return {
        "clientId": target_uid,
        "planType": classify(data),
        "access": plan_access(data),
        "analysis": stored.get("analysis"),
        "source": stored.get("source"),
        "generatedAt": stored.get("generatedAt"),
    }


@router.get("/admin/analyses/{client_id}")
def admin_get_analysis(
    client_id: str,
    admin_ctx: Dict[str, Any] = Depends(require_admin),
    db=Depends(get_db),
):
    stored = load_analysis(db, client_id)
    if stored is None:
        raise HTTPException(status_code=404, detail=f"financialAnalyses/{client_id} not found")

    data = _stored_answers(db, client_id) or {}
    return {
        "clientId": client_id,
        "planType": classify(data),
        "completedSections": plan_access(data)["completedSections"],
        "analysisRequest": stored.get("analysisRequest"),
        "analysis": stored.get("analysis"),
        "source": stored.get("source"),
        "model": stored.get("model"),
        "generatedAt": stored.get("generatedAt"),
    }
