# backend/finplan/routers/questionnaire.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from finplan.deps.authz import get_user_ctx, resolve_target_uid
from finplan.deps.store import get_db, load_questionnaire, save_questionnaire
from finplan.planner.quick_intake import build_quick_plan_questionnaire
from finplan.planner.tiers import classify
from models import QuickPlanRequest, SaveQuestionnaireRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["questionnaire"])


@router.get("/questionnaire/me")
def questionnaire_me(
    clientId: Optional[str] = None,
    user: Dict[str, Any] = Depends(get_user_ctx),
    db=Depends(get_db),
):
    target_uid = resolve_target_uid(user, clientId, db)
    stored = load_questionnaire(db, target_uid)
    if stored is None:
        raise HTTPException(status_code=404, detail="Questionnaire not started yet")

    data = stored.get("questionnaireData") or {}
    return {
        "clientId": target_uid,
        "questionnaireData": data,
        "formVersion": stored.get("formVersion"),
        "completionStatus": stored.get("completionStatus", "in_progress"),
        "sectionsCompleted": stored.get("sectionsCompleted", []),
        "overallProgress": stored.get("overallProgress", 0),
        "planType": classify(data),
        "updatedAt": stored.get("updatedAt"),
    }


@router.put("/questionnaire")
def questionnaire_save(
    req: SaveQuestionnaireRequest,
    user: Dict[str, Any] = Depends(get_user_ctx),
    db=Depends(get_db),
):
    target_uid = resolve_target_uid(user, req.clientId, db)
    progress = save_questionnaire(db, target_uid, req.questionnaireData, req.completionStatus)
    plan_type = classify(req.questionnaireData)
    logger.info(
        "questionnaire saved uid=%s status=%s progress=%s plan=%s",
        target_uid,
        progress["completionStatus"],
        progress["overallProgress"],
        plan_type,
    )
    return {"ok": True, "clientId": target_uid, "planType": plan_type, **progress}


@router.post("/questionnaire/quick")
def questionnaire_quick(
    req: QuickPlanRequest,
    user: Dict[str, Any] = Depends(get_user_ctx),
    db=Depends(get_db),
):
    target_uid = resolve_target_uid(user, req.clientId, db)
    data = build_quick_plan_questionnaire(req.model_dump(exclude={"clientId"}))
    progress = save_questionnaire(db, target_uid, data, "completed")
    logger.info("quick plan saved uid=%s", target_uid)
    return {
        "ok": True,
        "clientId": target_uid,
        "planType": classify(data),
        "questionnaireData": data,
        **progress,
    }
