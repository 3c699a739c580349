from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as fb_auth

from .store import ensure_firebase_db, get_db

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_UID_ENV = ("ADMIN_UID_ALLOWLIST", "ADMIN_UIDS", "ADMIN_UID")
ADMIN_EMAIL_ENV = ("ADMIN_EMAIL_ALLOWLIST", "ADMIN_EMAILS", "ADMIN_EMAIL")

# Firebase rejects tokens minted a moment ahead of this host's clock.
CLOCK_SKEW_MARKER = "Token used too early"
CLOCK_SKEW_WAIT_SECONDS = 1


def _allowlist(names: Tuple[str, ...]) -> set[str]:
    """Union of the comma/semicolon/newline separated env lists, lower-cased."""
    entries: set[str] = set()
    for name in names:
        raw = os.getenv(name) or ""
        for sep in (";", "\n"):
            raw = raw.replace(sep, ",")
        entries.update(item.strip().lower() for item in raw.split(",") if item.strip())
    return entries


def _bearer_token(request: Request, creds: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if creds and creds.credentials:
        return creds.credentials
    header = (request.headers.get("Authorization") or "").strip()
    if not header:
        return None
    scheme, _, rest = header.partition(" ")
    return rest.strip() if scheme.lower() == "bearer" else header


def _verify(token: str) -> Dict[str, Any]:
    try:
        return fb_auth.verify_id_token(token)
    except Exception as e:
        if CLOCK_SKEW_MARKER not in str(e):
            raise HTTPException(status_code=401, detail=f"Invalid token: {e}")
    time.sleep(CLOCK_SKEW_WAIT_SECONDS)
    return fb_auth.verify_id_token(token)


def get_user_ctx(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """Decoded Firebase ID token of the caller."""
    token = _bearer_token(request, creds)
    if not token:
        raise HTTPException(status_code=401, detail="Missing Bearer token")

    # verify_id_token needs an initialised default app
    ensure_firebase_db()
    return _verify(token)


def uid_from_ctx(ctx: Dict[str, Any]) -> Optional[str]:
    return ctx.get("uid") or ctx.get("user_id") or ctx.get("sub")


def get_uid(ctx: Dict[str, Any] = Depends(get_user_ctx)) -> str:
    uid = uid_from_ctx(ctx)
    if not uid:
        raise HTTPException(status_code=401, detail="Unauthenticated")
    return uid


def _admin_doc_reason(db, uid: str) -> Optional[str]:
    snap = db.collection("admins").document(uid).get()
    if snap.exists:
        enabled = (snap.to_dict() or {}).get("enabled")
        if enabled is None or enabled is True:
            return "firestore:admins"

    snap = db.collection("users").document(uid).get()
    if not snap.exists:
        return None
    user = snap.to_dict() or {}
    if user.get("isAdmin") is True:
        return "firestore:users.isAdmin"
    roles = user.get("roles")
    if isinstance(roles, dict) and roles.get("admin") is True:
        return "firestore:roles.admin"
    return None


def _allowlist_reason(uid: Optional[str], email: str) -> Optional[str]:
    if uid and uid.lower() in _allowlist(ADMIN_UID_ENV):
        return "allowlist:uid"
    if email and email in _allowlist(ADMIN_EMAIL_ENV):
        return "allowlist:email"
    return None


def is_admin(ctx: Dict[str, Any], db=None) -> Tuple[bool, str]:
    """
    Whether the caller may act on other clients' plans, and why.

    Checked in order: the `admin` custom claim, the Firestore `admins/{uid}`
    and `users/{uid}` documents (when a db handle is given), then the env
    allowlists. A failed Firestore lookup is logged and treated as no match.
    """
    if ctx.get("admin") is True:
        return True, "claim:admin"

    uid = uid_from_ctx(ctx)
    reason: Optional[str] = None
    if uid and db is not None:
        try:
            reason = _admin_doc_reason(db, uid)
        except Exception:
            logger.exception("admin lookup failed for uid=%s", uid)

    reason = reason or _allowlist_reason(uid, (ctx.get("email") or "").strip().lower())
    return (True, reason) if reason else (False, "none")


def require_admin(
    ctx: Dict[str, Any] = Depends(get_user_ctx),
    db=Depends(get_db),
) -> Dict[str, Any]:
    allowed, reason = is_admin(ctx, db)
    if not allowed:
        raise HTTPException(status_code=403, detail=f"Admin only (reason={reason}, uid={uid_from_ctx(ctx)})")
    return ctx


def resolve_target_uid(ctx: Dict[str, Any], client_id: Optional[str], db) -> str:
    """
    The caller's own uid, or `client_id` when an admin acts for a client.
    """
    caller_uid = uid_from_ctx(ctx)
    if not caller_uid:
        raise HTTPException(status_code=401, detail="Unauthenticated")

    if client_id and client_id != caller_uid:
        allowed, _ = is_admin(ctx, db)
        if not allowed:
            raise HTTPException(status_code=403, detail="Admin only")
        return client_id
    return caller_uid
