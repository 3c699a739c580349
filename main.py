# apps/api/main.py

import os
import logging
from typing import Dict

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), ".env"), override=True)

from finplan.deps.authz import get_user_ctx, is_admin
from finplan.deps.store import get_db
from finplan.routers import plans
from finplan.routers import questionnaire


# ---------- Boot ----------
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# FastAPI app (create ONCE)
app = FastAPI(title="FinPlan API")

# CORS: allow both localhost & 127.0.0.1 plus explicit APP_BASE_URL
_default_webs = ["http://127.0.0.1:3000", "http://localhost:3000"]
_app_base = os.getenv("APP_BASE_URL")
allow_origins = _default_webs if not _app_base else list(set(_default_webs + [_app_base]))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Firebase Admin is initialised lazily on first request (finplan.deps.store)
app.include_router(questionnaire.router)
app.include_router(plans.router)


# ---------- Health ----------
@app.get("/")
def root():
    return {"ok": True, "service": "finplan-api", "cors": allow_origins}

@app.get("/health")
def health():
    return {"ok": True}

@app.get("/dev/whoami")
def whoami(ctx: Dict = Depends(get_user_ctx), db=Depends(get_db)):
    is_admin_flag, reason = is_admin(ctx, db)
    return {
        "uid": ctx.get("uid"),
        "email": ctx.get("email"),
        "is_admin": is_admin_flag,
        "admin_reason": reason,
    }
