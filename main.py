from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

import pagadiario.models  # ensure models are registered
from pagadiario.core.config import CORS_ORIGINS, EVIDENCE_BASE_URL, EVIDENCE_DIR, SECURITY_LOG_MAX_ENTRIES
from pagadiario.core.logging_config import setup_logging
from pagadiario.core.security_log import SecurityLogger
from pagadiario.utils.database import engine, Base
from pagadiario.utils.storage import EvidenceStorage

from pagadiario.routers import (
    auth_router,
    clients_router,
    collectors_router,
    debts_router,
    payments_router,
    reports_router,
    routes_router,
    security_router,
)

setup_logging()

app = FastAPI(title="Paga Diario Backend API", version="1.0")

# per-process services, reached through request.app.state
app.state.security_log = SecurityLogger(SECURITY_LOG_MAX_ENTRIES)
app.state.evidence_storage = EvidenceStorage(EVIDENCE_DIR, EVIDENCE_BASE_URL)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth_router.router)
app.include_router(clients_router.router)
app.include_router(debts_router.router)
app.include_router(collectors_router.router)
app.include_router(routes_router.router)
app.include_router(payments_router.router)
app.include_router(reports_router.router)
app.include_router(security_router.router)

# evidence photos
app.mount(EVIDENCE_BASE_URL, StaticFiles(directory=EVIDENCE_DIR, check_dir=False), name="evidence")


@app.on_event("startup")
def on_startup():
    # DEV ONLY – production schema is managed by the database itself
    Base.metadata.create_all(bind=engine)
    Path(EVIDENCE_DIR).mkdir(parents=True, exist_ok=True)
    logger.info("Paga Diario backend started")


@app.get("/")
def root():
    return {"message": "Paga Diario Backend is running!!"}
