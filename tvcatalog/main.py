# tvcatalog/main.py: app, CORS and router mounting

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware

from tvcatalog.core.settings import settings
from tvcatalog.routes import actors, api_keys, genres, health, shows, stats

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("startup")

API_VERSION = "1.0.0"

app = FastAPI(
    title="TV Catalog API",
    version=API_VERSION,
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url=None,
)

# ───────────────── CORS ─────────────────
# Keys travel in a header, not cookies, so credentials stay off.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["default"])
async def root() -> Dict[str, Any]:
    return {
        "success": True,
        "message": "If you're reading this message, the server is working!",
        "version": API_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "documentation": "/api/docs",
    }


# Single API namespace prefix
api = APIRouter(prefix="/api")

# ───────────────── Mount routers ─────────────────
for module in (health, api_keys, shows, actors, genres, stats):
    api.include_router(module.router)
    log.info("Mounted router: %s (prefix=%s)", module.__name__, getattr(module.router, "prefix", ""))

# Attach /api router once, after every sub-router is included
app.include_router(api)
