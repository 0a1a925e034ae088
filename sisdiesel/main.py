# sisdiesel/main.py
import logging
import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from sisdiesel.api.router import api_router
from sisdiesel.core.config import settings
from sisdiesel.core.db import close_db
from sisdiesel.core.indexes import startup_tasks
from sisdiesel.core.rate_limit import limiter

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

APP_NAME = os.getenv("APP_NAME", "SisDiesel Backend")
APP_VERSION = os.getenv("APP_VERSION", "0.1.0")

# Fronts locais mais comuns + o que vier do .env
defaults = {
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
}
CORS_ORIGINS = sorted(set((settings.cors_origins or []) + list(defaults)))

app = FastAPI(title=APP_NAME, version=APP_VERSION)

# CORS primeiro
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1024)

# SlowAPI: limiter usado no login
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(api_router)

@app.get("/health")
async def health():
    return {"ok": True}

@app.get("/ready")
async def ready():
    return {"ready": True}

# Índices e seed no startup (idempotente)
@app.on_event("startup")
async def startup():
    await startup_tasks()
    logger.info("%s %s pronto", APP_NAME, APP_VERSION)

@app.on_event("shutdown")
async def shutdown_db_client():
    await close_db()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("sisdiesel.main:app", reload=True, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
