"""
Portfolio Risk Engine — FastAPI Application Entry Point

POST /v1/portfolio/uploads  → ingest + score a customer CSV
GET  /v1/portfolio/summary  → dashboard aggregates
GET  /v1/portfolio/health   → health check
GET  /docs                  → OpenAPI / Swagger UI
"""
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from app.api.portfolio_endpoint import router as portfolio_router
from app.core.config import get_settings
from app.services.event_publisher import close_producer

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.ConsoleRenderer() if get_settings().app_env == "development"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(get_settings().log_level),
)
logger = structlog.get_logger()

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("portfolio_engine_starting", model_version=get_settings().scoring_model_version)
    yield
    await close_producer()
    logger.info("portfolio_engine_shutting_down")


app = FastAPI(
    title="Portfolio Risk Engine",
    description="Customer payment-record ingestion, risk scoring and collections insights",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (portfolio UI) ──
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # tighten in production
    allow_methods=["POST", "GET"],
    allow_headers=["*"],
)

# ── Prometheus metrics ──
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── Routes ──
app.include_router(portfolio_router)


@app.get("/", include_in_schema=False)
async def root():
    return {
        "service": get_settings().app_name,
        "version": VERSION,
        "docs": "/docs",
        "upload": "POST /v1/portfolio/uploads",
    }
