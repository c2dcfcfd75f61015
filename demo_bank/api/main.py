"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from demo_bank.api.errors import register_exception_handlers
from demo_bank.api.middleware import RequestIDMiddleware, MetricsMiddleware
from demo_bank.api.routes import auth, chat, ledger
from demo_bank.config import settings
from demo_bank.infrastructure.database.session import SessionLocal, init_db
from demo_bank.infrastructure.observability.logging import setup_logging
from demo_bank.services.sessions import SessionAuthenticator

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables and drop expired sessions before serving"""
    init_db()
    db = SessionLocal()
    try:
        SessionAuthenticator(db).purge_expired()
    finally:
        db.close()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Demo Bank",
        description="Accounts, balances, transfers and transaction history",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(ledger.router, prefix="/api", tags=["ledger"])
    app.include_router(chat.router, prefix="/api", tags=["chat"])

    return app


app = create_app()
