"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from pounds_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from pounds_ledger.api.v1 import accounts, bank_accounts, funding, withdrawals
from pounds_ledger.infrastructure.observability.logging import setup_logging
from pounds_ledger.config import settings

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Pounds Ledger",
        description="Account funding, withdrawal requests and payout bank accounts",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Last added runs first
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(accounts.router, prefix="/v1", tags=["accounts"])
    app.include_router(funding.router, prefix="/v1", tags=["funding"])
    app.include_router(withdrawals.router, prefix="/v1", tags=["withdrawals"])
    app.include_router(bank_accounts.router, prefix="/v1", tags=["bank-accounts"])

    return app


app = create_app()
