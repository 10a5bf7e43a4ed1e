"""FastAPI main application."""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from models import init_db
from api.middleware import setup_middleware
from api.routes import containers, documents, health, reports, sales, transfers, vendors
from logging_config import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    logger.info("Starting container ledger API", environment=settings.app_env)

    for problem in settings.validate_required_settings():
        logger.warning("Configuration problem", problem=problem)

    init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down container ledger API")


app = FastAPI(
    title="Container Trade Ledger",
    description="Container purchase, vendor transfer, sales and profit ledger",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_middleware(app)

app.include_router(health.router, tags=["Health"])
app.include_router(containers.router, prefix="/api", tags=["Containers"])
app.include_router(documents.router, prefix="/api", tags=["Documents"])
app.include_router(transfers.router, prefix="/api", tags=["Transfers"])
app.include_router(sales.router, prefix="/api", tags=["Sales"])
app.include_router(reports.router, prefix="/api", tags=["Reports"])
app.include_router(vendors.router, prefix="/api", tags=["Vendors"])


@app.get("/")
async def root():
    return {
        "name": "Container Trade Ledger",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
    )
